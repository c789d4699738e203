"""ATE provisioning client.

Core Components:
    - AteClient: Facade for the three Provisioning Appliance procedures
    - Outcome / Status: Per-call result with gRPC status code
    - AteClientConfig: Connection settings (env, YAML, programmatic)

Example:
    ```python
    from provlink.ate import AteClient, AteClientConfig

    with AteClient.from_config(AteClientConfig.from_yaml("station.yaml")) as client:
        outcome = client.create_key_and_cert("abc123", serial)
        print(outcome.status)
    ```
"""

from provlink.ate.client import AteClient, ProvisioningClient
from provlink.ate.config import AteClientConfig
from provlink.ate.outcome import OK_STATUS, Outcome, Status, StatusOrigin

__all__ = [
    "AteClient",
    "ProvisioningClient",
    "AteClientConfig",
    "Outcome",
    "Status",
    "StatusOrigin",
    "OK_STATUS",
]
