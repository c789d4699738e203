"""provlink - Provisioning Appliance client for manufacturing test equipment.

provlink lets automated test equipment (ATE) request key/certificate
issuance, certificate endorsement and symmetric key derivation from a
remote Provisioning Appliance over gRPC.

Packages:
    - provlink.ate: AteClient facade, Outcome, configuration
    - provlink.pa: Provisioning Appliance messages and gRPC bindings
    - provlink.testing: In-memory stub for station tests
    - provlink.observability: Logging, metrics and tracing
    - provlink.cli: provlink-ate operator command
"""

__version__ = "0.1.0"
