"""Configuration for the ATE provisioning client.

Configuration can be built programmatically, from ``PROVLINK_*``
environment variables, or from a YAML file:

    ```yaml
    pa:
      target: pa.line3.local:5001
      timeout: 30
      serialize_calls: true
    observability:
      logging:
        level: DEBUG
        format: json
    ```
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from provlink.exceptions import ConfigurationError
from provlink.observability.config import ObservabilityConfig

DEFAULT_TARGET = "localhost:5001"
DEFAULT_MAX_MESSAGE_BYTES = 4 * 1024 * 1024


@dataclass
class AteClientConfig:
    """Connection settings for the Provisioning Appliance.

    Attributes:
        target: PA address as ``host:port``.
        timeout: Deadline per call in seconds; None leaves gRPC's default.
        serialize_calls: Hold a lock around each call so one client can be
            shared by threads whose stub is not thread-safe.
        max_message_bytes: Max send/receive message size on the channel.
        wait_for_ready: Queue calls until the channel is ready.
        observability: Logging, metrics and tracing settings.
    """

    target: str = DEFAULT_TARGET
    timeout: Optional[float] = None
    serialize_calls: bool = False
    max_message_bytes: int = DEFAULT_MAX_MESSAGE_BYTES
    wait_for_ready: bool = False
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @property
    def channel_options(self) -> List[Tuple[str, Any]]:
        """gRPC channel options derived from this configuration."""
        return [
            ("grpc.max_send_message_length", self.max_message_bytes),
            ("grpc.max_receive_message_length", self.max_message_bytes),
        ]

    @classmethod
    def from_env(cls) -> "AteClientConfig":
        """Create configuration from environment variables.

        Environment Variables:
            PROVLINK_PA_TARGET: PA address (default: localhost:5001)
            PROVLINK_PA_TIMEOUT: Call deadline in seconds (default: unset)
            PROVLINK_SERIALIZE_CALLS: Serialize calls (default: false)
            PROVLINK_MAX_MESSAGE_BYTES: Max message size (default: 4194304)
            PROVLINK_WAIT_FOR_READY: Wait for channel readiness (default: false)

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed.
        """
        timeout = os.getenv("PROVLINK_PA_TIMEOUT")
        try:
            return cls(
                target=os.getenv("PROVLINK_PA_TARGET", DEFAULT_TARGET),
                timeout=float(timeout) if timeout else None,
                serialize_calls=os.getenv("PROVLINK_SERIALIZE_CALLS", "false").lower()
                == "true",
                max_message_bytes=int(
                    os.getenv("PROVLINK_MAX_MESSAGE_BYTES", str(DEFAULT_MAX_MESSAGE_BYTES))
                ),
                wait_for_ready=os.getenv("PROVLINK_WAIT_FOR_READY", "false").lower()
                == "true",
                observability=ObservabilityConfig.from_env(),
            )
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AteClientConfig":
        """Create configuration from a dictionary.

        Args:
            data: Mapping with an optional ``pa`` section and an optional
                ``observability`` section.

        Raises:
            ConfigurationError: If a section has unknown keys or bad values.
        """
        pa = data.get("pa", {}) or {}
        if not isinstance(pa, dict):
            raise ConfigurationError("section must be a mapping", "pa")

        known = {"target", "timeout", "serialize_calls", "max_message_bytes", "wait_for_ready"}
        unknown = set(pa) - known
        if unknown:
            raise ConfigurationError(f"unknown keys: {sorted(unknown)}", "pa")

        try:
            timeout = pa.get("timeout")
            config = cls(
                target=str(pa.get("target", DEFAULT_TARGET)),
                timeout=float(timeout) if timeout is not None else None,
                serialize_calls=bool(pa.get("serialize_calls", False)),
                max_message_bytes=int(pa.get("max_message_bytes", DEFAULT_MAX_MESSAGE_BYTES)),
                wait_for_ready=bool(pa.get("wait_for_ready", False)),
                observability=ObservabilityConfig.from_dict(
                    data.get("observability", {}) or {}
                ),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(str(e), "pa") from e
        return config

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "AteClientConfig":
        """Load configuration from a YAML file.

        Raises:
            ConfigurationError: If the file cannot be read or parsed.
        """
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigurationError(f"cannot read {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a mapping")
        return cls.from_dict(data)

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If configuration is invalid.
        """
        host, sep, port = self.target.rpartition(":")
        if not sep or not host or not port.isdigit() or not (1 <= int(port) <= 65535):
            raise ConfigurationError(
                f"Target must be host:port, got {self.target!r}", "target"
            )
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError(
                f"Timeout must be positive: {self.timeout}", "timeout"
            )
        if self.max_message_bytes < 1:
            raise ConfigurationError(
                f"Max message size must be positive: {self.max_message_bytes}",
                "max_message_bytes",
            )
        self.observability.validate()
