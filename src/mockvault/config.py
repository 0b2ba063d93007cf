"""
MockVault Configuration

Runtime settings for the mock server, loaded from YAML or built from
CLI flags. Values are validated on construction so a bad setting stops
the server at startup instead of failing individual calls.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

import yaml

from .errors import InvalidConfiguration
from .event.log import EventScope


@dataclass
class MockConfig:
    """Configuration for mock server behavior."""

    # Event history
    max_event_count: int = 1000  # Maximum retained events per scope
    event_scope: EventScope = EventScope.GLOBAL  # global or per operation

    # Forwarding
    forward_timeout: float = 30.0  # Seconds before a forwarded call is abandoned

    # Server options
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "info"

    # Admin API
    admin_enabled: bool = True
    admin_prefix: str = "/__admin__"

    # Project definitions loaded at startup
    projects_file: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.event_scope, str):
            try:
                self.event_scope = EventScope(self.event_scope.lower())
            except ValueError:
                raise InvalidConfiguration(
                    f"event_scope must be 'global' or 'operation', got {self.event_scope!r}"
                ) from None
        self.validate()

    def validate(self):
        """
        Check every setting.

        Raises:
            InvalidConfiguration: If any setting is out of range
        """
        if isinstance(self.max_event_count, bool) or not isinstance(self.max_event_count, int) \
                or self.max_event_count <= 0:
            raise InvalidConfiguration(
                f"max_event_count must be a positive integer, got {self.max_event_count!r}"
            )
        if self.forward_timeout <= 0:
            raise InvalidConfiguration(f"forward_timeout must be positive, got {self.forward_timeout!r}")
        if not 0 < self.port < 65536:
            raise InvalidConfiguration(f"port must be between 1 and 65535, got {self.port!r}")
        if self.log_level.lower() not in ('critical', 'error', 'warning', 'info', 'debug', 'trace'):
            raise InvalidConfiguration(f"Unknown log level {self.log_level!r}")
        if not self.admin_prefix.startswith('/'):
            raise InvalidConfiguration(f"admin_prefix must start with '/', got {self.admin_prefix!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MockConfig':
        """Create config from dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidConfiguration(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'MockConfig':
        """Load config from YAML file."""
        with open(yaml_path, 'r') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise InvalidConfiguration(f"Expected a mapping in {yaml_path}, got {type(data).__name__}")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'max_event_count': self.max_event_count,
            'event_scope': self.event_scope.value,
            'forward_timeout': self.forward_timeout,
            'host': self.host,
            'port': self.port,
            'log_level': self.log_level,
            'admin_enabled': self.admin_enabled,
            'admin_prefix': self.admin_prefix,
            'projects_file': self.projects_file
        }
