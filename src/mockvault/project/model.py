"""
MockVault Project Model

Containment tree of mocked APIs:

    Project -> Port -> Operation -> MockResponse

A REST project's ports are its applications and its operations are
method/URI pairs; a SOAP project's ports are WSDL ports and its operations
are SOAP operations. Every type converts to and from plain dictionaries so
definitions can be loaded from YAML or JSON files.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def generate_id() -> str:
    """Generate an opaque entity identifier."""
    return uuid.uuid4().hex


def _parse_datetime(value: Any) -> Optional[datetime]:
    # PyYAML already returns datetime objects for unquoted timestamps
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _parse_position(value: Any) -> Optional[int]:
    """
    Normalize a configured sequence position.

    Raises:
        ValueError: If the position is not a positive integer
    """
    if value is None:
        return None
    message = f"sequence_position must be a positive integer, got {value!r}"
    # bool is an int subclass and int() truncates floats
    if isinstance(value, (bool, float)):
        raise ValueError(message)
    try:
        position = int(value)
    except (TypeError, ValueError):
        raise ValueError(message) from None
    if position < 1:
        raise ValueError(message)
    return position


class OperationStatus(Enum):
    """How an operation answers incoming calls."""

    MOCKED = "MOCKED"
    DISABLED = "DISABLED"
    FORWARDED = "FORWARDED"
    RECORDING = "RECORDING"
    ECHO = "ECHO"


class ResponseStrategy(Enum):
    """Policy choosing among an operation's enabled mock responses."""

    SEQUENCE = "SEQUENCE"
    RANDOM = "RANDOM"
    STATUS_SIMULATION = "STATUS_SIMULATION"


class StatusCategory(Enum):
    """HTTP status class of a mock response."""

    SUCCESS = "success"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    OTHER = "other"

    @classmethod
    def from_status_code(cls, status_code: int) -> 'StatusCategory':
        if 200 <= status_code < 300:
            return cls.SUCCESS
        if 400 <= status_code < 500:
            return cls.CLIENT_ERROR
        if 500 <= status_code < 600:
            return cls.SERVER_ERROR
        return cls.OTHER


class ProjectType(Enum):
    REST = "rest"
    SOAP = "soap"


@dataclass
class MockResponse:
    """One candidate canned response attached to an operation."""

    id: str = field(default_factory=generate_id)
    name: str = ""
    body: str = ""
    http_status_code: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    enabled: bool = True
    sequence_position: Optional[int] = None
    simulated_category: Optional[StatusCategory] = None

    def __post_init__(self):
        self.sequence_position = _parse_position(self.sequence_position)

    @property
    def status_category(self) -> StatusCategory:
        """Category used by status simulation (explicit override wins)."""
        if self.simulated_category is not None:
            return self.simulated_category
        return StatusCategory.from_status_code(self.http_status_code)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MockResponse':
        """Create MockResponse from dictionary."""
        category = data.get('simulated_category')
        return cls(
            id=data.get('id') or generate_id(),
            name=data.get('name', ''),
            body=data.get('body', ''),
            http_status_code=int(data.get('http_status_code', 200)),
            headers=dict(data.get('headers') or {}),
            enabled=bool(data.get('enabled', True)),
            sequence_position=data.get('sequence_position'),
            simulated_category=StatusCategory(category) if category else None
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'body': self.body,
            'http_status_code': self.http_status_code,
            'headers': dict(self.headers),
            'enabled': self.enabled,
            'sequence_position': self.sequence_position,
            'simulated_category': self.simulated_category.value if self.simulated_category else None,
            'status_category': self.status_category.value
        }


@dataclass
class Operation:
    """A single mocked endpoint: a REST method or a SOAP operation."""

    id: str = field(default_factory=generate_id)
    name: str = ""
    status: OperationStatus = OperationStatus.MOCKED
    response_strategy: ResponseStrategy = ResponseStrategy.RANDOM
    forwarded_endpoint: Optional[str] = None
    http_method: str = "GET"
    uri: str = "/"
    soap_action: Optional[str] = None
    mock_responses: List[MockResponse] = field(default_factory=list)
    status_weights: Dict[StatusCategory, float] = field(default_factory=dict)

    @property
    def mock_response_ids(self) -> List[str]:
        return [response.id for response in self.mock_responses]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Operation':
        """
        Create Operation from dictionary.

        A missing status defaults to MOCKED and a missing response
        strategy defaults to RANDOM.
        """
        status = data.get('status')
        strategy = data.get('response_strategy')
        return cls(
            id=data.get('id') or generate_id(),
            name=data.get('name', ''),
            status=OperationStatus(status.upper()) if status else OperationStatus.MOCKED,
            response_strategy=ResponseStrategy(strategy.upper()) if strategy else ResponseStrategy.RANDOM,
            forwarded_endpoint=data.get('forwarded_endpoint'),
            http_method=data.get('http_method', 'GET').upper(),
            uri=data.get('uri', '/'),
            soap_action=data.get('soap_action'),
            mock_responses=[MockResponse.from_dict(r) for r in data.get('mock_responses', [])],
            status_weights={
                StatusCategory(key): float(value)
                for key, value in (data.get('status_weights') or {}).items()
            }
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'status': self.status.value,
            'response_strategy': self.response_strategy.value,
            'forwarded_endpoint': self.forwarded_endpoint,
            'http_method': self.http_method,
            'uri': self.uri,
            'soap_action': self.soap_action,
            'mock_responses': [r.to_dict() for r in self.mock_responses],
            'status_weights': {k.value: v for k, v in self.status_weights.items()}
        }


@dataclass
class Port:
    """A REST application or a SOAP port grouping operations."""

    id: str = field(default_factory=generate_id)
    name: str = ""
    operations: List[Operation] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Port':
        return cls(
            id=data.get('id') or generate_id(),
            name=data.get('name', ''),
            operations=[Operation.from_dict(o) for o in data.get('operations', [])]
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'operations': [o.to_dict() for o in self.operations]
        }


@dataclass
class Project:
    """Top-level container of ports."""

    id: str = field(default_factory=generate_id)
    name: str = ""
    description: str = ""
    protocol: ProjectType = ProjectType.REST
    created: Optional[datetime] = None
    updated: Optional[datetime] = None
    ports: List[Port] = field(default_factory=list)

    @property
    def operations(self) -> List[Operation]:
        """All operations across the project's ports."""
        return [operation for port in self.ports for operation in port.operations]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Project':
        """Create Project from dictionary."""
        created = data.get('created')
        updated = data.get('updated')
        return cls(
            id=data.get('id') or generate_id(),
            name=data.get('name', ''),
            description=data.get('description', ''),
            protocol=ProjectType(data.get('protocol', 'rest').lower()),
            created=_parse_datetime(created) or datetime.now(timezone.utc),
            updated=_parse_datetime(updated),
            ports=[Port.from_dict(p) for p in data.get('ports', [])]
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'protocol': self.protocol.value,
            'created': self.created.isoformat() if self.created else None,
            'updated': self.updated.isoformat() if self.updated else None,
            'ports': [p.to_dict() for p in self.ports]
        }
