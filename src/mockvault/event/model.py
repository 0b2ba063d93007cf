"""
MockVault Event Model

Immutable records of served mock calls.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..project.model import generate_id


@dataclass(frozen=True)
class RequestSnapshot:
    """Inbound request as seen by the execution service."""

    method: str
    uri: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'method': self.method,
            'uri': self.uri,
            'headers': dict(self.headers),
            'body': self.body
        }


@dataclass(frozen=True)
class ResponseSnapshot:
    """Outcome returned to the transport layer."""

    action: str
    status_code: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    forward_url: Optional[str] = None
    error_kind: Optional[str] = None
    mock_response_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'action': self.action,
            'status_code': self.status_code,
            'headers': dict(self.headers),
            'body': self.body,
            'forward_url': self.forward_url,
            'error_kind': self.error_kind,
            'mock_response_id': self.mock_response_id
        }


@dataclass(frozen=True)
class Event:
    """
    One served request and its outcome.

    ``sequence`` is assigned by the event log on insertion and breaks ties
    between events sharing a timestamp.
    """

    operation_id: str
    request: RequestSnapshot
    response: ResponseSnapshot
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str = field(default_factory=generate_id)
    sequence: int = 0

    @property
    def failed(self) -> bool:
        return self.response.error_kind is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'operation_id': self.operation_id,
            'timestamp': self.timestamp.isoformat(),
            'sequence': self.sequence,
            'request': self.request.to_dict(),
            'response': self.response.to_dict()
        }
