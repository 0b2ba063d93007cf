"""
MockVault Execution Results

Normalized inbound request and the instruction handed back to the
transport layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from ..errors import NoAvailableResponse, OperationNotFound, StorageUnavailable
from ..event.model import RequestSnapshot, ResponseSnapshot
from ..project.model import MockResponse, StatusCategory


# HTTP status the transport emits for each error kind
ERROR_STATUS_CODES = {
    OperationNotFound.kind: 500,
    NoAvailableResponse.kind: 500,
    StorageUnavailable.kind: 503,
}


@dataclass
class MockRequest:
    """Request already resolved to an operation by the routing layer."""

    method: str
    uri: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    status_category: Optional[StatusCategory] = None

    def to_snapshot(self) -> RequestSnapshot:
        return RequestSnapshot(
            method=self.method,
            uri=self.uri,
            headers=dict(self.headers),
            body=self.body
        )


class ResultAction(Enum):
    RESPOND = "RESPOND"
    FORWARD = "FORWARD"
    ECHO = "ECHO"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    ERROR = "ERROR"


@dataclass
class ExecutionResult:
    """
    What the transport layer should emit for a call.

    Build instances through the named constructors:
    ``respond``, ``forward``, ``echo``, ``service_unavailable`` and ``error``.
    """

    action: ResultAction
    status_code: Optional[int] = None
    body: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    forward_url: Optional[str] = None
    error_kind: Optional[str] = None
    message: str = ""
    mock_response_id: Optional[str] = None

    @classmethod
    def respond(cls, mock_response: MockResponse) -> 'ExecutionResult':
        return cls(
            action=ResultAction.RESPOND,
            status_code=mock_response.http_status_code,
            body=mock_response.body,
            headers=dict(mock_response.headers),
            mock_response_id=mock_response.id
        )

    @classmethod
    def forward(cls, url: str) -> 'ExecutionResult':
        return cls(action=ResultAction.FORWARD, forward_url=url)

    @classmethod
    def echo(cls) -> 'ExecutionResult':
        return cls(action=ResultAction.ECHO, status_code=200)

    @classmethod
    def service_unavailable(cls) -> 'ExecutionResult':
        return cls(
            action=ResultAction.SERVICE_UNAVAILABLE,
            status_code=503,
            message="The operation is disabled"
        )

    @classmethod
    def error(cls, kind: str, message: str = "") -> 'ExecutionResult':
        return cls(
            action=ResultAction.ERROR,
            status_code=ERROR_STATUS_CODES.get(kind, 500),
            error_kind=kind,
            message=message
        )

    @property
    def is_error(self) -> bool:
        return self.action == ResultAction.ERROR

    def to_snapshot(self, request: Optional[MockRequest] = None) -> ResponseSnapshot:
        """
        Snapshot of this result for the event history.

        Echo results carry the mirrored request body and headers.
        """
        body, headers = self.body, dict(self.headers)
        if self.action == ResultAction.ECHO and request is not None:
            body, headers = request.body, dict(request.headers)
        elif self.action == ResultAction.ERROR or self.action == ResultAction.SERVICE_UNAVAILABLE:
            body = self.message
        return ResponseSnapshot(
            action=self.action.value,
            status_code=self.status_code,
            headers=headers,
            body=body,
            forward_url=self.forward_url,
            error_kind=self.error_kind,
            mock_response_id=self.mock_response_id
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'action': self.action.value,
            'status_code': self.status_code,
            'body': self.body,
            'headers': dict(self.headers),
            'forward_url': self.forward_url,
            'error_kind': self.error_kind,
            'message': self.message,
            'mock_response_id': self.mock_response_id
        }
