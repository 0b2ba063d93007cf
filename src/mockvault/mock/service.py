"""
MockVault Mock Execution Service

Orchestrates a single mock call: look up the operation, select the
outcome, and record the call in the event history.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from ..config import MockConfig
from ..errors import MockError
from ..event.log import EventLog
from ..event.model import Event
from ..repository import InMemoryRepository
from .results import ExecutionResult, MockRequest
from .selector import ResponseSelector
from .view import ResponseRepositoryView


class MockExecutionService:
    """
    Entry point of the mock-response resolution engine.

    Every call is recorded as an event, failed ones included, so
    misconfigured operations show up in the history. A failure while
    recording is logged and never replaces the computed result.

    Example:
        service = MockExecutionService(MockConfig(max_event_count=100), view)
        result = service.handle(MockRequest('GET', '/users/1'), operation_id)
    """

    def __init__(
        self,
        config: MockConfig,
        view: ResponseRepositoryView,
        selector: Optional[ResponseSelector] = None,
        event_log: Optional[EventLog] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize execution service.

        Args:
            config: Server configuration (event bound and scope)
            view: Read-only view over the stored operations
            selector: Response selector (created if None)
            event_log: Event history (in-memory log built from config if None)
            clock: Timestamp source for recorded events
        """
        self.config = config
        self.view = view
        self.selector = selector or ResponseSelector()
        self.event_log = event_log or EventLog(
            InMemoryRepository(),
            max_event_count=config.max_event_count,
            scope=config.event_scope
        )
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = logging.getLogger("mockvault.mock")

    def handle(self, request: MockRequest, operation_id: str) -> ExecutionResult:
        """
        Resolve a call against an operation.

        Args:
            request: Normalized inbound request
            operation_id: Operation the routing layer matched

        Returns:
            ExecutionResult for the transport layer. Errors are returned as
            ``ExecutionResult.error`` results, never raised.
        """
        try:
            operation = self.view.operation(operation_id)
            candidates = self.view.responses(operation_id)
            result = self.selector.select(operation, candidates, request.status_category)
        except MockError as e:
            self.logger.warning(f"{e.kind} for {request.method} {request.uri}: {e}")
            result = ExecutionResult.error(e.kind, str(e))

        self._record(request, operation_id, result)
        return result

    def _record(self, request: MockRequest, operation_id: str, result: ExecutionResult):
        event = Event(
            operation_id=operation_id,
            request=request.to_snapshot(),
            response=result.to_snapshot(request),
            timestamp=self.clock()
        )
        try:
            self.event_log.record_event(event)
        except MockError as e:
            self.logger.error(f"Failed to record event for operation {operation_id}: {e}")
