"""
MockVault Response Selector

Decides what an operation answers with.

Non-mocked statuses short-circuit into an instruction for the transport
layer (service unavailable, forward, echo). Mocked operations (and
recording ones, which fall back to mocked behavior) pick one enabled mock
response using the operation's response strategy:

- RANDOM: uniform choice, no memory across calls
- SEQUENCE: cyclic walk in configured position order
- STATUS_SIMULATION: weighted choice of a status category, then a
  uniform choice inside it
"""

import logging
import random
from typing import Dict, List, Optional, Sequence

from ..errors import NoAvailableResponse
from ..project.model import (
    MockResponse,
    Operation,
    OperationStatus,
    ResponseStrategy,
    StatusCategory,
)
from .cursor import SequenceCursors
from .results import ExecutionResult
from .view import sequence_slot


class ResponseSelector:
    """
    Picks a response (or an instruction) for an operation.

    The only state shared between calls is the sequence cursor map.

    Example:
        selector = ResponseSelector()
        result = selector.select(operation, view.responses(operation.id))
        if result.action == ResultAction.RESPOND:
            print(result.body)
    """

    def __init__(
        self,
        cursors: Optional[SequenceCursors] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize selector.

        Args:
            cursors: Sequence cursor map (a private one is created if None)
            rng: Random source (the process-wide ``random`` module if None)
        """
        self.cursors = cursors or SequenceCursors()
        self.rng = rng or random
        self.logger = logging.getLogger("mockvault.mock")

    def select(
        self,
        operation: Operation,
        candidates: Sequence[MockResponse],
        desired_category: Optional[StatusCategory] = None
    ) -> ExecutionResult:
        """
        Select the outcome of a call against an operation.

        Args:
            operation: Matched operation
            candidates: The operation's responses in sequence order,
                        disabled ones included
            desired_category: Status category requested by the caller
                              (STATUS_SIMULATION only)

        Returns:
            ExecutionResult to hand to the transport layer

        Raises:
            NoAvailableResponse: If a mocked operation has nothing to serve
        """
        if operation.status == OperationStatus.DISABLED:
            return ExecutionResult.service_unavailable()
        if operation.status == OperationStatus.FORWARDED:
            return ExecutionResult.forward(operation.forwarded_endpoint)
        if operation.status == OperationStatus.ECHO:
            return ExecutionResult.echo()

        # Slots follow the operation's own list so they match the view's ordering
        index_of = {id(response): index for index, response in enumerate(operation.mock_responses, start=1)}
        slots = {
            id(response): sequence_slot(index_of.get(id(response), index), response)
            for index, response in enumerate(candidates, start=1)
        }
        enabled = [response for response in candidates if response.enabled]
        if not enabled:
            raise NoAvailableResponse(f"No enabled mock response for operation {operation.id}")

        strategy = operation.response_strategy
        if strategy == ResponseStrategy.SEQUENCE:
            response = self.cursors.next_response(
                operation.id, enabled, lambda r: slots[id(r)]
            )
        elif strategy == ResponseStrategy.STATUS_SIMULATION:
            response = self._simulate_status(operation, enabled, desired_category)
        else:
            response = self.rng.choice(enabled)

        self.logger.debug(
            f"Selected mock response {response.id} for operation {operation.id} "
            f"({strategy.value})"
        )
        return ExecutionResult.respond(response)

    def _simulate_status(
        self,
        operation: Operation,
        enabled: List[MockResponse],
        desired_category: Optional[StatusCategory]
    ) -> MockResponse:
        groups: Dict[StatusCategory, List[MockResponse]] = {}
        for response in enabled:
            groups.setdefault(response.status_category, []).append(response)

        if desired_category is not None:
            group = groups.get(desired_category)
            if not group:
                raise NoAvailableResponse(
                    f"No enabled {desired_category.value} mock response for operation {operation.id}"
                )
            return self.rng.choice(group)

        # Categories without a configured weight count as 1.0; zero excludes them
        categories = [
            category for category in groups
            if operation.status_weights.get(category, 1.0) > 0
        ]
        if not categories:
            raise NoAvailableResponse(
                f"Every status category of operation {operation.id} has a zero weight"
            )
        weights = [operation.status_weights.get(category, 1.0) for category in categories]
        category = self.rng.choices(categories, weights=weights, k=1)[0]
        return self.rng.choice(groups[category])
