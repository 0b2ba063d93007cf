"""
MockVault Response Repository View

Read-only projection of an operation's mock responses.
"""

from typing import List, Tuple

from ..project.model import MockResponse, Operation
from ..project.service import ProjectService


def sequence_slot(index: int, response: MockResponse) -> Tuple[int, int]:
    """
    Sequence slot of the response at a 1-based index of its operation's list.

    A response without an explicit sequence position takes its index as
    position. The index breaks ties between shared positions.
    """
    return (response.sequence_position or index, index)


def ordered_responses(operation: Operation) -> List[MockResponse]:
    """Responses of an operation in sequence order."""
    indexed = sorted(
        enumerate(operation.mock_responses, start=1),
        key=lambda item: sequence_slot(*item)
    )
    return [response for _, response in indexed]


class ResponseRepositoryView:
    """
    Stable, side-effect-free view over stored operations.

    Example:
        view = ResponseRepositoryView(ProjectService(repository))
        operation = view.operation(operation_id)
        candidates = view.enabled_responses(operation_id)
    """

    def __init__(self, projects: ProjectService):
        self.projects = projects

    def operation(self, operation_id: str) -> Operation:
        """
        Raises:
            OperationNotFound: If no stored project holds the operation
        """
        return self.projects.find_operation_by_id(operation_id)

    def responses(self, operation_id: str) -> List[MockResponse]:
        return ordered_responses(self.operation(operation_id))

    def enabled_responses(self, operation_id: str) -> List[MockResponse]:
        return [response for response in self.responses(operation_id) if response.enabled]
