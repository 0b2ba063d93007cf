"""
MockVault Errors

Error kinds surfaced by the mock-response resolution engine.

Each error carries a ``kind`` string that the transport layer and the
event history use to identify the failure without inspecting the
exception type.
"""


class MockError(Exception):
    """Base class for all MockVault errors."""

    kind = "MockError"


class OperationNotFound(MockError):
    """Raised when an operation id does not resolve to a configured operation."""

    kind = "OperationNotFound"

    def __init__(self, operation_id: str):
        super().__init__(f"Unable to find an operation with id {operation_id}")
        self.operation_id = operation_id


class NoAvailableResponse(MockError):
    """Raised when a mocked operation has no enabled response to serve."""

    kind = "NoAvailableResponse"


class StorageUnavailable(MockError):
    """Raised by repositories when the backing store cannot be reached."""

    kind = "StorageUnavailable"


class InvalidConfiguration(MockError):
    """Raised at startup when the configuration is unusable."""

    kind = "InvalidConfiguration"
