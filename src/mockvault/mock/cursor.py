"""
MockVault Sequence Cursors

Per-operation cursor state for the SEQUENCE response strategy.
"""

import threading
from typing import Callable, Dict, Optional, Sequence, Tuple

from ..errors import NoAvailableResponse
from ..project.model import MockResponse

# (configured position, index in the operation's response list)
Slot = Tuple[int, int]


class _Cursor:
    __slots__ = ('lock', 'slot')

    def __init__(self):
        self.lock = threading.Lock()
        self.slot: Slot = (1, 0)


class SequenceCursors:
    """
    Map of operation id -> sequence cursor.

    Every response occupies a slot: its configured position (1-based)
    paired with its index in the operation's list, so responses sharing a
    position still get distinct slots served in list order. A cursor holds
    the next slot to serve. Each advance picks the enabled response with
    the lowest slot at or after the cursor, wrapping to the lowest enabled
    slot, and moves the cursor just past it. Disabled slots are never
    served; the cursor simply steps over them.

    Every advance of a cursor runs under that operation's own lock, so
    concurrent calls against one operation see a strictly advancing
    cursor while calls against other operations never wait on it.
    """

    def __init__(self):
        self._cursors: Dict[str, _Cursor] = {}
        self._lock = threading.Lock()

    def _cursor(self, operation_id: str) -> _Cursor:
        with self._lock:
            cursor = self._cursors.get(operation_id)
            if cursor is None:
                cursor = self._cursors[operation_id] = _Cursor()
            return cursor

    def next_response(
        self,
        operation_id: str,
        enabled: Sequence[MockResponse],
        slot_of: Callable[[MockResponse], Slot]
    ) -> MockResponse:
        """
        Advance the cursor of an operation and return the response it lands on.

        Args:
            operation_id: Operation owning the cursor
            enabled: Enabled candidate responses
            slot_of: Function giving a response's (position, list index) slot

        Raises:
            NoAvailableResponse: If there is no enabled candidate
        """
        if not enabled:
            raise NoAvailableResponse(f"No enabled mock response for operation {operation_id}")

        slots = sorted(((slot_of(r), r) for r in enabled), key=lambda item: item[0])
        cursor = self._cursor(operation_id)
        with cursor.lock:
            slot, response = next((item for item in slots if item[0] >= cursor.slot), slots[0])
            cursor.slot = (slot[0], slot[1] + 1)
            return response

    def position(self, operation_id: str) -> Slot:
        """Next (position, list index) slot the operation's cursor will look at."""
        cursor = self._cursor(operation_id)
        with cursor.lock:
            return cursor.slot

    def reset(self, operation_id: Optional[str] = None) -> None:
        """Restart one cursor (or all of them) at position 1."""
        with self._lock:
            if operation_id is None:
                self._cursors.clear()
            else:
                self._cursors.pop(operation_id, None)
