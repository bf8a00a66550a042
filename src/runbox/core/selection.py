"""Bounded selection index into the current view."""


class SelectionCursor:
    """Index into a view of known length. Clamps, never wraps.

    // [LAW:single-enforcer] reset() is the only way the view length changes.
    """

    __slots__ = ("_index", "_size")

    def __init__(self, size: int = 0):
        self._index = 0
        self._size = max(0, int(size))

    @property
    def index(self) -> int:
        return self._index

    @property
    def size(self) -> int:
        return self._size

    def reset(self, size: int) -> None:
        self._size = max(0, int(size))
        self._index = 0

    def move_down(self) -> bool:
        """Advance by one. Returns True if the index changed."""
        if self._index + 1 < self._size:
            self._index += 1
            return True
        return False

    def move_up(self) -> bool:
        """Retreat by one. Returns True if the index changed."""
        if self._index > 0:
            self._index -= 1
            return True
        return False

    def __repr__(self) -> str:
        return f"SelectionCursor(index={self._index}, size={self._size})"
