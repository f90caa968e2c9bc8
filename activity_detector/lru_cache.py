"""Fixed-capacity LRU cache with O(1) get/put.

Recency is kept in a doubly linked list, but the nodes live in flat arrays
addressed by slot index instead of as objects pointing at each other.  Slot
0 is the head sentinel (least recently used side) and slot 1 the tail
sentinel (most recently used side).  Evicted slots are recycled.
"""

from activity_detector.errors import ConfigurationError

_HEAD = 0
_TAIL = 1


class _Miss:
    __slots__ = ()

    def __repr__(self):
        return "MISS"


MISS = _Miss()


class LRUCache:
    __slots__ = ("capacity", "_slot", "_keys", "_values", "_prev", "_next", "_free")

    def __init__(self, capacity: int):
        if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity <= 0:
            raise ConfigurationError(f"LRU capacity must be a positive integer, got {capacity!r}")
        self.capacity = capacity
        self._slot: dict = {}  # key -> slot index
        self._keys: list = [None, None]
        self._values: list = [None, None]
        self._prev: list[int] = [_HEAD, _HEAD]
        self._next: list[int] = [_TAIL, _TAIL]
        self._free: list[int] = []

    def get(self, key):
        """Return the cached value (marking it most recent) or MISS."""
        slot = self._slot.get(key)
        if slot is None:
            return MISS
        self._unlink(slot)
        self._append(slot)
        return self._values[slot]

    def put(self, key, value) -> None:
        slot = self._slot.get(key)
        if slot is not None:
            self._values[slot] = value
            self._unlink(slot)
            self._append(slot)
            return

        if len(self._slot) >= self.capacity:
            lru = self._next[_HEAD]
            self._unlink(lru)
            del self._slot[self._keys[lru]]
            self._keys[lru] = self._values[lru] = None
            self._free.append(lru)

        slot = self._allocate(key, value)
        self._slot[key] = slot
        self._append(slot)

    def keys(self) -> list:
        """Keys from least to most recently used."""
        result = []
        slot = self._next[_HEAD]
        while slot != _TAIL:
            result.append(self._keys[slot])
            slot = self._next[slot]
        return result

    def __len__(self) -> int:
        return len(self._slot)

    def __contains__(self, key) -> bool:
        # Membership test only; does not touch recency.
        return key in self._slot

    # ------------------------------------------------------------------
    # Arena helpers
    # ------------------------------------------------------------------

    def _allocate(self, key, value) -> int:
        if self._free:
            slot = self._free.pop()
            self._keys[slot] = key
            self._values[slot] = value
            return slot
        self._keys.append(key)
        self._values.append(value)
        self._prev.append(_HEAD)
        self._next.append(_TAIL)
        return len(self._keys) - 1

    def _unlink(self, slot: int) -> None:
        prev, nxt = self._prev[slot], self._next[slot]
        self._next[prev] = nxt
        self._prev[nxt] = prev

    def _append(self, slot: int) -> None:
        last = self._prev[_TAIL]
        self._prev[slot] = last
        self._next[slot] = _TAIL
        self._next[last] = slot
        self._prev[_TAIL] = slot
