"""Forward-anchored sliding window over one key's request timestamps.

Each window starts at a request and reaches ``width`` ms forward,
inclusive: for start index i it holds every j >= i with
``ts[j] <= ts[i] + width``.  Starts only move right over sorted input, so
the far edge never moves left and a two-pointer scan yields every window
count in amortized O(1) instead of rescanning from each start.
"""

from collections.abc import Iterable, Iterator


class SlidingWindow:
    __slots__ = ("width", "_ts")

    def __init__(self, width: int, timestamps: Iterable[int]):
        self.width = width
        # sorted() is stable, so tied timestamps keep arrival order.
        self._ts: list[int] = sorted(timestamps)

    def counts(self) -> Iterator[tuple[int, int]]:
        """Yield (window_start, requests_in_window) for each start, in order."""
        ts = self._ts
        n = len(ts)
        end = 0  # first index past the current window
        for start, t in enumerate(ts):
            edge = t + self.width
            while end < n and ts[end] <= edge:
                end += 1
            yield t, end - start

    def __len__(self) -> int:
        return len(self._ts)
