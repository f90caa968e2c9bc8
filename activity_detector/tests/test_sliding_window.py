"""Tests for SlidingWindow: inclusive edges, ordering, window counts."""

from activity_detector.sliding_window import SlidingWindow


def _brute_force_counts(timestamps, width):
    """Reference: rescan forward from every start."""
    ts = sorted(timestamps)
    out = []
    for i, t in enumerate(ts):
        n = 0
        for j in range(i, len(ts)):
            if ts[j] <= t + width:
                n += 1
            else:
                break
        out.append((t, n))
    return out


class TestCounts:
    def test_single_timestamp_window_holds_itself(self):
        assert list(SlidingWindow(60_000, [1000]).counts()) == [(1000, 1)]

    def test_empty_sequence_yields_nothing(self):
        w = SlidingWindow(60_000, [])
        assert list(w.counts()) == []
        assert len(w) == 0

    def test_all_within_one_window(self):
        ts = [i * 500 for i in range(10)]
        counts = list(SlidingWindow(60_000, ts).counts())
        assert counts[0] == (0, 10)
        assert counts[-1] == (4500, 1)

    def test_timestamp_exactly_on_edge_is_inside(self):
        """Far edge is inclusive: ts[j] <= ts[i] + width."""
        counts = list(SlidingWindow(1000, [0, 1000]).counts())
        assert counts[0] == (0, 2)

    def test_timestamp_just_past_edge_is_outside(self):
        counts = list(SlidingWindow(1000, [0, 1001]).counts())
        assert counts[0] == (0, 1)

    def test_unsorted_input_is_sorted(self):
        counts = list(SlidingWindow(100, [300, 100, 200]).counts())
        assert [t for t, _ in counts] == [100, 200, 300]
        assert counts[0] == (100, 2)

    def test_duplicate_timestamps_counted_individually(self):
        counts = list(SlidingWindow(10, [5, 5, 5]).counts())
        assert counts == [(5, 3), (5, 2), (5, 1)]

    def test_matches_forward_rescan(self):
        """The two-pointer scan must give the same count for every start."""
        ts = [0, 10, 15, 40, 41, 42, 90, 200, 201, 260, 261, 262, 263, 400]
        for width in (0, 5, 30, 50, 100, 1000):
            assert list(SlidingWindow(width, ts).counts()) == _brute_force_counts(ts, width)

    def test_does_not_mutate_input(self):
        ts = [3, 1, 2]
        SlidingWindow(10, ts)
        assert ts == [3, 1, 2]
