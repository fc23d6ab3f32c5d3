"""
Test site alignment.
"""

import pytest

from ptminfer.inference.alignment import align, align_all, align_all_constrained

SERIES_A = [0, 1, 13, 25, 15, 6, 99]
SERIES_B = [100, 2, 12, 14, 18, 30, 115, 1000]

pytestmark = pytest.mark.algorithm


def test_align():
    """Test the greedy order-preserving alignment."""
    result = align(SERIES_A, SERIES_B)

    assert result == {
        0: None,
        1: 2,
        6: None,
        13: 12,
        15: 14,
        25: 18,
        99: 100,
    }


def test_align_is_not_symmetric():
    """Test that swapping the series changes the correspondence."""
    forward = align([5], [0, 1, 2, 3, 4, 7, 8, 9, 10])
    backward = align([0, 1, 2, 3, 4, 7, 8, 9, 10], [5])

    assert forward == {5: 4}
    assert backward == {
        0: None,
        1: None,
        2: None,
        3: None,
        4: 5,
        7: None,
        8: None,
        9: None,
        10: None,
    }


def test_align_tie_keeps_first_candidate():
    """Test that equidistant candidates resolve to the first one scanned."""
    assert align([5], [3, 7]) == {5: 3}


def test_align_empty_target():
    """Test alignment against an empty series."""
    assert align([1, 2], []) == {1: None, 2: None}
    assert align([], [1, 2]) == {}


def test_align_all():
    """Test that every element is matched when targets suffice."""
    result = align_all(SERIES_A, SERIES_B)

    assert result == {
        0: 115,
        1: 2,
        6: 30,
        13: 12,
        15: 14,
        25: 18,
        99: 100,
    }
    assert len(set(result.values())) == len(result)


def test_align_all_deficit():
    """Test that unmatched elements are limited to the size deficit."""
    series_a = [0, 1, 2, 3, 4, 7, 8, 9, 10]
    result = align_all(series_a, [5, 6])

    unmatched = [source for source, target in result.items() if target is None]
    assert len(unmatched) == len(series_a) - 2
    assert sorted(t for t in result.values() if t is not None) == [5, 6]


def test_align_all_constrained():
    """Test most-constrained-first matching of bespoke candidate sets."""
    candidates = {
        0: set(SERIES_B),
        1: {12},
        2: {3, 12, 14},
        8: {12},
        13: {3, 12, 14},
        25: set(SERIES_B),
        15: set(SERIES_B),
        6: set(SERIES_B),
        99: {3},
    }

    result = align_all_constrained(candidates)

    assert result == {
        1: None,
        8: 12,
        99: 3,
        13: 14,
        2: None,
        0: 2,
        6: 100,
        15: 18,
        25: 30,
    }
    targets = [target for target in result.values() if target is not None]
    assert len(targets) == len(set(targets))
    for key, target in result.items():
        if target is not None:
            assert target in candidates[key]


def test_align_all_constrained_empty_candidates():
    """Test that keys without candidates map to None."""
    assert align_all_constrained({4: set(), 7: {7}}) == {4: None, 7: 7}
