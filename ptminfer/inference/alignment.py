"""
Site alignment module.

This module maps one series of site positions onto another, preserving order.
It is used to carry modification sites over when a peptide's placements are
rewritten, and to match positions that each have their own candidate set.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Set

logger = logging.getLogger(__name__)


def align(series_a: Iterable[int], series_b: Iterable[int]) -> Dict[int, Optional[int]]:
    """
    Greedy order-preserving nearest correspondence from series A onto series B.

    Both series are sorted ascending. Leading elements of A that are farther
    from the first element of B than their successor is are mapped to None.
    For each remaining element a[i], B is scanned forward from the cursor and
    the closest candidate is kept; the scan stops on a candidate that is at
    least as close to a[i + 1] as to a[i], or on a candidate beyond a[i] once
    one was found. The last element of A takes the closest remaining
    candidate. Ties keep the first candidate met. Each element of B is used
    at most once.

    Args:
        series_a: Source positions
        series_b: Target positions

    Returns:
        Mapping of every element of A to an element of B or None
    """
    a = sorted(set(series_a))
    b = sorted(set(series_b))
    result: Dict[int, Optional[int]] = {}

    if not b:
        return {value: None for value in a}

    i = 0
    while i + 1 < len(a) and abs(b[0] - a[i + 1]) < abs(b[0] - a[i]):
        result[a[i]] = None
        i += 1

    cursor = 0
    for i in range(i, len(a)):
        current = a[i]
        following = a[i + 1] if i + 1 < len(a) else None
        best_index = None
        best_distance = None

        for k in range(cursor, len(b)):
            candidate = b[k]
            distance = abs(candidate - current)
            if following is not None:
                if abs(candidate - following) <= distance:
                    break
                if candidate > current and best_index is not None:
                    break
            if best_index is None or distance < best_distance:
                best_index = k
                best_distance = distance

        if best_index is None:
            result[current] = None
        else:
            result[current] = b[best_index]
            cursor = best_index + 1

    return result


def align_all(
    series_a: Iterable[int], series_b: Iterable[int]
) -> Dict[int, Optional[int]]:
    """
    Align A onto B leaving as few elements of A unmatched as possible.

    align is repeated on the still unmatched elements of A against the still
    unused elements of B until max(0, |A| - |B|) elements are left unmatched.

    Args:
        series_a: Source positions
        series_b: Target positions

    Returns:
        Mapping of every element of A to an element of B or None
    """
    a = sorted(set(series_a))
    available = sorted(set(series_b))
    target_unmatched = max(0, len(a) - len(available))

    result: Dict[int, Optional[int]] = {value: None for value in a}
    remaining = list(a)

    while len(remaining) > target_unmatched and available:
        round_result = align(remaining, available)
        matched = {
            source: target
            for source, target in round_result.items()
            if target is not None
        }
        if not matched:
            break

        result.update(matched)
        used = set(matched.values())
        available = [value for value in available if value not in used]
        remaining = [value for value in remaining if value not in matched]

    return result


def align_all_constrained(
    candidates: Mapping[int, Iterable[int]]
) -> Dict[int, Optional[int]]:
    """
    Match keys that each have their own candidate set, most constrained first.

    The keys with the fewest remaining candidates are resolved first; keys
    sharing the same candidate set are matched together with align_all. The
    chosen targets are removed from every other key before the next round.
    Keys left without candidates map to None. No two keys share a target.

    Args:
        candidates: Mapping key -> candidate positions

    Returns:
        Mapping of every key to one of its candidates or None
    """
    remaining: Dict[int, Set[int]] = {
        key: set(values) for key, values in candidates.items()
    }
    result: Dict[int, Optional[int]] = {}

    while remaining:
        for key in [key for key, values in remaining.items() if not values]:
            result[key] = None
            del remaining[key]
        if not remaining:
            break

        smallest = min(len(values) for values in remaining.values())
        groups: Dict[tuple, List[int]] = {}
        for key, values in remaining.items():
            if len(values) == smallest:
                groups.setdefault(tuple(sorted(values)), []).append(key)

        shared = min(groups)
        keys = groups[shared]
        group_result = align_all(keys, shared)
        logger.debug(f"Resolved {sorted(keys)} against {list(shared)}: {group_result}")

        used = set()
        for key in keys:
            target = group_result.get(key)
            result[key] = target
            if target is not None:
                used.add(target)
            del remaining[key]

        for values in remaining.values():
            values -= used

    return result
