"""Hit-result normalization.

Turns whatever the caller knows about a score (an accuracy target, a subset of
the 300/100/50 counts, the miss count) into a complete set of counts for the
performance pipeline. Every function here clamps instead of failing, so the
counts it returns are never negative.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

__all__ = [
    "HitResults",
    "weighted_accuracy",
    "counts_from_accuracy",
    "fill_hitresults",
]


@dataclass(frozen=True)
class HitResults:
    n300: int
    n100: int
    n50: int
    misses: int
    acc: float
    total_hits: int


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def weighted_accuracy(n300: int, n100: int, n50: int, n_objects: int) -> float:
    """Return ``(6·n300 + 2·n100 + n50) / (6·n_objects)``, or 0.0 for no objects."""

    if n_objects <= 0:
        return 0.0
    return (6 * n300 + 2 * n100 + n50) / (6 * n_objects)


def counts_from_accuracy(
    acc: float,
    n_objects: int,
    misses: int = 0,
    n100: Optional[int] = None,
    n50: Optional[int] = None,
) -> tuple[int, int, int]:
    """Derive ``(n300, n100, n50)`` for a target accuracy fraction.

    Parameters
    ----------
    acc: float
        Target accuracy in ``[0, 1]``.
    n_objects: int
        Number of judged objects.
    misses: int
        Miss count, kept as given.
    n100, n50: Optional[int]
        Counts the caller already fixed. When at least one of them is given,
        only the unfixed tiers are derived. If *only* ``n50`` was fixed, some
        of the filled-in 50s are shifted back onto 100s. When both are fixed
        no such rebalancing happens.

    Returns
    -------
    tuple[int, int, int]
        Non-negative counts; with no fixed tier they sum to
        ``n_objects - misses``.
    """

    acc = max(0.0, min(1.0, float(acc)))
    n_objects = max(int(n_objects), 0)
    misses = max(int(misses), 0)
    target_points = _round_half_up(6.0 * acc * n_objects)

    if n100 is not None or n50 is not None:
        fixed_n50 = n50
        c100 = max(int(n100 or 0), 0)
        c50 = max(int(n50 or 0), 0)

        placed_points = 2 * c100 + c50 + misses
        missing_objects = max(n_objects - c100 - c50 - misses, 0)
        missing_points = max(target_points - placed_points, 0)

        c300 = min(missing_objects, missing_points // 6)
        c50 += missing_objects - c300

        if fixed_n50 is not None and n100 is None:
            # only 50s were given, load some of the filled-in ones onto 100s
            difference = c50 - max(int(fixed_n50), 0)
            n = min(c300, difference // 4)
            c300 -= n
            c100 += 5 * n
            c50 -= 4 * n

        return c300, c100, c50

    misses = min(misses, n_objects)
    hittable = n_objects - misses
    delta = max(target_points - hittable, 0)

    c300 = min(delta // 5, hittable)
    c100 = min(delta % 5, hittable - c300)
    c50 = hittable - c300 - c100

    # sacrifice 300s to turn groups of four 50s into 100s
    n = min(c300, c50 // 4)
    c300 -= n
    c100 += 5 * n
    c50 -= 4 * n

    return c300, c100, c50


def fill_hitresults(
    n_objects: int,
    misses: int = 0,
    n300: Optional[int] = None,
    n100: Optional[int] = None,
    n50: Optional[int] = None,
    acc: Optional[float] = None,
) -> HitResults:
    """Complete partially specified hit results.

    With an accuracy already derived (``acc`` is not None) the counts are
    taken as they are. Otherwise objects nobody accounted for are assigned to
    the first tier the caller left open, and accuracy is computed from the
    result.
    """

    n_objects = max(int(n_objects), 0)
    misses = max(int(misses), 0)

    if acc is not None:
        c300 = max(int(n300 or 0), 0)
        c100 = max(int(n100 or 0), 0)
        c50 = max(int(n50 or 0), 0)
        total_hits = min(c300 + c100 + c50 + misses, n_objects)
        return HitResults(c300, c100, c50, misses, float(acc), total_hits)

    remaining = max(
        n_objects - max(int(n300 or 0), 0) - max(int(n100 or 0), 0) - max(int(n50 or 0), 0) - misses,
        0,
    )

    if remaining > 0:
        if n300 is not None:
            if n100 is None:
                n100 = remaining
            elif n50 is None:
                n50 = remaining
            else:
                n300 += remaining
        else:
            n300 = remaining

    c300 = max(int(n300 or 0), 0)
    c100 = max(int(n100 or 0), 0)
    c50 = max(int(n50 or 0), 0)

    total_hits = min(c300 + c100 + c50 + misses, n_objects)
    return HitResults(c300, c100, c50, misses, weighted_accuracy(c300, c100, c50, n_objects), total_hits)
