from __future__ import annotations

import pytest

from pp_core.hitresults import counts_from_accuracy, fill_hitresults, weighted_accuracy
from pp_core.performance import PerformanceCalculator

from tests.conftest import build_synthetic_beatmap


def _acc(n300: int, n100: int, n50: int, n_objects: int) -> float:
    return 100.0 * weighted_accuracy(n300, n100, n50, n_objects)


def test_only_accuracy_hits_target():
    calc = PerformanceCalculator(build_synthetic_beatmap()).passed_objects(1234).accuracy(97.5)

    assert calc.n300_count + calc.n100_count + calc.n50_count == 1234
    acc = _acc(calc.n300_count, calc.n100_count, calc.n50_count, 1234)
    assert abs(97.5 - acc) < 1.0, f"Expected: 97.5 | Actual: {acc}"


def test_accuracy_keeps_fixed_n50_close():
    calc = (
        PerformanceCalculator(build_synthetic_beatmap())
        .passed_objects(1234)
        .n50(30)
        .accuracy(97.5)
    )

    assert abs(calc.n50_count - 30) <= 4
    assert calc.n300_count + calc.n100_count + calc.n50_count == 1234
    acc = _acc(calc.n300_count, calc.n100_count, calc.n50_count, 1234)
    assert abs(97.5 - acc) < 1.0


def test_missing_objects_go_to_300s_when_all_counts_given():
    hits = fill_hitresults(1234, n300=1000, n100=200, n50=30)
    assert (hits.n300, hits.n100, hits.n50) == (1004, 200, 30)
    assert hits.total_hits == 1234


def test_missing_objects_fill_first_open_tier():
    only_300 = fill_hitresults(100, n300=90)
    assert (only_300.n300, only_300.n100, only_300.n50) == (90, 10, 0)

    no_50 = fill_hitresults(100, n300=90, n100=5)
    assert (no_50.n300, no_50.n100, no_50.n50) == (90, 5, 5)

    nothing = fill_hitresults(100, misses=2)
    assert (nothing.n300, nothing.n100, nothing.n50, nothing.misses) == (98, 0, 0, 2)
    assert nothing.acc == pytest.approx(0.98)


def test_rebalance_only_when_n50_alone_was_fixed():
    only_n50 = counts_from_accuracy(0.9, 100, n50=5)
    only_n100 = counts_from_accuracy(0.9, 100, n100=5)
    both = counts_from_accuracy(0.9, 100, n100=5, n50=5)

    assert only_n50 == (88, 5, 7)
    assert only_n100 == (88, 5, 7)
    # both tiers fixed: the filled-in 50s stay where they are
    assert both == (87, 5, 8)


@pytest.mark.parametrize("n_objects", [100, 357, 1234, 5000])
@pytest.mark.parametrize("target", [0.2, 0.5, 0.75, 0.9, 0.95, 0.99, 1.0])
def test_accuracy_counts_are_consistent(n_objects, target):
    n300, n100, n50 = counts_from_accuracy(target, n_objects)

    assert min(n300, n100, n50) >= 0
    assert n300 + n100 + n50 == n_objects
    assert abs(weighted_accuracy(n300, n100, n50, n_objects) - target) <= 0.01


@pytest.mark.parametrize("target", [0.5, 0.9, 0.95])
def test_accuracy_counts_leave_room_for_misses(target):
    n300, n100, n50 = counts_from_accuracy(target, 500, misses=3)

    assert min(n300, n100, n50) >= 0
    assert n300 + n100 + n50 == 497
    assert abs(weighted_accuracy(n300, n100, n50, 500) - target) <= 0.01


def test_accuracy_is_idempotent():
    assert counts_from_accuracy(0.9731, 842, misses=4) == counts_from_accuracy(0.9731, 842, misses=4)


def test_no_objects_yield_zero_counts():
    assert counts_from_accuracy(0.95, 0) == (0, 0, 0)
    assert counts_from_accuracy(0.95, 0, misses=3) == (0, 0, 0)
    assert weighted_accuracy(0, 0, 0, 0) == 0.0
    hits = fill_hitresults(0, misses=3)
    assert hits.total_hits == 0


def test_fixed_counts_larger_than_map_never_go_negative():
    n300, n100, n50 = counts_from_accuracy(0.99, 50, misses=10, n100=40, n50=20)
    assert min(n300, n100, n50) >= 0
    assert n300 == 0
