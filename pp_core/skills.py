"""Per-skill performance values for osu!standard.

Each public ``*_value`` function maps a :class:`ScoreContext` to a single
non-negative float. They share a few building blocks (rating transform,
length bonus, miss penalty, AR/HD factors) which are exposed so that the
aggregator and the tests can reuse them.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .hitresults import HitResults
from .mods import Mods
from .types import DifficultyAttributes

__all__ = [
    "ScoreContext",
    "rating_to_value",
    "length_bonus",
    "miss_penalty",
    "aim_value",
    "speed_value",
    "accuracy_value",
    "flashlight_value",
]


@dataclass(frozen=True)
class ScoreContext:
    attributes: DifficultyAttributes
    mods: Mods
    hits: HitResults
    effective_misses: int
    combo: Optional[int] = None

    @property
    def acc(self) -> float:
        return self.hits.acc

    @property
    def total_hits(self) -> float:
        return float(self.hits.total_hits)


def rating_to_value(rating: float) -> float:
    """Cubic transform shared by aim and speed: ``(5·max(r/0.0675, 1) − 4)³ / 1e5``."""

    return (5.0 * max(rating / 0.0675, 1.0) - 4.0) ** 3 / 100_000.0


def length_bonus(total_hits: float) -> float:
    """Longer maps are worth more.

    Grows linearly up to 2000 objects and logarithmically beyond.
    """

    bonus = 0.95 + 0.4 * min(total_hits / 2000.0, 1.0)
    if total_hits > 2000.0:
        bonus += 0.5 * math.log10(total_hits / 2000.0)
    return bonus


def miss_penalty(effective_misses: float, difficult_strain_count: float) -> float:
    """Penalty for misses, relative to how many hard sections the map has.

    A player is assumed to miss on the hardest parts, so maps with fewer
    difficult strains punish each miss harder.
    """

    if difficult_strain_count <= 0.0:
        return 0.0
    return 0.94 / (effective_misses / (2.0 * math.sqrt(difficult_strain_count)) + 1.0)


def _ar_factor(attributes: DifficultyAttributes, mods: Mods) -> float:
    if mods.rx():
        return 0.4 * (attributes.ar - 10.7) if attributes.ar > 10.7 else 0.0
    return 0.3 * (attributes.ar - 10.33) if attributes.ar > 10.33 else 0.0


def _hd_factor(attributes: DifficultyAttributes, mods: Mods) -> float:
    initial, scaled = (0.05, 11.0) if mods.rx() else (0.04, 12.0)
    return 1.0 + initial * (scaled - attributes.ar)


def _od_scaling(od: float) -> float:
    return 0.98 + od * od / 2500.0


def aim_value(ctx: ScoreContext) -> float:
    attrs = ctx.attributes
    total_hits = ctx.total_hits

    raw_aim = attrs.aim_strain ** 0.8 if ctx.mods.td() else attrs.aim_strain
    value = rating_to_value(raw_aim)

    len_bonus = length_bonus(total_hits)
    value *= len_bonus

    if ctx.effective_misses > 0:
        value *= miss_penalty(float(ctx.effective_misses), attrs.aim_difficult_strain_count)

    ar_factor = _ar_factor(attrs, ctx.mods)
    if ar_factor > 0.0:
        value *= 1.0 + ar_factor * len_bonus
    elif attrs.ar < 8.0:
        buff = 1.3
        if attrs.ar <= 5.0:
            buff += (5.0 - attrs.ar) / 50.0
        value *= min(buff * len_bonus, 1.75)

    if ctx.mods.rx() and attrs.cs > 6.0:
        value *= 1.03 + (attrs.cs - 6.0) / 20.0

    if ctx.mods.hd():
        value *= _hd_factor(attrs, ctx.mods)

    if attrs.n_sliders > 0:
        # 15% of sliders are assumed difficult, the calculator can't tell which
        difficult_sliders = attrs.n_sliders * 0.15
        non_300s = total_hits - ctx.hits.n300
        combo = attrs.max_combo if ctx.combo is None else ctx.combo
        missing_combo = max(attrs.max_combo - combo, 0)

        dropped = max(0.0, min(min(non_300s, float(missing_combo)), difficult_sliders))
        base = 1.0 - dropped / difficult_sliders
        value *= (1.0 - attrs.slider_factor) * base ** 3 + attrs.slider_factor

    value *= ctx.acc
    value *= _od_scaling(attrs.od)
    return max(value, 0.0)


def speed_value(ctx: ScoreContext) -> float:
    attrs = ctx.attributes
    total_hits = ctx.total_hits

    value = rating_to_value(attrs.speed_strain)

    len_bonus = length_bonus(total_hits)
    value *= len_bonus

    if ctx.effective_misses > 0:
        value *= miss_penalty(float(ctx.effective_misses), attrs.aim_difficult_strain_count)

    value *= 1.0 + _ar_factor(attrs, ctx.mods) * len_bonus

    if ctx.mods.hd():
        value *= _hd_factor(attrs, ctx.mods)

    od_factor = 0.95 + attrs.od * attrs.od / 750.0
    acc_factor = ctx.acc ** ((14.5 - max(attrs.od, 8.0)) / 2.0)
    value *= od_factor * acc_factor

    # penalize 50s beyond one per 500 objects
    threshold = total_hits / 500.0
    if ctx.hits.n50 >= threshold:
        value *= 0.98 ** (ctx.hits.n50 - threshold)

    return max(value, 0.0)


def accuracy_value(ctx: ScoreContext) -> float:
    """Accuracy only considers hit circles, sliders are too lenient to judge."""

    attrs = ctx.attributes
    n_circles = float(attrs.n_circles)
    if n_circles <= 0.0:
        return 0.0

    hits = ctx.hits
    better_acc = max(
        ((hits.n300 - (ctx.total_hits - n_circles)) * 6.0 + hits.n100 * 2.0 + hits.n50)
        / (n_circles * 6.0),
        0.0,
    )

    value = 1.52163 ** attrs.od * better_acc ** 24 * 2.83

    # bonus for many hitcircles
    value *= min((n_circles / 1000.0) ** 0.3, 1.15)

    if ctx.mods.hd():
        value *= 1.08
    if ctx.mods.fl():
        value *= 1.02

    return max(value, 0.0)


def flashlight_value(ctx: ScoreContext) -> float:
    if not ctx.mods.fl():
        return 0.0

    attrs = ctx.attributes
    total_hits = ctx.total_hits

    raw = attrs.flashlight_rating ** 0.8 if ctx.mods.td() else attrs.flashlight_rating
    value = raw * raw * 25.0

    if ctx.mods.hd():
        value *= 1.3

    misses = float(ctx.effective_misses)
    if misses > 0.0 and total_hits > 0.0:
        ratio = min(misses / total_hits, 1.0)
        value *= 0.97 * (1.0 - ratio ** 0.775) ** (misses ** 0.875)

    if ctx.combo is not None and attrs.max_combo > 0:
        value *= min((ctx.combo / attrs.max_combo) ** 0.8, 1.0)

    # shorter maps have a higher ratio of 0 combo / 100 combo flashlight radius
    length_factor = 0.7 + 0.1 * min(total_hits / 200.0, 1.0)
    if total_hits > 200.0:
        length_factor += 0.2 * min((total_hits - 200.0) / 200.0, 1.0)
    value *= length_factor

    # scale with accuracy slightly, and with OD
    value *= 0.5 + ctx.acc / 2.0
    value *= _od_scaling(attrs.od)
    return max(value, 0.0)
