# pp_core/aggregate.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from .config import RX_MAP_CORRECTIONS_EXTRA
from .skills import ScoreContext, aim_value, speed_value, accuracy_value, flashlight_value

# Relax scores on these maps are known to be overvalued by the generic model.
RX_MAP_CORRECTIONS: Dict[int, float] = {
    1808605: 0.7,  # Louder than steel
    1821147: 0.6,  # Over the top
    1849420: 0.6,  # Ascension to heaven (mattay)
}

BASE_MULTIPLIER: float = 1.12


def map_corrections(extra: Optional[Mapping[int, float]] = None) -> Dict[int, float]:
    """Built-in relax corrections merged with the configured extras."""

    table = dict(RX_MAP_CORRECTIONS)
    table.update(RX_MAP_CORRECTIONS_EXTRA if extra is None else extra)
    return table


MAP_CORRECTIONS: Dict[int, float] = map_corrections()


@dataclass(frozen=True)
class Components:
    aim: float = 0.0
    speed: float = 0.0
    acc: float = 0.0
    flashlight: float = 0.0
    pp: float = 0.0


def _multiplier(ctx: ScoreContext) -> float:
    multiplier = BASE_MULTIPLIER

    if ctx.mods.nf():
        multiplier *= max(1.0 - 0.02 * ctx.effective_misses, 0.9)

    if ctx.mods.so():
        spinner_ratio = min(ctx.attributes.n_spinners / ctx.total_hits, 1.0)
        multiplier *= 1.0 - spinner_ratio ** 0.85

    return multiplier


def _relax_aim_dampening(aim: float, speed: float, acc: float) -> float:
    if speed <= 0.0 or aim / speed >= 1.0:
        return aim
    if acc >= 0.97:
        # acc is rounded to a whole number here, i.e. 0.96 for any acc >= 0.97
        return aim * (0.94 - (0.99 - round(acc)) * 2.0)
    return aim * 0.87


def aggregate(
    ctx: ScoreContext,
    map_id: Optional[int] = None,
    corrections: Optional[Mapping[int, float]] = None,
) -> Components:
    """Combine the skill values into the final pp.

    Relax drops the speed term and weights aim/acc with their own exponents,
    autopilot keeps only accuracy and flashlight, everything else uses a plain
    power mean with exponent 1.1.
    """

    if ctx.total_hits <= 0.0:
        return Components()

    multiplier = _multiplier(ctx)

    aim = aim_value(ctx)
    speed = speed_value(ctx)
    acc = accuracy_value(ctx)
    flashlight = flashlight_value(ctx)

    if ctx.mods.rx():
        aim = _relax_aim_dampening(aim, speed, ctx.acc)
        pp = (aim ** 1.17 + acc ** 1.15 + flashlight ** 1.1) ** (1.0 / 1.1) * multiplier
    elif ctx.mods.ap():
        pp = (acc ** 1.15 + flashlight ** 1.1) ** (1.0 / 1.1) * multiplier
    else:
        pp = (aim ** 1.1 + speed ** 1.1 + acc ** 1.1 + flashlight ** 1.1) ** (1.0 / 1.1) * multiplier

    if ctx.mods.rx() and map_id is not None:
        table = MAP_CORRECTIONS if corrections is None else corrections
        pp *= table.get(int(map_id), 1.0)

    return Components(aim=aim, speed=speed, acc=acc, flashlight=flashlight, pp=max(pp, 0.0))
