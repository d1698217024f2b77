# pp_core/performance.py
from __future__ import annotations
from dataclasses import dataclass, replace, field
from typing import Optional
import logging

from .aggregate import aggregate
from .config import DEBUG_TRACE, TRACE_FIELDS, CLOCK_RATE_TOLERANCE
from .difficulty import Beatmap, DifficultyProvider, TimelineDifficulty
from .hitresults import HitResults, counts_from_accuracy, fill_hitresults, weighted_accuracy
from .misses import effective_miss_count
from .mods import Mods, as_mods
from .skills import ScoreContext
from .types import DifficultyAttributes, PerformanceAttributes, ScoreState


log = logging.getLogger(__name__)


def _emit_trace(**values: object) -> None:
    if not DEBUG_TRACE:
        return
    ordered = []
    for key in TRACE_FIELDS:
        if key in values:
            ordered.append(f"{key}={values[key]}")
    if ordered:
        log.info("trace %s", " ".join(ordered))


def _extract_attributes(value: object) -> Optional[DifficultyAttributes]:
    if isinstance(value, DifficultyAttributes):
        return value
    if isinstance(value, PerformanceAttributes):
        return value.difficulty
    return None


@dataclass(frozen=True)
class PerformanceCalculator:
    """Immutable builder for osu!standard performance.

    Every setter returns a new calculator, so a configured calculator can be
    reused as a template (the gradual evaluator does exactly that)::

        result = (
            PerformanceCalculator(beatmap)
            .mods(Mods.HD | Mods.DT)
            .combo(1234)
            .misses(1)
            .accuracy(98.5)  # set last, it rewrites the hit counts
            .calculate()
        )
    """

    beatmap: Beatmap
    provider: DifficultyProvider = field(default_factory=TimelineDifficulty)
    cached: Optional[DifficultyAttributes] = None
    mod_bits: Mods = Mods(0)
    acc: Optional[float] = None
    max_combo: Optional[int] = None
    n300_count: Optional[int] = None
    n100_count: Optional[int] = None
    n50_count: Optional[int] = None
    miss_count: int = 0
    passed: Optional[int] = None
    rate: Optional[float] = None

    # ---- configuration surface ----
    def attributes(self, value: object) -> "PerformanceCalculator":
        """Reuse attributes from an earlier difficulty or performance result.

        Anything that carries no difficulty attributes is ignored.
        """

        attrs = _extract_attributes(value)
        if attrs is None:
            return self
        return replace(self, cached=attrs)

    def mods(self, mods: int | Mods) -> "PerformanceCalculator":
        return replace(self, mod_bits=as_mods(mods))

    def combo(self, combo: int) -> "PerformanceCalculator":
        return replace(self, max_combo=max(int(combo), 0))

    def n300(self, n300: int) -> "PerformanceCalculator":
        return replace(self, n300_count=max(int(n300), 0))

    def n100(self, n100: int) -> "PerformanceCalculator":
        return replace(self, n100_count=max(int(n100), 0))

    def n50(self, n50: int) -> "PerformanceCalculator":
        return replace(self, n50_count=max(int(n50), 0))

    def misses(self, misses: int) -> "PerformanceCalculator":
        return replace(self, miss_count=max(int(misses), 0))

    def passed_objects(self, passed_objects: int) -> "PerformanceCalculator":
        """Amount of passed objects for partial plays, e.g. a fail.

        To follow a play object by object use
        :class:`pp_core.gradual.GradualPerformance` instead.
        """

        return replace(self, passed=max(int(passed_objects), 0))

    def clock_rate(self, clock_rate: float) -> "PerformanceCalculator":
        return replace(self, rate=float(clock_rate))

    def state(self, state: ScoreState) -> "PerformanceCalculator":
        return replace(
            self,
            max_combo=state.max_combo,
            n300_count=state.n300,
            n100_count=state.n100,
            n50_count=state.n50,
            miss_count=state.misses,
        )

    def accuracy(self, acc: float) -> "PerformanceCalculator":
        """Generate hit results for an accuracy between 0 and 100.

        Set ``misses`` (and ``passed_objects`` for partial plays) first;
        explicitly set 100s/50s are respected.
        """

        n_objects = self.n_objects()
        n300, n100, n50 = counts_from_accuracy(
            float(acc) / 100.0,
            n_objects,
            self.miss_count,
            n100=self.n100_count,
            n50=self.n50_count,
        )
        return replace(
            self,
            n300_count=n300,
            n100_count=n100,
            n50_count=n50,
            acc=weighted_accuracy(n300, n100, n50, n_objects),
        )

    # ---- evaluation ----
    def n_objects(self) -> int:
        if self.passed is not None:
            return self.passed
        return self.beatmap.n_objects

    def effective_clock_rate(self) -> float:
        return self.rate if self.rate is not None else self.mod_bits.clock_rate()

    def _difficulty(self) -> DifficultyAttributes:
        attrs = self.cached
        if attrs is not None:
            if abs(attrs.clock_rate - self.effective_clock_rate()) <= CLOCK_RATE_TOLERANCE:
                return attrs
            log.warning(
                "discarding attributes for clock rate %s (expected %s) on map %s",
                attrs.clock_rate,
                self.effective_clock_rate(),
                self.beatmap.beatmap_id,
            )
        return self.provider.calculate(
            self.beatmap,
            int(self.mod_bits),
            passed_objects=self.passed,
            clock_rate=self.rate,
        )

    def hitresults(self) -> HitResults:
        return fill_hitresults(
            self.n_objects(),
            misses=self.miss_count,
            n300=self.n300_count,
            n100=self.n100_count,
            n50=self.n50_count,
            acc=self.acc,
        )

    def calculate(self) -> PerformanceAttributes:
        """Calculate pp and its components. Does not modify the calculator."""

        attrs = self._difficulty()
        hits = self.hitresults()
        effective_misses = effective_miss_count(attrs, self.max_combo, hits.misses, hits.total_hits)

        ctx = ScoreContext(
            attributes=attrs,
            mods=self.mod_bits,
            hits=hits,
            effective_misses=effective_misses,
            combo=self.max_combo,
        )
        parts = aggregate(ctx, map_id=self.beatmap.beatmap_id)

        _emit_trace(
            map_id=self.beatmap.beatmap_id,
            mods=self.mod_bits.acronyms() or "NM",
            passed_objects=self.n_objects(),
            total_hits=hits.total_hits,
            effective_misses=effective_misses,
            acc=round(hits.acc, 6),
            aim=round(parts.aim, 4),
            speed=round(parts.speed, 4),
            acc_pp=round(parts.acc, 4),
            flashlight=round(parts.flashlight, 4),
            pp=round(parts.pp, 4),
        )

        return PerformanceAttributes(
            difficulty=attrs,
            pp=parts.pp,
            pp_aim=parts.aim,
            pp_speed=parts.speed,
            pp_acc=parts.acc,
            pp_flashlight=parts.flashlight,
            effective_miss_count=effective_misses,
        )
