# pp_core/gradual.py
from __future__ import annotations
from typing import Optional
import logging

from .difficulty import Beatmap, DifficultyProvider, GradualDifficulty, TimelineDifficulty
from .mods import Mods
from .performance import PerformanceCalculator
from .types import DifficultyAttributes, PerformanceAttributes, ScoreState


log = logging.getLogger(__name__)


class GradualPerformance:
    """Calculate performance after every judged object.

    Call :meth:`process_next_object` after each hit object with the score
    state so far, or :meth:`process_next_n_objects` to skip ahead. Both
    return ``None`` once every object of the map has been processed::

        gradual = GradualPerformance(beatmap, Mods.DT)
        state = ScoreState()
        for _ in range(10):
            state = replace(state, n300=state.n300 + 1, max_combo=state.max_combo + 1)
            perf = gradual.process_next_object(state)

    The instance holds a single cursor; use one evaluator per play.
    """

    def __init__(
        self,
        beatmap: Beatmap,
        mods: int | Mods = 0,
        provider: Optional[DifficultyProvider] = None,
    ):
        provider = provider or TimelineDifficulty()
        self.difficulty: GradualDifficulty = provider.gradual(beatmap, int(mods))
        self.performance = (
            PerformanceCalculator(beatmap, provider=provider).mods(mods).passed_objects(0)
        )

    @property
    def position(self) -> int:
        return self.difficulty.position

    def exhausted(self) -> bool:
        return self.difficulty.remaining() <= 0

    def process_next_object(self, state: ScoreState) -> Optional[PerformanceAttributes]:
        return self.process_next_n_objects(state, 1)

    def process_next_n_objects(self, state: ScoreState, n: int) -> Optional[PerformanceAttributes]:
        """Advance by ``n`` objects (0 counts as 1, clamped to what's left)."""

        latest: Optional[DifficultyAttributes] = None
        for _ in range(max(int(n), 1)):
            snap = next(self.difficulty, None)
            if snap is None:
                break
            latest = snap

        if latest is None:
            log.debug("gradual performance exhausted at %d objects", self.position)
            return None

        return (
            self.performance
            .attributes(latest)
            .state(state)
            .passed_objects(self.position)
            .calculate()
        )
