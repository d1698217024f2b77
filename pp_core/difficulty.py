"""Difficulty-attribute sources.

Strain integration itself lives outside this package. A :class:`Beatmap`
carries, per difficulty-relevant mod combination, the cumulative attribute
snapshots an external difficulty calculator produced after each hit object.
:class:`TimelineDifficulty` serves one-shot lookups from those timelines and
hands out :class:`GradualDifficulty` iterators for incremental evaluation.
Any other provider only has to satisfy :class:`DifficultyProvider`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Protocol

from .config import CLOCK_RATE_TOLERANCE
from .mods import Mods, as_mods
from .types import DifficultyAttributes

log = logging.getLogger(__name__)

__all__ = [
    "Beatmap",
    "DifficultyUnavailable",
    "DifficultyProvider",
    "GradualDifficulty",
    "TimelineDifficulty",
]


class DifficultyUnavailable(LookupError):
    """No difficulty attributes can be produced for the requested map/mods."""


@dataclass
class Beatmap:
    beatmap_id: int
    n_objects: int
    timelines: Dict[int, List[DifficultyAttributes]] = field(default_factory=dict)
    title: str = ""

    def timeline(self, mods: int | Mods) -> List[DifficultyAttributes]:
        key = int(as_mods(mods).difficulty_mask())
        try:
            return self.timelines[key]
        except KeyError:
            raise DifficultyUnavailable(
                f"beatmap {self.beatmap_id} has no attributes for mods {as_mods(key).acronyms() or 'NM'}"
            ) from None

    def to_dict(self) -> Dict[str, object]:
        return {
            "beatmap_id": self.beatmap_id,
            "n_objects": self.n_objects,
            "title": self.title,
            "timelines": {
                str(k): [a.to_dict() for a in snaps] for k, snaps in self.timelines.items()
            },
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, object]) -> "Beatmap":
        timelines: Dict[int, List[DifficultyAttributes]] = {}
        for k, snaps in dict(raw.get("timelines") or {}).items():
            timelines[int(k)] = [DifficultyAttributes.from_dict(s) for s in snaps]
        return cls(
            beatmap_id=int(raw.get("beatmap_id", 0)),
            n_objects=int(raw.get("n_objects", 0)),
            timelines=timelines,
            title=str(raw.get("title") or ""),
        )


class DifficultyProvider(Protocol):
    def calculate(
        self,
        beatmap: Beatmap,
        mods: int,
        passed_objects: Optional[int] = None,
        clock_rate: Optional[float] = None,
    ) -> DifficultyAttributes:
        ...

    def gradual(self, beatmap: Beatmap, mods: int) -> "GradualDifficulty":
        ...


class GradualDifficulty:
    """Pull-based, finite, non-restartable sequence of attribute snapshots.

    ``position`` is the number of objects processed so far. Once exhausted,
    ``next()`` keeps raising ``StopIteration``; build a new instance to
    replay from the start.
    """

    def __init__(self, snapshots: List[DifficultyAttributes], n_objects: int):
        self._snapshots = snapshots
        self._len = min(len(snapshots), max(int(n_objects), 0))
        self._idx = 0

    @property
    def position(self) -> int:
        return self._idx

    def remaining(self) -> int:
        return self._len - self._idx

    def __iter__(self) -> Iterator[DifficultyAttributes]:
        return self

    def __next__(self) -> DifficultyAttributes:
        if self._idx >= self._len:
            raise StopIteration
        snap = self._snapshots[self._idx]
        self._idx += 1
        return snap


class TimelineDifficulty:
    """Provider backed by the precomputed timelines stored on the beatmap."""

    def _checked_timeline(
        self, beatmap: Beatmap, mods: int, clock_rate: Optional[float]
    ) -> List[DifficultyAttributes]:
        snaps = beatmap.timeline(mods)
        if not snaps:
            raise DifficultyUnavailable(f"beatmap {beatmap.beatmap_id} has an empty timeline")
        if clock_rate is not None:
            stored = snaps[-1].clock_rate
            if abs(stored - float(clock_rate)) > CLOCK_RATE_TOLERANCE:
                raise DifficultyUnavailable(
                    f"beatmap {beatmap.beatmap_id} timeline is for clock rate {stored}, not {clock_rate}"
                )
        return snaps

    def calculate(
        self,
        beatmap: Beatmap,
        mods: int,
        passed_objects: Optional[int] = None,
        clock_rate: Optional[float] = None,
    ) -> DifficultyAttributes:
        snaps = self._checked_timeline(beatmap, mods, clock_rate)
        limit = min(len(snaps), max(int(beatmap.n_objects), 0))
        if passed_objects is not None:
            limit = min(limit, max(int(passed_objects), 0))
        if limit <= 0:
            # nothing judged yet: keep the map metadata, zero the per-object parts
            first = snaps[0]
            return DifficultyAttributes(
                ar=first.ar, od=first.od, cs=first.cs, hp=first.hp, clock_rate=first.clock_rate,
            )
        return snaps[limit - 1]

    def gradual(self, beatmap: Beatmap, mods: int) -> GradualDifficulty:
        snaps = self._checked_timeline(beatmap, mods, None)
        log.debug("gradual difficulty for map %s (%d objects)", beatmap.beatmap_id, beatmap.n_objects)
        return GradualDifficulty(snaps, beatmap.n_objects)
