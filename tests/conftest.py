from __future__ import annotations

import pytest

from pp_core.difficulty import Beatmap
from pp_core.mods import Mods
from pp_core.types import DifficultyAttributes, ScoreState


def _object_kind(idx: int) -> str:
    if idx % 50 == 49:
        return "spinner"
    if idx % 4 == 3:
        return "slider"
    return "circle"


def build_timeline(n_objects: int, mods: Mods = Mods(0)) -> list[DifficultyAttributes]:
    """Deterministic cumulative attribute snapshots, one per hit object."""

    rate = mods.clock_rate()
    ar, od = (10.53, 9.75) if rate > 1.0 else (9.3, 8.5)
    if mods.hr():
        ar, od = min(ar * 1.4, 11.0), min(od * 1.4, 11.0)

    snaps: list[DifficultyAttributes] = []
    circles = sliders = spinners = combo = 0
    for idx in range(n_objects):
        kind = _object_kind(idx)
        if kind == "circle":
            circles += 1
            combo += 1
        elif kind == "slider":
            sliders += 1
            combo += 2
        else:
            spinners += 1
            combo += 1
        progress = (idx + 1) / n_objects
        aim = (1.2 + 1.6 * progress) * (1.25 if rate > 1.0 else 1.0)
        speed = (1.0 + 1.3 * progress) * (1.3 if rate > 1.0 else 1.0)
        snaps.append(
            DifficultyAttributes(
                stars=round(aim + speed, 4),
                aim_strain=aim,
                speed_strain=speed,
                flashlight_rating=0.8 + progress,
                slider_factor=0.97,
                aim_difficult_strain_count=5.0 + (idx + 1) / 10.0,
                ar=ar,
                od=od,
                cs=4.0,
                hp=5.0,
                n_circles=circles,
                n_sliders=sliders,
                n_spinners=spinners,
                max_combo=combo,
                clock_rate=rate,
            )
        )
    return snaps


def build_synthetic_beatmap(
    *,
    beatmap_id: int = 4242,
    n_objects: int = 200,
    mods: tuple[Mods, ...] = (Mods(0), Mods.DT, Mods.FL),
) -> Beatmap:
    """Create a deterministic beatmap with timelines for the given mod sets."""

    return Beatmap(
        beatmap_id=beatmap_id,
        n_objects=n_objects,
        title=f"synthetic {beatmap_id}",
        timelines={int(m.difficulty_mask()): build_timeline(n_objects, m) for m in mods},
    )


def full_combo_state(beatmap: Beatmap, passed: int, n100: int = 0, n50: int = 0, misses: int = 0) -> ScoreState:
    snaps = beatmap.timeline(0)
    combo = snaps[passed - 1].max_combo if passed > 0 else 0
    return ScoreState(
        max_combo=combo if misses == 0 else combo // (misses + 1),
        n300=passed - n100 - n50 - misses,
        n100=n100,
        n50=n50,
        misses=misses,
    )


@pytest.fixture
def beatmap() -> Beatmap:
    return build_synthetic_beatmap()


@pytest.fixture
def attributes() -> DifficultyAttributes:
    return build_timeline(1000)[-1]
