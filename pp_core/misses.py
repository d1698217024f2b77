from __future__ import annotations
import math
from typing import Optional

from .types import DifficultyAttributes


def effective_miss_count(
    attributes: DifficultyAttributes,
    combo: Optional[int],
    misses: int,
    total_hits: float,
) -> int:
    """Guess misses + slider breaks from the combo deficit.

    Sliders often lose a bit of combo even on a full combo, so the threshold
    sits 0.1 combo per slider below the map's max combo. The estimate is
    clamped to ``total_hits`` and never undercuts the raw miss count.
    """

    combo_based = 0.0

    if attributes.n_sliders > 0:
        full_combo_threshold = attributes.max_combo - 0.1 * attributes.n_sliders
        if combo is not None and combo < full_combo_threshold:
            combo_based = full_combo_threshold / max(float(combo), 1.0)

    combo_based = min(combo_based, float(total_hits))

    return max(int(misses), int(math.floor(combo_based)))
