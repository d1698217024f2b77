from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict


@dataclass(frozen=True)
class ScoreState:
    """Cumulative hit results of a score so far.

    ``max_combo`` is the best combo the player has reached, **not** the
    maximum combo of the map. ``n_geki``/``n_katu`` are the section-end
    variants of 300s/100s; they never count toward combo or osu!standard pp
    and may be left at zero.
    """

    max_combo: int = 0
    n_geki: int = 0
    n300: int = 0
    n_katu: int = 0
    n100: int = 0
    n50: int = 0
    misses: int = 0


@dataclass(frozen=True)
class DifficultyAttributes:
    stars: float = 0.0
    aim_strain: float = 0.0
    speed_strain: float = 0.0
    flashlight_rating: float = 0.0
    slider_factor: float = 1.0
    aim_difficult_strain_count: float = 0.0
    ar: float = 0.0
    od: float = 0.0
    cs: float = 0.0
    hp: float = 0.0
    n_circles: int = 0
    n_sliders: int = 0
    n_spinners: int = 0
    max_combo: int = 0
    clock_rate: float = 1.0

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, object]) -> "DifficultyAttributes":
        known = set(cls.__dataclass_fields__)
        return cls(**{k: v for k, v in raw.items() if k in known})


@dataclass(frozen=True)
class PerformanceAttributes:
    difficulty: DifficultyAttributes
    pp: float = 0.0
    pp_aim: float = 0.0
    pp_speed: float = 0.0
    pp_acc: float = 0.0
    pp_flashlight: float = 0.0
    effective_miss_count: int = 0

    def stars(self) -> float:
        return self.difficulty.stars

    def to_dict(self) -> Dict[str, object]:
        """JSON-friendly representation used by the API and CLI tools."""

        return {
            "pp": self.pp,
            "pp_aim": self.pp_aim,
            "pp_speed": self.pp_speed,
            "pp_acc": self.pp_acc,
            "pp_flashlight": self.pp_flashlight,
            "effective_miss_count": self.effective_miss_count,
            "stars": self.difficulty.stars,
            "difficulty": self.difficulty.to_dict(),
        }
