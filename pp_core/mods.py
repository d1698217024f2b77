# pp_core/mods.py
from __future__ import annotations
from enum import IntFlag


class Mods(IntFlag):
    NF = 1
    EZ = 2
    TD = 4
    HD = 8
    HR = 16
    SD = 32
    DT = 64
    RX = 128
    HT = 256
    NC = 512
    FL = 1024
    SO = 4096
    AP = 8192
    PF = 16384

    def nf(self) -> bool: return bool(self & Mods.NF)
    def ez(self) -> bool: return bool(self & Mods.EZ)
    def td(self) -> bool: return bool(self & Mods.TD)
    def hd(self) -> bool: return bool(self & Mods.HD)
    def hr(self) -> bool: return bool(self & Mods.HR)
    def dt(self) -> bool: return bool(self & (Mods.DT | Mods.NC))
    def rx(self) -> bool: return bool(self & Mods.RX)
    def ht(self) -> bool: return bool(self & Mods.HT)
    def fl(self) -> bool: return bool(self & Mods.FL)
    def so(self) -> bool: return bool(self & Mods.SO)
    def ap(self) -> bool: return bool(self & Mods.AP)

    def clock_rate(self) -> float:
        if self.dt():
            return 1.5
        if self.ht():
            return 0.75
        return 1.0

    def difficulty_mask(self) -> "Mods":
        """Only the mods that change difficulty attributes. NC counts as DT."""

        mask = self & _DIFFICULTY_MODS
        if self & Mods.NC:
            mask |= Mods.DT
        return mask

    @classmethod
    def from_acronyms(cls, text: str) -> "Mods":
        """Parse ``"HDDT"`` / ``"HD,DT"`` / ``"+HDDT"`` into a bitmask.

        Unknown acronyms are ignored.
        """

        raw = "".join(ch for ch in (text or "").upper() if ch.isalpha())
        out = cls(0)
        for i in range(0, len(raw) - 1, 2):
            member = cls.__members__.get(raw[i : i + 2])
            if member is not None:
                out |= member
        return out

    def acronyms(self) -> str:
        return "".join(m.name for m in Mods if m.name and self & m)


_DIFFICULTY_MODS = Mods.EZ | Mods.TD | Mods.HR | Mods.DT | Mods.HT | Mods.FL


def as_mods(value: int | Mods) -> Mods:
    return value if isinstance(value, Mods) else Mods(int(value) & _ALL_MODS)


_ALL_MODS = sum(int(m) for m in Mods)
