from __future__ import annotations

import pytest

from pp_core.mods import Mods, as_mods


@pytest.mark.parametrize(
    "text, expected",
    [
        ("HDDT", Mods.HD | Mods.DT),
        ("+hd,hr", Mods.HD | Mods.HR),
        ("NM", Mods(0)),
        ("", Mods(0)),
        ("RXHDFL", Mods.RX | Mods.HD | Mods.FL),
    ],
)
def test_from_acronyms(text, expected):
    assert Mods.from_acronyms(text) == expected


def test_acronyms_in_bit_order():
    assert (Mods.DT | Mods.HD).acronyms() == "HDDT"
    assert Mods(0).acronyms() == ""


@pytest.mark.parametrize(
    "mods, rate",
    [(Mods(0), 1.0), (Mods.DT, 1.5), (Mods.NC, 1.5), (Mods.HT, 0.75), (Mods.HD | Mods.HR, 1.0)],
)
def test_clock_rate(mods, rate):
    assert mods.clock_rate() == rate


def test_difficulty_mask_drops_cosmetic_mods():
    assert (Mods.HD | Mods.DT | Mods.NF).difficulty_mask() == Mods.DT
    assert (Mods.NC | Mods.DT | Mods.HD).difficulty_mask() == Mods.DT
    assert Mods.NC.difficulty_mask() == Mods.DT
    assert (Mods.RX | Mods.SO | Mods.AP).difficulty_mask() == Mods(0)
    assert (Mods.HR | Mods.FL).difficulty_mask() == Mods.HR | Mods.FL


def test_predicates():
    mods = Mods.NC | Mods.RX
    assert mods.dt() and mods.rx()
    assert not mods.hd()
    assert not Mods(0).ap()


def test_as_mods_drops_unknown_bits():
    assert as_mods(72) == Mods.HD | Mods.DT
    assert as_mods(2048 | 8) == Mods.HD
    assert as_mods(Mods.FL) is Mods.FL
