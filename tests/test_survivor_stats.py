from __future__ import annotations

import copy

import pytest

from conftest import make_player
from survivor_stats import MHS_PRESERVE, apply_survivor_stats


@pytest.fixture()
def registry():
    return {
        "Sheogorath": make_player(mhs_survived=5),
        "Loki": make_player(mhs_survived=4, whacks_survived=10),
    }


def test_name_whacks_mhs_and_name_whacks(registry):
    reg, report = apply_survivor_stats(registry, "Sheogorath 196 2 Loki 66")
    assert (reg["Sheogorath"].whacks_survived, reg["Sheogorath"].mhs_survived) == (196, 2)
    assert (reg["Loki"].whacks_survived, reg["Loki"].mhs_survived) == (66, 0)
    assert report.updated == 2
    assert report.not_found == 0


def test_values_are_absolute_not_increments(registry):
    reg, _ = apply_survivor_stats(registry, "Loki 3")
    reg, _ = apply_survivor_stats(reg, "Loki 3")
    assert reg["Loki"].whacks_survived == 3


def test_preserve_policy_keeps_mhs(registry):
    reg, _ = apply_survivor_stats(registry, "Loki 66", mhs_policy=MHS_PRESERVE)
    assert reg["Loki"].mhs_survived == 4
    assert reg["Loki"].whacks_survived == 66


def test_unknown_names_are_reported(registry):
    reg, report = apply_survivor_stats(registry, "Nobody 5 1 Loki 2")
    assert report.not_found == 1
    assert report.not_found_names == ["Nobody"]
    assert "Nobody" not in reg
    assert reg["Loki"].whacks_survived == 2


def test_negative_counts_clamp_to_zero(registry, caplog):
    reg, _ = apply_survivor_stats(registry, "Loki -4 -1")
    assert reg["Loki"].whacks_survived == 0
    assert reg["Loki"].mhs_survived == 0
    assert "clamped" in caplog.text


def test_skipped_tokens_are_counted(registry):
    _, report = apply_survivor_stats(registry, "7 Loki 3 Stray")
    assert report.skipped_tokens == 2
    assert report.updated == 1


def test_does_not_touch_input_or_timestamps(registry):
    snapshot = copy.deepcopy(registry)
    reg, _ = apply_survivor_stats(registry, "Loki 99")
    assert registry == snapshot
    assert reg["Loki"].last_updated == snapshot["Loki"].last_updated


def test_empty_paste_is_a_no_op(registry):
    reg, report = apply_survivor_stats(registry, "")
    assert reg == registry
    assert report.updated == 0


def test_unknown_policy_raises(registry):
    with pytest.raises(ValueError):
        apply_survivor_stats(registry, "Loki 1", mhs_policy="merge")
