from __future__ import annotations

import copy

import pytest

import registry_actions as actions
from conftest import CITIES, T1, T2, make_player


@pytest.fixture()
def registry():
    dead = make_player(city="Beirut")
    dead.mark_dead(T1)
    return {"Bob": make_player(), "Ann": make_player(city="Beirut"), "Zed": dead}


def test_add_player_sets_new_and_one_career(registry):
    reg = actions.add_player(registry, " Cid ", "Combat Medic", "Soldier", "Auckland", CITIES, now=T2)
    cid = reg["Cid"]
    assert cid.is_new is True
    assert cid.was_hd is True and cid.is_currently_hd is True
    assert len(cid.career_history) == 1
    assert cid.first_seen == T2
    assert "Cid" not in registry


@pytest.mark.parametrize("args", [
    ("Bob", "Baker", "Chief", "Chicago"),      # duplicate
    ("Cid", "Baker", "Chief", "Paris"),        # invalid city
    ("", "Baker", "Chief", "Chicago"),         # missing name
    ("Cid", "", "Chief", "Chicago"),           # missing occupation
])
def test_add_player_rejects(registry, args):
    with pytest.raises(ValueError):
        actions.add_player(registry, *args, CITIES)


def test_delete_player(registry):
    reg = actions.delete_player(registry, "Bob")
    assert "Bob" not in reg
    assert "Bob" in registry
    with pytest.raises(KeyError):
        actions.delete_player(registry, "Nobody")


def test_remove_dead_players(registry):
    reg, removed = actions.remove_dead_players(registry)
    assert removed == 1
    assert set(reg) == {"Bob", "Ann"}


def test_toggle_flag_by_store_key_and_attribute(registry):
    reg = actions.toggle_flag(registry, "Bob", "isOps")
    assert reg["Bob"].is_ops is True
    reg = actions.toggle_flag(reg, "Bob", "is_ops")
    assert reg["Bob"].is_ops is False
    assert registry["Bob"].is_ops is False


def test_manual_was_hd_toggle_can_clear(registry):
    registry["Bob"].was_hd = True
    reg = actions.toggle_flag(registry, "Bob", "wasHD")
    assert reg["Bob"].was_hd is False


def test_toggle_rejects_unknown_field_and_name(registry):
    with pytest.raises(ValueError):
        actions.toggle_flag(registry, "Bob", "isDead")
    with pytest.raises(KeyError):
        actions.toggle_flag(registry, "Nobody", "isOps")


def test_bulk_toggle_ignores_unknown_and_duplicates(registry):
    reg, count = actions.bulk_toggle(registry, ["Bob", "Nobody", "Ann", "Bob"], "isFriendly")
    assert count == 2
    assert reg["Bob"].is_friendly is True
    assert reg["Ann"].is_friendly is True


def test_set_notes(registry):
    reg = actions.set_notes(registry, "Ann", "claims doc")
    assert reg["Ann"].notes == "claims doc"
    assert registry["Ann"].notes == ""


def test_set_city_validates_and_keeps_history(registry):
    reg = actions.set_city(registry, "Bob", "Auckland", CITIES)
    assert reg["Bob"].current_city == "Auckland"
    assert len(reg["Bob"].career_history) == 1
    with pytest.raises(ValueError):
        actions.set_city(registry, "Bob", "Paris", CITIES)


def test_set_combat_stat(registry):
    reg = actions.set_combat_stat(registry, "Bob", "mhsSurvived", 3)
    assert reg["Bob"].mhs_survived == 3
    with pytest.raises(ValueError):
        actions.set_combat_stat(registry, "Bob", "whacksSurvived", -1)
    with pytest.raises(ValueError):
        actions.set_combat_stat(registry, "Bob", "notes", 1)


def test_recalculate_cm_status_upgrades_from_history(registry):
    registry["Ann"].career_history[0].occupation = "Hospital Director"
    registry["Bob"].was_hd = True
    before = copy.deepcopy(registry)

    reg, changed = actions.recalculate_cm_status(registry)
    assert changed == 1
    assert reg["Ann"].was_hd is True
    assert reg["Bob"].was_hd is True   # never downgraded
    assert registry == before
