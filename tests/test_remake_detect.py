from __future__ import annotations

from conftest import T1, make_player
from remake_detect import find_remakes


def _dead(city="Chicago"):
    p = make_player(city=city)
    p.is_new = False
    p.mark_dead(T1)
    return p


def _new(city="Chicago"):
    return make_player(city=city)


def test_numeric_suffix_remake_same_city():
    reg = {"Bob": _dead(), "Bob2": _new()}
    out = find_remakes(reg)
    assert len(out) == 1
    c = out[0]
    assert (c.dead, c.new, c.city) == ("Bob", "Bob2", "Chicago")
    assert c.similarity == 0.9


def test_different_city_is_ignored():
    assert find_remakes({"Bob": _dead("Chicago"), "Bob2": _new("Beirut")}) == []


def test_threshold_is_strict():
    # Kate/Karl scores exactly 0.5
    assert find_remakes({"Kate": _dead(), "Karl": _new()}) == []
    assert len(find_remakes({"Kate": _dead(), "Karl": _new()}, threshold=0.4)) == 1


def test_new_but_dead_players_are_not_candidates():
    reg = {"Bob": _dead(), "Bob2": _dead()}
    reg["Bob2"].is_new = True
    assert find_remakes(reg) == []


def test_alive_veterans_are_not_candidates():
    vet = make_player()
    vet.is_new = False
    assert find_remakes({"Bob": _dead(), "Bob2": vet}) == []


def test_ranked_best_first():
    reg = {
        "Loki": _dead(),
        "Lokiz": _new(),     # substring, 0.8
        "Loki9": _new(),     # numeric suffix, 0.9
        "Lola": _new(),      # positional 2/4
    }
    out = find_remakes(reg)
    assert [(c.new, c.similarity) for c in out] == [("Loki9", 0.9), ("Lokiz", 0.8)]


def test_registry_is_read_only():
    reg = {"Bob": _dead(), "Bob2": _new()}
    find_remakes(reg)
    assert reg["Bob2"].is_new is True
    assert reg["Bob"].is_dead is True
