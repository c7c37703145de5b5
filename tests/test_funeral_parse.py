from __future__ import annotations

import copy
from datetime import datetime

import pytest

from conftest import CITIES, make_player
from funeral_parse import apply_funeral_log
from tracker_common import ConfigurationError

HMRC = "HmRCAucklandUnemployed6/27/2025 7:11:42 AMSuicide"
HMRC_WHEN = datetime(2025, 6, 27, 7, 11, 42)


@pytest.fixture()
def registry():
    return {
        "HmRC": make_player(occupation="Baker", city="Auckland"),
        "Loki": make_player(occupation="Mayor", city="Chicago"),
    }


def test_known_player_is_marked_dead_with_details(registry):
    raw = HMRC + "\nHmRC's last words: see you in the next game"
    reg, report = apply_funeral_log(registry, raw, CITIES)

    p = reg["HmRC"]
    assert p.is_dead is True
    assert p.death_date == HMRC_WHEN
    assert p.cause_of_death == "Suicide"
    assert p.last_words == "see you in the next game"
    assert p.is_currently_hd is False
    assert all(not e.is_current for e in p.career_history)
    assert p.career_history[-1].end_date == HMRC_WHEN

    assert report.processed == 1
    assert report.died == ["HmRC"]
    detail = report.deaths[0]
    assert detail.occupation == "Unemployed"
    assert detail.city == "Auckland"
    assert detail.found is True
    # the roster occupation is not overwritten by the parlor's
    assert p.current_occupation == "Baker"


def test_last_words_line_is_consumed_not_skipped(registry):
    raw = HMRC + "\nHmRC's last words: bye"
    _, report = apply_funeral_log(registry, raw, CITIES)
    assert report.skipped_last_words == 0
    assert report.unparseable == 0


def test_stray_last_words_line_is_skipped(registry):
    _, report = apply_funeral_log(registry, "Loki's last words: nobody died", CITIES)
    assert report.skipped_last_words == 1
    assert report.processed == 0


def test_last_words_for_someone_else_are_not_attached(registry):
    raw = HMRC + "\nLoki's last words: wrong person"
    reg, report = apply_funeral_log(registry, raw, CITIES)
    assert reg["HmRC"].last_words is None
    assert report.skipped_last_words == 1


def test_name_change_is_reported_without_mutation(registry):
    snapshot = copy.deepcopy(registry)
    reg, report = apply_funeral_log(registry, "LokiChicagoMayor6/27/2025 7:11:42 AMName Change", CITIES)
    assert reg == snapshot
    assert report.name_changes == 1
    assert report.died == []
    assert report.deaths[0].is_name_change is True
    assert report.deaths[0].found is True


def test_unknown_player_is_counted(registry):
    reg, report = apply_funeral_log(registry, "GhostChicagoCop6/27/2025 7:11:42 AMShot", CITIES)
    assert report.not_found == 1
    assert "Ghost" not in reg
    assert report.deaths[0].found is False


def test_unparseable_lines_are_counted(registry, caplog):
    raw = "no date here\nHmRCParisBaker6/27/2025 7:11:42 AMShot\n\n" + HMRC
    reg, report = apply_funeral_log(registry, raw, CITIES)
    assert report.unparseable == 2
    assert report.processed == 1
    assert reg["HmRC"].is_dead is True
    assert "date/time" in caplog.text


def test_hd_occupation_in_obituary_sets_was_hd(registry):
    reg, _ = apply_funeral_log(registry, "LokiChicagoHospital Director1/2/2025 3:04:05 PMWhacked", CITIES)
    assert reg["Loki"].was_hd is True
    assert reg["Loki"].is_currently_hd is False


def test_empty_cause_is_stored_as_none(registry):
    reg, _ = apply_funeral_log(registry, "LokiChicagoMayor1/2/2025 3:04:05 PM", CITIES)
    assert reg["Loki"].is_dead is True
    assert reg["Loki"].cause_of_death is None


def test_already_dead_player_gets_funeral_details(registry):
    registry["Loki"].mark_dead(datetime(2025, 1, 1))
    reg, report = apply_funeral_log(registry, "LokiChicagoMayor1/2/2025 3:04:05 PMWhacked", CITIES)
    assert reg["Loki"].cause_of_death == "Whacked"
    assert reg["Loki"].death_date == datetime(2025, 1, 2, 15, 4, 5)
    assert report.processed == 1


def test_multiple_records(registry):
    raw = "\n".join([
        HMRC,
        "HmRC's last words: one",
        "**Loki**ChicagoMayor1/2/2025 3:04:05 PMWhacked",
        "**Loki**'s last words: two",
    ])
    reg, report = apply_funeral_log(registry, raw, CITIES)
    assert sorted(report.died) == ["HmRC", "Loki"]
    assert reg["Loki"].last_words == "two"


def test_input_registry_is_not_mutated(registry):
    snapshot = copy.deepcopy(registry)
    apply_funeral_log(registry, HMRC, CITIES)
    assert registry == snapshot


def test_missing_cities_raise(registry):
    with pytest.raises(ConfigurationError):
        apply_funeral_log(registry, HMRC, None)


def test_name_starting_with_a_city_is_marked_dead():
    registry = {"Chicagoan": make_player(occupation="Mayor", city="Beirut")}
    reg, report = apply_funeral_log(registry, "ChicagoanBeirutMayor6/27/2025 7:11:42 AMShot", CITIES)
    assert reg["Chicagoan"].is_dead is True
    assert reg["Chicagoan"].cause_of_death == "Shot"
    assert report.died == ["Chicagoan"]
    assert report.not_found == 0


def test_was_hd_survives_non_hd_death(registry):
    registry["Loki"].was_hd = True
    reg, _ = apply_funeral_log(registry, "LokiChicagoMayor1/2/2025 3:04:05 PMWhacked", CITIES)
    assert reg["Loki"].is_dead is True
    assert reg["Loki"].was_hd is True


def test_single_asterisk_name_is_found():
    registry = {"Bo*b": make_player()}
    reg, report = apply_funeral_log(registry, "Bo*bChicagoBaker1/2/2025 3:04:05 PMShot", CITIES)
    assert reg["Bo*b"].is_dead is True
    assert report.not_found == 0
