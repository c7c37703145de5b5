from __future__ import annotations

import pytest

from name_match import positional_ratio, similarity


def test_identical_ignores_case():
    assert similarity("Bob", "bOB") == 1.0


@pytest.mark.parametrize("a,b", [("Bob", "Bob2"), ("bob22", "BOB"), ("Loki", "loki007")])
def test_numeric_suffix_scores_point_nine(a, b):
    assert similarity(a, b) == 0.9


def test_substring_scores_point_eight():
    assert similarity("Bob", "Bobby") == 0.8
    assert similarity("TheLoki", "loki") == 0.8


def test_positional_ratio_fallback():
    # k-a-t-e vs k-a-r-l: 2 of 4 positions match
    assert similarity("Kate", "Karl") == 0.5
    # s,m,t,h line up; y/i does not; longer length 6
    assert similarity("Smith", "Smythe") == pytest.approx(4 / 6)


def test_positional_ratio_is_order_sensitive():
    assert similarity("abcd", "dcba") == 0.0


def test_regex_characters_in_names_are_literal():
    assert similarity("a.b", "a.b7") == 0.9
    assert similarity("a.b", "axb7") != 0.9


def test_empty_names():
    assert similarity("", "") == 1.0
    assert similarity("", "Bob") == 0.0
    assert positional_ratio("", "") == 0.0
