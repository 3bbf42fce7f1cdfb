#!/usr/bin/env python3
"""
Tests for the games query language
"""

import pytest

from scorebot.games_query import DisplayOrder, Query, QueryParser, QueryTime, shortcut


@pytest.fixture
def parser():
    return QueryParser()


def test_plain_terms(parser):
    query = parser.parse("anderlecht brugge")
    assert query.free_terms == ("anderlecht", "brugge")
    assert query.time_filter == QueryTime.SLIDING_WINDOW
    assert query.display_order == DisplayOrder.COUNTRY_COMPETITION


def test_multi_word_country(parser):
    query = parser.parse("--country San Marino")
    assert query.country == "San Marino"
    assert query.free_terms == ()


def test_competition_before_country(parser):
    query = parser.parse("--competition Group K --country Italy")
    assert query.competition == "Group K"
    assert query.country == "Italy"


def test_modifiers_are_consumed_while_capturing(parser):
    query = parser.parse("--country San Marino @today")
    assert query.country == "San Marino"
    assert query.time_filter == QueryTime.TODAY


def test_shortcuts_are_not_applied_while_capturing(parser):
    query = parser.parse("--competition epl")
    assert query.competition == "epl"
    assert query.country is None


def test_bare_directive_pins_nothing(parser):
    query = parser.parse("--country")
    assert query.country is None


@pytest.mark.parametrize("text", ["epl", "EPL", "bpl", "Epl"])
def test_premier_league_shortcut_is_case_insensitive(parser, text):
    query = parser.parse(text)
    assert (query.country, query.competition) == ("England", "Premier League")
    assert query.free_terms == ()


def test_token_order_does_not_matter(parser):
    assert parser.parse("epl @yday") == parser.parse("@yday epl")
    assert parser.parse("epl @yday").time_filter == QueryTime.YESTERDAY


@pytest.mark.parametrize("text,country,competition", [
    ("liga", "Spain", "LaLiga"),
    ("laliga", "Spain", "LaLiga"),
    ("lliga", "Spain", "LaLiga"),
    ("cl", "Champions League", None),
    ("ucl", "Champions League", None),
    ("uel", "Europa League", None),
    ("ecl", "Europa Conference League", None),
    ("bundesliga", "Germany", "Bundesliga"),
    ("serie-a", "Italy", "Serie A"),
    ("seriea", "Italy", "Serie A"),
    ("mls", "USA", "MLS"),
])
def test_competition_shortcuts(parser, text, country, competition):
    query = parser.parse(text)
    assert (query.country, query.competition) == (country, competition)


def test_psg_expands_to_terms(parser):
    assert parser.parse("psg").free_terms == ("Paris", "Saint-Germain")


@pytest.mark.parametrize("text", ["wc", "worldcup", "world-cup"])
def test_world_cup_is_ordered_by_time(parser, text):
    query = parser.parse(text)
    assert query.country == "World Cup"
    assert query.display_order == DisplayOrder.TIME


@pytest.mark.parametrize("text", ["wwc", "women-world-cup", "womens-world-cup"])
def test_womens_world_cup(parser, text):
    query = parser.parse(text)
    assert query.country == "Women's World Cup"
    assert query.display_order == DisplayOrder.TIME


def test_many_spaces_are_ignored(parser):
    assert parser.parse("  anderlecht    brugge  ").free_terms == ("anderlecht", "brugge")
    assert parser.parse("") == Query()


@pytest.mark.parametrize("modifier,expected", [
    ("@today", QueryTime.TODAY),
    ("@now", QueryTime.LIVE),
    ("@LIVE", QueryTime.LIVE),
    ("@tomorrow", QueryTime.TOMORROW),
    ("@yesterday", QueryTime.YESTERDAY),
    ("@finished", QueryTime.FINISHED),
    ("@past", QueryTime.FINISHED),
    ("@done", QueryTime.FINISHED),
    ("@upcoming", QueryTime.UPCOMING),
    ("@soon", QueryTime.UPCOMING),
])
def test_time_modifiers(parser, modifier, expected):
    assert parser.parse(f"genk {modifier}").time_filter == expected


def test_last_time_modifier_wins(parser):
    assert parser.parse("@today @live").time_filter == QueryTime.LIVE


def test_order_modifier_and_unknown_modifier(parser):
    query = parser.parse("@bytime @whenever")
    assert query.display_order == DisplayOrder.TIME
    assert query.free_terms == ("@whenever",)


def test_injected_shortcut_table():
    parser = QueryParser(shortcuts=[shortcut(r"jpl", "Belgium", "Pro League")])
    assert parser.parse("jpl").country == "Belgium"
    assert parser.parse("epl").free_terms == ("epl",)
