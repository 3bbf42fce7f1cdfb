#!/usr/bin/env python3
"""
Tests for provider response parsing
"""

from datetime import datetime, timedelta, timezone

import pytest

import scorebot.providers.espn as espn_module
from scorebot.models import GameStatus
from scorebot.providers.base import FetchError, ParseError
from scorebot.providers.clubelo import ClubEloProvider
from scorebot.providers.espn import EspnFixturesProvider
from scorebot.providers.soccerway import SoccerwayTableProvider
from scorebot.providers.strava import StravaClubProvider
from scorebot.providers.uefa import UefaFantasyProvider, UefaPredictorProvider
from scorebot.timed_cache import TimedCache


CLUBELO_CSV = """Rank,Club,Country,Level,Elo,From,To
1,Man City,ENG,1,2050.53,2024-03-08,2024-03-10
2,Real Madrid,ESP,1,1985.1,2024-03-08,2024-03-10
None,Genk,BEL,1,1560.0,2024-03-08,2024-03-10
"""

SOCCERWAY_ROW = (
    "<tr><td>{rank}</td><td></td><td>{team}</td><td>30</td><td>{win}</td><td>5</td>"
    "<td>5</td><td>60</td><td>30</td><td>+30</td><td>{points}</td></tr>"
)

SOCCERWAY_HTML = f"""
<html><body>
<table class="leaguetable sortable table detailed-table">
<thead><tr><th>#</th></tr></thead>
<tbody>
{SOCCERWAY_ROW.format(rank=1, team="Genk", win=20, points=65)}
{SOCCERWAY_ROW.format(rank=2, team="Club Brugge", win=19, points=62)}
<tr><td colspan="11">Relegation</td></tr>
</tbody>
</table>
</body></html>
"""


def espn_event(home="Genk", away="Standard", state="post", name="STATUS_FULL_TIME",
               home_score="2", away_score="1", clock="90'"):
    return {
        'id': '1',
        'date': '2024-03-10T14:00Z',
        'status': {'displayClock': clock, 'type': {'name': name, 'state': state}},
        'competitions': [{
            'competitors': [
                {'homeAway': 'home', 'score': home_score, 'team': {'displayName': home}},
                {'homeAway': 'away', 'score': away_score, 'team': {'displayName': away}},
            ],
        }],
    }


def test_clubelo_parse_assigns_ranks_by_position():
    ranking = ClubEloProvider.parse(CLUBELO_CSV)
    assert [entry.rank for entry in ranking] == [1, 2, 3]
    assert ranking[2].label == "Genk"
    assert ranking[0].elo == pytest.approx(2050.53)
    assert ranking[1].country == "ESP"


def test_clubelo_parse_rejects_unexpected_shapes():
    with pytest.raises(ParseError):
        ClubEloProvider.parse("<html>maintenance</html>")
    with pytest.raises(ParseError):
        ClubEloProvider.parse("Rank,Club,Country,Level,Elo\n1,Genk,BEL,1,lots\n")


def test_clubelo_ranking_url():
    day = datetime(2024, 3, 10, tzinfo=timezone.utc)
    assert ClubEloProvider().ranking_url(day) == "http://api.clubelo.com/2024-03-10"


@pytest.mark.asyncio
async def test_clubelo_fetch_parses_downloaded_text(monkeypatch):
    provider = ClubEloProvider()

    async def fake_fetch_text(url, headers=None):
        return CLUBELO_CSV

    monkeypatch.setattr(provider, 'fetch_text', fake_fetch_text)
    ranking = await provider.fetch()
    assert len(ranking) == 3


def test_soccerway_parse_table_rows():
    table = SoccerwayTableProvider.parse(SOCCERWAY_HTML)
    assert [(entry.rank, entry.label, entry.points) for entry in table] == [(1, "Genk", 65), (2, "Club Brugge", 62)]
    assert table[0].goal_difference == 30
    assert table[1].win == 19


def test_soccerway_parse_page_without_table():
    assert SoccerwayTableProvider.parse("<html><body>Nothing here</body></html>") == []


def test_espn_parse_finished_event():
    game = EspnFixturesProvider.parse_event(espn_event())
    assert (game.home, game.away) == ("Genk", "Standard")
    assert game.status == GameStatus.ENDED
    assert (game.home_score, game.away_score) == (2, 1)
    assert game.start_time == datetime(2024, 3, 10, 14, 0, tzinfo=timezone.utc)


def test_espn_parse_live_and_halftime():
    live = EspnFixturesProvider.parse_event(espn_event(state="in", name="STATUS_IN_PROGRESS", clock="67'"))
    assert live.status == GameStatus.ONGOING
    assert live.elapsed == "67'"

    halftime = EspnFixturesProvider.parse_event(espn_event(state="in", name="STATUS_HALFTIME"))
    assert halftime.elapsed == "HT"


def test_espn_parse_upcoming_has_no_score():
    game = EspnFixturesProvider.parse_event(espn_event(state="pre", name="STATUS_SCHEDULED",
                                                       home_score="0", away_score="0"))
    assert game.status == GameStatus.UPCOMING
    assert game.home_score is None


def test_espn_parse_postponed():
    game = EspnFixturesProvider.parse_event(espn_event(state="post", name="STATUS_POSTPONED"))
    assert game.status == GameStatus.POSTPONED


def test_espn_parse_malformed_event():
    assert EspnFixturesProvider.parse_event({'id': '2', 'competitions': []}) is None


def test_espn_extract_score_shapes():
    assert EspnFixturesProvider.extract_score({'score': '3'}) == 3
    assert EspnFixturesProvider.extract_score({'score': {'value': 2.0, 'displayValue': '2'}}) == 2
    assert EspnFixturesProvider.extract_score({'score': ''}) is None
    assert EspnFixturesProvider.extract_score({}) is None


def test_espn_build_tree_groups_by_country():
    tree = EspnFixturesProvider.build_tree([
        ('Belgium', 'Pro League', {'events': [espn_event()]}),
        ('England', 'Premier League', {'events': [espn_event("Arsenal", "Chelsea")]}),
        ('England', 'Championship', {'events': []}),
        ('England', 'FA Cup', {'events': [espn_event("Leeds", "Burnley")]}),
    ])
    assert [country.name for country in tree.countries] == ['Belgium', 'England']
    assert [comp.name for comp in tree.countries[1].competitions] == ['Premier League', 'FA Cup']


@pytest.mark.asyncio
async def test_espn_fetch_skips_failing_leagues(monkeypatch):
    provider = EspnFixturesProvider({'bel.1': ('Belgium', 'Pro League'), 'eng.1': ('England', 'Premier League')})

    def fake_scoreboard(league):
        if league == 'eng.1':
            raise FetchError("HTTP 503")
        return {'events': [espn_event()]}

    monkeypatch.setattr(provider, 'fetch_scoreboard', fake_scoreboard)
    tree = await provider.fetch()
    assert [country.name for country in tree.countries] == ['Belgium']


@pytest.mark.asyncio
async def test_espn_fetch_fails_when_every_league_fails(monkeypatch):
    provider = EspnFixturesProvider({'bel.1': ('Belgium', 'Pro League')})

    def fake_scoreboard(league):
        raise FetchError("HTTP 503")

    monkeypatch.setattr(provider, 'fetch_scoreboard', fake_scoreboard)
    with pytest.raises(FetchError):
        await provider.fetch()


def test_espn_scoreboard_url():
    now = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)
    url = EspnFixturesProvider().scoreboard_url('bel.1', now)
    assert url.endswith("/soccer/bel.1/scoreboard?dates=20240309-20240311")


def test_uefa_fantasy_parse():
    payload = {'data': {'value': {'rest': [
        {'teamName': 'Red Devils', 'fullName': 'A', 'overallPoints': '321', 'rankNo': 1},
        {'teamName': 'Late Joiner', 'fullName': 'B', 'overallPoints': None, 'rankNo': 2},
    ]}}}
    ranking = UefaFantasyProvider.parse(payload)
    assert [(entry.rank, entry.label, entry.points) for entry in ranking] == [
        (1, 'Red Devils', '321'), (2, 'Late Joiner', ''),
    ]


def test_uefa_fantasy_error_payload():
    with pytest.raises(FetchError):
        UefaFantasyProvider.parse({'status': 401, 'title': 'Unauthorized'})
    with pytest.raises(ParseError):
        UefaFantasyProvider.parse({'data': {}})


def test_uefa_predictor_parse():
    payload = {'data': {'items': [
        {'position': 1, 'points': 40, 'current_md_points': 7, 'gh_user_data': {'username': 'bob'}},
        {'position': 2, 'points': 35, 'current_md_points': None, 'gh_user_data': {'username': 'eve'}},
    ]}}
    ranking = UefaPredictorProvider.parse(payload)
    assert [(entry.label, entry.points, entry.matchday_points) for entry in ranking] == [
        ('bob', 40, 7), ('eve', 35, 0),
    ]
    with pytest.raises(ParseError):
        UefaPredictorProvider.parse({'data': {'items': [{'position': 1}]}})


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


def test_espn_scoreboard_with_list_body_is_a_parse_error(monkeypatch):
    monkeypatch.setattr(espn_module.requests, 'get', lambda url, **kwargs: FakeResponse([1, 2, 3]))
    with pytest.raises(ParseError):
        EspnFixturesProvider().fetch_scoreboard('bel.1')

    monkeypatch.setattr(espn_module.requests, 'get', lambda url, **kwargs: FakeResponse({'events': 'none'}))
    with pytest.raises(ParseError):
        EspnFixturesProvider().fetch_scoreboard('bel.1')


def test_espn_malformed_shapes_never_escape_as_other_errors():
    with pytest.raises(ParseError):
        EspnFixturesProvider.build_tree([('Belgium', 'Pro League', [])])
    assert EspnFixturesProvider.parse_event("junk") is None
    assert EspnFixturesProvider.parse_event({'id': '3', 'competitions': [{'competitors': ['home', 'away']}]}) is None
    assert EspnFixturesProvider.parse_event({'id': '4', 'competitions': 'none', 'date': 5}) is None


@pytest.mark.asyncio
async def test_malformed_scoreboards_keep_the_cached_tree(monkeypatch):
    monkeypatch.setattr(espn_module.requests, 'get', lambda url, **kwargs: FakeResponse(["not", "a", "dict"]))
    provider = EspnFixturesProvider({'bel.1': ('Belgium', 'Pro League')})
    with pytest.raises(FetchError):
        await provider.fetch()

    cache = TimedCache(timedelta(minutes=1), default=None, name="games")
    old_tree = EspnFixturesProvider.build_tree([('Belgium', 'Pro League', {'events': [espn_event()]})])
    cache.refresh(old_tree, now=datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc))

    assert not await cache.refresh_if_stale(provider.fetch, now=datetime(2024, 3, 10, 13, 0, tzinfo=timezone.utc))
    assert cache.value is old_tree


def test_uefa_wrong_item_types_are_parse_errors():
    with pytest.raises(ParseError):
        UefaFantasyProvider.parse({'data': {'value': {'rest': ['x']}}})
    with pytest.raises(ParseError):
        UefaFantasyProvider.parse([])
    with pytest.raises(ParseError):
        UefaPredictorProvider.parse({'data': {'items': [{'position': 1, 'gh_user_data': 'bob'}]}})


def test_clubelo_unreadable_csv_is_a_parse_error():
    with pytest.raises(ParseError):
        ClubEloProvider.parse("Rank,Club,Country,Level,Elo\n1," + "x" * 200000 + ",BEL,1,1500\n")


STRAVA_LEADERBOARD = {'data': [
    {'athlete_id': 7, 'athlete_firstname': 'ward', 'distance': 10000.0, 'moving_time': 3000,
     'elev_gain': 100.0, 'velocity': 3.33},
    {'athlete_id': 8, 'athlete_firstname': 'eve', 'distance': 5000.0, 'moving_time': 1500,
     'elev_gain': None, 'velocity': 3.33},
]}


def test_strava_parse_leaderboard():
    athletes = StravaClubProvider.parse(STRAVA_LEADERBOARD)
    assert [(athlete.rank, athlete.label, athlete.athlete_id) for athlete in athletes] == [(1, 'ward', 7), (2, 'eve', 8)]
    assert athletes[0].moving_time == 3000
    assert athletes[1].elev_gain == 0.0


def test_strava_parse_rejects_unexpected_shapes():
    with pytest.raises(ParseError):
        StravaClubProvider.parse({'error': 'not a member'})
    with pytest.raises(ParseError):
        StravaClubProvider.parse({'data': ['ward']})
    with pytest.raises(ParseError):
        StravaClubProvider.parse({'data': [{'athlete_id': 'x', 'athlete_firstname': 'ward'}]})


@pytest.mark.asyncio
async def test_strava_fetch_asks_for_json(monkeypatch):
    provider = StravaClubProvider("223460")
    requests_made = []

    async def fake_fetch_json(url, headers=None):
        requests_made.append((url, headers))
        return STRAVA_LEADERBOARD

    monkeypatch.setattr(provider, 'fetch_json', fake_fetch_json)
    athletes = await provider.fetch()

    assert len(athletes) == 2
    url, headers = requests_made[0]
    assert url == "https://www.strava.com/clubs/223460/leaderboard"
    assert headers['X-Requested-With'] == 'XmlHttpRequest'
    assert headers['Accept'].startswith('text/javascript')


@pytest.mark.asyncio
async def test_strava_without_club_is_a_fetch_error():
    with pytest.raises(FetchError):
        await StravaClubProvider("").fetch()
