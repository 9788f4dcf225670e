from datetime import date, datetime

import pytest

from playerratings.exceptions import PlayerRatingsException
from playerratings.models import LeagueData, Match, Player, RankRecord, Tournament
from playerratings.models.tournament import TournamentParticipant
from playerratings.tournament import build_tournament_report


def _game(mid, when, first, second, tournament_id, round_number):
    return Match(
        mid,
        when,
        first,
        second,
        1,
        0,
        tournament_id=tournament_id,
        round=round_number,
        name=f"SWA {tournament_id}",
    )


def _league():
    players = [
        Player(
            "a",
            display_name="Alice",
            rankings=[
                RankRecord("1D"),
                RankRecord(
                    "2D", effective_date=date(2024, 6, 1), id="r-a", tournament_id="t1"
                ),
            ],
        ),
        Player("b", display_name="Bob", rankings=[RankRecord("1D")]),
        Player("c", display_name="Carol", rankings=[RankRecord("1D")]),
        Player("d", display_name="Dave", rankings=[RankRecord("1D")]),
    ]
    tournaments = [
        Tournament("t0", "Winter Cup"),
        Tournament(
            "t1",
            "Summer Open",
            organizer="SWA",
            participants=[
                TournamentParticipant("a", promotion_rank_id="r-a"),
                TournamentParticipant("b"),
                TournamentParticipant("c"),
                TournamentParticipant("d", position=3),
            ],
        ),
    ]
    matches = [
        _game("w1", datetime(2024, 1, 15, 10), "b", "a", "t0", 1),
        _game("w2", datetime(2024, 1, 15, 10), "d", "c", "t0", 1),
        _game("s1", datetime(2024, 6, 1, 10), "a", "b", "t1", 1),
        _game("s2", datetime(2024, 6, 1, 10), "c", "d", "t1", 1),
        _game("s3", datetime(2024, 6, 1, 12), "a", "c", "t1", 2),
        _game("s4", datetime(2024, 6, 1, 12), "b", "d", "t1", 2),
    ]
    return LeagueData(
        name="Test",
        players={p.id: p for p in players},
        tournaments={t.id: t for t in tournaments},
        matches=matches,
    )


def test_report_positions_and_order():
    report = build_tournament_report(_league(), "t1")

    rows = {r.player_id: r for r in report.participants}
    assert {pid: r.calculated_position for pid, r in rows.items()} == {
        "a": 1,
        "b": 2,
        "c": 2,
        "d": 4,
    }
    assert rows["d"].display_position == 3
    assert not rows["d"].is_calculated_position
    assert rows["a"].is_calculated_position
    assert [r.player_id for r in report.participants] == ["a", "b", "c", "d"]
    assert rows["a"].standing.record_text() == "2-0"
    assert rows["a"].rank_before.grade == "1D"


def test_report_rating_changes():
    report = build_tournament_report(_league(), "t1")
    rows = {r.player_id: r for r in report.participants}

    assert all(r.ranked_before and r.ranked_after for r in rows.values())
    assert rows["a"].rating_change > 0
    assert rows["d"].rating_change < 0
    assert rows["a"].rating_change == pytest.approx(
        rows["a"].rating_after - rows["a"].rating_before
    )


def test_report_promotion_bonus():
    report = build_tournament_report(_league(), "t1")
    rows = {r.player_id: r for r in report.participants}

    assert rows["a"].promotion.grade == "2D"
    assert rows["a"].promotion_bonus > 0
    assert rows["a"].promotion_display.startswith("2D +")
    assert rows["b"].promotion is None
    assert rows["b"].promotion_display is None


def test_report_match_rows():
    report = build_tournament_report(_league(), "t1")

    assert report.max_rounds == 2
    assert [m.match.id for m in report.matches] == ["s1", "s2", "s3", "s4"]
    first = report.matches[0]
    assert first.first_shift > 0
    assert first.second_shift < 0
    assert first.first_rating_before is not None
    assert report.start == datetime(2024, 6, 1, 10)
    assert report.end == datetime(2024, 6, 1, 12)


def test_empty_tournament():
    league = _league()
    league.tournaments["t2"] = Tournament(
        "t2", "Autumn", participants=[TournamentParticipant("b")]
    )
    report = build_tournament_report(league, "t2")

    assert report.matches == []
    assert report.max_rounds == 0
    assert [r.player_id for r in report.participants] == ["b"]
    assert report.participants[0].rating_change is None


def test_unknown_tournament():
    with pytest.raises(PlayerRatingsException):
        build_tournament_report(_league(), "nope")
