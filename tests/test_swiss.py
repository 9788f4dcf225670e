from datetime import datetime

from playerratings.models import Match
from playerratings.tournament import SwissScorer, calculate_standings


def _round(number, *pairings):
    """Matches of one round; ``(winner, None)`` is a bye win."""
    matches = []
    for index, (first, second) in enumerate(pairings):
        matches.append(
            Match(
                id=f"r{number}-{index}",
                timestamp=datetime(2024, 6, 1, 9 + number),
                first_player_id=first,
                second_player_id=second,
                first_player_score=1,
                second_player_score=0,
                tournament_id="t1",
                round=number,
            )
        )
    return matches


def _positions(records):
    return {r.player_id: r.position for r in records}


def test_four_player_standings():
    matches = _round(1, ("x", "y"), ("z", "w")) + _round(
        2, ("x", "z"), ("y", None), ("w", None)
    )
    standings = calculate_standings(matches)

    assert [r.player_id for r in standings] == ["x", "z", "y", "w"]
    assert _positions(standings) == {"x": 1, "z": 2, "y": 3, "w": 4}

    by_id = {r.player_id: r for r in standings}
    assert by_id["x"].record_text() == "2-0"
    assert by_id["z"].sos == 3
    assert by_id["y"].sos == 2
    assert by_id["w"].sos == 1
    assert by_id["y"].opponents == ["x"]


def test_all_undefeated_players_share_first_place():
    matches = _round(1, ("a", "d"), ("b", None), ("c", None))
    standings = SwissScorer().score(matches)

    assert _positions(standings) == {"a": 1, "b": 1, "c": 1, "d": 4}
    assert standings[0].player_id == "a"


def test_fully_tied_defeated_players_share_a_position():
    standings = calculate_standings(_round(1, ("p", "q"), ("r", "s")))
    assert _positions(standings) == {"p": 1, "r": 1, "q": 3, "s": 3}


def test_draws_count_half_and_are_not_undefeated():
    draw = Match("d1", datetime(2024, 6, 1, 10), "a", "b", 1, 1, round=1)
    standings = calculate_standings([draw])

    record = standings[0]
    assert record.wins == 0.5
    assert record.draws == 1
    assert not record.is_undefeated
    assert record.record_text() == "0-0-1"
    assert _positions(standings) == {"a": 1, "b": 1}


def test_byes_do_not_count_towards_points():
    game = Match("g1", datetime(2024, 6, 1, 10), "a", "b", 185, 176, round=1)
    bye = Match("g2", datetime(2024, 6, 1, 12), "a", None, 1, 0, round=2)
    record = {r.player_id: r for r in calculate_standings([bye, game])}["a"]

    assert record.points_for == 185
    assert record.points_against == 176
    assert record.point_differential == 9
    assert record.win_count == 2
    assert [r.round for r in record.rounds] == [1, 2]
    assert record.rounds[1].is_bye
    assert record.rounds[0].score_text == "185 : 176"
