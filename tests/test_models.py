from datetime import date, datetime

import pytest

from playerratings.exceptions import (
    FileLoadException,
    InvalidMatchException,
    InvalidRankingException,
    PlayerNotFoundException,
)
from playerratings.models import (
    LeagueData,
    Match,
    Player,
    PlayerState,
    RankRecord,
    load_dataset,
    save_dataset,
)


def _league_payload():
    return {
        "name": "Test League",
        "players": [
            {"id": "a", "display_name": "Alice", "rankings": [{"grade": "1D"}]},
            {"id": "b", "name": "Bob", "rankings": [{"ranking": "(2K)"}]},
        ],
        "tournaments": [
            {
                "id": "t1",
                "name": "SWA Open",
                "organizer": "SWA",
                "participants": [{"player_id": "a", "position": 1}, {"player_id": "b"}],
            }
        ],
        "matches": [
            {
                "id": "m2",
                "timestamp": "2024-03-02T12:00:00",
                "first_player_id": "b",
                "second_player_id": "a",
                "first_player_score": 0,
                "second_player_score": 1,
                "tournament_id": "t1",
            },
            {
                "id": "m1",
                "timestamp": "2024-03-01T12:00:00",
                "first_player_id": "a",
                "second_player_id": "b",
                "first_player_score": 1,
                "second_player_score": 0,
                "tournament_id": "t1",
            },
        ],
    }


def test_legacy_rank_strings():
    assert RankRecord.from_legacy("1D").organization == "SWA"
    tga = RankRecord.from_legacy("(2K)")
    assert (tga.grade, tga.organization) == ("2K", "TGA")
    foreign = RankRecord.from_legacy("[3D KBA]")
    assert (foreign.grade, foreign.organization) == ("3D", "KBA")
    assert RankRecord.from_legacy("[3D]").organization == "Foreign"
    assert RankRecord.from_legacy("1D (2D)").grade == "1D"


def test_invalid_grade_is_rejected():
    with pytest.raises(InvalidRankingException):
        RankRecord("strong")


def test_rank_applies_from_the_day_after_its_date():
    record = RankRecord("1D", effective_date=date(2024, 3, 1))
    assert not record.in_force_at(datetime(2024, 3, 1, 23, 0))
    assert record.in_force_at(datetime(2024, 3, 2, 0, 0))
    assert RankRecord("1D").in_force_at(datetime(1990, 1, 1))


def test_rank_at_falls_back_to_earliest_record():
    player = Player(
        "a",
        rankings=[
            RankRecord("1D", effective_date=date(2024, 6, 1)),
            RankRecord("2K", effective_date=date(2023, 1, 1)),
        ],
    )
    assert player.rank_at(datetime(2022, 5, 1)).grade == "2K"
    assert player.rank_at(datetime(2024, 1, 1)).grade == "2K"
    assert player.rank_at(datetime(2024, 6, 2)).grade == "1D"
    assert player.latest_rank.grade == "1D"


def test_match_requires_at_least_one_player():
    with pytest.raises(InvalidMatchException):
        Match("m1", datetime(2024, 1, 1), None, None)


def test_player_cannot_play_themself():
    with pytest.raises(InvalidMatchException):
        Match("m1", datetime(2024, 1, 1), "a", "a")


def test_match_results_from_each_side():
    match = Match("m1", datetime(2024, 1, 1), "a", "b", 185, 176)
    assert match.result_for("a") == 1.0
    assert match.result_for("b") == 0.0
    assert match.scores_for("b") == (176, 185)
    assert match.opponent_of("b") == "a"
    assert match.score_text() == "185 : 176"
    with pytest.raises(InvalidMatchException):
        match.result_for("c")


def test_bye_has_one_player():
    bye = Match("m1", datetime(2024, 1, 1), "a", None, 1, 0)
    assert bye.is_bye
    assert not bye.is_rated
    assert bye.player_ids == ["a"]
    assert bye.describe({"a": "Alice"}) == "Alice - BYE"


def test_unrated_factor():
    match = Match("m1", datetime(2024, 1, 1), "a", "b", 1, 0, factor=0)
    assert not match.is_rated
    assert match.effective_factor == 0.0
    assert Match("m2", datetime(2024, 1, 1), "a", "b").has_default_factor


def test_player_state_tracks_returns():
    state = PlayerState("a", rating=2000.0)
    state.record_activity(datetime(2020, 1, 1), return_gap_days=365)
    state.record_activity(datetime(2022, 1, 1), return_gap_days=365)
    assert state.is_returning
    assert state.matches_since_return == 1
    state.record_activity(datetime(2022, 1, 2), return_gap_days=365)
    assert state.matches_since_return == 2
    assert state.match_count == 3
    assert state.previous_match == datetime(2022, 1, 1)


def test_league_from_dict_sorts_matches_and_fills_organizer():
    league = LeagueData.from_dict(_league_payload())
    assert [m.id for m in league.matches] == ["m1", "m2"]
    assert all(m.organizer == "SWA" for m in league.matches)
    assert league.find_player("Bob").id == "b"
    assert league.player("b").latest_rank.organization == "TGA"
    assert league.tournament("t1").participant("a").position == 1
    with pytest.raises(PlayerNotFoundException):
        league.player("zz")


def test_dataset_file_round_trip(tmp_path):
    league = LeagueData.from_dict(_league_payload())
    path = tmp_path / "league.json"
    save_dataset(league, path)

    loaded = load_dataset(path)
    assert loaded.to_dict() == league.to_dict()


def test_missing_dataset_raises(tmp_path):
    with pytest.raises(FileLoadException):
        load_dataset(tmp_path / "missing.json")
