import pytest

from playerratings.config import EngineConfig
from playerratings.models import RankRecord
from playerratings.rating.ranks import (
    RankTable,
    dan_rating,
    kyu_rating,
    pro_rating,
    single_rank_difference,
)


@pytest.mark.parametrize(
    "kyu, rating", [(1, 2050), (2, 2025), (5, 1950), (10, 1800), (20, 1400)]
)
def test_kyu_ladder(kyu, rating):
    assert kyu_rating(kyu) == rating


def test_dan_and_pro_ladders():
    assert dan_rating(1) == 2100
    assert dan_rating(7) == 2700
    assert pro_rating(1) == 2740
    assert pro_rating(1) > dan_rating(7)
    assert pro_rating(12) == pro_rating(9)


def test_single_rank_difference_by_band():
    assert single_rank_difference(2300) == 100
    assert single_rank_difference(2100) == 50
    assert single_rank_difference(2000) == 25
    assert single_rank_difference(1900) == 30
    assert single_rank_difference(1500) == 40
    assert single_rank_difference(1000) == 50


def test_unknown_grade_maps_to_default_rating():
    table = RankTable()
    assert table.rating_for(None) == 1700
    assert table.rating_for(RankRecord("?")) == 1700
    assert table.rating_for(RankRecord("3D?")) == 1700


def test_foreign_dan_counts_lower_in_local_leagues():
    table = RankTable()
    assert table.rating_for(RankRecord("1D", organization="TGA")) == 2075
    assert table.rating_for(RankRecord("3D", organization="TGA")) == 2200
    assert table.rating_for(RankRecord("3D", organization="SWA")) == 2300


def test_foreign_dan_is_taken_at_face_value_in_international_leagues():
    table = RankTable(EngineConfig(is_international=True))
    assert table.rating_for(RankRecord("3D", organization="TGA")) == 2300


def test_protected_floor_is_one_rank_below():
    table = RankTable()
    assert table.protected_floor(RankRecord("1D")) == 2050.0
    assert table.protected_floor(RankRecord("3D")) == 2200.0
    assert table.protected_floor(RankRecord("3D", organization="XYZ")) is None
    assert table.protected_floor(RankRecord("?")) is None


def test_sort_key_orders_stronger_grades_first():
    table = RankTable()
    records = [RankRecord("5K"), RankRecord("2D"), RankRecord("1K")]
    ordered = sorted(records, key=table.sort_key)
    assert [r.grade for r in ordered] == ["2D", "1K", "5K"]
