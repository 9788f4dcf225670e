import pytest

from playerratings.config import EngineConfig
from playerratings.exceptions import FactorValidationException, ScoreValidationException
from playerratings.rating.formula import RatingFormula


def test_winner_gains_and_loser_drops():
    formula = RatingFormula()
    winner, loser = formula.update_pair(1900.0, 2000.0, 1.0)
    assert winner > 1900.0
    assert loser < 2000.0


def test_equal_ratings_move_by_the_same_amount():
    formula = RatingFormula()
    first, second = formula.update_pair(2000.0, 2000.0, 1.0)
    assert first - 2000.0 == pytest.approx(2000.0 - second)


def test_draw_between_equals_changes_nothing():
    formula = RatingFormula()
    assert formula.update(2000.0, 2000.0, 0.5) == pytest.approx(2000.0)


def test_factor_zero_is_a_no_op():
    formula = RatingFormula()
    assert formula.update(1800.0, 2200.0, 1.0, 0) == 1800.0
    assert formula.update_pair(1800.0, 2200.0, 1.0, 0) == (1800.0, 2200.0)


def test_missing_factor_means_default():
    formula = RatingFormula()
    assert formula.update(1800.0, 2000.0, 1.0, None) == formula.update(
        1800.0, 2000.0, 1.0, 1.0
    )


def test_factor_scales_the_step():
    formula = RatingFormula()
    single = formula.shift(1800.0, 2000.0, 1.0, 1.0)
    double = formula.shift(1800.0, 2000.0, 1.0, 2.0)
    assert double == pytest.approx(2 * single)


def test_invalid_result_is_rejected():
    with pytest.raises(ScoreValidationException):
        RatingFormula().update(2000.0, 2000.0, 0.7)


def test_negative_factor_is_rejected():
    with pytest.raises(FactorValidationException):
        RatingFormula().update(2000.0, 2000.0, 1.0, -1)


def test_expected_score_is_symmetric():
    formula = RatingFormula()
    assert formula.expected_score(2000.0, 2000.0) == pytest.approx(0.5)
    total = formula.expected_score(1700.0, 2300.0) + formula.expected_score(
        2300.0, 1700.0
    )
    assert total == pytest.approx(1.0)
    assert formula.expected_score(2300.0, 1700.0) > 0.5


def test_ratings_stay_inside_the_scale():
    config = EngineConfig()
    formula = RatingFormula(config)
    assert formula.clamp(10_000.0) < config.rating_ceiling
    assert formula.clamp(-10_000.0) == config.min_rating
    assert formula.update(3299.99, 100.0, 1.0) < config.rating_ceiling


def test_step_size_shrinks_towards_the_ceiling():
    formula = RatingFormula()
    assert formula.con(1500.0) > formula.con(2100.0) > formula.con(2700.0)


def test_k_multiplier_scales_step_size():
    base = RatingFormula().con(2000.0)
    assert RatingFormula(EngineConfig(k_multiplier=2.0)).con(2000.0) == pytest.approx(
        2 * base
    )


def test_deflation_bonus_is_opt_in():
    assert RatingFormula().deflation_bonus(1500.0) == 0.0
    enabled = RatingFormula(EngineConfig(deflation_bonus=True))
    assert enabled.deflation_bonus(1500.0) > enabled.deflation_bonus(2600.0) > 0.0


def test_two_equal_newcomers_one_game():
    formula = RatingFormula()
    a, b = formula.update_pair(1500.0, 1500.0, 1.0, 1.0)
    assert a > 1500.0 > b
    assert abs(a - 1500.0) == pytest.approx(abs(b - 1500.0))
