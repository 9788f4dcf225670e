import json
from datetime import datetime

import pytest

from playerratings.config import EngineConfig, RatingContext, load_config, save_config
from playerratings.exceptions import (
    FileLoadException,
    InvalidConfigurationException,
    MissingConfigurationException,
)


def test_defaults_are_valid():
    config = EngineConfig()
    config.validate()
    assert config.grace_period_games == 12
    assert not config.deflation_bonus


def test_organization_checks_ignore_case():
    config = EngineConfig()
    assert config.is_trusted("kba")
    assert not config.is_trusted("XYZ")
    assert not config.is_trusted(None)
    assert config.is_local_organization("tga")


def test_swa_filter_is_off_in_international_leagues():
    assert EngineConfig(swa_only=True).uses_swa_filter
    assert not EngineConfig(swa_only=True, is_international=True).uses_swa_filter


def test_from_dict_ignores_unknown_keys():
    config = EngineConfig.from_dict({"k_multiplier": 1.5, "colour": "blue"})
    assert config.k_multiplier == 1.5


def test_from_dict_rejects_bad_values():
    with pytest.raises(InvalidConfigurationException):
        EngineConfig.from_dict({"k_multiplier": -1})
    with pytest.raises(InvalidConfigurationException):
        EngineConfig.from_dict({"min_rating": 4000})
    with pytest.raises(InvalidConfigurationException):
        EngineConfig.from_dict([1, 2])


def test_load_config_without_path_returns_defaults():
    assert load_config(None) == EngineConfig()


def test_config_file_round_trip(tmp_path):
    path = tmp_path / "config.json"
    config = EngineConfig(swa_only=True, trusted_organizations=("SWA",))
    save_config(config, path)
    assert load_config(path) == config


def test_missing_and_broken_config_files(tmp_path):
    with pytest.raises(MissingConfigurationException):
        load_config(tmp_path / "nope.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(FileLoadException):
        load_config(broken)


def test_saved_config_is_plain_json(tmp_path):
    path = tmp_path / "config.json"
    save_config(EngineConfig(), path)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["trusted_organizations"][0] == "SWA"


def test_context_current_instant():
    cutoff = datetime(2024, 5, 1)
    ctx = RatingContext(cutoff)
    assert ctx.current_instant == cutoff
    assert RatingContext(cutoff, now=datetime(2024, 5, 20)).current_instant.day == 20
    assert ctx.at(datetime(2024, 6, 1)).cutoff.month == 6
