"""Tests for per-game listing attribute validation."""
import pytest

from monlyking.models.listing import Game
from monlyking.services.game_data import validate_game_data


VALID = {
    Game.FIFA: {"platform": "PS5", "coins": 250000, "level": 80, "overall_rating": 91, "region": "EU"},
    Game.VALORANT: {"rank": "Diamond 1", "rr": 30, "agents": 20, "level": 120, "region": "EU"},
    Game.LOL: {"rank": "Gold IV", "lp": 12, "champions": 90, "level": 210},
    Game.PUBG: {"rank": "Crown", "tier": "III", "level": 65, "region": "MENA"},
    Game.COD: {"rank": "Legendary", "level": 155, "prestige": 4, "region": "NA"},
}


@pytest.mark.parametrize("game", list(Game))
def test_valid_data_passes(game):
    assert validate_game_data(game, VALID[game]) == []


def test_fifa_ranges():
    data = dict(VALID[Game.FIFA], level=101, overall_rating=0)
    errors = validate_game_data(Game.FIFA, data)
    assert "Level must be between 1-100" in errors
    assert "Overall Rating must be between 1-99" in errors


def test_missing_fields_are_reported():
    errors = validate_game_data(Game.PUBG, {"rank": "  "})
    assert errors == [
        "Rank is required",
        "Tier is required",
        "Account level is required",
        "Region is required",
    ]


def test_lol_champion_limit():
    errors = validate_game_data("lol", dict(VALID[Game.LOL], champions=165))
    assert errors == ["Champions must be between 0-164"]


def test_cod_prestige_is_optional():
    data = {k: v for k, v in VALID[Game.COD].items() if k != "prestige"}
    assert validate_game_data(Game.COD, data) == []
    assert validate_game_data(Game.COD, dict(data, prestige=11)) == ["Prestige must be between 0-10"]


def test_booleans_are_not_numbers():
    errors = validate_game_data(Game.VALORANT, dict(VALID[Game.VALORANT], agents=True))
    assert errors == ["Agents must be between 0-25"]


def test_unknown_game():
    assert validate_game_data("minecraft", {}) == ["Invalid game selected"]
