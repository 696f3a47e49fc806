"""Per-game validation of the free-form listing attributes."""
from typing import Any, Callable

from monlyking.models.listing import Game

GameData = dict[str, Any]


def _number(data: GameData, key: str):
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _missing(data: GameData, key: str) -> bool:
    value = data.get(key)
    return value is None or (isinstance(value, str) and not value.strip())


def _in_range(data: GameData, key: str, low, high=None) -> bool:
    value = _number(data, key)
    if value is None or value < low:
        return False
    return high is None or value <= high


def _validate_fifa(data: GameData) -> list[str]:
    errors = []
    if _missing(data, "platform"):
        errors.append("Platform is required")
    if not _in_range(data, "coins", 0):
        errors.append("FIFA Coins must be specified")
    if not _in_range(data, "level", 1, 100):
        errors.append("Level must be between 1-100")
    if not _in_range(data, "overall_rating", 1, 99):
        errors.append("Overall Rating must be between 1-99")
    if _missing(data, "region"):
        errors.append("Region is required")
    return errors


def _validate_valorant(data: GameData) -> list[str]:
    errors = []
    if _missing(data, "rank"):
        errors.append("Rank is required")
    if not _in_range(data, "rr", 0):
        errors.append("Rank Rating must be specified")
    if not _in_range(data, "agents", 0, 25):
        errors.append("Agents must be between 0-25")
    if not _in_range(data, "level", 1):
        errors.append("Account level is required")
    if _missing(data, "region"):
        errors.append("Region is required")
    return errors


def _validate_lol(data: GameData) -> list[str]:
    errors = []
    if _missing(data, "rank"):
        errors.append("Rank is required")
    if not _in_range(data, "lp", 0):
        errors.append("League Points must be specified")
    if not _in_range(data, "champions", 0, 164):
        errors.append("Champions must be between 0-164")
    if not _in_range(data, "level", 1):
        errors.append("Account level is required")
    return errors


def _validate_pubg(data: GameData) -> list[str]:
    errors = []
    if _missing(data, "rank"):
        errors.append("Rank is required")
    if _missing(data, "tier"):
        errors.append("Tier is required")
    if not _in_range(data, "level", 1):
        errors.append("Account level is required")
    if _missing(data, "region"):
        errors.append("Region is required")
    return errors


def _validate_cod(data: GameData) -> list[str]:
    errors = []
    if _missing(data, "rank"):
        errors.append("Rank is required")
    if not _in_range(data, "level", 1):
        errors.append("Account level is required")
    if data.get("prestige") is not None and not _in_range(data, "prestige", 0, 10):
        errors.append("Prestige must be between 0-10")
    if _missing(data, "region"):
        errors.append("Region is required")
    return errors


VALIDATORS: dict[Game, Callable[[GameData], list[str]]] = {
    Game.FIFA: _validate_fifa,
    Game.VALORANT: _validate_valorant,
    Game.LOL: _validate_lol,
    Game.PUBG: _validate_pubg,
    Game.COD: _validate_cod,
}


def validate_game_data(game, data: GameData) -> list[str]:
    """
    Check the game-specific attributes of a listing.

    Returns:
        List of human-readable problems, empty when the data is valid
    """
    try:
        validator = VALIDATORS[Game(game)]
    except ValueError:
        return ["Invalid game selected"]
    return validator(data or {})
