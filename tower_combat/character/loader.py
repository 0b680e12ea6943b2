"""
Loading of combatants from JSON content files.

Combatant entries follow the model fields. `current_hp` and `current_chakra`
may be omitted, in which case the combatant starts full. Buff entries go
through the buff serialization boundary, so malformed ones are skipped with a
warning instead of failing the whole file.
"""

import json
from pathlib import Path
from typing import Any, TypeVar

from pydantic import ValidationError

from tower_combat.core.logging import log_error, log_warning
from tower_combat.character.combatant import Combatant, Enemy, Player
from tower_combat.effects.serialization import buffs_from_raw

C = TypeVar("C", bound=Combatant)


def _combatant_from_dict(cls: type[C], data: Any) -> C | None:
    if not isinstance(data, dict):
        log_warning("Skipping combatant entry that is not a mapping", {"entry": data})
        return None
    payload = dict(data)
    buffs = buffs_from_raw(payload.pop("buffs", None))
    fill_hp = "current_hp" not in payload
    fill_chakra = "current_chakra" not in payload
    payload.setdefault("current_hp", 1)
    try:
        combatant = cls.model_validate(payload)
    except (ValidationError, ValueError) as e:
        log_warning(
            "Failed to load combatant",
            {"name": data.get("name"), "error": str(e).splitlines()[0]},
        )
        return None
    combatant = combatant.with_buffs(buffs)
    update: dict[str, int] = {}
    if fill_hp:
        update["current_hp"] = combatant.max_hp
    if fill_chakra:
        update["current_chakra"] = combatant.max_chakra
    return combatant.model_copy(update=update) if update else combatant


def player_from_dict(data: Any) -> Player | None:
    """
    Builds the player from its dictionary form.

    Args:
        data (Any): The raw entry.

    Returns:
        Player | None: The player, or None if the entry is invalid.

    """
    return _combatant_from_dict(Player, data)


def enemy_from_dict(data: Any) -> Enemy | None:
    return _combatant_from_dict(Enemy, data)


def load_player(file_path: Path) -> Player | None:
    """
    Loads the player from a JSON file.

    Args:
        file_path (Path): The path to the JSON file containing the player.

    Returns:
        Player | None: The player if the file is valid, None otherwise.

    """
    try:
        with open(file_path, "r") as f:
            return player_from_dict(json.load(f))
    except (FileNotFoundError, json.JSONDecodeError) as e:
        log_error("Failed to load player", {"path": file_path, "error": e})
        return None


def load_enemies(file_path: Path) -> dict[str, Enemy]:
    """Loads enemies from a JSON file.

    Args:
        file_path (Path): The path to the JSON file containing a list of enemies.

    Returns:
        dict[str, Enemy]: A dictionary mapping enemy names to enemies.

    """
    enemies: dict[str, Enemy] = {}
    with open(file_path, "r") as f:
        for entry in json.load(f):
            enemy = enemy_from_dict(entry)
            if enemy is not None:
                enemies[enemy.name] = enemy
    return enemies
