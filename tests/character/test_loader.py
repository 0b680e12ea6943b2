"""
Tests for loading combatants from JSON content files.
"""

import json
from pathlib import Path

import tower_combat
from tower_combat.core.constants import CombatantType, Element, PassiveEffectType
from tower_combat.character.loader import enemy_from_dict, load_enemies, load_player, player_from_dict

DATA_DIR = Path(tower_combat.__file__).parent / "data"


def test_load_bundled_player():
    """
    Test that the bundled player loads with full HP and chakra.
    """
    player = load_player(DATA_DIR / "player.json")

    assert player is not None
    assert player.name == "Kaito"
    assert player.combatant_type == CombatantType.PLAYER
    assert player.element == Element.FIRE
    assert player.current_hp == player.max_hp
    assert player.current_chakra == player.max_chakra
    assert player.get_skill("fireball").chakra_cost == 20
    assert player.artifact_guts is not None
    assert player.artifact_guts.passive_type == PassiveEffectType.GUTS
    assert player.artifact_guts.source == "Last Stand Charm"


def test_load_bundled_enemies():
    """
    Test that the bundled enemies load by name, buffs included.
    """
    enemies = load_enemies(DATA_DIR / "enemies.json")

    assert set(enemies) == {"Tower Wolf", "Stone Sentinel"}
    sentinel = enemies["Stone Sentinel"]
    assert sentinel.combatant_type == CombatantType.ENEMY
    assert len(sentinel.buffs) == 1
    assert sentinel.buffs[0].is_permanent
    # Granite Hide raises willpower from 18 to 19 before HP is filled.
    assert sentinel.max_hp == 50 + 19 * 12
    assert sentinel.current_hp == sentinel.max_hp


def test_missing_player_file_returns_none(tmp_path: Path, mocker):
    error = mocker.patch("tower_combat.character.loader.log_error")
    assert load_player(tmp_path / "missing.json") is None
    error.assert_called_once()


def test_corrupt_player_file_returns_none(tmp_path: Path):
    path = tmp_path / "player.json"
    path.write_text("{not json")
    assert load_player(path) is None


def test_invalid_entries_are_skipped(tmp_path: Path):
    """
    Test that invalid enemies are dropped while valid ones still load.
    """
    path = tmp_path / "enemies.json"
    path.write_text(
        json.dumps(
            [
                {"name": "Rat", "skills": [{"id": "nibble", "name": "Nibble"}]},
                {"name": "", "skills": []},
                "not a mapping",
            ]
        )
    )
    enemies = load_enemies(path)
    assert list(enemies) == ["Rat"]


def test_malformed_buffs_are_skipped():
    """
    Test that a malformed buff does not prevent the combatant from loading.
    """
    enemy = enemy_from_dict(
        {
            "name": "Ghoul",
            "current_hp": 40,
            "buffs": [
                {"name": "Broken", "duration": 2},
                {"name": "Rot", "duration": 2, "effect": {"effect_type": "POISON", "value": 2}},
            ],
        }
    )
    assert enemy is not None
    assert enemy.current_hp == 40
    assert [b.name for b in enemy.buffs] == ["Rot"]


def test_player_from_dict_rejects_negative_hp():
    assert player_from_dict({"name": "Kaito", "current_hp": -5}) is None
