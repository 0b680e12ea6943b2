"""
Tests for the terrain hazard phase.
"""

import pytest

from tower_combat.core.constants import HazardType, PassiveEffectType
from tower_combat.character.equipment import EquipmentPassive, Item
from tower_combat.combat.combat_state import CombatState
from tower_combat.combat.terrain import TerrainDefinition, TerrainHazard
from tower_combat.combat.terrain_hazard import process_terrain_hazard


def _terrain(hazard_type=HazardType.DAMAGE, value=10, chance=1.0, **kwargs) -> TerrainDefinition:
    return TerrainDefinition(
        id="RUBBLE",
        name="Rubble",
        hazard=TerrainHazard(hazard_type=hazard_type, value=value, chance=chance, **kwargs),
    )


@pytest.fixture
def hazard_state():
    def _state(**kwargs) -> CombatState:
        return CombatState(is_first_turn=False, terrain=_terrain(**kwargs))

    return _state


def test_no_terrain_does_nothing(make_player, make_enemy, neutral_rng):
    player, enemy = make_player(), make_enemy()
    result = process_terrain_hazard(player, enemy, CombatState(), neutral_rng)
    assert result.player == player
    assert result.enemy == enemy
    assert not result.player_hit and not result.enemy_hit


def test_hazard_strikes_both_sides(make_player, make_enemy, hazard_state, neutral_rng):
    """
    Test that hazard damage is fixed and ignores defense.
    """
    player, enemy = make_player(), make_enemy()
    result = process_terrain_hazard(player, enemy, hazard_state(), neutral_rng)

    assert result.player_hit and result.enemy_hit
    assert result.player.current_hp == player.max_hp - 10
    assert result.enemy.current_hp == enemy.max_hp - 10
    assert len(result.messages) == 2


def test_hazard_can_miss(make_player, make_enemy, hazard_state, neutral_rng):
    player, enemy = make_player(), make_enemy()
    result = process_terrain_hazard(player, enemy, hazard_state(chance=0.2), neutral_rng)
    assert not result.player_hit and not result.enemy_hit
    assert result.messages == ()


def test_default_chance(make_player, make_enemy, hazard_state, fixed_rng):
    player, enemy = make_player(), make_enemy()
    struck = process_terrain_hazard(player, enemy, hazard_state(chance=None), fixed_rng(0.25))
    spared = process_terrain_hazard(player, enemy, hazard_state(chance=None), fixed_rng(0.35))
    assert struck.player_hit
    assert not spared.player_hit


def test_player_only_hazard(make_player, make_enemy, hazard_state, neutral_rng):
    enemy = make_enemy()
    result = process_terrain_hazard(make_player(), enemy, hazard_state(affects_enemy=False), neutral_rng)
    assert result.player_hit
    assert not result.enemy_hit
    assert result.enemy == enemy


def test_chakra_drain(make_player, make_enemy, hazard_state, neutral_rng):
    player = make_player(current_chakra=2)
    enemy = make_enemy(current_chakra=40)
    state = hazard_state(hazard_type=HazardType.CHAKRA_DRAIN, value=5)
    result = process_terrain_hazard(player, enemy, state, neutral_rng)

    assert result.player.current_chakra == 0
    assert result.enemy.current_chakra == 35
    assert result.player.current_hp == player.max_hp


def test_hazard_can_kill_the_enemy(make_player, make_enemy, hazard_state, neutral_rng):
    result = process_terrain_hazard(make_player(), make_enemy(current_hp=4), hazard_state(), neutral_rng)
    assert result.enemy_defeated
    assert result.enemy.current_hp == 0


def test_hazard_can_kill_the_player(make_player, make_enemy, hazard_state, neutral_rng):
    result = process_terrain_hazard(make_player(current_hp=4), make_enemy(), hazard_state(), neutral_rng)
    assert result.player_defeated
    assert result.player.current_hp == 0


def test_guts_against_hazard(make_player, make_enemy, hazard_state, fixed_rng):
    """
    Test that the hazard phase offers Guts with a fresh context.
    """
    result = process_terrain_hazard(make_player(current_hp=4), make_enemy(), hazard_state(), fixed_rng(0.01))
    assert result.guts_triggered
    assert not result.player_defeated
    assert result.player.current_hp == 1


def test_artifact_against_hazard(make_player, make_enemy, hazard_state, neutral_rng):
    charm = Item(
        name="Last Stand Charm",
        passive=EquipmentPassive(passive_type=PassiveEffectType.GUTS, value=30),
    )
    player = make_player(current_hp=4, equipment=(charm,))
    result = process_terrain_hazard(player, make_enemy(), hazard_state(), neutral_rng)

    assert result.artifact_guts_triggered
    assert result.state.artifact_guts_used
    assert result.player.current_hp == 51

    again = process_terrain_hazard(
        result.player.with_hp(4), result.enemy, result.state, neutral_rng
    )
    assert again.player_defeated
