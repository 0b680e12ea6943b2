"""
Terrain hazard phase of the combat round.

Each combatant the hazard affects rolls independently against the hazard
chance. A hit deals the hazard's fixed damage, bypassing defense and
mitigation, or drains chakra for chakra-drain hazards. This is a phase of its
own, so the player's Guts is available again here.
"""

import random
from typing import TypeVar

from tower_combat.core.constants import COMBAT_CONSTANTS, CombatConstants, HazardType
from tower_combat.core.logging import log_debug
from tower_combat.core.rng import get_rng, roll_chance
from tower_combat.character.combatant import Combatant, Enemy, Player
from tower_combat.combat.combat_state import CombatState, HazardResult
from tower_combat.combat.guts import GutsContext, check_lethal_damage
from tower_combat.combat.terrain import TerrainHazard

C = TypeVar("C", bound=Combatant)


def _hazard_chance(hazard: TerrainHazard, constants: CombatConstants) -> float:
    return hazard.chance if hazard.chance is not None else constants.default_hazard_chance


def _drain(target: C, hazard: TerrainHazard, messages: list[str]) -> C:
    drained = min(target.current_chakra, hazard.value)
    messages.append(f"🌀 {target.name} {hazard.hazard_type.verb}: -{drained} CP")
    return target.model_copy(update={"current_chakra": target.current_chakra - drained})


def process_terrain_hazard(
    player: Player,
    enemy: Enemy,
    state: CombatState,
    rng: random.Random | None = None,
    constants: CombatConstants = COMBAT_CONSTANTS,
) -> HazardResult:
    """
    Resolves the terrain hazard phase.

    Args:
        player (Player):
            The player snapshot.
        enemy (Enemy):
            The enemy snapshot.
        state (CombatState):
            The current combat state; without a hazardous terrain the phase
            does nothing.
        rng (random.Random | None):
            Random source.
        constants (CombatConstants):
            Tunable rule constants.

    Returns:
        HazardResult:
            The new snapshots, the log of the phase and the defeat flags.

    """
    terrain = state.terrain
    if terrain is None or terrain.hazard is None:
        return HazardResult(player=player, enemy=enemy, state=state)

    rng = get_rng(rng)
    hazard = terrain.hazard
    chance = _hazard_chance(hazard, constants)
    messages: list[str] = []
    player_hit = hazard.affects_player and roll_chance(rng, chance)
    enemy_hit = hazard.affects_enemy and roll_chance(rng, chance)
    guts = False
    artifact = False
    player_defeated = False

    if player_hit:
        if hazard.hazard_type == HazardType.CHAKRA_DRAIN:
            player = _drain(player, hazard, messages)
        else:
            messages.append(f"⚠️ {player.name} {hazard.hazard_type.verb}: -{hazard.value} HP")
            lethal = check_lethal_damage(
                player.name,
                player.current_hp,
                hazard.value,
                player.max_hp,
                player.derived.guts_chance,
                GutsContext(),
                player.artifact_guts,
                state.artifact_guts_used,
                rng,
            )
            player = player.model_copy(update={"current_hp": lethal.new_hp})
            if lethal.message:
                messages.append(lethal.message)
            if lethal.artifact_triggered:
                state = state.model_copy(update={"artifact_guts_used": True})
            guts = lethal.guts_triggered
            artifact = lethal.artifact_triggered
            player_defeated = not lethal.survived

    if enemy_hit:
        if hazard.hazard_type == HazardType.CHAKRA_DRAIN:
            enemy = _drain(enemy, hazard, messages)
        else:
            messages.append(f"⚠️ {enemy.name} {hazard.hazard_type.verb}: -{hazard.value} HP")
            enemy = enemy.model_copy(
                update={"current_hp": max(0, enemy.current_hp - hazard.value)}
            )

    log_debug(
        "Terrain hazard resolved",
        {"terrain": terrain.name, "player_hit": player_hit, "enemy_hit": enemy_hit},
    )
    return HazardResult(
        player=player,
        enemy=enemy,
        state=state,
        messages=tuple(messages),
        player_defeated=player_defeated,
        enemy_defeated=enemy.is_defeated,
        player_hit=player_hit,
        enemy_hit=enemy_hit,
        guts_triggered=guts,
        artifact_guts_triggered=artifact,
    )
