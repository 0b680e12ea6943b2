"""
Encounter-scoped combat state and phase result records.

`CombatState` is created once when an encounter starts and is only ever
replaced by the turn orchestrator. Each phase function returns one of the
frozen result records below, carrying the new combatant snapshots, the next
state, log lines and defeat flags.
"""

import random

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import (
    COMBAT_CONSTANTS,
    ApproachType,
    LogType,
    PassiveEffectType,
    TurnPhase,
)
from tower_combat.core.logging import log_debug
from tower_combat.core.rng import get_rng
from tower_combat.character.combatant import Enemy, Player
from tower_combat.character.stats import DerivedStats
from tower_combat.combat.approach import CombatModifiers
from tower_combat.combat.damage import DamageResult
from tower_combat.combat.terrain import TerrainDefinition, get_initiative_bonus


class CombatState(BaseModel):
    """
    Per-encounter state.
    """

    model_config = ConfigDict(frozen=True)

    phase: TurnPhase = Field(TurnPhase.UPKEEP, description="Current state of the machine.")
    turn: int = Field(1, description="Round counter, starting at 1.")
    is_first_turn: bool = Field(True, description="No player action has resolved yet.")
    first_hit_multiplier: float = Field(1.0, description="Multiplier on the player's first hit.")
    player_goes_first: bool = Field(False, description="Player is forced to act first.")
    player_initiative_bonus: float = Field(0, description="Bonus to the player's initiative.")
    xp_multiplier: float = Field(1.0, description="Multiplier on the encounter's XP.")
    terrain: TerrainDefinition | None = Field(None, description="Battlefield, if any.")
    approach: ApproachType | None = Field(None, description="Approach used to engage.")
    skip_first_skill_cost: bool = Field(False, description="The first skill costs nothing.")
    artifact_guts_used: bool = Field(False, description="Artifact guts already fired.")

    def advance(self, phase: TurnPhase) -> "CombatState":
        return self.model_copy(update={"phase": phase})


def create_combat_state(
    modifiers: CombatModifiers | None = None,
    terrain: TerrainDefinition | None = None,
    player: Player | None = None,
    approach: ApproachType | None = None,
) -> CombatState:
    """
    Builds the initial state of an encounter.

    Args:
        modifiers (CombatModifiers | None):
            Approach modifiers, neutral when absent.
        terrain (TerrainDefinition | None):
            Battlefield, None for no terrain effects.
        player (Player | None):
            The player, whose equipment may make the first skill free.
        approach (ApproachType | None):
            The approach used, if any.

    Returns:
        CombatState:
            The starting state.

    """
    modifiers = modifiers or CombatModifiers()
    skip_first_skill_cost = player is not None and any(
        p.passive_type == PassiveEffectType.FREE_FIRST_SKILL for p in player.passives
    )
    return CombatState(
        first_hit_multiplier=modifiers.first_hit_multiplier,
        player_goes_first=modifiers.player_goes_first,
        player_initiative_bonus=modifiers.initiative_bonus,
        xp_multiplier=modifiers.xp_multiplier,
        terrain=terrain,
        approach=approach,
        skip_first_skill_cost=skip_first_skill_cost,
    )


def determine_turn_order(
    player_derived: DerivedStats,
    enemy_derived: DerivedStats,
    state: CombatState,
    rng: random.Random | None = None,
) -> bool:
    """
    Decides who acts first in a round.

    Returns:
        bool: True when the player acts first. Ties go to the player.

    """
    if state.is_first_turn and state.player_goes_first:
        return True
    rng = get_rng(rng)
    jitter = COMBAT_CONSTANTS.initiative_jitter
    player_init = (
        player_derived.initiative
        + state.player_initiative_bonus
        + get_initiative_bonus(state.terrain)
        + rng.random() * jitter
    )
    enemy_init = enemy_derived.initiative + rng.random() * jitter
    log_debug(
        "Turn order rolled",
        {"player": round(player_init, 1), "enemy": round(enemy_init, 1)},
    )
    return player_init >= enemy_init


# =============================================================================
# Phase results
# =============================================================================


class PhaseResult(BaseModel):
    """Fields shared by every phase result."""

    model_config = ConfigDict(frozen=True)

    player: Player = Field(description="Player snapshot after the phase.")
    enemy: Enemy = Field(description="Enemy snapshot after the phase.")
    state: CombatState = Field(description="Combat state after the phase.")
    messages: tuple[str, ...] = Field((), description="Log lines, in order.")
    player_defeated: bool = Field(False, description="The player fell.")
    enemy_defeated: bool = Field(False, description="The enemy fell.")


class UpkeepResult(PhaseResult):
    """Result of the upkeep phase."""

    chakra_spent: int = Field(0, description="Chakra paid for toggle upkeep.")
    deactivated: tuple[str, ...] = Field((), description="Toggle skills switched off.")


class PlayerActionResult(PhaseResult):
    """Result of the player's action."""

    skill_used: str | None = Field(None, description="Id of the skill used, None on a no-op.")
    performed: bool = Field(True, description="False when the action was rejected.")
    damage: DamageResult | None = Field(None, description="Damage breakdown, if any.")
    damage_dealt: int = Field(0, description="Damage subtracted from the enemy.")
    reflected_damage: int = Field(0, description="Damage reflected back to the player.")
    log_type: LogType = Field(LogType.INFO, description="Category of the headline log line.")


class EnemyTurnResult(PhaseResult):
    """Result of the enemy phase."""

    skill_used: str | None = Field(None, description="Id of the enemy skill, if any.")
    damage: DamageResult | None = Field(None, description="Damage breakdown, if any.")
    damage_dealt: int = Field(0, description="Damage subtracted from the player.")
    guts_triggered: bool = Field(False, description="Stat guts saved the player.")
    artifact_guts_triggered: bool = Field(False, description="Artifact guts saved the player.")


class HazardResult(PhaseResult):
    """Result of the terrain hazard phase."""

    player_hit: bool = Field(False, description="The hazard struck the player.")
    enemy_hit: bool = Field(False, description="The hazard struck the enemy.")
    guts_triggered: bool = Field(False, description="Stat guts saved the player.")
    artifact_guts_triggered: bool = Field(False, description="Artifact guts saved the player.")
