"""
Approach module for the combat engine.

Before a fight the player picks how to engage. The approach is resolved with a
d100 roll against a stat-scaled success chance, and its outcome is reduced to
a `CombatModifiers` bundle consumed by the combat-start factory.
"""

import math
import random
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import ApproachType, PrimaryStat
from tower_combat.core.logging import log_info
from tower_combat.core.rng import get_rng, roll_chance, roll_d100
from tower_combat.character.combatant import Enemy, Player
from tower_combat.combat.terrain import TerrainDefinition
from tower_combat.effects.buff import Buff, create_buff
from tower_combat.effects.effect import (
    ConfusionEffect,
    HostileEffectDefinition,
    SelfEffectDefinition,
    StatBuffEffect,
    StatDebuffEffect,
    StunEffect,
)


class CombatModifiers(BaseModel):
    """
    Combat-start modifiers produced by an approach. Neutral by default.
    """

    model_config = ConfigDict(frozen=True)

    player_goes_first: bool = Field(False, description="Player acts first on turn one.")
    initiative_bonus: float = Field(0, description="Bonus added to the player's initiative.")
    first_hit_multiplier: float = Field(1.0, description="Multiplier on the player's first hit.")
    player_buffs: tuple[Buff, ...] = Field((), description="Buffs the player starts with.")
    enemy_debuffs: tuple[Buff, ...] = Field((), description="Debuffs the enemy starts with.")
    xp_multiplier: float = Field(1.0, description="Multiplier on the encounter's XP.")
    enemy_hp_reduction: float = Field(0.0, description="Share of enemy max HP lost before combat.")
    chakra_cost: int = Field(0, description="Chakra the player spent on the approach.")
    hp_cost: int = Field(0, description="HP the player spent on the approach.")
    skip_combat: bool = Field(False, description="The encounter was bypassed entirely.")


class ApproachRequirements(BaseModel):
    """Conditions for an approach to be offered."""

    model_config = ConfigDict(frozen=True)

    min_stat: PrimaryStat | None = Field(None, description="Stat that must reach `min_value`.")
    min_value: int = Field(0, description="Minimum value of `min_stat`.")
    allowed_terrains: tuple[str, ...] = Field((), description="Terrain ids, empty for any.")
    required_skill: str | None = Field(None, description="Skill id the player must know.")


class ApproachOutcome(BaseModel):
    """Effects of an approach on success or failure."""

    model_config = ConfigDict(frozen=True)

    initiative_bonus: float = 0
    guaranteed_first: bool = False
    first_hit_multiplier: float = 1.0
    player_buffs: tuple[SelfEffectDefinition, ...] = ()
    enemy_debuffs: tuple[HostileEffectDefinition, ...] = ()
    skip_combat: bool = False
    enemy_hp_reduction: float = 0.0
    chakra_cost: int = 0
    hp_cost: int = 0
    xp_multiplier: float = 1.0


class ApproachDefinition(BaseModel):
    """
    A pre-combat engagement option.
    """

    model_config = ConfigDict(frozen=True)

    approach_type: ApproachType = Field(description="Which approach this is.")
    name: str = Field(description="Display name.")
    description: str = Field("", description="Flavor text.")
    requirements: ApproachRequirements = Field(default_factory=ApproachRequirements)
    base_chance: float = Field(100, description="Success chance before scaling.")
    scaling_stat: PrimaryStat = Field(PrimaryStat.STRENGTH, description="Stat scaling the chance.")
    scaling_factor: float = Field(0, description="Chance gained per point of the stat.")
    terrain_bonus: bool = Field(False, description="Whether terrain stealth applies.")
    max_chance: float = Field(100, description="Cap of the success chance.")
    success: ApproachOutcome = Field(default_factory=ApproachOutcome)
    failure: ApproachOutcome = Field(default_factory=ApproachOutcome)


APPROACHES: dict[ApproachType, ApproachDefinition] = {
    ApproachType.FRONTAL_ASSAULT: ApproachDefinition(
        approach_type=ApproachType.FRONTAL_ASSAULT,
        name="Frontal Assault",
        description="Face the enemy directly. No tricks, no advantages.",
    ),
    ApproachType.STEALTH_AMBUSH: ApproachDefinition(
        approach_type=ApproachType.STEALTH_AMBUSH,
        name="Silent Strike",
        description="Move through the shadows and open with a doubled first hit.",
        requirements=ApproachRequirements(min_stat=PrimaryStat.SPEED, min_value=12),
        base_chance=40,
        scaling_stat=PrimaryStat.DEXTERITY,
        scaling_factor=1.5,
        terrain_bonus=True,
        max_chance=95,
        success=ApproachOutcome(
            initiative_bonus=50,
            first_hit_multiplier=2.0,
            player_buffs=(
                StatBuffEffect(target_stat=PrimaryStat.DEXTERITY, value=0.15, duration=1),
            ),
            enemy_debuffs=(StunEffect(duration=1, chance=0.15),),
            xp_multiplier=1.15,
        ),
    ),
    ApproachType.GENJUTSU_SETUP: ApproachDefinition(
        approach_type=ApproachType.GENJUTSU_SETUP,
        name="Mind Trap",
        description="Weave an illusion so the enemy starts confused and slowed.",
        requirements=ApproachRequirements(min_stat=PrimaryStat.CALMNESS, min_value=15),
        base_chance=35,
        scaling_stat=PrimaryStat.INTELLIGENCE,
        scaling_factor=2.0,
        max_chance=95,
        success=ApproachOutcome(
            initiative_bonus=10,
            player_buffs=(
                StatBuffEffect(target_stat=PrimaryStat.CALMNESS, value=0.2, duration=3),
            ),
            enemy_debuffs=(
                ConfusionEffect(duration=2),
                StatDebuffEffect(target_stat=PrimaryStat.SPEED, value=0.3, duration=3),
            ),
            chakra_cost=20,
            xp_multiplier=1.2,
        ),
        failure=ApproachOutcome(chakra_cost=20),
    ),
    ApproachType.ENVIRONMENTAL_TRAP: ApproachDefinition(
        approach_type=ApproachType.ENVIRONMENTAL_TRAP,
        name="Terrain Trap",
        description="Spring a trap that wounds the enemy before the fight.",
        requirements=ApproachRequirements(
            min_stat=PrimaryStat.INTELLIGENCE,
            min_value=14,
            allowed_terrains=(
                "CLIFF_EDGE",
                "SWAMP",
                "GIANT_ROOTS",
                "ALLEYWAY",
                "WATERFALL",
            ),
        ),
        base_chance=45,
        scaling_stat=PrimaryStat.ACCURACY,
        scaling_factor=1.2,
        max_chance=90,
        success=ApproachOutcome(
            initiative_bonus=5,
            enemy_debuffs=(
                StatDebuffEffect(target_stat=PrimaryStat.STRENGTH, value=0.15, duration=3),
            ),
            enemy_hp_reduction=0.2,
            xp_multiplier=1.25,
        ),
    ),
    ApproachType.SHADOW_BYPASS: ApproachDefinition(
        approach_type=ApproachType.SHADOW_BYPASS,
        name="Shadow Passage",
        description="Bypass the encounter entirely. Costs chakra, grants no XP.",
        requirements=ApproachRequirements(
            min_stat=PrimaryStat.SPEED,
            min_value=35,
            required_skill="shunshin",
        ),
        base_chance=30,
        scaling_stat=PrimaryStat.SPEED,
        scaling_factor=1.0,
        terrain_bonus=True,
        max_chance=95,
        success=ApproachOutcome(skip_combat=True, chakra_cost=30, xp_multiplier=0),
        failure=ApproachOutcome(chakra_cost=30),
    ),
}


class ApproachResult(BaseModel):
    """
    Outcome of resolving an approach.
    """

    model_config = ConfigDict(frozen=True)

    approach: ApproachType = Field(description="The approach attempted.")
    success: bool = Field(description="Whether the roll succeeded.")
    success_chance: int = Field(description="Rounded success chance in percent.")
    roll: int = Field(description="The d100 roll.")
    modifiers: CombatModifiers = Field(description="Modifiers handed to combat.")
    description: str = Field("", description="Narrative line for the log.")


def get_approach(approach: ApproachType) -> ApproachDefinition:
    return APPROACHES[approach]


def calculate_approach_chance(
    definition: ApproachDefinition,
    player: Player,
    terrain: TerrainDefinition | None = None,
) -> float:
    """Returns the success chance in percent, capped by the approach."""
    chance = definition.base_chance
    chance += player.effective_primary.get(definition.scaling_stat) * definition.scaling_factor
    if definition.terrain_bonus and terrain is not None:
        chance += terrain.stealth_modifier
    return max(0.0, min(definition.max_chance, chance))


def meets_approach_requirements(
    definition: ApproachDefinition,
    player: Player,
    terrain: TerrainDefinition | None = None,
) -> bool:
    req = definition.requirements
    if req.min_stat is not None and player.effective_primary.get(req.min_stat) < req.min_value:
        return False
    if req.allowed_terrains and (terrain is None or terrain.id not in req.allowed_terrains):
        return False
    if req.required_skill is not None and player.get_skill(req.required_skill) is None:
        return False
    return True


def can_afford_approach(definition: ApproachDefinition, player: Player) -> bool:
    """Whether the player can pay the worst-case cost of the approach."""
    chakra = max(definition.success.chakra_cost, definition.failure.chakra_cost)
    hp = max(definition.success.hp_cost, definition.failure.hp_cost)
    return player.current_chakra >= chakra and player.current_hp > hp


def _roll_buffs(effects: tuple[Any, ...], source: str, rng: random.Random) -> tuple[Buff, ...]:
    return tuple(
        create_buff(effect, source=source)
        for effect in effects
        if roll_chance(rng, effect.chance)
    )


def resolve_approach(
    approach: ApproachType,
    player: Player,
    enemy: Enemy,
    terrain: TerrainDefinition | None = None,
    rng: random.Random | None = None,
) -> ApproachResult:
    """
    Rolls an approach and converts its outcome into combat modifiers.

    Args:
        approach (ApproachType):
            The approach chosen by the player.
        player (Player):
            The player attempting it.
        enemy (Enemy):
            The enemy being approached.
        terrain (TerrainDefinition | None):
            The battlefield, if any.
        rng (random.Random | None):
            Random source.

    Returns:
        ApproachResult:
            The roll, its success, and the modifiers for combat.

    """
    rng = get_rng(rng)
    definition = get_approach(approach)
    chance = calculate_approach_chance(definition, player, terrain)
    roll = roll_d100(rng)
    success = roll <= chance
    outcome = definition.success if success else definition.failure

    modifiers = CombatModifiers(
        player_goes_first=success and outcome.guaranteed_first,
        initiative_bonus=outcome.initiative_bonus,
        first_hit_multiplier=outcome.first_hit_multiplier if success else 1.0,
        player_buffs=_roll_buffs(outcome.player_buffs, definition.name, rng) if success else (),
        enemy_debuffs=_roll_buffs(outcome.enemy_debuffs, definition.name, rng) if success else (),
        xp_multiplier=outcome.xp_multiplier if success else 1.0,
        enemy_hp_reduction=outcome.enemy_hp_reduction if success else 0.0,
        chakra_cost=outcome.chakra_cost,
        hp_cost=outcome.hp_cost,
        skip_combat=success and outcome.skip_combat,
    )
    verdict = "succeeds" if success else "fails"
    log_info(
        "Approach resolved",
        {"approach": approach, "chance": round(chance), "roll": roll, "success": success},
    )
    return ApproachResult(
        approach=approach,
        success=success,
        success_chance=round(chance),
        roll=roll,
        modifiers=modifiers,
        description=f"{definition.name} against {enemy.name} {verdict}.",
    )


def apply_approach_costs(player: Player, modifiers: CombatModifiers) -> Player:
    """Pays the approach costs; HP never drops below 1."""
    if modifiers.chakra_cost <= 0 and modifiers.hp_cost <= 0:
        return player
    return player.model_copy(
        update={
            "current_chakra": max(0, player.current_chakra - modifiers.chakra_cost),
            "current_hp": max(1, player.current_hp - modifiers.hp_cost),
        }
    )


def apply_enemy_hp_reduction(enemy: Enemy, modifiers: CombatModifiers) -> Enemy:
    """Removes the approach's share of enemy max HP; HP never drops below 1."""
    if modifiers.enemy_hp_reduction <= 0:
        return enemy
    loss = math.floor(enemy.max_hp * modifiers.enemy_hp_reduction)
    return enemy.model_copy(update={"current_hp": max(1, enemy.current_hp - loss)})


def apply_approach_effects(
    player: Player,
    enemy: Enemy,
    modifiers: CombatModifiers,
) -> tuple[Player, Enemy]:
    """
    Applies an approach's costs, starting buffs and enemy HP reduction.

    Returns:
        tuple[Player, Enemy]: The updated combatants.

    """
    player = apply_approach_costs(player, modifiers)
    if modifiers.player_buffs:
        player = player.with_buffs(player.buffs + modifiers.player_buffs)
    enemy = apply_enemy_hp_reduction(enemy, modifiers)
    if modifiers.enemy_debuffs:
        enemy = enemy.with_buffs(enemy.buffs + modifiers.enemy_debuffs)
    return player, enemy
