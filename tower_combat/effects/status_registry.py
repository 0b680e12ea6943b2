"""
Status effect registry for the combat engine.

Answers questions about a combatant's active buffs and applies the per-tick
rules: damage over time, regeneration and duration countdown.
"""

import math
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import (
    COMBAT_CONSTANTS,
    CombatConstants,
    DamageProperty,
    DamageType,
    EffectType,
)
from tower_combat.core.logging import log_debug
from tower_combat.character.stats import DerivedStats
from tower_combat.effects.buff import Buff
from tower_combat.effects.effect import DamageOverTimeEffect, RegenEffect
from tower_combat.effects.mitigation import apply_mitigation


# ============================================================================
# Queries
# ============================================================================


def has_effect(buffs: Iterable[Buff], kind: EffectType) -> bool:
    return any(b.kind == kind for b in buffs)


def get_effects(buffs: Iterable[Buff], kind: EffectType) -> list[Buff]:
    return [b for b in buffs if b.kind == kind]


def is_stunned(buffs: Iterable[Buff]) -> bool:
    return has_effect(buffs, EffectType.STUN)


def is_confused(buffs: Iterable[Buff]) -> bool:
    return has_effect(buffs, EffectType.CONFUSION)


def is_silenced(buffs: Iterable[Buff]) -> bool:
    return has_effect(buffs, EffectType.SILENCE)


def remove_buffs_from_source(buffs: Iterable[Buff], source: str) -> tuple[Buff, ...]:
    """Drops every buff granted by the given skill or item."""
    return tuple(b for b in buffs if b.source != source)


# ============================================================================
# Ticking
# ============================================================================


def tick_buff_durations(buffs: Iterable[Buff]) -> tuple[Buff, ...]:
    """
    Counts down buff durations by one tick.

    Permanent buffs (-1) are untouched, buffs with more than one turn left are
    decremented, and buffs on their last turn are removed.

    Args:
        buffs (Iterable[Buff]): The buffs to tick.

    Returns:
        tuple[Buff, ...]: The surviving buffs, in their original order.

    """
    ticked: list[Buff] = []
    for buff in buffs:
        if buff.is_permanent:
            ticked.append(buff)
        elif buff.duration > 1:
            ticked.append(buff.with_duration(buff.duration - 1))
    return tuple(ticked)


def calculate_dot_damage(
    value: float,
    damage_type: DamageType,
    damage_property: DamageProperty,
    defender: DerivedStats,
    constants: CombatConstants = COMBAT_CONSTANTS,
) -> int:
    """
    Computes a damage-over-time tick with defense at reduced effectiveness.

    Args:
        value (float):
            Base tick damage.
        damage_type (DamageType):
            Defense channel; True damage bypasses defense.
        damage_property (DamageProperty):
            Piercing ticks skip the flat component.
        defender (DerivedStats):
            The afflicted combatant's derived stats.
        constants (CombatConstants):
            Tunable rule constants.

    Returns:
        int:
            The tick damage, at least 1.

    """
    damage = float(value)
    if damage_type == DamageType.TRUE:
        return max(1, math.floor(damage))

    flat, percent = defender.defense_for(damage_type)
    factor = constants.dot_defense_effectiveness

    if damage_property != DamageProperty.PIERCING:
        damage -= min(flat * factor, damage * constants.dot_flat_reduction_cap)
    if damage_property != DamageProperty.ARMOR_BREAK:
        damage -= math.floor(damage * percent * factor)

    return max(1, math.floor(damage))


class BuffTickResult(BaseModel):
    """Outcome of ticking a combatant's buffs once."""

    model_config = ConfigDict(frozen=True)

    hp: int = Field(description="HP after the tick, never below zero.")
    buffs: tuple[Buff, ...] = Field(description="Buffs after damage, healing and countdown.")
    damage_taken: int = Field(0, description="Total damage dealt by ticks.")
    healing: int = Field(0, description="Total HP restored by ticks.")
    messages: tuple[str, ...] = Field((), description="Log lines describing the tick.")


def process_buff_ticks(
    owner_name: str,
    current_hp: int,
    max_hp: int,
    buffs: Iterable[Buff],
    derived: DerivedStats,
    constants: CombatConstants = COMBAT_CONSTANTS,
) -> BuffTickResult:
    """
    Resolves one tick of damage over time and regeneration, then counts down.

    DoT damage goes through the owner's mitigation buffs (without
    reflection, since ticks have no attacker). Regeneration is capped at max
    HP. Durations are counted down only after every effect has resolved.

    Args:
        owner_name (str):
            Name used in log lines.
        current_hp (int):
            HP before the tick.
        max_hp (int):
            HP cap for regeneration.
        buffs (Iterable[Buff]):
            The owner's active buffs.
        derived (DerivedStats):
            The owner's derived stats, used to resist DoT damage.
        constants (CombatConstants):
            Tunable rule constants.

    Returns:
        BuffTickResult:
            The new HP and buffs with a breakdown of what happened.

    """
    initial = tuple(buffs)
    current = initial
    hp = current_hp
    damage_taken = 0
    healing = 0
    messages: list[str] = []

    for buff in initial:
        effect = buff.effect
        if isinstance(effect, DamageOverTimeEffect):
            if effect.value <= 0:
                continue
            tick = calculate_dot_damage(
                effect.value,
                effect.damage_type,
                effect.damage_property,
                derived,
                constants,
            )
            mitigated = apply_mitigation(current, tick, owner_name, allow_reflection=False)
            current = mitigated.updated_buffs
            messages.extend(mitigated.messages)
            if mitigated.final_damage > 0:
                hp -= mitigated.final_damage
                damage_taken += mitigated.final_damage
                messages.append(
                    f"{buff.kind.emoji} {owner_name} takes {mitigated.final_damage} "
                    f"{buff.kind.display_name.lower()} damage."
                )
        elif isinstance(effect, RegenEffect) and effect.value > 0:
            restored = max(0, min(max_hp - hp, math.floor(effect.value)))
            if restored > 0:
                hp += restored
                healing += restored
                messages.append(f"💚 {owner_name} regenerates {restored} HP.")

    log_debug(
        "Buff tick processed",
        {"owner": owner_name, "damage": damage_taken, "healing": healing},
    )
    return BuffTickResult(
        hp=max(0, hp),
        buffs=tick_buff_durations(current),
        damage_taken=damage_taken,
        healing=healing,
        messages=tuple(messages),
    )
