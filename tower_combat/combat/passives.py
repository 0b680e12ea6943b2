"""
Equipment passives for the combat engine.

Artifacts equipped by the player carry passives that trigger at fixed points
of the encounter: combat start, turn start, on hit, when struck, and on kill.
Every function returns new snapshots and log lines; nothing is modified in
place.
"""

import math
import random

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import DamageProperty, DamageType, PassiveEffectType
from tower_combat.core.rng import get_rng, roll_percent
from tower_combat.character.combatant import Enemy, Player
from tower_combat.character.equipment import EquipmentPassive
from tower_combat.effects.buff import create_buff
from tower_combat.effects.effect import (
    DamageOverTimeEffect,
    InvulnerabilityEffect,
    ReflectionEffect,
    ShieldEffect,
    StunEffect,
)

# Start-of-combat protections must outlast the first buff tick, which happens
# before the enemy's first action.
FIRST_TURN_DURATION = 2
START_SHIELD_DURATION = 99


class PassiveResult(BaseModel):
    """Snapshots and log lines produced by a passive trigger."""

    model_config = ConfigDict(frozen=True)

    player: Player = Field(description="The player afterwards.")
    enemy: Enemy | None = Field(None, description="The enemy afterwards, if touched.")
    messages: tuple[str, ...] = Field((), description="Log lines.")


def _passives_of(player: Player, *types: PassiveEffectType) -> list[EquipmentPassive]:
    return [p for p in player.passives if p.passive_type in types]


def apply_combat_start_passives(player: Player) -> PassiveResult:
    """
    Grants the shields, invulnerability and reflection of combat-start
    passives. The free first skill is announced here and recorded on the
    combat state by `create_combat_state`.
    """
    buffs = list(player.buffs)
    messages: list[str] = []

    for passive in player.passives:
        source = passive.source
        if passive.passive_type == PassiveEffectType.SHIELD_ON_START:
            value = math.floor(player.current_chakra * passive.amount / 100)
            buffs.append(
                create_buff(
                    ShieldEffect(value=value, duration=START_SHIELD_DURATION),
                    source=source,
                )
            )
            messages.append(f"🛡️ {source} grants a {value} point shield!")
        elif passive.passive_type == PassiveEffectType.INVULNERABLE_FIRST_TURN:
            buffs.append(
                create_buff(InvulnerabilityEffect(duration=FIRST_TURN_DURATION), source=source)
            )
            messages.append(f"✨ {source} grants invulnerability for the first turn!")
        elif passive.passive_type == PassiveEffectType.REFLECT:
            buffs.append(
                create_buff(
                    ReflectionEffect(value=passive.amount / 100, duration=FIRST_TURN_DURATION),
                    source=source,
                )
            )
            messages.append(f"🪞 {source} activates damage reflection!")
        elif passive.passive_type == PassiveEffectType.FREE_FIRST_SKILL:
            messages.append(f"{source}: the first skill is free!")

    return PassiveResult(
        player=player.with_buffs(buffs),
        messages=tuple(messages),
    )


def apply_turn_start_passives(player: Player) -> PassiveResult:
    """Applies regeneration and chakra restoration passives."""
    hp = player.current_hp
    chakra = player.current_chakra
    messages: list[str] = []
    max_hp = player.max_hp

    for passive in _passives_of(player, PassiveEffectType.REGEN, PassiveEffectType.CHAKRA_RESTORE):
        if passive.passive_type == PassiveEffectType.REGEN:
            heal = min(max_hp - hp, math.floor(max_hp * passive.amount / 100))
            if heal > 0:
                hp += heal
                messages.append(f"💚 {passive.source} regenerates {heal} HP.")
        else:
            restore = math.floor(passive.amount)
            chakra += restore
            messages.append(f"🔵 {passive.source} restores {restore} chakra.")

    if not messages:
        return PassiveResult(player=player)
    return PassiveResult(
        player=player.with_hp(hp).with_chakra(chakra),
        messages=tuple(messages),
    )


def apply_on_hit_passives(
    player: Player,
    enemy: Enemy,
    damage_dealt: int,
    rng: random.Random | None = None,
) -> PassiveResult:
    """
    Applies bleed, burn, lifesteal, chakra drain and seal passives after the
    player lands a hit.
    """
    rng = get_rng(rng)
    enemy_buffs = list(enemy.buffs)
    heal = 0
    drained = 0
    messages: list[str] = []

    for passive in player.passives:
        source = passive.source
        ptype = passive.passive_type
        if ptype == PassiveEffectType.BLEED:
            enemy_buffs.append(
                create_buff(
                    DamageOverTimeEffect(
                        effect_type="BLEED",
                        value=passive.amount,
                        duration=passive.duration or 3,
                        damage_type=DamageType.PHYSICAL,
                        damage_property=DamageProperty.PIERCING,
                    ),
                    source=source,
                )
            )
            messages.append(f"🩸 {source} opens a bleeding wound!")
        elif ptype == PassiveEffectType.BURN:
            enemy_buffs.append(
                create_buff(
                    DamageOverTimeEffect(
                        effect_type="BURN",
                        value=passive.amount,
                        duration=passive.duration or 3,
                        damage_type=DamageType.ELEMENTAL,
                    ),
                    source=source,
                )
            )
            messages.append(f"🔥 {source} sets the enemy ablaze!")
        elif ptype == PassiveEffectType.LIFESTEAL:
            stolen = math.floor(damage_dealt * passive.amount / 100)
            if stolen > 0:
                heal += stolen
                messages.append(f"🩸 {source} drains {stolen} HP.")
        elif ptype == PassiveEffectType.CHAKRA_DRAIN:
            amount = math.floor(passive.amount)
            drained += amount
            messages.append(f"🔵 {source} drains {amount} chakra.")
        elif ptype == PassiveEffectType.SEAL_CHANCE:
            if roll_percent(rng) < passive.amount:
                enemy_buffs.append(
                    create_buff(StunEffect(duration=passive.duration or 1), source=source, name="Seal")
                )
                messages.append(f"💫 {source} seals the enemy!")

    if not messages:
        return PassiveResult(player=player, enemy=enemy)

    updated_player = player
    if heal or drained:
        updated_player = player.with_hp(player.current_hp + heal).with_chakra(
            player.current_chakra + drained
        )
    updated_enemy = enemy.with_buffs(enemy_buffs)
    if drained:
        updated_enemy = updated_enemy.with_chakra(enemy.current_chakra - drained)
    return PassiveResult(
        player=updated_player,
        enemy=updated_enemy,
        messages=tuple(messages),
    )


def apply_on_kill_passives(player: Player) -> PassiveResult:
    """Resets every cooldown when the player owns a cooldown-reset passive."""
    resets = _passives_of(player, PassiveEffectType.COOLDOWN_RESET_ON_KILL)
    if not resets:
        return PassiveResult(player=player)
    skills = tuple(s.model_copy(update={"current_cooldown": 0}) for s in player.skills)
    return PassiveResult(
        player=player.with_skills(skills),
        messages=(f"⏳ {resets[0].source}: all cooldowns reset!",),
    )


def roll_counter_attack(player: Player, rng: random.Random | None = None) -> EquipmentPassive | None:
    """Returns the counter-attack passive that triggered, if any."""
    rng = get_rng(rng)
    for passive in _passives_of(player, PassiveEffectType.COUNTER_ATTACK):
        if roll_percent(rng) < passive.amount:
            return passive
    return None


def is_execute_threshold_met(player: Player, enemy: Enemy) -> bool:
    """Whether an execute passive finishes an enemy at its current HP ratio."""
    return any(
        enemy.hp_ratio <= passive.amount / 100
        for passive in _passives_of(player, PassiveEffectType.EXECUTE_THRESHOLD)
    )


def get_defense_bypass(player: Player) -> float:
    """Share (0-1) of percent defense ignored thanks to pierce passives."""
    total = sum(p.amount for p in _passives_of(player, PassiveEffectType.PIERCE_DEFENSE))
    return min(total, 100) / 100
