"""
Enemy phase of the combat round.

The phase runs in a fixed order:

    1. Buff ticks: damage over time and regeneration, enemy first.
    2. Deaths from ticks: the enemy is checked first, the player may survive
       through Guts.
    3. The enemy acts: stunned enemies lose the action, confused enemies may
       hit themselves, otherwise the selector picks a skill.
    4. Recovery: cooldowns count down and the player regains chakra.

Stun, confusion and silence are read from the enemy's buffs as they were when
the phase began, so a one-turn stun still costs the enemy its action even
though the tick removes it.
"""

import math
import random

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import COMBAT_CONSTANTS, CombatConstants
from tower_combat.core.logging import log_debug
from tower_combat.core.rng import get_rng, roll_chance
from tower_combat.character.combatant import Enemy, Player
from tower_combat.character.skill import Skill, tick_cooldowns
from tower_combat.combat.combat_state import CombatState, EnemyTurnResult
from tower_combat.combat.damage import DamageResult, resolve_damage
from tower_combat.combat.guts import GutsContext, LethalCheckResult, check_lethal_damage
from tower_combat.combat.npc_ai import select_enemy_skill
from tower_combat.combat.passives import roll_counter_attack
from tower_combat.combat.player_turn import apply_hostile_effects
from tower_combat.combat.terrain import apply_terrain_to_derived
from tower_combat.effects.buff import create_buff
from tower_combat.effects.effect import HealEffect
from tower_combat.effects.mitigation import apply_mitigation
from tower_combat.effects.status_registry import (
    is_confused,
    is_silenced,
    is_stunned,
    process_buff_ticks,
)


class _Exchange(BaseModel):
    """Running snapshots while the enemy's action resolves."""

    model_config = ConfigDict(frozen=True)

    player: Player
    enemy: Enemy
    state: CombatState
    context: GutsContext = Field(default_factory=GutsContext)
    damage: DamageResult | None = None
    dealt: int = 0
    guts: bool = False
    artifact_guts: bool = False


def _guard_player(
    exchange: _Exchange,
    incoming: int,
    rng: random.Random,
) -> tuple[_Exchange, LethalCheckResult]:
    """Commits a possibly lethal blow to the player, offering Guts."""
    player = exchange.player
    lethal = check_lethal_damage(
        player.name,
        player.current_hp,
        incoming,
        player.max_hp,
        player.derived.guts_chance,
        exchange.context,
        player.artifact_guts,
        exchange.state.artifact_guts_used,
        rng,
    )
    state = exchange.state
    if lethal.artifact_triggered:
        state = state.model_copy(update={"artifact_guts_used": True})
    return (
        exchange.model_copy(
            update={
                "player": player.model_copy(update={"current_hp": lethal.new_hp}),
                "state": state,
                "context": lethal.context,
                "guts": exchange.guts or lethal.guts_triggered,
                "artifact_guts": exchange.artifact_guts or lethal.artifact_triggered,
            }
        ),
        lethal,
    )


def _enemy_self_effects(enemy: Enemy, skill: Skill, messages: list[str]) -> Enemy:
    hp = enemy.current_hp
    buffs = list(enemy.buffs)
    for effect in skill.self_effects:
        if isinstance(effect, HealEffect):
            healed = min(math.floor(effect.value), enemy.max_hp - hp)
            if healed > 0:
                hp += healed
                messages.append(f"💚 {enemy.name} heals {healed} HP.")
        else:
            buff = create_buff(effect, source=skill.name)
            buffs.append(buff)
            messages.append(f"{enemy.name} gains {buff}.")
    return enemy.with_buffs(buffs).with_hp(hp)


def _enemy_attack(
    exchange: _Exchange,
    skill: Skill,
    rng: random.Random,
    messages: list[str],
    constants: CombatConstants,
) -> _Exchange:
    player = exchange.player
    enemy = exchange.enemy

    if skill.is_support:
        messages.append(f"{enemy.name} uses {skill.name}.")
        enemy = _enemy_self_effects(enemy, skill, messages)
        return exchange.model_copy(update={"enemy": enemy})

    damage = resolve_damage(
        enemy.effective_primary,
        enemy.derived,
        player.effective_primary,
        apply_terrain_to_derived(player.derived, exchange.state.terrain),
        skill,
        enemy.element,
        player.element,
        rng,
        constants,
    )
    exchange = exchange.model_copy(update={"damage": damage})
    if damage.is_miss:
        messages.append(f"{enemy.name} uses {skill.name} but MISSES!")
        return exchange
    if damage.is_evaded:
        messages.append(f"{enemy.name} uses {skill.name} but you EVADE!")
        return exchange

    mitigation = apply_mitigation(player.buffs, damage.final_damage, player.name)
    exchange = exchange.model_copy(
        update={
            "player": player.with_buffs(mitigation.updated_buffs),
            "dealt": mitigation.final_damage,
        }
    )
    line = f"{enemy.name} uses {skill.name} for {mitigation.final_damage} damage"
    if damage.is_crit:
        line += " CRITICAL!"
    if damage.element_multiplier > 1:
        line += " SUPER EFFECTIVE!"
    elif damage.element_multiplier < 1:
        line += " Resisted."
    messages.append(line)
    messages.extend(mitigation.messages)

    exchange, lethal = _guard_player(exchange, mitigation.final_damage, rng)
    if lethal.message:
        messages.append(lethal.message)

    if mitigation.reflected_damage > 0:
        back = apply_mitigation(
            enemy.buffs, mitigation.reflected_damage, enemy.name, allow_reflection=False
        )
        messages.extend(back.messages)
        enemy = enemy.with_buffs(back.updated_buffs)
        enemy = enemy.model_copy(update={"current_hp": max(0, enemy.current_hp - back.final_damage)})
        messages.append(f"Reflection deals {back.final_damage} to {enemy.name}!")
        exchange = exchange.model_copy(update={"enemy": enemy})
        if enemy.is_defeated:
            return exchange

    if not lethal.survived:
        return exchange

    enemy = _enemy_self_effects(enemy, skill, messages)
    player = exchange.player
    if skill.hostile_effects:
        player = player.with_buffs(
            apply_hostile_effects(
                player.name,
                player.buffs,
                player.derived.status_resistance,
                skill,
                rng,
                messages,
            )
        )

    counter = roll_counter_attack(player, rng)
    if counter is not None:
        strength = player.effective_primary.strength
        counter_damage = math.floor(strength * constants.counter_attack_ratio)
        hit = apply_mitigation(enemy.buffs, counter_damage, enemy.name, allow_reflection=False)
        messages.extend(hit.messages)
        enemy = enemy.with_buffs(hit.updated_buffs)
        enemy = enemy.model_copy(update={"current_hp": max(0, enemy.current_hp - hit.final_damage)})
        messages.append(f"{counter.source} counter attack deals {hit.final_damage} to {enemy.name}!")

    return exchange.model_copy(update={"player": player, "enemy": enemy})


def process_enemy_turn(
    player: Player,
    enemy: Enemy,
    state: CombatState,
    rng: random.Random | None = None,
    constants: CombatConstants = COMBAT_CONSTANTS,
) -> EnemyTurnResult:
    """
    Resolves the enemy phase of a round.

    Args:
        player (Player):
            The player snapshot.
        enemy (Enemy):
            The enemy snapshot.
        state (CombatState):
            The current combat state.
        rng (random.Random | None):
            Random source.
        constants (CombatConstants):
            Tunable rule constants.

    Returns:
        EnemyTurnResult:
            The new snapshots, the log of the phase and the defeat flags.

    """
    rng = get_rng(rng)
    messages: list[str] = []
    phase_buffs = enemy.buffs

    # Ticks, enemy first.
    enemy_tick = process_buff_ticks(
        enemy.name, enemy.current_hp, enemy.max_hp, enemy.buffs, enemy.derived, constants
    )
    enemy = enemy.with_buffs(enemy_tick.buffs).with_hp(enemy_tick.hp)
    messages.extend(enemy_tick.messages)

    player_hp_before = player.current_hp
    player_tick = process_buff_ticks(
        player.name, player.current_hp, player.max_hp, player.buffs, player.derived, constants
    )
    player = player.model_copy(update={"buffs": player_tick.buffs})
    messages.extend(player_tick.messages)

    exchange = _Exchange(player=player, enemy=enemy, state=state)

    player_survived = True
    if player_tick.hp <= 0:
        exchange, lethal = _guard_player(exchange, player_hp_before, rng)
        if lethal.message:
            messages.append(lethal.message)
        player_survived = lethal.survived
    else:
        exchange = exchange.model_copy(update={"player": player.with_hp(player_tick.hp)})

    # The enemy is checked first; the caller resolves a double knockout as a win.
    if enemy.is_defeated or not player_survived:
        if enemy.is_defeated:
            messages.append(f"☠️ {enemy.name} succumbs to their wounds!")
        if not player_survived:
            messages.append(f"☠️ {player.name} succumbs to their wounds!")
        return EnemyTurnResult(
            player=exchange.player,
            enemy=exchange.enemy,
            state=exchange.state,
            messages=tuple(messages),
            player_defeated=not player_survived,
            enemy_defeated=enemy.is_defeated,
            guts_triggered=exchange.guts,
            artifact_guts_triggered=exchange.artifact_guts,
        )

    # The enemy acts.
    used: Skill | None = None
    if is_stunned(phase_buffs):
        messages.append(f"{enemy.name} is STUNNED and cannot act!")
    elif is_confused(phase_buffs) and roll_chance(rng, constants.confusion_self_hit_chance):
        self_damage = math.floor(
            exchange.enemy.effective_primary.strength * constants.confusion_self_hit_ratio
        )
        hurt = exchange.enemy.model_copy(
            update={"current_hp": max(0, exchange.enemy.current_hp - self_damage)}
        )
        exchange = exchange.model_copy(update={"enemy": hurt})
        messages.append(f"{enemy.name} is CONFUSED and hits itself for {self_damage}!")
    else:
        candidates = list(exchange.enemy.skills)
        if is_silenced(phase_buffs):
            candidates = [s for s in candidates if s.chakra_cost == 0]
        if not candidates:
            messages.append(f"{enemy.name} has no available skills!")
        else:
            used = select_enemy_skill(exchange.enemy, exchange.player, rng, candidates)
            exchange = _enemy_attack(exchange, used, rng, messages, constants)

    # Recovery.
    enemy = exchange.enemy
    if used is not None:
        enemy = enemy.with_skill(used.start_cooldown())
    enemy = enemy.with_skills(tick_cooldowns(enemy.skills))

    player = exchange.player
    player_defeated = player.is_defeated
    enemy_defeated = enemy.is_defeated
    if not player_defeated:
        player = player.with_skills(tick_cooldowns(player.skills))
        player = player.with_chakra(player.current_chakra + player.derived.chakra_regen)

    log_debug(
        "Enemy turn resolved",
        {
            "enemy": enemy.name,
            "skill": used.name if used else None,
            "dealt": exchange.dealt,
            "player_hp": player.current_hp,
        },
    )
    return EnemyTurnResult(
        player=player,
        enemy=enemy,
        state=exchange.state,
        messages=tuple(messages),
        player_defeated=player_defeated,
        enemy_defeated=enemy_defeated,
        skill_used=used.id if used else None,
        damage=exchange.damage,
        damage_dealt=exchange.dealt,
        guts_triggered=exchange.guts,
        artifact_guts_triggered=exchange.artifact_guts,
    )
