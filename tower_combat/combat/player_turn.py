"""
Player phases of the combat round: upkeep and the player's action.

Both phases take frozen snapshots and return a result record. An action the
player cannot take (cooldown, missing chakra, stun, silence) is reported as a
no-op result with a log line; nothing here raises during combat.
"""

import math
import random
from collections.abc import Sequence

from tower_combat.core.constants import LogType
from tower_combat.core.logging import log_debug, log_info
from tower_combat.core.rng import get_rng, roll_chance
from tower_combat.character.combatant import Enemy, Player
from tower_combat.character.skill import Skill
from tower_combat.combat.combat_state import CombatState, PlayerActionResult, UpkeepResult
from tower_combat.combat.damage import DamageResult, resolve_damage
from tower_combat.combat.guts import GutsContext, check_lethal_damage
from tower_combat.combat.passives import (
    apply_on_hit_passives,
    apply_on_kill_passives,
    apply_turn_start_passives,
    get_defense_bypass,
    is_execute_threshold_met,
)
from tower_combat.combat.terrain import amplify, apply_terrain_to_derived, get_element_amplification
from tower_combat.effects.buff import PERMANENT, Buff, create_buff
from tower_combat.effects.effect import HealEffect, SelfEffect
from tower_combat.effects.mitigation import apply_mitigation
from tower_combat.effects.status_registry import is_silenced, is_stunned, remove_buffs_from_source


# ============================================================================
# Upkeep
# ============================================================================


def process_upkeep(player: Player, enemy: Enemy, state: CombatState) -> UpkeepResult:
    """
    Runs the upkeep phase at the start of the player's turn.

    Active toggle skills charge their upkeep; a toggle the player can no
    longer afford is switched off and its buffs are stripped. Passive skills
    then regenerate HP and chakra, and turn-start equipment passives fire.

    Args:
        player (Player):
            The player snapshot.
        enemy (Enemy):
            The enemy snapshot, returned unchanged.
        state (CombatState):
            The current combat state.

    Returns:
        UpkeepResult:
            The updated player with the upkeep log.

    """
    messages: list[str] = []
    chakra = player.current_chakra
    spent = 0
    buffs = player.buffs
    skills: list[Skill] = []
    deactivated: list[str] = []

    for skill in player.skills:
        if not (skill.is_toggle and skill.is_active) or skill.upkeep_cost <= 0:
            skills.append(skill)
            continue
        if chakra >= skill.upkeep_cost:
            chakra -= skill.upkeep_cost
            spent += skill.upkeep_cost
            messages.append(f"{skill.name} upkeep: -{skill.upkeep_cost} CP")
            skills.append(skill)
        else:
            messages.append(f"{skill.name} deactivated (insufficient chakra)")
            deactivated.append(skill.name)
            buffs = remove_buffs_from_source(buffs, skill.name)
            skills.append(skill.with_active(False))

    player = player.model_copy(
        update={"current_chakra": chakra, "buffs": buffs, "skills": tuple(skills)}
    )

    hp = player.current_hp
    max_hp = player.max_hp
    max_chakra = player.max_chakra
    for skill in player.skills:
        if not skill.is_passive:
            continue
        heal = min(skill.passive_hp_regen, max_hp - hp)
        if heal > 0:
            hp += heal
            messages.append(f"{skill.name}: +{heal} HP")
        restore = min(skill.passive_chakra_regen, max_chakra - chakra)
        if restore > 0:
            chakra += restore
            messages.append(f"{skill.name}: +{restore} CP")
    player = player.with_hp(hp).with_chakra(chakra)

    passive = apply_turn_start_passives(player)
    messages.extend(passive.messages)

    if deactivated:
        log_info("Toggle skills deactivated", {"skills": ", ".join(deactivated)})
    return UpkeepResult(
        player=passive.player,
        enemy=enemy,
        state=state,
        messages=tuple(messages),
        chakra_spent=spent,
        deactivated=tuple(deactivated),
    )


# ============================================================================
# Player action
# ============================================================================


def _rejected(
    player: Player,
    enemy: Enemy,
    state: CombatState,
    skill: Skill,
    reason: str,
) -> PlayerActionResult:
    log_info("Player action rejected", {"skill": skill.name, "reason": reason})
    return PlayerActionResult(
        player=player,
        enemy=enemy,
        state=state,
        messages=(reason,),
        performed=False,
        log_type=LogType.LOSS,
    )


def skill_chakra_cost(player: Player, skill: Skill, state: CombatState) -> int:
    """Chakra the player pays for a skill right now."""
    if state.is_first_turn and state.skip_first_skill_cost:
        return 0
    return math.floor(skill.chakra_cost * player.resource_modifiers.chakra_cost_mult)


def _skill_buffs(
    effects: Sequence[SelfEffect],
    source: str,
    duration: int | None = None,
) -> list[Buff]:
    return [create_buff(e, source=source, duration=duration) for e in effects if not e.instant]


def _apply_self_effects(player: Player, skill: Skill, messages: list[str]) -> Player:
    """Self effects always land: heals resolve now, the rest become buffs."""
    hp = player.current_hp
    for effect in skill.self_effects:
        if isinstance(effect, HealEffect):
            healed = min(math.floor(effect.value), player.max_hp - hp)
            if healed > 0:
                hp += healed
                messages.append(f"💚 {player.name} heals {healed} HP.")
    buffs = _skill_buffs(skill.self_effects, skill.name)
    for buff in buffs:
        messages.append(f"{player.name} gains {buff}.")
    return player.with_buffs(player.buffs + tuple(buffs)).with_hp(hp)


def apply_hostile_effects(
    target_name: str,
    target_buffs: tuple[Buff, ...],
    status_resistance: float,
    skill: Skill,
    rng: random.Random,
    messages: list[str],
) -> tuple[Buff, ...]:
    """
    Rolls each hostile effect of a skill against the target's resistance.

    An effect lands with probability `chance * (1 - status_resistance)`.
    """
    landed: list[Buff] = []
    for effect in skill.hostile_effects:
        if roll_chance(rng, effect.chance * (1 - status_resistance)):
            buff = create_buff(effect, source=skill.name)
            landed.append(buff)
            messages.append(f"{target_name} is afflicted with {buff}.")
        else:
            messages.append(f"{target_name} resists {effect.kind.display_name}.")
    return target_buffs + tuple(landed)


def use_skill(
    player: Player,
    enemy: Enemy,
    skill: Skill,
    state: CombatState,
    rng: random.Random | None = None,
) -> PlayerActionResult:
    """
    Resolves the player's use of a skill against the enemy.

    Args:
        player (Player):
            The acting player.
        enemy (Enemy):
            The target.
        skill (Skill):
            The skill, looked up in the player's loadout by id.
        state (CombatState):
            The current combat state.
        rng (random.Random | None):
            Random source.

    Returns:
        PlayerActionResult:
            The new snapshots and state. `performed` is False when the action
            was rejected, in which case nothing changed.

    """
    rng = get_rng(rng)
    current = player.get_skill(skill.id)
    if current is None:
        return _rejected(player, enemy, state, skill, f"{player.name} does not know {skill.name}!")
    skill = current

    if skill.is_passive:
        return _rejected(player, enemy, state, skill, f"{skill.name} is always active.")
    if not skill.is_ready:
        return _rejected(
            player, enemy, state, skill,
            f"{skill.name} is on cooldown ({skill.current_cooldown} turns).",
        )
    if is_stunned(player.buffs):
        return _rejected(player, enemy, state, skill, "You are stunned!")

    # Switching a toggle off is free and always allowed.
    if skill.is_toggle and skill.is_active:
        player = player.with_skill(skill.with_active(False)).with_buffs(
            remove_buffs_from_source(player.buffs, skill.name)
        )
        # Losing the toggle's stat buffs may lower max HP.
        player = player.with_hp(player.current_hp)
        return PlayerActionResult(
            player=player,
            enemy=enemy,
            state=state,
            messages=(f"{skill.name} deactivated.",),
            skill_used=skill.id,
            log_type=LogType.EFFECT,
        )

    cost = skill_chakra_cost(player, skill, state)
    if skill.chakra_cost > 0 and is_silenced(player.buffs):
        return _rejected(player, enemy, state, skill, "You are silenced!")
    if player.current_chakra < cost or player.current_hp <= skill.hp_cost:
        return _rejected(player, enemy, state, skill, "Insufficient Chakra or HP!")

    messages: list[str] = []
    player = player.model_copy(
        update={
            "current_chakra": player.current_chakra - cost,
            "current_hp": player.current_hp - skill.hp_cost,
        }
    )
    free = cost == 0 and skill.chakra_cost > 0

    if skill.is_toggle:
        buffs = _skill_buffs(skill.self_effects, skill.name, duration=PERMANENT)
        player = player.with_skill(skill.with_active(True).start_cooldown())
        player = player.with_buffs(player.buffs + tuple(buffs))
        messages.append(f"{skill.name} activated." + (" FREE!" if free else ""))
        return PlayerActionResult(
            player=player,
            enemy=enemy,
            state=state,
            messages=tuple(messages),
            skill_used=skill.id,
            log_type=LogType.EFFECT,
        )

    damage: DamageResult | None = None
    dealt = 0
    reflected = 0
    player_defeated = False
    log_type = LogType.EFFECT

    if skill.is_support:
        messages.append(f"You used {skill.name}." + (" FREE!" if free else ""))
        landed = True
    else:
        bypass = get_defense_bypass(player)
        rolled = skill
        if bypass > 0:
            rolled = skill.model_copy(update={"penetration": min(1.0, skill.penetration + bypass)})
        damage = resolve_damage(
            player.effective_primary,
            player.derived,
            enemy.effective_primary,
            apply_terrain_to_derived(enemy.derived, state.terrain),
            rolled,
            player.element,
            enemy.element,
            rng,
        )
        landed = damage.landed
        if damage.is_miss:
            messages.append(f"You used {skill.name} but MISSED!")
            log_type = LogType.MISS
        elif damage.is_evaded:
            messages.append(f"You used {skill.name} but {enemy.name} EVADED!")
            log_type = LogType.MISS
        else:
            amount = damage.final_damage
            mods = player.resource_modifiers
            if mods.damage_mult != 1.0:
                amount = math.floor(amount * mods.damage_mult)
            ambush = state.is_first_turn and state.first_hit_multiplier > 1.0
            if ambush:
                amount = math.floor(amount * state.first_hit_multiplier)
            element = skill.element or player.element
            amount = max(1, amplify(amount, get_element_amplification(state.terrain, element)))

            mitigation = apply_mitigation(enemy.buffs, amount, enemy.name)
            dealt = mitigation.final_damage
            enemy = enemy.with_buffs(mitigation.updated_buffs)
            enemy = enemy.model_copy(update={"current_hp": max(0, enemy.current_hp - dealt)})
            executed = enemy.current_hp > 0 and is_execute_threshold_met(player, enemy)
            if executed:
                dealt += enemy.current_hp
                enemy = enemy.model_copy(update={"current_hp": 0})

            line = f"Used {skill.name} for {dealt} dmg"
            if executed:
                line += " EXECUTE!"
            if free:
                line += " FREE!"
            if ambush:
                line += " AMBUSH!"
            if damage.flat_reduction > 0:
                line += f" ({damage.flat_reduction} blocked)"
            if damage.element_multiplier > 1:
                line += " SUPER EFFECTIVE!"
            elif damage.element_multiplier < 1:
                line += " Resisted."
            if damage.is_crit:
                line += " CRITICAL!"
            messages.append(line)
            messages.extend(mitigation.messages)
            log_type = LogType.CRIT if damage.is_crit else LogType.DAMAGE

            on_hit = apply_on_hit_passives(player, enemy, dealt, rng)
            player = on_hit.player
            enemy = on_hit.enemy or enemy
            messages.extend(on_hit.messages)

            reflected = mitigation.reflected_damage
            if reflected > 0:
                back = apply_mitigation(player.buffs, reflected, player.name, allow_reflection=False)
                messages.extend(back.messages)
                player = player.with_buffs(back.updated_buffs)
                lethal = check_lethal_damage(
                    player.name,
                    player.current_hp,
                    back.final_damage,
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
                player_defeated = not lethal.survived
                messages.append(f"(Reflected {back.final_damage}!)")

    if landed:
        player = _apply_self_effects(player, skill, messages)
        if skill.hostile_effects and not enemy.is_defeated:
            enemy = enemy.with_buffs(
                apply_hostile_effects(
                    enemy.name,
                    enemy.buffs,
                    enemy.derived.status_resistance,
                    skill,
                    rng,
                    messages,
                )
            )

    player = player.with_skill(skill.start_cooldown())

    enemy_defeated = enemy.is_defeated
    if enemy_defeated:
        on_kill = apply_on_kill_passives(player)
        player = on_kill.player
        messages.extend(on_kill.messages)

    log_debug(
        "Player action resolved",
        {"skill": skill.name, "dealt": dealt, "enemy_hp": enemy.current_hp},
    )
    return PlayerActionResult(
        player=player,
        enemy=enemy,
        state=state,
        messages=tuple(messages),
        player_defeated=player_defeated,
        enemy_defeated=enemy_defeated,
        skill_used=skill.id,
        damage=damage,
        damage_dealt=dealt,
        reflected_damage=reflected,
        log_type=log_type,
    )


def pass_turn(player: Player, enemy: Enemy, state: CombatState) -> PlayerActionResult:
    """The player deliberately does nothing this turn."""
    return PlayerActionResult(
        player=player,
        enemy=enemy,
        state=state,
        messages=(f"{player.name} waits.",),
        log_type=LogType.INFO,
    )
