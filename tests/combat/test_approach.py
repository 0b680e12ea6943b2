"""
Tests for pre-combat approaches.
"""

import pytest

from tower_combat.core.constants import ApproachType, EffectType, PrimaryStat
from tower_combat.character.attributes import PrimaryAttributes
from tower_combat.character.skill import Skill
from tower_combat.combat.approach import (
    CombatModifiers,
    apply_approach_effects,
    calculate_approach_chance,
    can_afford_approach,
    get_approach,
    meets_approach_requirements,
    resolve_approach,
)
from tower_combat.combat.terrain import TERRAINS
from tower_combat.effects.buff import create_buff
from tower_combat.effects.effect import StatBuffEffect


def test_stealth_chance_scales_with_dexterity_and_terrain(make_player):
    """
    Test the ambush chance: 40 base, 1.5 per dexterity, plus terrain stealth.
    """
    definition = get_approach(ApproachType.STEALTH_AMBUSH)
    player = make_player()

    assert calculate_approach_chance(definition, player) == pytest.approx(55)
    assert calculate_approach_chance(definition, player, TERRAINS["ALLEYWAY"]) == pytest.approx(80)
    assert calculate_approach_chance(
        definition, make_player(primary=PrimaryAttributes(dexterity=100))
    ) == pytest.approx(95)


def test_requirements(make_player):
    stealth = get_approach(ApproachType.STEALTH_AMBUSH)
    trap = get_approach(ApproachType.ENVIRONMENTAL_TRAP)
    bypass = get_approach(ApproachType.SHADOW_BYPASS)
    clever = make_player(primary=PrimaryAttributes(intelligence=20))
    fast = make_player(
        primary=PrimaryAttributes(speed=40),
        skills=(Skill(id="shunshin", name="Body Flicker", damage_mult=0),),
    )

    assert not meets_approach_requirements(stealth, make_player())
    assert meets_approach_requirements(stealth, make_player(primary=PrimaryAttributes(speed=12)))
    assert meets_approach_requirements(trap, clever, TERRAINS["SWAMP"])
    assert not meets_approach_requirements(trap, clever, TERRAINS["OPEN_GROUND"])
    assert not meets_approach_requirements(trap, clever)
    assert meets_approach_requirements(bypass, fast)
    assert not meets_approach_requirements(bypass, fast.with_skills(()))


def test_successful_ambush(make_player, make_enemy, fixed_rng):
    """
    Test that a successful ambush doubles the first hit and buffs the player.
    """
    result = resolve_approach(
        ApproachType.STEALTH_AMBUSH, make_player(), make_enemy(), rng=fixed_rng(0.5, d100=1)
    )
    mods = result.modifiers

    assert result.success
    assert result.roll == 1
    assert result.success_chance == 55
    assert mods.first_hit_multiplier == 2.0
    assert mods.initiative_bonus == 50
    assert mods.xp_multiplier == pytest.approx(1.15)
    assert [b.kind for b in mods.player_buffs] == [EffectType.BUFF]
    # The 15% stun did not land with a 0.5 draw.
    assert mods.enemy_debuffs == ()
    assert "succeeds" in result.description


def test_failed_approach_is_neutral_but_still_costs(make_player, make_enemy, fixed_rng):
    result = resolve_approach(
        ApproachType.GENJUTSU_SETUP, make_player(), make_enemy(), rng=fixed_rng(0.5, d100=100)
    )
    assert not result.success
    assert result.modifiers.first_hit_multiplier == 1.0
    assert result.modifiers.enemy_debuffs == ()
    assert result.modifiers.chakra_cost == 20


def test_shadow_bypass_skips_combat(make_player, make_enemy, fixed_rng):
    result = resolve_approach(
        ApproachType.SHADOW_BYPASS, make_player(), make_enemy(), rng=fixed_rng(0.5, d100=1)
    )
    assert result.modifiers.skip_combat
    assert result.modifiers.xp_multiplier == 0


def test_apply_approach_effects(make_player, make_enemy):
    """
    Test that costs are paid, HP reduction lands and buffs are attached.
    """
    player = make_player()
    enemy = make_enemy()
    buffed = (
        create_buff(StatBuffEffect(target_stat=PrimaryStat.DEXTERITY, value=0.15), source="Silent Strike"),
    )
    modifiers = CombatModifiers(
        chakra_cost=20,
        hp_cost=500,
        enemy_hp_reduction=0.2,
        player_buffs=buffed,
    )
    new_player, new_enemy = apply_approach_effects(player, enemy, modifiers)

    assert new_player.current_chakra == player.current_chakra - 20
    assert new_player.current_hp == 1
    assert new_enemy.current_hp == enemy.max_hp - 34
    assert len(new_player.buffs) == len(buffed)


def test_neutral_modifiers_change_nothing(make_player, make_enemy):
    player, enemy = make_player(), make_enemy()
    assert apply_approach_effects(player, enemy, CombatModifiers()) == (player, enemy)


def test_can_afford_approach(make_player):
    genjutsu = get_approach(ApproachType.GENJUTSU_SETUP)
    assert can_afford_approach(genjutsu, make_player())
    assert not can_afford_approach(genjutsu, make_player(current_chakra=5))
