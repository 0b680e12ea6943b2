"""
Tests for primary attributes, resource modifiers and derived stats.
"""

import pytest

from tower_combat.core.constants import DamageType, PrimaryStat
from tower_combat.character.attributes import (
    PrimaryAttributes,
    ResourceModifiers,
    ResourceState,
    calculate_resource_modifiers,
)
from tower_combat.character.equipment import EquipmentBonuses, Item, aggregate_equipment_bonuses
from tower_combat.character.stats import apply_stat_buffs, calculate_derived_stats
from tower_combat.effects.buff import create_buff
from tower_combat.effects.effect import StatBuffEffect, StatDebuffEffect


def _bonus(**values) -> PrimaryAttributes:
    return PrimaryAttributes(**{**{stat.value: 0 for stat in PrimaryStat}, **values})


def test_default_derived_stats():
    """
    Test the derived stats of a combatant with every attribute at 10.
    """
    derived = calculate_derived_stats(PrimaryAttributes())

    assert derived.max_hp == 170
    assert derived.max_chakra == 110
    assert derived.hp_regen == 1
    assert derived.chakra_regen == 2
    assert derived.physical_defense_flat == 3
    assert derived.physical_defense_percent == pytest.approx(10 / 210)
    assert derived.initiative == 20
    assert derived.crit_chance == 13
    assert derived.melee_hit_rate == pytest.approx(95)


def test_percent_defense_is_capped():
    """
    Test that percent defense never exceeds 75% even with huge stats and gear.
    """
    bonuses = EquipmentBonuses(percent_physical_defense=0.5)
    derived = calculate_derived_stats(PrimaryAttributes(strength=1000), bonuses)

    assert derived.physical_defense_percent == pytest.approx(0.75)


def test_crit_chance_is_capped():
    derived = calculate_derived_stats(PrimaryAttributes(dexterity=1000))
    assert derived.crit_chance == 75


def test_defense_for_true_damage_is_zero():
    """
    Test that true damage has no defense pair.
    """
    derived = calculate_derived_stats(PrimaryAttributes())
    assert derived.defense_for(DamageType.TRUE) == (0, 0.0)
    assert derived.defense_for(DamageType.MENTAL) == (
        derived.mental_defense_flat,
        derived.mental_defense_percent,
    )


def test_equipment_bonuses_are_added_before_derivation():
    """
    Test that aggregated equipment bonuses raise primary stats and flat pools.
    """
    items = [
        Item(name="Ring", bonuses=EquipmentBonuses(primary=_bonus(willpower=5), flat_hp=10)),
        Item(name="Belt", bonuses=EquipmentBonuses(flat_hp=10, crit_chance=5)),
    ]
    bonuses = aggregate_equipment_bonuses(items)
    derived = calculate_derived_stats(PrimaryAttributes(), bonuses)

    assert bonuses.primary.willpower == 5
    assert derived.max_hp == 50 + 15 * 12 + 20
    assert derived.crit_chance == 18


def test_negative_primary_stat_is_rejected():
    with pytest.raises(ValueError):
        PrimaryAttributes(strength=-1)


# =============================================================================
# Resource modifiers
# =============================================================================


def test_neutral_resources_have_no_effect():
    assert calculate_resource_modifiers(ResourceState()) == ResourceModifiers()
    assert calculate_resource_modifiers(None) == ResourceModifiers()


def test_starving_lowers_hp_and_damage():
    """
    Test that a starving combatant loses max HP and damage.
    """
    mods = calculate_resource_modifiers(ResourceState(hunger=10))
    derived = calculate_derived_stats(PrimaryAttributes(), resources=mods)

    assert mods.hp_mult == pytest.approx(0.85)
    assert mods.damage_mult == pytest.approx(0.85)
    assert derived.max_hp == 144


def test_exhaustion_slows_and_raises_costs():
    mods = calculate_resource_modifiers(ResourceState(fatigue=90))
    assert mods.speed_mult == pytest.approx(0.85)
    assert mods.chakra_cost_mult == pytest.approx(1.2)


def test_high_morale_boosts_damage_and_xp():
    mods = calculate_resource_modifiers(ResourceState(morale=90, fatigue=10))
    assert mods.damage_mult == pytest.approx(1.1)
    assert mods.xp_mult == pytest.approx(1.1)
    assert mods.speed_mult == pytest.approx(1.05)
    assert mods.chakra_cost_mult == pytest.approx(0.95)


def test_broken_morale_weakens_defense():
    mods = calculate_resource_modifiers(ResourceState(morale=5))
    derived = calculate_derived_stats(PrimaryAttributes(strength=100), resources=mods)

    assert mods.defense_mult == pytest.approx(0.85)
    assert derived.physical_defense_flat == 25


def test_resources_are_bounded():
    with pytest.raises(ValueError):
        ResourceState(hunger=101)


# =============================================================================
# Stat buffs
# =============================================================================


def test_stat_buffs_scale_primary_stats():
    """
    Test that buffs multiply and debuffs divide the targeted stat.
    """
    buffs = [
        create_buff(StatBuffEffect(target_stat=PrimaryStat.STRENGTH, value=0.5, duration=2), "Rage"),
        create_buff(StatDebuffEffect(target_stat=PrimaryStat.SPEED, value=0.3, duration=2), "Slow"),
    ]
    buffed = apply_stat_buffs(PrimaryAttributes(), buffs)

    assert buffed.strength == 15
    assert buffed.speed == 7
    assert buffed.spirit == 10


def test_no_stat_buffs_returns_same_attributes():
    primary = PrimaryAttributes()
    assert apply_stat_buffs(primary, []) is primary
