"""
Tests for single-hit damage resolution.
"""

import pytest

from tower_combat.core.constants import AttackMethod, DamageProperty, DamageType, Element
from tower_combat.character.attributes import PrimaryAttributes
from tower_combat.character.skill import Skill
from tower_combat.character.stats import calculate_derived_stats
from tower_combat.combat.damage import calculate_hit_chance, resolve_damage


def _resolve(attacker: PrimaryAttributes, defender: PrimaryAttributes, skill: Skill, rng, **kw):
    return resolve_damage(
        attacker,
        calculate_derived_stats(attacker),
        defender,
        calculate_derived_stats(defender),
        skill,
        kw.get("attacker_element", Element.PHYSICAL),
        kw.get("defender_element", Element.PHYSICAL),
        rng,
    )


def _auto(**kw) -> Skill:
    return Skill(id="blow", name="Blow", attack_method=AttackMethod.AUTO, **kw)


def test_true_auto_attack_scales_with_strength(true_blow, neutral_rng):
    """
    Test that a true-damage auto attack deals exactly strength times the multiplier.
    """
    result = _resolve(PrimaryAttributes(), PrimaryAttributes(), true_blow, neutral_rng)

    assert result.landed
    assert result.raw_damage == 20
    assert result.final_damage == 20
    assert not result.is_crit


@pytest.mark.parametrize(
    "damage_type, damage_property, expected",
    [
        (DamageType.PHYSICAL, DamageProperty.NORMAL, 47),
        (DamageType.PHYSICAL, DamageProperty.PIERCING, 67),
        (DamageType.PHYSICAL, DamageProperty.ARMOR_BREAK, 70),
        (DamageType.TRUE, DamageProperty.NORMAL, 100),
    ],
)
def test_damage_properties_against_defense(damage_type, damage_property, expected, neutral_rng):
    """
    Test each damage property against 30 flat and one third percent defense.
    """
    skill = _auto(damage_mult=2.0, damage_type=damage_type, damage_property=damage_property)
    result = _resolve(
        PrimaryAttributes(strength=50),
        PrimaryAttributes(strength=100),
        skill,
        neutral_rng,
    )
    assert result.raw_damage == 100
    assert result.final_damage == expected


def test_penetration_reduces_percent_defense(neutral_rng):
    skill = _auto(damage_mult=2.0, penetration=0.5)
    result = _resolve(PrimaryAttributes(strength=50), PrimaryAttributes(strength=100), skill, neutral_rng)
    assert result.flat_reduction == 30
    assert result.percent_reduction == 11
    assert result.final_damage == 59


def test_landed_hit_deals_at_least_one(neutral_rng):
    skill = _auto(damage_mult=0.1, damage_type=DamageType.TRUE)
    result = _resolve(PrimaryAttributes(strength=5), PrimaryAttributes(), skill, neutral_rng)
    assert result.raw_damage == 0
    assert result.final_damage == 1


def test_melee_attack_can_miss(strike, fixed_rng):
    result = _resolve(PrimaryAttributes(), PrimaryAttributes(), strike, fixed_rng(0.99))
    assert result.is_miss
    assert not result.landed
    assert result.final_damage == 0


def test_melee_attack_can_be_evaded(strike, sequence_rng):
    result = _resolve(PrimaryAttributes(), PrimaryAttributes(), strike, sequence_rng([0.0, 0.0]))
    assert result.is_evaded
    assert not result.landed


def test_auto_attack_never_misses(true_blow, fixed_rng):
    """
    Test that auto attacks skip the hit and evasion rolls entirely.
    """
    result = _resolve(PrimaryAttributes(), PrimaryAttributes(speed=500), true_blow, fixed_rng(0.99))
    assert result.landed
    assert result.final_damage == 20


def test_melee_and_ranged_crits(sequence_rng):
    """
    Test that crits use the melee multiplier, or the accuracy-scaled one at range.
    """
    melee = Skill(id="jab", name="Jab", damage_type=DamageType.TRUE)
    ranged = melee.model_copy(update={"attack_method": AttackMethod.RANGED})

    melee_hit = _resolve(PrimaryAttributes(), PrimaryAttributes(), melee, sequence_rng([0.0, 0.99, 0.0]))
    ranged_hit = _resolve(PrimaryAttributes(), PrimaryAttributes(), ranged, sequence_rng([0.0, 0.99, 0.0]))

    assert melee_hit.is_crit
    assert melee_hit.final_damage == 17
    assert ranged_hit.is_crit
    assert ranged_hit.final_damage == 18


def test_elemental_advantage_and_resistance(true_blow, neutral_rng):
    strong = _resolve(
        PrimaryAttributes(),
        PrimaryAttributes(),
        true_blow,
        neutral_rng,
        attacker_element=Element.FIRE,
        defender_element=Element.WIND,
    )
    weak = _resolve(
        PrimaryAttributes(),
        PrimaryAttributes(),
        true_blow,
        neutral_rng,
        attacker_element=Element.WIND,
        defender_element=Element.FIRE,
    )
    assert strong.element_multiplier == 1.5
    assert strong.final_damage == 30
    assert weak.element_multiplier == 0.5
    assert weak.final_damage == 10


def test_skill_element_overrides_user_element(neutral_rng):
    skill = _auto(damage_mult=2.0, damage_type=DamageType.TRUE, element=Element.WATER)
    result = _resolve(
        PrimaryAttributes(),
        PrimaryAttributes(),
        skill,
        neutral_rng,
        attacker_element=Element.EARTH,
        defender_element=Element.FIRE,
    )
    assert result.element_multiplier == 1.5


def test_hit_chance_is_clamped():
    attacker = calculate_derived_stats(PrimaryAttributes())
    assert calculate_hit_chance(attacker, PrimaryAttributes(speed=200), AttackMethod.MELEE) == 30
    assert calculate_hit_chance(attacker, PrimaryAttributes(speed=0), AttackMethod.RANGED) == pytest.approx(95)
