"""
Tests for buff queries and per-tick processing.
"""

import pytest

from tower_combat.core.constants import DamageProperty, DamageType, EffectType
from tower_combat.character.attributes import PrimaryAttributes
from tower_combat.character.stats import calculate_derived_stats
from tower_combat.effects.buff import PERMANENT, Buff, create_buff
from tower_combat.effects.effect import (
    DamageOverTimeEffect,
    RegenEffect,
    ShieldEffect,
    SilenceEffect,
    StunEffect,
)
from tower_combat.effects.status_registry import (
    calculate_dot_damage,
    get_effects,
    is_confused,
    is_silenced,
    is_stunned,
    process_buff_ticks,
    remove_buffs_from_source,
    tick_buff_durations,
)


@pytest.fixture
def derived():
    return calculate_derived_stats(PrimaryAttributes())


@pytest.fixture
def tough():
    """Derived stats with heavy physical defense."""
    return calculate_derived_stats(PrimaryAttributes(strength=100))


def test_status_queries():
    buffs = (
        create_buff(StunEffect(duration=1), source="Quake"),
        create_buff(SilenceEffect(duration=2), source="Seal"),
    )
    assert is_stunned(buffs)
    assert is_silenced(buffs)
    assert not is_confused(buffs)
    assert len(get_effects(buffs, EffectType.SILENCE)) == 1


def test_remove_buffs_from_source():
    keep = create_buff(StunEffect(duration=1), source="Quake")
    drop = create_buff(SilenceEffect(duration=2), source="Seal")
    assert remove_buffs_from_source((keep, drop), "Seal") == (keep,)


def test_tick_durations():
    """
    Test that durations count down, last-turn buffs expire and permanent
    buffs stay.
    """
    lasting = create_buff(StunEffect(duration=3), source="A")
    expiring = create_buff(StunEffect(duration=1), source="B")
    permanent = create_buff(StunEffect(duration=1), source="C", duration=PERMANENT)

    ticked = tick_buff_durations((lasting, expiring, permanent))

    assert [b.source for b in ticked] == ["A", "C"]
    assert ticked[0].duration == 2
    assert ticked[1].duration == PERMANENT


def test_buff_rejects_zero_duration():
    with pytest.raises(ValueError):
        Buff(id="b", name="Bad", duration=0, effect=StunEffect(duration=1))


# =============================================================================
# Damage over time
# =============================================================================


def test_true_dot_ignores_defense(tough):
    assert calculate_dot_damage(20, DamageType.TRUE, DamageProperty.NORMAL, tough) == 20


def test_physical_dot_uses_half_effective_defense(tough):
    """
    Test a physical tick against 30 flat and one third percent defense.
    """
    # Flat: min(30 * 0.5, 25 * 0.4) = 10, then percent: floor(15 * 1/3 * 0.5) = 2.
    assert calculate_dot_damage(25, DamageType.PHYSICAL, DamageProperty.NORMAL, tough) == 13
    # Piercing skips the flat part: 25 - floor(25 * 1/3 * 0.5) = 21.
    assert calculate_dot_damage(25, DamageType.PHYSICAL, DamageProperty.PIERCING, tough) == 21
    # Armor break skips the percent part.
    assert calculate_dot_damage(25, DamageType.PHYSICAL, DamageProperty.ARMOR_BREAK, tough) == 15


def test_dot_deals_at_least_one(tough):
    assert calculate_dot_damage(1, DamageType.PHYSICAL, DamageProperty.NORMAL, tough) == 1


def test_process_ticks_applies_dot_and_regen(derived):
    """
    Test that a tick deals DoT damage, heals regen, then counts down.
    """
    buffs = (
        create_buff(DamageOverTimeEffect(effect_type="POISON", value=10, duration=2), source="Fang"),
        create_buff(RegenEffect(value=4, duration=1), source="Salve"),
    )
    result = process_buff_ticks("Kaito", 100, 170, buffs, derived)

    assert result.damage_taken == 10
    assert result.healing == 4
    assert result.hp == 94
    assert len(result.buffs) == 1
    assert result.buffs[0].duration == 1
    assert any("poison" in m for m in result.messages)


def test_regen_is_capped_at_max_hp(derived):
    buffs = (create_buff(RegenEffect(value=50, duration=2), source="Salve"),)
    result = process_buff_ticks("Kaito", 160, 170, buffs, derived)
    assert result.hp == 170
    assert result.healing == 10


def test_dot_is_absorbed_by_shield(derived):
    """
    Test that ticks go through the owner's shields.
    """
    buffs = (
        create_buff(ShieldEffect(value=15, duration=3), source="Iron Skin"),
        create_buff(DamageOverTimeEffect(effect_type="BURN", value=10, duration=3), source="Fire"),
    )
    result = process_buff_ticks("Kaito", 100, 170, buffs, derived)

    assert result.hp == 100
    assert result.damage_taken == 0
    shield = next(b for b in result.buffs if b.kind == EffectType.SHIELD)
    assert shield.effect.value == 5


def test_lethal_tick_clamps_hp_to_zero(derived):
    buffs = (create_buff(DamageOverTimeEffect(effect_type="BLEED", value=30, duration=2), source="Rend"),)
    result = process_buff_ticks("Kaito", 5, 170, buffs, derived)
    assert result.hp == 0
    assert result.damage_taken == 30
