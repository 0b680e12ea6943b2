"""
Tests for surviving lethal blows through Guts and artifacts.
"""

from tower_combat.core.constants import PassiveEffectType
from tower_combat.character.equipment import EquipmentPassive
from tower_combat.combat.guts import GutsContext, check_guts, check_lethal_damage


def _charm(value=30):
    return EquipmentPassive(passive_type=PassiveEffectType.GUTS, value=value, source="Last Stand Charm")


def test_non_lethal_blow_just_subtracts():
    result = check_guts(100, 30, 1.0)
    assert result.survived
    assert result.new_hp == 70
    assert not result.triggered


def test_guts_leaves_one_hp(neutral_rng):
    result = check_guts(10, 30, 1.0, neutral_rng)
    assert result.survived
    assert result.new_hp == 1
    assert result.triggered


def test_failed_guts_is_fatal(neutral_rng):
    result = check_guts(10, 30, 0.0, neutral_rng)
    assert not result.survived
    assert result.new_hp == 0


def test_guts_fires_once_per_phase(neutral_rng):
    """
    Test that a second lethal blow in the same phase cannot be survived.
    """
    first = check_lethal_damage("Kaito", 10, 30, 170, 1.0, GutsContext(), rng=neutral_rng)
    second = check_lethal_damage("Kaito", first.new_hp, 5, 170, 1.0, first.context, rng=neutral_rng)

    assert first.survived and first.guts_triggered
    assert first.context.triggered
    assert not second.survived
    assert second.new_hp == 0
    assert "no strength left" in second.message


def test_fresh_context_allows_guts_again(neutral_rng):
    first = check_lethal_damage("Kaito", 10, 30, 170, 1.0, GutsContext(), rng=neutral_rng)
    again = check_lethal_damage("Kaito", first.new_hp, 5, 170, 1.0, GutsContext(), rng=neutral_rng)
    assert again.survived
    assert again.new_hp == 1


def test_artifact_heals_to_share_of_max_hp(neutral_rng):
    """
    Test that the artifact rescues the wearer when stat Guts fails.
    """
    result = check_lethal_damage(
        "Kaito", 10, 30, 200, 0.0, GutsContext(), _charm(30), False, neutral_rng
    )
    assert result.survived
    assert result.artifact_triggered
    assert not result.guts_triggered
    assert result.new_hp == 60
    assert result.context.triggered
    assert "Last Stand Charm" in result.message


def test_artifact_default_heal(neutral_rng):
    result = check_lethal_damage(
        "Kaito", 10, 30, 200, 0.0, GutsContext(), _charm(None), False, neutral_rng
    )
    assert result.new_hp == 50


def test_used_artifact_does_not_fire_again(neutral_rng):
    result = check_lethal_damage(
        "Kaito", 10, 30, 200, 0.0, GutsContext(), _charm(), True, neutral_rng
    )
    assert not result.survived
    assert not result.artifact_triggered


def test_non_lethal_blow_keeps_context():
    context = GutsContext(triggered=True)
    result = check_lethal_damage("Kaito", 50, 10, 170, 0.0, context)
    assert result.survived
    assert result.new_hp == 40
    assert result.context == context
