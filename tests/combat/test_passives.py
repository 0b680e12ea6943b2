"""
Tests for equipment passives.
"""

import pytest

from tower_combat.core.constants import EffectType, PassiveEffectType
from tower_combat.character.equipment import EquipmentPassive, Item
from tower_combat.character.skill import Skill
from tower_combat.combat.combat_state import create_combat_state
from tower_combat.combat.passives import (
    FIRST_TURN_DURATION,
    apply_combat_start_passives,
    apply_on_hit_passives,
    apply_on_kill_passives,
    apply_turn_start_passives,
    get_defense_bypass,
    is_execute_threshold_met,
    roll_counter_attack,
)


def _item(passive_type: PassiveEffectType, value: float | None = None, name: str | None = None) -> Item:
    return Item(
        name=name or passive_type.display_name,
        passive=EquipmentPassive(passive_type=passive_type, value=value),
    )


@pytest.fixture
def equipped(make_player):
    def _equip(*items: Item, **overrides):
        return make_player(equipment=tuple(items), **overrides)

    return _equip


def test_passives_are_tagged_with_their_item(equipped):
    player = equipped(_item(PassiveEffectType.REGEN, name="Jade Ring"))
    assert player.passives[0].source == "Jade Ring"


def test_combat_start_passives(equipped):
    """
    Test the shield, invulnerability, reflection and free-skill passives.
    """
    player = equipped(
        _item(PassiveEffectType.SHIELD_ON_START, 50),
        _item(PassiveEffectType.INVULNERABLE_FIRST_TURN),
        _item(PassiveEffectType.REFLECT),
        _item(PassiveEffectType.FREE_FIRST_SKILL),
    )
    result = apply_combat_start_passives(player)
    kinds = [b.kind for b in result.player.buffs]

    assert kinds == [EffectType.SHIELD, EffectType.INVULNERABILITY, EffectType.REFLECTION]
    shield, invulnerable, reflect = result.player.buffs
    assert shield.effect.value == 55
    assert invulnerable.duration == FIRST_TURN_DURATION
    assert reflect.effect.value == 1.0
    assert len(result.messages) == 4
    assert create_combat_state(player=player).skip_first_skill_cost


def test_turn_start_regen_and_chakra(equipped):
    player = equipped(
        _item(PassiveEffectType.REGEN, 5),
        _item(PassiveEffectType.CHAKRA_RESTORE, 10),
        current_hp=100,
        current_chakra=50,
    )
    result = apply_turn_start_passives(player)
    assert result.player.current_hp == 108
    assert result.player.current_chakra == 60


def test_turn_start_regen_capped(equipped):
    player = equipped(_item(PassiveEffectType.REGEN, 5))
    result = apply_turn_start_passives(player)
    assert result.player.current_hp == player.max_hp
    assert result.messages == ()


def test_on_hit_dots_and_lifesteal(equipped, make_enemy, neutral_rng):
    """
    Test that on-hit passives afflict the enemy and heal the player.
    """
    player = equipped(
        _item(PassiveEffectType.BLEED),
        _item(PassiveEffectType.BURN),
        _item(PassiveEffectType.LIFESTEAL, 15),
        current_hp=100,
    )
    result = apply_on_hit_passives(player, make_enemy(), 40, neutral_rng)

    assert [b.kind for b in result.enemy.buffs] == [EffectType.BLEED, EffectType.BURN]
    assert result.enemy.buffs[0].effect.value == 5
    assert result.enemy.buffs[1].effect.value == 8
    assert result.player.current_hp == 106


def test_on_hit_chakra_drain(equipped, make_enemy, neutral_rng):
    player = equipped(_item(PassiveEffectType.CHAKRA_DRAIN, 10), current_chakra=50)
    enemy = make_enemy(current_chakra=4)
    result = apply_on_hit_passives(player, enemy, 10, neutral_rng)
    assert result.player.current_chakra == 60
    assert result.enemy.current_chakra == 0


def test_on_hit_seal(equipped, make_enemy, fixed_rng):
    player = equipped(_item(PassiveEffectType.SEAL_CHANCE, 10))
    sealed = apply_on_hit_passives(player, make_enemy(), 10, fixed_rng(0.05))
    missed = apply_on_hit_passives(player, make_enemy(), 10, fixed_rng(0.5))

    assert [b.name for b in sealed.enemy.buffs] == ["Seal"]
    assert missed.enemy.buffs == ()


def test_on_kill_resets_cooldowns(equipped):
    skill = Skill(id="fireball", name="Fireball", cooldown=3, current_cooldown=4)
    player = equipped(_item(PassiveEffectType.COOLDOWN_RESET_ON_KILL), skills=(skill,))
    result = apply_on_kill_passives(player)
    assert result.player.get_skill("fireball").current_cooldown == 0


def test_counter_attack_roll(equipped, fixed_rng):
    player = equipped(_item(PassiveEffectType.COUNTER_ATTACK, 25))
    assert roll_counter_attack(player, fixed_rng(0.1)) is not None
    assert roll_counter_attack(player, fixed_rng(0.5)) is None


def test_execute_threshold(equipped, make_enemy):
    player = equipped(_item(PassiveEffectType.EXECUTE_THRESHOLD, 20))
    enemy = make_enemy()
    assert not is_execute_threshold_met(player, enemy)
    assert is_execute_threshold_met(player, enemy.with_hp(enemy.max_hp // 10))


def test_defense_bypass_is_capped(equipped):
    assert get_defense_bypass(equipped(_item(PassiveEffectType.PIERCE_DEFENSE, 30))) == pytest.approx(0.3)
    capped = equipped(
        _item(PassiveEffectType.PIERCE_DEFENSE, 80),
        _item(PassiveEffectType.PIERCE_DEFENSE, 80),
    )
    assert get_defense_bypass(capped) == 1.0
