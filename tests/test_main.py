"""
Tests for the demo runner.
"""

import pytest

from tower_combat import main as demo
from tower_combat.core.constants import SkillActionType
from tower_combat.core.utils import ratio
from tower_combat.character.skill import Skill
from tower_combat.combat.combat_state import CombatState
from tower_combat.effects.effect import HealEffect, ShieldEffect


@pytest.fixture
def mend():
    return Skill(id="mend", name="Mend", damage_mult=0, effects=(HealEffect(value=30),))


@pytest.fixture
def guard():
    return Skill(id="guard", name="Guard", damage_mult=0, effects=(ShieldEffect(value=20, duration=2),))


def test_policy_prefers_strongest_attack(make_player, make_enemy, strike, true_blow, mend, guard):
    player = make_player(skills=(strike, true_blow, mend, guard))
    assert demo.choose_skill(player, make_enemy(), CombatState()) == true_blow


def test_policy_heals_when_low(make_player, make_enemy, strike, mend):
    player = make_player(skills=(strike, mend), current_hp=40)
    assert demo.choose_skill(player, make_enemy(), CombatState()) == mend


def test_policy_shields_when_hurt(make_player, make_enemy, strike, guard):
    player = make_player(skills=(strike, guard), current_hp=100)
    assert demo.choose_skill(player, make_enemy(), CombatState()) == guard


def test_policy_passes_without_options(make_player, make_enemy):
    focus = Skill(id="focus", name="Focus", damage_mult=0, action_type=SkillActionType.PASSIVE)
    player = make_player(skills=(focus,))
    assert demo.choose_skill(player, make_enemy(), CombatState()) is None


def test_demo_runs_to_the_end(mocker):
    """
    Test that the bundled content loads and a short seeded duel completes.
    """
    mocker.patch("sys.argv", ["tower-combat-demo", "--seed", "7", "--max-rounds", "5"])
    mocker.patch.object(demo, "setup_logging")
    mocker.patch.object(demo, "cprint")
    crule = mocker.patch.object(demo, "crule")

    demo.main()

    titles = [str(call.args[0]) for call in crule.call_args_list]
    assert any("Combat Finished" in title for title in titles)


def test_ratio_guards_empty_maximum():
    assert ratio(30, 120) == 0.25
    assert ratio(5, 0) == 0.0
