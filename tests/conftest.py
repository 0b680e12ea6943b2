"""
Shared fixtures for the combat engine tests.
"""

import random
from collections.abc import Iterable

import pytest

from tower_combat.core.constants import AttackMethod, DamageType
from tower_combat.core.ids import IdGenerator, SequentialIdGenerator, get_id_generator, set_id_generator
from tower_combat.character.combatant import Enemy, Player
from tower_combat.character.skill import Skill


class FixedRng(random.Random):
    """A generator whose every draw returns the same values.

    0.5 is the neutral value against default stats: attacks hit, are not
    evaded, do not crit, and full-chance effects land.
    """

    def __init__(self, value: float = 0.5, d100: int = 50):
        super().__init__(0)
        self.value = value
        self.d100 = d100

    def random(self) -> float:
        return self.value

    def randint(self, a: int, b: int) -> int:
        return max(a, min(b, self.d100))


class SequenceRng(random.Random):
    """A generator replaying scripted draws, then a fallback value."""

    def __init__(self, values: Iterable[float], fallback: float = 0.5):
        super().__init__(0)
        self.values = list(values)
        self.fallback = fallback

    def random(self) -> float:
        return self.values.pop(0) if self.values else self.fallback


@pytest.fixture(autouse=True)
def sequential_ids():
    """Gives every test deterministic buff identifiers."""
    previous: IdGenerator = get_id_generator()
    set_id_generator(SequentialIdGenerator())
    yield
    set_id_generator(previous)


@pytest.fixture
def neutral_rng():
    return FixedRng(0.5)


@pytest.fixture
def fixed_rng():
    """Factory for generators returning constant draws."""
    return FixedRng


@pytest.fixture
def sequence_rng():
    """Factory for generators replaying scripted draws."""
    return SequenceRng


@pytest.fixture
def strike():
    return Skill(id="strike", name="Strike", damage_mult=1.0)


@pytest.fixture
def true_blow():
    """An unmissable skill dealing exactly strength x2."""
    return Skill(
        id="true_blow",
        name="True Blow",
        damage_mult=2.0,
        damage_type=DamageType.TRUE,
        attack_method=AttackMethod.AUTO,
    )


@pytest.fixture
def make_player():
    def _make(**overrides) -> Player:
        fill_hp = "current_hp" not in overrides
        fill_chakra = "current_chakra" not in overrides
        overrides.setdefault("name", "Kaito")
        overrides.setdefault("current_hp", 1)
        player = Player(**overrides)
        update = {}
        if fill_hp:
            update["current_hp"] = player.max_hp
        if fill_chakra:
            update["current_chakra"] = player.max_chakra
        return player.model_copy(update=update)

    return _make


@pytest.fixture
def make_enemy():
    def _make(**overrides) -> Enemy:
        fill_hp = "current_hp" not in overrides
        overrides.setdefault("name", "Tower Wolf")
        overrides.setdefault("current_hp", 1)
        enemy = Enemy(**overrides)
        if fill_hp:
            enemy = enemy.model_copy(update={"current_hp": enemy.max_hp})
        return enemy

    return _make
