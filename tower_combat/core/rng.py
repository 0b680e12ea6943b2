"""
Random number module for the combat engine.

Every roll in the engine (hit, evasion, crit, effect chance, guts, hazards, AI
jitter) goes through a `random.Random` instance. Functions accept an explicit
instance; when none is given the shared engine instance is used, which tests
and replays can replace or seed.
"""

import random

_engine_rng: random.Random = random.Random()


def get_rng(rng: random.Random | None = None) -> random.Random:
    """
    Returns the given generator, or the shared engine generator.

    Args:
        rng (random.Random | None): An explicit generator, if any.

    Returns:
        random.Random: The generator to draw from.

    """
    return rng if rng is not None else _engine_rng


def set_rng(rng: random.Random) -> None:
    """Replaces the shared engine generator."""
    global _engine_rng
    _engine_rng = rng


def seed_rng(seed: int) -> None:
    """Reseeds the shared engine generator for reproducible encounters."""
    set_rng(random.Random(seed))


def roll_chance(rng: random.Random, p: float) -> bool:
    """Return True with probability p (0 <= p <= 1)."""
    if p <= 0.0:
        return False
    if p >= 1.0:
        return True
    return rng.random() < p


def roll_percent(rng: random.Random) -> float:
    """Uniform float in [0, 100)."""
    return rng.random() * 100


def roll_d100(rng: random.Random) -> int:
    """Integer roll in the closed range [1, 100]."""
    return rng.randint(1, 100)
