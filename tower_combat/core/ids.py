"""
Identifier issuance for runtime objects such as buffs.

All identifiers are produced by a single generator that can be swapped for a
sequential one, so that tests observe deterministic buff identities.
"""

import itertools
import uuid


class IdGenerator:
    """Issues unique identifiers built from random UUID fragments."""

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{uuid.uuid4().hex[:8]}"


class SequentialIdGenerator(IdGenerator):
    """Issues identifiers from a monotonically increasing counter."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._counter)}"


_id_generator: IdGenerator = IdGenerator()


def get_id_generator() -> IdGenerator:
    return _id_generator


def set_id_generator(generator: IdGenerator) -> None:
    """Replaces the generator used by every factory in the engine."""
    global _id_generator
    _id_generator = generator


def next_id(prefix: str) -> str:
    """
    Issues a new identifier from the active generator.

    Args:
        prefix (str): A short tag describing the kind of object.

    Returns:
        str: The new identifier.

    """
    return _id_generator.next_id(prefix)
