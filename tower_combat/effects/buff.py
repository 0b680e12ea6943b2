"""
Buff module for the combat engine.

A buff is an effect attached to a combatant for a number of turns. Buffs are
immutable: ticking or consuming one produces a new instance.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import EffectType
from tower_combat.core.ids import next_id
from tower_combat.effects.effect import EffectDefinition

PERMANENT = -1


class Buff(BaseModel):
    """
    An effect active on a combatant.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        description="Unique identifier of this buff instance.",
    )
    name: str = Field(
        description="Display name of the buff.",
    )
    duration: int = Field(
        description="Remaining ticks, -1 for permanent.",
    )
    effect: EffectDefinition = Field(
        description="The effect carried by the buff.",
    )
    source: str = Field(
        "",
        description="Name of the skill or item that created the buff.",
    )

    def model_post_init(self, _: Any) -> None:
        if self.duration != PERMANENT and self.duration < 1:
            raise ValueError(
                f"Buff '{self.name}' must have a positive duration or -1, got {self.duration}."
            )

    @property
    def kind(self) -> EffectType:
        return self.effect.kind

    @property
    def is_permanent(self) -> bool:
        return self.duration == PERMANENT

    def with_duration(self, duration: int) -> "Buff":
        return self.model_copy(update={"duration": duration})

    def with_value(self, value: float) -> "Buff":
        """Returns a copy whose effect carries a new magnitude."""
        return self.model_copy(
            update={"effect": self.effect.model_copy(update={"value": value})}
        )

    def __str__(self) -> str:
        turns = "∞" if self.is_permanent else str(self.duration)
        return f"{self.effect.describe()} [{turns}]"


def create_buff(
    effect: EffectDefinition,
    source: str,
    name: str | None = None,
    duration: int | None = None,
) -> Buff:
    """
    Creates a buff carrying the given effect, with an engine-issued identifier.

    Args:
        effect (EffectDefinition):
            The effect to attach.
        source (str):
            Name of the skill or item granting the buff.
        name (str | None):
            Display name, defaults to the effect kind.
        duration (int | None):
            Duration override, defaults to the effect's own duration.

    Returns:
        Buff:
            The new buff.

    """
    return Buff(
        id=next_id("buff"),
        name=name or effect.kind.display_name,
        duration=effect.duration if duration is None else duration,
        effect=effect,
        source=source,
    )
