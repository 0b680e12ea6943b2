"""
Effect definitions for the combat engine.

Every status effect is a small frozen model tagged by `effect_type`. Effects
come in two families: self effects, which always land on the combatant using
the skill, and hostile effects, which target the opponent and are subject to a
status-resistance roll. The family is part of the type, so routing never needs
a membership list.
"""

from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import DamageProperty, DamageType, EffectType, PrimaryStat


class BaseEffect(BaseModel):
    """
    Common fields of every effect.
    """

    model_config = ConfigDict(frozen=True)

    effect_type: str = Field(
        description="Discriminator naming the kind of effect.",
    )
    value: float = Field(
        0.0,
        description="Magnitude of the effect; meaning depends on the kind.",
    )
    duration: int = Field(
        1,
        description="Turns the effect lasts once applied, -1 for permanent.",
    )
    chance: float = Field(
        1.0,
        description="Probability (0-1) that the effect is applied.",
    )

    # Instant effects resolve on application and never become buffs.
    instant: ClassVar[bool] = False

    def model_post_init(self, _: Any) -> None:
        if self.duration < -1 or (self.duration == 0 and not self.instant):
            raise ValueError(f"Effect duration must be positive or -1, got {self.duration}.")
        if not 0.0 <= self.chance <= 1.0:
            raise ValueError(f"Effect chance must be between 0 and 1, got {self.chance}.")

    @property
    def kind(self) -> EffectType:
        """The effect type as an enum member."""
        return EffectType(self.effect_type)

    def describe(self) -> str:
        """Short human readable summary used in combat logs."""
        return f"{self.kind.emoji} {self.kind.display_name}"


class SelfEffect(BaseEffect):
    """Base class for effects that always target the user of a skill."""


class HostileEffect(BaseEffect):
    """Base class for effects that target the opponent and can be resisted."""


# =============================================================================
# Self effects
# =============================================================================


class StatBuffEffect(SelfEffect):
    """Raises a primary stat by `value` (a fraction) while active."""

    effect_type: Literal["BUFF"] = "BUFF"
    target_stat: PrimaryStat | None = Field(
        None,
        description="The primary stat scaled by the buff.",
    )

    def describe(self) -> str:
        if self.target_stat:
            return f"{self.kind.emoji} {self.target_stat.short_name} +{int(self.value * 100)}%"
        return super().describe()


class ShieldEffect(SelfEffect):
    """Absorbs up to `value` incoming damage before breaking."""

    effect_type: Literal["SHIELD"] = "SHIELD"

    def describe(self) -> str:
        return f"{self.kind.emoji} Shield ({int(self.value)})"


class ReflectionEffect(SelfEffect):
    """Returns `value` (a fraction) of incoming damage to the attacker."""

    effect_type: Literal["REFLECTION"] = "REFLECTION"


class RegenEffect(SelfEffect):
    """Heals `value` HP every tick."""

    effect_type: Literal["REGEN"] = "REGEN"


class InvulnerabilityEffect(SelfEffect):
    """Reduces all incoming damage to zero."""

    effect_type: Literal["INVULNERABILITY"] = "INVULNERABILITY"


class HealEffect(SelfEffect):
    """Instantly restores `value` HP when applied."""

    instant: ClassVar[bool] = True
    effect_type: Literal["HEAL"] = "HEAL"
    duration: int = Field(
        0,
        description="Heals resolve instantly and are not kept as buffs.",
    )


# =============================================================================
# Hostile effects
# =============================================================================


class StunEffect(HostileEffect):
    """The target loses its action while stunned."""

    effect_type: Literal["STUN"] = "STUN"


class ConfusionEffect(HostileEffect):
    """The target may strike itself instead of acting."""

    effect_type: Literal["CONFUSION"] = "CONFUSION"


class SilenceEffect(HostileEffect):
    """The target cannot use skills that cost chakra."""

    effect_type: Literal["SILENCE"] = "SILENCE"


class DamageOverTimeEffect(HostileEffect):
    """Deals `value` damage every tick, resolved with reduced defense."""

    effect_type: Literal["DOT", "BLEED", "BURN", "POISON"] = "DOT"
    damage_type: DamageType = Field(
        DamageType.TRUE,
        description="Defense channel the tick is resolved against.",
    )
    damage_property: DamageProperty = Field(
        DamageProperty.NORMAL,
        description="Which defense components the tick ignores.",
    )

    def describe(self) -> str:
        return f"{self.kind.emoji} {self.kind.display_name} ({int(self.value)}/turn)"


class StatDebuffEffect(HostileEffect):
    """Lowers a primary stat by `value` (a fraction) while active."""

    effect_type: Literal["DEBUFF"] = "DEBUFF"
    target_stat: PrimaryStat | None = Field(
        None,
        description="The primary stat scaled by the debuff.",
    )

    def describe(self) -> str:
        if self.target_stat:
            return f"{self.kind.emoji} {self.target_stat.short_name} -{int(self.value * 100)}%"
        return super().describe()


class CurseEffect(HostileEffect):
    """Amplifies damage taken by `value` (a fraction)."""

    effect_type: Literal["CURSE"] = "CURSE"


SelfEffectDefinition = Annotated[
    Union[
        StatBuffEffect,
        ShieldEffect,
        ReflectionEffect,
        RegenEffect,
        InvulnerabilityEffect,
        HealEffect,
    ],
    Field(discriminator="effect_type"),
]

HostileEffectDefinition = Annotated[
    Union[
        StunEffect,
        ConfusionEffect,
        SilenceEffect,
        DamageOverTimeEffect,
        StatDebuffEffect,
        CurseEffect,
    ],
    Field(discriminator="effect_type"),
]

EffectDefinition = Annotated[
    Union[
        StatBuffEffect,
        ShieldEffect,
        ReflectionEffect,
        RegenEffect,
        InvulnerabilityEffect,
        HealEffect,
        StunEffect,
        ConfusionEffect,
        SilenceEffect,
        DamageOverTimeEffect,
        StatDebuffEffect,
        CurseEffect,
    ],
    Field(discriminator="effect_type"),
]
