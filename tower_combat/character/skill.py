"""
Skill module for the combat engine.

Skills are static definitions. The only value that changes during combat is
`current_cooldown`, and toggle skills additionally flip `is_active`; both
changes produce new instances.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import (
    AttackMethod,
    DamageProperty,
    DamageType,
    Element,
    PrimaryStat,
    SkillActionType,
)
from tower_combat.effects.effect import EffectDefinition, HostileEffect, SelfEffect


class Skill(BaseModel):
    """
    A combat technique usable by the player or an enemy.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique identifier of the skill.")
    name: str = Field(description="Display name of the skill.")
    description: str = Field("", description="Flavor text.")
    element: Element | None = Field(
        None,
        description="Element of the skill, defaults to the user's element.",
    )
    damage_mult: float = Field(
        1.0,
        description="Multiplier applied to the scaling stat; 0 for support skills.",
    )
    scaling_stat: PrimaryStat = Field(
        PrimaryStat.STRENGTH,
        description="Primary stat the damage scales with.",
    )
    damage_type: DamageType = Field(
        DamageType.PHYSICAL,
        description="Defense channel the damage is resolved against.",
    )
    damage_property: DamageProperty = Field(
        DamageProperty.NORMAL,
        description="Which defense components the damage ignores.",
    )
    attack_method: AttackMethod = Field(
        AttackMethod.MELEE,
        description="How the skill reaches the target.",
    )
    chakra_cost: int = Field(0, description="Chakra paid on use.")
    hp_cost: int = Field(0, description="HP paid on use.")
    cooldown: int = Field(0, description="Turns before the skill can be reused.")
    current_cooldown: int = Field(0, description="Turns left on the cooldown.")
    crit_bonus: float = Field(0.0, description="Extra crit chance in percent.")
    penetration: float = Field(
        0.0,
        description="Fraction (0-1) of percent defense ignored.",
    )
    effects: tuple[EffectDefinition, ...] = Field(
        (),
        description="Effects applied when the skill is used.",
    )
    action_type: SkillActionType = Field(
        SkillActionType.ACTIVE,
        description="Whether the skill is used, toggled or always on.",
    )
    is_active: bool = Field(False, description="Whether a toggle skill is switched on.")
    upkeep_cost: int = Field(0, description="Chakra paid every turn while toggled on.")
    passive_hp_regen: int = Field(0, description="HP regained per turn from a passive skill.")
    passive_chakra_regen: int = Field(0, description="Chakra regained per turn from a passive skill.")

    def model_post_init(self, _: Any) -> None:
        if not self.name:
            raise ValueError("Skill name must not be empty.")
        if self.damage_mult < 0:
            raise ValueError(f"Skill '{self.name}' has a negative damage multiplier.")
        if min(self.chakra_cost, self.hp_cost, self.cooldown, self.upkeep_cost) < 0:
            raise ValueError(f"Skill '{self.name}' has a negative cost or cooldown.")
        if not 0.0 <= self.penetration <= 1.0:
            raise ValueError(f"Skill '{self.name}' penetration must be between 0 and 1.")

    @property
    def is_toggle(self) -> bool:
        return self.action_type == SkillActionType.TOGGLE

    @property
    def is_passive(self) -> bool:
        return self.action_type == SkillActionType.PASSIVE

    @property
    def is_support(self) -> bool:
        """Support skills deal no damage and only apply their effects."""
        return self.damage_mult <= 0

    @property
    def is_ready(self) -> bool:
        return self.current_cooldown <= 0

    @property
    def self_effects(self) -> list[SelfEffect]:
        return [e for e in self.effects if isinstance(e, SelfEffect)]

    @property
    def hostile_effects(self) -> list[HostileEffect]:
        return [e for e in self.effects if isinstance(e, HostileEffect)]

    def start_cooldown(self) -> "Skill":
        """Returns a copy whose cooldown covers the next `cooldown` turns."""
        if self.cooldown <= 0:
            return self
        return self.model_copy(update={"current_cooldown": self.cooldown + 1})

    def tick_cooldown(self) -> "Skill":
        if self.current_cooldown <= 0:
            return self
        return self.model_copy(update={"current_cooldown": self.current_cooldown - 1})

    def with_active(self, active: bool) -> "Skill":
        return self.model_copy(update={"is_active": active})


def replace_skill(skills: tuple[Skill, ...], updated: Skill) -> tuple[Skill, ...]:
    """Returns the skill tuple with the skill sharing `updated.id` replaced."""
    return tuple(updated if s.id == updated.id else s for s in skills)


def tick_cooldowns(skills: tuple[Skill, ...]) -> tuple[Skill, ...]:
    return tuple(s.tick_cooldown() for s in skills)
