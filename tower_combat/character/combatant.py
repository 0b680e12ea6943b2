"""
Combatant module for the combat engine.

Players and enemies are frozen snapshots. Phase functions read a snapshot and
return a new one built with the `with_*` helpers; nothing is modified in place.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import CombatantType, Element, PassiveEffectType
from tower_combat.core.utils import ratio
from tower_combat.character.attributes import (
    PrimaryAttributes,
    ResourceModifiers,
    ResourceState,
    calculate_resource_modifiers,
)
from tower_combat.character.equipment import (
    EquipmentBonuses,
    EquipmentPassive,
    Item,
    aggregate_equipment_bonuses,
    collect_passives,
)
from tower_combat.character.skill import Skill, replace_skill
from tower_combat.character.stats import DerivedStats, apply_stat_buffs, calculate_derived_stats
from tower_combat.effects.buff import Buff


class Combatant(BaseModel):
    """
    State shared by every participant of an encounter.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Display name.")
    combatant_type: CombatantType = Field(description="Side of the encounter.")
    primary: PrimaryAttributes = Field(
        default_factory=PrimaryAttributes,
        description="Unbuffed primary attributes.",
    )
    element: Element = Field(Element.PHYSICAL, description="Elemental affinity.")
    current_hp: int = Field(description="Current hit points.")
    current_chakra: int = Field(0, description="Current chakra.")
    skills: tuple[Skill, ...] = Field((), description="Skill loadout.")
    buffs: tuple[Buff, ...] = Field((), description="Active buffs and debuffs.")

    def model_post_init(self, _: Any) -> None:
        if not self.name:
            raise ValueError("Combatant name must not be empty.")
        if self.current_hp < 0:
            raise ValueError(f"Combatant '{self.name}' cannot have negative HP.")

    # ============================================================================
    # Derived statistics
    # ============================================================================

    @property
    def equipment_bonuses(self) -> EquipmentBonuses | None:
        return None

    @property
    def resource_modifiers(self) -> ResourceModifiers:
        return ResourceModifiers()

    @property
    def passives(self) -> list[EquipmentPassive]:
        return []

    @property
    def effective_primary(self) -> PrimaryAttributes:
        """Primary attributes after stat buffs and equipment bonuses."""
        buffed = apply_stat_buffs(self.primary, self.buffs)
        bonuses = self.equipment_bonuses
        return buffed.plus(bonuses.primary) if bonuses else buffed

    @property
    def derived(self) -> DerivedStats:
        """Derived statistics recomputed from the current snapshot."""
        return calculate_derived_stats(
            apply_stat_buffs(self.primary, self.buffs),
            self.equipment_bonuses,
            self.resource_modifiers,
        )

    @property
    def max_hp(self) -> int:
        return self.derived.max_hp

    @property
    def max_chakra(self) -> int:
        return self.derived.max_chakra

    @property
    def hp_ratio(self) -> float:
        return ratio(self.current_hp, self.max_hp)

    @property
    def is_defeated(self) -> bool:
        return self.current_hp <= 0

    # ============================================================================
    # Copy helpers
    # ============================================================================

    def with_hp(self, hp: int) -> Any:
        """Returns a copy with HP clamped to [0, max_hp]."""
        return self.model_copy(update={"current_hp": max(0, min(self.max_hp, hp))})

    def with_chakra(self, chakra: int) -> Any:
        """Returns a copy with chakra clamped to [0, max_chakra]."""
        return self.model_copy(
            update={"current_chakra": max(0, min(self.max_chakra, chakra))}
        )

    def with_buffs(self, buffs: tuple[Buff, ...] | list[Buff]) -> Any:
        return self.model_copy(update={"buffs": tuple(buffs)})

    def with_skills(self, skills: tuple[Skill, ...] | list[Skill]) -> Any:
        return self.model_copy(update={"skills": tuple(skills)})

    def with_skill(self, skill: Skill) -> Any:
        """Returns a copy with the skill sharing `skill.id` replaced."""
        return self.with_skills(replace_skill(self.skills, skill))

    def get_skill(self, skill_id: str) -> Skill | None:
        return next((s for s in self.skills if s.id == skill_id), None)


class Player(Combatant):
    """
    The player character, carrying equipment and survival resources.
    """

    combatant_type: CombatantType = CombatantType.PLAYER
    equipment: tuple[Item, ...] = Field((), description="Equipped items.")
    resources: ResourceState = Field(
        default_factory=ResourceState,
        description="Hunger, fatigue and morale.",
    )

    @property
    def equipment_bonuses(self) -> EquipmentBonuses | None:
        return aggregate_equipment_bonuses(self.equipment) if self.equipment else None

    @property
    def resource_modifiers(self) -> ResourceModifiers:
        return calculate_resource_modifiers(self.resources)

    @property
    def passives(self) -> list[EquipmentPassive]:
        return collect_passives(self.equipment)

    @property
    def artifact_guts(self) -> EquipmentPassive | None:
        return next(
            (p for p in self.passives if p.passive_type == PassiveEffectType.GUTS),
            None,
        )


class Enemy(Combatant):
    """
    An opponent controlled by the skill selector.
    """

    combatant_type: CombatantType = CombatantType.ENEMY
    tier: str = Field("", description="Optional rank label shown by the presentation layer.")
