"""
Primary attributes and resource state of combatants.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import COMBAT_CONSTANTS, CombatConstants, PrimaryStat


class PrimaryAttributes(BaseModel):
    """
    The nine primary attributes of a combatant.

    Attributes are never changed during combat math; buffs and equipment
    produce new instances.
    """

    model_config = ConfigDict(frozen=True)

    willpower: int = Field(10, description="Drives max HP, HP regen and guts.")
    chakra: int = Field(10, description="Drives the chakra pool.")
    strength: int = Field(10, description="Physical power and flat physical defense.")
    spirit: int = Field(10, description="Elemental power and elemental defense.")
    intelligence: int = Field(10, description="Chakra regen and trap setting.")
    calmness: int = Field(10, description="Mental defense and status resistance.")
    speed: int = Field(10, description="Initiative, melee accuracy and evasion.")
    accuracy: int = Field(10, description="Ranged hit rate and ranged crit damage.")
    dexterity: int = Field(10, description="Critical hit chance.")

    def model_post_init(self, _: Any) -> None:
        for stat in PrimaryStat:
            if self.get(stat) < 0:
                raise ValueError(f"Primary stat {stat} cannot be negative.")

    def get(self, stat: PrimaryStat) -> int:
        return getattr(self, stat.value)

    def plus(self, other: "PrimaryAttributes") -> "PrimaryAttributes":
        """Returns the stat-wise sum of the two attribute sets."""
        return PrimaryAttributes(
            **{stat.value: self.get(stat) + other.get(stat) for stat in PrimaryStat}
        )

    @classmethod
    def zero(cls) -> "PrimaryAttributes":
        return cls(**{stat.value: 0 for stat in PrimaryStat})


class ResourceState(BaseModel):
    """Survival resources carried by the player between fights (0-100)."""

    model_config = ConfigDict(frozen=True)

    hunger: int = Field(50, ge=0, le=100, description="Satiation, low is starving.")
    fatigue: int = Field(50, ge=0, le=100, description="Tiredness, high is exhausted.")
    morale: int = Field(50, ge=0, le=100, description="Fighting spirit.")


class ResourceModifiers(BaseModel):
    """Multipliers produced by the resource state. All default to neutral."""

    model_config = ConfigDict(frozen=True)

    hp_mult: float = Field(1.0, description="Multiplier on max HP.")
    damage_mult: float = Field(1.0, description="Multiplier on outgoing damage.")
    speed_mult: float = Field(1.0, description="Multiplier on speed-derived stats.")
    chakra_cost_mult: float = Field(1.0, description="Multiplier on skill chakra costs.")
    defense_mult: float = Field(1.0, description="Multiplier on every defense.")
    xp_mult: float = Field(1.0, description="Multiplier on experience gained.")


def calculate_resource_modifiers(
    resources: ResourceState | None,
    constants: CombatConstants = COMBAT_CONSTANTS,
) -> ResourceModifiers:
    """
    Converts hunger, fatigue and morale into combat multipliers.

    Args:
        resources (ResourceState | None):
            The player's resources, None for neutral modifiers.
        constants (CombatConstants):
            Thresholds to use.

    Returns:
        ResourceModifiers:
            The resulting multipliers.

    """
    if resources is None:
        return ResourceModifiers()

    hp_mult = damage_mult = speed_mult = chakra_cost_mult = defense_mult = xp_mult = 1.0

    if resources.hunger < constants.hunger_starving_threshold:
        hp_mult *= 0.85
        damage_mult *= 0.85
    elif resources.hunger > constants.hunger_well_fed_threshold:
        hp_mult *= 1.05

    if resources.fatigue > constants.fatigue_exhausted_threshold:
        speed_mult *= 0.85
        chakra_cost_mult *= 1.2
    elif resources.fatigue < constants.fatigue_rested_threshold:
        speed_mult *= 1.05
        chakra_cost_mult *= 0.95

    if resources.morale < constants.morale_broken_threshold:
        damage_mult *= 0.85
        defense_mult *= 0.85
    elif resources.morale > constants.morale_high_threshold:
        damage_mult *= 1.1
        xp_mult *= 1.1

    return ResourceModifiers(
        hp_mult=hp_mult,
        damage_mult=damage_mult,
        speed_mult=speed_mult,
        chakra_cost_mult=chakra_cost_mult,
        defense_mult=defense_mult,
        xp_mult=xp_mult,
    )
