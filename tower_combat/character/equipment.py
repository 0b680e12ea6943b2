"""
Equipment module for the combat engine.

Equipped items contribute stat bonuses, which are aggregated before stat
derivation, and may carry a passive effect triggered during combat.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import PassiveEffectType
from tower_combat.character.attributes import PrimaryAttributes

# Value used when a passive does not set one.
DEFAULT_PASSIVE_VALUES: dict[PassiveEffectType, float] = {
    PassiveEffectType.SHIELD_ON_START: 50,
    PassiveEffectType.REFLECT: 100,
    PassiveEffectType.REGEN: 5,
    PassiveEffectType.CHAKRA_RESTORE: 10,
    PassiveEffectType.BLEED: 5,
    PassiveEffectType.BURN: 8,
    PassiveEffectType.LIFESTEAL: 15,
    PassiveEffectType.CHAKRA_DRAIN: 10,
    PassiveEffectType.SEAL_CHANCE: 10,
    PassiveEffectType.EXECUTE_THRESHOLD: 20,
    PassiveEffectType.COUNTER_ATTACK: 25,
    PassiveEffectType.GUTS: 25,
    PassiveEffectType.PIERCE_DEFENSE: 25,
}


class EquipmentBonuses(BaseModel):
    """Aggregate stat bonuses granted by equipment."""

    model_config = ConfigDict(frozen=True)

    primary: PrimaryAttributes = Field(
        default_factory=PrimaryAttributes.zero,
        description="Bonus added to each primary attribute.",
    )
    flat_hp: int = Field(0, description="Flat max HP bonus.")
    flat_chakra: int = Field(0, description="Flat max chakra bonus.")
    flat_physical_defense: int = Field(0, description="Flat physical defense bonus.")
    flat_elemental_defense: int = Field(0, description="Flat elemental defense bonus.")
    flat_mental_defense: int = Field(0, description="Flat mental defense bonus.")
    percent_physical_defense: float = Field(0.0, description="Percent physical defense bonus (0-1).")
    percent_elemental_defense: float = Field(0.0, description="Percent elemental defense bonus (0-1).")
    percent_mental_defense: float = Field(0.0, description="Percent mental defense bonus (0-1).")
    crit_chance: float = Field(0.0, description="Crit chance bonus in percent.")
    crit_damage: float = Field(0.0, description="Bonus added to crit multipliers.")


class EquipmentPassive(BaseModel):
    """A passive effect carried by an equipped item."""

    model_config = ConfigDict(frozen=True)

    passive_type: PassiveEffectType = Field(description="What the passive does.")
    value: float | None = Field(None, description="Magnitude, defaults per passive type.")
    duration: int | None = Field(None, description="Duration of applied effects, if any.")
    source: str = Field("", description="Name of the item granting the passive.")

    @property
    def amount(self) -> float:
        """The value of the passive, falling back to the type's default."""
        if self.value is not None:
            return self.value
        return DEFAULT_PASSIVE_VALUES.get(self.passive_type, 0)


class Item(BaseModel):
    """An equipped item."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Display name of the item.")
    slot: str = Field("", description="Equipment slot the item occupies.")
    bonuses: EquipmentBonuses = Field(
        default_factory=EquipmentBonuses,
        description="Stat bonuses granted by the item.",
    )
    passive: EquipmentPassive | None = Field(
        None,
        description="Optional passive effect.",
    )


def aggregate_equipment_bonuses(items: Iterable[Item]) -> EquipmentBonuses:
    """
    Sums the bonuses of every equipped item.

    Args:
        items (Iterable[Item]): The equipped items.

    Returns:
        EquipmentBonuses: The aggregate bonuses.

    """
    totals = EquipmentBonuses()
    for item in items:
        b = item.bonuses
        totals = EquipmentBonuses(
            primary=totals.primary.plus(b.primary),
            flat_hp=totals.flat_hp + b.flat_hp,
            flat_chakra=totals.flat_chakra + b.flat_chakra,
            flat_physical_defense=totals.flat_physical_defense + b.flat_physical_defense,
            flat_elemental_defense=totals.flat_elemental_defense + b.flat_elemental_defense,
            flat_mental_defense=totals.flat_mental_defense + b.flat_mental_defense,
            percent_physical_defense=totals.percent_physical_defense + b.percent_physical_defense,
            percent_elemental_defense=totals.percent_elemental_defense + b.percent_elemental_defense,
            percent_mental_defense=totals.percent_mental_defense + b.percent_mental_defense,
            crit_chance=totals.crit_chance + b.crit_chance,
            crit_damage=totals.crit_damage + b.crit_damage,
        )
    return totals


def collect_passives(items: Iterable[Item]) -> list[EquipmentPassive]:
    """Returns the passives of the given items, tagged with their item name."""
    passives: list[EquipmentPassive] = []
    for item in items:
        if item.passive is not None:
            passive = item.passive
            if not passive.source:
                passive = passive.model_copy(update={"source": item.name})
            passives.append(passive)
    return passives
