"""
Stat derivation module for the combat engine.

Converts primary attributes, equipment bonuses and resource modifiers into the
derived combat statistics. Every function here is pure: derived stats are
always recomputed from the primary snapshot and never from a previous result.
"""

import math
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import STAT_FORMULAS, DamageType, PrimaryStat, StatFormulas
from tower_combat.character.attributes import (
    PrimaryAttributes,
    ResourceModifiers,
    ResourceState,
    calculate_resource_modifiers,
)
from tower_combat.character.equipment import EquipmentBonuses
from tower_combat.effects.buff import Buff
from tower_combat.effects.effect import StatBuffEffect, StatDebuffEffect


class DerivedStats(BaseModel):
    """
    Read-only snapshot of the combat statistics of a combatant.
    """

    model_config = ConfigDict(frozen=True)

    max_hp: int = Field(description="Maximum hit points.")
    max_chakra: int = Field(description="Maximum chakra.")
    hp_regen: int = Field(description="HP regained per turn.")
    chakra_regen: int = Field(description="Chakra regained per turn.")
    physical_defense_flat: int = Field(description="Flat physical damage reduction.")
    physical_defense_percent: float = Field(description="Percent physical damage reduction (0-0.75).")
    elemental_defense_flat: int = Field(description="Flat elemental damage reduction.")
    elemental_defense_percent: float = Field(description="Percent elemental damage reduction (0-0.75).")
    mental_defense_flat: int = Field(description="Flat mental damage reduction.")
    mental_defense_percent: float = Field(description="Percent mental damage reduction (0-0.75).")
    status_resistance: float = Field(description="Chance (0-1) to shrug off hostile effects.")
    guts_chance: float = Field(description="Chance (0-1) to survive a lethal blow.")
    melee_hit_rate: float = Field(description="Melee hit chance in percent.")
    ranged_hit_rate: float = Field(description="Ranged hit chance in percent.")
    evasion: float = Field(description="Chance (0-1) to evade a landed hit.")
    crit_chance: float = Field(description="Crit chance in percent.")
    crit_multiplier: float = Field(description="Melee and auto crit multiplier.")
    ranged_crit_multiplier: float = Field(description="Ranged crit multiplier.")
    initiative: float = Field(description="Turn order score.")

    def defense_for(self, damage_type: DamageType) -> tuple[int, float]:
        """
        Returns the (flat, percent) defense pair for a damage type.

        True damage has no defense pair and returns (0, 0.0).
        """
        if damage_type == DamageType.PHYSICAL:
            return self.physical_defense_flat, self.physical_defense_percent
        if damage_type == DamageType.ELEMENTAL:
            return self.elemental_defense_flat, self.elemental_defense_percent
        if damage_type == DamageType.MENTAL:
            return self.mental_defense_flat, self.mental_defense_percent
        return 0, 0.0


def _soft_cap(value: float, cap: float) -> float:
    return value / (value + cap) if value + cap > 0 else 0.0


def calculate_derived_stats(
    primary: PrimaryAttributes,
    equipment: EquipmentBonuses | None = None,
    resources: ResourceState | ResourceModifiers | None = None,
    formulas: StatFormulas = STAT_FORMULAS,
) -> DerivedStats:
    """
    Derives combat statistics from primary attributes.

    Args:
        primary (PrimaryAttributes):
            The combatant's primary attributes, after stat buffs.
        equipment (EquipmentBonuses | None):
            Aggregate equipment bonuses, if any.
        resources (ResourceState | ResourceModifiers | None):
            Resource state or precomputed resource modifiers, if any.
        formulas (StatFormulas):
            Formula coefficients.

    Returns:
        DerivedStats:
            The derived statistics.

    """
    equipment = equipment or EquipmentBonuses()
    if isinstance(resources, ResourceModifiers):
        mods = resources
    else:
        mods = calculate_resource_modifiers(resources)

    stats = primary.plus(equipment.primary)
    speed = stats.speed * mods.speed_mult

    max_hp = math.floor(
        (formulas.hp_base + stats.willpower * formulas.hp_per_willpower + equipment.flat_hp)
        * mods.hp_mult
    )
    max_chakra = formulas.chakra_base + stats.chakra * formulas.chakra_per_chakra + equipment.flat_chakra

    def flat_defense(value: float, bonus: int) -> int:
        return math.floor((math.floor(value) + bonus) * mods.defense_mult)

    def percent_defense(value: float, cap: float, bonus: float) -> float:
        pct = min(formulas.percent_defense_cap, _soft_cap(value, cap) + bonus)
        return pct * mods.defense_mult

    return DerivedStats(
        max_hp=max_hp,
        max_chakra=max_chakra,
        hp_regen=math.floor(max_hp * formulas.hp_regen_percent * (stats.willpower / 20)),
        chakra_regen=math.floor(stats.intelligence * formulas.chakra_regen_per_intelligence),
        physical_defense_flat=flat_defense(
            stats.strength * formulas.flat_physical_defense_per_strength,
            equipment.flat_physical_defense,
        ),
        physical_defense_percent=percent_defense(
            stats.strength,
            formulas.physical_defense_soft_cap,
            equipment.percent_physical_defense,
        ),
        elemental_defense_flat=flat_defense(
            stats.spirit * formulas.flat_elemental_defense_per_spirit,
            equipment.flat_elemental_defense,
        ),
        elemental_defense_percent=percent_defense(
            stats.spirit,
            formulas.elemental_defense_soft_cap,
            equipment.percent_elemental_defense,
        ),
        mental_defense_flat=flat_defense(
            stats.calmness * formulas.flat_mental_defense_per_calmness,
            equipment.flat_mental_defense,
        ),
        mental_defense_percent=percent_defense(
            stats.calmness,
            formulas.mental_defense_soft_cap,
            equipment.percent_mental_defense,
        ),
        status_resistance=_soft_cap(stats.calmness, formulas.status_resist_soft_cap),
        guts_chance=_soft_cap(stats.willpower, formulas.guts_soft_cap),
        melee_hit_rate=formulas.base_hit_chance + speed * formulas.hit_per_stat,
        ranged_hit_rate=formulas.base_hit_chance + stats.accuracy * formulas.hit_per_stat,
        evasion=_soft_cap(speed, formulas.evasion_soft_cap),
        crit_chance=min(
            formulas.crit_chance_cap,
            formulas.base_crit_chance
            + stats.dexterity * formulas.crit_per_dexterity
            + equipment.crit_chance,
        ),
        crit_multiplier=formulas.base_crit_multiplier + equipment.crit_damage,
        ranged_crit_multiplier=(
            formulas.base_crit_multiplier
            + stats.accuracy * formulas.ranged_crit_bonus_per_accuracy
            + equipment.crit_damage
        ),
        initiative=formulas.initiative_base + speed * formulas.initiative_per_speed,
    )


def apply_stat_buffs(primary: PrimaryAttributes, buffs: Iterable[Buff]) -> PrimaryAttributes:
    """
    Scales primary attributes by the active stat buffs and debuffs.

    Each buff multiplies its target stat by (1 + value) and each debuff by
    (1 - value); the result is floored and never negative.

    Args:
        primary (PrimaryAttributes):
            The unbuffed attributes.
        buffs (Iterable[Buff]):
            The combatant's active buffs.

    Returns:
        PrimaryAttributes:
            A new attribute set with the buffs applied.

    """
    values = {stat: float(primary.get(stat)) for stat in PrimaryStat}
    changed = False
    for buff in buffs:
        effect = buff.effect
        if isinstance(effect, StatBuffEffect) and effect.target_stat is not None:
            values[effect.target_stat] *= 1 + effect.value
            changed = True
        elif isinstance(effect, StatDebuffEffect) and effect.target_stat is not None:
            values[effect.target_stat] *= 1 - effect.value
            changed = True
    if not changed:
        return primary
    return PrimaryAttributes(
        **{stat.value: max(0, math.floor(value)) for stat, value in values.items()}
    )
