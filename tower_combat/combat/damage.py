"""
Damage module for the combat engine.

Resolves a single skill hit: the hit and evasion rolls, base scaling, the
elemental multiplier, the critical roll, and defense reduction by damage type
and damage property.
"""

import math
import random

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import (
    COMBAT_CONSTANTS,
    AttackMethod,
    CombatConstants,
    DamageProperty,
    DamageType,
    Element,
)
from tower_combat.core.logging import log_debug
from tower_combat.core.rng import get_rng, roll_chance, roll_percent
from tower_combat.character.attributes import PrimaryAttributes
from tower_combat.character.skill import Skill
from tower_combat.character.stats import DerivedStats
from tower_combat.combat.elements import get_element_effectiveness


class DamageResult(BaseModel):
    """
    Breakdown of a resolved hit.
    """

    model_config = ConfigDict(frozen=True)

    raw_damage: int = Field(
        0,
        description="Damage after scaling, element and crit, before defense.",
    )
    flat_reduction: int = Field(0, description="Damage removed by flat defense.")
    percent_reduction: int = Field(0, description="Damage removed by percent defense.")
    final_damage: int = Field(0, description="Damage dealt, at least 1 on a landed hit.")
    is_crit: bool = Field(False, description="Whether the hit was critical.")
    is_miss: bool = Field(False, description="Whether the attack missed.")
    is_evaded: bool = Field(False, description="Whether the defender evaded.")
    element_multiplier: float = Field(1.0, description="Elemental multiplier applied.")

    @property
    def landed(self) -> bool:
        return not (self.is_miss or self.is_evaded)


def calculate_hit_chance(
    attacker_derived: DerivedStats,
    defender_primary: PrimaryAttributes,
    attack_method: AttackMethod,
    constants: CombatConstants = COMBAT_CONSTANTS,
) -> float:
    """Returns the clamped hit chance in percent for a melee or ranged attack."""
    rate = (
        attacker_derived.ranged_hit_rate
        if attack_method == AttackMethod.RANGED
        else attacker_derived.melee_hit_rate
    )
    chance = rate - defender_primary.speed * constants.defender_speed_hit_penalty
    return max(constants.min_hit_chance, min(constants.max_hit_chance, chance))


def resolve_damage(
    attacker_primary: PrimaryAttributes,
    attacker_derived: DerivedStats,
    defender_primary: PrimaryAttributes,
    defender_derived: DerivedStats,
    skill: Skill,
    attacker_element: Element,
    defender_element: Element,
    rng: random.Random | None = None,
    constants: CombatConstants = COMBAT_CONSTANTS,
) -> DamageResult:
    """
    Resolves the damage of one skill use.

    Args:
        attacker_primary (PrimaryAttributes):
            Effective primary attributes of the attacker.
        attacker_derived (DerivedStats):
            Derived stats of the attacker.
        defender_primary (PrimaryAttributes):
            Effective primary attributes of the defender.
        defender_derived (DerivedStats):
            Derived stats of the defender.
        skill (Skill):
            The skill being used.
        attacker_element (Element):
            Element of the attacker, used when the skill has none.
        defender_element (Element):
            Element of the defender.
        rng (random.Random | None):
            Random source, defaults to the engine generator.
        constants (CombatConstants):
            Tunable rule constants.

    Returns:
        DamageResult:
            The breakdown of the hit.

    """
    rng = get_rng(rng)

    # Auto attacks cannot miss or be evaded.
    if skill.attack_method != AttackMethod.AUTO:
        hit_chance = calculate_hit_chance(
            attacker_derived, defender_primary, skill.attack_method, constants
        )
        if roll_percent(rng) > hit_chance:
            log_debug("Attack missed", {"skill": skill.name, "hit_chance": hit_chance})
            return DamageResult(is_miss=True)
        if roll_chance(rng, defender_derived.evasion):
            log_debug("Attack evaded", {"skill": skill.name})
            return DamageResult(is_evaded=True)

    scaling = attacker_primary.get(skill.scaling_stat)
    damage = float(math.floor(scaling * skill.damage_mult))

    element = skill.element or attacker_element
    element_multiplier = get_element_effectiveness(element, defender_element, constants)
    damage = float(math.floor(damage * element_multiplier))

    crit_chance = attacker_derived.crit_chance + skill.crit_bonus
    if element_multiplier > 1:
        crit_chance += constants.elemental_crit_bonus
    is_crit = roll_percent(rng) < crit_chance
    if is_crit:
        multiplier = (
            attacker_derived.ranged_crit_multiplier
            if skill.attack_method == AttackMethod.RANGED
            else attacker_derived.crit_multiplier
        )
        damage = float(math.floor(damage * multiplier))

    raw_damage = int(damage)

    if skill.damage_type == DamageType.TRUE:
        flat_def, percent_def = 0, 0.0
    else:
        flat_def, percent_def = defender_derived.defense_for(skill.damage_type)
        if element_multiplier > 1:
            percent_def *= constants.elemental_defense_factor
        if skill.penetration > 0:
            percent_def *= 1 - skill.penetration

    flat_reduction = 0
    percent_reduction = 0
    if skill.damage_property != DamageProperty.PIERCING:
        flat_reduction = math.floor(min(flat_def, damage * constants.flat_reduction_cap))
        damage -= flat_reduction
    if skill.damage_property != DamageProperty.ARMOR_BREAK:
        percent_reduction = math.floor(damage * percent_def)
        damage -= percent_reduction

    final_damage = max(1, math.floor(damage))

    log_debug(
        "Damage resolved",
        {
            "skill": skill.name,
            "raw": raw_damage,
            "flat": flat_reduction,
            "percent": percent_reduction,
            "final": final_damage,
            "crit": is_crit,
            "element": element_multiplier,
        },
    )
    return DamageResult(
        raw_damage=raw_damage,
        flat_reduction=flat_reduction,
        percent_reduction=percent_reduction,
        final_damage=final_damage,
        is_crit=is_crit,
        element_multiplier=element_multiplier,
    )
