"""
Elemental advantage rules.

The five natural elements form a ring in which each element beats the next
one: Fire, Wind, Lightning, Earth, Water, and back to Fire. Physical and
Mental are outside the ring and always neutral.
"""

from tower_combat.core.constants import (
    COMBAT_CONSTANTS,
    ELEMENTAL_CYCLE,
    CombatConstants,
    Element,
)


def next_in_cycle(element: Element) -> Element | None:
    """Returns the element beaten by `element`, or None outside the ring."""
    return ELEMENTAL_CYCLE.get(element)


def beats(attacker: Element, defender: Element) -> bool:
    return ELEMENTAL_CYCLE.get(attacker) == defender


def get_element_effectiveness(
    attacker: Element,
    defender: Element,
    constants: CombatConstants = COMBAT_CONSTANTS,
) -> float:
    """
    Returns the damage multiplier of an attacking element against a defender.

    Args:
        attacker (Element): Element of the attack.
        defender (Element): Element of the defender.
        constants (CombatConstants): Multipliers to use.

    Returns:
        float: The strong multiplier, the resisted multiplier, or 1.0.

    """
    if beats(attacker, defender):
        return constants.element_strong_multiplier
    if beats(defender, attacker):
        return constants.element_resisted_multiplier
    return 1.0
