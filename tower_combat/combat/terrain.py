"""
Terrain module for the combat engine.

Terrain is optional context for an encounter. It can shift initiative and
evasion, amplify one element, and carry a hazard that may strike either
combatant at the end of every round. Without a terrain every helper here is
neutral.
"""

import math

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import COMBAT_CONSTANTS, CombatConstants, Element, HazardType
from tower_combat.character.stats import DerivedStats

MAX_EVASION = 0.95


class TerrainHazard(BaseModel):
    """A recurring environmental danger."""

    model_config = ConfigDict(frozen=True)

    hazard_type: HazardType = Field(description="What the hazard does.")
    value: int = Field(description="Damage dealt, or chakra drained.")
    chance: float | None = Field(
        None,
        description="Chance (0-1) to strike each combatant per round.",
    )
    affects_player: bool = Field(True, description="Whether the player can be struck.")
    affects_enemy: bool = Field(True, description="Whether the enemy can be struck.")


class TerrainDefinition(BaseModel):
    """
    A battlefield and its combat modifiers.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique identifier.")
    name: str = Field(description="Display name.")
    description: str = Field("", description="Flavor text.")
    stealth_modifier: float = Field(0, description="Bonus to stealth approaches.")
    initiative_modifier: float = Field(0, description="Bonus to the player's initiative.")
    evasion_modifier: float = Field(0, description="Bonus added to every combatant's evasion.")
    element_amplify: Element | None = Field(None, description="Element empowered here.")
    element_amplify_percent: float | None = Field(
        None,
        description="Damage bonus in percent for the empowered element.",
    )
    hazard: TerrainHazard | None = Field(None, description="Optional recurring hazard.")


def get_initiative_bonus(terrain: TerrainDefinition | None) -> float:
    return terrain.initiative_modifier if terrain else 0


def apply_terrain_to_derived(
    derived: DerivedStats,
    terrain: TerrainDefinition | None,
) -> DerivedStats:
    """Returns derived stats with the terrain's evasion modifier applied."""
    if terrain is None or terrain.evasion_modifier == 0:
        return derived
    evasion = max(0.0, min(MAX_EVASION, derived.evasion + terrain.evasion_modifier))
    return derived.model_copy(update={"evasion": evasion})


def get_element_amplification(
    terrain: TerrainDefinition | None,
    element: Element | None,
    constants: CombatConstants = COMBAT_CONSTANTS,
) -> float:
    """
    Returns the damage multiplier the terrain grants to an element.

    Args:
        terrain (TerrainDefinition | None): The active terrain.
        element (Element | None): Element of the attack.
        constants (CombatConstants): Default amplification.

    Returns:
        float: 1.0 unless the terrain empowers the element.

    """
    if terrain is None or element is None or terrain.element_amplify != element:
        return 1.0
    percent = terrain.element_amplify_percent
    if percent is None:
        percent = constants.default_element_amplify_percent
    return 1 + percent / 100


def amplify(damage: int, multiplier: float) -> int:
    return math.floor(damage * multiplier) if multiplier != 1.0 else damage


# =============================================================================
# Terrain catalogue
# =============================================================================

TERRAINS: dict[str, TerrainDefinition] = {
    t.id: t
    for t in (
        TerrainDefinition(
            id="OPEN_GROUND",
            name="Open Ground",
            description="Flat, exposed terrain with no cover.",
            stealth_modifier=-10,
        ),
        TerrainDefinition(
            id="ROOFTOPS",
            name="Village Rooftops",
            description="High ground with good sightlines. Favors agile fighters.",
            stealth_modifier=10,
            initiative_modifier=5,
            evasion_modifier=0.05,
        ),
        TerrainDefinition(
            id="ALLEYWAY",
            name="Narrow Alleyway",
            description="Tight corridors between buildings. Perfect for ambushes.",
            stealth_modifier=25,
            initiative_modifier=8,
            evasion_modifier=-0.05,
        ),
        TerrainDefinition(
            id="FOG_BANK",
            name="Thick Fog",
            description="Dense mist obscures everything.",
            stealth_modifier=30,
            initiative_modifier=-5,
            evasion_modifier=0.12,
            element_amplify=Element.WATER,
            element_amplify_percent=25,
        ),
        TerrainDefinition(
            id="BRIDGE",
            name="Narrow Bridge",
            description="A precarious crossing over churning water.",
            stealth_modifier=-15,
            evasion_modifier=-0.08,
            hazard=TerrainHazard(hazard_type=HazardType.FALL, value=20, chance=0.10),
        ),
        TerrainDefinition(
            id="WATER_SURFACE",
            name="Water Surface",
            description="Standing on water using chakra. Requires constant concentration.",
            stealth_modifier=-5,
            initiative_modifier=-3,
            evasion_modifier=0.08,
            element_amplify=Element.WATER,
            element_amplify_percent=30,
            hazard=TerrainHazard(hazard_type=HazardType.CHAKRA_DRAIN, value=3, chance=1.0),
        ),
        TerrainDefinition(
            id="SWAMP",
            name="Murky Swamp",
            description="Fetid water and sucking mud.",
            stealth_modifier=15,
            initiative_modifier=-8,
            evasion_modifier=-0.05,
            element_amplify=Element.WATER,
            element_amplify_percent=15,
            hazard=TerrainHazard(hazard_type=HazardType.POISON, value=5, chance=0.25),
        ),
        TerrainDefinition(
            id="GIANT_ROOTS",
            name="Giant Roots",
            description="Massive tree roots create a labyrinth.",
            stealth_modifier=15,
            initiative_modifier=3,
            evasion_modifier=0.05,
            element_amplify=Element.EARTH,
            element_amplify_percent=20,
        ),
        TerrainDefinition(
            id="WATERFALL",
            name="Thundering Waterfall",
            description="Roaring water drowns out all sound.",
            stealth_modifier=20,
            initiative_modifier=-3,
            evasion_modifier=0.15,
            element_amplify=Element.WATER,
            element_amplify_percent=35,
            hazard=TerrainHazard(hazard_type=HazardType.DAMAGE, value=8, chance=0.15),
        ),
        TerrainDefinition(
            id="CLIFF_EDGE",
            name="Cliff Edge",
            description="Precarious ledge with a fatal drop.",
            stealth_modifier=-10,
            initiative_modifier=5,
            evasion_modifier=0.08,
            hazard=TerrainHazard(hazard_type=HazardType.FALL, value=25, chance=0.15),
        ),
        TerrainDefinition(
            id="STONE_PILLARS",
            name="Stone Pillars",
            description="Ancient statues whose chakra still resonates.",
            stealth_modifier=10,
            evasion_modifier=0.05,
            element_amplify=Element.EARTH,
            element_amplify_percent=25,
        ),
        TerrainDefinition(
            id="RAPIDS",
            name="Churning Rapids",
            description="Fast-moving water threatens to sweep you away.",
            stealth_modifier=5,
            initiative_modifier=-5,
            element_amplify=Element.WATER,
            element_amplify_percent=25,
            hazard=TerrainHazard(hazard_type=HazardType.DAMAGE, value=10, chance=0.20),
        ),
        TerrainDefinition(
            id="ROOT_NETWORK",
            name="Root Network",
            description="Living roots pulse with stolen chakra.",
            stealth_modifier=10,
            element_amplify=Element.EARTH,
            element_amplify_percent=20,
            hazard=TerrainHazard(
                hazard_type=HazardType.CHAKRA_DRAIN,
                value=5,
                chance=0.30,
                affects_enemy=False,
            ),
        ),
    )
}


def get_terrain(terrain_id: str | None) -> TerrainDefinition | None:
    """Looks up a catalogue terrain by id, None when unknown or not given."""
    if not terrain_id:
        return None
    return TERRAINS.get(terrain_id.upper())
