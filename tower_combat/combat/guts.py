"""
Survival guard ("Guts") for the combat engine.

A lethal blow may be survived through a stat-based roll, leaving the
combatant at 1 HP, or through an artifact that fires once per encounter and
heals to a share of max HP. Within one turn phase Guts fires at most once: any
further lethal event in the same phase is fatal.
"""

import math
import random

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import COMBAT_CONSTANTS
from tower_combat.core.logging import log_debug
from tower_combat.core.rng import get_rng, roll_chance
from tower_combat.character.equipment import EquipmentPassive


class GutsResult(BaseModel):
    """Outcome of a stat-based guts check."""

    model_config = ConfigDict(frozen=True)

    survived: bool = Field(description="Whether the combatant is still standing.")
    new_hp: int = Field(description="HP after the blow.")
    triggered: bool = Field(False, description="Whether guts had to fire.")


class GutsContext(BaseModel):
    """Per-phase guard recording whether guts already fired."""

    model_config = ConfigDict(frozen=True)

    triggered: bool = Field(False, description="Guts fired in this phase.")
    artifact_triggered: bool = Field(False, description="The artifact fired in this phase.")


class LethalCheckResult(BaseModel):
    """Outcome of applying a possibly lethal blow."""

    model_config = ConfigDict(frozen=True)

    survived: bool = Field(description="Whether the combatant is still standing.")
    new_hp: int = Field(description="HP after the blow.")
    guts_triggered: bool = Field(False, description="Stat-based guts fired.")
    artifact_triggered: bool = Field(False, description="Artifact guts fired.")
    message: str | None = Field(None, description="Log line, if anything notable happened.")
    context: GutsContext = Field(description="The phase guard after this check.")


def check_guts(
    current_hp: int,
    incoming_damage: int,
    guts_chance: float,
    rng: random.Random | None = None,
) -> GutsResult:
    """
    Applies a blow with a stat-based chance to survive it at 1 HP.

    Args:
        current_hp (int): HP before the blow.
        incoming_damage (int): Damage of the blow.
        guts_chance (float): Chance (0-1) to survive a lethal blow.
        rng (random.Random | None): Random source.

    Returns:
        GutsResult: Whether the combatant survived and the resulting HP.

    """
    remaining = current_hp - incoming_damage
    if remaining > 0:
        return GutsResult(survived=True, new_hp=remaining)
    if roll_chance(get_rng(rng), guts_chance):
        return GutsResult(survived=True, new_hp=1, triggered=True)
    return GutsResult(survived=False, new_hp=0)


def check_lethal_damage(
    name: str,
    current_hp: int,
    incoming_damage: int,
    max_hp: int,
    guts_chance: float,
    context: GutsContext,
    artifact_guts: EquipmentPassive | None = None,
    artifact_guts_used: bool = False,
    rng: random.Random | None = None,
) -> LethalCheckResult:
    """
    Applies a blow, offering stat guts then artifact guts if it is lethal.

    Args:
        name (str):
            Name used in log lines.
        current_hp (int):
            HP before the blow.
        incoming_damage (int):
            Damage after mitigation.
        max_hp (int):
            Maximum HP, used by the artifact heal.
        guts_chance (float):
            Stat-based guts chance (0-1).
        context (GutsContext):
            The guard of the current phase.
        artifact_guts (EquipmentPassive | None):
            The artifact guts passive, if equipped.
        artifact_guts_used (bool):
            Whether the artifact already fired this encounter.
        rng (random.Random | None):
            Random source.

    Returns:
        LethalCheckResult:
            The outcome and the updated phase guard.

    """
    if current_hp - incoming_damage > 0:
        return LethalCheckResult(
            survived=True,
            new_hp=current_hp - incoming_damage,
            context=context,
        )

    if context.triggered:
        log_debug("Second lethal blow in the same phase", {"name": name})
        return LethalCheckResult(
            survived=False,
            new_hp=0,
            message=f"💀 {name} has no strength left to endure another blow!",
            context=context,
        )

    guts = check_guts(current_hp, incoming_damage, guts_chance, rng)
    if guts.survived:
        return LethalCheckResult(
            survived=True,
            new_hp=guts.new_hp,
            guts_triggered=True,
            message=f"🔥 GUTS! {name} refuses to fall and hangs on with 1 HP!",
            context=context.model_copy(update={"triggered": True}),
        )

    if artifact_guts is not None and not artifact_guts_used:
        heal_percent = artifact_guts.value
        if heal_percent is None:
            heal_percent = COMBAT_CONSTANTS.artifact_guts_heal_percent
        new_hp = max(1, math.floor(max_hp * heal_percent / 100))
        return LethalCheckResult(
            survived=True,
            new_hp=new_hp,
            artifact_triggered=True,
            message=f"✨ {artifact_guts.source or 'An artifact'} blazes! {name} rises with {new_hp} HP!",
            context=GutsContext(triggered=True, artifact_triggered=True),
        )

    return LethalCheckResult(survived=False, new_hp=0, context=context)
