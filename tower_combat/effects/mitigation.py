"""
Mitigation module for the combat engine.

Applies a target's defensive and amplifying buffs to an incoming damage value,
in a fixed order:

    1. Invulnerability: damage becomes zero and nothing else runs.
    2. Reflection: a share of the incoming (pre-curse) value is returned.
    3. Curse: damage is amplified.
    4. Shield: the first shield absorbs damage and breaks only when exceeded.
"""

import math
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from tower_combat.core.constants import EffectType
from tower_combat.core.logging import log_debug
from tower_combat.effects.buff import Buff


class MitigationResult(BaseModel):
    """Outcome of running incoming damage through a target's buffs."""

    model_config = ConfigDict(frozen=True)

    final_damage: int = Field(description="Damage left to subtract from HP.")
    reflected_damage: int = Field(0, description="Damage returned to the attacker.")
    updated_buffs: tuple[Buff, ...] = Field(description="The target's buffs afterwards.")
    messages: tuple[str, ...] = Field((), description="Log lines describing what happened.")


def _strongest(buffs: Iterable[Buff], kind: EffectType) -> Buff | None:
    matching = [b for b in buffs if b.kind == kind]
    return max(matching, key=lambda b: b.effect.value) if matching else None


def apply_mitigation(
    buffs: tuple[Buff, ...] | list[Buff],
    incoming_damage: int,
    target_name: str = "Target",
    allow_reflection: bool = True,
) -> MitigationResult:
    """
    Runs incoming damage through the target's mitigation buffs.

    Args:
        buffs (tuple[Buff, ...] | list[Buff]):
            The target's active buffs.
        incoming_damage (int):
            Damage before mitigation.
        target_name (str):
            Name used in log lines.
        allow_reflection (bool):
            False when the damage is itself a reflection or has no attacker.

    Returns:
        MitigationResult:
            Final damage, reflected damage, the updated buff list and log lines.

    """
    buffs = tuple(buffs)
    if incoming_damage <= 0:
        return MitigationResult(final_damage=0, updated_buffs=buffs)

    messages: list[str] = []

    if any(b.kind == EffectType.INVULNERABILITY for b in buffs):
        messages.append(f"✨ {target_name} is invulnerable!")
        return MitigationResult(final_damage=0, updated_buffs=buffs, messages=tuple(messages))

    damage = incoming_damage

    reflected = 0
    reflection = _strongest(buffs, EffectType.REFLECTION) if allow_reflection else None
    if reflection is not None:
        reflected = math.floor(incoming_damage * reflection.effect.value)
        if reflected > 0:
            messages.append(f"🪞 {target_name} reflects {reflected} damage!")

    curse = _strongest(buffs, EffectType.CURSE)
    if curse is not None:
        bonus = math.floor(damage * curse.effect.value)
        damage += bonus
        if bonus > 0:
            messages.append(f"🕯️ Curse amplifies the blow by {bonus}!")

    updated = list(buffs)
    index = next((i for i, b in enumerate(updated) if b.kind == EffectType.SHIELD), None)
    if index is not None and damage > 0:
        shield = math.floor(updated[index].effect.value)
        if shield >= damage:
            messages.append(f"🛡️ Shield absorbs {damage} damage.")
            updated[index] = updated[index].with_value(shield - damage)
            damage = 0
        else:
            messages.append(f"🛡️ Shield absorbs {shield} damage and shatters!")
            damage -= shield
            del updated[index]

    log_debug(
        "Mitigation applied",
        {
            "target": target_name,
            "incoming": incoming_damage,
            "final": damage,
            "reflected": reflected,
        },
    )
    return MitigationResult(
        final_damage=damage,
        reflected_damage=reflected,
        updated_buffs=tuple(updated),
        messages=tuple(messages),
    )
