"""
Serialization of buffs and effects.

This is the boundary where untrusted dictionaries (content files, saved
snapshots from collaborators) become buffs. Malformed entries are skipped and
logged here, so the rest of the engine only ever sees well-formed buffs.
"""

from typing import Any

from pydantic import TypeAdapter, ValidationError

from tower_combat.core.ids import next_id
from tower_combat.core.logging import log_warning
from tower_combat.effects.buff import Buff
from tower_combat.effects.effect import EffectDefinition

_effect_adapter: TypeAdapter[Any] = TypeAdapter(EffectDefinition)


def effect_from_dict(data: dict[str, Any]) -> EffectDefinition:
    """
    Builds an effect from its dictionary form.

    Raises:
        ValidationError: If the data does not describe a known effect.

    """
    return _effect_adapter.validate_python(data)


def buff_to_dict(buff: Buff) -> dict[str, Any]:
    """Serialize a Buff to a JSON-compatible dictionary."""
    return buff.model_dump(mode="json")


def buff_from_dict(data: Any) -> Buff | None:
    """
    Builds a buff from its dictionary form.

    Args:
        data (Any): The raw entry.

    Returns:
        Buff | None: The buff, or None if the entry is malformed.

    """
    if not isinstance(data, dict):
        log_warning("Skipping buff entry that is not a mapping", {"entry": data})
        return None
    if not data.get("effect"):
        log_warning(
            "Skipping buff without an effect payload",
            {"name": data.get("name"), "source": data.get("source")},
        )
        return None
    payload = dict(data)
    payload.setdefault("id", next_id("buff"))
    try:
        effect = effect_from_dict(payload["effect"])
        payload["effect"] = effect
        payload.setdefault("name", effect.kind.display_name)
        payload.setdefault("duration", effect.duration)
        return Buff.model_validate(payload)
    except (ValidationError, ValueError) as e:
        log_warning(
            "Skipping malformed buff",
            {"name": data.get("name"), "error": str(e).splitlines()[0]},
        )
        return None


def buffs_from_raw(entries: list[Any] | None) -> tuple[Buff, ...]:
    """
    Builds every well-formed buff of a raw list, skipping the rest.

    Args:
        entries (list[Any] | None): Raw buff entries.

    Returns:
        tuple[Buff, ...]: The buffs that could be built, in order.

    """
    buffs: list[Buff] = []
    for entry in entries or []:
        buff = buff_from_dict(entry)
        if buff is not None:
            buffs.append(buff)
    return tuple(buffs)
