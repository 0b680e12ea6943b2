"""
Effects system module for the tower combat engine.

This module contains the status effect definitions, split into self effects
and hostile effects, the buffs that carry them, the mitigation pipeline and
the serialization boundary for buffs.
"""

# Import effect definitions
from .effect import (
    BaseEffect,
    ConfusionEffect,
    CurseEffect,
    DamageOverTimeEffect,
    EffectDefinition,
    HealEffect,
    HostileEffect,
    HostileEffectDefinition,
    InvulnerabilityEffect,
    ReflectionEffect,
    RegenEffect,
    SelfEffect,
    SelfEffectDefinition,
    ShieldEffect,
    SilenceEffect,
    StatBuffEffect,
    StatDebuffEffect,
    StunEffect,
)

# Import buffs
from .buff import PERMANENT, Buff, create_buff

# Import the mitigation pipeline
from .mitigation import MitigationResult, apply_mitigation

# Import the serialization boundary
from .serialization import buff_from_dict, buff_to_dict, buffs_from_raw, effect_from_dict


__all__ = [
    # Base classes
    "BaseEffect",
    "SelfEffect",
    "HostileEffect",
    # Self effects
    "StatBuffEffect",
    "ShieldEffect",
    "ReflectionEffect",
    "RegenEffect",
    "InvulnerabilityEffect",
    "HealEffect",
    # Hostile effects
    "StunEffect",
    "ConfusionEffect",
    "SilenceEffect",
    "DamageOverTimeEffect",
    "StatDebuffEffect",
    "CurseEffect",
    # Unions
    "SelfEffectDefinition",
    "HostileEffectDefinition",
    "EffectDefinition",
    # Buffs
    "PERMANENT",
    "Buff",
    "create_buff",
    # Mitigation
    "MitigationResult",
    "apply_mitigation",
    # Serialization
    "effect_from_dict",
    "buff_to_dict",
    "buff_from_dict",
    "buffs_from_raw",
]
