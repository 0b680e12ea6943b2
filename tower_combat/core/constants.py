"""
Constants and enumerations for the combat engine.

Defines the enumerations used to tag elements, stats, damage channels, effects
and phases, the elemental advantage cycle, and the tunable formula constants
used by the stat derivation and damage resolution code.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.replace("_", " ").lower().capitalize()


class CombatantType(NiceEnum):
    """Defines which side of the encounter a combatant fights on."""

    PLAYER = "PLAYER"
    ENEMY = "ENEMY"

    @property
    def color(self) -> str:
        """Returns the color string associated with this combatant type."""
        return {
            CombatantType.PLAYER: "bold blue",
            CombatantType.ENEMY: "bold red",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies combatant type color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class Element(NiceEnum):
    """Defines the elemental affinity of combatants and skills."""

    FIRE = "FIRE"
    WIND = "WIND"
    LIGHTNING = "LIGHTNING"
    EARTH = "EARTH"
    WATER = "WATER"
    PHYSICAL = "PHYSICAL"
    MENTAL = "MENTAL"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this element."""
        return {
            Element.FIRE: "🔥",
            Element.WIND: "🌪️",
            Element.LIGHTNING: "⚡",
            Element.EARTH: "🪨",
            Element.WATER: "💧",
            Element.PHYSICAL: "👊",
            Element.MENTAL: "🌀",
        }.get(self, "❔")

    @property
    def color(self) -> str:
        """Returns the color string associated with this element."""
        return {
            Element.FIRE: "bold red",
            Element.WIND: "bold green",
            Element.LIGHTNING: "bold yellow",
            Element.EARTH: "bold orange3",
            Element.WATER: "bold blue",
            Element.PHYSICAL: "bold white",
            Element.MENTAL: "bold magenta",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies element color formatting to a message."""
        return f"[{self.color}]{message}[/]"


# Each element beats the next one in the ring.
ELEMENTAL_CYCLE: dict[Element, Element] = {
    Element.FIRE: Element.WIND,
    Element.WIND: Element.LIGHTNING,
    Element.LIGHTNING: Element.EARTH,
    Element.EARTH: Element.WATER,
    Element.WATER: Element.FIRE,
}


class PrimaryStat(NiceEnum):
    """Defines the nine primary attributes. Values match the field names."""

    WILLPOWER = "willpower"
    CHAKRA = "chakra"
    STRENGTH = "strength"
    SPIRIT = "spirit"
    INTELLIGENCE = "intelligence"
    CALMNESS = "calmness"
    SPEED = "speed"
    ACCURACY = "accuracy"
    DEXTERITY = "dexterity"

    @property
    def short_name(self) -> str:
        return self.value[:3].upper()


class DamageType(NiceEnum):
    """Defines the defense channel a hit is resolved against."""

    PHYSICAL = "PHYSICAL"
    ELEMENTAL = "ELEMENTAL"
    MENTAL = "MENTAL"
    TRUE = "TRUE"


class DamageProperty(NiceEnum):
    """Defines which defense components a hit ignores."""

    NORMAL = "NORMAL"
    PIERCING = "PIERCING"
    ARMOR_BREAK = "ARMOR_BREAK"


class AttackMethod(NiceEnum):
    """Defines how a skill reaches its target."""

    MELEE = "MELEE"
    RANGED = "RANGED"
    AUTO = "AUTO"


class SkillActionType(NiceEnum):
    """Defines how a skill participates in combat."""

    ACTIVE = "ACTIVE"
    TOGGLE = "TOGGLE"
    PASSIVE = "PASSIVE"


class EffectType(NiceEnum):
    """Defines every kind of status effect a buff can carry."""

    STUN = "STUN"
    CONFUSION = "CONFUSION"
    SILENCE = "SILENCE"
    DOT = "DOT"
    BLEED = "BLEED"
    BURN = "BURN"
    POISON = "POISON"
    REGEN = "REGEN"
    BUFF = "BUFF"
    DEBUFF = "DEBUFF"
    SHIELD = "SHIELD"
    REFLECTION = "REFLECTION"
    CURSE = "CURSE"
    INVULNERABILITY = "INVULNERABILITY"
    HEAL = "HEAL"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this effect type."""
        return {
            EffectType.STUN: "💫",
            EffectType.CONFUSION: "😵",
            EffectType.SILENCE: "🤐",
            EffectType.DOT: "☠️",
            EffectType.BLEED: "🩸",
            EffectType.BURN: "🔥",
            EffectType.POISON: "🧪",
            EffectType.REGEN: "💚",
            EffectType.BUFF: "⬆️",
            EffectType.DEBUFF: "⬇️",
            EffectType.SHIELD: "🛡️",
            EffectType.REFLECTION: "🪞",
            EffectType.CURSE: "🕯️",
            EffectType.INVULNERABILITY: "✨",
            EffectType.HEAL: "❤️",
        }.get(self, "❔")

    @property
    def is_damage_over_time(self) -> bool:
        return self in DOT_EFFECT_TYPES


DOT_EFFECT_TYPES = frozenset(
    {EffectType.DOT, EffectType.BLEED, EffectType.BURN, EffectType.POISON}
)


class LogType(NiceEnum):
    """Defines the category of a combat log line, used for coloring."""

    INFO = "INFO"
    DAMAGE = "DAMAGE"
    HEAL = "HEAL"
    EFFECT = "EFFECT"
    CRIT = "CRIT"
    MISS = "MISS"
    GAIN = "GAIN"
    LOSS = "LOSS"

    @property
    def color(self) -> str:
        """Returns the color string associated with this log type."""
        return {
            LogType.INFO: "white",
            LogType.DAMAGE: "red",
            LogType.HEAL: "green",
            LogType.EFFECT: "cyan",
            LogType.CRIT: "bold yellow",
            LogType.MISS: "dim white",
            LogType.GAIN: "bold green",
            LogType.LOSS: "bold red",
        }.get(self, "white")

    def colorize(self, message: str) -> str:
        """Applies log type color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class TurnPhase(NiceEnum):
    """Defines the states of the combat state machine."""

    UPKEEP = "UPKEEP"
    PLAYER_ACTION = "PLAYER_ACTION"
    ENEMY_ACTION = "ENEMY_ACTION"
    TERRAIN_HAZARD = "TERRAIN_HAZARD"
    PLAYER_DEFEATED = "PLAYER_DEFEATED"
    ENEMY_DEFEATED = "ENEMY_DEFEATED"
    FLED = "FLED"

    @property
    def is_terminal(self) -> bool:
        return self in (
            TurnPhase.PLAYER_DEFEATED,
            TurnPhase.ENEMY_DEFEATED,
            TurnPhase.FLED,
        )


class PassiveEffectType(NiceEnum):
    """Defines the passive effects granted by equipped artifacts."""

    SHIELD_ON_START = "SHIELD_ON_START"
    INVULNERABLE_FIRST_TURN = "INVULNERABLE_FIRST_TURN"
    REFLECT = "REFLECT"
    FREE_FIRST_SKILL = "FREE_FIRST_SKILL"
    REGEN = "REGEN"
    CHAKRA_RESTORE = "CHAKRA_RESTORE"
    BLEED = "BLEED"
    BURN = "BURN"
    LIFESTEAL = "LIFESTEAL"
    CHAKRA_DRAIN = "CHAKRA_DRAIN"
    SEAL_CHANCE = "SEAL_CHANCE"
    EXECUTE_THRESHOLD = "EXECUTE_THRESHOLD"
    COUNTER_ATTACK = "COUNTER_ATTACK"
    COOLDOWN_RESET_ON_KILL = "COOLDOWN_RESET_ON_KILL"
    PIERCE_DEFENSE = "PIERCE_DEFENSE"
    GUTS = "GUTS"


class HazardType(NiceEnum):
    """Defines what a terrain hazard does to whoever it strikes."""

    DAMAGE = "DAMAGE"
    POISON = "POISON"
    FALL = "FALL"
    BURN = "BURN"
    CHAKRA_DRAIN = "CHAKRA_DRAIN"

    @property
    def verb(self) -> str:
        """Returns the phrase used in log lines for this hazard."""
        return {
            HazardType.DAMAGE: "is battered by the terrain",
            HazardType.POISON: "breathes in toxic fumes",
            HazardType.FALL: "loses footing and falls",
            HazardType.BURN: "is scorched by the terrain",
            HazardType.CHAKRA_DRAIN: "feels chakra seep away",
        }.get(self, "is hurt by the terrain")


class ApproachType(NiceEnum):
    """Defines the pre-combat engagement choices."""

    FRONTAL_ASSAULT = "FRONTAL_ASSAULT"
    STEALTH_AMBUSH = "STEALTH_AMBUSH"
    GENJUTSU_SETUP = "GENJUTSU_SETUP"
    ENVIRONMENTAL_TRAP = "ENVIRONMENTAL_TRAP"
    SHADOW_BYPASS = "SHADOW_BYPASS"


# =============================================================================
# Tunable formula constants
# =============================================================================


class StatFormulas(BaseModel):
    """Coefficients of the derived-stat formulas."""

    model_config = ConfigDict(frozen=True)

    hp_base: int = Field(50, description="Base HP before willpower.")
    hp_per_willpower: int = Field(12, description="HP granted per willpower.")
    chakra_base: int = Field(30, description="Base chakra before the chakra stat.")
    chakra_per_chakra: int = Field(8, description="Chakra granted per chakra point.")
    hp_regen_percent: float = Field(0.02, description="Fraction of max HP regained per turn at 20 willpower.")
    chakra_regen_per_intelligence: float = Field(0.2, description="Chakra regained per turn per intelligence.")
    physical_defense_soft_cap: int = Field(200, description="Soft cap for percent physical defense.")
    elemental_defense_soft_cap: int = Field(200, description="Soft cap for percent elemental defense.")
    mental_defense_soft_cap: int = Field(150, description="Soft cap for percent mental defense.")
    flat_physical_defense_per_strength: float = Field(0.3, description="Flat physical defense per strength.")
    flat_elemental_defense_per_spirit: float = Field(0.3, description="Flat elemental defense per spirit.")
    flat_mental_defense_per_calmness: float = Field(0.25, description="Flat mental defense per calmness.")
    percent_defense_cap: float = Field(0.75, description="Hard cap for every percent defense.")
    evasion_soft_cap: int = Field(250, description="Soft cap for evasion.")
    base_hit_chance: float = Field(92, description="Base hit chance in percent.")
    hit_per_stat: float = Field(0.3, description="Hit chance gained per speed or accuracy.")
    base_crit_chance: float = Field(8, description="Base crit chance in percent.")
    crit_per_dexterity: float = Field(0.5, description="Crit chance gained per dexterity.")
    crit_chance_cap: float = Field(75, description="Hard cap for crit chance in percent.")
    base_crit_multiplier: float = Field(1.75, description="Base critical damage multiplier.")
    ranged_crit_bonus_per_accuracy: float = Field(0.008, description="Extra ranged crit multiplier per accuracy.")
    guts_soft_cap: int = Field(200, description="Soft cap for the stat-based guts chance.")
    status_resist_soft_cap: int = Field(80, description="Soft cap for status resistance.")
    initiative_base: float = Field(10, description="Base initiative.")
    initiative_per_speed: float = Field(1, description="Initiative gained per speed.")


class CombatConstants(BaseModel):
    """Tunable constants of the combat rules."""

    model_config = ConfigDict(frozen=True)

    # Hit resolution.
    min_hit_chance: float = Field(30, description="Lower clamp of the hit chance.")
    max_hit_chance: float = Field(98, description="Upper clamp of the hit chance.")
    defender_speed_hit_penalty: float = Field(0.5, description="Hit chance lost per defender speed.")
    # Elements.
    element_strong_multiplier: float = Field(1.5, description="Damage multiplier on elemental advantage.")
    element_resisted_multiplier: float = Field(0.5, description="Damage multiplier on elemental disadvantage.")
    elemental_crit_bonus: float = Field(20, description="Crit chance bonus on elemental advantage.")
    elemental_defense_factor: float = Field(0.5, description="Percent defense factor on elemental advantage.")
    # Defense application.
    flat_reduction_cap: float = Field(0.6, description="Max share of damage flat defense removes.")
    dot_defense_effectiveness: float = Field(0.5, description="Defense effectiveness against DoT ticks.")
    dot_flat_reduction_cap: float = Field(0.4, description="Max share of DoT damage flat defense removes.")
    # Survival.
    artifact_guts_heal_percent: float = Field(25, description="Default heal percent of artifact guts.")
    # Enemy behavior.
    confusion_self_hit_chance: float = Field(0.5, description="Chance a confused enemy hits itself.")
    confusion_self_hit_ratio: float = Field(0.5, description="Strength share of a confused self-hit.")
    counter_attack_ratio: float = Field(0.3, description="Strength share of a counter attack.")
    # Terrain.
    default_hazard_chance: float = Field(0.3, description="Hazard chance when a terrain does not set one.")
    default_element_amplify_percent: float = Field(25, description="Amplification when a terrain does not set one.")
    initiative_jitter: float = Field(10, description="Random initiative added to each side.")
    # Resources.
    hunger_starving_threshold: int = Field(20, description="Hunger below this is starving.")
    hunger_well_fed_threshold: int = Field(70, description="Hunger above this is well fed.")
    fatigue_exhausted_threshold: int = Field(80, description="Fatigue above this is exhausted.")
    fatigue_rested_threshold: int = Field(20, description="Fatigue below this is rested.")
    morale_broken_threshold: int = Field(20, description="Morale below this is broken.")
    morale_high_threshold: int = Field(80, description="Morale above this is high.")


STAT_FORMULAS = StatFormulas()

COMBAT_CONSTANTS = CombatConstants()
