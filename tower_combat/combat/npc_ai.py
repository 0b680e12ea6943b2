"""
Enemy skill selection.

Scores every off-cooldown enemy skill against the current situation and picks
the highest score. A bounded random jitter keeps enemies from being fully
predictable and breaks ties.
"""

import math
import random
from collections.abc import Sequence

from pydantic import BaseModel, Field

from tower_combat.core.constants import EffectType
from tower_combat.core.logging import log_debug
from tower_combat.core.rng import get_rng
from tower_combat.character.combatant import Combatant, Enemy
from tower_combat.character.skill import Skill
from tower_combat.effects.effect import HostileEffect

# =============================================================================
# Scoring weights
# =============================================================================

BASE_SCORE = 50
SELF_HEAL_BONUS = 60
SELF_BUFF_BONUS = 25
EXECUTE_BONUS = 50
HIGH_DAMAGE_BONUS = 20
DEBUFF_BONUS = 30
ULTIMATE_BONUS = 10
ELEMENT_SYNERGY_BONUS = 5
JITTER = 15

HEAL_EFFECTS = frozenset({EffectType.HEAL, EffectType.REGEN})


class SkillSelection(BaseModel):
    """
    A candidate skill together with its score.
    """

    skill: Skill = Field(
        description="The skill being considered.",
    )
    score: float = Field(
        description="Score of the selection (higher is better).",
    )


def _estimate_damage(enemy: Combatant, skill: Skill) -> int:
    return math.floor(enemy.effective_primary.get(skill.scaling_stat) * skill.damage_mult)


def score_skill(
    enemy: Combatant,
    target: Combatant,
    skill: Skill,
    rng: random.Random | None = None,
) -> float:
    """
    Scores a single skill for the enemy against the target.

    Args:
        enemy (Combatant):
            The acting enemy.
        target (Combatant):
            The enemy's opponent.
        skill (Skill):
            The candidate skill.
        rng (random.Random | None):
            Random source for the jitter.

    Returns:
        float:
            The score of the skill.

    """
    own_hp = enemy.hp_ratio
    target_hp = target.hp_ratio
    self_effects = skill.self_effects
    heals = any(e.kind in HEAL_EFFECTS for e in self_effects)
    self_buffs = any(e.kind not in HEAL_EFFECTS for e in self_effects)
    debuffs = any(isinstance(e, HostileEffect) for e in skill.effects)

    score: float = BASE_SCORE
    # Self-preservation.
    if heals and own_hp < 0.3:
        score += SELF_HEAL_BONUS
    if self_buffs and own_hp > 0.4:
        score += SELF_BUFF_BONUS
    # Finishing blows.
    if target_hp < 0.2 and _estimate_damage(enemy, skill) >= target.current_hp:
        score += EXECUTE_BONUS
    elif 0.2 <= target_hp < 0.5 and skill.damage_mult > 1.5:
        score += HIGH_DAMAGE_BONUS
    # Softening a healthy target.
    if debuffs and target_hp > 0.5:
        score += DEBUFF_BONUS
    if skill.cooldown >= 3:
        score += ULTIMATE_BONUS
    if skill.element is not None and skill.element == enemy.element:
        score += ELEMENT_SYNERGY_BONUS
    score += get_rng(rng).random() * JITTER
    return score


def select_enemy_skill(
    enemy: Enemy,
    target: Combatant,
    rng: random.Random | None = None,
    candidates: Sequence[Skill] | None = None,
) -> Skill | None:
    """
    Picks the enemy's skill for this turn.

    Args:
        enemy (Enemy):
            The acting enemy.
        target (Combatant):
            The enemy's opponent.
        rng (random.Random | None):
            Random source for the jitter.
        candidates (Sequence[Skill] | None):
            Restricts the choice, defaults to the enemy's loadout.

    Returns:
        Skill | None:
            The chosen skill. Falls back to the first candidate when every
            skill is on cooldown, and is None when there is nothing to choose.

    """
    pool = list(candidates) if candidates is not None else list(enemy.skills)
    if not pool:
        log_debug("No skills to choose from", {"enemy": enemy.name})
        return None

    ready = [s for s in pool if s.is_ready]
    if not ready:
        log_debug("No skill off cooldown, using the first one", {"enemy": enemy.name})
        return pool[0]
    if len(ready) == 1:
        return ready[0]

    selections = [
        SkillSelection(skill=s, score=score_skill(enemy, target, s, rng)) for s in ready
    ]
    best = max(selections, key=lambda sel: sel.score)
    log_debug(
        "Enemy skill selected",
        {
            "enemy": enemy.name,
            "skill": best.skill.name,
            "score": round(best.score, 1),
        },
    )
    return best.skill
