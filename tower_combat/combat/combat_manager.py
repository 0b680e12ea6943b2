"""
Turn orchestrator for a single encounter.

`CombatManager` holds the current player, enemy and combat state, walks the
state machine

    UPKEEP -> PLAYER_ACTION -> ENEMY_ACTION -> TERRAIN_HAZARD -> UPKEEP

and applies every phase result by replacing its snapshots. The phase functions
it calls never mutate their inputs; the manager is the only place holding
mutable references. Pacing (animation delays, auto-pass timers) is left to the
caller.
"""

import random
from collections.abc import Callable

from tower_combat.core.constants import ApproachType, TurnPhase
from tower_combat.core.logging import log_debug, log_info, log_warning
from tower_combat.core.rng import get_rng
from tower_combat.character.combatant import Enemy, Player
from tower_combat.character.skill import Skill
from tower_combat.combat.approach import CombatModifiers, apply_approach_effects
from tower_combat.combat.combat_state import (
    CombatState,
    EnemyTurnResult,
    HazardResult,
    PhaseResult,
    PlayerActionResult,
    UpkeepResult,
    create_combat_state,
    determine_turn_order,
)
from tower_combat.combat.enemy_turn import process_enemy_turn
from tower_combat.combat.passives import apply_combat_start_passives
from tower_combat.combat.player_turn import pass_turn, process_upkeep, use_skill
from tower_combat.combat.terrain import TerrainDefinition
from tower_combat.combat.terrain_hazard import process_terrain_hazard

# Picks the player's skill for a round, None to pass.
PlayerPolicy = Callable[[Player, Enemy, CombatState], Skill | None]


class CombatManager:
    """Drives one encounter between the player and an enemy.

    On construction the approach modifiers are applied, combat-start passives
    fire and initiative is rolled. If the enemy wins initiative it gets one
    opening action before the first upkeep.
    """

    def __init__(
        self,
        player: Player,
        enemy: Enemy,
        terrain: TerrainDefinition | None = None,
        modifiers: CombatModifiers | None = None,
        approach: ApproachType | None = None,
        rng: random.Random | None = None,
    ):
        """Set up the encounter.

        Args:
            player (Player): The player entering combat.
            enemy (Enemy): The opponent.
            terrain (TerrainDefinition | None): The battlefield, if any.
            modifiers (CombatModifiers | None): Approach modifiers, neutral if absent.
            approach (ApproachType | None): The approach that produced the modifiers.
            rng (random.Random | None): Random source for the whole encounter.

        """
        self.rng: random.Random = get_rng(rng)
        self.modifiers: CombatModifiers = modifiers or CombatModifiers()
        # Every line logged during the encounter, in order.
        self.log: list[str] = []
        # Every phase result applied so far.
        self.history: list[PhaseResult] = []

        player, enemy = apply_approach_effects(player, enemy, self.modifiers)
        start = apply_combat_start_passives(player)
        self.player: Player = start.player
        self.enemy: Enemy = enemy
        self.state: CombatState = create_combat_state(
            self.modifiers, terrain, self.player, approach
        )
        self.log.extend(start.messages)

        self.player_first: bool = True
        if self.modifiers.skip_combat:
            self.log.append(f"{self.player.name} slips past {self.enemy.name}.")
            self.state = self.state.advance(TurnPhase.FLED)
            return

        self.player_first = determine_turn_order(
            self.player.derived, self.enemy.derived, self.state, self.rng
        )
        log_info(
            "Combat started",
            {
                "player": self.player.name,
                "enemy": self.enemy.name,
                "terrain": terrain.name if terrain else None,
                "player_first": self.player_first,
            },
        )
        if not self.player_first:
            self.log.append(f"{self.enemy.name} seizes the initiative!")
            self.state = self.state.advance(TurnPhase.ENEMY_ACTION)
            self.enemy_action()
            if not self.is_over:
                self.state = self.state.advance(TurnPhase.UPKEEP)

    # ============================================================================
    # State
    # ============================================================================

    @property
    def phase(self) -> TurnPhase:
        return self.state.phase

    @property
    def is_over(self) -> bool:
        return self.state.phase.is_terminal

    @property
    def player_won(self) -> bool:
        return self.state.phase == TurnPhase.ENEMY_DEFEATED

    def _expect(self, phase: TurnPhase) -> bool:
        if self.state.phase != phase:
            log_warning(
                "Phase called out of order",
                {"expected": phase, "current": self.state.phase},
            )
            return False
        return True

    def _apply(self, result: PhaseResult, next_phase: TurnPhase) -> None:
        """Replaces the snapshots with the result and advances the machine."""
        self.player = result.player
        self.enemy = result.enemy
        self.state = result.state
        self.log.extend(result.messages)
        self.history.append(result)
        # The enemy is checked first, matching the order of death checks.
        if result.enemy_defeated:
            next_phase = TurnPhase.ENEMY_DEFEATED
        elif result.player_defeated:
            next_phase = TurnPhase.PLAYER_DEFEATED
        self.state = self.state.advance(next_phase)
        log_debug(
            "Phase applied",
            {
                "phase": next_phase,
                "player_hp": self.player.current_hp,
                "enemy_hp": self.enemy.current_hp,
            },
        )

    # ============================================================================
    # Phases
    # ============================================================================

    def upkeep(self) -> UpkeepResult | None:
        if not self._expect(TurnPhase.UPKEEP):
            return None
        result = process_upkeep(self.player, self.enemy, self.state)
        self._apply(result, TurnPhase.PLAYER_ACTION)
        return result

    def player_action(self, skill: Skill | None) -> PlayerActionResult | None:
        """Uses a skill, or passes when `skill` is None.

        A rejected skill leaves the machine in PLAYER_ACTION so the caller can
        pick again.
        """
        if not self._expect(TurnPhase.PLAYER_ACTION):
            return None
        if skill is None:
            result = pass_turn(self.player, self.enemy, self.state)
        else:
            result = use_skill(self.player, self.enemy, skill, self.state, self.rng)
        if not result.performed:
            self.log.extend(result.messages)
            return result
        self._apply(result, TurnPhase.ENEMY_ACTION)
        self.state = self.state.model_copy(update={"is_first_turn": False})
        return result

    def enemy_action(self) -> EnemyTurnResult | None:
        if not self._expect(TurnPhase.ENEMY_ACTION):
            return None
        result = process_enemy_turn(self.player, self.enemy, self.state, self.rng)
        self._apply(result, TurnPhase.TERRAIN_HAZARD)
        return result

    def terrain_hazard(self) -> HazardResult | None:
        if not self._expect(TurnPhase.TERRAIN_HAZARD):
            return None
        result = process_terrain_hazard(self.player, self.enemy, self.state, self.rng)
        self._apply(result, TurnPhase.UPKEEP)
        if not self.is_over:
            self.state = self.state.model_copy(update={"turn": self.state.turn + 1})
        return result

    def flee(self) -> None:
        """Ends the encounter without a winner."""
        if self.is_over:
            return
        self.log.append(f"{self.player.name} flees from {self.enemy.name}!")
        self.state = self.state.advance(TurnPhase.FLED)
        log_info("Player fled", {"turn": self.state.turn})

    # ============================================================================
    # Driving
    # ============================================================================

    def run_round(self, choice: Skill | None) -> list[PhaseResult]:
        """Runs one full round with the given player choice.

        A choice that gets rejected is replaced by a pass, so a round always
        completes.

        Returns:
            list[PhaseResult]: The results applied during the round.

        """
        results: list[PhaseResult] = []
        if self.is_over:
            return results
        if self.state.phase == TurnPhase.UPKEEP:
            upkeep = self.upkeep()
            if upkeep is not None:
                results.append(upkeep)
        if self.is_over:
            return results

        action = self.player_action(choice)
        if action is not None and not action.performed:
            action = self.player_action(None)
        if action is not None:
            results.append(action)

        for step in (self.enemy_action, self.terrain_hazard):
            if self.is_over:
                break
            result = step()
            if result is not None:
                results.append(result)
        return results

    def run(self, policy: PlayerPolicy, max_rounds: int = 100) -> TurnPhase:
        """Runs rounds until the encounter ends or `max_rounds` is reached.

        Args:
            policy (PlayerPolicy): Picks the player's skill each round.
            max_rounds (int): Safety limit on the number of rounds.

        Returns:
            TurnPhase: The final phase, terminal unless the limit was hit.

        """
        for _ in range(max_rounds):
            if self.is_over:
                break
            self.run_round(policy(self.player, self.enemy, self.state))
        if not self.is_over:
            log_warning("Round limit reached", {"rounds": max_rounds})
        return self.state.phase
