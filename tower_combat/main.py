"""
Main entry point for the tower combat engine demo.

This script loads the player and the enemies from the JSON files in the data
folder, resolves an approach, and runs a seeded duel to completion. It
demonstrates the combat system with:
- Loading combatants, skills, equipment and buffs from JSON files
- Approach rolls and the combat modifiers they produce
- Terrain modifiers and hazards
- The turn state machine with upkeep, player and enemy actions, and hazards
- Combat logging and a final report
"""

import argparse
import logging
from pathlib import Path

from tower_combat.core.constants import ApproachType, EffectType, LogType, TurnPhase
from tower_combat.core.logging import setup_logging
from tower_combat.core.rng import get_rng, seed_rng
from tower_combat.core.utils import cprint, crule, make_bar
from tower_combat.character.combatant import Combatant, Enemy, Player
from tower_combat.character.loader import load_enemies, load_player
from tower_combat.character.skill import Skill
from tower_combat.combat.approach import get_approach, meets_approach_requirements, resolve_approach
from tower_combat.combat.combat_manager import CombatManager
from tower_combat.combat.combat_state import CombatState
from tower_combat.combat.player_turn import skill_chakra_cost
from tower_combat.combat.terrain import TERRAINS, get_terrain

# Get the path to the data folder.
data_dir = Path(__file__).parent / "data"


def print_status(combatant: Combatant) -> None:
    """Prints a one-line HP and chakra summary of a combatant."""
    hp_bar = make_bar(combatant.current_hp, combatant.max_hp, 20, "green")
    cp_bar = make_bar(combatant.current_chakra, combatant.max_chakra, 10, "blue")
    buffs = ", ".join(str(b) for b in combatant.buffs)
    cprint(
        f"{combatant.combatant_type.colorize(combatant.name):<30} "
        f"HP {hp_bar} {combatant.current_hp}/{combatant.max_hp}  "
        f"CP {cp_bar} {combatant.current_chakra}/{combatant.max_chakra}"
        + (f"  [dim]{buffs}[/]" if buffs else "")
    )


def choose_skill(player: Player, enemy: Enemy, state: CombatState) -> Skill | None:
    """
    Simple demo policy for the player.

    Heals when low, otherwise uses the strongest affordable skill that is off
    cooldown. Passes when nothing is usable.
    """
    usable = [
        s
        for s in player.skills
        if not s.is_passive
        and s.is_ready
        and skill_chakra_cost(player, s, state) <= player.current_chakra
        and s.hp_cost < player.current_hp
    ]
    if not usable:
        return None
    if player.hp_ratio < 0.35:
        heals = [s for s in usable if any(e.kind == EffectType.HEAL for e in s.self_effects)]
        if heals:
            return heals[0]
    shields = [s for s in usable if s.is_support and s.self_effects and player.hp_ratio < 0.7]
    if shields and not player.buffs:
        return shields[0]
    attacks = [s for s in usable if not s.is_support]
    if not attacks:
        return None
    return max(attacks, key=lambda s: s.damage_mult)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a seeded sample duel.")
    parser.add_argument("--seed", type=int, default=42, help="Seed of the combat RNG.")
    parser.add_argument("--enemy", default="Stone Sentinel", help="Name of the enemy to fight.")
    parser.add_argument(
        "--terrain",
        default="GIANT_ROOTS",
        choices=sorted(TERRAINS),
        help="Terrain of the battlefield.",
    )
    parser.add_argument(
        "--approach",
        default=ApproachType.FRONTAL_ASSAULT.value,
        choices=[a.value for a in ApproachType],
        help="How the player engages.",
    )
    parser.add_argument("--max-rounds", type=int, default=50, help="Safety limit on rounds.")
    parser.add_argument("--verbose", action="store_true", help="Show debug logs.")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)
    seed_rng(args.seed)
    rng = get_rng()

    crule("Tower Combat", style="bold green")

    cprint("Loading player...", style="bold green")
    player = load_player(data_dir / "player.json")
    if player is None:
        cprint("Player could not be loaded.", style="bold red")
        return

    cprint("Loading enemies...", style="bold green")
    enemies = load_enemies(data_dir / "enemies.json")
    if args.enemy not in enemies:
        cprint(
            f"Enemy '{args.enemy}' not found, available: {', '.join(enemies)}",
            style="bold red",
        )
        return
    enemy = enemies[args.enemy]
    terrain = get_terrain(args.terrain)

    # =========================================================================

    crule(f":crossed_swords:  {player.name} vs {enemy.name}", style="bold green")
    if terrain is not None:
        cprint(f"[bold]{terrain.name}[/]: {terrain.description}")

    approach = ApproachType(args.approach)
    modifiers = None
    if meets_approach_requirements(get_approach(approach), player, terrain):
        outcome = resolve_approach(approach, player, enemy, terrain, rng)
        style = LogType.GAIN if outcome.success else LogType.LOSS
        cprint(
            style.colorize(
                f"{outcome.description} (roll {outcome.roll} vs {outcome.success_chance}%)"
            )
        )
        modifiers = outcome.modifiers
    else:
        cprint(f"{approach.display_name} is not possible here.", style="dim white")

    manager = CombatManager(player, enemy, terrain, modifiers, approach, rng)
    for line in manager.log:
        cprint(line)

    try:
        seen = len(manager.log)
        while not manager.is_over and manager.state.turn <= args.max_rounds:
            crule(f"Round {manager.state.turn}", style="bold white", characters="-")
            manager.run_round(choose_skill(manager.player, manager.enemy, manager.state))
            for line in manager.log[seen:]:
                cprint(f"  {line}")
            seen = len(manager.log)
            print_status(manager.player)
            print_status(manager.enemy)
    except KeyboardInterrupt:
        cprint("")
        crule(":crossed_swords:  Combat Interrupted", style="bold red")
        return

    outcome_text = {
        TurnPhase.ENEMY_DEFEATED: LogType.GAIN.colorize("Victory!"),
        TurnPhase.PLAYER_DEFEATED: LogType.LOSS.colorize("Defeat..."),
        TurnPhase.FLED: LogType.INFO.colorize("The encounter ended without a winner."),
    }.get(manager.phase, LogType.INFO.colorize("The fight dragged on too long."))
    crule(":crossed_swords:  Combat Finished", style="bold green")
    cprint(outcome_text)
    cprint(f"Rounds: {manager.state.turn}  XP multiplier: {manager.state.xp_multiplier:.2f}")


if __name__ == "__main__":
    main()
