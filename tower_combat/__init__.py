"""
Tower combat package.

Turn-based combat engine for a tower-climbing RPG: stat derivation, damage
resolution, status effects, enemy skill selection and the turn orchestrator.
"""
