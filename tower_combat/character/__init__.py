"""
Character module for the tower combat engine.

This module handles primary attributes, survival resources, equipment, skills,
derived statistics and the combatant snapshots built from them.
"""
