"""
Combat system module for the tower combat engine.

This module handles all combat mechanics including damage calculation, Guts,
enemy skill selection, terrain, approaches, equipment passives and the
turn-based combat resolution.
"""
