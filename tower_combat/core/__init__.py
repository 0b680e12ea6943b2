"""
Core module for the tower combat engine.

This module contains the enums and tunable constants, logging and console
helpers, and the injectable random and identifier sources shared by every
other module.
"""
