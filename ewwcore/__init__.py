"""Scoped reactive state, script variables, system statistics and daemon commands for desktop widgets."""

__version__ = "0.1.0"