"""
Input boundary for Dungeon Delve.

Exposes IntentMapper: a rebindable mapping from physical key names to the
intents the turn resolver consumes.
"""
from .mapping import IntentMapper, parse_action

__all__ = ["IntentMapper", "parse_action"]
