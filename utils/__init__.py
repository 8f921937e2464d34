"""Shared utilities package for vvcode-auth"""

from .storage import StateManager, StateStore

__all__ = [
    "StateManager",
    "StateStore",
]
