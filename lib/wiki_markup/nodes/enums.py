"""
Enums related to markup nodes.
"""

from __future__ import annotations

from enum import Enum

__all__ = ['OverrideType', 'Position']


class OverrideType(Enum):
    OVERRIDES = 'overrides'  # The new key has a higher priority than the registered key
    OVERRIDDEN = 'overridden'  # The registered key has a higher priority than the new key


class Position(Enum):
    START = 'start'
    END = 'end'
    BEFORE = 'before'
    AFTER = 'after'
