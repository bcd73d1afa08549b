"""
Core autoscaler modules
"""

from .cooldown import CooldownTracker
from .dispatch import KeyedDispatcher
from .reconciliation import ConfigStore, ReconciliationEngine
from .scaling import decide

__all__ = [
    "CooldownTracker",
    "KeyedDispatcher",
    "ConfigStore",
    "ReconciliationEngine",
    "decide",
]
