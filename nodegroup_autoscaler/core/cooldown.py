#!/usr/bin/env python3
"""
In-memory record of when each NodeGroup was last scaled
"""

from typing import Dict, Optional


class CooldownTracker:
    """
    Maps NodeGroup names to the timestamp (ms) of their last successful scale

    The cooldown duration is not stored here; callers pass the one from the
    config snapshot of the current pass.

    Not thread-safe. The reconciliation engine only touches it from inside the
    per-group dispatcher, which serializes all access for a given name.
    """

    def __init__(self):
        self._last_scale: Dict[str, float] = {}

    def is_eligible(self, name: str, now: float, cooldown_seconds: float) -> bool:
        """True when the group was never scaled or the cooldown has fully elapsed"""
        last = self._last_scale.get(name)
        if last is None:
            return True
        return now - last >= cooldown_seconds * 1000

    def record_scale(self, name: str, now: float) -> None:
        self._last_scale[name] = now

    def forget(self, name: str) -> None:
        self._last_scale.pop(name, None)

    def last_scale(self, name: str) -> Optional[float]:
        return self._last_scale.get(name)

    def snapshot(self) -> Dict[str, float]:
        return dict(self._last_scale)

    def __len__(self) -> int:
        return len(self._last_scale)

    def __contains__(self, name: str) -> bool:
        return name in self._last_scale
