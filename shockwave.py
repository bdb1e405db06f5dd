# shockwave.py
"""
Transient impulse sources created by clicks and taps.

A shockwave lives for a fixed lifetime (400 ms by default). Expired
entries are pruned once per tick before forces are evaluated, so the force
kernel only ever sees live shockwaves with an age in [0, 1).
"""
import logging
from collections import deque
from typing import NamedTuple
import numpy as np
from constants import SHOCKWAVE_LIFETIME_MS, MAX_SHOCKWAVES


class Shockwave(NamedTuple):
    x: float
    y: float
    created_at: float  # milliseconds


class ShockwaveRegistry:
    """
    A small time-ordered collection of live shockwaves with automatic expiry.

    The collection is bounded: once `max_active` shockwaves are alive, the
    oldest one is dropped to make room for a new trigger.
    """
    def __init__(self, lifetime_ms: float = SHOCKWAVE_LIFETIME_MS, max_active: int = MAX_SHOCKWAVES):
        if max_active <= 0:
            msg = f"Configuration error: max_shockwaves must be > 0, got {max_active}."
            logging.critical(msg)
            raise ValueError(msg)
        self.lifetime_ms = float(lifetime_ms)
        self._shockwaves = deque(maxlen=max_active)

    def __len__(self) -> int:
        return len(self._shockwaves)

    def __iter__(self):
        return iter(self._shockwaves)

    def trigger(self, x: float, y: float, now: float) -> None:
        self._shockwaves.append(Shockwave(float(x), float(y), float(now)))
        logging.debug(f"Shockwave triggered at ({x:.1f}, {y:.1f}), t={now:.1f}ms.")

    def prune(self, now: float) -> None:
        """Drops every shockwave whose age has reached the lifetime."""
        live = [s for s in self._shockwaves if now - s.created_at < self.lifetime_ms]
        if len(live) != len(self._shockwaves):
            self._shockwaves.clear()
            self._shockwaves.extend(live)

    def as_array(self, now: float) -> np.ndarray:
        """
        Packs the live shockwaves for the force kernel.

        Returns:
            np.ndarray: (M, 3) float64 rows of (x, y, age) where age is the
            elapsed fraction of the lifetime.
        """
        data = np.zeros((len(self._shockwaves), 3), dtype=np.float64)
        for i, s in enumerate(self._shockwaves):
            data[i] = (s.x, s.y, max(0.0, (now - s.created_at) / self.lifetime_ms))
        return data
