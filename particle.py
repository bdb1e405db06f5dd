# particle.py
"""
Manages the state of all particles in the simulation.

This module defines the ParticleField class, which owns the particle
population and its lifecycle. Particle state (position, velocity, home
position, radius, color) is stored in NumPy arrays, one row per particle.
"""
import logging
import numpy as np
from typing import Dict, Any
from constants import (
    DEFAULT_PARTICLE_COUNT, PALETTE, PARTICLE_MIN_RADIUS, PARTICLE_MAX_RADIUS,
    HOME_MIN_DISTANCE, HOME_SPREAD, SPAWN_MODES
)

# --- Data Contracts ---
#
# class ParticleField:
#   - __init__(self, params: Dict[str, Any], palette_size: int = len(PALETTE)):
#     - Inputs:
#       - params: Dictionary of simulation parameters from config.json.
#         - "seed": int
#         - "particle_count": int
#         - "spawn_mode": "home" | "rain"
#       - palette_size: number of colors particles may be assigned.
#     - Side Effects: Creates an empty population and a seeded RNG.
#
#   - regenerate(self, count: int, width: float, height: float) -> None:
#     - Side Effects: Discards every particle and creates `count` new ones.
#       No-op when either dimension is not positive.
#     - Invariants:
#       - self.positions, self.velocities, self.homes: (N, 2) float64.
#       - self.radii: (N,) float64 in [4, 16).
#       - self.colors: (N,) int32 indices into the palette.
#       - radii, homes and colors never change until the next regenerate.


class ParticleField:
    """
    A container for all particles, managing their state via NumPy arrays.
    """
    def __init__(self, params: Dict[str, Any], palette_size: int = len(PALETTE)):
        """
        Initializes an empty particle field.

        Args:
            params (Dict[str, Any]): Simulation parameters from config.
            palette_size (int): How many palette colors are available.
        """
        self.particle_count = int(params.get('particle_count', DEFAULT_PARTICLE_COUNT))
        self.spawn_mode = params.get('spawn_mode', 'rain')
        self.seed = params.get('seed')
        self.palette_size = palette_size

        if self.particle_count < 0:
            msg = f"Configuration error: particle_count must be >= 0, got {self.particle_count}."
            logging.critical(msg)
            raise ValueError(msg)
        if self.spawn_mode not in SPAWN_MODES:
            msg = (
                f"Configuration error: unknown spawn_mode '{self.spawn_mode}'. "
                f"Expected one of {SPAWN_MODES}."
            )
            logging.critical(msg)
            raise ValueError(msg)
        if self.palette_size <= 0:
            msg = "Configuration error: the color palette is empty."
            logging.critical(msg)
            raise ValueError(msg)

        # All randomness is controlled by a single master seed.
        self.rng = np.random.default_rng(self.seed)

        self.positions = np.zeros((0, 2), dtype=np.float64)
        self.velocities = np.zeros((0, 2), dtype=np.float64)
        self.homes = np.zeros((0, 2), dtype=np.float64)
        self.radii = np.zeros(0, dtype=np.float64)
        self.colors = np.zeros(0, dtype=np.int32)

    def __len__(self) -> int:
        return self.positions.shape[0]

    def regenerate(self, count: int, width: float, height: float) -> None:
        """
        Replaces the whole population with `count` freshly generated particles.

        Home positions are scattered around the viewport center: the angle is
        uniform and the distance is 50 px plus up to 35% of the smaller
        viewport dimension. With spawn_mode "home" particles start at rest on
        their home; with "rain" they start above the viewport with a small
        downward and sideways velocity and fall into place.
        """
        if width <= 0 or height <= 0:
            logging.warning(
                f"Ignoring regenerate for degenerate viewport {width}x{height}."
            )
            return

        center_x = width / 2
        center_y = height / 2
        angles = self.rng.uniform(0.0, 2 * np.pi, size=count)
        distances = HOME_MIN_DISTANCE + self.rng.random(count) * min(width, height) * HOME_SPREAD

        homes = np.empty((count, 2), dtype=np.float64)
        homes[:, 0] = center_x + np.cos(angles) * distances
        homes[:, 1] = center_y + np.sin(angles) * distances

        if self.spawn_mode == 'home':
            positions = homes.copy()
            velocities = np.zeros((count, 2), dtype=np.float64)
        else:
            positions = np.empty((count, 2), dtype=np.float64)
            positions[:, 0] = self.rng.random(count) * width
            positions[:, 1] = -50.0 - self.rng.random(count) * height
            velocities = np.empty((count, 2), dtype=np.float64)
            velocities[:, 0] = (self.rng.random(count) - 0.5) * 2
            velocities[:, 1] = self.rng.random(count) * 3

        self.homes = homes
        self.positions = positions
        self.velocities = velocities
        self.radii = self.rng.uniform(PARTICLE_MIN_RADIUS, PARTICLE_MAX_RADIUS, size=count)
        self.colors = self.rng.integers(
            low=0,
            high=self.palette_size,
            size=count,
            dtype=np.int32
        )

        logging.info(
            f"ParticleField regenerated with {count} particles "
            f"for a {width}x{height} viewport (spawn mode '{self.spawn_mode}')."
        )
        logging.debug(
            f"Particle data arrays created. "
            f"Positions shape: {self.positions.shape}, "
            f"Radii shape: {self.radii.shape}, "
            f"Colors shape: {self.colors.shape}"
        )
