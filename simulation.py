# simulation.py
"""
Handles the core simulation logic and physics calculations.

This module defines the Simulation class, which advances the particle field
by one tick: expired shockwaves are pruned, the spatial index is rebuilt,
per-particle accelerations are computed from a snapshot of the current
state, and the integrator applies them. The hot loops are Numba kernels that
operate only on NumPy arrays and scalars.
"""
import logging
import numpy as np
from typing import Dict, Any, Optional
from numba import jit
from particle import ParticleField
from quadtree import QuadTree
from shockwave import ShockwaveRegistry
from constants import (
    HOME_STRENGTH, CURSOR_REPULSION, CURSOR_RADIUS, DAMPING, BOUNCE_FACTOR,
    DISPERSION_STRENGTH, SHOCKWAVE_STRENGTH, SHOCKWAVE_RADIUS,
    COLLISION_MARGIN, COLLISION_STIFFNESS, MIN_DISTANCE_SQ, POINTER_SENTINEL
)

# --- Data Contracts ---
#
# class SimulationInputs:
#   - Host-written input state, read once per tick.
#   - Invariants: 0 <= dispersion <= 1. The pointer is either a real
#     position or POINTER_SENTINEL, which lies outside every effect radius.
#
# class Simulation:
#   - __init__(self, field, shockwaves, inputs, params):
#     - Inputs:
#       - field: the ParticleField to advance.
#       - shockwaves: the ShockwaveRegistry fed by click handlers.
#       - inputs: the shared SimulationInputs.
#       - params: Dictionary of simulation parameters from config.json.
#         - "home_strength", "cursor_repulsion", "damping": optional floats.
#
#   - step(self, now: float) -> bool:
#     - Outputs: True if a tick was simulated, False on an empty field or a
#       degenerate viewport.
#     - Side Effects: Mutates field.positions and field.velocities.
#     - Invariants: After a tick every particle lies within
#       [radius, width - radius] x [radius, height - radius]. Forces are
#       computed from pre-tick state only.


class SimulationInputs:
    """
    The input state written by host event handlers and read by each tick.
    """
    def __init__(self, width: float = 0.0, height: float = 0.0):
        self.width = float(width)
        self.height = float(height)
        self.pointer_x, self.pointer_y = POINTER_SENTINEL
        self.dispersion = 0.0
        self.visible = True

    @property
    def center(self):
        return self.width / 2, self.height / 2

    @property
    def has_area(self) -> bool:
        return self.width > 0 and self.height > 0

    def set_pointer(self, x: float, y: float) -> None:
        self.pointer_x, self.pointer_y = float(x), float(y)

    def clear_pointer(self) -> None:
        self.pointer_x, self.pointer_y = POINTER_SENTINEL

    def set_dispersion(self, value: float) -> None:
        self.dispersion = min(max(float(value), 0.0), 1.0)

    def set_viewport(self, width: float, height: float) -> None:
        self.width, self.height = float(width), float(height)


@jit(nopython=True)
def _calculate_accelerations_numba(
    positions, homes, radii, center_x, center_y, dispersion,
    pointer_x, pointer_y, shockwaves, candidate_offsets, candidate_indices,
    home_strength, dispersion_strength, cursor_repulsion, cursor_radius_sq,
    shockwave_strength, shockwave_radius, collision_margin, collision_stiffness,
    min_distance_sq
):
    """
    Numba-jitted force model.

    Every particle reads the same pre-tick `positions` snapshot and writes
    only its own row of the returned array, so the result does not depend on
    the order particles are visited in.
    """
    particle_count = positions.shape[0]
    accelerations = np.zeros((particle_count, 2))
    shockwave_radius_sq = shockwave_radius * shockwave_radius

    for i in range(particle_count):
        x = positions[i, 0]
        y = positions[i, 1]
        ax = 0.0
        ay = 0.0

        # 1. Home attraction
        ax += (homes[i, 0] - x) * home_strength
        ay += (homes[i, 1] - y) * home_strength

        # 2. Scroll dispersion, radially outward from the viewport center
        if dispersion > 0.0:
            sdx = x - center_x
            sdy = y - center_y
            s_dist = np.sqrt(sdx * sdx + sdy * sdy)
            if s_dist == 0.0:
                s_dist = 1.0
            disperse_force = dispersion * dispersion_strength
            ax += (sdx / s_dist) * disperse_force
            ay += (sdy / s_dist) * disperse_force

        # 3. Pointer repulsion; squared pre-check avoids the sqrt when out of range
        cdx = x - pointer_x
        cdy = y - pointer_y
        c_dist_sq = cdx * cdx + cdy * cdy
        if c_dist_sq > min_distance_sq and c_dist_sq < cursor_radius_sq:
            c_dist = np.sqrt(c_dist_sq)
            force = cursor_repulsion / c_dist_sq
            ax += (cdx / c_dist) * force
            ay += (cdy / c_dist) * force

        # 4. Shockwave impulses
        for s in range(shockwaves.shape[0]):
            swdx = x - shockwaves[s, 0]
            swdy = y - shockwaves[s, 1]
            sw_dist_sq = swdx * swdx + swdy * swdy
            if sw_dist_sq > min_distance_sq and sw_dist_sq < shockwave_radius_sq:
                sw_dist = np.sqrt(sw_dist_sq)
                sw_force = (1.0 - shockwaves[s, 2]) * shockwave_strength * (1.0 - sw_dist / shockwave_radius)
                ax += (swdx / sw_dist) * sw_force
                ay += (swdy / sw_dist) * sw_force

        # 5. Pairwise collision against the spatial index candidates
        r_i = radii[i]
        for k in range(candidate_offsets[i], candidate_offsets[i + 1]):
            j = candidate_indices[k]
            if j == i:
                continue
            dx = x - positions[j, 0]
            dy = y - positions[j, 1]
            dist_sq = dx * dx + dy * dy
            min_dist = r_i + radii[j] + collision_margin
            if dist_sq > min_distance_sq and dist_sq < min_dist * min_dist:
                dist = np.sqrt(dist_sq)
                overlap = min_dist - dist
                ax += (dx / dist) * overlap * collision_stiffness
                ay += (dy / dist) * overlap * collision_stiffness

        accelerations[i, 0] = ax
        accelerations[i, 1] = ay
    return accelerations


@jit(nopython=True)
def _integrate_numba(positions, velocities, accelerations, radii, damping, bounce, width, height):
    """
    Numba-jitted semi-implicit Euler step with soft containment.

    A particle that leaves [r, dimension - r] on an axis is clamped to the
    boundary and that axis's velocity is scaled by `bounce`.
    """
    for i in range(positions.shape[0]):
        vx = (velocities[i, 0] + accelerations[i, 0]) * damping
        vy = (velocities[i, 1] + accelerations[i, 1]) * damping
        x = positions[i, 0] + vx
        y = positions[i, 1] + vy
        r = radii[i]

        if x < r:
            x = r
            vx *= bounce
        if x > width - r:
            x = width - r
            vx *= bounce
        if y < r:
            y = r
            vy *= bounce
        if y > height - r:
            y = height - r
            vy *= bounce

        positions[i, 0] = x
        positions[i, 1] = y
        velocities[i, 0] = vx
        velocities[i, 1] = vy


class Simulation:
    """
    Advances the particle field one tick at a time using a quadtree for
    neighbor queries.
    """
    def __init__(self, field: ParticleField, shockwaves: ShockwaveRegistry,
                 inputs: SimulationInputs, params: Optional[Dict[str, Any]] = None):
        """
        Initializes the simulation environment.

        Args:
            field (ParticleField): The particle population to simulate.
            shockwaves (ShockwaveRegistry): Live click impulses.
            inputs (SimulationInputs): Host-written input state.
            params (Dict[str, Any]): Simulation parameters from config.
        """
        params = params if params is not None else {}
        self.field = field
        self.shockwaves = shockwaves
        self.inputs = inputs

        self.home_strength = float(params.get('home_strength', HOME_STRENGTH))
        self.cursor_repulsion = float(params.get('cursor_repulsion', CURSOR_REPULSION))
        self.damping = float(params.get('damping', DAMPING))
        self.bounce = BOUNCE_FACTOR
        # Pre-calculate squared radius to avoid sqrt in the hot loop
        self.cursor_radius_sq = CURSOR_RADIUS ** 2

        if not 0.0 <= self.damping <= 1.0:
            msg = f"Configuration error: damping must lie in [0, 1], got {self.damping}."
            logging.critical(msg)
            raise ValueError(msg)

        self.quadtree = QuadTree()
        self.step_count = 0
        self.last_accelerations = np.zeros((0, 2), dtype=np.float64)

        logging.info(
            f"Simulation initialized: home_strength={self.home_strength}, "
            f"cursor_repulsion={self.cursor_repulsion}, damping={self.damping}."
        )

    def resize(self, width: float, height: float) -> None:
        """Applies a new viewport and regenerates the whole population for it."""
        self.inputs.set_viewport(width, height)
        if not self.inputs.has_area:
            logging.warning(f"Viewport is {width}x{height}; simulation idle until a valid resize.")
            return
        self.field.regenerate(self.field.particle_count, width, height)

    def trigger_shockwave(self, x: float, y: float, now: float) -> None:
        self.shockwaves.trigger(x, y, now)

    def compute_accelerations(self, now: float) -> np.ndarray:
        """
        Prunes expired shockwaves, rebuilds the spatial index and evaluates
        the force model for every particle against the current state.
        """
        field = self.field
        inputs = self.inputs
        self.shockwaves.prune(now)
        self.quadtree.build(field.positions, field.radii, inputs.width, inputs.height)
        offsets, indices = self.quadtree.candidates()
        center_x, center_y = inputs.center

        return _calculate_accelerations_numba(
            field.positions, field.homes, field.radii,
            center_x, center_y, inputs.dispersion,
            inputs.pointer_x, inputs.pointer_y,
            self.shockwaves.as_array(now), offsets, indices,
            self.home_strength, DISPERSION_STRENGTH, self.cursor_repulsion, self.cursor_radius_sq,
            SHOCKWAVE_STRENGTH, SHOCKWAVE_RADIUS, COLLISION_MARGIN, COLLISION_STIFFNESS,
            MIN_DISTANCE_SQ
        )

    def step(self, now: float) -> bool:
        """
        Executes one tick of the simulation.

        Args:
            now (float): Current time in milliseconds, used for shockwave ages.

        Returns:
            bool: Whether a tick was simulated.
        """
        if not self.inputs.has_area or len(self.field) == 0:
            return False

        # 1-3. Prune shockwaves, rebuild the index, evaluate forces
        accelerations = self.compute_accelerations(now)

        # 4. Integrate velocities and positions, then contain
        _integrate_numba(
            self.field.positions, self.field.velocities, accelerations, self.field.radii,
            self.damping, self.bounce, self.inputs.width, self.inputs.height
        )
        self.last_accelerations = accelerations
        self.step_count += 1
        return True
