import os

# Pygame must never need a real display or audio device under test.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest


@pytest.fixture
def make_simulation():
    """Factory for a fully wired Simulation over a freshly regenerated field."""
    from particle import ParticleField
    from shockwave import ShockwaveRegistry
    from simulation import Simulation, SimulationInputs

    def _make(count=10, width=500, height=500, seed=7, spawn_mode="home", **params):
        sim_params = {"seed": seed, "particle_count": count, "spawn_mode": spawn_mode}
        sim_params.update(params)
        field = ParticleField(sim_params)
        sim = Simulation(field, ShockwaveRegistry(), SimulationInputs(), sim_params)
        sim.resize(width, height)
        return sim

    return _make
