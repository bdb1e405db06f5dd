import numpy as np
import pytest

from constants import PALETTE
from particle import ParticleField


def test_regenerate_yields_exact_count_and_fixed_attributes():
    field = ParticleField({"seed": 1, "particle_count": 50, "spawn_mode": "home"})
    field.regenerate(50, 800, 600)

    assert len(field) == 50
    assert field.positions.shape == (50, 2)
    assert np.all((field.radii >= 4) & (field.radii < 16))
    assert np.all((field.colors >= 0) & (field.colors < len(PALETTE)))


def test_homes_are_scattered_around_center():
    field = ParticleField({"seed": 2, "spawn_mode": "home"})
    field.regenerate(200, 800, 600)

    distances = np.hypot(field.homes[:, 0] - 400, field.homes[:, 1] - 300)
    assert distances.min() >= 50
    assert distances.max() < 50 + 600 * 0.35


def test_home_spawn_starts_at_rest_on_home():
    field = ParticleField({"seed": 3, "spawn_mode": "home"})
    field.regenerate(20, 400, 400)

    np.testing.assert_array_equal(field.positions, field.homes)
    assert not field.velocities.any()


def test_rain_spawn_starts_above_viewport_falling():
    field = ParticleField({"seed": 3, "spawn_mode": "rain"})
    field.regenerate(20, 400, 300)

    assert np.all(field.positions[:, 1] <= -50)
    assert np.all(field.positions[:, 1] >= -350)
    assert np.all(field.velocities[:, 1] >= 0)
    assert np.all(np.abs(field.velocities[:, 0]) <= 1)


def test_regenerate_discards_previous_population():
    field = ParticleField({"seed": 4, "spawn_mode": "home"})
    field.regenerate(30, 400, 400)
    old_homes = field.homes.copy()

    field.regenerate(12, 1000, 200)

    assert len(field) == 12
    assert field.homes.shape == (12, 2)
    assert not np.array_equal(field.homes[:12], old_homes[:12])


def test_degenerate_viewport_is_ignored():
    field = ParticleField({"seed": 5})
    field.regenerate(10, 400, 400)
    positions = field.positions.copy()

    field.regenerate(10, 0, 400)

    np.testing.assert_array_equal(field.positions, positions)


def test_same_seed_same_population():
    a = ParticleField({"seed": 9})
    b = ParticleField({"seed": 9})
    a.regenerate(40, 640, 480)
    b.regenerate(40, 640, 480)

    np.testing.assert_array_equal(a.positions, b.positions)
    np.testing.assert_array_equal(a.radii, b.radii)
    np.testing.assert_array_equal(a.colors, b.colors)


@pytest.mark.parametrize("params", [
    {"particle_count": -1},
    {"spawn_mode": "teleport"},
])
def test_invalid_configuration_rejected(params):
    with pytest.raises(ValueError):
        ParticleField(params)


def test_empty_palette_rejected():
    with pytest.raises(ValueError):
        ParticleField({}, palette_size=0)
