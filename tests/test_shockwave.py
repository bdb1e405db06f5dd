import numpy as np
import pytest

from shockwave import ShockwaveRegistry


def test_prune_removes_shockwaves_at_lifetime():
    registry = ShockwaveRegistry()
    registry.trigger(10, 20, now=0)
    registry.trigger(30, 40, now=100)

    registry.prune(399)
    assert len(registry) == 2

    registry.prune(400)
    assert [(s.x, s.y) for s in registry] == [(30.0, 40.0)]

    registry.prune(500)
    assert len(registry) == 0


def test_registry_is_bounded():
    registry = ShockwaveRegistry(max_active=3)
    for t in range(5):
        registry.trigger(t, t, now=t)

    assert len(registry) == 3
    assert [s.created_at for s in registry] == [2.0, 3.0, 4.0]


def test_as_array_reports_age_fraction():
    registry = ShockwaveRegistry()
    registry.trigger(1, 2, now=0)
    registry.trigger(3, 4, now=200)

    data = registry.as_array(300)

    assert data.shape == (2, 3)
    np.testing.assert_allclose(data[:, 2], [0.75, 0.25])


def test_as_array_empty():
    assert ShockwaveRegistry().as_array(0).shape == (0, 3)


def test_invalid_bound_rejected():
    with pytest.raises(ValueError):
        ShockwaveRegistry(max_active=0)
