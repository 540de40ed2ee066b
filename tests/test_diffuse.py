import numpy as np
import pytest

from fluid2d.diffuse import diffuse_density, diffuse_kernel, diffuse_velocity
from fluid2d.dispatch import KernelDispatcher
from fluid2d.grid import Field
from fluid2d.params import SimulationParams
from fluid2d.passes import DiffuseParams, PassName


def test_zero_rate_skips_the_pass(random_field):
    d = KernelDispatcher()
    den = Field("density", 8, 8, channels=3)
    den.read[...] = random_field(den.shape)
    before = den.read.copy()
    read_buffer = den.read

    assert diffuse_density(d, den, SimulationParams(diffuse=0.0)) == 0
    assert d.counts[PassName.DIFFUSE_DENSITY] == 0
    assert den.read is read_buffer
    np.testing.assert_array_equal(den.read, before)


def test_sweep_count_follows_parameter():
    d = KernelDispatcher()
    vel = Field("velocity", 8, 8, channels=2)
    params = SimulationParams(diffuse=0.01, diffuse_iterations=5)

    assert diffuse_velocity(d, vel, params) == 5
    assert d.counts[PassName.DIFFUSE_VELOCITY] == 5


def test_diffusion_smooths_and_keeps_the_mean(random_field):
    field = random_field((16, 16, 3))
    out = np.empty_like(field)

    diffuse_kernel(field, params=DiffuseParams(dt=0.005, diffuse=0.01), out=out)

    assert out.var() < field.var()
    np.testing.assert_allclose(out.mean(axis=(0, 1)), field.mean(axis=(0, 1)), atol=1e-5)


def test_flat_field_is_a_fixed_point():
    field = np.full((8, 8, 2), 0.25, dtype=np.float32)
    out = np.empty_like(field)
    diffuse_kernel(field, params=DiffuseParams(dt=0.01, diffuse=0.1), out=out)
    np.testing.assert_allclose(out, 0.25, rtol=1e-6)


def test_spike_spreads_to_wrapped_neighbours():
    field = np.zeros((8, 8, 1), dtype=np.float32)
    field[0, 0, 0] = 1.0
    out = np.empty_like(field)

    diffuse_kernel(field, params=DiffuseParams(dt=0.01, diffuse=0.1), out=out)

    a = 0.01 * 0.1 * 64
    expected = a / (1 + 4 * a)
    for j, i in ((0, 7), (7, 0), (0, 1), (1, 0)):
        assert out[j, i, 0] == pytest.approx(expected, rel=1e-5)
    assert out[0, 0, 0] == pytest.approx(1 / (1 + 4 * a), rel=1e-5)
