import numpy as np
import pytest

from fluid2d.advect import advect_density, advect_density_kernel, advect_velocity_kernel
from fluid2d.dispatch import KernelDispatcher
from fluid2d.grid import Field
from fluid2d.params import SimulationParams
from fluid2d.passes import AdvectDensityParams, AdvectVelocityParams


def test_zero_velocity_leaves_density_untouched(rng):
    velocity = np.zeros((12, 10, 2), dtype=np.float32)
    density = rng.random((12, 10, 3)).astype(np.float32)
    out = np.empty_like(density)

    advect_density_kernel(velocity, density, params=AdvectDensityParams(dt=0.005), out=out)

    np.testing.assert_array_equal(out, density)


def test_uniform_flow_shifts_density_by_whole_cells(rng):
    w, h, dt = 16, 8, 0.01
    velocity = np.zeros((h, w, 2), dtype=np.float32)
    velocity[..., 0] = 1.0 / (dt * w)        # exactly one cell per step
    density = rng.random((h, w, 3)).astype(np.float32)
    out = np.empty_like(density)

    advect_density_kernel(velocity, density, params=AdvectDensityParams(dt=dt), out=out)

    ink = dt * velocity[0, 0, 0]
    # cell i takes what was in cell i-1; column 0 pulls from the last column
    np.testing.assert_allclose(out - ink, np.roll(density, 1, axis=1), atol=1e-4)


def test_velocity_advection_applies_attenuation():
    velocity = np.zeros((8, 8, 2), dtype=np.float32)
    velocity[..., 0] = 0.3
    velocity[..., 1] = -0.7
    out = np.empty_like(velocity)

    advect_velocity_kernel(velocity, params=AdvectVelocityParams(dt=0.005, attenuation=0.1), out=out)

    np.testing.assert_allclose(out[..., 0], 0.3 * 0.9, rtol=1e-5)
    np.testing.assert_allclose(out[..., 1], -0.7 * 0.9, rtol=1e-5)


def test_velocity_advection_without_attenuation_is_lossless_at_rest():
    velocity = np.zeros((8, 8, 2), dtype=np.float32)
    out = np.full_like(velocity, 9.0)
    advect_velocity_kernel(velocity, params=AdvectVelocityParams(dt=0.005, attenuation=0.0), out=out)
    assert not out.any()


def test_moving_fluid_lays_down_ink():
    velocity = np.zeros((4, 4, 2), dtype=np.float32)
    velocity[..., 0] = 3.0
    velocity[..., 1] = 4.0
    density = np.zeros((4, 4, 3), dtype=np.float32)
    out = np.empty_like(density)

    advect_density_kernel(velocity, density, params=AdvectDensityParams(dt=0.01), out=out)

    np.testing.assert_allclose(out, 0.05, rtol=1e-5)


def test_additional_velocity_tints_first_two_channels():
    velocity = np.zeros((4, 4, 2), dtype=np.float32)
    velocity[..., 0] = 3.0
    velocity[..., 1] = -4.0
    density = np.zeros((4, 4, 3), dtype=np.float32)
    out = np.empty_like(density)

    params = AdvectDensityParams(dt=0.01, additional_velocity=True)
    advect_density_kernel(velocity, density, params=params, out=out)

    assert out[0, 0, 0] == pytest.approx(0.05 + 0.03, rel=1e-5)
    assert out[0, 0, 1] == pytest.approx(0.05 + 0.04, rel=1e-5)
    assert out[0, 0, 2] == pytest.approx(0.05, rel=1e-5)


def test_density_advection_swaps_only_density():
    d = KernelDispatcher()
    vel = Field("velocity", 8, 8, channels=2)
    den = Field("density", 8, 8, channels=3)
    vel_read, den_read = vel.read, den.read

    advect_density(d, vel, den, SimulationParams())

    assert vel.read is vel_read
    assert den.write is den_read
