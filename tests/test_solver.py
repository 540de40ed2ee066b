import numpy as np

from fluid2d.dispatch import KernelDispatcher
from fluid2d.grid import Field
from fluid2d.params import SimulationParams
from fluid2d.passes import PassName
from fluid2d.solver import DIVERGENCE, PRESSURE, compute_divergence, project


def _pairs(w=32, h=32):
    return Field("velocity", w, h, channels=2), Field("project", w, h, channels=2)


def test_projection_reduces_divergence(random_field):
    vel, proj = _pairs()
    vel.read[...] = random_field(vel.shape)
    before = np.linalg.norm(compute_divergence(vel.read))

    project(KernelDispatcher(), vel, proj, SimulationParams())

    after = np.linalg.norm(compute_divergence(vel.read))
    assert after < 0.8 * before


def test_divergence_never_grows_for_any_sweep_count(random_field):
    start = random_field((16, 16, 2))
    before = np.linalg.norm(compute_divergence(start))
    for n in (1, 2, 3, 7, 16):
        vel, proj = _pairs(16, 16)
        vel.read[...] = start
        project(KernelDispatcher(), vel, proj, SimulationParams(project_iterations=n))
        assert np.linalg.norm(compute_divergence(vel.read)) <= before * (1 + 1e-5)


def test_projection_conserves_total_momentum(random_field):
    vel, proj = _pairs()
    vel.read[...] = random_field(vel.shape)
    momentum = vel.read.sum(axis=(0, 1))

    project(KernelDispatcher(), vel, proj, SimulationParams())

    np.testing.assert_allclose(vel.read.sum(axis=(0, 1)), momentum, atol=1e-3)


def test_divergence_free_field_is_untouched():
    vel, proj = _pairs(16, 16)
    j = np.arange(16, dtype=np.float32)
    # shear flow: vx depends on y only → zero divergence
    vel.read[..., 0] = np.sin(2 * np.pi * j / 16)[:, np.newaxis]
    before = vel.read.copy()

    project(KernelDispatcher(), vel, proj, SimulationParams())

    np.testing.assert_array_equal(vel.read, before)


def test_sweep_count_is_fixed_and_buffers_swap(random_field):
    d = KernelDispatcher()
    vel, proj = _pairs(8, 8)
    vel.read[...] = random_field(vel.shape)
    vel_read = vel.read

    assert project(d, vel, proj, SimulationParams(project_iterations=5)) == 5

    assert d.counts[PassName.PROJECT_BEGIN] == 1
    assert d.counts[PassName.PROJECT_LOOP] == 5
    assert d.counts[PassName.PROJECT_END] == 1
    assert vel.write is vel_read


def test_project_buffer_layout(random_field):
    vel, proj = _pairs(8, 8)
    vel.read[...] = random_field(vel.shape)
    expected_div = compute_divergence(vel.read)

    project(KernelDispatcher(), vel, proj, SimulationParams(project_iterations=3))

    np.testing.assert_allclose(proj.read[..., DIVERGENCE], expected_div, rtol=1e-6)
    assert proj.read[..., PRESSURE].any()
