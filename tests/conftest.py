import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from fluid2d import DisplaySurface, FluidSimulation, SimulationParams


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def params():
    return SimulationParams()


@pytest.fixture
def sim64(params):
    """64×64 grid: a 128×128 px surface at the default pixel ratio of 2."""
    return FluidSimulation(DisplaySurface(128, 128), params=params, verbose=False)


@pytest.fixture
def random_field(rng):
    def make(shape, scale=1.0):
        return (rng.standard_normal(shape) * scale).astype(np.float32)
    return make
