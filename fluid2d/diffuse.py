"""
diffuse.py — Diffusion via Jacobi Iteration
============================================
Diffusion spreads a field toward uniformity:
  - velocity → viscosity (thick fluid resists shearing)
  - density  → ink bleeding into its surroundings

We take one implicit step of the heat equation,
  (I - a·∇²) x_new = x_old,      a = dt * diffuse * W * H

and approximate it with a few Jacobi sweeps on the ping-pong pair:

  x_new[j,i] = (x[j,i] + a * (left + right + down + up)) / (1 + 4a)

Each sweep is a weighted average of a cell and its four (wrapped)
neighbours, so it keeps the mean and strictly shrinks the variance of
anything that isn't already flat.

A diffusion rate of 0 skips the pass entirely. No identity kernel is run.
"""

import numpy as np

from .grid import Field, neighbors
from .params import SimulationParams
from .passes import DiffuseParams, PassName


def diffuse_kernel(field: np.ndarray, *, params: DiffuseParams, out: np.ndarray):
    """Kernel: one Jacobi sweep of implicit diffusion (works for any channel count)."""
    h, w = field.shape[:2]
    a = params.dt * params.diffuse * w * h

    left, right, down, up = neighbors(field)
    out[...] = (field + a * (left + right + down + up)) / (1.0 + 4.0 * a)


def diffuse_field(dispatcher, pass_name: PassName, target: Field, params: SimulationParams) -> int:
    """
    Diffuse one field in place (through its ping-pong pair).

    Args:
        dispatcher : KernelDispatcher
        pass_name  : PassName.DIFFUSE_VELOCITY or PassName.DIFFUSE_DENSITY
        target     : Field to diffuse
        params     : Live simulation parameters

    Returns:
        Number of sweeps run (0 when diffusion is off)
    """
    if not params.diffuse > 0:
        return 0

    iterations = params.diffuse_iterations
    for _ in range(iterations):
        # Re-read every sweep so a live slider change lands on the next sweep
        bundle = DiffuseParams(dt=params.time_step, diffuse=params.diffuse)
        dispatcher.run_pass(pass_name, (target.read,), bundle, target.write)
        target.swap()
    return iterations


def diffuse_velocity(dispatcher, velocity: Field, params: SimulationParams) -> int:
    return diffuse_field(dispatcher, PassName.DIFFUSE_VELOCITY, velocity, params)


def diffuse_density(dispatcher, density: Field, params: SimulationParams) -> int:
    return diffuse_field(dispatcher, PassName.DIFFUSE_DENSITY, density, params)
