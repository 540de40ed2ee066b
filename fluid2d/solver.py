"""
solver.py — Pressure Projection
================================
The projection step enforces INCOMPRESSIBILITY:
  div(v) = 0 everywhere

Forces and advection leave the velocity field with some divergence
(fluid "piles up" in some cells). We fix this in three passes:

  1. BEGIN : compute div(v) at every cell into the project buffer
              (channel 0 = pressure, reset to 0; channel 1 = divergence)
  2. LOOP  : Jacobi sweeps on  ∇²p = div(v)
              p_new = (pL + pR + pD + pU - div) / 4
  3. END   : subtract the pressure gradient: v = v - ∇p

This is the Helmholtz-Hodge decomposition: any vector field is a
divergence-free part plus a gradient. We keep the divergence-free part.

Discretization (cell units, wraparound neighbours):
  div  = 0.5 * (W * (vxR - vxL) + H * (vyU - vyD))
  ∇p   = 0.5 * ((pR - pL) / W,  (pU - pD) / H)

The sweep count is FIXED. There is no convergence check. Few sweeps
give visibly compressible flow and many sweeps cost frame time. It is a
tunable (`project_iterations`), not a bug. Every Fourier mode of the
divergence is scaled by a factor of magnitude ≤ 1, so more sweeps can
only help and the divergence never grows. The gradient subtraction
sums to zero on the torus, so total momentum is untouched.

A too-large time step is not caught here. It shows up as visual noise,
which is the physical model's problem, not a fault of this layer.
"""

import numpy as np

from .grid import Field, neighbors
from .params import SimulationParams
from .passes import PassName, ProjectParams

PRESSURE   = 0
DIVERGENCE = 1


def compute_divergence(velocity: np.ndarray) -> np.ndarray:
    """
    Discrete divergence of a velocity buffer (same operator the solver uses).

    Returns: (H, W) array. For an incompressible field this is ~0 everywhere.
    """
    h, w = velocity.shape[:2]
    left, right, down, up = neighbors(velocity)
    return 0.5 * (w * (right[..., 0] - left[..., 0]) + h * (up[..., 1] - down[..., 1]))


def project_begin_kernel(velocity: np.ndarray, *, params: ProjectParams, out: np.ndarray):
    """Kernel: pressure ← 0, divergence ← div(v)."""
    out[..., PRESSURE] = 0.0
    out[..., DIVERGENCE] = compute_divergence(velocity)


def project_loop_kernel(project: np.ndarray, *, params: ProjectParams, out: np.ndarray):
    """Kernel: one Jacobi sweep of the pressure Poisson equation."""
    left, right, down, up = neighbors(project[..., PRESSURE])
    divergence = project[..., DIVERGENCE]
    out[..., PRESSURE] = (left + right + down + up - divergence) * 0.25
    out[..., DIVERGENCE] = divergence


def project_end_kernel(velocity: np.ndarray, project: np.ndarray, *,
                       params: ProjectParams, out: np.ndarray):
    """Kernel: v ← v - ∇p."""
    h, w = velocity.shape[:2]
    left, right, down, up = neighbors(project[..., PRESSURE])
    out[..., 0] = velocity[..., 0] - 0.5 * (right - left) / w
    out[..., 1] = velocity[..., 1] - 0.5 * (up - down) / h


def project(dispatcher, velocity: Field, project_field: Field, params: SimulationParams) -> int:
    """
    Make velocity (numerically) divergence-free.

    Args:
        dispatcher    : KernelDispatcher
        velocity      : Velocity pair (read = current velocity)
        project_field : Pressure/divergence working pair
        params        : Live simulation parameters (for the sweep count)

    Returns:
        Number of Jacobi sweeps run
    """
    bundle = ProjectParams()

    # ── 1. Divergence ──────────────────────────────────────────────────────
    dispatcher.run_pass(PassName.PROJECT_BEGIN, (velocity.read,), bundle, project_field.write)
    project_field.swap()

    # ── 2. Jacobi relaxation (no early exit) ───────────────────────────────
    iterations = params.project_iterations
    for _ in range(iterations):
        dispatcher.run_pass(PassName.PROJECT_LOOP, (project_field.read,), bundle, project_field.write)
        project_field.swap()

    # ── 3. Subtract pressure gradient ──────────────────────────────────────
    dispatcher.run_pass(PassName.PROJECT_END, (velocity.read, project_field.read), bundle, velocity.write)
    velocity.swap()

    return iterations
