"""
advect.py — Semi-Lagrangian Advection
======================================
This is what makes the fluid actually flow.

The algorithm (per cell):
  1. Start at the cell center (i, j).
  2. Trace BACKWARD along the velocity at that cell for one timestep:
        src = (i - dt * vx * W,  j - dt * vy * H)
     Velocity is stored in domain widths per unit time, so multiplying
     by W/H converts the step into cells.
  3. Sample the advected field at `src` with bilinear interpolation.
     Every fetch wraps around the edges, so the domain is a torus.
  4. That sample becomes the cell's new value.

With zero velocity, src lands exactly on the cell center and the
transform is the identity.

Velocity is always the transport field. Even when density is moved, it
is the velocity read-buffer that decides where things come from.

Key reference: Jos Stam, "Stable Fluids" (SIGGRAPH 1999)
"""

import numpy as np

from .grid import Field, sample_bilinear
from .params import SimulationParams
from .passes import AdvectDensityParams, AdvectVelocityParams, PassName


def _backtrace(velocity: np.ndarray, dt: float) -> tuple[np.ndarray, np.ndarray]:
    """Source positions (in cell units) for every cell, one dt back along `velocity`."""
    h, w = velocity.shape[:2]
    j, i = np.meshgrid(
        np.arange(h, dtype=np.float32),
        np.arange(w, dtype=np.float32),
        indexing='ij'
    )
    x_back = i - dt * w * velocity[..., 0]
    y_back = j - dt * h * velocity[..., 1]
    return x_back, y_back


def advect_velocity_kernel(velocity: np.ndarray, *, params: AdvectVelocityParams, out: np.ndarray):
    """
    Kernel: self-advect the velocity field and damp it.

    The attenuation factor bleeds a fraction of the speed away every step,
    an artistic viscosity that works independently of the diffusion pass.
    """
    x_back, y_back = _backtrace(velocity, params.dt)
    out[...] = sample_bilinear(velocity, x_back, y_back) * (1.0 - params.attenuation)


def advect_density_kernel(velocity: np.ndarray, density: np.ndarray, *,
                          params: AdvectDensityParams, out: np.ndarray):
    """
    Kernel: carry density along the velocity field and lay down fresh ink.

    Ink is deposited where the fluid moves. Every channel gains dt·|v|.
    With the additional-velocity mode on, the first two channels also gain
    dt·|vx| and dt·|vy|, tinting the ink by flow direction.
    """
    x_back, y_back = _backtrace(velocity, params.dt)
    carried = sample_bilinear(density, x_back, y_back)

    vx = velocity[..., 0]
    vy = velocity[..., 1]
    speed = np.sqrt(vx * vx + vy * vy)
    carried += (params.dt * speed)[..., np.newaxis]

    if params.additional_velocity:
        carried[..., 0] += params.dt * np.abs(vx)
        carried[..., 1] += params.dt * np.abs(vy)

    out[...] = carried


def advect_velocity(dispatcher, velocity: Field, params: SimulationParams):
    """Self-advect velocity (reads velocity.read, writes velocity.write, swaps)."""
    bundle = AdvectVelocityParams(dt=params.time_step, attenuation=params.force_attenuation)
    dispatcher.run_pass(PassName.ADVECT_VELOCITY, (velocity.read,), bundle, velocity.write)
    velocity.swap()


def advect_density(dispatcher, velocity: Field, density: Field, params: SimulationParams):
    """Advect density by the current velocity (writes density.write, swaps density only)."""
    bundle = AdvectDensityParams(dt=params.time_step, additional_velocity=params.additional_velocity)
    dispatcher.run_pass(PassName.ADVECT_DENSITY, (velocity.read, density.read), bundle, density.write)
    density.swap()
