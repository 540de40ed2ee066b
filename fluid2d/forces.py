"""
forces.py — Pointer Force Injection
===================================
Turns a pointer drag into a localized velocity impulse.

Per cell:
  d     = distance from the pointer, in NDC (x scaled by aspect so the
          splat is round on non-square grids)
  fall  = exp(-(d / radius)²)                  ← Gaussian splat
  v_new = v + direction * intensity * dt * fall

`intensity` already includes the drag speed (force_intensity × (1 + pixels
moved)), so quick flicks push harder than slow drags.
"""

from dataclasses import dataclass

import numpy as np

from .grid import Field, cell_centers_ndc
from .params import SimulationParams
from .passes import ForceParams, PassName
from .pointer import PointerState


def force_velocity(velocity: np.ndarray, *, params: ForceParams, out: np.ndarray):
    """Kernel: add a Gaussian impulse around params.origin to the velocity field."""
    h, w = velocity.shape[:2]
    x, y = cell_centers_ndc(w, h)

    dx = (x - params.origin[0]) * params.aspect
    dy = y - params.origin[1]
    dist2 = dx * dx + dy * dy
    falloff = np.exp(-dist2 / (params.radius * params.radius))

    strength = params.intensity * params.dt * falloff
    out[..., 0] = velocity[..., 0] + params.direction[0] * strength
    out[..., 1] = velocity[..., 1] + params.direction[1] * strength


def orbit_impulse(frame: int, radius: float = 0.5, speed: float = 0.05) -> tuple[tuple, tuple]:
    """
    Scripted pointer path for runs without a user: a point circling the
    center, pushing along its direction of travel.

    Returns (position, direction) in NDC, ready for FluidSimulation.inject().
    """
    angle = frame * speed
    position = (radius * np.cos(angle), radius * np.sin(angle))
    direction = (-np.sin(angle), np.cos(angle))
    return position, direction


@dataclass(frozen=True)
class Impulse:
    """A scripted push queued by FluidSimulation.inject(), used on the next step only."""
    position: tuple[float, float]
    direction: tuple[float, float]
    length: float = 1.0


def apply_force(dispatcher, velocity: Field, pointer: PointerState, params: SimulationParams) -> bool:
    """
    Inject the pointer's impulse if it was pressed AND moved since the last frame.

    The pointer's moved flag is consumed here, so a held-but-still pointer
    injects nothing on later frames.

    Returns:
        True if a force pass was run
    """
    if not pointer.consume():
        return False
    _push(dispatcher, velocity, params, pointer.position, pointer.direction, pointer.length)
    return True


def apply_impulse(dispatcher, velocity: Field, impulse: Impulse, params: SimulationParams):
    """Run one force pass for a scripted impulse. The pointer is not involved."""
    _push(dispatcher, velocity, params, impulse.position, impulse.direction, impulse.length)


def _push(dispatcher, velocity: Field, params: SimulationParams, position, direction, length: float):
    force = ForceParams(
        dt=params.time_step,
        radius=params.force_radius,
        intensity=params.force_intensity * length,
        direction=(direction[0], direction[1]),
        origin=(position[0], position[1]),
        aspect=velocity.width / velocity.height,
    )
    dispatcher.run_pass(PassName.FORCE_VELOCITY, (velocity.read,), force, velocity.write)
    velocity.swap()
