"""
passes.py — Named Passes and Their Parameter Bundles
=====================================================
A "pass" is one full-grid kernel invocation: read one or more buffers,
write one output buffer of the same resolution (or, for the render
passes, an image).

Each pass gets its own small dataclass of parameters instead of one
shared dict of uniforms, so a force pass can never be handed diffusion
parameters by accident. The dispatcher checks the bundle type before
running anything.
"""

from dataclasses import dataclass
from enum import Enum


class PassName(Enum):
    RESET_VELOCITY   = "resetVelocity"
    RESET_DENSITY    = "resetDensity"
    RESET_PROJECT    = "resetProject"
    DIFFUSE_VELOCITY = "diffuseVelocity"
    DIFFUSE_DENSITY  = "diffuseDensity"
    ADVECT_VELOCITY  = "advectVelocity"
    ADVECT_DENSITY   = "advectDensity"
    PROJECT_BEGIN    = "projectBegin"
    PROJECT_LOOP     = "projectLoop"
    PROJECT_END      = "projectEnd"
    FORCE_VELOCITY   = "forceVelocity"
    RENDER_VELOCITY  = "renderVelocity"
    RENDER_DENSITY   = "renderDensity"


@dataclass(frozen=True)
class ResetParams:
    value: float = 0.0


@dataclass(frozen=True)
class DiffuseParams:
    dt: float
    diffuse: float


@dataclass(frozen=True)
class AdvectVelocityParams:
    dt: float
    attenuation: float


@dataclass(frozen=True)
class AdvectDensityParams:
    dt: float
    additional_velocity: bool = False


@dataclass(frozen=True)
class ProjectParams:
    """The projection stages only need the grid resolution, which they read off the buffers."""


@dataclass(frozen=True)
class ForceParams:
    dt: float
    radius: float
    intensity: float
    direction: tuple[float, float]
    origin: tuple[float, float]
    aspect: float = 1.0


@dataclass(frozen=True)
class RenderParams:
    """Both render passes draw straight from the field; nothing to tune."""
