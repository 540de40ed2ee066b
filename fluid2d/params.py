"""
params.py — Simulation Parameters
=================================
Everything the user can tune while the simulation runs.

The parameters are read at the moment a pass is invoked, so a change
made between two frames takes effect on the very next pass that uses
it. There is one simulation thread, so nothing here is locked or
snapshotted.

Each field carries its slider range in the dataclass metadata, which
is what the tuning panel in visualizer.py is built from. The ranges
are a contract for callers, not something checked at runtime: a
non-positive time step or a huge one will simply make the fluid blow
up on screen.
"""

from dataclasses import dataclass, field, fields

# ── Fixed configuration ───────────────────────────────────────────────────────
PIXEL_RATIO       = 2    # display pixels per simulation cell
DIFFUSE_ITERATION = 1    # Jacobi sweeps per diffusion pass (velocity and density)
PROJECT_ITERATION = 16   # Jacobi sweeps per pressure solve


@dataclass
class SimulationParams:
    time_step: float = field(
        default=0.005,
        metadata={"min": 0.001, "max": 0.01, "step": 0.001, "label": "time_step"},
    )
    force_radius: float = field(
        default=0.03,
        metadata={"min": 0.001, "max": 0.1, "step": 0.001, "label": "force_radius"},
    )
    force_intensity: float = field(
        default=20.0,
        metadata={"min": 1.0, "max": 100.0, "step": 1.0, "label": "force_intensity"},
    )
    force_attenuation: float = field(
        default=0.01,
        metadata={"min": 0.0, "max": 0.1, "step": 0.001, "label": "force_attenuation"},
    )
    diffuse: float = field(
        default=0.0,
        metadata={"min": 0.0, "max": 0.1, "step": 0.001, "label": "diffuse"},
    )
    additional_velocity: bool = field(
        default=False,
        metadata={"label": "additional_velocity"},
    )
    diffuse_iterations: int = field(
        default=DIFFUSE_ITERATION,
        metadata={"min": 1, "max": 20, "step": 1, "label": "diffuse_iter"},
    )
    project_iterations: int = field(
        default=PROJECT_ITERATION,
        metadata={"min": 1, "max": 64, "step": 1, "label": "project_iter"},
    )

    @classmethod
    def slider_fields(cls) -> list[tuple[str, dict]]:
        """(name, metadata) of every numeric parameter that has a range."""
        return [(f.name, dict(f.metadata)) for f in fields(cls) if "min" in f.metadata]
