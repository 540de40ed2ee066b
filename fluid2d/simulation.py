"""
simulation.py — Frame Orchestrator
==================================
Ties every pass together. One call to `step()` advances the fluid by
one time step; `render()` turns the result into an image.

Pipeline per frame (fixed order, each stage reads what the previous
one wrote):
  1. Inject force                (pointer if pressed AND moved, plus any scripted impulse)
  2. Diffuse velocity            (only if diffuse > 0)
  3. Project                     (enforce incompressibility)
  4. Advect velocity by itself   (+ attenuation)
  5. Project again               (clean up post-advection divergence)
  6. Diffuse density             (only if diffuse > 0)
  7. Advect density by velocity
  8. Render density OR velocity

States: IDLE → UPDATING_VELOCITY → UPDATING_DENSITY → RENDERING → IDLE

Everything runs on one thread. A resize requested mid-animation is held
back and applied as its own step right before the next frame's passes,
so no pass ever sees buffers of two different sizes.

This follows the "Stable Fluids" paper by Jos Stam.
"""

import time
from collections import deque
from enum import Enum

import numpy as np

from .advect import advect_density, advect_velocity
from .diffuse import diffuse_density, diffuse_velocity
from .dispatch import KernelDispatcher
from .forces import Impulse, apply_force, apply_impulse
from .grid import DisplaySurface, Field, grid_size
from .params import PIXEL_RATIO, SimulationParams
from .passes import PassName, RenderParams, ResetParams
from .pointer import PointerState
from .solver import compute_divergence, project


class FrameState(Enum):
    IDLE              = "idle"
    UPDATING_VELOCITY = "updating_velocity"
    UPDATING_DENSITY  = "updating_density"
    RENDERING         = "rendering"


VELOCITY_CHANNELS = 2
DENSITY_CHANNELS  = 3
PROJECT_CHANNELS  = 2   # pressure, divergence

PERF_LOG_SIZE = 600     # frames of metrics kept (10 s at 60 FPS)


class FluidSimulation:
    """
    The complete 2D fluid simulation.

    Usage:
        sim = FluidSimulation(DisplaySurface(640, 480))
        sim.pointer_down(320, 240)
        sim.pointer_move(330, 240)       # drag → force on next step
        for frame in range(100):
            image = sim.frame()          # step + render, hand to a viewer
    """

    def __init__(self, surface: DisplaySurface, params: SimulationParams = None,
                 pixel_ratio: float = PIXEL_RATIO, dispatcher: KernelDispatcher = None,
                 verbose: bool = True):
        """
        Args:
            surface     : Display surface the grid size is derived from
            params      : Tunable parameters (shared, may be mutated any time)
            pixel_ratio : Display pixels per simulation cell
            dispatcher  : Pass dispatcher (a fresh numpy one by default)
            verbose     : Print resize/reset events
        """
        self.params = params or SimulationParams()
        self.pixel_ratio = pixel_ratio
        self.dispatcher = dispatcher or KernelDispatcher()
        self.verbose = verbose

        self.pointer = PointerState()
        self.draw_density = True
        self.state = FrameState.IDLE
        self.frame_count = 0
        self.perf_log = deque(maxlen=PERF_LOG_SIZE)

        self.surface = surface
        self._pending_surface = None
        self._impulse = None

        width, height = grid_size(surface, pixel_ratio)
        self.velocity = Field("velocity", width, height, VELOCITY_CHANNELS)
        self.density  = Field("density",  width, height, DENSITY_CHANNELS)
        self.project_field = Field("project", width, height, PROJECT_CHANNELS)

        self.reset()

    # ── Grid ───────────────────────────────────────────────────────────────
    @property
    def width(self) -> int:
        return self.velocity.width

    @property
    def height(self) -> int:
        return self.velocity.height

    @property
    def fields(self) -> tuple[Field, Field, Field]:
        return self.velocity, self.density, self.project_field

    def resize(self, surface: DisplaySurface):
        """
        Recompute the grid for a new surface, reallocate every pair and clear it.
        Old contents are dropped (not resampled).

        Raises:
            FieldAllocationError : the new resolution does not fit in memory
        """
        width, height = grid_size(surface, self.pixel_ratio)
        self._pending_surface = None

        # All three pairs or none: a failed allocation leaves the old grid whole
        staged = [f.new_buffers(width, height) for f in self.fields]
        for f, buffers in zip(self.fields, staged):
            f.adopt(buffers)
        self.surface = surface
        self._log(f"Resized grid to {width}x{height}")
        self.reset()

    def request_resize(self, surface: DisplaySurface):
        """Defer a resize until the start of the next step()."""
        self._pending_surface = surface

    def reset(self):
        """Write the zero initial state into both buffers of every pair."""
        resets = (
            (self.velocity,      PassName.RESET_VELOCITY),
            (self.density,       PassName.RESET_DENSITY),
            (self.project_field, PassName.RESET_PROJECT),
        )
        bundle = ResetParams()
        for f, pass_name in resets:
            for _ in range(2):
                self.dispatcher.run_pass(pass_name, (), bundle, f.write)
                f.swap()
        self._log("Fields reset")

    # ── Live toggles (tuning panel) ────────────────────────────────────────
    def set_additional_velocity(self, enabled: bool):
        """Switch the additional-velocity ink mode. Restarts the simulation from zero."""
        self.params.additional_velocity = bool(enabled)
        self._log(f"Additional velocity: {'on' if enabled else 'off'}")
        self.reset()

    def set_draw_density(self, enabled: bool):
        self.draw_density = bool(enabled)

    # ── Pointer input (client pixels, origin top-left) ─────────────────────
    def pointer_down(self, x: float, y: float):
        self.pointer.press(x, y)

    def pointer_move(self, x: float, y: float):
        self.pointer.move(x, y, self.surface.width, self.surface.height)

    def pointer_up(self):
        self.pointer.release()

    def touch_move(self, touches):
        self.pointer.touch_move(touches, self.surface.width, self.surface.height)

    def inject(self, position: tuple, direction: tuple, length: float = 1.0):
        """
        Scripted drag: queue one impulse for the next step.

        Args:
            position  : NDC position ([-1, 1], y up)
            direction : Push direction (normalized here; zero stays zero)
            length    : Speed factor, 1 + pixels moved

        The pointer state is left alone, so a real drag and a scripted
        stroke can both push in the same frame.
        """
        dx, dy = direction
        norm = float(np.hypot(dx, dy))
        self._impulse = Impulse(
            position=(float(position[0]), float(position[1])),
            direction=(dx / norm, dy / norm) if norm > 0 else (0.0, 0.0),
            length=float(length),
        )

    # ── Main loop ──────────────────────────────────────────────────────────
    def step(self) -> dict:
        """
        Advance the simulation by one time step (stages 1–7).

        Returns performance metrics dict for benchmarking.
        """
        if self._pending_surface is not None:
            self.resize(self._pending_surface)

        t_total_start = time.perf_counter()
        p = self.params
        d = self.dispatcher

        # ── Velocity ───────────────────────────────────────────────────────
        self.state = FrameState.UPDATING_VELOCITY

        t0 = time.perf_counter()
        forced = apply_force(d, self.velocity, self.pointer, p)
        if self._impulse is not None:
            apply_impulse(d, self.velocity, self._impulse, p)
            self._impulse = None
            forced = True
        t_force = (time.perf_counter() - t0) * 1000

        t0 = time.perf_counter()
        diffuse_velocity(d, self.velocity, p)
        t_diffuse_vel = (time.perf_counter() - t0) * 1000

        t0 = time.perf_counter()
        project(d, self.velocity, self.project_field, p)
        t_project1 = (time.perf_counter() - t0) * 1000

        t0 = time.perf_counter()
        advect_velocity(d, self.velocity, p)
        t_advect_vel = (time.perf_counter() - t0) * 1000

        t0 = time.perf_counter()
        project(d, self.velocity, self.project_field, p)
        t_project2 = (time.perf_counter() - t0) * 1000

        # ── Density ────────────────────────────────────────────────────────
        self.state = FrameState.UPDATING_DENSITY

        t0 = time.perf_counter()
        diffuse_density(d, self.density, p)
        t_diffuse_den = (time.perf_counter() - t0) * 1000

        t0 = time.perf_counter()
        advect_density(d, self.velocity, self.density, p)
        t_advect_den = (time.perf_counter() - t0) * 1000

        self.state = FrameState.IDLE

        # ── Frame bookkeeping ──────────────────────────────────────────────
        self.frame_count += 1
        t_total = (time.perf_counter() - t_total_start) * 1000
        div = compute_divergence(self.velocity.read)

        metrics = {
            "frame"          : self.frame_count,
            "grid"           : (self.width, self.height),
            "total_ms"       : t_total,
            "fps"            : 1000.0 / t_total if t_total > 0 else 0,
            "forced"         : forced,
            "force_ms"       : t_force,
            "diffuse_vel_ms" : t_diffuse_vel,
            "project1_ms"    : t_project1,
            "advect_vel_ms"  : t_advect_vel,
            "project2_ms"    : t_project2,
            "diffuse_den_ms" : t_diffuse_den,
            "advect_den_ms"  : t_advect_den,
            "divergence_max" : float(np.abs(div).max()),
            "divergence_mean": float(np.abs(div).mean()),
            "density_total"  : float(self.density.read.sum()),
        }
        self.perf_log.append(metrics)
        return metrics

    def render(self) -> np.ndarray:
        """Stage 8: draw density or velocity, depending on draw_density."""
        self.state = FrameState.RENDERING
        if self.draw_density:
            image = self.dispatcher.run_pass(PassName.RENDER_DENSITY, (self.density.read,), RenderParams())
        else:
            image = self.dispatcher.run_pass(PassName.RENDER_VELOCITY, (self.velocity.read,), RenderParams())
        self.state = FrameState.IDLE
        return image

    def frame(self) -> np.ndarray:
        """One display tick: step() then render()."""
        self.step()
        return self.render()

    # ── Inspection ─────────────────────────────────────────────────────────
    def get_snapshot(self) -> dict:
        """Copies of the current read buffers (in memory only)."""
        return {
            "frame"      : self.frame_count,
            "velocity"   : self.velocity.read.copy(),
            "density"    : self.density.read.copy(),
            "pressure"   : self.project_field.read[..., 0].copy(),
            "divergence" : compute_divergence(self.velocity.read),
        }

    def print_status(self):
        """Pretty-print current simulation state."""
        div = compute_divergence(self.velocity.read)
        speed = np.sqrt(np.sum(self.velocity.read ** 2, axis=-1))
        print(f"\n{'='*50}")
        print(f"  Frame: {self.frame_count}  |  Grid: {self.width}x{self.height}")
        print(f"  Density   : max={self.density.read.max():.4f}, total={self.density.read.sum():.2f}")
        print(f"  Velocity  : max_speed={speed.max():.4f}")
        print(f"  Divergence: max={np.abs(div).max():.6f}, mean={np.abs(div).mean():.8f}")
        if self.perf_log:
            last = self.perf_log[-1]
            print(f"  Perf      : {last['total_ms']:.1f}ms/frame ({last['fps']:.1f} FPS)")
        print(f"{'='*50}")

    def _log(self, message: str):
        if self.verbose:
            print(f"[Simulation] {message}")
