"""
visualizer.py — Interactive Fluid Viewer
=========================================
Hosts the simulation in a matplotlib window:
  - the image axes is the display surface (its pixel size sets the grid)
  - click & drag in the image pushes the fluid
  - sliders below tune the live parameters
  - check boxes toggle density/velocity display and the additional-velocity mode
  - "reset buffer" clears every field

Uses matplotlib FuncAnimation as the per-refresh callback. Everything runs
on the GUI thread, one frame per timer tick.
"""

import matplotlib.pyplot as plt
import matplotlib.animation as animation
from matplotlib.widgets import Button, CheckButtons, Slider

from fluid2d import DisplaySurface, FluidSimulation, SimulationParams
from fluid2d.forces import orbit_impulse

PANEL_COLOR = '#1a1a1a'
TEXT_COLOR  = '#cccccc'


class FluidVisualizer:
    """
    Real-time viewer + tuning panel for a FluidSimulation.

    Usage (standalone):
        from fluid2d import FluidSimulation, DisplaySurface
        from visualizer import FluidVisualizer

        sim = FluidSimulation(DisplaySurface(640, 480))
        viz = FluidVisualizer(sim)
        viz.run()  # Opens live window
    """

    def __init__(self, simulation: FluidSimulation, autopilot: bool = False):
        """
        Args:
            simulation : FluidSimulation instance
            autopilot  : Drive the fluid with a scripted orbiting stroke
        """
        self.sim = simulation
        self.autopilot = autopilot
        self.sliders = {}

        self._setup_figure()
        self._setup_panel()
        self._connect_events()

        # The grid follows the image axes, not the surface the sim was built with
        self.sim.request_resize(self._surface())

    # ── Layout ─────────────────────────────────────────────────────────────
    def _setup_figure(self):
        """Image axes on top, parameter panel underneath."""
        self.fig = plt.figure(figsize=(8, 9))
        self.fig.patch.set_facecolor('#0a0a0a')

        self.ax = self.fig.add_axes([0.05, 0.38, 0.9, 0.56])
        self.ax.set_xticks([])
        self.ax.set_yticks([])
        for spine in self.ax.spines.values():
            spine.set_edgecolor('#333333')

        self.img = self.ax.imshow(
            self.sim.render(),
            interpolation='bilinear',
            origin='lower',
            aspect='auto'
        )

        self.title_text = self.fig.suptitle(
            "Fluid2D — Frame 0 | 0.0 FPS",
            color=TEXT_COLOR, fontsize=10, fontfamily='monospace'
        )

    def _setup_panel(self):
        """One slider per ranged parameter, plus toggles and the reset button."""
        params = self.sim.params
        slider_fields = SimulationParams.slider_fields()

        top = 0.32
        row = 0.032
        for k, (name, meta) in enumerate(slider_fields):
            ax = self.fig.add_axes([0.25, top - k * row, 0.45, 0.02], facecolor=PANEL_COLOR)
            slider = Slider(
                ax, meta["label"], meta["min"], meta["max"],
                valinit=getattr(params, name), valstep=meta["step"]
            )
            slider.label.set_color(TEXT_COLOR)
            slider.valtext.set_color(TEXT_COLOR)
            slider.on_changed(lambda value, name=name: self._on_param(name, value))
            self.sliders[name] = slider

        check_ax = self.fig.add_axes([0.76, 0.18, 0.21, 0.1], facecolor=PANEL_COLOR)
        self.checks = CheckButtons(
            check_ax,
            ["draw_density", "additional_velocity"],
            [self.sim.draw_density, params.additional_velocity]
        )
        for label in self.checks.labels:
            label.set_color(TEXT_COLOR)
        self.checks.on_clicked(self._on_check)

        reset_ax = self.fig.add_axes([0.76, 0.1, 0.21, 0.05])
        self.reset_button = Button(reset_ax, "reset buffer")
        self.reset_button.on_clicked(self._on_reset)

    def _connect_events(self):
        canvas = self.fig.canvas
        canvas.mpl_connect('button_press_event', self._on_press)
        canvas.mpl_connect('motion_notify_event', self._on_move)
        canvas.mpl_connect('button_release_event', self._on_release)
        canvas.mpl_connect('resize_event', self._on_resize)

    # ── Display surface ────────────────────────────────────────────────────
    def _surface(self) -> DisplaySurface:
        bbox = self.ax.bbox
        return DisplaySurface(
            width=max(1.0, bbox.width),
            height=max(1.0, bbox.height),
            device_scale=self.fig.canvas.device_pixel_ratio
        )

    def _client_xy(self, event) -> tuple[float, float]:
        """matplotlib display coords (origin bottom-left) → client coords (origin top-left)."""
        bbox = self.ax.bbox
        return event.x - bbox.x0, bbox.y1 - event.y

    # ── Event handlers ─────────────────────────────────────────────────────
    def _on_press(self, event):
        if event.inaxes is not self.ax:
            return
        self.sim.pointer_down(*self._client_xy(event))

    def _on_move(self, event):
        if event.inaxes is not self.ax:
            return
        self.sim.pointer_move(*self._client_xy(event))

    def _on_release(self, event):
        self.sim.pointer_up()

    def _on_resize(self, event):
        self.sim.request_resize(self._surface())

    def _on_param(self, name: str, value):
        current = getattr(self.sim.params, name)
        setattr(self.sim.params, name, type(current)(value))

    def _on_check(self, label):
        draw_density, additional = self.checks.get_status()
        if label == "draw_density":
            self.sim.set_draw_density(draw_density)
        elif label == "additional_velocity":
            self.sim.set_additional_velocity(additional)

    def _on_reset(self, event):
        self.sim.reset()

    # ── Animation ──────────────────────────────────────────────────────────
    def update(self, frame_num):
        """Called by FuncAnimation each frame. Steps sim and updates the image."""
        if self.autopilot:
            position, direction = orbit_impulse(frame_num)
            self.sim.inject(position, direction, length=8.0)

        metrics = self.sim.step()
        image = self.sim.render()

        height, width = image.shape[:2]
        if self.img.get_array().shape[:2] != (height, width):
            self.img.set_extent((-0.5, width - 0.5, -0.5, height - 0.5))
        self.img.set_data(image)

        self.title_text.set_text(
            f"Fluid2D — Frame {metrics['frame']} | {width}x{height} | "
            f"{metrics['fps']:.1f} FPS | "
            f"div_max={metrics['divergence_max']:.4f}"
        )
        return [self.img, self.title_text]

    def run(self, fps: int = 60):
        """
        Start the live animation window (runs until it is closed).

        Args:
            fps : Target animation frame rate
        """
        interval_ms = 1000 // fps
        self.anim = animation.FuncAnimation(
            self.fig,
            self.update,
            interval=interval_ms,
            blit=False,
            cache_frame_data=False
        )
        plt.show()

    def save_gif(self, path: str = "fluid2d.gif", fps: int = 30, frames: int = 120):
        """Save a scripted run as a GIF (for reports and demos)."""
        print(f"Rendering {frames} frames to {path}...")
        self.autopilot = True
        self.anim = animation.FuncAnimation(
            self.fig, self.update, frames=frames, interval=1000 // fps, blit=False
        )
        writer = animation.PillowWriter(fps=fps)
        self.anim.save(path, writer=writer)
        print(f"Saved: {path}")
