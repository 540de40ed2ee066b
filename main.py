"""
main.py — Master Entry Point
============================
Top-level script that runs the fluid simulation in one of three modes.

Usage:
    python main.py --mode live        # Interactive window (drag to push the fluid)
    python main.py --mode headless    # Run without display, print stats
    python main.py --mode benchmark   # Per-pass timing breakdown
"""

import argparse
import numpy as np

from fluid2d import DisplaySurface, FluidSimulation, SimulationParams
from fluid2d.forces import orbit_impulse
from fluid2d.params import PIXEL_RATIO, PROJECT_ITERATION


def _make_sim(width: int, height: int, pixel_ratio: float, iterations: int) -> FluidSimulation:
    params = SimulationParams(project_iterations=iterations)
    return FluidSimulation(DisplaySurface(width, height), params=params, pixel_ratio=pixel_ratio)


def run_live(width: int, height: int, pixel_ratio: float, iterations: int, autopilot: bool = False):
    """Live interactive visualization."""
    from visualizer import FluidVisualizer

    print(f"Starting live simulation ({width}x{height} px, pixel ratio {pixel_ratio})...")
    print("Click and drag in the image to push the fluid. Close the window to exit.\n")

    sim = _make_sim(width, height, pixel_ratio, iterations)
    viz = FluidVisualizer(sim, autopilot=autopilot)
    viz.run(fps=60)


def run_headless(width: int, height: int, pixel_ratio: float, iterations: int, frames: int = 100):
    """Run simulation without display: a scripted stroke, stats every 10 frames."""
    sim = _make_sim(width, height, pixel_ratio, iterations)

    print(f"\nHeadless simulation | grid {sim.width}x{sim.height} | {frames} frames")
    print(f"{'─'*60}")

    total_times = []
    for f in range(frames):
        position, direction = orbit_impulse(f)
        sim.inject(position, direction, length=8.0)

        metrics = sim.step()
        total_times.append(metrics["total_ms"])

        if f % 10 == 0:
            print(f"  Frame {f:03d} | {metrics['total_ms']:6.1f}ms "
                  f"({metrics['fps']:.1f} FPS) | "
                  f"div_max={metrics['divergence_max']:.5f} | "
                  f"density={metrics['density_total']:.1f}")

    print(f"\n{'─'*60}")
    print(f"  Average: {np.mean(total_times):.1f}ms/frame ({1000/np.mean(total_times):.1f} FPS)")
    print(f"  Min:     {np.min(total_times):.1f}ms")
    print(f"  Max:     {np.max(total_times):.1f}ms")
    sim.print_status()


def run_benchmark(width: int, height: int, pixel_ratio: float, iterations: int, frames: int = 50):
    """
    Detailed performance breakdown.
    Shows how long each pass of the frame takes, and how many times each named pass ran.
    """
    sim = _make_sim(width, height, pixel_ratio, iterations)
    sim.params.diffuse = 0.001   # include the diffusion passes in the breakdown

    print(f"\n{'='*60}")
    print(f"  BENCHMARK | grid {sim.width}x{sim.height} | "
          f"{iterations} Jacobi sweeps | {frames} frames")
    print(f"{'='*60}")

    # Warm up
    for f in range(5):
        position, direction = orbit_impulse(f)
        sim.inject(position, direction, length=8.0)
        sim.frame()

    sim.dispatcher.reset_counts()
    logs = []
    for f in range(frames):
        position, direction = orbit_impulse(f)
        sim.inject(position, direction, length=8.0)
        logs.append(sim.step())
        sim.render()

    keys = ["force_ms", "diffuse_vel_ms", "project1_ms",
            "advect_vel_ms", "project2_ms", "diffuse_den_ms",
            "advect_den_ms", "total_ms"]

    print(f"\n{'Step':<20} {'Mean':>8} {'Min':>8} {'Max':>8}")
    print(f"{'─'*50}")
    for k in keys:
        vals = [m[k] for m in logs]
        print(f"  {k:<18} {np.mean(vals):>7.2f}ms {np.min(vals):>7.2f}ms {np.max(vals):>7.2f}ms")

    print(f"\n{'Pass':<20} {'Runs':>8} {'Per frame':>10}")
    print(f"{'─'*50}")
    for name, count in sorted(sim.dispatcher.counts.items(), key=lambda kv: kv[0].value):
        print(f"  {name.value:<18} {count:>8d} {count / frames:>10.1f}")

    total_vals = [m["total_ms"] for m in logs]
    print(f"\n{'─'*50}")
    print(f"  FPS (simulation only): {1000/np.mean(total_vals):.1f}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="2D Stable Fluids")
    parser.add_argument(
        "--mode", choices=["live", "headless", "benchmark"],
        default="live",
        help="Run mode (default: live)"
    )
    parser.add_argument("--width",       type=int,   default=640, help="Surface width in pixels")
    parser.add_argument("--height",      type=int,   default=480, help="Surface height in pixels")
    parser.add_argument("--pixel-ratio", type=float, default=PIXEL_RATIO, help="Pixels per simulation cell")
    parser.add_argument("--iterations",  type=int,   default=PROJECT_ITERATION, help="Jacobi sweeps per projection")
    parser.add_argument("--frames",      type=int,   default=100, help="Number of frames (headless/benchmark)")
    parser.add_argument("--autopilot",   action="store_true", help="Scripted stroke in live mode")

    args = parser.parse_args()

    if args.mode == "live":
        run_live(args.width, args.height, args.pixel_ratio, args.iterations, args.autopilot)
    elif args.mode == "headless":
        run_headless(args.width, args.height, args.pixel_ratio, args.iterations, frames=args.frames)
    elif args.mode == "benchmark":
        run_benchmark(args.width, args.height, args.pixel_ratio, args.iterations, frames=args.frames)
