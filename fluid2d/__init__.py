"""
fluid2d/ — 2D Stable Fluids Package
====================================
Exports the main interfaces a host (visualizer.py, main.py) uses.

The visualizer imports  : FluidSimulation, DisplaySurface, SimulationParams
main.py imports         : FluidSimulation → step(), inject(), print_status()
Tests reach into        : Field, KernelDispatcher, PassName, compute_divergence
"""

from .dispatch import KernelDispatcher
from .grid import DisplaySurface, Field, FieldAllocationError, grid_size
from .params import SimulationParams
from .passes import PassName
from .pointer import PointerState
from .simulation import FluidSimulation, FrameState
from .solver import compute_divergence

__all__ = [
    "DisplaySurface", "Field", "FieldAllocationError", "FluidSimulation",
    "FrameState", "KernelDispatcher", "PassName", "PointerState",
    "SimulationParams", "compute_divergence", "grid_size",
]
