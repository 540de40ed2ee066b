"""
dispatch.py — Named Pass Dispatcher
===================================
One place that knows how to run every pass over the whole grid.

    dispatcher.run_pass(PassName.PROJECT_LOOP,
                        (project.read,),       ← input buffers
                        ProjectParams(),       ← typed bundle for THIS pass
                        project.write)         ← output buffer
    project.swap()

The dispatcher does not swap. The caller owns its pairs and decides
when the written buffer becomes the read one. Kernels are plain numpy
and synchronous, so the write is complete by the time run_pass
returns and swapping right after is safe.

Checks done on every call:
  - the pass name is registered
  - the parameter bundle is the right dataclass for that pass
  - the input count matches the kernel
  - the output buffer is not also an input (that would break ping-pong)

`counts` tracks how many times each pass ran. The simulation reports
it in its frame metrics, and tests use it to prove a pass was skipped.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Callable

import numpy as np

from .advect import advect_density_kernel, advect_velocity_kernel
from .diffuse import diffuse_kernel
from .forces import force_velocity
from .grid import reset_kernel
from .passes import (
    AdvectDensityParams, AdvectVelocityParams, DiffuseParams, ForceParams,
    PassName, ProjectParams, RenderParams, ResetParams,
)
from .render import render_density, render_velocity
from .solver import project_begin_kernel, project_end_kernel, project_loop_kernel


@dataclass(frozen=True)
class KernelSpec:
    kernel: Callable
    params_type: type
    n_inputs: int
    renders: bool = False


KERNELS: dict[PassName, KernelSpec] = {
    PassName.RESET_VELOCITY:   KernelSpec(reset_kernel,            ResetParams,          0),
    PassName.RESET_DENSITY:    KernelSpec(reset_kernel,            ResetParams,          0),
    PassName.RESET_PROJECT:    KernelSpec(reset_kernel,            ResetParams,          0),
    PassName.DIFFUSE_VELOCITY: KernelSpec(diffuse_kernel,          DiffuseParams,        1),
    PassName.DIFFUSE_DENSITY:  KernelSpec(diffuse_kernel,          DiffuseParams,        1),
    PassName.ADVECT_VELOCITY:  KernelSpec(advect_velocity_kernel,  AdvectVelocityParams, 1),
    PassName.ADVECT_DENSITY:   KernelSpec(advect_density_kernel,   AdvectDensityParams,  2),
    PassName.PROJECT_BEGIN:    KernelSpec(project_begin_kernel,    ProjectParams,        1),
    PassName.PROJECT_LOOP:     KernelSpec(project_loop_kernel,     ProjectParams,        1),
    PassName.PROJECT_END:      KernelSpec(project_end_kernel,      ProjectParams,        2),
    PassName.FORCE_VELOCITY:   KernelSpec(force_velocity,          ForceParams,          1),
    PassName.RENDER_VELOCITY:  KernelSpec(render_velocity,         RenderParams,         1, renders=True),
    PassName.RENDER_DENSITY:   KernelSpec(render_density,          RenderParams,         1, renders=True),
}


class KernelDispatcher:

    def __init__(self, kernels: dict[PassName, KernelSpec] | None = None):
        self.kernels = dict(KERNELS if kernels is None else kernels)
        self.counts: Counter = Counter()

    def run_pass(self, name: PassName, inputs: tuple, params, target: np.ndarray | None = None):
        """
        Execute one named pass over the full grid.

        Args:
            name   : Which pass
            inputs : Read buffers, in the order the kernel expects
            params : The pass's parameter dataclass
            target : Output buffer (None for render passes)

        Returns:
            The rendered image for render passes, otherwise None
        """
        entry = self.kernels.get(name)
        if entry is None:
            raise ValueError(f"Unknown pass: {name}")
        if not isinstance(params, entry.params_type):
            raise TypeError(f"{name.value} expects {entry.params_type.__name__}, "
                            f"got {type(params).__name__}")
        if len(inputs) != entry.n_inputs:
            raise ValueError(f"{name.value} takes {entry.n_inputs} input(s), got {len(inputs)}")

        if entry.renders:
            self.counts[name] += 1
            return entry.kernel(*inputs, params=params)

        if target is None:
            raise ValueError(f"{name.value} needs an output buffer")
        for buf in inputs:
            if np.may_share_memory(buf, target):
                raise ValueError(f"{name.value}: output buffer aliases an input buffer")

        self.counts[name] += 1
        entry.kernel(*inputs, params=params, out=target)
        return None

    def reset_counts(self):
        self.counts.clear()
