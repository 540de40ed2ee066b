"""
grid.py — Double-Buffered Grid Fields
======================================
Every physical quantity (velocity, density, pressure) lives in a Field:
two equally-sized float32 buffers and an index saying which one is
"read" (the stable result of the previous pass) and which one is
"write" (the buffer the next pass produces).

    read  ──► kernel ──► write
                           │
                         swap()   ← O(1): flip the index, copy nothing

Layout of one buffer: shape (height, width, channels)
  - row 0 is the BOTTOM of the domain (y points up, like texture space)
  - column 0 is the LEFT edge

The domain is a torus. Nothing in here clamps at the edges: every
neighbour lookup and every point sample wraps around. That is the only
boundary condition the simulation has.
"""

import math
from dataclasses import dataclass

import numpy as np

from .params import PIXEL_RATIO


class FieldAllocationError(RuntimeError):
    """Raised when a field's buffers cannot be allocated at the requested size."""


@dataclass
class DisplaySurface:
    """Pixel size of whatever the simulation is drawn onto."""
    width: float
    height: float
    device_scale: float = 1.0


def grid_size(surface: DisplaySurface, pixel_ratio: float = PIXEL_RATIO) -> tuple[int, int]:
    """
    Derive the simulation resolution from a display surface.

        cells = ceil(surface_pixels / pixel_ratio / device_scale)

    Args:
        surface     : Display surface (pixels + device pixel ratio)
        pixel_ratio : How many surface pixels one cell covers

    Returns:
        (width, height) in cells, at least 1 × 1
    """
    if surface.width <= 0 or surface.height <= 0:
        raise ValueError(f"Display surface must be non-empty, got {surface.width}x{surface.height}")
    if pixel_ratio <= 0 or surface.device_scale <= 0:
        raise ValueError("pixel_ratio and device_scale must be positive")

    width = math.ceil(surface.width / pixel_ratio / surface.device_scale)
    height = math.ceil(surface.height / pixel_ratio / surface.device_scale)
    return max(1, width), max(1, height)


class Field:
    """
    A ping-pong pair of buffers holding one quantity.

    Usage:
        vel = Field("velocity", 64, 64, channels=2)
        run_kernel(vel.read, out=vel.write)
        vel.swap()                 # what was written is now read
    """

    def __init__(self, name: str, width: int, height: int, channels: int):
        self.name = name
        self.channels = channels
        self.width = 0
        self.height = 0
        self._buffers: list[np.ndarray] = []
        self._index = 0
        self.allocate(width, height)

    # ── Buffer roles ───────────────────────────────────────────────────────
    @property
    def read(self) -> np.ndarray:
        """Stable buffer: the result of the last completed pass."""
        return self._buffers[self._index]

    @property
    def write(self) -> np.ndarray:
        """Target buffer for the next pass."""
        return self._buffers[1 - self._index]

    @property
    def buffers(self) -> tuple[np.ndarray, np.ndarray]:
        return self._buffers[0], self._buffers[1]

    @property
    def shape(self) -> tuple[int, int, int]:
        return self.height, self.width, self.channels

    def swap(self):
        """Exchange read/write roles. Swapping twice restores the original roles."""
        self._index = 1 - self._index

    # ── Allocation ─────────────────────────────────────────────────────────
    def allocate(self, width: int, height: int):
        """
        (Re)allocate both buffers at a new resolution.
        Previous contents are discarded, not resampled.

        Raises:
            ValueError           : non-positive size
            FieldAllocationError : the allocation ran out of memory
        """
        self.adopt(self.new_buffers(width, height))

    def new_buffers(self, width: int, height: int) -> list[np.ndarray]:
        """A fresh zeroed pair for this field at a new size. The field itself is unchanged."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Field '{self.name}' needs a positive size, got {width}x{height}")

        shape = (height, width, self.channels)
        try:
            return [np.zeros(shape, dtype=np.float32), np.zeros(shape, dtype=np.float32)]
        except MemoryError as exc:
            raise FieldAllocationError(
                f"Cannot allocate field '{self.name}' at {width}x{height}x{self.channels}"
            ) from exc

    def adopt(self, buffers: list[np.ndarray]):
        """Take over a pair made by new_buffers(); buffer 0 becomes the read side."""
        self._buffers = buffers
        self._index = 0
        self.height, self.width = buffers[0].shape[:2]

    def __repr__(self):
        return f"Field({self.name!r}, {self.width}x{self.height}x{self.channels}, read={self._index})"


# ── Wraparound sampling ───────────────────────────────────────────────────────

def cell_centers_ndc(width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """
    Normalized device coordinates ([-1, 1], y up) of every cell center.

    Returns (x, y), each of shape (height, width).
    """
    x = (np.arange(width, dtype=np.float32) + 0.5) / width * 2.0 - 1.0
    y = (np.arange(height, dtype=np.float32) + 0.5) / height * 2.0 - 1.0
    return np.meshgrid(x, y, indexing='xy')


def fetch(buf: np.ndarray, ix: np.ndarray, iy: np.ndarray) -> np.ndarray:
    """Nearest-neighbour fetch at integer cell indices, wrapping at every edge."""
    h, w = buf.shape[:2]
    return buf[np.mod(iy, h), np.mod(ix, w)]


def sample_bilinear(buf: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """
    Bilinear sample of a buffer at fractional cell positions (toroidal).

    Cell centers sit at integer positions, so a query that lands exactly
    on a center returns that cell's value untouched.

    Args:
        buf  : Buffer of shape (H, W, C)
        x, y : Query positions in cell units, any shape (typically (H, W))

    Returns:
        Samples of shape x.shape + (C,)
    """
    x0 = np.floor(x)
    y0 = np.floor(y)
    tx = (x - x0)[..., np.newaxis]
    ty = (y - y0)[..., np.newaxis]

    ix = x0.astype(np.intp)
    iy = y0.astype(np.intp)

    c00 = fetch(buf, ix,     iy)
    c10 = fetch(buf, ix + 1, iy)
    c01 = fetch(buf, ix,     iy + 1)
    c11 = fetch(buf, ix + 1, iy + 1)

    bottom = c00 * (1 - tx) + c10 * tx
    top    = c01 * (1 - tx) + c11 * tx
    return bottom * (1 - ty) + top * ty


def neighbors(buf: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    The four face neighbours of every cell, with wraparound.

    Returns (left, right, down, up): left[j, i] == buf[j, i-1], etc.
    """
    left  = np.roll(buf,  1, axis=1)
    right = np.roll(buf, -1, axis=1)
    down  = np.roll(buf,  1, axis=0)
    up    = np.roll(buf, -1, axis=0)
    return left, right, down, up


# ── Reset kernel ──────────────────────────────────────────────────────────────

def reset_kernel(*, params, out: np.ndarray):
    """Write the initial value (zero velocity / density / pressure) into every cell."""
    out.fill(params.value)
