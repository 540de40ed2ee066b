"""
render.py — Field → RGB Image
=============================
The two display passes. Both return an (H, W, 3) float image in [0, 1]
with row 0 at the bottom, ready for imshow(..., origin='lower').
"""

import numpy as np

from .passes import RenderParams


def render_density(density: np.ndarray, *, params: RenderParams) -> np.ndarray:
    """Density ink as-is (RGB), clipped to displayable range."""
    return np.clip(density[..., :3], 0.0, 1.0)


def render_velocity(velocity: np.ndarray, *, params: RenderParams) -> np.ndarray:
    """
    Velocity as color: red/green = x/y direction around mid-grey, blue = speed.
    A fluid at rest renders as (0.5, 0.5, 0.0).
    """
    v = velocity[..., :2]
    speed = np.sqrt(np.sum(v * v, axis=-1))

    image = np.empty(velocity.shape[:2] + (3,), dtype=np.float32)
    image[..., 0] = 0.5 + 0.5 * v[..., 0]
    image[..., 1] = 0.5 + 0.5 * v[..., 1]
    image[..., 2] = speed
    return np.clip(image, 0.0, 1.0)
