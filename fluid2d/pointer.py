"""
pointer.py — Pointer / Touch State
==================================
Turns raw press/move/release events (client pixels, origin top-left,
y pointing DOWN) into what the force injector needs:

  position   : where to push, in NDC ([-1, 1], y pointing UP)
  direction  : unit vector of the last movement (zero if it didn't move)
  length     : 1 + pixels travelled since the previous event
               → fast drags push harder than slow ones

The `moved` flag is single-shot. The injector consumes it, so a finger
that is held down but not moving stops adding force after one frame.
"""

import math
from typing import Sequence


class PointerState:

    def __init__(self):
        self.pressed = False
        self.moved = False
        self.position = [0.0, 0.0]
        self.prev_position = [0.0, 0.0]
        self.direction = [0.0, 0.0]
        self.length = 1.0

    def press(self, client_x: float, client_y: float):
        self.pressed = True
        self.prev_position = [client_x, client_y]

    def release(self):
        self.pressed = False
        self.moved = False

    def move(self, client_x: float, client_y: float, surface_width: float, surface_height: float):
        """
        Record one pointer-move event.

        Args:
            client_x, client_y            : Pointer position in surface pixels
            surface_width, surface_height : Current surface size in pixels
        """
        if not self.pressed:
            self.moved = False
            return

        vx = client_x - self.prev_position[0]
        vy = client_y - self.prev_position[1]
        length = math.hypot(vx, vy)
        self.prev_position = [client_x, client_y]

        self.position = [
            (client_x / surface_width) * 2.0 - 1.0,
            -((client_y / surface_height) * 2.0 - 1.0),
        ]
        if length == 0:
            self.direction = [0.0, 0.0]
        else:
            # Screen y grows downward, simulation y grows upward
            self.direction = [vx / length, -vy / length]

        self.length = 1.0 + length
        self.moved = True

    def touch_move(self, touches: Sequence[tuple[float, float]], surface_width: float, surface_height: float):
        """Multi-touch move: only the first touch point drives the fluid."""
        if len(touches) > 0:
            x, y = touches[0]
            self.move(x, y, surface_width, surface_height)

    def consume(self) -> bool:
        """
        True if a force should be injected this frame.
        Clears the moved flag, so each move event pushes exactly once.
        """
        if self.pressed and self.moved:
            self.moved = False
            return True
        return False

    def __repr__(self):
        return (f"PointerState(pressed={self.pressed}, moved={self.moved}, "
                f"position=({self.position[0]:.3f}, {self.position[1]:.3f}), "
                f"direction=({self.direction[0]:.3f}, {self.direction[1]:.3f}), "
                f"length={self.length:.1f})")
