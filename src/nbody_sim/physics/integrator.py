"""
Time integration of body state.

Uses semi-implicit (symplectic) Euler: velocity is advanced first and the
new velocity moves the position. This keeps the energy error of bound
orbits oscillating instead of growing like explicit Euler.
"""

from __future__ import annotations

from typing import Sequence

from ..types import Body, Vector2
from ..validation import ValidationError


def integrate(
    bodies: Sequence[Body],
    accelerations: Sequence[Vector2],
    dt: float,
) -> None:
    """
    Advance every body by one timestep, in place.

    Each body's acceleration attributes are set to the consumed value so
    consumers can read per-body acceleration after the step.

    Args:
        bodies: Bodies to advance (mutated)
        accelerations: One (ax, ay) per body, same order (list of tuples or
            an (n, 2) array)
        dt: Timestep

    Raises:
        ValidationError: If the sequences have different lengths
    """
    if len(accelerations) != len(bodies):
        raise ValidationError(
            f"Expected {len(bodies)} accelerations, got {len(accelerations)}"
        )

    for body, acc in zip(bodies, accelerations):
        ax = float(acc[0])
        ay = float(acc[1])
        body.ax = ax
        body.ay = ay
        # Order matters: v(t+dt) first, then x(t+dt) from the new velocity
        body.vx += ax * dt
        body.vy += ay * dt
        body.x += body.vx * dt
        body.y += body.vy * dt


__all__ = ["integrate"]
