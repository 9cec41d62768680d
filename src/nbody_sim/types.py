"""
Common types for the N-body simulation core.

This module provides the fundamental types shared by every stage of a step:
- Body: Point mass with position, velocity and last computed acceleration
- Square: Axis-aligned square region (quadtree bounds)
- EventType: Simulation lifecycle events
- Event: Event payload for callbacks
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Iterable, Optional, Tuple, TypedDict, Union

from .validation import InvalidBodyError, InvalidParameterError

Vector2 = Tuple[float, float]
"""2D vector as an (x, y) tuple."""


class EventType(IntEnum):
    """
    Simulation lifecycle events.

    - start: A run of steps has begun
    - tick: Fired once per completed step (for rendering)
    - end: The run has finished
    """

    start = 0
    tick = 1
    end = 2


class Event(TypedDict, total=False):
    """Event payload passed to event listeners."""

    type: EventType
    step: int
    time: float
    excluded: list[int]
    culled: list[int]
    listener: Optional[Callable[[], None]]


# Instance attributes managed by Body itself
_STATE_FIELDS = frozenset({"index", "x", "y", "vx", "vy", "ax", "ay", "_mass"})

class Body:
    """
    Simulated point mass.

    Attributes:
        index: Position in the body store (set by the simulation)
        x, y: Position
        vx, vy: Velocity
        ax, ay: Acceleration from the most recent force evaluation
        mass: Positive mass, fixed at construction
    """

    def __init__(
        self,
        x: float = 0.0,
        y: float = 0.0,
        vx: float = 0.0,
        vy: float = 0.0,
        mass: float = 1.0,
        index: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize a body.

        Args:
            x, y: Initial position
            vx, vy: Initial velocity
            mass: Body mass (must be positive and finite)
            index: Optional store index
            **kwargs: Custom properties (color, radius, ...). ``position`` and
                ``velocity`` tuples are accepted and override x, y and vx, vy.

        Raises:
            InvalidBodyError: If mass is not positive and finite, or a custom
                property would shadow a body field
        """
        mass = float(mass)
        if not math.isfinite(mass) or mass <= 0:
            raise InvalidBodyError(f"Body mass must be positive and finite, got {mass}")

        self.index: Optional[int] = index
        self.x: float = float(x)
        self.y: float = float(y)
        self.vx: float = float(vx)
        self.vy: float = float(vy)
        self.ax: float = 0.0
        self.ay: float = 0.0
        self._mass: float = mass

        position = kwargs.pop("position", None)
        if position is not None:
            self.position = position
        velocity = kwargs.pop("velocity", None)
        if velocity is not None:
            self.velocity = velocity

        # Copy any additional custom properties (color, radius, ...)
        for key, value in kwargs.items():
            if hasattr(self, key):
                raise InvalidBodyError(f"Custom property {key!r} shadows a Body field")
            setattr(self, key, value)

    @property
    def mass(self) -> float:
        """Body mass (read-only)."""
        return self._mass

    @property
    def position(self) -> Vector2:
        return (self.x, self.y)

    @position.setter
    def position(self, value: Vector2) -> None:
        self.x, self.y = float(value[0]), float(value[1])

    @property
    def velocity(self) -> Vector2:
        return (self.vx, self.vy)

    @velocity.setter
    def velocity(self, value: Vector2) -> None:
        self.vx, self.vy = float(value[0]), float(value[1])

    @property
    def acceleration(self) -> Vector2:
        return (self.ax, self.ay)

    def copy(self) -> Body:
        """Return an independent copy with the same state and custom properties."""
        extras = {k: v for k, v in vars(self).items() if k not in _STATE_FIELDS}
        clone = Body(self.x, self.y, self.vx, self.vy, self._mass, self.index, **extras)
        clone.ax = self.ax
        clone.ay = self.ay
        return clone

    def __repr__(self) -> str:
        return (
            f"Body(index={self.index}, x={self.x:.2f}, y={self.y:.2f}, "
            f"mass={self._mass:.2f})"
        )


@dataclass(frozen=True)
class Square:
    """
    Axis-aligned square region.

    The y axis points up: the north half of a square is y >= cy.

    Attributes:
        cx, cy: Center of the region
        half_size: Half the side length
    """

    cx: float
    cy: float
    half_size: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.half_size) or self.half_size <= 0:
            raise InvalidParameterError(
                f"Square half_size must be positive and finite, got {self.half_size}"
            )

    @property
    def size(self) -> float:
        """Side length of the square."""
        return 2.0 * self.half_size

    def contains(self, x: float, y: float) -> bool:
        """Check if point (x, y) is within this region (edges included)."""
        return abs(x - self.cx) <= self.half_size and abs(y - self.cy) <= self.half_size

    def quadrant(self, x: float, y: float) -> int:
        """
        Get quadrant index for a point.

        Points on a dividing line go east (x >= cx) and north (y >= cy).

        Returns:
            0=NW, 1=NE, 2=SW, 3=SE
        """
        east = x >= self.cx
        north = y >= self.cy
        return (0 if north else 2) + (1 if east else 0)

    def child(self, quadrant: int) -> Square:
        """Return the sub-square for quadrant index (0=NW, 1=NE, 2=SW, 3=SE)."""
        hs = self.half_size / 2
        cx = self.cx + (hs if quadrant & 1 else -hs)
        cy = self.cy + (-hs if quadrant & 2 else hs)
        return Square(cx, cy, hs)

    @classmethod
    def enclosing(
        cls,
        bodies: Iterable[Body],
        padding_factor: float = 1.1,
        min_size: float = 1.0,
    ) -> Square:
        """
        Build a square enclosing every body with a finite position.

        The square is centered on the bounding box of the bodies and its
        side is the larger bounding box extent scaled by padding_factor,
        never smaller than min_size.

        Args:
            bodies: Bodies to enclose
            padding_factor: Multiplier applied to the largest extent
            min_size: Minimum side length

        Returns:
            Enclosing square (centered on the origin if there are no bodies)
        """
        min_x = min_y = math.inf
        max_x = max_y = -math.inf
        for body in bodies:
            if not (math.isfinite(body.x) and math.isfinite(body.y)):
                continue
            min_x = min(min_x, body.x)
            max_x = max(max_x, body.x)
            min_y = min(min_y, body.y)
            max_y = max(max_y, body.y)

        if not math.isfinite(min_x):
            return cls(0.0, 0.0, min_size / 2)

        extent = max(max_x - min_x, max_y - min_y, min_size / padding_factor)
        side = max(extent * padding_factor, min_size)
        return cls((min_x + max_x) / 2, (min_y + max_y) / 2, side / 2)


BodyLike = Union[Body, dict[str, Any], Any]
"""Input type for bodies: Body objects, dicts, or objects with body attributes."""


__all__ = [
    "Vector2",
    "EventType",
    "Event",
    "Body",
    "Square",
    "BodyLike",
]
