"""
Simulation parameter set.

SimulationParameters is an immutable value passed into every step. The core
never mutates it; callers replace it between steps to retune the simulation.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from .types import Body, Square
from .validation import (
    validate_finite,
    validate_max_depth,
    validate_positive,
    validate_theta,
)

DEFAULT_G = 100.0
DEFAULT_THETA = 0.5
DEFAULT_EPSILON = 5.0
DEFAULT_DT = 1.0 / 60.0
DEFAULT_MAX_DEPTH = 32


@dataclass(frozen=True)
class SimulationParameters:
    """
    Read-only configuration for one simulation step.

    Attributes:
        g: Gravitational constant
        theta: Barnes-Hut threshold (0 = exact, higher = more approximation)
        epsilon: Softening length added to every pairwise distance
        dt: Base timestep
        world_half_extent: Half side of the fixed root square, or None to
            fit the root square around the bodies every step
        world_center: Center of the fixed root square
        max_depth: Depth at which leaves stop splitting and aggregate
        time_scale: Multiplier applied to dt (simulation speed)
        cull_distance: Bodies farther than this from world_center are removed
            from the store after each step (None disables culling)
    """

    g: float = DEFAULT_G
    theta: float = DEFAULT_THETA
    epsilon: float = DEFAULT_EPSILON
    dt: float = DEFAULT_DT
    world_half_extent: Optional[float] = None
    world_center: Tuple[float, float] = (0.0, 0.0)
    max_depth: int = DEFAULT_MAX_DEPTH
    time_scale: float = 1.0
    cull_distance: Optional[float] = None

    def __post_init__(self) -> None:
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "g", validate_finite(self.g, "g"))
        object.__setattr__(self, "theta", validate_theta(self.theta))
        object.__setattr__(self, "epsilon", validate_positive(self.epsilon, "epsilon"))
        object.__setattr__(self, "dt", validate_positive(self.dt, "dt"))
        object.__setattr__(self, "time_scale", validate_positive(self.time_scale, "time_scale"))
        object.__setattr__(self, "max_depth", validate_max_depth(self.max_depth))
        if self.world_half_extent is not None:
            object.__setattr__(
                self,
                "world_half_extent",
                validate_positive(self.world_half_extent, "world_half_extent"),
            )
        if self.cull_distance is not None:
            object.__setattr__(
                self, "cull_distance", validate_positive(self.cull_distance, "cull_distance")
            )
        cx, cy = self.world_center
        object.__setattr__(
            self,
            "world_center",
            (validate_finite(cx, "world_center x"), validate_finite(cy, "world_center y")),
        )

    @property
    def effective_dt(self) -> float:
        """Timestep actually applied by the integrator (dt * time_scale)."""
        return self.dt * self.time_scale

    def root_bounds(self, bodies: Iterable[Body]) -> Square:
        """
        Root square for a tree over bodies.

        Returns the configured world square when world_half_extent is set,
        otherwise a square fitted around the bodies.
        """
        if self.world_half_extent is not None:
            return Square(self.world_center[0], self.world_center[1], self.world_half_extent)
        return Square.enclosing(bodies)

    def replace(self, **changes: Any) -> SimulationParameters:
        """Return a validated copy with the given fields changed."""
        return dataclasses.replace(self, **changes)


__all__ = [
    "DEFAULT_G",
    "DEFAULT_THETA",
    "DEFAULT_EPSILON",
    "DEFAULT_DT",
    "DEFAULT_MAX_DEPTH",
    "SimulationParameters",
]
