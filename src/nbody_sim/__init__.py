"""
nbody-sim: Barnes-Hut N-body gravity in Python.

This package simulates 2D point masses under softened Newtonian gravity.

Per step:
- spatial: Build a quadtree and aggregate mass bottom-up
- physics: Evaluate Barnes-Hut accelerations and integrate with
  symplectic Euler
- simulation: Drive the pipeline with events, reset and live parameters
"""

__version__ = "0.1.0"

# Diagnostics for conserved quantities
from .diagnostics import (
    center_of_mass,
    kinetic_energy,
    linear_momentum,
    potential_energy,
    relative_energy_drift,
    simulation_summary,
    total_energy,
)

# Parameter set
from .parameters import (
    DEFAULT_DT,
    DEFAULT_EPSILON,
    DEFAULT_G,
    DEFAULT_MAX_DEPTH,
    DEFAULT_THETA,
    SimulationParameters,
)

# Force evaluation and integration
from .physics import (
    acceleration_on,
    compute_accelerations,
    direct_accelerations,
    integrate,
    softened_acceleration,
)

# Initial conditions
from .scenarios import (
    circular_binary,
    random_cluster,
    spiral_galaxy,
    triangle,
)

# Simulation driver
from .simulation import Simulation

# Spatial data structures
from .spatial import (
    DegenerateAggregateWarning,
    OutOfBoundsWarning,
    QuadTree,
    QuadTreeNode,
    build_tree,
)
from .types import (
    Body,
    BodyLike,
    Event,
    EventType,
    Square,
    Vector2,
)

# Validation utilities
from .validation import (
    DegenerateAggregateError,
    InvalidBodyError,
    InvalidParameterError,
    OutOfBoundsError,
    ValidationError,
)

__all__ = [
    # Version
    "__version__",
    # Shared types
    "Body",
    "Square",
    "Vector2",
    "EventType",
    "Event",
    "BodyLike",
    # Parameters
    "SimulationParameters",
    "DEFAULT_G",
    "DEFAULT_THETA",
    "DEFAULT_EPSILON",
    "DEFAULT_DT",
    "DEFAULT_MAX_DEPTH",
    # Spatial data structures
    "QuadTree",
    "QuadTreeNode",
    "build_tree",
    "OutOfBoundsWarning",
    "DegenerateAggregateWarning",
    # Physics
    "acceleration_on",
    "compute_accelerations",
    "direct_accelerations",
    "softened_acceleration",
    "integrate",
    # Driver
    "Simulation",
    # Diagnostics
    "kinetic_energy",
    "potential_energy",
    "total_energy",
    "center_of_mass",
    "linear_momentum",
    "relative_energy_drift",
    "simulation_summary",
    # Scenarios
    "spiral_galaxy",
    "circular_binary",
    "random_cluster",
    "triangle",
    # Validation
    "ValidationError",
    "InvalidParameterError",
    "InvalidBodyError",
    "OutOfBoundsError",
    "DegenerateAggregateError",
]
