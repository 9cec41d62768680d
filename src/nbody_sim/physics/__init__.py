"""
Physics for the simulation core.

This module provides the per-step physics stages:
- force: Barnes-Hut and direct softened gravitational accelerations
- integrator: Semi-implicit (symplectic) Euler time stepping
"""

from .force import (
    acceleration_on,
    compute_accelerations,
    direct_accelerations,
    softened_acceleration,
)
from .integrator import integrate

__all__ = [
    "acceleration_on",
    "compute_accelerations",
    "direct_accelerations",
    "softened_acceleration",
    "integrate",
]
