"""
Conserved-quantity diagnostics.

Provides quantitative measures of simulation health:
- Kinetic, potential and total energy
- Center of mass and linear momentum
- Relative energy drift between two states

Potential energy uses the same softening as the force kernel, so for a
symplectic integrator the total stays bounded over long runs.
"""

from __future__ import annotations

import math
from typing import Any, Optional, Sequence

import numpy as np

from .parameters import SimulationParameters
from .types import Body, Vector2


def kinetic_energy(bodies: Sequence[Body]) -> float:
    """
    Total kinetic energy, sum of m * |v|^2 / 2.

    Args:
        bodies: Bodies to measure

    Returns:
        Kinetic energy (0 for no bodies)
    """
    return sum(0.5 * b.mass * (b.vx * b.vx + b.vy * b.vy) for b in bodies)


def potential_energy(bodies: Sequence[Body], params: SimulationParameters) -> float:
    """
    Softened gravitational potential energy.

    U = -sum_{i<j} G * m_i * m_j / sqrt(r_ij^2 + epsilon^2)

    Args:
        bodies: Bodies to measure
        params: Parameters providing g and epsilon

    Returns:
        Potential energy (0 for fewer than two bodies)

    Time Complexity: O(n^2)
    """
    n = len(bodies)
    if n < 2:
        return 0.0

    pos = np.array([[b.x, b.y] for b in bodies], dtype=np.float64)
    mass = np.array([b.mass for b in bodies], dtype=np.float64)

    diff = pos[np.newaxis, :, :] - pos[:, np.newaxis, :]
    r2 = np.einsum("ijk,ijk->ij", diff, diff) + params.epsilon * params.epsilon
    pair = np.outer(mass, mass) / np.sqrt(r2)

    # Upper triangle counts each pair once
    iu = np.triu_indices(n, k=1)
    return float(-params.g * pair[iu].sum())


def total_energy(bodies: Sequence[Body], params: SimulationParameters) -> float:
    """Kinetic plus softened potential energy."""
    return kinetic_energy(bodies) + potential_energy(bodies, params)


def center_of_mass(bodies: Sequence[Body]) -> Optional[Vector2]:
    """
    Mass-weighted mean position.

    Returns:
        (x, y), or None if there are no bodies
    """
    total = 0.0
    wx = 0.0
    wy = 0.0
    for b in bodies:
        total += b.mass
        wx += b.x * b.mass
        wy += b.y * b.mass
    if total <= 0:
        return None
    return wx / total, wy / total


def linear_momentum(bodies: Sequence[Body]) -> Vector2:
    """Total momentum (sum of m * v)."""
    px = sum(b.mass * b.vx for b in bodies)
    py = sum(b.mass * b.vy for b in bodies)
    return px, py


def relative_energy_drift(initial: float, current: float) -> float:
    """
    Relative change |E - E0| / |E0|.

    Falls back to the absolute change when the initial energy is zero.
    """
    if initial == 0:
        return abs(current)
    return abs(current - initial) / abs(initial)


def simulation_summary(bodies: Sequence[Body], params: SimulationParameters) -> dict[str, Any]:
    """
    Compute all diagnostics at once.

    Args:
        bodies: Bodies to measure
        params: Parameters providing g and epsilon

    Returns:
        Dict with body_count, total_mass, kinetic_energy, potential_energy,
        total_energy, center_of_mass, momentum and all_finite
    """
    ke = kinetic_energy(bodies)
    pe = potential_energy(bodies, params)
    return {
        "body_count": len(bodies),
        "total_mass": sum(b.mass for b in bodies),
        "kinetic_energy": ke,
        "potential_energy": pe,
        "total_energy": ke + pe,
        "center_of_mass": center_of_mass(bodies),
        "momentum": linear_momentum(bodies),
        "all_finite": all(
            math.isfinite(v) for b in bodies for v in (b.x, b.y, b.vx, b.vy)
        ),
    }


__all__ = [
    "kinetic_energy",
    "potential_energy",
    "total_energy",
    "center_of_mass",
    "linear_momentum",
    "relative_energy_drift",
    "simulation_summary",
]
