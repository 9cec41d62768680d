"""
Initial conditions for simulations.

Generators return fresh lists of Body objects, ready to hand to
Simulation(bodies=...) or Simulation.reset(). Randomized generators accept
a seed for reproducible runs.
"""

from __future__ import annotations

import math
import random
from typing import Optional, Tuple

from .parameters import DEFAULT_EPSILON, DEFAULT_G
from .types import Body
from .validation import InvalidParameterError, validate_positive


def spiral_galaxy(
    n: int = 2000,
    random_seed: Optional[int] = None,
    g: float = DEFAULT_G,
    central_mass: float = 10000.0,
    inner_radius: float = 50.0,
    outer_radius: float = 400.0,
    mass_range: Tuple[float, float] = (1.0, 5.0),
) -> list[Body]:
    """
    Disk of light bodies on circular orbits around a heavy central body.

    Each body's angle is offset in proportion to its radius, which winds
    the disk into spiral arms. Orbital speed is sqrt(g * central_mass / r).

    Args:
        n: Number of disk bodies (the central body is added on top)
        random_seed: Random seed for reproducible layouts
        g: Gravitational constant used for orbital speeds
        central_mass: Mass of the central body
        inner_radius, outer_radius: Radial range of the disk
        mass_range: (low, high) range for disk body masses

    Returns:
        n disk bodies followed by the central body at the origin
    """
    if n < 0:
        raise InvalidParameterError(f"n must be >= 0, got {n}")
    if not 0 < inner_radius < outer_radius:
        raise InvalidParameterError(
            f"Need 0 < inner_radius < outer_radius, got {inner_radius}, {outer_radius}"
        )
    validate_positive(central_mass, "central_mass")

    rng = random.Random(random_seed)
    bodies: list[Body] = []

    for _ in range(n):
        angle = rng.uniform(0.0, 2.0 * math.pi)
        dist = rng.uniform(inner_radius, outer_radius)
        final_angle = angle + (dist / 100.0) * 2.0

        speed = math.sqrt(g * central_mass / dist)
        bodies.append(
            Body(
                x=math.cos(final_angle) * dist,
                y=math.sin(final_angle) * dist,
                vx=-math.sin(final_angle) * speed,
                vy=math.cos(final_angle) * speed,
                mass=rng.uniform(*mass_range),
            )
        )

    bodies.append(Body(0.0, 0.0, mass=central_mass))
    return bodies


def circular_binary(
    mass_a: float = 1.0,
    mass_b: float = 1.0,
    separation: float = 1.0,
    g: float = DEFAULT_G,
    epsilon: float = DEFAULT_EPSILON,
    center: Tuple[float, float] = (0.0, 0.0),
) -> list[Body]:
    """
    Two bodies on an exact circular orbit under softened gravity.

    The bodies start on the x axis with the center of mass at ``center``
    and zero total momentum, orbiting counter-clockwise.

    Args:
        mass_a, mass_b: Body masses
        separation: Distance between the bodies
        g: Gravitational constant
        epsilon: Softening length the orbit must be circular under
        center: Center of mass position

    Returns:
        [body_a, body_b]
    """
    mass_a = validate_positive(mass_a, "mass_a")
    mass_b = validate_positive(mass_b, "mass_b")
    separation = validate_positive(separation, "separation")
    total = mass_a + mass_b
    r2 = separation * separation + epsilon * epsilon
    relative_accel = g * total * separation / (r2 * math.sqrt(r2))
    relative_speed = math.sqrt(relative_accel * separation)

    cx, cy = center
    a = Body(
        x=cx - separation * mass_b / total,
        y=cy,
        vy=-relative_speed * mass_b / total,
        mass=mass_a,
    )
    b = Body(
        x=cx + separation * mass_a / total,
        y=cy,
        vy=relative_speed * mass_a / total,
        mass=mass_b,
    )
    return [a, b]


def random_cluster(
    n: int,
    half_extent: float = 100.0,
    random_seed: Optional[int] = None,
    mass_range: Tuple[float, float] = (1.0, 1.0),
    center: Tuple[float, float] = (0.0, 0.0),
) -> list[Body]:
    """
    Bodies at rest, uniformly scattered in a square.

    Args:
        n: Number of bodies
        half_extent: Half side of the square
        random_seed: Random seed for reproducible layouts
        mass_range: (low, high) range for masses
        center: Center of the square

    Returns:
        List of n bodies with zero velocity
    """
    if n < 0:
        raise InvalidParameterError(f"n must be >= 0, got {n}")
    validate_positive(half_extent, "half_extent")

    rng = random.Random(random_seed)
    cx, cy = center
    return [
        Body(
            x=cx + rng.uniform(-half_extent, half_extent),
            y=cy + rng.uniform(-half_extent, half_extent),
            mass=rng.uniform(*mass_range),
        )
        for _ in range(n)
    ]


def triangle() -> list[Body]:
    """Three unit masses at rest at (0, 0), (10, 0) and (0, 10)."""
    return [Body(0.0, 0.0), Body(10.0, 0.0), Body(0.0, 10.0)]


__all__ = [
    "spiral_galaxy",
    "circular_binary",
    "random_cluster",
    "triangle",
]
