"""
Softened gravitational accelerations.

Provides the Barnes-Hut evaluator that walks a QuadTree per body, and an
exact O(n^2) reference used for validation and small systems.

Every pairwise contribution, whether from a single body or from a whole
subtree, uses Plummer softening:

    a = G * m * r_vec / (|r_vec|^2 + epsilon^2)^(3/2)

so accelerations stay bounded as separations approach zero.
"""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence, Tuple

import numpy as np

from ..parameters import SimulationParameters
from ..spatial.quadtree import QuadTree
from ..types import Body, Vector2


def softened_acceleration(
    dx: float,
    dy: float,
    mass: float,
    g: float,
    epsilon_sq: float,
) -> Vector2:
    """
    Acceleration toward a point mass at offset (dx, dy) from the target.

    Args:
        dx, dy: Source position minus target position
        mass: Source mass
        g: Gravitational constant
        epsilon_sq: Squared softening length

    Returns:
        (ax, ay) pointing from the target toward the source
    """
    r2 = dx * dx + dy * dy + epsilon_sq
    scale = g * mass / (r2 * math.sqrt(r2))
    return dx * scale, dy * scale


def acceleration_on(
    tree: QuadTree,
    index: int,
    x: float,
    y: float,
    params: SimulationParameters,
) -> Vector2:
    """
    Net acceleration at (x, y) on body ``index`` using Barnes-Hut.

    Nodes are opened in quadrant order (NW, NE, SW, SE) so the floating-point
    summation order, and therefore the result, is fixed for a given tree.

    Args:
        tree: Tree built for the current step
        index: Identity of the target body; use -1 for a probe point
            that is not a body in the tree
        x, y: Target position
        params: Step parameters (g, theta, epsilon)

    Returns:
        (ax, ay) acceleration
    """
    return _accumulate(
        tree,
        0,
        index,
        x,
        y,
        params.g,
        params.theta,
        params.epsilon * params.epsilon,
    )


def _accumulate(
    tree: QuadTree,
    node_index: int,
    target: int,
    x: float,
    y: float,
    g: float,
    theta: float,
    epsilon_sq: float,
) -> Tuple[float, float]:
    """Recursively sum contributions from the subtree at node_index."""
    node = tree.nodes[node_index]
    if node.is_empty():
        return 0.0, 0.0

    if node.children is None:
        if target in node.bodies:
            if len(node.bodies) == 1:
                # No self-force
                return 0.0, 0.0
            # Aggregate leaf holding the target: the other members, one by one
            ax, ay = 0.0, 0.0
            for other in node.bodies:
                if other == target:
                    continue
                cax, cay = softened_acceleration(
                    tree.body_x[other] - x,
                    tree.body_y[other] - y,
                    tree.body_mass[other],
                    g,
                    epsilon_sq,
                )
                ax += cax
                ay += cay
            return ax, ay

        return softened_acceleration(
            node.center_of_mass_x - x,
            node.center_of_mass_y - y,
            node.total_mass,
            g,
            epsilon_sq,
        )

    dx = node.center_of_mass_x - x
    dy = node.center_of_mass_y - y
    dist = math.sqrt(dx * dx + dy * dy)

    # Barnes-Hut criterion: s/d < theta; d == 0 always opens the node
    if dist > 0 and node.bounds.size / dist < theta:
        return softened_acceleration(dx, dy, node.total_mass, g, epsilon_sq)

    ax, ay = 0.0, 0.0
    for child in node.children:
        cax, cay = _accumulate(tree, child, target, x, y, g, theta, epsilon_sq)
        ax += cax
        ay += cay
    return ax, ay


def compute_accelerations(
    tree: QuadTree,
    bodies: Sequence[Body],
    params: SimulationParameters,
    workers: Optional[int] = None,
) -> np.ndarray:
    """
    Barnes-Hut acceleration for every body.

    Bodies reported in ``tree.out_of_bounds`` are not in the tree and get a
    zero acceleration for this step.

    Args:
        tree: Tree built from ``bodies`` for the current step
        bodies: Bodies in the same order they were inserted
        params: Step parameters
        workers: If greater than 1, evaluate bodies on a thread pool of this
            size. The tree is read-only, so results match the serial loop.

    Returns:
        Array of shape (n, 2), one acceleration per body in input order
    """
    n = len(bodies)
    result = np.zeros((n, 2), dtype=np.float64)
    if n == 0:
        return result

    excluded = set(tree.out_of_bounds.indices) if tree.out_of_bounds is not None else set()
    g = params.g
    theta = params.theta
    epsilon_sq = params.epsilon * params.epsilon

    def evaluate(i: int) -> Vector2:
        if i in excluded:
            return 0.0, 0.0
        body = bodies[i]
        return _accumulate(tree, 0, i, body.x, body.y, g, theta, epsilon_sq)

    if workers is not None and workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            accelerations = list(executor.map(evaluate, range(n)))
    else:
        accelerations = [evaluate(i) for i in range(n)]

    for i, (ax, ay) in enumerate(accelerations):
        result[i, 0] = ax
        result[i, 1] = ay
    return result


def direct_accelerations(
    bodies: Sequence[Body],
    params: SimulationParameters,
) -> np.ndarray:
    """
    Exact softened accelerations by direct O(n^2) summation.

    Args:
        bodies: Bodies to evaluate
        params: Parameters (g, epsilon; theta is ignored)

    Returns:
        Array of shape (n, 2), one acceleration per body in input order
    """
    n = len(bodies)
    if n == 0:
        return np.zeros((0, 2), dtype=np.float64)

    pos = np.array([[b.x, b.y] for b in bodies], dtype=np.float64)
    mass = np.array([b.mass for b in bodies], dtype=np.float64)

    # diff[i, j] = pos[j] - pos[i]
    diff = pos[np.newaxis, :, :] - pos[:, np.newaxis, :]
    r2 = np.einsum("ijk,ijk->ij", diff, diff) + params.epsilon * params.epsilon
    inv_r3 = r2 ** -1.5
    np.fill_diagonal(inv_r3, 0.0)

    weights = params.g * mass[np.newaxis, :] * inv_r3
    return np.einsum("ij,ijk->ik", weights, diff)


__all__ = [
    "acceleration_on",
    "compute_accelerations",
    "direct_accelerations",
    "softened_acceleration",
]
