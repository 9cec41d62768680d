"""
Quadtree implementation for Barnes-Hut gravity approximation.

The quadtree recursively subdivides 2D space into quadrants, enabling
O(n log n) approximate n-body force calculations. Nodes live in a flat
arena (a list) and refer to their children by index, so a tree is a plain
value that is built once per step and then only read.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence

from ..parameters import DEFAULT_MAX_DEPTH
from ..types import Body, Square
from ..validation import OutOfBoundsError, validate_max_depth


class OutOfBoundsWarning(UserWarning):
    """Bodies were left out of a tree because they lie outside its bounds."""

    pass


class DegenerateAggregateWarning(UserWarning):
    """Coincident bodies reached the depth cap and were merged into one leaf."""

    pass


@dataclass
class QuadTreeNode:
    """
    A node in the quadtree.

    A node is empty (no bodies, no children), a leaf (bodies, no children)
    or internal (no bodies, four children). A leaf holds more than one body
    only when it sits at the depth cap.

    Attributes:
        bounds: Square region covered by this node
        depth: Distance from the root (root = 0)
        center_of_mass_x/y: Center of mass of bodies in this subtree
        total_mass: Total mass of bodies in this subtree
        bodies: Indices of bodies stored directly in this leaf
        children: Arena indices of the four child quadrants [NW, NE, SW, SE]
    """

    bounds: Square
    depth: int = 0

    # Aggregated properties
    center_of_mass_x: float = 0.0
    center_of_mass_y: float = 0.0
    total_mass: float = 0.0

    # Content
    bodies: List[int] = field(default_factory=list)
    children: Optional[List[int]] = None

    def is_empty(self) -> bool:
        """True if this node contains no bodies."""
        return not self.bodies and self.children is None

    def is_leaf(self) -> bool:
        """True if this node stores bodies directly."""
        return bool(self.bodies) and self.children is None

    def is_internal(self) -> bool:
        """True if this node has been split into four children."""
        return self.children is not None

    def is_aggregate(self) -> bool:
        """True if this leaf merged several bodies at the depth cap."""
        return len(self.bodies) > 1


class QuadTree:
    """
    Barnes-Hut quadtree over a snapshot of body positions and masses.

    For distant clusters the force evaluator treats a whole subtree as a
    single body at its center of mass, reducing the per-step cost from
    O(n^2) to O(n log n).

    Usage:
        tree = QuadTree(Square(0.0, 0.0, 1000.0))
        for i, body in enumerate(bodies):
            tree.insert(i, body.x, body.y, body.mass)

        # or, equivalently
        tree = build_tree(bodies, Square(0.0, 0.0, 1000.0))

    Mass and center of mass are kept current during insertion, so the tree
    is ready for force queries as soon as the last body is inserted.
    """

    def __init__(self, bounds: Square, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        """
        Initialize an empty quadtree.

        Args:
            bounds: Root square
            max_depth: Depth at which leaves stop splitting

        Raises:
            DegenerateAggregateError: If max_depth < 1
        """
        self.max_depth = validate_max_depth(max_depth)
        self.nodes: List[QuadTreeNode] = [QuadTreeNode(bounds)]
        self.body_count = 0
        self.aggregate_count = 0
        self.out_of_bounds: Optional[OutOfBoundsError] = None

        # Body snapshot, indexed by body index
        self.body_x: List[float] = []
        self.body_y: List[float] = []
        self.body_mass: List[float] = []

    @property
    def root(self) -> QuadTreeNode:
        return self.nodes[0]

    @property
    def bounds(self) -> Square:
        return self.nodes[0].bounds

    def __len__(self) -> int:
        return len(self.nodes)

    def insert(self, index: int, x: float, y: float, mass: float) -> None:
        """
        Insert a body into the quadtree.

        Args:
            index: Identity of the body (its index in the body store)
            x, y: Body position, must lie within the root bounds
            mass: Body mass
        """
        # Grow the snapshot so body_x[index] is addressable
        missing = index + 1 - len(self.body_x)
        if missing > 0:
            self.body_x.extend([math.nan] * missing)
            self.body_y.extend([math.nan] * missing)
            self.body_mass.extend([0.0] * missing)
        self.body_x[index] = x
        self.body_y[index] = y
        self.body_mass[index] = mass

        self._insert_into(0, index)
        self.body_count += 1

    def _insert_into(self, node_index: int, body: int) -> None:
        """Recursively insert body into subtree rooted at node_index."""
        node = self.nodes[node_index]
        x = self.body_x[body]
        y = self.body_y[body]
        mass = self.body_mass[body]

        if node.is_empty():
            # Empty node becomes a leaf with this body
            node.bodies.append(body)
            node.total_mass = mass
            node.center_of_mass_x = x
            node.center_of_mass_y = y
            return

        if node.is_leaf():
            if node.depth >= self.max_depth:
                # Depth cap: keep coincident bodies together as one mass
                if len(node.bodies) == 1:
                    self.aggregate_count += 1
                node.bodies.append(body)
                total = node.total_mass + mass
                node.center_of_mass_x = (node.center_of_mass_x * node.total_mass + x * mass) / total
                node.center_of_mass_y = (node.center_of_mass_y * node.total_mass + y * mass) / total
                node.total_mass = total
                return

            # Leaf with existing body - must subdivide
            existing = node.bodies[0]
            node.bodies = []
            node.children = self._subdivide(node)
            self._insert_into_child(node, existing)
            self._insert_into_child(node, body)
            self._aggregate(node)
            return

        self._insert_into_child(node, body)
        self._aggregate(node)

    def _subdivide(self, node: QuadTreeNode) -> List[int]:
        """Append four empty children of node to the arena."""
        first = len(self.nodes)
        for quadrant in range(4):
            self.nodes.append(QuadTreeNode(node.bounds.child(quadrant), depth=node.depth + 1))
        return [first, first + 1, first + 2, first + 3]

    def _insert_into_child(self, node: QuadTreeNode, body: int) -> None:
        """Insert body into the child of node whose quadrant contains it."""
        if node.children is not None:
            quadrant = node.bounds.quadrant(self.body_x[body], self.body_y[body])
            self._insert_into(node.children[quadrant], body)

    def _aggregate(self, node: QuadTreeNode) -> None:
        """Recompute mass and center of mass of node from its children."""
        if node.children is None:
            return

        total_mass = 0.0
        weighted_x = 0.0
        weighted_y = 0.0

        for child_index in node.children:
            child = self.nodes[child_index]
            if child.total_mass > 0:
                total_mass += child.total_mass
                weighted_x += child.center_of_mass_x * child.total_mass
                weighted_y += child.center_of_mass_y * child.total_mass

        node.total_mass = total_mass
        if total_mass > 0:
            node.center_of_mass_x = weighted_x / total_mass
            node.center_of_mass_y = weighted_y / total_mass

    def depth(self) -> int:
        """Deepest node depth in the arena."""
        return max(node.depth for node in self.nodes)

    def internal_bounds(self, min_size: float = 0.0) -> Iterator[Square]:
        """
        Iterate over the bounds of internal nodes, root first.

        Args:
            min_size: Skip nodes whose side length is smaller than this

        Yields:
            Square of each internal node (for drawing the tree grid)
        """
        stack = [0]
        while stack:
            node = self.nodes[stack.pop()]
            if node.children is None:
                continue
            if node.bounds.size >= min_size:
                yield node.bounds
            # Reversed so NW is visited first
            stack.extend(reversed(node.children))

    @classmethod
    def from_bodies(
        cls,
        bodies: Sequence[Body],
        bounds: Optional[Square] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> QuadTree:
        """
        Build quadtree from a list of Body objects.

        Args:
            bodies: Bodies to insert, identified by their position in the list
            bounds: Root square. Defaults to a square fitted around the bodies.
            max_depth: Depth cap

        Returns:
            QuadTree with every in-bounds body inserted
        """
        if bounds is None:
            bounds = Square.enclosing(bodies)
        return build_tree(bodies, bounds, max_depth)


def build_tree(
    bodies: Sequence[Body],
    bounds: Square,
    max_depth: int = DEFAULT_MAX_DEPTH,
    strict: bool = False,
) -> QuadTree:
    """
    Build a fresh Barnes-Hut tree for one simulation step.

    Bodies are inserted in input order and identified by their position in
    ``bodies``. A body whose position lies outside ``bounds`` (or is not
    finite) is left out of the tree; all such bodies are collected into one
    OutOfBoundsError for the build.

    Args:
        bodies: Bodies to insert
        bounds: Root square, large enough to contain the bodies
        max_depth: Depth at which coincident bodies are aggregated
        strict: If True, raise the OutOfBoundsError instead of reporting it

    Returns:
        The built tree. ``tree.out_of_bounds`` holds the exclusion report,
        or None if every body was inserted.

    Raises:
        OutOfBoundsError: If strict=True and any body is out of bounds
        DegenerateAggregateError: If max_depth < 1
    """
    tree = QuadTree(bounds, max_depth)
    excluded: List[int] = []

    for i, body in enumerate(bodies):
        if not bounds.contains(body.x, body.y):
            excluded.append(i)
            continue
        tree.insert(i, body.x, body.y, body.mass)

    if excluded:
        error = OutOfBoundsError(excluded, bounds)
        if strict:
            raise error
        tree.out_of_bounds = error
        warnings.warn(str(error), OutOfBoundsWarning, stacklevel=2)

    if tree.aggregate_count:
        warnings.warn(
            f"{tree.aggregate_count} leaf(s) reached max_depth={tree.max_depth} "
            "with coincident bodies; their masses were merged.",
            DegenerateAggregateWarning,
            stacklevel=2,
        )

    return tree


__all__ = [
    "DegenerateAggregateWarning",
    "OutOfBoundsWarning",
    "QuadTree",
    "QuadTreeNode",
    "build_tree",
]
