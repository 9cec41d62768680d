"""
Spatial data structures for efficient force calculations.

Provides the arena quadtree used for Barnes-Hut O(n log n) gravity.
"""

from .quadtree import (
    DegenerateAggregateWarning,
    OutOfBoundsWarning,
    QuadTree,
    QuadTreeNode,
    build_tree,
)

__all__ = [
    "DegenerateAggregateWarning",
    "OutOfBoundsWarning",
    "QuadTree",
    "QuadTreeNode",
    "build_tree",
]
