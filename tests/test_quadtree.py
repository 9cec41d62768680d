"""Tests for QuadTree construction and mass aggregation."""

import math
import random

import pytest

from nbody_sim.spatial.quadtree import (
    DegenerateAggregateWarning,
    OutOfBoundsWarning,
    QuadTree,
    QuadTreeNode,
    build_tree,
)
from nbody_sim.types import Body, Square
from nbody_sim.validation import DegenerateAggregateError, OutOfBoundsError


def collect_bodies(tree, node_index=0):
    """Return all body indices stored in the subtree at node_index."""
    node = tree.nodes[node_index]
    if node.children is None:
        return list(node.bodies)
    result = []
    for child in node.children:
        result.extend(collect_bodies(tree, child))
    return result


def make_random_bodies(n, seed=7, extent=100.0):
    """Create n bodies with random positions and masses."""
    rng = random.Random(seed)
    return [
        Body(rng.uniform(-extent, extent), rng.uniform(-extent, extent), mass=rng.uniform(0.5, 5.0))
        for _ in range(n)
    ]


class TestSquare:
    """Tests for the Square bounds type."""

    def test_square_creation(self):
        """Test basic square creation."""
        square = Square(50.0, 50.0, 50.0)
        assert square.cx == 50.0
        assert square.cy == 50.0
        assert square.half_size == 50.0
        assert square.size == 100.0

    def test_contains(self):
        """Test point containment check."""
        square = Square(50.0, 50.0, 50.0)

        # Points inside
        assert square.contains(25.0, 25.0)
        assert square.contains(75.0, 75.0)
        assert square.contains(50.0, 50.0)

        # Points on boundary
        assert square.contains(0.0, 0.0)
        assert square.contains(100.0, 100.0)

        # Points outside
        assert not square.contains(-1.0, 50.0)
        assert not square.contains(101.0, 50.0)
        assert not square.contains(50.0, -1.0)
        assert not square.contains(50.0, 101.0)
        assert not square.contains(math.nan, 50.0)

    def test_quadrant(self):
        """Test quadrant determination (y axis up)."""
        square = Square(50.0, 50.0, 50.0)

        # NW quadrant (0)
        assert square.quadrant(25.0, 75.0) == 0

        # NE quadrant (1)
        assert square.quadrant(75.0, 75.0) == 1

        # SW quadrant (2)
        assert square.quadrant(25.0, 25.0) == 2

        # SE quadrant (3)
        assert square.quadrant(75.0, 25.0) == 3

    def test_quadrant_tie_break(self):
        """Points on dividing lines go east and north."""
        square = Square(0.0, 0.0, 10.0)
        assert square.quadrant(0.0, 0.0) == 1
        assert square.quadrant(0.0, -5.0) == 3
        assert square.quadrant(-5.0, 0.0) == 0

    def test_child_squares(self):
        """Children bisect the parent on both axes."""
        square = Square(0.0, 0.0, 2.0)
        expected = [(-1.0, 1.0), (1.0, 1.0), (-1.0, -1.0), (1.0, -1.0)]

        for quadrant, (cx, cy) in enumerate(expected):
            child = square.child(quadrant)
            assert child.cx == cx
            assert child.cy == cy
            assert child.half_size == 1.0
            # A point in the child maps back to the same quadrant
            assert square.quadrant(child.cx, child.cy) == quadrant

    def test_enclosing(self):
        """Enclosing square is centered on the bodies and padded."""
        bodies = [Body(0.0, 0.0), Body(10.0, 0.0), Body(0.0, 4.0)]
        square = Square.enclosing(bodies)

        assert square.cx == 5.0
        assert square.cy == 2.0
        assert square.size == pytest.approx(11.0)
        for body in bodies:
            assert square.contains(body.x, body.y)

    def test_enclosing_single_body(self):
        """A single body gets the minimum size square around it."""
        square = Square.enclosing([Body(3.0, -2.0)])
        assert square.cx == 3.0
        assert square.cy == -2.0
        assert square.size == pytest.approx(1.0)

    def test_enclosing_empty(self):
        """No bodies gives a unit square at the origin."""
        square = Square.enclosing([])
        assert (square.cx, square.cy) == (0.0, 0.0)
        assert square.size == pytest.approx(1.0)

    def test_enclosing_skips_non_finite(self):
        """Non-finite positions do not stretch the square."""
        square = Square.enclosing([Body(0.0, 0.0), Body(2.0, 0.0), Body(math.inf, 0.0)])
        assert square.cx == 1.0
        assert math.isfinite(square.half_size)


class TestQuadTreeNode:
    """Tests for QuadTreeNode states."""

    def test_node_creation(self):
        """A fresh node is empty."""
        node = QuadTreeNode(Square(0.0, 0.0, 10.0))
        assert node.is_empty()
        assert not node.is_leaf()
        assert not node.is_internal()
        assert node.total_mass == 0.0
        assert node.depth == 0

    def test_leaf_state(self):
        """A node with one body and no children is a leaf."""
        node = QuadTreeNode(Square(0.0, 0.0, 10.0), bodies=[3])
        assert node.is_leaf()
        assert not node.is_empty()
        assert not node.is_aggregate()

    def test_internal_state(self):
        """A node with children is internal."""
        node = QuadTreeNode(Square(0.0, 0.0, 10.0), children=[1, 2, 3, 4])
        assert node.is_internal()
        assert not node.is_leaf()
        assert not node.is_empty()


class TestQuadTreeInsertion:
    """Tests for QuadTree insertion operations."""

    def test_empty_tree(self):
        """Test empty tree state."""
        tree = QuadTree(Square(50.0, 50.0, 50.0))
        assert tree.body_count == 0
        assert tree.root.is_empty()
        assert len(tree) == 1

    def test_single_body_insertion(self):
        """Test inserting a single body."""
        tree = QuadTree(Square(50.0, 50.0, 50.0))
        tree.insert(0, 25.0, 25.0, 2.0)

        assert tree.body_count == 1
        assert tree.root.bodies == [0]
        assert tree.root.is_leaf()
        assert tree.root.total_mass == 2.0
        assert tree.root.center_of_mass_x == 25.0
        assert tree.root.center_of_mass_y == 25.0

    def test_two_body_insertion(self):
        """Inserting a second body splits the leaf into four children."""
        tree = QuadTree(Square(50.0, 50.0, 50.0))
        tree.insert(0, 25.0, 25.0, 1.0)
        tree.insert(1, 75.0, 75.0, 1.0)

        assert tree.body_count == 2
        assert tree.root.is_internal()
        assert tree.root.bodies == []
        assert len(tree.root.children) == 4
        assert len(tree) == 5

        # Body 0 is SW, body 1 is NE
        sw = tree.nodes[tree.root.children[2]]
        ne = tree.nodes[tree.root.children[1]]
        assert sw.bodies == [0]
        assert ne.bodies == [1]
        assert sw.depth == 1
        assert tree.nodes[tree.root.children[0]].is_empty()
        assert tree.nodes[tree.root.children[3]].is_empty()

    def test_close_bodies_split_repeatedly(self):
        """Bodies in the same quadrant force deeper splits."""
        tree = QuadTree(Square(0.0, 0.0, 8.0))
        tree.insert(0, 1.0, 1.0, 1.0)
        tree.insert(1, 1.5, 1.5, 1.0)

        assert tree.depth() >= 2
        assert sorted(collect_bodies(tree)) == [0, 1]

    def test_every_body_inserted_once(self):
        """Each body appears in exactly one leaf."""
        bodies = make_random_bodies(300)
        tree = build_tree(bodies, Square(0.0, 0.0, 100.0))

        assert tree.body_count == 300
        assert sorted(collect_bodies(tree)) == list(range(300))

    def test_node_state_invariant(self):
        """Every node is exactly one of empty, leaf or internal."""
        bodies = make_random_bodies(200, seed=3)
        tree = build_tree(bodies, Square(0.0, 0.0, 100.0))

        for node in tree.nodes:
            states = [node.is_empty(), node.is_leaf(), node.is_internal()]
            assert states.count(True) == 1
            if node.is_internal():
                assert node.bodies == []
                assert len(node.children) == 4

    def test_children_follow_parent_depth(self):
        """Child depth is parent depth + 1 and child bounds halve."""
        tree = build_tree(make_random_bodies(50), Square(0.0, 0.0, 100.0))
        for node in tree.nodes:
            if node.children is None:
                continue
            for child_index in node.children:
                child = tree.nodes[child_index]
                assert child.depth == node.depth + 1
                assert child.bounds.half_size == node.bounds.half_size / 2

    def test_from_bodies_default_bounds(self):
        """from_bodies fits the root square around the bodies."""
        bodies = [Body(10.0, 20.0), Body(30.0, 40.0), Body(50.0, 60.0)]
        tree = QuadTree.from_bodies(bodies)

        assert tree.body_count == 3
        assert tree.root.total_mass == 3.0
        for body in bodies:
            assert tree.bounds.contains(body.x, body.y)


class TestQuadTreeMassDistribution:
    """Tests for center of mass computation."""

    def test_single_body_mass(self):
        """Test mass distribution for single body."""
        tree = build_tree([Body(30.0, 40.0, mass=2.0)], Square(50.0, 50.0, 50.0))

        assert tree.root.total_mass == 2.0
        assert tree.root.center_of_mass_x == 30.0
        assert tree.root.center_of_mass_y == 40.0

    def test_two_equal_bodies_mass(self):
        """Test center of mass with two equal-mass bodies."""
        bodies = [Body(20.0, 50.0, mass=1.0), Body(80.0, 50.0, mass=1.0)]
        tree = build_tree(bodies, Square(50.0, 50.0, 50.0))

        assert tree.root.total_mass == 2.0
        # Center of mass should be at midpoint
        assert abs(tree.root.center_of_mass_x - 50.0) < 1e-10
        assert abs(tree.root.center_of_mass_y - 50.0) < 1e-10

    def test_weighted_center_of_mass(self):
        """Masses 1 and 3 at (0,0) and (4,0) give center of mass (3,0)."""
        bodies = [Body(0.0, 0.0, mass=1.0), Body(4.0, 0.0, mass=3.0)]
        tree = build_tree(bodies, Square(2.0, 0.0, 4.0))

        assert tree.root.total_mass == 4.0
        assert tree.root.center_of_mass_x == pytest.approx(3.0)
        assert tree.root.center_of_mass_y == pytest.approx(0.0)

    def test_mass_conservation(self):
        """Root mass equals the sum of all inserted masses."""
        bodies = make_random_bodies(500, seed=11)
        tree = build_tree(bodies, Square(0.0, 0.0, 100.0))

        assert tree.root.total_mass == pytest.approx(sum(b.mass for b in bodies))

    def test_aggregate_leaves_leaf_mass(self):
        """Re-aggregating a leaf keeps its own mass and center."""
        tree = build_tree([Body(1.0, 2.0, mass=5.0)], Square(0.0, 0.0, 4.0))
        tree._aggregate(tree.root)

        assert tree.root.total_mass == 5.0
        assert (tree.root.center_of_mass_x, tree.root.center_of_mass_y) == (1.0, 2.0)

    def test_internal_center_of_mass_matches_subtree(self):
        """Every internal node aggregates exactly the bodies below it."""
        bodies = make_random_bodies(120, seed=5)
        tree = build_tree(bodies, Square(0.0, 0.0, 100.0))

        for i, node in enumerate(tree.nodes):
            if not node.is_internal():
                continue
            members = collect_bodies(tree, i)
            mass = sum(bodies[j].mass for j in members)
            com_x = sum(bodies[j].x * bodies[j].mass for j in members) / mass
            com_y = sum(bodies[j].y * bodies[j].mass for j in members) / mass

            assert node.total_mass == pytest.approx(mass)
            assert node.center_of_mass_x == pytest.approx(com_x)
            assert node.center_of_mass_y == pytest.approx(com_y)


class TestDepthCap:
    """Tests for the coincident-body termination guard."""

    def test_coincident_bodies_aggregate(self):
        """Coincident bodies stop splitting at max_depth and merge."""
        bodies = [Body(1.0, 1.0, mass=2.0), Body(1.0, 1.0, mass=3.0)]

        with pytest.warns(DegenerateAggregateWarning):
            tree = build_tree(bodies, Square(0.0, 0.0, 10.0), max_depth=4)

        assert tree.depth() == 4
        assert tree.aggregate_count == 1
        leaves = [node for node in tree.nodes if node.is_aggregate()]
        assert len(leaves) == 1
        leaf = leaves[0]
        assert leaf.bodies == [0, 1]
        assert leaf.depth == 4
        assert leaf.total_mass == pytest.approx(5.0)
        assert leaf.center_of_mass_x == pytest.approx(1.0)
        assert leaf.center_of_mass_y == pytest.approx(1.0)
        assert tree.root.total_mass == pytest.approx(5.0)

    def test_many_coincident_bodies_terminate(self):
        """Many bodies at one point build a bounded tree."""
        bodies = [Body(-3.0, 2.0) for _ in range(50)]

        with pytest.warns(DegenerateAggregateWarning):
            tree = build_tree(bodies, Square(0.0, 0.0, 10.0), max_depth=8)

        assert tree.depth() == 8
        assert len(tree) == 1 + 4 * 8
        assert tree.root.total_mass == pytest.approx(50.0)

    def test_near_coincident_aggregate_center_of_mass(self):
        """Aggregated bodies keep a mass-weighted center of mass."""
        bodies = [Body(1.0, 1.0, mass=1.0), Body(1.0 + 1e-9, 1.0, mass=1.0)]

        with pytest.warns(DegenerateAggregateWarning):
            tree = build_tree(bodies, Square(0.0, 0.0, 10.0), max_depth=3)

        leaf = next(node for node in tree.nodes if node.is_aggregate())
        assert leaf.center_of_mass_x == pytest.approx(1.0 + 5e-10)

    def test_zero_depth_cap_raises(self):
        """A depth cap of zero is a configuration error."""
        with pytest.raises(DegenerateAggregateError):
            build_tree([Body(0.0, 0.0)], Square(0.0, 0.0, 1.0), max_depth=0)

    def test_distinct_bodies_do_not_warn(self, recwarn):
        """Well separated bodies never hit the depth cap."""
        build_tree(make_random_bodies(100), Square(0.0, 0.0, 100.0))
        assert not any(issubclass(w.category, DegenerateAggregateWarning) for w in recwarn)


class TestOutOfBounds:
    """Tests for bodies outside the root bounds."""

    def test_out_of_bounds_body_excluded(self):
        """Bodies outside the bounds are left out and reported once."""
        bodies = [Body(0.0, 0.0), Body(500.0, 0.0), Body(1.0, 1.0), Body(0.0, -50.0)]

        with pytest.warns(OutOfBoundsWarning) as record:
            tree = build_tree(bodies, Square(0.0, 0.0, 10.0))

        assert len([w for w in record if issubclass(w.category, OutOfBoundsWarning)]) == 1
        assert tree.body_count == 2
        assert isinstance(tree.out_of_bounds, OutOfBoundsError)
        assert tree.out_of_bounds.indices == [1, 3]
        assert sorted(collect_bodies(tree)) == [0, 2]
        assert tree.root.total_mass == 2.0

    def test_strict_raises(self):
        """strict=True raises instead of excluding."""
        bodies = [Body(0.0, 0.0), Body(500.0, 0.0)]
        with pytest.raises(OutOfBoundsError) as excinfo:
            build_tree(bodies, Square(0.0, 0.0, 10.0), strict=True)
        assert excinfo.value.indices == [1]

    def test_non_finite_position_excluded(self):
        """NaN positions are treated as out of bounds."""
        bodies = [Body(0.0, 0.0), Body(math.nan, 0.0)]
        with pytest.warns(OutOfBoundsWarning):
            tree = build_tree(bodies, Square(0.0, 0.0, 10.0))
        assert tree.out_of_bounds.indices == [1]

    def test_boundary_body_included(self):
        """A body exactly on the root edge is inside."""
        tree = build_tree([Body(10.0, -10.0), Body(0.0, 0.0)], Square(0.0, 0.0, 10.0))
        assert tree.out_of_bounds is None
        assert tree.body_count == 2


class TestTreeGeometry:
    """Tests for tree queries used to draw the grid."""

    def test_internal_bounds_root_only(self):
        """Two separated bodies produce one internal node."""
        tree = build_tree([Body(-5.0, -5.0), Body(5.0, 5.0)], Square(0.0, 0.0, 10.0))
        squares = list(tree.internal_bounds())
        assert squares == [tree.bounds]

    def test_internal_bounds_min_size(self):
        """Small nodes are skipped with min_size."""
        tree = build_tree([Body(1.0, 1.0), Body(1.5, 1.5)], Square(0.0, 0.0, 8.0))
        all_squares = list(tree.internal_bounds())
        large = list(tree.internal_bounds(min_size=8.0))

        assert len(all_squares) > len(large)
        assert all(sq.size >= 8.0 for sq in large)
        assert all_squares[0] == tree.bounds

    def test_empty_tree_has_no_internal_bounds(self):
        """An empty tree yields nothing."""
        tree = build_tree([], Square(0.0, 0.0, 1.0))
        assert list(tree.internal_bounds()) == []
        assert tree.depth() == 0
