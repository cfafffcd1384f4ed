"""Tests for extents and edge helpers."""
import math

import numpy as np
import pytest

from meshop.core.conformity import face_edge_keys
from meshop.core.geometry import Extents3, edge_length, midpoint, normalize_edge
from meshop.core.refinement import EdgeQueue


def test_normalize_edge_orders_and_casts():
    """Edge keys are (min, max) tuples of plain ints."""
    assert normalize_edge(5, 2) == (2, 5)
    assert normalize_edge(2, 5) == (2, 5)
    key = normalize_edge(np.int64(7), np.int64(3))
    assert key == (3, 7)
    assert all(type(v) is int for v in key)


def test_face_edge_keys_use_canonical_keys():
    """Face edge keys agree with normalize_edge for every side."""
    assert face_edge_keys(4, 1, 3) == (normalize_edge(4, 1), normalize_edge(1, 3),
                                       normalize_edge(3, 4))


def test_edge_length_on_tuples_and_arrays():
    """Edge length works on tuple lists and numpy arrays alike."""
    verts = [(0.0, 0.0, 0.0), (3.0, 4.0, 0.0)]
    assert edge_length(verts, 0, 1) == 5.0
    assert edge_length(np.asarray(verts), 1, 0) == 5.0
    assert edge_length(verts, 0, 0) == 0.0


def test_edge_queue_uses_edge_length():
    """Queued edges carry the length given by edge_length."""
    verts = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)]
    queue = EdgeQueue()
    queue.add_face_edges(verts, [[0, 1, 2]], 0)
    rec = queue.pop_longest()
    assert rec.key == (1, 2)
    assert rec.length == edge_length(verts, 1, 2) == math.sqrt(2.0)


def test_midpoint_any_dimension():
    """Midpoints are float tuples for 2D and 3D inputs."""
    assert midpoint((0, 0, 0), (1, 2, 3)) == (0.5, 1.0, 1.5)
    assert midpoint((0.0, 1.0), (1.0, 0.0)) == (0.5, 0.5)
    assert midpoint(np.array([2.0, 2.0]), np.array([4.0, 6.0])) == (3.0, 4.0)


def test_extents_validation_and_queries():
    """Extents reject inverted or malformed corners and test points inclusively."""
    box = Extents3.from_sequence([0, 0, 0, 1, 2, 3])
    assert box.ll == (0.0, 0.0, 0.0)
    assert np.array_equal(box.size(), [1.0, 2.0, 3.0])
    assert box.contains([[1, 2, 3], [0, 0, 0], [1.5, 0, 0]]).tolist() == [True, True, False]
    with pytest.raises(ValueError):
        Extents3((1, 0, 0), (0, 1, 1))
    with pytest.raises(ValueError):
        Extents3.from_sequence([0, 0, 1, 1])
    pts = Extents3.of_points([[1, -1, 0], [-2, 3, 5]])
    assert pts.ll == (-2.0, -1.0, 0.0) and pts.ur == (1.0, 3.0, 5.0)
