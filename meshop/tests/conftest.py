import numpy as np
import pytest

from meshop.core.mesh import Mesh


CUBE_POINTS = [
    [0.0, 0.0, 0.0],  # 0
    [1.0, 0.0, 0.0],  # 1
    [0.0, 1.0, 0.0],  # 2
    [1.0, 1.0, 0.0],  # 3
    [0.0, 0.0, 1.0],  # 4
    [1.0, 0.0, 1.0],  # 5
    [0.0, 1.0, 1.0],  # 6
    [1.0, 1.0, 1.0],  # 7
]

# consistently oriented: every edge is walked once in each direction
CUBE_FACES = [
    [0, 2, 3], [0, 3, 1],  # z = 0
    [4, 5, 7], [4, 7, 6],  # z = 1
    [0, 1, 5], [0, 5, 4],  # y = 0
    [2, 6, 7], [2, 7, 3],  # y = 1
    [0, 4, 6], [0, 6, 2],  # x = 0
    [1, 3, 7], [1, 7, 5],  # x = 1
]


@pytest.fixture
def unit_cube():
    return Mesh(np.array(CUBE_POINTS), np.array(CUBE_FACES))


@pytest.fixture
def single_triangle():
    return Mesh([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0], [0.0, 2.0, 0.0]], [[0, 1, 2]])


@pytest.fixture
def unit_square():
    pts = [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]]
    return Mesh(pts, [[0, 1, 2], [0, 2, 3]])


def face_corner_sets(mesh):
    """Faces as sorted tuples of corner coordinates (label independent)."""
    return sorted(tuple(sorted(tuple(p) for p in mesh.vertices[f].tolist())) for f in mesh.faces)


@pytest.fixture
def corner_sets():
    return face_corner_sets
