import numpy as np

from meshop.core.conformity import (boundary_edges_from_map, build_edge_to_face_map,
                                    count_incidence, face_edge_keys, faces_on_non_manifold_edges,
                                    non_manifold_edges, remove_non_manifold_edges)
from meshop.core.mesh import Mesh


def fan_on_one_edge():
    """Three triangles pairwise sharing the edge (0, 1)."""
    pts = [[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, -1, 0], [0, 0, 1]]
    faces = [[0, 1, 2], [1, 0, 3], [0, 1, 4]]
    uv = [[0, 0], [1, 0], [0, 1]]
    return Mesh(pts, faces, uv, [[0, 1, 2]] * 3)


def test_face_edge_keys_are_canonical():
    """Face edge keys are sorted vertex pairs."""
    assert face_edge_keys(5, 2, 9) == ((2, 5), (2, 9), (5, 9))


def test_edge_map_of_square(unit_square):
    """Edge map of a split square has one interior edge."""
    emap = build_edge_to_face_map(unit_square.faces)
    assert emap[(0, 2)] == {0, 1}
    assert boundary_edges_from_map(emap) == {(0, 1), (1, 2), (2, 3), (0, 3)}
    assert count_incidence(emap) == {1: 4, 2: 1}


def test_three_faces_on_one_edge_are_all_removed():
    """All faces on an edge shared by three are removed."""
    mesh = fan_on_one_edge()
    emap = build_edge_to_face_map(mesh.faces)
    assert non_manifold_edges(emap) == {(0, 1)}
    assert faces_on_non_manifold_edges(emap) == {0, 1, 2}

    out = remove_non_manifold_edges(mesh)
    assert out.n_faces == 0
    assert np.array_equal(out.vertices, mesh.vertices)
    assert np.array_equal(out.tcoords, mesh.tcoords)
    assert out.n_faces == 0 and mesh.n_faces == 3


def test_manifold_mesh_is_unchanged(unit_cube):
    """A closed manifold mesh is returned unchanged."""
    out = remove_non_manifold_edges(unit_cube)
    assert out is not unit_cube
    assert np.array_equal(out.faces, unit_cube.faces)


def test_fin_on_cube_edge_removes_its_neighbours(unit_cube):
    """A fin on a cube edge removes the fin and both cube faces."""
    mesh = unit_cube.copy()
    fin_tip = mesh.add_vertex([0.5, -1.0, -1.0])
    mesh.add_face(0, 1, fin_tip, image_id=7)

    out = remove_non_manifold_edges(mesh)
    # edge (0, 1) is shared by cube faces 1 and 4 plus the fin
    expected = [f for i, f in enumerate(mesh.faces.tolist()) if i not in (1, 4, 12)]
    assert out.faces.tolist() == expected
    assert out.n_vertices == mesh.n_vertices
    assert 7 not in out.image_ids.tolist()


def test_output_is_manifold():
    """The cleaned mesh has no edge with more than two faces."""
    rng = np.random.default_rng(1)
    faces = rng.integers(0, 6, size=(40, 3))
    mesh = Mesh(rng.uniform(size=(6, 3)), faces)
    out = remove_non_manifold_edges(mesh)
    emap = build_edge_to_face_map(out.faces)
    assert all(len(s) <= 2 for s in emap.values())
