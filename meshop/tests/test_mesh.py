import numpy as np
import pytest

from meshop.core.mesh import Face, Mesh


def test_empty_mesh_shapes():
    """An empty mesh has correctly shaped arrays."""
    m = Mesh.empty()
    assert m.vertices.shape == (0, 3)
    assert m.tcoords.shape == (0, 2)
    assert m.faces.shape == (0, 3)
    assert m.tfaces.shape == (0, 3)
    assert m.image_ids.shape == (0,)
    assert not m.has_tcoords()


def test_degenerate_and_good(single_triangle):
    """Degenerate and good predicates on single faces."""
    m = single_triangle
    m.add_face(0, 0, 1)
    m.add_face(0, 1, 7)
    assert not m.degenerate(0)
    assert m.degenerate(1)
    assert m.good(0) and m.good(1)
    assert not m.good(2)
    assert np.array_equal(m.degenerate_mask(), [False, True, False])
    assert np.array_equal(m.good_mask(), [True, True, False])


def test_good_checks_texture_indices_only_when_textured(single_triangle):
    """Texture indices are checked only on textured meshes."""
    m = single_triangle
    m.tfaces[0] = [5, 6, 7]
    assert m.good(0)
    m.add_tcoord([0.0, 0.0])
    assert not m.good(0)


def test_face_accessor_and_builders():
    """Face access and the add_* builders."""
    m = Mesh()
    for p in ([0, 0, 0], [1, 0, 0], [0, 1, 0]):
        m.add_vertex(p)
    t = m.add_tcoord([0.5, 0.25])
    f = m.add_face(0, 1, 2, t, t, t, image_id=4)
    assert f == 0
    assert m.face(0) == Face(0, 1, 2, 0, 0, 0, 4)
    assert list(m.iter_faces()) == [Face(0, 1, 2, 0, 0, 0, 4)]
    assert m.face_vertices(0).shape == (3, 3)


def test_copy_is_independent(single_triangle):
    """A copy shares no arrays with its source."""
    c = single_triangle.copy()
    c.vertices[0] = [9.0, 9.0, 9.0]
    c.faces[0] = [2, 1, 0]
    assert np.array_equal(single_triangle.vertices[0], [0.0, 0.0, 0.0])
    assert np.array_equal(single_triangle.faces[0], [0, 1, 2])


def test_validate_raises_on_out_of_range():
    """validate rejects out-of-range indices."""
    m = Mesh([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 1, 3]])
    with pytest.raises(ValueError):
        m.validate()
    m2 = Mesh([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 1, 1]])
    m2.validate()
    with pytest.raises(ValueError):
        m2.validate(allow_degenerate=False)


def test_attribute_length_mismatch():
    """Per-face arrays must match the face count."""
    with pytest.raises(ValueError):
        Mesh([[0, 0, 0]], [[0, 0, 0]], image_ids=[1, 2])
