"""Indexed triangle mesh container.

The canonical data format mirrors the rest of meshop:
    vertices:  (N, 3) float64 array
    tcoords:   (T, 2) float64 array, T may be 0 for textureless meshes
    faces:     (M, 3) int64 vertex indices
    tfaces:    (M, 3) int64 texture indices (all 0 when textureless)
    image_ids: (M,)   int64 surface / material tag per face

Algorithms treat a Mesh as a value: they copy before mutating so callers keep
their original.
"""
from __future__ import annotations

from typing import Iterator, NamedTuple, Optional

import numpy as np

from .constants import DEFAULT_IMAGE_ID, NO_TCOORD

__all__ = ['Face', 'Mesh']


class Face(NamedTuple):
    a: int
    b: int
    c: int
    ta: int = NO_TCOORD
    tb: int = NO_TCOORD
    tc: int = NO_TCOORD
    image_id: int = DEFAULT_IMAGE_ID

    def degenerate(self) -> bool:
        return self.a == self.b or self.b == self.c or self.a == self.c


def _as_array(values, shape_tail, dtype):
    if values is None:
        return np.empty((0,) + shape_tail, dtype=dtype)
    arr = np.asarray(values, dtype=dtype)
    if arr.size == 0:
        return np.empty((0,) + shape_tail, dtype=dtype)
    return np.ascontiguousarray(arr.reshape((-1,) + shape_tail))


class Mesh:
    def __init__(self, vertices=None, faces=None, tcoords=None, tfaces=None, image_ids=None):
        self.vertices = _as_array(vertices, (3,), np.float64)
        self.tcoords = _as_array(tcoords, (2,), np.float64)
        self.faces = _as_array(faces, (3,), np.int64)
        n = self.faces.shape[0]
        if tfaces is None:
            self.tfaces = np.full((n, 3), NO_TCOORD, dtype=np.int64)
        else:
            self.tfaces = _as_array(tfaces, (3,), np.int64)
        if image_ids is None:
            self.image_ids = np.full(n, DEFAULT_IMAGE_ID, dtype=np.int64)
        else:
            self.image_ids = _as_array(image_ids, (), np.int64)
        if self.tfaces.shape[0] != n or self.image_ids.shape[0] != n:
            raise ValueError(
                f"face attribute length mismatch: faces={n} tfaces={self.tfaces.shape[0]} "
                f"image_ids={self.image_ids.shape[0]}")

    @classmethod
    def empty(cls) -> 'Mesh':
        return cls()

    # ---- sizes -----------------------------------------------------------
    @property
    def n_vertices(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def n_faces(self) -> int:
        return int(self.faces.shape[0])

    @property
    def n_tcoords(self) -> int:
        return int(self.tcoords.shape[0])

    def has_tcoords(self) -> bool:
        return self.n_tcoords > 0

    def __len__(self) -> int:
        return self.n_faces

    def __repr__(self) -> str:
        return (f"Mesh(vertices={self.n_vertices}, tcoords={self.n_tcoords}, "
                f"faces={self.n_faces})")

    # ---- face access -----------------------------------------------------
    def face(self, i: int) -> Face:
        f = self.faces[i]; t = self.tfaces[i]
        return Face(int(f[0]), int(f[1]), int(f[2]),
                    int(t[0]), int(t[1]), int(t[2]), int(self.image_ids[i]))

    def iter_faces(self) -> Iterator[Face]:
        for i in range(self.n_faces):
            yield self.face(i)

    def degenerate(self, i: int) -> bool:
        """True if two of the face's vertex indices coincide."""
        return self.face(i).degenerate()

    def good(self, i: int) -> bool:
        """True if every index of the face is within the current arrays."""
        f = self.faces[i]
        if np.any(f < 0) or np.any(f >= self.n_vertices):
            return False
        if self.has_tcoords():
            t = self.tfaces[i]
            if np.any(t < 0) or np.any(t >= self.n_tcoords):
                return False
        return True

    def degenerate_mask(self) -> np.ndarray:
        f = self.faces
        return (f[:, 0] == f[:, 1]) | (f[:, 1] == f[:, 2]) | (f[:, 0] == f[:, 2])

    def good_mask(self) -> np.ndarray:
        ok = np.all((self.faces >= 0) & (self.faces < self.n_vertices), axis=1)
        if self.has_tcoords():
            ok &= np.all((self.tfaces >= 0) & (self.tfaces < self.n_tcoords), axis=1)
        return ok

    # ---- builders --------------------------------------------------------
    def add_vertex(self, point) -> int:
        p = np.asarray(point, dtype=np.float64).reshape(1, 3)
        self.vertices = np.ascontiguousarray(np.vstack([self.vertices, p]))
        return self.n_vertices - 1

    def add_tcoord(self, uv) -> int:
        t = np.asarray(uv, dtype=np.float64).reshape(-1)[:2].reshape(1, 2)
        self.tcoords = np.ascontiguousarray(np.vstack([self.tcoords, t]))
        return self.n_tcoords - 1

    def add_face(self, a: int, b: int, c: int, ta: int = NO_TCOORD, tb: int = NO_TCOORD,
                 tc: int = NO_TCOORD, image_id: int = DEFAULT_IMAGE_ID) -> int:
        self.faces = np.ascontiguousarray(
            np.vstack([self.faces, np.array([[a, b, c]], dtype=np.int64)]))
        self.tfaces = np.ascontiguousarray(
            np.vstack([self.tfaces, np.array([[ta, tb, tc]], dtype=np.int64)]))
        self.image_ids = np.append(self.image_ids, np.int64(image_id))
        return self.n_faces - 1

    def copy(self) -> 'Mesh':
        return Mesh(self.vertices.copy(), self.faces.copy(), self.tcoords.copy(),
                    self.tfaces.copy(), self.image_ids.copy())

    def with_faces(self, mask_or_index) -> 'Mesh':
        """Copy keeping vertices/tcoords and the selected faces (in order)."""
        return Mesh(self.vertices.copy(), self.faces[mask_or_index], self.tcoords.copy(),
                    self.tfaces[mask_or_index], self.image_ids[mask_or_index])

    def validate(self, allow_degenerate: bool = True) -> None:
        """Raise ValueError if a face references an index out of range."""
        bad = np.nonzero(~self.good_mask())[0]
        if bad.size:
            raise ValueError(f"{bad.size} face(s) reference out-of-range indices, first at {int(bad[0])}")
        if not allow_degenerate:
            deg = np.nonzero(self.degenerate_mask())[0]
            if deg.size:
                raise ValueError(f"{deg.size} degenerate face(s), first at {int(deg[0])}")

    def face_vertices(self, i: Optional[int] = None) -> np.ndarray:
        """Corner positions, (3, 3) for one face or (M, 3, 3) for all."""
        if i is None:
            return self.vertices[self.faces]
        return self.vertices[self.faces[i]]
