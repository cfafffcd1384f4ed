"""Diagnostics helpers: summary counts used for logging and checks."""
from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np

from .conformity import build_edge_to_face_map, count_incidence
from .geometry import Extents3
from .mesh import Mesh

__all__ = ['mesh_summary', 'extents_of', 'unreferenced_vertices', 'duplicate_vertices']


def extents_of(mesh: Mesh) -> Optional[Extents3]:
    """Bounding box of the mesh vertices, None for a mesh without vertices."""
    if mesh.n_vertices == 0:
        return None
    return Extents3.of_points(mesh.vertices)


def unreferenced_vertices(mesh: Mesh) -> np.ndarray:
    used = np.zeros(mesh.n_vertices, dtype=bool)
    good = mesh.faces[mesh.good_mask()]
    used[good.reshape(-1)] = True
    return np.nonzero(~used)[0]


def duplicate_vertices(mesh: Mesh) -> int:
    """Number of vertices whose coordinates repeat an earlier vertex exactly."""
    if mesh.n_vertices == 0:
        return 0
    uniq = np.unique(mesh.vertices, axis=0)
    return int(mesh.n_vertices - uniq.shape[0])


def mesh_summary(mesh: Mesh) -> Dict[str, Any]:
    """Counts describing the state of a mesh.

    Edge statistics only consider valid faces.
    """
    good = mesh.good_mask()
    hist = count_incidence(build_edge_to_face_map(mesh.faces[good]))
    return {
        'vertices': mesh.n_vertices,
        'tcoords': mesh.n_tcoords,
        'faces': mesh.n_faces,
        'degenerate_faces': int(np.count_nonzero(mesh.degenerate_mask())),
        'invalid_faces': int(np.count_nonzero(~good)),
        'edges': int(sum(hist.values())),
        'boundary_edges': int(hist.get(1, 0)),
        'manifold_edges': int(hist.get(1, 0) + hist.get(2, 0)),
        'non_manifold_edges': int(sum(v for k, v in hist.items() if k > 2)),
        'unreferenced_vertices': int(unreferenced_vertices(mesh).size),
    }
