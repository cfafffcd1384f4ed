"""Edge incidence maps and non-manifold edge removal."""
from __future__ import annotations

from typing import Dict, Iterable, Set, Tuple

import numpy as np

from .geometry import normalize_edge
from .logging_utils import get_logger
from .mesh import Mesh

log = get_logger('meshop.conformity')

__all__ = [
    'face_edge_keys', 'build_edge_to_face_map', 'boundary_edges_from_map',
    'non_manifold_edges', 'faces_on_non_manifold_edges', 'remove_non_manifold_edges',
    'count_incidence',
]

EdgeKey = Tuple[int, int]


def face_edge_keys(a: int, b: int, c: int) -> Tuple[EdgeKey, EdgeKey, EdgeKey]:
    """Canonical keys of the edges AB, BC and CA of a triangle."""
    return (normalize_edge(a, b), normalize_edge(b, c), normalize_edge(c, a))


def build_edge_to_face_map(faces) -> Dict[EdgeKey, Set[int]]:
    """Map every undirected edge to the set of face indices incident to it."""
    edge_map: Dict[EdgeKey, Set[int]] = {}
    for f_idx, (a, b, c) in enumerate(np.asarray(faces, dtype=np.int64).reshape(-1, 3).tolist()):
        for key in face_edge_keys(a, b, c):
            edge_map.setdefault(key, set()).add(f_idx)
    return edge_map


def boundary_edges_from_map(edge_map) -> Set[EdgeKey]:
    return {e for e, s in edge_map.items() if len(s) == 1}


def non_manifold_edges(edge_map) -> Set[EdgeKey]:
    """Edges shared by three or more faces."""
    return {e for e, s in edge_map.items() if len(s) > 2}


def faces_on_non_manifold_edges(edge_map) -> Set[int]:
    omit: Set[int] = set()
    for e in non_manifold_edges(edge_map):
        omit.update(edge_map[e])
    return omit


def remove_non_manifold_edges(mesh: Mesh) -> Mesh:
    """Drop every face incident to a non-manifold edge.

    Vertices and texture coordinates are kept as they are (even if no longer
    referenced); surviving faces keep their relative order.
    """
    edge_map = build_edge_to_face_map(mesh.faces)
    bad_edges = non_manifold_edges(edge_map)
    omit = faces_on_non_manifold_edges(edge_map)
    keep = np.ones(mesh.n_faces, dtype=bool)
    if omit:
        keep[sorted(omit)] = False
    out = mesh.with_faces(keep)
    log.info('non-manifold: %d edge(s) over limit, removed %d of %d faces',
             len(bad_edges), len(omit), mesh.n_faces)
    return out


def count_incidence(edge_map) -> Dict[int, int]:
    """Histogram {faces per edge: number of edges}."""
    hist: Dict[int, int] = {}
    for s in edge_map.values():
        hist[len(s)] = hist.get(len(s), 0) + 1
    return hist
