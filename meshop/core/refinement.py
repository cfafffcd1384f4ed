"""Adaptive refinement by longest-edge splitting.

`refine(mesh, max_face_count)` repeatedly splits the currently longest edge at
its midpoint until the face budget is met. Each split rewrites the incident
face in place (that slot keeps one half) and appends the other half at the end
of the face array, so existing face indices stay meaningful.

Edge bookkeeping lives in `EdgeQueue`: edge records are stored in an arena and
addressed by integer handle; a dict maps canonical edge keys to handles and a
heap holds ``(-length, seq, handle)`` entries. Heap entries whose handle is no
longer registered for its key are stale and skipped when popped.
"""
from __future__ import annotations

import heapq
import itertools
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .constants import NO_TCOORD
from .geometry import edge_length, midpoint, normalize_edge
from .logging_utils import get_logger
from .mesh import Mesh

log = get_logger('meshop.refinement')

__all__ = ['AB', 'BC', 'CA', 'EdgeRecord', 'EdgeQueue', 'RefineStats', 'refine']

# Local edge slots of a triangle (a, b, c)
AB, BC, CA = 0, 1, 2


class EdgeRecord:
    """One undirected edge with up to two incident faces.

    The face that walks the edge from the lower to the higher vertex index
    fills slot 1 (`f1`, `et1`); the face walking it the other way fills
    slot 2. A later registration in the same direction replaces the earlier.
    """
    __slots__ = ('v1', 'v2', 'f1', 'f2', 'et1', 'et2', 'length')

    def __init__(self, pv1: int, pv2: int, length: float):
        self.v1 = min(pv1, pv2)
        self.v2 = max(pv1, pv2)
        self.f1 = -1
        self.f2 = -1
        self.et1: Optional[int] = None
        self.et2: Optional[int] = None
        self.length = length

    def add_face(self, pv1: int, pv2: int, fid: int, slot: int) -> None:
        if pv1 < pv2:
            self.f1 = fid
            self.et1 = slot
        else:
            self.f2 = fid
            self.et2 = slot

    @property
    def key(self) -> Tuple[int, int]:
        return (self.v1, self.v2)

    def incident(self) -> List[Tuple[int, int]]:
        """(face, slot) pairs in split order: slot 1 first."""
        out = []
        if self.f1 >= 0:
            out.append((self.f1, self.et1))
        if self.f2 >= 0:
            out.append((self.f2, self.et2))
        return out

    def __repr__(self) -> str:
        return (f"EdgeRecord({self.v1}, {self.v2}, f1={self.f1}, f2={self.f2}, "
                f"length={self.length:.6g})")


class EdgeQueue:
    """Edge lookup plus longest-first priority queue over an edge arena."""

    def __init__(self):
        self._arena: List[Optional[EdgeRecord]] = []
        self._map: Dict[Tuple[int, int], int] = {}
        self._heap: List[Tuple[float, int, int]] = []
        self._seq = itertools.count()

    def __len__(self) -> int:
        return len(self._map)

    def __contains__(self, key) -> bool:
        a, b = key
        return normalize_edge(a, b) in self._map

    def get(self, a: int, b: int) -> Optional[EdgeRecord]:
        h = self._map.get(normalize_edge(a, b))
        return None if h is None else self._arena[h]

    def add_face_edge(self, pv1: int, pv2: int, fid: int, slot: int, length: float) -> None:
        key = normalize_edge(pv1, pv2)
        h = self._map.get(key)
        if h is not None:
            self._arena[h].add_face(pv1, pv2, fid, slot)
            return
        rec = EdgeRecord(pv1, pv2, length)
        rec.add_face(pv1, pv2, fid, slot)
        h = len(self._arena)
        self._arena.append(rec)
        self._map[key] = h
        heapq.heappush(self._heap, (-length, next(self._seq), h))

    def add_face_edges(self, vertices, faces, fid: int) -> None:
        """Register edges AB, BC and CA of face `fid`."""
        a, b, c = faces[fid]
        self.add_face_edge(a, b, fid, AB, edge_length(vertices, a, b))
        self.add_face_edge(b, c, fid, BC, edge_length(vertices, b, c))
        self.add_face_edge(c, a, fid, CA, edge_length(vertices, c, a))

    def pop_longest(self) -> Optional[EdgeRecord]:
        """Remove and return the longest registered edge (None when empty).

        Equal lengths come out in registration order. Lengths are kept in
        double precision and this first-in first-out tie order is deliberate:
        the split sequence is deterministic, but it is not bit-compatible with
        refiners that cache single-precision lengths or leave ties to a plain
        binary heap.
        """
        while self._heap:
            neg_len, _, h = heapq.heappop(self._heap)
            rec = self._arena[h]
            if rec is None or self._map.get(rec.key) != h or rec.length != -neg_len:
                continue
            del self._map[rec.key]
            self._arena[h] = None
            return rec
        return None


@dataclass
class RefineStats:
    splits: int = 0
    faces_split: int = 0
    faces_before: int = 0
    faces_after: int = 0
    time_total: float = 0.0

    def to_dict(self):
        return {
            'splits': self.splits,
            'faces_split': self.faces_split,
            'faces_before': self.faces_before,
            'faces_after': self.faces_after,
            'time_total': self.time_total,
        }


class _Refiner:
    """Working copy of a mesh as python lists plus its edge queue."""

    def __init__(self, mesh: Mesh):
        self.vertices = [tuple(p) for p in mesh.vertices.tolist()]
        self.tcoords = [tuple(t) for t in mesh.tcoords.tolist()]
        self.faces = [list(f) for f in mesh.faces.tolist()]
        self.tfaces = [list(t) for t in mesh.tfaces.tolist()]
        self.image_ids = mesh.image_ids.tolist()
        self.textured = len(self.tcoords) > 0
        self.edges = EdgeQueue()
        for fid in range(len(self.faces)):
            self.edges.add_face_edges(self.vertices, self.faces, fid)

    def split_face(self, fid: int, slot: int, vid: int) -> None:
        """Split face `fid` along its edge `slot` at vertex `vid`.

        With corners (i, j, k) starting at the split edge, the face slot keeps
        (i, vid, k) and the appended face is (j, k, vid); winding is preserved.
        """
        face = self.faces[fid]
        tface = self.tfaces[fid]
        i, j, k = slot, (slot + 1) % 3, (slot + 2) % 3
        if self.textured:
            ti, tj = self.tcoords[tface[i]], self.tcoords[tface[j]]
            self.tcoords.append(midpoint(ti, tj))
            t_new = len(self.tcoords) - 1
        else:
            t_new = NO_TCOORD

        self.faces.append([face[j], face[k], vid])
        self.tfaces.append([tface[j], tface[k], t_new])
        self.image_ids.append(self.image_ids[fid])
        face[j] = vid
        tface[j] = t_new

        self.edges.add_face_edges(self.vertices, self.faces, fid)
        self.edges.add_face_edges(self.vertices, self.faces, len(self.faces) - 1)

    def split_edge(self, edge: EdgeRecord) -> int:
        self.vertices.append(midpoint(self.vertices[edge.v1], self.vertices[edge.v2]))
        vid = len(self.vertices) - 1
        incident = edge.incident()
        for fid, slot in incident:
            self.split_face(fid, slot, vid)
        return len(incident)

    def to_mesh(self) -> Mesh:
        return Mesh(self.vertices, self.faces, self.tcoords, self.tfaces, self.image_ids)


def refine(mesh: Mesh, max_face_count: int, stats: Optional[RefineStats] = None) -> Mesh:
    """Split longest edges until the mesh has at least `max_face_count` faces.

    Each step can add two faces, so the result may overshoot the budget by
    one. Refinement stops early only if there are no edges at all. Faces must
    be triangles with in-range indices. Returns a new mesh.
    """
    max_face_count = int(max_face_count)
    if max_face_count < 0:
        raise ValueError(f"max_face_count must be non-negative, got {max_face_count}")
    t0 = time.perf_counter()
    work = _Refiner(mesh)
    splits = 0
    faces_split = 0
    while len(work.faces) < max_face_count and len(work.edges) > 0:
        edge = work.edges.pop_longest()
        if edge is None:
            break
        faces_split += work.split_edge(edge)
        splits += 1

    out = work.to_mesh()
    elapsed = time.perf_counter() - t0
    if stats is not None:
        stats.splits += splits
        stats.faces_split += faces_split
        stats.faces_before += mesh.n_faces
        stats.faces_after += out.n_faces
        stats.time_total += elapsed
    log.info('refine: %d faces -> %d faces (target=%d splits=%d vertices=%d)',
             mesh.n_faces, out.n_faces, max_face_count, splits, out.n_vertices)
    return out
