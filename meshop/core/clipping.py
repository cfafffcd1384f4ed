"""Box clipping of triangle meshes.

`clip_to_box` converts a mesh into a triangle soup, clips it successively
against the six half-spaces bounding an axis-aligned box and welds the result
back into an indexed mesh. Welding merges corners whose coordinates are
bit-identical; no tolerance is applied.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .constants import DEFAULT_IMAGE_ID, NO_TCOORD
from .geometry import Extents3
from .logging_utils import get_logger
from .mesh import Mesh

log = get_logger('meshop.clip')

__all__ = [
    'ClipPlane', 'ClipTriangle', 'box_planes', 'triangles_from_mesh',
    'clip_triangle', 'clip_triangles', 'weld_triangles', 'clip_to_box',
]


@dataclass(frozen=True)
class ClipPlane:
    """Half-space ``n . x + d >= 0``.

    Planes built by `axis_lower` / `axis_upper` also remember the axis and the
    bound so that intersection points can be placed exactly on the plane.
    """
    normal: Tuple[float, float, float]
    offset: float
    axis: Optional[int] = None
    bound: Optional[float] = None

    @classmethod
    def axis_lower(cls, axis: int, value: float) -> 'ClipPlane':
        """Keep ``x[axis] >= value``."""
        n = [0.0, 0.0, 0.0]; n[axis] = 1.0
        return cls(tuple(n), -float(value), axis, float(value))

    @classmethod
    def axis_upper(cls, axis: int, value: float) -> 'ClipPlane':
        """Keep ``x[axis] <= value``."""
        n = [0.0, 0.0, 0.0]; n[axis] = -1.0
        return cls(tuple(n), float(value), axis, float(value))

    def distance(self, points) -> np.ndarray:
        pts = np.asarray(points, dtype=np.float64)
        if self.axis is not None:
            # exact sign, zero iff the coordinate equals the bound
            sign = self.normal[self.axis]
            return sign * (pts[..., self.axis] - self.bound)
        return pts @ np.asarray(self.normal, dtype=np.float64) + self.offset


class ClipTriangle:
    """Transient triangle of the clip pipeline: corner positions plus the
    texture coordinates attached to those corners (None when textureless)."""
    __slots__ = ('pos', 'uv', 'image_id')

    def __init__(self, pos, uv=None, image_id: int = DEFAULT_IMAGE_ID):
        self.pos = np.asarray(pos, dtype=np.float64).reshape(3, 3)
        self.uv = None if uv is None else np.asarray(uv, dtype=np.float64).reshape(3, 2)
        self.image_id = int(image_id)

    def __repr__(self) -> str:
        return f"ClipTriangle({self.pos.tolist()})"


def box_planes(extents: Extents3) -> List[ClipPlane]:
    """The six planes of a box, ordered x-lower, x-upper, y-lower, ..."""
    planes = []
    for axis in range(3):
        planes.append(ClipPlane.axis_lower(axis, extents.ll[axis]))
        planes.append(ClipPlane.axis_upper(axis, extents.ur[axis]))
    return planes


def triangles_from_mesh(mesh: Mesh) -> List[ClipTriangle]:
    pos = mesh.vertices[mesh.faces]
    uv = mesh.tcoords[mesh.tfaces] if mesh.has_tcoords() else None
    return [ClipTriangle(pos[i], None if uv is None else uv[i], mesh.image_ids[i])
            for i in range(mesh.n_faces)]


def _crossing(tri: ClipTriangle, dist, k_in: int, k_out: int, plane: ClipPlane):
    # parametrised from the inside corner so both faces sharing an edge agree
    t = dist[k_in] / (dist[k_in] - dist[k_out])
    a, b = tri.pos[k_in], tri.pos[k_out]
    # stay within the endpoint range so earlier planes remain satisfied
    p = np.clip(a + t * (b - a), np.minimum(a, b), np.maximum(a, b))
    if plane.axis is not None:
        p[plane.axis] = plane.bound
    uv = None
    if tri.uv is not None:
        ua, ub = tri.uv[k_in], tri.uv[k_out]
        uv = np.clip(ua + t * (ub - ua), np.minimum(ua, ub), np.maximum(ua, ub))
    return p, uv


def clip_triangle(tri: ClipTriangle, plane: ClipPlane, dist=None) -> List[ClipTriangle]:
    """Clip one triangle against a half-space; returns 0, 1 or 2 triangles.

    A corner with zero distance counts as inside. Straddling triangles are cut
    along the two crossing edges; a resulting quad is split along the diagonal
    from its first corner, keeping the original winding.
    """
    if dist is None:
        dist = plane.distance(tri.pos)
    inside = dist >= 0.0
    n_in = int(np.count_nonzero(inside))
    if n_in == 3:
        return [tri]
    if n_in == 0:
        return []

    poly_p = []
    poly_t = []
    for i in range(3):
        j = (i + 1) % 3
        if inside[i]:
            poly_p.append(tri.pos[i])
            poly_t.append(None if tri.uv is None else tri.uv[i])
        if inside[i] != inside[j]:
            k_in, k_out = (i, j) if inside[i] else (j, i)
            p, uv = _crossing(tri, dist, k_in, k_out, plane)
            poly_p.append(p)
            poly_t.append(uv)

    out = []
    for k in range(1, len(poly_p) - 1):
        corners = (0, k, k + 1)
        pos = [poly_p[c] for c in corners]
        uv = None if tri.uv is None else [poly_t[c] for c in corners]
        out.append(ClipTriangle(pos, uv, tri.image_id))
    return out


def clip_triangles(triangles: Sequence[ClipTriangle], plane: ClipPlane) -> List[ClipTriangle]:
    """Clip every triangle of a soup against one plane, preserving order."""
    if not triangles:
        return []
    dists = plane.distance(np.stack([t.pos for t in triangles]))
    out: List[ClipTriangle] = []
    for tri, dist in zip(triangles, dists):
        out.extend(clip_triangle(tri, plane, dist))
    return out


def weld_triangles(triangles: Sequence[ClipTriangle], with_tcoords: Optional[bool] = None) -> Mesh:
    """Rebuild an indexed mesh from a triangle soup.

    Corners are merged by exact coordinate equality, indices are assigned in
    first-seen order and faces whose welded corners coincide are dropped.
    Texture coordinates are merged the same way, independently of positions.
    """
    if with_tcoords is None:
        with_tcoords = bool(triangles) and triangles[0].uv is not None
    p_map: Dict[tuple, int] = {}
    t_map: Dict[tuple, int] = {}
    verts: List[tuple] = []
    tverts: List[tuple] = []
    faces: List[Tuple[int, int, int]] = []
    tfaces: List[Tuple[int, int, int]] = []
    image_ids: List[int] = []
    dropped = 0

    for tri in triangles:
        idx = []
        for p in tri.pos:
            key = (float(p[0]), float(p[1]), float(p[2]))
            i = p_map.get(key)
            if i is None:
                i = p_map[key] = len(verts)
                verts.append(key)
            idx.append(i)
        tidx = [NO_TCOORD, NO_TCOORD, NO_TCOORD]
        if with_tcoords:
            for k, uv in enumerate(tri.uv):
                key = (float(uv[0]), float(uv[1]))
                j = t_map.get(key)
                if j is None:
                    j = t_map[key] = len(tverts)
                    tverts.append(key)
                tidx[k] = j
        if idx[0] == idx[1] or idx[1] == idx[2] or idx[0] == idx[2]:
            dropped += 1
            continue
        faces.append(tuple(idx))
        tfaces.append(tuple(tidx))
        image_ids.append(tri.image_id)

    if dropped:
        log.debug('weld: dropped %d degenerate triangle(s)', dropped)
    return Mesh(verts, faces, tverts, tfaces, image_ids)


def clip_to_box(mesh: Mesh, extents: Extents3) -> Mesh:
    """Clip a mesh to an axis-aligned box (bounds inclusive).

    Returns a new welded mesh; the input is left untouched. The result may be
    empty when no geometry lies inside the box.
    """
    clipped = triangles_from_mesh(mesh)
    for plane in box_planes(extents):
        before = len(clipped)
        clipped = clip_triangles(clipped, plane)
        log.debug('clip: plane axis=%s bound=%.6g %d -> %d triangles',
                  plane.axis, plane.bound, before, len(clipped))
    out = weld_triangles(clipped, with_tcoords=mesh.has_tcoords())
    log.info('clip: %d faces / %d vertices -> %d faces / %d vertices',
             mesh.n_faces, mesh.n_vertices, out.n_faces, out.n_vertices)
    return out
