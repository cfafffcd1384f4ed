"""Visualization helpers: render a mesh to an image file."""
from __future__ import annotations

import os as _os
import matplotlib as _mpl
# Ensure a non-interactive backend in headless environments before importing pyplot
if not _os.environ.get('MPLBACKEND'):
    _mpl.use('Agg')
import numpy as np
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d.art3d import Line3DCollection, Poly3DCollection

from .conformity import build_edge_to_face_map, non_manifold_edges
from .geometry import Extents3
from .logging_utils import get_logger

logger = get_logger('meshop.viz')

__all__ = ['plot_mesh', 'box_edges']


def box_edges(extents: Extents3) -> np.ndarray:
    """The 12 edges of a box as a (12, 2, 3) array of segments."""
    lo = np.asarray(extents.ll); hi = np.asarray(extents.ur)
    corners = np.array([[hi[0] if i & 1 else lo[0],
                         hi[1] if i & 2 else lo[1],
                         hi[2] if i & 4 else lo[2]] for i in range(8)])
    segs = []
    for i in range(8):
        for bit in (1, 2, 4):
            j = i | bit
            if j != i:
                segs.append((corners[i], corners[j]))
    return np.array(segs)


def plot_mesh(mesh, outname: str = "mesh.png", extents: Extents3 = None,
              highlight_non_manifold: bool = True, title: str = None,
              elev: float = 25.0, azim: float = -60.0):
    """Plot a mesh as shaded triangles with optional overlays.

    Args:
        mesh: Mesh to draw (only valid, non-degenerate faces are drawn)
        outname: output image path
        extents: optional box drawn as a wireframe (e.g. a clip box)
        highlight_non_manifold: draw edges shared by 3+ faces in red
        title: figure title, defaults to the face/vertex counts
    """
    keep = mesh.good_mask() & ~mesh.degenerate_mask()
    tris = mesh.faces[keep]
    fig = plt.figure(figsize=(7, 7))
    ax = fig.add_subplot(111, projection='3d')
    if tris.size:
        polys = mesh.vertices[tris]
        coll = Poly3DCollection(polys, facecolor=(0.55, 0.7, 0.9), edgecolor=(0.1, 0.1, 0.1),
                                linewidths=0.4, alpha=0.85)
        ax.add_collection3d(coll)
        if highlight_non_manifold:
            bad = non_manifold_edges(build_edge_to_face_map(tris))
            if bad:
                segs = np.array([[mesh.vertices[a], mesh.vertices[b]] for a, b in sorted(bad)])
                ax.add_collection3d(Line3DCollection(segs, colors='red', linewidths=1.8))
    if extents is not None:
        ax.add_collection3d(Line3DCollection(box_edges(extents), colors='green',
                                             linewidths=1.0, linestyles='dashed'))

    pts = [mesh.vertices] if mesh.n_vertices else []
    if extents is not None:
        pts.append(np.array([extents.ll, extents.ur]))
    if pts:
        allp = np.vstack(pts)
        lo = allp.min(axis=0); hi = allp.max(axis=0)
        pad = max(float(np.max(hi - lo)) * 0.05, 1e-9)
        ax.set_xlim(lo[0] - pad, hi[0] + pad)
        ax.set_ylim(lo[1] - pad, hi[1] + pad)
        ax.set_zlim(lo[2] - pad, hi[2] + pad)
    ax.view_init(elev=elev, azim=azim)
    ax.set_xlabel('x'); ax.set_ylabel('y'); ax.set_zlabel('z')
    ax.set_title(title or f"{int(tris.shape[0])} faces, {mesh.n_vertices} vertices")
    fig.savefig(outname, dpi=120)
    plt.close(fig)
    logger.debug('viz: wrote %s', outname)
    return outname
