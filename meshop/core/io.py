"""Mesh file I/O for meshop.

Readers/writers for the text formats exchanged with the rest of a pipeline:
- load_obj / save_as_obj: Wavefront OBJ with texture coordinates and
  per-face material tags
- load_ply / save_as_ply: ASCII PLY, triangles only
- write_vtk: legacy VTK export for ParaView/VisIt visualization

Writers skip degenerate faces; the PLY writer also skips faces with
out-of-range indices. Readers build a `Mesh` in file order.
"""
from __future__ import annotations

import os
import warnings
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from .config import ObjWriteConfig, PlyWriteConfig
from .constants import DEFAULT_IMAGE_ID, NO_TCOORD
from .logging_utils import get_logger
from .mesh import Mesh

log = get_logger('meshop.io')

PathLike = Union[str, os.PathLike]

__all__ = [
    'MeshIOError', 'MeshFormatError', 'UnsupportedFaceError',
    'load_obj', 'save_as_obj', 'load_ply', 'save_as_ply', 'write_vtk',
    'load_mesh', 'save_mesh', 'mesh_arrays', 'as_mesh',
]


class MeshIOError(Exception):
    """A mesh file could not be read or written."""


class MeshFormatError(MeshIOError, ValueError):
    """The file content does not follow the expected format."""


class UnsupportedFaceError(MeshFormatError):
    """A face record has a cardinality other than three."""


def _fmt(values, spec: str) -> str:
    return ' '.join(format(float(v), spec) for v in values)


# ---------------------------------------------------------------------------
# OBJ
# ---------------------------------------------------------------------------

def _obj_index(token: str, count: int, lineno: int) -> int:
    """Resolve a 1-based (or negative relative) OBJ index to 0-based."""
    try:
        idx = int(token)
    except ValueError:
        raise MeshFormatError(f"line {lineno}: bad index {token!r}") from None
    if idx > 0:
        return idx - 1
    if idx < 0:
        return count + idx
    raise MeshFormatError(f"line {lineno}: index 0 is not valid in OBJ")


def load_obj(filepath: PathLike) -> Mesh:
    """Read a Wavefront OBJ file.

    Parameters
    ----------
    filepath : str or path-like
        Path to the .obj file

    Returns
    -------
    Mesh
        Vertices, texture coordinates (z dropped) and faces in file order.
        Polygons with more than three corners are fan-triangulated. A
        ``usemtl`` whose name is an integer sets the surface tag of the
        following faces; other directives (``vn``, ``mtllib``, ``o``, ``g``,
        ``s``) are accepted and ignored.

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist
    MeshFormatError
        On malformed numbers, indices or faces with fewer than three corners
    """
    verts: List[Tuple[float, float, float]] = []
    tverts: List[Tuple[float, float]] = []
    faces: List[Tuple[int, int, int]] = []
    tfaces: List[Tuple[int, int, int]] = []
    image_ids: List[int] = []
    image_id = DEFAULT_IMAGE_ID

    with open(filepath, 'r') as f:
        for lineno, raw in enumerate(f, start=1):
            line = raw.split('#', 1)[0].strip()
            if not line:
                continue
            parts = line.split()
            tag, args = parts[0], parts[1:]
            try:
                if tag == 'v':
                    verts.append((float(args[0]), float(args[1]), float(args[2])))
                elif tag == 'vt':
                    u = float(args[0])
                    v = float(args[1]) if len(args) > 1 else 0.0
                    tverts.append((u, v))
                elif tag == 'f':
                    if len(args) < 3:
                        raise MeshFormatError(f"line {lineno}: face needs at least 3 corners")
                    corners = []
                    for tok in args:
                        fields = tok.split('/')
                        vi = _obj_index(fields[0], len(verts), lineno)
                        ti = NO_TCOORD
                        if len(fields) > 1 and fields[1]:
                            ti = _obj_index(fields[1], len(tverts), lineno)
                        corners.append((vi, ti))
                    for k in range(1, len(corners) - 1):
                        c0, c1, c2 = corners[0], corners[k], corners[k + 1]
                        faces.append((c0[0], c1[0], c2[0]))
                        tfaces.append((c0[1], c1[1], c2[1]))
                        image_ids.append(image_id)
                elif tag == 'usemtl':
                    name = args[0] if args else ''
                    try:
                        image_id = int(name)
                    except ValueError:
                        log.debug('obj: non-numeric material %r at line %d ignored', name, lineno)
                # vn, vp, mtllib, o, g, s, l: accepted, not represented
            except (IndexError, ValueError) as e:
                if isinstance(e, MeshFormatError):
                    raise
                raise MeshFormatError(f"{filepath}: line {lineno}: malformed {tag!r} record") from e

    mesh = Mesh(verts, faces, tverts, tfaces, image_ids)
    log.debug('obj: read %d vertices, %d tcoords, %d faces from %s',
              mesh.n_vertices, mesh.n_tcoords, mesh.n_faces, filepath)
    return mesh


def save_as_obj(mesh: Mesh, filepath: PathLike, config: Optional[ObjWriteConfig] = None) -> None:
    """Write a mesh as Wavefront OBJ.

    Faces are grouped by a ``usemtl <tag>`` line whenever the surface tag
    changes from the previous written face; indices are 1-based. Degenerate
    faces are skipped. Textureless meshes get plain ``f a b c`` records.
    """
    cfg = config or ObjWriteConfig()
    log.info('Saving mesh to file <%s>.', filepath)
    textured = mesh.has_tcoords()
    degenerate = mesh.degenerate_mask()
    try:
        with open(filepath, 'w') as f:
            f.write(f"mtllib {cfg.mtl_name}\n")
            for p in mesh.vertices:
                f.write(f"v {_fmt(p, cfg.float_format)}\n")
            for t in mesh.tcoords:
                f.write(f"vt {_fmt(t, cfg.float_format)}\n")
            current = None
            for i in range(mesh.n_faces):
                if degenerate[i]:
                    continue
                image_id = int(mesh.image_ids[i])
                if image_id != current:
                    f.write(f"usemtl {image_id}\n")
                    current = image_id
                a, b, c = (int(v) + 1 for v in mesh.faces[i])
                if textured:
                    ta, tb, tc = (int(v) + 1 for v in mesh.tfaces[i])
                    f.write(f"f {a}/{ta}/ {b}/{tb}/ {c}/{tc}/\n")
                else:
                    f.write(f"f {a} {b} {c}\n")
    except OSError as e:
        raise MeshIOError(f"Unable to save mesh to <{filepath}>.") from e


# ---------------------------------------------------------------------------
# PLY
# ---------------------------------------------------------------------------

def _read_ply_header(lines: List[str], filepath) -> Tuple[int, int, int]:
    """Return (n_vertices, n_faces, index of first body line)."""
    nvert = -1
    nface = -1
    body = len(lines)
    for i, line in enumerate(lines):
        parts = line.split()
        if i == 0 and line.strip() != 'ply':
            raise MeshFormatError(f"{filepath}: missing 'ply' magic line")
        if parts[:1] == ['format'] and len(parts) > 1 and parts[1] != 'ascii':
            raise MeshFormatError(f"{filepath}: only ASCII PLY is supported, got {parts[1]!r}")
        if parts[:2] == ['element', 'vertex'] and len(parts) > 2:
            nvert = int(parts[2])
        elif parts[:2] == ['element', 'face'] and len(parts) > 2:
            nface = int(parts[2])
        elif line.strip() == 'end_header':
            body = i + 1
            break
    if nvert < 0 or nface < 0:
        raise MeshFormatError(f"{filepath}: unknown PLY format.")
    return nvert, nface, body


def load_ply(filepath: PathLike) -> Mesh:
    """Read an ASCII PLY triangle mesh.

    The header must declare both ``element vertex`` and ``element face``
    counts before ``end_header``. Only the first three vertex properties
    (x, y, z) are used. Every face record must be ``3 a b c``.

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist
    MeshFormatError
        Missing counts, non-ASCII format or truncated/malformed body
    UnsupportedFaceError
        A face record that is not a triangle
    """
    with open(filepath, 'r') as f:
        lines = [line.rstrip('\n') for line in f]
    try:
        nvert, nface, body = _read_ply_header(lines, filepath)
    except ValueError as e:
        if isinstance(e, MeshFormatError):
            raise
        raise MeshFormatError(f"{filepath}: malformed PLY header") from e

    records = [line.split() for line in lines[body:] if line.strip()]
    if len(records) < nvert + nface:
        raise MeshFormatError(
            f"{filepath}: expected {nvert} vertices and {nface} faces, file has {len(records)} records")

    try:
        verts = [(float(r[0]), float(r[1]), float(r[2])) for r in records[:nvert]]
    except (IndexError, ValueError) as e:
        raise MeshFormatError(f"{filepath}: malformed vertex record") from e

    faces = []
    for r in records[nvert:nvert + nface]:
        try:
            n = int(r[0])
        except (IndexError, ValueError) as e:
            raise MeshFormatError(f"{filepath}: malformed face record {r!r}") from e
        if n != 3:
            raise UnsupportedFaceError("Only triangles are supported in PLY files.")
        try:
            faces.append((int(r[1]), int(r[2]), int(r[3])))
        except (IndexError, ValueError) as e:
            raise MeshFormatError(f"{filepath}: malformed face record {r!r}") from e

    mesh = Mesh(verts, faces)
    log.debug('ply: read %d vertices, %d faces from %s', mesh.n_vertices, mesh.n_faces, filepath)
    return mesh


def save_as_ply(mesh: Mesh, filepath: PathLike, config: Optional[PlyWriteConfig] = None) -> None:
    """Write an ASCII PLY file with only valid, non-degenerate faces."""
    cfg = config or PlyWriteConfig()
    log.info('Saving mesh to file <%s>.', filepath)
    degenerate = mesh.degenerate_mask()
    good = mesh.good_mask()
    n_valid = int(np.count_nonzero(~degenerate & good))
    try:
        with open(filepath, 'w') as f:
            f.write("ply\n")
            f.write("format ascii 1.0\n")
            f.write(f"comment {cfg.comment}\n")
            f.write(f"element vertex {mesh.n_vertices}\n")
            f.write("property float x\n")
            f.write("property float y\n")
            f.write("property float z\n")
            f.write(f"element face {n_valid}\n")
            f.write("property list uchar int vertex_indices\n")
            f.write("end_header\n")
            for p in mesh.vertices:
                f.write(f"{_fmt(p, cfg.float_format)}\n")
            for i in range(mesh.n_faces):
                if degenerate[i]:
                    continue
                if not good[i]:
                    log.warning('Invalid vertex index in face %d.', i)
                    continue
                a, b, c = (int(v) for v in mesh.faces[i])
                f.write(f"3 {a} {b} {c}\n")
    except OSError as e:
        raise MeshIOError(f"Unable to save mesh to <{filepath}>.") from e


# ---------------------------------------------------------------------------
# VTK (visualization only)
# ---------------------------------------------------------------------------

def write_vtk(filepath: PathLike, mesh: Mesh,
              cell_data: Optional[Dict[str, np.ndarray]] = None,
              title: str = "meshop mesh") -> None:
    """Write a mesh to legacy VTK format (ASCII) for ParaView/VisIt.

    Degenerate and invalid faces are not exported; `cell_data` arrays are
    given per input face and filtered the same way.

    Examples
    --------
    >>> write_vtk('output.vtk', mesh)
    >>> write_vtk('tags.vtk', mesh, cell_data={'image_id': mesh.image_ids})
    """
    keep = mesh.good_mask() & ~mesh.degenerate_mask()
    tris = mesh.faces[keep]
    n_pts = mesh.n_vertices
    n_tri = int(tris.shape[0])
    try:
        with open(filepath, 'w') as f:
            f.write("# vtk DataFile Version 2.0\n")
            f.write(f"{title}\n")
            f.write("ASCII\n")
            f.write("DATASET UNSTRUCTURED_GRID\n")
            f.write(f"POINTS {n_pts} double\n")
            for pt in mesh.vertices:
                f.write(f"{pt[0]:.16e} {pt[1]:.16e} {pt[2]:.16e}\n")
            f.write(f"\nCELLS {n_tri} {n_tri * 4}\n")
            for tri in tris:
                f.write(f"3 {tri[0]} {tri[1]} {tri[2]}\n")
            f.write(f"\nCELL_TYPES {n_tri}\n")
            for _ in range(n_tri):
                f.write("5\n")
            if cell_data:
                f.write(f"\nCELL_DATA {n_tri}\n")
                for name, data in cell_data.items():
                    data = np.asarray(data)
                    if data.shape[:1] != (mesh.n_faces,):
                        warnings.warn(f"Skipping cell_data['{name}'] with shape {data.shape}")
                        continue
                    data = data[keep]
                    if data.ndim == 1:
                        f.write(f"SCALARS {name} double 1\n")
                        f.write("LOOKUP_TABLE default\n")
                        for val in data:
                            f.write(f"{float(val):.16e}\n")
                    elif data.ndim == 2 and data.shape[1] == 3:
                        f.write(f"VECTORS {name} double\n")
                        for vec in data:
                            f.write(f"{vec[0]:.16e} {vec[1]:.16e} {vec[2]:.16e}\n")
                    else:
                        warnings.warn(f"Skipping cell_data['{name}'] with unsupported shape {data.shape}")
    except OSError as e:
        raise MeshIOError(f"Unable to save mesh to <{filepath}>.") from e


# ---------------------------------------------------------------------------
# Dispatch and conversions
# ---------------------------------------------------------------------------

_READERS = {'.obj': load_obj, '.ply': load_ply}


def load_mesh(filepath: PathLike) -> Mesh:
    """Read a mesh, choosing the reader from the file extension."""
    ext = os.path.splitext(str(filepath))[1].lower()
    reader = _READERS.get(ext)
    if reader is None:
        raise MeshIOError(f"Unsupported mesh format {ext!r} for {filepath}")
    return reader(filepath)


def save_mesh(mesh: Mesh, filepath: PathLike) -> None:
    """Write a mesh, choosing the writer from the file extension."""
    ext = os.path.splitext(str(filepath))[1].lower()
    if ext == '.obj':
        save_as_obj(mesh, filepath)
    elif ext == '.ply':
        save_as_ply(mesh, filepath)
    elif ext == '.vtk':
        write_vtk(filepath, mesh)
    else:
        raise MeshIOError(f"Unsupported mesh format {ext!r} for {filepath}")


def mesh_arrays(mesh: Mesh) -> Tuple[np.ndarray, np.ndarray]:
    """Return plain ``(points, triangles)`` arrays (copies)."""
    return mesh.vertices.copy(), mesh.faces.copy()


def as_mesh(points, triangles) -> Mesh:
    """Wrap plain ``(points, triangles)`` arrays in a textureless Mesh.

    2D points get z=0.
    """
    pts = np.asarray(points, dtype=np.float64)
    if pts.ndim == 2 and pts.shape[1] == 2:
        pts = np.column_stack([pts, np.zeros(len(pts))])
    return Mesh(pts, triangles)
