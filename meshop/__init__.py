"""Public package API for the meshop triangle mesh toolkit.

This facade provides a flat import surface on top of the implementation
modules in ``meshop.core``. Visualization (matplotlib) is loaded lazily on
first use to keep ``import meshop`` light.

Example
-------
    from meshop import Mesh, Extents3, clip_to_box, remove_non_manifold_edges, refine

The deeper modules (``meshop.core.*``) are considered internal and may
change; rely on this layer for public symbols.
"""
from importlib import import_module as _imp
import logging as _logging

try:
    from importlib.metadata import version as _pkg_version, PackageNotFoundError as _NotFound
    __version__ = _pkg_version("meshop")
except _NotFound:  # pragma: no cover - editable / unknown state
    __version__ = "0.0.0+dev"

_logging.getLogger(__name__).addHandler(_logging.NullHandler())

_mesh = _imp('meshop.core.mesh')
_geom = _imp('meshop.core.geometry')
_clip = _imp('meshop.core.clipping')
_conf = _imp('meshop.core.conformity')
_ref = _imp('meshop.core.refinement')
_io = _imp('meshop.core.io')
_config = _imp('meshop.core.config')
_diag = _imp('meshop.core.diagnostics')
_pc = _imp('meshop.core.pointcloud')
_pipe = _imp('meshop.core.pipeline')
_log = _imp('meshop.core.logging_utils')

# Data model
Mesh = _mesh.Mesh
Face = _mesh.Face
Extents3 = _geom.Extents3
PointCloud = _pc.PointCloud

# Core operations
clip_to_box = _clip.clip_to_box
remove_non_manifold_edges = _conf.remove_non_manifold_edges
refine = _ref.refine
RefineStats = _ref.RefineStats

# Driver and configuration
run_pipeline = _pipe.run_pipeline
PipelineConfig = _config.PipelineConfig
ClipConfig = _config.ClipConfig
RefineConfig = _config.RefineConfig
ObjWriteConfig = _config.ObjWriteConfig
PlyWriteConfig = _config.PlyWriteConfig

# I/O
load_obj = _io.load_obj
save_as_obj = _io.save_as_obj
load_ply = _io.load_ply
save_as_ply = _io.save_as_ply
write_vtk = _io.write_vtk
load_mesh = _io.load_mesh
save_mesh = _io.save_mesh
MeshIOError = _io.MeshIOError
MeshFormatError = _io.MeshFormatError
UnsupportedFaceError = _io.UnsupportedFaceError

mesh_summary = _diag.mesh_summary
get_logger = _log.get_logger
configure_logging = _log.configure_logging


def plot_mesh(*args, **kwargs):
    """Render a mesh to an image (see ``meshop.core.visualization.plot_mesh``)."""
    return _imp('meshop.core.visualization').plot_mesh(*args, **kwargs)


# Namespace submodules for exploratory users
geometry = _geom
clipping = _clip
conformity = _conf
refinement = _ref
io = _io
diagnostics = _diag

__all__ = [
    '__version__',
    # data model
    'Mesh', 'Face', 'Extents3', 'PointCloud',
    # operations
    'clip_to_box', 'remove_non_manifold_edges', 'refine', 'RefineStats',
    # driver / config
    'run_pipeline', 'PipelineConfig', 'ClipConfig', 'RefineConfig',
    'ObjWriteConfig', 'PlyWriteConfig',
    # io
    'load_obj', 'save_as_obj', 'load_ply', 'save_as_ply', 'write_vtk',
    'load_mesh', 'save_mesh', 'MeshIOError', 'MeshFormatError', 'UnsupportedFaceError',
    # misc
    'mesh_summary', 'plot_mesh', 'get_logger', 'configure_logging',
    # submodules
    'geometry', 'clipping', 'conformity', 'refinement', 'io', 'diagnostics',
]
