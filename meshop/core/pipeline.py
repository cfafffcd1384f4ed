"""Pipeline driver chaining clipping, non-manifold removal and refinement.

The stages are independent; `run_pipeline` applies those enabled in a
`PipelineConfig` in a fixed order (clip, non-manifold removal, refine) and
logs a summary after each.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .clipping import clip_to_box
from .config import PipelineConfig
from .conformity import remove_non_manifold_edges
from .diagnostics import mesh_summary
from .logging_utils import get_logger
from .mesh import Mesh
from .refinement import RefineStats, refine

logger = get_logger('meshop.pipeline')

__all__ = ['run_pipeline']


def run_pipeline(mesh: Mesh, config: PipelineConfig,
                 history: Optional[List[Tuple[str, Dict]]] = None,
                 stats: Optional[RefineStats] = None) -> Mesh:
    """Apply the configured stages to a copy of `mesh` and return the result.

    If `history` is given, a ``(stage, summary)`` pair is appended for the
    input and after each stage. Refinement counters accumulate into `stats`
    when one is passed; `config` is never modified.
    """
    def record(stage: str, m: Mesh) -> None:
        summary = mesh_summary(m)
        logger.info('%s: faces=%d vertices=%d non_manifold_edges=%d degenerate=%d',
                    stage, summary['faces'], summary['vertices'],
                    summary['non_manifold_edges'], summary['degenerate_faces'])
        if history is not None:
            history.append((stage, summary))

    record('input', mesh)
    out = mesh
    if config.clip is not None:
        out = clip_to_box(out, config.clip.extents)
        record('clip', out)
    if config.remove_non_manifold:
        out = remove_non_manifold_edges(out)
        record('non_manifold', out)
    if config.refine is not None:
        out = refine(out, config.refine.max_face_count, stats=stats)
        record('refine', out)
    if out is mesh:
        out = mesh.copy()
    return out
