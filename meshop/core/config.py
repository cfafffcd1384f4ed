"""Configuration objects for meshop operations and the pipeline driver."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Any, Dict

from .constants import PLY_COMMENT, FLOAT_FORMAT
from .geometry import Extents3


@dataclass
class ObjWriteConfig:
    mtl_name: str = 'mesh.mtl'
    float_format: str = FLOAT_FORMAT


@dataclass
class PlyWriteConfig:
    comment: str = PLY_COMMENT
    float_format: str = FLOAT_FORMAT


@dataclass
class ClipConfig:
    extents: Extents3


@dataclass
class RefineConfig:
    max_face_count: int


@dataclass
class PipelineConfig:
    """Unified configuration for `run_pipeline`.

    Attributes
    ----------
    clip : ClipConfig, optional
        Box clipping stage; skipped when None.
    remove_non_manifold : bool
        Run non-manifold edge removal after clipping.
    refine : RefineConfig, optional
        Adaptive refinement stage; skipped when None.
    extras : dict
        Free-form dictionary for caller bookkeeping.
    """
    clip: Optional[ClipConfig] = None
    remove_non_manifold: bool = False
    refine: Optional[RefineConfig] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_options(cls, *, box=None, non_manifold: bool = False,
                     max_faces: Optional[int] = None) -> 'PipelineConfig':
        """Build a config from flat options (as parsed by a command line)."""
        clip = None
        if box is not None:
            clip = ClipConfig(Extents3.from_sequence(box))
        refine = RefineConfig(int(max_faces)) if max_faces is not None else None
        return cls(clip=clip, remove_non_manifold=bool(non_manifold), refine=refine)


__all__ = [
    'ObjWriteConfig', 'PlyWriteConfig', 'ClipConfig', 'RefineConfig', 'PipelineConfig',
]
