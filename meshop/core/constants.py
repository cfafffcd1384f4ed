"""Small shared constants.

Kept in one place so the I/O layer and the algorithms agree on defaults
without scattering literals.
"""
from __future__ import annotations

# Surface tag carried by faces that were never assigned one
DEFAULT_IMAGE_ID: int = 0

# Texture index stored on corners of a textureless mesh
NO_TCOORD: int = 0

PLY_COMMENT: str = 'generated by meshop'
FLOAT_FORMAT: str = '.16e'

__all__ = [
    'DEFAULT_IMAGE_ID',
    'NO_TCOORD',
    'PLY_COMMENT',
    'FLOAT_FORMAT',
]
