"""Geometry primitives: axis-aligned extents and edge measurements."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

__all__ = [
    'Extents3', 'edge_length', 'midpoint', 'normalize_edge',
]


@dataclass(frozen=True)
class Extents3:
    """Axis-aligned box given by its lower (`ll`) and upper (`ur`) corners."""
    ll: tuple
    ur: tuple

    def __post_init__(self):
        ll = tuple(float(v) for v in self.ll)
        ur = tuple(float(v) for v in self.ur)
        if len(ll) != 3 or len(ur) != 3:
            raise ValueError(f"extents need 3D corners, got ll={ll} ur={ur}")
        if any(lo > hi for lo, hi in zip(ll, ur)):
            raise ValueError(f"lower corner {ll} exceeds upper corner {ur}")
        object.__setattr__(self, 'll', ll)
        object.__setattr__(self, 'ur', ur)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> 'Extents3':
        """Build from ``(xmin, ymin, zmin, xmax, ymax, zmax)``."""
        vals = [float(v) for v in values]
        if len(vals) != 6:
            raise ValueError(f"expected 6 values for extents, got {len(vals)}")
        return cls(tuple(vals[:3]), tuple(vals[3:]))

    @classmethod
    def of_points(cls, points) -> 'Extents3':
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if pts.shape[0] == 0:
            raise ValueError("cannot compute extents of an empty point set")
        return cls(tuple(pts.min(axis=0)), tuple(pts.max(axis=0)))

    def size(self) -> np.ndarray:
        return np.asarray(self.ur) - np.asarray(self.ll)

    def contains(self, points) -> np.ndarray:
        """Boolean mask of points inside the box (bounds inclusive)."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        lo = np.asarray(self.ll)
        hi = np.asarray(self.ur)
        return np.all((pts >= lo) & (pts <= hi), axis=1)


def normalize_edge(a: int, b: int) -> tuple:
    """Canonical (min, max) key of an undirected edge."""
    a = int(a); b = int(b)
    return (a, b) if a < b else (b, a)


def edge_length(vertices, a: int, b: int) -> float:
    """Euclidean length of edge (a, b), computed in double precision."""
    return math.dist(vertices[a], vertices[b])


def midpoint(p, q) -> tuple:
    """Component-wise midpoint of two points of any dimension."""
    return tuple((float(u) + float(v)) * 0.5 for u, v in zip(p, q))
