"""Point clouds: append-only sets of 3D points (usually surface samples).

`PointCloud` keeps its bounding box up to date as points are added and can
estimate the sampling density from nearest-neighbour distances.
"""
from __future__ import annotations

import math
import os
from typing import Iterable, Iterator, List, Optional, Union

import numpy as np
from scipy.spatial import cKDTree

from .geometry import Extents3
from .logging_utils import get_logger

log = get_logger('meshop.pointcloud')

__all__ = ['PointCloud']


class PointCloud:
    """Sequence of 3D points with extents maintenance.

    Points can be appended or inserted but never removed individually;
    `clear` resets the cloud.
    """

    def __init__(self, points: Optional[Iterable] = None):
        self._points: List[np.ndarray] = []
        self._lower: Optional[np.ndarray] = None
        self._upper: Optional[np.ndarray] = None
        if points is not None:
            self.extend(points)

    # ---- sequence protocol ----------------------------------------------
    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._points)

    def __getitem__(self, i):
        return self._points[i]

    def __repr__(self) -> str:
        return f"PointCloud({len(self)} points)"

    @property
    def points(self) -> np.ndarray:
        """All points as an (N, 3) float64 array."""
        if not self._points:
            return np.empty((0, 3), dtype=np.float64)
        return np.vstack(self._points)

    # ---- modifiers ------------------------------------------------------
    def _update_extents(self, p: np.ndarray) -> None:
        if self._lower is None:
            self._lower = p.copy()
            self._upper = p.copy()
        else:
            np.minimum(self._lower, p, out=self._lower)
            np.maximum(self._upper, p, out=self._upper)

    @staticmethod
    def _as_point(x) -> np.ndarray:
        p = np.asarray(x, dtype=np.float64).reshape(-1)
        if p.shape != (3,):
            raise ValueError(f"point must have 3 coordinates, got {p.shape[0]}")
        return p

    def append(self, x) -> None:
        p = self._as_point(x)
        self._update_extents(p)
        self._points.append(p)

    def insert(self, position: int, x, n: int = 1) -> None:
        """Insert `n` copies of point `x` before `position`."""
        p = self._as_point(x)
        self._update_extents(p)
        self._points[position:position] = [p.copy() for _ in range(n)]

    def extend(self, points: Iterable) -> None:
        for x in points:
            self.append(x)

    def clear(self) -> None:
        self._points = []
        self._lower = None
        self._upper = None

    # ---- extents ----------------------------------------------------------
    @property
    def lower(self) -> np.ndarray:
        """Componentwise lower bound of all points."""
        if self._lower is None:
            raise ValueError("empty point cloud has no extents")
        return self._lower.copy()

    @property
    def upper(self) -> np.ndarray:
        """Componentwise upper bound of all points."""
        if self._upper is None:
            raise ValueError("empty point cloud has no extents")
        return self._upper.copy()

    def extents(self) -> Extents3:
        return Extents3(tuple(self.lower), tuple(self.upper))

    # ---- persistence ------------------------------------------------------
    def dump(self, path: Union[str, os.PathLike]) -> None:
        """Save with one line per point, three whitespace separated values."""
        with open(path, 'w') as f:
            for p in self._points:
                f.write(f"{p[0]:.16e} {p[1]:.16e} {p[2]:.16e}\n")

    def load(self, path: Union[str, os.PathLike]) -> 'PointCloud':
        """Append the points of a file saved with `dump`; returns self."""
        with open(path, 'r') as f:
            for lineno, line in enumerate(f, start=1):
                parts = line.split()
                if not parts:
                    continue
                if len(parts) < 3:
                    raise ValueError(f"{path}: line {lineno}: expected 3 coordinates")
                self.append([float(v) for v in parts[:3]])
        log.debug('pointcloud: loaded %d points from %s', len(self), path)
        return self

    # ---- density ----------------------------------------------------------
    def sampling_delta(self, bulk_threshold: float = 0.5) -> float:
        """Nearest-neighbour distance bound for the bulk of the cloud.

        Returns the smallest distance d such that a `bulk_threshold` fraction
        of the points have their nearest neighbour no farther than d.
        """
        if not 0.0 < bulk_threshold <= 1.0:
            raise ValueError(f"bulk_threshold must be in (0, 1], got {bulk_threshold}")
        if len(self) < 2:
            raise ValueError("sampling delta needs at least two points")
        pts = self.points
        dists, _ = cKDTree(pts).query(pts, k=2)
        nearest = np.sort(dists[:, 1])
        k = max(0, int(math.ceil(bulk_threshold * len(nearest))) - 1)
        return float(nearest[k])
