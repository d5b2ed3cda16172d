"""Uniform-grid spatial index for radius queries over 3D points."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Callable, Optional

import numpy as np

if TYPE_CHECKING:
    from .cache import StructureCache
    from .structure import Structure

logger = logging.getLogger(__name__)

DEFAULT_CELL_SIZE = 4.0

WithinCallback = Callable[[int, float], Optional[bool]]


class SpatialHash:
    """Bucket points into cubic cells; answer "everything within r of p".

    Points are sorted by cell once at construction (CSR over occupied
    cells), so a query only touches the cells overlapping the query cube.

    Parameters
    ----------
    points : array-like, shape (n, 3)
        Coordinates to index. Copied; later changes to the input are not seen.
    cell_size : float
        Edge length of a grid cell in Angstrom.
    """

    def __init__(self, points: np.ndarray, cell_size: float = DEFAULT_CELL_SIZE) -> None:
        pts = np.array(points, dtype=np.float64).reshape(-1, 3)
        if len(pts) == 0:
            raise ValueError("Cannot build a spatial hash over zero points")
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")

        self._points = pts
        self._points.setflags(write=False)
        self._cell = float(cell_size)

        # points without finite coordinates are never returned by a query
        finite = np.isfinite(pts).all(axis=1)
        indexed = np.flatnonzero(finite)
        if len(indexed) < len(pts):
            logger.warning(
                "SpatialHash: %d point(s) with non-finite coordinates not indexed", len(pts) - len(indexed)
            )
        if len(indexed) == 0:
            self._origin = np.zeros(3)
            self._dims = np.ones(3, dtype=np.int64)
            keys = np.empty(0, dtype=np.int64)
        else:
            self._origin = pts[indexed].min(axis=0)
            cells = np.floor((pts[indexed] - self._origin) / self._cell).astype(np.int64)
            self._dims = cells.max(axis=0) + 1
            keys = self._linear(cells)

        perm = np.argsort(keys, kind="stable")
        sorted_keys = keys[perm]
        unique_keys, starts, counts = np.unique(sorted_keys, return_index=True, return_counts=True)

        self._order = indexed[perm]
        self._buckets: dict[int, tuple[int, int]] = {
            int(k): (int(s), int(s + c)) for k, s, c in zip(unique_keys, starts, counts)
        }
        logger.debug(
            "SpatialHash: %d points in %d occupied cells (grid %s, cell %.2f)",
            len(pts),
            len(self._buckets),
            tuple(int(d) for d in self._dims),
            self._cell,
        )

    def __len__(self) -> int:
        return len(self._points)

    @property
    def points(self) -> np.ndarray:
        return self._points

    def _linear(self, cells: np.ndarray) -> np.ndarray:
        ny, nz = int(self._dims[1]), int(self._dims[2])
        return (cells[..., 0] * ny + cells[..., 1]) * nz + cells[..., 2]

    def _candidates(self, center: np.ndarray, radius: float) -> np.ndarray:
        lo = np.floor((center - radius - self._origin) / self._cell).astype(np.int64)
        hi = np.floor((center + radius - self._origin) / self._cell).astype(np.int64)
        lo = np.maximum(lo, 0)
        hi = np.minimum(hi, self._dims - 1)
        if np.any(lo > hi):
            return np.empty(0, dtype=np.int64)

        chunks = []
        ny, nz = int(self._dims[1]), int(self._dims[2])
        for cx in range(lo[0], hi[0] + 1):
            for cy in range(lo[1], hi[1] + 1):
                for cz in range(lo[2], hi[2] + 1):
                    bucket = self._buckets.get((cx * ny + cy) * nz + cz)
                    if bucket is not None:
                        chunks.append(self._order[bucket[0]:bucket[1]])
        if not chunks:
            return np.empty(0, dtype=np.int64)
        return np.concatenate(chunks)

    def within(self, point, radius: float) -> tuple[np.ndarray, np.ndarray]:
        """Indices (ascending) and squared distances of points within ``radius``."""
        center = np.asarray(point, dtype=np.float64).reshape(3)
        if not radius >= 0 or not np.all(np.isfinite(center)):
            return np.empty(0, dtype=np.int64), np.empty(0, dtype=np.float64)

        idx = self._candidates(center, radius)
        if len(idx) == 0:
            return idx, np.empty(0, dtype=np.float64)
        idx = np.sort(idx)
        d = self._points[idx] - center
        d_sq = np.einsum("ij,ij->i", d, d)
        mask = d_sq <= radius * radius
        return idx[mask], d_sq[mask]

    def each_within(self, x: float, y: float, z: float, radius: float, callback: WithinCallback) -> None:
        """Call ``callback(index, squared_distance)`` for every point within ``radius``.

        Points are visited in ascending index order. A callback returning
        ``True`` stops the query.
        """
        idx, d_sq = self.within((x, y, z), radius)
        for i, dsq in zip(idx.tolist(), d_sq.tolist()):
            if callback(i, dsq) is True:
                break


def suggested_cell_size(radius: float) -> float:
    """Cell size that keeps a query of ``radius`` inside a 3x3x3 block."""
    return max(1.0, math.ceil(radius))


def spatial_lookup(structure: Structure, cache: StructureCache | None = None) -> SpatialHash:
    """Spatial hash over all atom positions of ``structure``."""
    if cache is None:
        return SpatialHash(structure.positions)
    return cache.compute_or_get(structure, "spatial_hash", lambda s: SpatialHash(s.positions))
