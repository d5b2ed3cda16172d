"""Geometry primitives and bonded-neighbour angle tests."""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .structure import Structure


class IdealGeometry(IntEnum):
    Spherical = 0
    Terminal = 1
    Linear = 2
    Trigonal = 3
    Tetrahedral = 4
    Octahedral = 6
    Unknown = 8


IDEAL_ANGLES: dict[IdealGeometry, float] = {
    IdealGeometry.Linear: np.radians(180.0),
    IdealGeometry.Trigonal: np.radians(120.0),
    IdealGeometry.Tetrahedral: np.radians(109.4721),
    IdealGeometry.Octahedral: np.radians(90.0),
}

DEFAULT_IDEAL_ANGLE = np.radians(120.0)


def assign_geometry(total_coordination: int) -> IdealGeometry:
    """Map steric number (bonds + lone pairs) to an ideal geometry."""
    if 0 <= total_coordination <= 4:
        return IdealGeometry(total_coordination)
    return IdealGeometry.Unknown


def ideal_angle(geometry: int) -> float:
    """Ideal bond angle (radians), 120 degrees when the geometry has none."""
    try:
        return IDEAL_ANGLES[IdealGeometry(geometry)]
    except (KeyError, ValueError):
        return DEFAULT_IDEAL_ANGLE


def unit(v: np.ndarray) -> np.ndarray:
    """Return unit vector, or [1,0,0] for zero-length input."""
    n = np.linalg.norm(v)
    return v / n if n > 1e-6 else np.array([1.0, 0.0, 0.0])


def angle_between(u: np.ndarray, v: np.ndarray) -> float:
    """Angle between two vectors in radians (0 for a zero-length vector)."""
    nu = np.linalg.norm(u)
    nv = np.linalg.norm(v)
    if nu < 1e-10 or nv < 1e-10:
        return 0.0
    c = np.clip(np.dot(u, v) / (nu * nv), -1.0, 1.0)
    return float(np.arccos(c))


def angle_deg(u: np.ndarray, v: np.ndarray) -> float:
    """Angle between two vectors in degrees."""
    return float(np.degrees(angle_between(u, v)))


def plane_normal(points: np.ndarray) -> np.ndarray:
    """Plane normal via SVD. Robust to noise."""
    pts = points - points.mean(axis=0)
    _, _, vh = np.linalg.svd(pts, full_matrices=False)
    normal = vh[-1]
    n = np.linalg.norm(normal)
    return normal / n if n > 1e-12 else normal


def point_plane_distance(point: np.ndarray, origin: np.ndarray, normal: np.ndarray) -> float:
    """Unsigned distance from point to plane defined by origin and normal."""
    return float(abs(np.dot(point - origin, unit(normal))))


def in_plane_offset(point: np.ndarray, origin: np.ndarray, normal: np.ndarray) -> float:
    """Length of the component of ``point - origin`` lying in the plane."""
    v = point - origin
    n = unit(normal)
    return float(np.linalg.norm(v - np.dot(v, n) * n))


def calc_angles(structure: Structure, center: int, other: int) -> list[float]:
    """Angles x-center-other (radians) for every heavy atom x bonded to center."""
    pos = structure.positions
    d1 = pos[other] - pos[center]
    angles = []
    for x in structure.neighbors(center):
        if structure.number(x) != 1:
            angles.append(angle_between(d1, pos[x] - pos[center]))
    return angles


def calc_plane_angle(structure: Structure, center: int, other: int) -> float | None:
    """Out-of-plane angle (radians) of ``other`` relative to the plane at ``center``.

    The plane is spanned by two heavy neighbours of ``center``; with only
    one heavy neighbour, that neighbour's other heavy neighbours are used.
    Returns ``None`` when no plane can be defined.
    """
    pos = structure.positions
    vectors: list[np.ndarray] = []
    first = None
    for x in structure.neighbors(center):
        if len(vectors) > 1:
            break
        if structure.number(x) != 1:
            first = x
            vectors.append(pos[x] - pos[center])

    if len(vectors) == 1 and first is not None:
        for x in structure.neighbors(first):
            if len(vectors) > 1:
                break
            if structure.number(x) != 1 and x != center:
                vectors.append(pos[x] - pos[center])

    if len(vectors) != 2:
        return None

    cp = np.cross(vectors[0], vectors[1])
    return abs(np.pi / 2 - angle_between(cp, pos[other] - pos[center]))
