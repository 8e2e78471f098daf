"""Affine helpers shared by the edit, snap and merge modules.

Shapes map their local coordinates into world space through a 2x3 affine
matrix ``(a, b, c, d, e, f)`` and a local ``offset`` subtracted from every
point first::

    world = M @ (local - offset) + (e, f)

Every other module reasons in world coordinates only and goes through
``local_to_world`` / ``world_to_local`` here.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
DET_EPS = 1e-12
SAME_POINT_EPS = 1e-3


@dataclass
class Affine:
    """Column-major 2x3 affine matrix, same ordering as canvas transforms."""

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def identity(cls) -> "Affine":
        return cls()

    @classmethod
    def translation(cls, tx: float, ty: float) -> "Affine":
        return cls(e=float(tx), f=float(ty))

    @classmethod
    def from_values(cls, values: Sequence[float]) -> "Affine":
        if len(values) != 6:
            raise ValueError("Affine matrix expects exactly six values")
        return cls(*(float(v) for v in values))

    @classmethod
    def compose(
        cls,
        *,
        translate: Point = (0.0, 0.0),
        rotate_deg: float = 0.0,
        scale: Point = (1.0, 1.0),
    ) -> "Affine":
        """Build ``T @ R @ S`` the way canvas objects compose left/top, angle and scale."""
        theta = math.radians(rotate_deg)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        sx, sy = float(scale[0]), float(scale[1])
        return cls(
            a=cos_t * sx,
            b=sin_t * sx,
            c=-sin_t * sy,
            d=cos_t * sy,
            e=float(translate[0]),
            f=float(translate[1]),
        )

    def values(self) -> Tuple[float, float, float, float, float, float]:
        return (self.a, self.b, self.c, self.d, self.e, self.f)

    def as_matrix(self) -> np.ndarray:
        """Return the homogeneous 3x3 form."""
        return np.array(
            [[self.a, self.c, self.e], [self.b, self.d, self.f], [0.0, 0.0, 1.0]],
            dtype=float,
        )

    def determinant(self) -> float:
        return self.a * self.d - self.b * self.c

    def is_degenerate(self) -> bool:
        return abs(self.determinant()) < DET_EPS

    def translate_by(self, dx: float, dy: float) -> None:
        self.e += float(dx)
        self.f += float(dy)

    def copy(self) -> "Affine":
        return Affine(*self.values())


def transform(x: float, y: float, matrix: Affine) -> Point:
    """Apply ``matrix`` to a local point."""
    return (
        matrix.a * x + matrix.c * y + matrix.e,
        matrix.b * x + matrix.d * y + matrix.f,
    )


def inverse_transform(x: float, y: float, matrix: Affine) -> Point:
    """Invert ``matrix`` for a single point.

    A near-singular matrix falls back to identity for this query and returns
    the input unchanged.
    """
    det = matrix.determinant()
    if abs(det) < DET_EPS:
        logger.debug("degenerate transform (det=%g); using identity fallback", det)
        return (float(x), float(y))
    inv = 1.0 / det
    px = x - matrix.e
    py = y - matrix.f
    return (
        (matrix.d * px - matrix.c * py) * inv,
        (-matrix.b * px + matrix.a * py) * inv,
    )


def local_to_world(matrix: Affine, offset: Point, local: Sequence[float]) -> Point:
    return transform(float(local[0]) - offset[0], float(local[1]) - offset[1], matrix)


def world_to_local(matrix: Affine, offset: Point, world: Sequence[float]) -> Point:
    lx, ly = inverse_transform(float(world[0]), float(world[1]), matrix)
    return (lx + offset[0], ly + offset[1])


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    return math.hypot(float(a[0]) - float(b[0]), float(a[1]) - float(b[1]))


def is_same_point(a: Sequence[float], b: Sequence[float], eps: float = SAME_POINT_EPS) -> bool:
    return distance(a, b) <= eps


def bbox_center(points: Sequence[Sequence[float]]) -> Point:
    """Centre of the axis-aligned bounding box of ``points``."""
    if len(points) == 0:
        return (0.0, 0.0)
    arr = np.asarray(points, dtype=float)
    lo = arr.min(axis=0)
    hi = arr.max(axis=0)
    mid = (lo + hi) / 2.0
    return (float(mid[0]), float(mid[1]))


__all__ = [
    "Affine",
    "Point",
    "DET_EPS",
    "SAME_POINT_EPS",
    "transform",
    "inverse_transform",
    "local_to_world",
    "world_to_local",
    "distance",
    "is_same_point",
    "bbox_center",
]
