"""Flat triangle primitive using the Moller-Trumbore intersection test.

Edge vectors and the face normal are precomputed on the host when the
triangle is registered; the kernel only reads them.
"""

from dataclasses import dataclass, field

import numpy as np
import taichi as ti

from src.whitted.core.linalg import (
    Vector4,
    cross,
    cross4,
    dot4,
    make_point,
    normalize,
    vec4,
)
from src.whitted.core.ray import HitSlots, Ray, miss_slots

# Determinants below this mean the ray is parallel to the triangle
DETERMINANT_EPSILON = 1e-4


@dataclass
class Triangle:
    """A triangle with vertices p1, p2, p3 given as (x, y, z) tuples.

    Attributes:
        e1: p2 - p1.
        e2: p3 - p1.
        normal: normalize(cross(e2, e1)).
    """

    p1: tuple[float, float, float]
    p2: tuple[float, float, float]
    p3: tuple[float, float, float]
    e1: Vector4 = field(init=False, repr=False)
    e2: Vector4 = field(init=False, repr=False)
    normal: Vector4 = field(init=False, repr=False)

    def __post_init__(self) -> None:
        v1, v2, v3 = (make_point(*p) for p in (self.p1, self.p2, self.p3))
        self.e1 = v2 - v1
        self.e2 = v3 - v1
        face = cross(self.e2, self.e1)
        if float(np.linalg.norm(face[:3])) == 0.0:
            raise ValueError(f"degenerate triangle {self.p1}, {self.p2}, {self.p3}")
        self.normal = normalize(face)

    def vertex(self) -> Vector4:
        return make_point(*self.p1)


@ti.func
def intersect_triangle(ray: Ray, p1: vec4, e1: vec4, e2: vec4) -> HitSlots:
    """Moller-Trumbore test against a single triangle.

    Args:
        ray: Ray in object space.
        p1: First vertex.
        e1: Edge p2 - p1.
        e2: Edge p3 - p1.

    Returns:
        Hit slots with the distance in slot 0 on a hit.
    """
    ts = miss_slots()

    dir_cross_e2 = cross4(ray.direction, e2)
    det = dot4(e1, dir_cross_e2)
    if ti.abs(det) >= DETERMINANT_EPSILON:
        f = 1.0 / det
        p1_to_origin = ray.origin - p1
        u = f * dot4(p1_to_origin, dir_cross_e2)
        if u >= 0.0 and u <= 1.0:
            origin_cross_e1 = cross4(p1_to_origin, e1)
            v = f * dot4(ray.direction, origin_cross_e1)
            if v >= 0.0 and u + v <= 1.0:
                ts[0] = f * dot4(e2, origin_cross_e1)
    return ts
