"""Infinite plane y = 0 in object space."""

from dataclasses import dataclass

import taichi as ti

from src.whitted.core.linalg import vec4, vector
from src.whitted.core.ray import HitSlots, Ray, miss_slots

# Rays with a smaller vertical component are considered parallel
PARALLEL_EPSILON = 1e-4


@dataclass
class Plane:
    """The xz plane, normal +y."""


@ti.func
def intersect_plane(ray: Ray) -> HitSlots:
    ts = miss_slots()
    if ti.abs(ray.direction.y) >= PARALLEL_EPSILON:
        ts[0] = -ray.origin.y / ray.direction.y
    return ts


@ti.func
def normal_at_plane(p: vec4) -> vec4:
    return vector(0.0, 1.0, 0.0)
