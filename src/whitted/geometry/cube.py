"""Axis-aligned cube spanning [-1, 1] on every axis.

Intersection is the slab method: each axis yields an entry/exit pair, the
ray is inside the cube between the largest entry and the smallest exit.
"""

from dataclasses import dataclass

import taichi as ti

from src.whitted.core.linalg import vec4, vector
from src.whitted.core.ray import HitSlots, Ray, miss_slots

# Directions smaller than this are treated as parallel to a slab
AXIS_EPSILON = 1e-4

# Stand-in for infinity when a ray runs parallel to a slab
SLAB_INFINITY = 1.0e30


@dataclass
class Cube:
    """Unit cube centred on the object-space origin."""


@ti.func
def _check_axis(origin: ti.f32, direction: ti.f32):
    tmin_numerator = -1.0 - origin
    tmax_numerator = 1.0 - origin

    tmin = 0.0
    tmax = 0.0
    if ti.abs(direction) >= AXIS_EPSILON:
        tmin = tmin_numerator / direction
        tmax = tmax_numerator / direction
    else:
        tmin = tmin_numerator * SLAB_INFINITY
        tmax = tmax_numerator * SLAB_INFINITY

    if tmin > tmax:
        temp = tmin
        tmin = tmax
        tmax = temp
    return tmin, tmax


@ti.func
def intersect_cube(ray: Ray) -> HitSlots:
    xtmin, xtmax = _check_axis(ray.origin.x, ray.direction.x)
    ytmin, ytmax = _check_axis(ray.origin.y, ray.direction.y)
    ztmin, ztmax = _check_axis(ray.origin.z, ray.direction.z)

    tmin = ti.max(ti.max(xtmin, ytmin), ztmin)
    tmax = ti.min(ti.min(xtmax, ytmax), ztmax)

    ts = miss_slots()
    if tmin <= tmax:
        ts[0] = tmin
        ts[1] = tmax
    return ts


@ti.func
def normal_at_cube(p: vec4) -> vec4:
    """Normal of the face whose axis has the largest absolute coordinate."""
    ax = ti.abs(p.x)
    ay = ti.abs(p.y)
    az = ti.abs(p.z)

    n = vector(0.0, 0.0, p.z)
    if ax > ay:
        if ax > az:
            n = vector(p.x, 0.0, 0.0)
    elif ay > az:
        n = vector(0.0, p.y, 0.0)
    return n
