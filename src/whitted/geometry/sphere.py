"""Unit sphere primitive with robust ray-sphere intersection.

The sphere is centred on the object-space origin with radius 1; size and
placement come from the owning shape's transform. Intersection uses the
half-b quadratic with the sign-aware reformulation from Ray Tracing Gems so
tangent and near-tangent rays do not lose precision.
"""

from dataclasses import dataclass

import taichi as ti

from src.whitted.core.linalg import dot4, vec4, vector
from src.whitted.core.ray import HitSlots, Ray, miss_slots


@dataclass
class Sphere:
    """Unit sphere at the object-space origin."""


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0 given sqrt(h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0
    if ti.abs(q) < 1e-10:
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def intersect_sphere(ray: Ray) -> HitSlots:
    """Intersect an object-space ray with the unit sphere.

    A tangent ray reports the same distance twice.

    Args:
        ray: Ray in object space.

    Returns:
        Hit slots; the first two hold the ascending roots when the ray hits.
    """
    sphere_to_ray = ray.origin - vec4(0.0, 0.0, 0.0, 1.0)
    a = dot4(ray.direction, ray.direction)
    h = dot4(ray.direction, sphere_to_ray)
    c = dot4(sphere_to_ray, sphere_to_ray) - 1.0
    discriminant = h * h - a * c

    ts = miss_slots()
    if discriminant >= 0.0:
        t0, t1 = _solve_quadratic_robust(h, a, c, ti.sqrt(discriminant))
        ts[0] = t0
        ts[1] = t1
    return ts


@ti.func
def normal_at_sphere(p: vec4) -> vec4:
    return vector(p.x, p.y, p.z)
