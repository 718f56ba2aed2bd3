"""Unit-radius cylinder around the object-space y axis.

The cylinder may be truncated to ``minimum < y < maximum`` (both bounds
exclusive) and optionally closed with end caps. An untruncated cylinder
extends to +/- infinity and its caps never register.
"""

import math
from dataclasses import dataclass

import taichi as ti

from src.whitted.core.linalg import vec4, vector
from src.whitted.core.ray import T_MISS, HitSlots, Ray, miss_slots

# Rays whose xz direction is shorter than this never hit the side wall
DEGENERATE_EPSILON = 1e-6

# Rays with a smaller vertical component never hit the caps
CAP_EPSILON = 1e-4

# Points within this distance of a bound are treated as lying on the cap
NORMAL_EPSILON = 1e-4

# Slack on the cap radius so rays through the rim hit the cap in f32
RIM_EPSILON = 1e-4


@dataclass
class Cylinder:
    """Cylinder parameters.

    Attributes:
        minimum: Lower y bound (exclusive). Defaults to -infinity.
        maximum: Upper y bound (exclusive). Defaults to +infinity.
        closed: Whether the ends are capped.
    """

    minimum: float = -math.inf
    maximum: float = math.inf
    closed: bool = False

    def __post_init__(self) -> None:
        if self.minimum > self.maximum:
            raise ValueError(
                f"cylinder minimum ({self.minimum}) exceeds maximum ({self.maximum})"
            )


@ti.func
def _check_cap(ray: Ray, y: ti.f32) -> ti.f32:
    """Distance to the cap plane at height y if it lies within radius 1."""
    t = T_MISS
    if ti.abs(ray.direction.y) >= CAP_EPSILON:
        candidate = (y - ray.origin.y) / ray.direction.y
        x = ray.origin.x + candidate * ray.direction.x
        z = ray.origin.z + candidate * ray.direction.z
        if x * x + z * z <= 1.0 + RIM_EPSILON:
            t = candidate
    return t


@ti.func
def intersect_cylinder(
    ray: Ray, minimum: ti.f32, maximum: ti.f32, closed: ti.i32
) -> HitSlots:
    """Intersect an object-space ray with the cylinder wall and caps.

    Slots 0-1 hold wall hits, slots 2-3 hold cap hits. Slots are not sorted.
    """
    ts = miss_slots()

    a = ray.direction.x * ray.direction.x + ray.direction.z * ray.direction.z
    if a > DEGENERATE_EPSILON:
        b = 2.0 * (ray.origin.x * ray.direction.x + ray.origin.z * ray.direction.z)
        c = ray.origin.x * ray.origin.x + ray.origin.z * ray.origin.z - 1.0
        discriminant = b * b - 4.0 * a * c
        if discriminant >= 0.0:
            sqrt_d = ti.sqrt(discriminant)
            t0 = (-b - sqrt_d) / (2.0 * a)
            t1 = (-b + sqrt_d) / (2.0 * a)
            if t0 > t1:
                temp = t0
                t0 = t1
                t1 = temp

            y0 = ray.origin.y + t0 * ray.direction.y
            if minimum < y0 and y0 < maximum:
                ts[0] = t0
            y1 = ray.origin.y + t1 * ray.direction.y
            if minimum < y1 and y1 < maximum:
                ts[1] = t1

    if closed != 0:
        ts[2] = _check_cap(ray, minimum)
        ts[3] = _check_cap(ray, maximum)
    return ts


@ti.func
def normal_at_cylinder(p: vec4, minimum: ti.f32, maximum: ti.f32) -> vec4:
    dist = p.x * p.x + p.z * p.z
    n = vector(p.x, 0.0, p.z)
    if dist < 1.0 and p.y >= maximum - NORMAL_EPSILON:
        n = vector(0.0, 1.0, 0.0)
    elif dist < 1.0 and p.y <= minimum + NORMAL_EPSILON:
        n = vector(0.0, -1.0, 0.0)
    return n
