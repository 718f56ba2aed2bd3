"""Ray data structure and the ray-level operations used while tracing.

Rays carry a homogeneous origin point and direction vector so they can be
moved between world and object space with a single 4x4 multiply. All
operations are Taichi functions meant to be called from kernels.

Example:
    >>> origin = point(2.0, 3.0, 4.0)
    >>> ray = make_ray(origin, vector(1.0, 0.0, 0.0))
    >>> ray_position(ray, 2.5)  # point(4.5, 3.0, 4.0)
"""

import taichi as ti
import taichi.math as tm

from src.whitted.core.linalg import dot4, mat4, vec4

# Number of intersection slots a single shape can report
MAX_LOCAL_HITS = 4

# Sentinel distance stored in unused intersection slots (close to f32 max)
T_MISS = 3.0e38

HitSlots = tm.vec4

# Host-side threshold: values read back from f32 fields at or above this are misses
HOST_MISS_LIMIT = T_MISS / 2


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: Homogeneous point (w = 1).
        direction: Homogeneous vector (w = 0). Not required to be unit
            length; transformed rays generally are not.
    """

    origin: vec4
    direction: vec4


@ti.func
def make_ray(origin: vec4, direction: vec4) -> Ray:
    return Ray(origin=origin, direction=direction)


@ti.func
def ray_position(ray: Ray, t: ti.f32) -> vec4:
    """Compute the point origin + t * direction."""
    return ray.origin + ray.direction * t


@ti.func
def transform_ray(ray: Ray, m: mat4) -> Ray:
    """Apply a 4x4 matrix to both origin and direction.

    Args:
        ray: The ray to transform.
        m: The transformation matrix.

    Returns:
        A new ray; the input is left unchanged.
    """
    return Ray(origin=m @ ray.origin, direction=m @ ray.direction)


# =============================================================================
# Intersection Slots
# =============================================================================


@ti.func
def miss_slots() -> HitSlots:
    """Slots for a shape that was not hit."""
    return HitSlots(T_MISS, T_MISS, T_MISS, T_MISS)


# =============================================================================
# Refraction
# =============================================================================


@ti.func
def refract_direction(eyev: vec4, normalv: vec4, n_ratio: ti.f32):
    """Bend a ray through a surface using Snell's law.

    Args:
        eyev: Unit vector pointing back toward the ray origin.
        normalv: Unit surface normal on the same side as ``eyev``.
        n_ratio: n1 / n2, the ratio of refractive indices across the surface.

    Returns:
        Tuple of (direction, ok). ``ok`` is 0 under total internal
        reflection, in which case the direction is the zero vector.
    """
    cos_i = dot4(eyev, normalv)
    sin2_t = n_ratio * n_ratio * (1.0 - cos_i * cos_i)
    direction = vec4(0.0, 0.0, 0.0, 0.0)
    ok = 0
    if sin2_t <= 1.0:
        cos_t = ti.sqrt(1.0 - sin2_t)
        direction = normalv * (n_ratio * cos_i - cos_t) - eyev * n_ratio
        direction.w = 0.0
        ok = 1
    return direction, ok
