"""World-level ray queries: nearest hit, shadows and refractive indices.

Every registered shape is tested and the closest non-negative distance
wins. Inside kernels this is a linear scan; on the host
``intersect_world`` returns the full sorted list of (t, handle) records,
which is the same selection when passed to ``hit``.

Refraction needs the indices of the media on both sides of a surface.
Walking the sorted intersection list with a stack of entered shapes gives
n1 (top of the stack before the hit) and n2 (top after pushing or popping
the hit shape). Kernels cannot keep that list, so they derive the same
stack from parity: a shape encloses the hit when an odd number of its
intersections come before it, and the enclosing shape entered last is the
top of the stack.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.whitted.core.linalg import magnitude, point, vec4, vector
from src.whitted.core.ray import (
    HOST_MISS_LIMIT,
    MAX_LOCAL_HITS,
    T_MISS,
    Ray,
    make_ray,
)
from src.whitted.geometry.shape import (
    MAX_SHAPES,
    get_shape_material,
    intersect_shape,
    num_shapes,
)
from src.whitted.materials.lighting import get_light_position
from src.whitted.materials.material import get_refractive_index

vec2 = tm.vec2

# Hits closer than this before the shaded hit count as the same surface
CONTAINMENT_EPSILON = 1e-4


@dataclass(frozen=True)
class Intersection:
    """A distance along a ray and the handle of the shape hit there."""

    t: float
    handle: int


# =============================================================================
# Kernel-side Queries
# =============================================================================


@ti.func
def nearest_hit(ray: Ray):
    """Closest intersection with t >= 0.

    Returns:
        Tuple of (t, handle); handle is -1 when nothing is hit.
    """
    best_t = T_MISS
    best_handle = -1
    for i in range(num_shapes[None]):
        ts = intersect_shape(i, ray)
        for s in ti.static(range(MAX_LOCAL_HITS)):
            if ts[s] >= 0.0 and ts[s] < best_t:
                best_t = ts[s]
                best_handle = i
    return best_t, best_handle


@ti.func
def shadowed(light_index: ti.i32, over_point: vec4) -> ti.i32:
    """Whether any shape lies between the point and the light."""
    v = get_light_position(light_index) - over_point
    distance = magnitude(v)
    t, handle = nearest_hit(make_ray(over_point, v / distance))
    result = 0
    if handle >= 0 and t < distance:
        result = 1
    return result


@ti.func
def containing_indices(ray: Ray, hit_t: ti.f32, hit_handle: ti.i32):
    """Refractive indices on either side of the surface hit at hit_t.

    Only hits more than CONTAINMENT_EPSILON before ``hit_t`` count as
    preceding the hit, including hits behind the ray origin.

    Returns:
        Tuple of (n1, n2). Outside every shape the index is 1.0.
    """
    top_t = -T_MISS
    top_index = 1.0
    top_other_t = -T_MISS
    top_other_index = 1.0
    hit_inside = 0
    limit = hit_t - CONTAINMENT_EPSILON

    for i in range(num_shapes[None]):
        ts = intersect_shape(i, ray)
        count = 0
        entry = -T_MISS
        for s in ti.static(range(MAX_LOCAL_HITS)):
            if ts[s] < limit:
                count += 1
                entry = ti.max(entry, ts[s])
        if count % 2 == 1:
            index = get_refractive_index(get_shape_material(i))
            if entry > top_t:
                top_t = entry
                top_index = index
            if i == hit_handle:
                hit_inside = 1
            elif entry > top_other_t:
                top_other_t = entry
                top_other_index = index

    n1 = top_index
    n2 = get_refractive_index(get_shape_material(hit_handle))
    if hit_inside == 1:
        n2 = top_other_index
    return n1, n2


# =============================================================================
# Host-side Queries
# =============================================================================

_hit_slots = ti.Vector.field(4, dtype=ti.f32, shape=MAX_SHAPES)


@ti.kernel
def _collect_hits(ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32):
    ray = make_ray(point(ox, oy, oz), vector(dx, dy, dz))
    for i in range(num_shapes[None]):
        _hit_slots[i] = intersect_shape(i, ray)


@ti.kernel
def _shadowed_kernel(light_index: ti.i32, x: ti.f32, y: ti.f32, z: ti.f32) -> ti.i32:
    return shadowed(light_index, point(x, y, z))


@ti.kernel
def _indices_kernel(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    hit_t: ti.f32,
    hit_handle: ti.i32,
) -> vec2:
    ray = make_ray(point(ox, oy, oz), vector(dx, dy, dz))
    n1, n2 = containing_indices(ray, hit_t, hit_handle)
    return vec2(n1, n2)


def _ray_args(origin, direction) -> list[float]:
    return [float(c) for c in origin[:3]] + [float(c) for c in direction[:3]]


def intersect_world(origin, direction) -> list[Intersection]:
    """All intersections of a ray with the world, sorted by distance.

    Args:
        origin: Ray origin (x, y, z[, w]).
        direction: Ray direction (x, y, z[, w]).

    Returns:
        Intersections in ascending order of t, including negative ones.
    """
    count = int(num_shapes[None])
    if count == 0:
        return []
    _collect_hits(*_ray_args(origin, direction))
    slots = _hit_slots.to_numpy()[:count]

    found = [
        Intersection(float(t), handle)
        for handle in range(count)
        for t in slots[handle]
        if t < HOST_MISS_LIMIT
    ]
    return sorted(found, key=lambda x: x.t)


def hit(intersections: Sequence[Intersection]) -> Intersection | None:
    """The first intersection with t >= 0 in a sorted list."""
    for candidate in intersections:
        if candidate.t >= 0.0:
            return candidate
    return None


def is_shadowed(world_point, light_index: int = 0) -> bool:
    """Whether a point is hidden from a light."""
    return bool(_shadowed_kernel(light_index, *[float(c) for c in world_point[:3]]))


def refractive_indices(origin, direction, hit_record: Intersection) -> tuple[float, float]:
    """(n1, n2) at a hit, computed the way the renderer does."""
    result = _indices_kernel(*_ray_args(origin, direction), hit_record.t, hit_record.handle)
    return float(result[0]), float(result[1])


def containment_trace(
    intersections: Sequence[Intersection], refractive_index: Callable[[int], float]
) -> list[tuple[float, float]]:
    """(n1, n2) at every intersection of a sorted list, by explicit stack walk.

    Args:
        intersections: Sorted intersections along one ray.
        refractive_index: Maps a shape handle to its material's index.

    Returns:
        One (n1, n2) pair per intersection.
    """
    containers: list[int] = []
    pairs = []
    for record in intersections:
        n1 = refractive_index(containers[-1]) if containers else 1.0
        if record.handle in containers:
            containers.remove(record.handle)
        else:
            containers.append(record.handle)
        n2 = refractive_index(containers[-1]) if containers else 1.0
        pairs.append((n1, n2))
    return pairs
