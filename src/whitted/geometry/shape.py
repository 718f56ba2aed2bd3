"""Transformed shape storage and kernel-side dispatch.

Every shape in the world is a primitive placed by an affine transform and
paired with a material. Shapes are stored in Structure-of-Arrays Taichi
fields and referred to by an integer handle (their index), which is what
intersection records carry.

Only the inverse transform and its transpose are stored: rays are moved into
object space with the inverse, and normals are moved back to world space
with the inverse transpose.

Example:
    >>> clear_shapes()
    >>> handle = add_shape(Sphere(), scaling(2, 2, 2), material_id=0)
    >>> # intersect_shape(handle, ray) inside a kernel
"""

from enum import IntEnum

import numpy as np
import taichi as ti

from src.whitted.core.linalg import (
    Matrix4,
    as_vector,
    identity,
    invert,
    make_vector,
    normalize4,
    point,
    to_taichi,
    transpose,
    vec4,
    vector,
)
from src.whitted.core.ray import (
    HOST_MISS_LIMIT,
    MAX_LOCAL_HITS,
    HitSlots,
    Ray,
    make_ray,
    miss_slots,
    transform_ray,
)
from src.whitted.geometry.cube import Cube, intersect_cube, normal_at_cube
from src.whitted.geometry.cylinder import Cylinder, intersect_cylinder, normal_at_cylinder
from src.whitted.geometry.plane import Plane, intersect_plane, normal_at_plane
from src.whitted.geometry.sphere import Sphere, intersect_sphere, normal_at_sphere
from src.whitted.geometry.triangle import Triangle, intersect_triangle
from src.whitted.geometry.wavy_plane import (
    WavyPlane,
    add_wavy_plane,
    clear_wavy_planes,
    intersect_wavy_plane,
    normal_at_wavy_plane,
)


class ShapeKind(IntEnum):
    """Primitive type of a stored shape."""

    SPHERE = 0
    PLANE = 1
    CUBE = 2
    CYLINDER = 3
    TRIANGLE = 4
    WAVY_PLANE = 5


Shape = Sphere | Plane | Cube | Cylinder | Triangle | WavyPlane

# Maximum number of shapes; each mesh triangle counts as one
MAX_SHAPES = 4096

# =============================================================================
# Shape Storage (Structure of Arrays)
# =============================================================================

shape_kinds = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
shape_material_ids = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
shape_inverses = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_SHAPES)
shape_inverse_transposes = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_SHAPES)

# Cylinder: (minimum, maximum, closed, 0); wavy plane: (wave index, 0, 0, 0)
shape_params = ti.Vector.field(4, dtype=ti.f32, shape=MAX_SHAPES)

# Triangle data: first vertex, both edges, face normal
triangle_p1 = ti.Vector.field(4, dtype=ti.f32, shape=MAX_SHAPES)
triangle_e1 = ti.Vector.field(4, dtype=ti.f32, shape=MAX_SHAPES)
triangle_e2 = ti.Vector.field(4, dtype=ti.f32, shape=MAX_SHAPES)
triangle_normals = ti.Vector.field(4, dtype=ti.f32, shape=MAX_SHAPES)

num_shapes = ti.field(dtype=ti.i32, shape=())

# Bumped on every clear; a World is live while its stamp matches
_generation = 0


def clear_shapes() -> None:
    """Remove all shapes. Field contents are overwritten on the next add."""
    global _generation
    num_shapes[None] = 0
    clear_wavy_planes()
    _generation += 1


def get_generation() -> int:
    """Number of times the shape registry has been cleared."""
    return _generation


def shape_kind_of(shape: Shape) -> ShapeKind:
    if isinstance(shape, Sphere):
        return ShapeKind.SPHERE
    elif isinstance(shape, Plane):
        return ShapeKind.PLANE
    elif isinstance(shape, Cube):
        return ShapeKind.CUBE
    elif isinstance(shape, Cylinder):
        return ShapeKind.CYLINDER
    elif isinstance(shape, Triangle):
        return ShapeKind.TRIANGLE
    elif isinstance(shape, WavyPlane):
        return ShapeKind.WAVY_PLANE
    raise TypeError(f"Unsupported shape type: {type(shape).__name__}")


def add_shape(shape: Shape, transform: Matrix4 | None = None, material_id: int = 0) -> int:
    """Register a primitive with its world transform and material.

    Args:
        shape: The primitive description.
        transform: Object-to-world matrix. Defaults to identity.
        material_id: Index into the material registry.

    Returns:
        The shape handle.

    Raises:
        ValueError: If the transform is singular.
        RuntimeError: If the maximum number of shapes is exceeded.
        TypeError: If the shape type is not supported.
    """
    kind = shape_kind_of(shape)
    matrix = identity() if transform is None else np.asarray(transform, dtype=np.float32)
    inverse = invert(matrix)

    idx = num_shapes[None]
    if idx >= MAX_SHAPES:
        raise RuntimeError(f"Maximum number of shapes ({MAX_SHAPES}) exceeded")

    params = [0.0, 0.0, 0.0, 0.0]
    if kind == ShapeKind.CYLINDER:
        params = [shape.minimum, shape.maximum, 1.0 if shape.closed else 0.0, 0.0]
    elif kind == ShapeKind.WAVY_PLANE:
        params = [float(add_wavy_plane(shape)), 0.0, 0.0, 0.0]
    elif kind == ShapeKind.TRIANGLE:
        triangle_p1[idx] = shape.vertex().tolist()
        triangle_e1[idx] = shape.e1.tolist()
        triangle_e2[idx] = shape.e2.tolist()
        triangle_normals[idx] = shape.normal.tolist()

    shape_kinds[idx] = int(kind)
    shape_material_ids[idx] = material_id
    shape_inverses[idx] = to_taichi(inverse)
    shape_inverse_transposes[idx] = to_taichi(transpose(inverse))
    shape_params[idx] = params
    num_shapes[None] = idx + 1
    return idx


def get_shape_count() -> int:
    return int(num_shapes[None])


# =============================================================================
# Kernel-side Dispatch
# =============================================================================


@ti.func
def local_intersect(handle: ti.i32, local_ray: Ray) -> HitSlots:
    kind = shape_kinds[handle]
    params = shape_params[handle]
    ts = miss_slots()
    if kind == int(ShapeKind.SPHERE):
        ts = intersect_sphere(local_ray)
    elif kind == int(ShapeKind.PLANE):
        ts = intersect_plane(local_ray)
    elif kind == int(ShapeKind.CUBE):
        ts = intersect_cube(local_ray)
    elif kind == int(ShapeKind.CYLINDER):
        ts = intersect_cylinder(local_ray, params[0], params[1], ti.cast(params[2], ti.i32))
    elif kind == int(ShapeKind.TRIANGLE):
        ts = intersect_triangle(
            local_ray, triangle_p1[handle], triangle_e1[handle], triangle_e2[handle]
        )
    elif kind == int(ShapeKind.WAVY_PLANE):
        ts = intersect_wavy_plane(local_ray, ti.cast(params[0], ti.i32))
    return ts


@ti.func
def local_normal_at(handle: ti.i32, p: vec4) -> vec4:
    kind = shape_kinds[handle]
    params = shape_params[handle]
    n = vector(0.0, 1.0, 0.0)
    if kind == int(ShapeKind.SPHERE):
        n = normal_at_sphere(p)
    elif kind == int(ShapeKind.PLANE):
        n = normal_at_plane(p)
    elif kind == int(ShapeKind.CUBE):
        n = normal_at_cube(p)
    elif kind == int(ShapeKind.CYLINDER):
        n = normal_at_cylinder(p, params[0], params[1])
    elif kind == int(ShapeKind.TRIANGLE):
        n = triangle_normals[handle]
    elif kind == int(ShapeKind.WAVY_PLANE):
        n = normal_at_wavy_plane(p, ti.cast(params[0], ti.i32))
    return n


@ti.func
def intersect_shape(handle: ti.i32, ray: Ray) -> HitSlots:
    """Intersect a world-space ray with a stored shape.

    Distances are measured along the object-space ray, which is the same
    parameterisation as the world ray, so they need no conversion.
    """
    return local_intersect(handle, transform_ray(ray, shape_inverses[handle]))


@ti.func
def object_point(handle: ti.i32, world_point: vec4) -> vec4:
    return shape_inverses[handle] @ world_point


@ti.func
def normal_at_shape(handle: ti.i32, world_point: vec4) -> vec4:
    """World-space unit normal of a stored shape at a surface point."""
    local_normal = local_normal_at(handle, object_point(handle, world_point))
    world_normal = as_vector(shape_inverse_transposes[handle] @ local_normal)
    return normalize4(world_normal)


@ti.func
def get_shape_material(handle: ti.i32) -> ti.i32:
    return shape_material_ids[handle]


# =============================================================================
# Host-side Queries
# =============================================================================


@ti.kernel
def _intersect_shape_kernel(
    handle: ti.i32, ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32
) -> vec4:
    return intersect_shape(handle, make_ray(point(ox, oy, oz), vector(dx, dy, dz)))


@ti.kernel
def _normal_at_kernel(handle: ti.i32, x: ti.f32, y: ti.f32, z: ti.f32) -> vec4:
    return normal_at_shape(handle, point(x, y, z))


def intersect(handle: int, origin, direction) -> list[float]:
    """Distances at which a world-space ray meets a stored shape (unordered)."""
    slots = _intersect_shape_kernel(handle, *map(float, origin[:3]), *map(float, direction[:3]))
    values = [float(slots[k]) for k in range(MAX_LOCAL_HITS)]
    return [t for t in values if t < HOST_MISS_LIMIT]


def normal_at(handle: int, world_point) -> np.ndarray:
    """World-space normal of a stored shape as a homogeneous vector."""
    n = _normal_at_kernel(handle, *map(float, world_point[:3]))
    return make_vector(float(n[0]), float(n[1]), float(n[2]))
