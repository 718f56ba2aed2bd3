"""Whitted-style recursive shading.

A hit is shaded with Phong lighting from every light (with a shadow test
per light), plus a mirror-reflected ray weighted by the material's
``reflective`` coefficient and a refracted ray weighted by its
``transparency``. Each secondary ray spends one unit of the recursion
budget; when the budget reaches zero the secondary terms are dropped, so
two facing mirrors still terminate.

Taichi functions cannot recurse. The final color is linear in the colors
of the secondary rays, so the ray tree is walked with a fixed-size stack of
(ray, weight, budget) entries: each popped ray adds weight * local color
and pushes its children with their combined weights. The stack never holds
more than ``max_depth + 1`` entries.

Example:
    >>> world = create_default_world()
    >>> color_at((0, 0, -5), (0, 0, 1))
    (0.38066, 0.47583, 0.2855)
"""

import taichi as ti
import taichi.math as tm

from src.whitted.camera.camera import is_camera_ready, ray_for_pixel
from src.whitted.core.linalg import (
    dot4,
    normalize4,
    point,
    reflect4,
    vec4,
    vector,
)
from src.whitted.core.ray import Ray, make_ray, ray_position, refract_direction
from src.whitted.geometry.shape import get_shape_material, normal_at_shape, object_point
from src.whitted.materials.lighting import lighting, num_lights
from src.whitted.materials.material import (
    material_color_at,
    material_reflective,
    material_transparency,
)
from src.whitted.scene.intersection import containing_indices, nearest_hit, shadowed

vec3 = tm.vec3

# =============================================================================
# Shading Constants
# =============================================================================

MAX_RECURSION_DEPTH = 8
DEFAULT_MAX_DEPTH = 5

# Offset of the over/under points from the surface along the normal
SHADOW_EPSILON = 1e-3

BACKGROUND_COLOR = vec3(0.0, 0.0, 0.0)

_STACK_SIZE = MAX_RECURSION_DEPTH + 2


def check_max_depth(max_depth: int) -> int:
    """Validate a recursion budget.

    Raises:
        ValueError: If the budget is negative or above MAX_RECURSION_DEPTH.
    """
    if not 0 <= max_depth <= MAX_RECURSION_DEPTH:
        raise ValueError(
            f"max_depth = {max_depth} must be between 0 and {MAX_RECURSION_DEPTH}"
        )
    return int(max_depth)


# =============================================================================
# Hit Preparation
# =============================================================================


@ti.func
def prepare_hit(ray: Ray, t: ti.f32, handle: ti.i32):
    """Geometry needed to shade a hit.

    The normal is flipped toward the eye when the hit is on the inside of
    the surface.

    Returns:
        Tuple of (point, eyev, normalv, over_point, under_point, inside).
    """
    p = ray_position(ray, t)
    eyev = -ray.direction
    normalv = normal_at_shape(handle, p)
    inside = 0
    if dot4(normalv, eyev) < 0.0:
        inside = 1
        normalv = -normalv
    over_point = p + normalv * SHADOW_EPSILON
    under_point = p - normalv * SHADOW_EPSILON
    return p, eyev, normalv, over_point, under_point, inside


@ti.func
def surface_color(handle: ti.i32, p: vec4, eyev: vec4, normalv: vec4, over_point: vec4) -> vec3:
    """Phong lighting from every light, each with its own shadow test."""
    material_id = get_shape_material(handle)
    base = material_color_at(material_id, object_point(handle, p))
    color = vec3(0.0, 0.0, 0.0)
    for li in range(num_lights[None]):
        in_shadow = shadowed(li, over_point)
        color += lighting(material_id, base, li, p, eyev, normalv, in_shadow)
    return color


@ti.func
def shade_node(ray: Ray, t: ti.f32, handle: ti.i32, remaining: ti.i32):
    """Local color of a hit and the secondary rays it spawns.

    Returns:
        Tuple of (local color, reflect origin, reflect direction, reflect
        weight, refract origin, refract direction, refract weight). A zero
        weight means the secondary ray is not traced.
    """
    p, eyev, normalv, over_point, under_point, inside = prepare_hit(ray, t, handle)
    local = surface_color(handle, p, eyev, normalv, over_point)

    material_id = get_shape_material(handle)
    reflective = material_reflective[material_id]
    transparency = material_transparency[material_id]

    reflect_origin = over_point
    reflect_direction = vector(0.0, 0.0, 0.0)
    reflect_weight = 0.0
    refract_origin = under_point
    refract_direction_v = vector(0.0, 0.0, 0.0)
    refract_weight = 0.0

    if remaining > 0:
        if reflective > 0.0:
            reflect_direction = reflect4(ray.direction, normalv)
            reflect_weight = reflective
        if transparency > 0.0:
            n1, n2 = containing_indices(ray, t, handle)
            direction, ok = refract_direction(normalize4(eyev), normalv, n1 / n2)
            if ok == 1:
                refract_direction_v = direction
                refract_weight = transparency

    return (
        local,
        reflect_origin,
        reflect_direction,
        reflect_weight,
        refract_origin,
        refract_direction_v,
        refract_weight,
    )


# =============================================================================
# Ray Tree Traversal
# =============================================================================


@ti.func
def resolve(ray: Ray, hit_t: ti.f32, hit_handle: ti.i32, budget: ti.i32) -> vec3:
    """Color of a ray whose first hit is already known.

    Args:
        ray: The primary ray.
        hit_t: Distance of its first hit.
        hit_handle: Shape handle of its first hit (must be >= 0).
        budget: Remaining recursion budget at the first hit.
    """
    color = vec3(0.0, 0.0, 0.0)
    s_origin = ti.Matrix.zero(ti.f32, _STACK_SIZE, 4)
    s_direction = ti.Matrix.zero(ti.f32, _STACK_SIZE, 4)
    s_weight = ti.Matrix.zero(ti.f32, _STACK_SIZE, 3)
    s_budget = ti.Vector.zero(ti.i32, _STACK_SIZE)

    for c in ti.static(range(4)):
        s_origin[0, c] = ray.origin[c]
        s_direction[0, c] = ray.direction[c]
    for c in ti.static(range(3)):
        s_weight[0, c] = 1.0
    s_budget[0] = budget
    size = 1
    first = 1

    while size > 0:
        size -= 1
        origin = vec4(0.0, 0.0, 0.0, 0.0)
        direction = vec4(0.0, 0.0, 0.0, 0.0)
        weight = vec3(0.0, 0.0, 0.0)
        remaining = 0
        for k in ti.static(range(_STACK_SIZE)):
            if k == size:
                origin = vec4(s_origin[k, 0], s_origin[k, 1], s_origin[k, 2], s_origin[k, 3])
                direction = vec4(
                    s_direction[k, 0], s_direction[k, 1], s_direction[k, 2], s_direction[k, 3]
                )
                weight = vec3(s_weight[k, 0], s_weight[k, 1], s_weight[k, 2])
                remaining = s_budget[k]

        current = make_ray(origin, direction)
        t = hit_t
        handle = hit_handle
        if first == 0:
            t, handle = nearest_hit(current)
        first = 0

        if handle >= 0:
            (
                local,
                reflect_origin,
                reflect_direction,
                reflect_weight,
                refract_origin,
                refract_dir,
                refract_weight,
            ) = shade_node(current, t, handle, remaining)
            color += weight * local

            if reflect_weight > 0.0:
                child_weight = weight * reflect_weight
                for k in ti.static(range(_STACK_SIZE)):
                    if k == size:
                        for c in ti.static(range(4)):
                            s_origin[k, c] = reflect_origin[c]
                            s_direction[k, c] = reflect_direction[c]
                        for c in ti.static(range(3)):
                            s_weight[k, c] = child_weight[c]
                        s_budget[k] = remaining - 1
                size += 1

            if refract_weight > 0.0:
                child_weight = weight * refract_weight
                for k in ti.static(range(_STACK_SIZE)):
                    if k == size:
                        for c in ti.static(range(4)):
                            s_origin[k, c] = refract_origin[c]
                            s_direction[k, c] = refract_dir[c]
                        for c in ti.static(range(3)):
                            s_weight[k, c] = child_weight[c]
                        s_budget[k] = remaining - 1
                size += 1
        else:
            color += weight * BACKGROUND_COLOR

    return color


@ti.func
def trace(ray: Ray, max_depth: ti.i32) -> vec3:
    """Color seen along a ray."""
    color = vec3(0.0, 0.0, 0.0)
    t, handle = nearest_hit(ray)
    if handle >= 0:
        color = resolve(ray, t, handle, max_depth)
    else:
        color += BACKGROUND_COLOR
    return color


# =============================================================================
# Host-side Shading Entry Points
# =============================================================================


@ti.kernel
def _color_at_kernel(
    ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32, max_depth: ti.i32
) -> vec3:
    return trace(make_ray(point(ox, oy, oz), vector(dx, dy, dz)), max_depth)


@ti.kernel
def _shade_hit_kernel(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    hit_t: ti.f32,
    hit_handle: ti.i32,
    remaining: ti.i32,
) -> vec3:
    return resolve(make_ray(point(ox, oy, oz), vector(dx, dy, dz)), hit_t, hit_handle, remaining)


def _as_color(c) -> tuple[float, float, float]:
    return (float(c[0]), float(c[1]), float(c[2]))


def _ray_args(origin, direction) -> list[float]:
    return [float(c) for c in origin[:3]] + [float(c) for c in direction[:3]]


def color_at(origin, direction, max_depth: int = DEFAULT_MAX_DEPTH) -> tuple[float, float, float]:
    """Color seen along a ray through the registered world.

    Args:
        origin: Ray origin (x, y, z[, w]).
        direction: Ray direction (x, y, z[, w]).
        max_depth: Recursion budget for reflection and refraction.

    Returns:
        Unclamped (R, G, B); black when the ray hits nothing.
    """
    check_max_depth(max_depth)
    return _as_color(_color_at_kernel(*_ray_args(origin, direction), max_depth))


def shade_hit(origin, direction, hit_record, remaining: int = DEFAULT_MAX_DEPTH):
    """Full color of a known hit, including reflection and refraction.

    Args:
        origin: Ray origin.
        direction: Ray direction.
        hit_record: An ``Intersection`` on this ray.
        remaining: Recursion budget at this hit.
    """
    check_max_depth(remaining)
    result = _shade_hit_kernel(
        *_ray_args(origin, direction), hit_record.t, hit_record.handle, remaining
    )
    return _as_color(result)


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the buffer.

    The buffer is preallocated at MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT so
    kernels are not recompiled when the size changes.

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


@ti.kernel
def _render_rows(width: ti.i32, row_start: ti.i32, row_end: ti.i32, max_depth: ti.i32):
    for i, j in ti.ndrange(width, (row_start, row_end)):
        _color_buffer[i, j] = trace(ray_for_pixel(i, j), max_depth)


def render_rows(row_start: int, row_end: int, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
    """Render the image rows [row_start, row_end) into the color buffer.

    Raises:
        RuntimeError: If the render target or camera has not been set up.
    """
    _check_render_target_initialized()
    if not is_camera_ready():
        raise RuntimeError("Camera not set up. Call setup_camera() first.")
    check_max_depth(max_depth)

    width, height = get_image_dimensions()
    row_start = max(0, row_start)
    row_end = min(height, row_end)
    if row_start < row_end:
        _render_rows(width, row_start, row_end, max_depth)


def get_image_numpy():
    """The rendered image as a (height, width, 3) float32 array, row 0 at the top.

    Values are not clamped.
    """
    import numpy as np

    _check_render_target_initialized()
    width, height = get_image_dimensions()
    image = _color_buffer.to_numpy()[:width, :height, :]
    return np.ascontiguousarray(np.transpose(image, (1, 0, 2))).astype(np.float32)
