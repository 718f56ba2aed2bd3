"""Point lights and Phong local illumination.

The Phong model sums three terms for one light:

- ambient: effective color * ambient, always present (even in shadow)
- diffuse: effective color * diffuse * cos(angle between light and normal)
- specular: light intensity * specular * cos(reflection, eye) ^ shininess

where effective color = surface color * light intensity. A surface facing
away from the light receives ambient only, and so does a shadowed one. The
result is not clamped.
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.whitted.core.linalg import dot4, normalize4, reflect4, vec4
from src.whitted.materials.material import (
    material_ambient,
    material_diffuse,
    material_shininess,
    material_specular,
)
from src.whitted.materials.pattern import Color

vec3 = tm.vec3


@dataclass
class PointLight:
    """A light with no size, emitting equally in all directions."""

    position: tuple[float, float, float]
    intensity: Color = (1.0, 1.0, 1.0)


# =============================================================================
# Light Field Storage
# =============================================================================

MAX_LIGHTS = 16

light_positions = ti.Vector.field(4, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    num_lights[None] = 0


def add_light(light: PointLight) -> int:
    """Add a point light.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    x, y, z = (float(c) for c in light.position)
    light_positions[idx] = [x, y, z, 1.0]
    light_intensities[idx] = [float(c) for c in light.intensity]
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    return int(num_lights[None])


@ti.func
def get_light_position(light_index: ti.i32) -> vec4:
    return light_positions[light_index]


# =============================================================================
# Phong Model
# =============================================================================


@ti.func
def phong(
    color: vec3,
    ambient: ti.f32,
    diffuse: ti.f32,
    specular: ti.f32,
    shininess: ti.f32,
    light_position: vec4,
    light_intensity: vec3,
    point: vec4,
    eyev: vec4,
    normalv: vec4,
    in_shadow: ti.i32,
) -> vec3:
    """Phong contribution of one light at one surface point.

    Args:
        color: Surface color at the point.
        ambient: Ambient coefficient.
        diffuse: Diffuse coefficient.
        specular: Specular coefficient.
        shininess: Specular exponent.
        light_position: Light position (point).
        light_intensity: Light color.
        point: Surface point being lit.
        eyev: Unit vector from the point toward the eye.
        normalv: Unit surface normal.
        in_shadow: Nonzero if the light is blocked.

    Returns:
        The reflected color (unclamped).
    """
    effective_color = color * light_intensity
    result = effective_color * ambient

    if in_shadow == 0:
        lightv = normalize4(light_position - point)
        light_dot_normal = dot4(lightv, normalv)
        if light_dot_normal >= 0.0:
            result += effective_color * diffuse * light_dot_normal
            reflectv = reflect4(-lightv, normalv)
            reflect_dot_eye = dot4(reflectv, eyev)
            if reflect_dot_eye > 0.0:
                factor = ti.pow(reflect_dot_eye, shininess)
                result += light_intensity * specular * factor
    return result


@ti.func
def lighting(
    material_id: ti.i32,
    surface_color: vec3,
    light_index: ti.i32,
    point: vec4,
    eyev: vec4,
    normalv: vec4,
    in_shadow: ti.i32,
) -> vec3:
    """Phong contribution using registered material and light data."""
    return phong(
        surface_color,
        material_ambient[material_id],
        material_diffuse[material_id],
        material_specular[material_id],
        material_shininess[material_id],
        light_positions[light_index],
        light_intensities[light_index],
        point,
        eyev,
        normalv,
        in_shadow,
    )
