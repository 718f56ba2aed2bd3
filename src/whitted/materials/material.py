"""Surface materials and the material registry.

A material holds the Phong coefficients, the optical properties used for
recursive reflection and refraction, and a texture: either a solid color or
a pattern. Materials are uploaded to Structure-of-Arrays fields and
referenced from shapes by index.
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.whitted.core.linalg import vec4
from src.whitted.materials.pattern import Color, Pattern, add_pattern, clear_patterns, pattern_color_at

vec3 = tm.vec3


@dataclass
class Material:
    """Phong surface description.

    Attributes:
        color: Surface color when no pattern is set.
        ambient: Fraction of light reflected regardless of orientation.
        diffuse: Lambertian reflectance.
        specular: Strength of the highlight.
        shininess: Highlight exponent; larger values give smaller highlights.
        reflective: Weight of the mirror reflection (0 = none, 1 = mirror).
        transparency: Weight of the refracted ray (0 = opaque).
        refractive_index: Index of refraction of the medium inside the shape.
        pattern: Optional pattern that replaces ``color``.
    """

    color: Color = (1.0, 1.0, 1.0)
    ambient: float = 0.1
    diffuse: float = 0.9
    specular: float = 0.9
    shininess: float = 200.0
    reflective: float = 0.0
    transparency: float = 0.0
    refractive_index: float = 1.0
    pattern: Pattern | None = None

    def color_at(self, object_point) -> Color:
        """Surface color at an object-space point."""
        if self.pattern is None:
            return self.color
        return self.pattern.color_at(object_point)


def glass() -> Material:
    """A clear glass material."""
    return Material(transparency=1.0, refractive_index=1.5)


def validate_material(material: Material) -> None:
    """Check a material's coefficients.

    Raises:
        ValueError: If a coefficient is negative, shininess is not positive, or
            the refractive index is below 1.0.
    """
    for name in ("ambient", "diffuse", "specular", "reflective", "transparency"):
        value = getattr(material, name)
        if value < 0.0:
            raise ValueError(f"Material {name} = {value} must be non-negative")
    if material.shininess <= 0.0:
        raise ValueError(f"Material shininess = {material.shininess} must be positive")
    if material.refractive_index < 1.0:
        raise ValueError(
            f"Index of refraction = {material.refractive_index} is less than 1.0. "
            "IOR must be >= 1.0 for physically meaningful materials."
        )
    if len(material.color) != 3 or any(c < 0.0 for c in material.color):
        raise ValueError(f"Material color {material.color} must be 3 non-negative values")


# =============================================================================
# Material Field Storage
# =============================================================================

# Matches MAX_SHAPES so every shape can carry its own material
MAX_MATERIALS = 4096

material_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_ambient = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_diffuse = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_specular = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_shininess = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_reflective = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_transparency = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_refractive_index = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
# -1 when the material has no pattern
material_pattern_ids = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Remove all materials and the patterns they own."""
    num_materials[None] = 0
    clear_patterns()


def add_material(material: Material) -> int:
    """Add a material to the registry.

    Args:
        material: The material to upload.

    Returns:
        The index of the added material.

    Raises:
        ValueError: If the material fails validation.
        RuntimeError: If the maximum number of materials is exceeded.
    """
    validate_material(material)

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    pattern_id = -1 if material.pattern is None else add_pattern(material.pattern)

    material_colors[idx] = [float(c) for c in material.color]
    material_ambient[idx] = material.ambient
    material_diffuse[idx] = material.diffuse
    material_specular[idx] = material.specular
    material_shininess[idx] = material.shininess
    material_reflective[idx] = material.reflective
    material_transparency[idx] = material.transparency
    material_refractive_index[idx] = material.refractive_index
    material_pattern_ids[idx] = pattern_id
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    return int(num_materials[None])


@ti.func
def material_color_at(material_id: ti.i32, object_point: vec4) -> vec3:
    """Surface color of a material at an object-space point."""
    color = material_colors[material_id]
    pattern_id = material_pattern_ids[material_id]
    if pattern_id >= 0:
        color = pattern_color_at(pattern_id, object_point)
    return color


@ti.func
def get_refractive_index(material_id: ti.i32) -> ti.f32:
    return material_refractive_index[material_id]
