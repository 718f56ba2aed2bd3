"""Materials module: patterns, Phong materials and point lights.

Components:
    pattern: Solid, stripe, ring and checker patterns with transforms
    material: Material description and registry
    lighting: Point lights and the Phong reflection model
"""

from .lighting import MAX_LIGHTS, PointLight, add_light, clear_lights, get_light_count
from .material import (
    MAX_MATERIALS,
    Material,
    add_material,
    clear_materials,
    get_material_count,
    glass,
    validate_material,
)
from .pattern import (
    BLACK,
    WHITE,
    CheckerPattern,
    Color,
    Pattern,
    RingPattern,
    SolidPattern,
    StripePattern,
    TransformedPattern,
)

__all__ = [
    # Patterns
    "Color",
    "WHITE",
    "BLACK",
    "Pattern",
    "SolidPattern",
    "StripePattern",
    "RingPattern",
    "CheckerPattern",
    "TransformedPattern",
    # Materials
    "Material",
    "glass",
    "validate_material",
    "add_material",
    "clear_materials",
    "get_material_count",
    "MAX_MATERIALS",
    # Lights
    "PointLight",
    "add_light",
    "clear_lights",
    "get_light_count",
    "MAX_LIGHTS",
]
