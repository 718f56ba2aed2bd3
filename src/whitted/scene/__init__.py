"""Scene module: worlds, ray queries and scene files.

Components:
    intersection: World-level intersection, shadow and refractive index
        queries
    world: World builder over the shape, material and light registries
    loader: YAML scene descriptions
    default_world: Ready-made scenes
"""

from .default_world import create_default_world, create_showcase_scene
from .intersection import Intersection, hit, intersect_world, is_shadowed
from .loader import SceneParseError, load_scene, parse_scene
from .world import ShapeInfo, World

__all__ = [
    "Intersection",
    "hit",
    "intersect_world",
    "is_shadowed",
    "World",
    "ShapeInfo",
    "SceneParseError",
    "parse_scene",
    "load_scene",
    "create_default_world",
    "create_showcase_scene",
]
