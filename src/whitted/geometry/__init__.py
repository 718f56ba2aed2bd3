"""Geometry module for shape primitives.

Components:
    sphere: Unit sphere at the origin
    plane: The xz plane
    cube: Axis-aligned cube from -1 to 1
    cylinder: Unit-radius cylinder along y, optionally truncated and capped
    triangle: Flat triangle with precomputed edges and normal
    wavy_plane: Height field summed from radial sine waves
    mesh: Wavefront OBJ reader producing triangles
    shape: Shape registry with per-shape transforms and materials

Every primitive intersects in object space and reports its hits as a
fixed-size vector of distances padded with a miss sentinel.
"""

from .cube import Cube
from .cylinder import Cylinder
from .mesh import ObjParseError, load_obj, parse_obj
from .plane import Plane
from .shape import (
    MAX_SHAPES,
    Shape,
    ShapeKind,
    add_shape,
    clear_shapes,
    get_shape_count,
    intersect,
    normal_at,
)
from .sphere import Sphere
from .triangle import Triangle
from .wavy_plane import MAX_WAVES, Wave, WavyPlane

__all__ = [
    "Sphere",
    "Plane",
    "Cube",
    "Cylinder",
    "Triangle",
    "Wave",
    "WavyPlane",
    "MAX_WAVES",
    "ObjParseError",
    "parse_obj",
    "load_obj",
    "Shape",
    "ShapeKind",
    "MAX_SHAPES",
    "add_shape",
    "clear_shapes",
    "get_shape_count",
    "intersect",
    "normal_at",
]
