"""YAML scene descriptions.

A scene file describes the camera, the lights and the shapes of a world::

    camera:
      width: 640
      height: 480
      field_of_view: 60        # degrees
      from: [0, 1.5, -5]
      to: [0, 1, 0]
      up: [0, 1, 0]            # optional
    lights:
      - point: {position: [-10, 10, -10], intensity: [1, 1, 1]}
    glass:                     # named material, referenced below
      transparency: 1.0
      refractive_index: 1.5
    shapes:
      - sphere:
          material: glass
          transformations:
            - translate: [0, 1, 0]
            - rotate_y: 45
      - plane:
          material:
            pattern: {type: checkers, a: [1, 1, 1], b: [0, 0, 0]}
    max_depth: 5               # optional

Shape keys are ``sphere``, ``plane``, ``cube``, ``cylinder`` (``minimum``,
``maximum``, ``closed``), ``triangle`` (``p1``, ``p2``, ``p3``),
``wavy_plane`` (``waves``: list of ``origin``, ``wavelength``,
``amplitude``) and ``mesh`` (``file``: an OBJ path relative to the scene).

Errors raise ``SceneParseError`` with the path to the offending element,
e.g. ``In shapes: In [1]: In material: "ambient" expected floating-point
value``.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import yaml

from src.whitted.camera.camera import Camera
from src.whitted.core.transform import Transform, view_transform
from src.whitted.geometry.cube import Cube
from src.whitted.geometry.cylinder import Cylinder
from src.whitted.geometry.mesh import ObjParseError, load_obj
from src.whitted.geometry.plane import Plane
from src.whitted.geometry.sphere import Sphere
from src.whitted.geometry.triangle import Triangle
from src.whitted.geometry.wavy_plane import MAX_WAVES, Wave, WavyPlane
from src.whitted.materials.lighting import PointLight
from src.whitted.materials.material import Material, validate_material
from src.whitted.materials.pattern import (
    CheckerPattern,
    Pattern,
    RingPattern,
    SolidPattern,
    StripePattern,
    TransformedPattern,
)
from src.whitted.scene.world import World

TYPE_V3 = "3 floating-point values"
TYPE_F32 = "floating-point value"

MATERIAL_KEYS = frozenset(
    {
        "color",
        "ambient",
        "diffuse",
        "specular",
        "shininess",
        "reflective",
        "transparency",
        "refractive_index",
        "pattern",
    }
)
PATTERN_TYPES = {
    "solid": SolidPattern,
    "stripes": StripePattern,
    "rings": RingPattern,
    "checkers": CheckerPattern,
}
SHAPE_TYPES = ("sphere", "plane", "cube", "cylinder", "triangle", "wavy_plane", "mesh")

_MISSING = object()


class SceneParseError(ValueError):
    """A scene description is malformed."""


@contextmanager
def _within(element: str) -> Iterator[None]:
    """Prefix errors raised in the block with ``In <element>: ``."""
    try:
        yield
    except SceneParseError as e:
        raise SceneParseError(f"In {element}: {e}") from e


# =============================================================================
# Scalar and vector readers
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _expect_dict(value: Any) -> dict:
    if not isinstance(value, dict):
        raise SceneParseError("expected dict")
    return value


def _expect_list(value: Any) -> list:
    if not isinstance(value, list):
        raise SceneParseError("expected array")
    return value


def _read_float(node: dict, key: str, default: Any = _MISSING) -> float:
    value = node.get(key, _MISSING)
    if value is _MISSING:
        if default is _MISSING:
            raise SceneParseError(f'"{key}" missing')
        return default
    if not _is_number(value):
        raise SceneParseError(f'"{key}" expected {TYPE_F32}')
    return float(value)


def _read_int(node: dict, key: str) -> int:
    value = node.get(key, _MISSING)
    if value is _MISSING:
        raise SceneParseError(f'"{key}" missing')
    if not isinstance(value, int) or isinstance(value, bool):
        raise SceneParseError(f'"{key}" expected integer')
    return value


def _as_floats(value: Any, count: int, type_name: str) -> tuple[float, ...]:
    if not isinstance(value, list) or len(value) != count or not all(map(_is_number, value)):
        raise SceneParseError(f"expected {type_name}")
    return tuple(float(v) for v in value)


def _read_v3(node: dict, key: str, default: Any = _MISSING) -> tuple[float, float, float]:
    value = node.get(key, _MISSING)
    if value is _MISSING:
        if default is _MISSING:
            raise SceneParseError(f'"{key}" missing')
        return default
    with _within(key):
        return _as_floats(value, 3, TYPE_V3)


# =============================================================================
# Camera and lights
# =============================================================================


def _read_camera(node: Any) -> Camera:
    node = _expect_dict(node)
    width = _read_int(node, "width")
    height = _read_int(node, "height")
    fov = _read_float(node, "field_of_view")
    eye = _read_v3(node, "from")
    target = _read_v3(node, "to")
    up = _read_v3(node, "up", (0.0, 1.0, 0.0))
    try:
        transform = view_transform(eye, target, up)
        return Camera(width, height, math.radians(fov), transform)
    except ValueError as e:
        raise SceneParseError(str(e)) from e


def _read_point_light(node: Any) -> PointLight:
    node = _expect_dict(node)
    position = _read_v3(node, "position")
    intensity = _read_v3(node, "intensity", (1.0, 1.0, 1.0))
    return PointLight(position, intensity)


def _read_lights(node: Any) -> list[PointLight]:
    lights = []
    for i, entry in enumerate(_expect_list(node)):
        with _within(f"[{i}]"):
            for key, value in _expect_dict(entry).items():
                if key != "point":
                    raise SceneParseError(f"unknown value {key}")
                with _within(key):
                    lights.append(_read_point_light(value))
    return lights


# =============================================================================
# Transformations, patterns and materials
# =============================================================================


def _read_transformations(node: Any) -> Transform:
    transform = Transform()
    for i, entry in enumerate(_expect_list(node)):
        with _within(f"[{i}]"):
            for key, value in _expect_dict(entry).items():
                with _within(str(key)):
                    if key == "translate":
                        transform = transform.translate(*_as_floats(value, 3, TYPE_V3))
                    elif key == "scale":
                        transform = transform.scale(*_as_floats(value, 3, TYPE_V3))
                    elif key == "shear":
                        transform = transform.shear(
                            *_as_floats(value, 6, "6 floating-point values")
                        )
                    elif key in ("rotate_x", "rotate_y", "rotate_z"):
                        if not _is_number(value):
                            raise SceneParseError(f"expected {TYPE_F32}")
                        transform = getattr(transform, key)(math.radians(value))
                    else:
                        raise SceneParseError(f"unknown value {key}")
    return transform


def _read_optional_transformations(node: dict) -> Transform | None:
    if "transformations" not in node:
        return None
    with _within("transformations"):
        return _read_transformations(node["transformations"])


def _read_pattern(node: Any) -> Pattern:
    node = _expect_dict(node)
    unknown = set(node) - {"type", "a", "b", "transformations"}
    if unknown:
        raise SceneParseError(f"unknown value {sorted(unknown)[0]}")
    kind = node.get("type", _MISSING)
    if kind is _MISSING:
        raise SceneParseError('"type" missing')
    if kind not in PATTERN_TYPES:
        raise SceneParseError(f"unknown value {kind}")

    a = _read_v3(node, "a", (1.0, 1.0, 1.0))
    if kind == "solid":
        pattern: Pattern = SolidPattern(a)
    else:
        pattern = PATTERN_TYPES[kind](a, _read_v3(node, "b", (0.0, 0.0, 0.0)))

    transform = _read_optional_transformations(node)
    if transform is not None:
        pattern = TransformedPattern(pattern, transform.matrix)
    return pattern


def _read_material(node: Any) -> Material:
    node = _expect_dict(node)
    unknown = set(node) - MATERIAL_KEYS
    if unknown:
        raise SceneParseError(f"unknown value {sorted(unknown)[0]}")

    defaults = Material()
    material = Material(
        color=_read_v3(node, "color", defaults.color),
        ambient=_read_float(node, "ambient", defaults.ambient),
        diffuse=_read_float(node, "diffuse", defaults.diffuse),
        specular=_read_float(node, "specular", defaults.specular),
        shininess=_read_float(node, "shininess", defaults.shininess),
        reflective=_read_float(node, "reflective", defaults.reflective),
        transparency=_read_float(node, "transparency", defaults.transparency),
        refractive_index=_read_float(node, "refractive_index", defaults.refractive_index),
    )
    if "pattern" in node:
        with _within("pattern"):
            material.pattern = _read_pattern(node["pattern"])
    try:
        validate_material(material)
    except ValueError as e:
        raise SceneParseError(str(e)) from e
    return material


class _MaterialTable:
    """Resolves inline and named materials, sharing one object per name.

    Shapes without a material share a single default ``Material``.
    """

    def __init__(self, root: dict) -> None:
        self._root = root
        self._named: dict[str, Material] = {}
        self._default = Material()

    def resolve(self, node: dict) -> Material:
        value = node.get("material", _MISSING)
        if value is _MISSING:
            return self._default
        with _within("material"):
            if isinstance(value, str):
                return self._lookup(value)
            if isinstance(value, dict):
                return _read_material(value)
            raise SceneParseError("expected dict or entry")

    def _lookup(self, name: str) -> Material:
        if name not in self._named:
            if name not in self._root:
                raise SceneParseError(f'"{name}" missing')
            with _within(name):
                self._named[name] = _read_material(self._root[name])
        return self._named[name]


# =============================================================================
# Shapes
# =============================================================================


def _read_waves(node: dict) -> list[Wave]:
    waves = []
    with _within("waves"):
        entries = _expect_list(node.get("waves", []))
        if len(entries) > MAX_WAVES:
            raise SceneParseError(f"at most {MAX_WAVES} waves, got {len(entries)}")
        for i, entry in enumerate(entries):
            with _within(f"[{i}]"):
                entry = _expect_dict(entry)
                waves.append(
                    Wave(
                        origin=_read_v3(entry, "origin", (0.0, 0.0, 0.0)),
                        wavelength=_read_float(entry, "wavelength"),
                        amplitude=_read_float(entry, "amplitude"),
                    )
                )
    return waves


def _read_geometry(kind: str, node: dict, base_dir: Path) -> list:
    if kind == "sphere":
        return [Sphere()]
    if kind == "plane":
        return [Plane()]
    if kind == "cube":
        return [Cube()]
    if kind == "cylinder":
        closed = node.get("closed", False)
        if not isinstance(closed, bool):
            raise SceneParseError('"closed" expected boolean')
        return [
            Cylinder(
                minimum=_read_float(node, "minimum", -math.inf),
                maximum=_read_float(node, "maximum", math.inf),
                closed=closed,
            )
        ]
    if kind == "triangle":
        return [Triangle(_read_v3(node, "p1"), _read_v3(node, "p2"), _read_v3(node, "p3"))]
    if kind == "wavy_plane":
        return [WavyPlane(_read_waves(node))]

    filename = node.get("file", _MISSING)
    if filename is _MISSING:
        raise SceneParseError('"file" missing')
    if not isinstance(filename, str):
        raise SceneParseError('"file" expected string')
    with _within("file"):
        try:
            return load_obj(base_dir / filename)
        except (OSError, ObjParseError) as e:
            raise SceneParseError(str(e)) from e


def _read_shape(
    entry: Any, materials: _MaterialTable, base_dir: Path
) -> tuple[list, Material, Transform | None]:
    entry = _expect_dict(entry)
    if len(entry) != 1:
        raise SceneParseError("expected exactly one shape per entry")
    kind, node = next(iter(entry.items()))
    if kind not in SHAPE_TYPES:
        raise SceneParseError(f"unknown value {kind}")

    with _within(kind):
        node = {} if node is None else _expect_dict(node)
        try:
            geometry = _read_geometry(kind, node, base_dir)
        except ValueError as e:
            if isinstance(e, SceneParseError):
                raise
            raise SceneParseError(str(e)) from e
        material = materials.resolve(node)
        transform = _read_optional_transformations(node)
    return geometry, material, transform


# =============================================================================
# Public interface
# =============================================================================


def parse_scene(text: str, base_dir: str | Path = ".") -> tuple[Camera, World]:
    """Build a camera and world from YAML text.

    Creating the world resets the shape, material and light registries.

    Args:
        text: YAML scene description.
        base_dir: Directory that relative mesh paths are resolved against.

    Returns:
        Tuple of (Camera, World).

    Raises:
        SceneParseError: If the description is malformed.
    """
    try:
        root = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SceneParseError(f"invalid YAML: {e}") from e
    if not isinstance(root, dict):
        raise SceneParseError("expected dict at top level")

    with _within("camera"):
        if "camera" not in root:
            raise SceneParseError("element missing")
        camera = _read_camera(root["camera"])

    max_depth = None
    if "max_depth" in root:
        max_depth = _read_int(root, "max_depth")

    with _within("lights"):
        lights = _read_lights(root.get("lights", []))

    materials = _MaterialTable(root)
    shapes = []
    with _within("shapes"):
        if "shapes" not in root:
            raise SceneParseError("element missing")
        for i, entry in enumerate(_expect_list(root["shapes"])):
            with _within(f"[{i}]"):
                shapes.append(_read_shape(entry, materials, Path(base_dir)))

    try:
        world = World(max_depth)
        for light in lights:
            world.add_light(light)
        for geometry, material, transform in shapes:
            world.add_mesh(geometry, material, transform)
    except (ValueError, RuntimeError) as e:
        raise SceneParseError(str(e)) from e
    return camera, world


def load_scene(path: str | Path) -> tuple[Camera, World]:
    """Read a scene file; mesh paths are relative to the file's directory.

    Raises:
        OSError: If the file cannot be read.
        SceneParseError: If the description is malformed.
    """
    path = Path(path)
    return parse_scene(path.read_text(), base_dir=path.parent)
