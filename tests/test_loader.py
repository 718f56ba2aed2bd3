"""Tests for YAML scene descriptions.

Tests cover:
- Camera, lights and max_depth
- Every shape key, named and inline materials, patterns
- Transformations in degrees
- Error messages carrying the path to the offending element
"""

import math
import textwrap

import numpy as np
import pytest

CAMERA = """
camera:
  width: 40
  height: 20
  field_of_view: 90
  from: [0, 0, -5]
  to: [0, 0, 0]
"""


def _parse(body: str, base_dir="."):
    from src.whitted.scene.loader import parse_scene

    return parse_scene(CAMERA + textwrap.dedent(body), base_dir=base_dir)


def _parse_error(body: str) -> str:
    from src.whitted.scene.loader import SceneParseError

    with pytest.raises(SceneParseError) as excinfo:
        _parse(body)
    return str(excinfo.value)


class TestCameraAndLights:
    def test_camera(self):
        camera, _ = _parse("shapes: []\n")
        assert (camera.width, camera.height) == (40, 20)
        assert abs(camera.field_of_view - math.pi / 2) < 1e-6
        origin, _ = camera.ray_for_pixel(20, 10)
        assert np.allclose(origin, [0, 0, -5, 1], atol=1e-5)

    def test_lights(self):
        _, world = _parse(
            """
            lights:
              - point: {position: [-10, 10, -10]}
              - point: {position: [0, 5, 0], intensity: [0.5, 0.5, 0.5]}
            shapes: []
            """
        )
        assert world.get_light_count() == 2

    def test_max_depth(self):
        _, world = _parse("max_depth: 2\nshapes: []\n")
        assert world.max_depth == 2

    def test_max_depth_out_of_range(self):
        message = _parse_error("max_depth: 20\nshapes: []\n")
        assert "max_depth" in message

    def test_missing_camera(self):
        from src.whitted.scene.loader import SceneParseError, parse_scene

        with pytest.raises(SceneParseError, match="In camera: element missing"):
            parse_scene("shapes: []\n")

    def test_missing_shapes(self):
        assert _parse_error("lights: []\n") == "In shapes: element missing"

    def test_unknown_light_type(self):
        message = _parse_error("lights:\n  - spot: {position: [0, 0, 0]}\nshapes: []\n")
        assert message == "In lights: In [0]: unknown value spot"

    def test_invalid_yaml(self):
        from src.whitted.scene.loader import SceneParseError, parse_scene

        with pytest.raises(SceneParseError, match="invalid YAML"):
            parse_scene("camera: [1, 2\n")


class TestShapes:
    def test_every_primitive(self):
        from src.whitted.geometry.shape import ShapeKind

        _, world = _parse(
            """
            shapes:
              - sphere:
              - plane: {}
              - cube: {}
              - cylinder: {minimum: 0, maximum: 2, closed: true}
              - triangle: {p1: [0, 1, 0], p2: [-1, 0, 0], p3: [1, 0, 0]}
              - wavy_plane:
                  waves:
                    - {origin: [0, 0, 0], wavelength: 2.0, amplitude: 0.1}
            """
        )
        kinds = [world.get_shape_info(h).kind for h in range(world.get_shape_count())]
        assert kinds == [
            ShapeKind.SPHERE,
            ShapeKind.PLANE,
            ShapeKind.CUBE,
            ShapeKind.CYLINDER,
            ShapeKind.TRIANGLE,
            ShapeKind.WAVY_PLANE,
        ]
        cylinder = world.get_shape_info(3).shape
        assert (cylinder.minimum, cylinder.maximum, cylinder.closed) == (0.0, 2.0, True)

    def test_transformations_in_degrees(self):
        from src.whitted.core.transform import Transform

        _, world = _parse(
            """
            shapes:
              - sphere:
                  transformations:
                    - translate: [0, 1, 0]
                    - rotate_y: 90
                    - scale: [2, 2, 2]
            """
        )
        expected = Transform().translate(0, 1, 0).rotate_y(math.pi / 2).scale(2, 2, 2)
        assert np.allclose(world.get_shape_info(0).transform, expected.matrix, atol=1e-6)

    def test_sphere_is_hit_through_loaded_world(self):
        _, world = _parse(
            """
            lights:
              - point: {position: [-10, 10, -10]}
            shapes:
              - sphere:
                  transformations:
                    - translate: [0, 0, 1]
            """
        )
        hit = world.hit((0, 0, -5), (0, 0, 1))
        assert hit is not None
        assert abs(hit.t - 5.0) < 1e-4

    def test_mesh_relative_to_base_dir(self, tmp_path):
        (tmp_path / "tri.obj").write_text("v 0 1 0\nv -1 0 0\nv 1 0 0\nv 0 0 1\nf 1 2 3 4\n")
        _, world = _parse("shapes:\n  - mesh: {file: tri.obj}\n", base_dir=tmp_path)
        assert world.get_shape_count() == 2

    def test_missing_mesh_file(self, tmp_path):
        from src.whitted.scene.loader import SceneParseError

        with pytest.raises(SceneParseError, match=r"^In shapes: In \[0\]: In mesh: In file: "):
            _parse("shapes:\n  - mesh: {file: nope.obj}\n", base_dir=tmp_path)

    def test_unknown_shape(self):
        assert _parse_error("shapes:\n  - torus: {}\n") == "In shapes: In [0]: unknown value torus"

    def test_triangle_missing_point(self):
        message = _parse_error("shapes:\n  - triangle: {p1: [0, 1, 0], p2: [1, 0, 0]}\n")
        assert message == 'In shapes: In [0]: In triangle: "p3" missing'

    def test_bad_vector(self):
        message = _parse_error("shapes:\n  - triangle: {p1: [0, 1], p2: [1, 0, 0], p3: [0, 0, 0]}\n")
        assert message == "In shapes: In [0]: In triangle: In p1: expected 3 floating-point values"

    def test_unknown_transformation(self):
        message = _parse_error(
            "shapes:\n  - sphere:\n      transformations:\n        - spin: 3\n"
        )
        assert message == "In shapes: In [0]: In sphere: In transformations: In [0]: In spin: unknown value spin"

    def test_singular_transformation(self):
        message = _parse_error(
            "shapes:\n  - sphere:\n      transformations:\n        - scale: [0, 1, 1]\n"
        )
        assert message


class TestMaterials:
    def test_inline_material_and_defaults(self):
        _, world = _parse(
            """
            shapes:
              - sphere:
                  material: {color: [1, 0, 0], reflective: 0.5}
              - plane: {}
            """
        )
        red = world.get_shape_info(0)
        default = world.get_shape_info(1)
        assert red.material_id != default.material_id
        assert world.refractive_index(1) == 1.0

    def test_named_material_shared(self):
        _, world = _parse(
            """
            glass: {transparency: 1.0, refractive_index: 1.5}
            shapes:
              - sphere: {material: glass}
              - cube: {material: glass}
            """
        )
        assert world.get_shape_info(0).material_id == world.get_shape_info(1).material_id
        assert abs(world.refractive_index(1) - 1.5) < 1e-6

    def test_missing_named_material(self):
        message = _parse_error("shapes:\n  - sphere: {material: gold}\n")
        assert message == 'In shapes: In [0]: In sphere: In material: "gold" missing'

    def test_bad_material_value(self):
        message = _parse_error(
            "shapes:\n  - plane: {}\n  - sphere:\n      material: {ambient: high}\n"
        )
        assert message == 'In shapes: In [1]: In sphere: In material: "ambient" expected floating-point value'

    def test_unknown_material_key(self):
        message = _parse_error("shapes:\n  - sphere:\n      material: {glow: 1}\n")
        assert message.endswith("unknown value glow")

    def test_invalid_material_range(self):
        message = _parse_error("shapes:\n  - sphere:\n      material: {refractive_index: 0.5}\n")
        assert "refraction" in message

    def test_pattern(self):
        from src.whitted.materials.pattern import StripePattern, TransformedPattern
        from src.whitted.scene.loader import _read_material

        material = _read_material(
            {
                "pattern": {
                    "type": "stripes",
                    "a": [1, 1, 1],
                    "b": [0, 0, 0],
                    "transformations": [{"scale": [2, 2, 2]}],
                }
            }
        )
        assert isinstance(material.pattern, TransformedPattern)
        assert isinstance(material.pattern.pattern, StripePattern)
        assert np.allclose(material.pattern.color_at((1.5, 0, 0)), [1, 1, 1])
        assert np.allclose(material.pattern.color_at((2.5, 0, 0)), [0, 0, 0])

    def test_unknown_pattern_type(self):
        message = _parse_error(
            "shapes:\n  - sphere:\n      material:\n        pattern: {type: dots}\n"
        )
        assert message.endswith("In material: In pattern: unknown value dots")


class TestLoadScene:
    def test_load_showcase(self):
        from pathlib import Path

        from src.whitted.scene.loader import load_scene

        scene = Path(__file__).parent.parent / "examples" / "scenes" / "showcase.yaml"
        camera, world = load_scene(scene)
        assert (camera.width, camera.height) == (400, 200)
        assert world.get_shape_count() > 7
        assert world.get_light_count() == 2

    def test_missing_file(self, tmp_path):
        from src.whitted.scene.loader import load_scene

        with pytest.raises(OSError):
            load_scene(tmp_path / "missing.yaml")
