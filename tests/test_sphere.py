"""Unit tests for sphere intersection and normals.

Tests cover:
- Ray hitting the unit sphere from outside, tangent, and from inside
- Sphere behind the ray
- Transformed spheres
- Normals, including under scaling and rotation
"""

import math

import taichi as ti


class TestSphereIntersection:
    """Tests for the object-space intersection routine."""

    def test_two_points(self):
        from src.whitted.core.linalg import point, vector
        from src.whitted.core.ray import make_ray
        from src.whitted.geometry.sphere import intersect_sphere

        slots = ti.Vector.field(4, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            slots[None] = intersect_sphere(make_ray(point(0.0, 0.0, -5.0), vector(0.0, 0.0, 1.0)))

        test_kernel()
        s = slots[None]
        assert abs(s[0] - 4.0) < 1e-5
        assert abs(s[1] - 6.0) < 1e-5

    def test_tangent_reports_same_distance_twice(self):
        from src.whitted.geometry.shape import add_shape, intersect
        from src.whitted.geometry.sphere import Sphere

        handle = add_shape(Sphere())
        ts = intersect(handle, (0, 1, -5), (0, 0, 1))
        assert len(ts) == 2
        assert abs(ts[0] - 5.0) < 1e-3
        assert abs(ts[1] - 5.0) < 1e-3

    def test_miss(self):
        from src.whitted.geometry.shape import add_shape, intersect
        from src.whitted.geometry.sphere import Sphere

        handle = add_shape(Sphere())
        assert intersect(handle, (0, 2, -5), (0, 0, 1)) == []

    def test_ray_inside_sphere(self):
        from src.whitted.geometry.shape import add_shape, intersect
        from src.whitted.geometry.sphere import Sphere

        handle = add_shape(Sphere())
        ts = sorted(intersect(handle, (0, 0, 0), (0, 0, 1)))
        assert abs(ts[0] - (-1.0)) < 1e-5
        assert abs(ts[1] - 1.0) < 1e-5

    def test_sphere_behind_ray(self):
        from src.whitted.geometry.shape import add_shape, intersect
        from src.whitted.geometry.sphere import Sphere

        handle = add_shape(Sphere())
        ts = sorted(intersect(handle, (0, 0, 5), (0, 0, 1)))
        assert abs(ts[0] - (-6.0)) < 1e-5
        assert abs(ts[1] - (-4.0)) < 1e-5

    def test_scaled_sphere(self):
        from src.whitted.core.transform import scaling
        from src.whitted.geometry.shape import add_shape, intersect
        from src.whitted.geometry.sphere import Sphere

        handle = add_shape(Sphere(), scaling(2, 2, 2))
        ts = sorted(intersect(handle, (0, 0, -5), (0, 0, 1)))
        assert abs(ts[0] - 3.0) < 1e-5
        assert abs(ts[1] - 7.0) < 1e-5

    def test_translated_sphere(self):
        from src.whitted.core.transform import translation
        from src.whitted.geometry.shape import add_shape, intersect
        from src.whitted.geometry.sphere import Sphere

        handle = add_shape(Sphere(), translation(5, 0, 0))
        assert intersect(handle, (0, 0, -5), (0, 0, 1)) == []


class TestSphereNormals:
    """Tests for sphere surface normals."""

    def test_normal_on_axes(self):
        from src.whitted.geometry.shape import add_shape, normal_at
        from src.whitted.geometry.sphere import Sphere

        handle = add_shape(Sphere())
        n = normal_at(handle, (1, 0, 0))
        assert abs(n[0] - 1.0) < 1e-5
        n = normal_at(handle, (0, 0, 1))
        assert abs(n[2] - 1.0) < 1e-5

    def test_normal_is_normalized(self):
        from src.whitted.geometry.shape import add_shape, normal_at
        from src.whitted.geometry.sphere import Sphere

        handle = add_shape(Sphere())
        s = math.sqrt(3) / 3
        n = normal_at(handle, (s, s, s))
        for k in range(3):
            assert abs(n[k] - s) < 1e-5
        assert n[3] == 0.0

    def test_normal_on_translated_sphere(self):
        from src.whitted.core.transform import translation
        from src.whitted.geometry.shape import add_shape, normal_at
        from src.whitted.geometry.sphere import Sphere

        handle = add_shape(Sphere(), translation(0, 1, 0))
        n = normal_at(handle, (0, 1.70711, -0.70711))
        assert abs(n[0]) < 1e-4
        assert abs(n[1] - 0.70711) < 1e-4
        assert abs(n[2] - (-0.70711)) < 1e-4

    def test_normal_on_transformed_sphere(self):
        from src.whitted.core.transform import Transform
        from src.whitted.geometry.shape import add_shape, normal_at
        from src.whitted.geometry.sphere import Sphere

        m = Transform().scale(1, 0.5, 1).rotate_z(math.pi / 5).matrix
        handle = add_shape(Sphere(), m)
        s = math.sqrt(2) / 2
        n = normal_at(handle, (0, s, -s))
        assert abs(n[0]) < 1e-4
        assert abs(n[1] - 0.97014) < 1e-4
        assert abs(n[2] - (-0.24254)) < 1e-4
