"""Tests for the axis-aligned cube."""

import pytest


class TestCubeIntersection:
    @pytest.mark.parametrize(
        "origin, direction, t1, t2",
        [
            ((5, 0.5, 0), (-1, 0, 0), 4, 6),
            ((-5, 0.5, 0), (1, 0, 0), 4, 6),
            ((0.5, 5, 0), (0, -1, 0), 4, 6),
            ((0.5, -5, 0), (0, 1, 0), 4, 6),
            ((0.5, 0, 5), (0, 0, -1), 4, 6),
            ((0.5, 0, -5), (0, 0, 1), 4, 6),
            ((0, 0.5, 0), (0, 0, 1), -1, 1),
        ],
    )
    def test_ray_hits_face(self, origin, direction, t1, t2):
        from src.whitted.geometry.cube import Cube
        from src.whitted.geometry.shape import add_shape, intersect

        handle = add_shape(Cube())
        ts = sorted(intersect(handle, origin, direction))
        assert len(ts) == 2
        assert abs(ts[0] - t1) < 1e-5
        assert abs(ts[1] - t2) < 1e-5

    @pytest.mark.parametrize(
        "origin, direction",
        [
            ((-2, 0, 0), (0.2673, 0.5345, 0.8018)),
            ((0, -2, 0), (0.8018, 0.2673, 0.5345)),
            ((0, 0, -2), (0.5345, 0.8018, 0.2673)),
            ((2, 0, 2), (0, 0, -1)),
            ((0, 2, 2), (0, -1, 0)),
            ((2, 2, 0), (-1, 0, 0)),
        ],
    )
    def test_ray_misses(self, origin, direction):
        from src.whitted.geometry.cube import Cube
        from src.whitted.geometry.shape import add_shape, intersect

        handle = add_shape(Cube())
        assert intersect(handle, origin, direction) == []


class TestCubeNormals:
    @pytest.mark.parametrize(
        "p, expected",
        [
            ((1, 0.5, -0.8), (1, 0, 0)),
            ((-1, -0.2, 0.9), (-1, 0, 0)),
            ((-0.4, 1, -0.1), (0, 1, 0)),
            ((0.3, -1, -0.7), (0, -1, 0)),
            ((-0.6, 0.3, 1), (0, 0, 1)),
            ((0.4, 0.4, -1), (0, 0, -1)),
            ((1, 1, 1), (0, 0, 1)),
            ((-1, -1, -1), (0, 0, -1)),
        ],
    )
    def test_normal_of_face(self, p, expected):
        from src.whitted.geometry.cube import Cube
        from src.whitted.geometry.shape import add_shape, normal_at

        handle = add_shape(Cube())
        n = normal_at(handle, p)
        for k in range(3):
            assert abs(n[k] - expected[k]) < 1e-5
