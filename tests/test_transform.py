"""Tests for transformation matrices and the Transform builder."""

import math

import numpy as np
import pytest


class TestFactories:
    """Tests for the individual transformation factories."""

    def test_translation_moves_points_not_vectors(self):
        from src.whitted.core.linalg import apply, approx_equal, make_point, make_vector
        from src.whitted.core.transform import translation

        t = translation(5, -3, 2)
        assert approx_equal(apply(t, make_point(-3, 4, 5)), make_point(2, 1, 7))
        assert approx_equal(apply(t, make_vector(-3, 4, 5)), make_vector(-3, 4, 5))

    def test_scaling_with_reflection(self):
        from src.whitted.core.linalg import apply, approx_equal, make_point
        from src.whitted.core.transform import scaling

        assert approx_equal(apply(scaling(-1, 1, 1), make_point(2, 3, 4)), make_point(-2, 3, 4))

    def test_rotations(self):
        from src.whitted.core.linalg import apply, approx_equal, make_point
        from src.whitted.core.transform import rotation_x, rotation_y, rotation_z

        s = math.sqrt(2) / 2
        assert approx_equal(apply(rotation_x(math.pi / 4), make_point(0, 1, 0)), make_point(0, s, s))
        assert approx_equal(apply(rotation_y(math.pi / 2), make_point(0, 0, 1)), make_point(1, 0, 0))
        assert approx_equal(apply(rotation_z(math.pi / 2), make_point(0, 1, 0)), make_point(-1, 0, 0))

    @pytest.mark.parametrize(
        "params, expected",
        [
            ((1, 0, 0, 0, 0, 0), (5, 3, 4)),
            ((0, 1, 0, 0, 0, 0), (6, 3, 4)),
            ((0, 0, 1, 0, 0, 0), (2, 5, 4)),
            ((0, 0, 0, 1, 0, 0), (2, 7, 4)),
            ((0, 0, 0, 0, 1, 0), (2, 3, 6)),
            ((0, 0, 0, 0, 0, 1), (2, 3, 7)),
        ],
    )
    def test_shearing(self, params, expected):
        from src.whitted.core.linalg import apply, approx_equal, make_point
        from src.whitted.core.transform import shearing

        assert approx_equal(apply(shearing(*params), make_point(2, 3, 4)), make_point(*expected))


class TestViewTransform:
    """Tests for the camera orientation matrix."""

    def test_default_orientation_is_identity(self):
        from src.whitted.core.linalg import identity
        from src.whitted.core.transform import view_transform

        assert np.allclose(view_transform((0, 0, 0), (0, 0, -1), (0, 1, 0)), identity())

    def test_looking_in_positive_z_mirrors(self):
        from src.whitted.core.transform import scaling, view_transform

        assert np.allclose(view_transform((0, 0, 0), (0, 0, 1), (0, 1, 0)), scaling(-1, 1, -1))

    def test_moves_the_world(self):
        from src.whitted.core.transform import translation, view_transform

        assert np.allclose(view_transform((0, 0, 8), (0, 0, 0), (0, 1, 0)), translation(0, 0, -8))

    def test_arbitrary_view(self):
        from src.whitted.core.transform import view_transform

        expected = np.array(
            [
                [-0.50709, 0.50709, 0.67612, -2.36643],
                [0.76772, 0.60609, 0.12122, -2.82843],
                [-0.35857, 0.59761, -0.71714, 0.00000],
                [0.00000, 0.00000, 0.00000, 1.00000],
            ]
        )
        assert np.allclose(view_transform((1, 3, 2), (4, -2, 8), (1, 1, 0)), expected, atol=1e-4)


class TestTransformBuilder:
    """Tests for chained transforms."""

    def test_chain_applies_last_operation_first(self):
        from src.whitted.core.linalg import approx_equal, make_point
        from src.whitted.core.transform import Transform

        t = Transform().translate(10, 5, 7).scale(5, 5, 5).rotate_x(math.pi / 2)
        assert approx_equal(t.apply(make_point(1, 0, 1)), make_point(15, 0, 7))

    def test_builder_is_immutable(self):
        from src.whitted.core.linalg import identity
        from src.whitted.core.transform import Transform

        base = Transform()
        base.translate(1, 2, 3)
        assert np.allclose(base.matrix, identity())

    def test_inverse_undoes_transform(self):
        from src.whitted.core.linalg import approx_equal, make_point
        from src.whitted.core.transform import Transform

        t = Transform().translate(1, 2, 3).rotate_y(0.7).shear(1, 0, 0, 0, 0, 1)
        p = make_point(-2, 0.5, 4)
        assert approx_equal(t.inverse().apply(t.apply(p)), p)

    def test_singular_transform_cannot_be_inverted(self):
        from src.whitted.core.transform import Transform

        with pytest.raises(ValueError):
            Transform().scale(0, 1, 1).inverse()
