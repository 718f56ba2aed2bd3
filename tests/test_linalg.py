"""Tests for homogeneous vectors and 4x4 matrices.

Tests cover:
- Point and vector construction and the w-component rules
- Magnitude, normalization, dot and cross products
- Matrix multiplication, transpose, determinant and inversion
- Taichi-side helpers (dot4, cross4, reflect4)
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestTuples:
    """Tests for points and vectors on the host side."""

    def test_point_has_w_one(self):
        from src.whitted.core.linalg import make_point

        p = make_point(4.3, -4.2, 3.1)
        assert p[3] == 1.0

    def test_vector_has_w_zero(self):
        from src.whitted.core.linalg import make_vector

        v = make_vector(4.3, -4.2, 3.1)
        assert v[3] == 0.0

    def test_point_minus_point_is_vector(self):
        from src.whitted.core.linalg import approx_equal, make_point, make_vector

        diff = make_point(3, 2, 1) - make_point(5, 6, 7)
        assert approx_equal(diff, make_vector(-2, -4, -6))

    def test_point_plus_vector_is_point(self):
        from src.whitted.core.linalg import approx_equal, make_point, make_vector

        result = make_point(3, -2, 5) + make_vector(-2, 3, 1)
        assert approx_equal(result, make_point(1, 1, 6))

    def test_normalize(self):
        from src.whitted.core.linalg import make_vector, normalize

        n = normalize(make_vector(1, 2, 3))
        assert abs(np.linalg.norm(n) - 1.0) < 1e-6
        assert abs(n[0] - 1 / math.sqrt(14)) < 1e-6

    def test_normalize_zero_vector_raises(self):
        from src.whitted.core.linalg import make_vector, normalize

        with pytest.raises(ValueError):
            normalize(make_vector(0, 0, 0))

    def test_cross_product(self):
        from src.whitted.core.linalg import approx_equal, cross, make_vector

        a = make_vector(1, 2, 3)
        b = make_vector(2, 3, 4)
        assert approx_equal(cross(a, b), make_vector(-1, 2, -1))
        assert approx_equal(cross(b, a), make_vector(1, -2, 1))


class TestMatrices:
    """Tests for matrix operations."""

    def test_identity_times_tuple(self):
        from src.whitted.core.linalg import apply, approx_equal, identity

        v = np.array([1, 2, 3, 4], dtype=np.float32)
        assert approx_equal(apply(identity(), v), v)

    def test_matmul(self):
        from src.whitted.core.linalg import matmul

        a = np.array(
            [[1, 2, 3, 4], [5, 6, 7, 8], [9, 8, 7, 6], [5, 4, 3, 2]], dtype=np.float32
        )
        b = np.array(
            [[-2, 1, 2, 3], [3, 2, 1, -1], [4, 3, 6, 5], [1, 2, 7, 8]], dtype=np.float32
        )
        expected = np.array(
            [[20, 22, 50, 48], [44, 54, 114, 108], [40, 58, 110, 102], [16, 26, 46, 42]]
        )
        assert np.allclose(matmul(a, b), expected)

    def test_transpose_identity(self):
        from src.whitted.core.linalg import identity, transpose

        assert np.allclose(transpose(identity()), identity())

    def test_determinant_4x4(self):
        from src.whitted.core.linalg import cofactor, determinant

        m = np.array(
            [[-2, -8, 3, 5], [-3, 1, 7, 3], [1, 2, -9, 6], [-6, 7, 7, -9]], dtype=np.float32
        )
        assert abs(cofactor(m, 0, 0) - 690) < 1e-3
        assert abs(cofactor(m, 0, 3) - 51) < 1e-3
        assert abs(determinant(m) - (-4071)) < 1e-2

    def test_singular_matrix_is_not_invertible(self):
        from src.whitted.core.linalg import invert, is_invertible

        m = np.array(
            [[-4, 2, -2, -3], [9, 6, 2, 6], [0, -5, 1, -5], [0, 0, 0, 0]], dtype=np.float32
        )
        assert not is_invertible(m)
        with pytest.raises(ValueError):
            invert(m)

    def test_inverse(self):
        from src.whitted.core.linalg import invert

        m = np.array(
            [[-5, 2, 6, -8], [1, -5, 1, 8], [7, 7, -6, -7], [1, -3, 7, 4]], dtype=np.float32
        )
        inv = invert(m)
        assert abs(inv[3, 2] - (-160 / 532)) < 1e-5
        assert abs(inv[2, 3] - (105 / 532)) < 1e-5
        assert abs(inv[0, 0] - 0.21805) < 1e-5

    def test_product_times_inverse_round_trip(self):
        from src.whitted.core.linalg import invert, matmul

        a = np.array(
            [[3, -9, 7, 3], [3, -8, 2, -9], [-4, 4, 4, 1], [-6, 5, -1, 1]], dtype=np.float32
        )
        b = np.array(
            [[8, 2, 2, 2], [3, -1, 7, 0], [7, 0, 5, 4], [6, -2, 0, 5]], dtype=np.float32
        )
        c = matmul(a, b)
        assert np.allclose(matmul(c, invert(b)), a, atol=1e-4)


def _invertible_matrices():
    from src.whitted.core.transform import Transform

    return [
        np.array([[-5, 2, 6, -8], [1, -5, 1, 8], [7, 7, -6, -7], [1, -3, 7, 4]], dtype=np.float32),
        np.array([[8, -5, 9, 2], [7, 5, 6, 1], [-6, 0, 9, 6], [-3, 0, -9, -4]], dtype=np.float32),
        np.array([[9, 3, 0, 9], [-5, -2, -6, -3], [-4, 9, 6, 4], [-7, 6, 6, 2]], dtype=np.float32),
        Transform().translate(1, -2, 3).rotate_x(0.4).scale(2, 0.5, 3).shear(1, 0, 0, 0.5, 0, 0).matrix,
    ]


class TestInverseProperties:
    """Inversion undoes itself and the matrix it came from."""

    @pytest.mark.parametrize("index", range(4))
    def test_double_inverse(self, index):
        from src.whitted.core.linalg import invert

        m = _invertible_matrices()[index]
        assert np.allclose(invert(invert(m)), m, atol=1e-4)

    @pytest.mark.parametrize("index", range(4))
    def test_product_with_inverse_is_identity(self, index):
        from src.whitted.core.linalg import identity, invert, matmul

        m = _invertible_matrices()[index]
        assert np.allclose(matmul(m, invert(m)), identity(), atol=1e-4)
        assert np.allclose(matmul(invert(m), m), identity(), atol=1e-4)


class TestTaichiHelpers:
    """Tests for the kernel-side vector helpers."""

    def test_dot_cross_reflect(self):
        from src.whitted.core.linalg import cross4, dot4, reflect4, vec4, vector

        dot_result = ti.field(dtype=ti.f32, shape=())
        cross_result = ti.Vector.field(4, dtype=ti.f32, shape=())
        reflect_result = ti.Vector.field(4, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            dot_result[None] = dot4(vector(1.0, 2.0, 3.0), vector(2.0, 3.0, 4.0))
            cross_result[None] = cross4(vector(1.0, 0.0, 0.0), vector(0.0, 1.0, 0.0))
            reflect_result[None] = reflect4(vector(1.0, -1.0, 0.0), vector(0.0, 1.0, 0.0))

        test_kernel()
        assert abs(dot_result[None] - 20.0) < 1e-6
        c = cross_result[None]
        assert abs(c[2] - 1.0) < 1e-6
        assert abs(c[3]) < 1e-6
        r = reflect_result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6

    def test_reflect_off_slanted_surface(self):
        from src.whitted.core.linalg import reflect4, vector

        result = ti.Vector.field(4, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            s = ti.sqrt(2.0) / 2.0
            result[None] = reflect4(vector(0.0, -1.0, 0.0), vector(s, s, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-5
        assert abs(r[1]) < 1e-5
