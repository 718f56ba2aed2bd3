"""Homogeneous 4-component vectors and 4x4 matrices.

Points carry w = 1 and vectors carry w = 0, so translations move points but
leave directions untouched. Kernel-side helpers operate on ``tm.vec4`` and
``tm.mat4``; the host-side helpers build and invert matrices with numpy before
they are uploaded to Taichi fields.

Example:
    >>> m = translation(5.0, -3.0, 2.0)
    >>> apply(m, make_point(-3.0, 4.0, 5.0))
    array([2., 1., 7., 1.], dtype=float32)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

vec3 = tm.vec3
vec4 = tm.vec4
mat4 = tm.mat4

Matrix4 = npt.NDArray[np.float32]
Vector4 = npt.NDArray[np.float32]

# Tolerance used for approximate comparisons of host-side values
EPSILON = 1e-4

# Determinants smaller than this are treated as singular
SINGULAR_EPSILON = 1e-12


# =============================================================================
# Kernel-side helpers
# =============================================================================


@ti.func
def point(x: ti.f32, y: ti.f32, z: ti.f32) -> vec4:
    """Build a homogeneous point (w = 1)."""
    return vec4(x, y, z, 1.0)


@ti.func
def vector(x: ti.f32, y: ti.f32, z: ti.f32) -> vec4:
    """Build a homogeneous direction (w = 0)."""
    return vec4(x, y, z, 0.0)


@ti.func
def dot4(a: vec4, b: vec4) -> ti.f32:
    return a.x * b.x + a.y * b.y + a.z * b.z + a.w * b.w


@ti.func
def cross4(a: vec4, b: vec4) -> vec4:
    """Cross product of the xyz parts; the result is a vector."""
    return vec4(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
        0.0,
    )


@ti.func
def magnitude(v: vec4) -> ti.f32:
    return ti.sqrt(dot4(v, v))


@ti.func
def normalize4(v: vec4) -> vec4:
    return v / magnitude(v)


@ti.func
def reflect4(v: vec4, n: vec4) -> vec4:
    """Reflect v about the normal n: v - 2(v.n)n."""
    return v - n * 2.0 * dot4(v, n)


@ti.func
def as_vector(v: vec4) -> vec4:
    """Drop the w component of a transformed normal."""
    return vec4(v.x, v.y, v.z, 0.0)


# =============================================================================
# Host-side helpers
# =============================================================================


def make_point(x: float, y: float, z: float) -> Vector4:
    return np.array([x, y, z, 1.0], dtype=np.float32)


def make_vector(x: float, y: float, z: float) -> Vector4:
    return np.array([x, y, z, 0.0], dtype=np.float32)


def normalize(v) -> Vector4:
    v = np.asarray(v, dtype=np.float64)
    length = np.linalg.norm(v)
    if length == 0.0:
        raise ValueError("cannot normalize a zero-length vector")
    return (v / length).astype(np.float32)


def cross(a, b) -> Vector4:
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    xyz = np.cross(a[:3], b[:3])
    return np.array([xyz[0], xyz[1], xyz[2], 0.0], dtype=np.float32)


def identity() -> Matrix4:
    return np.identity(4, dtype=np.float32)


def matmul(a, b) -> Matrix4:
    """Multiply two 4x4 matrices."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    return (a @ b).astype(np.float32)


def apply(m, v) -> Vector4:
    """Transform a point or vector by a 4x4 matrix."""
    return (np.asarray(m, dtype=np.float64) @ np.asarray(v, dtype=np.float64)).astype(
        np.float32
    )


def transpose(m) -> Matrix4:
    return np.asarray(m, dtype=np.float32).T.copy()


def submatrix(m, row: int, col: int) -> npt.NDArray[np.float64]:
    """Remove one row and one column."""
    m = np.asarray(m, dtype=np.float64)
    return np.delete(np.delete(m, row, axis=0), col, axis=1)


def determinant(m) -> float:
    """Determinant by cofactor expansion along the first row."""
    m = np.asarray(m, dtype=np.float64)
    if m.shape == (2, 2):
        return float(m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0])
    return float(sum(m[0, col] * cofactor(m, 0, col) for col in range(m.shape[1])))


def minor(m, row: int, col: int) -> float:
    return determinant(submatrix(m, row, col))


def cofactor(m, row: int, col: int) -> float:
    value = minor(m, row, col)
    return -value if (row + col) % 2 else value


def is_invertible(m) -> bool:
    return abs(determinant(m)) > SINGULAR_EPSILON


def invert(m) -> Matrix4:
    """Invert a 4x4 matrix.

    Raises:
        ValueError: If the matrix is singular.
    """
    m = np.asarray(m, dtype=np.float64)
    det = determinant(m)
    if abs(det) <= SINGULAR_EPSILON:
        raise ValueError("matrix is not invertible (determinant is 0)")

    size = m.shape[0]
    result = np.empty((size, size), dtype=np.float64)
    for row in range(size):
        for col in range(size):
            # Transposed write builds the adjugate
            result[col, row] = cofactor(m, row, col) / det
    return result.astype(np.float32)


def approx_equal(a, b, epsilon: float = EPSILON) -> bool:
    return bool(np.allclose(np.asarray(a), np.asarray(b), atol=epsilon, rtol=0.0))


def to_taichi(m) -> ti.Matrix:
    """Convert a host matrix for assignment into a ``ti.Matrix.field``."""
    return ti.Matrix(np.asarray(m, dtype=np.float32).tolist())
