"""Affine transformation matrices and a chaining builder.

Each factory returns a 4x4 float32 numpy matrix. ``Transform`` composes them
by right-multiplication, so the last operation in a chain is the first one
applied to a point:

    >>> t = Transform().translate(10, 5, 7).scale(5, 5, 5).rotate_x(math.pi / 2)
    >>> # equivalent to translation @ scaling @ rotation_x

Rotation angles are in radians.
"""

from __future__ import annotations

import math

import numpy as np

from src.whitted.core.linalg import (
    Matrix4,
    Vector4,
    apply,
    cross,
    identity,
    invert,
    make_point,
    make_vector,
    matmul,
    normalize,
)


def translation(x: float, y: float, z: float) -> Matrix4:
    m = identity()
    m[0, 3] = x
    m[1, 3] = y
    m[2, 3] = z
    return m


def scaling(x: float, y: float, z: float) -> Matrix4:
    m = identity()
    m[0, 0] = x
    m[1, 1] = y
    m[2, 2] = z
    return m


def rotation_x(radians: float) -> Matrix4:
    c, s = math.cos(radians), math.sin(radians)
    m = identity()
    m[1, 1] = c
    m[1, 2] = -s
    m[2, 1] = s
    m[2, 2] = c
    return m


def rotation_y(radians: float) -> Matrix4:
    c, s = math.cos(radians), math.sin(radians)
    m = identity()
    m[0, 0] = c
    m[0, 2] = s
    m[2, 0] = -s
    m[2, 2] = c
    return m


def rotation_z(radians: float) -> Matrix4:
    c, s = math.cos(radians), math.sin(radians)
    m = identity()
    m[0, 0] = c
    m[0, 1] = -s
    m[1, 0] = s
    m[1, 1] = c
    return m


def shearing(xy: float, xz: float, yx: float, yz: float, zx: float, zy: float) -> Matrix4:
    """Shear each axis in proportion to the other two.

    ``xy`` moves x in proportion to y, ``xz`` moves x in proportion to z, etc.
    """
    m = identity()
    m[0, 1] = xy
    m[0, 2] = xz
    m[1, 0] = yx
    m[1, 2] = yz
    m[2, 0] = zx
    m[2, 1] = zy
    return m


def view_transform(from_point, to_point, up) -> Matrix4:
    """Orient the world relative to an eye at ``from_point`` looking at ``to_point``.

    Args:
        from_point: Eye position (x, y, z).
        to_point: Point being looked at (x, y, z).
        up: Approximate up direction (x, y, z); need not be normalized.

    Returns:
        The world-to-camera matrix.

    Raises:
        ValueError: If the eye and target coincide or ``up`` is degenerate.
    """
    eye = make_point(*from_point[:3])
    target = make_point(*to_point[:3])
    forward = normalize(target - eye)
    left = cross(forward, normalize(make_vector(*up[:3])))
    true_up = cross(left, forward)

    orientation = np.array(
        [
            [left[0], left[1], left[2], 0.0],
            [true_up[0], true_up[1], true_up[2], 0.0],
            [-forward[0], -forward[1], -forward[2], 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ],
        dtype=np.float32,
    )
    return matmul(orientation, translation(-eye[0], -eye[1], -eye[2]))


class Transform:
    """Fluent builder for composed transformation matrices.

    Every method returns a new ``Transform``; the receiver is left unchanged.
    """

    def __init__(self, matrix: Matrix4 | None = None) -> None:
        self.matrix = identity() if matrix is None else np.asarray(matrix, dtype=np.float32)

    def _then(self, m: Matrix4) -> Transform:
        return Transform(matmul(self.matrix, m))

    def translate(self, x: float, y: float, z: float) -> Transform:
        return self._then(translation(x, y, z))

    def scale(self, x: float, y: float, z: float) -> Transform:
        return self._then(scaling(x, y, z))

    def rotate_x(self, radians: float) -> Transform:
        return self._then(rotation_x(radians))

    def rotate_y(self, radians: float) -> Transform:
        return self._then(rotation_y(radians))

    def rotate_z(self, radians: float) -> Transform:
        return self._then(rotation_z(radians))

    def shear(
        self, xy: float, xz: float, yx: float, yz: float, zx: float, zy: float
    ) -> Transform:
        return self._then(shearing(xy, xz, yx, yz, zx, zy))

    def then(self, other: Transform | Matrix4) -> Transform:
        """Append another transform or raw matrix to the chain."""
        m = other.matrix if isinstance(other, Transform) else other
        return self._then(m)

    def inverse(self) -> Transform:
        return Transform(invert(self.matrix))

    def apply(self, v) -> Vector4:
        return apply(self.matrix, v)

    def __repr__(self) -> str:
        return f"Transform({self.matrix.tolist()!r})"
