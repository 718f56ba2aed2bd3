"""Core rendering module.

Components:
    linalg: Homogeneous 4-vectors and 4x4 matrices, host and Taichi side
    transform: Affine transform factories and the chainable Transform
    ray: Ray data structure and fixed-size hit slots
    integrator: Recursive Whitted shading and the color buffer
    render: Band-by-band rendering with progress reporting

Recursion is unrolled into an explicit stack of pending rays inside the
integrator, since Taichi functions cannot call themselves.
"""

from .linalg import (
    EPSILON,
    Matrix4,
    Vector4,
    approx_equal,
    cross,
    determinant,
    identity,
    invert,
    is_invertible,
    make_point,
    make_vector,
    normalize,
    transpose,
)
from .ray import HOST_MISS_LIMIT, MAX_LOCAL_HITS, T_MISS, HitSlots, Ray, make_ray
from .transform import (
    Transform,
    rotation_x,
    rotation_y,
    rotation_z,
    scaling,
    shearing,
    translation,
    view_transform,
)

# Note: integrator and render are NOT imported here to avoid circular imports.
# Import directly from src.whitted.core.integrator or src.whitted.core.render.

__all__ = [
    "EPSILON",
    "Matrix4",
    "Vector4",
    "approx_equal",
    "cross",
    "determinant",
    "identity",
    "invert",
    "is_invertible",
    "make_point",
    "make_vector",
    "normalize",
    "transpose",
    "Ray",
    "make_ray",
    "HitSlots",
    "MAX_LOCAL_HITS",
    "T_MISS",
    "HOST_MISS_LIMIT",
    "Transform",
    "translation",
    "scaling",
    "rotation_x",
    "rotation_y",
    "rotation_z",
    "shearing",
    "view_transform",
]
