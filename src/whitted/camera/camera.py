"""Perspective camera mapping pixels to primary rays.

The camera sits at the origin of its own space looking down -z at an image
plane one unit away. Its transform is the world-to-camera view matrix
(usually from ``view_transform``); rays are moved back to world space with
the inverse. Pixel (0, 0) is the top-left corner and rays pass through
pixel centres.

Example:
    >>> camera = Camera(201, 101, math.pi / 2)
    >>> origin, direction = camera.ray_for_pixel(100, 50)
    >>> direction  # approximately (0, 0, -1, 0)
"""

import math
from dataclasses import dataclass, field

import numpy as np
import taichi as ti

from src.whitted.core.linalg import (
    Matrix4,
    Vector4,
    apply,
    identity,
    invert,
    make_point,
    normalize,
    normalize4,
    point,
    to_taichi,
)
from src.whitted.core.ray import Ray, make_ray


@dataclass
class Camera:
    """Camera parameters and derived image-plane geometry.

    Attributes:
        width: Horizontal size in pixels.
        height: Vertical size in pixels.
        field_of_view: Angle (radians) covered by the wider image dimension.
        transform: World-to-camera matrix.
        half_width: Half the image plane width, in world units.
        half_height: Half the image plane height, in world units.
        pixel_size: Edge length of one pixel on the image plane.
    """

    width: int
    height: int
    field_of_view: float
    transform: Matrix4 = field(default_factory=identity)
    half_width: float = field(init=False)
    half_height: float = field(init=False)
    pixel_size: float = field(init=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Camera size must be positive, got {self.width}x{self.height}")
        if not 0.0 < self.field_of_view < math.pi:
            raise ValueError(
                f"Field of view must be in (0, pi) radians, got {self.field_of_view}"
            )
        self.transform = np.asarray(self.transform, dtype=np.float32)

        half_view = math.tan(self.field_of_view / 2.0)
        aspect = self.width / self.height
        if aspect >= 1.0:
            self.half_width = half_view
            self.half_height = half_view / aspect
        else:
            self.half_width = half_view * aspect
            self.half_height = half_view
        self.pixel_size = self.half_width * 2.0 / self.width

    @property
    def inverse(self) -> Matrix4:
        return invert(self.transform)

    def ray_for_pixel(self, px: int, py: int) -> tuple[Vector4, Vector4]:
        """Origin and direction of the ray through a pixel centre."""
        xoffset = (px + 0.5) * self.pixel_size
        yoffset = (py + 0.5) * self.pixel_size
        world_x = self.half_width - xoffset
        world_y = self.half_height - yoffset

        inverse = self.inverse
        pixel = apply(inverse, make_point(world_x, world_y, -1.0))
        origin = apply(inverse, make_point(0.0, 0.0, 0.0))
        return origin, normalize(pixel - origin)


# =============================================================================
# Camera Field Storage
# =============================================================================

_camera_inverse = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())
_half_width = ti.field(dtype=ti.f32, shape=())
_half_height = ti.field(dtype=ti.f32, shape=())
_pixel_size = ti.field(dtype=ti.f32, shape=())
_camera_ready = ti.field(dtype=ti.i32, shape=())


def setup_camera(camera: Camera) -> None:
    """Upload a camera for use by ``ray_for_pixel`` inside kernels.

    Raises:
        ValueError: If the camera transform is singular.
    """
    _camera_inverse[None] = to_taichi(camera.inverse)
    _half_width[None] = camera.half_width
    _half_height[None] = camera.half_height
    _pixel_size[None] = camera.pixel_size
    _camera_ready[None] = 1


def is_camera_ready() -> bool:
    return bool(_camera_ready[None])


def get_camera_info() -> dict[str, float]:
    """Uploaded camera geometry, for debugging."""
    return {
        "half_width": float(_half_width[None]),
        "half_height": float(_half_height[None]),
        "pixel_size": float(_pixel_size[None]),
    }


@ti.func
def ray_for_pixel(px: ti.i32, py: ti.i32) -> Ray:
    """World-space ray through the centre of pixel (px, py).

    Requires ``setup_camera`` to have been called.
    """
    size = _pixel_size[None]
    world_x = _half_width[None] - (ti.cast(px, ti.f32) + 0.5) * size
    world_y = _half_height[None] - (ti.cast(py, ti.f32) + 0.5) * size

    inverse = _camera_inverse[None]
    pixel = inverse @ point(world_x, world_y, -1.0)
    origin = inverse @ point(0.0, 0.0, 0.0)
    return make_ray(origin, normalize4(pixel - origin))
