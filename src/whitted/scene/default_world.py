"""Ready-made scenes.

``create_default_world`` builds the standard two-sphere test world used
throughout the tests: a light at (-10, 10, -10) and two concentric spheres,
the outer one greenish and the inner one half size.

``create_showcase_scene`` builds a larger demonstration scene exercising
every primitive, patterns, reflection and refraction.

Example:
    >>> world, camera = create_showcase_scene(400, 200)
    >>> image = render(camera, world)
"""

import math

from src.whitted.camera.camera import Camera
from src.whitted.core.transform import Transform, view_transform
from src.whitted.geometry.cube import Cube
from src.whitted.geometry.cylinder import Cylinder
from src.whitted.geometry.plane import Plane
from src.whitted.geometry.sphere import Sphere
from src.whitted.geometry.triangle import Triangle
from src.whitted.geometry.wavy_plane import Wave, WavyPlane
from src.whitted.materials.lighting import PointLight
from src.whitted.materials.material import Material
from src.whitted.materials.pattern import (
    CheckerPattern,
    RingPattern,
    StripePattern,
    TransformedPattern,
)
from src.whitted.scene.world import World

# =============================================================================
# Default World Constants
# =============================================================================

DEFAULT_LIGHT_POSITION = (-10.0, 10.0, -10.0)
OUTER_SPHERE_COLOR = (0.8, 1.0, 0.6)


def create_default_world(max_depth: int | None = None) -> World:
    """The standard two-sphere world.

    - Light: white point light at (-10, 10, -10)
    - Outer sphere (handle 0): unit sphere, color (0.8, 1.0, 0.6),
      diffuse 0.7, specular 0.2
    - Inner sphere (handle 1): scaled by 0.5, default material
    """
    world = World(max_depth)
    world.add_light(PointLight(DEFAULT_LIGHT_POSITION))
    world.add_shape(
        Sphere(),
        Material(color=OUTER_SPHERE_COLOR, diffuse=0.7, specular=0.2),
    )
    world.add_shape(Sphere(), Material(), Transform().scale(0.5, 0.5, 0.5))
    return world


def create_showcase_scene(
    width: int = 400, height: int = 200, max_depth: int | None = None
) -> tuple[World, Camera]:
    """A demonstration scene with every primitive type.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Recursion budget; the default when None.

    Returns:
        Tuple of (World, Camera).
    """
    world = World(max_depth)
    world.add_light(PointLight((-10.0, 10.0, -10.0)))
    world.add_light(PointLight((5.0, 8.0, -6.0), (0.3, 0.3, 0.3)))

    floor = Material(
        pattern=CheckerPattern((0.9, 0.9, 0.9), (0.15, 0.15, 0.2)),
        specular=0.0,
        reflective=0.15,
    )
    world.add_shape(Plane(), floor)

    water = Material(
        color=(0.1, 0.25, 0.35),
        diffuse=0.4,
        reflective=0.4,
        transparency=0.5,
        refractive_index=1.33,
    )
    world.add_shape(
        WavyPlane([Wave((0.0, 0.0, 0.0), 6.0, 0.04), Wave((3.0, 0.0, 4.0), 9.0, 0.02)]),
        water,
        Transform().translate(0.0, 0.35, 6.0).scale(3.0, 1.0, 2.0),
    )

    glass = Material(
        color=(0.05, 0.05, 0.05),
        diffuse=0.1,
        specular=1.0,
        shininess=300.0,
        reflective=0.9,
        transparency=0.9,
        refractive_index=1.5,
    )
    world.add_shape(Sphere(), glass, Transform().translate(-0.5, 1.0, 0.5))

    striped = Material(
        pattern=TransformedPattern(
            StripePattern((0.8, 0.3, 0.2), (0.95, 0.85, 0.6)),
            Transform().scale(0.2, 0.2, 0.2).rotate_z(math.pi / 4).matrix,
        ),
        diffuse=0.7,
        specular=0.3,
    )
    world.add_shape(
        Sphere(), striped, Transform().translate(1.5, 0.5, -0.5).scale(0.5, 0.5, 0.5)
    )

    ringed = Material(
        pattern=TransformedPattern(
            RingPattern((0.2, 0.5, 0.8), (0.9, 0.9, 1.0)),
            Transform().scale(0.25, 0.25, 0.25).matrix,
        ),
    )
    world.add_shape(
        Cylinder(minimum=0.0, maximum=1.0, closed=True),
        ringed,
        Transform().translate(-2.5, 0.0, 1.5).scale(0.6, 1.5, 0.6),
    )

    mirror = Material(color=(0.2, 0.2, 0.2), diffuse=0.2, reflective=0.8, specular=1.0)
    world.add_shape(
        Cube(),
        mirror,
        Transform().translate(2.8, 1.0, 2.5).rotate_y(math.pi / 5).scale(0.6, 1.0, 0.6),
    )

    gold = Material(color=(0.9, 0.7, 0.2), diffuse=0.6, specular=0.6, reflective=0.2)
    world.add_mesh(
        [
            Triangle((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.5, 1.5, 0.0)),
            Triangle((1.0, 0.0, 0.0), (0.5, 0.0, 0.8), (0.5, 1.5, 0.0)),
            Triangle((0.5, 0.0, 0.8), (0.0, 0.0, 0.0), (0.5, 1.5, 0.0)),
        ],
        gold,
        Transform().translate(0.6, 0.0, -1.6).scale(0.7, 0.7, 0.7),
    )

    camera = Camera(
        width,
        height,
        math.pi / 3,
        view_transform((0.0, 2.0, -6.0), (0.0, 0.8, 0.0), (0.0, 1.0, 0.0)),
    )
    return world, camera
