"""World: the shapes, materials and lights of one scene.

The ``World`` is a host-side builder over the global Taichi registries
(shapes, materials, patterns, lights). Creating a world clears those
registries, so only one world is live at a time. A world that has been
superseded raises ``RuntimeError`` instead of answering for the new one. Besides the registries it
keeps Python-side records of what was added, for queries and debugging.

Example:
    >>> world = World()
    >>> glass = Material(transparency=1.0, refractive_index=1.5)
    >>> world.add_shape(Sphere(), glass, Transform().scale(2, 2, 2))
    >>> world.add_light(PointLight((-10, 10, -10)))
    >>> world.color_at((0, 0, -5), (0, 0, 1))
"""

from dataclasses import dataclass
from typing import Any

import numpy as np

from src.whitted.core.linalg import Matrix4, identity
from src.whitted.core.transform import Transform
from src.whitted.geometry.shape import (
    Shape,
    ShapeKind,
    add_shape,
    clear_shapes,
    get_generation,
    get_shape_count,
    shape_kind_of,
)
from src.whitted.geometry.triangle import Triangle
from src.whitted.materials.lighting import (
    PointLight,
    add_light,
    clear_lights,
    get_light_count,
)
from src.whitted.materials.material import (
    Material,
    add_material,
    clear_materials,
    get_material_count,
)
from src.whitted.scene.intersection import (
    Intersection,
    containment_trace,
    hit,
    intersect_world,
    is_shadowed,
    refractive_indices,
)


@dataclass
class ShapeInfo:
    """Information about a shape in the world.

    Attributes:
        handle: Index in the shape storage.
        kind: Primitive type.
        shape: The primitive description.
        material_id: Index in the material registry.
        transform: Object-to-world matrix.
    """

    handle: int
    kind: ShapeKind
    shape: Shape
    material_id: int
    transform: Matrix4


def _as_matrix(transform: Transform | Matrix4 | None) -> Matrix4:
    if transform is None:
        return identity()
    if isinstance(transform, Transform):
        return transform.matrix
    return np.asarray(transform, dtype=np.float32)


class World:
    """Shapes, materials and lights of a scene, plus the recursion budget.

    Attributes:
        materials: Registered materials, indexed by material ID.
        shapes: Registered shapes, indexed by handle.
        lights: Registered lights, indexed by light index.
        max_depth: Recursion budget for reflection and refraction.
    """

    def __init__(self, max_depth: int | None = None) -> None:
        from src.whitted.core.integrator import DEFAULT_MAX_DEPTH

        self.materials: list[Material] = []
        self.shapes: list[ShapeInfo] = []
        self.lights: list[PointLight] = []
        self._material_ids: dict[int, int] = {}
        self._default_material = Material()
        self._generation = -1
        self.max_depth = DEFAULT_MAX_DEPTH
        if max_depth is not None:
            self.set_max_depth(max_depth)
        self._clear_all()

    def _clear_all(self) -> None:
        clear_shapes()
        clear_materials()
        clear_lights()
        self.materials.clear()
        self.shapes.clear()
        self.lights.clear()
        self._material_ids.clear()
        self._generation = get_generation()

    @property
    def is_live(self) -> bool:
        """Whether the Taichi registries still hold this world."""
        return self._generation == get_generation()

    def check_live(self) -> None:
        """Raise if another world has replaced this one in the registries.

        Raises:
            RuntimeError: If the registries were cleared since this world
                was built.
        """
        if not self.is_live:
            raise RuntimeError(
                "This World is no longer live: another World was created or the "
                "shape registry was cleared since it was built"
            )

    def clear(self) -> None:
        """Remove every shape, material and light."""
        self._clear_all()

    def set_max_depth(self, max_depth: int) -> None:
        """Set the recursion budget.

        Raises:
            ValueError: If the budget is out of range.
        """
        from src.whitted.core.integrator import check_max_depth

        self.max_depth = check_max_depth(max_depth)

    # =========================================================================
    # Materials
    # =========================================================================

    def add_material(self, material: Material) -> int:
        """Register a material, once per material object.

        Adding the same ``Material`` instance again returns its existing ID.

        Raises:
            ValueError: If the material fails validation.
            RuntimeError: If the maximum number of materials is exceeded.
        """
        self.check_live()
        key = id(material)
        if key in self._material_ids:
            return self._material_ids[key]
        material_id = add_material(material)
        self.materials.append(material)
        self._material_ids[key] = material_id
        return material_id

    def get_material_count(self) -> int:
        return get_material_count()

    # =========================================================================
    # Shapes
    # =========================================================================

    def add_shape(
        self,
        shape: Shape,
        material: Material | int | None = None,
        transform: Transform | Matrix4 | None = None,
    ) -> int:
        """Add a shape with a material and object-to-world transform.

        Args:
            shape: The primitive.
            material: A ``Material``, an existing material ID, or None for the
                default material.
            transform: Object-to-world transform; identity when None.

        Returns:
            The shape handle.

        Raises:
            ValueError: If the transform is singular or the material is
                invalid or unknown.
            RuntimeError: If a registry is full.
        """
        self.check_live()
        if material is None:
            material = self._default_material
        if isinstance(material, Material):
            material_id = self.add_material(material)
        else:
            material_id = int(material)
            if not 0 <= material_id < len(self.materials):
                raise ValueError(f"Unknown material ID {material_id}")

        matrix = _as_matrix(transform)
        handle = add_shape(shape, matrix, material_id)
        self.shapes.append(
            ShapeInfo(
                handle=handle,
                kind=shape_kind_of(shape),
                shape=shape,
                material_id=material_id,
                transform=matrix,
            )
        )
        return handle

    def add_mesh(
        self,
        triangles: list[Triangle],
        material: Material | int | None = None,
        transform: Transform | Matrix4 | None = None,
    ) -> list[int]:
        """Add every triangle of a mesh with a shared material and transform."""
        if material is None:
            material = self._default_material
        if isinstance(material, Material):
            material = self.add_material(material)
        return [self.add_shape(tri, material, transform) for tri in triangles]

    def get_shape_count(self) -> int:
        return get_shape_count()

    def get_shape_info(self, handle: int) -> ShapeInfo | None:
        if 0 <= handle < len(self.shapes):
            return self.shapes[handle]
        return None

    def refractive_index(self, handle: int) -> float:
        """Refractive index of the material of a shape."""
        return self.materials[self.shapes[handle].material_id].refractive_index

    # =========================================================================
    # Lights
    # =========================================================================

    def add_light(self, light: PointLight) -> int:
        self.check_live()
        index = add_light(light)
        self.lights.append(light)
        return index

    def get_light_count(self) -> int:
        return get_light_count()

    # =========================================================================
    # Queries
    # =========================================================================

    def intersect(self, origin, direction) -> list[Intersection]:
        """All intersections along a ray, sorted by distance."""
        self.check_live()
        return intersect_world(origin, direction)

    def hit(self, origin, direction) -> Intersection | None:
        """The visible intersection along a ray, if any."""
        return hit(self.intersect(origin, direction))

    def is_shadowed(self, point, light_index: int = 0) -> bool:
        self.check_live()
        return is_shadowed(point, light_index)

    def refractive_indices(self, origin, direction, hit_record: Intersection) -> tuple[float, float]:
        self.check_live()
        return refractive_indices(origin, direction, hit_record)

    def refraction_trace(self, origin, direction) -> list[tuple[float, float]]:
        """(n1, n2) at every intersection along a ray, by explicit stack walk."""
        return containment_trace(self.intersect(origin, direction), self.refractive_index)

    def color_at(self, origin, direction) -> tuple[float, float, float]:
        from src.whitted.core.integrator import color_at

        self.check_live()
        return color_at(origin, direction, self.max_depth)

    def shade_hit(
        self, origin, direction, hit_record: Intersection, remaining: int | None = None
    ) -> tuple[float, float, float]:
        from src.whitted.core.integrator import shade_hit

        self.check_live()
        budget = self.max_depth if remaining is None else remaining
        return shade_hit(origin, direction, hit_record, budget)

    # =========================================================================
    # Summary
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Summary of the world's contents."""
        return {
            "max_depth": self.max_depth,
            "materials": len(self.materials),
            "shapes": [
                {"handle": s.handle, "kind": s.kind.name.lower(), "material_id": s.material_id}
                for s in self.shapes
            ],
            "lights": [
                {"position": list(light.position), "intensity": list(light.intensity)}
                for light in self.lights
            ],
        }
