"""Whitted-style recursive ray tracer built on Taichi.

Renders scenes of spheres, planes, cubes, cylinders, triangles, meshes and
wavy planes lit by point lights, with Phong shading, hard shadows, patterns,
and recursive mirror reflection and refraction.

Subpackages:
    core: Linear algebra, transforms, rays, the shading integrator and the
        band-by-band renderer
    geometry: Shape primitives, their intersection and normal routines, and
        the shape registry
    materials: Patterns, materials and point lights
    scene: World builder, intersection queries, YAML loader and ready-made
        scenes
    camera: Pinhole camera with a view transform
    preview: Image export and Matplotlib preview
"""

__version__ = "0.1.0"
