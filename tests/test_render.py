"""Tests for band-by-band rendering and the color buffer."""

import math

import numpy as np
import pytest


def _default_scene(size=11):
    from src.whitted.camera.camera import Camera
    from src.whitted.core.transform import view_transform
    from src.whitted.scene.default_world import create_default_world

    world = create_default_world()
    camera = Camera(size, size, math.pi / 2, view_transform((0, 0, -5), (0, 0, 0), (0, 1, 0)))
    return world, camera


class TestRenderTarget:
    def test_setup_render_target(self):
        from src.whitted.core.integrator import get_image_dimensions, setup_render_target

        setup_render_target(64, 48)
        assert get_image_dimensions() == (64, 48)

    @pytest.mark.parametrize("width, height", [(0, 10), (10, 0), (4096, 10), (10, 4096)])
    def test_invalid_dimensions(self, width, height):
        from src.whitted.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(width, height)

    def test_invalid_max_depth(self):
        from src.whitted.core.integrator import color_at

        with pytest.raises(ValueError, match="max_depth"):
            color_at((0, 0, -5), (0, 0, 1), max_depth=9)


class TestRender:
    def test_render_default_world(self):
        from src.whitted.core.render import render

        world, camera = _default_scene()
        image = render(camera, world)
        assert image.shape == (11, 11, 3)
        assert image.dtype == np.float32
        assert np.allclose(image[5, 5], [0.38066, 0.47583, 0.2855], atol=1e-4)

    def test_corner_pixels_are_background(self):
        from src.whitted.core.render import render

        world, camera = _default_scene()
        image = render(camera, world)
        assert np.allclose(image[0, 0], 0.0)
        assert np.allclose(image[10, 10], 0.0)

    def test_progress_callback(self):
        from src.whitted.core.render import Renderer

        world, camera = _default_scene(size=20)
        renderer = Renderer(camera, world)
        calls = []
        renderer.render(rows_per_batch=8, callback=lambda done, total: calls.append((done, total)))
        assert calls == [(8, 20), (16, 20), (20, 20)]
        assert renderer.is_complete

    def test_progressive_generator_and_reset(self):
        from src.whitted.core.render import Renderer

        world, camera = _default_scene()
        renderer = Renderer(camera, world)
        progress = list(renderer.render_progressive(rows_per_batch=5))
        assert progress == [(5, 11), (10, 11), (11, 11)]
        first = renderer.get_image_numpy()

        renderer.reset()
        assert renderer.rows_rendered == 0
        assert np.allclose(renderer.get_image_numpy(), 0.0)
        renderer.render()
        assert np.allclose(renderer.get_image_numpy(), first)

    def test_invalid_rows_per_batch(self):
        from src.whitted.core.render import Renderer

        world, camera = _default_scene()
        renderer = Renderer(camera, world)
        with pytest.raises(ValueError):
            list(renderer.render_progressive(rows_per_batch=0))

    def test_partial_render_leaves_rows_black(self):
        from src.whitted.core.render import Renderer

        world, camera = _default_scene()
        renderer = Renderer(camera, world)
        next(renderer.render_progressive(rows_per_batch=3))
        image = renderer.get_image_numpy()
        assert renderer.rows_rendered == 3
        assert np.allclose(image[5, 5], 0.0)

    def test_save_image(self, tmp_path):
        from src.whitted.core.render import Renderer

        world, camera = _default_scene()
        renderer = Renderer(camera, world)
        renderer.render()
        path = tmp_path / "out.ppm"
        renderer.save_image(path)
        lines = path.read_text().splitlines()
        assert lines[:3] == ["P3", "11 11", "255"]
        assert len(lines) == 3 + 11 * 11

    def test_repr(self):
        from src.whitted.core.render import Renderer

        world, camera = _default_scene()
        assert "width=11" in repr(Renderer(camera, world))

    def test_max_depth_override(self):
        from src.whitted.core.render import Renderer

        world, camera = _default_scene()
        assert Renderer(camera, world).max_depth == world.max_depth
        assert Renderer(camera, world, max_depth=0).max_depth == 0


class TestStaleWorld:
    def test_renderer_rejects_replaced_world(self):
        from src.whitted.core.render import Renderer
        from src.whitted.scene.world import World

        world, camera = _default_scene()
        World()
        with pytest.raises(RuntimeError, match="no longer live"):
            Renderer(camera, world)

    def test_world_replaced_between_bands(self):
        from src.whitted.core.render import Renderer
        from src.whitted.scene.world import World

        world, camera = _default_scene()
        progress = Renderer(camera, world).render_progressive(rows_per_batch=4)
        assert next(progress) == (4, 11)
        World()
        with pytest.raises(RuntimeError, match="no longer live"):
            next(progress)
