"""Band-by-band rendering with progress reporting.

Rendering a whole frame in one kernel launch gives no feedback on large
images, so the ``Renderer`` renders rows in bands and reports progress
after each band, either through a callback or by yielding.

Example:
    >>> world = create_default_world()
    >>> camera = Camera(320, 200, math.pi / 3, view_transform(...))
    >>> renderer = Renderer(camera, world)
    >>> renderer.render(callback=lambda done, total: print(done, total))
    >>> image = renderer.get_image_numpy()
"""

from collections.abc import Callable, Generator
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from src.whitted.camera.camera import Camera, setup_camera
from src.whitted.core.integrator import (
    check_max_depth,
    clear_render_target,
    get_image_numpy,
    render_rows,
    setup_render_target,
)

if TYPE_CHECKING:
    from src.whitted.scene.world import World

# Callback receives (rows_rendered, total_rows)
ProgressCallback = Callable[[int, int], None]

DEFAULT_ROWS_PER_BATCH = 32


class Renderer:
    """Renders a camera's view of a world.

    The world must stay live while rendering: creating another ``World``
    replaces its data in the registries.

    Attributes:
        camera: The camera being rendered.
        world: The world being rendered.
        max_depth: Recursion budget for reflection and refraction.
    """

    def __init__(self, camera: Camera, world: "World", max_depth: int | None = None) -> None:
        """Upload the camera and size the render target.

        Args:
            camera: The camera to render from.
            world: The world to render.
            max_depth: Recursion budget; the world's own when None.

        Raises:
            ValueError: If the image is too large or max_depth is out of range.
            RuntimeError: If the world is no longer live.
        """
        world.check_live()
        self.camera = camera
        self.world = world
        self.max_depth = check_max_depth(world.max_depth if max_depth is None else max_depth)
        self._rows_rendered = 0
        setup_render_target(camera.width, camera.height)
        setup_camera(camera)

    @property
    def width(self) -> int:
        return self.camera.width

    @property
    def height(self) -> int:
        return self.camera.height

    @property
    def rows_rendered(self) -> int:
        return self._rows_rendered

    @property
    def is_complete(self) -> bool:
        return self._rows_rendered >= self.height

    def reset(self) -> None:
        """Clear the image so the next render starts from the top row."""
        clear_render_target()
        self._rows_rendered = 0

    def render_progressive(
        self, rows_per_batch: int = DEFAULT_ROWS_PER_BATCH
    ) -> Generator[tuple[int, int], None, None]:
        """Render the remaining rows, yielding progress after each band.

        Yields:
            Tuple of (rows_rendered, total_rows).

        Raises:
            RuntimeError: If the world stopped being live between bands.
        """
        if rows_per_batch <= 0:
            raise ValueError(f"rows_per_batch must be positive, got {rows_per_batch}")

        while not self.is_complete:
            self.world.check_live()
            end = min(self._rows_rendered + rows_per_batch, self.height)
            render_rows(self._rows_rendered, end, self.max_depth)
            self._rows_rendered = end
            yield (self._rows_rendered, self.height)

    def render(
        self,
        rows_per_batch: int = DEFAULT_ROWS_PER_BATCH,
        callback: ProgressCallback | None = None,
    ) -> npt.NDArray[np.float32]:
        """Render the remaining rows and return the image.

        Args:
            rows_per_batch: Number of rows per kernel launch.
            callback: Optional function called after each band with
                (rows_rendered, total_rows).

        Returns:
            The image, as from ``get_image_numpy``.
        """
        for done, total in self.render_progressive(rows_per_batch):
            if callback is not None:
                callback(done, total)
        return self.get_image_numpy()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """The image as a (height, width, 3) float32 array, unclamped."""
        return get_image_numpy()

    def save_image(self, filepath: str | Path) -> None:
        """Save the image; the format follows the file suffix."""
        from src.whitted.preview.export import save_image

        save_image(self.get_image_numpy(), filepath)

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"rows_rendered={self.rows_rendered}, max_depth={self.max_depth})"
        )


def render(
    camera: Camera,
    world: "World",
    callback: ProgressCallback | None = None,
    rows_per_batch: int = DEFAULT_ROWS_PER_BATCH,
) -> npt.NDArray[np.float32]:
    """Render a full frame of a world at its own recursion budget."""
    return Renderer(camera, world).render(rows_per_batch, callback)
