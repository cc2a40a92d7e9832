from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

import numpy as np
from PIL import Image

from .orbit import OrbitPath
from .renderer import NUM_POINTS_PHI, NUM_POINTS_THETA, Renderer

logger = logging.getLogger(__name__)


@dataclass
class FrameParams:
    rot_x: float = 0.0
    depth: float = 0.0
    num_points_theta: int = NUM_POINTS_THETA
    num_points_phi: int = NUM_POINTS_PHI


class Animator:
    """Drives the renderer one frame at a time along an orbit.

    Frames are rendered strictly in sequence; ``cancel`` stops before the next frame.
    """

    def __init__(self, renderer: Renderer, orbit: OrbitPath | None = None, params: FrameParams | None = None):
        self.renderer = renderer
        self.orbit = orbit or OrbitPath()
        self.params = params or FrameParams()
        self._cancel = False

    def cancel(self) -> None:
        self._cancel = True

    def render_frame(self, t: float) -> Image.Image:
        p = self.params
        self.renderer.draw(p.rot_x, self.orbit.angle(t), p.depth, p.num_points_theta, p.num_points_phi)
        return self.renderer.surface.copy()

    def frames(self, count: int, fps: int, start_t: float = 0.0) -> Iterator[Image.Image]:
        """Validate and arm the run now; frames render lazily on iteration."""
        if count <= 0 or fps <= 0:
            raise ValueError(f"frame count and fps must be positive, got {count} @ {fps}")
        self._cancel = False
        return self._run(count, 1.0 / fps, start_t)

    def _run(self, count: int, dt: float, start_t: float) -> Iterator[Image.Image]:
        for i in range(count):
            if self._cancel:
                logger.info(f"Animation cancelled after {i} frames")
                return
            yield self.render_frame(start_t + i * dt)

    def export_gif(
        self,
        path: str,
        count: int,
        fps: int = 25,
        loop: bool = True,
        progress: Optional[Callable[[int], None]] = None,
    ) -> Optional[str]:
        import imageio.v3 as iio

        out: List[np.ndarray] = []
        for i, im in enumerate(self.frames(count, fps)):
            out.append(np.array(im.convert("RGB")))
            if progress is not None:
                progress(int((i + 1) * 100 / count))
        if self._cancel or not out:
            return None

        dur = max(10, int(1000 / fps))
        if loop:
            iio.imwrite(path, out, extension=".gif", duration=dur, loop=0)
        else:
            iio.imwrite(path, out, extension=".gif", duration=dur)
        logger.info(f"Saved {len(out)} frames to {path}")
        return path
