from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from ..utils.image_ops import RGB, RGBA, Surface
from .deformer import ShapeDeformer

logger = logging.getLogger(__name__)

DEFAULT_LIGHT_DIR = (0.5, -0.5, 0.7)
NUM_POINTS_THETA = 40
NUM_POINTS_PHI = 20

# Flat palette: intensity drives a blue-dominant color, floor()ed per channel.
AMBIENT = 0.1
RED_GAIN = 40
GREEN_GAIN = 120
BLUE_BASE = 120
BLUE_GAIN = 135


@dataclass
class RendererConfig:
    light_dir: Tuple[float, float, float] = DEFAULT_LIGHT_DIR
    outline: RGBA = (0, 0, 0, 51)
    min_scale: float = 1e-6


@dataclass
class Triangle:
    points: Tuple[Tuple[float, float], ...]
    color: RGB
    avg_z: float
    normal: Tuple[float, float, float]


def normalize(v: Sequence[float]) -> np.ndarray:
    arr = np.asarray(v, dtype=float)
    length = float(np.linalg.norm(arr))
    if length == 0.0 or not math.isfinite(length):
        logger.warning(f"Rejected degenerate vector {tuple(arr)}")
        raise ValueError(f"cannot normalize vector {tuple(arr)}")
    return arr / length


def rotate_points(points, rot_x: float, cam_angle: float) -> np.ndarray:
    """Rotate about X by rot_x, then about Y by cam_angle.

    Angles are in slider units: 100 equals pi radians. Works on any array whose
    last axis holds (x, y, z).
    """
    rad_x = (rot_x / 100) * math.pi
    rad_y = (cam_angle / 100) * math.pi
    p = np.asarray(points, dtype=float)
    x, y, z = p[..., 0], p[..., 1], p[..., 2]

    cx, sx = math.cos(rad_x), math.sin(rad_x)
    y1 = y * cx - z * sx
    z1 = y * sx + z * cx

    cy, sy = math.cos(rad_y), math.sin(rad_y)
    x2 = x * cy + z1 * sy
    z2 = -x * sy + z1 * cy
    return np.stack((x2, y1, z2), axis=-1)


def project_points(points, depth: float, width: float, height: float, min_scale: float = 1e-6) -> np.ndarray:
    """Perspective divide around the surface center.

    scale = 1 + z * depth / 1000; depth 0 gives an orthographic view. Scales
    with magnitude below ``min_scale`` are clamped to +/- min_scale.
    """
    p = np.asarray(points, dtype=float)
    scale = 1.0 + p[..., 2] * (depth / 1000)
    tiny = np.abs(scale) < min_scale
    if np.any(tiny):
        scale = np.where(tiny, np.where(scale < 0, -min_scale, min_scale), scale)
    x2d = width / 2 + p[..., 0] / scale
    y2d = height / 2 + p[..., 1] / scale
    return np.stack((x2d, y2d), axis=-1)


def face_normals(a, b, c) -> np.ndarray:
    """Unit normals of triangles (a, b, c) as cross(b - a, c - a).

    Zero-area triangles get a zero normal. Area is judged relative to the
    edge lengths, so the cutoff does not depend on the mesh's scale.
    """
    e1 = np.asarray(b, dtype=float) - a
    e2 = np.asarray(c, dtype=float) - a
    n = np.cross(e1, e2)
    length = np.linalg.norm(n, axis=-1, keepdims=True)
    span = np.linalg.norm(e1, axis=-1, keepdims=True) * np.linalg.norm(e2, axis=-1, keepdims=True)
    with np.errstate(invalid="ignore", divide="ignore"):
        unit = np.where(length > 1e-9 * span, n / length, 0.0)
    return unit


def shade(normals, light_dir) -> np.ndarray:
    """Per-face RGB from the Lambert term, clamped below at AMBIENT."""
    intensity = np.maximum(AMBIENT, np.asarray(normals, dtype=float) @ np.asarray(light_dir, dtype=float))
    rgb = np.stack(
        (
            np.floor(RED_GAIN * intensity),
            np.floor(GREEN_GAIN * intensity),
            np.floor(BLUE_BASE + BLUE_GAIN * intensity),
        ),
        axis=-1,
    )
    return rgb.astype(int)


def build_triangles(
    mesh: np.ndarray,
    rot_x: float,
    cam_angle: float,
    depth: float,
    width: float,
    height: float,
    light_dir,
    min_scale: float = 1e-6,
) -> List[Triangle]:
    """Turn a (rows, cols, 3) point grid into visible, lit triangles in paint order."""
    rotated = rotate_points(mesh, rot_x, cam_angle)
    projected = project_points(rotated, depth, width, height, min_scale)

    def quads(grid):
        p1, p2 = grid[:-1, :-1], grid[:-1, 1:]
        p3, p4 = grid[1:, :-1], grid[1:, 1:]
        first = np.stack((p1, p2, p3), axis=-2)
        second = np.stack((p2, p4, p3), axis=-2)
        # keep both triangles of a quad adjacent so equal depths paint in build order
        tris = np.stack((first, second), axis=-3)
        return tris.reshape(-1, 3, grid.shape[-1])

    verts = quads(rotated)
    flat = quads(projected)

    normals = face_normals(verts[:, 0], verts[:, 1], verts[:, 2])
    visible = normals[:, 2] < 0
    if not np.any(visible):
        return []

    verts, flat, normals = verts[visible], flat[visible], normals[visible]
    colors = shade(normals, light_dir)
    avg_z = (verts[:, 0, 2] + verts[:, 1, 2] + verts[:, 2, 2]) / 3
    order = np.argsort(avg_z, kind="stable")

    return [
        Triangle(
            points=tuple((float(x), float(y)) for x, y in flat[k]),
            color=(int(colors[k, 0]), int(colors[k, 1]), int(colors[k, 2])),
            avg_z=float(avg_z[k]),
            normal=(float(normals[k, 0]), float(normals[k, 1]), float(normals[k, 2])),
        )
        for k in order
    ]


class Renderer:
    """Draws a ShapeDeformer's mesh onto a Surface, one full repaint per call.

    No depth buffer: back faces are culled and the rest are painted in
    ascending average depth. Holds no per-frame state.
    """

    def __init__(self, surface: Surface, shape_deformer: ShapeDeformer, config: RendererConfig | None = None):
        self.surface = surface
        self.shape_deformer = shape_deformer
        self.config = config or RendererConfig()
        self.light_dir = normalize(self.config.light_dir)

    def set_light_direction(self, x: float, y: float, z: float) -> None:
        self.light_dir = normalize((x, y, z))
        logger.debug(f"Light direction set to {tuple(self.light_dir)}")

    def resize(self, width: int, height: int) -> None:
        self.surface.resize(width, height)

    def calculate_lighting(self, normal) -> RGB:
        r, g, b = shade(normal, self.light_dir)
        return (int(r), int(g), int(b))

    def triangles(self, rot_x: float, cam_angle: float, depth: float,
                  num_points_theta: int = NUM_POINTS_THETA, num_points_phi: int = NUM_POINTS_PHI) -> List[Triangle]:
        width, height = self.surface.size
        mesh = self.shape_deformer.generate_mesh(num_points_theta, num_points_phi)
        return build_triangles(
            mesh, rot_x, cam_angle, depth, width, height, self.light_dir, self.config.min_scale
        )

    def draw(self, rot_x: float, cam_angle: float, depth: float,
             num_points_theta: int = NUM_POINTS_THETA, num_points_phi: int = NUM_POINTS_PHI) -> List[Triangle]:
        tris = self.triangles(rot_x, cam_angle, depth, num_points_theta, num_points_phi)
        self.surface.clear()
        outline = self.config.outline
        for tri in tris:
            self.surface.fill_polygon(tri.points, tri.color, outline)
        logger.debug(f"Drew {len(tris)} triangles (rot_x={rot_x}, cam_angle={cam_angle:.2f}, depth={depth})")
        return tris
