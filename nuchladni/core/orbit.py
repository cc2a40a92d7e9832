from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

Vec3 = Tuple[float, float, float]


def angle_from_camera(position: Sequence[float]) -> float:
    """Y rotation, in slider units (100 == pi), seen from a camera at ``position``."""
    cam_x, _, cam_z = position
    return math.atan2(cam_x, cam_z) * (100 / math.pi)


@dataclass
class OrbitPath:
    """Camera circling the origin in the XZ plane, starting on +Z."""
    radius: float = 500.0
    center: Vec3 = (0.0, 0.0, 0.0)
    period: float = 20.0  # seconds per orbit at speed 1
    speed: float = 1.0

    def set_slider_speed(self, value: float) -> None:
        # slider 50 is the nominal speed; 0 leaves the last speed in place
        speed = float(value) / 50
        if speed > 0:
            self.speed = speed

    @property
    def duration(self) -> float:
        return self.period / self.speed

    def position(self, t: float) -> Vec3:
        a = 2 * math.pi * (t / self.duration)
        cx, cy, cz = self.center
        return (cx + self.radius * math.sin(a), cy, cz + self.radius * math.cos(a))

    def angle(self, t: float) -> float:
        return angle_from_camera(self.position(t))
