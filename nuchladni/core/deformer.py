from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

import numpy as np

from .modes import (
    CosineHarmonicMode,
    DeformationMode,
    HarmonicMode,
    MixedHarmonicMode,
    NoiseDeformation,
    mode_from_dict,
)

logger = logging.getLogger(__name__)

BASE_RADIUS = 200.0


@dataclass
class AmplitudeRange:
    """Range the control layer offers for mode amplitudes. Not enforced by the deformer."""
    min: float = 0.0
    max: float = 50.0
    step: float = 1.0

    def clamp(self, value: float) -> float:
        return min(self.max, max(self.min, float(value)))


@dataclass
class Preset:
    name: str
    amplitudes: List[float] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "amplitudes": list(self.amplitudes)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Preset":
        return cls(str(data.get("name", "Custom")), [float(a) for a in data["amplitudes"]])


PRESETS: Dict[str, Preset] = {
    "sphere": Preset("Sphere", [0, 0, 0, 0, 0, 0, 0]),
    "star": Preset("Star", [30, 0, 0, 0, 0, 0, 0]),
    "rippled": Preset("Rippled", [0, 20, 10, 0, 0, 0, 0]),
    "twisted": Preset("Twisted", [0, 0, 0, 0, 0, 5, 0]),
    "noisy": Preset("Noisy", [0, 0, 0, 0, 0, 0, 8]),
}


def default_modes() -> List[DeformationMode]:
    # Order matters: preset amplitudes are applied by index.
    return [
        HarmonicMode("Mode 1", "3 waves around equator, 2 waves pole-to-pole", 3, 2),
        HarmonicMode("Mode 2", "5 waves around equator, 3 waves pole-to-pole", 5, 3),
        HarmonicMode("Mode 3", "7 waves around equator, 1 wave pole-to-pole", 7, 1),
        CosineHarmonicMode("Pinch", "Pinching effect along longitude lines", 4, 4),
        HarmonicMode("Ripple", "Radial ripple effect from poles", 0, 3),
        MixedHarmonicMode("Twisted", "Twisted torus-like deformation"),
        NoiseDeformation("Noise", "Organic, natural-looking irregularities", 0, scale=1),
    ]


class ShapeDeformer:
    """Ordered collection of deformation modes applied to a sphere.

    A mode's index is its identity for presets and controls. Removing a mode
    renumbers every later mode, so indices held by callers go stale.
    """

    def __init__(self, base_radius: float = BASE_RADIUS, modes: Sequence[DeformationMode] | None = None):
        self._base_radius = float(base_radius)
        self.modes: List[DeformationMode] = []
        for mode in default_modes() if modes is None else modes:
            self.add_mode(mode)

    @property
    def base_radius(self) -> float:
        return self._base_radius

    def __len__(self) -> int:
        return len(self.modes)

    def add_mode(self, mode: DeformationMode) -> int:
        self.modes.append(mode)
        idx = len(self.modes) - 1
        logger.debug(f"Added mode {mode.name!r} at index {idx}")
        return idx

    def remove_mode(self, index: int) -> bool:
        if 0 <= index < len(self.modes):
            mode = self.modes.pop(index)
            logger.info(f"Removed mode {mode.name!r} (index {index}); later indices shifted")
            return True
        logger.warning(f"remove_mode: index {index} out of range")
        return False

    def set_amplitude(self, index: int, value: float) -> bool:
        if 0 <= index < len(self.modes):
            self.modes[index].amplitude = float(value)
            return True
        logger.warning(f"set_amplitude: index {index} out of range")
        return False

    def reset_amplitudes(self) -> None:
        for i in range(len(self.modes)):
            self.set_amplitude(i, 0.0)

    def reset_modes(self) -> None:
        for mode in self.modes:
            mode.reset()

    def generate_mesh(self, num_points_theta: int, num_points_phi: int) -> np.ndarray:
        """Sample the deformed sphere on a (phi, theta) grid.

        Returns an array of shape (num_points_phi + 1, num_points_theta + 1, 3).
        Rows run pole to pole; the theta seam and the poles are not welded.
        """
        if num_points_theta < 1 or num_points_phi < 1:
            raise ValueError(
                f"mesh resolution must be >= 1, got theta={num_points_theta}, phi={num_points_phi}"
            )
        phi = np.arange(num_points_phi + 1) * math.pi / num_points_phi
        theta = np.arange(num_points_theta + 1) * 2 * math.pi / num_points_theta
        PHI, THETA = np.meshgrid(phi, theta, indexing="ij")
        sin_phi = np.sin(PHI)
        base = np.stack((sin_phi * np.cos(THETA), sin_phi * np.sin(THETA), np.cos(PHI)), axis=-1)

        radius = np.full(PHI.shape, self._base_radius)
        for mode in self.modes:
            radius = radius + mode.evaluate(THETA, PHI, base)
        return radius[..., None] * base

    def mode_names(self) -> List[str]:
        return [m.name for m in self.modes]

    def mode_info(self) -> List[Dict[str, Any]]:
        return [m.info() for m in self.modes]

    def apply_preset(self, preset: Preset | Dict[str, Any]) -> None:
        if isinstance(preset, dict):
            preset = Preset.from_dict(preset)
        n = min(len(self.modes), len(preset.amplitudes))
        for i in range(n):
            self.modes[i].amplitude = float(preset.amplitudes[i])
        logger.info(f"Applied preset {preset.name!r} to {n} of {len(self.modes)} modes")

    def current_preset(self, name: str = "Custom") -> Preset:
        return Preset(name, [m.amplitude for m in self.modes])

    def to_dict(self) -> Dict[str, Any]:
        return {"base_radius": self._base_radius, "modes": [m.to_dict() for m in self.modes]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShapeDeformer":
        return cls(data.get("base_radius", BASE_RADIUS), [mode_from_dict(m) for m in data["modes"]])
