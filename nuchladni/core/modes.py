from __future__ import annotations

from typing import Any, Callable, Dict, Type

import numpy as np


class UnknownModeKind(KeyError):
    pass


class DeformationMode:
    """A named radial displacement field over (theta, phi).

    theta runs around the equator (0..2pi), phi from pole to pole (0..pi).
    ``evaluate`` returns the radial offset and accepts scalars or arrays.
    """

    kind = "base"

    def __init__(self, name: str, description: str, default_amplitude: float = 0.0):
        self.name = name
        self.description = description
        self.default_amplitude = default_amplitude
        self.amplitude = default_amplitude

    def evaluate(self, theta, phi, base_point=None):
        return 0.0

    def reset(self) -> None:
        self.amplitude = self.default_amplitude

    def info(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "amplitude": self.amplitude,
            "default_amplitude": self.default_amplitude,
        }

    def to_dict(self) -> Dict[str, Any]:
        d = {"kind": self.kind, **self.info()}
        d.update(self._params())
        return d

    def _params(self) -> Dict[str, Any]:
        return {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, amplitude={self.amplitude})"


MODE_KINDS: Dict[str, Type[DeformationMode]] = {}


def register_mode(kind: str) -> Callable[[Type[DeformationMode]], Type[DeformationMode]]:
    def deco(cls: Type[DeformationMode]) -> Type[DeformationMode]:
        cls.kind = kind
        MODE_KINDS[kind] = cls
        return cls
    return deco


@register_mode("harmonic")
class HarmonicMode(DeformationMode):
    def __init__(self, name: str, description: str, theta_freq: float, phi_freq: float,
                 default_amplitude: float = 0.0):
        super().__init__(name, description, default_amplitude)
        self.theta_freq = theta_freq
        self.phi_freq = phi_freq

    def evaluate(self, theta, phi, base_point=None):
        return self.amplitude * np.sin(self.theta_freq * theta) * np.sin(self.phi_freq * phi)

    def _params(self) -> Dict[str, Any]:
        return {"theta_freq": self.theta_freq, "phi_freq": self.phi_freq}


@register_mode("cosine_harmonic")
class CosineHarmonicMode(HarmonicMode):
    def evaluate(self, theta, phi, base_point=None):
        return self.amplitude * np.cos(self.theta_freq * theta) * np.sin(self.phi_freq * phi)


@register_mode("mixed_harmonic")
class MixedHarmonicMode(DeformationMode):
    def evaluate(self, theta, phi, base_point=None):
        return self.amplitude * np.sin(theta + 3 * phi) * np.cos(2 * theta)


@register_mode("noise")
class NoiseDeformation(DeformationMode):
    """Smooth trigonometric stand-in for 3D noise, sampled on the unit direction.

    Deterministic: identical inputs always give identical output.
    """

    def __init__(self, name: str, description: str, default_amplitude: float = 0.0,
                 scale: float = 1.0):
        super().__init__(name, description, default_amplitude)
        self.scale = scale

    def noise3d(self, x, y, z):
        k = 0.1 * self.scale
        return np.sin(x * k) * np.cos(y * k) * np.sin(z * k)

    def evaluate(self, theta, phi, base_point=None):
        if base_point is None:
            return 0.0
        x, y, z = np.moveaxis(np.asarray(base_point, dtype=float), -1, 0)
        return self.amplitude * self.noise3d(x * 10, y * 10, z * 10)

    def _params(self) -> Dict[str, Any]:
        return {"scale": self.scale}


def mode_from_dict(data: Dict[str, Any]) -> DeformationMode:
    kind = data.get("kind")
    if kind not in MODE_KINDS:
        raise UnknownModeKind(kind)
    cls = MODE_KINDS[kind]
    kwargs = {k: v for k, v in data.items() if k not in ("kind", "amplitude")}
    mode = cls(**kwargs)
    if "amplitude" in data:
        mode.amplitude = data["amplitude"]
    return mode
