import math

import numpy as np
import pytest

from nuchladni.core.modes import (
    MODE_KINDS,
    CosineHarmonicMode,
    DeformationMode,
    HarmonicMode,
    MixedHarmonicMode,
    NoiseDeformation,
    UnknownModeKind,
    mode_from_dict,
)


class TestHarmonicModes:
    def test_harmonic_peak(self):
        mode = HarmonicMode("h", "", 1, 1, default_amplitude=10)
        assert mode.evaluate(math.pi / 2, math.pi / 2) == pytest.approx(10.0)

    @pytest.mark.parametrize("theta,phi", [(0.3, 0.4), (1.7, 2.9), (5.0, 1.1)])
    def test_harmonic_periodic_in_theta(self, theta, phi):
        mode = HarmonicMode("h", "", 3, 2, default_amplitude=7)
        assert mode.evaluate(theta + 2 * math.pi, phi) == pytest.approx(mode.evaluate(theta, phi), abs=1e-9)

    def test_cosine_harmonic(self):
        mode = CosineHarmonicMode("Pinch", "", 4, 4, default_amplitude=2)
        theta, phi = 0.25, 0.3
        expected = 2 * math.cos(4 * theta) * math.sin(4 * phi)
        assert mode.evaluate(theta, phi) == pytest.approx(expected)

    def test_mixed_harmonic(self):
        mode = MixedHarmonicMode("Twisted", "", default_amplitude=3)
        theta, phi = 0.8, 1.2
        expected = 3 * math.sin(theta + 3 * phi) * math.cos(2 * theta)
        assert mode.evaluate(theta, phi) == pytest.approx(expected)

    def test_zero_amplitude_is_flat(self):
        mode = HarmonicMode("h", "", 5, 3)
        theta = np.linspace(0, 2 * math.pi, 9)
        phi = np.linspace(0, math.pi, 9)
        assert np.all(mode.evaluate(theta, phi) == 0)

    def test_evaluate_broadcasts_over_arrays(self):
        mode = HarmonicMode("h", "", 2, 1, default_amplitude=1)
        theta, phi = np.meshgrid(np.linspace(0, 1, 4), np.linspace(0, 1, 3))
        assert mode.evaluate(theta, phi).shape == (3, 4)


class TestNoiseDeformation:
    def test_missing_base_point_contributes_nothing(self):
        mode = NoiseDeformation("Noise", "", default_amplitude=8)
        assert mode.evaluate(1.0, 1.0) == 0.0

    def test_formula(self):
        mode = NoiseDeformation("Noise", "", default_amplitude=5, scale=1)
        value = mode.evaluate(0.0, 0.0, (0.6, 0.0, 0.8))
        expected = 5 * math.sin(0.6) * math.cos(0.0) * math.sin(0.8)
        assert value == pytest.approx(expected)

    def test_scale_enters_frequency(self):
        mode = NoiseDeformation("Noise", "", default_amplitude=1, scale=2)
        assert mode.noise3d(1.0, 0.0, 1.0) == pytest.approx(math.sin(0.2) * math.sin(0.2))

    def test_deterministic(self):
        mode = NoiseDeformation("Noise", "", default_amplitude=4)
        p = (math.sin(0.7) * math.cos(1.3), math.sin(0.7) * math.sin(1.3), math.cos(0.7))
        assert mode.evaluate(1.3, 0.7, p) == mode.evaluate(1.3, 0.7, p)

    def test_array_base_points(self):
        mode = NoiseDeformation("Noise", "", default_amplitude=1)
        pts = np.array([[0.0, 0.0, 1.0], [0.6, 0.0, 0.8]])
        out = mode.evaluate(None, None, pts)
        assert out.shape == (2,)
        assert out[0] == pytest.approx(0.0)


class TestModeLifecycle:
    def test_reset_restores_default(self):
        mode = HarmonicMode("h", "", 1, 1, default_amplitude=12)
        mode.amplitude = 44
        mode.reset()
        assert mode.amplitude == 12

    def test_base_mode_does_nothing(self):
        assert DeformationMode("b", "").evaluate(1.0, 1.0) == 0.0

    def test_info_payload(self):
        mode = MixedHarmonicMode("Twisted", "Twisted torus-like deformation", 3)
        assert mode.info() == {
            "name": "Twisted",
            "description": "Twisted torus-like deformation",
            "amplitude": 3,
            "default_amplitude": 3,
        }


class TestRegistry:
    def test_known_kinds(self):
        assert set(MODE_KINDS) == {"harmonic", "cosine_harmonic", "mixed_harmonic", "noise"}
        assert CosineHarmonicMode.kind == "cosine_harmonic"

    def test_from_dict_restores_parameters(self):
        mode = CosineHarmonicMode("Pinch", "pinch", 4, 4, default_amplitude=1)
        mode.amplitude = 9
        clone = mode_from_dict(mode.to_dict())
        assert isinstance(clone, CosineHarmonicMode)
        assert (clone.theta_freq, clone.phi_freq) == (4, 4)
        assert clone.amplitude == 9
        assert clone.default_amplitude == 1

    def test_unknown_kind(self):
        with pytest.raises(UnknownModeKind):
            mode_from_dict({"kind": "perlin", "name": "x", "description": ""})
