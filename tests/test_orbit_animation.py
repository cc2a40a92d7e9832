
import pytest
from PIL import Image

from nuchladni.core.animation import Animator, FrameParams
from nuchladni.core.deformer import ShapeDeformer
from nuchladni.core.orbit import OrbitPath, angle_from_camera
from nuchladni.core.renderer import Renderer
from nuchladni.utils.image_ops import PilSurface


class TestOrbit:
    def test_angle_from_camera(self):
        assert angle_from_camera((0, 0, 500)) == pytest.approx(0)
        assert angle_from_camera((500, 0, 0)) == pytest.approx(50)
        assert angle_from_camera((-500, 0, 0)) == pytest.approx(-50)

    def test_quarter_orbit(self):
        orbit = OrbitPath()
        assert orbit.angle(0) == pytest.approx(0)
        assert orbit.angle(orbit.duration / 4) == pytest.approx(50)
        x, y, z = orbit.position(orbit.duration / 2)
        assert (x, y, z) == pytest.approx((0, 0, -500), abs=1e-9)

    def test_slider_speed(self):
        orbit = OrbitPath()
        orbit.set_slider_speed(100)
        assert orbit.duration == pytest.approx(10)
        orbit.set_slider_speed(0)
        assert orbit.duration == pytest.approx(10)


@pytest.fixture
def animator():
    renderer = Renderer(PilSurface(64, 48), ShapeDeformer(15))
    return Animator(renderer, params=FrameParams(rot_x=10, num_points_theta=12, num_points_phi=6))


class TestAnimator:
    def test_frames(self, animator):
        frames = list(animator.frames(3, 10))
        assert len(frames) == 3
        assert all(isinstance(f, Image.Image) and f.size == (64, 48) for f in frames)

    def test_frames_are_copies(self, animator):
        a, b = animator.frames(2, 1)
        assert a is not b

    def test_cancel_stops_before_next_frame(self, animator):
        seen = []
        for frame in animator.frames(10, 10):
            seen.append(frame)
            if len(seen) == 2:
                animator.cancel()
        assert len(seen) == 2

    @pytest.mark.parametrize("count,fps", [(0, 10), (3, 0)])
    def test_invalid_frame_args(self, animator, count, fps):
        with pytest.raises(ValueError):
            list(animator.frames(count, fps))

    def test_export_gif(self, animator, tmp_path):
        out = tmp_path / "orbit.gif"
        progress = []
        assert animator.export_gif(str(out), 4, fps=10, progress=progress.append) == str(out)
        assert progress[-1] == 100
        with Image.open(out) as im:
            assert im.n_frames >= 1
            assert im.size == (64, 48)

    def test_export_cancelled(self, animator, tmp_path):
        out = tmp_path / "never.gif"
        assert animator.export_gif(str(out), 5, fps=10, progress=lambda p: animator.cancel()) is None
        assert not out.exists()

    def test_cancel_before_iteration(self, animator):
        frames = animator.frames(5, 10)
        animator.cancel()
        assert list(frames) == []
