"""Onion-skin opacity snapping, layer selection and compositing."""

import numpy as np
import pytest

from stopmotion import codec
from stopmotion.errors import ValidationError
from stopmotion.models import Frame
from stopmotion.onion import OnionSkin, snap_opacity

from .conftest import make_frame


class TestSnapOpacity:
    @pytest.mark.parametrize("value, expected", [
        (0.47, 0.5),
        (0.55, 0.5),
        (0.45, 0.5),
        (0.5, 0.5),
        (0.3, 0.3),
        (0.44, 0.44),
        (0.56, 0.56),
        (0.0, 0.0),
        (1.0, 1.0),
    ])
    def test_snap(self, value, expected):
        assert snap_opacity(value) == expected

    @pytest.mark.parametrize("value", [-0.1, 1.2])
    def test_out_of_range_rejected(self, value):
        with pytest.raises(ValidationError):
            snap_opacity(value)


class TestLayers:
    def frames(self, n):
        return [make_frame(str(i)) for i in range(n)]

    @pytest.mark.parametrize("depth, count", [(0, 1), (1, 3), (2, 5)])
    def test_layer_count_per_depth(self, depth, count):
        skin = OnionSkin(depth=depth)
        assert len(skin.layers(self.frames(10))) == count

    def test_clipped_to_available_frames(self):
        skin = OnionSkin(depth=2)
        assert len(skin.layers(self.frames(2))) == 2
        assert skin.layers([]) == []

    def test_nearest_first_with_fading_opacity(self):
        frames = self.frames(6)
        skin = OnionSkin(depth=2, opacity=0.8)
        layers = skin.layers(frames)
        assert [l.frame.image for l in layers] == ["full-5", "full-4", "full-3", "full-2", "full-1"]
        assert layers[0].opacity == pytest.approx(0.8)
        opacities = [l.opacity for l in layers]
        assert opacities == sorted(opacities, reverse=True)

    def test_disabled_shows_nothing(self):
        skin = OnionSkin(enabled=False)
        assert skin.layers(self.frames(3)) == []

    def test_cycle_depth_wraps(self):
        skin = OnionSkin()
        assert [skin.cycle_depth() for _ in range(4)] == [1, 2, 0, 1]

    def test_set_opacity_applies_snap(self):
        skin = OnionSkin()
        assert skin.set_opacity(0.53) == 0.5
        assert skin.opacity == 0.5

    def test_bad_depth_rejected(self):
        skin = OnionSkin()
        with pytest.raises(ValidationError):
            skin.set_depth(3)
        assert skin.depth == 0


class TestComposite:
    def test_blends_previous_frame_into_live(self):
        white = np.full((40, 60, 3), 255, dtype=np.uint8)
        black = np.zeros((20, 30, 3), dtype=np.uint8)
        enc = codec.encode(black, 30, 20)
        frame = Frame(image=enc.image, thumbnail=enc.thumbnail)
        skin = OnionSkin(opacity=0.5)
        out = skin.composite(white, [frame])
        assert out.shape == white.shape
        assert out.dtype == np.uint8
        assert 100 < out.mean() < 160

    def test_no_frames_returns_live_untouched(self, bitmap):
        assert OnionSkin().composite(bitmap, []) is bitmap

    def test_unreadable_thumbnail_is_skipped(self, bitmap):
        skin = OnionSkin(opacity=0.5)
        out = skin.composite(bitmap, [make_frame("bad")])
        assert np.array_equal(out, bitmap)
