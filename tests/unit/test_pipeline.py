import math
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

import numpy as np
from PIL import Image

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from ringframe_renderer.geometry import compute_layout, ring_positions
from ringframe_renderer.models import RenderSnapshot
from ringframe_renderer.pipeline import ProfileRenderer, export_png, new_surface
from ringframe_renderer.themes import get_variant

BLUE = (0, 0, 255, 255)
RED = (255, 0, 0, 255)


def _avatar(size=(512, 512), color=BLUE):
    return Image.new("RGBA", size, color)


def _stamp():
    return Image.new("RGBA", (64, 64), RED)


def _is_red(px):
    return px[0] > 200 and px[0] - px[1] > 150 and px[0] - px[2] > 150


def _is_blue(px):
    return px[2] > 230 and px[0] < 25 and px[1] < 25


class PipelineBasicsTests(unittest.TestCase):
    def setUp(self):
        self.variant = get_variant("Midnight Glow")
        self.renderer = ProfileRenderer(self.variant)
        self.params = self.variant.defaults.with_changes(canvas_size=256)

    def test_render_is_idempotent(self):
        snap = RenderSnapshot(self.params, _avatar(), _stamp())
        surface = new_surface(256)
        first = self.renderer.render(surface, snap).tobytes()
        second = self.renderer.render(surface, snap).tobytes()
        self.assertEqual(first, second)

    def test_render_ignores_previous_surface_contents(self):
        snap = RenderSnapshot(self.params, _avatar(), _stamp())
        dirty = Image.new("RGBA", (256, 256), (255, 0, 255, 255))
        self.assertEqual(self.renderer.render(dirty, snap).tobytes(), self.renderer.render_image(snap).tobytes())

    def test_surface_size_must_match(self):
        with self.assertRaises(ValueError):
            self.renderer.render(new_surface(128), RenderSnapshot(self.params, None, _stamp()))

    def test_empty_avatar_draws_only_background_and_placeholder(self):
        busy = RenderSnapshot(self.params, None, _stamp())
        bare = RenderSnapshot(
            self.params.with_changes(ring_count=0, border_thickness=0, shadow_strength=0, add_watermark=False),
            None,
            None,
        )
        busy_img = self.renderer.render_image(busy)
        self.assertEqual(busy_img.tobytes(), self.renderer.render_image(bare).tobytes())
        self.assertNotEqual(busy_img.getpixel((128, 128)), busy_img.getpixel((2, 2)))
        arr = np.asarray(busy_img)
        red = (arr[..., 0] > 200) & (arr[..., 1] < 60) & (arr[..., 2] < 60)
        self.assertEqual(int(red.sum()), 0)

    def test_transparent_background_leaves_corners_clear(self):
        snap = RenderSnapshot(self.params.with_changes(transparent_background=True), _avatar(), _stamp())
        img = self.renderer.render_image(snap)
        self.assertEqual(img.getpixel((0, 0)), (0, 0, 0, 0))
        self.assertTrue(_is_blue(img.getpixel((128, 128))))

    def test_opaque_background_fills_corners(self):
        img = self.renderer.render_image(RenderSnapshot(self.params, None, _stamp()))
        self.assertEqual(img.getpixel((255, 255))[3], 255)

    def test_wide_avatar_is_cropped_not_letterboxed(self):
        avatar = Image.new("RGBA", (400, 100), BLUE)
        avatar.paste((0, 255, 0, 255), (0, 0, 100, 100))
        snap = RenderSnapshot(self.params.with_changes(ring_count=0, add_watermark=False), avatar, _stamp())
        img = self.renderer.render_image(snap)
        layout = compute_layout(snap.params)
        # Left quarter of the source overflows the disk; its edge pixels are blue.
        edge = (round(layout.center_x - layout.base_radius + 4), 128)
        self.assertTrue(_is_blue(img.getpixel(edge)))

    def test_extreme_aspect_avatar_resamples_only_visible_part(self):
        avatar = Image.new("RGBA", (4, 4000), BLUE)
        avatar.paste((0, 255, 0, 255), (0, 0, 4, 100))
        params = self.variant.defaults
        original = Image.Image.resize
        requested = []

        def _recording_resize(img, size, *args, **kwargs):
            requested.append(size[0] * size[1])
            return original(img, size, *args, **kwargs)

        with patch.object(Image.Image, "resize", _recording_resize):
            img = self.renderer.render_image(RenderSnapshot(params, avatar, _stamp()))

        self.assertLessEqual(max(requested), params.canvas_size * params.canvas_size)
        self.assertTrue(_is_blue(img.getpixel((512, 512))))

    def test_watermark_drawn_near_bottom(self):
        params = self.params.with_changes(ring_count=0)
        img = self.renderer.render_image(RenderSnapshot(params, _avatar(), _stamp()))
        px = img.getpixel((128, 216))
        self.assertGreater(px[0], 200)
        self.assertLess(px[2], 40)

        off = self.renderer.render_image(RenderSnapshot(params.with_changes(add_watermark=False), _avatar(), _stamp()))
        self.assertTrue(_is_blue(off.getpixel((128, 216))))

    def test_pastel_variant_never_draws_watermark(self):
        pastel = get_variant("Pastel Bloom")
        renderer = ProfileRenderer(pastel)
        params = pastel.defaults.with_changes(canvas_size=256, ring_count=0)
        img = renderer.render_image(RenderSnapshot(params, _avatar(), _stamp()))
        self.assertTrue(_is_blue(img.getpixel((128, 216))))

    def test_export_png_round_trips_size(self):
        data = export_png(self.renderer.render_image(RenderSnapshot(self.params, None, _stamp())))
        self.assertTrue(data.startswith(b"\x89PNG"))

    def test_preview_data_url(self):
        url = self.renderer.preview_data_url(RenderSnapshot(self.params, None, _stamp()))
        self.assertTrue(url.startswith("data:image/png;base64,"))


class ScenarioTests(unittest.TestCase):
    """End-to-end frames at the default 1024px canvas."""

    def setUp(self):
        self.variant = get_variant("Midnight Glow")
        self.renderer = ProfileRenderer(self.variant)
        self.params = self.variant.defaults

    def _pixel_at(self, img, radius, angle):
        x = 512 + radius * math.cos(angle)
        y = 512 + radius * math.sin(angle)
        return img.getpixel((int(x), int(y)))

    def test_scenario_a_ring_of_36_stamps(self):
        snap = RenderSnapshot(self.params, _avatar(), _stamp())
        img = self.renderer.render_image(snap)
        layout = compute_layout(self.params)
        self.assertAlmostEqual(layout.ring_layout_radius, 757.76 / 2 + 10)

        positions = ring_positions(36, layout.ring_layout_radius, 512, 512, True)
        self.assertEqual(len(positions), 36)
        for pos in positions:
            self.assertTrue(_is_red(img.getpixel((int(pos.x), int(pos.y)))), pos)
        step = 2 * math.pi / 36
        for i in range(36):
            between = self._pixel_at(img, layout.ring_layout_radius, (i + 0.5) * step)
            self.assertFalse(_is_red(between), i)

        self.assertTrue(_is_blue(img.getpixel((512, 512))))

    def test_scenario_a_disk_border_and_shadow(self):
        params = self.params.with_changes(ring_count=0, add_watermark=False, transparent_background=True)
        img = self.renderer.render_image(RenderSnapshot(params, _avatar(), _stamp()))

        # Avatar disk diameter ~758px.
        self.assertTrue(_is_blue(self._pixel_at(img, 376, math.pi)))
        self.assertFalse(_is_blue(self._pixel_at(img, 382, math.pi)))
        # Border annulus outer diameter ~794px.
        border = self._pixel_at(img, 388, math.pi)
        self.assertGreater(border[3], 0)
        self.assertLess(abs(border[0] - border[2]), 30)

        below = (512, 512 + 403)
        self.assertGreater(img.getpixel(below)[3], 0)

        flat = self.renderer.render_image(RenderSnapshot(params.with_changes(shadow_strength=0), _avatar(), _stamp()))
        self.assertEqual(flat.getpixel(below)[3], 0)
        self.assertEqual(self._pixel_at(flat, 402, 0)[3], 0)
        self.assertGreater(self._pixel_at(flat, 394, 0)[3], 0)

    def test_scenario_b_no_stamps_when_ring_count_zero(self):
        params = self.params.with_changes(ring_count=0, add_watermark=False)
        with_stamp = self.renderer.render_image(RenderSnapshot(params, _avatar(), _stamp()))
        without_stamp = self.renderer.render_image(RenderSnapshot(params, _avatar(), None))
        self.assertEqual(with_stamp.tobytes(), without_stamp.tobytes())

        arr = np.asarray(with_stamp)
        red = (arr[..., 0] > 200) & (arr[..., 1] < 60) & (arr[..., 2] < 60)
        self.assertEqual(int(red.sum()), 0)
        self.assertTrue(_is_blue(with_stamp.getpixel((512, 512))))

    def test_negative_border_skips_border_stage(self):
        params = self.params.with_changes(ring_count=0, add_watermark=False, shadow_strength=0, transparent_background=True)
        negative = self.renderer.render_image(RenderSnapshot(params.with_changes(border_thickness=-8), _avatar(), None))
        zero = self.renderer.render_image(RenderSnapshot(params.with_changes(border_thickness=0), _avatar(), None))
        self.assertEqual(negative.tobytes(), zero.tobytes())


if __name__ == "__main__":
    unittest.main()
