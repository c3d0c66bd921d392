import sys
import unittest
from pathlib import Path

from PIL import Image

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "core"))

from ringframe_core.store import ParameterStore
from ringframe_renderer.themes import get_variant


def _img(color):
    return Image.new("RGBA", (8, 8), color)


class ParameterStoreTests(unittest.TestCase):
    def setUp(self):
        self.default_stamp = _img((255, 255, 255, 255))
        self.store = ParameterStore(get_variant("Midnight Glow"), self.default_stamp)
        self.calls = 0

        def _listener():
            self.calls += 1

        self.store.add_listener(_listener)

    def test_starts_from_variant_defaults(self):
        self.assertEqual(self.store.params, get_variant("Midnight Glow").defaults)
        self.assertIsNone(self.store.avatar)
        self.assertIs(self.store.active_stamp, self.default_stamp)

    def test_update_replaces_params_and_notifies(self):
        before = self.store.params
        self.store.update(ring_count=12, border_thickness=4)
        self.assertEqual(self.store.params.ring_count, 12)
        self.assertEqual(self.store.params.border_thickness, 4)
        self.assertEqual(before.ring_count, 36)
        self.assertEqual(self.calls, 1)

    def test_invalid_update_leaves_state(self):
        with self.assertRaises(ValueError):
            self.store.update(ring_count=-3)
        with self.assertRaises(ValueError):
            self.store.update(bogus=1)
        self.assertEqual(self.store.params.ring_count, 36)
        self.assertEqual(self.calls, 0)

    def test_percent_setters_store_fractions(self):
        self.store.set_logo_scale_percent(25)
        self.store.set_watermark_scale_percent(40)
        self.assertAlmostEqual(self.store.params.logo_scale, 0.25)
        self.assertAlmostEqual(self.store.params.watermark_scale, 0.40)

    def test_typed_setters(self):
        self.store.set_ring_count(5)
        self.store.set_ring_offset(-4)
        self.store.set_border_thickness(0)
        self.store.set_shadow_strength(3)
        self.store.set_canvas_size(512)
        self.store.set_align_tangent(False)
        self.store.set_transparent_background(True)
        self.store.set_add_watermark(False)
        self.store.set_watermark_y(-6)
        p = self.store.params
        self.assertEqual(
            (p.ring_count, p.ring_offset, p.border_thickness, p.shadow_strength, p.canvas_size),
            (5, -4.0, 0.0, 3.0, 512),
        )
        self.assertFalse(p.align_tangent)
        self.assertTrue(p.transparent_background)
        self.assertFalse(p.add_watermark)
        self.assertEqual(p.watermark_y, -6.0)
        self.assertEqual(self.calls, 9)

    def test_watermark_fields_rejected_without_watermark_feature(self):
        store = ParameterStore(get_variant("Pastel Bloom"), self.default_stamp)
        with self.assertRaises(ValueError):
            store.set_add_watermark(True)
        with self.assertRaises(ValueError):
            store.update(watermark_y=3)
        self.assertFalse(store.params.add_watermark)

    def test_custom_stamp_toggle_reverts_to_default(self):
        custom = _img((255, 0, 0, 255))
        self.store.set_custom_stamp(custom)
        self.assertIs(self.store.active_stamp, self.default_stamp)
        self.store.set_use_custom_stamp(True)
        self.assertIs(self.store.active_stamp, custom)
        self.store.set_use_custom_stamp(False)
        self.assertIs(self.store.active_stamp, self.default_stamp)
        self.assertIs(self.store.custom_stamp, custom)

    def test_use_custom_without_custom_keeps_default(self):
        self.store.set_use_custom_stamp(True)
        self.assertIs(self.store.active_stamp, self.default_stamp)

    def test_avatar_replacement_is_atomic(self):
        first, second = _img((1, 1, 1, 255)), _img((2, 2, 2, 255))
        self.store.set_avatar(first)
        self.store.set_avatar(second)
        self.assertIs(self.store.avatar, second)
        self.assertIs(self.store.snapshot().avatar, second)

    def test_snapshot_is_detached_from_later_updates(self):
        snap = self.store.snapshot()
        self.store.update(ring_count=1)
        self.assertEqual(snap.params.ring_count, 36)

    def test_reset_restores_defaults_and_keeps_avatar(self):
        avatar = _img((9, 9, 9, 255))
        self.store.set_avatar(avatar)
        self.store.set_custom_stamp(_img((255, 0, 0, 255)))
        self.store.set_use_custom_stamp(True)
        self.store.update(ring_count=3, canvas_size=300, transparent_background=True)
        self.store.reset()
        self.assertEqual(self.store.params, get_variant("Midnight Glow").defaults)
        self.assertFalse(self.store.use_custom_stamp)
        self.assertIs(self.store.active_stamp, self.default_stamp)
        self.assertIs(self.store.avatar, avatar)

    def test_default_stamp_required(self):
        with self.assertRaises(ValueError):
            ParameterStore(get_variant(None), None)  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
