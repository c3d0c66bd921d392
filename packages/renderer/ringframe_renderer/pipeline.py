"""Profile picture composer: background, shadow, border, avatar disk, stamp ring, watermark."""

from __future__ import annotations

import base64
import math
from io import BytesIO

import numpy as np
from PIL import Image, ImageFilter

from .geometry import Layout, compute_layout, cover_fit, ring_positions, watermark_origin
from .models import RenderSnapshot, VariantConfig
from .paint import (
    annulus_coverage,
    composite_at,
    conic_gradient,
    disk_coverage,
    fill_layer,
    hex_to_rgb,
    linear_gradient,
    rgba,
    with_opacity,
)
from .themes import get_variant


def new_surface(size: int) -> Image.Image:
    return Image.new("RGBA", (size, size), (0, 0, 0, 0))


def export_png(surface: Image.Image) -> bytes:
    buf = BytesIO()
    surface.save(buf, format="PNG")
    return buf.getvalue()


class ProfileRenderer:
    """Runs the draw stages in order against one RGBA surface.

    Every call repaints the whole surface; nothing is carried over between calls,
    so rendering the same snapshot twice gives identical pixels.
    """

    def __init__(self, variant: VariantConfig | str | None = None) -> None:
        self.variant = variant if isinstance(variant, VariantConfig) else get_variant(variant)

    def render(self, surface: Image.Image, snapshot: RenderSnapshot) -> Image.Image:
        params = snapshot.params
        if surface.size != (params.canvas_size, params.canvas_size):
            raise ValueError(f"surface is {surface.size}, expected {params.canvas_size}x{params.canvas_size}")
        if surface.mode != "RGBA":
            raise ValueError(f"surface must be RGBA, got {surface.mode}")

        layout = compute_layout(params)

        self._clear(surface)
        if not params.transparent_background:
            self._draw_background(surface)

        if snapshot.avatar is None:
            self._draw_placeholder(surface, layout)
            return surface

        if params.shadow_strength > 0:
            self._draw_shadow(surface, layout, params.shadow_strength)
        if layout.effective_border > 0:
            self._draw_border(surface, layout)
        self._draw_avatar(surface, layout, snapshot.avatar)

        if snapshot.stamp is not None:
            self._draw_stamps(surface, layout, snapshot)
            if self.variant.watermark and params.add_watermark:
                self._draw_watermark(surface, layout, snapshot)
        return surface

    def render_image(self, snapshot: RenderSnapshot) -> Image.Image:
        return self.render(new_surface(snapshot.params.canvas_size), snapshot)

    def preview_data_url(self, snapshot: RenderSnapshot) -> str:
        b64 = base64.b64encode(export_png(self.render_image(snapshot))).decode("ascii")
        return f"data:image/png;base64,{b64}"

    @staticmethod
    def _clear(surface: Image.Image) -> None:
        surface.paste((0, 0, 0, 0), (0, 0, surface.width, surface.height))

    def _draw_background(self, surface: Image.Image) -> None:
        style = self.variant.background
        size = surface.width
        if style.base_fill:
            surface.paste(hex_to_rgb(style.base_fill) + (255,), (0, 0, size, size))
        paint = linear_gradient(size, (0, 0), (size, size), style.gradient)
        surface.alpha_composite(fill_layer(size, paint, 1.0))

    def _draw_placeholder(self, surface: Image.Image, layout: Layout) -> None:
        size = surface.width
        cx, cy, r = layout.center_x, layout.center_y, layout.placeholder_radius
        paint = linear_gradient(size, (cx - r, cy - r), (cx + r, cy + r), self.variant.placeholder)
        surface.alpha_composite(fill_layer(size, paint, disk_coverage(size, cx, cy, r)))

    def _draw_shadow(self, surface: Image.Image, layout: Layout, strength: float) -> None:
        style = self.variant.shadow
        size = surface.width
        cx, cy = layout.center_x, layout.center_y

        # Shadow alpha is scaled by the alpha of the shape casting it.
        offset = strength * style.offset_factor
        sigma = strength * style.blur_factor / 2
        shadow = fill_layer(
            size,
            rgba(style.color, style.alpha * style.fill_alpha),
            disk_coverage(size, cx, cy + offset, layout.ring_radius),
        )
        if sigma > 0:
            shadow = shadow.filter(ImageFilter.GaussianBlur(radius=sigma))
        surface.alpha_composite(shadow)
        surface.alpha_composite(
            fill_layer(size, rgba(style.fill, style.fill_alpha), disk_coverage(size, cx, cy, layout.ring_radius))
        )

    def _draw_border(self, surface: Image.Image, layout: Layout) -> None:
        style = self.variant.border
        size = surface.width
        cx, cy = layout.center_x, layout.center_y
        if style.kind == "conic":
            paint = conic_gradient(size, cx, cy, style.start_angle, style.stops)
        else:
            paint = rgba(style.color, style.opacity)
        coverage = annulus_coverage(size, cx, cy, layout.base_radius, layout.ring_radius)
        surface.alpha_composite(fill_layer(size, paint, coverage))

    def _draw_avatar(self, surface: Image.Image, layout: Layout, avatar: Image.Image) -> None:
        size = surface.width
        diameter = layout.base_radius * 2
        side = max(1, round(diameter))
        box = cover_fit(avatar.width / avatar.height, diameter)
        # Resample only the source rectangle that lands inside the disk's square.
        scale = box.width / avatar.width
        src_left = max(0.0, -box.offset_x / scale)
        src_top = max(0.0, -box.offset_y / scale)
        visible = (
            src_left,
            src_top,
            min(float(avatar.width), src_left + diameter / scale),
            min(float(avatar.height), src_top + diameter / scale),
        )
        fitted = avatar.convert("RGBA").resize((side, side), Image.Resampling.LANCZOS, box=visible)

        layer = Image.new("RGBA", surface.size, (0, 0, 0, 0))
        left = round(layout.center_x - layout.base_radius)
        top = round(layout.center_y - layout.base_radius)
        composite_at(layer, fitted, left, top)

        pixels = np.array(layer)
        clip = disk_coverage(size, layout.center_x, layout.center_y, layout.base_radius)
        pixels[..., 3] = np.rint(pixels[..., 3] * clip).astype(np.uint8)
        surface.alpha_composite(Image.fromarray(pixels))

    def _draw_stamps(self, surface: Image.Image, layout: Layout, snapshot: RenderSnapshot) -> None:
        params = snapshot.params
        diameter = round(layout.stamp_size)
        if params.ring_count == 0 or diameter <= 0:
            return
        sized = snapshot.stamp.convert("RGBA").resize((diameter, diameter), Image.Resampling.LANCZOS)

        positions = ring_positions(
            params.ring_count,
            layout.ring_layout_radius,
            layout.center_x,
            layout.center_y,
            params.align_tangent,
        )
        for pos in positions:
            stamp = sized
            if pos.rotation:
                # PIL rotates counter-clockwise; screen rotation is clockwise in y-down space.
                stamp = sized.rotate(-math.degrees(pos.rotation), resample=Image.Resampling.BICUBIC, expand=True)
            composite_at(surface, stamp, round(pos.x - stamp.width / 2), round(pos.y - stamp.height / 2))

    def _draw_watermark(self, surface: Image.Image, layout: Layout, snapshot: RenderSnapshot) -> None:
        params = snapshot.params
        wm_size = round(layout.watermark_size)
        if wm_size <= 0:
            return
        x, y = watermark_origin(layout, params.border_thickness, params.watermark_y, self.variant.watermark_min_margin)
        mark = snapshot.stamp.convert("RGBA").resize((wm_size, wm_size), Image.Resampling.LANCZOS)
        composite_at(surface, with_opacity(mark, self.variant.watermark_opacity), round(x), round(y))
