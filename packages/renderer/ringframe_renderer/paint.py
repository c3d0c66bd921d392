"""Coverage masks, gradient fields and compositing helpers."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from PIL import Image, ImageDraw

from .models import ColorStop


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    return tuple(int(value[i : i + 2], 16) for i in (1, 3, 5))  # type: ignore[return-value]


def rgba(value: str, alpha: float) -> tuple[float, float, float, float]:
    r, g, b = hex_to_rgb(value)
    return (r / 255.0, g / 255.0, b / 255.0, float(alpha))


def _pixel_grid(size: int, cx: float, cy: float) -> tuple[np.ndarray, np.ndarray]:
    # Sample at pixel centres.
    coords = np.arange(size, dtype=np.float32) + 0.5
    return coords[None, :] - np.float32(cx), coords[:, None] - np.float32(cy)


def disk_coverage(size: int, cx: float, cy: float, radius: float) -> np.ndarray:
    if radius <= 0:
        return np.zeros((size, size), dtype=np.float32)
    dx, dy = _pixel_grid(size, cx, cy)
    dist = np.sqrt(dx * dx + dy * dy)
    return np.clip(np.float32(radius) - dist + np.float32(0.5), 0.0, 1.0)


def annulus_coverage(size: int, cx: float, cy: float, inner: float, outer: float) -> np.ndarray:
    return np.clip(disk_coverage(size, cx, cy, outer) - disk_coverage(size, cx, cy, inner), 0.0, 1.0)


def _interp_stops(t: np.ndarray, stops: Sequence[ColorStop]) -> np.ndarray:
    offsets = [s[0] for s in stops]
    colors = [rgba(s[1], s[2]) for s in stops]
    out = np.empty(t.shape + (4,), dtype=np.float32)
    for channel in range(4):
        out[..., channel] = np.interp(t, offsets, [c[channel] for c in colors])
    return out


def linear_gradient(
    size: int,
    start: tuple[float, float],
    end: tuple[float, float],
    stops: Sequence[ColorStop],
) -> np.ndarray:
    """RGBA float field (0..1) for a linear gradient from ``start`` to ``end``."""
    x0, y0 = start
    vx, vy = end[0] - x0, end[1] - y0
    length_sq = vx * vx + vy * vy
    dx, dy = _pixel_grid(size, x0, y0)
    if length_sq == 0:
        t = np.zeros((size, size), dtype=np.float32)
    else:
        t = np.clip((dx * vx + dy * vy) / np.float32(length_sq), 0.0, 1.0)
    return _interp_stops(t, stops)


def conic_gradient(
    size: int,
    cx: float,
    cy: float,
    start_angle: float,
    stops: Sequence[ColorStop],
) -> np.ndarray:
    """RGBA float field sweeping clockwise on screen from ``start_angle``."""
    dx, dy = _pixel_grid(size, cx, cy)
    angle = np.arctan2(dy, dx) - np.float32(start_angle)
    t = np.mod(angle, 2 * math.pi) / (2 * math.pi)
    return _interp_stops(t, stops)


def fill_layer(size: int, paint, coverage: np.ndarray) -> Image.Image:
    """Turn a paint (RGBA field or RGBA tuple) masked by ``coverage`` into an RGBA layer."""
    field = np.broadcast_to(np.asarray(paint, dtype=np.float32), (size, size, 4))
    out = np.empty((size, size, 4), dtype=np.uint8)
    out[..., :3] = np.rint(field[..., :3] * 255.0)
    out[..., 3] = np.rint(np.clip(field[..., 3] * coverage, 0.0, 1.0) * 255.0)
    return Image.fromarray(out)


def composite_at(surface: Image.Image, overlay: Image.Image, left: int, top: int) -> None:
    """Alpha-composite ``overlay`` onto ``surface``, clipping anything off-canvas."""
    dest_left = max(0, left)
    dest_top = max(0, top)
    right = min(surface.width, left + overlay.width)
    bottom = min(surface.height, top + overlay.height)
    if right <= dest_left or bottom <= dest_top:
        return
    region = overlay.crop((dest_left - left, dest_top - top, right - left, bottom - top))
    surface.alpha_composite(region, dest=(dest_left, dest_top))


def with_opacity(image: Image.Image, opacity: float) -> Image.Image:
    out = image.convert("RGBA") if image.mode != "RGBA" else image.copy()
    alpha = out.getchannel("A").point(lambda v: int(round(v * opacity)))
    out.putalpha(alpha)
    return out


def build_default_stamp(size: int = 256) -> Image.Image:
    """Draw the built-in stamp glyph: an eight-point spark inside a thin halo."""
    if size <= 0:
        raise ValueError(f"stamp size must be positive, got {size!r}")
    scale = 4
    big = size * scale
    img = Image.new("RGBA", (big, big), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)

    c = big / 2
    halo = big * 0.46
    draw.ellipse((c - halo, c - halo, c + halo, c + halo), outline=(255, 255, 255, 150), width=max(1, big // 40))

    points = []
    for i in range(16):
        angle = -math.pi / 2 + i * math.pi / 8
        r = big * (0.40 if i % 4 == 0 else 0.26 if i % 2 == 0 else 0.13)
        points.append((c + r * math.cos(angle), c + r * math.sin(angle)))
    draw.polygon(points, fill=(250, 247, 240, 255))

    core = big * 0.07
    draw.ellipse((c - core, c - core, c + core, c + core), fill=(201, 184, 255, 255))
    return img.resize((size, size), Image.Resampling.LANCZOS)
