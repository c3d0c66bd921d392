"""Pure layout math for the avatar disk, border ring and stamp ring."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .models import RenderParameters

BASE_RADIUS_RATIO = 0.37
PLACEHOLDER_RADIUS_RATIO = 0.35


@dataclass(frozen=True)
class CoverBox:
    width: float
    height: float
    offset_x: float
    offset_y: float


@dataclass(frozen=True)
class RingPosition:
    x: float
    y: float
    rotation: float
    angle: float


@dataclass(frozen=True)
class Layout:
    center_x: float
    center_y: float
    base_radius: float
    ring_radius: float
    stamp_size: float
    ring_layout_radius: float
    placeholder_radius: float
    watermark_size: float

    @property
    def effective_border(self) -> float:
        return self.ring_radius - self.base_radius


def cover_fit(aspect_ratio: float, diameter: float) -> CoverBox:
    """Scale a box of the given aspect ratio so it covers a disk of ``diameter``.

    The box keeps its aspect ratio and may overflow the disk on one axis; it is
    never letterboxed. Offsets are relative to the disk's top-left corner.
    """
    if aspect_ratio <= 0:
        raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio!r}")
    if aspect_ratio > 1:
        height = diameter
        width = height * aspect_ratio
    else:
        width = diameter
        height = width / aspect_ratio
    return CoverBox(
        width=width,
        height=height,
        offset_x=(diameter - width) / 2,
        offset_y=(diameter - height) / 2,
    )


def ring_positions(
    count: int,
    radius: float,
    center_x: float,
    center_y: float,
    align_tangent: bool,
) -> list[RingPosition]:
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count!r}")
    if count == 0:
        return []

    step = 2 * math.pi / count
    out: list[RingPosition] = []
    for i in range(count):
        angle = i * step
        out.append(
            RingPosition(
                x=center_x + radius * math.cos(angle),
                y=center_y + radius * math.sin(angle),
                rotation=angle + math.pi / 2 if align_tangent else 0.0,
                angle=angle,
            )
        )
    return out


def compute_layout(params: RenderParameters) -> Layout:
    size = params.canvas_size
    base_radius = size * BASE_RADIUS_RATIO
    return Layout(
        center_x=size / 2,
        center_y=size / 2,
        base_radius=base_radius,
        ring_radius=base_radius + max(0.0, params.border_thickness),
        stamp_size=base_radius * params.logo_scale,
        ring_layout_radius=base_radius + params.ring_offset,
        placeholder_radius=size * PLACEHOLDER_RADIUS_RATIO,
        watermark_size=base_radius * params.watermark_scale,
    )


def watermark_origin(
    layout: Layout,
    border_thickness: float,
    watermark_y: float,
    min_margin: float,
) -> tuple[float, float]:
    size = layout.watermark_size
    x = layout.center_x - size / 2
    y = (
        layout.center_y
        + layout.base_radius
        - size
        - max(min_margin, max(0.0, border_thickness) * 0.4)
        + watermark_y
    )
    return x, y
