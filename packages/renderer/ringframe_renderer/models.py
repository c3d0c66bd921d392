"""Typed renderer models."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from typing import Any

from PIL import Image

WATERMARK_FIELDS = ("add_watermark", "watermark_scale", "watermark_y")
FLOAT_FIELDS = ("logo_scale", "ring_offset", "border_thickness", "shadow_strength", "watermark_scale", "watermark_y")


@dataclass(frozen=True)
class RenderParameters:
    ring_count: int = 36
    logo_scale: float = 0.16
    ring_offset: float = 10
    align_tangent: bool = True
    border_thickness: float = 18
    shadow_strength: float = 14
    transparent_background: bool = False
    canvas_size: int = 1024
    add_watermark: bool = True
    watermark_scale: float = 0.18
    watermark_y: float = 10

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def validate(self) -> "RenderParameters":
        if not isinstance(self.ring_count, int) or isinstance(self.ring_count, bool) or self.ring_count < 0:
            raise ValueError(f"ring_count must be a non-negative integer, got {self.ring_count!r}")
        if not isinstance(self.canvas_size, int) or isinstance(self.canvas_size, bool) or self.canvas_size <= 0:
            raise ValueError(f"canvas_size must be a positive integer, got {self.canvas_size!r}")
        for name in FLOAT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValueError(f"{name} must be a finite number, got {value!r}")
        for name in ("logo_scale", "watermark_scale"):
            value = getattr(self, name)
            if not 0.0 <= float(value) <= 1.0:
                raise ValueError(f"{name} must be a fraction between 0 and 1, got {value!r}")
        if self.shadow_strength < 0:
            raise ValueError(f"shadow_strength must be >= 0, got {self.shadow_strength!r}")
        return self

    def with_changes(self, **changes: Any) -> "RenderParameters":
        unknown = sorted(set(changes) - set(self.field_names()))
        if unknown:
            raise ValueError(f"Unknown render parameter(s): {', '.join(unknown)}")
        return replace(self, **changes).validate()


def percent_to_fraction(value: float) -> float:
    return float(value) / 100.0


def fraction_to_percent(value: float) -> float:
    return round(float(value) * 100.0, 4)


# (offset, "#RRGGBB", alpha)
ColorStop = tuple[float, str, float]


@dataclass(frozen=True)
class BackgroundStyle:
    base_fill: str | None
    gradient: tuple[ColorStop, ...]


@dataclass(frozen=True)
class ShadowStyle:
    color: str
    alpha: float
    fill: str
    fill_alpha: float
    blur_factor: float
    offset_factor: float


@dataclass(frozen=True)
class BorderStyle:
    kind: str  # "conic" | "solid"
    stops: tuple[ColorStop, ...] = ()
    start_angle: float = 0.0
    color: str = "#FFFFFF"
    opacity: float = 1.0


@dataclass(frozen=True)
class VariantConfig:
    name: str
    background: BackgroundStyle
    placeholder: tuple[ColorStop, ...]
    shadow: ShadowStyle
    border: BorderStyle
    watermark: bool
    defaults: RenderParameters
    watermark_opacity: float = 0.96
    watermark_min_margin: float = 8.0

    def allows(self, name: str) -> bool:
        return self.watermark or name not in WATERMARK_FIELDS


@dataclass(frozen=True)
class RenderSnapshot:
    params: RenderParameters
    avatar: Image.Image | None = None
    stamp: Image.Image | None = None


@dataclass(frozen=True)
class ExportResult:
    path: str
    width: int
    height: int
    bytes_written: int
    variant: str = ""
