"""Renderer package for Ringframe profile picture composition."""

from .geometry import CoverBox, Layout, RingPosition, compute_layout, cover_fit, ring_positions, watermark_origin
from .models import (
    ExportResult,
    RenderParameters,
    RenderSnapshot,
    VariantConfig,
    fraction_to_percent,
    percent_to_fraction,
)
from .paint import build_default_stamp
from .pipeline import ProfileRenderer, export_png, new_surface
from .themes import DEFAULT_VARIANT_NAME, get_variant, list_variants

__all__ = [
    "CoverBox",
    "DEFAULT_VARIANT_NAME",
    "ExportResult",
    "Layout",
    "ProfileRenderer",
    "RenderParameters",
    "RenderSnapshot",
    "RingPosition",
    "VariantConfig",
    "build_default_stamp",
    "compute_layout",
    "cover_fit",
    "export_png",
    "fraction_to_percent",
    "get_variant",
    "list_variants",
    "new_surface",
    "percent_to_fraction",
    "ring_positions",
    "watermark_origin",
]
