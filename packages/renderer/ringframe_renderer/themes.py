"""Built-in profile ring variants."""

from __future__ import annotations

import math

from .models import BackgroundStyle, BorderStyle, RenderParameters, ShadowStyle, VariantConfig

DEFAULT_VARIANT_NAME = "Midnight Glow"

VARIANTS: dict[str, VariantConfig] = {
    "Midnight Glow": VariantConfig(
        name="Midnight Glow",
        background=BackgroundStyle(
            base_fill="#0B0B0C",
            gradient=((0.0, "#FFFFFF", 0.08), (1.0, "#FFFFFF", 0.0)),
        ),
        placeholder=((0.0, "#FFFFFF", 0.08), (1.0, "#FFFFFF", 0.02)),
        shadow=ShadowStyle(
            color="#000000",
            alpha=0.65,
            fill="#000000",
            fill_alpha=0.35,
            blur_factor=2.2,
            offset_factor=0.3,
        ),
        border=BorderStyle(
            kind="conic",
            start_angle=math.pi * 0.6,
            stops=(
                (0.0, "#FFFFFF", 0.9),
                (0.25, "#FFFFFF", 0.3),
                (0.5, "#FFFFFF", 0.8),
                (0.75, "#FFFFFF", 0.25),
                (1.0, "#FFFFFF", 0.9),
            ),
        ),
        watermark=True,
        defaults=RenderParameters(),
    ),
    "Pastel Bloom": VariantConfig(
        name="Pastel Bloom",
        background=BackgroundStyle(
            base_fill=None,
            gradient=((0.0, "#FFF6FA", 0.96), (1.0, "#F3F5FF", 0.92)),
        ),
        placeholder=((0.0, "#F6C6DA", 0.35), (1.0, "#C9D7F8", 0.25)),
        shadow=ShadowStyle(
            color="#5A4A6E",
            alpha=0.35,
            fill="#5A4A6E",
            fill_alpha=0.18,
            blur_factor=2.0,
            offset_factor=0.2,
        ),
        border=BorderStyle(kind="solid", color="#F7C8DC", opacity=0.95),
        watermark=False,
        defaults=RenderParameters(add_watermark=False),
    ),
}


def list_variants() -> list[str]:
    return sorted(VARIANTS.keys())


def get_variant(name: str | None) -> VariantConfig:
    if not name:
        return VARIANTS[DEFAULT_VARIANT_NAME]
    return VARIANTS.get(name, VARIANTS[DEFAULT_VARIANT_NAME])
