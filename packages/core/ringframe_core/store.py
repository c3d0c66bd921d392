"""Parameter store: current render parameters, avatar and stamp references."""

from __future__ import annotations

from typing import Any, Callable

from PIL import Image

from ringframe_renderer import RenderParameters, RenderSnapshot, VariantConfig, percent_to_fraction


class ParameterStore:
    """Owns the mutable inputs of the pipeline and notifies listeners on every change.

    Bitmaps are handed in already decoded. Replacing one drops the old reference;
    the active stamp falls back to the default stamp whenever custom stamps are off.
    """

    def __init__(self, variant: VariantConfig, default_stamp: Image.Image) -> None:
        if default_stamp is None:
            raise ValueError("default_stamp is required")
        self.variant = variant
        self._params = variant.defaults
        self._avatar: Image.Image | None = None
        self._default_stamp = default_stamp
        self._custom_stamp: Image.Image | None = None
        self._use_custom_stamp = False
        self._listeners: list[Callable[[], None]] = []

    @property
    def params(self) -> RenderParameters:
        return self._params

    @property
    def avatar(self) -> Image.Image | None:
        return self._avatar

    @property
    def default_stamp(self) -> Image.Image:
        return self._default_stamp

    @property
    def custom_stamp(self) -> Image.Image | None:
        return self._custom_stamp

    @property
    def use_custom_stamp(self) -> bool:
        return self._use_custom_stamp

    @property
    def active_stamp(self) -> Image.Image:
        if self._use_custom_stamp and self._custom_stamp is not None:
            return self._custom_stamp
        return self._default_stamp

    def snapshot(self) -> RenderSnapshot:
        return RenderSnapshot(params=self._params, avatar=self._avatar, stamp=self.active_stamp)

    def add_listener(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def _changed(self) -> None:
        for callback in list(self._listeners):
            callback()

    def update(self, **fields: Any) -> RenderParameters:
        blocked = sorted(name for name in fields if not self.variant.allows(name))
        if blocked:
            raise ValueError(f"{self.variant.name} has no watermark; cannot set {', '.join(blocked)}")
        self._params = self._params.with_changes(**fields)
        self._changed()
        return self._params

    def set_ring_count(self, value: int) -> None:
        self.update(ring_count=int(value))

    def set_logo_scale_percent(self, value: float) -> None:
        self.update(logo_scale=percent_to_fraction(value))

    def set_ring_offset(self, value: float) -> None:
        self.update(ring_offset=float(value))

    def set_border_thickness(self, value: float) -> None:
        self.update(border_thickness=float(value))

    def set_shadow_strength(self, value: float) -> None:
        self.update(shadow_strength=float(value))

    def set_canvas_size(self, value: int) -> None:
        self.update(canvas_size=int(value))

    def set_align_tangent(self, enabled: bool) -> None:
        self.update(align_tangent=bool(enabled))

    def set_transparent_background(self, enabled: bool) -> None:
        self.update(transparent_background=bool(enabled))

    def set_add_watermark(self, enabled: bool) -> None:
        self.update(add_watermark=bool(enabled))

    def set_watermark_scale_percent(self, value: float) -> None:
        self.update(watermark_scale=percent_to_fraction(value))

    def set_watermark_y(self, value: float) -> None:
        self.update(watermark_y=float(value))

    def set_avatar(self, image: Image.Image | None) -> None:
        self._avatar = image
        self._changed()

    def set_custom_stamp(self, image: Image.Image) -> None:
        if image is None:
            raise ValueError("custom stamp image is required")
        self._custom_stamp = image
        self._changed()

    def set_use_custom_stamp(self, enabled: bool) -> None:
        self._use_custom_stamp = bool(enabled)
        self._changed()

    def reset(self) -> None:
        self._params = self.variant.defaults
        self._use_custom_stamp = False
        self._changed()
