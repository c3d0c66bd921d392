"""Profile editing session: store, renderer and scheduler wired for one variant."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from PIL import Image

from ringframe_renderer import ExportResult, ProfileRenderer, VariantConfig, export_png, get_variant

from .assets import ImageSource, decode_image
from .logging_setup import get_logger
from .scheduler import FrameDriver, ManualFrameDriver, RenderScheduler
from .store import ParameterStore

EXPORT_FILE_NAME = "ringframe-pfp.png"


class ProfileSession:
    def __init__(
        self,
        default_stamp: Image.Image,
        variant: VariantConfig | str | None = None,
        driver: FrameDriver | None = None,
        on_frame: Callable[[Image.Image], None] | None = None,
        export_file_name: str = EXPORT_FILE_NAME,
    ) -> None:
        self.variant = variant if isinstance(variant, VariantConfig) else get_variant(variant)
        self.driver = driver or ManualFrameDriver()
        self.export_file_name = export_file_name
        self.store = ParameterStore(self.variant, default_stamp)
        self.renderer = ProfileRenderer(self.variant)
        self.scheduler = RenderScheduler(self.store, self.renderer, self.driver, on_frame=on_frame)
        self.logger = get_logger()

    @property
    def has_avatar(self) -> bool:
        return self.store.avatar is not None

    def start(self) -> Image.Image:
        """Paint the first frame synchronously once the default stamp is in place."""
        return self.scheduler.force_render()

    def load_avatar(self, source: ImageSource) -> Image.Image:
        image = decode_image(source, label="image")
        self.store.set_avatar(image)
        self.logger.info(
            f"avatar loaded {image.width}x{image.height}",
            extra={"event": "avatar_loaded"},
        )
        return image

    def load_custom_stamp(self, source: ImageSource) -> Image.Image:
        image = decode_image(source, label="logo")
        self.store.set_custom_stamp(image)
        self.store.set_use_custom_stamp(True)
        self.logger.info(
            f"custom stamp loaded {image.width}x{image.height}",
            extra={"event": "custom_stamp_loaded"},
        )
        return image

    def use_custom_stamp(self, enabled: bool) -> None:
        self.store.set_use_custom_stamp(enabled)

    def update(self, **fields: Any) -> None:
        self.store.update(**fields)

    def reset(self) -> Image.Image:
        self.store.reset()
        self.logger.info("parameters reset", extra={"event": "reset"})
        return self.scheduler.force_render()

    def export_bytes(self) -> bytes:
        return export_png(self.scheduler.force_render())

    def export(self, destination: str | Path | None = None) -> ExportResult:
        surface = self.scheduler.force_render()
        path = self._export_path(destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = export_png(surface)
        path.write_bytes(data)
        self.logger.info(f"exported {path}", extra={"event": "export_ok", "path": str(path)})
        return ExportResult(
            path=str(path),
            width=surface.width,
            height=surface.height,
            bytes_written=len(data),
            variant=self.variant.name,
        )

    def _export_path(self, destination: str | Path | None) -> Path:
        if destination is None:
            return Path.cwd() / self.export_file_name
        path = Path(destination).expanduser()
        if path.is_dir() or not path.suffix:
            return path / self.export_file_name
        return path
