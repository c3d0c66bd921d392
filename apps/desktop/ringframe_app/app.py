"""Desktop app runtime: Qt frame driver, editor window, and startup."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from PIL import Image
from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from ringframe_core import (
    AppConfig,
    AssetLoadError,
    ImageDecodeError,
    PerformanceController,
    ProfileSession,
    RenderBudget,
    load_config,
    load_default_stamp,
)
from ringframe_core.logging_setup import configure_logging, get_logger, install_crash_hooks
from ringframe_renderer import RenderParameters, export_png, fraction_to_percent

PREVIEW_SIZE = 512
IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.webp *.bmp *.gif)"


class QtFrameDriver:
    """Runs each requested frame callback once from the Qt event loop."""

    def __init__(self, interval_ms: int = 16) -> None:
        self.interval_ms = interval_ms

    def request_frame(self, callback: Callable[[], None]) -> None:
        QTimer.singleShot(self.interval_ms, callback)


@dataclass(frozen=True)
class SliderField:
    field: str
    label: str
    minimum: int
    maximum: int
    suffix: str = ""
    percent: bool = False
    step: int = 1


SLIDERS = (
    SliderField("ring_count", "Stamps", 0, 120),
    SliderField("logo_scale", "Stamp size", 4, 60, "%", percent=True),
    SliderField("ring_offset", "Ring offset", -100, 150, "px"),
    SliderField("border_thickness", "Border", 0, 60, "px"),
    SliderField("shadow_strength", "Shadow", 0, 60),
    SliderField("watermark_scale", "Watermark size", 5, 80, "%", percent=True),
    SliderField("watermark_y", "Watermark offset", -200, 200, "px"),
    SliderField("canvas_size", "Canvas size", 256, 2048, "px", step=64),
)

TOGGLES = (
    ("align_tangent", "Align stamps to ring"),
    ("add_watermark", "Add watermark"),
    ("transparent_background", "Transparent background"),
)


class ProfileWindow(QWidget):
    def __init__(self, config: AppConfig, default_stamp: Image.Image) -> None:
        super().__init__()
        self.config = config
        self.logger = get_logger()
        self.driver = QtFrameDriver(config.render.frame_interval_ms)
        self.performance = PerformanceController(
            RenderBudget(
                render_ms_max=config.performance.render_ms_max,
                rss_mb_max=config.performance.rss_mb_max,
                cpu_percent_max=config.performance.cpu_percent_max,
            )
        )
        self.session = ProfileSession(
            default_stamp,
            variant=config.ui.variant,
            driver=self.driver,
            on_frame=self._show_frame,
            export_file_name=config.export.file_name,
        )

        self.setWindowTitle(f"Ringframe - {self.session.variant.name}")
        self._sliders: dict[str, tuple[QSlider, QLabel, SliderField]] = {}
        self._toggles: dict[str, QCheckBox] = {}
        self._build()
        self._sync_controls(self.session.store.params)
        self.session.start()

    def _build(self) -> None:
        self.preview = QLabel()
        self.preview.setFixedSize(PREVIEW_SIZE, PREVIEW_SIZE)
        self.preview.setAlignment(Qt.AlignmentFlag.AlignCenter)

        pick_photo = QPushButton("Choose photo...")
        pick_photo.clicked.connect(self._choose_avatar)

        self.use_custom = QCheckBox("Use custom stamp")
        self.use_custom.toggled.connect(self._toggle_custom_stamp)
        self.pick_stamp = QPushButton("Choose stamp...")
        self.pick_stamp.setEnabled(False)
        self.pick_stamp.clicked.connect(self._choose_stamp)

        form = QFormLayout()
        watermark = self.session.variant.watermark
        for item in SLIDERS:
            if not watermark and item.field.startswith("watermark"):
                continue
            slider = QSlider(Qt.Orientation.Horizontal)
            slider.setRange(item.minimum, item.maximum)
            slider.setSingleStep(item.step)
            slider.setPageStep(item.step)
            readout = QLabel()
            slider.valueChanged.connect(lambda value, s=item: self._slider_changed(s, value))
            row = QHBoxLayout()
            row.addWidget(slider)
            row.addWidget(readout)
            form.addRow(item.label, row)
            self._sliders[item.field] = (slider, readout, item)

        for field, label in TOGGLES:
            if not watermark and field == "add_watermark":
                continue
            box = QCheckBox(label)
            box.toggled.connect(lambda checked, f=field: self.session.update(**{f: bool(checked)}))
            form.addRow(box)
            self._toggles[field] = box

        reset = QPushButton("Reset")
        reset.clicked.connect(self._reset)
        self.download = QPushButton("Download PNG")
        self.download.setEnabled(False)
        self.download.clicked.connect(self._download)

        controls = QVBoxLayout()
        controls.addWidget(pick_photo)
        controls.addWidget(self.use_custom)
        controls.addWidget(self.pick_stamp)
        controls.addLayout(form)
        buttons = QHBoxLayout()
        buttons.addWidget(reset)
        buttons.addWidget(self.download)
        controls.addLayout(buttons)
        controls.addStretch(1)

        root = QHBoxLayout(self)
        root.addWidget(self.preview)
        root.addLayout(controls)

    def _slider_changed(self, item: SliderField, value: int) -> None:
        if item.step > 1:
            value = max(item.minimum, round(value / item.step) * item.step)
        _, readout, _ = self._sliders[item.field]
        readout.setText(f"{value}{item.suffix}")
        if item.percent:
            self.session.update(**{item.field: value / 100.0})
        elif item.field in ("ring_count", "canvas_size"):
            self.session.update(**{item.field: int(value)})
        else:
            self.session.update(**{item.field: float(value)})

    def _sync_controls(self, params: RenderParameters) -> None:
        for field, (slider, readout, item) in self._sliders.items():
            raw = getattr(params, field)
            value = int(round(fraction_to_percent(raw))) if item.percent else int(round(raw))
            slider.blockSignals(True)
            slider.setValue(value)
            slider.blockSignals(False)
            readout.setText(f"{value}{item.suffix}")
        for field, box in self._toggles.items():
            box.blockSignals(True)
            box.setChecked(bool(getattr(params, field)))
            box.blockSignals(False)
        self.use_custom.blockSignals(True)
        self.use_custom.setChecked(self.session.store.use_custom_stamp)
        self.use_custom.blockSignals(False)
        self.pick_stamp.setEnabled(self.session.store.use_custom_stamp)

    def _show_frame(self, surface: Image.Image) -> None:
        pixmap = QPixmap()
        pixmap.loadFromData(export_png(surface), "PNG")
        self.preview.setPixmap(
            pixmap.scaled(
                PREVIEW_SIZE,
                PREVIEW_SIZE,
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            )
        )
        budget = self.performance.sample(self.session.scheduler.status.last_render_ms, self.driver.interval_ms)
        if budget.warning:
            self.logger.info(
                f"render budget {budget.warning} render_ms={budget.render_ms:.1f}",
                extra={"event": "render_budget"},
            )
        self.driver.interval_ms = budget.recommended_interval_ms

    def _pick_file(self, title: str) -> str:
        path, _ = QFileDialog.getOpenFileName(self, title, str(Path.home()), IMAGE_FILTER)
        return path

    def _choose_avatar(self) -> None:
        path = self._pick_file("Choose photo")
        if not path:
            return
        try:
            self.session.load_avatar(Path(path))
        except ImageDecodeError as exc:
            QMessageBox.warning(self, "Ringframe", str(exc))
            return
        self.download.setEnabled(True)

    def _toggle_custom_stamp(self, checked: bool) -> None:
        self.pick_stamp.setEnabled(checked)
        self.session.use_custom_stamp(checked)

    def _choose_stamp(self) -> None:
        path = self._pick_file("Choose stamp")
        if not path:
            return
        try:
            self.session.load_custom_stamp(Path(path))
        except ImageDecodeError as exc:
            QMessageBox.warning(self, "Ringframe", str(exc))
            return
        self._sync_controls(self.session.store.params)

    def _reset(self) -> None:
        self.session.reset()
        self._sync_controls(self.session.store.params)

    def _download(self) -> None:
        directory = Path(self.config.export.directory or Path.home()).expanduser()
        suggested = directory / self.session.export_file_name
        path, _ = QFileDialog.getSaveFileName(self, "Save profile picture", str(suggested), "PNG (*.png)")
        if not path:
            return
        try:
            result = self.session.export(Path(path))
        except OSError as exc:
            self.logger.error(f"export failed: {exc}", extra={"event": "export_failed"})
            QMessageBox.warning(self, "Ringframe", f"Could not save image: {exc}")
            return
        self.logger.info(f"saved {result.path}", extra={"event": "download"})


def run_gui() -> int:
    config = load_config()
    configure_logging(keep_files=config.diagnostics.keep_log_files)
    install_crash_hooks()
    logger = get_logger()

    app = QApplication(sys.argv)
    app.setApplicationName("Ringframe")

    try:
        stamp = load_default_stamp(config.stamp.default_path, config.stamp.default_size)
    except AssetLoadError as exc:
        logger.critical(f"startup aborted: {exc}", extra={"event": "startup_failed"})
        QMessageBox.critical(None, "Ringframe", str(exc))
        return 1

    window = ProfileWindow(config, stamp)
    window.show()

    exit_code = app.exec()
    logger.info("app shutdown", extra={"event": "shutdown", "exit_code": int(exit_code)})
    return int(exit_code)
