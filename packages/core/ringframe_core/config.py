"""Persistent app settings schema and load/save helpers.

Render parameters are deliberately absent: every session starts from the
variant's defaults.
"""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from ringframe_renderer import DEFAULT_VARIANT_NAME, list_variants

CONFIG_VERSION = 1


@dataclass
class UiConfig:
    variant: str = DEFAULT_VARIANT_NAME


@dataclass
class RenderConfig:
    frame_interval_ms: int = 16


@dataclass
class StampConfig:
    default_path: str | None = None
    default_size: int = 256


@dataclass
class ExportConfig:
    directory: str | None = None
    file_name: str = "ringframe-pfp.png"


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7


@dataclass
class PerformanceConfig:
    render_ms_max: float = 50.0
    rss_mb_max: float = 400.0
    cpu_percent_max: float = 85.0


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    ui: UiConfig = field(default_factory=UiConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    stamp: StampConfig = field(default_factory=StampConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "Ringframe"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "Ringframe"
    return Path.home() / ".config" / "ringframe"


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_ui(cfg: AppConfig) -> None:
    if cfg.ui.variant not in list_variants():
        cfg.ui.variant = DEFAULT_VARIANT_NAME


def _normalize_render(cfg: AppConfig) -> None:
    cfg.render.frame_interval_ms = max(16, min(250, int(cfg.render.frame_interval_ms)))


def _normalize_stamp(cfg: AppConfig) -> None:
    cfg.stamp.default_size = max(16, min(2048, int(cfg.stamp.default_size)))
    if not cfg.stamp.default_path:
        cfg.stamp.default_path = None


def _normalize_export(cfg: AppConfig) -> None:
    name = str(cfg.export.file_name or "").strip()
    if not name or Path(name).name != name:
        name = ExportConfig().file_name
    if not name.lower().endswith(".png"):
        name = f"{name}.png"
    cfg.export.file_name = name


def _normalize_performance(cfg: AppConfig) -> None:
    cfg.performance.render_ms_max = float(max(1.0, cfg.performance.render_ms_max))
    cfg.performance.rss_mb_max = float(max(64.0, cfg.performance.rss_mb_max))
    cfg.performance.cpu_percent_max = float(max(1.0, cfg.performance.cpu_percent_max))
    cfg.diagnostics.keep_log_files = max(2, int(cfg.diagnostics.keep_log_files))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return AppConfig()
    if not isinstance(data, dict):
        return AppConfig()

    cfg = AppConfig(
        config_version=CONFIG_VERSION,
        ui=_merge(UiConfig, data.get("ui", {})),
        render=_merge(RenderConfig, data.get("render", {})),
        stamp=_merge(StampConfig, data.get("stamp", {})),
        export=_merge(ExportConfig, data.get("export", {})),
        diagnostics=_merge(DiagnosticsConfig, data.get("diagnostics", {})),
        performance=_merge(PerformanceConfig, data.get("performance", {})),
    )

    _normalize_ui(cfg)
    _normalize_render(cfg)
    _normalize_stamp(cfg)
    _normalize_export(cfg)
    _normalize_performance(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
