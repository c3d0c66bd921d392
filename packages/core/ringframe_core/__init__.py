"""Core app services: parameter store, render scheduling, session, assets, settings and logging."""

from .assets import AssetLoadError, ImageDecodeError, decode_image, load_default_stamp
from .config import AppConfig, load_config, save_config
from .performance import BudgetStatus, PerformanceController, RenderBudget
from .scheduler import FrameDriver, ManualFrameDriver, RenderScheduler, RenderStatus
from .session import EXPORT_FILE_NAME, ProfileSession
from .store import ParameterStore

__all__ = [
    "AppConfig",
    "AssetLoadError",
    "BudgetStatus",
    "EXPORT_FILE_NAME",
    "FrameDriver",
    "ImageDecodeError",
    "ManualFrameDriver",
    "ParameterStore",
    "PerformanceController",
    "ProfileSession",
    "RenderBudget",
    "RenderScheduler",
    "RenderStatus",
    "decode_image",
    "load_config",
    "load_default_stamp",
    "save_config",
]
