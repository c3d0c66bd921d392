"""Render scheduler that coalesces parameter changes into one render per frame."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from PIL import Image

from ringframe_renderer import ProfileRenderer, new_surface

from .logging_setup import get_logger
from .store import ParameterStore


class FrameDriver(Protocol):
    def request_frame(self, callback: Callable[[], None]) -> None: ...


class ManualFrameDriver:
    """Frame driver that fires queued callbacks only when ``tick()`` is called."""

    def __init__(self) -> None:
        self._queue: list[Callable[[], None]] = []

    @property
    def pending(self) -> int:
        return len(self._queue)

    def request_frame(self, callback: Callable[[], None]) -> None:
        self._queue.append(callback)

    def tick(self) -> int:
        # Callbacks requested while this frame fires belong to the next frame.
        due, self._queue = self._queue, []
        for callback in due:
            callback()
        return len(due)


@dataclass
class RenderStatus:
    pending: bool = False
    frames_rendered: int = 0
    forced_renders: int = 0
    last_render_ms: float = 0.0
    canvas_size: int = 0


class RenderScheduler:
    def __init__(
        self,
        store: ParameterStore,
        renderer: ProfileRenderer,
        driver: FrameDriver,
        on_frame: Callable[[Image.Image], None] | None = None,
    ) -> None:
        self.store = store
        self.renderer = renderer
        self.driver = driver
        self.on_frame = on_frame

        self._status = RenderStatus()
        self._surface: Image.Image | None = None
        self._events: list[dict[str, Any]] = []
        self._logger = get_logger()

        store.add_listener(self.schedule)

    @property
    def status(self) -> RenderStatus:
        return self._status

    @property
    def pending(self) -> bool:
        return self._status.pending

    @property
    def surface(self) -> Image.Image | None:
        return self._surface

    def recent_events(self, limit: int = 200) -> list[dict[str, Any]]:
        return self._events[-limit:]

    def _log_event(self, event: str, **fields: Any) -> None:
        row = {
            "ts_utc": datetime.now(timezone.utc).isoformat(),
            "event": event,
            "pending": self._status.pending,
        }
        row.update(fields)
        self._events.append(row)
        if len(self._events) > 1000:
            self._events = self._events[-1000:]

    def schedule(self) -> None:
        if self._status.pending:
            return
        self._status.pending = True
        self._log_event("render_scheduled")
        self.driver.request_frame(self._on_frame_due)

    def force_render(self) -> Image.Image:
        surface = self._render()
        self._status.forced_renders += 1
        self._log_event("render_forced", canvas_size=surface.width)
        return surface

    def _on_frame_due(self) -> None:
        try:
            self._render()
        finally:
            self._status.pending = False

    def _ensure_surface(self, size: int) -> Image.Image:
        if self._surface is None or self._surface.width != size:
            self._surface = new_surface(size)
            self._status.canvas_size = size
            self._log_event("surface_resized", canvas_size=size)
        return self._surface

    def _render(self) -> Image.Image:
        snapshot = self.store.snapshot()
        surface = self._ensure_surface(snapshot.params.canvas_size)

        start = time.perf_counter()
        self.renderer.render(surface, snapshot)
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        self._status.frames_rendered += 1
        self._status.last_render_ms = elapsed_ms
        self._log_event("render_ok", render_ms=elapsed_ms, has_avatar=snapshot.avatar is not None)
        self._logger.debug(
            f"rendered frame size={surface.width} in {elapsed_ms:.1f}ms",
            extra={"event": "render_ok", "render_ms": round(elapsed_ms, 2), "canvas_size": surface.width},
        )

        if self.on_frame is not None:
            self.on_frame(surface)
        return surface
