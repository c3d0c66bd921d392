"""CLI entrypoints for the Ringframe desktop app, headless rendering, and benchmarks."""

from __future__ import annotations

import argparse
import json
import time
from dataclasses import asdict
from pathlib import Path

from PIL import Image

from ringframe_core import (
    AssetLoadError,
    ImageDecodeError,
    ManualFrameDriver,
    PerformanceController,
    ProfileSession,
    RenderBudget,
    load_config,
    load_default_stamp,
)
from ringframe_core.logging_setup import configure_logging
from ringframe_renderer import fraction_to_percent, get_variant, list_variants, percent_to_fraction


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _fail(message: str) -> int:
    _print_json({"success": False, "error": message})
    return 2


def cmd_run(_args: argparse.Namespace) -> int:
    from .app import run_gui

    return run_gui()


def _collect_updates(args: argparse.Namespace) -> dict[str, object]:
    updates: dict[str, object] = {}
    if args.ring_count is not None:
        updates["ring_count"] = args.ring_count
    if args.logo_scale is not None:
        updates["logo_scale"] = percent_to_fraction(args.logo_scale)
    if args.ring_offset is not None:
        updates["ring_offset"] = args.ring_offset
    if args.border is not None:
        updates["border_thickness"] = args.border
    if args.shadow is not None:
        updates["shadow_strength"] = args.shadow
    if args.size is not None:
        updates["canvas_size"] = args.size
    if args.no_tangent:
        updates["align_tangent"] = False
    if args.transparent:
        updates["transparent_background"] = True
    if args.no_watermark:
        updates["add_watermark"] = False
    if args.watermark_scale is not None:
        updates["watermark_scale"] = percent_to_fraction(args.watermark_scale)
    if args.watermark_y is not None:
        updates["watermark_y"] = args.watermark_y
    return updates


def cmd_render(args: argparse.Namespace) -> int:
    cfg = load_config()
    variant = get_variant(args.variant or cfg.ui.variant)

    try:
        stamp = load_default_stamp(cfg.stamp.default_path, cfg.stamp.default_size)
    except AssetLoadError as exc:
        return _fail(str(exc))

    session = ProfileSession(stamp, variant=variant, export_file_name=cfg.export.file_name)
    try:
        session.load_avatar(Path(args.avatar))
        if args.stamp:
            session.load_custom_stamp(Path(args.stamp))
        session.update(**_collect_updates(args))
    except (ImageDecodeError, ValueError) as exc:
        return _fail(str(exc))

    destination = args.out or cfg.export.directory
    try:
        result = session.export(destination)
    except OSError as exc:
        return _fail(f"Could not save image: {exc}")
    payload = asdict(result)
    payload["success"] = True
    _print_json(payload)
    return 0


def cmd_variants(_args: argparse.Namespace) -> int:
    rows = []
    for name in list_variants():
        variant = get_variant(name)
        defaults = asdict(variant.defaults)
        defaults["logo_scale"] = fraction_to_percent(variant.defaults.logo_scale)
        defaults["watermark_scale"] = fraction_to_percent(variant.defaults.watermark_scale)
        if not variant.watermark:
            for key in ("add_watermark", "watermark_scale", "watermark_y"):
                defaults.pop(key)
        rows.append(
            {
                "name": name,
                "border": variant.border.kind,
                "watermark": variant.watermark,
                "defaults": defaults,
            }
        )
    _print_json(rows)
    return 0


def cmd_benchmark(args: argparse.Namespace) -> int:
    cfg = load_config()
    try:
        stamp = load_default_stamp(cfg.stamp.default_path, cfg.stamp.default_size)
    except AssetLoadError as exc:
        return _fail(str(exc))

    driver = ManualFrameDriver()
    session = ProfileSession(stamp, variant=args.variant or cfg.ui.variant, driver=driver)
    session.update(canvas_size=args.size)
    session.store.set_avatar(Image.new("RGBA", (640, 480), (84, 120, 196, 255)))

    perf = PerformanceController(
        RenderBudget(
            render_ms_max=cfg.performance.render_ms_max,
            rss_mb_max=cfg.performance.rss_mb_max,
            cpu_percent_max=cfg.performance.cpu_percent_max,
        )
    )

    samples = []
    interval_ms = cfg.render.frame_interval_ms
    start = time.perf_counter()
    for i in range(args.frames):
        # A burst of changes per frame; the scheduler renders once.
        session.update(ring_count=24 + i % 24)
        session.update(ring_offset=float(i % 20))
        driver.tick()
        budget = perf.sample(session.scheduler.status.last_render_ms, interval_ms)
        interval_ms = budget.recommended_interval_ms
        samples.append(asdict(budget))
    elapsed = max(time.perf_counter() - start, 1e-9)

    status = session.scheduler.status
    render_max = max((s["render_ms"] for s in samples), default=0.0)
    cpu_max = max((s["cpu_percent"] for s in samples), default=0.0)
    rss_max = max((s["rss_mb"] for s in samples), default=0.0)

    pass_render = render_max <= cfg.performance.render_ms_max
    pass_cpu = cpu_max <= cfg.performance.cpu_percent_max
    pass_mem = rss_max <= cfg.performance.rss_mb_max

    _print_json(
        {
            "frames": status.frames_rendered,
            "canvas_size": args.size,
            "fps": status.frames_rendered / elapsed,
            "recommended_interval_ms": interval_ms,
            "budget": {
                "targets": asdict(cfg.performance),
                "max_observed": {
                    "render_ms": render_max,
                    "cpu_percent": cpu_max,
                    "rss_mb": rss_max,
                },
                "pass": bool(pass_render and pass_cpu and pass_mem),
                "checks": {
                    "render": pass_render,
                    "cpu": pass_cpu,
                    "memory": pass_mem,
                },
            },
        }
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ringframe", description="Ringframe profile picture maker")
    sub = parser.add_subparsers(dest="command", required=True)

    run_cmd = sub.add_parser("run", help="Run desktop app")
    run_cmd.set_defaults(func=cmd_run)

    render_cmd = sub.add_parser("render", help="Render a profile picture without the desktop app")
    render_cmd.add_argument("avatar", help="Path to the photo to place in the disk")
    render_cmd.add_argument("--variant", choices=list_variants(), default=None)
    render_cmd.add_argument("--out", default=None, help="Output file or directory")
    render_cmd.add_argument("--stamp", default=None, help="Custom stamp image used instead of the default")
    render_cmd.add_argument("--ring-count", type=int, default=None)
    render_cmd.add_argument("--logo-scale", type=float, default=None, help="Stamp size in percent of the disk radius")
    render_cmd.add_argument("--ring-offset", type=float, default=None)
    render_cmd.add_argument("--border", type=float, default=None, help="Border thickness in px")
    render_cmd.add_argument("--shadow", type=float, default=None, help="Shadow strength")
    render_cmd.add_argument("--size", type=int, default=None, help="Canvas size in px")
    render_cmd.add_argument("--no-tangent", action="store_true", help="Keep stamps upright")
    render_cmd.add_argument("--transparent", action="store_true", help="Skip the background fill")
    render_cmd.add_argument("--no-watermark", action="store_true")
    render_cmd.add_argument("--watermark-scale", type=float, default=None, help="Watermark size in percent")
    render_cmd.add_argument("--watermark-y", type=float, default=None)
    render_cmd.set_defaults(func=cmd_render)

    variants_cmd = sub.add_parser("variants", help="List variants and their default parameters")
    variants_cmd.set_defaults(func=cmd_variants)

    bench_cmd = sub.add_parser("benchmark", help="Run a render benchmark")
    bench_cmd.add_argument("--frames", type=int, default=30)
    bench_cmd.add_argument("--size", type=int, default=1024)
    bench_cmd.add_argument("--variant", choices=list_variants(), default=None)
    bench_cmd.set_defaults(func=cmd_benchmark)

    return parser


def main(argv: list[str] | None = None) -> int:
    cfg = load_config()
    configure_logging(keep_files=cfg.diagnostics.keep_log_files, console=False)
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
