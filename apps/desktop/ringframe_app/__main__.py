"""``python -m ringframe_app`` and frozen-bundle entrypoint."""

from __future__ import annotations

import sys

try:
    from .cli import main as _cli_main
except ImportError:
    # Executed as a plain script (run_path / PyInstaller) without a parent package.
    from ringframe_app.cli import main as _cli_main

DEFAULT_COMMAND = "run"


def main(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    # A bare launch (double-clicked bundle) opens the editor window.
    return int(_cli_main(args or [DEFAULT_COMMAND]))


if __name__ == "__main__":
    raise SystemExit(main())
