"""Launcher entrypoint for the packaged dashboard."""

from __future__ import annotations

import os
import pathlib
import sys


def _bundle_root() -> pathlib.Path:
    if getattr(sys, "frozen", False):
        return pathlib.Path(getattr(sys, "_MEIPASS"))
    return pathlib.Path(__file__).resolve().parent


def _runtime_root() -> pathlib.Path:
    if getattr(sys, "frozen", False):
        return pathlib.Path(sys.executable).resolve().parent
    return pathlib.Path(__file__).resolve().parent


def main() -> None:
    bundle_root = _bundle_root()
    runtime_root = _runtime_root()
    os.chdir(runtime_root)

    # Bundled sample data unless the operator points at another file.
    os.environ.setdefault("BUDGET_DASHBOARD_DATA_PATH", str(bundle_root / "data" / "budget_data.json"))
    os.environ.setdefault("BUDGET_DASHBOARD_STORAGE_ROOT", str(runtime_root / ".local_store"))
    os.environ.setdefault("STREAMLIT_BROWSER_GATHER_USAGE_STATS", "false")

    from streamlit.web import cli as stcli

    sys.argv = ["streamlit", "run", str(bundle_root / "app.py"), "--browser.gatherUsageStats=false", *sys.argv[1:]]
    raise SystemExit(stcli.main())


if __name__ == "__main__":
    main()
