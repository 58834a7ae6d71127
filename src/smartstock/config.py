from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping
import os
import sys


@dataclass(frozen=True)
class AppPaths:
    base_dir: Path
    store_path: Path
    logs_dir: Path
    exports_dir: Path


@dataclass(frozen=True)
class LedgerPolicy:
    enforce_stock_floor: bool = True
    strict_permissions: bool = False
    top_n: int = 5


def _windows_appdata() -> Path:
    return Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))


def _mac_app_support() -> Path:
    return Path.home() / "Library" / "Application Support"


def get_app_paths(app_name: str = "SmartStock") -> AppPaths:
    if sys.platform.startswith("win"):
        base = _windows_appdata() / app_name
    elif sys.platform == "darwin":
        base = _mac_app_support() / app_name
    else:
        base = Path.home() / f".{app_name.lower()}"

    logs = base / "logs"
    exports = base / "exports"
    store = base / "smartstock.db"

    base.mkdir(parents=True, exist_ok=True)
    logs.mkdir(parents=True, exist_ok=True)
    exports.mkdir(parents=True, exist_ok=True)

    return AppPaths(base_dir=base, store_path=store, logs_dir=logs, exports_dir=exports)


def _flag(value: str | None, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    text = value.strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    return default


def load_policy(environ: Mapping[str, str] | None = None) -> LedgerPolicy:
    env = os.environ if environ is None else environ
    defaults = LedgerPolicy()
    top_n_raw = env.get("SMARTSTOCK_TOP_N", "").strip()
    return LedgerPolicy(
        enforce_stock_floor=_flag(env.get("SMARTSTOCK_ENFORCE_STOCK_FLOOR"), defaults.enforce_stock_floor),
        strict_permissions=_flag(env.get("SMARTSTOCK_STRICT_PERMISSIONS"), defaults.strict_permissions),
        top_n=int(top_n_raw) if top_n_raw.isdigit() else defaults.top_n,
    )
