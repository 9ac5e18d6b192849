from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import logging
import os
import sys

log = logging.getLogger(__name__)

DEFAULT_SUBMIT_URL = "http://localhost:8080/api/send-order"
DEFAULT_SUBMIT_TIMEOUT = 15.0


@dataclass(frozen=True)
class AppPaths:
    base_dir: Path
    logs_dir: Path
    exports_dir: Path


@dataclass(frozen=True)
class CompanyProfile:
    name: str = "AGROVITA"
    legal_name: str = "AGROVITA BIOINSUMOS E NUTRIÇÃO VEGETAL LTDA"
    tax_line: str = "CNPJ: 00.000.000/0001-00 | IE.: 00.000.000-0"
    contact_line: str = "E-mail: comercial@agrovita.example | Fone: (00) 90000-0000"


@dataclass(frozen=True)
class Settings:
    submit_url: str = DEFAULT_SUBMIT_URL
    submit_timeout: float = DEFAULT_SUBMIT_TIMEOUT
    logo_path: Optional[Path] = None
    min_item_rows: int = 0
    company: CompanyProfile = CompanyProfile()


def _windows_appdata() -> Path:
    return Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))


def _mac_app_support() -> Path:
    return Path.home() / "Library" / "Application Support"


def get_app_paths(app_name: str = "AgroOrderForm") -> AppPaths:
    if sys.platform.startswith("win"):
        base = _windows_appdata() / app_name
    elif sys.platform == "darwin":
        base = _mac_app_support() / app_name
    else:
        base = Path.home() / f".{app_name.lower()}"

    logs = base / "logs"
    exports = base / "exports"

    base.mkdir(parents=True, exist_ok=True)
    logs.mkdir(parents=True, exist_ok=True)
    exports.mkdir(parents=True, exist_ok=True)

    return AppPaths(base_dir=base, logs_dir=logs, exports_dir=exports)


def _float_env(env: Mapping[str, str], key: str, default: float) -> float:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        log.warning("invalid_setting key=%s value=%r default=%s", key, raw, default)
        return default
    if value <= 0:
        log.warning("invalid_setting key=%s value=%r default=%s", key, raw, default)
        return default
    return value


def _int_env(env: Mapping[str, str], key: str, default: int) -> int:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        log.warning("invalid_setting key=%s value=%r default=%s", key, raw, default)
        return default
    return max(value, 0)


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ

    logo = (env.get("AOF_LOGO_PATH") or "").strip()
    return Settings(
        submit_url=(env.get("AOF_SUBMIT_URL") or "").strip() or DEFAULT_SUBMIT_URL,
        submit_timeout=_float_env(env, "AOF_SUBMIT_TIMEOUT", DEFAULT_SUBMIT_TIMEOUT),
        logo_path=Path(logo) if logo else None,
        min_item_rows=_int_env(env, "AOF_MIN_ITEM_ROWS", 0),
    )
