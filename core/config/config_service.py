"""Typed, layered configuration loader with precedence handling."""
from __future__ import annotations

import os
import configparser
import shutil
from dataclasses import dataclass, fields
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Tuple

# --------------------------------------------------------------------------- #
#  Paths & default definitions
# --------------------------------------------------------------------------- #

def _find_project_root() -> Path:
    here = Path(__file__).resolve()
    for parent in here.parents:
        if (parent / "core").is_dir():
            return parent
    return here.parent

PROJECT_ROOT = _find_project_root()
CONFIG_DIR = Path(os.environ.get("SERVICELOG_CONFIG_DIR", PROJECT_ROOT / "core" / "config"))
DEFAULTS_INI = CONFIG_DIR / "defaults.ini"
MACHINE_INI = CONFIG_DIR / "config.ini"

ENV_PREFIX = "SERVICELOG_"


_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "Api": {
        "base_url": "http://localhost:5000/api",
        "timeout_seconds": "10",
    },
    "Database": {
        "logging": (PROJECT_ROOT / "databases" / "logs.db").as_posix(),
    },
    "Scanner": {
        "frame_rate": "10",
        "region_width": "280",
        "region_height": "120",
        "camera_index": "0",
        "timeout_seconds": "0",
        "formats": "QR_CODE,CODE_128,CODE_39,CODE_93,EAN_13,EAN_8,UPC_A,UPC_E,ITF,PDF_417",
    },
    "Signature": {
        "stroke_width": "2",
        "pen_color": "#000000",
    },
    "General": {
        "app_name": "Printocards Service Generator",
        "version": "1.0.0",
    },
}


# --------------------------------------------------------------------------- #
#  Datamodels
# --------------------------------------------------------------------------- #

@dataclass
class ApiConfig:
    base_url: str = "http://localhost:5000/api"
    timeout_seconds: float = 10.0


@dataclass
class DatabaseConfig:
    logging: Path = PROJECT_ROOT / "databases" / "logs.db"


@dataclass
class ScannerSettings:
    frame_rate: int = 10
    region_width: int = 280
    region_height: int = 120
    camera_index: int = 0
    timeout_seconds: float = 0.0
    formats: str = ""


@dataclass
class SignatureSettings:
    stroke_width: int = 2
    pen_color: str = "#000000"


@dataclass
class GeneralConfig:
    app_name: str = "Printocards Service Generator"
    version: str = ""


# --------------------------------------------------------------------------- #
#  Helpers
# --------------------------------------------------------------------------- #

def _ensure_machine_config() -> None:
    """Ensure config directory and machine config exist."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    if not MACHINE_INI.exists():
        if DEFAULTS_INI.exists():
            shutil.copy(DEFAULTS_INI, MACHINE_INI)
        else:
            parser = configparser.ConfigParser()
            parser.read_dict(_DEFAULTS)
            with MACHINE_INI.open("w", encoding="utf-8") as fh:
                parser.write(fh)


def _cp_to_dict(cp: configparser.ConfigParser) -> Dict[str, Dict[str, Any]]:
    data: Dict[str, Dict[str, Any]] = {}
    for section in cp.sections():
        data[section] = {k: v for k, v in cp.items(section)}
    return data


def _apply(target: Dict[str, Dict[str, Any]], source: Dict[str, Dict[str, Any]],
           layer: str, origin: str,
           sources: Dict[Tuple[str, str], Dict[str, str]]) -> None:
    for section, items in source.items():
        sec = target.setdefault(section, {})
        for key, value in items.items():
            sec[key] = value
            sources[(section, key)] = {"layer": layer, "source": origin}


def _cast(value: Any, typ: Any) -> Any:
    # dataclass field types are strings under postponed evaluation
    typ = {"Path": Path, "bool": bool, "int": int, "float": float, "str": str}.get(typ, typ)
    if typ is Path:
        return Path(str(value)).expanduser()
    if typ is bool:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"1", "true", "yes", "on"}
    if typ is int:
        return int(value)
    if typ is float:
        return float(value)
    return typ(value)


def _build_dataclass(cls: type, data: Dict[str, Any]) -> Any:
    kwargs = {}
    for field in fields(cls):
        val = data.get(field.name, field.default)
        kwargs[field.name] = _cast(val, field.type)
    return cls(**kwargs)


def _env_overlays(environ: Dict[str, str] | None = None) -> Dict[str, Dict[str, Any]]:
    result: Dict[str, Dict[str, Any]] = {}
    for env_key, value in (os.environ if environ is None else environ).items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        remainder = env_key[len(ENV_PREFIX):]
        parts = remainder.split("__", 1)
        if len(parts) != 2:
            continue
        section, key = parts
        section = section.title()
        key = key.lower()
        result.setdefault(section, {})[key] = value
    return result


def _user_config_path() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA") or (Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "ServiceLog" / "config.ini"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "servicelog" / "config.ini"


# --------------------------------------------------------------------------- #
#  ConfigService
# --------------------------------------------------------------------------- #


class ConfigService:
    """Facade merging layered configuration with type safety."""

    def __init__(self, *, write_machine_config: bool = True) -> None:
        self._lock = RLock()
        if write_machine_config:
            _ensure_machine_config()
        self.reload()

    # ------------------------------------------------------------------ #
    def reload(self) -> None:
        with self._lock:
            merged: Dict[str, Dict[str, Any]] = {}
            sources: Dict[Tuple[str, str], Dict[str, str]] = {}

            # Layer 0: embedded defaults
            _apply(merged, _DEFAULTS, "code", "embedded", sources)

            # Layer 1: defaults.ini
            if DEFAULTS_INI.exists():
                cp = configparser.ConfigParser()
                cp.read(DEFAULTS_INI, encoding="utf-8")
                _apply(merged, _cp_to_dict(cp), "defaults.ini", str(DEFAULTS_INI), sources)

            # Layer 2: environment variables
            _apply(merged, _env_overlays(), "env", "os.environ", sources)

            # Layer 3: machine config
            if MACHINE_INI.exists():
                cp = configparser.ConfigParser()
                cp.read(MACHINE_INI, encoding="utf-8")
                _apply(merged, _cp_to_dict(cp), "machine", str(MACHINE_INI), sources)

            # Layer 4: user overrides
            user_ini = _user_config_path()
            if user_ini.exists():
                cp = configparser.ConfigParser()
                cp.read(user_ini, encoding="utf-8")
                _apply(merged, _cp_to_dict(cp), "user", str(user_ini), sources)

            self._merged = merged
            self._sources = sources

            self.api = _build_dataclass(ApiConfig, merged.get("Api", {}))
            self.database = _build_dataclass(DatabaseConfig, merged.get("Database", {}))
            self.scanner = _build_dataclass(ScannerSettings, merged.get("Scanner", {}))
            self.signature = _build_dataclass(SignatureSettings, merged.get("Signature", {}))
            self.general = _build_dataclass(GeneralConfig, merged.get("General", {}))

    # ------------------------------------------------------------------ #
    def get(self, section: str, key: str, *, cast: Callable[[Any], Any] | type = str) -> Any:
        val = self._merged.get(section, {}).get(key)
        if val is None:
            return None
        if isinstance(cast, type):
            return _cast(val, cast)
        return cast(val)

    def meta_source(self, section: str, key: str) -> Dict[str, str] | None:
        return self._sources.get((section, key))


_config_service: ConfigService | None = None
_singleton_lock = RLock()


def get_config_service() -> ConfigService:
    """Global singleton, created on first use."""
    global _config_service
    with _singleton_lock:
        if _config_service is None:
            _config_service = ConfigService()
        return _config_service
