"""
Typed, layered configuration for the installer client.

Layers, lowest to highest precedence:
    code         embedded _DEFAULTS
    defaults.ini shipped next to this module (optional)
    machine      core/config/config.ini, seeded on first start
    env          INSTALLER_<SECTION>__<KEY>
    user         ~/.config/installer_companion/config.ini (APPDATA on Windows)

Every merged value remembers the layer it came from (see meta_source()).
"""
from __future__ import annotations

import os
import configparser
import shutil
from dataclasses import dataclass, fields, MISSING
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Iterator, Tuple

Sections = Dict[str, Dict[str, Any]]

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
CONFIG_DIR = PROJECT_ROOT / "core" / "config"
DEFAULTS_INI = CONFIG_DIR / "defaults.ini"
MACHINE_INI = CONFIG_DIR / "config.ini"

ENV_PREFIX = "INSTALLER_"


_DEFAULTS: Sections = {
    "Api": {
        "base_url": "http://localhost:3001",
        "timeout_s": "30",
    },
    "Signature": {
        "max_width": "400",
        "max_height": "200",
        "quality": "0.7",
        "pen_min_width": "2",
        "pen_max_width": "4",
    },
    "Submission": {
        "notes_required": "false",
        "prompt_missing_email": "false",
    },
    "Storage": {
        "logging_db": (PROJECT_ROOT / "databases" / "logs.db").as_posix(),
        "drafts_dir": (PROJECT_ROOT / "data" / "drafts").as_posix(),
    },
    "General": {
        "app_name": "Installer Companion",
        "version": "",
    },
}


class ConfigError(ValueError):
    """A merged configuration value is unusable."""


# --------------------------------------------------------------------------- #
#  Datamodels
# --------------------------------------------------------------------------- #

@dataclass
class ApiConfig:
    base_url: str = "http://localhost:3001"
    timeout_s: float = 30.0


@dataclass
class SignatureConfig:
    max_width: int = 400
    max_height: int = 200
    quality: float = 0.7
    pen_min_width: float = 2.0
    pen_max_width: float = 4.0


@dataclass
class SubmissionConfig:
    notes_required: bool = False
    prompt_missing_email: bool = False


@dataclass
class StorageConfig:
    logging_db: Path
    drafts_dir: Path


@dataclass
class GeneralConfig:
    app_name: str = ""
    version: str = ""


# --------------------------------------------------------------------------- #
#  Layer readers
# --------------------------------------------------------------------------- #

def _ensure_machine_config() -> None:
    """Seed the machine config from defaults.ini, or from the embedded defaults."""
    if MACHINE_INI.exists():
        return
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    if DEFAULTS_INI.exists():
        shutil.copy(DEFAULTS_INI, MACHINE_INI)
        return
    parser = configparser.ConfigParser()
    parser.read_dict(_DEFAULTS)
    with MACHINE_INI.open("w", encoding="utf-8") as fh:
        fh.write("# Machine-wide settings; INSTALLER_<SECTION>__<KEY> and the user config override them.\n")
        parser.write(fh)


def _read_ini(path: Path) -> Sections:
    if not path.exists():
        return {}
    parser = configparser.ConfigParser()
    parser.read(path, encoding="utf-8")
    return {section: dict(parser.items(section)) for section in parser.sections()}


def _env_overlays() -> Sections:
    """INSTALLER_API__BASE_URL -> {"Api": {"base_url": ...}}; malformed names are skipped."""
    result: Sections = {}
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        section, sep, key = env_key[len(ENV_PREFIX):].partition("__")
        if not sep or not section or not key:
            continue
        result.setdefault(section.title(), {})[key.lower()] = value
    return result


def _user_config_path() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA") or (Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "InstallerCompanion" / "config.ini"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "installer_companion" / "config.ini"


def _layers() -> Iterator[Tuple[str, str, Sections]]:
    yield "code", "embedded", _DEFAULTS
    yield "defaults.ini", str(DEFAULTS_INI), _read_ini(DEFAULTS_INI)
    yield "machine", str(MACHINE_INI), _read_ini(MACHINE_INI)
    yield "env", "os.environ", _env_overlays()
    user_ini = _user_config_path()
    yield "user", str(user_ini), _read_ini(user_ini)


# --------------------------------------------------------------------------- #
#  Typed views
# --------------------------------------------------------------------------- #

def _cast(value: Any, typ: Any) -> Any:
    # dataclass annotations are strings under `from __future__ import annotations`
    if typ in (Path, "Path"):
        return Path(str(value)).expanduser()
    if typ in (bool, "bool"):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"1", "true", "yes", "on"}
    if typ in (int, "int"):
        return int(value)
    if typ in (float, "float"):
        return float(value)
    return str(value)


def _build_dataclass(cls: type, data: Dict[str, Any]) -> Any:
    kwargs = {}
    for f in fields(cls):
        raw = data.get(f.name, f.default)
        if raw is MISSING:
            raise ConfigError(f"[{cls.__name__}] missing value for '{f.name}'")
        try:
            kwargs[f.name] = _cast(raw, f.type)
        except ValueError as ex:
            raise ConfigError(f"[{cls.__name__}] invalid value for '{f.name}': {raw!r}") from ex
    return cls(**kwargs)


def _check(api: ApiConfig, signature: SignatureConfig) -> None:
    if not api.base_url.startswith(("http://", "https://")):
        raise ConfigError(f"[Api] base_url must be an http(s) URL, got {api.base_url!r}")
    if api.timeout_s <= 0:
        raise ConfigError("[Api] timeout_s must be positive")
    if signature.max_width <= 0 or signature.max_height <= 0:
        raise ConfigError("[Signature] max_width and max_height must be positive")
    if not 0.0 <= signature.quality <= 1.0:
        raise ConfigError("[Signature] quality must be within [0, 1]")
    if signature.pen_min_width > signature.pen_max_width:
        raise ConfigError("[Signature] pen_min_width must not exceed pen_max_width")


# --------------------------------------------------------------------------- #
#  ConfigService
# --------------------------------------------------------------------------- #


class ConfigService:
    """Merged view over all layers, exposed as typed section dataclasses."""

    def __init__(self) -> None:
        self._lock = RLock()
        _ensure_machine_config()
        self.reload()

    def reload(self) -> None:
        with self._lock:
            merged: Sections = {}
            sources: Dict[Tuple[str, str], Dict[str, str]] = {}
            for layer, origin, sections in _layers():
                for section, items in sections.items():
                    target = merged.setdefault(section, {})
                    for key, value in items.items():
                        target[key] = value
                        sources[(section, key)] = {"layer": layer, "source": origin}

            api = _build_dataclass(ApiConfig, merged.get("Api", {}))
            signature = _build_dataclass(SignatureConfig, merged.get("Signature", {}))
            _check(api, signature)

            self._merged = merged
            self._sources = sources
            self.api = api
            self.signature = signature
            self.submission = _build_dataclass(SubmissionConfig, merged.get("Submission", {}))
            self.storage = _build_dataclass(StorageConfig, merged.get("Storage", {}))
            self.general = _build_dataclass(GeneralConfig, merged.get("General", {}))

    def get(self, section: str, key: str, *, cast: Callable[[Any], Any] | type = str) -> Any:
        """Raw merged value, or None when the key is unknown."""
        val = self._merged.get(section, {}).get(key)
        if val is None:
            return None
        if isinstance(cast, type):
            return _cast(val, cast)
        return cast(val)

    def meta_source(self, section: str, key: str) -> Dict[str, str] | None:
        """{"layer": ..., "source": ...} of the winning value."""
        return self._sources.get((section, key))


# Global singleton
config_service = ConfigService()
