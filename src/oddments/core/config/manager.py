"""
Oddments configuration management (YAML defaults + environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import yaml
from jsonschema import Draft202012Validator

from oddments.core.exceptions import ConfigurationError
from oddments.core.utils.merge import deep_merge
from oddments.data import get_data_path, list_files, read_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "ODDMENTS_"
CONFIG_FILE_ENV = "ODDMENTS_CONFIG"


class ConfigManager:
    """Load, merge, and validate oddments configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: ODDMENTS_<SECTION>__<KEY>
    2. User config file named by ODDMENTS_CONFIG
    3. Bundled defaults: oddments.data/config/*.yaml (alphabetical order)
    """

    def __init__(self, config_file: Optional[Path] = None) -> None:
        self.core_config_dir = get_data_path("config")
        if config_file is None:
            raw = os.environ.get(CONFIG_FILE_ENV, "").strip()
            config_file = Path(raw).expanduser() if raw else None
        self.config_file = config_file

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Fail closed: configuration must never silently ignore invalid YAML.
        if not path.exists():
            raise ConfigurationError(
                f"Config file not found: {path}", context={"path": str(path)}
            )
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigurationError(
                f"Invalid YAML in {path}: {exc}", context={"path": str(path)}
            ) from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {path} must contain a mapping, got {type(data).__name__}",
                context={"path": str(path)},
            )
        return data

    # ---------- environment overrides ----------

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        # Regex-bearing values (include_pattern) must keep their whitespace.
        return value

    def _iter_env_overrides(self) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX) or key == CONFIG_FILE_ENV:
                continue
            raw = key[len(ENV_PREFIX):]
            if "__" not in raw:
                continue
            segs = raw.split("__")
            if any(seg == "" for seg in segs):
                raise ConfigurationError(
                    f"Malformed {ENV_PREFIX}* key: empty segment in '{key}'.",
                    context={"key": key},
                )
            yield [seg.lower() for seg in segs], self._coerce_type(os.environ[key])

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, value in self._iter_env_overrides():
            cur = cfg
            for part in path[:-1]:
                nxt = cur.get(part)
                if not isinstance(nxt, dict):
                    nxt = {}
                    cur[part] = nxt
                cur = nxt
            cur[path[-1]] = value
            logger.debug("Config override %s=%r from environment", ".".join(path), value)

    # ---------- loading ----------

    def validate(self, cfg: Dict[str, Any]) -> None:
        schema = read_yaml("schemas", "config.schema.yaml")
        validator = Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(cfg), key=lambda e: list(e.path))
        if errors:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err.path) or '<root>'}: {err.message}"
                for err in errors
            )
            raise ConfigurationError(
                f"Invalid oddments configuration: {details}",
                context={"errors": [err.message for err in errors]},
            )

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        cfg: Dict[str, Any] = {}
        for path in list_files("config", "*.yaml"):
            cfg = deep_merge(cfg, self.load_yaml(path))

        if self.config_file is not None:
            logger.debug("Loading user config from %s", self.config_file)
            cfg = deep_merge(cfg, self.load_yaml(Path(self.config_file)))

        self.apply_env_overrides(cfg)

        if validate:
            self.validate(cfg)
        return cfg


# ---------------------------------------------------------------------------
# Cached access
# ---------------------------------------------------------------------------

_config_cache: Dict[Tuple[Tuple[str, str], ...], Dict[str, Any]] = {}


def _cache_key() -> Tuple[Tuple[str, str], ...]:
    # Tests and long-running processes may mutate ODDMENTS_* env vars.
    return tuple(
        sorted((k, v) for k, v in os.environ.items() if k.startswith(ENV_PREFIX))
    )


def load_config() -> Dict[str, Any]:
    """Return the effective configuration, cached per environment fingerprint.

    Only the configuration for the latest fingerprint is kept.
    """
    key = _cache_key()
    cached = _config_cache.get(key)
    if cached is None:
        cached = ConfigManager().load_config()
        _config_cache.clear()
        _config_cache[key] = cached
    return cached


def get_section(section: str) -> Dict[str, Any]:
    """Return a copy of one configuration section (empty when absent)."""
    return dict(load_config().get(section) or {})


def clear_config_cache() -> None:
    """Drop cached configuration and bundled data reads."""
    from oddments.data import clear_caches

    _config_cache.clear()
    clear_caches()


__all__ = [
    "ConfigManager",
    "load_config",
    "get_section",
    "clear_config_cache",
]
