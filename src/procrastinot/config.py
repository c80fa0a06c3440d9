"""YAML settings discovery and resolution."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable

import yaml

CONFIG_FILENAME = ".procrastinot.yaml"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(slots=True)
class Settings:
    upcoming_days: int = 7
    indent_width: int = 2
    restore_reorders_lists: bool = True
    log_level: str = "WARNING"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULTS = Settings()


def discover_config(start: Path) -> Path | None:
    start = start.resolve()
    for candidate in [start, *start.parents]:
        path = candidate / CONFIG_FILENAME
        if path.is_file():
            return path
    return None


def default_config() -> dict[str, Any]:
    return {"settings": DEFAULTS.to_dict()}


def write_default_config_if_missing(path: Path) -> bool:
    if path.exists():
        return False
    payload = yaml.safe_dump(default_config(), sort_keys=False, default_flow_style=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload, encoding="utf-8")
    return True


def read_config(path: Path, warn: Callable[[str], None] | None = None) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError):
        if warn is not None:
            warn(f"Unable to parse config at {path}. Falling back to defaults.")
        return {}
    if not isinstance(payload, dict):
        if warn is not None:
            warn(f"Invalid config format at {path}. Falling back to defaults.")
        return {}
    return payload


def _positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _non_negative_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


_VALIDATORS: dict[str, tuple[Callable[[Any], bool], str]] = {
    "upcoming_days": (_positive_int, "a positive integer"),
    "indent_width": (_non_negative_int, "a non-negative integer"),
    "restore_reorders_lists": (lambda value: isinstance(value, bool), "a boolean"),
    "log_level": (lambda value: value in VALID_LOG_LEVELS, f"one of {', '.join(VALID_LOG_LEVELS)}"),
}


def resolve_settings(
    path: Path | None,
    warn: Callable[[str], None] | None = None,
) -> Settings:
    settings = Settings()
    if path is None:
        return settings

    data = read_config(path, warn=warn)
    for key in data.keys():
        if key != "settings" and warn is not None:
            warn(f"Unsupported config key '{key}' in {path}. Ignoring.")

    section = data.get("settings", {})
    if not isinstance(section, dict):
        if warn is not None:
            warn(f"Invalid settings section in {path}. Using defaults.")
        return settings

    for key, value in section.items():
        if key not in _VALIDATORS:
            if warn is not None:
                warn(f"Unsupported settings key '{key}' in {path}. Ignoring.")
            continue
        is_valid, expected = _VALIDATORS[key]
        if isinstance(value, str) and key == "log_level":
            value = value.upper()
        if not is_valid(value):
            if warn is not None:
                warn(
                    f"Invalid settings.{key} in {path} (expected {expected}). "
                    f"Using default '{getattr(DEFAULTS, key)}'."
                )
            continue
        setattr(settings, key, value)
    return settings
