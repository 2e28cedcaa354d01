"""Configuration loading for crmbl (.crmbl-config.json)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .logging import get_logger
from .models import ValidationResult

CONFIG_FILENAME = ".crmbl-config.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "rootPath": "./",
    "ignore": ["node_modules", ".git", "dist", "build", ".next", "coverage", ".cache"],
    "outputPath": "./crmbl-map.json",
    "readmeTemplate": "templates/readme-template.md",
}

_KNOWN_KEYS = frozenset(DEFAULT_CONFIG)

logger = get_logger("config")


class ConfigError(RuntimeError):
    """Raised when the configuration is unusable."""

    def __init__(self, message: str, errors: List[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


class ConfigExistsError(FileExistsError):
    """Raised by ``create_config`` when a config file is already present."""


@dataclass(frozen=True)
class CrmblConfig:
    """Settings for one crmbl invocation.

    Relative paths are resolved against ``base_dir``, the directory holding
    the config file, never against the process working directory.
    """

    base_dir: Path
    root_path: str = DEFAULT_CONFIG["rootPath"]
    ignore: Tuple[str, ...] = tuple(DEFAULT_CONFIG["ignore"])
    output_path: str = DEFAULT_CONFIG["outputPath"]
    readme_template: str = DEFAULT_CONFIG["readmeTemplate"]
    extras: Mapping[str, Any] = field(default_factory=dict)

    @property
    def scan_root(self) -> Path:
        return (self.base_dir / self.root_path).resolve()

    @property
    def manifest_path(self) -> Path:
        return (self.base_dir / self.output_path).resolve()

    @property
    def readme_template_path(self) -> Path:
        return (self.base_dir / self.readme_template).resolve()

    @classmethod
    def from_mapping(cls, base_dir: Path, data: Mapping[str, Any]) -> "CrmblConfig":
        """Build a config from validated JSON data."""
        return cls(
            base_dir=Path(base_dir).resolve(),
            root_path=data.get("rootPath", DEFAULT_CONFIG["rootPath"]),
            ignore=tuple(_default_if_none(data.get("ignore"), DEFAULT_CONFIG["ignore"])),
            output_path=data.get("outputPath", DEFAULT_CONFIG["outputPath"]),
            readme_template=_default_if_none(
                data.get("readmeTemplate"), DEFAULT_CONFIG["readmeTemplate"]
            ),
            extras={key: value for key, value in data.items() if key not in _KNOWN_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(self.extras)
        payload.update(
            {
                "rootPath": self.root_path,
                "ignore": list(self.ignore),
                "outputPath": self.output_path,
                "readmeTemplate": self.readme_template,
            }
        )
        return payload


def load_config_data(directory: Path) -> Dict[str, Any]:
    """Return the config stored in ``directory`` merged over the defaults.

    Unknown keys are passed through. A missing file yields the defaults; an
    unreadable or malformed one is logged and also yields the defaults.
    """
    config_file = Path(directory) / CONFIG_FILENAME
    defaults = {**DEFAULT_CONFIG, "ignore": list(DEFAULT_CONFIG["ignore"])}

    if not config_file.exists():
        return defaults

    try:
        user_config = json.loads(config_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Error reading config file at %s: %s", config_file, exc)
        logger.warning("Using default configuration")
        return defaults

    if not isinstance(user_config, dict):
        logger.warning("Config file at %s must contain a JSON object; using defaults", config_file)
        return defaults

    merged = {**defaults, **user_config}
    # A missing or null ignore list falls back to the defaults; an explicit [] disables ignoring.
    merged["ignore"] = _default_if_none(user_config.get("ignore"), defaults["ignore"])
    return merged


def validate_config(data: Any) -> ValidationResult:
    """Check config values and report every problem found."""
    if data is None:
        return ValidationResult(valid=False, errors=["Config is missing"])
    if not isinstance(data, Mapping):
        return ValidationResult(valid=False, errors=["Config must be a JSON object"])

    errors: List[str] = []

    root_path = data.get("rootPath")
    if not isinstance(root_path, str) or not root_path:
        errors.append("rootPath must be a non-empty string")

    output_path = data.get("outputPath")
    if not isinstance(output_path, str) or not output_path:
        errors.append("outputPath must be a non-empty string")

    ignore = data.get("ignore")
    if not isinstance(ignore, list):
        errors.append("ignore must be an array")
    elif not all(isinstance(item, str) for item in ignore):
        errors.append("ignore entries must be strings")

    readme_template = data.get("readmeTemplate")
    if readme_template and not isinstance(readme_template, str):
        errors.append("readmeTemplate must be a string")

    return ValidationResult(valid=not errors, errors=errors)


def load_config(directory: Path) -> CrmblConfig:
    """Load and validate the configuration stored in ``directory``."""
    data = load_config_data(directory)
    result = validate_config(data)
    if not result.valid:
        raise ConfigError("Invalid configuration", result.errors)
    return CrmblConfig.from_mapping(directory, data)


def create_config(
    directory: Path,
    overrides: Mapping[str, Any] | None = None,
    *,
    force: bool = False,
) -> Path:
    """Write a config file with default values (plus ``overrides``) into ``directory``."""
    config_file = Path(directory) / CONFIG_FILENAME
    if config_file.exists() and not force:
        raise ConfigExistsError(f"Config file already exists at {config_file}")

    payload = {**DEFAULT_CONFIG, **(overrides or {})}
    config_file.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    logger.debug("Wrote config to %s", config_file)
    return config_file


def find_config(start: Path, *, stop_at: Path | None = None) -> Optional[Path]:
    """Return the nearest config file at or above ``start``, if any.

    The search climbs to the filesystem root, or to ``stop_at`` (inclusive)
    when it is given.
    """
    current = Path(start).expanduser().resolve()
    if current.is_file():
        current = current.parent
    boundary = Path(stop_at).expanduser().resolve() if stop_at is not None else None

    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if directory == boundary:
            break
    return None


def _default_if_none(value: Any, default: Any) -> Any:
    return default if value is None else value


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "ConfigExistsError",
    "CrmblConfig",
    "DEFAULT_CONFIG",
    "create_config",
    "find_config",
    "load_config",
    "load_config_data",
    "validate_config",
]
