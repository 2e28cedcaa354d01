"""Schema helpers for crmbl-map.json manifests."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from numbers import Real
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .logging import get_logger
from .models import CHANGE_FREQUENCIES, DirectoryEntry, Manifest, ValidationResult

Clock = Callable[[], datetime]

_ARRAY_FIELDS = ("entryPoints", "internalDeps", "externalDeps", "subdirectories")

logger = get_logger("schema")


class ManifestError(RuntimeError):
    """Raised when a manifest file cannot be read or parsed."""


def utc_now() -> datetime:
    return datetime.now(UTC)


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        return None


def normalize_dir_path(path: str) -> str:
    """Return ``path`` as a root-relative, forward-slash path with a leading slash."""
    parts = [part for part in path.replace("\\", "/").split("/") if part and part != "."]
    return "/" + "/".join(parts)


def create_empty_manifest(*, clock: Clock = utc_now) -> Manifest:
    """Create a manifest with no directories, stamped with the current time."""
    return Manifest(generated=format_timestamp(clock()), directories={})


def create_directory_entry(
    partial: Mapping[str, Any] | None = None, *, clock: Clock = utc_now
) -> DirectoryEntry:
    """Return a fully-populated entry; unset fields in ``partial`` get their defaults."""
    entry = DirectoryEntry.from_dict(partial or {})
    if not entry.last_updated:
        entry.last_updated = format_timestamp(clock())
    return entry


def validate_manifest(payload: Any) -> ValidationResult:
    """Check the structure of a parsed manifest and collect every violation.

    ``payload`` is normally the raw JSON mapping; a :class:`Manifest` is
    converted with ``to_dict`` first. The input is never modified and no
    exception escapes: problems are reported through the returned result.
    """
    if isinstance(payload, Manifest):
        payload = payload.to_dict()
    if payload is None:
        return ValidationResult(valid=False, errors=["Manifest is missing"])
    if not isinstance(payload, Mapping):
        return ValidationResult(valid=False, errors=["Manifest must be a JSON object"])

    errors: List[str] = []

    generated = payload.get("generated")
    if generated is None or generated == "":
        errors.append("Missing required field: generated")
    elif parse_timestamp(generated) is None:
        errors.append("Invalid date format for generated field")

    directories = payload.get("directories")
    if directories is None:
        errors.append("Missing required field: directories")
    elif not isinstance(directories, Mapping):
        errors.append("directories field must be an object")
    else:
        for dir_path, entry in directories.items():
            errors.extend(_validate_directory_entry(dir_path, entry))

    return ValidationResult(valid=not errors, errors=errors)


def _validate_directory_entry(dir_path: Any, entry: Any) -> List[str]:
    prefix = f"Directory '{dir_path}':"
    if not isinstance(entry, Mapping):
        return [f"{prefix} must be an object"]

    errors: List[str] = []
    if not isinstance(dir_path, str) or not dir_path.startswith("/"):
        errors.append(f"{prefix} path must start with '/'")

    if "purpose" not in entry:
        errors.append(f"{prefix} missing 'purpose' field")

    if "complexity" in entry:
        complexity = entry["complexity"]
        if (
            isinstance(complexity, bool)
            or not isinstance(complexity, Real)
            or not 1 <= complexity <= 5
        ):
            errors.append(f"{prefix} complexity must be a number between 1 and 5")

    if "changeFrequency" in entry and entry["changeFrequency"] not in CHANGE_FREQUENCIES:
        errors.append(f"{prefix} changeFrequency must be one of: {', '.join(CHANGE_FREQUENCIES)}")

    for name in _ARRAY_FIELDS:
        if name in entry and not isinstance(entry[name], list):
            errors.append(f"{prefix} {name} must be an array")

    if "keyFiles" in entry:
        key_files = entry["keyFiles"]
        if not isinstance(key_files, list):
            errors.append(f"{prefix} keyFiles must be an array")
        else:
            for index, item in enumerate(key_files):
                item = item if isinstance(item, Mapping) else {}
                if not item.get("file"):
                    errors.append(f"{prefix} keyFiles[{index}] missing 'file' field")
                if not item.get("description"):
                    errors.append(f"{prefix} keyFiles[{index}] missing 'description' field")

    readme_path = entry.get("readmePath")
    if readme_path is not None and not isinstance(readme_path, str):
        errors.append(f"{prefix} readmePath must be a string")

    return errors


def update_manifest(
    manifest: Manifest | None,
    dir_path: str,
    entry_partial: Mapping[str, Any] | None = None,
    *,
    clock: Clock = utc_now,
) -> Manifest:
    """Store ``entry_partial`` (merged over defaults) under ``dir_path`` and restamp.

    The manifest is updated in place and returned; ``None`` starts a new one.
    """
    stamp = format_timestamp(clock())
    if manifest is None:
        manifest = Manifest(generated=stamp)

    entry = create_directory_entry(entry_partial, clock=clock)
    entry.last_updated = stamp
    manifest.directories[normalize_dir_path(dir_path)] = entry
    manifest.generated = stamp
    return manifest


def remove_directories(
    manifest: Manifest | None, dir_paths: Iterable[str], *, clock: Clock = utc_now
) -> Manifest | None:
    """Return a copy of ``manifest`` without ``dir_paths`` and with a fresh timestamp."""
    if manifest is None:
        return manifest

    removed = set(dir_paths)
    directories: Dict[str, DirectoryEntry] = {
        path: entry for path, entry in manifest.directories.items() if path not in removed
    }
    return Manifest(generated=format_timestamp(clock()), directories=directories)


def read_manifest(path: Path) -> Any:
    """Return the parsed JSON payload stored at ``path``."""
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ManifestError(f"No manifest found at {path}") from exc
    except (OSError, ValueError) as exc:
        raise ManifestError(f"Could not read manifest at {path}: {exc}") from exc


def write_manifest(manifest: Manifest, path: Path) -> None:
    target = Path(path)
    try:
        target.write_text(json.dumps(manifest.to_dict(), indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.error("Error saving manifest to %s: %s", target, exc)
        raise


__all__ = [
    "Clock",
    "ManifestError",
    "create_directory_entry",
    "create_empty_manifest",
    "format_timestamp",
    "normalize_dir_path",
    "parse_timestamp",
    "read_manifest",
    "remove_directories",
    "update_manifest",
    "utc_now",
    "validate_manifest",
    "write_manifest",
]
