"""Directory scanning and manifest comparison."""

from __future__ import annotations

import asyncio
import json
import os
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, List, Sequence, Set

from .config import CrmblConfig
from .logging import get_logger
from .models import ScanResult, ScanStats

logger = get_logger("scanner")


class ScanResultError(RuntimeError):
    """Raised when a saved scan result cannot be read."""


def is_ignored(
    parts: Sequence[str], patterns: Iterable[str], *, include_hidden: bool = False
) -> bool:
    """Return True when a relative path, given as segments, should be skipped.

    A pattern without a slash is matched against every segment, so it excludes
    the directory and its whole subtree wherever it appears. A pattern with a
    slash is matched against the joined path and each of its ancestors.
    """
    segment_patterns: List[str] = []
    path_patterns: List[str] = []
    for raw in patterns:
        pattern = raw.strip().strip("/")
        if not pattern:
            continue
        if "/" in pattern:
            path_patterns.append(pattern)
        else:
            segment_patterns.append(pattern)

    for index, part in enumerate(parts):
        if not include_hidden and part.startswith("."):
            return True
        if any(fnmatchcase(part, pattern) for pattern in segment_patterns):
            return True
        if path_patterns:
            prefix = "/".join(parts[: index + 1])
            if any(fnmatchcase(prefix, pattern) for pattern in path_patterns):
                return True
    return False


def with_ancestors(paths: Iterable[str]) -> Set[str]:
    """Return ``paths`` plus every ancestor directory of each path."""
    expanded: Set[str] = set()
    for path in paths:
        parts = [part for part in path.split("/") if part]
        for index in range(1, len(parts) + 1):
            expanded.add("/" + "/".join(parts[:index]))
    return expanded


def find_directories(
    root: Path, patterns: Sequence[str], *, include_hidden: bool = False
) -> List[str]:
    """List every non-ignored directory under ``root`` in normalized, sorted form.

    Ignore rules prune the walk before the ancestor backfill runs, so an
    ignored directory is never reintroduced as the ancestor of a kept one.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        logger.debug("Scan root %s does not exist; nothing to enumerate", root_path)
        return []

    def _skip(exc: OSError) -> None:
        logger.debug("Skipping unreadable entry %s: %s", exc.filename, exc.strerror or exc)

    found: Set[str] = set()
    for dirpath, dirnames, _filenames in os.walk(root_path, onerror=_skip):
        rel_parts = Path(dirpath).relative_to(root_path).parts
        kept = []
        for name in dirnames:
            parts = (*rel_parts, name)
            if is_ignored(parts, patterns, include_hidden=include_hidden):
                continue
            kept.append(name)
            found.add("/" + "/".join(parts))
        dirnames[:] = kept

    return sorted(with_ancestors(found))


def load_existing_directories(manifest_path: Path) -> List[str]:
    """Return the directory keys recorded in the manifest, or [] if it is unusable."""
    try:
        payload = json.loads(Path(manifest_path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        return []
    except (OSError, ValueError) as exc:
        logger.warning("Could not read existing map at %s: %s", manifest_path, exc)
        return []

    directories = payload.get("directories") if isinstance(payload, dict) else None
    if not isinstance(directories, dict):
        logger.warning("Existing map at %s has no directories mapping; treating as empty", manifest_path)
        return []
    return [str(key) for key in directories]


def compare_directories(current: Iterable[str], existing: Iterable[str]) -> ScanResult:
    """Split directories into new, missing and unchanged relative to the manifest."""
    current_set = set(current)
    existing_set = set(existing)

    new_dirs = sorted(current_set - existing_set)
    missing_dirs = sorted(existing_set - current_set)
    unchanged_dirs = sorted(current_set & existing_set)

    return ScanResult(
        new_dirs=new_dirs,
        missing_dirs=missing_dirs,
        unchanged_dirs=unchanged_dirs,
        stats=ScanStats(
            total=len(current_set),
            new=len(new_dirs),
            missing=len(missing_dirs),
            documented=len(unchanged_dirs),
        ),
    )


class DirectoryScanner:
    """Compares the live directory tree against the recorded manifest."""

    def __init__(self, *, include_hidden: bool = False) -> None:
        self.include_hidden = include_hidden

    async def scan(self, config: CrmblConfig) -> ScanResult:
        """Return the drift between ``config.scan_root`` and the manifest."""
        existing = load_existing_directories(config.manifest_path)
        current = await asyncio.to_thread(
            find_directories,
            config.scan_root,
            config.ignore,
            include_hidden=self.include_hidden,
        )
        logger.debug(
            "Found %d directories under %s (%d recorded)",
            len(current),
            config.scan_root,
            len(existing),
        )
        return compare_directories(current, existing)


def save_scan_result(result: ScanResult, path: Path) -> None:
    """Write ``result`` as JSON; write failures are logged and re-raised."""
    target = Path(path)
    try:
        target.write_text(json.dumps(result.to_dict(), indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.error("Error saving scan results to %s: %s", target, exc)
        raise


def load_scan_result(path: Path) -> ScanResult:
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ScanResultError(f"No scan results found at {path}") from exc
    except (OSError, ValueError) as exc:
        raise ScanResultError(f"Could not read scan results at {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ScanResultError(f"Scan results at {path} must be a JSON object")
    try:
        return ScanResult.from_dict(payload)
    except (AttributeError, TypeError, ValueError) as exc:
        raise ScanResultError(f"Scan results at {path} are malformed: {exc}") from exc


__all__ = [
    "DirectoryScanner",
    "ScanResultError",
    "compare_directories",
    "find_directories",
    "is_ignored",
    "load_existing_directories",
    "load_scan_result",
    "save_scan_result",
    "with_ancestors",
]
