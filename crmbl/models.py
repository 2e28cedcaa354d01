"""Core data models shared across crmbl components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class ChangeFrequency(str, Enum):
    """How often a directory is expected to change."""

    STABLE = "Stable"
    MODERATE = "Moderate"
    FREQUENTLY_MODIFIED = "Frequently Modified"
    UNKNOWN = "Unknown"


CHANGE_FREQUENCIES = tuple(member.value for member in ChangeFrequency)

# JSON key -> DirectoryEntry attribute
_ENTRY_FIELDS: Dict[str, str] = {
    "purpose": "purpose",
    "complexity": "complexity",
    "changeFrequency": "change_frequency",
    "entryPoints": "entry_points",
    "internalDeps": "internal_deps",
    "externalDeps": "external_deps",
    "readmePath": "readme_path",
    "keyFiles": "key_files",
    "subdirectories": "subdirectories",
    "lastUpdated": "last_updated",
}


@dataclass
class KeyFile:
    """A notable file inside a directory and what it does."""

    file: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {"file": self.file, "description": self.description}


@dataclass
class DirectoryEntry:
    """Documentation metadata for one directory in the manifest."""

    purpose: str = ""
    complexity: int = 1
    change_frequency: str = ChangeFrequency.UNKNOWN.value
    entry_points: List[str] = field(default_factory=list)
    internal_deps: List[str] = field(default_factory=list)
    external_deps: List[str] = field(default_factory=list)
    readme_path: str = ""
    key_files: List[KeyFile] = field(default_factory=list)
    subdirectories: List[str] = field(default_factory=list)
    last_updated: str = ""
    extras: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = dict(self.extras)
        for key, attr in _ENTRY_FIELDS.items():
            value = getattr(self, attr)
            if attr == "key_files":
                value = [item.to_dict() for item in value]
            elif isinstance(value, list):
                value = list(value)
            payload[key] = value
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DirectoryEntry":
        """Build an entry from its JSON form, keeping unknown keys in ``extras``."""
        kwargs: Dict[str, Any] = {}
        for key, attr in _ENTRY_FIELDS.items():
            value = payload.get(key)
            if value is None:
                continue
            if attr == "key_files":
                if not isinstance(value, list):
                    continue
                value = [
                    KeyFile(
                        file=str(item.get("file") or ""),
                        description=str(item.get("description") or ""),
                    )
                    for item in value
                    if isinstance(item, Mapping)
                ]
            elif isinstance(value, list):
                value = list(value)
            kwargs[attr] = value
        extras = {key: value for key, value in payload.items() if key not in _ENTRY_FIELDS}
        return cls(extras=extras, **kwargs)


@dataclass
class Manifest:
    """Persisted record of known directories keyed by normalized path."""

    generated: str
    directories: Dict[str, DirectoryEntry] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated": self.generated,
            "directories": {path: entry.to_dict() for path, entry in self.directories.items()},
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Manifest":
        directories = payload.get("directories")
        if not isinstance(directories, Mapping):
            directories = {}
        return cls(
            generated=str(payload.get("generated", "")),
            directories={
                str(path): DirectoryEntry.from_dict(entry)
                for path, entry in directories.items()
                if isinstance(entry, Mapping)
            },
        )


@dataclass(frozen=True)
class ScanStats:
    """Counts derived from a scan; ``total`` equals ``new + documented``."""

    total: int
    new: int
    missing: int
    documented: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "new": self.new,
            "missing": self.missing,
            "documented": self.documented,
        }


@dataclass(frozen=True)
class ScanResult:
    """Outcome of comparing the live directory set with the manifest."""

    new_dirs: List[str]
    missing_dirs: List[str]
    unchanged_dirs: List[str]
    stats: ScanStats

    def to_dict(self) -> Dict[str, Any]:
        return {
            "newDirs": list(self.new_dirs),
            "missingDirs": list(self.missing_dirs),
            "unchangedDirs": list(self.unchanged_dirs),
            "stats": self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ScanResult":
        stats = payload.get("stats") or {}
        return cls(
            new_dirs=[str(item) for item in payload.get("newDirs") or []],
            missing_dirs=[str(item) for item in payload.get("missingDirs") or []],
            unchanged_dirs=[str(item) for item in payload.get("unchangedDirs") or []],
            stats=ScanStats(
                total=int(stats.get("total", 0)),
                new=int(stats.get("new", 0)),
                missing=int(stats.get("missing", 0)),
                documented=int(stats.get("documented", 0)),
            ),
        )


@dataclass(frozen=True)
class MissingReadme:
    """A manifest entry whose README could not be found."""

    directory: str
    expected_readme: str

    def to_dict(self) -> Dict[str, str]:
        return {"directory": self.directory, "expectedReadme": self.expected_readme}


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of checking manifest entries against README files on disk."""

    valid: bool
    missing_readmes: List[MissingReadme] = field(default_factory=list)
    total_directories: int = 0
    documented: int = 0
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "valid": self.valid,
            "missingReadmes": [item.to_dict() for item in self.missing_readmes],
            "totalDirectories": self.total_directories,
            "documented": self.documented,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True)
class ValidationResult:
    """Structured outcome of a manifest or configuration check."""

    valid: bool
    errors: List[str] = field(default_factory=list)


__all__ = [
    "CHANGE_FREQUENCIES",
    "ChangeFrequency",
    "DirectoryEntry",
    "KeyFile",
    "Manifest",
    "MissingReadme",
    "ScanResult",
    "ScanStats",
    "ValidationResult",
    "VerificationResult",
]
