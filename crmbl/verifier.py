"""README existence checks for manifest entries."""

from __future__ import annotations

from typing import List

from .config import CrmblConfig
from .logging import get_logger
from .models import Manifest, MissingReadme, VerificationResult

NO_README_SPECIFIED = "No README path specified"

logger = get_logger("verifier")


def verify_documentation(config: CrmblConfig, manifest: Manifest | None) -> VerificationResult:
    """Report manifest entries whose README is unset or absent on disk.

    Only existence is checked; README contents are not inspected.
    """
    if manifest is None:
        return VerificationResult(
            valid=False,
            error="No crmbl-map.json found or invalid format",
        )

    root = config.scan_root
    missing: List[MissingReadme] = []
    for dir_path, entry in manifest.directories.items():
        readme_path = entry.readme_path
        if not isinstance(readme_path, str) or not readme_path:
            missing.append(MissingReadme(directory=dir_path, expected_readme=NO_README_SPECIFIED))
            continue
        # readmePath is root-relative even when written with a leading slash.
        candidate = root / readme_path.replace("\\", "/").lstrip("/")
        if not candidate.exists():
            logger.debug("README for %s not found at %s", dir_path, candidate)
            missing.append(MissingReadme(directory=dir_path, expected_readme=readme_path))

    total = len(manifest.directories)
    return VerificationResult(
        valid=not missing,
        missing_readmes=missing,
        total_directories=total,
        documented=total - len(missing),
    )


__all__ = ["NO_README_SPECIFIED", "verify_documentation"]
