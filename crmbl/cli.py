"""CLI entrypoints for crmbl commands."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Sequence

from .config import (
    CONFIG_FILENAME,
    ConfigError,
    ConfigExistsError,
    CrmblConfig,
    create_config,
    find_config,
    load_config,
)
from .logging import configure_logging, get_logger
from .models import Manifest
from .prompting import DEFAULT_PROMPT_FILENAME, PromptBuilder
from .scanner import DirectoryScanner, ScanResultError, load_scan_result, save_scan_result
from .schema import (
    ManifestError,
    create_empty_manifest,
    read_manifest,
    remove_directories,
    update_manifest,
    validate_manifest,
    write_manifest,
)
from .verifier import verify_documentation

DEFAULT_RESULTS_FILENAME = "scan-results.json"
_PREVIEW_LIMIT = 10

logger = get_logger("cli")


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory to start config discovery from (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crmbl",
        description="Track directory drift so per-directory documentation stays in sync.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        help="Also write log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help=f"Create {CONFIG_FILENAME} with default settings.",
    )
    _add_verbose_option(init_parser, suppress_default=True)
    _add_path_argument(init_parser)
    init_parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Overwrite an existing config file.",
    )

    scan_parser = subparsers.add_parser(
        "scan",
        help="Scan the directory tree for new and missing directories.",
    )
    _add_verbose_option(scan_parser, suppress_default=True)
    _add_path_argument(scan_parser)
    scan_parser.add_argument(
        "-o",
        "--output",
        help=f"Where to write scan results (defaults to {DEFAULT_RESULTS_FILENAME} next to the config).",
    )
    scan_parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress progress output.",
    )

    verify_parser = subparsers.add_parser(
        "verify",
        help="Check that every documented directory has its README (useful for CI).",
    )
    _add_verbose_option(verify_parser, suppress_default=True)
    _add_path_argument(verify_parser)
    verify_parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report failures.",
    )

    prompt_parser = subparsers.add_parser(
        "prompt",
        help="Render a documentation prompt for newly found directories.",
    )
    _add_verbose_option(prompt_parser, suppress_default=True)
    _add_path_argument(prompt_parser)
    prompt_parser.add_argument(
        "-o",
        "--output",
        help=f"Where to write the prompt (defaults to {DEFAULT_PROMPT_FILENAME} next to the config).",
    )
    prompt_parser.add_argument(
        "-t",
        "--template",
        help="Custom jinja2 prompt template file.",
    )
    prompt_parser.add_argument(
        "-r",
        "--results",
        help=f"Scan results to read (defaults to {DEFAULT_RESULTS_FILENAME} next to the config).",
    )

    prune_parser = subparsers.add_parser(
        "prune",
        help="Drop manifest entries for directories that no longer exist.",
    )
    _add_verbose_option(prune_parser, suppress_default=True)
    _add_path_argument(prune_parser)
    prune_parser.add_argument(
        "--add-new",
        action="store_true",
        help="Also add default entries for directories missing from the manifest.",
    )
    prune_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report the changes without writing the manifest.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for crmbl commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file).expanduser() if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    if args.command == "init":
        _run_init(parser, args)
    elif args.command == "scan":
        _run_scan(parser, args)
    elif args.command == "verify":
        _run_verify(parser, args)
    elif args.command == "prompt":
        _run_prompt(parser, args)
    elif args.command == "prune":
        _run_prune(parser, args)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_init(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    directory = Path(args.path).expanduser().resolve()
    try:
        config_file = create_config(directory, force=bool(args.force))
    except ConfigExistsError as exc:
        parser.exit(1, f"{exc}\nUse --force to overwrite.\n")
    except OSError as exc:
        parser.exit(1, f"Error creating config: {exc}\n")
    print(f"Created {_relativize(config_file)}")
    print("\nNext steps:")
    print(f"  1. Review and customize {config_file.name}")
    print("  2. Run: crmbl scan")


def _run_scan(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    base_dir, config = _load(parser, args.path)
    quiet = bool(args.quiet)
    if not quiet:
        print("Scanning directories...")
        print(f"Root: {config.scan_root}")

    result = asyncio.run(DirectoryScanner().scan(config))

    output_path = Path(args.output) if args.output else base_dir / DEFAULT_RESULTS_FILENAME
    try:
        save_scan_result(result, output_path)
    except OSError as exc:
        parser.exit(1, f"Scan failed: could not write {output_path}: {exc}\n")

    print("\nScan Results:")
    print("-" * 50)
    print(f"Total directories: {result.stats.total}")
    print(f"Documented: {result.stats.documented}")
    if result.stats.new:
        print(f"\nNew directories ({result.stats.new}):")
        _print_preview(result.new_dirs)
    if result.stats.missing:
        print(f"\nMissing directories ({result.stats.missing}):")
        _print_preview(result.missing_dirs)
    print(f"\nFull results saved to: {_relativize(output_path)}")

    if result.stats.new and not quiet:
        print("\nNext steps:")
        print("  1. Run: crmbl prompt")
        print("  2. Hand the generated prompt to whoever writes the READMEs")


def _run_verify(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    _base_dir, config = _load(parser, args.path)
    manifest = _read_valid_manifest(parser, config)

    verification = verify_documentation(config, manifest)
    if not args.quiet:
        print("Verifying documentation...")
        print(f"Total directories: {verification.total_directories}")
        print(f"Documented: {verification.documented}")

    if verification.valid:
        print("All directories have valid READMEs")
        return

    lines = [f"Found {len(verification.missing_readmes)} missing READMEs:"]
    lines.extend(
        f"  {item.directory}: {item.expected_readme}" for item in verification.missing_readmes
    )
    parser.exit(1, "\n".join(lines) + "\n")


def _run_prompt(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    base_dir, config = _load(parser, args.path)
    results_path = Path(args.results) if args.results else base_dir / DEFAULT_RESULTS_FILENAME
    try:
        result = load_scan_result(results_path)
    except ScanResultError as exc:
        parser.exit(1, f"{exc}\nRun `crmbl scan` first.\n")

    if result.stats.new == 0:
        print("No new directories to document")
        return

    builder = PromptBuilder(Path(args.template) if args.template else None)
    prompt = builder.build(result, config)

    output_path = Path(args.output) if args.output else base_dir / DEFAULT_PROMPT_FILENAME
    try:
        output_path.write_text(prompt, encoding="utf-8")
    except OSError as exc:
        parser.exit(1, f"Prompt generation failed: could not write {output_path}: {exc}\n")

    print(f"Generated prompt for {result.stats.new} new directories")
    print(f"Saved to: {_relativize(output_path)}")
    print("\nNext steps:")
    print("  1. Write the READMEs and manifest entries the prompt asks for")
    print("  2. Run: crmbl verify")


def _run_prune(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    _base_dir, config = _load(parser, args.path)
    if config.manifest_path.exists():
        manifest = _read_valid_manifest(parser, config)
    else:
        manifest = create_empty_manifest()

    result = asyncio.run(DirectoryScanner().scan(config))
    updated = remove_directories(manifest, result.missing_dirs) or manifest
    added: list[str] = []
    if args.add_new:
        for dir_path in result.new_dirs:
            partial: dict[str, str] = {}
            if (config.scan_root / dir_path.lstrip("/") / "README.md").is_file():
                partial["readmePath"] = f"{dir_path}/README.md"
            update_manifest(updated, dir_path, partial)
            added.append(dir_path)

    for dir_path in result.missing_dirs:
        print(f"- {dir_path}")
    for dir_path in added:
        print(f"+ {dir_path}")
    summary = f"Removed {len(result.missing_dirs)}, added {len(added)} directories"

    if args.dry_run:
        print(f"{summary} (dry-run)")
        return

    try:
        write_manifest(updated, config.manifest_path)
    except OSError as exc:
        parser.exit(1, f"Could not write {config.manifest_path}: {exc}\n")
    print(f"{summary}; manifest saved to {_relativize(config.manifest_path)}")


def _load(parser: argparse.ArgumentParser, path: str) -> tuple[Path, CrmblConfig]:
    start = Path(path).expanduser().resolve()
    config_file = find_config(start)
    base_dir = config_file.parent if config_file is not None else start
    logger.debug("Using %s as the config directory", base_dir)
    try:
        return base_dir, load_config(base_dir)
    except ConfigError as exc:
        details = "".join(f"  - {error}\n" for error in exc.errors)
        parser.exit(1, f"Invalid configuration:\n{details}")


def _read_valid_manifest(parser: argparse.ArgumentParser, config: CrmblConfig) -> Manifest:
    try:
        payload = read_manifest(config.manifest_path)
    except ManifestError as exc:
        parser.exit(1, f"{exc}\n")

    validation = validate_manifest(payload)
    if not validation.valid:
        details = "".join(f"  - {error}\n" for error in validation.errors)
        parser.exit(1, f"Invalid {config.manifest_path.name}:\n{details}")
    return Manifest.from_dict(payload)


def _print_preview(paths: Sequence[str]) -> None:
    for path in paths[:_PREVIEW_LIMIT]:
        print(f"   {path}")
    if len(paths) > _PREVIEW_LIMIT:
        print(f"   ... and {len(paths) - _PREVIEW_LIMIT} more")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
