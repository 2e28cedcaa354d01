"""CLI behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from crmbl.cli import _build_parser, main
from crmbl.config import CONFIG_FILENAME
from crmbl.logging import configure_logging


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "scan"])
    assert args.verbose is True
    assert args.command == "scan"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["verify", "--verbose"])
    assert args.verbose is True
    assert args.command == "verify"


def test_cli_scan_defaults() -> None:
    args = _build_parser().parse_args(["scan"])
    assert args.path == "."
    assert args.output is None
    assert args.quiet is False


def test_cli_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args([])


def test_init_creates_config_and_refuses_to_overwrite(tmp_path: Path) -> None:
    main(["init", str(tmp_path)])
    assert (tmp_path / CONFIG_FILENAME).exists()

    with pytest.raises(SystemExit) as excinfo:
        main(["init", str(tmp_path)])
    assert excinfo.value.code == 1

    main(["init", str(tmp_path), "--force"])


def test_scan_writes_results_next_to_config(tree_builder, capsys) -> None:
    root = tree_builder.path()
    tree_builder.dirs("/src/api", "/node_modules/pkg")
    main(["init", str(root)])

    main(["scan", str(root / "src")])

    payload = json.loads((root / "scan-results.json").read_text(encoding="utf-8"))
    assert payload["newDirs"] == ["/src", "/src/api"]
    assert payload["stats"] == {"total": 2, "new": 2, "missing": 0, "documented": 0}
    out = capsys.readouterr().out
    assert "New directories (2):" in out
    assert "   /src/api" in out


def test_scan_exits_on_invalid_config(tree_builder, capsys) -> None:
    root = tree_builder.path()
    (root / CONFIG_FILENAME).write_text(json.dumps({"rootPath": 5}), encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["scan", str(root)])

    assert excinfo.value.code == 1
    assert "rootPath must be a non-empty string" in capsys.readouterr().err


def test_scan_truncates_long_listings(tree_builder, capsys) -> None:
    tree_builder.dirs(*[f"/pkg{index:02d}" for index in range(12)])

    main(["scan", str(tree_builder.path()), "--quiet"])

    out = capsys.readouterr().out
    assert "   /pkg09" in out
    assert "   /pkg10" not in out
    assert "... and 2 more" in out


def test_verify_exit_codes(tree_builder, capsys) -> None:
    root = tree_builder.path()
    tree_builder.write({"src/README.md": "# src\n"})
    tree_builder.write_manifest({"/src": {"purpose": "code", "readmePath": "/src/README.md"}})

    main(["verify", str(root)])
    assert "All directories have valid READMEs" in capsys.readouterr().out

    tree_builder.write_manifest(
        {
            "/src": {"purpose": "code", "readmePath": "/src/README.md"},
            "/lib": {"purpose": "helpers", "readmePath": ""},
        }
    )
    with pytest.raises(SystemExit) as excinfo:
        main(["verify", str(root), "--quiet"])
    assert excinfo.value.code == 1
    assert "/lib: No README path specified" in capsys.readouterr().err


def test_verify_fails_without_manifest_or_with_invalid_manifest(tree_builder, capsys) -> None:
    root = tree_builder.path()

    with pytest.raises(SystemExit) as excinfo:
        main(["verify", str(root)])
    assert excinfo.value.code == 1
    assert "No manifest found" in capsys.readouterr().err

    tree_builder.write_manifest({"/src": {"purpose": "", "complexity": 9}})
    with pytest.raises(SystemExit) as excinfo:
        main(["verify", str(root)])
    assert excinfo.value.code == 1
    assert "complexity must be a number between 1 and 5" in capsys.readouterr().err


def test_prompt_requires_scan_results(tree_builder) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["prompt", str(tree_builder.path())])
    assert excinfo.value.code == 1


def test_prompt_renders_after_scan(tree_builder, capsys) -> None:
    root = tree_builder.path()
    tree_builder.dirs("/src/api")

    main(["scan", str(root), "--quiet"])
    main(["prompt", str(root)])

    prompt = (root / "crmbl-prompt.txt").read_text(encoding="utf-8")
    assert "- /src\n- /src/api" in prompt
    assert "Generated prompt for 2 new directories" in capsys.readouterr().out


def test_prompt_with_nothing_new(tree_builder, capsys) -> None:
    root = tree_builder.path()
    main(["scan", str(root), "--quiet"])

    main(["prompt", str(root)])

    assert "No new directories to document" in capsys.readouterr().out
    assert not (root / "crmbl-prompt.txt").exists()


def test_prune_drops_missing_and_adds_new(tree_builder, capsys) -> None:
    root = tree_builder.path()
    tree_builder.dirs("/src", "/api")
    tree_builder.write({"api/README.md": "# api\n"})
    tree_builder.write_manifest({"/src": {"purpose": "code"}, "/old": {"purpose": "gone"}})

    main(["prune", str(root), "--dry-run"])
    unchanged = json.loads((root / "crmbl-map.json").read_text(encoding="utf-8"))
    assert set(unchanged["directories"]) == {"/src", "/old"}

    main(["prune", str(root), "--add-new"])
    payload = json.loads((root / "crmbl-map.json").read_text(encoding="utf-8"))
    assert set(payload["directories"]) == {"/src", "/api"}
    assert payload["directories"]["/api"]["readmePath"] == "/api/README.md"
    assert payload["directories"]["/src"]["purpose"] == "code"
    out = capsys.readouterr().out
    assert "- /old" in out
    assert "+ /api" in out


def test_cli_accepts_log_file_before_command() -> None:
    args = _build_parser().parse_args(["--log-file", "crmbl.log", "scan"])
    assert args.log_file == "crmbl.log"
    assert _build_parser().parse_args(["scan"]).log_file is None


def test_log_file_records_debug_output_without_verbose(tree_builder, capsys) -> None:
    root = tree_builder.path()
    log_path = root.parent / "logs" / "crmbl.log"
    tree_builder.dirs("/src")

    try:
        main(["--log-file", str(log_path), "scan", str(root), "--quiet"])
    finally:
        configure_logging()

    text = log_path.read_text(encoding="utf-8")
    assert f"DEBUG crmbl.cli: Using {root.resolve()} as the config directory" in text
    assert "config directory" not in capsys.readouterr().err


def test_verify_rejects_non_string_readme_path(tree_builder, capsys) -> None:
    tree_builder.write_manifest({"/src": {"purpose": "code", "readmePath": 5}})

    with pytest.raises(SystemExit) as excinfo:
        main(["verify", str(tree_builder.path())])

    assert excinfo.value.code == 1
    assert "Directory '/src': readmePath must be a string" in capsys.readouterr().err
