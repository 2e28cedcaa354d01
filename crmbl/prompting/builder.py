"""Builds documentation prompts from scan results."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from jinja2 import Environment, FileSystemLoader, Template

from ..config import CrmblConfig
from ..logging import get_logger
from ..models import ScanResult
from .constants import DEFAULT_PROMPT_TEMPLATE

logger = get_logger("prompting")


class PromptBuilder:
    """Renders a jinja2 prompt template listing directories that need docs."""

    def __init__(self, template_path: Path | None = None) -> None:
        self.template_path = template_path

    def build(self, result: ScanResult, config: CrmblConfig) -> str:
        template = self._load_template()
        return template.render(**self._context(result, config))

    def _load_template(self) -> Template:
        if self.template_path is not None:
            path = Path(self.template_path)
            if path.is_file():
                env = self._create_env(path.parent)
                return env.get_template(path.name)
            logger.warning("Prompt template %s not found; using the built-in template", path)
        return self._create_env(None).from_string(DEFAULT_PROMPT_TEMPLATE)

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        loader = FileSystemLoader(str(templates_dir)) if templates_dir is not None else None
        return Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    @staticmethod
    def _context(result: ScanResult, config: CrmblConfig) -> Dict[str, Any]:
        readme_template = ""
        template_path = config.readme_template_path
        if config.readme_template and template_path.is_file():
            readme_template = template_path.read_text(encoding="utf-8").strip()

        return {
            "NEW_DIRS": "\n".join(f"- {path}" for path in result.new_dirs),
            "ROOT_PATH": config.root_path,
            "OUTPUT_PATH": config.output_path,
            "TOTAL_NEW": str(result.stats.new),
            "README_TEMPLATE": readme_template,
            "new_dirs": list(result.new_dirs),
            "stats": result.stats,
        }


__all__ = ["PromptBuilder"]
