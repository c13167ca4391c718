"""Prompt loading and rendering utilities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


@dataclass(frozen=True)
class PromptEntry:
    """Loaded prompt content and metadata."""

    content: str
    metadata: dict[str, Any]


class FrontMatterLoader(FileSystemLoader):
    """Jinja2 loader that strips YAML front matter."""

    def get_source(self, environment: Environment, template: str):  # type: ignore[override]
        source, filename, uptodate = super().get_source(environment, template)
        return _split_front_matter(source)[1], filename, uptodate


def _split_front_matter(source: str) -> tuple[str, str]:
    if source.startswith("---"):
        parts = source.split("---", 2)
        if len(parts) == 3:
            return parts[1], parts[2].lstrip()
    return "", source


class PromptLoader:
    """Load and render Markdown prompt templates."""

    def __init__(self, prompts_dir: str | Path | None = None) -> None:
        self.prompts_dir = Path(prompts_dir) if prompts_dir else TEMPLATES_DIR
        self.cache: dict[str, PromptEntry] = {}
        self._env = Environment(
            loader=FrontMatterLoader(str(self.prompts_dir)),
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )

    def load(self, prompt_path: str) -> str:
        """
        Load raw prompt content (front matter removed).

        Raises:
            FileNotFoundError: If the template does not exist
        """
        return self._entry(prompt_path).content

    def render(self, prompt_path: str, **variables: Any) -> str:
        """
        Render a prompt with Jinja2.

        Example:
            prompt = loader.render("chat/system.md", user_id="abc", session_id="s1")
        """
        try:
            template = self._env.get_template(prompt_path)
        except TemplateNotFound as exc:
            raise FileNotFoundError(f"Prompt not found: {prompt_path}") from exc
        return template.render(**variables).strip()

    def get_metadata(self, prompt_path: str) -> dict[str, Any]:
        """Return the YAML front matter of a prompt."""
        return self._entry(prompt_path).metadata

    def _entry(self, prompt_path: str) -> PromptEntry:
        if prompt_path in self.cache:
            return self.cache[prompt_path]

        file_path = self.prompts_dir / prompt_path
        if not file_path.exists():
            raise FileNotFoundError(f"Prompt not found: {file_path}")

        front_matter, body = _split_front_matter(file_path.read_text(encoding="utf-8"))
        entry = PromptEntry(content=body, metadata=yaml.safe_load(front_matter) or {})
        self.cache[prompt_path] = entry
        return entry
