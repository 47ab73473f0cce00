"""Renders links and pages through Jinja2 templates."""

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template

from docfx_markdown.models import LinkInfo


def create_environment(templates_dir: str | Path | None = None) -> Environment:
    """Jinja2 environment for Markdown output, optionally loading from a folder."""
    loader = FileSystemLoader(str(templates_dir)) if templates_dir else None
    # Markdown output: no HTML autoescaping, and a missing key is a template bug.
    return Environment(  # noqa: S701
        loader=loader,
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


_ENV = create_environment()


def render_template(template: str | Template, context: dict[str, Any]) -> str:
    """Render a template, given as text or already compiled, with `context`."""
    if isinstance(template, str):
        template = _ENV.from_string(template)
    return template.render(**context)


class LinkRenderer:
    """Turns a LinkInfo into link markup using one compiled template."""

    def __init__(self, template_text: str) -> None:
        """Compile the link template once; rendering is then thread-safe."""
        self.template_text = template_text
        self._template: Template = _ENV.from_string(template_text)

    def render(self, link: LinkInfo) -> str:
        """Render a single link, trimmed of surrounding whitespace."""
        return render_template(self._template, link.as_context()).strip()
