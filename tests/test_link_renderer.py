"""Tests for link template rendering."""

from pathlib import Path

import pytest
from jinja2 import UndefinedError

from docfx_markdown.link_renderer import (
    LinkRenderer,
    create_environment,
    render_template,
)
from docfx_markdown.load_config import DEFAULT_LINK_TEMPLATE
from docfx_markdown.models import LinkInfo


def test_default_template() -> None:
    """The default template is a Markdown link."""
    link = LinkInfo("N.C", "C", "../c.md")
    assert LinkRenderer(DEFAULT_LINK_TEMPLATE).render(link) == "[C](../c.md)"


def test_render_strips_whitespace() -> None:
    """Template whitespace around the link is trimmed."""
    renderer = LinkRenderer("\n  [{{ displayName }}]({{ relativePath }})\n")
    assert renderer.render(LinkInfo("N.C", "C", "c.md")) == "[C](c.md)"


def test_template_sees_all_fields() -> None:
    """uid, displayName, relativePath and isExternal are available."""
    link = LinkInfo("System.String", "String", "https://x/string", is_external=True)
    template = "{{ uid }}|{{ displayName }}|{{ relativePath }}|{{ isExternal }}"
    assert LinkRenderer(template).render(link) == (
        "System.String|String|https://x/string|True"
    )


def test_no_html_escaping() -> None:
    """Markup in the template and values is left alone."""
    assert render_template("<a>{{ v }}</a>", {"v": "List<T>"}) == "<a>List<T></a>"


def test_render_compiled_template_from_folder(tmp_path: Path) -> None:
    """Templates loaded from a folder render the same way as inline text."""
    (tmp_path / "page.md.j2").write_text("# {{ title }}\n", encoding="utf-8")
    template = create_environment(tmp_path).get_template("page.md.j2")
    assert render_template(template, {"title": "Box<T>"}) == "# Box<T>\n"


def test_unknown_variable_is_an_error() -> None:
    """Templates may only use the documented keys."""
    with pytest.raises(UndefinedError):
        LinkRenderer("{{ title }}").render(LinkInfo("A", "A", "a.md"))
