"""Tests for cross-reference marker rewriting."""

import pytest

from docfx_markdown.diagnostics import UNRESOLVED_REFERENCE, Diagnostics
from docfx_markdown.errors import DiscoveryNotFinishedError
from docfx_markdown.link_renderer import LinkRenderer
from docfx_markdown.link_table import LinkResolutionTable
from docfx_markdown.load_config import DEFAULT_LINK_TEMPLATE
from docfx_markdown.xref_processor import (
    XrefProcessor,
    extract_display_name,
    extract_xref_uids,
)

BUTTON = "SadConsole/UI/Controls/Button.md"
GLYPH = "SadConsole/ColoredGlyph.md"


@pytest.fixture
def processor() -> XrefProcessor:
    """A processor over a small frozen table."""
    table = LinkResolutionTable(
        ("System.",), "https://learn.microsoft.com/dotnet/api/{uid}"
    )
    table.record_generated_file("SadConsole.ColoredGlyph", GLYPH)
    table.record_generated_file("SadConsole.UI.Controls.Button", BUTTON)
    table.record_generated_file("SadConsole.ColoredGlyph.Clone", GLYPH, "clone")
    table.freeze()
    return XrefProcessor(table, LinkRenderer(DEFAULT_LINK_TEMPLATE))


def test_href_marker_resolves_relative(processor: XrefProcessor) -> None:
    """An xref tag becomes a relative Markdown link."""
    text = (
        'Uses <xref href="SadConsole.ColoredGlyph"'
        ' data-throw-if-not-resolved="false"></xref>.'
    )
    assert processor.process(text, BUTTON) == (
        "Uses [ColoredGlyph](../../ColoredGlyph.md)."
    )


def test_override_display_text(processor: XrefProcessor) -> None:
    """Text inside the tag replaces the derived display name."""
    text = '<xref href="SadConsole.ColoredGlyph">the glyph</xref>'
    assert processor.process(text, BUTTON) == "[the glyph](../../ColoredGlyph.md)"


def test_anchor_on_same_page(processor: XrefProcessor) -> None:
    """A member on the current page links by anchor only."""
    text = '<xref href="SadConsole.ColoredGlyph.Clone"></xref>'
    assert processor.process(text, GLYPH) == "[Clone](#clone)"


def test_unknown_uid_placeholder_and_diagnostic(processor: XrefProcessor) -> None:
    """An unknown UID degrades to a placeholder and is reported once."""
    diagnostics = Diagnostics()
    text = 'See <xref href="Totally.Unknown"></xref> for details.'
    out = processor.process(text, BUTTON, diagnostics)
    assert out == "See [Unknown](#unknown-reference) for details."
    unresolved = diagnostics.by_category(UNRESOLVED_REFERENCE)
    assert [(d.uid, d.source) for d in unresolved] == [("Totally.Unknown", BUTTON)]


def test_entities_decoded_before_matching(processor: XrefProcessor) -> None:
    """HTML-escaped markers are decoded first."""
    text = (
        "&lt;xref href=&quot;SadConsole.ColoredGlyph&quot;&gt;"
        "&lt;/xref&gt; &amp; more"
    )
    assert processor.process(text, GLYPH) == "[ColoredGlyph](ColoredGlyph.md) & more"


def test_autolink_and_markdown_link_forms(processor: XrefProcessor) -> None:
    """Both `<xref:UID>` and `[text](xref:UID)` are rewritten."""
    text = (
        "A <xref:SadConsole.UI.Controls.Button>"
        " and [glyph](xref:SadConsole.ColoredGlyph)"
    )
    assert processor.process(text, GLYPH) == (
        "A [Button](UI/Controls/Button.md) and [glyph](ColoredGlyph.md)"
    )


def test_markers_processed_left_to_right(processor: XrefProcessor) -> None:
    """Several markers in one text resolve independently and in order."""
    text = (
        '<xref href="Totally.Unknown"></xref> '
        '<xref href="System.String"></xref> '
        '<xref href="SadConsole.ColoredGlyph"></xref>'
    )
    result = processor.resolve(text, GLYPH)
    assert result.text == (
        "[Unknown](#unknown-reference) "
        "[String](https://learn.microsoft.com/dotnet/api/system.string) "
        "[ColoredGlyph](ColoredGlyph.md)"
    )
    assert result.unresolved == ["Totally.Unknown"]


def test_url_encoded_href(processor: XrefProcessor) -> None:
    """Percent-encoded hrefs are decoded into UIDs."""
    text = '<xref href="SadConsole.ColoredGlyph%2EClone?displayProperty=name"></xref>'
    assert processor.process(text, GLYPH) == "[Clone](#clone)"


def test_text_without_markers_is_unchanged(processor: XrefProcessor) -> None:
    """Plain text and empty text pass through."""
    assert processor.process("no links here", GLYPH) == "no links here"
    assert processor.process("", GLYPH) == ""


def test_escaped_generic_override_text() -> None:
    """An escaped override such as `C&lt;T&gt;` is decoded and still replaced."""
    table = LinkResolutionTable()
    table.record_generated_file("N.C`1", "n.c-1.md")
    table.freeze()
    processor = XrefProcessor(table, LinkRenderer(DEFAULT_LINK_TEMPLATE))
    diagnostics = Diagnostics()

    out = processor.process(
        'See <xref href="N.C%601">C&lt;T&gt;</xref>.', "x.md", diagnostics
    )

    assert out == "See [C<T>](n.c-1.md)."
    assert len(diagnostics) == 0


def test_override_text_spanning_lines(processor: XrefProcessor) -> None:
    """Override text may wrap; its whitespace is collapsed."""
    text = '<xref href="SadConsole.ColoredGlyph">the\n  glyph</xref>'
    assert processor.process(text, GLYPH) == "[the glyph](ColoredGlyph.md)"


def test_constructed_generic_foreign_type(processor: XrefProcessor) -> None:
    """Type arguments are dropped from the text and become arity in the URL."""
    text = '<xref href="System.Collections.Generic.List{System.String}"></xref>'
    assert processor.process(text, GLYPH) == (
        "[List](https://learn.microsoft.com/dotnet/api/system.collections.generic.list-1)"
    )


def test_constructed_generic_of_generated_type() -> None:
    """A constructed generic links to the page of its generic definition."""
    table = LinkResolutionTable()
    table.record_generated_file("N.Box`1", "n/box-1.md")
    table.freeze()
    processor = XrefProcessor(table, LinkRenderer(DEFAULT_LINK_TEMPLATE))
    diagnostics = Diagnostics()

    text = '<xref href="N.Box{System.Int32}"></xref>'
    out = processor.process(text, "n/c.md", diagnostics)

    assert out == "[Box](box-1.md)"
    assert len(diagnostics) == 0


def test_custom_template() -> None:
    """The link template controls the output markup."""
    table = LinkResolutionTable()
    table.record_generated_file("N.C", "n/c.md")
    table.freeze()
    renderer = LinkRenderer(
        "{% if isExternal %}{{ displayName }}{% else %}"
        '<Link to="{{ relativePath }}">{{ displayName }}</Link>{% endif %}'
    )
    out = XrefProcessor(table, renderer).process('<xref href="N.C"></xref>', "n/d.md")
    assert out == '<Link to="c.md">C</Link>'


def test_unfrozen_table_raises() -> None:
    """Resolution before discovery finishes is an error."""
    table = LinkResolutionTable()
    processor = XrefProcessor(table, LinkRenderer(DEFAULT_LINK_TEMPLATE))
    with pytest.raises(DiscoveryNotFinishedError):
        processor.process('<xref href="A"></xref>', "x.md")


def test_extract_xref_uids() -> None:
    """All marker forms are found in order."""
    text = '<xref href="A.B"></xref> <xref:C.D> [x](xref:E.F#frag)'
    assert extract_xref_uids(text) == ["A.B", "C.D", "E.F"]


@pytest.mark.parametrize(
    ("uid", "expected"),
    [
        ("SadConsole.ColoredGlyph", "ColoredGlyph"),
        ("System.Collections.Generic.List`1", "List"),
        ("N.C.M(System.Int32)", "M"),
        ("System.Collections.Generic.List{System.String}", "List"),
        ("N.Map{System.String,N.Box{System.Int32}}", "Map"),
        ("{T}", "T"),
        ("Plain", "Plain"),
        ("", ""),
    ],
)
def test_extract_display_name(uid: str, expected: str) -> None:
    """Display names drop namespaces, arity and signatures."""
    assert extract_display_name(uid) == expected
