"""Pass 2: rewrite DocFX cross-reference markers into relative links."""

import html
import logging
import re
from typing import NamedTuple
from urllib.parse import unquote

from docfx_markdown.diagnostics import Diagnostics
from docfx_markdown.link_renderer import LinkRenderer
from docfx_markdown.link_table import (
    UNRESOLVED_TARGET,
    LinkResolutionTable,
    generic_definition_uid,
)
from docfx_markdown.models import LinkInfo

logger = logging.getLogger(__name__)

# One alternation so markers are handled strictly left to right:
#   <xref href="UID" ...>Display</xref>   (what DocFX writes into summaries)
#   <xref href="UID" ... />
#   <xref:UID>                             (Markdown autolink form)
#   (xref:UID)                             (target of a [text](xref:UID) link)
XREF_RE = re.compile(
    r'<xref\s+href="(?P<href>[^"]*)"[^>]*?(?:/>|>(?P<text>.*?)</xref>)'
    r"|<xref:(?P<auto>[^?#>\s]+)(?:\?[^#>]*)?(?:#[^>]*)?>"
    r"|\(xref:(?P<md>[^)?#\s]+)(?:\?[^)#]*)?(?:#[^)]*)?\)",
    re.IGNORECASE | re.DOTALL,
)


class ResolvedText(NamedTuple):
    """Text with markers replaced, plus the UIDs that matched nothing."""

    text: str
    unresolved: list[str]


def _uid_from_href(href: str) -> str:
    """DocFX URL-encodes hrefs and may append ?query or #fragment."""
    uid = href.split("?", 1)[0].split("#", 1)[0]
    return unquote(uid).strip()


def extract_xref_uids(text: str) -> list[str]:
    """List the UIDs of all markers in `text`, in order."""
    if not text:
        return []
    uids = []
    for m in XREF_RE.finditer(html.unescape(text)):
        raw = m.group("href") or m.group("auto") or m.group("md") or ""
        uids.append(_uid_from_href(raw))
    return uids


def extract_display_name(uid: str) -> str:
    """Short display name of a UID: last dotted segment, arity and signature dropped.

    Type arguments of a constructed generic are dropped as well, so
    `System.Collections.Generic.List{System.String}` displays as `List`.
    A bare type parameter such as `{T}` displays as `T`.
    """
    if not uid:
        return uid
    head = uid.split("(", 1)[0]
    if head.startswith("{") and head.endswith("}"):
        return head[1:-1]
    clean = generic_definition_uid(head).split("`", 1)[0]
    last_dot = clean.rfind(".")
    if 0 <= last_dot < len(clean) - 1:
        return clean[last_dot + 1 :]
    return clean


class XrefProcessor:
    """Resolves markers in rendered text against a frozen link table."""

    def __init__(self, link_table: LinkResolutionTable, renderer: LinkRenderer) -> None:
        """Bind the processor to the table it resolves against."""
        self.link_table = link_table
        self.renderer = renderer

    def resolve(self, text: str, current_file: str) -> ResolvedText:
        """Replace every marker; never fails on an unknown UID."""
        if not text:
            return ResolvedText(text, [])

        unresolved: list[str] = []
        decoded = html.unescape(text)

        def repl(m: re.Match) -> str:
            if m.group("md") is not None:
                md_uid = m.group("md")
                return self._replace_link_target(md_uid, current_file, unresolved)

            uid = _uid_from_href(m.group("href") or m.group("auto") or "")
            override = " ".join((m.group("text") or "").split())
            if not uid:
                return override or m.group(0)

            res = self.link_table.resolve(uid, current_file)
            if not res.resolved:
                unresolved.append(uid)
            link = LinkInfo(
                uid=uid,
                display_name=override or extract_display_name(uid),
                relative_path=res.target,
                is_external=res.is_external,
            )
            return self.renderer.render(link)

        return ResolvedText(XREF_RE.sub(repl, decoded), unresolved)

    def _replace_link_target(
        self, raw_uid: str, current_file: str, unresolved: list[str]
    ) -> str:
        """`[text](xref:UID)` already has its text; only the target changes."""
        uid = _uid_from_href(raw_uid)
        res = self.link_table.resolve(uid, current_file)
        if not res.resolved:
            unresolved.append(uid)
            return f"({UNRESOLVED_TARGET})"
        return f"({res.target})"

    def process(
        self,
        text: str,
        current_file: str,
        diagnostics: Diagnostics | None = None,
    ) -> str:
        """Resolve markers and record unknown UIDs as diagnostics."""
        result = self.resolve(text, current_file)
        if diagnostics is not None:
            for uid in result.unresolved:
                diagnostics.unresolved_reference(uid, current_file)
        elif result.unresolved:
            logger.debug(
                "%d unresolved references in %s", len(result.unresolved), current_file
            )
        return result.text
