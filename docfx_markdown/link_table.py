"""The authoritative UID to output location map, and link resolution against it."""

import logging
import threading
from dataclasses import dataclass

from docfx_markdown.errors import DiscoveryNotFinishedError, DuplicateUidError
from docfx_markdown.models import OutputFileInfo
from docfx_markdown.relative_path import path_segments, relative_path

logger = logging.getLogger(__name__)

UNRESOLVED_TARGET = "#unknown-reference"


def generic_definition_uid(uid: str) -> str:
    """Replace each `{...}` type-argument list with a DocFX arity suffix.

    DocFX writes constructed generics such as
    ``System.Collections.Generic.List{System.String}``; the definition they
    link to is ``System.Collections.Generic.List`1``. A parenthesized
    signature is left untouched, and so are UIDs with unbalanced braces or
    that are a bare type parameter such as ``{T}``.
    """
    head, paren, signature = uid.partition("(")
    if "{" not in head or head.startswith("{"):
        return uid

    out: list[str] = []
    depth = 0
    count = 0
    for ch in head:
        if ch == "{":
            if depth == 0:
                count = 1
            depth += 1
        elif ch == "}":
            if depth == 0:
                return uid
            depth -= 1
            if depth == 0:
                out.append(f"`{count}")
        elif depth == 0:
            out.append(ch)
        elif depth == 1 and ch == ",":
            count += 1
    if depth:
        return uid
    return "".join(out) + paren + signature


@dataclass(frozen=True)
class Resolution:
    """Where a UID points, as seen from one document."""

    uid: str
    target: str
    is_external: bool
    resolved: bool = True


class LinkResolutionTable:
    """Maps UIDs to generated files, and otherwise to external URLs.

    Written only during discovery. Once `freeze()` is called the table is
    read-only and may be shared by any number of resolution workers.
    """

    def __init__(
        self,
        external_prefixes: tuple[str, ...] = (),
        external_url_template: str = "",
    ) -> None:
        """Create an empty table with the foreign-framework fallback rules."""
        self.external_prefixes = tuple(external_prefixes)
        self.external_url_template = external_url_template
        self._generated: dict[str, OutputFileInfo] = {}
        self._external: dict[str, str] = {}
        self._lock = threading.Lock()
        self._frozen = False

    # -----------------------------
    # Discovery (writes)
    # -----------------------------

    @property
    def frozen(self) -> bool:
        """Whether discovery has finished."""
        return self._frozen

    def freeze(self) -> None:
        """End discovery; every later write raises."""
        self._frozen = True
        logger.debug(
            "Link table frozen with %d generated and %d external entries",
            len(self._generated),
            len(self._external),
        )

    def _check_writable(self) -> None:
        if self._frozen:
            msg = "link table is frozen; discovery has already finished"
            raise RuntimeError(msg)

    def record_generated_file(
        self, uid: str, file_path: str, anchor: str | None = None
    ) -> OutputFileInfo:
        """Register the file (and anchor) a UID is written to."""
        with self._lock:
            self._check_writable()
            if uid in self._generated:
                raise DuplicateUidError([uid])
            info = OutputFileInfo(file_path=file_path, anchor=anchor)
            self._generated[uid] = info
            return info

    def rewrite_to_parent(
        self, uid: str, file_path: str, anchor: str
    ) -> OutputFileInfo:
        """Move an already registered member onto its parent's page."""
        with self._lock:
            self._check_writable()
            if uid not in self._generated:
                raise KeyError(uid)
            info = OutputFileInfo(file_path=file_path, anchor=anchor)
            self._generated[uid] = info
            return info

    def record_external_reference(self, uid: str, href: str | None) -> None:
        """Remember where a UID without a generated file lives."""
        with self._lock:
            self._check_writable()
            if href and uid not in self._external:
                self._external[uid] = href

    # -----------------------------
    # Lookups
    # -----------------------------

    def __contains__(self, uid: object) -> bool:
        """Whether a file was generated for the UID."""
        return uid in self._generated

    def __len__(self) -> int:
        """Number of UIDs with a generated file."""
        return len(self._generated)

    def items(self) -> list[tuple[str, OutputFileInfo]]:
        """Generated entries in registration order."""
        return list(self._generated.items())

    def get_output_info(self, uid: str) -> OutputFileInfo:
        """Return the output location for a generated UID; KeyError otherwise."""
        return self._generated[uid]

    def is_external_reference(self, uid: str) -> bool:
        """A UID is external unless this run generates a file for it."""
        return uid not in self._generated

    def resolve_internal_link(self, current_file: str, uid: str) -> str:
        """Relative link from `current_file` to a generated UID, anchor included."""
        info = self._generated[uid]
        rel = relative_path(current_file, info.file_path)
        if info.anchor:
            return f"{rel}#{info.anchor}"
        if not rel:
            # Self link to a page with no anchor: link the file by name.
            segments = path_segments(info.file_path)
            return segments[-1] if segments else ""
        return rel

    def foreign_url(self, uid: str) -> str | None:
        """Canonical URL for UIDs under a configured foreign-framework prefix."""
        if not self.external_url_template:
            return None
        if not any(uid.startswith(prefix) for prefix in self.external_prefixes):
            return None
        slug = generic_definition_uid(uid).replace("`", "-").lower()
        # Plain substitution: other braces in the template (query strings) stay.
        return self.external_url_template.replace("{uid}", slug)

    def resolve_external_link(self, uid: str, fallback: str | None = None) -> str:
        """Recorded href, then prefix URL, then `fallback`, then the unresolved mark."""
        href = self._external.get(uid)
        if href:
            return href
        return self.foreign_url(uid) or fallback or UNRESOLVED_TARGET

    def resolve(
        self, uid: str, current_file: str, fallback: str | None = None
    ) -> Resolution:
        """Resolve a UID for a link written in `current_file`.

        Generated files always win over recorded references, which win over
        the foreign-framework URL, which wins over `fallback`. A constructed
        generic with no entry of its own resolves through its definition.
        Nothing raises for an unknown UID; the result is flagged as
        unresolved instead.
        """
        if not self._frozen:
            msg = f"cannot resolve {uid!r}: discovery has not finished"
            raise DiscoveryNotFinishedError(msg)

        key = uid
        if uid not in self._generated and uid not in self._external:
            definition = generic_definition_uid(uid)
            if definition in self._generated or definition in self._external:
                key = definition

        if key in self._generated:
            return Resolution(uid, self.resolve_internal_link(current_file, key), False)

        href = self._external.get(key)
        if href:
            return Resolution(uid, href, True)

        url = self.foreign_url(uid)
        if url:
            return Resolution(uid, url, True)

        if fallback:
            return Resolution(uid, fallback, True)

        return Resolution(uid, UNRESOLVED_TARGET, False, resolved=False)
