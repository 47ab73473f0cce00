"""Logic for turning identifiers into filesystem and URL safe path segments."""

import re
from enum import Enum

from docfx_markdown.errors import ConfigurationError

# Characters Windows refuses in file names, plus control characters.
RESERVED_CHARS_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
# Generic and signature punctuation DocFX leaves in names: List<T>, Foo`1, M(int)
PROBLEM_CHARS_RE = re.compile(r"[<>`()]")
# Generic arity at the end of a name: List`1 -> List-1, Select``2 -> Select--2
GENERIC_ARITY_RE = re.compile(r"`(\d+)$")

UNKNOWN_ASSEMBLY = "unknown-assembly"
UNKNOWN_TYPE = "unknown-type"
GLOBAL_NAMESPACE = "global"


class CasePolicy(Enum):
    """How file and directory names are cased."""

    LOWERCASE = "lowercase"
    UPPERCASE = "uppercase"
    MIXED = "mixed"  # keep the identifier's own casing

    @classmethod
    def parse(cls, value: "str | CasePolicy | None") -> "CasePolicy":
        """Parse a case policy name; an empty value means lowercase."""
        if isinstance(value, CasePolicy):
            return value
        if not value:
            return cls.LOWERCASE
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            msg = f"Unknown filename case '{value}'. Expected one of: {valid}"
            raise ConfigurationError(msg) from None

    def apply(self, name: str) -> str:
        """Apply the casing rule to an already sanitized name."""
        if self is CasePolicy.UPPERCASE:
            return name.upper()
        if self is CasePolicy.LOWERCASE:
            return name.lower()
        return name


def safe_file_name(
    name: str,
    case: CasePolicy = CasePolicy.LOWERCASE,
    placeholder: str = UNKNOWN_TYPE,
) -> str:
    """Make a stable file name segment.

    Dots survive, so a fully qualified UID stays readable. Generic arity is
    kept as a hyphenated suffix so ``Foo`1`` and ``Foo`2`` never collide.
    """
    result = RESERVED_CHARS_RE.sub("-", name)
    result = GENERIC_ARITY_RE.sub(r"-\1", result)
    result = PROBLEM_CHARS_RE.sub("-", result)
    result = case.apply(result)
    return result or placeholder


def safe_directory_name(
    name: str,
    case: CasePolicy = CasePolicy.LOWERCASE,
    placeholder: str = UNKNOWN_TYPE,
) -> str:
    """Make a directory segment; like a file name but dots become hyphens."""
    if not name:
        return placeholder
    return safe_file_name(name, case, placeholder).replace(".", "-")
