"""Exceptions raised by the conversion pipeline."""


class ConversionError(Exception):
    """Base class for errors that abort a conversion run."""


class ConfigurationError(ConversionError):
    """Raised when the configuration is incomplete or names an unknown option."""


class DuplicateUidError(ConversionError):
    """Raised when two metadata records share a UID and duplicates are fatal."""

    def __init__(self, uids: list[str]) -> None:
        """Keep the offending UIDs for callers that want to report them."""
        self.uids = uids
        shown = ", ".join(uids[:5])
        more = f" (+{len(uids) - 5} more)" if len(uids) > 5 else ""  # noqa: PLR2004
        super().__init__(f"Duplicate UIDs in metadata: {shown}{more}")


class DiscoveryNotFinishedError(ConversionError):
    """Raised when links are resolved before discovery has frozen the table."""
