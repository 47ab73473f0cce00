"""Logic for loading and merging configuration files."""

import logging
from pathlib import Path
from typing import Any

import yaml

from docfx_markdown.deep_merge import deep_merge
from docfx_markdown.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_LINK_TEMPLATE = "[{{ displayName }}]({{ relativePath }})"

DEFAULT_CONFIG: dict[str, Any] = {
    "output_format": "md",
    "file_grouping": "flat",
    "filename_case": "lowercase",
    "combine_members": True,
    "strict_duplicates": False,
    "external_prefixes": ["System.", "Microsoft."],
    "external_url_template": "https://learn.microsoft.com/dotnet/api/{uid}",
    "link_template": DEFAULT_LINK_TEMPLATE,
    "workers": 1,
    "templates_dir": None,
}


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration from a YAML file and merge it with defaults."""
    config = dict(DEFAULT_CONFIG)
    if not path:
        return config

    p = Path(path)
    if not p.exists():
        msg = f"Configuration file not found: {p}"
        raise ConfigurationError(msg)

    try:
        user_config = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in configuration file {p}: {e}"
        raise ConfigurationError(msg) from e
    if not isinstance(user_config, dict):
        msg = f"Configuration file {p} must contain a mapping"
        raise ConfigurationError(msg)

    logger.debug("Loaded configuration overrides from %s: %s", p, sorted(user_config))
    return deep_merge(config, user_config)
