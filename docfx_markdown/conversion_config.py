"""Validated, immutable settings passed explicitly to every pipeline stage."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from docfx_markdown.errors import ConfigurationError
from docfx_markdown.safe_name import CasePolicy

OUTPUT_FORMATS = ("md", "mdx")

REQUIRED_KEYS = (
    "output_format",
    "file_grouping",
    "filename_case",
    "combine_members",
    "link_template",
)


class LayoutStrategy(Enum):
    """How UIDs are mapped onto output paths."""

    FLAT = "flat"
    NAMESPACE = "namespace"
    ASSEMBLY_NAMESPACE = "assembly-namespace"
    ASSEMBLY_FLAT = "assembly-flat"

    @classmethod
    def parse(cls, value: "str | LayoutStrategy") -> "LayoutStrategy":
        """Parse a grouping strategy name."""
        if isinstance(value, LayoutStrategy):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            msg = f"Unknown grouping strategy '{value}'. Expected one of: {valid}"
            raise ConfigurationError(msg) from None

    @property
    def has_assembly_dir(self) -> bool:
        """Whether paths start with an assembly directory."""
        return self in {LayoutStrategy.ASSEMBLY_NAMESPACE, LayoutStrategy.ASSEMBLY_FLAT}

    @property
    def has_namespace_dir(self) -> bool:
        """Whether paths include a namespace directory."""
        return self in {LayoutStrategy.NAMESPACE, LayoutStrategy.ASSEMBLY_NAMESPACE}


@dataclass(frozen=True)
class ConversionConfig:
    """Settings for one run; never shared mutable state between runs."""

    output_format: str = "md"
    layout: LayoutStrategy = LayoutStrategy.FLAT
    case: CasePolicy = CasePolicy.LOWERCASE
    combine_members: bool = True
    strict_duplicates: bool = False
    external_prefixes: tuple[str, ...] = ("System.", "Microsoft.")
    external_url_template: str = "https://learn.microsoft.com/dotnet/api/{uid}"
    link_template: str = "[{{ displayName }}]({{ relativePath }})"
    workers: int = 1
    templates_dir: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def extension(self) -> str:
        """File extension including the leading dot."""
        return f".{self.output_format}"

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "ConversionConfig":
        """Validate a merged configuration mapping."""
        missing = [k for k in REQUIRED_KEYS if k not in config or config[k] is None]
        if missing:
            msg = f"Missing required configuration: {', '.join(missing)}"
            raise ConfigurationError(msg)

        output_format = str(config["output_format"]).strip().lower().lstrip(".")
        if output_format not in OUTPUT_FORMATS:
            msg = (
                f"Unknown output format '{config['output_format']}'. "
                f"Expected one of: {', '.join(OUTPUT_FORMATS)}"
            )
            raise ConfigurationError(msg)

        template = str(config.get("external_url_template") or "")
        if template and "{uid}" not in template:
            msg = "external_url_template must contain a '{uid}' placeholder"
            raise ConfigurationError(msg)

        try:
            workers = max(1, int(config.get("workers") or 1))
        except (TypeError, ValueError) as e:
            msg = f"workers must be an integer, got {config.get('workers')!r}"
            raise ConfigurationError(msg) from e

        templates_dir = config.get("templates_dir")

        return cls(
            output_format=output_format,
            layout=LayoutStrategy.parse(config["file_grouping"]),
            case=CasePolicy.parse(config["filename_case"]),
            combine_members=bool(config["combine_members"]),
            strict_duplicates=bool(config.get("strict_duplicates", False)),
            external_prefixes=tuple(config.get("external_prefixes") or ()),
            external_url_template=template,
            link_template=str(config["link_template"]),
            workers=workers,
            templates_dir=str(templates_dir) if templates_dir else None,
            raw=dict(config),
        )
