"""End-to-end tests for the conversion pipeline and its command line."""

import argparse
import json
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from docfx_markdown.cli import build_parser, main
from docfx_markdown.run_conversion import run_conversion

GLYPH_YML = """### YamlMime:ManagedReference
items:
- uid: SadConsole.ColoredGlyph
  name: ColoredGlyph
  fullName: SadConsole.ColoredGlyph
  type: Class
  namespace: SadConsole
  assemblies:
  - SadConsole
  summary: Used by <xref href="SadConsole.UI.Controls.Button"></xref>.
  syntax:
    content: public class ColoredGlyph
  inheritance:
  - System.Object
- uid: SadConsole.ColoredGlyph.Clone
  parent: SadConsole.ColoredGlyph
  name: Clone
  type: Method
  namespace: SadConsole
  summary: Copies this glyph; see <xref href="Totally.Unknown"></xref>.
  syntax:
    content: public ColoredGlyph Clone()
    return:
      type: SadConsole.ColoredGlyph
references:
- uid: System.Object
  name: object
"""

BUTTON_YML = """### YamlMime:ManagedReference
items:
- uid: SadConsole.UI.Controls.Button
  name: Button
  fullName: SadConsole.UI.Controls.Button
  type: Class
  namespace: SadConsole.UI.Controls
  assemblies:
  - SadConsole
  summary: Draws a <xref href="SadConsole.ColoredGlyph"></xref>; call <xref href="SadConsole.ColoredGlyph.Clone"></xref>.
"""


@pytest.fixture
def yml_dir(tmp_path: Path) -> Path:
    """A folder with two DocFX YAML files."""
    d = tmp_path / "api"
    d.mkdir()
    (d / "SadConsole.ColoredGlyph.yml").write_text(GLYPH_YML, encoding="utf-8")
    (d / "SadConsole.UI.Controls.Button.yml").write_text(BUTTON_YML, encoding="utf-8")
    return d


def _args(yml_dir: Path, out_dir: Path, *extra: str) -> argparse.Namespace:
    return build_parser().parse_args([str(yml_dir), str(out_dir), *extra])


def test_run_conversion_namespace_layout(yml_dir: Path, tmp_path: Path) -> None:
    """Pages land in namespace folders with working relative links."""
    out_dir = tmp_path / "out"
    args = _args(yml_dir, out_dir, "--grouping", "namespace", "--case", "mixed")

    assert run_conversion(args) == 0

    glyph = (out_dir / "SadConsole" / "ColoredGlyph.md").read_text(encoding="utf-8")
    button_path = out_dir / "SadConsole-UI-Controls" / "Button.md"
    button = button_path.read_text(encoding="utf-8")

    assert "[Button](../SadConsole-UI-Controls/Button.md)" in glyph
    assert "[Unknown](#unknown-reference)" in glyph
    assert '<a id="Clone"></a>' in glyph
    assert "[ColoredGlyph](#Clone)" not in glyph
    assert "[object](" not in glyph
    assert "[Object](https://learn.microsoft.com/dotnet/api/system.object)" in glyph
    assert "[ColoredGlyph](../SadConsole/ColoredGlyph.md)" in button
    assert "[Clone](../SadConsole/ColoredGlyph.md#Clone)" in button
    assert "<xref" not in glyph + button

    report = json.loads((out_dir / "conversion_report.json").read_text())
    assert report["counts"] == {"unresolved_reference": 1}
    assert report["stats"]["pages_written"] == 2  # noqa: PLR2004


def test_run_conversion_flat_separate_members(yml_dir: Path, tmp_path: Path) -> None:
    """Without combining, members get their own pages in the flat layout."""
    out_dir = tmp_path / "out"
    args = _args(yml_dir, out_dir, "--no-combine-members", "--format", "mdx")

    run_conversion(args)

    written = sorted(p.name for p in out_dir.glob("*.mdx"))
    assert written == [
        "sadconsole.coloredglyph.clone.mdx",
        "sadconsole.coloredglyph.mdx",
        "sadconsole.ui.controls.button.mdx",
    ]
    clone = (out_dir / "sadconsole.coloredglyph.clone.mdx").read_text(encoding="utf-8")
    assert "[ColoredGlyph](sadconsole.coloredglyph.mdx)" in clone


def test_run_conversion_with_config_and_workers(yml_dir: Path, tmp_path: Path) -> None:
    """Config file settings apply and parallel rendering writes every page."""
    config_file = tmp_path / "config.yml"
    config_file.write_text(
        yaml.dump(
            {
                "file_grouping": "assembly-flat",
                "link_template": '<Link to="{{ relativePath }}">{{ displayName }}</Link>',
                "workers": 3,
            }
        ),
        encoding="utf-8",
    )
    out_dir = tmp_path / "out"
    report = tmp_path / "report.json"
    args = _args(yml_dir, out_dir, "--config", str(config_file), "--report", str(report))

    run_conversion(args)

    button = (out_dir / "sadconsole" / "button.md").read_text(encoding="utf-8")
    assert '<Link to="coloredglyph.md">ColoredGlyph</Link>' in button
    assert report.exists()
    assert not (out_dir / "conversion_report.json").exists()


def test_run_conversion_with_page_templates(yml_dir: Path, tmp_path: Path) -> None:
    """A template folder renders the pages and its template.json splits members."""
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "template.json").write_text(
        json.dumps({"name": "wiki", "combineMembers": False}), encoding="utf-8"
    )
    (templates / "class.md.j2").write_text(
        "# {{ item.name }}\n\n{{ item.summary }}\n", encoding="utf-8"
    )
    (templates / "member.md.j2").write_text(
        "# {{ item.name }} of {{ xref(item.parent) }}\n", encoding="utf-8"
    )
    out_dir = tmp_path / "out"

    run_conversion(_args(yml_dir, out_dir, "--templates", str(templates)))

    button = (out_dir / "sadconsole.ui.controls.button.md").read_text(encoding="utf-8")
    clone = (out_dir / "sadconsole.coloredglyph.clone.md").read_text(encoding="utf-8")
    assert button == (
        "# Button\n\nDraws a [ColoredGlyph](sadconsole.coloredglyph.md); "
        "call [Clone](sadconsole.coloredglyph.clone.md).\n"
    )
    assert clone == "# Clone of [ColoredGlyph](sadconsole.coloredglyph.md)\n"
    report = json.loads((out_dir / "conversion_report.json").read_text())
    assert report["stats"]["pages_written"] == 3  # noqa: PLR2004


def test_main_missing_template_folder_exits(yml_dir: Path, tmp_path: Path) -> None:
    """A template folder that does not exist ends the run cleanly."""
    argv = [str(yml_dir), str(tmp_path / "out"), "--templates", str(tmp_path / "no")]
    with pytest.raises(SystemExit, match="Template folder not found"):
        main(argv)


def test_run_conversion_dry_run(
    yml_dir: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """A dry run prints mappings and writes nothing."""
    out_dir = tmp_path / "out"
    assert run_conversion(_args(yml_dir, out_dir, "--dry-run")) == 0

    printed = capsys.readouterr().out
    assert "SadConsole.ColoredGlyph -> sadconsole.coloredglyph.md" in printed
    assert "SadConsole.ColoredGlyph.Clone -> sadconsole.coloredglyph.md#clone" in printed
    assert not out_dir.exists()


def test_run_conversion_no_yaml(tmp_path: Path) -> None:
    """An input folder without YAML stops the run."""
    with pytest.raises(SystemExit):
        run_conversion(_args(tmp_path, tmp_path / "out"))


def test_main_strict_duplicates_exits(yml_dir: Path, tmp_path: Path) -> None:
    """Duplicate UIDs are fatal in strict mode."""
    (yml_dir / "copy.yml").write_text(BUTTON_YML, encoding="utf-8")
    argv = [str(yml_dir), str(tmp_path / "out"), "--strict-duplicates"]
    with pytest.raises(SystemExit, match="Duplicate UIDs"):
        main(argv)


def test_main_invalid_config_exits(yml_dir: Path, tmp_path: Path) -> None:
    """Configuration errors become a clean exit."""
    argv = [str(yml_dir), str(tmp_path / "out"), "--config", str(tmp_path / "no.yml")]
    with pytest.raises(SystemExit, match="Configuration file not found"):
        main(argv)


def test_main_passes_arguments(yml_dir: Path, tmp_path: Path) -> None:
    """The command line hands parsed options to the pipeline."""
    with patch("docfx_markdown.cli.run_conversion", return_value=0) as mock_run:
        assert main([str(yml_dir), str(tmp_path), "--workers", "2", "-v"]) == 0
    args = mock_run.call_args.args[0]
    assert args.workers == 2  # noqa: PLR2004
    assert args.verbose
    assert args.yml_dir == yml_dir
