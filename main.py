"""Main orchestration script for generating DocFX metadata and Markdown pages."""

import argparse
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path


def run_command(cmd_list: Sequence[str | Path], cwd: Path | str | None = None) -> None:
    """Run a command and exit if it fails."""
    cmd_str = " ".join(str(x) for x in cmd_list)
    print(f"Running: {cmd_str}")
    try:
        subprocess.run(cmd_list, check=True, cwd=cwd)
    except subprocess.CalledProcessError as e:
        print(f"Error executing command: {cmd_str}")
        sys.exit(e.returncode)


def main() -> None:
    """Run docfx metadata, then convert its output to Markdown."""
    parser = argparse.ArgumentParser(
        description="Generate DocFX metadata and Markdown documentation."
    )
    parser.add_argument(
        "--skip-metadata",
        action="store_true",
        help="Reuse the YAML already in the api folder",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print UID mappings without writing pages",
    )
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--templates", help="Folder of Jinja2 page templates")
    args = parser.parse_args()

    root_dir = Path(__file__).parent

    if not args.skip_metadata:
        print("--- Step 1: Generating DocFX metadata ---")
        # Looks for docfx.json in the current directory
        run_command(["dotnet", "docfx", "metadata"])

    print("\n--- Step 2: Converting YAML to Markdown ---")
    yml_dir = root_dir / "api"
    out_dir = root_dir / "markdown_out"

    cmd = [sys.executable, "-m", "docfx_markdown.cli", str(yml_dir), str(out_dir)]
    if args.dry_run:
        cmd.append("--dry-run")
    if args.config:
        cmd.extend(["--config", args.config])
    if args.templates:
        cmd.extend(["--templates", args.templates])

    run_command(cmd)

    print(f"\nSUCCESS: Documentation generated in {out_dir}")


if __name__ == "__main__":
    main()
