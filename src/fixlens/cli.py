# fixlens - Fix previews and duplicate detection for code fragments
# Copyright (C) 2025  Jonathan Louis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
CLI entry point for fixlens.

Usage:
    fixlens preview <original> <fixed> [options]
    fixlens duplicates <corpus.json> [options]
    fixlens --help
"""

import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .clusterer import STRATEGIES
from .config import Settings, load_settings
from .corpus import load_corpus
from .differ import ALGORITHMS
from .preview import generate_preview
from .refactoring import find_duplicates, find_similar_code
from .reporter import EXTENSION_FORMAT_MAP, OutputFormat, render_preview, report_similarity


FORMAT_CHOICES = [f.value for f in OutputFormat]


def merge_config_with_cli(
    config: dict,
    cli_value,
    config_key: str,
    default_value,
):
    """
    Merge config file value with CLI value.

    If CLI value differs from default, use CLI (user explicitly set it).
    Otherwise, use config value if present, else use default.
    """
    if cli_value != default_value:
        return cli_value

    return config.get(config_key, default_value)


def resolve_format(explicit: Optional[str], output: Optional[str], settings: Settings) -> str:
    """--format wins, then the -o extension, then the config file."""
    if explicit:
        return explicit
    if output:
        fmt = EXTENSION_FORMAT_MAP.get(Path(output).suffix.lower())
        if fmt is not None:
            return fmt.value
    return settings.output


def write_output(content: str, output: Optional[str]) -> None:
    if output is None:
        click.echo(content)
        return
    Path(output).write_text(content, encoding="utf-8")
    click.echo(f"📄 Report written to {output}", err=True)


def _read_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log progress to stderr")
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """Preview code fixes and find duplicated code fragments."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    settings = load_settings(Path.cwd())
    # Validated settings stand in for the raw [fixlens] table
    ctx.obj = {"config": asdict(settings), "settings": settings}


@main.command()
@click.argument("original", type=click.Path(exists=True, dir_okay=False))
@click.argument("fixed", type=click.Path(exists=True, dir_okay=False))
@click.option("--issue-type", default="", help="Issue type, e.g. security, style, design")
@click.option("--severity", default="", help="Issue severity, e.g. low, critical")
@click.option("--message", default="", help="Issue description")
@click.option("--line", type=int, default=None, help="Line the issue was reported on")
@click.option("--file-path", default=None, help="Path shown in the report (default: ORIGINAL)")
@click.option("--confidence", type=float, default=None, help="Confidence in the fix, 0.0-1.0")
@click.option("--diff-algorithm", type=click.Choice(ALGORITHMS), default="walk",
              help="walk (index-synchronised, default) or difflib")
@click.option("--context", "context_radius", type=int, default=3,
              help="Context lines around each change (default: 3)")
@click.option("--format", "output_format", type=click.Choice(FORMAT_CHOICES), default=None,
              help="Output format (default: from -o extension, else text)")
@click.option("-o", "--output", type=str, default=None,
              help="Output file path (e.g., preview.html, preview.json)")
@click.pass_context
def preview(
    ctx: click.Context,
    original: str,
    fixed: str,
    issue_type: str,
    severity: str,
    message: str,
    line: Optional[int],
    file_path: Optional[str],
    confidence: Optional[float],
    diff_algorithm: str,
    context_radius: int,
    output_format: Optional[str],
    output: Optional[str],
):
    """
    Preview replacing ORIGINAL with FIXED.

    Examples:

      fixlens preview app.py app_fixed.py --issue-type security --severity critical

      fixlens preview app.py app_fixed.py -o preview.html
    """
    config = ctx.obj["config"]
    settings = ctx.obj["settings"]

    diff_algorithm = merge_config_with_cli(config, diff_algorithm, "diff_algorithm", "walk")
    context_radius = merge_config_with_cli(config, context_radius, "context_radius", 3)
    fmt = resolve_format(output_format, output, settings)

    try:
        original_text = _read_text(original)
        fixed_text = _read_text(fixed)
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"❌ Could not read input: {e}", err=True)
        sys.exit(1)

    result = generate_preview(
        original_text,
        fixed_text,
        {"type": issue_type, "severity": severity, "message": message, "line": line},
        file_path=file_path or original,
        confidence=confidence,
        algorithm=diff_algorithm,
        context_radius=context_radius,
    )

    if result is None:
        click.echo("❌ Could not build a preview. Run with -v for details.", err=True)
        sys.exit(1)

    write_output(render_preview(result, fmt), output)


@main.command()
@click.argument("corpus", type=click.Path(exists=True, dir_okay=False))
@click.option("-t", "--threshold", type=float, default=0.8,
              help="Similarity threshold 0.0-1.0 (default: 0.80)")
@click.option("-m", "--min-occurrences", type=int, default=3,
              help="Minimum fragments per duplicate group (default: 3)")
@click.option("--grouping", type=click.Choice(STRATEGIES), default="seed",
              help="seed (compare with the first member, default) or connected")
@click.option("--max-fragments", type=int, default=100,
              help="Maximum fragments to compare (default: 100)")
@click.option("--target", type=str, default=None,
              help="List the top duplicates of this file instead of grouping")
@click.option("--format", "output_format", type=click.Choice(FORMAT_CHOICES), default=None,
              help="Output format (default: from -o extension, else text)")
@click.option("-o", "--output", type=str, default=None,
              help="Output file path (e.g., report.md, report.html)")
@click.pass_context
def duplicates(
    ctx: click.Context,
    corpus: str,
    threshold: float,
    min_occurrences: int,
    grouping: str,
    max_fragments: int,
    target: Optional[str],
    output_format: Optional[str],
    output: Optional[str],
):
    """
    Find duplicated fragments in CORPUS, a JSON export of search results.

    Examples:

      fixlens duplicates results.json -t 0.9 -m 2

      fixlens duplicates results.json --target src/utils.py
    """
    config = ctx.obj["config"]
    settings = ctx.obj["settings"]

    threshold = merge_config_with_cli(config, threshold, "threshold", 0.8)
    min_occurrences = merge_config_with_cli(config, min_occurrences, "min_occurrences", 3)
    grouping = merge_config_with_cli(config, grouping, "grouping", "seed")
    max_fragments = merge_config_with_cli(config, max_fragments, "max_fragments", 100)
    fmt = resolve_format(output_format, output, settings)

    try:
        fragments = load_corpus(Path(corpus))
    except (OSError, ValueError) as e:
        click.echo(f"❌ Could not load corpus: {e}", err=True)
        sys.exit(1)

    if target is not None:
        matches = find_duplicates(fragments, target)
        if not matches:
            click.echo(f"✨ No duplicates of {target} found.")
            return
        click.echo(f"🔍 Top {len(matches)} duplicates of {target}:")
        for fragment in matches:
            score = f" ({fragment.similarity:.0%})" if fragment.similarity is not None else ""
            click.echo(f"   • {fragment.file_path}{score}: {fragment.preview(50)}")
        return

    report = find_similar_code(
        fragments,
        min_similarity=threshold,
        min_occurrences=min_occurrences,
        strategy=grouping,
        max_fragments=max_fragments,
    )

    if not report.suggestions and output is None and fmt == "text":
        click.echo("✨ No duplicated code found above threshold.")
        return

    write_output(report_similarity(report, fmt, threshold=threshold), output)


if __name__ == "__main__":
    main()
