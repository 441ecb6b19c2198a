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
Report generator - formats previews and duplicate reports for output.

Supports text, markdown, json and html output formats. HTML output
escapes every interpolated value.
"""

from typing import List, Union
from enum import Enum
from datetime import datetime
import html
import json

from .clusterer import group_cohesion
from .models import Preview, SimilarityReport


class OutputFormat(Enum):
    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"
    HTML = "html"


# Extension to output format mapping for -o FILE.EXT
EXTENSION_FORMAT_MAP = {
    ".md": OutputFormat.MARKDOWN,
    ".html": OutputFormat.HTML,
    ".json": OutputFormat.JSON,
    ".txt": OutputFormat.TEXT,
}

# Max lines of code shown per fragment in text/markdown/html reports
MAX_CODE_LINES = 15


def _coerce_format(output_format: Union[OutputFormat, str]) -> OutputFormat:
    if isinstance(output_format, OutputFormat):
        return output_format
    try:
        return OutputFormat(str(output_format).lower())
    except ValueError:
        raise ValueError(f"Unknown format: {output_format}") from None


def _esc(value) -> str:
    """Escape &, <, >, double and single quotes."""
    return html.escape("" if value is None else str(value), quote=True)


def _percent(score: float) -> str:
    return f"{score:.0%}"


# ---------------------------------------------------------------------------
# Fix previews
# ---------------------------------------------------------------------------

def render_preview(
    preview: Preview,
    output_format: Union[OutputFormat, str] = OutputFormat.TEXT,
) -> str:
    """
    Render a fix preview.

    Args:
        preview: Preview to render
        output_format: text, markdown, json or html

    Returns:
        Formatted preview string
    """
    output_format = _coerce_format(output_format)

    if output_format == OutputFormat.TEXT:
        return _preview_text(preview)
    elif output_format == OutputFormat.MARKDOWN:
        return _preview_markdown(preview)
    elif output_format == OutputFormat.JSON:
        return json.dumps(preview.to_dict(), indent=2)
    elif output_format == OutputFormat.HTML:
        return _preview_html(preview)
    else:
        raise ValueError(f"Unknown format: {output_format}")


def _preview_text(preview: Preview) -> str:
    """Plain text, one section per aspect."""
    lines = []
    lines.append(f"Fix Preview for {preview.file_path}")
    lines.append(f"Issue: {preview.issue.type} - {preview.issue.message}")
    lines.append(f"Risk: {preview.risk.level} ({_percent(preview.risk.score)})")
    for factor in preview.risk.factors:
        lines.append(f"   • {factor}")
    if preview.confidence is not None:
        lines.append(f"Confidence: {_percent(preview.confidence)}")
    lines.append("")

    summary = preview.summary
    lines.append("Summary:")
    lines.append(f"  Lines added: {summary.lines_added}")
    lines.append(f"  Lines removed: {summary.lines_removed}")
    lines.append(f"  Total changes: {summary.total_changes}")
    lines.append("")

    lines.append("Diff:")
    lines.append(preview.diff.unified)

    return "\n".join(lines)


def _preview_markdown(preview: Preview) -> str:
    """Markdown, suitable for pull request comments."""
    lines = []
    lines.append(f"## Fix Preview: `{preview.file_path}`")
    lines.append("")
    lines.append(f"**Issue:** {preview.issue.type} - {preview.issue.message}  ")
    if preview.issue.line is not None:
        lines.append(f"**Line:** {preview.issue.line}  ")
    lines.append(f"**Risk:** {preview.risk.level} ({_percent(preview.risk.score)})")
    lines.append("")

    if preview.risk.factors:
        lines.append("### Risk Factors")
        lines.append("")
        for factor in preview.risk.factors:
            lines.append(f"- {factor}")
        lines.append("")

    summary = preview.summary
    lines.append("### Summary")
    lines.append("")
    lines.append("| Added | Removed | Modified | Total |")
    lines.append("|-------|---------|----------|-------|")
    lines.append(
        f"| {summary.lines_added} | {summary.lines_removed} | "
        f"{summary.lines_modified} | {summary.total_changes} |"
    )
    lines.append("")

    lines.append("### Diff")
    lines.append("")
    lines.append("```diff")
    lines.append(preview.diff.unified.rstrip("\n"))
    lines.append("```")
    lines.append("")

    return "\n".join(lines)


_PREVIEW_CSS = """
.fix-preview { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; }
.issue-info p { margin: 4px 0; }
.risk-low { color: #28a745; } .risk-medium { color: #fd7e14; } .risk-high { color: #dc3545; }
.diff { font-family: 'SF Mono', Monaco, 'Courier New', monospace; font-size: 0.85em;
    border: 1px solid #ddd; border-radius: 8px; overflow-x: auto; }
.diff-line { white-space: pre; padding: 0 8px; }
.diff-line.added { background: #e6ffed; } .diff-line.removed { background: #ffeef0; }
.line-num { display: inline-block; width: 4em; color: #666; user-select: none; }
"""


def _preview_html(preview: Preview) -> str:
    """Self-contained HTML fragment with embedded CSS."""
    risk = preview.risk
    level = _esc(risk.level)

    parts = []
    parts.append(f"<style>{_PREVIEW_CSS}</style>")
    parts.append('<div class="fix-preview">')
    parts.append(f"<h3>Fix Preview: {_esc(preview.file_path)}</h3>")
    parts.append('<div class="issue-info">')
    parts.append(
        f"<p><strong>Issue:</strong> {_esc(preview.issue.type)} - "
        f"{_esc(preview.issue.message)}</p>"
    )
    parts.append(
        f'<p><strong>Risk:</strong> <span class="risk-{level}">{level}</span> '
        f"({_percent(risk.score)})</p>"
    )
    if risk.factors:
        parts.append("<ul>")
        for factor in risk.factors:
            parts.append(f"<li>{_esc(factor)}</li>")
        parts.append("</ul>")
    parts.append("</div>")

    parts.append('<div class="diff">')
    for line in preview.diff.lines:
        parts.append(f'<div class="diff-line {_esc(line.kind)}">')
        parts.append(f'<span class="line-num">{line.line_number}</span>')
        parts.append(f'<span class="line-content">{_esc(line.prefix + line.content)}</span>')
        parts.append("</div>")
    parts.append("</div>")
    parts.append("</div>")

    return "".join(parts)


# ---------------------------------------------------------------------------
# Duplicate reports
# ---------------------------------------------------------------------------

def report_similarity(
    report: SimilarityReport,
    output_format: Union[OutputFormat, str] = OutputFormat.TEXT,
    threshold: float = 0.8,
) -> str:
    """
    Render a duplicate-detection report.

    Args:
        report: Result of find_similar_code
        output_format: text, markdown, json or html
        threshold: Similarity threshold used (for display)

    Returns:
        Formatted report string
    """
    output_format = _coerce_format(output_format)

    if output_format == OutputFormat.TEXT:
        return _similarity_text(report, threshold)
    elif output_format == OutputFormat.MARKDOWN:
        return _similarity_markdown(report, threshold)
    elif output_format == OutputFormat.JSON:
        return _similarity_json(report, threshold)
    elif output_format == OutputFormat.HTML:
        return _similarity_html(report, threshold)
    else:
        raise ValueError(f"Unknown format: {output_format}")


def _code_excerpt(content: str) -> List[str]:
    code_lines = content.split("\n")
    excerpt = code_lines[:MAX_CODE_LINES]
    if len(code_lines) > MAX_CODE_LINES:
        excerpt.append("...")
    return excerpt


def _similarity_text(report: SimilarityReport, threshold: float) -> str:
    """Plain text format with unicode decorations."""
    lines = []

    lines.append(f"🔍 Found {report.duplicates_found} duplicate groups "
                 f"({report.total_similar_groups} similar groups in total)")
    lines.append(f"   Threshold: {threshold:.0%}")
    lines.append("")

    for rank, (suggestion, group) in enumerate(zip(report.suggestions, report.groups), start=1):
        lines.append("━" * 70)
        lines.append(f"Suggestion #{rank}: {suggestion.type} | Impact {suggestion.impact}")
        lines.append(f"Files: {len(suggestion.files)} | Occurrences: {suggestion.occurrences} "
                     f"| Effort: {suggestion.estimated_effort}")
        lines.append("━" * 70)
        lines.append("")

        lines.append("📍 Similar Fragments:")
        for fragment in group:
            lines.append(f"   • {fragment.file_path}")
            lines.append(f"     └─ {fragment.preview(50)}")
        lines.append("")

        lines.append("📝 Pattern:")
        for code_line in _code_excerpt(suggestion.pattern):
            lines.append(f"   │ {code_line}")
        lines.append("")

    return "\n".join(lines)


def _similarity_markdown(report: SimilarityReport, threshold: float) -> str:
    """Markdown format for documentation."""
    lines = []

    lines.append("# Duplicate Code Report")
    lines.append("")
    lines.append(f"**Threshold:** {threshold:.0%}  ")
    lines.append(f"**Duplicate Groups:** {report.duplicates_found}  ")
    lines.append(f"**Similar Groups:** {report.total_similar_groups}")
    lines.append("")

    for rank, (suggestion, group) in enumerate(zip(report.suggestions, report.groups), start=1):
        lines.append(f"## {rank}. {suggestion.description}")
        lines.append("")
        lines.append(f"- **Impact:** {suggestion.impact}")
        lines.append(f"- **Occurrences:** {suggestion.occurrences}")
        lines.append(f"- **Effort:** {suggestion.estimated_effort}")
        lines.append(f"- **Cohesion:** {group_cohesion(group):.0%}")
        lines.append("")
        lines.append("| File | Preview |")
        lines.append("|------|---------|")
        for fragment in group:
            lines.append(f"| `{fragment.file_path}` | {fragment.preview(50)} |")
        lines.append("")
        lines.append("```")
        lines.append("\n".join(_code_excerpt(suggestion.pattern)))
        lines.append("```")
        lines.append("")
        lines.append("---")
        lines.append("")

    return "\n".join(lines)


def _similarity_json(report: SimilarityReport, threshold: float) -> str:
    """JSON format for programmatic use."""
    data = {
        "meta": {
            "threshold": threshold,
            "duplicates_found": report.duplicates_found,
            "total_similar_groups": report.total_similar_groups,
            "timestamp": datetime.now().isoformat(),
        },
        "suggestions": [s.to_dict() for s in report.suggestions],
        "groups": [
            {
                "threshold": group.threshold,
                "cohesion": round(group_cohesion(group), 4),
                "fragments": [
                    {
                        "file": fragment.file_path,
                        "preview": fragment.preview(80),
                        "similarity": fragment.similarity,
                    }
                    for fragment in group
                ],
            }
            for group in report.groups
        ],
    }
    return json.dumps(data, indent=2)


def _similarity_html(report: SimilarityReport, threshold: float) -> str:
    """Self-contained HTML page."""
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M")

    parts = []
    parts.append(f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Duplicate Code Report</title>
    <style>{_PREVIEW_CSS}
table {{ border-collapse: collapse; }} th, td {{ padding: 6px 10px; border-bottom: 1px solid #ddd; }}
pre {{ background: #f8f8f8; padding: 12px; border-radius: 8px; overflow-x: auto; }}
    </style>
</head>
<body>
<h1>Duplicate Code Report</h1>
<p>{report.duplicates_found} duplicate groups · {report.total_similar_groups} similar groups ·
threshold {threshold:.0%}</p>
""")

    for rank, (suggestion, group) in enumerate(zip(report.suggestions, report.groups), start=1):
        parts.append(f"""<section>
<h2>{rank}. {_esc(suggestion.description)}</h2>
<p>Impact {suggestion.impact} · {suggestion.occurrences} occurrences ·
effort {_esc(suggestion.estimated_effort)}</p>
<table>
<thead><tr><th>File</th><th>Preview</th></tr></thead>
<tbody>
""")
        for fragment in group:
            parts.append(
                f"<tr><td><code>{_esc(fragment.file_path)}</code></td>"
                f"<td>{_esc(fragment.preview(60))}</td></tr>\n"
            )
        parts.append("</tbody>\n</table>\n")
        parts.append(f"<pre><code>{_esc(chr(10).join(_code_excerpt(suggestion.pattern)))}</code></pre>\n")
        parts.append("</section>\n")

    parts.append(f"""<footer>Generated by <strong>fixlens</strong> on {timestamp}</footer>
</body>
</html>""")

    return "".join(parts)
