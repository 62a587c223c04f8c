"""Export of diff results as JSON, Markdown, HTML or RFC 6902 JSON Patch."""

from __future__ import annotations

import html
import json
import re
from typing import Any, Union

from .models import DiffResult, DiffType, ExportError, ExportFormat
from .result import Err, Ok, Result

MIME_TYPES = {
    ExportFormat.JSON: "application/json",
    ExportFormat.MARKDOWN: "text/markdown",
    ExportFormat.HTML: "text/html",
    ExportFormat.JSON_PATCH: "application/json-patch+json",
}

FILE_EXTENSIONS = {
    ExportFormat.JSON: "json",
    ExportFormat.MARKDOWN: "md",
    ExportFormat.HTML: "html",
    ExportFormat.JSON_PATCH: "json",
}

_TITLES = {
    DiffType.ADDED: "➕ Added",
    DiffType.REMOVED: "➖ Removed",
    DiffType.MODIFIED: "✏️ Modified",
}

_HTML_STYLE = """\
    body { font-family: system-ui, sans-serif; max-width: 1200px; margin: 0 auto; padding: 20px; }
    h1 { color: #333; }
    .stats { background: #f5f5f5; padding: 15px; border-radius: 5px; margin: 20px 0; }
    .stat { margin: 5px 0; }
    .change { margin: 20px 0; padding: 15px; border-radius: 5px; }
    .added { background: #e6ffe6; border-left: 4px solid #50fa7b; }
    .removed { background: #ffe6e6; border-left: 4px solid #ff5555; }
    .modified { background: #fff3e6; border-left: 4px solid #ffb86c; }
    .path { font-family: monospace; font-weight: bold; }
    pre { background: #282a36; color: #f8f8f2; padding: 10px; border-radius: 3px; overflow-x: auto; }"""


def resolve_format(fmt: Union[ExportFormat, str]) -> Result:
    """Accept an ExportFormat or its string value."""
    if isinstance(fmt, ExportFormat):
        return Ok(fmt)
    try:
        return Ok(ExportFormat(fmt))
    except ValueError:
        return Err(ExportError.unsupported_format(fmt))


def mime_type_for(fmt: ExportFormat) -> str:
    return MIME_TYPES[fmt]


def file_extension_for(fmt: ExportFormat) -> str:
    return FILE_EXTENSIONS[fmt]


def format_diff(result: DiffResult, fmt: Union[ExportFormat, str]) -> Result:
    """
    Render a diff result in an export format.

    Args:
        result: The diff result to render
        fmt: Target format (ExportFormat or "json", "markdown", "html", "json-patch")

    Returns:
        Ok(text) or Err(ExportError) for an unsupported target
    """
    resolved = resolve_format(fmt)
    if isinstance(resolved, Err):
        return resolved

    renderers = {
        ExportFormat.JSON: format_as_json,
        ExportFormat.MARKDOWN: format_as_markdown,
        ExportFormat.HTML: format_as_html,
        ExportFormat.JSON_PATCH: format_as_json_patch,
    }
    return Ok(renderers[resolved.value](result))


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _code_block(value: Any) -> list[str]:
    """Fenced json block; the fence outgrows any backtick run in the value."""
    text = _dump(value)
    longest = max((len(run) for run in re.findall(r"`+", text)), default=0)
    fence = "`" * max(3, longest + 1)
    return [fence + "json", text, fence]


def format_as_json(result: DiffResult) -> str:
    return _dump(result.to_dict())


def _statistics(result: DiffResult) -> list[tuple[str, int]]:
    stats = result.stats
    return [
        ("Added", stats.added),
        ("Removed", stats.removed),
        ("Modified", stats.modified),
        ("Unchanged", stats.unchanged),
        ("Total", stats.total),
    ]


def format_as_markdown(result: DiffResult) -> str:
    lines = ["# JSON Diff Report", "", "## Statistics", ""]
    for label, count in _statistics(result):
        lines.append(f"- **{label}**: {count}")
    lines.extend(["", "## Changes", ""])

    for entry in result.entries:
        if entry.type == DiffType.UNCHANGED:
            continue

        lines.append(f"### {_TITLES[entry.type]}: `{entry.path.to_display_string()}`")
        lines.append("")

        if entry.type == DiffType.MODIFIED:
            lines.append("**Before:**")
            lines.extend(_code_block(entry.left_value))
            lines.extend(["", "**After:**"])
            lines.extend(_code_block(entry.right_value))
            lines.append("")
        else:
            value = entry.right_value if entry.type == DiffType.ADDED else entry.left_value
            lines.extend(_code_block(value))
            lines.append("")

    return "\n".join(lines)


def format_as_html(result: DiffResult) -> str:
    lines = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '  <meta charset="UTF-8">',
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
        "  <title>JSON Diff Report</title>",
        "  <style>",
        _HTML_STYLE,
        "  </style>",
        "</head>",
        "<body>",
        "  <h1>JSON Diff Report</h1>",
        '  <div class="stats">',
        "    <h2>Statistics</h2>",
    ]
    for label, count in _statistics(result):
        lines.append(f'    <div class="stat">{label}: <strong>{count}</strong></div>')
    lines.extend(["  </div>", "  <h2>Changes</h2>"])

    for entry in result.entries:
        if entry.type == DiffType.UNCHANGED:
            continue

        path = html.escape(entry.path.to_display_string())
        lines.append(f'  <div class="change {entry.type.value}">')
        lines.append(f'    <div class="path">{_TITLES[entry.type]}: {path}</div>')

        if entry.type == DiffType.MODIFIED:
            lines.append("    <strong>Before:</strong>")
            lines.append(f"    <pre>{html.escape(_dump(entry.left_value))}</pre>")
            lines.append("    <strong>After:</strong>")
            lines.append(f"    <pre>{html.escape(_dump(entry.right_value))}</pre>")
        else:
            value = entry.right_value if entry.type == DiffType.ADDED else entry.left_value
            lines.append(f"    <pre>{html.escape(_dump(value))}</pre>")
        lines.append("  </div>")

    lines.extend(["</body>", "</html>"])
    return "\n".join(lines)


def to_json_patch(result: DiffResult) -> list[dict]:
    """
    Map entries to RFC 6902 operations.

    Paths refer to positions in the left document. Array indices are not
    renumbered after earlier add/remove operations, so applying the patch
    in sequence does not always rebuild the right document.
    """
    operations = []
    for entry in result.entries:
        path = entry.path.to_pointer_string()
        if entry.type == DiffType.ADDED:
            operations.append({"op": "add", "path": path, "value": entry.right_value})
        elif entry.type == DiffType.REMOVED:
            operations.append({"op": "remove", "path": path})
        elif entry.type == DiffType.MODIFIED:
            operations.append({"op": "replace", "path": path, "value": entry.right_value})
    return operations


def format_as_json_patch(result: DiffResult) -> str:
    return _dump(to_json_patch(result))
