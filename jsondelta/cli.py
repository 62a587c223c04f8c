"""Command line interface: ``jsondelta diff`` and ``jsondelta format``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from . import aggregator
from .canonicalizer import canonicalize
from .engine import DiffEngine
from .exceptions import ConfigError
from .logging import configure_logging
from .models import (
    CompareErrorType,
    CompareSettings,
    DiffResult,
    DiffType,
    EngineConfig,
    FormatSettings,
    LogLevel,
)
from .parser import parse, select, stringify
from .result import Err
from .settings import load_settings, merge_overrides

EXIT_NO_CHANGES = 0
EXIT_CHANGES = 1
EXIT_ERROR = 2

SUMMARY_MARKERS = {
    DiffType.ADDED: "+",
    DiffType.REMOVED: "-",
    DiffType.MODIFIED: "~",
    DiffType.UNCHANGED: "=",
}


def _indent(value: str):
    return "\t" if value == "tab" else int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsondelta",
        description="Structural, semantically-aware JSON diff",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  jsondelta diff old.json new.json
  jsondelta diff old.json new.json --ignore-array-order --key-field id
  jsondelta diff old.json new.json --export json-patch -o patch.json
  jsondelta format payload.json --indent 4 --sort-keys
        """
    )
    parser.add_argument("--log-level", type=str.upper, default=LogLevel.WARN.value,
                        choices=[level.value for level in LogLevel],
                        help="Log level for stderr output (default: WARN)")
    parser.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines")

    subparsers = parser.add_subparsers(dest="command", required=True)

    diff = subparsers.add_parser("diff", help="Compare two JSON documents")
    diff.add_argument("left", help="Left/baseline JSON file ('-' for stdin)")
    diff.add_argument("right", help="Right JSON file ('-' for stdin)")
    diff.add_argument("-s", "--settings", help="YAML/JSON settings file")
    diff.add_argument("--ignore-array-order", action="store_true", default=None,
                      help="Match array elements regardless of position")
    diff.add_argument("--key-field", help="Match array objects by this field (with --ignore-array-order)")
    diff.add_argument("--float-tolerance", type=float, help="Numbers within this distance are equal")
    diff.add_argument("--null-as-undefined", dest="treat_null_as_undefined",
                      action="store_true", default=None,
                      help="Treat null and missing keys as equal")
    diff.add_argument("--format-before-compare", action="store_true", default=None,
                      help="Canonicalize both documents before comparing")
    diff.add_argument("--indent", type=_indent, choices=[2, 4, "\t"], metavar="{2,4,tab}",
                      help="Indent for canonicalization (2, 4 or tab)")
    diff.add_argument("--sort-keys", action="store_true", default=None, help="Sort object keys when canonicalizing")
    diff.add_argument("--select", help="JSONPath selecting the sub-tree of both documents to compare")
    diff.add_argument("-e", "--export", default="summary",
                      choices=["summary", "json", "markdown", "html", "json-patch"],
                      help="Output format (default: summary)")
    diff.add_argument("-o", "--output", help="Write output to this file instead of stdout")
    diff.add_argument("--show-unchanged", action="store_true", help="List unchanged entries in the summary")

    fmt = subparsers.add_parser("format", help="Canonicalize a JSON document")
    fmt.add_argument("file", help="JSON file ('-' for stdin)")
    fmt.add_argument("--indent", type=_indent, default=2, choices=[2, 4, "\t"],
                     metavar="{2,4,tab}", help="2, 4 or tab")
    fmt.add_argument("--sort-keys", action="store_true", help="Sort object keys recursively")
    fmt.add_argument("-o", "--output", help="Write output to this file instead of stdout")

    return parser


def _read(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _write(content: str, output: Optional[str]):
    if output:
        Path(output).write_text(content + "\n", encoding="utf-8")
    else:
        print(content)


def _error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return EXIT_ERROR


def format_summary(result: DiffResult, show_unchanged: bool = False) -> str:
    """One line per entry followed by the statistics line."""
    lines = []
    for entry in result.entries:
        if entry.type == DiffType.UNCHANGED and not show_unchanged:
            continue
        marker = SUMMARY_MARKERS[entry.type]
        path = entry.path.to_display_string()
        if entry.type == DiffType.ADDED:
            lines.append(f"{marker} {path}: {stringify(entry.right_value)}")
        elif entry.type == DiffType.REMOVED:
            lines.append(f"{marker} {path}: {stringify(entry.left_value)}")
        else:
            lines.append(
                f"{marker} {path}: {stringify(entry.left_value)} -> {stringify(entry.right_value)}"
            )

    stats = result.stats
    lines.append(
        f"{stats.added} added, {stats.removed} removed, "
        f"{stats.modified} modified, {stats.unchanged} unchanged"
    )
    return "\n".join(lines)


def _resolve_settings(args) -> CompareSettings:
    base = load_settings(args.settings) if args.settings else CompareSettings()
    return merge_overrides(
        base,
        ignore_array_order=args.ignore_array_order,
        key_field=args.key_field,
        float_tolerance=args.float_tolerance,
        treat_null_as_undefined=args.treat_null_as_undefined,
        format_before_compare=args.format_before_compare,
        indent=args.indent,
        sort_keys=args.sort_keys,
    )


def _select_texts(left_text: str, right_text: str, expression: str):
    """Replace both texts by the JSON of their sub-tree matching ``expression``."""
    texts = []
    for side, text in (("left", left_text), ("right", right_text)):
        parsed = parse(text)
        if isinstance(parsed, Err):
            # Leave the text alone; the engine reports the parse error.
            texts.append(text)
            continue
        selected = select(parsed.value, expression)
        if isinstance(selected, Err):
            raise ConfigError(f"{side}: {selected.error.message}")
        texts.append(stringify(selected.value))
    return texts


def run_diff(args, config: EngineConfig) -> int:
    try:
        settings = _resolve_settings(args)
        left_text = _read(args.left)
        right_text = _read(args.right)
        if args.select:
            left_text, right_text = _select_texts(left_text, right_text, args.select)
    except ConfigError as e:
        return _error(e.message)
    except OSError as e:
        return _error(str(e))

    engine = DiffEngine(config)
    outcome = engine.compare(left_text, right_text, settings)
    if isinstance(outcome, Err):
        error = outcome.error
        if error.type == CompareErrorType.LEFT_PARSE_ERROR:
            return _error(f"left document: {error.message}")
        if error.type == CompareErrorType.RIGHT_PARSE_ERROR:
            return _error(f"right document: {error.message}")
        return _error(error.message)

    result = outcome.value.result
    if args.export == "summary":
        content = format_summary(result, args.show_unchanged)
    else:
        artifact = engine.export(result, args.export)
        if isinstance(artifact, Err):
            return _error(artifact.error.message)
        content = artifact.value.content

    _write(content, args.output)
    return EXIT_CHANGES if aggregator.has_changes(result) else EXIT_NO_CHANGES


def run_format(args) -> int:
    try:
        text = _read(args.file)
    except OSError as e:
        return _error(str(e))

    result = canonicalize(text, FormatSettings(indent=args.indent, sort_keys=args.sort_keys))
    if isinstance(result, Err):
        return _error(result.error.message)

    _write(result.value, args.output)
    return EXIT_NO_CHANGES


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = EngineConfig(log_level=LogLevel(args.log_level))
    configure_logging(config.log_level.value, json_output=args.log_json)

    if args.command == "diff":
        return run_diff(args, config)
    return run_format(args)


if __name__ == "__main__":
    sys.exit(main())
