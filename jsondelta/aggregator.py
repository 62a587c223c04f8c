"""Builds DiffResult records from entry lists and derives filtered views."""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, Optional

from .models import (
    CompareSettings,
    DiffEntry,
    DiffMetadata,
    DiffResult,
    DiffStats,
    DiffType,
    DEFAULT_COMPARE_SETTINGS,
)
from .path import JsonPath


def from_entries(
    entries: Iterable[DiffEntry],
    left_document_id: str,
    right_document_id: str,
    settings: Optional[CompareSettings] = None,
    result_id: Optional[str] = None
) -> DiffResult:
    """
    Wrap a complete entry list into a DiffResult.

    Args:
        entries: Entries in traversal order
        left_document_id: Identifier of the left document
        right_document_id: Identifier of the right document
        settings: Settings the entries were computed with
        result_id: Identifier to use; a UUID4 is generated if omitted

    Returns:
        A DiffResult whose stats are derived from ``entries``
    """
    entries = tuple(entries)
    metadata = DiffMetadata(
        left_document_id=left_document_id,
        right_document_id=right_document_id,
        created_at=datetime.now(timezone.utc),
        settings=settings or DEFAULT_COMPARE_SETTINGS,
    )
    return DiffResult(
        id=result_id or str(uuid.uuid4()),
        entries=entries,
        stats=DiffStats.from_entries(entries),
        metadata=metadata,
    )


def has_changes(result: DiffResult) -> bool:
    return result.stats.changes > 0


def entries_of_type(result: DiffResult, *types: DiffType) -> tuple:
    return tuple(entry for entry in result.entries if entry.type in types)


def _with_entries(result: DiffResult, entries: Iterable[DiffEntry]) -> DiffResult:
    entries = tuple(entries)
    return replace(result, entries=entries, stats=DiffStats.from_entries(entries))


def filter_by_type(result: DiffResult, *types: DiffType) -> DiffResult:
    """Return a new result holding only entries of the given types."""
    return _with_entries(result, entries_of_type(result, *types))


def filter_by_path(result: DiffResult, prefix: JsonPath) -> DiffResult:
    """Return a new result holding only entries at or under ``prefix``."""
    return _with_entries(
        result,
        (entry for entry in result.entries if entry.path.is_at_or_under(prefix))
    )


def without_unchanged(result: DiffResult) -> DiffResult:
    return filter_by_type(result, DiffType.ADDED, DiffType.REMOVED, DiffType.MODIFIED)
