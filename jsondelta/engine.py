"""Main comparison engine for jsondelta."""

from __future__ import annotations

import time
from typing import Any, Optional, Union

from . import aggregator
from .cache import DiffCache
from .canonicalizer import prepare_for_compare
from .differ import compute_diff
from .formatter import file_extension_for, format_diff, mime_type_for, resolve_format
from .logging import get_logger
from .models import (
    CompareError,
    CompareErrorType,
    CompareSettings,
    Comparison,
    DiffResult,
    EngineConfig,
    ExportArtifact,
    ExportFormat,
    DEFAULT_COMPARE_SETTINGS,
)
from .parser import load_document
from .result import Err, Ok, Result

logger = get_logger(__name__)

LEFT_DOCUMENT_ID = "left"
RIGHT_DOCUMENT_ID = "right"


class DiffEngine:
    """
    Orchestrates one comparison of two JSON texts:

    1. Format-before-compare pre-pass (optional)
    2. Parsing of the left and right documents
    3. Structural diffing (through a DiffCache when one is given)
    4. Aggregation into a DiffResult

    The engine holds no per-comparison state, so one instance can serve
    many comparisons.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        cache: Optional[DiffCache] = None
    ):
        """
        Initialize the engine.

        Args:
            config: Engine configuration (uses defaults if not provided)
            cache: Caller-owned cache of diff entries (no caching if omitted)
        """
        self.config = config or EngineConfig()
        self.cache = cache

    def compare(
        self,
        left_text: str,
        right_text: str,
        settings: Optional[CompareSettings] = None
    ) -> Result:
        """
        Compare two JSON texts.

        Args:
            left_text: The baseline document
            right_text: The document to compare against it
            settings: Comparison settings (defaults if not provided)

        Returns:
            Ok(Comparison) on success, Err(CompareError) when a document is
            rejected or the comparison cannot be carried out
        """
        settings = settings or DEFAULT_COMPARE_SETTINGS
        start_time = time.time()
        max_bytes = self.config.max_input_bytes

        left_text = prepare_for_compare(left_text, settings, max_bytes)
        right_text = prepare_for_compare(right_text, settings, max_bytes)

        left_result = load_document(left_text, LEFT_DOCUMENT_ID, max_bytes)
        if isinstance(left_result, Err):
            return self._rejected(CompareErrorType.LEFT_PARSE_ERROR, left_result.error)

        right_result = load_document(right_text, RIGHT_DOCUMENT_ID, max_bytes)
        if isinstance(right_result, Err):
            return self._rejected(CompareErrorType.RIGHT_PARSE_ERROR, right_result.error)

        left_document = left_result.value
        right_document = right_result.value

        try:
            result = self.compare_values(
                left_document.data,
                right_document.data,
                settings,
                left_document.id,
                right_document.id
            )
        except RecursionError:
            logger.error("diff_too_deep", left_size=left_document.size, right_size=right_document.size)
            return Err(CompareError(
                type=CompareErrorType.PROCESSING_ERROR,
                message="Documents are nested too deeply to compare",
            ))

        logger.debug(
            "diff_computed",
            result_id=result.id,
            duration_ms=int((time.time() - start_time) * 1000),
            **result.stats.to_dict()
        )
        return Ok(Comparison(
            left_document=left_document,
            right_document=right_document,
            result=result,
        ))

    def compare_values(
        self,
        left: Any,
        right: Any,
        settings: Optional[CompareSettings] = None,
        left_document_id: str = LEFT_DOCUMENT_ID,
        right_document_id: str = RIGHT_DOCUMENT_ID
    ) -> DiffResult:
        """Diff two already parsed values and aggregate the entries."""
        settings = settings or DEFAULT_COMPARE_SETTINGS

        if self.cache is not None:
            hits = self.cache.hits
            entries = self.cache.get_or_compute(left, right, settings, compute_diff)
            if self.cache.hits > hits:
                logger.debug("diff_cache_hit", cache_size=self.cache.curr_size)
        else:
            entries = compute_diff(left, right, settings)

        return aggregator.from_entries(
            entries, left_document_id, right_document_id, settings
        )

    def export(
        self,
        result: DiffResult,
        fmt: Union[ExportFormat, str, None] = None,
        filename: Optional[str] = None
    ) -> Result:
        """
        Render a diff result for delivery as a file or clipboard content.

        Args:
            result: The diff result to export
            fmt: Export format (the configured default if not provided)
            filename: Target file name; ``diff-<epoch ms>.<ext>`` if omitted

        Returns:
            Ok(ExportArtifact) or Err(ExportError) for an unsupported format
        """
        resolved = resolve_format(fmt or self.config.default_export)
        if isinstance(resolved, Err):
            logger.warning("export_unsupported_format", format=str(fmt))
            return resolved

        export_format = resolved.value
        content = format_diff(result, export_format).value
        extension = file_extension_for(export_format)

        return Ok(ExportArtifact(
            content=content,
            filename=filename or f"diff-{int(time.time() * 1000)}.{extension}",
            mime_type=mime_type_for(export_format),
            format=export_format,
        ))

    def _rejected(self, error_type: CompareErrorType, error) -> Err:
        logger.info(
            "document_rejected",
            side=error_type.value,
            error_type=error.type.value,
            error=error.message,
        )
        return Err(CompareError(type=error_type, message=error.message, error=error))


def compare(
    left_text: str,
    right_text: str,
    settings: Optional[CompareSettings] = None,
    config: Optional[EngineConfig] = None
) -> Result:
    """
    Convenience function to compare two JSON texts.

    Args:
        left_text: The baseline document
        right_text: The document to compare against it
        settings: Comparison settings
        config: Optional engine configuration

    Returns:
        Ok(Comparison) or Err(CompareError)
    """
    engine = DiffEngine(config)
    return engine.compare(left_text, right_text, settings)
