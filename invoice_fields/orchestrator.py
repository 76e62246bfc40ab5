"""
Extraction Orchestrator Module.

This module provides the InvoiceFieldExtractor class, the single entry
point of the engine. It wires text acquisition, normalization, pattern
extraction, the optional completion service and the per-field merge.

Pipeline:
    START -> ACQUIRED -> NORMALIZED -> AI_ATTEMPTED | SKIPPED_AI
          -> MERGED -> DONE

The orchestrator has no failure state: extract() always returns an
ExtractedInvoiceFields record, partially filled if a stage fails.

Usage:
    from invoice_fields.orchestrator import InvoiceFieldExtractor

    extractor = InvoiceFieldExtractor()
    record = extractor.extract_file("invoices/AWS-INV-2024-0099.pdf")
    print(record.to_json())

Author: ML Engineering Team
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from config import get_config
from invoice_fields.utils.logger import get_logger
from invoice_fields.utils.exceptions import CompletionServiceError, InvoiceExtractionError
from invoice_fields.input_handler import ExtractionInput, InputHandler, TextNormalizer
from invoice_fields.pattern_extraction import PatternExtractor
from invoice_fields.postprocessor import FieldMerger
from invoice_fields.model_inference import (
    CompletionClient,
    ExtractedInvoiceFields,
    FieldResult,
    ModelFieldExtractor,
    build_completion_client,
)

# Initialize module logger
logger = get_logger(__name__)


class ExtractionStage(Enum):
    """Stages of a single extraction call."""
    START = "start"
    ACQUIRED = "acquired"
    NORMALIZED = "normalized"
    AI_ATTEMPTED = "ai_attempted"
    SKIPPED_AI = "skipped_ai"
    MERGED = "merged"
    DONE = "done"


class InvoiceFieldExtractor:
    """
    Best-effort invoice field extraction.

    Every collaborator is injectable; defaults are built from the
    configuration. The instance keeps no state between calls.

    Attributes:
        input_handler: Text acquisition
        normalizer: Text normalizer
        pattern_extractor: Rule-based candidate extractors
        model_extractor: Completion-service extractor, or None
        merger: Per-field merge of model guesses and pattern results

    Example:
        >>> extractor = InvoiceFieldExtractor(use_model=False)
        >>> record = extractor.extract(
        ...     ExtractionInput(b"Total: $1,234.56", "text/plain", "invoice.txt")
        ... )
        >>> record.amount
        Decimal('1234.56')
    """

    def __init__(
        self,
        input_handler: Optional[InputHandler] = None,
        normalizer: Optional[TextNormalizer] = None,
        pattern_extractor: Optional[PatternExtractor] = None,
        completion_client: Optional[CompletionClient] = None,
        use_model: bool = True,
        merger: Optional[FieldMerger] = None
    ) -> None:
        """
        Initialize the extractor.

        Args:
            input_handler: Text acquisition. Built from config if None.
            normalizer: Text normalizer. Built if None.
            pattern_extractor: Pattern extractors. Built if None.
            completion_client: Completion service client. Built from
                              config if None and use_model is True.
            use_model: Whether the completion service may be called.
            merger: Field merger. Built if None.
        """
        self.input_handler = input_handler or InputHandler()
        self.normalizer = normalizer or TextNormalizer()
        self.pattern_extractor = pattern_extractor or PatternExtractor()
        self.merger = merger or FieldMerger()
        self.min_text_length = get_config("completion.min_text_length", 50)

        self.model_extractor: Optional[ModelFieldExtractor] = None
        if use_model:
            client = completion_client or self._build_client()
            if client is not None:
                self.model_extractor = ModelFieldExtractor(client)

        logger.info(
            f"InvoiceFieldExtractor initialized "
            f"(completion service: {'on' if self.model_extractor else 'off'})"
        )

    @staticmethod
    def _build_client() -> Optional[CompletionClient]:
        try:
            return build_completion_client()
        except InvoiceExtractionError as e:
            logger.warning(f"Completion service unavailable, using pattern extraction only: {e}")
        except Exception as e:
            logger.warning(f"Could not create completion client, using pattern extraction only: {e}")
        return None

    def extract(self, inp: ExtractionInput) -> ExtractedInvoiceFields:
        """
        Extract invoice fields from one upload.

        Args:
            inp: Uploaded file.

        Returns:
            ExtractedInvoiceFields. Never raises; fields that could not be
            found are left unset.
        """
        record = ExtractedInvoiceFields()
        pattern_results: Optional[Dict[str, FieldResult]] = None
        stage = ExtractionStage.START
        self._log_stage(stage, inp.original_filename)

        try:
            raw_text = self.input_handler.acquire(inp)
            stage = ExtractionStage.ACQUIRED
            self._log_stage(stage, inp.original_filename)

            text = self.normalizer.normalize(raw_text, inp.original_filename)
            stage = ExtractionStage.NORMALIZED
            self._log_stage(stage, inp.original_filename)

            pattern_results = self.pattern_extractor.extract_all(text, inp.original_filename)

            model_fields = None
            if self._should_ask_model(text):
                stage = ExtractionStage.AI_ATTEMPTED
                model_fields = self._ask_model(text, inp.original_filename)
            else:
                stage = ExtractionStage.SKIPPED_AI
            self._log_stage(stage, inp.original_filename)

            record = self.merger.merge(
                model_fields,
                pattern_results,
                category_fallback=lambda provider: self.pattern_extractor.extract_category(text, provider)
            )
            stage = ExtractionStage.MERGED
            self._log_stage(stage, inp.original_filename)

        except Exception as e:
            logger.exception(
                f"Unexpected error at stage {stage.value} for {inp.original_filename}, "
                f"returning partial result: {e}"
            )
            if pattern_results is not None:
                record = ExtractedInvoiceFields()
                for field_name, result in pattern_results.items():
                    record.apply(field_name, result)

        self._log_stage(ExtractionStage.DONE, inp.original_filename)
        logger.info(f"Extracted from {inp.original_filename}: {record}")
        return record

    def extract_file(self, filepath: Union[str, Path]) -> ExtractedInvoiceFields:
        """
        Extract invoice fields from a file on disk.

        A file that cannot be read is handled like an upload without a
        buffer.
        """
        try:
            inp = ExtractionInput.from_path(filepath)
        except OSError as e:
            logger.warning(f"Could not read {filepath}: {e}")
            inp = ExtractionInput(None, "application/octet-stream", Path(filepath).name)

        return self.extract(inp)

    def _should_ask_model(self, text: str) -> bool:
        if self.model_extractor is None:
            logger.debug("Completion service not configured, skipping")
            return False

        if len(text) <= self.min_text_length:
            logger.debug(f"Text too short for the completion service ({len(text)} chars), skipping")
            return False

        return True

    def _ask_model(self, text: str, filename: str) -> Optional[Dict[str, Any]]:
        """
        Ask the completion service for field guesses.

        Any failure of the call discards only the model contribution.

        Returns:
            Raw guesses, or None when the call failed.
        """
        try:
            return self.model_extractor.extract(text, filename)
        except CompletionServiceError as e:
            logger.warning(f"Completion service failed, using pattern extraction only: {e}")
        except Exception as e:
            logger.warning(
                f"Completion service raised {type(e).__name__}, "
                f"using pattern extraction only: {e}"
            )
        return None

    @staticmethod
    def _log_stage(stage: ExtractionStage, filename: str) -> None:
        logger.debug(f"[{filename}] stage -> {stage.name}")
