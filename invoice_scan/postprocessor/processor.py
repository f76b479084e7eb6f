"""
Main Post-Processor Module.

This module provides the PostProcessor class that runs every
post-extraction stage on a base record, in order:

    1. SwapCorrector     - vendor-scoped work/parts cost repair
    2. ConfidenceScorer  - weighted score over fields and text signals
    3. WarningGenerator  - rule-based caveats

Author: ML Engineering Team
"""

from typing import TYPE_CHECKING, Iterable, Optional

from invoice_scan.utils.logger import get_logger
from .corrections import SwapCorrector
from .scoring import ConfidenceScorer
from .warnings import WarningGenerator

if TYPE_CHECKING:
    from invoice_scan.extraction.extracted_invoice import ExtractedInvoice

logger = get_logger(__name__)


class PostProcessor:
    """
    Post-processor for extracted invoice records.

    Attributes:
        corrector: SwapCorrector instance
        scorer: ConfidenceScorer instance
        warning_generator: WarningGenerator instance

    Example:
        >>> processor = PostProcessor()
        >>> final = processor.process(base_record, ocr_text)
        >>> print(final.confidence, final.warnings)
    """

    def __init__(
        self,
        corrector: Optional[SwapCorrector] = None,
        scorer: Optional[ConfidenceScorer] = None,
        warning_generator: Optional[WarningGenerator] = None
    ) -> None:
        self.corrector = corrector or SwapCorrector()
        self.scorer = scorer or ConfidenceScorer()
        self.warning_generator = warning_generator or WarningGenerator()
        logger.debug("PostProcessor initialized")

    def process(
        self,
        record: 'ExtractedInvoice',
        raw_text: str,
        prior_warnings: Iterable[str] = ()
    ) -> 'ExtractedInvoice':
        """
        Run all stages on a base record.

        Args:
            record: Base record from one extraction backend.
            raw_text: OCR text of the document.
            prior_warnings: Warnings raised before post-processing (vendor
                reconciliation); they lead the final list.

        Returns:
            New record with confidence and warnings set. The base record
            is not modified.
        """
        corrected = self.corrector.correct(record)
        confidence = self.scorer.score(corrected, raw_text)

        scored = corrected.copy_with(confidence=confidence, warnings=[])
        warnings = list(prior_warnings) + self.warning_generator.warn(scored, raw_text)

        logger.info(
            f"Post-processing complete: confidence={confidence:.2f}, "
            f"{len(warnings)} warning(s)"
        )
        return scored.copy_with(warnings=warnings)
