"""
Post-Processing Module for the Invoice Scan pipeline.

This module provides functionality for:
    - Amount and date normalization
    - Vendor-scoped cost corrections
    - Confidence scoring
    - Warning generation

Author: ML Engineering Team
"""

# normalizers first: the extraction package imports it during its own init
from .normalizers import AmountNormalizer, DateNormalizer, ZERO
from .corrections import SwapCorrector
from .scoring import ConfidenceScorer
from .warnings import WarningGenerator
from .processor import PostProcessor

__all__ = [
    'AmountNormalizer',
    'DateNormalizer',
    'ZERO',
    'SwapCorrector',
    'ConfidenceScorer',
    'WarningGenerator',
    'PostProcessor',
]
