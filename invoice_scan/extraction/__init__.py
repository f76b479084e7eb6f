"""
Extraction Module for the Invoice Scan pipeline.

This module turns raw invoice text into the canonical ExtractedInvoice
record.

Features:
    - Read-only catalog of field rules with ordered capture groups
    - Generic regex extractor with per-field defaults
    - Boundary defaulting for vision-model JSON payloads

Author: ML Engineering Team
"""

from .extracted_invoice import ExtractedInvoice, check_payload
from .patterns import FieldRule, FieldPatternCatalog, default_catalog
from .extractor import GenericExtractor

__all__ = [
    'ExtractedInvoice',
    'check_payload',
    'FieldRule',
    'FieldPatternCatalog',
    'default_catalog',
    'GenericExtractor',
]
