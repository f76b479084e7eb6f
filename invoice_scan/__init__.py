"""
Invoice Scan - warranty invoice field extraction.

Turns the OCR text of a scanned service invoice (optionally with the
original image and a vision-model payload) into a structured, scored
record ready to pre-fill a warranty claim.

Modules:
    - extraction: Canonical record, field rules and generic extractor
    - vendor: Line-item table parser for the service vendor
    - ocr_engine: Table-friendly Tesseract read of the source image
    - postprocessor: Normalizers, corrections, scoring and warnings
    - pipeline: Backend selection and fallback
    - utils: Logging, exceptions and helpers

Author: ML Engineering Team
"""

__version__ = "1.0.0"
