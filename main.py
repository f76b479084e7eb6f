#!/usr/bin/env python3
"""
Warranty Invoice Scan - Main Entry Point.

Command-line interface to the invoice extraction pipeline. Reads the OCR
text of one invoice (plus, optionally, the vision-model payload and the
original image) and prints or writes the resulting record as JSON.

Usage:
    Command Line:
        python main.py --text ocr.txt
        python main.py --text ocr.txt --source scan.jpg --output result.json
        python main.py --text ocr.txt --vision payload.json --debug

    Python:
        from main import run_extraction
        record = run_extraction("ocr.txt", source_path="scan.jpg")

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from config import ConfigurationManager
from invoice_scan.utils.logger import get_logger, set_debug, setup_logger_from_config
from invoice_scan.utils.helpers import ensure_directory, validate_file_exists


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="invoice-scan",
        description="Warranty invoice field extraction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Generic invoice:
        invoice-scan --text ocr.txt

    Vendor invoice with the original scan:
        invoice-scan --text ocr.txt --source scan.jpg --output result.json

    With a vision-model payload:
        invoice-scan --text ocr.txt --vision payload.json
        """
    )

    parser.add_argument(
        "--text", "-t",
        type=str,
        required=True,
        help="File with the OCR text of the invoice"
    )

    parser.add_argument(
        "--vision", "-v",
        type=str,
        default=None,
        help="JSON file with the vision-model payload"
    )

    parser.add_argument(
        "--source", "-s",
        type=str,
        default=None,
        help="Original invoice image (used for vendor table parsing)"
    )

    parser.add_argument(
        "--ocr-confidence",
        type=float,
        default=None,
        help="Confidence reported by the OCR engine (0-100)"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write the result JSON to this file instead of stdout"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)
    logger = setup_logger_from_config()

    if args.debug:
        set_debug()

    logger.info("=" * 60)
    logger.info("WARRANTY INVOICE SCAN")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Text: {args.text}")

    return config


def validate_inputs(args: argparse.Namespace) -> None:
    """
    Check that every given input file exists.

    Raises:
        FileNotFoundError: If an input file is missing.
    """
    for path in (args.text, args.vision, args.source):
        if path is not None and not validate_file_exists(path):
            raise FileNotFoundError(f"Input file not found: {path}")


def run_extraction(
    text_path: str,
    vision_path: Optional[str] = None,
    source_path: Optional[str] = None,
    ocr_confidence: Optional[float] = None,
    config_path: Optional[str] = None
) -> Dict[str, Any]:
    """
    Run the extraction pipeline on files.

    Args:
        text_path: File with the OCR text.
        vision_path: Optional file with the vision-model JSON payload.
        source_path: Optional original image.
        ocr_confidence: Optional OCR engine confidence (0-100).
        config_path: Optional custom configuration file path.

    Returns:
        Extracted record as a camelCase dictionary.

    Example:
        >>> record = run_extraction("ocr.txt")
        >>> print(record['invoiceNumber'], record['confidence'])
    """
    logger = get_logger(__name__)
    ConfigurationManager(config_path)

    from invoice_scan.pipeline import InvoicePipeline

    text = Path(text_path).read_text(encoding='utf-8')
    vision_json = None
    if vision_path:
        vision_json = Path(vision_path).read_text(encoding='utf-8')

    pipeline = InvoicePipeline()
    record = pipeline.run(
        text,
        source_file=source_path,
        vision_json=vision_json,
        ocr_confidence=ocr_confidence
    )

    for warning in record.warnings:
        logger.warning(warning)

    return record.to_dict()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        args = parse_arguments(argv)
        initialize_system(args)
        logger = get_logger(__name__)

        validate_inputs(args)

        result = run_extraction(
            text_path=args.text,
            vision_path=args.vision,
            source_path=args.source,
            ocr_confidence=args.ocr_confidence,
            config_path=args.config
        )

        output = json.dumps(result, indent=2, ensure_ascii=False)

        if args.output:
            output_path = Path(args.output)
            ensure_directory(output_path.parent)
            output_path.write_text(output + "\n", encoding='utf-8')
            logger.info(f"Result written to: {output_path}")
        else:
            print(output)

        logger.info("=" * 60)
        logger.info(
            f"Extraction complete. Source: {result['source']}, "
            f"confidence: {result['confidence']:.2f}"
        )
        logger.info("=" * 60)

        return 0

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except ValueError as e:
        # Includes UnicodeDecodeError for non-UTF-8 text files
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if "--debug" in (argv if argv is not None else sys.argv):
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
