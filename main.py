#!/usr/bin/env python3
"""
Invoice Field Extraction Engine - Main Entry Point.

This is the main entry point for the invoice field extraction engine.
It provides both a command-line interface and programmatic access
to the extraction pipeline.

Usage:
    Command Line:
        python main.py --input invoice.pdf
        python main.py --input ./invoices/ --output results.json --no-ai

    Python:
        from main import run_extraction
        results = run_extraction("invoice.pdf")

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, List, Dict, Any

from config import ConfigurationManager
from invoice_fields.utils.logger import ROOT_LOGGER_NAME, setup_logger_from_config, get_logger
from invoice_fields.utils.helpers import ensure_directory


SUPPORTED_EXTENSIONS = {'.pdf', '.jpg', '.jpeg', '.png', '.tiff', '.tif', '.bmp', '.txt'}


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Argument list. Defaults to sys.argv[1:].

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Invoice Field Extraction Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Process single invoice:
        python main.py --input invoice.pdf

    Process directory into a JSON file:
        python main.py --input ./invoices/ --output results.json

    Pattern extraction only:
        python main.py --input ./invoices/ --no-ai
        """
    )

    # Input/Output arguments
    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Input file or directory containing invoices"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output JSON file (default: print to stdout)"
    )

    # Processing options
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Disable the completion service and use pattern extraction only"
    )

    parser.add_argument(
        "--sources",
        action="store_true",
        help="Include the per-field source (model or pattern) in the output"
    )

    # Logging options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize the engine with configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)

    logger = setup_logger_from_config()

    if args.debug:
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.DEBUG)
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.WARNING)

    logger.info("=" * 60)
    logger.info("INVOICE FIELD EXTRACTION ENGINE")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")
    logger.info(f"Output: {args.output or '<stdout>'}")

    return config


def collect_input_files(input_path: str) -> List[Path]:
    """
    Validate the input path and return the list of files to process.

    Args:
        input_path: File or directory.

    Returns:
        Sorted list of supported files.

    Raises:
        FileNotFoundError: If input path doesn't exist.
        ValueError: If a single file has an unsupported extension.
    """
    logger = get_logger(__name__)
    path = Path(input_path)

    if not path.exists():
        raise FileNotFoundError(f"Input path not found: {path}")

    if path.is_file():
        if path.suffix.lower() in SUPPORTED_EXTENSIONS:
            return [path]
        raise ValueError(f"Unsupported file type: {path.suffix}")

    files = sorted(
        p for p in path.iterdir()
        if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS
    )

    if not files:
        logger.warning(f"No supported files found in: {path}")
    else:
        logger.info(f"Found {len(files)} files to process")

    return files


def run_extraction(
    input_path: str,
    use_model: bool = True,
    include_sources: bool = False
) -> List[Dict[str, Any]]:
    """
    Run the extraction pipeline over a file or directory.

    This is the main programmatic entry point. Configuration is taken
    from the current ConfigurationManager.

    Args:
        input_path: Path to input file or directory.
        use_model: Whether the completion service may be called.
        include_sources: Whether to add per-field sources to each record.

    Returns:
        List of extracted records as dictionaries, each with a "file" key.

    Example:
        >>> results = run_extraction("invoices/", use_model=False)
        >>> for r in results:
        ...     print(r.get('invoiceNumber'))
    """
    from invoice_fields.orchestrator import InvoiceFieldExtractor

    logger = get_logger(__name__)

    files = collect_input_files(input_path)
    extractor = InvoiceFieldExtractor(use_model=use_model)

    results = []
    for file_path in files:
        logger.info(f"Processing: {file_path.name}")
        record = extractor.extract_file(file_path)

        result = {"file": file_path.name}
        result.update(record.to_dict(include_sources=include_sources))
        results.append(result)

    return results


def write_results(results: List[Dict[str, Any]], output_path: Optional[str]) -> None:
    """Write results as JSON to a file, or to stdout when no path is given."""
    payload = json.dumps(results, indent=2, ensure_ascii=False)

    if output_path is None:
        print(payload)
        return

    path = Path(output_path)
    ensure_directory(path.parent)
    path.write_text(payload + "\n", encoding="utf-8")
    get_logger(__name__).info(f"Results written to: {path}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = parse_arguments(argv)

    try:
        initialize_system(args)
        logger = get_logger(__name__)

        results = run_extraction(
            input_path=args.input,
            use_model=not args.no_ai,
            include_sources=args.sources
        )

        if not results:
            logger.error("No files to process")
            return 1

        write_results(results, args.output)

        logger.info("=" * 60)
        logger.info(f"Extraction complete. Processed {len(results)} files.")
        logger.info("=" * 60)

        return 0

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
