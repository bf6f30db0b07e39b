#!/usr/bin/env python3
"""
Invoice Manager - Main Entry Point.

Runs one extraction cycle on a document and prints the resulting record
collections and statistics as JSON.

Usage:
    Command Line:
        python main.py --input invoice.pdf
        python main.py --input march.xlsx --merge-mode append --debug

    Python:
        from main import run_extraction
        result, store = run_extraction("invoice.pdf")

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

# Import project modules
from config import ConfigurationManager
from invoice_manager.utils.logger import ROOT_LOGGER_NAME, get_logger, setup_logger_from_config


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Invoice Manager - extract invoices, products and customers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Extract from a PDF:
        python main.py --input invoice.pdf

    Extract from a workbook, declaring its media type:
        python main.py --input export.bin --media-type application/vnd.ms-excel

The model credential is read from the environment variable named by
model.api_key_env in config/settings.yaml (GEMINI_API_KEY by default).
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Document to extract from (.xls, .xlsx, .pdf or an image)"
    )

    parser.add_argument(
        "--media-type", "-m",
        type=str,
        default=None,
        help="Declared media type (default: guessed from the filename)"
    )

    parser.add_argument(
        "--merge-mode",
        choices=["replace", "append"],
        default=None,
        help="How extracted records enter the store (default: from config)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
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
        help="Only log errors"
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
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.DEBUG)
        for handler in logger.handlers:
            handler.setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.ERROR)

    logger.info("=" * 60)
    logger.info("INVOICE MANAGER")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")

    return config


def run_extraction(
    input_path: str,
    media_type: Optional[str] = None,
    merge_mode: Optional[str] = None,
    config_path: Optional[str] = None,
    pipeline=None
) -> Tuple[Any, Any]:
    """
    Run one extraction cycle on a file.

    Args:
        input_path: Path to the document.
        media_type: Declared media type; guessed if None.
        merge_mode: Store merge mode; from config if None.
        config_path: Optional custom configuration file path.
        pipeline: Pre-built ExtractionPipeline (its store is used).

    Returns:
        Tuple of (CycleResult, RecordStore).

    Raises:
        InputFileNotFoundError: If the file does not exist.
    """
    logger = get_logger(__name__)

    ConfigurationManager(config_path)

    # Import pipeline components
    from invoice_manager.pipeline import ExtractionPipeline
    from invoice_manager.record_store import RecordStore

    if pipeline is None:
        logger.info("Initializing pipeline components...")
        pipeline = ExtractionPipeline(store=RecordStore(merge_mode=merge_mode))

    upload = pipeline.input_handler.load(input_path, media_type=media_type)
    result = pipeline.run(upload)

    if result.success:
        logger.info(
            "Loaded: " + ", ".join(f"{n} {kind}" for kind, n in result.counts.items())
        )
    else:
        logger.error(f"{result.message} ({result.error_detail})")

    return result, pipeline.store


def build_report(result, store) -> Dict[str, Any]:
    """Combine the cycle result, the store contents and the statistics."""
    from invoice_manager.record_store import summarize

    report = {'result': result.to_dict()}
    report.update(store.snapshot())
    report['statistics'] = summarize(store).to_dict()
    return report


def main(argv=None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    from invoice_manager.utils.exceptions import InvoiceManagerError

    args = None

    try:
        args = parse_arguments(argv)

        initialize_system(args)
        logger = get_logger(__name__)

        result, store = run_extraction(
            input_path=args.input,
            media_type=args.media_type,
            merge_mode=args.merge_mode,
            config_path=args.config
        )

        print(json.dumps(build_report(result, store), indent=2, default=str))

        logger.info("=" * 60)
        logger.info(result.message)
        logger.info("=" * 60)

        return 0 if result.success else 1

    except InvoiceManagerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args is not None and args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
