"""
Command-line interface for submitting soldier record files.

Usage:
    army-records-batch submit --input <file> [--kind xml|spreadsheet] [options]
    army-records-batch resubmit --input <file.xlsx> [options]
    army-records-batch sheet-to-xml --input <file.xlsx> --output <file.xml>

submit and resubmit print the run result as JSON and exit with status 0
when the batch was accepted, 2 when it was rejected and 1 on error.
"""

import argparse
import sys
from pathlib import Path

import psycopg
from dotenv import load_dotenv

from army_records.batch import convert_spreadsheet_to_xml
from army_records.config import Settings
from army_records.core.errors import ArmyRecordsError
from army_records.observability import metrics
from army_records.observability.logger import configure_logging, get_logger

from .common import add_db_arguments, build_pipeline, build_pool, print_json

logger = get_logger(__name__)

EXIT_ACCEPTED = 0
EXIT_ERROR = 1
EXIT_REJECTED = 2


def submit_command(args) -> int:
    """
    Run one file through the conversion pipeline.

    Args:
        args: Command-line arguments

    Returns:
        Process exit status
    """
    input_path = Path(args.input)
    if not input_path.is_file():
        logger.error(f"Input file not found: {args.input}")
        return EXIT_ERROR

    pool = None

    try:
        settings = Settings.from_env()
        pool = build_pool(args)
        pool.open()
        pipeline = build_pipeline(pool, settings)

        if args.command == "resubmit":
            result = pipeline.resubmit_corrected(input_path)
        else:
            result = pipeline.submit_file(input_path, kind=args.kind)

    except ArmyRecordsError as e:
        logger.error(f"Submission refused: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except (psycopg.OperationalError, OSError, ValueError) as e:
        logger.error(f"Error during submission: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    finally:
        if pool is not None:
            pool.close()

    if args.metrics_file:
        metrics.write_metrics(args.metrics_file)

    print_json(result)
    return EXIT_ACCEPTED if result.success else EXIT_REJECTED


def sheet_to_xml_command(args) -> int:
    """
    Convert a spreadsheet into an XML submission without validating it.
    """
    try:
        count = convert_spreadsheet_to_xml(args.input, args.output)
    except (ArmyRecordsError, OSError) as e:
        logger.error(f"Conversion failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    logger.info(f"Wrote {count} soldier records to {args.output}")
    print_json({"input": args.input, "output": args.output, "soldiers": count})
    return EXIT_ACCEPTED


def add_metrics_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--metrics-file",
        help="Write Prometheus metrics of the run to this file (textfile collector format)"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="army-records-batch",
        description="Submit soldier record files for validation and storage",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Submit an XML roster
  army-records-batch submit --input rosters/march.xml

  # Re-submit a corrected annotated spreadsheet
  army-records-batch resubmit --input march_schema_errors.xlsx

  # Turn a spreadsheet back into an XML document
  army-records-batch sheet-to-xml --input march_schema_errors.xlsx --output march.xml
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # submit command
    submit_parser = subparsers.add_parser("submit", help="Submit an XML or spreadsheet file")
    submit_parser.add_argument(
        "--input",
        required=True,
        help="Path to input file (.xml or .xlsx)"
    )
    submit_parser.add_argument(
        "--kind",
        choices=["xml", "spreadsheet"],
        help="Input kind (default: detected from the file extension)"
    )
    add_metrics_argument(submit_parser)
    add_db_arguments(submit_parser)

    # resubmit command
    resubmit_parser = subparsers.add_parser("resubmit", help="Re-submit a corrected spreadsheet")
    resubmit_parser.add_argument(
        "--input",
        required=True,
        help="Path to corrected .xlsx file"
    )
    add_metrics_argument(resubmit_parser)
    add_db_arguments(resubmit_parser)

    # sheet-to-xml command
    convert_parser = subparsers.add_parser("sheet-to-xml", help="Convert a spreadsheet to XML")
    convert_parser.add_argument(
        "--input",
        required=True,
        help="Path to .xlsx file"
    )
    convert_parser.add_argument(
        "--output",
        required=True,
        help="Path of the XML file to write"
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_ERROR

    try:
        configure_logging(Settings.from_env())
    except ValueError as e:
        print(f"Error: invalid settings: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        if args.command in ("submit", "resubmit"):
            return submit_command(args)
        elif args.command == "sheet-to-xml":
            return sheet_to_xml_command(args)
        else:
            parser.print_help()
            return EXIT_ERROR

    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
