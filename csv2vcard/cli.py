"""
Command-line entry point.

Usage:
    csv2vcard -i contacts.csv [-d ;] [-o out/] [-s 2] [-e 40] [-t]

Reads the input file, converts the selected rows and writes
<output>/<input basename>.vcf.
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from pydantic import ValidationError

from .convert import convert_rows
from .errors import Csv2VcardError
from .models import ConversionOptions
from .sources import output_path_for, read_rows_from_path

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def single_character(value: str) -> str:
    if len(value) != 1:
        raise argparse.ArgumentTypeError(f"delimiter must be a single character, got {value!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csv2vcard",
        description="Convert contacts in a .csv, .xls or .xlsx file to a .vcf vCard file.",
    )
    parser.add_argument("-v", "-V", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-i", "--input", help="path to the .csv, .xls or .xlsx input file")
    parser.add_argument("-d", "--delimiter", type=single_character, help="delimiter used in the .csv input file (detected when omitted)")
    parser.add_argument("-o", "--output", help="output directory for the .vcf file (defaults to current directory)")
    parser.add_argument("-s", "--start", type=int, help="1-based index of the first data row (defaults to first row)")
    parser.add_argument("-e", "--end", type=int, help="1-based index of the last data row (defaults to last row with data)")
    parser.add_argument("-t", "--telephone", action="store_true", help="whether or not the telephone number should be formatted")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="logging verbosity (default: INFO)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if not args.input:
        logger.error("Don't forget the -i or --input argument to specify a file to convert!")
        return 1

    try:
        options = ConversionOptions(start=args.start, end=args.end, telephone=args.telephone)
    except ValidationError as exc:
        parser.error(f"invalid row window: {exc.errors()[0]['msg']}")

    try:
        rows = read_rows_from_path(args.input, args.delimiter)
    except Csv2VcardError as exc:
        logger.error(str(exc))
        return 1

    result = convert_rows(rows, options)

    output_path = output_path_for(args.input, args.output)
    try:
        output_path.write_text(result.vcards, encoding="utf-8")
    except OSError as exc:
        logger.error("Unable to write %s: %s", output_path, exc)
        return 1

    logger.info("Successfully converted %d rows to contacts.", result.contacts)
    logger.debug("Wrote %s", output_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
