"""
Clean Cheat Engine tables in place.

    ct-cleaner <file/folder path> [options...]

Folders are searched recursively for .CT files. Every cleaned table replaces
the original, which is kept next to it as <name>.bak.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Iterator, List, Optional

from .clean import TableParseError, clean_table_text, decode_table_bytes
from .models import CleanOptions
from .rules import BACKUP_SUFFIX, CLEANED_STEM_SUFFIX, OUTPUT_ENCODING, TABLE_SUFFIX

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "CTCLEAN_LOG_LEVEL"


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ct-cleaner",
        description="Repair, linearize and shrink Cheat Engine tables.",
    )
    p.add_argument("path", type=Path, help="Table file or folder to clean")
    p.add_argument(
        "-r", "--repair",
        action="store_true",
        help="Fix cheat table/xml open and close elements.",
    )
    p.add_argument(
        "-c", "--compact",
        action="store_true",
        help="Removes extra new line characters.",
    )
    p.add_argument(
        "-ll", "--linearlua",
        dest="linear_lua",
        action="store_true",
        help="Linearizes the LUA code scripts and blocks.",
    )
    p.add_argument(
        "-res", "--removeextraspaces",
        dest="remove_extra_spaces",
        action="store_true",
        help="Removes extra spaces that are unnecessary.",
    )
    p.add_argument(
        "-rsig", "--removesignature",
        dest="remove_signature",
        action="store_true",
        help="Removes the signature that signed the table.",
    )
    p.add_argument(
        "-rstr", "--removestructures",
        dest="remove_structures",
        action="store_true",
        help="Removes any structures bloating up the table.",
    )
    p.add_argument(
        "-ruds", "--removeuserdefinedsymbols",
        dest="remove_user_defined_symbols",
        action="store_true",
        help="Removes user defined symbols.",
    )
    p.add_argument(
        "-f", "--full",
        action="store_true",
        help="Uses all cleanup options. (Excluding Signature Removal)",
    )
    p.add_argument(
        "-nlx", "--nolinearxml",
        dest="no_linear_xml",
        action="store_true",
        help="Prevents the linearizing of xml.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log per-step details")
    return p


def options_from_args(args: argparse.Namespace) -> CleanOptions:
    flags = {name: getattr(args, name) for name in CleanOptions.model_fields}
    if args.full:
        return CleanOptions.full(**flags)
    return CleanOptions(**flags)


def iter_tables(path: Path) -> Iterator[Path]:
    if not path.is_dir():
        yield path
        return
    yield from sorted(
        p for p in path.rglob("*") if p.is_file() and p.suffix.lower() == TABLE_SUFFIX
    )


def clean_file(path: Path, options: CleanOptions) -> Path:
    """Clean one table in place. Returns the backup path."""
    logger.info("Processing: %s", path)
    text, enc_report = decode_table_bytes(path.read_bytes())
    logger.debug("Decoded %s as %s", path.name, enc_report["decode_used"])

    cleaned, _steps, _warnings = clean_table_text(text, options)

    logger.info("Saving...")
    cleaned_path = path.with_name(path.stem + CLEANED_STEM_SUFFIX + ".CT")
    cleaned_path.write_bytes(cleaned.encode(OUTPUT_ENCODING))

    backup = path.with_name(path.name + BACKUP_SUFFIX)
    os.replace(path, backup)
    os.replace(cleaned_path, path)
    logger.info("Complete!")
    return backup


def _log_level(verbose: bool) -> int:
    if verbose:
        return logging.DEBUG
    name = os.getenv(LOG_LEVEL_ENV, "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=_log_level(args.verbose), format="%(asctime)s - %(levelname)s - %(message)s")

    path = args.path.resolve()
    if not path.exists():
        logger.error("No such file or folder: %s", path)
        return 1

    options = options_from_args(args)
    failed = 0
    for table in iter_tables(path):
        try:
            clean_file(table, options)
        except (OSError, TableParseError) as e:
            failed += 1
            logger.error("Skipping %s: %s", table, e)

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
