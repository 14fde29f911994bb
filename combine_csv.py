"""
Combine semicolon-delimited CSV files into one.
Column names are made unique per file, unified across files and every
record is rearranged onto the unified columns before concatenation.
"""

import argparse
import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, Sequence

from tqdm import tqdm

from columns import parse_custom_order, unify_columns
from config import CONFIG, update_config
from csv_io import CsvFormatError, find_files, is_pattern, write_output
from csv_data import EmptyMergeError, ImportedDataset, MergedDataset, merge, rearrange

logger = logging.getLogger(__name__)

USAGE = "combineCsv [-h] [-r <custom-order>] <file-1 file-2 ...>"


class MissingFilesError(FileNotFoundError):
    """Raised when input files named on the command line do not exist."""

    def __init__(self, paths: Sequence[str]):
        self.paths = list(paths)
        names = ", ".join(os.path.basename(p) for p in self.paths)
        super().__init__(f"The following files were not found: {names}")


class MergeJob:
    """Everything one merge run needs: input files and how to lay out the columns."""

    def __init__(
        self,
        files: Sequence[str],
        custom_order: Optional[Sequence[str]] = None,
        sort_columns: bool = False,
        duplicate_suffix: Optional[str] = None,
        num_workers: Optional[int] = None,
        show_progress: Optional[bool] = None,
    ):
        """
        Args:
            files: CSV files, in the order their records should appear
            custom_order: Column names to put first (unknown names are ignored)
            sort_columns: Sort columns alphabetically before the custom order
            duplicate_suffix: Defaults to CONFIG["duplicate_suffix"]
            num_workers: Defaults to CONFIG["num_workers"]
            show_progress: Defaults to CONFIG["show_progress"]
        """
        self.files = list(files)
        self.custom_order = list(custom_order) if custom_order is not None else None
        self.sort_columns = sort_columns
        self.duplicate_suffix = duplicate_suffix if duplicate_suffix is not None else CONFIG["duplicate_suffix"]
        self.num_workers = num_workers if num_workers is not None else CONFIG["num_workers"]
        self.show_progress = show_progress if show_progress is not None else CONFIG["show_progress"]


def setup_logging(log_file: str):
    """Set up file logging in addition to the stderr handler."""
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(CONFIG["log_format"]))
    root = logging.getLogger()
    root.addHandler(file_handler)
    root.setLevel(logging.DEBUG)


def expand_paths(paths: Iterable[str]) -> List[str]:
    """
    Replace directory arguments by the files they contain.

    A quoted glob pattern that is not itself an existing path is expanded
    too. A pattern matching nothing is kept, so it is reported as missing.
    """
    expanded = []
    for path in paths:
        if os.path.isdir(path) or (is_pattern(path) and not os.path.exists(path)):
            found = find_files(path)
            logger.info(f"{path}: {len(found)} file(s)")
            if not found and not os.path.isdir(path):
                expanded.append(path)
            expanded.extend(found)
        else:
            expanded.append(path)
    return expanded


def check_files(paths: Iterable[str]):
    """Raise MissingFilesError listing every path that does not exist."""
    missing = [p for p in paths if not os.path.exists(p)]
    if missing:
        raise MissingFilesError(missing)


def _ordered_map(fn: Callable, items: Sequence, num_workers: int, progress: Optional[str] = None) -> List:
    """Apply fn to items, in threads when num_workers > 1; results keep the order of items."""
    bar_args = {"total": len(items), "desc": progress, "disable": progress is None, "file": sys.stderr}
    if num_workers <= 1 or len(items) <= 1:
        return list(tqdm(map(fn, items), **bar_args))
    with ThreadPoolExecutor(max_workers=num_workers) as executor:
        return list(tqdm(executor.map(fn, items), **bar_args))


def import_datasets(job: MergeJob) -> List[ImportedDataset]:
    """Parse every file of the job, in file order."""
    return _ordered_map(
        lambda path: ImportedDataset(path, job.duplicate_suffix),
        job.files,
        job.num_workers,
        progress="Importing" if job.show_progress else None,
    )


def combine(job: MergeJob) -> MergedDataset:
    """
    Run the merge pipeline.

    Args:
        job: Input files and column layout options

    Returns:
        MergedDataset holding the records of all files

    Raises:
        CsvFormatError: if a file has an invalid header or cannot be decoded
        EmptyMergeError: if the files contain no records
        OSError: if a file cannot be read
    """
    logger.info(f"Combining {len(job.files)} file(s) with {job.num_workers} worker(s)")
    datasets = import_datasets(job)

    keys = unify_columns((d.keys for d in datasets), job.custom_order, job.sort_columns)
    rearranged = _ordered_map(lambda d: rearrange(d, keys), datasets, job.num_workers)
    return merge(rearranged)


class CombineArgumentParser(argparse.ArgumentParser):
    """ArgumentParser printing help to stderr and exiting with status 1 on errors."""

    def print_help(self, file=None):
        super().print_help(file or sys.stderr)

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = CombineArgumentParser(
        prog="combineCsv",
        usage=USAGE,
        description="Merge semicolon-delimited CSV files into one, printed to stdout. "
        "Duplicated column names are made unique and missing columns are left empty.",
    )
    parser.add_argument(
        "files",
        nargs="+",
        help="CSV files to merge (a directory or quoted glob pattern stands for the files it matches)",
    )
    parser.add_argument(
        "-r",
        "--reorder",
        default=None,
        metavar="NAMES",
        help="Reorder columns according to a comma-separated list of column names. "
        "Duplicated column names as well as column names not present in the input files will be ignored",
    )
    parser.add_argument(
        "--sort",
        action="store_true",
        help="Sort columns alphabetically (applied before --reorder)",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output file (defaults to stdout)",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=None,
        help=f"Worker threads for import and rearrangement (default: {CONFIG['num_workers']})",
    )
    parser.add_argument(
        "--suffix",
        default=None,
        help=f"Suffix for duplicated column names (default: {CONFIG['duplicate_suffix']})",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar on stderr while importing",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log progress information to stderr",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write a debug log to this file",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point with argument parsing."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Apply overrides
    if args.jobs is not None:
        if args.jobs < 1:
            parser.error("--jobs must be at least 1")
        update_config(num_workers=args.jobs)
    if args.suffix is not None:
        update_config(duplicate_suffix=args.suffix)
    if args.progress:
        update_config(show_progress=True)
    if args.verbose:
        update_config(log_level="INFO")

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(CONFIG["log_level"])
    logging.basicConfig(
        level=CONFIG["log_level"],
        format=CONFIG["log_format"],
        handlers=[stream_handler],
    )
    if args.log_file:
        setup_logging(args.log_file)

    files = expand_paths(args.files)
    try:
        check_files(files)
    except MissingFilesError as e:
        print(f"{e}\n", file=sys.stderr)
        parser.print_help()
        return 1

    job = MergeJob(files, custom_order=parse_custom_order(args.reorder), sort_columns=args.sort)
    try:
        merged = combine(job)
        text = merged.format_records()
        write_output(text, args.output)
    except (CsvFormatError, EmptyMergeError, OSError, UnicodeError) as e:
        logger.error(f"Combining failed: {e}")
        return 1

    logger.info(f"Done: {len(merged)} records, {len(merged.keys)} columns")
    return 0


if __name__ == "__main__":
    sys.exit(main())
