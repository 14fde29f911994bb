"""
Reading and writing semicolon-delimited CSV files.

Dialect: ';' delimiter, '"' quote char, values trimmed, a trailing
delimiter at the end of a line is tolerated.
"""

import csv
import io
import logging
import os
import sys
from glob import glob
from typing import Dict, Iterator, List, Optional, Sequence

from config import CONFIG

logger = logging.getLogger(__name__)


class CsvFormatError(ValueError):
    """Raised when a CSV file cannot be decoded or has an invalid header."""


def is_pattern(path: str) -> bool:
    """True if path contains glob wildcards (*, ? or [)."""
    return any(c in path for c in "*?[")


def find_files(dir_or_pattern: str) -> List[str]:
    """
    List the files matched by a directory or glob pattern.

    Args:
        dir_or_pattern: Directory (all regular files inside it are listed)
            or glob pattern such as "exports/wave_*.csv"

    Returns:
        Sorted list of file paths
    """
    pattern = os.path.join(dir_or_pattern, "*") if os.path.isdir(dir_or_pattern) else dir_or_pattern
    return sorted(p for p in glob(pattern) if os.path.isfile(p))


def _clean_row(row: List[str], raw: str) -> List[str]:
    values = [value.strip() for value in row]
    # Trailing delimiter: "a;b;" gives a last empty value that is not a column.
    # 'a;""' and "a; " end in a real (empty) value and keep it.
    if len(values) > 1 and values[-1] == "" and raw.rstrip("\r\n").endswith(CONFIG["delimiter"]):
        values.pop()
    return values


def _iter_rows(path: str) -> Iterator[List[str]]:
    """Yield the trimmed rows of a CSV file, skipping empty lines."""
    raw_lines = []

    def _record_lines(f):
        for line in f:
            raw_lines.append(line)
            yield line

    try:
        with open(path, "r", encoding=CONFIG["encoding"], newline="") as f:
            reader = csv.reader(_record_lines(f), delimiter=CONFIG["delimiter"], quotechar=CONFIG["quotechar"])
            try:
                for row in reader:
                    raw = "".join(raw_lines)
                    raw_lines.clear()
                    if row:
                        yield _clean_row(row, raw)
            except csv.Error as e:
                raise CsvFormatError(f"{path}, line {reader.line_num}: {e}") from e
    except UnicodeDecodeError as e:
        raise CsvFormatError(f"{path}: cannot decode as {CONFIG['encoding']}: {e}") from e


def read_header(path: str) -> List[str]:
    """
    Read the header of a CSV file.

    Names are returned as written (trimmed), duplicates included.

    Args:
        path: Path to the CSV file

    Returns:
        List of header names, empty for an empty file

    Raises:
        CsvFormatError: if a header name is missing or the file is unreadable as CSV
    """
    rows = _iter_rows(path)
    try:
        header = next(rows, [])
    finally:
        rows.close()

    for position, name in enumerate(header, start=1):
        if not name:
            raise CsvFormatError(f"{path}: header name missing in column {position}")
    return header


def parse_csv(path: str, keys: Sequence[str]) -> List[Dict[str, str]]:
    """
    Parse the records of a CSV file, skipping its header row.

    Args:
        path: Path to the CSV file
        keys: Column names to key the values by, normally the
            disambiguated header of the file

    Returns:
        One dict per data row. Rows shorter than ``keys`` lack the trailing
        keys; values beyond ``keys`` are dropped.
    """
    keys = list(keys)
    records = []
    rows = _iter_rows(path)
    next(rows, None)
    for values in rows:
        if len(values) > len(keys):
            logger.debug(f"{path}: dropping {len(values) - len(keys)} value(s) without a column")
        records.append(dict(zip(keys, values)))
    return records


def format_records(keys: Sequence[str], records: Sequence[Dict[str, str]]) -> str:
    """
    Format records as semicolon-delimited text, header row first.

    Args:
        keys: Column names for the header row
        records: Records whose values are written in their key order

    Returns:
        CSV text, every row terminated by CONFIG["line_terminator"]
    """
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=CONFIG["delimiter"],
        quotechar=CONFIG["quotechar"],
        quoting=csv.QUOTE_MINIMAL,
        lineterminator=CONFIG["line_terminator"],
    )
    writer.writerow([key.strip() for key in keys])
    writer.writerows([value.strip() for value in record.values()] for record in records)
    return buffer.getvalue()


def write_output(text: str, output: Optional[str] = None):
    """Write CSV text to a file, or to stdout when output is None or "-"."""
    if output is None or output == "-":
        # Bytes, so the locale encoding and newline translation do not apply
        sys.stdout.flush()
        sys.stdout.buffer.write(text.encode(CONFIG["output_encoding"]))
        sys.stdout.buffer.flush()
        return

    with open(output, "w", encoding=CONFIG["output_encoding"], newline="") as f:
        f.write(text)
    logger.info(f"Wrote {len(text)} characters to {output}")
