"""
In-memory CSV datasets.
An ImportedDataset holds one parsed file; rearranged and merged records
end up in a MergedDataset, which is what gets formatted.
"""

import logging
import os
from typing import Dict, List, Optional, Sequence

from columns import make_distinct
from csv_io import format_records, parse_csv, read_header

logger = logging.getLogger(__name__)


class EmptyMergeError(ValueError):
    """Raised when merging yields no records at all."""


class ImportedDataset:
    """Records and column names parsed from one CSV file."""

    def __init__(self, path: str, duplicate_suffix: Optional[str] = None):
        """
        Read a CSV file.

        Args:
            path: Path to the CSV file
            duplicate_suffix: Suffix for duplicated header names
                (defaults to CONFIG["duplicate_suffix"])
        """
        self.file_path = os.path.abspath(path)
        self.file_name = os.path.basename(self.file_path)
        self.keys = tuple(make_distinct(read_header(self.file_path), duplicate_suffix))
        self.records = parse_csv(self.file_path, self.keys)
        logger.info(f"Imported {self.file_name}: {len(self.keys)} columns, {len(self.records)} records")

    def __len__(self):
        return len(self.records)

    def __repr__(self):
        return f"ImportedDataset({self.file_name!r}, columns={len(self.keys)}, records={len(self.records)})"


class MergedDataset:
    """Records sharing one column schema, ready to be formatted."""

    def __init__(self, records: List[Dict[str, str]]):
        """
        Args:
            records: Records with identical key order (see rearrange)

        Raises:
            EmptyMergeError: if records is empty
        """
        if not records:
            raise EmptyMergeError("No records to merge (no input files, or all input files are empty)")
        self.records = records
        self.keys = list(records[0].keys())

    def __len__(self):
        return len(self.records)

    def format_records(self) -> str:
        """Return the records as semicolon-delimited CSV text, header first."""
        return format_records(self.keys, self.records)


def rearrange_record(record: Dict[str, str], keys: Sequence[str]) -> Dict[str, str]:
    """
    Project a record onto keys.

    Returns a new dict with exactly ``keys`` in that order; values missing
    from ``record`` become "".
    """
    return {key: record.get(key, "") for key in keys}


def rearrange(dataset: ImportedDataset, keys: Sequence[str]) -> List[Dict[str, str]]:
    """Project every record of a dataset onto keys, keeping row order."""
    return [rearrange_record(record, keys) for record in dataset.records]


def merge(record_lists: Sequence[List[Dict[str, str]]]) -> MergedDataset:
    """
    Concatenate rearranged record lists.

    Args:
        record_lists: Output of rearrange() for each dataset, in file order

    Returns:
        MergedDataset with the records of the first list first

    Raises:
        EmptyMergeError: if there are no records at all
    """
    records = [record for records in record_lists for record in records]
    logger.info(f"Merged {len(records)} records from {len(record_lists)} datasets")
    return MergedDataset(records)
