"""
Column name reconciliation.
Makes header names unique within a file and unifies them across files.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from config import CONFIG

logger = logging.getLogger(__name__)


def make_distinct(names: Sequence[str], suffix: Optional[str] = None) -> List[str]:
    """
    Disambiguate duplicated names, keeping first-seen order.

    The first occurrence of a name is kept as is. Later occurrences get
    ``suffix`` and a running counter appended, e.g. with suffix "_dupl_":
    ["a", "a", "b", "a"] -> ["a", "a_dupl_1", "b", "a_dupl_2"].

    A suffixed name is not checked against names further down the header,
    so ["a", "a", "a_dupl_1"] still yields two "a_dupl_1" entries.

    Args:
        names: Column names as read from a header (duplicates allowed)
        suffix: String inserted between name and counter
            (defaults to CONFIG["duplicate_suffix"])

    Returns:
        List of names, same length as the input
    """
    if suffix is None:
        suffix = CONFIG["duplicate_suffix"]
    if len(names) < 2:
        return list(names)

    counters = {}
    distinct = []
    for name in names:
        count = counters.get(name)
        if count is None:
            distinct.append(name)
            counters[name] = 1
        else:
            distinct.append(f"{name}{suffix}{count}")
            counters[name] = count + 1

    renamed = len(distinct) - len(counters)
    if renamed:
        logger.debug(f"Renamed {renamed} duplicated column name(s)")
    if len(set(distinct)) != len(distinct):
        logger.debug(f"Disambiguated names still collide: {distinct}")
    return distinct


def get_distinct(names: Optional[Iterable[str]]) -> Optional[List[str]]:
    """Drop duplicated names, keeping the order of first appearance."""
    if names is None:
        return None
    return list(dict.fromkeys(names))


def sort_columns(names: Iterable[str]) -> List[str]:
    """Return the names in alphabetical order."""
    return sorted(names)


def parse_custom_order(custom_order: Optional[str]) -> Optional[List[str]]:
    """
    Split a comma-separated column list as given on the command line.

    Pieces are not stripped: "a, b" names the columns "a" and " b".
    """
    if custom_order is None:
        return None
    return custom_order.split(CONFIG["custom_order_separator"])


def apply_custom_order(columns: Sequence[str], preferred: Optional[Sequence[str]]) -> List[str]:
    """
    Move preferred columns to the front.

    Preferred names come first in the given order; duplicates and names not
    in ``columns`` are ignored. The remaining columns follow in their
    original order.

    Args:
        columns: Distinct column names
        preferred: Desired leading columns, or None to keep ``columns`` as is

    Returns:
        Reordered list of the same names as ``columns``
    """
    if not preferred:
        return list(columns)

    available = set(columns)
    unknown = [name for name in get_distinct(preferred) if name not in available]
    if unknown:
        logger.info(f"Ignoring unknown column(s) in custom order: {unknown}")

    leading = [name for name in preferred if name in available]
    return get_distinct(leading + list(columns))


def unify_columns(
    column_sets: Iterable[Sequence[str]],
    custom_order: Optional[Sequence[str]] = None,
    sort: bool = False,
) -> List[str]:
    """
    Build the column schema of the merged output.

    Args:
        column_sets: Column names of each dataset, in import order
        custom_order: Names to put first (see apply_custom_order)
        sort: Sort alphabetically before applying the custom order

    Returns:
        Ordered, duplicate-free list of all column names
    """
    columns = get_distinct(name for names in column_sets for name in names)
    if sort:
        columns = sort_columns(columns)
    columns = apply_custom_order(columns, custom_order)
    logger.info(f"Unified {len(columns)} columns")
    return columns
