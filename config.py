"""
Configuration file for the CSV combining pipeline.

PIPELINE OVERVIEW:
==================
ÉTAPE 1: Check that every input file exists (directories expand to their files)
ÉTAPE 2: Import each file: read header, disambiguate duplicated names, parse records
ÉTAPE 3: Unify column names across files (optionally sorted and/or custom ordered)
ÉTAPE 4: Rearrange every record onto the unified columns, missing cells -> ""
ÉTAPE 5: Concatenate all records (file order, then row order)
ÉTAPE 6: Format as semicolon-delimited CSV and write to stdout or a file

All configurable defaults are centralized here. CLI flags override them
through update_config().
"""

CONFIG = {
    # ========================================================================
    # CSV DIALECT (input and output)
    # ========================================================================
    "delimiter": ";",
    "quotechar": '"',
    "line_terminator": "\r\n",
    # utf-8-sig reads plain UTF-8 and strips a leading byte-order mark
    "encoding": "utf-8-sig",
    "output_encoding": "utf-8",

    # ========================================================================
    # HEADER RECONCILIATION
    # ========================================================================
    # Second "a" in a header becomes "a__duplicated_1", third "a__duplicated_2"...
    "duplicate_suffix": "__duplicated_",
    # Separator of the -r/--reorder list
    "custom_order_separator": ",",

    # ========================================================================
    # EXECUTION
    # ========================================================================
    "num_workers": 4,       # Threads for file import and rearrangement (1 = sequential)
    "show_progress": False,  # tqdm bar on stderr during import

    # ========================================================================
    # LOGGING
    # ========================================================================
    "log_level": "WARNING",
    "log_format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


def get_config():
    """Return a copy of the configuration."""
    return CONFIG.copy()


def update_config(**kwargs):
    """Update configuration with new values."""
    for key, value in kwargs.items():
        if key in CONFIG:
            CONFIG[key] = value
        else:
            raise KeyError(f"Unknown config key: {key}")
