"""
Helper Utilities Module.

Small, generic helpers shared across the pipeline.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - validate_file_exists: Check a path is a regular file
    - collapse_whitespace: Squash runs of whitespace into single spaces
    - casefold_key: Comparison key for names that ignores case, dots and spaces
"""

import re
from pathlib import Path
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists.

    Returns:
        Path object pointing to the directory.

    Example:
        >>> ensure_directory("outputs/results")
        PosixPath('outputs/results')
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def validate_file_exists(filepath: Union[str, Path]) -> bool:
    """
    Check if a file exists and is a regular file.

    Args:
        filepath: Path to check.

    Returns:
        True if file exists and is a regular file.
    """
    path = Path(filepath)
    return path.exists() and path.is_file()


def collapse_whitespace(text: str) -> str:
    """
    Collapse all whitespace runs (including newlines) into single spaces.

    Example:
        >>> collapse_whitespace("  Bakeriet\\n  Nord   AS ")
        "Bakeriet Nord AS"
    """
    if not text:
        return ""
    return " ".join(text.split())


def casefold_key(name: str) -> str:
    """
    Build a comparison key for company names.

    Example:
        >>> casefold_key("T. Myhrvold AS") == casefold_key("t.myhrvold as")
        True
    """
    return re.sub(r"[\s.\-]", "", name or "").casefold()
