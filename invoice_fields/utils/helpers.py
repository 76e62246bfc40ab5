"""
Helper Utilities Module.

Small generic helpers shared across the extraction engine.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Extract file extension safely
    - truncate_text: Shorten text for log messages and prompts
"""

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
        >>> ensure_directory("outputs/reports")
        PosixPath('outputs/reports')
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the file extension from a filepath.

    Returns the extension in lowercase, including the dot.
    Returns empty string if no extension exists.

    Args:
        filepath: Path to the file.

    Returns:
        Lowercase file extension including dot (e.g., ".pdf").

    Example:
        >>> get_file_extension("document.PDF")
        ".pdf"
        >>> get_file_extension("noextension")
        ""
    """
    return Path(filepath).suffix.lower()


def truncate_text(text: str, limit: int, marker: str = "...") -> str:
    """
    Cut text down to at most `limit` characters from the head.

    Args:
        text: Text to shorten.
        limit: Maximum number of characters kept from the start.
        marker: Appended after the cut when text was shortened.

    Returns:
        The original text, or its head followed by the marker.

    Example:
        >>> truncate_text("Invoice INV-001 total 10.00", 7)
        "Invoice..."
    """
    if text is None or len(text) <= limit:
        return text
    return f"{text[:limit]}{marker}"
