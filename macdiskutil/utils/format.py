"""
Formatting utilities.

This module provides functions for formatting sizes, parsing diskutil size
specifications, and consistent terminal output formatting.
"""
import re
from typing import Optional


# ANSI Terminal Colors
class TermColors:
    """ANSI color codes for terminal output"""
    INFO = '\033[94m'     # Blue for informational messages
    SUCCESS = '\033[92m'  # Green for success messages
    WARNING = '\033[93m'  # Yellow for warnings
    ERROR = '\033[91m'    # Red for errors
    SIM = '\033[96m'      # Cyan for simulation messages
    BOLD = '\033[1m'      # Bold text
    ENDC = '\033[0m'      # End color


# diskutil sizes use decimal units, plus 512-byte sectors
SIZE_UNITS = {
    "B": 1,
    "S": 512,
    "K": 1000,
    "M": 1000**2,
    "G": 1000**3,
    "T": 1000**4,
    "P": 1000**5,
    "E": 1000**6,
}

SIZE_SPEC_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*([BSKMGTPE%])?$", re.IGNORECASE)


def colorize(message: str, color: str, enabled: bool = True) -> str:
    """
    Add color to a message if color output is enabled.

    Args:
        message: The message to colorize
        color: The color to use (from TermColors)
        enabled: Whether colorization is enabled

    Returns:
        Colorized message or original message if colors disabled
    """
    if not enabled:
        return message
    return f"{color}{message}{TermColors.ENDC}"


def bytes_to_human_readable(size_bytes: int) -> str:
    """
    Convert bytes to human readable format using the decimal units diskutil reports.

    Args:
        size_bytes: Size in bytes

    Returns:
        Human readable size string (e.g. "500.11 GB")
    """
    if size_bytes < 1000:
        return f"{size_bytes} B"

    size = float(size_bytes)
    for unit in ['KB', 'MB', 'GB', 'TB', 'PB']:
        size /= 1000
        if size < 1000:
            return f"{size:.2f} {unit}"

    return f"{size / 1000:.2f} EB"


def is_size_spec(spec: str) -> bool:
    """Check whether spec is a size diskutil accepts (e.g. "110g", "1.5t", "20%")."""
    return SIZE_SPEC_PATTERN.match(spec.strip()) is not None


def parse_size_spec(spec: str, reference_size_bytes: Optional[int] = None) -> int:
    """
    Parse a diskutil size specification into bytes.

    Args:
        spec: Size specification (e.g., "110g", "1.5T", "1000s", "20%")
        reference_size_bytes: Size that percentages are relative to

    Returns:
        Size in bytes

    Raises:
        ValueError: If the specification can't be parsed
    """
    match = SIZE_SPEC_PATTERN.match(spec.strip())
    if not match:
        raise ValueError(f"Invalid size specification: {spec}")

    value, unit = match.groups()
    number = float(value)

    if unit == "%":
        if reference_size_bytes is None:
            raise ValueError(f"Percentage size {spec} needs a reference size")
        return int(reference_size_bytes * number / 100)

    return int(number * SIZE_UNITS[(unit or "B").upper()])
