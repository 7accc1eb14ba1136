"""
diskutil command construction.

This module maps diskutil operations to argument vectors.
"""
import shlex
from typing import List, Optional, Sequence, Union

from macdiskutil.config import DEFAULT_DISKUTIL, DEFAULT_SHELL
from macdiskutil.core.exceptions import InvalidSizeError
from macdiskutil.utils.format import is_size_spec

# diskutil grows a container to all available space when given a size of 0
GROW_TO_MAXIMUM = "0"


def list_command(args: Optional[Sequence[str]] = None, diskutil: str = DEFAULT_DISKUTIL) -> List[str]:
    """
    Build the diskutil list command.

    Args:
        args: Extra arguments forwarded verbatim to the list verb
        diskutil: diskutil executable

    Returns:
        Command as list of strings
    """
    # -plist converts diskutil's output from human-readable to the plist format
    cmd = [diskutil, "list", "-plist"]
    if args:
        cmd.extend(args)
    return cmd


def info_command(device_id: str, diskutil: str = DEFAULT_DISKUTIL) -> List[str]:
    """Build the diskutil info command for a device identifier."""
    return [diskutil, "info", "-plist", device_id]


def repair_disk_command(device_id: str, diskutil: str = DEFAULT_DISKUTIL, shell: str = DEFAULT_SHELL) -> List[str]:
    """
    Build the diskutil repairDisk command.

    repairDisk asks for confirmation, so the command is wrapped in a shell
    that pipes "yes" into it.
    """
    return [shell, "-c", f"yes | {shlex.quote(diskutil)} repairDisk {shlex.quote(device_id)}"]


def normalize_container_size(size: Union[str, int, None]) -> str:
    """
    Convert a requested container size into a diskutil size argument.

    Args:
        size: Human readable size (e.g. "110g", "1.5t", "20%"), or 0/"0"/None to grow to the maximum

    Returns:
        The size argument for diskutil apfs resizeContainer

    Raises:
        InvalidSizeError: If the size isn't understood by diskutil
    """
    if size is None or size == 0:
        return GROW_TO_MAXIMUM

    text = str(size).strip()
    if text == GROW_TO_MAXIMUM:
        return GROW_TO_MAXIMUM
    if not is_size_spec(text):
        raise InvalidSizeError(f"Invalid container size: {size!r}")
    return text


def resize_container_command(
    device_id: str,
    size: Union[str, int, None],
    diskutil: str = DEFAULT_DISKUTIL
) -> List[str]:
    """Build the diskutil apfs resizeContainer command."""
    return [diskutil, "apfs", "resizeContainer", device_id, normalize_container_size(size)]
