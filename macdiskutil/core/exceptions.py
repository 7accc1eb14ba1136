"""
Base exceptions for macdiskutil.

This module defines the hierarchy of exceptions used by macdiskutil.
"""
from typing import Dict, Optional


class MacDiskUtilError(Exception):
    """Base exception for macdiskutil errors"""
    pass


class UnsupportedReleaseError(MacDiskUtilError):
    """Exception raised when the host macOS release has no diskutil adapter"""
    pass


class CommandError(MacDiskUtilError):
    """
    Exception raised when a diskutil command fails or cannot be started.

    The captured output of the failed command is kept for diagnostics.
    """
    def __init__(self, message: str, stdout: str = "", stderr: str = ""):
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr


class DecodeError(MacDiskUtilError):
    """Exception raised when diskutil output doesn't have the expected plist shape"""
    pass


class ReconciliationError(MacDiskUtilError):
    """
    Exception describing APFS volumes whose physical store couldn't be recovered.

    This error is never raised by the diskutil wrappers. It is returned next to
    the partially updated record so callers can keep using the data.
    """
    def __init__(self, failures: Dict[str, Exception], total: Optional[int] = None):
        self.failures = dict(failures)
        self.total = total if total is not None else len(self.failures)
        details = ", ".join(f"{device} ({error})" for device, error in sorted(self.failures.items()))
        super().__init__(
            f"failed to update physical store for {len(self.failures)} of {self.total} "
            f"APFS volume(s): {details}"
        )


class FreeSpaceError(MacDiskUtilError):
    """Exception raised when there's not enough free space to grow a container"""
    def __init__(self, free_space_bytes: int):
        self._free_space_bytes = free_space_bytes
        super().__init__(f"{free_space_bytes} bytes available")

    @property
    def free_space_bytes(self) -> int:
        return self._free_space_bytes


class InvalidSizeError(MacDiskUtilError, ValueError):
    """Exception raised when a container size isn't a valid diskutil size"""
    pass
