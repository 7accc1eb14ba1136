"""
macdiskutil - Typed access to macOS's diskutil

This package runs diskutil, decodes its plist output into disk, partition,
APFS container and APFS volume records, and adapts to the diskutil behavior
of each supported macOS release.
"""

__version__ = "0.1.0"
