"""
Type definitions for macdiskutil.

This module provides the records decoded from diskutil output and the
result type returned by the diskutil wrappers.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Iterator, List, Optional, TypeVar

from macdiskutil.core.exceptions import ReconciliationError

T = TypeVar("T")


class DiskKind(Enum):
    """Role of a record in the disk tree"""
    DISK = "disk"
    PARTITION = "partition"
    CONTAINER = "container"
    APFS_VOLUME = "apfs_volume"


class ReleaseProfile(Enum):
    """How diskutil output has to be treated on a given macOS release"""
    STANDARD = "standard"
    BACKFILL_REQUIRED = "backfill-required"  # physical stores missing from info and list


@dataclass
class DiskInfo:
    """Information about a disk, partition, APFS container or APFS volume"""
    device_identifier: str
    kind: DiskKind
    size: int = 0
    mount_point: Optional[str] = None
    filesystem_type: Optional[str] = None
    physical_stores: List[str] = field(default_factory=list)
    device_node: Optional[str] = None
    parent_whole_disk: Optional[str] = None
    volume_name: Optional[str] = None
    content: Optional[str] = None
    whole_disk: bool = False
    container_reference: Optional[str] = None
    free_space: Optional[int] = None
    container_free_space: Optional[int] = None
    parent: Optional[str] = None
    children: List["DiskInfo"] = field(default_factory=list)

    @property
    def physical_store(self) -> Optional[str]:
        """First physical store backing this record, if known."""
        return self.physical_stores[0] if self.physical_stores else None

    @property
    def is_apfs_volume(self) -> bool:
        return self.kind == DiskKind.APFS_VOLUME


@dataclass
class SystemPartitions:
    """All disks and partitions of the system as reported by diskutil list"""
    disks: List[DiskInfo] = field(default_factory=list)
    all_disks: List[str] = field(default_factory=list)
    whole_disks: List[str] = field(default_factory=list)
    volumes_from_disks: List[str] = field(default_factory=list)

    def walk(self) -> Iterator[DiskInfo]:
        """Yield every record, each top-level disk followed by its children."""
        for disk in self.disks:
            yield disk
            yield from disk.children

    def find(self, device_identifier: str) -> Optional[DiskInfo]:
        for disk in self.walk():
            if disk.device_identifier == device_identifier:
                return disk
        return None

    def apfs_volumes(self) -> List[DiskInfo]:
        return [disk for disk in self.walk() if disk.is_apfs_volume]


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """
    Decoded diskutil data, optionally paired with a reconciliation error.

    A result with an error is usable but incomplete: some APFS volumes are
    still missing their physical store.
    """
    value: T
    error: Optional[ReconciliationError] = None

    @property
    def complete(self) -> bool:
        return self.error is None
