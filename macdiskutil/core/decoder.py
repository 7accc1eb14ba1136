"""
Decoding of diskutil plist output.

This module turns the raw plist emitted by diskutil's info and list verbs into
DiskInfo and SystemPartitions records.
"""
import logging
import plistlib
from typing import Any, BinaryIO, Dict, List, Optional
from xml.parsers.expat import ExpatError

from macdiskutil.core.exceptions import DecodeError
from macdiskutil.utils.types import DiskInfo, DiskKind, SystemPartitions

logger = logging.getLogger('macdiskutil')

APFS_FILESYSTEM = "apfs"


def _load(stream: BinaryIO) -> Dict[str, Any]:
    try:
        data = plistlib.load(stream)
    except (plistlib.InvalidFileException, ExpatError, ValueError) as e:
        raise DecodeError(f"diskutil output is not a valid plist: {e}")

    if not isinstance(data, dict):
        raise DecodeError(f"expected a plist dictionary, got {type(data).__name__}")
    return data


def _get(data: Dict[str, Any], key: str, expected: type, default: Any = None, required: bool = False) -> Any:
    """Fetch a plist value, checking its type."""
    if key not in data:
        if required:
            raise DecodeError(f"missing required key {key}")
        return default

    value = data[key]
    # bool is a subclass of int
    if expected is int and isinstance(value, bool):
        raise DecodeError(f"key {key} should be an integer, got a boolean")
    if not isinstance(value, expected):
        raise DecodeError(f"key {key} should be {expected.__name__}, got {type(value).__name__}")
    return value


def _store_identifiers(entries: List[Any], key: str) -> List[str]:
    stores = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise DecodeError("APFSPhysicalStores entries should be dictionaries")
        stores.append(_get(entry, key, str, required=True))
    return stores


def _info_kind(data: Dict[str, Any]) -> DiskKind:
    whole_disk = _get(data, "WholeDisk", bool, False)
    if data.get("FilesystemType") == APFS_FILESYSTEM and not whole_disk:
        return DiskKind.APFS_VOLUME
    if "APFSContainerSize" in data or (whole_disk and "APFSPhysicalStores" in data):
        return DiskKind.CONTAINER
    if whole_disk:
        return DiskKind.DISK
    return DiskKind.PARTITION


class PlistDecoder:
    """Decoder for diskutil's -plist output"""

    def decode_disk_info(self, stream: BinaryIO) -> DiskInfo:
        """
        Decode the output of diskutil info -plist.

        Args:
            stream: Binary stream containing the plist

        Returns:
            DiskInfo for the queried device

        Raises:
            DecodeError: If the plist is malformed or misses the device identifier
        """
        data = _load(stream)

        mount_point = _get(data, "MountPoint", str)
        filesystem_type = _get(data, "FilesystemType", str)
        free_space = _get(data, "FreeSpace", int)
        if free_space is None:
            free_space = _get(data, "APFSContainerFree", int)

        return DiskInfo(
            device_identifier=_get(data, "DeviceIdentifier", str, required=True),
            kind=_info_kind(data),
            size=_get(data, "Size", int, None) or _get(data, "TotalSize", int, 0),
            mount_point=mount_point or None,
            filesystem_type=filesystem_type or None,
            physical_stores=_store_identifiers(_get(data, "APFSPhysicalStores", list, []), "APFSPhysicalStore"),
            device_node=_get(data, "DeviceNode", str),
            parent_whole_disk=_get(data, "ParentWholeDisk", str),
            volume_name=_get(data, "VolumeName", str) or None,
            content=_get(data, "Content", str),
            whole_disk=_get(data, "WholeDisk", bool, False),
            container_reference=_get(data, "APFSContainerReference", str),
            free_space=free_space,
            container_free_space=_get(data, "APFSContainerFree", int),
        )

    def decode_system_partitions(self, stream: BinaryIO) -> SystemPartitions:
        """
        Decode the output of diskutil list -plist.

        APFS volumes inherit the physical stores of the container listing them.

        Args:
            stream: Binary stream containing the plist

        Returns:
            SystemPartitions with one top-level record per whole disk or container

        Raises:
            DecodeError: If the plist is malformed
        """
        data = _load(stream)

        disks = [
            self._decode_disk_part(part)
            for part in _get(data, "AllDisksAndPartitions", list, required=True)
        ]

        partitions = SystemPartitions(
            disks=disks,
            all_disks=self._strings(data, "AllDisks"),
            whole_disks=self._strings(data, "WholeDisks"),
            volumes_from_disks=self._strings(data, "VolumesFromDisks"),
        )
        logger.debug(f"Decoded {len(disks)} disk(s) and {len(partitions.apfs_volumes())} APFS volume(s)")
        return partitions

    @staticmethod
    def _strings(data: Dict[str, Any], key: str) -> List[str]:
        values = _get(data, key, list, [])
        if not all(isinstance(value, str) for value in values):
            raise DecodeError(f"key {key} should only contain strings")
        return list(values)

    def _decode_disk_part(self, part: Any) -> DiskInfo:
        if not isinstance(part, dict):
            raise DecodeError("AllDisksAndPartitions entries should be dictionaries")

        device_id = _get(part, "DeviceIdentifier", str, required=True)
        stores = _store_identifiers(_get(part, "APFSPhysicalStores", list, []), "DeviceIdentifier")
        volumes = _get(part, "APFSVolumes", list)
        is_container = volumes is not None or "APFSPhysicalStores" in part

        disk = DiskInfo(
            device_identifier=device_id,
            kind=DiskKind.CONTAINER if is_container else DiskKind.DISK,
            size=_get(part, "Size", int, 0),
            mount_point=_get(part, "MountPoint", str) or None,
            physical_stores=stores,
            content=_get(part, "Content", str),
            whole_disk=True,
        )

        for entry in _get(part, "Partitions", list, []):
            disk.children.append(self._decode_child(entry, device_id, DiskKind.PARTITION, None))

        for entry in volumes or []:
            disk.children.append(self._decode_child(entry, device_id, DiskKind.APFS_VOLUME, stores))

        return disk

    @staticmethod
    def _decode_child(entry: Any, parent: str, kind: DiskKind, stores: Optional[List[str]]) -> DiskInfo:
        if not isinstance(entry, dict):
            raise DecodeError(f"entries of {parent} should be dictionaries")

        is_volume = kind == DiskKind.APFS_VOLUME
        return DiskInfo(
            device_identifier=_get(entry, "DeviceIdentifier", str, required=True),
            kind=kind,
            size=_get(entry, "Size", int, 0),
            mount_point=_get(entry, "MountPoint", str) or None,
            filesystem_type=APFS_FILESYSTEM if is_volume else None,
            physical_stores=list(stores or []),
            parent_whole_disk=parent,
            volume_name=_get(entry, "VolumeName", str),
            content=_get(entry, "Content", str),
            container_reference=parent if is_volume else None,
            parent=parent,
        )
