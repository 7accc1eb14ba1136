"""
APFS physical store reconciliation.

On macOS Mojave, diskutil's info and list verbs leave out the physical store
backing an APFS volume. This module fetches each affected volume separately
and patches the recovered store into the already decoded records.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List, Optional

from macdiskutil.core.exceptions import MacDiskUtilError, ReconciliationError
from macdiskutil.utils.types import DiskInfo, SystemPartitions

logger = logging.getLogger('macdiskutil')

# Fetches diskutil info for a device identifier without backfilling
InfoFetcher = Callable[[str], DiskInfo]


class MissingPhysicalStoreError(MacDiskUtilError):
    """Exception raised when a volume's own info still has no physical store"""
    pass


def needs_physical_store(disk: DiskInfo) -> bool:
    """Check whether disk is an APFS volume without a known physical store."""
    return disk.is_apfs_volume and not disk.physical_stores


def fetch_physical_stores(device_id: str, fetch_info: InfoFetcher) -> List[str]:
    """
    Fetch the physical stores of a single APFS volume.

    Args:
        device_id: Device identifier of the APFS volume
        fetch_info: Function fetching diskutil info for a device identifier

    Returns:
        Device identifiers of the physical stores

    Raises:
        MissingPhysicalStoreError: If diskutil still reports no physical store
        MacDiskUtilError: If fetching or decoding the volume fails
    """
    disk = fetch_info(device_id)
    if not disk.physical_stores:
        raise MissingPhysicalStoreError(f"no physical store reported for {device_id}")
    return list(disk.physical_stores)


def update_physical_store(disk: DiskInfo, fetch_info: InfoFetcher) -> Optional[ReconciliationError]:
    """
    Fill in the physical store of a single record.

    Args:
        disk: Decoded record, updated in place
        fetch_info: Function fetching diskutil info for a device identifier

    Returns:
        None on success or when nothing needed updating, otherwise a ReconciliationError
    """
    if not needs_physical_store(disk):
        return None

    return _reconcile([disk], fetch_info, max_workers=1)


def update_physical_stores(
    partitions: SystemPartitions,
    fetch_info: InfoFetcher,
    max_workers: int = 1
) -> Optional[ReconciliationError]:
    """
    Fill in the physical stores of every APFS volume in a listing.

    Failures are per volume: volumes that were updated keep their stores even
    when others fail.

    Args:
        partitions: Decoded listing, updated in place
        fetch_info: Function fetching diskutil info for a device identifier
        max_workers: Number of volumes queried in parallel

    Returns:
        None on success or when nothing needed updating, otherwise a ReconciliationError
    """
    volumes = [disk for disk in partitions.walk() if needs_physical_store(disk)]
    if not volumes:
        logger.debug("All APFS volumes already have a physical store")
        return None

    return _reconcile(volumes, fetch_info, max_workers)


def _reconcile(
    volumes: List[DiskInfo],
    fetch_info: InfoFetcher,
    max_workers: int
) -> Optional[ReconciliationError]:
    logger.info(f"Fetching physical stores for {len(volumes)} APFS volume(s)")

    failures: Dict[str, Exception] = {}

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(volumes)))) as executor:
        future_to_volume = {
            executor.submit(fetch_physical_stores, volume.device_identifier, fetch_info): volume
            for volume in volumes
        }

        for future in as_completed(future_to_volume):
            volume = future_to_volume[future]
            try:
                stores = future.result()
            except (MacDiskUtilError, UnicodeDecodeError) as e:
                logger.warning(f"Could not fetch physical store for {volume.device_identifier}: {e}")
                failures[volume.device_identifier] = e
                continue

            volume.physical_stores = stores
            logger.debug(f"Physical store for {volume.device_identifier}: {', '.join(stores)}")

    if failures:
        return ReconciliationError(failures, total=len(volumes))
    return None
