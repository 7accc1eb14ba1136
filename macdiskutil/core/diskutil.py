"""
diskutil wrapper module.

This module runs diskutil, decodes its plist output and, on releases whose
diskutil omits APFS physical stores, fills them in with extra queries.
"""
import io
import logging
import subprocess
from typing import List, Optional, Sequence, Union

from macdiskutil.config import Settings
from macdiskutil.core import commands
from macdiskutil.core.decoder import PlistDecoder
from macdiskutil.core.exceptions import CommandError, DecodeError, FreeSpaceError
from macdiskutil.core.reconcile import update_physical_store, update_physical_stores
from macdiskutil.utils.command import CommandRunner
from macdiskutil.utils.format import bytes_to_human_readable
from macdiskutil.utils.types import DiskInfo, FetchResult, ReleaseProfile, SystemPartitions

logger = logging.getLogger('macdiskutil')

# Minimum amount of free space (in bytes) required to attempt growing a container
MINIMUM_GROW_FREE_SPACE = 1000000


def check_free_space(free_space_bytes: int) -> None:
    """
    Check that a container has enough free space to be grown.

    diskutil enforces this itself; the check lets callers fail early.

    Args:
        free_space_bytes: Free space reported for the container

    Raises:
        FreeSpaceError: If free space is at or below MINIMUM_GROW_FREE_SPACE
    """
    if free_space_bytes <= MINIMUM_GROW_FREE_SPACE:
        raise FreeSpaceError(free_space_bytes)


class DiskUtility:
    """
    Wrapper around macOS's diskutil bound to one release profile.

    Instances are normally created through macdiskutil.core.release.for_product().
    """
    def __init__(
        self,
        profile: ReleaseProfile,
        version: Optional[str] = None,
        cmd_runner: Optional[CommandRunner] = None,
        decoder: Optional[PlistDecoder] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize the diskutil wrapper.

        Args:
            profile: Release profile selecting whether physical stores are backfilled
            version: macOS product version the wrapper was created for
            cmd_runner: CommandRunner instance for executing commands
            decoder: Decoder for diskutil's plist output
            settings: Settings for the diskutil executable and backfill workers
        """
        self.settings = settings or Settings()
        self._profile = profile
        self.version = version
        self.cmd_runner = cmd_runner or self.settings.runner()
        self.decoder = decoder or PlistDecoder()

    @property
    def profile(self) -> ReleaseProfile:
        return self._profile

    def __repr__(self) -> str:
        return f"DiskUtility(profile={self._profile.value}, version={self.version!r})"

    def info(self, device_id: str) -> FetchResult[DiskInfo]:
        """
        Fetch and decode diskutil info for a device identifier.

        On releases requiring backfill, an APFS volume's physical store is
        fetched separately. If that fails the decoded record is still returned,
        together with the error.

        Args:
            device_id: Device identifier (e.g. disk1s1)

        Returns:
            FetchResult with the DiskInfo and an optional ReconciliationError

        Raises:
            CommandError: If diskutil fails
            DecodeError: If the output can't be decoded
        """
        disk = self.fetch_disk_info(device_id)

        if self._profile != ReleaseProfile.BACKFILL_REQUIRED:
            return FetchResult(disk)

        return FetchResult(disk, update_physical_store(disk, self.fetch_disk_info))

    def list(self, args: Optional[Sequence[str]] = None) -> FetchResult[SystemPartitions]:
        """
        Fetch and decode diskutil list for the whole system.

        Args:
            args: Extra arguments forwarded verbatim to diskutil list (e.g. ["internal"])

        Returns:
            FetchResult with the SystemPartitions and an optional ReconciliationError

        Raises:
            CommandError: If diskutil fails
            DecodeError: If the output can't be decoded
        """
        partitions = self.fetch_system_partitions(args)

        if self._profile != ReleaseProfile.BACKFILL_REQUIRED:
            return FetchResult(partitions)

        error = update_physical_stores(
            partitions,
            self.fetch_disk_info,
            max_workers=self.settings.backfill_workers
        )
        return FetchResult(partitions, error)

    def fetch_disk_info(self, device_id: str) -> DiskInfo:
        """Fetch and decode diskutil info without any backfilling."""
        raw = self._query(
            commands.info_command(device_id, self.settings.diskutil),
            "fetch disk information"
        )
        return self.decoder.decode_disk_info(io.BytesIO(raw.encode("utf-8")))

    def fetch_system_partitions(self, args: Optional[Sequence[str]] = None) -> SystemPartitions:
        """Fetch and decode diskutil list without any backfilling."""
        raw = self._query(
            commands.list_command(args, self.settings.diskutil),
            "list all disks"
        )
        return self.decoder.decode_system_partitions(io.BytesIO(raw.encode("utf-8")))

    def repair_disk(self, device_id: str) -> str:
        """
        Repair the disk for a device identifier (requires root).

        Returns:
            diskutil's output

        Raises:
            CommandError: If diskutil fails
        """
        cmd = commands.repair_disk_command(device_id, self.settings.diskutil, self.settings.shell)
        logger.info(f"Repairing disk {device_id}")
        return self._execute(cmd, "repair the disk", mutating=True)

    def resize_container(self, device_id: str, size: Union[str, int, None] = commands.GROW_TO_MAXIMUM) -> str:
        """
        Resize an APFS container.

        Args:
            device_id: Device identifier of the container
            size: Human readable size (e.g. "110g", "1.5t"), or 0 to grow to the maximum size

        Returns:
            diskutil's output

        Raises:
            InvalidSizeError: If the size isn't a valid diskutil size
            CommandError: If diskutil fails
        """
        cmd = commands.resize_container_command(device_id, size, self.settings.diskutil)
        target = "maximum size" if cmd[-1] == commands.GROW_TO_MAXIMUM else cmd[-1]
        logger.info(f"Resizing APFS container {device_id} to {target}")
        return self._execute(cmd, "resize the container", mutating=True)

    def container_free_space(self, device_id: str) -> int:
        """
        Return the free space of the APFS container holding device_id.

        Raises:
            FreeSpaceError: If the free space is at or below MINIMUM_GROW_FREE_SPACE
        """
        disk = self.fetch_disk_info(device_id)
        free_space = disk.container_free_space if disk.container_free_space is not None else disk.free_space
        free_space = free_space or 0
        logger.debug(f"Free space for {device_id}: {bytes_to_human_readable(free_space)}")
        check_free_space(free_space)
        return free_space

    def _query(self, cmd: List[str], action: str) -> str:
        return self._execute(cmd, action, mutating=False)

    def _execute(self, cmd: List[str], action: str, mutating: bool) -> str:
        run = self.cmd_runner.run if mutating else self.cmd_runner.run_real
        try:
            result = run(cmd)
        except subprocess.CalledProcessError as e:
            raise CommandError(
                f"failed to run diskutil command to {action}, stderr: [{e.stderr or ''}]: {e}",
                stdout=e.stdout or "",
                stderr=e.stderr or ""
            ) from e
        except UnicodeDecodeError as e:
            raise DecodeError(f"diskutil output to {action} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise CommandError(f"failed to run diskutil command to {action}: {e}") from e

        return result.stdout
