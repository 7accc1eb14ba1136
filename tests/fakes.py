"""Scripted command runner and diskutil plist builders used across the tests."""

from __future__ import annotations

import plistlib
import subprocess
from typing import Any, Dict, Iterable, List, Optional, Union


Response = Union[str, BaseException, List[Union[str, BaseException]]]


class FakeRunner:
    """Stand-in for ``CommandRunner`` answering commands from a script.

    Responses are keyed by the joined command line. A response that is an
    exception is raised instead of returned; a list of responses is consumed
    one call at a time.
    """

    def __init__(self, responses: Optional[Dict[str, Response]] = None) -> None:
        self.responses: Dict[str, Response] = dict(responses or {})
        self.queries: List[List[str]] = []
        self.mutations: List[List[str]] = []

    def respond(self, cmd: str, response: Response) -> None:
        self.responses[cmd] = response

    def fail(self, cmd: str, stderr: str, returncode: int = 1) -> None:
        self.responses[cmd] = subprocess.CalledProcessError(
            returncode, cmd.split(), output="", stderr=stderr
        )

    def run(self, cmd: List[str], check: bool = True, **kwargs: Any) -> subprocess.CompletedProcess:
        self.mutations.append(list(cmd))
        return self._answer(cmd)

    def run_real(self, cmd: List[str], check: bool = True, **kwargs: Any) -> subprocess.CompletedProcess:
        self.queries.append(list(cmd))
        return self._answer(cmd)

    def _answer(self, cmd: List[str]) -> subprocess.CompletedProcess:
        key = " ".join(cmd)
        if key not in self.responses:
            raise AssertionError(f"unexpected command: {key}")
        response = self.responses[key]
        if isinstance(response, list):
            response = response.pop(0)
        if isinstance(response, BaseException):
            raise response
        return subprocess.CompletedProcess(cmd, 0, stdout=response, stderr="")

    def info_queries(self) -> List[str]:
        """Device identifiers passed to ``diskutil info``, in call order."""
        return [cmd[-1] for cmd in self.queries if cmd[1:3] == ["info", "-plist"]]


def to_plist(data: Dict[str, Any]) -> str:
    return plistlib.dumps(data).decode("utf-8")


def volume_info(device_id: str, store: Optional[str] = None, container: str = "disk1") -> str:
    """``diskutil info -plist`` output for an APFS volume."""
    data: Dict[str, Any] = {
        "DeviceIdentifier": device_id,
        "DeviceNode": f"/dev/{device_id}",
        "FilesystemType": "apfs",
        "WholeDisk": False,
        "ParentWholeDisk": container,
        "APFSContainerReference": container,
        "Size": 250000000000,
        "VolumeName": "Macintosh HD",
        "MountPoint": "/",
        "FreeSpace": 120000000000,
        "APFSContainerFree": 120000000000,
    }
    if store is not None:
        data["APFSPhysicalStores"] = [{"APFSPhysicalStore": store}]
    return to_plist(data)


def system_listing(volumes: Iterable[str] = ("disk1s1", "disk1s2"), stores: Iterable[str] = ()) -> Dict[str, Any]:
    """``diskutil list -plist`` data: one disk with an APFS partition and one container."""
    volumes = list(volumes)
    container: Dict[str, Any] = {
        "DeviceIdentifier": "disk1",
        "Size": 250000000000,
        "Content": "",
        "OSInternal": False,
        "Partitions": [],
        "APFSVolumes": [
            {
                "DeviceIdentifier": device_id,
                "Size": 10000000000,
                "VolumeName": f"Volume {device_id}",
                "MountPoint": f"/Volumes/{device_id}",
                "DiskUUID": "00000000-0000-0000-0000-000000000000",
                "VolumeUUID": "00000000-0000-0000-0000-000000000000",
                "OSInternal": False,
            }
            for device_id in volumes
        ],
    }
    stores = list(stores)
    if stores:
        container["APFSPhysicalStores"] = [{"DeviceIdentifier": store} for store in stores]

    return {
        "AllDisks": ["disk0", "disk0s1", "disk0s2", "disk1"] + volumes,
        "WholeDisks": ["disk0", "disk1"],
        "VolumesFromDisks": [f"Volume {device_id}" for device_id in volumes],
        "AllDisksAndPartitions": [
            {
                "DeviceIdentifier": "disk0",
                "Size": 251000193024,
                "Content": "GUID_partition_scheme",
                "OSInternal": False,
                "Partitions": [
                    {
                        "DeviceIdentifier": "disk0s1",
                        "Size": 209715200,
                        "Content": "EFI",
                        "VolumeName": "EFI",
                        "DiskUUID": "11111111-1111-1111-1111-111111111111",
                    },
                    {
                        "DeviceIdentifier": "disk0s2",
                        "Size": 250790436864,
                        "Content": "Apple_APFS",
                        "DiskUUID": "22222222-2222-2222-2222-222222222222",
                    },
                ],
            },
            container,
        ],
    }
