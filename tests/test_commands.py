"""Tests for diskutil command construction."""

import pytest

from macdiskutil.core import commands
from macdiskutil.core.exceptions import InvalidSizeError


def test_list_command_forwards_args():
    assert commands.list_command() == ["diskutil", "list", "-plist"]
    assert commands.list_command(["internal", "physical"]) == [
        "diskutil", "list", "-plist", "internal", "physical",
    ]


def test_info_command():
    assert commands.info_command("disk1s1") == ["diskutil", "info", "-plist", "disk1s1"]
    assert commands.info_command("disk0", diskutil="/usr/sbin/diskutil")[0] == "/usr/sbin/diskutil"


def test_repair_disk_command_answers_prompt():
    assert commands.repair_disk_command("disk0") == ["/bin/zsh", "-c", "yes | diskutil repairDisk disk0"]


def test_repair_disk_command_quotes_identifier():
    cmd = commands.repair_disk_command("disk0; rm -rf /", shell="/bin/bash")
    assert cmd[0] == "/bin/bash"
    assert cmd[2] == "yes | diskutil repairDisk 'disk0; rm -rf /'"


@pytest.mark.parametrize("size", [0, "0", " 0 ", None, commands.GROW_TO_MAXIMUM])
def test_resize_zero_means_grow_to_maximum(size):
    cmd = commands.resize_container_command("disk1", size)
    assert cmd == ["diskutil", "apfs", "resizeContainer", "disk1", "0"]


@pytest.mark.parametrize("size", ["110g", "1.5t", "500000000b", "20%", "1000s"])
def test_resize_human_readable_size(size):
    assert commands.resize_container_command("disk1", size)[-1] == size


@pytest.mark.parametrize("size", ["big", "-5g", "10 gigs", ""])
def test_resize_invalid_size(size):
    with pytest.raises(InvalidSizeError):
        commands.normalize_container_size(size)
