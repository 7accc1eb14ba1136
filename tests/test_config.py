"""Tests for runtime settings."""

import pytest

from macdiskutil.config import DEFAULT_DISKUTIL, DEFAULT_SHELL, Settings
from macdiskutil.utils.command import SimulationMode


def test_defaults_from_empty_environment():
    settings = Settings.from_env({})
    assert settings == Settings()
    assert settings.diskutil == DEFAULT_DISKUTIL
    assert settings.shell == DEFAULT_SHELL
    assert settings.backfill_workers == 1
    assert settings.simulate is False


def test_from_environment():
    settings = Settings.from_env({
        "MACDISKUTIL_DISKUTIL": "/usr/sbin/diskutil",
        "MACDISKUTIL_SHELL": "/bin/bash",
        "MACDISKUTIL_BACKFILL_WORKERS": "4",
        "MACDISKUTIL_SIMULATE": "yes",
    })
    assert settings == Settings("/usr/sbin/diskutil", "/bin/bash", 4, True)


@pytest.mark.parametrize("value, expected", [("1", True), ("true", True), ("0", False), ("no", False), ("", False)])
def test_simulate_flag(value, expected):
    assert Settings.from_env({"MACDISKUTIL_SIMULATE": value}).simulate is expected


def test_reads_os_environ(monkeypatch):
    monkeypatch.setenv("MACDISKUTIL_BACKFILL_WORKERS", "2")
    assert Settings.from_env().backfill_workers == 2


@pytest.mark.parametrize("value", ["many", "0", "-1"])
def test_invalid_workers(value):
    with pytest.raises(ValueError):
        Settings.from_env({"MACDISKUTIL_BACKFILL_WORKERS": value})


def test_runner_mode():
    assert Settings().runner().simulation_mode == SimulationMode.DISABLED
    assert Settings(simulate=True).runner(colored_output=False).simulation_mode == SimulationMode.SIMULATE
