"""
Runtime configuration for macdiskutil.

Settings can be given explicitly or read from MACDISKUTIL_* environment variables.
"""
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from macdiskutil.utils.command import CommandRunner, SimulationMode

logger = logging.getLogger('macdiskutil')

DEFAULT_DISKUTIL = "diskutil"
DEFAULT_SHELL = "/bin/zsh"


def _env_flag(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() not in {"", "0", "false", "no"}


@dataclass(frozen=True)
class Settings:
    """
    Configuration shared by the diskutil wrappers.

    Attributes:
        diskutil: Path or name of the diskutil executable
        shell: Shell used to answer diskutil's interactive confirmation prompts
        backfill_workers: Number of parallel physical store queries
        simulate: Whether mutating commands are only logged
    """
    diskutil: str = DEFAULT_DISKUTIL
    shell: str = DEFAULT_SHELL
    backfill_workers: int = 1
    simulate: bool = False

    def __post_init__(self):
        if self.backfill_workers < 1:
            raise ValueError(f"backfill_workers must be at least 1, got {self.backfill_workers}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from the environment.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings with defaults for unset variables
        """
        env = os.environ if environ is None else environ

        workers = env.get("MACDISKUTIL_BACKFILL_WORKERS", "").strip()
        try:
            backfill_workers = int(workers) if workers else 1
        except ValueError:
            raise ValueError(f"Invalid MACDISKUTIL_BACKFILL_WORKERS value: {workers}")

        return cls(
            diskutil=env.get("MACDISKUTIL_DISKUTIL") or DEFAULT_DISKUTIL,
            shell=env.get("MACDISKUTIL_SHELL") or DEFAULT_SHELL,
            backfill_workers=backfill_workers,
            simulate=_env_flag(env.get("MACDISKUTIL_SIMULATE")),
        )

    def runner(self, colored_output: bool = True) -> CommandRunner:
        """Create a CommandRunner matching these settings."""
        mode = SimulationMode.SIMULATE if self.simulate else SimulationMode.DISABLED
        if self.simulate:
            logger.info("Running in simulation mode - mutating diskutil commands will not be executed")
        return CommandRunner(mode, colored_output)
