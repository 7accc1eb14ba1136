"""
macOS release detection and diskutil wrapper selection.

This module maps a macOS release to the release profile its diskutil needs.
Supporting a new release only requires a new Release member and an entry in
RELEASE_PROFILES.
"""
import logging
import re
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from macdiskutil.config import Settings
from macdiskutil.core.decoder import PlistDecoder
from macdiskutil.core.diskutil import DiskUtility
from macdiskutil.core.exceptions import CommandError, UnsupportedReleaseError
from macdiskutil.utils.command import CommandRunner
from macdiskutil.utils.types import ReleaseProfile

logger = logging.getLogger('macdiskutil')


class Release(Enum):
    """macOS releases with a known diskutil behavior"""
    MOJAVE = "Mojave"
    CATALINA = "Catalina"
    BIG_SUR = "Big Sur"
    MONTEREY = "Monterey"


RELEASE_PROFILES = {
    Release.MOJAVE: ReleaseProfile.BACKFILL_REQUIRED,
    Release.CATALINA: ReleaseProfile.STANDARD,
    Release.BIG_SUR: ReleaseProfile.STANDARD,
    Release.MONTEREY: ReleaseProfile.STANDARD,
}

# (major, minor) product version prefixes; minor None matches any minor version
RELEASE_VERSIONS = {
    (10, 14): Release.MOJAVE,
    (10, 15): Release.CATALINA,
    (11, None): Release.BIG_SUR,
    (12, None): Release.MONTEREY,
}

VERSION_PATTERN = re.compile(r'^(\d+)(?:\.(\d+))?(?:\.(\d+))?$')


def parse_version(version: str) -> Tuple[int, int, int]:
    """
    Parse a macOS product version such as "10.14.6" or "12.1".

    Raises:
        ValueError: If the version isn't made of up to three numbers
    """
    match = VERSION_PATTERN.match(version.strip())
    if not match:
        raise ValueError(f"Invalid macOS product version: {version!r}")
    major, minor, patch = (int(part) if part else 0 for part in match.groups())
    return major, minor, patch


def resolve_release(release: Union[Release, str]) -> Release:
    """
    Resolve a release from a Release member, its display name or its member name.

    Raises:
        UnsupportedReleaseError: If the release is unknown
    """
    if isinstance(release, Release):
        return release

    name = str(release).strip()
    for candidate in Release:
        if name.lower() in (candidate.value.lower(), candidate.name.lower()):
            return candidate
    raise UnsupportedReleaseError(f"unknown release: {release!r}")


@dataclass(frozen=True)
class Product:
    """The macOS product running on the host"""
    release: Release
    version: str

    @classmethod
    def from_version_string(cls, version: str) -> "Product":
        """
        Build a Product from the output of sw_vers -productVersion.

        Raises:
            ValueError: If the version can't be parsed
            UnsupportedReleaseError: If the version isn't a supported release
        """
        major, minor, _ = parse_version(version)
        release = RELEASE_VERSIONS.get((major, minor)) or RELEASE_VERSIONS.get((major, None))
        if release is None:
            raise UnsupportedReleaseError(f"unknown release for macOS {version.strip()}")
        return cls(release, version.strip())


def detect_product(cmd_runner: CommandRunner) -> Product:
    """
    Detect the macOS product of the host with sw_vers.

    Args:
        cmd_runner: CommandRunner instance for executing commands

    Returns:
        The detected Product
    """
    try:
        result = cmd_runner.run_real(["sw_vers", "-productVersion"])
    except subprocess.CalledProcessError as e:
        raise CommandError(
            f"failed to run sw_vers to detect the macOS version, stderr: [{e.stderr or ''}]: {e}",
            stdout=e.stdout or "",
            stderr=e.stderr or ""
        ) from e
    except OSError as e:
        raise CommandError(f"failed to run sw_vers to detect the macOS version: {e}") from e

    product = Product.from_version_string(result.stdout)
    logger.info(f"Detected macOS {product.release.value} ({product.version})")
    return product


def select(
    release: Union[Release, str],
    version: Optional[str] = None,
    cmd_runner: Optional[CommandRunner] = None,
    decoder: Optional[PlistDecoder] = None,
    settings: Optional[Settings] = None
) -> DiskUtility:
    """
    Create the diskutil wrapper for a macOS release.

    Args:
        release: Release member or name (e.g. "Big Sur")
        version: Product version, kept on the wrapper for reference
        cmd_runner: CommandRunner instance for executing commands
        decoder: Decoder for diskutil's plist output
        settings: Settings for the diskutil wrapper

    Returns:
        DiskUtility bound to the release's profile

    Raises:
        UnsupportedReleaseError: If the release isn't supported
    """
    resolved = resolve_release(release)
    profile = RELEASE_PROFILES[resolved]

    logger.debug(f"Using {profile.value} diskutil profile for macOS {resolved.value}")
    return DiskUtility(profile, version, cmd_runner=cmd_runner, decoder=decoder, settings=settings)


def for_product(
    product: Product,
    cmd_runner: Optional[CommandRunner] = None,
    decoder: Optional[PlistDecoder] = None,
    settings: Optional[Settings] = None
) -> DiskUtility:
    """Create the diskutil wrapper for a detected Product."""
    return select(product.release, product.version, cmd_runner, decoder, settings)
