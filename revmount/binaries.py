"""Module for checking the local binaries that a reverse mount depends on."""

import logging
import re
import shutil
import subprocess
from typing import Optional

from semver import VersionInfo

from revmount.constants import SSHFS_MIN_VERSION
from revmount.errors import EnvironmentFailure
from revmount.logger import get_logger

_log = get_logger("binaries")

_SSHFS_VERSION = re.compile(r"SSHFS version (\d+)\.(\d+)(?:\.(\d+))?")


def find_executable(path: str) -> str:
    """Resolve an executable by path or by name on PATH."""
    resolved = shutil.which(path)

    if resolved is None:
        raise EnvironmentFailure(f"required binary {path} not found")

    return resolved


def parse_sshfs_version(output: str) -> Optional[VersionInfo]:
    """Extract the sshfs version from the output of 'sshfs --version'."""
    m = _SSHFS_VERSION.search(output)

    if m is None:
        return None

    major, minor, patch = m.groups()
    return VersionInfo(int(major), int(minor), int(patch or 0))


def sshfs_version(sshfs_path: str) -> Optional[VersionInfo]:
    """Ask sshfs for its version. Older releases print it to stderr."""
    try:
        result = subprocess.run(
            [sshfs_path, "--version"],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            timeout=10,
        )
    except FileNotFoundError:
        raise EnvironmentFailure(f"required binary {sshfs_path} not found")
    except (OSError, subprocess.TimeoutExpired) as e:
        raise EnvironmentFailure(f"failed to query version of {sshfs_path}: {e}")

    return parse_sshfs_version(result.stdout.decode(errors="replace"))


def verify_binaries(
    ssh_path: str, sshfs_path: str, logger: logging.Logger = _log
) -> None:
    """Ensure that ssh and an sshfs that supports slave mode are available."""
    find_executable(ssh_path)
    find_executable(sshfs_path)

    version = sshfs_version(sshfs_path)

    if version is None:
        logger.warning(f"could not determine version of {sshfs_path}")
    elif version < VersionInfo.parse(SSHFS_MIN_VERSION):
        raise EnvironmentFailure(
            f"{sshfs_path} {version} does not support slave mode "
            f"(requires {SSHFS_MIN_VERSION} or newer)"
        )
    else:
        logger.debug(f"using sshfs {version}")
