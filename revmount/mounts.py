"""Module for querying the mount table of the operating system."""

import logging
import re

from revmount.constants import MOUNT_TABLE_PATH
from revmount.errors import EnvironmentFailure
from revmount.logger import get_logger
from revmount.request import normalize_host_path

_log = get_logger("mounts")

# The kernel escapes whitespace and backslashes in mount points as \ooo sequences
_OCTAL_ESCAPE = re.compile(rb"\\([0-7]{3})")


def decode_mount_point(field: bytes) -> str:
    """Unescape a mount point as listed in the mount table."""
    unescaped = _OCTAL_ESCAPE.sub(lambda m: bytes([int(m.group(1), 8)]), field)
    return unescaped.decode(errors="surrogateescape")


class MountStatusChecker:
    """Reports whether a path currently shows up as a mount point."""

    def __init__(
        self, mount_table: str = MOUNT_TABLE_PATH, logger: logging.Logger = _log
    ) -> None:
        """Instantiate the checker for the given mount table file."""
        self._mount_table = mount_table
        self._log = logger

    def is_mounted(self, host_path: str) -> bool:
        """Check if the (normalized) host path is listed as a mount point."""
        mount_point = normalize_host_path(host_path)

        try:
            with open(self._mount_table, "rb") as f:
                mount_lines = f.readlines()
        except OSError as e:
            raise EnvironmentFailure(
                f"failed to read mount table {self._mount_table}: {e}"
            )

        for line in mount_lines:
            fields = line.split()

            if len(fields) < 2:
                continue

            if decode_mount_point(fields[1]) == mount_point:
                self._log.debug(f"found mount of {mount_point}: {line.strip()!r}")
                return True

        return False
