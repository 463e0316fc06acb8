"""Data structures describing a mount request and its outcome."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Optional, Tuple


def normalize_host_path(path: str) -> str:
    """
    Normalize a host path for use as a mount point.

    The path is made absolute and a trailing slash is stripped, because the mount table
    lists mount points that way. The result is used verbatim both as the sshfs mount
    point argument and as the value that is looked up in the mount table.
    """
    path = os.path.abspath(path)

    if len(path) > 1:
        path = path.rstrip("/") or "/"

    return path


@dataclass(frozen=True)
class SSHInfo:
    """Connection parameters for the SSH session to the guest."""

    host: str
    port: int = 22
    username: Optional[str] = None

    # Ordered by preference, only the first one is passed to ssh.
    identity_files: Tuple[str, ...] = ()

    @property
    def identity_file(self) -> Optional[str]:
        """Get the identity file that is used for authentication, if any."""
        return self.identity_files[0] if self.identity_files else None


@dataclass(frozen=True)
class MountRequest:
    """Everything needed to mount a guest directory on the host."""

    guest_path: str
    host_path: str
    ssh: SSHInfo

    # Raw option strings supplied by the user, split like a shell would.
    ssh_opts_append: str = ""
    sshfs_opts_append: str = ""

    @property
    def mount_point(self) -> str:
        """Get the normalized host path that the guest directory is mounted on."""
        return normalize_host_path(self.host_path)


@dataclass(frozen=True)
class MountOutcome:
    """Result of a mount attempt."""

    success: bool

    # Captured stderr of both processes, only filled in on failure (see MountTimeout).
    server_stderr: str = field(default="")
    client_stderr: str = field(default="")
