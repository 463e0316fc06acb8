"""
Module that composes the command lines of both ends of a reverse mount.

Commands are built as argument lists and are never interpreted by a local shell, so
paths and user supplied options can't inject anything. The only string that is
interpreted by a shell is the command that ssh runs on the guest, which is quoted here.
"""

import os
import shlex
from typing import List

from revmount.constants import SSH_KEEPALIVE_INTERVAL
from revmount.request import SSHInfo


def split_options(options: str) -> List[str]:
    """Split a raw option string supplied by the user like a shell would."""
    return shlex.split(options)


def render(command: List[str]) -> str:
    """Render a command as it could be typed into a shell, for display purposes."""
    return " ".join(map(shlex.quote, command))


def compose_ssh_command(
    ssh_path: str, ssh: SSHInfo, remote_command: str, ssh_opts_append: str = ""
) -> List[str]:
    """
    Compose the command that connects to the guest and runs a command there.

    User and system SSH configuration is ignored so that the connection only depends
    on the given connection parameters.
    """
    ssh_command = [ssh_path]

    # Prevent yes/no question about unknown host keys
    ssh_command.extend(["-o", "StrictHostKeyChecking=no"])

    # Send keepalives
    ssh_command.extend(["-o", f"ServerAliveInterval={SSH_KEEPALIVE_INTERVAL}"])

    # Explicit connection parameters
    if ssh.username:
        ssh_command.extend(["-o", f"User={ssh.username}"])

    ssh_command.extend(["-o", f"Port={ssh.port}"])

    if ssh.identity_file:
        ssh_command.extend(["-o", f"IdentityFile={ssh.identity_file}"])

    # Don't pick up known hosts or options from the user's or system's config
    ssh_command.extend(["-o", f"UserKnownHostsFile={os.devnull}"])
    ssh_command.extend(["-F", os.devnull])

    # Append any additional arguments
    ssh_command.extend(split_options(ssh_opts_append))

    # Specify the remote host and the command to run on it
    ssh_command.append(ssh.host)
    ssh_command.append(remote_command)

    return ssh_command


def compose_server_command(
    ssh_path: str, sftp_server_path: str, ssh: SSHInfo, ssh_opts_append: str = ""
) -> List[str]:
    """Compose the command that starts sftp-server on the guest through ssh."""
    return compose_ssh_command(
        ssh_path, ssh, shlex.quote(sftp_server_path), ssh_opts_append
    )


def compose_client_command(
    sshfs_path: str, guest_path: str, mount_point: str, sshfs_opts_append: str = ""
) -> List[str]:
    """
    Compose the command that mounts the guest path with sshfs in slave mode.

    In slave mode sshfs speaks the SFTP protocol over its own stdin and stdout rather
    than starting an ssh connection itself.
    """
    sshfs_command = [sshfs_path, f":{guest_path}", mount_point]

    # Disable caching based on mtime
    sshfs_command.extend(["-o", "noauto_cache"])

    # Communicate over stdin/stdout
    sshfs_command.extend(["-o", "slave"])

    # Append any additional arguments
    sshfs_command.extend(split_options(sshfs_opts_append))

    return sshfs_command
