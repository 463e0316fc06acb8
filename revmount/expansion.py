"""Module that expands guest paths like '~/share' using the shell on the guest."""

import logging
import re
import shlex
import subprocess

from revmount.commands import compose_ssh_command
from revmount.constants import SSH_PATH
from revmount.errors import EnvironmentFailure
from revmount.logger import get_logger, summarize
from revmount.request import SSHInfo

_log = get_logger("expansion")

# The head of a '~user/...' path is sent unquoted, so only plain user names pass
_TILDE_PREFIX = re.compile(r"~[A-Za-z0-9._-]*")


def expansion_command(path: str) -> str:
    """
    Compose a remote shell command that prints the expanded path.

    A leading '~' or '~user' is left unquoted so that the remote shell expands it,
    everything else is quoted.
    """
    if path.startswith("~"):
        head, sep, tail = path.partition("/")

        if not _TILDE_PREFIX.fullmatch(head):
            raise EnvironmentFailure(f"invalid home directory in guest path {path}")

        quoted = head + sep + (shlex.quote(tail) if tail else "")
    else:
        quoted = shlex.quote(path)

    return f"printf %s {quoted}"


class RemotePathExpander:
    """Callable that expands guest paths over an SSH connection to the guest."""

    def __init__(
        self,
        ssh: SSHInfo,
        ssh_path: str = SSH_PATH,
        ssh_opts_append: str = "",
        timeout: float = 30.0,
        logger: logging.Logger = _log,
    ) -> None:
        """Instantiate the expander with the connection parameters of the guest."""
        self._ssh = ssh
        self._ssh_path = ssh_path
        self._ssh_opts_append = ssh_opts_append
        self._timeout = timeout
        self._log = logger

    def __call__(self, path: str) -> str:
        """Expand the guest path."""
        command = compose_ssh_command(
            self._ssh_path,
            self._ssh,
            expansion_command(path),
            self._ssh_opts_append,
        )

        try:
            output = subprocess.check_output(
                command,
                stdin=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                timeout=self._timeout,
            )
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode(errors="replace").strip() if e.stderr else ""
            raise EnvironmentFailure(f"failed to expand guest path {path}: {stderr}")
        except (OSError, subprocess.TimeoutExpired) as e:
            raise EnvironmentFailure(f"failed to expand guest path {path}: {e}")

        expanded = output.decode(errors="surrogateescape")

        if not expanded:
            raise EnvironmentFailure(f"guest path {path} expanded to nothing")

        self._log.debug(f"expanded guest path {path} to {summarize(expanded)}")

        return expanded
