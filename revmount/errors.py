"""Module defining the errors that can occur while establishing a reverse mount."""

from typing import Any

from revmount.request import MountOutcome


class MountError(RuntimeError):
    """Base class for all failures to establish a reverse mount."""


class EnvironmentFailure(MountError):
    """
    Raised when the environment cannot support a mount at all.

    Examples are an unreadable mount table or a required binary that is missing. Waiting
    does not resolve these, so they are never retried.
    """


class SpawnFailure(MountError):
    """Raised when the operating system rejects the creation of a process."""

    def __init__(self, command: Any, cause: OSError) -> None:
        """Instantiate the exception with the command that failed to start."""
        super().__init__(f"failed to start {command}: {cause}")

        self.command = command
        self.cause = cause


class MountTimeout(MountError):
    """
    Raised when the mount did not show up within the verification budget.

    Both diagnostic texts are carried verbatim so that an operator can tell a remote
    authentication failure apart from a local mount rejection.
    """

    def __init__(
        self, host_path: str, guest_path: str, server_stderr: str, client_stderr: str
    ) -> None:
        """Instantiate the exception with the captured stderr of both processes."""
        message = (
            f"failed to mount {guest_path} on {host_path}\n"
            f"sftp-server stderr:\n{server_stderr}\n"
            f"sshfs stderr:\n{client_stderr}"
        )
        super().__init__(message)

        self.message = message

        self.host_path = host_path
        self.guest_path = guest_path
        self.server_stderr = server_stderr
        self.client_stderr = client_stderr

        self.outcome = MountOutcome(
            success=False, server_stderr=server_stderr, client_stderr=client_stderr
        )
