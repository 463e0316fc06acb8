"""
Module that implements the reverse mount of a guest directory on the host.

A reverse mount runs sshfs on the host in slave mode, where it speaks SFTP over its own
stdin and stdout, and connects those to an sftp-server that is started on the guest
through ssh. The mount is established like this:

1. Compose the ssh and sshfs command lines.
2. Allocate the pipes between both processes and create their diagnostic files.
3. Start both processes, detached from revmount.
4. Poll the mount table until the mount shows up or the budget is exhausted.

The processes are never owned by revmount. They keep running after a successful mount
and they are also left running if the mount doesn't show up in time.
"""

import contextlib
from enum import auto, Enum
import logging
import os
import time
from typing import Any, Callable, IO, Optional

import fasteners

from revmount.binaries import verify_binaries
import revmount.commands as commands
from revmount.config import BinaryConfig
import revmount.constants as constants
from revmount.errors import MountTimeout
from revmount.launcher import get_launcher, ProcessLauncher
from revmount.logger import get_logger
from revmount.mounts import MountStatusChecker
from revmount.pipes import PipeBridge
from revmount.request import MountOutcome, MountRequest

_log = get_logger("mount")


class MountState(Enum):
    """Stages of a mount attempt."""

    IDLE = auto()
    PREPARING = auto()
    LAUNCHING = auto()
    VERIFYING = auto()

    # Terminal states
    MOUNTED = auto()
    FAILED = auto()


class MountOrchestrator:
    """Drives a single reverse mount attempt from start to a verified outcome."""

    def __init__(
        self,
        request: MountRequest,
        diagnostics_dir: str,
        expand_guest_path: Callable[[str], str],
        binaries: Optional[BinaryConfig] = None,
        checker: Optional[MountStatusChecker] = None,
        launcher: Optional[ProcessLauncher] = None,
        logger: logging.Logger = _log,
    ) -> None:
        """Prepare a mount attempt for the request."""
        self._request = request
        self._diagnostics_dir = diagnostics_dir
        self._expand_guest_path = expand_guest_path
        self._binaries = binaries or BinaryConfig()
        self._log = logger

        self._checker = checker or MountStatusChecker(logger=logger)
        self._launcher = launcher or get_launcher(logger=logger)

        self.state = MountState.IDLE

    @property
    def server_stderr_path(self) -> str:
        """Path of the file that captures stderr of ssh and sftp-server."""
        return os.path.join(self._diagnostics_dir, constants.SERVER_STDERR_FILENAME)

    @property
    def client_stderr_path(self) -> str:
        """Path of the file that captures stderr of sshfs."""
        return os.path.join(self._diagnostics_dir, constants.CLIENT_STDERR_FILENAME)

    def mount(self) -> MountOutcome:
        """
        Mount the guest path on the host path and verify that it worked.

        Raises MountTimeout with the stderr of both processes if the mount does not
        show up in time. Environment and spawn failures are raised immediately.
        """
        os.makedirs(self._diagnostics_dir, exist_ok=True)

        lock_path = os.path.join(self._diagnostics_dir, constants.LOCK_FILENAME)

        with fasteners.InterProcessLock(lock_path):
            with contextlib.ExitStack() as stack:
                try:
                    return self._mount(stack)
                except Exception:
                    self.state = MountState.FAILED
                    raise

        # https://github.com/python/mypy/issues/7726
        assert False, "unreachable"

    def _mount(self, stack: contextlib.ExitStack) -> MountOutcome:
        mount_point = self._request.mount_point

        # Compose both commands
        self.state = MountState.PREPARING

        verify_binaries(self._binaries.ssh, self._binaries.sshfs, self._log)

        guest_path = self._expand_guest_path(self._request.guest_path)

        server_command = commands.compose_server_command(
            self._binaries.ssh,
            self._binaries.sftp_server,
            self._request.ssh,
            self._request.ssh_opts_append,
        )
        client_command = commands.compose_client_command(
            self._binaries.sshfs,
            guest_path,
            mount_point,
            self._request.sshfs_opts_append,
        )

        self._log.debug(f"ssh cmd: {commands.render(server_command)}")
        self._log.debug(f"sshfs cmd: {commands.render(client_command)}")
        self._log.info(f"mounting {guest_path} on {mount_point}")

        # Wire up both processes and start them
        self.state = MountState.LAUNCHING

        bridge = PipeBridge()
        stack.callback(bridge.close)

        # Diagnostic files must exist before the processes start writing to them
        server_stderr = self._open_diagnostics(stack, self.server_stderr_path)
        client_stderr = self._open_diagnostics(stack, self.client_stderr_path)

        server_stdin, server_stdout = bridge.server_endpoints()
        self._launcher.launch(
            server_command, server_stdin, server_stdout, server_stderr
        )

        client_stdin, client_stdout = bridge.client_endpoints()
        self._launcher.launch(
            client_command, client_stdin, client_stdout, client_stderr
        )

        # Check that the mount made it
        self.state = MountState.VERIFYING

        if self._wait_for_mount(mount_point):
            self.state = MountState.MOUNTED
            self._log.info(f"mounted {guest_path} on {mount_point}")
            return MountOutcome(success=True)

        self.state = MountState.FAILED

        server_text = self._read_diagnostics(server_stderr)
        client_text = self._read_diagnostics(client_stderr)

        raise MountTimeout(mount_point, guest_path, server_text, client_text)

    def _wait_for_mount(self, mount_point: str) -> bool:
        """Poll the mount table with a fixed number of attempts and interval."""
        for attempt in range(constants.MOUNT_CHECK_ATTEMPTS):
            if attempt > 0:
                time.sleep(constants.MOUNT_CHECK_INTERVAL)

            self._log.debug(
                f"checking mount ({attempt + 1}/{constants.MOUNT_CHECK_ATTEMPTS})"
            )

            if self._checker.is_mounted(mount_point):
                return True

        return False

    @staticmethod
    def _open_diagnostics(stack: contextlib.ExitStack, path: str) -> IO[Any]:
        """Create (or truncate) a diagnostic file for the stderr of a process."""
        f = open(path, "w+", encoding="utf-8", errors="replace")
        stack.callback(f.close)
        return f

    @staticmethod
    def _read_diagnostics(f: IO[Any]) -> str:
        """Read a diagnostic file from the start."""
        f.seek(0)
        return f.read()
