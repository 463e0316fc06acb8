"""
Module for starting processes that keep running independently of revmount.

The processes that make up a reverse mount must outlive revmount itself, and also the
shell that revmount was started from. How that is achieved depends on the platform:

* POSIX: the process is moved into its own process group, so that signals delivered to
  the process group of the invoking shell (e.g. SIGHUP when the terminal closes) don't
  reach it.
* Windows: the process is created without a console and in a new process group, since
  it would otherwise be terminated when the console of the invoking shell closes.

Callers only deal with the ProcessLauncher interface and get one of these through
get_launcher().
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging
import os
import subprocess
import sys
import threading
from typing import Any, Dict, IO, List, Sequence

from revmount.errors import EnvironmentFailure, SpawnFailure
from revmount.logger import get_logger

_log = get_logger("launcher")

# https://docs.microsoft.com/en-us/windows/win32/procthread/process-creation-flags
DETACHED_PROCESS = 0x00000008
CREATE_NEW_PROCESS_GROUP = 0x00000200


@dataclass(frozen=True)
class ProcessHandle:
    """Record of a launched process. The process is not owned by revmount."""

    pid: int
    command: List[str]
    stdin: int
    stdout: int
    stderr_path: str


class ProcessLauncher(ABC):
    """Starts a detached process with its stdio bound to the given endpoints."""

    def __init__(self, logger: logging.Logger = _log) -> None:
        """Instantiate the launcher."""
        self._log = logger

    def launch(
        self,
        command: Sequence[str],
        stdin: int,
        stdout: int,
        stderr: IO[Any],
        isolate: bool = True,
    ) -> ProcessHandle:
        """
        Start the command and return without waiting for it.

        The stderr file must already exist, so that any output the process produces from
        the very start is captured. FileNotFoundError is treated as a missing binary,
        every other refusal of the OS to create the process as a spawn failure.
        """
        command = list(command)

        self._log.debug(f"launching {command}")

        try:
            proc = subprocess.Popen(
                command,
                stdin=stdin,
                stdout=stdout,
                stderr=stderr,
                **self._popen_kwargs(isolate),
            )
        except FileNotFoundError as e:
            raise EnvironmentFailure(f"failed to find {command[0]}: {e}")
        except OSError as e:
            raise SpawnFailure(command, e)

        self._detach(proc)

        self._log.debug(f"launched {command[0]} with pid {proc.pid}")

        return ProcessHandle(
            pid=proc.pid,
            command=command,
            stdin=stdin,
            stdout=stdout,
            stderr_path=getattr(stderr, "name", ""),
        )

    @abstractmethod
    def _popen_kwargs(self, isolate: bool) -> Dict[str, Any]:
        """Get the platform specific arguments to create a detached process."""
        raise NotImplementedError()

    def _detach(self, proc: subprocess.Popen) -> None:
        """Give up ownership of the process after it has been started."""


class PosixProcessLauncher(ProcessLauncher):
    """Launcher that isolates processes in their own process group."""

    def _popen_kwargs(self, isolate: bool) -> Dict[str, Any]:
        if isolate:
            return {"preexec_fn": os.setpgrp}
        else:
            return {}

    def _detach(self, proc: subprocess.Popen) -> None:
        """
        Reap the process in the background once it exits.

        This is not a join: nothing waits for the thread. It merely prevents the process
        from lingering as a zombie after it exits.
        """
        t = threading.Thread(target=proc.wait, daemon=True)
        t.start()


class WindowsProcessLauncher(ProcessLauncher):
    """Launcher that creates processes without a console in a new process group."""

    def _popen_kwargs(self, isolate: bool) -> Dict[str, Any]:
        if isolate:
            return {"creationflags": DETACHED_PROCESS | CREATE_NEW_PROCESS_GROUP}
        else:
            return {}


def get_launcher(
    platform: str = sys.platform, logger: logging.Logger = _log
) -> ProcessLauncher:
    """Get the process launcher for the given platform."""
    if platform.startswith("win"):
        return WindowsProcessLauncher(logger)
    else:
        return PosixProcessLauncher(logger)
