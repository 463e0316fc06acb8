"""
Module that connects the stdio of two processes into one full-duplex channel.

Process creation only offers half-duplex redirection of stdin and stdout, so the
channel between ssh (which runs sftp-server on the guest) and sshfs (running in slave
mode on the host) is composed out of two pipes running in opposite directions:

         stdout => write    server_to_client    read => stdin
        />------------->====================>------------->\\
       /                                                    \\
       |                                                    |
    ssh + sftp-server                                 sshfs -o slave
       |                                                    |
       \\                                                    /
        \\<-------------<====================<-------------</
         stdin <= read     client_to_server    write <= stdout
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
import os
from typing import Tuple


@dataclass(frozen=True)
class PipePair:
    """The read and write end of a single half-duplex pipe."""

    read_fd: int
    write_fd: int

    @staticmethod
    def allocate() -> PipePair:
        """Allocate a new pipe."""
        read_fd, write_fd = os.pipe()
        return PipePair(read_fd, write_fd)

    def close(self) -> None:
        """Close both ends of the pipe in this process."""
        for fd in (self.read_fd, self.write_fd):
            with contextlib.suppress(OSError):
                os.close(fd)


class PipeBridge:
    """A fresh pair of pipes that forms a full-duplex channel between two processes."""

    def __init__(self) -> None:
        """Allocate both pipes of the channel."""
        self.server_to_client = PipePair.allocate()

        try:
            self.client_to_server = PipePair.allocate()
        except OSError:
            self.server_to_client.close()
            raise

    def server_endpoints(self) -> Tuple[int, int]:
        """Get the (stdin, stdout) file descriptors for the server-side process."""
        return self.client_to_server.read_fd, self.server_to_client.write_fd

    def client_endpoints(self) -> Tuple[int, int]:
        """Get the (stdin, stdout) file descriptors for the client-side process."""
        return self.server_to_client.read_fd, self.client_to_server.write_fd

    def close(self) -> None:
        """
        Close the controller's copies of all pipe ends.

        The launched processes hold their own copies, so this only ensures that the
        processes see end-of-file once their peer exits.
        """
        self.server_to_client.close()
        self.client_to_server.close()

    def __enter__(self) -> PipeBridge:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
