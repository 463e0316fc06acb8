"""
Module implementing the command-line interface and invoking the main logic of revmount.

revmount mounts a directory of a guest machine on the host without the guest having to
be able to connect back to the host. Instead of running an SSH server on the host, the
host connects to the guest with ssh, starts sftp-server there and feeds its stdio into
sshfs running on the host in slave mode.
"""

import os
import signal
import sys
from typing import List, NoReturn, Optional

from revmount.config import Config
import revmount.constants as constants
from revmount.errors import MountTimeout
from revmount.expansion import RemotePathExpander
from revmount.logger import log, set_verbosity
from revmount.mount import MountOrchestrator
from revmount.request import MountRequest, SSHInfo
from .args import Arguments


def main(arguments: Optional[List[str]] = None) -> NoReturn:
    """
    Mount a guest directory with the given arguments.

    Defaults to parsing command-line arguments from sys.argv if none are specified.
    """
    # Parse command-line arguments.
    args = Arguments.parse(arguments)

    # Configure debug logging.
    set_verbosity(args.debug)

    config = Config.load(os.path.expanduser(args.config))

    request = MountRequest(
        guest_path=args.guest_path,
        host_path=args.host_path,
        ssh=SSHInfo(
            host=args.destination,
            port=args.port,
            username=args.user,
            identity_files=tuple(args.identity),
        ),
        ssh_opts_append=args.ssh_opts,
        sshfs_opts_append=args.sshfs_opts,
    )

    if args.expand:
        expand_guest_path = RemotePathExpander(
            request.ssh, config.binaries.ssh, request.ssh_opts_append
        )
    else:
        expand_guest_path = _verbatim

    orchestrator = MountOrchestrator(
        request,
        os.path.expanduser(args.data_dir or config.diagnostics.path),
        expand_guest_path,
        config.binaries,
    )

    try:
        orchestrator.mount()
        exit_code = 0
    except KeyboardInterrupt:
        exit_code = 128 + signal.SIGINT
    except MountTimeout as e:
        log.error(e.message)
        exit_code = constants.REVMOUNT_ERROR_CODE
    except Exception as e:
        log.error(f"failed to mount: {e}")
        exit_code = constants.REVMOUNT_ERROR_CODE

    sys.exit(exit_code)


def _verbatim(path: str) -> str:
    return path
