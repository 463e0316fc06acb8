"""Module defining the command-line arguments and providing a parser for them."""

from __future__ import annotations

import argparse
import getpass
from typing import List, Optional

from revmount.constants import VERSION


class Arguments(argparse.Namespace):
    """Parsed command-line arguments."""

    host_path: str
    guest_path: str
    destination: str

    port: int
    user: str
    identity: List[str]

    ssh_opts: str
    sshfs_opts: str

    config: str
    data_dir: Optional[str]

    expand: bool
    debug: bool

    @classmethod
    def parse(cls, args: Optional[List[str]] = None) -> Arguments:
        """
        Parse command-line arguments from the given list of strings.

        Defaults to sys.argv if none are specified.
        """
        return cls._get_parser().parse_args(args, namespace=cls())

    @classmethod
    def _get_parser(cls) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="Mount a directory of a remote guest on this host by running "
            "sshfs locally in slave mode against an sftp-server on the guest.",
            usage="revmount [option...] host_path guest_path destination",
        )

        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {VERSION}",
            help="show the program version",
        )

        # Primary arguments
        parser.add_argument("host_path", type=str, help="local mount point")
        parser.add_argument("guest_path", type=str, help="directory on the guest")
        parser.add_argument("destination", type=str, help="guest host to connect to")

        # SSH connection parameters
        parser.add_argument(
            "-p", "--port", type=cls._parse_port, help="SSH port", default=22
        )
        parser.add_argument(
            "-u",
            "--user",
            type=str,
            help="SSH user (default is the current user)",
            default=getpass.getuser(),
        )
        parser.add_argument(
            "-i",
            "--identity",
            type=str,
            action="append",
            help="identity file, may be repeated (only the first is used)",
            default=[],
        )

        # Raw options passed verbatim to ssh and sshfs
        parser.add_argument(
            "--ssh-opts",
            type=str,
            help="additional arguments to pass to ssh",
            default="",
        )
        parser.add_argument(
            "--sshfs-opts",
            type=str,
            help="additional arguments to pass to sshfs",
            default="",
        )

        # Path to (optional) config file
        parser.add_argument(
            "--config",
            type=str,
            help="path to config file (default is ~/.revmount/config)",
            default="~/.revmount/config",
        )

        # Directory for captured stderr of the mount processes
        parser.add_argument(
            "--data-dir",
            type=str,
            help="directory for diagnostic files (overrides config file)",
        )

        # Use guest path verbatim
        parser.add_argument(
            "--no-expand",
            action="store_false",
            help="don't expand the guest path with the shell on the guest",
            dest="expand",
        )

        # Enable debug output for development
        parser.add_argument(
            "--debug", action="store_true", help="enable debug information"
        )

        return parser

    @staticmethod
    def _parse_port(arg: str) -> int:
        try:
            val = int(arg)
            assert 0 < val < 65536
            return val
        except (ValueError, AssertionError):
            raise argparse.ArgumentTypeError("expected port number between 1 and 65535")
