"""Module for configuration variables with defaults that are overridable by a file."""

from __future__ import annotations

from configparser import ConfigParser, SectionProxy
from dataclasses import dataclass, field
import os

import revmount.constants as constants
from revmount.logger import log


@dataclass
class BinaryConfig:
    """Locations of the external binaries."""

    ssh: str = constants.SSH_PATH
    sshfs: str = constants.SSHFS_PATH

    # Path on the guest
    sftp_server: str = constants.SFTP_SERVER_PATH

    @staticmethod
    def load(section: SectionProxy) -> BinaryConfig:
        """Load overridden variables from a section within a config file."""
        config = BinaryConfig()

        config.ssh = section.get("ssh", fallback=config.ssh)
        config.sshfs = section.get("sshfs", fallback=config.sshfs)
        config.sftp_server = section.get("sftp_server", fallback=config.sftp_server)

        return config


@dataclass
class DiagnosticsConfig:
    """Configuration variables related to the captured stderr of mount processes."""

    path: str = os.path.expanduser("~/.revmount/diagnostics")

    @staticmethod
    def load(section: SectionProxy) -> DiagnosticsConfig:
        """Load overridden variables from a section within a config file."""
        config = DiagnosticsConfig()

        config.path = os.path.expanduser(section.get("path", fallback=config.path))

        return config


@dataclass
class Config:
    """Configuration variables."""

    binaries: BinaryConfig = field(default_factory=BinaryConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)

    @staticmethod
    def load(filename: str) -> Config:
        """Load overridden configuration variables from a config file."""
        parser = ConfigParser()

        config = Config()

        try:
            with open(filename, "r") as f:
                parser.read_string(f.read(), filename)

            if "binaries" in parser:
                config.binaries = BinaryConfig.load(parser["binaries"])

            if "diagnostics" in parser:
                config.diagnostics = DiagnosticsConfig.load(parser["diagnostics"])
        except FileNotFoundError:
            log.debug(f"no config file at {filename}")
        except Exception as e:
            # An unreadable config file is not considered a fatal error since we can
            # fall back to defaults.
            log.error(f"failed to read config file {filename}: {e}")
        else:
            log.debug(f"loaded config: {config}")

        return config
