"""Module defining various global constants."""

# revmount version
VERSION = "1.0.0"

# Special exit code for when revmount itself fails.
REVMOUNT_ERROR_CODE = 254

# Mount verification budget.
# The mount is checked at most MOUNT_CHECK_ATTEMPTS times with MOUNT_CHECK_INTERVAL
# seconds of sleep between two consecutive checks.
MOUNT_CHECK_ATTEMPTS = 7
MOUNT_CHECK_INTERVAL = 2.0

# Live mount table of the operating system
MOUNT_TABLE_PATH = "/proc/mounts"

# Default locations of the external binaries
SSH_PATH = "/usr/bin/ssh"
SFTP_SERVER_PATH = "/usr/libexec/openssh/sftp-server"
SSHFS_PATH = "/usr/bin/sshfs"

# Oldest sshfs release that supports '-o slave'
SSHFS_MIN_VERSION = "2.3.0"

# SSH keepalive interval in seconds
SSH_KEEPALIVE_INTERVAL = 30

# Files in the diagnostics directory
SERVER_STDERR_FILENAME = "sftp_server_stderr.txt"
CLIENT_STDERR_FILENAME = "sshfs_stderr.txt"
LOCK_FILENAME = "mount.lock"
