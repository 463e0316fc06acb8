"""Reverse sshfs mounts of guest directories on the host."""
