import os

import pytest

from revmount.errors import EnvironmentFailure
from revmount.mounts import decode_mount_point, MountStatusChecker


@pytest.fixture
def mount_table(tmp_path):
    path = tmp_path / "mounts"
    path.write_text(
        "sysfs /sys sysfs rw,nosuid,nodev,noexec,relatime 0 0\n"
        "endpoint /mnt/share fuse.mount rw,nosuid,nodev 0 0\n"
        "endpoint /mnt/with\\040space fuse.sshfs rw,nosuid,nodev 0 0\n"
        "endpoint /mnt/it's fuse.sshfs rw,nosuid,nodev 0 0\n"
        "\n"
    )
    return path


def test_mounted(mount_table):
    checker = MountStatusChecker(str(mount_table))
    assert checker.is_mounted("/mnt/share")


def test_mounted_trailing_slash(mount_table):
    checker = MountStatusChecker(str(mount_table))
    assert checker.is_mounted("/mnt/share/")


def test_not_mounted(mount_table):
    checker = MountStatusChecker(str(mount_table))

    assert not checker.is_mounted("/mnt")
    assert not checker.is_mounted("/mnt/share/sub")
    assert not checker.is_mounted("endpoint")


def test_mounted_escaped(mount_table):
    checker = MountStatusChecker(str(mount_table))

    assert checker.is_mounted("/mnt/with space")
    assert checker.is_mounted("/mnt/it's")


def test_repeatable_query(mount_table):
    checker = MountStatusChecker(str(mount_table))
    path = "/mnt/new"

    assert not checker.is_mounted(path)
    assert not checker.is_mounted(path)

    with open(mount_table, "a") as f:
        f.write("endpoint /mnt/new fuse.sshfs rw 0 0\n")

    assert checker.is_mounted(path)
    assert checker.is_mounted(path)


def test_unreadable_mount_table(tmp_path):
    checker = MountStatusChecker(str(tmp_path / "nonexistent"))

    with pytest.raises(EnvironmentFailure) as e:
        checker.is_mounted("/mnt/share")

    assert "failed to read mount table" in str(e.value)


def test_decode_mount_point():
    assert decode_mount_point(b"/a\\040b") == "/a b"
    assert decode_mount_point(b"/a\\011b") == "/a\tb"
    assert decode_mount_point(b"/a\\134b") == "/a\\b"
    assert decode_mount_point("/café".encode()) == "/café"


def test_mounted_relative_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    table = tmp_path / "mounts"
    mount_point = os.path.join(os.getcwd(), "mnt")
    table.write_text(f"guest:/x {mount_point} fuse.sshfs rw 0 0\n")

    checker = MountStatusChecker(str(table))

    assert checker.is_mounted("mnt")
    assert checker.is_mounted("mnt/")
