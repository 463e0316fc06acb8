"""Module that adds flags to pytest to enable certain extra tests."""

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--sshfs",
        action="store_true",
        default=False,
        help="Run tests that mount with a real sshfs",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "sshfs: mark test as requiring sshfs to run")


def pytest_collection_modifyitems(config, items):
    if not config.getoption("--sshfs"):
        skip_sshfs = pytest.mark.skip(reason="only runs with --sshfs option")

        for item in items:
            if "sshfs" in item.keywords:
                item.add_marker(skip_sshfs)
