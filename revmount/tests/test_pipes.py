import os

import pytest

from revmount.pipes import PipeBridge, PipePair


def test_pipe_pair():
    pair = PipePair.allocate()

    try:
        os.write(pair.write_fd, b"abc")
        assert os.read(pair.read_fd, 3) == b"abc"
    finally:
        pair.close()


def test_pipe_pair_close():
    pair = PipePair.allocate()
    pair.close()

    with pytest.raises(OSError):
        os.write(pair.write_fd, b"abc")

    # Closing twice is harmless
    pair.close()


def test_bridge_directions():
    with PipeBridge() as bridge:
        server_stdin, server_stdout = bridge.server_endpoints()
        client_stdin, client_stdout = bridge.client_endpoints()

        os.write(server_stdout, b"to client")
        assert os.read(client_stdin, 9) == b"to client"

        os.write(client_stdout, b"to server")
        assert os.read(server_stdin, 9) == b"to server"


def test_bridge_ends_split():
    with PipeBridge() as bridge:
        server_ends = set(bridge.server_endpoints())
        client_ends = set(bridge.client_endpoints())

        assert len(server_ends | client_ends) == 4
        assert not server_ends & client_ends


def test_fresh_bridge_per_attempt():
    with PipeBridge() as a, PipeBridge() as b:
        assert set(a.server_endpoints()).isdisjoint(b.server_endpoints())


def test_bridge_end_of_file():
    bridge = PipeBridge()
    client_stdin, _ = bridge.client_endpoints()

    reader = os.dup(client_stdin)

    try:
        bridge.close()
        assert os.read(reader, 1) == b""
    finally:
        os.close(reader)
