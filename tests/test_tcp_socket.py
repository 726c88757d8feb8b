import select
import socket

import pytest

from rabbitwire.errors import (
    ConnectionClosedError,
    InvalidParameterError,
    NeedReadError,
    SocketClosedError,
    SocketError,
    SocketInUseError,
)
from rabbitwire.tcp_socket import TcpSocket


@pytest.fixture
def pair():
    left, right = socket.socketpair()
    yield left, right
    for sock in (left, right):
        try:
            sock.close()
        except OSError:
            pass


@pytest.fixture
def server():
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    yield listener
    listener.close()


def test_new_socket_is_closed():
    sock = TcpSocket()
    assert sock.fileno() == -1
    assert sock.is_open is False


@pytest.mark.parametrize("call", [
    lambda s: s.send(b"x"),
    lambda s: s.recv(10),
    lambda s: s.close(),
])
def test_operations_on_closed_socket_raise(call):
    with pytest.raises(SocketClosedError):
        call(TcpSocket())


def test_attach_send_and_recv(pair):
    left, right = pair
    sock = TcpSocket()
    sock.attach(left)
    assert sock.fileno() == left.fileno()
    assert sock.send(b"hello") == 5
    assert right.recv(10) == b"hello"
    right.sendall(b"world")
    assert sock.recv(10) == b"world"
    assert sock.last_error == 0


def test_send_with_more_flag_delivers(pair):
    left, right = pair
    sock = TcpSocket()
    sock.attach(left)
    assert sock.send(b"ab", more=True) == 2
    assert sock.send(b"cd", more=False) == 2
    received = b""
    while len(received) < 4:
        received += right.recv(10)
    assert received == b"abcd"


def test_recv_nonblocking_empty_needs_read(pair):
    left, _ = pair
    left.setblocking(False)
    sock = TcpSocket()
    sock.attach(left)
    with pytest.raises(NeedReadError):
        sock.recv(10)


def test_recv_after_peer_closed(pair):
    left, right = pair
    sock = TcpSocket()
    sock.attach(left)
    right.close()
    with pytest.raises(ConnectionClosedError):
        sock.recv(10)


def test_close_twice(pair):
    left, _ = pair
    sock = TcpSocket()
    sock.attach(left)
    sock.close()
    assert sock.fileno() == -1
    with pytest.raises(SocketClosedError):
        sock.close()


def test_open_and_exchange(server):
    host, port = server.getsockname()
    with TcpSocket() as sock:
        sock.open(host, port, timeout=5)
        assert sock.fileno() >= 0
        peer, _ = server.accept()
        with peer:
            assert sock.send(b"ping") == 4
            assert peer.recv(10) == b"ping"
            peer.sendall(b"pong")
            ready, _, _ = select.select([sock.fileno()], [], [], 5)
            assert ready == [sock.fileno()]
            assert sock.recv(10) == b"pong"


def test_open_twice_is_in_use(server):
    host, port = server.getsockname()
    sock = TcpSocket()
    sock.open(host, port, timeout=5)
    try:
        with pytest.raises(SocketInUseError):
            sock.open(host, port, timeout=5)
    finally:
        sock.close()


def test_open_refused_is_socket_error():
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    sock = TcpSocket()
    with pytest.raises(SocketError):
        sock.open("127.0.0.1", port, timeout=5)
    assert sock.fileno() == -1


def test_open_negative_timeout(server):
    host, port = server.getsockname()
    with pytest.raises(InvalidParameterError):
        TcpSocket().open(host, port, timeout=-1)