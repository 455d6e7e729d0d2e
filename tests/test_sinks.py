import os

import pytest

from statsbench.errors import EndpointError
from statsbench.sinks import SocketSink, StdoutSink, parse_endpoint


@pytest.mark.parametrize(
    "address,expected",
    [
        ("127.0.0.1:8125", ("127.0.0.1", 8125)),
        (":3004", ("localhost", 3004)),
        ("stats.example.com:9", ("stats.example.com", 9)),
        ("[::1]:8125", ("::1", 8125)),
    ],
)
def test_parse_endpoint(address, expected):
    assert parse_endpoint(address) == expected


@pytest.mark.parametrize("address", ["localhost", "host:http", "host:0", "host:70000"])
def test_parse_endpoint_rejects_bad_addresses(address):
    with pytest.raises(EndpointError):
        parse_endpoint(address)


def test_stdout_sink_buffers_and_leaves_fd_open():
    r, w = os.pipe()
    try:
        sink = StdoutSink(fd=w)
        assert sink.write(b"a:1|g\n") == 6
        sink.write(b"b:2|g\n")
        sink.close()
        os.write(w, b"tail")
        os.close(w)
        w = None
        with os.fdopen(r, "rb") as reader:
            r = None
            assert reader.read() == b"a:1|g\nb:2|g\ntail"
    finally:
        for fd in (r, w):
            if fd is not None:
                os.close(fd)


def test_stdout_sink_surfaces_write_errors():
    r, w = os.pipe()
    os.close(r)
    try:
        sink = StdoutSink(fd=w, buffer_size=16)
        with pytest.raises(OSError):
            sink.write(b"x" * 64)
    finally:
        os.close(w)


def test_socket_sink_delivers_everything_on_close(tcp_collector):
    payload = b"".join(b"key_%d:%d|g\n" % (i, i) for i in range(5000))
    with SocketSink.connect(tcp_collector.address) as sink:
        for start in range(0, len(payload), 100):
            sink.write(payload[start:start + 100])
    assert sink.closed
    assert tcp_collector.wait() == payload


def test_socket_sink_connection_refused(free_port):
    with pytest.raises(EndpointError):
        SocketSink.connect(f"127.0.0.1:{free_port}", timeout=2.0)


def test_socket_sink_unresolvable_host():
    with pytest.raises(EndpointError):
        SocketSink.connect("host.invalid:8125", timeout=2.0)


def test_socket_sink_malformed_host_name():
    with pytest.raises(EndpointError):
        SocketSink.connect("a..b:8125", timeout=2.0)
