import gzip
import socket
import threading

import pytest


class ListSink:
    """In-memory sink that records every line it is given."""

    def __init__(self, fail_after=None):
        self.lines = []
        self.fail_after = fail_after
        self.flushes = 0

    def write(self, data):
        if self.fail_after is not None and len(self.lines) >= self.fail_after:
            self.flush_quietly()
            raise BrokenPipeError("peer went away")
        line = bytes(data)
        self.lines.append(line)
        return len(line)

    def flush_quietly(self):
        self.flushes += 1
        return None


class TcpCollector:
    def __init__(self):
        self.server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.server.bind(("127.0.0.1", 0))
        self.server.listen(1)
        self.address = f"127.0.0.1:{self.server.getsockname()[1]}"
        self.received = bytearray()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        try:
            conn, _ = self.server.accept()
        except OSError:
            return
        with conn:
            while True:
                chunk = conn.recv(65536)
                if not chunk:
                    break
                self.received += chunk

    def wait(self, timeout=5.0):
        self._thread.join(timeout)
        return bytes(self.received)

    def close(self):
        self.server.close()


@pytest.fixture
def words_gz(tmp_path):
    def _write(words, name="words.gz"):
        path = tmp_path / name
        with gzip.open(path, "wb") as fh:
            fh.write("\n".join(words).encode("utf-8"))
        return path

    return _write


@pytest.fixture
def tcp_collector():
    collector = TcpCollector()
    yield collector
    collector.close()


@pytest.fixture
def free_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
