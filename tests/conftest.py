import socket
import struct
import threading
import time

import pytest

LOGIN = 3
COMMAND = 2


def pack_frame(request_id: int, message_type: int, body: bytes) -> bytes:
    payload = struct.pack("<ii", request_id, message_type) + body + b"\x00\x00"
    return struct.pack("<i", len(payload)) + payload


def recv_exact(conn: socket.socket, length: int) -> bytes | None:
    data = b""
    while len(data) < length:
        try:
            chunk = conn.recv(length - len(data))
        except OSError:
            return None
        if not chunk:
            return None
        data += chunk
    return data


class FakeRconServer:
    """Minimal threaded RCON server speaking the wire protocol on localhost"""

    def __init__(self, password: str = ""):
        self.password = password
        self.responses: dict[str, str] = {}
        self.silent: set[str] = set()
        self.split_replies = False
        self.received: list[tuple[int, int, str]] = []
        self.connections = 0

        self._clients: list[socket.socket] = []
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen()
        self.host, self.port = self._listener.getsockname()
        threading.Thread(target=self._accept, daemon=True).start()

    def _accept(self) -> None:
        while True:
            try:
                conn, _ = self._listener.accept()
            except OSError:
                return
            self.connections += 1
            self._clients.append(conn)
            threading.Thread(target=self._serve, args=(conn,), daemon=True).start()

    def _serve(self, conn: socket.socket) -> None:
        while True:
            raw_length = recv_exact(conn, 4)
            if raw_length is None:
                return
            (length,) = struct.unpack("<i", raw_length)
            payload = recv_exact(conn, length)
            if payload is None:
                return

            request_id, message_type = struct.unpack("<ii", payload[:8])
            body = payload[8:-2].decode("utf8", errors="surrogatepass")
            self.received.append((request_id, message_type, body))

            try:
                self._reply(conn, request_id, message_type, body)
            except OSError:
                return

    def _reply(self, conn: socket.socket, request_id: int, message_type: int, body: str) -> None:
        if message_type == LOGIN:
            reply_id = request_id if body == self.password else -1
            conn.sendall(pack_frame(reply_id, 2, b""))
            return

        if body in self.silent:
            return

        text = self.responses.get(body, f"echo {body}").encode("utf8", errors="surrogatepass")
        if self.split_replies and len(text) > 1:
            half = len(text) // 2
            conn.sendall(pack_frame(request_id, 0, text[:half]))
            time.sleep(0.01)
            conn.sendall(pack_frame(request_id, 0, text[half:]))
        else:
            conn.sendall(pack_frame(request_id, 0, text))

    def commands(self) -> list[str]:
        return [body for _, message_type, body in self.received if message_type == COMMAND]

    def drop_clients(self) -> None:
        for conn in self._clients:
            try:
                conn.shutdown(socket.SHUT_RDWR)
                conn.close()
            except OSError:
                pass
        self._clients.clear()

    def stop(self) -> None:
        try:
            self._listener.close()
        except OSError:
            pass
        self.drop_clients()


def wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def make_server():
    servers = []

    def factory(password: str = "") -> FakeRconServer:
        server = FakeRconServer(password)
        servers.append(server)
        return server

    yield factory
    for server in servers:
        server.stop()


@pytest.fixture
def server(make_server):
    return make_server("secret")


@pytest.fixture
def socket_pair():
    left, right = socket.socketpair()
    yield left, right
    for sock in (left, right):
        try:
            sock.close()
        except OSError:
            pass
