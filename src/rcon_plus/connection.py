import contextlib
import socket
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from rcon_plus import protocol
from rcon_plus.config import ClientConfiguration
from rcon_plus.counter import RequestIdGenerator
from rcon_plus.errors import AuthError, RconException, TransportError
from rcon_plus.protocol import AUTH_FAILURE_ID, EMPTY, MessageType
from rcon_plus.reader import ConnectionReader
from rcon_plus.store import AnswerStore
from rcon_plus.utils import log_debug, log_error, log_info, log_warning, safe_sync

# Pause after every failed attempt so a flapping server can't spin us
SETTLE_DELAY = 0.1


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    READY = "ready"


@dataclass(frozen=True)
class ConnectResult:
    state: ConnectionState
    error: RconException | None = None

    @property
    def ok(self) -> bool:
        return self.state is ConnectionState.READY


class ConnectionManager:
    """Owns the socket of one client: open, authenticate, reconnect, close.

    Transport failures are retried according to the configuration. An
    authentication failure is terminal: it is never retried and every later
    `open()` reports it again without touching the network.
    """

    def __init__(
        self,
        config: ClientConfiguration,
        store: AnswerStore,
        ids: RequestIdGenerator,
        socket_factory: Callable[[tuple[str, int]], socket.socket] = socket.create_connection,
        sleep: Callable[[float], None] = time.sleep,
        settle_delay: float = SETTLE_DELAY,
    ):
        self.config = config
        self.store = store
        self.ids = ids
        self.socket_factory = socket_factory
        self.sleep = sleep
        self.settle_delay = settle_delay

        self.state = ConnectionState.DISCONNECTED
        self.socket: socket.socket | None = None
        self.reader: ConnectionReader | None = None
        self.reconnect_attempts = 0
        self.auth_error: AuthError | None = None

    @property
    def address(self) -> tuple[str, int]:
        return self.config.host, self.config.port

    @property
    def is_connected(self) -> bool:
        # close() may reset these from another thread
        sock, reader = self.socket, self.reader
        return sock is not None and reader is not None and reader.alive

    @property
    def is_ready(self) -> bool:
        return self.state is ConnectionState.READY and self.is_connected

    def reader_dead(self) -> bool:
        return not self.is_connected

    def open(self) -> ConnectResult:
        if self.auth_error is not None:
            return ConnectResult(ConnectionState.DISCONNECTED, self.auth_error)
        if self.is_ready:
            return ConnectResult(self.state)

        while True:
            result = self._open_once()
            if result.ok:
                self.reconnect_attempts = 0
                log_info("Connection", f"ready on {self.config.host}:{self.config.port}")
                return result

            log_error("Connection", result.error)
            self.sleep(self.settle_delay)

            if isinstance(result.error, AuthError):
                self.auth_error = result.error
                log_warning("Connection", "reconnection will not be attempted due to this error")
                return result

            if not self.config.retry_connect:
                return result

            if self.reconnect_attempts >= self.config.max_recon_attempts:
                self.reconnect_attempts = 0
                return result

            self.reconnect_attempts += 1
            log_info(
                "Connection",
                f"attempting reconnect in {self.config.reconnect_delay_seconds} seconds "
                f"[{self.reconnect_attempts}/{self.config.max_recon_attempts}]",
            )
            self.sleep(self.config.reconnect_delay_seconds)

    def _open_once(self) -> ConnectResult:
        self.state = ConnectionState.CONNECTING
        try:
            self.socket = self.socket_factory(self.address)
        except Exception as e:
            self.close()
            return ConnectResult(self.state, TransportError(f"Connection failed: {e}"))

        self.reader = ConnectionReader(self.store)
        self.reader.start(self.socket)

        if self.config.password:
            self.state = ConnectionState.AUTHENTICATING
            try:
                self._authenticate()
            except (TransportError, AuthError) as e:
                self.close()
                return ConnectResult(self.state, e)
            except Exception as e:
                self.close()
                return ConnectResult(self.state, TransportError(f"Authentication error: {e}"))

        self.state = ConnectionState.READY
        return ConnectResult(self.state)

    def _authenticate(self) -> None:
        request_id = self.ids.next()
        self.send_frame(request_id, MessageType.LOGIN, self.config.password)

        answer = self.store.wait_any(
            [request_id, AUTH_FAILURE_ID],
            self.config.timeout_seconds,
            abandon=self.reader_dead,
        )
        if answer is EMPTY:
            if self.reader_dead():
                raise TransportError("Connection closed during authentication")
            raise AuthError("No answer to login (check password)")
        if answer.request_id == AUTH_FAILURE_ID:
            raise AuthError("Authentication failed (check password)")

    def send_frame(self, request_id: int, message_type: int, body: str) -> None:
        if self.socket is None:
            raise TransportError("Must connect before sending data")

        try:
            self.socket.sendall(protocol.encode(request_id, message_type, body))
        except OSError as e:
            self.state = ConnectionState.DISCONNECTED
            raise TransportError(f"Send error: {e}") from e
        log_debug("Connection", f"sent id={request_id} type={int(message_type)}")

    def close(self) -> None:
        sock, reader = self.socket, self.reader
        self.socket = None
        self.reader = None

        if reader is not None:
            reader.stop()

        if sock is not None:
            _shutdown(sock)
            with contextlib.suppress(OSError):
                sock.close()

        if reader is not None:
            reader.join(1.0)

        self.store.clear()
        self.state = ConnectionState.DISCONNECTED


@safe_sync("Socket shutdown")
def _shutdown(sock: socket.socket) -> None:
    sock.shutdown(socket.SHUT_RDWR)
