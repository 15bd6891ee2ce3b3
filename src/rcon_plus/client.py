import socket
import threading
import time
from dataclasses import dataclass
from typing import Callable

from rcon_plus.config import ClientConfiguration
from rcon_plus.connection import ConnectionManager, ConnectionState
from rcon_plus.counter import RequestIdGenerator
from rcon_plus.errors import NotConfigured, RconException, RconTimeout, TransportError
from rcon_plus.protocol import EMPTY, Answer, MessageType
from rcon_plus.store import AnswerStore
from rcon_plus.utils import log_error, log_warning


@dataclass(frozen=True)
class SendResult:
    answer: Answer = EMPTY
    error: RconException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def text(self) -> str:
        return self.answer.text


class RconClient:
    """Persistent RCON connection shared by any number of caller threads.

    Frames are written under one exclusive lock, so requests reach the
    server in the order callers acquire it. Waiting for the answer happens
    outside the lock. None of the public methods raise: failures show up
    as an empty answer, in `SendResult.error` and in the state properties.
    """

    def __init__(
        self,
        socket_factory: Callable[[tuple[str, int]], socket.socket] = socket.create_connection,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._lock = threading.Lock()
        self._configured = False
        self._socket_factory = socket_factory
        self._sleep = sleep

        self.config: ClientConfiguration | None = None
        self.ids = RequestIdGenerator()
        self.store = AnswerStore()
        self.connection: ConnectionManager | None = None
        self.last_error: RconException | None = None

    def __enter__(self) -> "RconClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()

    @property
    def is_configured(self) -> bool:
        return self._configured

    @property
    def is_initialized(self) -> bool:
        return self.connection is not None and self.connection.is_ready

    @property
    def is_connected(self) -> bool:
        return self.connection is not None and self.connection.is_connected

    @property
    def state(self) -> ConnectionState:
        if self.connection is None:
            return ConnectionState.DISCONNECTED
        return self.connection.state

    def connect(
        self,
        host: str = "127.0.0.1",
        port: int = 25575,
        password: str = "",
        timeout_seconds: float = 3,
        retry_connect: bool = False,
        reconnect_delay_seconds: float = 5,
        max_recon_attempts: int = 10,
        server_is_multithreaded: bool = False,
    ) -> "RconClient":
        """Configure the client and open the connection.

        Only the first call has any effect, later ones return the client
        unchanged. A timeout of zero or less waits for answers forever.
        Avoid connecting several clients to the same server at once, some
        servers reject the extra logins.
        """
        return self.configure(
            ClientConfiguration(
                host=host,
                port=port,
                password=password,
                timeout_seconds=timeout_seconds,
                retry_connect=retry_connect,
                reconnect_delay_seconds=reconnect_delay_seconds,
                max_recon_attempts=max_recon_attempts,
                server_is_multithreaded=server_is_multithreaded,
            )
        )

    def configure(self, config: ClientConfiguration) -> "RconClient":
        with self._lock:
            if self._configured:
                return self

            self.config = config
            self._configured = True
            self.connection = ConnectionManager(
                config,
                self.store,
                self.ids,
                socket_factory=self._socket_factory,
                sleep=self._sleep,
            )
            self.last_error = self.connection.open().error
            return self

    def request(self, message_type: MessageType, command: str) -> SendResult:
        if not self._configured:
            return SendResult(EMPTY, NotConfigured("Must connect before sending data"))

        try:
            request_id = self._write(message_type, command)
        except RconException as e:
            log_error("Send", e)
            return self._fail(e)

        return self._await(request_id)

    def send(self, message_type: MessageType, command: str) -> str:
        return self.request(message_type, command).text

    def command(self, command: str) -> str:
        return self.send(MessageType.COMMAND, command)

    def send_fire_and_forget(self, message_type: MessageType, command: str) -> None:
        """Send without waiting for the answer.

        Only servers that handle requests concurrently get a true fire and
        forget. For the usual single-threaded server the answer must be
        consumed before the next request, so this is a plain `send`.
        """
        if not self._configured:
            return

        if not self.config.server_is_multithreaded:
            self.request(message_type, command)
            return

        try:
            request_id = self._write(message_type, command)
        except RconException as e:
            log_error("Send", e)
            self._fail(e)
            return

        threading.Thread(
            target=self._await, args=(request_id,), name="rcon-discard", daemon=True
        ).start()

    def dispose(self) -> None:
        with self._lock:
            if self.connection is not None:
                self.connection.close()

    def _write(self, message_type: MessageType, command: str) -> int:
        with self._lock:
            if not self.connection.is_ready:
                self.connection.close()
                result = self.connection.open()
                if not result.ok:
                    raise result.error

            request_id = self.ids.next()
            self.connection.send_frame(request_id, message_type, command)
            return request_id

    def _await(self, request_id: int) -> SendResult:
        answer = self.store.wait(
            request_id,
            self.config.timeout_seconds,
            abandon=self.connection.reader_dead,
        )
        if answer is not EMPTY:
            return SendResult(answer)

        if self.connection.reader_dead():
            error = TransportError(f"Connection lost while waiting for answer {request_id}")
        else:
            error = RconTimeout(
                f"No answer for request {request_id} within {self.config.timeout_seconds}s"
            )
        log_warning("Send", str(error))
        return self._fail(error)

    def _fail(self, error: RconException) -> SendResult:
        self.last_error = error
        return SendResult(EMPTY, error)


def connect(
    host: str = "127.0.0.1",
    port: int = 25575,
    password: str = "",
    timeout_seconds: float = 3,
    **retry_options,
) -> RconClient:
    return RconClient().connect(host, port, password, timeout_seconds, **retry_options)
