import socket
import threading

from rcon_plus import protocol
from rcon_plus.errors import RconException
from rcon_plus.protocol import Answer
from rcon_plus.store import AnswerStore
from rcon_plus.utils import log_debug


class ConnectionReader:
    """Background thread draining one socket into an AnswerStore.

    The loop ends on the first read error. That is how a dead connection
    shows up: `alive` turns false and the next send repairs it. `stop()`
    does not interrupt a blocked read; the owner has to close the socket.
    """

    def __init__(self, store: AnswerStore):
        self.store = store
        self.running = False
        self.last_error: Exception | None = None
        self._thread: threading.Thread | None = None

    @property
    def alive(self) -> bool:
        return self.running and self._thread is not None and self._thread.is_alive()

    def start(self, sock: socket.socket) -> None:
        self.running = True
        self.last_error = None
        self._thread = threading.Thread(
            target=self._run, args=(sock,), name="rcon-reader", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self.running = False

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self, sock: socket.socket) -> None:
        while self.running:
            try:
                frame = protocol.decode(sock)
            except (RconException, OSError) as e:
                self.last_error = e
                self.running = False
                log_debug("Reader", f"stopped: {e}")
                self.store.wake()
                return

            log_debug("Reader", f"frame id={frame.request_id} type={frame.type} {len(frame.body)} bytes")
            self.store.put(Answer.from_frame(frame))
