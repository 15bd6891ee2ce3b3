"""
RCON wire format

Every frame, in both directions, is little-endian:
[length:i32][request_id:i32][type:i32][body][0x00 0x00]
where length covers everything after the length field itself.
"""
import socket
import struct
from dataclasses import dataclass
from enum import IntEnum

from rcon_plus.errors import MalformedFrame, ShortRead, StreamClosed, TransportError

PADDING = b"\x00\x00"
HEADER_SIZE = 8
# request_id + type + padding
MIN_LENGTH = HEADER_SIZE + len(PADDING)
# anything larger is a corrupt stream
MAX_LENGTH = 1 << 20

# Servers answer a login with type 2, the same code as COMMAND
AUTH_RESPONSE = 2
AUTH_FAILURE_ID = -1


class MessageType(IntEnum):
    RESPONSE = 0
    COMMAND = 2
    LOGIN = 3


@dataclass(frozen=True)
class Frame:
    request_id: int
    type: int
    body: bytes

    @property
    def length(self) -> int:
        return MIN_LENGTH + len(self.body)

    @property
    def text(self) -> str:
        return self.body.decode("utf8", errors="replace")


@dataclass(frozen=True)
class Answer:
    request_id: int
    success: bool
    data: bytes

    @classmethod
    def from_frame(cls, frame: Frame) -> "Answer":
        return cls(frame.request_id, frame.request_id > AUTH_FAILURE_ID, frame.body)

    @property
    def text(self) -> str:
        return self.data.decode("utf8", errors="replace")


EMPTY = Answer(AUTH_FAILURE_ID, False, b"")


def encode(request_id: int, message_type: int, body: str) -> bytes:
    """Build a complete frame, length prefix included"""
    # lone surrogates go out as-is so every str is encodable
    out_body = body.encode("utf8", errors="surrogatepass")
    out_payload = struct.pack("<ii", request_id, int(message_type)) + out_body + PADDING
    return struct.pack("<i", len(out_payload)) + out_payload


def _read(sock: socket.socket, length: int, started: bool) -> bytes:
    data = b""
    while len(data) < length:
        try:
            chunk = sock.recv(length - len(data))
        except OSError as e:
            raise TransportError(f"Read error: {e}") from e
        if not chunk:
            if started or data:
                raise ShortRead(f"Connection closed after {len(data)} of {length} bytes")
            raise StreamClosed("Connection closed by server")
        data += chunk
    return data


def decode(sock: socket.socket) -> Frame:
    """Read exactly one frame from the socket, blocking until it is complete"""
    (in_length,) = struct.unpack("<i", _read(sock, 4, started=False))
    if in_length < MIN_LENGTH:
        raise MalformedFrame(f"Frame length {in_length} is shorter than {MIN_LENGTH}")
    if in_length > MAX_LENGTH:
        raise MalformedFrame(f"Frame length {in_length} exceeds {MAX_LENGTH}")

    in_payload = _read(sock, in_length, started=True)
    in_id, in_type = struct.unpack("<ii", in_payload[:HEADER_SIZE])
    # padding is dropped unchecked
    return Frame(in_id, in_type, in_payload[HEADER_SIZE:-len(PADDING)])
