from rcon_plus.client import RconClient, SendResult, connect
from rcon_plus.config import ClientConfiguration
from rcon_plus.connection import ConnectionState
from rcon_plus.errors import (AuthError, MalformedFrame, NotConfigured,
                              RconException, RconTimeout, ShortRead,
                              StreamClosed, TransportError)
from rcon_plus.protocol import EMPTY, Answer, Frame, MessageType

__all__ = [
    "EMPTY",
    "Answer",
    "AuthError",
    "ClientConfiguration",
    "ConnectionState",
    "Frame",
    "MalformedFrame",
    "MessageType",
    "NotConfigured",
    "RconClient",
    "RconException",
    "RconTimeout",
    "SendResult",
    "ShortRead",
    "StreamClosed",
    "TransportError",
    "connect",
]
