class RconException(Exception):
    pass


class TransportError(RconException):
    """Socket refused, reset or closed, or a frame could not be read."""


class StreamClosed(TransportError):
    pass


class ShortRead(TransportError):
    pass


class MalformedFrame(TransportError):
    pass


class AuthError(RconException):
    """Server rejected the password (request id -1) or never answered the login."""


class RconTimeout(RconException):
    pass


class NotConfigured(RconException):
    pass
