import threading

INT32_MAX = 2**31 - 1


class RequestIdGenerator:
    """Monotonic request ids for one client.

    Wraps to 0 past the int32 range so an id never turns negative and never
    collides with the -1 login failure echo.
    """

    def __init__(self, start: int = 0):
        self._value = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            self._value += 1
            if self._value > INT32_MAX:
                self._value = 0
            return self._value
