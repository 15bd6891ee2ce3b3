import threading
import time
from typing import Callable, Iterable

from rcon_plus.protocol import EMPTY, Answer


class AnswerStore:
    """Answers read off the wire, waiting to be claimed by their sender.

    Several entries may share a request id (a response split over several
    frames, or a late duplicate). They are handed out together, in arrival
    order, and evicted together.
    """

    def __init__(self):
        self._answers: list[Answer] = []
        self._changed = threading.Condition()

    def __len__(self) -> int:
        with self._changed:
            return len(self._answers)

    def put(self, answer: Answer) -> None:
        with self._changed:
            self._answers.append(answer)
            self._changed.notify_all()

    def take(self, request_id: int) -> Answer:
        with self._changed:
            return self._take(request_id)

    def _take(self, request_id: int) -> Answer:
        matching = [a for a in self._answers if a.request_id == request_id]
        if not matching:
            return EMPTY

        self._answers = [a for a in self._answers if a.request_id != request_id]
        return Answer(request_id, True, b"".join(a.data for a in matching))

    def wait(
        self,
        request_id: int,
        timeout_seconds: float,
        abandon: Callable[[], bool] | None = None,
    ) -> Answer:
        return self.wait_any([request_id], timeout_seconds, abandon)

    def wait_any(
        self,
        request_ids: Iterable[int],
        timeout_seconds: float,
        abandon: Callable[[], bool] | None = None,
    ) -> Answer:
        """Block until one of the ids has an answer and take it.

        Ids are checked in the given order. A timeout of zero or less waits
        forever. Returns EMPTY when the timeout elapses, or as soon as
        `abandon()` turns true (checked whenever the store is woken).
        """
        request_ids = list(request_ids)
        deadline = time.monotonic() + timeout_seconds if timeout_seconds > 0 else None

        with self._changed:
            while True:
                for request_id in request_ids:
                    answer = self._take(request_id)
                    if answer is not EMPTY:
                        return answer

                if abandon is not None and abandon():
                    return EMPTY

                if deadline is None:
                    self._changed.wait()
                    continue

                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return EMPTY
                self._changed.wait(remaining)

    def wake(self) -> None:
        """Let every waiter re-check its abandon condition"""
        with self._changed:
            self._changed.notify_all()

    def clear(self) -> None:
        with self._changed:
            self._answers.clear()
            self._changed.notify_all()
