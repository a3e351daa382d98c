from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_TIME_FILE_NAME = "currentTime.txt"
SESSION_OWNER = "session"
WORKER_OWNER = "worker"


class TimeLookupError(RuntimeError):
    """Raised on the session thread when the time worker could not publish a timestamp."""


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as `` 1:03pm, Tuesday, September 13, 2016``."""
    hour = moment.hour % 12 or 12
    meridiem = "am" if moment.hour < 12 else "pm"
    return (
        f"{hour:>2}:{moment.minute:02d}{meridiem}, "
        f"{moment.strftime('%A')}, {moment.strftime('%B')} {moment.day}, {moment.year}"
    )


class Baton:
    """Exclusive ownership handed back and forth between two named parties.

    Exactly one owner holds the baton at any time. ``wait_for`` blocks until
    the baton has been handed to the caller; there is no polling.
    """

    def __init__(self, owner: str) -> None:
        self._owner = owner
        self._condition = threading.Condition()

    @property
    def owner(self) -> str:
        with self._condition:
            return self._owner

    def hand_to(self, owner: str) -> None:
        with self._condition:
            self._owner = owner
            self._condition.notify_all()

    def wait_for(self, owner: str) -> None:
        with self._condition:
            self._condition.wait_for(lambda: self._owner == owner)


class TimeHandoff:
    """Serve timestamps from a one-shot worker thread through a shared file.

    The session thread holds the baton between requests while a freshly
    spawned worker waits for it. A request hands the baton over and joins the
    worker, which writes the timestamp to ``output_path`` and hands the baton
    back before exiting. The session then primes the next worker and reads the
    file. Worker failures travel back with the baton as ``TimeLookupError``.
    """

    def __init__(
        self,
        output_path: str | Path = DEFAULT_TIME_FILE_NAME,
        *,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.output_path = Path(output_path)
        self._now = now
        self._baton = Baton(SESSION_OWNER)
        self._worker: threading.Thread | None = None
        self._worker_error: BaseException | None = None
        self._closing = False

    def __enter__(self) -> "TimeHandoff":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def worker(self) -> threading.Thread | None:
        return self._worker

    def start(self) -> None:
        if self._worker is not None:
            return
        self._closing = False
        self._spawn_worker()

    def _spawn_worker(self) -> None:
        self._worker_error = None
        self._worker = threading.Thread(target=self._run_worker, name="time-worker", daemon=True)
        self._worker.start()

    def _run_worker(self) -> None:
        self._baton.wait_for(WORKER_OWNER)
        try:
            if self._closing:
                return
            stamp = format_timestamp(self._now())
            self.output_path.write_text(stamp + "\n", encoding="utf-8")
            logger.debug("time worker wrote %r to %s", stamp, self.output_path)
        except Exception as exc:
            self._worker_error = exc
        finally:
            self._baton.hand_to(SESSION_OWNER)

    def request_time(self) -> str:
        self.start()
        worker = self._worker
        self._baton.hand_to(WORKER_OWNER)
        worker.join()
        self._baton.wait_for(SESSION_OWNER)

        error = self._worker_error
        self._spawn_worker()
        if error is not None:
            raise TimeLookupError(f"could not write time to {self.output_path}: {error}") from error

        try:
            return self.output_path.read_text(encoding="utf-8").rstrip("\n")
        except OSError as exc:
            raise TimeLookupError(f"could not read time from {self.output_path}: {exc}") from exc

    def close(self) -> None:
        worker = self._worker
        if worker is None:
            return
        self._closing = True
        self._baton.hand_to(WORKER_OWNER)
        worker.join()
        self._baton.wait_for(SESSION_OWNER)
        self._worker = None
