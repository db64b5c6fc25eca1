"""
Recurring job scheduler.

Each named job runs on its own daemon thread and fires every
`interval_seconds`, starting one interval after it is scheduled. A failing
run is logged and the schedule keeps going. Runs of the same job never
overlap: a slow run simply delays the next one.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Job = Callable[[], Any]


@dataclass
class _Scheduled:
    thread: threading.Thread
    stop_event: threading.Event


# PUBLIC_INTERFACE
class RecurringScheduler:
    """Run named callables on a fixed interval until they are stopped."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._jobs: Dict[str, _Scheduled] = {}

    def schedule_recurring(self, name: str, interval_seconds: float, job: Job) -> None:
        """
        Register `job` to run every `interval_seconds` under `name`.

        A job already scheduled under the same name is stopped first.

        Raises:
            ValueError: if `interval_seconds` is not positive.
        """
        interval = float(interval_seconds)
        if interval <= 0:
            raise ValueError("interval_seconds must be positive")

        stop_event = threading.Event()

        def _runner() -> None:
            # wait() returns True once stop() is called, ending the loop
            while not stop_event.wait(interval):
                try:
                    job()
                except Exception as exc:  # noqa: BLE001
                    logger.exception("recurring job failed: name=%s error=%s", name, str(exc))

        thread = threading.Thread(target=_runner, name=f"scheduler:{name}", daemon=True)
        with self._lock:
            self.stop(name)
            self._jobs[name] = _Scheduled(thread=thread, stop_event=stop_event)
            thread.start()
        logger.info("scheduled recurring job name=%s interval=%ss", name, interval)

    def stop(self, name: str) -> bool:
        """
        Cancel the job registered under `name`. An in-flight run is allowed to
        finish but no further runs start. Returns False if nothing was scheduled.
        """
        return self._cancel(name) is not None

    def stop_all(self, timeout: Optional[float] = 5.0) -> None:
        """
        Stop every scheduled job, then wait up to `timeout` seconds for each
        in-flight run to finish so shutdown does not race a running sweep.
        """
        stopped = [s for s in (self._cancel(name) for name in self.names()) if s is not None]
        for scheduled in stopped:
            # a job calling stop_all on its own thread cannot join itself
            if scheduled.thread is not threading.current_thread():
                scheduled.thread.join(timeout)
                if scheduled.thread.is_alive():
                    logger.warning("recurring job still running after stop: thread=%s", scheduled.thread.name)

    def _cancel(self, name: str) -> Optional[_Scheduled]:
        with self._lock:
            scheduled = self._jobs.pop(name, None)
        if scheduled is None:
            return None
        scheduled.stop_event.set()
        logger.info("stopped recurring job name=%s", name)
        return scheduled

    def is_scheduled(self, name: str) -> bool:
        with self._lock:
            return name in self._jobs

    def names(self) -> List[str]:
        with self._lock:
            return list(self._jobs)
