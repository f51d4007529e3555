"""Background polling of an analysis record until it reaches a terminal status."""

import logging
import threading
from typing import Any, Callable

logger = logging.getLogger("aurora.client.poller")

POLL_INTERVAL_SECONDS = 2.0
TERMINAL_STATUSES = frozenset({"completed", "failed"})

Record = dict[str, Any]


class PollingHandle:
    """Owns one polling thread; ``stop()`` is safe to call any number of times."""

    def __init__(self, thread: threading.Thread, stop_event: threading.Event) -> None:
        self._thread = thread
        self._stop_event = stop_event

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive()

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def join(self, timeout: float | None = None) -> bool:
        """Wait for polling to end on its own; True if it has."""
        self._thread.join(timeout)
        return not self._thread.is_alive()


class AnalysisPoller:
    """Fetches a record every ``interval_seconds`` and reports each result.

    Polling ends when the record status is terminal or the handle is stopped.
    A failed fetch is logged and retried on the next tick.
    """

    def __init__(
        self,
        fetch: Callable[[str], Record],
        on_update: Callable[[Record], None],
        interval_seconds: float = POLL_INTERVAL_SECONDS,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self.fetch = fetch
        self.on_update = on_update
        self.interval_seconds = interval_seconds
        self.on_error = on_error

    def start(self, analysis_id: str) -> PollingHandle:
        stop_event = threading.Event()
        thread = threading.Thread(
            target=self._run,
            args=(analysis_id, stop_event),
            name=f"aurora-poll-{analysis_id}",
            daemon=True,
        )
        handle = PollingHandle(thread, stop_event)
        thread.start()
        return handle

    def _run(self, analysis_id: str, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval_seconds):
            try:
                record = self.fetch(analysis_id)
            except Exception as e:
                logger.warning(f"Poll of {analysis_id} failed: {e}")
                if self.on_error:
                    self.on_error(e)
                continue

            if stop_event.is_set():
                return
            self.on_update(record)
            if record.get("status") in TERMINAL_STATUSES:
                logger.info(f"Analysis {analysis_id} reached {record['status']}, polling stopped")
                return


def start_polling(
    fetch: Callable[[str], Record],
    analysis_id: str,
    on_update: Callable[[Record], None],
    interval_seconds: float = POLL_INTERVAL_SECONDS,
) -> PollingHandle:
    """Poll ``analysis_id`` in the background; the caller stops the handle on teardown."""
    return AnalysisPoller(fetch, on_update, interval_seconds).start(analysis_id)
