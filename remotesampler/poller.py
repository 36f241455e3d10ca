"""Background poller that keeps the active sampler in sync with the remote strategy."""

from __future__ import annotations

import enum
import logging
import threading
import time
from typing import Optional

from remotesampler.fetcher import StrategyFetcher
from remotesampler.slot import SamplerSlot
from remotesampler.translator import translate

logger = logging.getLogger(__name__)

DEFAULT_POLLING_INTERVAL = 60.0


class PollerState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    APPLYING = "applying"


class StrategyPoller:
    """
    Periodically fetches the sampling strategy and installs it.

    One daemon thread polls once right after ``start()`` and then every
    ``polling_interval`` seconds until ``shutdown()``. Each cycle fetches a
    document, translates it against the active sampler, and stores the
    result in the slot. A failed fetch or translation leaves the active
    sampler untouched; the next cycle simply tries again.
    """

    def __init__(
        self,
        fetcher: StrategyFetcher,
        slot: SamplerSlot,
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
    ) -> None:
        if polling_interval <= 0:
            raise ValueError("polling_interval must be positive")
        self.fetcher = fetcher
        self.slot = slot
        self.polling_interval = polling_interval

        self._state = PollerState.IDLE
        self._cycle_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._worker: Optional[threading.Thread] = None

        # Stats
        self._polls = 0
        self._updates = 0
        self._failures = 0
        self._last_error: Optional[BaseException] = None
        self._last_update_time: Optional[float] = None

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def start(self) -> None:
        """
        Start the background thread. Calling it twice is a no-op.

        Raises:
            RuntimeError: if a previous thread was asked to stop but has not
                exited yet (e.g. ``shutdown`` timed out during a fetch)
        """
        worker = self._worker
        if worker is not None:
            if not worker.is_alive():
                self._worker = None
            elif self._stop_event.is_set():
                raise RuntimeError("previous poller thread is still stopping")
            else:
                return
        # Each thread gets its own event so a late-exiting thread never
        # misses its stop signal.
        self._stop_event = threading.Event()
        self._worker = threading.Thread(
            target=self._worker_loop,
            args=(self._stop_event,),
            name="remotesampler-poller",
            daemon=True,
        )
        self._worker.start()

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """
        Stop polling and wait for the background thread to exit.

        If the thread is still alive after ``timeout`` (a fetch may be
        blocked), it stays registered and exits once that fetch returns.
        """
        self._stop_event.set()
        worker = self._worker
        if worker is None or worker is threading.current_thread():
            return
        worker.join(timeout=timeout)
        if worker.is_alive():
            logger.warning("Poller thread did not stop within %s seconds", timeout)
            return
        self._worker = None

    def update_sampling_strategies(self) -> bool:
        """
        Run one fetch/translate/install cycle.

        Returns True if a new sampler was installed, False if the fetched
        document left the current sampler in place.

        Raises:
            FetchError: if the fetcher failed
            MalformedStrategyError: if the document could not be translated
        """
        with self._cycle_lock:
            try:
                self._state = PollerState.FETCHING
                response = self.fetcher.fetch()

                self._state = PollerState.APPLYING
                current = self.slot.load()
                sampler = translate(response, current)
                # An unchanged policy keeps the running sampler and its state
                # (e.g. the rate limiter's token balance).
                if sampler is current or sampler == current:
                    logger.debug("Sampling strategy unchanged: %s", current.describe())
                    return False

                self.slot.store(sampler)
                self._updates += 1
                self._last_update_time = time.time()
                logger.info("Installed sampling strategy %s", sampler.describe())
                return True
            finally:
                self._state = PollerState.IDLE

    def poll(self) -> bool:
        """Run one cycle, logging instead of raising on failure."""
        self._polls += 1
        try:
            changed = self.update_sampling_strategies()
        except Exception as e:
            self._failures += 1
            self._last_error = e
            logger.warning(
                "Failed to update sampling strategy, keeping %s: %s",
                self.slot.load().describe(),
                e,
            )
            return False
        self._last_error = None
        return changed

    def get_stats(self) -> dict:
        """Get polling statistics."""
        return {
            "state": self._state.value,
            "running": self.running,
            "polling_interval": self.polling_interval,
            "polls": self._polls,
            "updates": self._updates,
            "failures": self._failures,
            "last_error": str(self._last_error) if self._last_error else None,
            "last_update_time": self._last_update_time,
        }

    # Internal
    def _worker_loop(self, stop_event: threading.Event) -> None:
        """Poll immediately, then once per interval until stopped."""
        while not stop_event.is_set():
            self.poll()
            if stop_event.wait(timeout=self.polling_interval):
                break
