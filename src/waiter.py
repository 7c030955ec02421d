"""
Bounded polling until a cluster-wide activity (drain, rebuild, pod start) settles.
"""

import logging
import threading
import time
from typing import Callable, Optional

from errors import QuiescenceTimeout, UpgradeCancelled

logger = logging.getLogger(__name__)


class QuiescenceWaiter:
    """
    Polls a "still busy?" predicate until it reports False.

    The predicate is re-evaluated every `interval` seconds. Errors raised by
    the predicate are not retried. Every sleep is a wait on `cancel_event`, so
    setting the event aborts the wait with UpgradeCancelled. With no timeout
    the wait is unbounded.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.timeout = timeout or None
        self.cancel_event = cancel_event or threading.Event()
        self.clock = clock

    def wait(
        self,
        predicate: Callable[[], bool],
        interval: float,
        initial_delay: float = 0,
        description: str = "",
    ) -> int:
        """
        Block until `predicate()` returns False.

        Args:
            predicate: Returns True while the activity is still in progress
            interval: Seconds between evaluations
            initial_delay: Grace period before the first evaluation
            description: What is being waited for, used in logs and errors

        Returns:
            Number of interval sleeps performed

        Raises:
            QuiescenceTimeout: The timeout elapsed while still busy
            UpgradeCancelled: The cancellation event was set
        """
        started = self.clock()

        if initial_delay > 0:
            logger.info(f"Waiting {initial_delay:.0f}s before checking {description}")
            self._sleep(initial_delay, description)

        polls = 0
        while predicate():
            if self.timeout is not None and self.clock() - started >= self.timeout:
                raise QuiescenceTimeout(description, self.timeout)
            logger.info(f"Still waiting for {description} (poll {polls + 1})")
            self._sleep(interval, description)
            polls += 1

        logger.debug(f"{description} settled after {polls} poll(s)")
        return polls

    def _sleep(self, seconds: float, description: str) -> None:
        if self.cancel_event.wait(seconds):
            raise UpgradeCancelled(description)
