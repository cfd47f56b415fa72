"""Bounded, cancellable polling for EKS status transitions."""

import threading
from typing import Callable, Optional

from tenacity import RetryCallState, RetryError, Retrying, retry_if_result, stop_after_delay
from tenacity import wait_exponential

from ..errors import RemoteOperationError, UpdateTimeoutError
from ..model.cluster import ResourceStatus
from ..utils.logger import get_logger

logger = get_logger(__name__)


class StatusWaiter:
    """Polls a status function until it reports ACTIVE.

    Waits grow exponentially from ``interval`` up to ``max_interval`` and the
    whole wait is bounded by ``timeout`` seconds. Non-terminal statuses are
    reported as progress; failed terminal statuses abort immediately.
    """

    def __init__(
        self,
        interval: float = 30.0,
        max_interval: float = 120.0,
        timeout: float = 3600.0,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.interval = interval
        self.max_interval = max(max_interval, interval)
        self.timeout = timeout
        self._cancelled = threading.Event()
        self._sleep = sleep or self._interruptible_sleep

    def cancel(self) -> None:
        """Interrupt the current and any future wait."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def _interruptible_sleep(self, seconds: float) -> None:
        self._cancelled.wait(seconds)

    def _stop_on_cancel(self, retry_state: RetryCallState) -> bool:
        return self._cancelled.is_set()

    def wait_for_active(self, describe: Callable[[], ResourceStatus], label: str) -> ResourceStatus:
        """Block until ``describe()`` returns ACTIVE."""

        def poll() -> ResourceStatus:
            status = describe()
            if status.is_failed:
                raise RemoteOperationError(f"{label} entered failed state {status.value}")
            return status

        def report_progress(retry_state: RetryCallState) -> None:
            status = retry_state.outcome.result()
            delay = retry_state.next_action.sleep if retry_state.next_action else 0
            logger.info(f"{label} status: {status.value}. Waiting {delay:.0f}s...")

        retrying = Retrying(
            stop=stop_after_delay(self.timeout) | self._stop_on_cancel,
            wait=wait_exponential(
                multiplier=self.interval, min=self.interval, max=self.max_interval
            ),
            retry=retry_if_result(lambda status: status != ResourceStatus.ACTIVE),
            before_sleep=report_progress,
            sleep=self._sleep,
        )

        logger.info(f"Waiting for {label} to become ACTIVE...")
        try:
            status = retrying(poll)
        except RetryError as e:
            last = e.last_attempt.result()
            if self._cancelled.is_set():
                raise RemoteOperationError(f"Wait for {label} cancelled (last status {last.value})")
            raise UpdateTimeoutError(
                f"{label} did not become ACTIVE within {self.timeout:.0f}s (last status {last.value})"
            ) from e
        logger.info(f"{label} is ACTIVE")
        return status
