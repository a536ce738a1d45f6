"""Bounded worker pool that probes a sequence of hosts."""

import logging
import queue
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from ipaddress import IPv4Address

from ..exceptions import ProbeSetupError, ScanAborted
from ..models.scan_result import ProbeResult
from .prober import Prober

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 20

# Called as on_result(completed, total, result) from worker threads
ProgressCallback = Callable[[int, int, ProbeResult], None]


class ScanCoordinator:
    """Fan probes out over a fixed number of worker threads.

    Each result is written into the slot matching its host's position, so
    the output order equals the input order whatever order probes finish in.
    """

    def __init__(
        self,
        prober: Prober,
        concurrency: int = DEFAULT_CONCURRENCY,
        retries: int = 0,
    ):
        self.prober = prober
        self.concurrency = concurrency
        self.retries = retries

    def run(
        self,
        hosts: Sequence[IPv4Address],
        timeout: float,
        concurrency: int | None = None,
        cancel_event: threading.Event | None = None,
        on_result: ProgressCallback | None = None,
    ) -> list[ProbeResult]:
        """Probe every host and return results in host order.

        Raises:
            ScanAborted: if ``hosts`` is empty, ``concurrency`` is not
                positive, if ``cancel_event`` is set before all hosts
                are probed, or if a worker fails with an unexpected
                error. The exception's ``partial`` list holds the
                completed results at their positions.
        """
        width = self.concurrency if concurrency is None else concurrency
        if not hosts:
            raise ScanAborted("No hosts to scan")
        if width <= 0:
            raise ScanAborted(f"Concurrency must be positive, got {width}")

        total = len(hosts)
        slots: list[ProbeResult | None] = [None] * total
        pending: queue.Queue[tuple[int, IPv4Address]] = queue.Queue()
        for index, address in enumerate(hosts):
            pending.put((index, address))

        cancel = cancel_event or threading.Event()
        # Set by a failing worker; kept apart from the caller's cancel event
        stop = threading.Event()
        progress_lock = threading.Lock()
        completed = 0
        failure: BaseException | None = None

        def worker() -> None:
            nonlocal completed, failure
            while not cancel.is_set() and not stop.is_set():
                try:
                    index, address = pending.get_nowait()
                except queue.Empty:
                    return

                try:
                    result = self._probe_with_retries(address, timeout, cancel)
                    slots[index] = result

                    with progress_lock:
                        completed += 1
                        done = completed
                    if on_result is not None:
                        on_result(done, total, result)
                except Exception as e:
                    logger.error(f"Probe worker failed on {address}: {e}")
                    with progress_lock:
                        if failure is None:
                            failure = e
                    stop.set()
                    return

        workers = min(width, total)
        logger.debug(f"Probing {total} hosts with {workers} workers")

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="probe") as executor:
            futures = [executor.submit(worker) for _ in range(workers)]
            for future in futures:
                future.result()

        if failure is not None:
            raise ScanAborted(f"Probe worker failed: {failure}", partial=slots) from failure

        if any(slot is None for slot in slots):
            done = sum(1 for slot in slots if slot is not None)
            logger.info(f"Scan cancelled after {done}/{total} probes")
            raise ScanAborted("Scan cancelled", partial=slots)

        return slots  # type: ignore[return-value]

    def _probe_with_retries(
        self, address: IPv4Address, timeout: float, cancel: threading.Event
    ) -> ProbeResult:
        """Probe one address, re-probing unreachable hosts up to ``retries`` times."""
        attempt = 0
        while True:
            try:
                result = self.prober.probe(address, timeout)
            except ProbeSetupError as e:
                logger.warning(f"Probe setup failed for {address}: {e}")
                return ProbeResult(address=address, reachable=False, error=e.message)

            if result.reachable or attempt >= self.retries or cancel.is_set():
                logger.debug(
                    f"{address}: {'reachable' if result.reachable else 'unreachable'}"
                    + (f" ({result.latency_ms}ms)" if result.latency_ms else "")
                )
                return result
            attempt += 1
