"""Scan orchestration: host derivation, probing and classification."""

import logging
import threading
from collections.abc import Iterable
from datetime import datetime
from ipaddress import IPv4Address

from pydantic import ValidationError

from ..exceptions import InvalidSpec, ProbeSetupError, ScanAborted
from ..models.api import ScanRequest, ScanResponse, VerifyResponse, error_payload
from ..models.config import ScannerConfig
from ..models.network import NetworkSpec
from ..models.scan_result import AddressStatus, ProbeResult, ReportEntry, ScanReport
from .address_range import host_count
from .address_range import hosts as derive_hosts
from .coordinator import ProgressCallback, ScanCoordinator
from .prober import Prober, create_prober, parse_address

logger = logging.getLogger(__name__)


def parse_reservations(reservations: Iterable[IPv4Address | str]) -> frozenset[IPv4Address]:
    """Build an immutable reservation set, rejecting malformed addresses."""
    parsed = set()
    for address in reservations:
        try:
            parsed.add(IPv4Address(str(address).strip()))
        except ValueError as e:
            raise InvalidSpec(f"Invalid reserved address '{address}': {e}")
    return frozenset(parsed)


def check_timeout(timeout: float) -> float:
    """Reject per-probe timeouts that could never see a reply."""
    if timeout <= 0:
        raise InvalidSpec(f"Timeout must be positive, got {timeout}")
    return timeout


def describe_validation_error(error: ValidationError) -> str:
    """Name the first offending field and why it was rejected."""
    details = error.errors()
    first = details[0]
    field = ".".join(str(part) for part in first["loc"]) or "request"
    message = f"{field}: {first['msg']}"
    if len(details) > 1:
        message += f" (and {len(details) - 1} more)"
    return message


def classify(result: ProbeResult, reservations: frozenset[IPv4Address]) -> ReportEntry:
    """Classify one probe result; a reservation wins over reachability."""
    if result.address in reservations:
        status = AddressStatus.RESERVED
    elif result.reachable:
        status = AddressStatus.USED
    else:
        status = AddressStatus.AVAILABLE
    return ReportEntry(
        address=result.address,
        status=status,
        latency_ms=result.latency_ms,
        error=result.error,
    )


class ScanService:
    """Scans a subnet and reports which addresses are free."""

    def __init__(
        self,
        config: ScannerConfig | None = None,
        prober: Prober | None = None,
    ):
        self.config = config or ScannerConfig()
        self.prober = prober or create_prober(self.config)
        self.coordinator = ScanCoordinator(
            self.prober,
            concurrency=self.config.concurrency,
            retries=self.config.retries,
        )

    def scan(
        self,
        spec: NetworkSpec,
        reservations: Iterable[IPv4Address | str] = (),
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
        on_result: ProgressCallback | None = None,
    ) -> ScanReport:
        """Probe every host of ``spec`` and classify it.

        Args:
            spec: Network to scan
            reservations: Addresses held administratively, reported as
                reserved whatever the probe says
            timeout: Per-probe timeout in seconds (config default if None)
            cancel_event: Set to stop the scan early
            on_result: Progress callback, see ScanCoordinator.run

        Raises:
            InvalidSpec: for a malformed network, mask or reservation, or a
                non-positive timeout
            ScanAborted: if the scan was cancelled or a probe worker failed
        """
        start_time = datetime.now()
        reserved = parse_reservations(reservations)
        timeout = check_timeout(self.config.timeout_seconds if timeout is None else timeout)

        # Checked before deriving hosts so a huge range is never materialized
        count = host_count(spec.prefix_length)
        max_hosts = self.config.max_hosts
        if max_hosts is not None and count > max_hosts:
            raise InvalidSpec(
                f"Network {spec.cidr} has {count} hosts, more than the limit of {max_hosts}"
            )
        host_list = derive_hosts(spec)

        if not host_list:
            logger.info(f"No usable hosts in {spec.cidr}")
            return ScanReport(network=spec.cidr, scan_time=start_time)

        logger.info(f"Scanning {spec.cidr} ({len(host_list)} hosts)...")
        results = self.coordinator.run(
            host_list,
            timeout,
            cancel_event=cancel_event,
            on_result=on_result,
        )

        entries = [classify(result, reserved) for result in results]
        report = ScanReport(
            network=spec.cidr,
            total=len(entries),
            entries=entries,
            available_count=sum(1 for e in entries if e.status == AddressStatus.AVAILABLE),
            used_count=sum(1 for e in entries if e.status == AddressStatus.USED),
            reserved_count=sum(1 for e in entries if e.status == AddressStatus.RESERVED),
            scan_time=start_time,
            duration_seconds=(datetime.now() - start_time).total_seconds(),
        )

        logger.info(
            f"Scan complete: {report.available_count} available, "
            f"{report.used_count} in use, {report.reserved_count} reserved"
        )
        if report.errors:
            logger.warning(f"{len(report.errors)} probes could not be issued")
        return report

    def verify(self, address: IPv4Address | str, timeout: float | None = None) -> ProbeResult:
        """Re-probe one address on demand. Reservations are not consulted."""
        if timeout is None:
            timeout = self.config.verify_timeout_seconds
        return self.prober.probe(parse_address(address), check_timeout(timeout))

    def handle_scan_request(
        self,
        payload: dict,
        cancel_event: threading.Event | None = None,
    ) -> dict:
        """Run a scan for a request body and build the response body."""
        try:
            request = ScanRequest.model_validate(payload)
            spec = NetworkSpec(
                address=request.network_address,
                prefix_length=request.subnet_mask,
            )
            timeout = None
            if request.timeout_millis is not None:
                timeout = request.timeout_millis / 1000

            report = self.scan(
                spec,
                request.reserved_ips,
                timeout=timeout,
                cancel_event=cancel_event,
            )
        except ValidationError as e:
            return error_payload(f"Invalid scan request: {describe_validation_error(e)}")
        except (InvalidSpec, ScanAborted) as e:
            logger.error(f"Scan failed: {e}")
            return error_payload(str(e))

        return ScanResponse.from_report(report).to_payload()

    def handle_verify_request(self, ip: str | None, timeout_ms: int | None = None) -> dict:
        """Re-probe a single address for a request and build the response body."""
        if not ip:
            return error_payload("IP parameter required")

        timeout = timeout_ms / 1000 if timeout_ms is not None else None
        try:
            result = self.verify(ip, timeout)
        except (InvalidSpec, ProbeSetupError) as e:
            return error_payload(str(e))

        return VerifyResponse.from_probe(result).to_payload()
