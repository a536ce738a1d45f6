"""Single-address reachability probes."""

import logging
import math
import re
import socket
import subprocess
import sys
import time
from ipaddress import IPv4Address
from typing import Protocol

from ..exceptions import ProbeSetupError
from ..models.config import ScannerConfig
from ..models.scan_result import ProbeResult

logger = logging.getLogger(__name__)

# Matches "time=0.045 ms", "time<1ms" and the Windows "time=3ms" forms
LATENCY_PATTERN = re.compile(r"time[=<]\s*(\d+(?:\.\d+)?)\s*ms", re.IGNORECASE)

# Extra wall-clock allowance on top of the ping's own timeout
PROCESS_GRACE_SECONDS = 1.0


class Prober(Protocol):
    """Anything that can check one address for reachability."""

    def probe(self, address: IPv4Address | str, timeout: float) -> ProbeResult: ...


def parse_address(address: IPv4Address | str) -> IPv4Address:
    """Convert an address to IPv4Address, raising ProbeSetupError if malformed."""
    if isinstance(address, IPv4Address):
        return address
    try:
        return IPv4Address(str(address).strip())
    except ValueError as e:
        raise ProbeSetupError(f"Malformed address: {e}", address=str(address))


class PingProber:
    """Probe hosts with one ICMP echo via the system ping command."""

    def __init__(self, platform: str | None = None):
        self.platform = platform or sys.platform

    def build_command(self, address: IPv4Address, timeout: float) -> list[str]:
        """Build a single-echo ping command for the current platform."""
        timeout_ms = max(1, int(timeout * 1000))
        if self.platform.startswith("win"):
            return ["ping", "-n", "1", "-w", str(timeout_ms), str(address)]
        if self.platform == "darwin":
            # BSD ping takes -W in milliseconds
            return ["ping", "-c", "1", "-W", str(timeout_ms), str(address)]
        # iputils ping takes -W in whole seconds
        timeout_s = max(1, math.ceil(timeout))
        return ["ping", "-c", "1", "-W", str(timeout_s), str(address)]

    def probe(self, address: IPv4Address | str, timeout: float) -> ProbeResult:
        """Send one echo request and wait up to ``timeout`` seconds."""
        ip = parse_address(address)
        cmd = self.build_command(ip, timeout)

        try:
            result = subprocess.run(
                cmd,
                check=False,
                capture_output=True,
                text=True,
                timeout=timeout + PROCESS_GRACE_SECONDS,
            )
        except subprocess.TimeoutExpired:
            logger.debug(f"Ping timeout for {ip}")
            return ProbeResult(address=ip, reachable=False)
        except FileNotFoundError:
            raise ProbeSetupError("ping command not found in PATH", address=str(ip))
        except PermissionError as e:
            raise ProbeSetupError(f"Permission denied running ping: {e}", address=str(ip))
        except OSError as e:
            raise ProbeSetupError(f"Could not run ping: {e}", address=str(ip))

        if result.returncode != 0:
            if self.is_setup_failure(result.returncode):
                message = (result.stderr or "").strip() or f"ping exited with code {result.returncode}"
                raise ProbeSetupError(message, address=str(ip))
            return ProbeResult(address=ip, reachable=False)

        return ProbeResult(
            address=ip,
            reachable=True,
            latency_ms=self.parse_latency(result.stdout),
        )

    def is_setup_failure(self, returncode: int) -> bool:
        """Whether a ping exit code means the echo was never sent.

        iputils exits 1 for no reply and 2 for errors such as a denied
        socket. BSD ping exits 2 for no reply and uses sysexits codes
        (64 and up) for errors. Windows ping only ever exits 0 or 1.
        """
        if self.platform.startswith("win"):
            return False
        if self.platform == "darwin":
            return returncode >= 64
        return returncode >= 2

    @staticmethod
    def parse_latency(output: str) -> float | None:
        """Extract the round-trip time in milliseconds from ping output."""
        match = LATENCY_PATTERN.search(output or "")
        if not match:
            return None
        latency = float(match.group(1))
        return latency if latency > 0 else None


class TcpConnectProber:
    """Probe hosts with TCP connects, no privileges required.

    A host counts as reachable if any port accepts the connection or
    actively refuses it; a refusal still proves something answered.
    """

    def __init__(self, ports: list[int] | None = None):
        self.ports = ports or [80, 443, 22]

    def probe(self, address: IPv4Address | str, timeout: float) -> ProbeResult:
        """Try each port in turn, sharing ``timeout`` seconds between them."""
        ip = parse_address(address)
        deadline = time.monotonic() + timeout

        for port in self.ports:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break

            start = time.perf_counter()
            try:
                with socket.create_connection((str(ip), port), timeout=remaining):
                    pass
            except ConnectionRefusedError:
                pass
            except OSError as e:
                # Timeouts and unreachable routes: try the next port
                logger.debug(f"TCP {ip}:{port} failed: {e}")
                continue

            latency = (time.perf_counter() - start) * 1000
            return ProbeResult(
                address=ip,
                reachable=True,
                latency_ms=latency if latency > 0 else None,
            )

        return ProbeResult(address=ip, reachable=False)


def create_prober(config: ScannerConfig) -> Prober:
    """Create the prober selected by the scanner configuration."""
    if config.probe_method == "tcp":
        return TcpConnectProber(ports=config.tcp_ports)
    return PingProber()
