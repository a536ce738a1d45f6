"""Pytest configuration and fixtures."""

import json
import tempfile
import threading
import time
from ipaddress import IPv4Address
from pathlib import Path

import pytest

from netscan.exceptions import ProbeSetupError
from netscan.models.scan_result import ProbeResult


class StubProber:
    """Deterministic prober that records how it was called.

    Args:
        reachable: Map of address -> latency (or None) for hosts that answer
        delays: Map of address -> seconds to sleep before answering
        errors: Addresses that raise ProbeSetupError
    """

    def __init__(
        self,
        reachable: dict[str, float | None] | None = None,
        delays: dict[str, float] | None = None,
        errors: set[str] | None = None,
    ):
        self.reachable = reachable or {}
        self.delays = delays or {}
        self.errors = errors or set()
        self.calls: list[IPv4Address] = []
        self.completion_order: list[IPv4Address] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def probe(self, address: IPv4Address | str, timeout: float) -> ProbeResult:
        ip = IPv4Address(str(address))
        with self._lock:
            self.calls.append(ip)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(str(ip))
            if delay:
                time.sleep(delay)
            if str(ip) in self.errors:
                raise ProbeSetupError("Permission denied", address=str(ip))
            if str(ip) in self.reachable:
                return ProbeResult(address=ip, reachable=True, latency_ms=self.reachable[str(ip)])
            return ProbeResult(address=ip, reachable=False)
        finally:
            with self._lock:
                self.in_flight -= 1
                self.completion_order.append(ip)


@pytest.fixture
def stub_prober():
    """Factory for StubProber instances."""
    return StubProber


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing."""
    return {
        "scanner": {
            "probe_method": "tcp",
            "timeout_ms": 500,
            "verify_timeout_ms": 1500,
            "concurrency": 8,
            "retries": 1,
            "tcp_ports": [22, 80],
            "max_hosts": 1022,
        },
        "settings": {
            "log_level": "DEBUG",
            "log_file": None,
        },
        "default_network": "192.168.1.0/24",
        "reservations": ["192.168.1.1", "192.168.1.254"],
    }


@pytest.fixture
def sample_config_file(temp_dir, sample_config_data):
    """Create a sample config file for testing."""
    config_path = temp_dir / "config.json"
    with open(config_path, "w") as f:
        json.dump(sample_config_data, f)
    return config_path
