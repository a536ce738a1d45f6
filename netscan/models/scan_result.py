"""Probe and scan result models."""

from datetime import datetime
from enum import Enum
from ipaddress import IPv4Address

from pydantic import BaseModel, ConfigDict, Field


class AddressStatus(str, Enum):
    """Classification of a host address."""

    AVAILABLE = "available"
    USED = "used"
    RESERVED = "reserved"


class ProbeResult(BaseModel):
    """Outcome of a single reachability probe."""

    model_config = ConfigDict(frozen=True)

    address: IPv4Address
    reachable: bool
    latency_ms: float | None = Field(default=None, gt=0)
    error: str | None = None  # Set when the probe could not be issued


class ReportEntry(BaseModel):
    """Final classification of one host address."""

    model_config = ConfigDict(frozen=True)

    address: IPv4Address
    status: AddressStatus
    latency_ms: float | None = None
    error: str | None = None

    @property
    def ip(self) -> str:
        return str(self.address)


class ScanReport(BaseModel):
    """Complete, ordered classification of every host in a subnet."""

    network: str
    total: int = 0
    entries: list[ReportEntry] = Field(default_factory=list)
    available_count: int = 0
    used_count: int = 0
    reserved_count: int = 0
    scan_time: datetime = Field(default_factory=datetime.now)
    duration_seconds: float = 0.0

    @property
    def available(self) -> list[ReportEntry]:
        """Entries that are free for assignment."""
        return [e for e in self.entries if e.status == AddressStatus.AVAILABLE]

    @property
    def used(self) -> list[ReportEntry]:
        """Entries that answered the probe."""
        return [e for e in self.entries if e.status == AddressStatus.USED]

    @property
    def errors(self) -> list[ReportEntry]:
        """Entries whose probe could not be issued."""
        return [e for e in self.entries if e.error]

    def get(self, address: IPv4Address | str) -> ReportEntry | None:
        """Look up the entry for an address, if it is part of the report."""
        target = IPv4Address(str(address))
        for entry in self.entries:
            if entry.address == target:
                return entry
        return None
