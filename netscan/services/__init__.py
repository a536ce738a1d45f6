"""Services for deriving, probing and classifying subnet addresses."""

from .address_range import host_count, hosts
from .coordinator import ScanCoordinator
from .prober import PingProber, Prober, TcpConnectProber, create_prober
from .scan_service import ScanService

__all__ = [
    "PingProber",
    "Prober",
    "ScanCoordinator",
    "ScanService",
    "TcpConnectProber",
    "create_prober",
    "host_count",
    "hosts",
]
