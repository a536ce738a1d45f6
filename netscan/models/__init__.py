"""Data models for the scanner."""

from .api import ScanRequest, ScanResponse, VerifyResponse
from .config import Config, ScannerConfig, Settings
from .network import NetworkSpec
from .scan_result import AddressStatus, ProbeResult, ReportEntry, ScanReport

__all__ = [
    "AddressStatus",
    "Config",
    "NetworkSpec",
    "ProbeResult",
    "ReportEntry",
    "ScanReport",
    "ScanRequest",
    "ScanResponse",
    "ScannerConfig",
    "Settings",
    "VerifyResponse",
]
