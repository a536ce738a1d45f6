"""Exception hierarchy for subnet scanning."""

from typing import Any


class NetscanError(Exception):
    """Base exception for all scanner errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information about the error
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if not self.context:
            return self.message
        context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({context_str})"


class InvalidSpec(NetscanError):
    """Raised for a malformed network address, mask or reservation."""


class ProbeSetupError(NetscanError):
    """Raised when a probe cannot be issued at all.

    An unreachable target is never a setup error; this covers things like a
    malformed address or a missing ping binary.
    """

    def __init__(self, message: str, address: str = "") -> None:
        super().__init__(message, {"address": address} if address else None)
        self.address = address


class ScanAborted(NetscanError):
    """Raised when a scan stops before every host has a result.

    ``partial`` holds the results completed so far at their original
    positions, with ``None`` in the slots that were never probed.
    """

    def __init__(self, reason: str, partial: list | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.partial = partial if partial is not None else []

    @property
    def completed(self) -> int:
        """Number of slots that hold a result."""
        return sum(1 for r in self.partial if r is not None)
