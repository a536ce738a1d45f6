"""Request and response shapes exchanged with the transport and view layers."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .scan_result import ProbeResult, ScanReport


class ScanRequest(BaseModel):
    """Incoming scan request, e.g. the body of a POST /api/scan."""

    model_config = ConfigDict(populate_by_name=True)

    network_address: str = Field(alias="networkAddress")
    subnet_mask: int = Field(alias="subnetMask")
    reserved_ips: list[str] = Field(default_factory=list, alias="reservedIPs")
    timeout_millis: int | None = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("timeoutMillis", "timeout", "timeout_millis"),
    )


class ResultItem(BaseModel):
    """One row of the scan response."""

    model_config = ConfigDict(populate_by_name=True)

    ip: str
    status: str
    response_time: float | None = Field(default=None, alias="responseTime")
    error: str | None = None


class ScanSummary(BaseModel):
    """Counts shown next to the address grid."""

    total: int
    available: int
    used: int
    reserved: int


class ScanResponse(BaseModel):
    """Successful scan response."""

    success: bool = True
    results: list[ResultItem] = Field(default_factory=list)
    summary: ScanSummary

    @classmethod
    def from_report(cls, report: ScanReport) -> "ScanResponse":
        results = [
            ResultItem(
                ip=entry.ip,
                status=entry.status.value,
                response_time=entry.latency_ms,
                error=entry.error,
            )
            for entry in report.entries
        ]
        return cls(
            results=results,
            summary=ScanSummary(
                total=report.total,
                available=report.available_count,
                used=report.used_count,
                reserved=report.reserved_count,
            ),
        )

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class VerifyResponse(BaseModel):
    """Response for a single on-demand re-probe."""

    model_config = ConfigDict(populate_by_name=True)

    ip: str
    status: str
    reachable: bool
    response_time: float | None = Field(default=None, alias="responseTime")
    error: str | None = None

    @classmethod
    def from_probe(cls, result: ProbeResult) -> "VerifyResponse":
        return cls(
            ip=str(result.address),
            status="used" if result.reachable else "available",
            reachable=result.reachable,
            response_time=result.latency_ms,
            error=result.error,
        )

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def error_payload(message: str) -> dict:
    """Failure response shared by every endpoint."""
    return {"success": False, "error": message}
