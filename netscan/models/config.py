"""Configuration models using Pydantic for validation."""

import ipaddress
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ScannerConfig(BaseModel):
    """Probe and worker pool settings."""

    probe_method: Literal["ping", "tcp"] = "ping"
    timeout_ms: int = Field(default=1000, ge=1, le=60000)
    verify_timeout_ms: int = Field(default=2000, ge=1, le=60000)
    concurrency: int = Field(default=20, ge=1)
    retries: int = Field(default=0, ge=0, le=5)  # Extra attempts for unreachable hosts
    tcp_ports: list[int] = Field(default_factory=lambda: [80, 443, 22])
    max_hosts: int | None = 65534  # Largest range a single scan may cover (a /16)

    @field_validator("tcp_ports")
    @classmethod
    def validate_ports(cls, v: list[int]) -> list[int]:
        """Validate that at least one port is given and all are in range."""
        if not v:
            raise ValueError("tcp_ports must contain at least one port")
        for port in v:
            if not 1 <= port <= 65535:
                raise ValueError(f"Port must be between 1 and 65535, got {port}")
        return v

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def verify_timeout_seconds(self) -> float:
        return self.verify_timeout_ms / 1000


class Settings(BaseModel):
    """General application settings."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: str | None = "logs/netscan.log"


class Config(BaseModel):
    """Main configuration model."""

    scanner: ScannerConfig = Field(default_factory=ScannerConfig)
    settings: Settings = Field(default_factory=Settings)
    default_network: str | None = None  # CIDR scanned when none is given
    reservations: list[str] = Field(default_factory=list)

    @field_validator("default_network")
    @classmethod
    def validate_cidr(cls, v: str | None) -> str | None:
        """Validate that the default network is IPv4 CIDR notation."""
        if v is None:
            return v
        try:
            ipaddress.IPv4Network(v, strict=False)
        except ValueError as e:
            raise ValueError(f"Invalid CIDR range '{v}': {e}")
        return v

    @field_validator("reservations")
    @classmethod
    def validate_reservations(cls, v: list[str]) -> list[str]:
        """Validate that every reserved address is a valid IPv4 address."""
        for address in v:
            try:
                ipaddress.IPv4Address(address)
            except ValueError as e:
                raise ValueError(f"Invalid reserved address '{address}': {e}")
        return v

    @classmethod
    def load(cls, path: Path | str = "config.json") -> "Config":
        """Load configuration from a JSON file."""
        import json

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = json.load(f)

        return cls.model_validate(data)

    @classmethod
    def load_or_default(cls, path: Path | str = "config.json") -> "Config":
        """Load configuration or return default if file doesn't exist."""
        try:
            return cls.load(path)
        except FileNotFoundError:
            return cls()
