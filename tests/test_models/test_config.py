"""Tests for configuration models."""

import json

import pytest
from pydantic import ValidationError

from netscan.models.config import Config, ScannerConfig, Settings


class TestScannerConfig:
    """Tests for ScannerConfig model."""

    def test_defaults(self):
        """Test default values are applied."""
        config = ScannerConfig()
        assert config.probe_method == "ping"
        assert config.timeout_ms == 1000
        assert config.verify_timeout_ms == 2000
        assert config.concurrency == 20
        assert config.retries == 0
        assert config.tcp_ports == [80, 443, 22]
        assert config.max_hosts == 65534

    def test_timeout_seconds(self):
        """Test millisecond timeouts are exposed in seconds."""
        config = ScannerConfig(timeout_ms=250, verify_timeout_ms=1500)
        assert config.timeout_seconds == 0.25
        assert config.verify_timeout_seconds == 1.5

    def test_invalid_probe_method(self):
        """Test that unknown probe methods are rejected."""
        with pytest.raises(ValidationError):
            ScannerConfig(probe_method="arp")

    def test_non_positive_concurrency(self):
        """Test that concurrency below 1 is rejected."""
        with pytest.raises(ValidationError):
            ScannerConfig(concurrency=0)

    def test_timeout_bounds(self):
        """Test timeout range validation."""
        with pytest.raises(ValidationError):
            ScannerConfig(timeout_ms=0)
        with pytest.raises(ValidationError):
            ScannerConfig(timeout_ms=60001)

    def test_retries_bounds(self):
        """Test that retries must be between 0 and 5."""
        assert ScannerConfig(retries=5).retries == 5
        with pytest.raises(ValidationError):
            ScannerConfig(retries=6)

    def test_empty_ports_rejected(self):
        """Test that an empty TCP port list is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            ScannerConfig(tcp_ports=[])
        assert "at least one port" in str(exc_info.value)

    def test_port_out_of_range(self):
        """Test that ports outside 1-65535 are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            ScannerConfig(tcp_ports=[80, 70000])
        assert "between 1 and 65535" in str(exc_info.value)

    def test_max_hosts_can_be_disabled(self):
        """Test that the host limit can be turned off."""
        assert ScannerConfig(max_hosts=None).max_hosts is None


class TestSettings:
    """Tests for Settings model."""

    def test_defaults(self):
        """Test default values."""
        settings = Settings()
        assert settings.log_level == "INFO"
        assert settings.log_file == "logs/netscan.log"

    def test_valid_log_levels(self):
        """Test all valid log levels."""
        for level in ["DEBUG", "INFO", "WARNING", "ERROR"]:
            settings = Settings(log_level=level)
            assert settings.log_level == level

    def test_invalid_log_level(self):
        """Test that invalid log level is rejected."""
        with pytest.raises(ValidationError):
            Settings(log_level="INVALID")


class TestConfig:
    """Tests for main Config model."""

    def test_load_valid_config(self, sample_config_file):
        """Test loading a valid config file."""
        config = Config.load(sample_config_file)
        assert config.scanner.probe_method == "tcp"
        assert config.scanner.concurrency == 8
        assert config.scanner.tcp_ports == [22, 80]
        assert config.settings.log_file is None
        assert config.default_network == "192.168.1.0/24"
        assert config.reservations == ["192.168.1.1", "192.168.1.254"]

    def test_load_nonexistent_file(self, temp_dir):
        """Test that loading nonexistent file raises error."""
        with pytest.raises(FileNotFoundError):
            Config.load(temp_dir / "nonexistent.json")

    def test_load_or_default_existing(self, sample_config_file):
        """Test load_or_default with existing file."""
        config = Config.load_or_default(sample_config_file)
        assert config.scanner.concurrency == 8

    def test_load_or_default_nonexistent(self, temp_dir):
        """Test load_or_default with nonexistent file returns default."""
        config = Config.load_or_default(temp_dir / "nonexistent.json")
        assert config.reservations == []
        assert config.default_network is None

    def test_load_invalid_values(self, temp_dir):
        """Test that invalid values in the file raise ValidationError."""
        path = temp_dir / "config.json"
        path.write_text(json.dumps({"scanner": {"concurrency": -1}}))
        with pytest.raises(ValidationError):
            Config.load(path)

    def test_defaults(self):
        """Test default config values."""
        config = Config()
        assert isinstance(config.scanner, ScannerConfig)
        assert isinstance(config.settings, Settings)
        assert config.reservations == []

    def test_invalid_default_network(self):
        """Test that a malformed default network is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            Config(default_network="192.168.1.0/33")
        assert "Invalid CIDR range" in str(exc_info.value)

    def test_default_network_with_host_bits(self):
        """Test that host bits in the default network are tolerated."""
        config = Config(default_network="10.0.0.5/29")
        assert config.default_network == "10.0.0.5/29"

    def test_invalid_reservation(self):
        """Test that malformed reserved addresses are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            Config(reservations=["192.168.1.1", "192.168.1.300"])
        assert "Invalid reserved address" in str(exc_info.value)
