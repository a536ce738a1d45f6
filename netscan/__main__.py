"""Command-line entry point for scanning a subnet."""

import argparse
import json
import logging
import signal
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .exceptions import InvalidSpec, ProbeSetupError, ScanAborted
from .models.api import ScanResponse, VerifyResponse
from .models.config import Config
from .models.network import NetworkSpec
from .models.scan_result import ScanReport
from .services.scan_service import ScanService

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

# Set by the signal handlers to stop a running scan
_cancel_event = threading.Event()
_logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging with rotation support.

    Args:
        log_level: The logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Path of the rotating log file, or None for stderr only
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_path = Path(log_file)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            # Rotate at 10MB, keep 5 backup files
            file_handler = RotatingFileHandler(
                log_path,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding="utf-8",
            )
            handlers.append(file_handler)
        except (PermissionError, OSError):
            pass  # Skip file logging if we can't write

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def _signal_handler(signum: int, frame: object) -> None:
    """Stop starting new probes; in-flight ones finish or time out."""
    signal_name = signal.Signals(signum).name
    _logger.info(f"Received {signal_name}, cancelling scan...")
    _cancel_event.set()


def setup_signal_handlers() -> None:
    """Set up signal handlers for graceful cancellation."""
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netscan",
        description="netscan - find free IPv4 addresses in a subnet",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.json"),
        help="Path to configuration file (default: config.json)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    subparsers = parser.add_subparsers(dest="command")

    scan = subparsers.add_parser("scan", help="Scan every host of a subnet")
    scan.add_argument("network", nargs="?", help="Network in CIDR notation, e.g. 192.168.1.0/24")
    scan.add_argument(
        "-r",
        "--reserve",
        action="append",
        default=[],
        metavar="IP",
        help="Address to report as reserved (repeatable)",
    )
    scan.add_argument("--timeout-ms", type=int, help="Per-probe timeout in milliseconds")
    scan.add_argument("--concurrency", type=int, help="Number of probes in flight")
    scan.add_argument("--method", choices=["ping", "tcp"], help="Probe method")
    scan.add_argument("--json", action="store_true", help="Print the scan response as JSON")

    verify = subparsers.add_parser("verify", help="Re-probe a single address")
    verify.add_argument("ip", help="Address to probe")
    verify.add_argument("--timeout-ms", type=int, help="Probe timeout in milliseconds")
    verify.add_argument("--json", action="store_true", help="Print the verify response as JSON")

    return parser


def print_report(report: ScanReport) -> None:
    """Print a plain-text report, one address per line."""
    for entry in report.entries:
        line = f"{entry.ip:<15}  {entry.status.value}"
        if entry.latency_ms is not None:
            line += f" ({entry.latency_ms:g}ms)"
        if entry.error:
            line += f"  [{entry.error}]"
        print(line)
    print(
        f"\n{report.network}: {report.total} hosts, {report.available_count} available, "
        f"{report.used_count} used, {report.reserved_count} reserved "
        f"({report.duration_seconds:.1f}s)"
    )


def run_scan(args: argparse.Namespace, config: Config) -> int:
    network = args.network or config.default_network
    if not network:
        print("No network given and no default_network configured", file=sys.stderr)
        return EXIT_FAILURE

    scanner_config = config.scanner.model_copy()
    if args.concurrency is not None:
        scanner_config.concurrency = args.concurrency
    if args.method:
        scanner_config.probe_method = args.method

    service = ScanService(scanner_config)
    timeout = args.timeout_ms / 1000 if args.timeout_ms is not None else None
    reservations = [*config.reservations, *args.reserve]

    def on_result(completed: int, total: int, result: object) -> None:
        if completed % 50 == 0 or completed == total:
            _logger.debug(f"Progress: {completed}/{total}")

    try:
        spec = NetworkSpec.from_cidr(network)
        report = service.scan(
            spec,
            reservations,
            timeout=timeout,
            cancel_event=_cancel_event,
            on_result=on_result,
        )
    except InvalidSpec as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except ScanAborted as e:
        print(f"Scan aborted: {e.reason} ({e.completed} probes completed)", file=sys.stderr)
        return EXIT_INTERRUPTED if _cancel_event.is_set() else EXIT_FAILURE

    if args.json:
        print(json.dumps(ScanResponse.from_report(report).to_payload(), indent=2))
    else:
        print_report(report)
    return EXIT_OK


def run_verify(args: argparse.Namespace, config: Config) -> int:
    service = ScanService(config.scanner)
    timeout = args.timeout_ms / 1000 if args.timeout_ms is not None else None

    try:
        result = service.verify(args.ip, timeout)
    except InvalidSpec as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except ProbeSetupError as e:
        print(f"Probe failed: {e}", file=sys.stderr)
        return EXIT_FAILURE

    response = VerifyResponse.from_probe(result)
    if args.json:
        print(json.dumps(response.to_payload(), indent=2))
    else:
        line = f"{response.ip}: {response.status}"
        if response.response_time is not None:
            line += f" ({response.response_time:g}ms)"
        print(line)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Handle version flag
    if args.version:
        from . import __version__

        print(f"netscan v{__version__}")
        return EXIT_OK

    if args.command is None:
        parser.print_help()
        return EXIT_FAILURE

    try:
        config = Config.load_or_default(args.config)
    except ValueError as e:
        # pydantic ValidationError and malformed JSON are both ValueErrors
        print(f"Invalid config file {args.config}: {e}", file=sys.stderr)
        return EXIT_FAILURE

    # Setup logging
    log_level = "DEBUG" if args.verbose else config.settings.log_level
    setup_logging(log_level, config.settings.log_file)

    if args.command == "scan":
        setup_signal_handlers()
        return run_scan(args, config)
    return run_verify(args, config)


if __name__ == "__main__":
    sys.exit(main())
