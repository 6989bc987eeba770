"""Punkt wejścia wiersza poleceń `avena-loadgen`."""

import argparse
import os
from typing import Optional, Sequence

from dotenv import load_dotenv

from avena_loadgen.config import LoadGenSettings, load_settings, save_settings
from avena_loadgen.engine import LoadEngine, RunOutcome
from avena_loadgen.errors import AggregateRunFailure
from avena_loadgen.util.host import ProcessorArchInfo, get_processor_arch_info
from avena_loadgen.util.logger import LoggerPolicyPeriod, MessageLogger, error, info

EXIT_OK = 0
EXIT_RUN_FAILURE = 1
EXIT_INVALID_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="avena-loadgen",
        description="Generate synthetic CPU load on every logical processor.",
    )
    parser.add_argument(
        "--config",
        "-c",
        default=None,
        help="INI or JSON config file (default: $LOADGEN_CONFIG).",
    )
    parser.add_argument(
        "--min", dest="min_cpu_load_percentage", type=float, help="Minimum load (0-1)."
    )
    parser.add_argument(
        "--max", dest="max_cpu_load_percentage", type=float, help="Maximum load (0-1)."
    )
    parser.add_argument(
        "--load",
        dest="cpu_load_percentage",
        type=float,
        help="Fixed load (0-1); overrides --min/--max.",
    )
    parser.add_argument(
        "--duration",
        "-d",
        type=int,
        help="Duration in seconds, 0 runs until interrupted (default: 0).",
    )
    parser.add_argument(
        "--alternating",
        action="store_true",
        default=None,
        help="Alternate busy/sleep segments within each period (requires --load).",
    )
    parser.add_argument("--segments", type=int, help="Segments per period (default: 1).")
    parser.add_argument(
        "--period-ms", dest="period_ms", type=int, help="Busy/sleep period (default: 100)."
    )
    parser.add_argument(
        "--quiet-hours",
        nargs=2,
        type=int,
        metavar=("START", "END"),
        help="Quiet hours band, e.g. 21 7.",
    )
    parser.add_argument(
        "--quiet-min", dest="quiet_min_cpu_load_percentage", type=float,
        help="Minimum load during quiet hours (default: 0.24).",
    )
    parser.add_argument(
        "--quiet-max", dest="quiet_max_cpu_load_percentage", type=float,
        help="Maximum load during quiet hours (default: 0.26).",
    )
    parser.add_argument(
        "--backend", choices=["process", "thread"], help="Worker backend (default: process)."
    )
    parser.add_argument("--cores", type=int, help="Override detected core count.")
    parser.add_argument(
        "--threads-per-core", type=int, help="Override detected threads per core."
    )
    parser.add_argument(
        "--log-file", default=None, help="Log file (default: $LOADGEN_LOG_FILE)."
    )
    parser.add_argument(
        "--log-period",
        type=float,
        default=None,
        help="Start a new log file every N seconds (default: never).",
    )
    parser.add_argument(
        "--log-core",
        type=int,
        default=None,
        help="Pin the log writer process to this CPU core.",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Write debug messages to the log file."
    )
    parser.add_argument(
        "--save-config", default=None, help="Save the effective settings to a file."
    )
    return parser


_OVERRIDE_KEYS = (
    "min_cpu_load_percentage",
    "max_cpu_load_percentage",
    "cpu_load_percentage",
    "duration",
    "alternating",
    "segments",
    "period_ms",
    "quiet_min_cpu_load_percentage",
    "quiet_max_cpu_load_percentage",
    "backend",
)


def resolve_settings(args: argparse.Namespace) -> LoadGenSettings:
    """Łączy ustawienia z pliku z flagami wiersza poleceń (flagi mają pierwszeństwo)."""
    config_path = args.config or os.getenv("LOADGEN_CONFIG")
    settings = load_settings(config_path) if config_path else LoadGenSettings()

    overrides = {
        key: getattr(args, key)
        for key in _OVERRIDE_KEYS
        if getattr(args, key, None) is not None
    }
    if args.quiet_hours:
        overrides["quiet_start_hour"], overrides["quiet_end_hour"] = args.quiet_hours
    if not overrides:
        return settings
    return LoadGenSettings.model_validate({**settings.model_dump(), **overrides})


def resolve_arch_info(args: argparse.Namespace, message_logger=None) -> ProcessorArchInfo:
    detected = get_processor_arch_info(message_logger)
    return ProcessorArchInfo(
        num_cores=args.cores or detected.num_cores,
        num_threads_per_core=args.threads_per_core or detected.num_threads_per_core,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(override=True)
    args = build_parser().parse_args(argv)

    log_file = args.log_file or os.getenv("LOADGEN_LOG_FILE")
    message_logger = (
        MessageLogger(
            log_file,
            period=args.log_period or LoggerPolicyPeriod.NONE,
            debug=args.debug,
            core=args.log_core,
        )
        if log_file
        else None
    )

    try:
        try:
            settings = resolve_settings(args)
            arch_info = resolve_arch_info(args, message_logger)
            info(str(arch_info), message_logger=message_logger)
            request = settings.to_run_request(arch_info)
        except (ValueError, OSError) as e:
            # pydantic.ValidationError i InvalidProfileError dziedziczą po ValueError
            error(f"Niepoprawna konfiguracja: {e}", message_logger=message_logger)
            return EXIT_INVALID_CONFIG

        if args.save_config:
            save_settings(settings, args.save_config)
            info(f"Zapisano konfiguracje: {args.save_config}", message_logger=message_logger)

        engine = LoadEngine(settings.backend, message_logger=message_logger)
        try:
            result = engine.run(request)
        except AggregateRunFailure as e:
            error(
                f"Threads generating CPU load interrupted: {e.failed_indexes}",
                message_logger=message_logger,
            )
            return EXIT_RUN_FAILURE

        if result.outcome is RunOutcome.STOPPED:
            info("CPU load generation stopped", message_logger=message_logger)
        return EXIT_OK
    finally:
        if message_logger is not None:
            message_logger.close()
