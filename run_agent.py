#!/usr/bin/env python3
"""Entry point: discover easy-apply jobs and work through their forms."""
from __future__ import annotations

import argparse
import signal
import sys
import threading
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

import yaml

from easyapply.log import configure, get_logger
from easyapply.config import load_settings
from easyapply.providers import available_providers

log = get_logger(__name__)

EXIT_OK = 0
EXIT_PREFLIGHT = 1
EXIT_CONFIG = 2


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("job_title", nargs="?", help="search keywords (overrides settings)")
    parser.add_argument("location", nargs="?", help="search location (overrides settings)")
    parser.add_argument("--provider", choices=available_providers(), help="job site to use")
    parser.add_argument("--config", type=Path, help="settings YAML (default: config/settings.yaml)")
    parser.add_argument("--max-applications", type=int, help="stop after this many attempts")
    parser.add_argument("--headless", action="store_true", help="run the browser headless")
    parser.add_argument(
        "--unattended", action="store_true",
        help="fail jobs that need manual answers instead of waiting for input",
    )
    parser.add_argument("--no-report", action="store_true", help="skip the markdown report")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging on the console")
    return parser.parse_args(argv)


def _install_stop_handlers(stop: threading.Event) -> None:
    def _handler(signum, frame):
        if stop.is_set():
            raise KeyboardInterrupt
        stop.set()
        log.warning("Stop requested; finishing the current job first (repeat to abort now)")

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.verbose:
        configure("DEBUG")

    try:
        settings = load_settings(args.config)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        log.error("Could not load settings: %s", exc)
        return EXIT_CONFIG
    if args.provider:
        settings["provider"] = args.provider
    if args.max_applications is not None:
        settings["limits"]["max_applications"] = args.max_applications
    if args.headless:
        settings["browser"]["headless"] = True
    if args.no_report:
        settings["report"]["enabled"] = False

    from easyapply.agent import PreflightError, run
    from easyapply.intervention import ConsoleGate, DeclineGate

    stop = threading.Event()
    _install_stop_handlers(stop)
    gate = DeclineGate() if args.unattended else ConsoleGate()

    try:
        summary = run(
            settings, job_title=args.job_title, location=args.location,
            gate=gate, stop_event=stop,
        )
    except PreflightError as exc:
        log.error("Aborting before any job was attempted: %s", exc)
        return EXIT_PREFLIGHT
    except ValueError as exc:
        log.error("%s", exc)
        return EXIT_CONFIG

    log.info("Processed %d job(s), applied to %d", len(summary.outcomes), summary.applied)
    log.info("  Found: %d", summary.found)
    log.info("  Skipped: %d", summary.skipped)
    log.info("  Failed: %d", summary.failed)
    log.info("  Success rate: %.0f%%", summary.success_rate * 100)
    if summary.stopped_early:
        log.info("  Stopped early: %s", summary.stopped_early)
    if summary.report_path:
        log.info("  Report: %s", summary.report_path)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
