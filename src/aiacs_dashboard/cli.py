"""
AIACS Dashboard CLI
Main entry point for running the monitoring dashboard.

  --validate  Check configuration validity
  --once      Render a single snapshot and exit
  --dry-run   Run on generated sample data instead of the backend
  --history   Write one page of detection history and exit
  --settings  Edit persisted user settings
"""

import argparse
import logging
import random
import signal
import sys
import time
from threading import Event as ThreadEvent

from .api import BackendClient, BackendError, TokenStore
from .api.playback import create_playback_session_for_detection
from .config import (
    load_config,
    parse_camera_sectors,
    parse_plot_layout,
    parse_site_positions,
    print_validation_result,
    validate_config_full,
)
from .config.loader import DEFAULT_CONFIG_NAME, default_search_paths
from .dashboard import (
    BackendSource,
    Dashboard,
    DashboardWriter,
    HistoryQuery,
    SampleSource,
    start_dashboard_server,
    stop_dashboard_server,
)
from .settings import load_settings, run_settings_editor
from .utils.constants import DEFAULT_OUTPUT_DIR, DEFAULT_SERVER_PORT

logger = logging.getLogger(__name__)

DEFAULT_DURATION_HOURS = 24.0

# Module-level shutdown signal for SIGTERM/SIGINT handling
_shutdown_signal = ThreadEvent()


def _handle_shutdown_signal(signum, _frame):
    """Handle SIGTERM/SIGINT for graceful shutdown."""
    signal_name = "SIGTERM" if signum == signal.SIGTERM else "SIGINT"
    # Note: print is safer than logger in signal handlers
    print(f"\nReceived {signal_name}, initiating graceful shutdown...")
    _shutdown_signal.set()


def _setup_signal_handlers():
    """Register signal handlers for graceful shutdown."""
    signal.signal(signal.SIGTERM, _handle_shutdown_signal)
    signal.signal(signal.SIGINT, _handle_shutdown_signal)


def setup_logging(quiet: bool = False) -> None:
    """
    Setup logging configuration.

    Args:
        quiet: If True, only show warnings and errors
    """
    level = logging.WARNING if quiet else logging.INFO

    # Custom formatter with shorter module names
    class ShortNameFormatter(logging.Formatter):
        def format(self, record):
            record.name = record.name.replace("aiacs_dashboard.", "aiacs.")
            return super().format(record)

    handler = logging.StreamHandler()
    handler.setFormatter(
        ShortNameFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s", datefmt="%H:%M:%S"
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(level)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="AIACS Dashboard - bird activity monitoring for wind turbine sites",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m aiacs_dashboard                # Run for the configured duration
  python -m aiacs_dashboard 8              # Run for 8 hours
  python -m aiacs_dashboard --once         # Render one snapshot and exit
  python -m aiacs_dashboard --dry-run      # Run on generated sample data
  python -m aiacs_dashboard --history      # Write history.html for the last month
  python -m aiacs_dashboard --history --page 2 --from 2025-05-01 --to 2025-05-31
  python -m aiacs_dashboard --history --playback 1234  # Replay a detection on the NVR

Commands:
  python -m aiacs_dashboard --validate     # Check config validity
  python -m aiacs_dashboard --settings     # Edit display settings

Environment Variables:
  AIACS_API_BASE_URL - Override backend.base_url from config
  AIACS_API_TOKEN    - Backend access token
        """,
    )

    parser.add_argument(
        "duration",
        type=float,
        nargs="?",
        help="Duration in hours (default: from config.yaml)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Quiet mode - only show warnings and errors",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=DEFAULT_CONFIG_NAME,
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and show derived settings",
    )
    parser.add_argument(
        "--once", action="store_true", help="Refresh every panel once, write, and exit"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Use generated sample data instead of the backend",
    )
    parser.add_argument(
        "--seed", type=int, help="Random seed for --dry-run sample data and radar placement"
    )
    parser.add_argument(
        "--settings",
        action="store_true",
        help="Launch interactive settings editor",
    )

    history = parser.add_argument_group("detection history")
    history.add_argument(
        "--history",
        action="store_true",
        help="Write one page of detection history and exit",
    )
    history.add_argument("--page", type=int, default=1, help="History page (default: 1)")
    history.add_argument(
        "--from", dest="date_from", metavar="DATE", help="History start date (YYYY-MM-DD)"
    )
    history.add_argument(
        "--to", dest="date_to", metavar="DATE", help="History end date (YYYY-MM-DD)"
    )
    history.add_argument(
        "--playback",
        type=int,
        metavar="DETECTION_ID",
        help="Start NVR playback for a detection on the history page",
    )

    return parser.parse_args(argv)


def parse_duration(duration_arg: float | None, config: dict) -> float:
    """
    Duration in hours from the command line or config.

    Raises:
        SystemExit: If duration is invalid
    """
    if duration_arg is not None:
        if duration_arg <= 0:
            logger.error(f"Invalid duration '{duration_arg}' - must be positive")
            logger.error("Usage: python -m aiacs_dashboard [hours]")
            sys.exit(1)
        return duration_arg
    return config.get("runtime", {}).get("default_duration_hours", DEFAULT_DURATION_HOURS)


def _has_config(config_path: str) -> bool:
    if config_path != DEFAULT_CONFIG_NAME:
        return True
    return any(path.exists() for path in default_search_paths())


def run_validate(config_path: str) -> None:
    """Run validation mode."""
    config = load_config(config_path, skip_validation=True)
    result = validate_config_full(config)
    print_validation_result(result)
    sys.exit(0 if result.valid else 1)


def build_dashboard(config: dict, dry_run: bool, seed: int | None = None) -> tuple[Dashboard, BackendClient | None]:
    """Create the dashboard and, unless dry-running, its backend client."""
    sectors = parse_camera_sectors(config)
    map_center, camera_position = parse_site_positions(config)
    radar = config.get("radar") or {}
    output = config.get("output") or {}
    rng = random.Random(seed) if seed is not None else None

    client = None
    if dry_run:
        source = SampleSource(rng=random.Random(seed) if seed is not None else None)
        stream_url = None
    else:
        backend = config["backend"]
        client = BackendClient(
            backend["base_url"],
            timeout=backend.get("timeout_seconds", 30),
            tokens=TokenStore(access_token=backend.get("token")),
        )
        source = BackendSource(
            client,
            sectors,
            location=(config.get("site") or {}).get("location") or "",
            retries=backend.get("retries", 3),
            retry_delay=backend.get("retry_delay_seconds", 2.0),
        )
        stream_url = client.stream_url

    dashboard = Dashboard(
        source=source,
        sectors=sectors,
        settings=load_settings(),
        writer=DashboardWriter(output.get("dir", DEFAULT_OUTPUT_DIR)),
        layout=parse_plot_layout(config),
        transition_ms=radar.get("transition_ms", 300),
        map_center=map_center,
        camera_position=camera_position,
        view_distance=radar.get("view_distance_m", 300),
        stream_url=stream_url,
        rng=rng,
    )
    return dashboard, client


def run_history(
    args: argparse.Namespace, config: dict, dashboard: Dashboard, client: BackendClient | None
) -> None:
    """
    Write one history page and optionally start playback for a detection on it.

    Raises:
        SystemExit: Invalid query, backend failure, or unknown detection
    """
    try:
        query = HistoryQuery.build(args.page, args.date_from, args.date_to)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        view = dashboard.write_history(query)
    except BackendError as e:
        logger.error(f"Failed to fetch detection history: {e.message}")
        sys.exit(1)

    stats = view.stats
    print("\n" + "=" * 70)
    print("DETECTION HISTORY")
    print("=" * 70)
    print(f"\nPeriod: {query.date_from} ~ {query.date_to}")
    print(f"Page: {view.page.current_page} / {max(1, view.page.total_pages)}")
    print(f"Detections: {view.page.total_records} total, {stats.total_detections} on this page")
    print(f"Average birds per detection: {stats.average_bounding_boxes:.2f}")
    if stats.most_active_camera_id is not None:
        print(f"Most active camera: {stats.most_active_camera_id}")
    print(f"Written to {dashboard.writer.output_dir}/")
    print("=" * 70)

    if args.playback is None:
        return

    if client is None:
        logger.error("Playback needs the backend and is not available in a dry run")
        sys.exit(1)

    detection = next(
        (d for d in view.page.detections if d.detection_id == args.playback), None
    )
    if detection is None:
        logger.error(f"Detection {args.playback} is not on history page {query.page}")
        sys.exit(1)

    try:
        session = create_playback_session_for_detection(client, detection, config.get("nvr"))
    except (ValueError, BackendError) as e:
        logger.error(f"Failed to start playback for detection {args.playback}: {e}")
        sys.exit(1)

    print(f"\nPlayback session {session.id} (channel {session.channel})")
    print(f"  {session.url}")


def print_banner(config: dict, duration_hours: float, dry_run: bool) -> None:
    """Print startup banner."""
    print("\n" + "=" * 70)
    print("AIACS DASHBOARD")
    print("=" * 70)

    if dry_run:
        print("\nData: generated sample data (dry run)")
    else:
        print(f"\nBackend: {config['backend']['base_url']}")
    print(f"Cameras: {len(parse_camera_sectors(config))}")
    print(f"Output: {(config.get('output') or {}).get('dir', DEFAULT_OUTPUT_DIR)}/")

    print("\nRuntime:")
    print(f"  Duration: {duration_hours} hour(s)")
    print("  Press Ctrl+C to stop early")
    print("=" * 70)
    print()


def main(argv: list[str] | None = None) -> None:
    """Main orchestrator function."""
    args = parse_args(argv)

    setup_logging(quiet=args.quiet or args.validate)

    if args.settings:
        settings = run_settings_editor()
        if settings is None:
            print("Cancelled")
        return

    if args.validate:
        run_validate(args.config)
        return

    if args.dry_run and not _has_config(args.config):
        logger.info("No config file found, dry run uses defaults")
        config = {}
    else:
        config = load_config(args.config, skip_validation=args.dry_run)
        if args.dry_run:
            # No backend is contacted, so a missing base_url is not an error here
            backend = {"base_url": "http://dry-run", **(config.get("backend") or {})}
            result = validate_config_full({**config, "backend": backend})
            if not result.valid:
                print_validation_result(result)
                sys.exit(1)

    dashboard, client = build_dashboard(config, args.dry_run, args.seed)

    if args.history or args.playback is not None:
        try:
            run_history(args, config, dashboard, client)
        finally:
            if client is not None:
                client.close()
        return

    poller = dashboard.build_poller((config.get("polling") or {}))

    if args.once:
        poller.run_once()
        dashboard.render()
        print(f"Dashboard written to {dashboard.writer.output_dir}/")
        if client is not None:
            client.close()
        return

    duration_hours = parse_duration(args.duration, config)
    print_banner(config, duration_hours, args.dry_run)

    output = config.get("output") or {}
    server = None
    if output.get("serve", True):
        url, server = start_dashboard_server(
            str(dashboard.writer.output_dir), output.get("port", DEFAULT_SERVER_PORT)
        )
        print(f"Dashboard: {url}")
        print()

    _setup_signal_handlers()

    start_time = time.time()
    poller.start()
    stopped_by_signal = _shutdown_signal.wait(timeout=duration_hours * 3600)
    elapsed = time.time() - start_time

    poller.stop()
    stop_dashboard_server(server)
    if client is not None:
        client.close()

    print(f"\n{'=' * 70}")
    if stopped_by_signal:
        print("Shutdown signal received (SIGTERM/SIGINT)")
    else:
        print(f"Duration reached - stopped after {elapsed / 60:.1f} minutes")
    print("=" * 70 + "\n")


if __name__ == "__main__":
    main()
