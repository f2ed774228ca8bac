import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from skyportal import __version__
from skyportal.config.logging_config import resolve_log_level, setup_logging
from skyportal.config.settings import DEFAULT_CONFIG_PATH, load_config, load_environment
from skyportal.workflow import PortalAgent

logger = logging.getLogger("skyportal")


def build_parser(default_config: Path = DEFAULT_CONFIG_PATH) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skyportal",
        description="Register this device with the property Wi-Fi captive portal.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=default_config,
        help=f"Runtime settings JSON (default: {default_config})",
    )
    parser.add_argument(
        "--once", action="store_true", help="Run a single check cycle and exit"
    )
    return parser


def resolve_log_dir(value: Optional[str], project_root: Optional[Path] = None) -> Optional[Path]:
    if not value:
        return None
    log_dir = Path(value).expanduser()
    if project_root is not None and not log_dir.is_absolute():
        return project_root / log_dir
    return log_dir


def main(
    argv: Optional[Sequence[str]] = None,
    default_config: Path = DEFAULT_CONFIG_PATH,
    project_root: Optional[Path] = None,
) -> int:
    args = build_parser(default_config).parse_args(argv)
    config = load_config(args.config)

    log_dir = resolve_log_dir(config.get("log_dir"), project_root)
    level = resolve_log_level(args.debug, config.get("log_level", "INFO"))
    setup_logging(log_dir, log_level=level)
    logger.info("Starting device monitor version=%s log_level=%s", __version__, level)

    env = load_environment()
    agent = PortalAgent(env, config)

    if args.once:
        outcome = agent.run_cycle()
        logger.info("Check finished outcome=%s", outcome.value)
        return 0 if outcome.connected else 1

    interval = float(config.get("interval_seconds", 30))
    try:
        agent.run_forever(interval)
    except KeyboardInterrupt:
        logger.info("Stopping device monitor")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
