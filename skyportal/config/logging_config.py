import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_log_level(debug: bool, configured: str = "INFO") -> str:
    if debug or os.environ.get("LOG_LEVEL", "").lower() == "debug":
        return "DEBUG"
    return (configured or "INFO").upper()


def setup_logging(log_dir: Optional[Path], log_level: str = "INFO") -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / f"{datetime.now():%Y-%m-%d}.log"
        handlers.insert(0, logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )
    # urllib3 logs every retry at WARNING; keep it out of INFO runs
    if log_level.upper() != "DEBUG":
        logging.getLogger("urllib3").setLevel(logging.ERROR)


def mask_value(value: str, keep: int = 2) -> str:
    if not value:
        return ""
    if len(value) <= keep * 2:
        return "*" * len(value)
    return f"{value[:keep]}***{value[-keep:]}"
