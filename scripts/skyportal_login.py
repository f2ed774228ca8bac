#!/usr/bin/env python3
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))
CONFIG_PATH = PROJECT_ROOT / "config" / "settings.json"

from skyportal.cli import main  # noqa: E402

if __name__ == "__main__":
    raise SystemExit(main(default_config=CONFIG_PATH, project_root=PROJECT_ROOT))
