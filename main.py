from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Sequence

from config import load_config
from syncer import sync_mods
from telemetry import init_telemetry, shutdown_telemetry
from utils import ensure_dir

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def setup_logging(level: str, log_file: str | None = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        ensure_dir(Path(log_file).parent)
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def main(argv: Sequence[str] | None = None) -> int:
    config = load_config(argv)
    setup_logging(config.log_level, config.log_file)
    init_telemetry(config)
    try:
        sync_mods(config)
    except Exception:
        logging.exception("Mod update failed")
        return 1
    finally:
        shutdown_telemetry()
    return 0


if __name__ == "__main__":
    sys.exit(main())
