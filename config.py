from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

DEFAULT_API_BASE = "https://mods.factorio.com/api/mods"
DEFAULT_DOWNLOAD_BASE = "https://mods.factorio.com"
DEFAULT_MOD_DIR = "./data/mods"
DEFAULT_COMPOSE_PATH = "docker-compose"
DEFAULT_COMPOSE_FILE = "docker-compose.yml"
DEFAULT_SERVICE_NAME = "factorio"
DEFAULT_OWNER = "845:845"
DEFAULT_RESTART_DELAY = 5.0
DEFAULT_TIMEOUT = 60
DEFAULT_LOG_LEVEL = "INFO"


def parse_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def parse_float(value: str | None, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def parse_owner(value: str | None) -> tuple[int, int] | None:
    """Parse ``uid:gid`` (or a single id used for both).

    Empty values and ``none``/``off`` disable ownership changes.
    """
    if value is None:
        return None
    text = value.strip()
    if not text or text.lower() in {"none", "off", "-"}:
        return None
    uid_text, sep, gid_text = text.partition(":")
    if not sep:
        gid_text = uid_text
    try:
        uid = int(uid_text)
        gid = int(gid_text)
    except ValueError as exc:
        raise ValueError(f"Invalid owner {value!r}, expected uid:gid") from exc
    if uid < 0 or gid < 0:
        raise ValueError(f"Invalid owner {value!r}, ids must be non-negative")
    return uid, gid


@dataclass(frozen=True)
class Config:
    mod_dir: Path
    compose_path: str
    compose_file: str
    service_name: str
    username: str
    token: str
    update_server: bool
    webhook_url: str
    owner: tuple[int, int] | None
    restart_delay: float
    timeout: int
    api_base: str
    download_base: str
    continue_on_error: bool
    dry_run: bool
    log_level: str
    log_file: str | None


def _owner_arg(value: str) -> tuple[int, int] | None:
    try:
        return parse_owner(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    env = os.environ
    parser = argparse.ArgumentParser(
        prog="factorio-mod-updater",
        description=(
            "Update Factorio mods from the mod portal and restart the "
            "docker-compose service when anything changed."
        ),
    )
    parser.add_argument(
        "-d", "--mod-dir",
        default=env.get("MOD_DIR", DEFAULT_MOD_DIR),
        help="Directory that holds the mod archives",
    )
    parser.add_argument(
        "-c", "--compose",
        dest="compose_path",
        default=env.get("COMPOSE_PATH", DEFAULT_COMPOSE_PATH),
        help="docker-compose executable",
    )
    parser.add_argument(
        "-f", "--compose-file",
        default=env.get("COMPOSE_FILE", DEFAULT_COMPOSE_FILE),
        help="docker-compose.yml path",
    )
    parser.add_argument(
        "-s", "--service",
        dest="service_name",
        default=env.get("SERVICE_NAME", DEFAULT_SERVICE_NAME),
        help="Service name of the factorio container",
    )
    parser.add_argument(
        "-u", "--username",
        default=env.get("FACTORIO_USERNAME", ""),
        help="factorio.com username",
    )
    parser.add_argument(
        "-t", "--token",
        default=env.get("FACTORIO_TOKEN", ""),
        help="factorio.com token of the user",
    )
    parser.add_argument(
        "--server",
        dest="update_server",
        action="store_true",
        default=parse_bool(env.get("UPDATE_SERVER"), False),
        help="Pull and recreate the server image after mods are handled",
    )
    parser.add_argument(
        "-w", "--webhook",
        dest="webhook_url",
        default=env.get("WEBHOOK_URL", ""),
        help="Incoming webhook URL for notifications",
    )
    parser.add_argument(
        "--owner",
        type=_owner_arg,
        default=env.get("MOD_OWNER", DEFAULT_OWNER),
        help="uid:gid for installed archives, 'none' to keep the current user",
    )
    parser.add_argument(
        "--restart-delay",
        type=float,
        default=parse_float(env.get("RESTART_DELAY"), DEFAULT_RESTART_DELAY),
        help="Seconds to wait after restarting the service",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=parse_int(env.get("HTTP_TIMEOUT"), DEFAULT_TIMEOUT),
        help="HTTP timeout in seconds, 0 disables it",
    )
    parser.add_argument(
        "--api-base",
        default=env.get("MOD_API_BASE", DEFAULT_API_BASE),
        help="Mod portal API endpoint",
    )
    parser.add_argument(
        "--download-base",
        default=env.get("MOD_DOWNLOAD_BASE", DEFAULT_DOWNLOAD_BASE),
        help="Mod portal download host",
    )
    parser.add_argument(
        "--continue-on-error",
        action="store_true",
        default=parse_bool(env.get("CONTINUE_ON_ERROR"), False),
        help="Keep updating the remaining mods when one of them fails",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=parse_bool(env.get("DRY_RUN"), False),
        help="Only report what would be updated",
    )
    parser.add_argument(
        "--log-level",
        default=env.get("LOG_LEVEL", DEFAULT_LOG_LEVEL),
    )
    parser.add_argument(
        "--log-file",
        default=env.get("LOG_FILE") or None,
    )
    return parser


def load_config(argv: Sequence[str] | None = None) -> Config:
    args = build_parser().parse_args(argv)
    return Config(
        mod_dir=Path(args.mod_dir),
        compose_path=args.compose_path,
        compose_file=args.compose_file,
        service_name=args.service_name,
        username=args.username,
        token=args.token,
        update_server=bool(args.update_server),
        webhook_url=args.webhook_url.strip(),
        owner=args.owner,
        restart_delay=max(0.0, float(args.restart_delay)),
        timeout=max(0, int(args.timeout)),
        api_base=args.api_base,
        download_base=args.download_base.rstrip("/"),
        continue_on_error=bool(args.continue_on_error),
        dry_run=bool(args.dry_run),
        log_level=str(args.log_level).upper(),
        log_file=args.log_file,
    )
