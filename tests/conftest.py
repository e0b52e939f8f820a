"""Shared fixtures for the mod updater tests."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from config import Config
from registry_api import Mod, Release


def make_response(
    status_code: int = 200,
    *,
    json_data: Any = None,
    content: bytes = b"",
    text: str = "",
) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.json.return_value = json_data
    response.iter_content.return_value = iter([content]) if content else iter([])
    return response


def make_release(version: str, payload: bytes = b"", *, name: str = "alien-biomes") -> Release:
    return Release(
        download_url=f"/download/{name}/{version}",
        file_name=f"{name}_{version}.zip",
        version=version,
        sha1=hashlib.sha1(payload).hexdigest(),
    )


def make_mod(name: str, *versions: str, title: str | None = None) -> Mod:
    return Mod(
        title=title or name.replace("-", " ").title(),
        name=name,
        releases=tuple(make_release(version, name=name) for version in versions),
    )


def make_config(mod_dir: Path, **overrides: Any) -> Config:
    values: dict[str, Any] = {
        "mod_dir": mod_dir,
        "compose_path": "docker-compose",
        "compose_file": "docker-compose.yml",
        "service_name": "factorio",
        "username": "user",
        "token": "secret",
        "update_server": False,
        "webhook_url": "https://hooks.example.test/T000",
        "owner": None,
        "restart_delay": 0.0,
        "timeout": 10,
        "api_base": "https://mods.example.test/api/mods",
        "download_base": "https://mods.example.test",
        "continue_on_error": False,
        "dry_run": False,
        "log_level": "INFO",
        "log_file": None,
    }
    values.update(overrides)
    return Config(**values)


@pytest.fixture
def mod_dir(tmp_path: Path) -> Path:
    path = tmp_path / "mods"
    path.mkdir()
    return path
