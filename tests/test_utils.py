"""Tests for small filesystem and URL helpers."""

from __future__ import annotations

import hashlib
from pathlib import Path

from utils import output_tail, redact_url, safe_unlink, write_chunks_with_sha1


def test_write_chunks_with_sha1(tmp_path: Path) -> None:
    dest = tmp_path / "mod.zip.part"

    digest = write_chunks_with_sha1([b"abc", b"", b"def"], dest)

    assert dest.read_bytes() == b"abcdef"
    assert digest == hashlib.sha1(b"abcdef").hexdigest()


def test_safe_unlink_missing_file(tmp_path: Path) -> None:
    safe_unlink(tmp_path / "missing")


def test_redact_url_hides_credentials() -> None:
    url = "https://mods.factorio.com/download/alien-biomes/a2?username=engineer&token=abc123"

    redacted = redact_url(url)

    assert "engineer" not in redacted
    assert "abc123" not in redacted
    assert redacted.startswith("https://mods.factorio.com/download/alien-biomes/a2?")


def test_redact_url_keeps_other_parameters() -> None:
    url = "https://mods.factorio.com/api/mods?namelist=alien-biomes"

    assert redact_url(url) == url


def test_output_tail() -> None:
    assert output_tail("  done \n") == "done"
    assert output_tail("x" * 10 + "tail", limit=4) == "tail"
