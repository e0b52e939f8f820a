import hashlib
import logging
from pathlib import Path
from typing import Iterable
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def write_chunks_with_sha1(chunks: Iterable[bytes], dest: Path) -> str:
    """Write ``chunks`` to ``dest`` and return the SHA-1 hex digest of the data."""
    hasher = hashlib.sha1()
    with dest.open("wb") as handle:
        for chunk in chunks:
            if not chunk:
                continue
            hasher.update(chunk)
            handle.write(chunk)
    return hasher.hexdigest()


def safe_unlink(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logging.warning("Failed to remove %s: %s", path, exc)


def redact_url(url: str) -> str:
    try:
        parsed = urlparse(url or "")
    except ValueError:
        return str(url or "")
    if not parsed.query:
        return str(url or "")
    pairs = [
        (key, "redacted" if key in {"username", "token"} else value)
        for key, value in parse_qsl(parsed.query, keep_blank_values=True)
    ]
    return urlunparse(parsed._replace(query=urlencode(pairs, doseq=True)))


def output_tail(output: str, limit: int = 2000) -> str:
    text = (output or "").strip()
    if len(text) <= limit:
        return text
    return text[-limit:]
