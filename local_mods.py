import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from errors import ScanError

MOD_ARCHIVE_SUFFIX = ".zip"


@dataclass(frozen=True)
class LocalMod:
    name: str
    file_name: str
    version: str


def parse_mod_filename(file_name: str) -> LocalMod | None:
    """Split ``<name>_<version>.zip`` into a LocalMod.

    Returns None for names that are not mod archives or have no ``_``.
    """
    path = Path(file_name)
    if path.suffix != MOD_ARCHIVE_SUFFIX:
        return None
    parts = path.stem.split("_")
    if len(parts) < 2:
        return None
    return LocalMod(name=parts[0], file_name=file_name, version=parts[1])


def scan_local_mods(mod_dir: Path) -> Dict[str, LocalMod]:
    try:
        entries = sorted(mod_dir.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        raise ScanError(f"Failed to read mod directory {mod_dir}: {exc}") from exc

    local_mods: Dict[str, LocalMod] = {}
    for entry in entries:
        if not entry.is_file() or entry.suffix != MOD_ARCHIVE_SUFFIX:
            continue
        local_mod = parse_mod_filename(entry.name)
        if local_mod is None:
            logging.warning("Skipping %s: expected <name>_<version>.zip", entry.name)
            continue
        previous = local_mods.get(local_mod.name)
        if previous is not None:
            logging.warning(
                "Mod %s found twice (%s, %s), using %s",
                local_mod.name,
                previous.file_name,
                local_mod.file_name,
                local_mod.file_name,
            )
        local_mods[local_mod.name] = local_mod
    logging.info("Found %s local mods in %s", len(local_mods), mod_dir)
    return local_mods
