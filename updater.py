from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Tuple

from packaging.version import InvalidVersion, Version

from errors import (
    ModNotFoundError,
    ModUpdaterError,
    NoReleasesError,
    VersionParseError,
)
from local_mods import LocalMod
from registry_api import Mod, Release


@dataclass(frozen=True)
class PlannedUpdate:
    local: LocalMod
    mod: Mod
    release: Release
    local_version: Version
    remote_version: Version

    @property
    def message(self) -> str:
        title = self.mod.title or self.mod.name
        return f"Updated {title} ({self.local_version} -> {self.remote_version})"


def parse_version(value: str, subject: str) -> Version:
    try:
        return Version(value)
    except InvalidVersion as exc:
        raise VersionParseError(value, subject) from exc


def newest_release(mod: Mod) -> Release:
    """The registry lists releases oldest first, so the newest one is last."""
    if not mod.releases:
        raise NoReleasesError(mod.name)
    return mod.releases[-1]


def needs_update(local: LocalMod, mod: Mod) -> PlannedUpdate | None:
    local_version = parse_version(local.version, local.file_name)
    release = newest_release(mod)
    remote_version = parse_version(release.version, f"{mod.name} release")
    # Any difference counts, a registry version older than the local one included.
    if local_version == remote_version:
        return None
    return PlannedUpdate(
        local=local,
        mod=mod,
        release=release,
        local_version=local_version,
        remote_version=remote_version,
    )


def check_local_mod(
    local: LocalMod, mods_by_name: Mapping[str, Mod]
) -> PlannedUpdate | None:
    mod = mods_by_name.get(local.name)
    if mod is None:
        raise ModNotFoundError(local.name)
    update = needs_update(local, mod)
    if update is None:
        logging.debug("%s is up to date (%s)", mod.title or mod.name, local.version)
        return None
    logging.info(
        "New version of %s available %s -> %s",
        mod.title or mod.name,
        update.local_version,
        update.remote_version,
    )
    return update


def plan_updates(
    local_mods: Mapping[str, LocalMod],
    mods_by_name: Mapping[str, Mod],
    failed: Dict[str, ModUpdaterError] | None = None,
) -> Tuple[List[PlannedUpdate], List[LocalMod]]:
    """Classify every local mod, sorted by name, as outdated or up to date.

    Errors propagate unless ``failed`` is given, in which case they are
    recorded there per mod name and the remaining mods are still checked.
    """
    planned: List[PlannedUpdate] = []
    up_to_date: List[LocalMod] = []
    for name in sorted(local_mods):
        local = local_mods[name]
        try:
            update = check_local_mod(local, mods_by_name)
        except ModUpdaterError as exc:
            if failed is None:
                raise
            logging.error("Failed to check %s: %s", name, exc)
            failed[name] = exc
            continue
        if update is None:
            up_to_date.append(local)
        else:
            planned.append(update)
    return planned, up_to_date
