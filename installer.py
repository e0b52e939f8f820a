from __future__ import annotations

import logging
import os
from pathlib import Path

from errors import IntegrityError, InstallError
from registry_api import RegistryClient
from telemetry import traced
from updater import PlannedUpdate
from utils import safe_unlink, write_chunks_with_sha1


class ModInstaller:
    """Replaces an outdated archive in the mod directory with a verified release."""

    def __init__(
        self,
        registry: RegistryClient,
        mod_dir: Path,
        username: str,
        token: str,
        owner: tuple[int, int] | None = None,
    ) -> None:
        self.registry = registry
        self.mod_dir = mod_dir
        self.username = username
        self.token = token
        self.owner = owner

    def install(self, update: PlannedUpdate) -> Path:
        release = update.release
        if not release.file_name or Path(release.file_name).name != release.file_name:
            raise InstallError(
                f"Refusing to install {update.mod.name}: bad file name {release.file_name!r}"
            )
        dest = self.mod_dir / release.file_name
        temp_path = dest.with_name(f"{dest.name}.part")

        with traced(
            "mod.install",
            mod=update.mod.name,
            version=update.remote_version,
            file_name=release.file_name,
        ):
            logging.info("Downloading mod %s (%s)", update.mod.title, update.remote_version)
            try:
                digest = write_chunks_with_sha1(
                    self.registry.stream_payload(
                        release.download_url, self.username, self.token
                    ),
                    temp_path,
                )
                if digest != release.sha1.strip().lower():
                    raise IntegrityError(release.file_name, release.sha1, digest)
                if self.owner is not None:
                    os.chown(temp_path, self.owner[0], self.owner[1])
                temp_path.replace(dest)
            except OSError as exc:
                raise InstallError(f"Failed to write {dest}: {exc}") from exc
            finally:
                safe_unlink(temp_path)

            logging.info("Installed %s", dest)
            if update.local.file_name != release.file_name:
                self.remove_old(update.local.file_name)
        return dest

    def remove_old(self, file_name: str) -> None:
        old_path = self.mod_dir / file_name
        try:
            old_path.unlink()
        except OSError as exc:
            logging.error(
                "Failed to remove %s, both the old and the new archive are present",
                old_path,
            )
            raise InstallError(f"Failed to remove {old_path}: {exc}") from exc
        logging.info("Removed %s", old_path)
