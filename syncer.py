from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from compose import ComposeController
from config import Config
from errors import ModUpdaterError, SyncError
from installer import ModInstaller
from local_mods import scan_local_mods
from notifier import WebhookNotifier
from registry_api import RegistryClient
from telemetry import traced
from updater import PlannedUpdate, plan_updates

SERVER_UPDATED_MESSAGE = "Server updated"


@dataclass
class SyncReport:
    checked: int = 0
    up_to_date: List[str] = field(default_factory=list)
    updated: List[PlannedUpdate] = field(default_factory=list)
    planned: List[PlannedUpdate] = field(default_factory=list)
    failed: Dict[str, ModUpdaterError] = field(default_factory=dict)
    restarted: bool = False
    server_updated: bool = False


class ModSyncer:
    def __init__(
        self,
        config: Config,
        registry: RegistryClient,
        installer: ModInstaller,
        compose: ComposeController,
        notifier: WebhookNotifier,
    ) -> None:
        self.config = config
        self.registry = registry
        self.installer = installer
        self.compose = compose
        self.notifier = notifier

    @classmethod
    def from_config(cls, config: Config) -> "ModSyncer":
        registry = RegistryClient(config.api_base, config.download_base, config.timeout)
        return cls(
            config,
            registry,
            ModInstaller(
                registry,
                config.mod_dir,
                config.username,
                config.token,
                owner=config.owner,
            ),
            ComposeController(
                config.compose_path,
                config.compose_file,
                config.service_name,
                restart_delay=config.restart_delay,
            ),
            WebhookNotifier(config.webhook_url, config.timeout),
        )

    def run(self) -> SyncReport:
        report = SyncReport()
        with traced(
            "sync.run",
            mod_dir=self.config.mod_dir,
            service=self.config.service_name,
            update_server=self.config.update_server,
            dry_run=self.config.dry_run,
        ):
            local_mods = scan_local_mods(self.config.mod_dir)
            report.checked = len(local_mods)
            if local_mods:
                metadata = self.registry.fetch_metadata(local_mods.keys())
                planned, up_to_date = plan_updates(
                    local_mods,
                    metadata.by_name(),
                    failed=report.failed if self.config.continue_on_error else None,
                )
                report.planned = planned
                report.up_to_date = [local.name for local in up_to_date]
                for update in planned:
                    self._apply_update(update, report)

            if report.updated:
                self.compose.restart()
                report.restarted = True
                self.compose.wait_for_restart()

            if self.config.update_server:
                if self.config.dry_run:
                    logging.info("Dry run: skipping server update")
                else:
                    logging.info("Updating server image for %s", self.config.service_name)
                    self.compose.update_server()
                    report.server_updated = True
                    self.notifier.notify(SERVER_UPDATED_MESSAGE)

        logging.info(
            "Sync finished: checked=%s updated=%s up_to_date=%s failed=%s",
            report.checked,
            len(report.updated),
            len(report.up_to_date),
            len(report.failed),
        )
        if report.failed:
            raise SyncError(report.failed)
        return report

    def _apply_update(self, update: PlannedUpdate, report: SyncReport) -> None:
        if self.config.dry_run:
            logging.info("Dry run: would install %s", update.release.file_name)
            return
        try:
            self.installer.install(update)
            report.updated.append(update)
            self.notifier.notify(update.message)
        except ModUpdaterError as exc:
            if not self.config.continue_on_error:
                raise
            logging.error("Failed to update %s: %s", update.mod.name, exc)
            report.failed[update.mod.name] = exc


def sync_mods(config: Config) -> SyncReport:
    return ModSyncer.from_config(config).run()
