from __future__ import annotations

import logging

import requests

from errors import NotificationError


class WebhookNotifier:
    """Posts plain text messages to a Slack compatible incoming webhook."""

    def __init__(
        self,
        webhook_url: str,
        timeout: int,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.webhook_url = webhook_url
        self.timeout = timeout if timeout > 0 else None
        self.session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    def notify(self, text: str) -> None:
        if not self.enabled:
            logging.info("Webhook not configured, skipping notification: %s", text)
            return
        try:
            response = self.session.post(
                self.webhook_url, json={"text": text}, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise NotificationError(f"Webhook request failed: {exc}") from exc
        try:
            if response.status_code >= 300:
                raise NotificationError(
                    f"Webhook request failed: {response.status_code} "
                    f"{(response.text or '')[:200]}"
                )
        finally:
            response.close()
        logging.info("Notification sent: %s", text)
