# humidor/services/email_client.py
from typing import Any, Dict

import requests

from humidor.utils import settings
from humidor.utils.logging import get_logger
from humidor.utils.retry import http_retry

logger = get_logger(__name__)


class EmailClient:
    """Thin client for a Resend style ``POST /emails`` API."""

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        sender: str | None = None,
        timeout: float | None = None,
    ):
        self.api_url = api_url or settings.EMAIL_API_URL
        self.api_key = api_key if api_key is not None else settings.EMAIL_API_KEY
        self.sender = sender or settings.EMAIL_FROM
        self.timeout = timeout or settings.EMAIL_TIMEOUT_SECONDS

    @http_retry()
    def _post(self, payload: Dict[str, Any], idempotency_key: str | None) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key
        resp = requests.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def send(self, to: str | None, subject: str, html: str, idempotency_key: str | None = None) -> Dict[str, Any]:
        if not self.api_key:
            logger.error("EMAIL_API_KEY is not set. Skipping email.")
            return {"success": False, "error": "EMAIL_API_KEY not set"}
        if not to:
            logger.error("Recipient email (to) is missing. Skipping email.")
            return {"success": False, "error": "Recipient email missing"}

        payload = {"from": self.sender, "to": to, "subject": subject, "html": html}
        try:
            data = self._post(payload, idempotency_key)
        except requests.RequestException as e:
            logger.error(f"Failed to send email '{subject}' to {to}: {e}")
            return {"success": False, "error": str(e)}

        logger.info(f"Email '{subject}' sent to {to}. ID: {data.get('id')}")
        return {"success": True, "transaction_id": data.get("id")}
