"""
Transactional email client.

Sends rendered messages through an HTTP email API
(``POST {email_api_url}`` with a bearer key). Used by the notification
tasks only.
"""

import logging
from typing import Any

import httpx

from lumaprod.core.config import Settings, get_settings
from lumaprod.core.exceptions import ServiceUnavailableError
from lumaprod.integrations.base_client import SyncBaseHTTPClient

logger = logging.getLogger(__name__)


class EmailClient(SyncBaseHTTPClient):
    """
    HTTP email API client.

    Example:
        ```python
        with EmailClient() as client:
            client.send("creator@example.com", "Hello", "<p>Hi</p>")
        ```
    """

    def __init__(
        self,
        settings: Settings | None = None,
        max_retries: int = 3,
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the email client.

        Raises:
            ServiceUnavailableError: If the email API is not configured
        """
        settings = settings or get_settings()
        if not settings.email_api_url:
            raise ServiceUnavailableError(
                "Email API URL is not configured",
                service="Email",
            )

        self._from_address = settings.email_from
        super().__init__(
            base_url=settings.email_api_url,
            api_key=settings.email_api_key,
            settings=settings,
            max_retries=max_retries,
            timeout=timeout,
            transport=transport,
        )

    @property
    def service_name(self) -> str:
        """Return service name for logging."""
        return "Email"

    def _get_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def send(
        self,
        to: str,
        subject: str,
        html: str,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Send one message.

        Returns:
            Parsed JSON response from the email API (may be empty)

        Raises:
            ProviderError: If the API rejects the message or is unreachable
        """
        payload: dict[str, Any] = {
            "from": self._from_address,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        if headers:
            payload["headers"] = headers

        response = self._post("", json_data=payload)

        logger.info(
            "Email sent",
            extra={"to": to, "subject": subject},
        )

        if not response.content:
            return {}
        return response.json()
