"""
Base HTTP client with retry logic and common utilities.

This module provides a base class for external API integrations with:
- Retry logic with exponential backoff and jitter
- Bounded per-request timeouts
- Request logging
- Conversion of transport and HTTP errors into ProviderError
"""

import logging
import random
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

from lumaprod.core.config import Settings, get_settings
from lumaprod.core.exceptions import ProviderError, RateLimitError

logger = logging.getLogger(__name__)


@dataclass
class UsageMetrics:
    """
    Tracks request metrics for external API calls.

    Attributes:
        provider: Name of the service provider
        request_count: Number of API requests made
        latency_ms: Total latency in milliseconds
    """

    provider: str
    request_count: int = 0
    latency_ms: int = 0

    def record_request(self, latency_ms: int) -> None:
        """
        Record an API request with its latency.

        Args:
            latency_ms: Request latency in milliseconds
        """
        self.request_count += 1
        self.latency_ms += latency_ms

    def to_dict(self) -> dict[str, Any]:
        """Convert metrics to dictionary for logging."""
        return {
            "provider": self.provider,
            "request_count": self.request_count,
            "latency_ms": self.latency_ms,
        }


class SyncBaseHTTPClient(ABC):
    """
    Synchronous HTTP client base for provider integrations.

    Used from request handlers and Celery workers alike. Subclasses supply
    the service name and default headers.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        settings: Settings | None = None,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the synchronous HTTP client.

        Args:
            base_url: Base URL for API requests
            api_key: API key for authentication
            settings: Application settings instance
            max_retries: Maximum number of attempts
            base_delay: Initial delay in seconds for exponential backoff
            max_delay: Maximum delay in seconds between retries
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._settings = settings or get_settings()
        self._max_retries = max(1, max_retries)
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._timeout = timeout

        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
            transport=transport,
        )

        # Track cumulative usage
        self._total_usage = UsageMetrics(provider=self.service_name)

    @property
    @abstractmethod
    def service_name(self) -> str:
        """Return the name of the service for logging and error messages."""
        pass

    @abstractmethod
    def _get_headers(self) -> dict[str, str]:
        """Return default headers for API requests."""
        pass

    @property
    def total_usage(self) -> UsageMetrics:
        """Get cumulative usage metrics for this client instance."""
        return self._total_usage

    def close(self) -> None:
        """Close the HTTP client and log the usage it accumulated."""
        if self._total_usage.request_count:
            logger.info(
                f"{self.service_name} client closed",
                extra=self._total_usage.to_dict(),
            )
        self._client.close()

    def __enter__(self) -> "SyncBaseHTTPClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()

    def _calculate_backoff(self, attempt: int) -> float:
        """
        Calculate exponential backoff delay with jitter.

        Args:
            attempt: Current retry attempt number (0-indexed)

        Returns:
            Delay in seconds before next retry
        """
        delay = min(self._base_delay * (2**attempt), self._max_delay)
        jitter = delay * (0.1 + 0.2 * random.random())
        return delay + jitter

    def _request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
    ) -> httpx.Response:
        """
        Make a synchronous HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: API endpoint path
            headers: Additional headers to include
            params: Query parameters
            json_data: JSON body data
            timeout: Request-specific timeout override
            max_retries: Request-specific attempt limit override

        Returns:
            httpx.Response object

        Raises:
            ProviderError: If the request fails after retries or times out
            RateLimitError: If rate limit is exceeded after retries
        """
        url = f"{self._base_url}/{path.lstrip('/')}" if path else self._base_url
        request_headers = self._get_headers()
        if headers:
            request_headers.update(headers)

        attempts = max(1, max_retries or self._max_retries)
        last_error: Exception | None = None
        timed_out = False

        for attempt in range(attempts):
            is_last = attempt == attempts - 1
            try:
                start_time = time.time()

                response = self._client.request(
                    method=method,
                    url=url,
                    headers=request_headers,
                    params=params,
                    json=json_data,
                    timeout=timeout or self._timeout,
                )

                elapsed_ms = int((time.time() - start_time) * 1000)
                self._total_usage.record_request(elapsed_ms)

                logger.info(
                    f"{self.service_name} API request",
                    extra={
                        "method": method,
                        "url": url,
                        "status_code": response.status_code,
                        "elapsed_ms": elapsed_ms,
                        "attempt": attempt + 1,
                    },
                )

                if response.status_code == 429:
                    retry_after = response.headers.get("Retry-After")
                    delay = float(retry_after) if retry_after else self._calculate_backoff(attempt)

                    logger.warning(
                        f"{self.service_name} rate limit hit",
                        extra={
                            "attempt": attempt + 1,
                            "max_retries": attempts,
                            "delay_seconds": round(delay, 2),
                        },
                    )

                    if is_last:
                        raise RateLimitError(
                            service=self.service_name,
                            message=f"{self.service_name} rate limit exceeded after retries",
                            retry_after=int(delay),
                        )
                    time.sleep(delay)
                    continue

                if response.status_code >= 500:
                    logger.warning(
                        f"{self.service_name} server error",
                        extra={
                            "status_code": response.status_code,
                            "attempt": attempt + 1,
                            "max_retries": attempts,
                        },
                    )

                    if is_last:
                        raise ProviderError(
                            service=self.service_name,
                            message=f"{self.service_name} API error: {response.status_code}",
                            original_error=response.text[:500],
                        )
                    time.sleep(self._calculate_backoff(attempt))
                    continue

                if response.status_code >= 400:
                    error_body = response.text

                    logger.error(
                        f"{self.service_name} API client error",
                        extra={
                            "status_code": response.status_code,
                            "error": error_body[:500],
                        },
                    )

                    raise ProviderError(
                        service=self.service_name,
                        message=f"{self.service_name} API error: {response.status_code}",
                        original_error=error_body[:500],
                    )

                return response

            except httpx.TimeoutException as e:
                last_error = e
                timed_out = True

                logger.warning(
                    f"{self.service_name} request timeout",
                    extra={"attempt": attempt + 1, "max_retries": attempts},
                )

                if not is_last:
                    time.sleep(self._calculate_backoff(attempt))

            except httpx.RequestError as e:
                last_error = e
                timed_out = False

                logger.warning(
                    f"{self.service_name} connection error",
                    extra={
                        "attempt": attempt + 1,
                        "max_retries": attempts,
                        "error": str(e),
                    },
                )

                if not is_last:
                    time.sleep(self._calculate_backoff(attempt))

        error_msg = str(last_error) if last_error else "Unknown error"
        logger.error(
            f"{self.service_name} request failed after all retries",
            extra={
                "max_retries": attempts,
                "error": error_msg,
                "timed_out": timed_out,
            },
        )

        raise ProviderError(
            service=self.service_name,
            message=(
                f"{self.service_name} API call timed out"
                if timed_out
                else f"{self.service_name} API call failed after retries"
            ),
            original_error=error_msg,
            timed_out=timed_out,
        )

    def _get(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Make a GET request."""
        return self._request("GET", path, params=params, headers=headers, timeout=timeout)

    def _post(
        self,
        path: str,
        *,
        json_data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
    ) -> httpx.Response:
        """Make a POST request."""
        return self._request(
            "POST",
            path,
            json_data=json_data,
            headers=headers,
            timeout=timeout,
            max_retries=max_retries,
        )
