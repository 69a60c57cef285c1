"""
Web Service REST Client

Async HTTP client for the site's REST web-service endpoint with:
- Form-encoded parameters (nested lists/dicts flattened to a[0][b] keys)
- Automatic retry with exponential backoff on transport failures
- Web-service exception detection in JSON responses
- Request logging
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import httpx

logger = logging.getLogger(__name__)

REST_PATH = "/webservice/rest/server.php"
SITE_INFO_FUNCTION = "core_webservice_get_site_info"


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    exponential_base: float = 2.0
    retryable_status_codes: tuple = (429, 500, 502, 503, 504)


class WebServiceError(Exception):
    """Custom exception for web-service call failures."""
    def __init__(
        self,
        message: str,
        errorcode: str = None,
        status_code: int = None,
        response: Any = None,
    ):
        super().__init__(message)
        self.errorcode = errorcode
        self.status_code = status_code
        self.response = response


def flatten_params(params: Dict[str, Any], prefix: str = "") -> List[Tuple[str, str]]:
    """
    Flatten nested params into form fields.

    {"courseids": [2, 3]} -> [("courseids[0]", "2"), ("courseids[1]", "3")]
    Booleans become "1"/"0"; None values are dropped.
    """
    fields = []
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)

        if value is None:
            continue
        if isinstance(value, dict):
            fields.extend(flatten_params(value, name))
        elif isinstance(value, (list, tuple)):
            fields.extend(flatten_params(dict(enumerate(value)), name))
        elif isinstance(value, bool):
            fields.append((name, "1" if value else "0"))
        else:
            fields.append((name, str(value)))

    return fields


class MoodleWSClient:
    """
    Async client for a site's REST web services.

    Usage:
        client = MoodleWSClient(site_url="https://school.example", token="abc123")

        forums = await client.call("mod_forum_get_forums_by_courses", {
            "courseids": [2],
        })

        await client.close()
    """

    def __init__(
        self,
        site_url: str,
        token: str,
        retry_config: Optional[RetryConfig] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the web-service client.

        Args:
            site_url: Base URL of the site (no trailing path)
            token: Web-service token for the user
            retry_config: Retry configuration (optional)
            timeout: Request timeout in seconds
            transport: Custom httpx transport (optional)
        """
        self.site_url = site_url.rstrip("/")
        self.token = token
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.AsyncClient(
            base_url=self.site_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

        self._closed = False

    async def call(
        self,
        wsfunction: str,
        params: Optional[Dict[str, Any]] = None,
        retry: bool = True,
    ) -> Any:
        """
        Call a web-service function.

        Args:
            wsfunction: Web-service function name
            params: Function parameters
            retry: Whether to retry on transport failure

        Returns:
            Decoded JSON response (dict, list or None)

        Raises:
            WebServiceError: On HTTP or web-service error
        """
        if self._closed:
            raise WebServiceError("Client is closed")

        data = [
            ("wstoken", self.token),
            ("wsfunction", wsfunction),
        ] + flatten_params(params or {})

        if retry:
            return await self._request_with_retry(wsfunction, data)
        else:
            return await self._make_request(wsfunction, data)

    async def get_site_info(self) -> Dict[str, Any]:
        """Fetch site info, including the list of available functions."""
        return await self.call(SITE_INFO_FUNCTION)

    async def _make_request(self, wsfunction: str, data: List[Tuple[str, str]]) -> Any:
        """Make a single HTTP request."""
        logger.debug(f"POST {REST_PATH} wsfunction={wsfunction}")

        response = await self._client.post(
            REST_PATH,
            params={"moodlewsrestformat": "json"},
            data=dict(data),
        )

        if response.status_code != 200:
            raise WebServiceError(
                f"Web service request failed: {response.status_code}",
                status_code=response.status_code,
            )

        if not response.content:
            return None

        try:
            result = response.json()
        except ValueError as e:
            raise WebServiceError(f"Invalid JSON from {wsfunction}: {e}") from e

        # Web-service errors come back as HTTP 200 with an exception payload
        if isinstance(result, dict) and ("exception" in result or "errorcode" in result):
            raise WebServiceError(
                result.get("message", "Web service error"),
                errorcode=result.get("errorcode"),
                response=result,
            )

        return result

    async def _request_with_retry(self, wsfunction: str, data: List[Tuple[str, str]]) -> Any:
        """Make request with automatic retry on failure."""
        last_exception = None
        delay = self.retry_config.initial_delay

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                return await self._make_request(wsfunction, data)

            except WebServiceError as e:
                last_exception = e

                # Only transport-level statuses are worth retrying
                if e.status_code not in self.retry_config.retryable_status_codes:
                    raise

            except httpx.TimeoutException as e:
                last_exception = WebServiceError(f"Request timed out: {e}")

            except httpx.HTTPError as e:
                last_exception = WebServiceError(f"HTTP error: {e}")

            if attempt < self.retry_config.max_retries:
                logger.warning(
                    f"{wsfunction} failed (attempt {attempt + 1}/{self.retry_config.max_retries + 1}): "
                    f"{last_exception}. Retrying in {delay}s..."
                )
                await asyncio.sleep(delay)
                delay = min(
                    delay * self.retry_config.exponential_base,
                    self.retry_config.max_delay
                )

        raise last_exception

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
