"""HTTP transport for provider adapters.

Single-shot GETs through one requests.Session. No retry adapter is mounted:
a failed request is reported once and the adapter turns it into an error
result.
"""

import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

# Request timeout in seconds
DEFAULT_TIMEOUT = 30

DEFAULT_HEADERS = {
    "User-Agent": "pondus (+https://github.com/pondus/pondus)",
    "Accept": "application/json, application/yaml, text/plain, */*",
}


class TransportError(Exception):
    """Raised when a request fails (network error, timeout, non-2xx status)."""
    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(message)


class ParseError(Exception):
    """Raised when a provider payload does not have the expected shape."""
    pass


class HttpTransport:
    """Blocking HTTP transport used by the REST and static-file adapters."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_text(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> str:
        """
        GET ``url`` and return the response body as text.

        Raises:
            TransportError: On connection failure, timeout or non-2xx status
        """
        merged_headers = dict(DEFAULT_HEADERS)
        if headers:
            merged_headers.update(headers)

        logger.debug(f"GET {url} params={params}")
        try:
            response = self.session.get(url, params=params, headers=merged_headers, timeout=self.timeout)
        except requests.Timeout as e:
            raise TransportError(f"Request to {url} timed out after {self.timeout}s", e) from e
        except requests.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}", e) from e

        if not response.ok:
            raise TransportError(f"HTTP {response.status_code} {response.reason or ''}".strip())

        return response.text
