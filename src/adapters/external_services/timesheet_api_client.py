"""Timesheet API client implementation."""
from typing import Optional
import logging
import requests

from domain.exceptions import UpstreamUnreachableError
from domain.value_objects import UpstreamResponse


class TimesheetAPIClient:
    """HTTP client for the upstream attendance/timesheet API."""

    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self._base_url)

    @property
    def base_url(self) -> str:
        return self._base_url

    def send(
        self,
        method: str,
        path: str,
        headers: dict,
        json_body: Optional[dict] = None,
        raw_body: Optional[bytes] = None,
        params: Optional[dict] = None,
    ) -> UpstreamResponse:
        """
        Send one request to the upstream API.

        Non-2xx answers are returned, not raised; the caller decides what
        to do with them.

        Raises:
            UpstreamUnreachableError: on connection errors and timeouts
        """
        url = f"{self._base_url}{path}"
        logging.info(f"🌐 {method} {url}")

        try:
            response = self._session.request(
                method,
                url,
                headers=headers,
                json=json_body,
                data=raw_body if json_body is None else None,
                params=params,
                timeout=self._timeout,
            )
        except requests.Timeout as e:
            logging.error(f"❌ Upstream timed out after {self._timeout}s: {url}")
            raise UpstreamUnreachableError(f"Timed out after {self._timeout}s calling {path}") from e
        except requests.RequestException as e:
            logging.error(f"❌ Upstream request failed: {url}: {e}")
            raise UpstreamUnreachableError(f"Could not reach timesheet API: {e}") from e

        return UpstreamResponse(
            status_code=response.status_code,
            body=response.content,
            content_type=response.headers.get("Content-Type", "application/json"),
        )
