"""Loans API HTTP dispatcher: one request in, one normalized Result out"""

import logging
import time
from typing import Any, Mapping, Optional

import httpx

from loans_api.config import settings
from loans_api.domain.exceptions import InvalidAccessTokenError, UnexpectedResponseError
from loans_api.domain.models import UNEXPECTED_RESPONSE, Result
from loans_api.infrastructure.observability.metrics import record_failure, request_duration_histogram
from loans_api.utils.http_utils import compact, join_url, mask_endpoint, mime_type

logger = logging.getLogger(__name__)

API_CONTENT_TYPE = "application/json"


class RequestDispatcher:
    """
    Sends requests to the loans API over a persistent connection.

    The connection is opened on first use and reused for every later call.
    A dispatcher is not safe to share between threads.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        http_client: httpx.Client | None = None,
    ):
        self.base_url = base_url
        self.timeout = timeout or settings.http_timeout_seconds
        self._connection = http_client
        self._owns_connection = http_client is None

    @property
    def connection(self) -> httpx.Client:
        if self._connection is None:
            self._connection = httpx.Client(timeout=self.timeout)
        return self._connection

    def close(self) -> None:
        """Close the connection if this dispatcher opened it"""
        if self._connection is not None and self._owns_connection:
            self._connection.close()
            self._connection = None

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        session_token: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, Optional[str]]] = None,
    ) -> Result:
        """
        Issue one API call and classify its response.

        Raises:
            InvalidAccessTokenError: The API answered 401
            UnexpectedResponseError: No HTTP response (timeout, connection or protocol failure)
        """
        request_headers = compact({"Authorization": session_token, **(headers or {})})
        url = join_url(self.base_url, endpoint)
        log_endpoint = mask_endpoint(endpoint)
        start_time = time.perf_counter()

        try:
            response = self.connection.request(
                method.upper(),
                url,
                json=dict(params or {}),
                headers=request_headers,
            )
        except httpx.HTTPError as e:
            record_failure("transport")
            logger.warning(
                "Loans API transport failure",
                extra={"method": method.upper(), "endpoint": log_endpoint, "error": str(e)},
            )
            raise UnexpectedResponseError(f"{method.upper()} {log_endpoint} failed: {e}") from e

        duration = time.perf_counter() - start_time
        request_duration_histogram.labels(method=method.upper(), status=response.status_code).observe(duration)
        logger.info(
            "Loans API call completed",
            extra={
                "method": method.upper(),
                "endpoint": log_endpoint,
                "status": response.status_code,
                "duration_ms": round(duration * 1000, 2),
            },
        )

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> Result:
        if response.is_success:
            return Result(success=True, payload=self._parse(response))

        if response.status_code == httpx.codes.UNAUTHORIZED:
            record_failure("unauthorized")
            raise InvalidAccessTokenError("Session token rejected by the loans API")

        return self._parse_errors(response)

    def _parse(self, response: httpx.Response) -> Any:
        if not response.content:
            return None

        content_type = mime_type(response.headers.get("content-type"))
        if content_type == API_CONTENT_TYPE:
            try:
                return response.json()
            except ValueError:
                return response.text or None
        if content_type.startswith("text/"):
            return response.text
        # Documents (PDF and friends) are handed back untouched
        return response.content

    def _parse_errors(self, response: httpx.Response) -> Result:
        if mime_type(response.headers.get("content-type")) == API_CONTENT_TYPE:
            record_failure("rejected")
            return Result(success=False, payload=self._parse(response))

        record_failure("unexpected_response")
        logger.warning(
            "Loans API returned a non-JSON error",
            extra={"status": response.status_code, "content_type": response.headers.get("content-type")},
        )
        return Result.failure(UNEXPECTED_RESPONSE)

