from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import requests
from requests.structures import CaseInsensitiveDict

from .errors import APIError, TransportError

DEFAULT_BASE_URL = "https://api.miraiex.com"
DEFAULT_TIMEOUT = 5.0
REQUEST_ID_HEADER = "x-request-id"

Sender = Callable[..., requests.Response]


@dataclass
class RawResponse:
    method: str
    url: str
    status: int
    body: bytes
    request_id: str

    def expect(self, *accepted: int) -> bytes:
        """Return the body if the status is accepted, otherwise raise APIError."""

        if self.status not in (accepted or (200,)):
            raise APIError(self.method, self.url, self.status, self.body)
        return self.body


class FiriHttpClient:
    """Sends requests to the exchange and records each round trip in the log.

    ``send`` is the function that actually performs the HTTP exchange. It is
    called as ``send(prepared_request, timeout=...)`` and defaults to
    ``requests.Session.send``; tests replace it to avoid the network.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        send: Optional[Sender] = None,
        logger=None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.send = send or self.session.send
        self.timeout = timeout
        self.logger = logger

    def _log(self, level: str, message: str, *args: Any) -> None:
        if self.logger:
            getattr(self.logger, level)(message, *args)

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def close(self) -> None:
        self.session.close()

    def execute(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[bytes] = None,
        timeout: Optional[float] = None,
    ) -> RawResponse:
        request_headers = CaseInsensitiveDict(headers or {})
        if not request_headers.get(REQUEST_ID_HEADER):
            request_headers[REQUEST_ID_HEADER] = uuid.uuid4().hex
        request_id = request_headers[REQUEST_ID_HEADER]

        request = requests.Request(
            method,
            self.url_for(path),
            params=dict(params or {}),
            headers=dict(request_headers),
            data=body,
        )
        prepared = self.session.prepare_request(request)
        url = prepared.url

        self._log("info", "%s: %s --> request_id=%s", method, url, request_id)
        start = time.monotonic()
        try:
            response = self.send(prepared, timeout=timeout if timeout is not None else self.timeout)
        except requests.RequestException as exc:
            elapsed_ms = (time.monotonic() - start) * 1000
            self._log(
                "error",
                "%s: %s <-- ERROR in %.0fms request_id=%s: %s",
                method,
                url,
                elapsed_ms,
                request_id,
                exc,
            )
            raise TransportError(f"{method}: {url}: {exc}") from exc

        elapsed_ms = (time.monotonic() - start) * 1000
        level = "warning" if response.status_code >= 300 else "info"
        self._log(
            level,
            "%s: %s <-- %s in %.0fms request_id=%s",
            method,
            url,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        return RawResponse(
            method=method,
            url=url,
            status=response.status_code,
            body=response.content,
            request_id=request_id,
        )
