from __future__ import annotations


class FiriError(Exception):
    """Base class for every error raised by the Firi client."""


class TransportError(FiriError):
    """No response was obtained (network, DNS, TLS, timeout)."""


class SigningError(FiriError):
    pass


class DecodeError(FiriError):
    pass


class APIError(FiriError):
    """The exchange answered with a status outside the accepted set."""

    def __init__(self, method: str, url: str, status: int, body: bytes) -> None:
        self.method = method
        self.url = url
        self.status = status
        self.body = body
        super().__init__(f"{method}: {url}: status={status} body={self.text}")

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")
