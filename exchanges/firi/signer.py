from __future__ import annotations

import hmac
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from hashlib import sha256
from typing import Dict

from .errors import SigningError

VALID_FOR_MILLIS = 2000


@dataclass(frozen=True)
class Credentials:
    client_id: str
    api_key: str
    secret_key: bytes = field(repr=False)


@dataclass(frozen=True)
class SignedArtifact:
    client_id: str
    signature: str
    timestamp: datetime
    valid_for_millis: int

    @property
    def unix_timestamp(self) -> int:
        return int(self.timestamp.timestamp())

    def query_params(self) -> Dict[str, str]:
        return {"timestamp": str(self.unix_timestamp), "validity": str(self.valid_for_millis)}


def signing_payload(unix_seconds: int, valid_for_millis: int) -> bytes:
    """Exact bytes the exchange expects to be MAC'ed.

    Key order is fixed and both values are JSON strings, e.g.
    ``{"timestamp":"1632954488","validity":"2000"}``.
    """

    body = {"timestamp": str(unix_seconds), "validity": str(valid_for_millis)}
    return json.dumps(body, separators=(",", ":")).encode("utf-8")


def _unix_seconds(timestamp: datetime | int | float) -> int:
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return int(timestamp.timestamp())
    return int(timestamp)


class Signer:
    """HMAC-SHA256 signer for authenticated Firi requests.

    The signature covers the timestamp and validity window only, not the
    request path or body.
    """

    def __init__(self, client_id: str, api_key: str, secret_key: bytes | str) -> None:
        if isinstance(secret_key, str):
            secret_key = secret_key.encode("utf-8")
        self._credentials = Credentials(client_id=client_id, api_key=api_key, secret_key=secret_key)
        self.valid_for_millis = VALID_FOR_MILLIS

    @property
    def client_id(self) -> str:
        return self._credentials.client_id

    @property
    def api_key(self) -> str:
        return self._credentials.api_key

    def sign(self, timestamp: datetime | int | float) -> SignedArtifact:
        try:
            unix_seconds = _unix_seconds(timestamp)
            message = signing_payload(unix_seconds, self.valid_for_millis)
            signature = hmac.new(self._credentials.secret_key, message, sha256).hexdigest()
        except (TypeError, ValueError, OverflowError, OSError) as exc:
            raise SigningError(f"Failed to sign timestamp={timestamp!r}: {exc}") from exc
        return SignedArtifact(
            client_id=self.client_id,
            signature=signature,
            timestamp=datetime.fromtimestamp(unix_seconds, tz=timezone.utc),
            valid_for_millis=self.valid_for_millis,
        )
