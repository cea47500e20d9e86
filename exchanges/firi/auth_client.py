from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .http_client import FiriHttpClient, RawResponse
from .models import (
    ActiveOrder,
    Balance,
    CreateOrderRequest,
    CreateOrderResponse,
    CreateWithdrawalRequest,
    CreateWithdrawalResponse,
    HistoricTrade,
    MarketID,
    parse_json,
    parse_list,
)
from .public_client import FiriPublicClient
from .signer import SignedArtifact, Signer

ACCESS_KEY_HEADER = "miraiex-access-key"
CLIENT_ID_HEADER = "miraiex-user-clientid"
SIGNATURE_HEADER = "miraiex-user-signature"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FiriAuthClient:
    """Account endpoints, signed per request.

    Wraps a :class:`FiriPublicClient`; any attribute not defined here is
    looked up on it, so market data calls work on this client as well.
    """

    def __init__(
        self,
        public: FiriPublicClient,
        signer: Signer,
        *,
        http_client: Optional[FiriHttpClient] = None,
        send_access_key: bool = True,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.public = public
        self.signer = signer
        self.http_client = http_client or public.http_client
        self.send_access_key = send_access_key
        self.clock = clock or _utcnow

    def __getattr__(self, name: str) -> Any:
        if name == "public":
            raise AttributeError(name)
        return getattr(self.public, name)

    def build_signed_headers(self, artifact: SignedArtifact) -> Dict[str, str]:
        headers = {
            CLIENT_ID_HEADER: artifact.client_id,
            SIGNATURE_HEADER: artifact.signature,
        }
        if self.send_access_key:
            headers[ACCESS_KEY_HEADER] = self.signer.api_key
        return headers

    def _execute_signed(
        self,
        method: str,
        path: str,
        *,
        payload: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> RawResponse:
        artifact = self.signer.sign(self.clock())
        headers = self.build_signed_headers(artifact)
        body = None
        if payload is not None:
            body = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"
        return self.http_client.execute(
            method,
            path,
            params=artifact.query_params(),
            headers=headers,
            body=body,
            timeout=timeout,
        )

    def _get_signed(self, path: str, timeout: Optional[float]) -> Any:
        response = self._execute_signed("GET", path, timeout=timeout)
        return parse_json(response.expect(200))

    def get_balances(self, *, timeout: Optional[float] = None) -> List[Balance]:
        return parse_list(self._get_signed("/v2/balances", timeout), Balance.from_payload)

    def get_active_orders(self, *, timeout: Optional[float] = None) -> List[ActiveOrder]:
        return parse_list(self._get_signed("/v2/orders", timeout), ActiveOrder.from_payload)

    def get_active_orders_in_market(
        self, market: MarketID | str, *, timeout: Optional[float] = None
    ) -> List[ActiveOrder]:
        market_id = MarketID.parse(market)
        return parse_list(self._get_signed(f"/v2/orders/{market_id.value}", timeout), ActiveOrder.from_payload)

    def get_filled_and_closed_orders(self, *, timeout: Optional[float] = None) -> List[ActiveOrder]:
        return parse_list(self._get_signed("/v2/orders/history", timeout), ActiveOrder.from_payload)

    def get_trades(self, *, timeout: Optional[float] = None) -> List[HistoricTrade]:
        return parse_list(self._get_signed("/v2/history/trades", timeout), HistoricTrade.from_payload)

    def delete_all_orders(self, *, timeout: Optional[float] = None) -> List[ActiveOrder]:
        body = self._execute_signed("DELETE", "/v2/orders", timeout=timeout).expect(200)
        if not body.strip():
            return []
        return parse_list(parse_json(body), ActiveOrder.from_payload)

    def post_order(self, request: CreateOrderRequest, *, timeout: Optional[float] = None) -> CreateOrderResponse:
        response = self._execute_signed("POST", "/v2/orders", payload=request.to_payload(), timeout=timeout)
        return CreateOrderResponse.from_payload(parse_json(response.expect(200, 201)))

    def post_withdrawal(
        self,
        coin: str,
        request: CreateWithdrawalRequest,
        *,
        timeout: Optional[float] = None,
    ) -> CreateWithdrawalResponse:
        path = f"/v2/withdraw/{coin.upper()}"
        body = self._execute_signed("POST", path, payload=request.to_payload(), timeout=timeout).expect(200, 201)
        return CreateWithdrawalResponse.from_payload(parse_json(body) if body.strip() else {})
