"""Firi (MiraiEx) REST client with signed account endpoints."""

from .auth_client import FiriAuthClient
from .errors import APIError, DecodeError, FiriError, SigningError, TransportError
from .http_client import FiriHttpClient, RawResponse
from .models import (
    ActiveOrder,
    Balance,
    CreateOrderRequest,
    CreateOrderResponse,
    CreateWithdrawalRequest,
    CreateWithdrawalResponse,
    HistoricOrder,
    HistoricTrade,
    Market,
    MarketID,
    MarketTicker,
    Order,
    Orderbook,
    OrderType,
)
from .public_client import FiriPublicClient
from .signer import Credentials, SignedArtifact, Signer

__all__ = [
    "ActiveOrder",
    "APIError",
    "Balance",
    "CreateOrderRequest",
    "CreateOrderResponse",
    "CreateWithdrawalRequest",
    "CreateWithdrawalResponse",
    "Credentials",
    "DecodeError",
    "FiriAuthClient",
    "FiriError",
    "FiriHttpClient",
    "FiriPublicClient",
    "HistoricOrder",
    "HistoricTrade",
    "Market",
    "MarketID",
    "MarketTicker",
    "Order",
    "Orderbook",
    "OrderType",
    "RawResponse",
    "SignedArtifact",
    "Signer",
    "SigningError",
    "TransportError",
]
