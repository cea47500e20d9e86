from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, List, TypeVar

from .errors import DecodeError

T = TypeVar("T")


class OrderType(str, Enum):
    BID = "bid"
    ASK = "ask"

    @classmethod
    def parse(cls, value: Any) -> "OrderType":
        try:
            return cls(value)
        except ValueError as exc:
            raise DecodeError(f"Invalid order type value={value!r}") from exc


class MarketID(str, Enum):
    BTCNOK = "BTCNOK"
    ETHNOK = "ETHNOK"
    DAINOK = "DAINOK"
    ADANOK = "ADANOK"
    LTCNOK = "LTCNOK"

    @classmethod
    def parse(cls, value: "MarketID | str") -> "MarketID":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            supported = ", ".join(m.value for m in cls)
            raise ValueError(f"Unsupported market {value!r}; expected one of {supported}") from None


def parse_json(body: bytes) -> Any:
    try:
        return json.loads(body)
    except ValueError as exc:
        raise DecodeError(f"Response is not valid JSON: {exc}") from exc


def to_decimal(value: Any) -> Decimal:
    """Parse a decimal transmitted as a JSON string."""

    if not isinstance(value, str):
        raise DecodeError(f"Expected decimal string, got {type(value).__name__} value={value!r}")
    try:
        number = Decimal(value)
    except InvalidOperation as exc:
        raise DecodeError(f"Invalid decimal value={value!r}") from exc
    if not number.is_finite():
        raise DecodeError(f"Invalid decimal value={value!r}")
    return number


def format_decimal(value: Decimal) -> str:
    return format(value, "f")


def _require(payload: Any, key: str) -> Any:
    if not isinstance(payload, dict):
        raise DecodeError(f"Expected JSON object, got {type(payload).__name__}")
    if key not in payload:
        raise DecodeError(f"Missing field {key!r}")
    return payload[key]


def _decimal(payload: Any, key: str) -> Decimal:
    try:
        return to_decimal(_require(payload, key))
    except DecodeError as exc:
        raise DecodeError(f"Field {key!r}: {exc}") from exc


def _text(payload: Any, key: str) -> str:
    value = _require(payload, key)
    if not isinstance(value, str):
        raise DecodeError(f"Field {key!r}: expected string, got {value!r}")
    return value


def _integer(payload: Any, key: str) -> int:
    value = _require(payload, key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"Field {key!r}: expected integer, got {value!r}")
    return value


def _timestamp(payload: Any, key: str) -> datetime:
    value = _text(payload, key)
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise DecodeError(f"Field {key!r}: invalid timestamp {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_list(payload: Any, parse: Callable[[Any], T]) -> List[T]:
    if not isinstance(payload, list):
        raise DecodeError(f"Expected JSON array, got {type(payload).__name__}")
    return [parse(item) for item in payload]


@dataclass
class Market:
    id: str
    last: Decimal
    high: Decimal
    change: Decimal
    low: Decimal
    volume: Decimal

    @classmethod
    def from_payload(cls, payload: Dict) -> "Market":
        return cls(
            id=_text(payload, "id"),
            last=_decimal(payload, "last"),
            high=_decimal(payload, "high"),
            change=_decimal(payload, "change"),
            low=_decimal(payload, "low"),
            volume=_decimal(payload, "volume"),
        )


@dataclass
class MarketTicker:
    market: str
    bid: Decimal
    ask: Decimal
    spread: Decimal

    @classmethod
    def from_payload(cls, payload: Dict, *, market: str | None = None) -> "MarketTicker":
        # the single-market endpoint omits the market id
        return cls(
            market=market if market is not None else _text(payload, "market"),
            bid=_decimal(payload, "bid"),
            ask=_decimal(payload, "ask"),
            spread=_decimal(payload, "spread"),
        )


@dataclass
class Balance:
    currency: str
    balance: Decimal
    hold: Decimal
    available: Decimal

    @classmethod
    def from_payload(cls, payload: Dict) -> "Balance":
        return cls(
            currency=_text(payload, "currency"),
            balance=_decimal(payload, "balance"),
            hold=_decimal(payload, "hold"),
            available=_decimal(payload, "available"),
        )


@dataclass
class Order:
    price: Decimal
    quantity: Decimal

    @classmethod
    def from_pair(cls, entry: Any) -> "Order":
        """Build a level from a ``[priceString, quantityString]`` pair."""

        if not isinstance(entry, list) or len(entry) != 2:
            raise DecodeError(f"Malformed order book entry val={entry!r}")
        try:
            return cls(price=to_decimal(entry[0]), quantity=to_decimal(entry[1]))
        except DecodeError as exc:
            raise DecodeError(f"Malformed order book entry val={entry!r}: {exc}") from exc


@dataclass
class Orderbook:
    bids: List[Order] = field(default_factory=list)
    asks: List[Order] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Dict) -> "Orderbook":
        return cls(
            bids=parse_list(_require(payload, "bids"), Order.from_pair),
            asks=parse_list(_require(payload, "asks"), Order.from_pair),
        )

    def best_bid(self) -> Order | None:
        return max(self.bids, key=lambda o: o.price) if self.bids else None

    def best_ask(self) -> Order | None:
        return min(self.asks, key=lambda o: o.price) if self.asks else None


@dataclass
class HistoricOrder:
    type: OrderType
    amount: Decimal
    price: Decimal
    total: Decimal
    created_at: datetime

    @classmethod
    def from_payload(cls, payload: Dict) -> "HistoricOrder":
        return cls(
            type=OrderType.parse(_require(payload, "type")),
            amount=_decimal(payload, "amount"),
            price=_decimal(payload, "price"),
            total=_decimal(payload, "total"),
            created_at=_timestamp(payload, "created_at"),
        )


@dataclass
class ActiveOrder:
    id: int
    market: str
    type: OrderType
    price: Decimal
    amount: Decimal
    remaining: Decimal
    matched: Decimal
    cancelled: Decimal
    created_at: datetime

    @classmethod
    def from_payload(cls, payload: Dict) -> "ActiveOrder":
        return cls(
            id=_integer(payload, "id"),
            market=_text(payload, "market"),
            type=OrderType.parse(_require(payload, "type")),
            price=_decimal(payload, "price"),
            amount=_decimal(payload, "amount"),
            remaining=_decimal(payload, "remaining"),
            matched=_decimal(payload, "matched"),
            cancelled=_decimal(payload, "cancelled"),
            created_at=_timestamp(payload, "created_at"),
        )


@dataclass
class HistoricTrade:
    id: str
    market: str
    price: Decimal
    price_currency: str
    amount: Decimal
    amount_currency: str
    cost: Decimal
    cost_currency: str
    side: str
    is_maker: bool
    date: datetime

    @classmethod
    def from_payload(cls, payload: Dict) -> "HistoricTrade":
        is_maker = _require(payload, "isMaker")
        if not isinstance(is_maker, bool):
            raise DecodeError(f"Field 'isMaker': expected boolean, got {is_maker!r}")
        return cls(
            id=_text(payload, "id"),
            market=_text(payload, "market"),
            price=_decimal(payload, "price"),
            price_currency=_text(payload, "price_currency"),
            amount=_decimal(payload, "amount"),
            amount_currency=_text(payload, "amount_currency"),
            cost=_decimal(payload, "cost"),
            cost_currency=_text(payload, "cost_currency"),
            side=_text(payload, "side"),
            is_maker=is_maker,
            date=_timestamp(payload, "date"),
        )


def _coerce_decimal(value: Decimal | str | int | float) -> Decimal:
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"Invalid decimal value={value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Non-finite decimal value={value!r}")
    return result


@dataclass
class CreateOrderRequest:
    market: str
    type: OrderType
    price: Decimal
    amount: Decimal

    def __post_init__(self) -> None:
        self.market = MarketID.parse(self.market).value
        self.type = OrderType(self.type)
        self.price = _coerce_decimal(self.price)
        self.amount = _coerce_decimal(self.amount)

    def to_payload(self) -> Dict[str, str]:
        return {
            "market": self.market,
            "type": self.type.value,
            "price": format_decimal(self.price),
            "amount": format_decimal(self.amount),
        }

    @classmethod
    def from_payload(cls, payload: Dict) -> "CreateOrderRequest":
        try:
            market = MarketID.parse(_text(payload, "market"))
        except ValueError as exc:
            raise DecodeError(str(exc)) from exc
        return cls(
            market=market.value,
            type=OrderType.parse(_require(payload, "type")),
            price=_decimal(payload, "price"),
            amount=_decimal(payload, "amount"),
        )


@dataclass
class CreateOrderResponse:
    id: int

    @classmethod
    def from_payload(cls, payload: Dict) -> "CreateOrderResponse":
        return cls(id=_integer(payload, "id"))


@dataclass
class CreateWithdrawalRequest:
    amount: Decimal
    address: str

    def __post_init__(self) -> None:
        self.amount = _coerce_decimal(self.amount)

    def to_payload(self) -> Dict[str, str]:
        return {"amount": format_decimal(self.amount), "address": self.address}


@dataclass
class CreateWithdrawalResponse:
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> "CreateWithdrawalResponse":
        if not isinstance(payload, dict):
            raise DecodeError(f"Expected JSON object, got {type(payload).__name__}")
        return cls(raw=payload)
