import json
import unittest
from datetime import datetime, timezone
from decimal import Decimal

from exchanges.firi.errors import DecodeError
from exchanges.firi.models import (
    ActiveOrder,
    CreateOrderRequest,
    CreateWithdrawalRequest,
    HistoricOrder,
    HistoricTrade,
    Market,
    MarketID,
    MarketTicker,
    Order,
    Orderbook,
    OrderType,
    parse_json,
    parse_list,
)


class OrderbookTests(unittest.TestCase):
    def test_orderbook_decodes_positional_pairs(self) -> None:
        payload = parse_json(b'{"bids":[["100.5","2.0"]], "asks":[["101.0","1.5"]]}')
        book = Orderbook.from_payload(payload)
        self.assertEqual(book.bids, [Order(price=Decimal("100.5"), quantity=Decimal("2.0"))])
        self.assertEqual(book.asks, [Order(price=Decimal("101.0"), quantity=Decimal("1.5"))])
        self.assertEqual(book.best_bid().price, Decimal("100.5"))
        self.assertEqual(book.best_ask().quantity, Decimal("1.5"))

    def test_short_entry_fails(self) -> None:
        with self.assertRaises(DecodeError):
            Orderbook.from_payload({"bids": [["100.5"]], "asks": []})

    def test_non_numeric_entry_fails(self) -> None:
        with self.assertRaises(DecodeError):
            Orderbook.from_payload({"bids": [], "asks": [["abc", "2.0"]]})

    def test_json_number_entry_fails(self) -> None:
        with self.assertRaises(DecodeError):
            Order.from_pair([100.5, "2.0"])

    def test_missing_side_fails(self) -> None:
        with self.assertRaises(DecodeError):
            Orderbook.from_payload({"bids": []})

    def test_empty_book(self) -> None:
        book = Orderbook.from_payload({"bids": [], "asks": []})
        self.assertIsNone(book.best_bid())
        self.assertIsNone(book.best_ask())


class OrderTypeTests(unittest.TestCase):
    def test_known_values(self) -> None:
        self.assertIs(OrderType.parse("bid"), OrderType.BID)
        self.assertIs(OrderType.parse("ask"), OrderType.ASK)

    def test_unknown_value_is_decode_error(self) -> None:
        with self.assertRaises(DecodeError):
            OrderType.parse("buy")

    def test_serializes_as_string(self) -> None:
        self.assertEqual(json.dumps({"type": OrderType.ASK.value}), '{"type": "ask"}')


class MarketIDTests(unittest.TestCase):
    def test_parse_accepts_lowercase(self) -> None:
        self.assertIs(MarketID.parse("btcnok"), MarketID.BTCNOK)
        self.assertIs(MarketID.parse(MarketID.ETHNOK), MarketID.ETHNOK)

    def test_unsupported_market(self) -> None:
        with self.assertRaises(ValueError):
            MarketID.parse("DOGEUSD")


class CreateOrderRequestTests(unittest.TestCase):
    def test_json_round_trip_preserves_decimals(self) -> None:
        request = CreateOrderRequest(
            market="BTCNOK",
            type=OrderType.BID,
            price=Decimal("412345.12345678"),
            amount=Decimal("0.00000001"),
        )
        encoded = json.dumps(request.to_payload())
        self.assertIn('"price": "412345.12345678"', encoded)
        self.assertIn('"amount": "0.00000001"', encoded)
        decoded = CreateOrderRequest.from_payload(json.loads(encoded))
        self.assertEqual(decoded, request)

    def test_coerces_strings(self) -> None:
        request = CreateOrderRequest(market="ethnok", type="ask", price="25000.5", amount="1")
        self.assertEqual(request.market, "ETHNOK")
        self.assertIs(request.type, OrderType.ASK)
        self.assertEqual(request.to_payload()["price"], "25000.5")

    def test_no_scientific_notation(self) -> None:
        request = CreateOrderRequest(market="BTCNOK", type="bid", price=Decimal("1E+5"), amount=Decimal("1E-8"))
        payload = request.to_payload()
        self.assertEqual(payload["price"], "100000")
        self.assertEqual(payload["amount"], "0.00000001")

    def test_invalid_type_rejected(self) -> None:
        with self.assertRaises(ValueError):
            CreateOrderRequest(market="BTCNOK", type="buy", price="1", amount="1")

    def test_decode_rejects_unknown_type(self) -> None:
        with self.assertRaises(DecodeError):
            CreateOrderRequest.from_payload({"market": "BTCNOK", "type": "sell", "price": "1", "amount": "1"})

    def test_non_finite_price_rejected(self) -> None:
        for price in ("NaN", "Infinity", Decimal("-Infinity"), Decimal("sNaN")):
            with self.subTest(price=price), self.assertRaises(ValueError):
                CreateOrderRequest(market="BTCNOK", type="bid", price=price, amount="1")

    def test_withdrawal_payload(self) -> None:
        request = CreateWithdrawalRequest(amount="0.5", address="bc1qaddress")
        self.assertEqual(request.to_payload(), {"amount": "0.5", "address": "bc1qaddress"})

    def test_withdrawal_non_finite_amount_rejected(self) -> None:
        for amount in ("Infinity", Decimal("NaN")):
            with self.subTest(amount=amount), self.assertRaises(ValueError):
                CreateWithdrawalRequest(amount=amount, address="bc1qaddress")


class RecordDecodeTests(unittest.TestCase):
    def test_market_decodes_string_numbers(self) -> None:
        market = Market.from_payload(
            {"id": "BTCNOK", "last": "412000.5", "high": "420000", "change": "-1.25", "low": "400000", "volume": "12.3"}
        )
        self.assertEqual(market.last, Decimal("412000.5"))
        self.assertEqual(market.change, Decimal("-1.25"))

    def test_market_rejects_json_numbers(self) -> None:
        with self.assertRaises(DecodeError):
            Market.from_payload(
                {"id": "BTCNOK", "last": 412000.5, "high": "1", "change": "1", "low": "1", "volume": "1"}
            )

    def test_market_missing_field(self) -> None:
        with self.assertRaises(DecodeError):
            Market.from_payload({"id": "BTCNOK"})

    def test_ticker_market_override(self) -> None:
        ticker = MarketTicker.from_payload({"bid": "1", "ask": "2", "spread": "1"}, market="BTCNOK")
        self.assertEqual(ticker.market, "BTCNOK")

    def test_historic_order(self) -> None:
        order = HistoricOrder.from_payload(
            {"type": "bid", "amount": "0.1", "price": "400000", "total": "40000", "created_at": "2021-10-01T08:12:45.123Z"}
        )
        self.assertIs(order.type, OrderType.BID)
        self.assertEqual(order.created_at.tzinfo, timezone.utc)
        self.assertEqual(order.created_at.year, 2021)

    def test_active_order(self) -> None:
        order = ActiveOrder.from_payload(
            {
                "id": 42,
                "market": "BTCNOK",
                "type": "ask",
                "price": "450000",
                "amount": "0.5",
                "remaining": "0.25",
                "matched": "0.25",
                "cancelled": "0",
                "created_at": "2021-10-01T08:12:45.000Z",
            }
        )
        self.assertEqual(order.id, 42)
        self.assertEqual(order.remaining, Decimal("0.25"))

    def test_active_order_rejects_unknown_type(self) -> None:
        with self.assertRaises(DecodeError):
            ActiveOrder.from_payload(
                {
                    "id": 1,
                    "market": "BTCNOK",
                    "type": "market",
                    "price": "1",
                    "amount": "1",
                    "remaining": "1",
                    "matched": "0",
                    "cancelled": "0",
                    "created_at": "2021-10-01T08:12:45Z",
                }
            )

    def test_historic_trade(self) -> None:
        trade = HistoricTrade.from_payload(
            {
                "id": "abc-1",
                "market": "ETHNOK",
                "price": "25000",
                "price_currency": "NOK",
                "amount": "0.2",
                "amount_currency": "ETH",
                "cost": "5000",
                "cost_currency": "NOK",
                "side": "bid",
                "isMaker": True,
                "date": "2021-10-02T10:00:00+00:00",
            }
        )
        self.assertTrue(trade.is_maker)
        self.assertEqual(trade.date, datetime(2021, 10, 2, 10, tzinfo=timezone.utc))

    def test_parse_list_requires_array(self) -> None:
        with self.assertRaises(DecodeError):
            parse_list({"id": "BTCNOK"}, Market.from_payload)

    def test_parse_json_rejects_garbage(self) -> None:
        with self.assertRaises(DecodeError):
            parse_json(b"<html>oops</html>")


if __name__ == "__main__":
    unittest.main()
