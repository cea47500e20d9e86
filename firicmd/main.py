from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from core.config_service import ConfigService, ConfigurationError
from core.formatting import format_amount, format_price, format_table, format_volume
from core.logger import setup_logger
from exchanges.firi import (
    CreateOrderRequest,
    CreateWithdrawalRequest,
    FiriAuthClient,
    FiriError,
    FiriHttpClient,
    FiriPublicClient,
    MarketID,
    OrderType,
    Signer,
)

MARKET_CHOICES = [m.value for m in MarketID]


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="firicmd", description="Query the Firi exchange REST API")
    p.add_argument("--config", type=Path, default=None, help="Path to YAML config (optional)")
    p.add_argument("--log-level", default=None, help="Override configured log level")
    sub = p.add_subparsers(dest="command", required=True)

    markets = sub.add_parser("markets", help="List markets")
    markets.add_argument("--v1", action="store_true", help="Use the legacy v1 endpoint")
    sub.add_parser("tickers", help="List all tickers")
    for name, help_text in (("ticker", "Show one ticker"), ("history", "Public trade history")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("market", type=str.upper, choices=MARKET_CHOICES)
    orderbook = sub.add_parser("orderbook", help="Show order book")
    orderbook.add_argument("market", type=str.upper, choices=MARKET_CHOICES)
    orderbook.add_argument("--depth", type=int, default=10)

    sub.add_parser("balances", help="Account balances")
    orders = sub.add_parser("orders", help="Active orders")
    orders.add_argument("--market", type=str.upper, choices=MARKET_CHOICES, default=None)
    sub.add_parser("filled", help="Filled and closed orders")
    sub.add_parser("trades", help="Account trade history")
    sub.add_parser("cancel-all", help="Cancel all active orders")

    order = sub.add_parser("order", help="Place a limit order")
    order.add_argument("market", type=str.upper, choices=MARKET_CHOICES)
    order.add_argument("side", choices=[t.value for t in OrderType])
    order.add_argument("price")
    order.add_argument("amount")

    withdraw = sub.add_parser("withdraw", help="Withdraw coins to an address")
    withdraw.add_argument("coin")
    withdraw.add_argument("amount")
    withdraw.add_argument("address")
    return p


def build_client(service: ConfigService, logger=None) -> FiriAuthClient:
    keys = service.require_api_keys()
    settings = service.config.app
    http_client = FiriHttpClient(
        base_url=settings.base_url,
        timeout=settings.timeout_seconds,
        logger=logger,
    )
    signer = Signer(keys.client_id, keys.api_key, keys.secret_key)
    return FiriAuthClient(
        FiriPublicClient(http_client),
        signer,
        send_access_key=settings.send_access_key,
    )


def _cmd_markets(client: FiriAuthClient, args: argparse.Namespace) -> str:
    markets = client.get_markets_v1() if args.v1 else client.get_markets()
    rows = [
        (
            m.id,
            format_price(m.last),
            format_price(m.high),
            format_price(m.low),
            format_amount(m.change),
            format_volume(m.volume),
        )
        for m in markets
    ]
    return format_table(("market", "last", "high", "low", "change", "volume"), rows)


def _ticker_table(tickers) -> str:
    rows = [(t.market, format_price(t.bid), format_price(t.ask), format_price(t.spread)) for t in tickers]
    return format_table(("market", "bid", "ask", "spread"), rows)


def _cmd_tickers(client: FiriAuthClient, args: argparse.Namespace) -> str:
    return _ticker_table(client.get_market_tickers())


def _cmd_ticker(client: FiriAuthClient, args: argparse.Namespace) -> str:
    return _ticker_table([client.get_market_ticker(args.market)])


def _cmd_history(client: FiriAuthClient, args: argparse.Namespace) -> str:
    rows = [
        (h.created_at.isoformat(), h.type.value, format_price(h.price), format_amount(h.amount), format_price(h.total))
        for h in client.get_market_trade_history(args.market)
    ]
    return format_table(("created_at", "type", "price", "amount", "total"), rows)


def _cmd_orderbook(client: FiriAuthClient, args: argparse.Namespace) -> str:
    book = client.get_orderbook(args.market)
    rows = []
    for side, levels in (("ask", book.asks[: args.depth]), ("bid", book.bids[: args.depth])):
        rows.extend((side, format_price(o.price), format_amount(o.quantity)) for o in levels)
    best_bid, best_ask = book.best_bid(), book.best_ask()
    summary = "best bid={} ask={}".format(
        format_price(best_bid.price) if best_bid else "-",
        format_price(best_ask.price) if best_ask else "-",
    )
    return f"{format_table(('side', 'price', 'quantity'), rows)}\n{summary}"


def _cmd_balances(client: FiriAuthClient, args: argparse.Namespace) -> str:
    rows = [
        (b.currency, format_amount(b.balance), format_amount(b.hold), format_amount(b.available))
        for b in client.get_balances()
    ]
    return format_table(("currency", "balance", "hold", "available"), rows)


def _order_rows(orders) -> str:
    rows = [
        (
            str(o.id),
            o.market,
            o.type.value,
            format_price(o.price),
            format_amount(o.amount),
            format_amount(o.remaining),
            o.created_at.isoformat(),
        )
        for o in orders
    ]
    return format_table(("id", "market", "type", "price", "amount", "remaining", "created_at"), rows)


def _cmd_orders(client: FiriAuthClient, args: argparse.Namespace) -> str:
    if args.market:
        return _order_rows(client.get_active_orders_in_market(args.market))
    return _order_rows(client.get_active_orders())


def _cmd_filled(client: FiriAuthClient, args: argparse.Namespace) -> str:
    return _order_rows(client.get_filled_and_closed_orders())


def _cmd_trades(client: FiriAuthClient, args: argparse.Namespace) -> str:
    rows = [
        (
            t.date.isoformat(),
            t.market,
            t.side,
            format_price(t.price),
            format_amount(t.amount),
            format_price(t.cost),
            "maker" if t.is_maker else "taker",
        )
        for t in client.get_trades()
    ]
    return format_table(("date", "market", "side", "price", "amount", "cost", "role"), rows)


def _cmd_cancel_all(client: FiriAuthClient, args: argparse.Namespace) -> str:
    cancelled = client.delete_all_orders()
    return f"Cancelled {len(cancelled)} order(s)"


def _cmd_order(client: FiriAuthClient, args: argparse.Namespace) -> str:
    request = CreateOrderRequest(market=args.market, type=args.side, price=args.price, amount=args.amount)
    created = client.post_order(request)
    return f"Created order id={created.id}"


def _cmd_withdraw(client: FiriAuthClient, args: argparse.Namespace) -> str:
    client.post_withdrawal(args.coin, CreateWithdrawalRequest(amount=args.amount, address=args.address))
    return f"Withdrawal of {args.amount} {args.coin.upper()} requested"


COMMANDS: Dict[str, Callable[[FiriAuthClient, argparse.Namespace], str]] = {
    "markets": _cmd_markets,
    "tickers": _cmd_tickers,
    "ticker": _cmd_ticker,
    "history": _cmd_history,
    "orderbook": _cmd_orderbook,
    "balances": _cmd_balances,
    "orders": _cmd_orders,
    "filled": _cmd_filled,
    "trades": _cmd_trades,
    "cancel-all": _cmd_cancel_all,
    "order": _cmd_order,
    "withdraw": _cmd_withdraw,
}


def run(argv: List[str], environ: Optional[Dict[str, str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    service = ConfigService()
    try:
        if args.config is not None:
            service.load(args.config)
        service.load_env(environ)
        service.require_api_keys()
        settings = service.config.app
        log_path = Path(settings.log_path) if settings.log_path else None
        logger = setup_logger(log_path=log_path, level=args.log_level or settings.log_level)
        client = build_client(service, logger=logger)
    except (ConfigurationError, FileNotFoundError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    masked = service.config.api_keys.masked()
    logger.info("Using %s with client_id=%s api_key=%s", settings.base_url, masked.client_id, masked.api_key)
    try:
        output = COMMANDS[args.command](client, args)
    except (FiriError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        client.http_client.close()
    print(output)
    return 0


def main() -> None:
    try:
        rc = run(sys.argv[1:])
    except KeyboardInterrupt:
        rc = 130
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
