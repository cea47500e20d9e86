from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Any, Iterable, List, Sequence


def format_price(value: Any, decimals: int = 2) -> str:
    """Format a price with a fixed number of decimals, truncating extra digits."""

    if value in (None, ""):
        return "-"
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return str(value)

    quantizer = Decimal(1).scaleb(-decimals)
    rounded = price.quantize(quantizer, rounding=ROUND_DOWN)
    return f"{rounded:,f}"


def format_amount(value: Any, max_decimals: int = 8) -> str:
    """Format a coin amount without scientific notation or trailing zeros."""

    if value in (None, ""):
        return "-"
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return str(value)

    quantizer = Decimal(1).scaleb(-max_decimals)
    formatted = f"{amount.quantize(quantizer, rounding=ROUND_DOWN):f}"
    if "." in formatted:
        formatted = formatted.rstrip("0").rstrip(".") or "0"
    return formatted


def format_volume(volume_value: Any) -> str:
    """Format 24h volume with thousand separators and sensible precision."""

    if volume_value in (None, ""):
        return "-"
    try:
        volume = Decimal(str(volume_value))
    except (InvalidOperation, ValueError):
        return str(volume_value)

    magnitude = abs(volume)
    if magnitude >= 1_000_000:
        decimals = 0
    elif magnitude >= 1_000:
        decimals = 1
    else:
        decimals = 2
    formatted = f"{volume:,.{decimals}f}"
    if "." in formatted:
        formatted = formatted.rstrip("0").rstrip(".")
    return formatted


def format_table(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    rows = [list(map(str, row)) for row in rows]
    widths: List[int] = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    lines = ["  ".join(h.ljust(widths[i]) for i, h in enumerate(headers))]
    lines.append("  ".join("-" * w for w in widths))
    for row in rows:
        lines.append("  ".join(cell.rjust(widths[i]) if i else cell.ljust(widths[i]) for i, cell in enumerate(row)))
    return "\n".join(lines)
