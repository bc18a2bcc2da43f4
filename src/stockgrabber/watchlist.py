from typing import Optional

from .client import StockbitClient
from .formatters import get_formatter
from .models import Stock, StockSummary, Watchlist
from .parsing import format_magnitude, parse_locale_number


def _flag(value: Optional[bool], default: bool) -> bool:
    """Read a boolean flag, falling back to default when absent."""
    return default if value is None else bool(value)


def _derive_ohl(
    intraday_prices: tuple[float, ...], last_price: float
) -> tuple[float, float, float]:
    """Derive open/high/low from intraday samples.

    Args:
        intraday_prices: Ordered intraday price samples
        last_price: Fallback when there are no samples

    Returns:
        Tuple of (open, high, low)
    """
    if not intraday_prices:
        return last_price, last_price, last_price
    return intraday_prices[0], max(intraday_prices), min(intraday_prices)


def serialize_stock(raw: dict) -> Stock:
    """Transform a raw watchlist item into a Stock."""
    last_price = parse_locale_number(raw.get("last"))
    change = parse_locale_number(raw.get("change"))
    volume = parse_locale_number(raw.get("volume"))

    intraday_prices = tuple(parse_locale_number(p) for p in raw.get("prices") or [])
    open_price, high_price, low_price = _derive_ohl(intraday_prices, last_price)

    orderbook = raw.get("orderbook") or {}
    bid = orderbook.get("bid")
    offer = orderbook.get("offer")
    corp_action = raw.get("corp_action") or {}

    return Stock(
        symbol=raw.get("symbol", ""),
        name=raw.get("name", ""),
        exchange=raw.get("exchange", ""),
        icon_url=raw.get("icon_url", ""),
        last_price=last_price,
        previous_close=parse_locale_number(raw.get("previous")),
        open_price=open_price,
        high_price=high_price,
        low_price=low_price,
        change=change,
        change_percent=parse_locale_number(raw.get("percent")),
        is_positive=change > 0,
        is_negative=change < 0,
        volume=volume,
        volume_formatted=format_magnitude(volume),
        intraday_prices=intraday_prices,
        bid=parse_locale_number(bid) if bid else None,
        offer=parse_locale_number(offer) if offer else None,
        has_corporate_action=_flag(corp_action.get("active"), False),
        is_uma=_flag(raw.get("uma"), False),
        tradeable=_flag(raw.get("tradeable"), True),
    )


def serialize_watchlist(raw: dict) -> Watchlist:
    """Transform a raw watchlist response, keeping upstream stock order."""
    data = (raw or {}).get("data") or {}

    return Watchlist(
        id=data.get("watchlist_id"),
        name=data.get("name", ""),
        description=data.get("descriptions", ""),
        total_stocks=data.get("total") or 0,
        is_default=_flag(data.get("is_default"), False),
        sort_by=data.get("sort_by", ""),
        sort_direction=data.get("sort_dir", ""),
        stocks=tuple(serialize_stock(item) for item in data.get("result") or []),
    )


def _trend(change: float) -> str:
    if change > 0:
        return "up"
    if change < 0:
        return "down"
    return "flat"


def serialize_watchlist_summary(raw: dict) -> list[StockSummary]:
    """Compact per-stock view: previous close as open, last as close."""
    data = (raw or {}).get("data") or {}
    result = []
    for item in data.get("result") or []:
        change = parse_locale_number(item.get("change"))
        result.append(
            StockSummary(
                symbol=item.get("symbol", ""),
                name=item.get("name", ""),
                icon_url=item.get("icon_url", ""),
                open_price=parse_locale_number(item.get("previous")),
                close_price=parse_locale_number(item.get("last")),
                change=change,
                change_percent=parse_locale_number(item.get("percent")),
                volume=format_magnitude(parse_locale_number(item.get("volume"))),
                trend=_trend(change),
            )
        )
    return result


def get_watchlist_data(client: StockbitClient) -> Watchlist:
    """Fetch and serialize the first watchlist.

    Args:
        client: Authenticated StockbitClient

    Returns:
        Watchlist object
    """
    return serialize_watchlist(client.get_watchlist())


def print_watchlist(
    client: StockbitClient,
    summary: bool = False,
    output_format: str = "table",
    verbose: bool = False,
) -> None:
    """Fetch and print the watchlist.

    Args:
        client: Authenticated StockbitClient
        summary: If True, print the compact per-stock view
        output_format: Output format - 'table', 'json', or 'csv' (default 'table')
        verbose: If True, print status messages during execution
    """
    if verbose:
        print("\nFetching watchlist...")

    formatter = get_formatter(output_format)

    if summary:
        stocks = serialize_watchlist_summary(client.get_watchlist())
        if not stocks:
            print("No stocks found.")
            return
        print(formatter.format_watchlist_summary(stocks))
        return

    watchlist = get_watchlist_data(client)
    if not watchlist.stocks:
        print("No stocks found.")
        return
    print(formatter.format_watchlist(watchlist))
