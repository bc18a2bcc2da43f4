from .client import StockbitClient
from .formatters import get_formatter
from .models import KeyStats
from .parsing import format_magnitude, parse_optional_number

# KeyStats field -> upstream key
FIELD_KEYS = {
    "pe_ratio": "pe_ratio",
    "pb_ratio": "pb_ratio",
    "ps_ratio": "ps_ratio",
    "peg_ratio": "peg_ratio",
    "ev_ebitda": "ev_ebitda",
    "roe": "roe",
    "roa": "roa",
    "net_profit_margin": "npm",
    "operating_margin": "opm",
    "gross_margin": "gpm",
    "debt_to_equity": "der",
    "current_ratio": "current_ratio",
    "quick_ratio": "quick_ratio",
    "dividend_yield": "dividend_yield",
    "payout_ratio": "payout_ratio",
    "dividend_per_share": "dps",
    "revenue_growth": "revenue_growth",
    "earnings_growth": "earnings_growth",
    "eps": "eps",
    "book_value_per_share": "bvps",
    "beta": "beta",
    "shares_outstanding": "shares_outstanding",
    "avg_volume": "avg_volume",
    "market_cap": "market_cap",
    "enterprise_value": "enterprise_value",
}


def _format_large(value) -> str:
    """Large figures: T/B/M suffixes, "-" for zero or absent."""
    return format_magnitude(value, empty="-", scale_thousands=False, max_decimals=3)


def serialize_keystats(raw: dict, symbol: str = "") -> KeyStats:
    """Transform a key statistics response.

    The statistics may sit under ``data`` or at the top level.

    Args:
        raw: Decoded key statistics response
        symbol: Symbol used when the payload does not name one

    Returns:
        KeyStats object
    """
    body = raw if isinstance(raw, dict) else {}
    data = body.get("data") or body
    if not isinstance(data, dict):
        data = {}

    values = {
        field: parse_optional_number(data.get(key)) for field, key in FIELD_KEYS.items()
    }

    return KeyStats(
        symbol=data.get("symbol") or symbol,
        avg_volume_formatted=_format_large(values["avg_volume"]),
        market_cap_formatted=_format_large(values["market_cap"]),
        enterprise_value_formatted=_format_large(values["enterprise_value"]),
        **values,
    )


def get_keystats_data(client: StockbitClient, symbol: str) -> KeyStats:
    """Fetch and serialize key statistics for a symbol."""
    return serialize_keystats(client.get_keystats(symbol), symbol=symbol)


def print_keystats(
    client: StockbitClient,
    symbol: str,
    output_format: str = "table",
    verbose: bool = False,
) -> None:
    """Fetch and print key statistics.

    Args:
        client: Authenticated StockbitClient
        symbol: Stock symbol (e.g., 'BBCA')
        output_format: Output format - 'table', 'json', or 'csv' (default 'table')
        verbose: If True, print status messages during execution
    """
    if verbose:
        print(f"\nFetching key statistics for {symbol}...")

    stats = get_keystats_data(client, symbol)

    formatter = get_formatter(output_format)
    print(formatter.format_keystats(stats))
