from typing import Any

from .client import StockbitClient
from .formatters import get_formatter
from .models import ParsedTable
from .tables import locate_embedded_html, parse_html_table


def get_financial_tables(payload: Any) -> list[ParsedTable]:
    """Extract statement tables from a financials payload.

    Args:
        payload: Decoded financials response

    Returns:
        List of ParsedTable; empty when the payload carries no HTML
    """
    html = locate_embedded_html(payload)
    if not html:
        return []
    return parse_html_table(html)


def print_financials(
    client: StockbitClient,
    symbol: str,
    output_format: str = "table",
    verbose: bool = False,
) -> None:
    """Fetch and print financial statement tables.

    Args:
        client: Authenticated StockbitClient
        symbol: Stock symbol (e.g., 'BBCA')
        output_format: Output format - 'table', 'json', or 'csv' (default 'table')
        verbose: If True, print status messages during execution
    """
    if verbose:
        print(f"\nFetching financials for {symbol}...")

    tables = get_financial_tables(client.get_financials(symbol))

    if not tables:
        print("No financial tables found.")
        return

    if verbose:
        print(f"✓ Found {len(tables)} table(s)")

    formatter = get_formatter(output_format)
    print(formatter.format_tables(tables))
