"""Output formatters for different data formats."""

import csv
import json
from dataclasses import asdict
from io import StringIO
from typing import Protocol, Sequence

from .models import (
    BrokerActivity,
    BrokerActivitySummary,
    BrokerTransaction,
    InsiderActivity,
    KeyStats,
    ParsedTable,
    StockSummary,
    Watchlist,
)
from .parsing import (
    format_magnitude,
    format_percent,
    format_price,
    format_ratio,
    format_table_row,
)


def _signed(value: float) -> str:
    return f"{'+' if value > 0 else ''}{format_price(value)}"


def _signed_pct(value: float) -> str:
    return f"{'+' if value > 0 else ''}{value:.2f}%"


def _column_widths(table: ParsedTable, rows: Sequence[Sequence[str]]) -> list[int]:
    """Width of each column across the header and formatted rows."""
    widths: list[int] = []
    for line in [table.headers, *rows]:
        for idx, cell in enumerate(line):
            if idx >= len(widths):
                widths.append(len(cell))
            else:
                widths[idx] = max(widths[idx], len(cell))
    return widths


def _keystats_sections(stats: KeyStats) -> list[tuple[str, list[tuple[str, str]]]]:
    """Group key statistics into titled sections of (label, display value)."""
    return [
        (
            "Valuation",
            [
                ("P/E Ratio", format_ratio(stats.pe_ratio)),
                ("P/B Ratio", format_ratio(stats.pb_ratio)),
                ("P/S Ratio", format_ratio(stats.ps_ratio)),
                ("PEG Ratio", format_ratio(stats.peg_ratio)),
                ("EV/EBITDA", format_ratio(stats.ev_ebitda)),
            ],
        ),
        (
            "Profitability",
            [
                ("ROE", format_percent(stats.roe)),
                ("ROA", format_percent(stats.roa)),
                ("Net Profit Margin", format_percent(stats.net_profit_margin)),
                ("Operating Margin", format_percent(stats.operating_margin)),
                ("Gross Margin", format_percent(stats.gross_margin)),
            ],
        ),
        (
            "Debt & Liquidity",
            [
                ("Debt/Equity", format_ratio(stats.debt_to_equity)),
                ("Current Ratio", format_ratio(stats.current_ratio)),
                ("Quick Ratio", format_ratio(stats.quick_ratio)),
            ],
        ),
        (
            "Dividend",
            [
                ("Dividend Yield", format_percent(stats.dividend_yield)),
                ("Payout Ratio", format_percent(stats.payout_ratio)),
                ("DPS", format_ratio(stats.dividend_per_share)),
            ],
        ),
        (
            "Growth",
            [
                ("Revenue Growth", format_percent(stats.revenue_growth)),
                ("Earnings Growth", format_percent(stats.earnings_growth)),
            ],
        ),
        (
            "Per Share Data",
            [
                ("EPS", format_ratio(stats.eps)),
                ("Book Value/Share", format_ratio(stats.book_value_per_share)),
            ],
        ),
        (
            "Size & Scale",
            [
                ("Market Cap", stats.market_cap_formatted),
                ("Enterprise Value", stats.enterprise_value_formatted),
                ("Avg Volume", stats.avg_volume_formatted),
                ("Beta", format_ratio(stats.beta)),
            ],
        ),
    ]


class FormatterProtocol(Protocol):
    """Protocol for data formatters."""

    def format_watchlist(self, watchlist: Watchlist) -> str:
        """Format a watchlist."""
        ...

    def format_watchlist_summary(self, stocks: Sequence[StockSummary]) -> str:
        """Format compact watchlist rows."""
        ...

    def format_broker_activity(self, activity: BrokerActivity) -> str:
        """Format broker activity."""
        ...

    def format_broker_summary(self, summary: BrokerActivitySummary) -> str:
        """Format compact broker activity."""
        ...

    def format_tables(self, tables: Sequence[ParsedTable]) -> str:
        """Format parsed financial tables."""
        ...

    def format_insider_activity(self, activity: InsiderActivity) -> str:
        """Format insider movements."""
        ...

    def format_keystats(self, stats: KeyStats) -> str:
        """Format key statistics."""
        ...


class TableFormatter:
    """Format data as aligned ASCII tables."""

    @staticmethod
    def _format_transaction_row(tx: BrokerTransaction) -> str:
        """Format a single broker transaction as a table row.

        Args:
            tx: Broker transaction

        Returns:
            Formatted row string
        """
        if tx.side == "buy":
            lot, value, avg = tx.buy_lot, tx.buy_value_formatted, tx.buy_avg_price_formatted
        else:
            lot, value, avg = tx.sell_lot, tx.sell_value_formatted, tx.sell_avg_price_formatted
        return (
            f"{tx.stock_code:<8} {tx.date:<12} {tx.investor_type:<8} "
            f"{format_magnitude(lot):>12} {value:>12} {avg:>12}"
        )

    def format_watchlist(self, watchlist: Watchlist) -> str:
        """Format watchlist stocks with prices and volume."""
        if not watchlist.stocks:
            return "No stocks found."

        lines = []
        lines.append("\n" + "=" * 100)
        lines.append(f"Watchlist: {watchlist.name} ({watchlist.total_stocks} stocks)")
        lines.append("=" * 100)
        lines.append(
            f"{'Symbol':<8} {'Name':<28} {'Last':>10} {'Change':>10} {'%':>8} "
            f"{'High':>10} {'Low':>10} {'Volume':>10}"
        )
        lines.append("-" * 100)

        for stock in watchlist.stocks:
            lines.append(
                f"{stock.symbol:<8} {stock.name[:28]:<28} "
                f"{format_price(stock.last_price):>10} {_signed(stock.change):>10} "
                f"{_signed_pct(stock.change_percent):>8} "
                f"{format_price(stock.high_price):>10} "
                f"{format_price(stock.low_price):>10} {stock.volume_formatted:>10}"
            )

        lines.append("=" * 100)
        return "\n".join(lines)

    def format_watchlist_summary(self, stocks: Sequence[StockSummary]) -> str:
        """Format compact watchlist rows."""
        if not stocks:
            return "No stocks found."

        lines = []
        lines.append("\n" + "=" * 80)
        lines.append(
            f"{'Symbol':<8} {'Open':>10} {'Close':>10} {'Change':>10} "
            f"{'%':>8} {'Volume':>10} {'Trend':>8}"
        )
        lines.append("-" * 80)
        for stock in stocks:
            lines.append(
                f"{stock.symbol:<8} {format_price(stock.open_price):>10} "
                f"{format_price(stock.close_price):>10} {_signed(stock.change):>10} "
                f"{_signed_pct(stock.change_percent):>8} {stock.volume:>10} "
                f"{stock.trend:>8}"
            )
        lines.append("=" * 80)
        return "\n".join(lines)

    def format_broker_activity(self, activity: BrokerActivity) -> str:
        """Format broker activity with buy/sell sections and net totals."""
        detector = activity.market_detector
        lines = []
        lines.append("\n" + "=" * 72)
        lines.append(f"Broker: {activity.broker_code} - {activity.broker_name}")
        lines.append(f"Period: {activity.date_from} to {activity.date_to}")
        if detector.broker_acc_dist:
            lines.append(
                f"Acc/Dist: {detector.broker_acc_dist}  "
                f"Buyers: {detector.total_buyers}  Sellers: {detector.total_sellers}"
            )

        header = (
            f"{'Stock':<8} {'Date':<12} {'Type':<8} {'Lot':>12} "
            f"{'Value':>12} {'Avg Price':>12}"
        )
        for title, transactions in (
            ("BUY", activity.buy_transactions),
            ("SELL", activity.sell_transactions),
        ):
            lines.append("=" * 72)
            lines.append(title)
            lines.append(header)
            lines.append("-" * 72)
            if not transactions:
                lines.append("No transactions.")
            for tx in transactions:
                lines.append(self._format_transaction_row(tx))

        lines.append("=" * 72)
        lines.append(
            f"{'Total Buy':<30} {format_magnitude(activity.total_buy_lot):>12} "
            f"{activity.total_buy_value_formatted:>12}"
        )
        lines.append(
            f"{'Total Sell':<30} {format_magnitude(activity.total_sell_lot):>12} "
            f"{activity.total_sell_value_formatted:>12}"
        )
        lines.append(
            f"{'Net':<30} {format_magnitude(activity.net_lot):>12} "
            f"{activity.net_value_formatted:>12}"
        )
        lines.append("=" * 72)
        return "\n".join(lines)

    def format_broker_summary(self, summary: BrokerActivitySummary) -> str:
        """Format compact broker activity."""
        lines = []
        lines.append("\n" + "=" * 60)
        lines.append(
            f"Broker: {summary.broker_code} - {summary.broker_name} ({summary.date})"
        )
        lines.append("=" * 60)
        lines.append(
            f"{'Side':<6} {'Stock':<8} {'Type':<8} {'Value':>12} {'Avg Price':>12}"
        )
        lines.append("-" * 60)
        for item in [*summary.buys, *summary.sells]:
            lines.append(
                f"{item.side:<6} {item.stock_code:<8} {item.investor_type:<8} "
                f"{item.value_formatted:>12} {item.avg_price_formatted:>12}"
            )
        lines.append("=" * 60)
        lines.append(f"{'Total Buy':<36} {summary.total_buy_value:>12}")
        lines.append(f"{'Total Sell':<36} {summary.total_sell_value:>12}")
        lines.append(f"{'Net':<36} {summary.net_value:>12}")
        lines.append("=" * 60)
        return "\n".join(lines)

    def format_tables(self, tables: Sequence[ParsedTable]) -> str:
        """Format financial tables; numeric cells are scaled, labels kept."""
        if not tables:
            return "No financial tables found."

        lines = []
        for table in tables:
            rows = [format_table_row(row) for row in table.rows]
            widths = _column_widths(table, rows)
            total_width = sum(widths) + 2 * max(len(widths) - 1, 0)

            lines.append("\n" + "=" * total_width)
            if table.headers:
                lines.append(
                    "  ".join(
                        cell.ljust(widths[idx]) if idx == 0 else cell.rjust(widths[idx])
                        for idx, cell in enumerate(table.headers)
                    )
                )
                lines.append("-" * total_width)
            for row in rows:
                lines.append(
                    "  ".join(
                        cell.ljust(widths[idx]) if idx == 0 else cell.rjust(widths[idx])
                        for idx, cell in enumerate(row)
                    )
                )
            lines.append("=" * total_width)

        return "\n".join(lines)

    def format_insider_activity(self, activity: InsiderActivity) -> str:
        """Format insider movements as table."""
        if not activity.movements:
            return "No insider activity found."

        lines = []
        lines.append("\n" + "=" * 100)
        lines.append(
            f"{'Date':<12} {'Symbol':<8} {'Name':<30} {'Action':<9} "
            f"{'Change':>16} {'Current %':>10} {'Source':<8}"
        )
        lines.append("-" * 100)
        for mv in activity.movements:
            change = mv.change_formatted or mv.change_value
            lines.append(
                f"{mv.date:<12} {mv.symbol:<8} {mv.name[:30]:<30} {mv.action:<9} "
                f"{change:>16} {mv.current_percentage:>10} {mv.source:<8}"
            )
        lines.append("=" * 100)
        return "\n".join(lines)

    def format_keystats(self, stats: KeyStats) -> str:
        """Format key statistics as labelled sections."""
        lines = []
        lines.append("\n" + "=" * 40)
        lines.append(f"Key Statistics: {stats.symbol}")
        for title, items in _keystats_sections(stats):
            lines.append("=" * 40)
            lines.append(title)
            lines.append("-" * 40)
            for label, value in items:
                lines.append(f"{label:<24} {value:>15}")
        lines.append("=" * 40)
        return "\n".join(lines)


class JsonFormatter:
    """Format data as JSON."""

    def format_watchlist(self, watchlist: Watchlist) -> str:
        """Format watchlist as JSON object."""
        return json.dumps(asdict(watchlist), indent=2)

    def format_watchlist_summary(self, stocks: Sequence[StockSummary]) -> str:
        """Format compact watchlist rows as JSON array."""
        return json.dumps([asdict(stock) for stock in stocks], indent=2)

    def format_broker_activity(self, activity: BrokerActivity) -> str:
        """Format broker activity as JSON object."""
        return json.dumps(asdict(activity), indent=2)

    def format_broker_summary(self, summary: BrokerActivitySummary) -> str:
        """Format compact broker activity as JSON object."""
        return json.dumps(asdict(summary), indent=2)

    def format_tables(self, tables: Sequence[ParsedTable]) -> str:
        """Format parsed tables as JSON array; cell text is left raw."""
        return json.dumps([asdict(table) for table in tables], indent=2)

    def format_insider_activity(self, activity: InsiderActivity) -> str:
        """Format insider activity as JSON object."""
        return json.dumps(asdict(activity), indent=2)

    def format_keystats(self, stats: KeyStats) -> str:
        """Format key statistics as JSON object."""
        return json.dumps(asdict(stats), indent=2)


class CsvFormatter:
    """Format data as CSV."""

    def format_watchlist(self, watchlist: Watchlist) -> str:
        """Format watchlist stocks as CSV."""
        if not watchlist.stocks:
            return ""

        output = StringIO()
        writer = csv.writer(output)

        # Write header
        writer.writerow(
            [
                "symbol",
                "name",
                "exchange",
                "last_price",
                "previous_close",
                "open_price",
                "high_price",
                "low_price",
                "change",
                "change_percent",
                "volume",
                "bid",
                "offer",
                "tradeable",
            ]
        )

        # Write data
        for stock in watchlist.stocks:
            writer.writerow(
                [
                    stock.symbol,
                    stock.name,
                    stock.exchange,
                    stock.last_price,
                    stock.previous_close,
                    stock.open_price,
                    stock.high_price,
                    stock.low_price,
                    stock.change,
                    stock.change_percent,
                    stock.volume,
                    "" if stock.bid is None else stock.bid,
                    "" if stock.offer is None else stock.offer,
                    stock.tradeable,
                ]
            )

        return output.getvalue()

    def format_watchlist_summary(self, stocks: Sequence[StockSummary]) -> str:
        """Format compact watchlist rows as CSV."""
        if not stocks:
            return ""

        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(
            ["symbol", "name", "open_price", "close_price", "change", "change_percent", "volume", "trend"]
        )
        for stock in stocks:
            writer.writerow(
                [
                    stock.symbol,
                    stock.name,
                    stock.open_price,
                    stock.close_price,
                    stock.change,
                    stock.change_percent,
                    stock.volume,
                    stock.trend,
                ]
            )
        return output.getvalue()

    def format_broker_activity(self, activity: BrokerActivity) -> str:
        """Format broker transactions as CSV, one row per fill."""
        transactions = [*activity.buy_transactions, *activity.sell_transactions]
        if not transactions:
            return ""

        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(
            [
                "side",
                "stock_code",
                "broker_code",
                "date",
                "investor_type",
                "lot",
                "value",
                "avg_price",
                "net_lot",
                "net_value",
            ]
        )
        for tx in transactions:
            is_buy = tx.side == "buy"
            writer.writerow(
                [
                    tx.side,
                    tx.stock_code,
                    tx.broker_code,
                    tx.date,
                    tx.investor_type,
                    tx.buy_lot if is_buy else tx.sell_lot,
                    tx.buy_value if is_buy else tx.sell_value,
                    tx.buy_avg_price if is_buy else tx.sell_avg_price,
                    tx.net_lot,
                    tx.net_value,
                ]
            )
        return output.getvalue()

    def format_broker_summary(self, summary: BrokerActivitySummary) -> str:
        """Format compact broker activity as CSV."""
        items = [*summary.buys, *summary.sells]
        if not items:
            return ""

        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(["side", "stock_code", "investor_type", "lot", "value", "avg_price"])
        for item in items:
            writer.writerow(
                [item.side, item.stock_code, item.investor_type, item.lot, item.value, item.avg_price]
            )
        return output.getvalue()

    def format_tables(self, tables: Sequence[ParsedTable]) -> str:
        """Format parsed tables as CSV blocks separated by a blank row."""
        if not tables:
            return ""

        output = StringIO()
        writer = csv.writer(output)
        for idx, table in enumerate(tables):
            if idx > 0:
                writer.writerow([])
            if table.headers:
                writer.writerow(table.headers)
            writer.writerows(table.rows)
        return output.getvalue()

    def format_insider_activity(self, activity: InsiderActivity) -> str:
        """Format insider movements as CSV."""
        if not activity.movements:
            return ""

        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(
            [
                "date",
                "symbol",
                "name",
                "action",
                "nationality",
                "previous_percentage",
                "current_percentage",
                "change_value",
                "source",
                "broker_code",
                "broker_group",
            ]
        )
        for mv in activity.movements:
            writer.writerow(
                [
                    mv.date,
                    mv.symbol,
                    mv.name,
                    mv.action,
                    mv.nationality,
                    mv.previous_percentage,
                    mv.current_percentage,
                    mv.change_value,
                    mv.source,
                    mv.broker_code,
                    mv.broker_group,
                ]
            )
        return output.getvalue()

    def format_keystats(self, stats: KeyStats) -> str:
        """Format key statistics as CSV, one row per metric."""
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(["symbol", "section", "metric", "value"])
        for title, items in _keystats_sections(stats):
            for label, value in items:
                writer.writerow([stats.symbol, title, label, value])
        return output.getvalue()


def get_formatter(format_type: str) -> FormatterProtocol:
    """Get formatter instance by type.

    Args:
        format_type: One of 'table', 'json', or 'csv'

    Returns:
        Formatter instance. Defaults to TableFormatter for unknown types.
    """
    formatters = {
        "table": TableFormatter(),
        "json": JsonFormatter(),
        "csv": CsvFormatter(),
    }
    return formatters.get(format_type.lower(), TableFormatter())
