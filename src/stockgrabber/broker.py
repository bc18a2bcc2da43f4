from typing import Optional

from .client import StockbitClient
from .formatters import get_formatter
from .models import (
    AccDistStat,
    BrokerActivity,
    BrokerActivitySummary,
    BrokerTransaction,
    BrokerTransactionSummary,
    MarketDetector,
)
from .parsing import format_compact_date, format_magnitude, format_price, parse_scientific

PLACEHOLDER = "-"


def serialize_buy_transaction(raw: dict) -> BrokerTransaction:
    """Transform a raw buy-side record.

    Args:
        raw: Raw item from ``broker_summary.brokers_buy``

    Returns:
        BrokerTransaction with sell-side fields zeroed
    """
    buy_lot = parse_scientific(raw.get("blot"))
    buy_value = parse_scientific(raw.get("bval"))
    buy_avg_price = parse_scientific(raw.get("netbs_buy_avg_price"))

    return BrokerTransaction(
        stock_code=raw.get("netbs_stock_code", ""),
        broker_code=raw.get("netbs_broker_code", ""),
        date=format_compact_date(raw.get("netbs_date", "")),
        investor_type=raw.get("type", ""),
        side="buy",
        buy_lot=buy_lot,
        buy_value=buy_value,
        buy_avg_price=buy_avg_price,
        sell_lot=0,
        sell_value=0,
        sell_avg_price=0,
        net_lot=buy_lot,
        net_value=buy_value,
        buy_value_formatted=format_magnitude(buy_value),
        sell_value_formatted=PLACEHOLDER,
        net_value_formatted=format_magnitude(buy_value),
        buy_avg_price_formatted=format_price(buy_avg_price),
        sell_avg_price_formatted=PLACEHOLDER,
    )


def serialize_sell_transaction(raw: dict) -> BrokerTransaction:
    """Transform a raw sell-side record.

    Upstream encodes sell lot/value as negative numbers; they are stored
    as magnitudes and the sign only shows up in the net fields.

    Args:
        raw: Raw item from ``broker_summary.brokers_sell``

    Returns:
        BrokerTransaction with buy-side fields zeroed
    """
    sell_lot = abs(parse_scientific(raw.get("slot")))
    sell_value = abs(parse_scientific(raw.get("sval")))
    sell_avg_price = parse_scientific(raw.get("netbs_sell_avg_price"))

    return BrokerTransaction(
        stock_code=raw.get("netbs_stock_code", ""),
        broker_code=raw.get("netbs_broker_code", ""),
        date=format_compact_date(raw.get("netbs_date", "")),
        investor_type=raw.get("type", ""),
        side="sell",
        buy_lot=0,
        buy_value=0,
        buy_avg_price=0,
        sell_lot=sell_lot,
        sell_value=sell_value,
        sell_avg_price=sell_avg_price,
        net_lot=-sell_lot,
        net_value=-sell_value,
        buy_value_formatted=PLACEHOLDER,
        sell_value_formatted=format_magnitude(sell_value),
        net_value_formatted=format_magnitude(-sell_value),
        buy_avg_price_formatted=PLACEHOLDER,
        sell_avg_price_formatted=format_price(sell_avg_price),
    )


def serialize_accdist_stat(raw: Optional[dict]) -> AccDistStat:
    """Rename an accumulation/distribution bucket. Values are already numeric."""
    raw = raw or {}
    return AccDistStat(
        acc_dist=raw.get("accdist", ""),
        amount=raw.get("amount") or 0,
        percent=raw.get("percent") or 0,
        volume=raw.get("vol") or 0,
    )


def serialize_market_detector(raw: Optional[dict]) -> MarketDetector:
    """Transform the ``bandar_detector`` block."""
    raw = raw or {}
    return MarketDetector(
        average_price=raw.get("average") or 0,
        total_value=raw.get("value") or 0,
        total_volume=raw.get("volume") or 0,
        total_buyers=raw.get("total_buyer") or 0,
        total_sellers=raw.get("total_seller") or 0,
        broker_acc_dist=raw.get("broker_accdist", ""),
        average=serialize_accdist_stat(raw.get("avg")),
        average_5day=serialize_accdist_stat(raw.get("avg5")),
        top1=serialize_accdist_stat(raw.get("top1")),
        top3=serialize_accdist_stat(raw.get("top3")),
        top5=serialize_accdist_stat(raw.get("top5")),
        top10=serialize_accdist_stat(raw.get("top10")),
    )


def _split_sides(raw: dict) -> tuple[dict, list[dict], list[dict]]:
    """Return (data, raw buys, raw sells) with absent collections as empty lists."""
    data = (raw or {}).get("data") or {}
    summary = data.get("broker_summary") or {}
    return data, summary.get("brokers_buy") or [], summary.get("brokers_sell") or []


def serialize_broker_activity(raw: dict) -> BrokerActivity:
    """Transform a broker activity response and compute buy/sell/net totals."""
    data, raw_buys, raw_sells = _split_sides(raw)

    buy_transactions = tuple(serialize_buy_transaction(b) for b in raw_buys)
    sell_transactions = tuple(serialize_sell_transaction(s) for s in raw_sells)

    total_buy_value = sum(t.buy_value for t in buy_transactions)
    total_buy_lot = sum(t.buy_lot for t in buy_transactions)
    total_sell_value = sum(t.sell_value for t in sell_transactions)
    total_sell_lot = sum(t.sell_lot for t in sell_transactions)
    net_value = total_buy_value - total_sell_value
    net_lot = total_buy_lot - total_sell_lot

    return BrokerActivity(
        broker_code=data.get("broker_code", ""),
        broker_name=data.get("broker_name", ""),
        date_from=data.get("from", ""),
        date_to=data.get("to", ""),
        market_detector=serialize_market_detector(data.get("bandar_detector")),
        buy_transactions=buy_transactions,
        total_buy_value=total_buy_value,
        total_buy_lot=total_buy_lot,
        sell_transactions=sell_transactions,
        total_sell_value=total_sell_value,
        total_sell_lot=total_sell_lot,
        net_value=net_value,
        net_lot=net_lot,
        total_buy_value_formatted=format_magnitude(total_buy_value),
        total_sell_value_formatted=format_magnitude(total_sell_value),
        net_value_formatted=format_magnitude(net_value),
    )


def _summarize_transaction(transaction: BrokerTransaction) -> BrokerTransactionSummary:
    """Project a transaction onto the side it belongs to."""
    if transaction.side == "buy":
        lot = transaction.buy_lot
        value = transaction.buy_value
        avg_price = transaction.buy_avg_price
    else:
        lot = transaction.sell_lot
        value = transaction.sell_value
        avg_price = transaction.sell_avg_price

    return BrokerTransactionSummary(
        stock_code=transaction.stock_code,
        investor_type=transaction.investor_type,
        side=transaction.side,
        lot=lot,
        value=value,
        avg_price=avg_price,
        value_formatted=format_magnitude(value),
        avg_price_formatted=format_price(avg_price),
    )


def serialize_broker_activity_summary(raw: dict) -> BrokerActivitySummary:
    """Compact broker view sharing the sign handling of the full serializer."""
    data, raw_buys, raw_sells = _split_sides(raw)

    buys = tuple(
        _summarize_transaction(serialize_buy_transaction(b)) for b in raw_buys
    )
    sells = tuple(
        _summarize_transaction(serialize_sell_transaction(s)) for s in raw_sells
    )

    total_buy = sum(b.value for b in buys)
    total_sell = sum(s.value for s in sells)

    return BrokerActivitySummary(
        broker_code=data.get("broker_code", ""),
        broker_name=data.get("broker_name", ""),
        date=data.get("from", ""),
        buys=buys,
        sells=sells,
        total_buy_value=format_magnitude(total_buy),
        total_sell_value=format_magnitude(total_sell),
        net_value=format_magnitude(total_buy - total_sell),
    )


def get_broker_activity_data(
    client: StockbitClient,
    broker_code: str,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> BrokerActivity:
    """Fetch and serialize broker activity.

    Args:
        client: Authenticated StockbitClient
        broker_code: Broker code (e.g., 'YP')
        start_date: Optional range start, YYYY-MM-DD
        end_date: Optional range end, YYYY-MM-DD

    Returns:
        BrokerActivity object
    """
    raw = client.get_broker_activity(
        broker_code, start_date=start_date, end_date=end_date
    )
    return serialize_broker_activity(raw)


def print_broker_activity(
    client: StockbitClient,
    broker_code: str,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    summary: bool = False,
    output_format: str = "table",
    verbose: bool = False,
) -> None:
    """Fetch and print broker activity.

    Args:
        client: Authenticated StockbitClient
        broker_code: Broker code (e.g., 'YP')
        start_date: Optional range start, YYYY-MM-DD
        end_date: Optional range end, YYYY-MM-DD
        summary: If True, print the compact side-tagged view
        output_format: Output format - 'table', 'json', or 'csv' (default 'table')
        verbose: If True, print status messages during execution
    """
    if verbose:
        print(f"\nFetching broker activity for {broker_code}...")

    formatter = get_formatter(output_format)

    if summary:
        raw = client.get_broker_activity(
            broker_code, start_date=start_date, end_date=end_date
        )
        print(formatter.format_broker_summary(serialize_broker_activity_summary(raw)))
        return

    activity = get_broker_activity_data(client, broker_code, start_date, end_date)
    print(formatter.format_broker_activity(activity))
