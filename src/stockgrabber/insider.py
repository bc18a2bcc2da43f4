from typing import Optional

from .client import StockbitClient
from .formatters import get_formatter
from .models import InsiderActivity, InsiderMovement

ACTION_LABELS = {
    "ACTION_TYPE_BUY": "Buy",
    "ACTION_TYPE_SELL": "Sell",
    "ACTION_TYPE_TRANSFER": "Transfer",
}

NATIONALITY_LABELS = {
    "NATIONALITY_TYPE_LOCAL": "Local",
    "NATIONALITY_TYPE_FOREIGN": "Foreign",
}

BROKER_GROUP_LABELS = {
    "BROKER_GROUP_LOCAL": "Local",
    "BROKER_GROUP_FOREIGN": "Foreign",
    "BROKER_GROUP_GOVERNMENT": "Gov",
}


def serialize_insider_movement(raw: dict) -> InsiderMovement:
    """Transform one major holder movement. Values stay as display strings."""
    previous = raw.get("previous") or {}
    current = raw.get("current") or {}
    changes = raw.get("changes") or {}
    data_source = raw.get("data_source") or {}
    broker_detail = raw.get("broker_detail") or {}

    return InsiderMovement(
        id=str(raw.get("id", "")),
        name=raw.get("name", ""),
        symbol=raw.get("symbol", ""),
        date=raw.get("date", ""),
        previous_value=previous.get("value", ""),
        previous_percentage=previous.get("percentage", ""),
        current_value=current.get("value", ""),
        current_percentage=current.get("percentage", ""),
        change_value=changes.get("value", ""),
        change_percentage=changes.get("percentage", ""),
        change_formatted=changes.get("formatted_value", ""),
        nationality=NATIONALITY_LABELS.get(raw.get("nationality"), "-"),
        action=ACTION_LABELS.get(raw.get("action_type"), "Unknown"),
        source=data_source.get("label", ""),
        broker_code=broker_detail.get("code", ""),
        broker_group=BROKER_GROUP_LABELS.get(broker_detail.get("group"), "-"),
        badges=tuple(raw.get("badges") or []),
    )


def serialize_insider_activity(raw: dict) -> InsiderActivity:
    """Transform an insider activity response."""
    data = (raw or {}).get("data") or {}
    return InsiderActivity(
        movements=tuple(
            serialize_insider_movement(m) for m in data.get("movement") or []
        ),
        is_more=bool(data.get("is_more", False)),
    )


def print_insider_activity(
    client: StockbitClient,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    action_type: str = "ACTION_TYPE_UNSPECIFIED",
    source_type: str = "SOURCE_TYPE_UNSPECIFIED",
    page: int = 1,
    limit: int = 20,
    output_format: str = "table",
    verbose: bool = False,
) -> None:
    """Fetch and print insider activity.

    Args:
        client: Authenticated StockbitClient
        start_date: Optional range start, YYYY-MM-DD
        end_date: Optional range end, YYYY-MM-DD
        action_type: Upstream action filter
        source_type: Upstream source filter
        page: Page number
        limit: Page size
        output_format: Output format - 'table', 'json', or 'csv' (default 'table')
        verbose: If True, print status messages during execution
    """
    if verbose:
        print("\nFetching insider activity...")

    raw = client.get_insider_activity(
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
        action_type=action_type,
        source_type=source_type,
    )
    activity = serialize_insider_activity(raw)

    if not activity.movements:
        print("No insider activity found.")
        return

    formatter = get_formatter(output_format)
    print(formatter.format_insider_activity(activity))
    if verbose and activity.is_more:
        print(f"More results available, use --page {page + 1}")
