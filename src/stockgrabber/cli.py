import json
from enum import Enum
from typing import Optional

import typer

from .auth import get_authenticated_client
from .auth import login as auth_login
from .auth import logout as auth_logout
from .auth import refresh_session
from .broker import print_broker_activity
from .client import OPERATIONS, StockbitClient
from .financials import print_financials
from .insider import print_insider_activity
from .keystats import print_keystats
from .watchlist import print_watchlist

app = typer.Typer(help="Stockbit dashboard CLI", no_args_is_help=True)

TOKEN_HELP = "Bearer access token. Falls back to the token stored by 'login'."


class OutputFormat(str, Enum):
    """Output format options."""

    table = "table"
    json = "json"
    csv = "csv"


def _is_verbose(ctx: typer.Context) -> bool:
    return ctx.obj.get("verbose") if ctx.obj else False


def _require_client(ctx: typer.Context, token: Optional[str]) -> StockbitClient:
    client = get_authenticated_client(token=token, verbose=_is_verbose(ctx))
    if not client:
        print("Could not authenticate.")
        raise typer.Exit(code=1)
    return client


@app.command()
def login(
    ctx: typer.Context,
    token: str = typer.Option(
        ..., "--token", "-t", prompt="Access token", help="Bearer access token."
    ),
    refresh_token: Optional[str] = typer.Option(
        None, "--refresh-token", "-r", help="Refresh token used to renew the access token."
    ),
    cookies: Optional[str] = typer.Option(
        None, "--cookie", "-c", help="Optional session cookie sent with every request."
    ),
):
    """
    Store an access token (and optional refresh token) in the system keyring.
    """
    auth_login(
        token, refresh_token=refresh_token, cookies=cookies, verbose=_is_verbose(ctx)
    )
    print("Login routine completed successfully.")


@app.command()
def logout(ctx: typer.Context):
    """
    Clear stored tokens.
    """
    auth_logout(verbose=_is_verbose(ctx))


@app.command()
def refresh(ctx: typer.Context):
    """
    Exchange the stored refresh token for a new access token.
    """
    bundle = refresh_session(verbose=_is_verbose(ctx))
    if bundle:
        print("Token refresh completed successfully.")
    else:
        print("Token refresh failed.")
        raise typer.Exit(code=1)


@app.command()
def watchlist(
    ctx: typer.Context,
    summary: bool = typer.Option(
        False, "--summary", "-s", help="Show the compact per-stock view."
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.table, "--format", "-f", help="Output format."
    ),
    token: Optional[str] = typer.Option(
        None, "--token", "-t", envvar="STOCKBIT_TOKEN", help=TOKEN_HELP
    ),
):
    """
    Show your first watchlist with prices, changes and volume.
    """
    client = _require_client(ctx, token)
    try:
        print_watchlist(
            client,
            summary=summary,
            output_format=output_format.value,
            verbose=_is_verbose(ctx),
        )
    except Exception as e:
        print(f"Error fetching watchlist: {e}")
        raise typer.Exit(code=1)


@app.command()
def broker(
    ctx: typer.Context,
    broker_code: str = typer.Argument(..., help="Broker code (e.g., 'YP')."),
    start_date: Optional[str] = typer.Option(
        None, "--from", help="Start date, YYYY-MM-DD."
    ),
    end_date: Optional[str] = typer.Option(None, "--to", help="End date, YYYY-MM-DD."),
    summary: bool = typer.Option(
        False, "--summary", "-s", help="Show the compact side-tagged view."
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.table, "--format", "-f", help="Output format."
    ),
    token: Optional[str] = typer.Option(
        None, "--token", "-t", envvar="STOCKBIT_TOKEN", help=TOKEN_HELP
    ),
):
    """
    Show a broker's buy/sell activity with totals and net position.
    """
    client = _require_client(ctx, token)
    try:
        print_broker_activity(
            client,
            broker_code.upper(),
            start_date=start_date,
            end_date=end_date,
            summary=summary,
            output_format=output_format.value,
            verbose=_is_verbose(ctx),
        )
    except Exception as e:
        print(f"Error fetching broker activity: {e}")
        raise typer.Exit(code=1)


@app.command()
def financials(
    ctx: typer.Context,
    symbol: str = typer.Argument(..., help="Stock symbol (e.g., 'BBCA')."),
    output_format: OutputFormat = typer.Option(
        OutputFormat.table, "--format", "-f", help="Output format."
    ),
    token: Optional[str] = typer.Option(
        None, "--token", "-t", envvar="STOCKBIT_TOKEN", help=TOKEN_HELP
    ),
):
    """
    Show financial statement tables for a stock.
    """
    client = _require_client(ctx, token)
    try:
        print_financials(
            client,
            symbol.upper(),
            output_format=output_format.value,
            verbose=_is_verbose(ctx),
        )
    except Exception as e:
        print(f"Error fetching financials: {e}")
        raise typer.Exit(code=1)


@app.command()
def keystats(
    ctx: typer.Context,
    symbol: str = typer.Argument(..., help="Stock symbol (e.g., 'BBCA')."),
    output_format: OutputFormat = typer.Option(
        OutputFormat.table, "--format", "-f", help="Output format."
    ),
    token: Optional[str] = typer.Option(
        None, "--token", "-t", envvar="STOCKBIT_TOKEN", help=TOKEN_HELP
    ),
):
    """
    Show valuation, profitability, dividend and size statistics for a stock.
    """
    client = _require_client(ctx, token)
    try:
        print_keystats(
            client,
            symbol.upper(),
            output_format=output_format.value,
            verbose=_is_verbose(ctx),
        )
    except Exception as e:
        print(f"Error fetching key stats: {e}")
        raise typer.Exit(code=1)


@app.command()
def insider(
    ctx: typer.Context,
    start_date: Optional[str] = typer.Option(
        None, "--from", help="Start date, YYYY-MM-DD."
    ),
    end_date: Optional[str] = typer.Option(None, "--to", help="End date, YYYY-MM-DD."),
    action_type: str = typer.Option(
        "ACTION_TYPE_UNSPECIFIED",
        "--action",
        "-a",
        help="ACTION_TYPE_UNSPECIFIED, ACTION_TYPE_BUY, ACTION_TYPE_SELL or ACTION_TYPE_TRANSFER.",
    ),
    source_type: str = typer.Option(
        "SOURCE_TYPE_UNSPECIFIED",
        "--source",
        help="SOURCE_TYPE_UNSPECIFIED, SOURCE_TYPE_KSEI or SOURCE_TYPE_IDX.",
    ),
    page: int = typer.Option(1, "--page", "-p", help="Page number."),
    limit: int = typer.Option(20, "--limit", "-n", help="Results per page."),
    output_format: OutputFormat = typer.Option(
        OutputFormat.table, "--format", "-f", help="Output format."
    ),
    token: Optional[str] = typer.Option(
        None, "--token", "-t", envvar="STOCKBIT_TOKEN", help=TOKEN_HELP
    ),
):
    """
    Show major shareholder movements.
    """
    client = _require_client(ctx, token)
    try:
        print_insider_activity(
            client,
            start_date=start_date,
            end_date=end_date,
            action_type=action_type,
            source_type=source_type,
            page=page,
            limit=limit,
            output_format=output_format.value,
            verbose=_is_verbose(ctx),
        )
    except Exception as e:
        print(f"Error fetching insider activity: {e}")
        raise typer.Exit(code=1)


@app.command()
def fetch(
    ctx: typer.Context,
    operation: str = typer.Argument(
        ..., help=f"One of: {', '.join(sorted(OPERATIONS))}."
    ),
    symbol: Optional[str] = typer.Option(
        None, "--symbol", "-s", help="Stock symbol, or broker code for 'broker'."
    ),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Search text."),
    token: Optional[str] = typer.Option(
        None, "--token", "-t", envvar="STOCKBIT_TOKEN", help=TOKEN_HELP
    ),
):
    """
    Print the raw upstream JSON for an operation.
    """
    if operation not in OPERATIONS:
        print(f"Unknown operation '{operation}'.")
        raise typer.Exit(code=1)

    client = _require_client(ctx, token)
    try:
        data = client.fetch(
            operation, symbol=symbol.upper() if symbol else None, query=query
        )
    except Exception as e:
        print(f"Error fetching {operation}: {e}")
        raise typer.Exit(code=1)
    print(json.dumps(data, indent=2))


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show detailed status messages during execution."
    ),
):
    """
    Stockbit dashboard CLI
    """
    ctx.obj = {"verbose": verbose}
