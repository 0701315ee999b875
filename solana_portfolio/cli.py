"""Command-line interface for the portfolio tracker."""

import logging
import os
import sys

# Fix Windows encoding issues
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")
    try:
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")
    except AttributeError:
        pass

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import Config
from .models import FetchOutcome, GroupedTokens, PortfolioView, PriceFetchResult, TrendingResult
from .tracker import PortfolioTracker, load_holdings


console = Console(force_terminal=True)

_OUTCOME_STYLE = {
    FetchOutcome.FRESH: "green",
    FetchOutcome.CACHED: "green",
    FetchOutcome.STALE: "yellow",
    FetchOutcome.PARTIAL: "yellow",
    FetchOutcome.UNAVAILABLE: "red",
}

USAGE = """
[bold]Usage:[/bold]
  python -m solana_portfolio.cli portfolio FILE.json [--sort value|balance|symbol] [--grouped]
  python -m solana_portfolio.cli trending [CATEGORY] [INTERVAL]
  python -m solana_portfolio.cli price MINT [MINT ...]
  python -m solana_portfolio.cli --help

[bold]Trending:[/bold]
  CATEGORY: toptrending, toporganicscore, toptraded   (default toptrending)
  INTERVAL: 5m, 1h, 6h, 24h                           (default 1h)

[bold]Holdings file:[/bold]
  A JSON list of records with wallet_address, token_mint, token_symbol,
  balance and optionally token_price / usd_value. Records without a price
  are priced via Jupiter (CoinGecko fallback).
"""


def print_banner():
    """Print the application banner."""
    banner = (
        "\n[bold cyan]"
        "+-----------------------------------------------------------+\n"
        "|           SOLANA PORTFOLIO                                |\n"
        "|     Aggregate holdings across your wallets                |\n"
        "+-----------------------------------------------------------+"
        "[/bold cyan]\n"
    )
    console.print(banner)


def _short(address: str) -> str:
    return f"{address[:4]}...{address[-4:]}" if len(address) > 12 else address


def _outcome(outcome: FetchOutcome) -> str:
    style = _OUTCOME_STYLE[outcome]
    return f"[{style}]{outcome.value}[/{style}]"


def _token_table(title: str, tokens) -> Table:
    table = Table(title=title)
    table.add_column("#", style="cyan", width=4)
    table.add_column("Symbol", width=10)
    table.add_column("Balance", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Value (USD)", justify="right", style="green")
    table.add_column("Wallets", justify="right")

    for i, token in enumerate(tokens, 1):
        table.add_row(
            str(i),
            token.symbol,
            f"{token.balance:,.6f}",
            f"${token.usd_price:,.6f}" if token.usd_price else "N/A",
            f"${token.usd_value:,.2f}",
            str(token.wallet_count),
        )
    return table


def display_portfolio(view: PortfolioView):
    """Display an aggregated portfolio."""
    console.print()

    if isinstance(view.aggregated, GroupedTokens):
        console.print(_token_table("Native", view.aggregated.native))
        console.print(_token_table("SPL Tokens", view.aggregated.spl))
    else:
        console.print(_token_table("Portfolio", view.aggregated))

    if view.by_wallet:
        wallets = Table(title="By Wallet")
        wallets.add_column("Wallet", style="green")
        wallets.add_column("Tokens", justify="right")
        wallets.add_column("Value (USD)", justify="right")
        for address, holdings in view.by_wallet.items():
            wallets.add_row(
                address,
                str(len(holdings)),
                f"${sum(h.usd_value or 0 for h in holdings):,.2f}",
            )
        console.print(wallets)

    stats = view.statistics
    console.print(Panel(
        f"Total holdings: [bold]{stats.total_tokens}[/bold]\n"
        f"Unique priced tokens: [bold]{stats.unique_tokens}[/bold]\n"
        f"Total value: [bold green]${stats.total_value:,.2f}[/bold green]",
        title="Statistics",
        border_style="cyan",
    ))


def display_prices(mints: list[str], result: PriceFetchResult):
    """Display price quotes for requested mints."""
    table = Table(title=f"Prices ({_outcome(result.outcome)})")
    table.add_column("Mint")
    table.add_column("Price", justify="right", style="green")
    table.add_column("24h", justify="right")

    for mint in mints:
        quote = result.get(mint)
        if quote is None:
            table.add_row(mint, "[dim]unknown[/dim]", "")
        else:
            table.add_row(mint, f"${quote.usd_price:,.8f}", f"{quote.price_change_24h:+.2f}%")

    console.print(table)


def display_trending(category: str, interval: str, result: TrendingResult):
    """Display a trending token list."""
    if not result.available:
        console.print(Panel(
            "Trending data is unavailable right now.",
            title="No Data",
            border_style="red",
        ))
        return

    table = Table(title=f"{category} / {interval} ({_outcome(result.outcome)})")
    table.add_column("#", style="cyan", width=4)
    table.add_column("Symbol", width=10)
    table.add_column("Name", width=25)
    table.add_column("Price", justify="right")
    table.add_column(f"{interval} change", justify="right")
    table.add_column("Market Cap", justify="right")
    table.add_column("Liquidity", justify="right")
    table.add_column("Mint", style="dim")

    for i, token in enumerate(result.tokens[:25], 1):
        table.add_row(
            str(i),
            token.symbol,
            token.name[:25],
            f"${token.usd_price:,.8f}",
            f"{token.price_change(interval):+.2f}%",
            f"${token.mcap:,.0f}" if token.mcap else "N/A",
            f"${token.liquidity:,.0f}" if token.liquidity else "N/A",
            _short(token.id),
        )

    console.print(table)


def run_portfolio(tracker: PortfolioTracker, args: list[str]):
    """Run the portfolio command."""
    if not args:
        console.print("[red]portfolio requires a holdings file[/red]")
        return

    path = args[0]
    sort_by = "value"
    if "--sort" in args:
        idx = args.index("--sort")
        if idx + 1 >= len(args):
            console.print("[red]--sort requires a value[/red]")
            return
        sort_by = args[idx + 1]
    group_view = "grouped" if "--grouped" in args else "flat"

    try:
        holdings = load_holdings(path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Could not load holdings: {e}[/red]")
        return

    console.print(f"[bold]Pricing {len(holdings)} holdings...[/bold]")
    view = tracker.portfolio(holdings, sort_by=sort_by, group_view=group_view)
    display_portfolio(view)


def main():
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO if "--verbose" in sys.argv else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    args = [a for a in sys.argv[1:] if a != "--verbose"]

    print_banner()

    if not args or args[0] == "--help":
        console.print(USAGE)
        return

    try:
        config = Config.load()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        return

    tracker = PortfolioTracker(config)
    try:
        command, rest = args[0], args[1:]
        if command == "portfolio":
            run_portfolio(tracker, rest)
        elif command == "trending":
            category = rest[0] if len(rest) > 0 else "toptrending"
            interval = rest[1] if len(rest) > 1 else "1h"
            try:
                result = tracker.trending(category, interval)
            except ValueError as e:
                console.print(f"[red]{e}[/red]")
                return
            display_trending(category, interval, result)
        elif command == "price" and rest:
            display_prices(rest, tracker.prices(rest))
        else:
            console.print(USAGE)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
    finally:
        tracker.close()


if __name__ == "__main__":
    main()
