"""CLI for duo-ledger using Typer."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import timedelta
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .chat import ChatDispatcher, render_balance
from .config import Settings, load_settings
from .db import Database
from .models import ChatMessage, LedgerEntry, Member
from .money import format_amount
from .service import LedgerService
from .session import SessionStore
from .ui import run_chat_loop

app = typer.Typer(
    name="duo-ledger",
    help="Shared expense ledger with a 50/50 balance for two people",
)

console = Console()

MEMBER_OPTION = typer.Option(..., "--member", "-m", help="Id of the paying member")
NAME_OPTION = typer.Option(None, "--name", "-n", help="Display name for the member")
MONTH_OPTION = typer.Option(None, "--month", help="Month as YYYY-MM or MM")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Verbose output")


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@contextmanager
def open_service(verbose: bool) -> Iterator[tuple[LedgerService, Settings]]:
    """Load settings and yield a service; report errors and exit non-zero."""
    setup_logging(verbose)
    db = None
    try:
        settings = load_settings()
        db = Database(settings.database_path)
        yield LedgerService(settings, db), settings
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            raise
        sys.exit(1)
    finally:
        if db is not None:
            db.close()


def format_money(amount_minor: int, currency: str, use_color: bool = True) -> str:
    """Format minor units with currency, colored by sign."""
    text = f"{format_amount(amount_minor)} {currency}"
    if not use_color:
        return text
    color = "red" if amount_minor < 0 else "green"
    return f"[{color}]{text}[/{color}]"


def display_entries(
    entries: list[LedgerEntry], members: dict[str, Member], title: str
):
    """Display ledger entries in a table."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Date", width=10)
    table.add_column("Amount", justify="right")
    table.add_column("Category", style="yellow")
    table.add_column("Description", style="cyan")
    table.add_column("Paid by")
    table.add_column("Type", style="dim")

    for entry in entries:
        payer = members.get(entry.payer_id) or Member(id=entry.payer_id)
        desc = entry.description
        table.add_row(
            entry.id,
            entry.occurred_at.date().isoformat(),
            format_money(entry.amount_minor, entry.currency, use_color=False),
            entry.category,
            desc[:40] + "..." if len(desc) > 40 else desc,
            payer.display_name,
            "debt payment" if entry.is_settlement else "expense",
        )

    console.print(table)


@app.command()
def add(
    amount: str = typer.Argument(..., help='Amount, e.g. "12500" or "12.500,50"'),
    description: str = typer.Argument(..., help="What was bought"),
    member: str = MEMBER_OPTION,
    name: str | None = NAME_OPTION,
    category: str | None = typer.Option(None, "--category", "-c", help="Category"),
    verbose: bool = VERBOSE_OPTION,
):
    """Record an expense paid by a member."""
    with open_service(verbose) as (service, settings):
        payer = service.register_member(member, first_name=name)
        entry = service.add_expense(payer, amount, description, category)
        console.print(
            f"[bold green]✓ Recorded[/bold green] "
            f"{format_money(entry.amount_minor, entry.currency)} "
            f"({entry.category}) paid by {payer.display_name}"
        )
        console.print(f"  [dim]ID: {entry.id}[/dim]")


@app.command()
def pay(
    amount: str = typer.Argument(..., help="Amount paid back"),
    description: str = typer.Argument("", help="Optional note"),
    member: str = MEMBER_OPTION,
    name: str | None = NAME_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Record a debt payment from a member to the other party."""
    with open_service(verbose) as (service, settings):
        payer = service.register_member(member, first_name=name)
        entry = service.add_debt_payment(payer, amount, description)
        console.print(
            f"[bold green]✓ Debt payment recorded[/bold green] "
            f"{format_money(entry.amount_minor, entry.currency)} "
            f"by {payer.display_name}"
        )
        console.print(f"  [dim]ID: {entry.id}[/dim]")


@app.command()
def balance(month: str | None = MONTH_OPTION, verbose: bool = VERBOSE_OPTION):
    """Show who owes whom for a month."""
    with open_service(verbose) as (service, settings):
        period = service.resolve_period(month)
        result = service.get_balance(month)
        if result is None:
            console.print(
                f"[yellow]No expenses recorded in {period.name}; "
                f"nothing to settle.[/yellow]"
            )
            return
        console.print(
            render_balance(result, period.name, settings.currency), markup=False
        )


@app.command()
def month(month: str | None = MONTH_OPTION, verbose: bool = VERBOSE_OPTION):
    """Show the total spent in a month."""
    with open_service(verbose) as (service, settings):
        total, period = service.get_month_total(month)
        console.print(
            f"[bold]Total for {period.name}:[/bold] "
            f"{format_money(total, settings.currency)}"
        )


@app.command()
def summary(month: str | None = MONTH_OPTION, verbose: bool = VERBOSE_OPTION):
    """Show spending per category for a month."""
    with open_service(verbose) as (service, settings):
        totals, period = service.get_month_summary(month)
        if not totals:
            console.print(f"[yellow]No expenses recorded in {period.name}.[/yellow]")
            return

        table = Table(title=f"Summary {period.name}", header_style="bold magenta")
        table.add_column("Category", style="yellow")
        table.add_column("Amount", justify="right")
        for category, amount in totals.items():
            table.add_row(category, format_money(amount, settings.currency, False))
        table.add_row(
            "[bold]Total[/bold]",
            format_money(sum(totals.values()), settings.currency, False),
        )
        console.print(table)


@app.command()
def year(
    year: str | None = typer.Argument(None, help="Year as YYYY"),
    verbose: bool = VERBOSE_OPTION,
):
    """Show month-by-month totals for a year."""
    with open_service(verbose) as (service, settings):
        months = service.get_year_summary(year)
        table = Table(title=f"Year {months[0].year}", header_style="bold magenta")
        table.add_column("Month")
        table.add_column("Amount", justify="right")
        for item in months:
            table.add_row(
                item.name, format_money(item.total_minor, settings.currency, False)
            )
        table.add_row(
            "[bold]Total[/bold]",
            format_money(
                sum(item.total_minor for item in months), settings.currency, False
            ),
        )
        console.print(table)


@app.command()
def last(
    count: int | None = typer.Argument(None, help="Number of entries"),
    verbose: bool = VERBOSE_OPTION,
):
    """List the most recently recorded entries."""
    with open_service(verbose) as (service, settings):
        entries = service.get_last_entries(count)
        if not entries:
            console.print("[yellow]No entries recorded yet.[/yellow]")
            return
        display_entries(entries, service.members_by_id(), "Last entries")


@app.command()
def edit(
    entry_id: str = typer.Argument(..., help="Entry ID"),
    amount: str = typer.Argument(..., help="New amount"),
    verbose: bool = VERBOSE_OPTION,
):
    """Change the amount of an entry."""
    with open_service(verbose) as (service, settings):
        entry = service.update_entry_amount(entry_id, amount)
        console.print(
            f"[bold green]✓ Updated[/bold green] {entry.id} to "
            f"{format_money(entry.amount_minor, entry.currency)}"
        )


@app.command()
def delete(
    entry_id: str = typer.Argument(..., help="Entry ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    verbose: bool = VERBOSE_OPTION,
):
    """Delete an entry."""
    with open_service(verbose) as (service, settings):
        if not yes:
            confirm = input(f"Delete entry {entry_id}? [y/N] ").strip().lower()
            if confirm not in ("y", "yes"):
                console.print("[yellow]Cancelled.[/yellow]")
                return

        if service.delete_entry(entry_id):
            console.print(f"[bold green]✓ Deleted[/bold green] {entry_id}")
        else:
            console.print(f"[red]✗ Entry not found: {entry_id}[/red]")
            sys.exit(1)


@app.command()
def find(
    term: str = typer.Argument(..., help="Text to search in descriptions"),
    month: str | None = MONTH_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Search entries by description."""
    with open_service(verbose) as (service, settings):
        entries, period = service.find_entries(term, month)
        scope = f" in {period.name}" if period else ""
        if not entries:
            console.print(f'[yellow]No entries matching "{term}"{scope}.[/yellow]')
            return
        display_entries(entries, service.members_by_id(), f'"{term}"{scope}')


@app.command()
def export(
    month: str | None = MONTH_OPTION,
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output file (default: expenses-YYYY-MM.csv)"
    ),
    verbose: bool = VERBOSE_OPTION,
):
    """Export a month's entries to CSV."""
    with open_service(verbose) as (service, settings):
        content, period = service.export_month_csv(month)
        path = output or Path(f"expenses-{period.key}.csv")
        path.write_text(content, encoding="utf-8")
        console.print(f"[bold green]✓ Exported {period.name} to {path}[/bold green]")


@app.command()
def chat(
    member: str = typer.Option(..., "--member", "-m", help="Your member id"),
    username: str | None = typer.Option(None, "--username", help="Your username"),
    verbose: bool = VERBOSE_OPTION,
):
    """Start an interactive chat session using the bot commands."""
    with open_service(verbose) as (service, settings):
        sessions = SessionStore(ttl=timedelta(seconds=settings.session_ttl_seconds))
        dispatcher = ChatDispatcher(service, settings, sessions)

        def make_message(text: str) -> ChatMessage:
            return ChatMessage(user_id=member, username=username, text=text)

        run_chat_loop(
            dispatcher,
            make_message,
            output=lambda text: console.print(text, markup=False),
        )


if __name__ == "__main__":
    app()
