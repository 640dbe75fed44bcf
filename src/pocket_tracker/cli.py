import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from pocket_tracker.automation.clock import SystemClock
from pocket_tracker.automation.notifications import ConsoleNotificationSink
from pocket_tracker.automation.recurrence import RecurrenceCandidate
from pocket_tracker.commands.grammar import InputMalformedError
from pocket_tracker.database.connection import DatabaseConfig, DatabaseManager
from pocket_tracker.domain.enums import Priority, TransactionType
from pocket_tracker.repositories.sqlite_record_store import SQLiteRecordStore
from pocket_tracker.repositories.sqlite_suppression_ledger import SQLiteSuppressionLedger
from pocket_tracker.services.automation_service import AutomationService
from pocket_tracker.services.command_service import CommandService
from pocket_tracker.services.transaction_service import TransactionService

app = typer.Typer(
    name="pocket-tracker",
    help="Track expenses, tasks and shopping, with automatic categorization and reminders",
    add_completion=False,
)

console = Console()

class State:
    verbose: bool = False
    store: Optional[SQLiteRecordStore] = None
    transactions: Optional[TransactionService] = None
    automation: Optional[AutomationService] = None
    commands: Optional[CommandService] = None


state = State()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def parse_money(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise typer.BadParameter(f"'{value}' is not a valid amount")
    if not amount.is_finite():
        raise typer.BadParameter(f"'{value}' is not a valid amount")
    if amount < 0:
        raise typer.BadParameter("Amount cannot be negative")
    return amount


def fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {error}")
    if state.verbose:
        console.print_exception()
    raise typer.Exit(code=1)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output",
    ),
    db_path: Path = typer.Option(
        Path("data/tracker.db"),
        "--db",
        help="Path to the SQLite database",
    ),
):
    """
    Pocket Tracker - expenses, tasks and shopping with a little automation.
    """
    configure_logging(verbose)

    if state.store is None:
        db_manager = DatabaseManager(DatabaseConfig(db_path))
        db_manager.initialize()
        clock = SystemClock()

        state.store = SQLiteRecordStore(db_manager)
        state.transactions = TransactionService(state.store, clock=clock)
        state.automation = AutomationService(
            state.store,
            SQLiteSuppressionLedger(db_manager),
            clock=clock,
            sink=ConsoleNotificationSink(),
        )
        state.commands = CommandService(state.transactions)

    state.verbose = verbose


@app.command(name="add")
def add_transaction(
    description: str = typer.Argument(..., help="What the money was for"),
    amount: str = typer.Argument(..., help="Amount, e.g. 12.50"),
    income: bool = typer.Option(False, "--income", help="Record income instead of an expense"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Skip auto-categorization"),
    payment: Optional[str] = typer.Option(None, "--payment", "-p", help="Payment method"),
    notes: Optional[str] = typer.Option(None, "--notes", "-n"),
):
    """
    Add an expense or income.

    Examples:
        pocket-tracker add "Uber to airport" 32.40
        pocket-tracker add Salary 4000 --income
    """
    try:
        txn = state.transactions.add_transaction(
            TransactionType.INCOME if income else TransactionType.EXPENSE,
            description,
            parse_money(amount),
            category=category,
            payment=payment,
            notes=notes,
        )
        console.print(
            f"[green]✓[/green] Added {txn.type.value}: {txn.description} "
            f"${txn.amount:,.2f} [magenta]({txn.category})[/magenta]"
        )
    except typer.BadParameter:
        raise
    except Exception as e:
        fail(e)


@app.command(name="voice")
def voice_command(
    text: str = typer.Argument(..., help='Transcribed command, e.g. "add coffee 5 dollars"'),
):
    """
    Run a spoken command given as text.

    Examples:
        pocket-tracker voice "add coffee 5 dollars"
        pocket-tracker voice "remind me to call the doctor"
    """
    try:
        if not state.store.get_settings().voice:
            console.print("[yellow]Voice input is disabled in settings[/yellow]")
            raise typer.Exit(code=1)

        result = state.commands.execute(text)
        console.print(f"[green]✓[/green] {result.message}")
    except InputMalformedError as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(code=1)
    except typer.Exit:
        raise
    except Exception as e:
        fail(e)


@app.command(name="task")
def add_task(
    title: str = typer.Argument(...),
    due: Optional[datetime] = typer.Option(None, "--due", "-d", formats=["%Y-%m-%d"], help="Due day"),
    priority: Priority = typer.Option(Priority.MEDIUM, "--priority"),
    category: Optional[str] = typer.Option(None, "--category", "-c"),
):
    """Add a task, optionally with a due day."""
    try:
        task = state.transactions.add_task(
            title,
            priority=priority,
            category=category,
            due_date=due.date() if due else None,
        )
        console.print(f"[green]✓[/green] Added task {task.id[:8]}: {task.title}")
    except Exception as e:
        fail(e)


@app.command(name="done")
def toggle_task(
    task_id: str = typer.Argument(..., help="Task ID"),
):
    """Mark a task completed, or reopen it."""
    try:
        task = state.transactions.toggle_task(task_id)
        status = "completed" if task.completed else "reopened"
        console.print(f"[green]✓[/green] {task.title} {status}")
    except Exception as e:
        fail(e)


@app.command(name="due")
def set_due_date(
    task_id: str = typer.Argument(..., help="Task ID"),
    due: Optional[datetime] = typer.Argument(None, formats=["%Y-%m-%d"], help="New due day"),
    clear: bool = typer.Option(False, "--clear", help="Remove the due day"),
):
    """Move a task's due day, or clear it with --clear."""
    if due is None and not clear:
        raise typer.BadParameter("Give a due day or --clear")
    try:
        task = state.transactions.set_due_date(task_id, None if clear else due.date())
        when = task.due_date.isoformat() if task.due_date else "no due day"
        console.print(f"[green]✓[/green] {task.title}: {when}")
    except Exception as e:
        fail(e)


@app.command(name="shop")
def add_shopping_item(
    item: str = typer.Argument(...),
    price: str = typer.Option("0", "--price", help="Unit price"),
    quantity: int = typer.Option(1, "--quantity", "-q", min=1),
):
    """Add an item to the shopping list."""
    try:
        shopping_item = state.transactions.add_shopping_item(
            item, price=parse_money(price), quantity=quantity,
        )
        console.print(f"[green]✓[/green] Added {shopping_item.item} ({shopping_item.id})")
    except typer.BadParameter:
        raise
    except Exception as e:
        fail(e)


@app.command(name="buy")
def toggle_purchased(
    item_id: str = typer.Argument(..., help="Shopping item ID"),
):
    """Toggle a shopping item's purchased flag; priced items become expenses."""
    try:
        result = state.automation.toggle_purchased(item_id)
        status = "purchased" if result.item.purchased else "not purchased"
        console.print(f"[green]✓[/green] {result.item.item} marked {status}")
        if result.created_expense:
            console.print(
                f"[green]✓[/green] Added expense: ${result.expense.amount:,.2f} "
                f"[magenta]({result.expense.category})[/magenta]"
            )
    except Exception as e:
        fail(e)


def confirm_candidate(candidate: RecurrenceCandidate) -> bool:
    txn = candidate.last_occurrence
    return typer.confirm(
        f"Add recurring {txn.type.value}: {txn.description} (${txn.amount:,.2f})?",
        default=False,
    )


@app.command(name="sweep")
def sweep(
    no_prompt: bool = typer.Option(
        False,
        "--no-prompt",
        help="List recurring candidates without asking to add them",
    ),
):
    """Run every automation check once."""
    try:
        recurring = state.automation.sweep_recurring(None if no_prompt else confirm_candidate)
        console.print(Panel.fit(str(recurring), border_style="cyan"))

        budget = state.automation.sweep_budget()
        # Alerts with notify set were already shown by the console sink
        for alert in budget.alerts:
            if not alert.notify:
                console.print(f"[dim]{alert}[/dim]")
        if budget.insight:
            console.print(f"[dim]Insight: {budget.insight}[/dim]")

        reminders = state.automation.sweep_reminders()
        if reminders.reminders:
            console.print(f"[dim]{len(reminders.reminders)} reminder(s) sent[/dim]")
    except Exception as e:
        fail(e)


@app.command(name="watch")
def watch():
    """Keep running automation checks on their schedules (Ctrl+C to stop)."""
    scheduler = state.automation.build_scheduler(accept=confirm_candidate)
    console.print("[cyan]Watching... press Ctrl+C to stop[/cyan]")
    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped[/dim]")


@app.command(name="budget")
def budget_report():
    """Show this month's budget use and suggestions."""
    try:
        status = state.automation.budget_status()
        month_name = datetime(status.year, status.month, 1).strftime("%B %Y")

        if status.percentage is None:
            body = f"Spent: ${status.spent:,.2f}\n[dim]No budget set[/dim]"
        else:
            color = "red" if status.percentage >= 100 else "yellow" if status.percentage >= 90 else "green"
            body = (
                f"Spent:     ${status.spent:>10,.2f}\n"
                f"Budget:    ${status.budget:>10,.2f}\n"
                f"{'─' * 24}\n"
                f"[{color}]Used:      {status.percentage:>10.1f}%[/{color}]"
            )
        console.print(Panel(body, title=f"[bold]{month_name}[/bold]", border_style="cyan", padding=(1, 2)))

        suggestion = state.automation.suggest_budget()
        if suggestion is not None:
            console.print(f"Suggested monthly budget: [bold]${suggestion:,.0f}[/bold]")

        quick = state.automation.quick_expenses()
        if quick:
            table = Table(title="Frequent expenses", box=None, padding=(0, 2))
            table.add_column("Expense", style="cyan")
            table.add_column("Category", style="magenta")
            table.add_column("Usual amount", justify="right")
            table.add_column("Times", justify="right", style="dim")
            for q in quick:
                table.add_row(q.label, q.category, f"${q.amount:,.0f}", str(q.count))
            console.print(table)
    except Exception as e:
        fail(e)


@app.command(name="settings")
def update_settings(
    budget: Optional[str] = typer.Option(None, "--budget", help="Monthly budget, 0 to unset"),
    currency: Optional[str] = typer.Option(None, "--currency"),
    notifications: Optional[bool] = typer.Option(None, "--notifications/--no-notifications"),
    voice: Optional[bool] = typer.Option(None, "--voice/--no-voice"),
    auto_categ: Optional[bool] = typer.Option(None, "--auto-categ/--no-auto-categ"),
):
    """Show or change settings."""
    try:
        settings = state.store.get_settings()
        changes = {
            "budget": parse_money(budget) if budget is not None else None,
            "currency": currency,
            "notifications": notifications,
            "voice": voice,
            "auto_categ": auto_categ,
        }
        changes = {k: v for k, v in changes.items() if v is not None}
        if changes:
            settings = state.store.save_settings(replace(settings, **changes))

        table = Table(show_header=False, box=None, padding=(0, 2))
        for key, value in settings.to_record().items():
            if key != "id":
                table.add_row(key, str(value))
        console.print(table)
    except typer.BadParameter:
        raise
    except Exception as e:
        fail(e)


def cli_main():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    cli_main()
