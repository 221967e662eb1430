"""Click CLI commands for finledger."""

import logging
import sys
import traceback
from datetime import date
from pathlib import Path
from typing import Optional

import click

from finledger import __version__, constants
from finledger.account import Account
from finledger.storage import find_state_file, load_account, save_account
from finledger.utils import format_amount

from .builders import DATE, DECIMAL, RATE, build_allocation, build_schedule
from .formatters import (
    print_category_table,
    print_interest_table,
    print_report,
    print_schedule_table,
    print_summary,
    print_summary_json,
)

logger = logging.getLogger(__name__)


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    if logger.isEnabledFor(logging.DEBUG):
        traceback.print_exc()
    sys.exit(1)


def _state_file(ctx: click.Context) -> Path:
    return ctx.obj["state_file"]


def _load(ctx: click.Context) -> Account:
    """Load the ledger, starting a fresh one if none exists yet.

    When auto-processing is enabled, schedules and interest are brought up to
    today (and saved) before the command runs.
    """
    path = _state_file(ctx)
    account = load_account(path)

    if account is None:
        click.echo(f"No ledger found at {path}, starting a new one", err=True)
        return Account()

    if account.settings.auto_process_on_startup:
        report = account.process_up_to(date.today())
        if report.transactions or not report.ok:
            click.echo("Auto-processing schedules and interest up to today:")
            print_report(account, report)
        if report.transactions:
            _save(ctx, account)

    return account


def _save(ctx: click.Context, account: Account) -> None:
    path = save_account(account, _state_file(ctx))
    click.echo(f"Saved to {path}")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--file",
    "state_file",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar=constants.ENV_STATE_FILE,
    help=f"Ledger state file (default: ./{constants.DEFAULT_STATE_FILENAME} or "
    f"~/{constants.DEFAULT_STATE_DIR}/{constants.DEFAULT_STATE_FILENAME})",
)
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, verbose: bool, state_file: Optional[Path]):
    """finledger - personal finance ledger with schedules and interest."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    ctx.ensure_object(dict)
    ctx.obj["state_file"] = state_file or find_state_file()


@main.command()
@click.option("--force", is_flag=True, help="Overwrite an existing ledger")
@click.pass_context
def init(ctx: click.Context, force: bool):
    """Create a new ledger with the default categories.

    Defaults: Emergency 20%, Entertainment 10%, Saving 20%, Other 50%.
    """
    path = _state_file(ctx)
    if path.exists() and not force:
        click.echo(f"Error: {path} already exists (use --force to overwrite)", err=True)
        sys.exit(1)

    try:
        _save(ctx, Account())
    except Exception as e:
        _fail(e)


@main.command()
@click.option("--amount", "-a", type=DECIMAL, required=True, help="Signed amount")
@click.option("--date", "-d", "txn_date", type=DATE, help="Date YYYY-MM-DD (default: today)")
@click.option("--category", "-c", help="Category (default: fallback category)")
@click.option("--note", "-n", default="", help="Note")
@click.pass_context
def add(ctx: click.Context, amount, txn_date, category: Optional[str], note: str):
    """Record a manual transaction in one category.

    Examples:
        finledger add --amount -42.50 --category Entertainment --note Cinema
        finledger add -a 100 -c Saving -d 2024-01-01
    """
    try:
        account = _load(ctx)
        txn = account.post_transaction(
            txn_date.date() if txn_date else date.today(),
            amount,
            category or account.settings.fallback_category,
            note,
        )
        click.echo(
            f"✓ {txn.date.isoformat()} {format_amount(txn.amount)} "
            f"-> {account.display_name(txn.category)}",
        )
        _save(ctx, account)
    except Exception as e:
        _fail(e)


@main.command()
@click.option("--amount", "-a", type=DECIMAL, required=True, help="Amount to distribute")
@click.option("--date", "-d", "txn_date", type=DATE, help="Date YYYY-MM-DD (default: today)")
@click.option("--note", "-n", default="", help="Note")
@click.pass_context
def allocate(ctx: click.Context, amount, txn_date, note: str):
    """Split an amount across categories by allocation percentage.

    Examples:
        finledger allocate --amount 2500 --note Salary
    """
    try:
        account = _load(ctx)
        posted = account.allocate(txn_date.date() if txn_date else date.today(), amount, note)
        for txn in posted:
            click.echo(f"  {format_amount(txn.amount):>12}  {account.display_name(txn.category)}")
        _save(ctx, account)
    except Exception as e:
        _fail(e)


@main.command()
@click.option("--recent", "-r", default=constants.DEFAULT_RECENT_TRANSACTIONS, show_default=True)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format (default: table)",
)
@click.pass_context
def summary(ctx: click.Context, recent: int, output_format: str):
    """Show balances, allocations, interest rules, schedules and recent activity."""
    try:
        account = _load(ctx)
        if output_format == "json":
            print_summary_json(account, recent)
        else:
            print_summary(account, recent)
    except Exception as e:
        _fail(e)


@main.command()
@click.option("--date", "-d", "target", type=DATE, help="Process up to this date (default: today)")
@click.pass_context
def process(ctx: click.Context, target):
    """Post due scheduled transactions, then accrue interest.

    Running it again for the same date posts nothing new.
    """
    try:
        account = _load(ctx)
        report = account.process_up_to(target.date() if target else date.today())
        print_report(account, report)
        _save(ctx, account)
    except Exception as e:
        _fail(e)


# ============================================================================
# Categories and allocation
# ============================================================================


@main.group()
def category():
    """Manage categories."""


@category.command(name="add")
@click.argument("name")
@click.pass_context
def category_add(ctx: click.Context, name: str):
    """Create a category with a zero balance and 0% allocation."""
    try:
        account = _load(ctx)
        key = account.ensure_category(name)
        account.allocations.setdefault(key, constants.ZERO)
        click.echo(f"✓ Category '{account.display_name(key)}'")
        _save(ctx, account)
    except Exception as e:
        _fail(e)


@category.command(name="list")
@click.pass_context
def category_list(ctx: click.Context):
    """List categories with balances."""
    try:
        print_category_table(_load(ctx))
    except Exception as e:
        _fail(e)


@main.group()
def allocation():
    """Show or change allocation percentages."""


@allocation.command(name="show")
@click.pass_context
def allocation_show(ctx: click.Context):
    """Show allocation percentages."""
    try:
        account = _load(ctx)
        for key, pct in account.allocations.items():
            click.echo(f"{account.display_name(key)}: {pct:g}%")
        click.echo(f"Total: {account.allocation_total():g}%")
    except Exception as e:
        _fail(e)


@allocation.command(name="set")
@click.argument("allocations", nargs=-1, required=True)
@click.option(
    "--fill-fallback",
    is_flag=True,
    help="Give whatever is left of 100% to the fallback category",
)
@click.pass_context
def allocation_set(ctx: click.Context, allocations: tuple[str, ...], fill_fallback: bool):
    """Replace allocation percentages.

    ALLOCATIONS are NAME=PERCENT items.

    Examples:
        finledger allocation set Saving=30 Emergency=20 Other=50
        finledger allocation set Saving=30 Emergency=20 --fill-fallback
    """
    try:
        account = _load(ctx)
        account.set_allocation(build_allocation(account, allocations, fill_fallback))
        for key, pct in account.allocations.items():
            click.echo(f"{account.display_name(key)}: {pct:g}%")
        _save(ctx, account)
    except click.ClickException:
        raise
    except Exception as e:
        _fail(e)


# ============================================================================
# Schedules
# ============================================================================


@main.group()
def schedule():
    """Manage recurring transactions."""


@schedule.command(name="add")
@click.option("--amount", "-a", type=DECIMAL, required=True, help="Signed amount per occurrence")
@click.option("--every-days", type=int, help="Repeat every N days")
@click.option("--day-of-month", type=int, help="Repeat monthly on this day (1-31)")
@click.option("--start", "start", type=DATE, help="First possible due date (default: today)")
@click.option("--category", "-c", help="Target category")
@click.option("--note", "-n", default="", help="Note for generated transactions")
@click.option(
    "--auto-allocate/--no-auto-allocate",
    default=None,
    help="Allocate positive amounts across categories "
    "(default: on when no category is given and the amount is positive)",
)
@click.pass_context
def schedule_add(
    ctx: click.Context,
    amount,
    every_days: Optional[int],
    day_of_month: Optional[int],
    start,
    category: Optional[str],
    note: str,
    auto_allocate: Optional[bool],
):
    """Add a recurring transaction.

    Examples:
        finledger schedule add --amount 2500 --day-of-month 25 --note Salary
        finledger schedule add --amount -900 --day-of-month 1 -c Other -n Rent
        finledger schedule add --amount -15 --every-days 7 -c Entertainment
    """
    new_schedule = build_schedule(
        every_days,
        day_of_month,
        amount,
        start.date() if start else date.today(),
        category,
        note,
        auto_allocate,
    )

    try:
        account = _load(ctx)
        account.add_schedule(new_schedule)
        click.echo(f"✓ Schedule #{len(account.schedules) - 1} first due {new_schedule.next_date}")
        _save(ctx, account)
    except Exception as e:
        _fail(e)


@schedule.command(name="list")
@click.pass_context
def schedule_list(ctx: click.Context):
    """List schedules with their next due date."""
    try:
        print_schedule_table(_load(ctx))
    except Exception as e:
        _fail(e)


@schedule.command(name="remove")
@click.argument("index", type=int)
@click.pass_context
def schedule_remove(ctx: click.Context, index: int):
    """Remove the schedule at INDEX (see `schedule list`)."""
    try:
        account = _load(ctx)
        removed = account.remove_schedule(index)
        click.echo(f"✓ Removed schedule #{index} ({removed.note or removed.type.value})")
        _save(ctx, account)
    except Exception as e:
        _fail(e)


def _set_enabled(ctx: click.Context, index: int, enabled: bool) -> None:
    try:
        account = _load(ctx)
        if index < 0 or index >= len(account.schedules):
            raise IndexError(f"No schedule at index {index}")
        account.schedules[index].enabled = enabled
        click.echo(f"✓ Schedule #{index} {'enabled' if enabled else 'disabled'}")
        _save(ctx, account)
    except Exception as e:
        _fail(e)


@schedule.command(name="enable")
@click.argument("index", type=int)
@click.pass_context
def schedule_enable(ctx: click.Context, index: int):
    """Resume processing the schedule at INDEX."""
    _set_enabled(ctx, index, True)


@schedule.command(name="disable")
@click.argument("index", type=int)
@click.pass_context
def schedule_disable(ctx: click.Context, index: int):
    """Stop processing the schedule at INDEX without removing it."""
    _set_enabled(ctx, index, False)


# ============================================================================
# Interest
# ============================================================================


@main.group()
def interest():
    """Manage interest rules."""


@interest.command(name="set")
@click.argument("category_name", metavar="CATEGORY")
@click.argument("rate", type=RATE)
@click.option("--annual", is_flag=True, help="RATE is annual (applied monthly as RATE/12)")
@click.option("--start", "start", type=DATE, help="Start date (default: today)")
@click.pass_context
def interest_set(ctx: click.Context, category_name: str, rate, annual: bool, start):
    """Add or replace the interest rule for CATEGORY.

    RATE is a percentage, e.g. 0.5 or 1,5%.

    Examples:
        finledger interest set Saving 0.5
        finledger interest set Saving 4% --annual --start 2024-01-01
    """
    try:
        account = _load(ctx)
        entry = account.set_interest(
            category_name,
            rate,
            monthly=not annual,
            start_date=start.date() if start else date.today(),
        )
        click.echo(
            f"✓ {account.display_name(entry.category)}: {entry.rate_pct:g}% "
            f"{'annual' if annual else 'monthly'} from {entry.start_date}",
        )
        _save(ctx, account)
    except Exception as e:
        _fail(e)


@interest.command(name="list")
@click.pass_context
def interest_list(ctx: click.Context):
    """List interest rules."""
    try:
        print_interest_table(_load(ctx))
    except Exception as e:
        _fail(e)


@interest.command(name="remove")
@click.argument("category_name", metavar="CATEGORY")
@click.pass_context
def interest_remove(ctx: click.Context, category_name: str):
    """Remove the interest rule for CATEGORY."""
    try:
        account = _load(ctx)
        account.remove_interest(category_name)
        click.echo(f"✓ Removed interest rule for {category_name}")
        _save(ctx, account)
    except KeyError as e:
        _fail(Exception(e.args[0]))
    except Exception as e:
        _fail(e)


# ============================================================================
# Settings
# ============================================================================


@main.command()
@click.option(
    "--auto-process/--no-auto-process",
    default=None,
    help="Process schedules and interest up to today whenever the ledger is loaded",
)
@click.option("--fallback-category", help="Category for unallocated amounts")
@click.pass_context
def settings(ctx: click.Context, auto_process: Optional[bool], fallback_category: Optional[str]):
    """Show or change settings."""
    try:
        account = _load(ctx)
        changed = False

        if auto_process is not None:
            account.settings.auto_process_on_startup = auto_process
            changed = True
        if fallback_category is not None:
            account.settings.fallback_category = fallback_category
            account.ensure_category(fallback_category)
            changed = True

        click.echo(f"auto_process_on_startup: {account.settings.auto_process_on_startup}")
        click.echo(f"fallback_category: {account.settings.fallback_category}")

        if changed:
            _save(ctx, account)
    except Exception as e:
        _fail(e)
