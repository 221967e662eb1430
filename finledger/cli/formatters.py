"""Output formatting functions for CLI commands."""

import json

import click

from finledger import constants
from finledger.account import Account
from finledger.types import ProcessingReport
from finledger.utils import format_amount


def print_category_table(account: Account) -> None:
    """
    Print category balances and allocation percentages.

    Args:
        account: Account to display.
    """
    keys = sorted(account.category_balances, key=account.display_name)
    if not keys:
        click.echo("No categories")
        return

    name_width = max(len(account.display_name(k)) for k in keys)
    name_width = min(max(name_width, len("Category")), constants.MAX_TABLE_COLUMN_WIDTH)

    click.echo(f"{'Category':<{name_width}}  {'Balance':>14}  {'Alloc %':>8}")
    click.echo("-" * (name_width + 28))

    for key in keys:
        name = account.display_name(key)[:name_width]
        pct = account.allocations.get(key)
        pct_text = f"{pct:g}" if pct is not None else "-"
        click.echo(
            f"{name:<{name_width}}  {format_amount(account.category_balances[key]):>14}  "
            f"{pct_text:>8}",
        )


def print_schedule_table(account: Account) -> None:
    """
    Print schedules with their index and next due date.

    The index is what ``schedule remove``/``enable``/``disable`` expect.
    """
    if not account.schedules:
        click.echo("No schedules")
        return

    click.echo(
        f"{'#':>3}  {'Status':<8}  {'Type':<12}  {'Param':>5}  {'Amount':>12}  "
        f"{'Next due':<10}  {'Category':<16}  Note",
    )
    click.echo("-" * 90)

    for index, s in enumerate(account.schedules):
        status = "enabled" if s.enabled else "disabled"
        if s.category:
            category = account.display_name(s.category)
        elif s.auto_allocate:
            category = "<allocate>"
        else:
            category = f"<{account.settings.fallback_category}>"
        click.echo(
            f"{index:>3}  {status:<8}  {s.type.value:<12}  {s.param:>5}  "
            f"{format_amount(s.amount):>12}  {s.next_date.isoformat():<10}  "
            f"{category[:16]:<16}  {s.note}",
        )

    click.echo(f"\nTotal: {len(account.schedules)} schedules")


def print_interest_table(account: Account) -> None:
    """Print interest rules with their cursors."""
    if not account.interests:
        click.echo("No interest rules")
        return

    click.echo(f"{'Category':<16}  {'Rate':>10}  {'Start':<10}  {'Next period':<11}")
    click.echo("-" * 56)

    for key, entry in account.interests.items():
        rate = f"{entry.rate_pct:g}% {'mo' if entry.monthly else 'yr'}"
        click.echo(
            f"{account.display_name(key)[:16]:<16}  {rate:>10}  "
            f"{entry.start_date.isoformat():<10}  {entry.next_date.isoformat():<11}",
        )


def print_transactions(account: Account, count: int) -> None:
    """Print the most recent transactions, newest first."""
    recent = account.recent_transactions(count)
    if not recent:
        click.echo("No transactions")
        return

    for txn in recent:
        click.echo(
            f"{txn.date.isoformat()} | {format_amount(txn.amount):>12} | "
            f"{account.display_name(txn.category)} | {txn.note}",
        )


def print_summary(account: Account, recent: int) -> None:
    """Print the full account summary."""
    click.echo(f"Total balance: {format_amount(account.balance)}\n")
    print_category_table(account)
    click.echo(f"\nAllocation total: {account.allocation_total():g}%\n")
    print_interest_table(account)
    click.echo()
    print_schedule_table(account)
    click.echo(f"\nRecent transactions (last {recent}):")
    print_transactions(account, recent)


def print_summary_json(account: Account, recent: int) -> None:
    """Print the account summary as JSON."""
    summary = {
        "balance": str(account.balance),
        "categories": {
            account.display_name(k): str(v) for k, v in account.category_balances.items()
        },
        "allocations": {account.display_name(k): str(v) for k, v in account.allocations.items()},
        "interests": [e.model_dump(mode="json") for e in account.interests.values()],
        "schedules": [s.model_dump(mode="json") for s in account.schedules],
        "recent_transactions": [
            t.model_dump(mode="json") for t in account.recent_transactions(recent)
        ],
    }
    click.echo(json.dumps(summary, indent=2))


def print_report(account: Account, report: ProcessingReport) -> None:
    """Print what a processing run posted and any diagnostics."""
    total = sum((t.amount for t in report.transactions), constants.ZERO)
    click.echo(
        f"Posted {len(report.transactions)} transactions (net {format_amount(total)})",
    )
    for txn in report.transactions:
        click.echo(
            f"  {txn.date.isoformat()} {format_amount(txn.amount):>12}  "
            f"{account.display_name(txn.category)}  {txn.note}",
        )
    for item in report.skipped:
        click.echo(f"⚠ Skipped {item}", err=True)
    for warning in report.warnings:
        click.echo(f"⚠ Warning: {warning}", err=True)
