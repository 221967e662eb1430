"""Interest accrual on category balances.

Interest is simulated month by month. For each elapsed monthly period the
category balance is read from the live ledger as of the period start, so
interest posted for one month (and any scheduled deposits already in the
ledger) is part of the balance for the next month. Interest therefore
compounds monthly, even when many months are accrued in a single run.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from . import constants
from .dates import add_months, months_between_inclusive
from .schema import InterestEntry, Transaction
from .types import ProcessingReport

if TYPE_CHECKING:
    from .account import Account

logger = logging.getLogger(__name__)


class InterestEngine:
    """Accrues per-category interest up to a target date."""

    def monthly_rate(self, entry: InterestEntry) -> Decimal:
        """Fractional monthly rate (annual rates are divided by 12)."""
        rate = entry.rate_pct / constants.PERCENT
        if entry.monthly:
            return rate
        return rate / constants.MONTHS_PER_YEAR

    def note_for(self, entry: InterestEntry) -> str:
        if entry.monthly:
            return constants.INTEREST_NOTE_MONTHLY
        return constants.INTEREST_NOTE_ANNUAL

    def validate(self, entry: InterestEntry) -> Optional[str]:
        """Describe a malformed rule, or None if it can be applied."""
        if not entry.rate_pct.is_finite():
            return f"rate is not a finite number ({entry.rate_pct})"
        return None

    def accrue(self, account: "Account", entry: InterestEntry, target: date) -> list[Transaction]:
        """
        Post interest for every whole month elapsed since the entry's cursor.

        The cursor (``entry.next_date``) is the start of the first period not
        yet accrued. Each period is accrued on its start date using the
        balance on that date. Months with a zero or negative balance post
        nothing, but the cursor still moves past them.

        Args:
            account: Account whose ledger is read and posted to
            entry: Interest rule, mutated in place
            target: Accrue periods that have fully elapsed by this date

        Returns:
            Interest transactions posted
        """
        if entry.start_date > target:
            return []

        period_start = max(entry.next_date, entry.start_date)
        months = months_between_inclusive(period_start, target)
        if months <= 0:
            return []

        rate = self.monthly_rate(entry)
        note = self.note_for(entry)
        posted: list[Transaction] = []

        for m in range(months):
            apply_date = add_months(period_start, m)
            balance = account.category_balance(entry.category, as_of=apply_date)

            if balance <= 0:
                logger.debug(
                    "No interest for %s on %s (balance %s)",
                    entry.category,
                    apply_date,
                    balance,
                )
                continue

            interest = balance * rate
            if interest != 0:
                posted.append(account.post_transaction(apply_date, interest, entry.category, note))

        entry.next_date = min(add_months(period_start, months), target)

        logger.debug(
            "Accrued %d months of interest for %s, next period starts %s",
            months,
            entry.category,
            entry.next_date,
        )

        return posted

    def apply(self, account: "Account", target: date) -> ProcessingReport:
        """
        Accrue interest for all of the account's interest rules.

        Args:
            account: Account owning the rules and the ledger
            target: Date up to which elapsed periods are accrued

        Returns:
            ProcessingReport with posted interest and skipped rules
        """
        posted: list[Transaction] = []
        skipped: list[str] = []

        for key in list(account.interests):
            entry = account.interests[key]

            problem = self.validate(entry)
            if problem is not None:
                logger.warning("Skipping interest rule for %s: %s", key, problem)
                skipped.append(f"{key}: {problem}")
                continue

            posted.extend(self.accrue(account, entry, target))

        if posted:
            logger.info(
                "Posted %d interest transactions up to %s (total %s)",
                len(posted),
                target,
                sum((t.amount for t in posted), constants.ZERO),
            )

        return ProcessingReport(transactions=posted, skipped=skipped, warnings=[])
