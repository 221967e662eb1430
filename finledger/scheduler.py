"""Schedule advancer: turns recurring schedules into ledger transactions."""

import logging
from datetime import date
from typing import TYPE_CHECKING, Optional

from . import constants
from .dates import add_days, next_day_of_month_on_or_after
from .schema import Schedule, Transaction
from .types import ProcessingReport, ScheduleType

if TYPE_CHECKING:
    from .account import Account

logger = logging.getLogger(__name__)


def describe_schedule(index: int, schedule: Schedule) -> str:
    """Short label used in diagnostics."""
    label = f"#{index} {schedule.type.value}({schedule.param})"
    if schedule.note:
        label += f" '{schedule.note}'"
    return label


class ScheduleAdvancer:
    """Expands schedules up to a target date and moves their cursors forward.

    Each schedule is a small state machine: while its ``next_date`` is on or
    before the target it fires (posts or allocates its amount) and advances.
    Because the cursor is stored on the schedule, running again with the same
    target is a no-op and a later target resumes where the last run stopped.
    """

    def __init__(self, max_iterations: int = constants.MAX_SCHEDULE_ITERATIONS):
        """
        Args:
            max_iterations: Occurrences processed per schedule per run before
                the schedule is abandoned with a warning
        """
        self.max_iterations = max_iterations

    def validate(self, schedule: Schedule) -> Optional[str]:
        """
        Check a schedule's parameter.

        Returns:
            Description of the problem, or None if the schedule is usable
        """
        if schedule.type == ScheduleType.EVERY_X_DAYS:
            if schedule.param < constants.MIN_INTERVAL_DAYS:
                return f"non-positive interval ({schedule.param} days)"
        elif schedule.type == ScheduleType.MONTHLY_DAY:
            if not constants.MIN_DAY_OF_MONTH <= schedule.param <= constants.MAX_DAY_OF_MONTH:
                return (
                    f"day of month must be between {constants.MIN_DAY_OF_MONTH} and "
                    f"{constants.MAX_DAY_OF_MONTH}, got {schedule.param}"
                )
        return None

    def following_date(self, schedule: Schedule, current: date) -> date:
        """Due date after ``current`` for a (valid) schedule."""
        if schedule.type == ScheduleType.EVERY_X_DAYS:
            return add_days(current, schedule.param)
        return next_day_of_month_on_or_after(current, schedule.param)

    def fire(self, account: "Account", schedule: Schedule, due: date) -> list[Transaction]:
        """Post one occurrence of ``schedule`` dated ``due``."""
        note = constants.SCHEDULED_NOTE_PREFIX + schedule.note

        if schedule.auto_allocate and schedule.amount > 0:
            return account.allocate(due, schedule.amount, note)

        category = schedule.category or account.settings.fallback_category
        return [account.post_transaction(due, schedule.amount, category, note)]

    def advance(
        self,
        account: "Account",
        schedule: Schedule,
        target: date,
    ) -> tuple[list[Transaction], bool]:
        """
        Fire every occurrence due on or before ``target``.

        Mutates ``schedule.next_date`` in place.

        Returns:
            Tuple of (posted transactions, True if the iteration bound stopped
            the schedule while occurrences were still due)
        """
        posted: list[Transaction] = []
        iterations = 0

        while schedule.next_date <= target:
            if iterations >= self.max_iterations:
                return posted, True

            due = schedule.next_date
            posted.extend(self.fire(account, schedule, due))
            schedule.next_date = self.following_date(schedule, due)
            iterations += 1

            logger.debug("Schedule fired on %s, next due %s", due, schedule.next_date)

        return posted, False

    def process(self, account: "Account", target: date) -> ProcessingReport:
        """
        Advance all of the account's schedules up to ``target``.

        Invalid schedules are skipped without moving their cursor. A schedule
        that hits the iteration bound keeps the cursor where it stopped. Neither
        case stops the other schedules from being processed.

        Args:
            account: Account owning the schedules and the ledger
            target: Last date (inclusive) to generate occurrences for

        Returns:
            ProcessingReport with all posted transactions and diagnostics
        """
        posted: list[Transaction] = []
        skipped: list[str] = []
        warnings: list[str] = []

        # Index-based so each stored schedule is advanced in place
        for index in range(len(account.schedules)):
            schedule = account.schedules[index]
            label = describe_schedule(index, schedule)

            if not schedule.enabled:
                logger.debug("Schedule %s is disabled, skipping", label)
                continue

            problem = self.validate(schedule)
            if problem is not None:
                logger.warning("Skipping schedule %s: %s", label, problem)
                skipped.append(f"{label}: {problem}")
                continue

            created, exhausted = self.advance(account, schedule, target)
            posted.extend(created)

            if exhausted:
                message = (
                    f"{label}: stopped after {self.max_iterations} occurrences, "
                    f"still due on {schedule.next_date}"
                )
                logger.warning("Schedule processing hit iteration limit: %s", message)
                warnings.append(message)

        logger.info(
            "Processed %d schedules up to %s: %d transactions posted",
            len(account.schedules),
            target,
            len(posted),
        )

        return ProcessingReport(transactions=posted, skipped=skipped, warnings=warnings)
