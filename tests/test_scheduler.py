"""Tests for the schedule advancer."""

from datetime import date
from decimal import Decimal

import pytest

from finledger.account import Account
from finledger.scheduler import ScheduleAdvancer, describe_schedule
from finledger.types import ScheduleType
from tests.conftest import make_account, make_schedule


def _dates(report):
    return [t.date for t in report.transactions]


class TestScheduleValidation:
    """Tests for ScheduleAdvancer.validate."""

    @pytest.mark.parametrize(
        "schedule_type,param",
        [
            (ScheduleType.EVERY_X_DAYS, 1),
            (ScheduleType.EVERY_X_DAYS, 365),
            (ScheduleType.MONTHLY_DAY, 1),
            (ScheduleType.MONTHLY_DAY, 31),
        ],
    )
    def test_valid(self, schedule_type, param):
        schedule = make_schedule(schedule_type=schedule_type, param=param)
        assert ScheduleAdvancer().validate(schedule) is None

    @pytest.mark.parametrize(
        "schedule_type,param,message",
        [
            (ScheduleType.EVERY_X_DAYS, 0, "non-positive interval"),
            (ScheduleType.EVERY_X_DAYS, -3, "non-positive interval"),
            (ScheduleType.MONTHLY_DAY, 0, "between 1 and 31"),
            (ScheduleType.MONTHLY_DAY, 32, "between 1 and 31"),
        ],
    )
    def test_invalid(self, schedule_type, param, message):
        schedule = make_schedule(schedule_type=schedule_type, param=param)
        assert message in ScheduleAdvancer().validate(schedule)

    def test_describe_schedule(self):
        schedule = make_schedule(schedule_type=ScheduleType.EVERY_X_DAYS, param=7, note="Gym")
        assert describe_schedule(2, schedule) == "#2 EVERY_X_DAYS(7) 'Gym'"


class TestEveryXDays:
    """Tests for EVERY_X_DAYS schedules."""

    def test_fires_every_interval(self):
        account = make_account(
            schedules=[
                make_schedule(
                    schedule_type=ScheduleType.EVERY_X_DAYS,
                    param=7,
                    amount=Decimal("-15"),
                    category="Entertainment",
                    note="Cinema",
                ),
            ],
        )

        report = account.process_schedules_up_to(date(2024, 1, 31))

        assert _dates(report) == [
            date(2024, 1, 1),
            date(2024, 1, 8),
            date(2024, 1, 15),
            date(2024, 1, 22),
            date(2024, 1, 29),
        ]
        assert account.schedules[0].next_date == date(2024, 2, 5)
        assert account.category_balance("Entertainment") == Decimal("-75")
        assert all(t.note == "Scheduled: Cinema" for t in report.transactions)

    def test_target_before_due_date(self):
        account = make_account(
            schedules=[make_schedule(schedule_type=ScheduleType.EVERY_X_DAYS, param=7)],
        )

        report = account.process_schedules_up_to(date(2023, 12, 31))

        assert report.transactions == []
        assert account.schedules[0].next_date == date(2024, 1, 1)


class TestMonthlyDay:
    """Tests for MONTHLY_DAY schedules."""

    def test_fires_on_day_of_month(self):
        account = make_account(
            schedules=[make_schedule(param=15, next_date=date(2024, 1, 15))],
        )

        report = account.process_schedules_up_to(date(2024, 4, 14))

        assert _dates(report) == [date(2024, 1, 15), date(2024, 2, 15), date(2024, 3, 15)]
        assert account.schedules[0].next_date == date(2024, 4, 15)

    def test_day_31_clamps_and_recovers(self):
        """Short months use their last day; longer months go back to the 31st."""
        account = make_account(
            schedules=[make_schedule(param=31, next_date=date(2024, 1, 31))],
        )

        report = account.process_schedules_up_to(date(2024, 5, 31))

        assert _dates(report) == [
            date(2024, 1, 31),
            date(2024, 2, 29),
            date(2024, 3, 31),
            date(2024, 4, 30),
            date(2024, 5, 31),
        ]
        assert account.schedules[0].next_date == date(2024, 6, 30)


class TestCursorInvariants:
    """Tests for cursor movement and repeatability."""

    def test_cursor_ends_after_target(self):
        account = make_account(
            schedules=[
                make_schedule(param=10),
                make_schedule(schedule_type=ScheduleType.EVERY_X_DAYS, param=3),
            ],
        )
        target = date(2024, 3, 20)

        account.process_schedules_up_to(target)

        assert all(s.next_date > target for s in account.schedules)

    def test_second_run_is_noop(self):
        account = make_account(schedules=[make_schedule(param=5, next_date=date(2024, 1, 5))])
        target = date(2024, 6, 30)

        first = account.process_schedules_up_to(target)
        balance = account.balance
        second = account.process_schedules_up_to(target)

        assert len(first.transactions) == 6
        assert second.transactions == []
        assert account.balance == balance

    def test_split_run_matches_single_run(self):
        def build():
            return make_account(
                schedules=[
                    make_schedule(param=31, next_date=date(2024, 1, 31)),
                    make_schedule(
                        schedule_type=ScheduleType.EVERY_X_DAYS,
                        param=10,
                        amount=Decimal("2.50"),
                    ),
                ],
            )

        single = build()
        single.process_schedules_up_to(date(2024, 8, 1))

        split = build()
        split.process_schedules_up_to(date(2024, 2, 29))
        split.process_schedules_up_to(date(2024, 5, 3))
        split.process_schedules_up_to(date(2024, 8, 1))

        assert sorted(split.transactions, key=lambda t: (t.date, t.amount)) == sorted(
            single.transactions,
            key=lambda t: (t.date, t.amount),
        )
        assert [s.next_date for s in split.schedules] == [s.next_date for s in single.schedules]


class TestPosting:
    """Tests for where scheduled amounts are posted."""

    def test_no_category_posts_to_fallback(self):
        account = make_account(schedules=[make_schedule(category=None, amount=Decimal("-20"))])

        report = account.process_schedules_up_to(date(2024, 1, 1))

        assert [t.category for t in report.transactions] == ["other"]

    def test_auto_allocate_positive_amount(self):
        account = make_account(
            schedules=[
                make_schedule(
                    category=None,
                    amount=Decimal("1000"),
                    note="Salary",
                    auto_allocate=True,
                ),
            ],
        )

        report = account.process_schedules_up_to(date(2024, 1, 1))

        assert len(report.transactions) == 4
        assert {t.note for t in report.transactions} == {"Scheduled: Salary (auto alloc)"}
        assert account.category_balance("Saving") == Decimal("200")
        assert account.balance == Decimal("1000")

    def test_auto_allocate_ignored_for_debits(self):
        account = make_account(
            schedules=[
                make_schedule(category="Saving", amount=Decimal("-50"), auto_allocate=True),
            ],
        )

        report = account.process_schedules_up_to(date(2024, 1, 1))

        assert len(report.transactions) == 1
        assert report.transactions[0].category == "saving"
        assert report.transactions[0].note == "Scheduled: Test schedule"


class TestDiagnostics:
    """Tests for skipped and bounded schedules."""

    def test_invalid_schedule_is_skipped(self, caplog):
        account = make_account(
            schedules=[
                make_schedule(schedule_type=ScheduleType.EVERY_X_DAYS, param=0),
                make_schedule(param=1),
            ],
        )

        with caplog.at_level("WARNING", logger="finledger.scheduler"):
            report = account.process_schedules_up_to(date(2024, 2, 1))

        assert len(report.skipped) == 1
        assert report.skipped[0].startswith("#0 EVERY_X_DAYS(0)")
        assert not report.ok
        # Invalid schedule keeps its cursor, the valid one is still processed
        assert account.schedules[0].next_date == date(2024, 1, 1)
        assert _dates(report) == [date(2024, 1, 1), date(2024, 2, 1)]
        assert "Skipping schedule #0" in caplog.text

    def test_iteration_bound(self, caplog):
        account = Account(schedule_advancer=ScheduleAdvancer(max_iterations=3))
        account.add_schedule(make_schedule(schedule_type=ScheduleType.EVERY_X_DAYS, param=1))
        account.add_schedule(make_schedule(param=1, amount=Decimal("-1")))

        with caplog.at_level("WARNING", logger="finledger.scheduler"):
            report = account.process_schedules_up_to(date(2024, 1, 10))

        assert len(report.warnings) == 1
        assert "stopped after 3 occurrences" in report.warnings[0]
        assert account.schedules[0].next_date == date(2024, 1, 4)
        # The other schedule is unaffected
        assert account.schedules[1].next_date == date(2024, 2, 1)
        assert len(report.transactions) == 4
        assert "iteration limit" in caplog.text

    def test_bound_resumes_on_next_run(self):
        account = Account(schedule_advancer=ScheduleAdvancer(max_iterations=3))
        account.add_schedule(make_schedule(schedule_type=ScheduleType.EVERY_X_DAYS, param=1))

        account.process_schedules_up_to(date(2024, 1, 5))
        report = account.process_schedules_up_to(date(2024, 1, 5))

        assert _dates(report) == [date(2024, 1, 4), date(2024, 1, 5)]
        assert report.ok

    def test_exactly_at_bound_is_not_a_warning(self):
        account = Account(schedule_advancer=ScheduleAdvancer(max_iterations=3))
        account.add_schedule(make_schedule(schedule_type=ScheduleType.EVERY_X_DAYS, param=1))

        report = account.process_schedules_up_to(date(2024, 1, 3))

        assert len(report.transactions) == 3
        assert report.warnings == []

    def test_disabled_schedule_is_silently_skipped(self):
        account = make_account(schedules=[make_schedule(enabled=False)])

        report = account.process_schedules_up_to(date(2024, 6, 1))

        assert report.transactions == []
        assert report.ok
        assert account.schedules[0].next_date == date(2024, 1, 1)
