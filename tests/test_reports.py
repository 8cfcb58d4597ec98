from datetime import date, datetime, timedelta, timezone

import pytest

from core.domain import AppState, Transaction
from core.reports import (
    earnings_by_date,
    expenses_by_category,
    monthly_summary,
    recent_sessions,
    session_export_rows,
    totals_by_type,
)

UTC = timezone.utc


def ts(day, hour, month=3, tz=UTC):
    return datetime(2025, month, day, hour, 0, tzinfo=tz)


def test_same_day_sessions_share_a_bucket(settings, make_session):
    # 2.5h and 1.5h at rate 20 -> 50 and 30
    sessions = [
        make_session("a", ts(10, 8), ts(10, 10) + timedelta(minutes=30), rate=20),
        make_session("b", ts(10, 18), ts(10, 19) + timedelta(minutes=30), rate=20),
    ]

    buckets = earnings_by_date(sessions, settings, tz=UTC)

    assert len(buckets) == 1
    assert buckets[0].day == date(2025, 3, 10)
    assert buckets[0].earnings == pytest.approx(80)
    assert buckets[0].hours == pytest.approx(4)


def test_buckets_use_local_date(settings, make_session):
    sao_paulo = timezone(timedelta(hours=-3))
    # 01:00 UTC on the 11th is still the 10th in UTC-3
    sessions = [
        make_session("a", ts(10, 20), ts(10, 21)),
        make_session("b", ts(11, 1), ts(11, 2)),
    ]

    assert len(earnings_by_date(sessions, settings, tz=UTC)) == 2
    local = earnings_by_date(sessions, settings, tz=sao_paulo)
    assert [b.day for b in local] == [date(2025, 3, 10)]


def test_trend_keeps_last_fourteen_days_oldest_first(settings, make_session):
    sessions = [
        make_session(f"s{d}", ts(d, 9), ts(d, 10))
        for d in range(1, 21)
    ]

    buckets = earnings_by_date(sessions, settings, tz=UTC)

    assert len(buckets) == 14
    assert buckets[0].day == date(2025, 3, 7)
    assert buckets[-1].day == date(2025, 3, 20)


def test_open_sessions_are_not_bucketed(settings, make_session):
    sessions = [make_session("a", ts(10, 9), None)]

    assert earnings_by_date(sessions, settings, tz=UTC) == []
    assert totals_by_type(sessions, settings) == []


def test_totals_by_type(settings, make_session):
    sessions = [
        make_session("a", ts(10, 9), ts(10, 11), type="extra", rate=10),
        make_session("b", ts(11, 9), ts(11, 10), type="normal", rate=10),
        make_session("c", ts(12, 9), ts(12, 12), type="extra", rate=10),
    ]

    totals = {t.type: t for t in totals_by_type(sessions, settings)}

    assert list(totals) == ["normal", "extra"]
    assert totals["extra"].hours == pytest.approx(5)
    assert totals["extra"].earnings == pytest.approx(75)
    assert totals["normal"].earnings == pytest.approx(10)


def test_expenses_by_category():
    trans = (
        Transaction("t1", "expense", 100, "Rent", date(2025, 3, 1)),
        Transaction("t2", "income", 900, "Salary", date(2025, 3, 1)),
        Transaction("t3", "expense", 25, "Food", date(2025, 3, 2)),
        Transaction("t4", "expense", 15, "Food", date(2025, 3, 3)),
    )

    result = expenses_by_category(trans)
    assert result == {"Rent": 100, "Food": 40}
    # categories keep the order they first appear in
    assert list(result.items()) == [("Rent", 100), ("Food", 40)]


def test_expenses_by_category_order_follows_first_appearance():
    trans = (
        Transaction("t1", "expense", 5, "Food", date(2025, 3, 3)),
        Transaction("t2", "expense", 100, "Rent", date(2025, 3, 1)),
        Transaction("t3", "expense", 7, "Food", date(2025, 3, 2)),
    )

    assert list(expenses_by_category(trans)) == ["Food", "Rent"]


def test_monthly_summary(settings, make_session):
    state = AppState(
        sessions=(
            make_session("now", ts(12, 9), None, rate=20),
            make_session("cur", ts(10, 9), ts(10, 13), rate=20, break_minutes=60),
            make_session("old", ts(20, 9, month=2), ts(20, 17, month=2), rate=20),
        ),
        transactions=(
            Transaction("t1", "income", 200, "Gig", date(2025, 3, 5)),
            Transaction("t2", "expense", 90, "Food", date(2025, 3, 6)),
            Transaction("t3", "expense", 999, "Rent", date(2025, 2, 1)),
        ),
        settings=settings,
    )

    summary = monthly_summary(state, ts(15, 12), tz=UTC)

    assert summary.earnings == pytest.approx(60)
    assert summary.hours == pytest.approx(4)
    assert summary.income == 200
    assert summary.expense == 90
    assert summary.total_income == pytest.approx(260)
    assert summary.balance == pytest.approx(170)


def test_recent_sessions(settings, make_session):
    sessions = tuple(make_session(f"s{i}", ts(10, 9)) for i in range(5))
    state = AppState(sessions=sessions, settings=settings)

    assert [s.id for s in recent_sessions(state)] == ["s0", "s1", "s2"]


def test_session_export_rows(settings, make_session):
    state = AppState(
        sessions=(
            make_session("b", ts(11, 9), None, description="Running"),
            make_session("a", ts(10, 9), ts(10, 17), type="extra", rate=20,
                         break_minutes=60, description="Report, final"),
        ),
        settings=settings,
    )

    rows = session_export_rows(state, tz=UTC)

    assert rows[0]["End"] == "N/A"
    assert rows[0]["Earnings"] == "0.00"
    assert rows[1] == {
        "Date": "2025-03-10",
        "Start": "09:00:00",
        "End": "17:00:00",
        "Description": "Report, final",
        "Type": "extra",
        "Earnings": "210.00",
    }
