from datetime import date, datetime, timezone

import pytest

from core.config import STORAGE_KEY
from core.persistence import MemoryStorage, load_state
from core.store import AppStore

UTC = timezone.utc


def test_store_starts_from_default_state(store):
    state = store.state

    assert state.sessions == ()
    assert state.transactions == ()
    assert state.active_session_id is None
    assert state.settings.currency == "BRL"
    assert state.settings.hourly_rate == 50


def test_start_session_creates_active_open_session(store, clock):
    result = store.start_session("Write report", "night")

    assert result.is_right()
    session = result.get_or_else(None)
    assert session.start_time == clock.now
    assert session.end_time is None
    assert session.break_minutes == 0
    assert session.type == "night"
    assert session.hourly_rate_snapshot == 50
    assert store.state.active_session_id == session.id
    assert store.state.sessions[0] == session


def test_start_session_rejects_blank_description(store, storage):
    result = store.start_session("   ", "normal")

    assert result.is_left()
    assert result.get_error()["error"] == "empty_description"
    assert store.state.sessions == ()
    assert storage.get_item(STORAGE_KEY) is None


def test_start_session_rejects_unknown_type(store):
    result = store.start_session("Work", "weekend")

    assert result.is_left()
    assert result.get_error()["error"] == "unknown_work_type"


def test_stop_session_closes_active(store, clock):
    started = store.start_session("Code", "normal").get_or_else(None)
    clock.advance(hours=2)

    stopped = store.stop_session()

    assert stopped.id == started.id
    assert stopped.end_time == clock.now
    assert store.state.active_session_id is None
    assert store.state.sessions[0].end_time == clock.now


def test_stop_session_without_active_is_noop(store, storage):
    assert store.stop_session() is None
    assert storage.get_item(STORAGE_KEY) is None


def test_starting_while_active_stops_previous(store, clock):
    first = store.start_session("First", "normal").get_or_else(None)
    clock.advance(minutes=45)

    second = store.start_session("Second", "extra").get_or_else(None)

    sessions = {s.id: s for s in store.state.sessions}
    assert sessions[first.id].end_time == clock.now
    assert sessions[second.id].end_time is None
    assert store.state.active_session_id == second.id
    assert [s.id for s in store.state.sessions] == [second.id, first.id]


def test_at_most_one_open_session(store, clock):
    for i in range(5):
        store.start_session(f"task {i}", "normal")
        clock.advance(minutes=10)
        if i % 2:
            store.stop_session()
        open_sessions = [s for s in store.state.sessions if s.end_time is None]
        assert len(open_sessions) <= 1
        if open_sessions:
            assert store.state.active_session_id == open_sessions[0].id


def test_rate_snapshot_not_affected_by_later_rate_change(store):
    session = store.start_session("Code", "normal").get_or_else(None)
    store.update_settings(hourly_rate=99)

    assert store.state.sessions[0].hourly_rate_snapshot == 50
    assert session.hourly_rate_snapshot == 50


def test_add_manual_session_is_closed_and_not_active(store):
    start = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)
    end = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)

    result = store.add_manual_session(start, end, "Backdated", "holiday", break_minutes=15)

    session = result.get_or_else(None)
    assert session.start_time == start
    assert session.end_time == end
    assert session.break_minutes == 15
    assert session.hourly_rate_snapshot == 50
    assert store.state.active_session_id is None


def test_add_manual_session_rejects_end_before_start(store):
    start = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)
    end = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)

    result = store.add_manual_session(start, end, "Oops", "normal")

    assert result.is_left()
    assert result.get_error()["error"] == "end_before_start"
    assert store.state.sessions == ()


def test_add_manual_session_rejects_negative_break_and_blank_description(store):
    start = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)
    end = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)

    assert store.add_manual_session(start, end, "x", "normal", -5).get_error()["error"] == "negative_break"
    assert store.add_manual_session(start, end, "", "normal").get_error()["error"] == "empty_description"


def test_manual_session_keeps_running_session_active(store):
    running = store.start_session("Live", "normal").get_or_else(None)
    start = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)
    end = datetime(2025, 3, 1, 10, 0, tzinfo=UTC)

    store.add_manual_session(start, end, "Old", "normal")

    assert store.state.active_session_id == running.id


def test_delete_session(store):
    session = store.start_session("Code", "normal").get_or_else(None)
    store.stop_session()

    store.delete_session(session.id)

    assert store.state.sessions == ()


def test_delete_active_session_clears_pointer(store):
    session = store.start_session("Code", "normal").get_or_else(None)

    store.delete_session(session.id)

    assert store.state.active_session_id is None
    assert store.stop_session() is None


def test_delete_unknown_session_is_noop(store):
    store.start_session("Code", "normal")
    before = store.state

    store.delete_session("missing")

    assert store.state is before


def test_add_transaction_inserts_at_front(store):
    first = store.add_transaction("income", 1000.0, "Salary", date(2025, 3, 1), "March")
    second = store.add_transaction("expense", 80.5, "Food", date(2025, 3, 2), "Groceries")

    assert store.state.transactions == (second, first)
    assert second.amount == 80.5
    assert second.date == date(2025, 3, 2)


def test_blank_category_defaults_to_general(store):
    t = store.add_transaction("expense", 10.0, "  ", date(2025, 3, 1))

    assert t.category == "General"


def test_add_then_delete_transaction_round_trip(store):
    store.add_transaction("income", 500.0, "Freelance", date(2025, 3, 1))
    before = store.state.transactions

    t = store.add_transaction("expense", 30.0, "Transport", date(2025, 3, 2))
    store.delete_transaction(t.id)

    assert store.state.transactions == before


def test_transaction_amount_is_not_validated(store):
    t = store.add_transaction("expense", -25.0, "Refund", date(2025, 3, 1))

    assert t.amount == -25.0


def test_update_settings_changes_only_supplied_fields(store):
    before = store.state.settings

    store.update_settings(currency="USD")

    after = store.state.settings
    assert after.currency == "USD"
    assert after.hourly_rate == before.hourly_rate
    assert after.multipliers == before.multipliers
    assert after.dark_mode == before.dark_mode


def test_update_settings_replaces_multipliers_mapping(store):
    new = {"normal": 1, "extra": 2, "night": 1.5, "holiday": 3}

    store.update_settings(multipliers=new)

    assert store.state.settings.multipliers == new


def test_update_settings_unknown_field_raises(store):
    with pytest.raises(TypeError):
        store.update_settings(theme="blue")


def test_every_mutation_is_persisted(store, storage):
    store.start_session("Code", "normal")
    assert load_state(storage) == store.state

    store.stop_session()
    assert load_state(storage) == store.state

    store.add_transaction("income", 10.0, "Tips", date(2025, 3, 1))
    assert load_state(storage) == store.state

    store.update_settings(dark_mode=True)
    assert load_state(storage) == store.state


def test_reload_reproduces_state(storage, clock):
    first = AppStore(storage, clock=clock)
    first.start_session("Code", "extra")
    clock.advance(hours=1)
    first.stop_session()
    first.start_session("Still running", "night")
    first.add_transaction("expense", 12.34, "Coffee", date(2025, 3, 10), "Espresso, large")
    first.update_settings(currency="EUR", hourly_rate=65.5)

    second = AppStore(storage, clock=clock)

    assert second.state == first.state
    assert second.state.active_session is not None
    assert second.state.active_session.description == "Still running"


def test_state_changed_event_carries_new_state(store):
    seen = []
    store.bus.subscribe("STATE_CHANGED", lambda event, payload: seen.append(payload["state"]) or {})

    store.add_transaction("income", 1.0, "Misc", date(2025, 3, 1))

    assert seen == [store.state]


def test_multipliers_mapping_is_copied_on_update(store, storage):
    new = {"normal": 1, "extra": 2, "night": 1.5, "holiday": 3}

    store.update_settings(multipliers=new)
    new["extra"] = 99

    assert store.state.settings.multipliers["extra"] == 2
    assert load_state(storage) == store.state


class FlakyStorage(MemoryStorage):
    def __init__(self):
        super().__init__()
        self.fail = True

    def set_item(self, key, value):
        if self.fail:
            raise OSError("disk full")
        super().set_item(key, value)


def test_failed_write_keeps_state_and_does_not_raise(clock):
    storage = FlakyStorage()
    store = AppStore(storage, clock=clock)

    first = store.add_transaction("expense", 10, "Food", date(2025, 3, 10))

    assert store.state.transactions == (first,)
    assert STORAGE_KEY not in storage.items

    storage.fail = False
    second = store.add_transaction("income", 50, "Gig", date(2025, 3, 11))

    assert load_state(storage).transactions == (second, first)
