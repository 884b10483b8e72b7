"""Tests for the state store: load fallback, write discipline and mutations."""
from datetime import date

import pytest

from conftest import make_session
from models import AppData, UserPreferences, default_app_data
from storage import STORAGE_KEY, MemoryStorage
from store import StateStore


def test_load_without_stored_data_returns_defaults(memory_storage: MemoryStorage) -> None:
    store = StateStore(memory_storage)
    assert store.load() == default_app_data()


def test_load_returns_persisted_data(sample_data: AppData) -> None:
    storage = MemoryStorage({STORAGE_KEY: sample_data.to_json()})
    assert StateStore(storage).load() == sample_data


@pytest.mark.parametrize("raw", ["{not json", "[]", '{"schedule": [{"id": 1}]}'])
def test_unparseable_data_falls_back_to_defaults(raw: str) -> None:
    storage = MemoryStorage({STORAGE_KEY: raw})
    assert StateStore(storage).load() == default_app_data()


def test_first_load_does_not_write(memory_storage: MemoryStorage) -> None:
    StateStore(memory_storage).load()
    assert memory_storage.writes == 0
    assert memory_storage.get(STORAGE_KEY) is None


def test_mutations_before_load_are_not_persisted(memory_storage: MemoryStorage) -> None:
    store = StateStore(memory_storage)
    store.replace_exams([])
    assert memory_storage.writes == 0


def test_every_mutation_after_load_persists(
    memory_storage: MemoryStorage, sample_data: AppData
) -> None:
    store = StateStore(memory_storage)
    store.load()
    store.replace_subjects(sample_data.subjects)
    store.replace_busy_blocks(sample_data.busy_blocks)
    store.replace_exams(sample_data.exams)
    store.replace_schedule(sample_data.schedule)
    store.replace_preferences(sample_data.preferences)
    assert memory_storage.writes == 5
    assert AppData.model_validate_json(memory_storage.get(STORAGE_KEY)) == sample_data


def test_save_then_load_round_trip(sample_data: AppData) -> None:
    storage = MemoryStorage({STORAGE_KEY: sample_data.to_json()})
    store = StateStore(storage)
    store.load()
    store.save()
    assert StateStore(storage).load() == sample_data


def test_replace_builds_new_snapshot(sample_data: AppData) -> None:
    store = StateStore(MemoryStorage({STORAGE_KEY: sample_data.to_json()}))
    before = store.load()
    after = store.replace_exams([])
    assert after is store.data
    assert after is not before
    assert before.exams and not after.exams
    assert after.subjects == before.subjects


def test_replace_copies_the_given_collection(memory_storage: MemoryStorage) -> None:
    store = StateStore(memory_storage)
    store.load()
    sessions = [make_session("a", date(2025, 1, 1))]
    store.replace_schedule(sessions)
    sessions.append(make_session("b", date(2025, 1, 1)))
    assert [s.id for s in store.data.schedule] == ["a"]


def test_toggle_session_done_flips_flag(sample_data: AppData) -> None:
    store = StateStore(MemoryStorage({STORAGE_KEY: sample_data.to_json()}))
    store.load()
    store.toggle_session_done("s1")
    flags = {s.id: s.is_done for s in store.data.schedule}
    assert flags == {"s1": True, "s2": True, "s3": False}


def test_toggle_twice_restores_schedule(sample_data: AppData) -> None:
    store = StateStore(MemoryStorage({STORAGE_KEY: sample_data.to_json()}))
    original = store.load().schedule
    for session in original:
        store.toggle_session_done(session.id)
        store.toggle_session_done(session.id)
    assert store.data.schedule == original


def test_toggle_unknown_id_is_a_no_op(sample_data: AppData) -> None:
    storage = MemoryStorage({STORAGE_KEY: sample_data.to_json()})
    store = StateStore(storage)
    before = store.load()
    assert store.toggle_session_done("missing") is before
    assert storage.writes == 0


def test_toggle_does_not_mutate_previous_snapshot(sample_data: AppData) -> None:
    store = StateStore(MemoryStorage({STORAGE_KEY: sample_data.to_json()}))
    before = store.load()
    store.toggle_session_done("s1")
    assert before.schedule[0].is_done is False


def test_reset_keeps_preferences(sample_data: AppData) -> None:
    store = StateStore(MemoryStorage({STORAGE_KEY: sample_data.to_json()}))
    store.load()
    data = store.reset()
    assert data.subjects == [] and data.busy_blocks == []
    assert data.exams == [] and data.schedule == []
    assert data.preferences == sample_data.preferences


def test_subscribers_see_each_snapshot(memory_storage: MemoryStorage) -> None:
    store = StateStore(memory_storage)
    store.load()
    seen = []
    unsubscribe = store.subscribe(seen.append)
    store.replace_preferences(UserPreferences(max_hours_per_day=2))
    unsubscribe()
    store.replace_exams([])
    assert len(seen) == 1
    assert seen[0].preferences.max_hours_per_day == 2
