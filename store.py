from __future__ import annotations
import logging
from typing import Callable, Iterable, List

from pydantic import ValidationError

from models import (
    AppData,
    BusyBlock,
    Exam,
    StudySession,
    Subject,
    UserPreferences,
    default_app_data,
)
from storage import STORAGE_KEY, KeyValueStorage

logger = logging.getLogger(__name__)

Listener = Callable[[AppData], None]


class StateStore:
    """
    Holds the one AppData snapshot and funnels every change through named
    operations. Each operation builds a new snapshot; the previous one is
    never mutated.

    Writes start only after the first load(), so an absent or broken file is
    not overwritten with defaults before the user changes anything.
    """

    def __init__(self, storage: KeyValueStorage, key: str = STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._data = default_app_data()
        self._loaded = False
        self._listeners: List[Listener] = []

    @property
    def data(self) -> AppData:
        return self._data

    @property
    def loaded(self) -> bool:
        return self._loaded

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def load(self) -> AppData:
        raw = self._storage.get(self._key)
        data = None
        if raw:
            try:
                data = AppData.model_validate_json(raw)
            except ValidationError:
                logger.warning("Stored data under %r is unreadable, using defaults", self._key)
        if data is None:
            data = default_app_data()
        self._data = data
        self._loaded = True
        return data

    def save(self) -> None:
        self._storage.set(self._key, self._data.to_json())

    def _commit(self, data: AppData) -> AppData:
        self._data = data
        if self._loaded:
            self.save()
        for listener in list(self._listeners):
            listener(data)
        return data

    def _replace(self, **fields) -> AppData:
        return self._commit(self._data.model_copy(update=fields))

    def replace_subjects(self, subjects: Iterable[Subject]) -> AppData:
        return self._replace(subjects=list(subjects))

    def replace_busy_blocks(self, blocks: Iterable[BusyBlock]) -> AppData:
        return self._replace(busy_blocks=list(blocks))

    def replace_exams(self, exams: Iterable[Exam]) -> AppData:
        return self._replace(exams=list(exams))

    def replace_schedule(self, sessions: Iterable[StudySession]) -> AppData:
        return self._replace(schedule=list(sessions))

    def replace_preferences(self, preferences: UserPreferences) -> AppData:
        return self._replace(preferences=preferences)

    def toggle_session_done(self, session_id: str) -> AppData:
        if not any(s.id == session_id for s in self._data.schedule):
            return self._data
        schedule = [
            s.model_copy(update={"is_done": not s.is_done}) if s.id == session_id else s
            for s in self._data.schedule
        ]
        return self.replace_schedule(schedule)

    def reset(self) -> AppData:
        """
        Clear subjects, busy blocks, exams and the schedule. Preferences stay.
        """
        return self._replace(subjects=[], busy_blocks=[], exams=[], schedule=[])
