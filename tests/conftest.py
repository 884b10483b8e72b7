"""Shared fixtures: a small, fully populated AppData and in-memory storage."""
from datetime import date

import pytest

from models import (
    AppData,
    BusyBlock,
    Exam,
    StudySession,
    Subject,
    Topic,
    UserPreferences,
    day_name,
)
from storage import MemoryStorage


def make_session(
    session_id: str,
    day: date,
    start: str = "09:00",
    end: str = "10:00",
    subject_id: str = "math",
    done: bool = False,
    **extra,
) -> StudySession:
    return StudySession(
        id=session_id,
        date=day,
        day_of_week=day_name(day),
        start_time=start,
        end_time=end,
        subject_id=subject_id,
        topic_ids=extra.pop("topic_ids", ["alg"]),
        type=extra.pop("type", "New"),
        is_done=done,
        **extra,
    )


@pytest.fixture
def sample_data() -> AppData:
    return AppData(
        subjects=[
            Subject(
                id="math",
                name="Linear Algebra",
                difficulty="Hard",
                color="#ff0000",
                topics=[
                    Topic(id="alg", name="Eigenvalues", estimated_hours=2, completed=True),
                    Topic(id="vec", name="Vector spaces", estimated_hours=3),
                ],
            ),
            Subject(id="hist", name="History", difficulty="Easy", color="#00ff00"),
        ],
        busy_blocks=[
            BusyBlock(
                id="b1",
                title="Lecture",
                day="Tuesday",
                start_time="10:00",
                end_time="12:00",
                type="Class",
            ),
        ],
        exams=[
            Exam(id="e1", subject_id="math", date=date(2025, 1, 10), title="Final"),
        ],
        schedule=[
            make_session("s1", date(2025, 1, 1), "14:00", "15:00"),
            make_session("s2", date(2025, 1, 1), "09:00", "10:00", done=True, notes="warm up"),
            make_session("s3", date(2025, 1, 2), "09:00", "10:30", subject_id="hist", topic_ids=[]),
        ],
        preferences=UserPreferences(
            max_hours_per_day=4, preferred_start_hour=8, preferred_end_hour=20
        ),
    )


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()
