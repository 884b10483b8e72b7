from __future__ import annotations
from datetime import date, datetime
from typing import Annotated, List, Literal, Optional
from uuid import uuid4
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


Difficulty = Literal["Easy", "Medium", "Hard"]
TopicStatus = Literal["New", "Revision", "Practice", "Completed"]
SessionType = Literal["New", "Revision", "Practice"]
DayOfWeek = Literal[
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"
]
BlockType = Literal["Class", "Tuition", "Personal", "Sleep"]
Importance = Literal["Low", "Medium", "High"]

DIFFICULTIES = ["Easy", "Medium", "Hard"]
TOPIC_STATUSES = ["New", "Revision", "Practice", "Completed"]
SESSION_TYPES = ["New", "Revision", "Practice"]
DAYS_OF_WEEK = [
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"
]
BLOCK_TYPES = ["Class", "Tuition", "Personal", "Sleep"]
IMPORTANCE_LEVELS = ["Low", "Medium", "High"]

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def new_id() -> str:
    return uuid4().hex[:12]


def day_name(d: date) -> DayOfWeek:
    # weekday() is locale independent, strftime("%A") is not
    return DAYS_OF_WEEK[d.weekday()]


def _to_calendar_date(value):
    """
    Accept plain ISO dates as well as full timestamps
    (e.g. "2025-01-05T08:00:00.000Z") and keep only the local calendar day.
    """
    if isinstance(value, str) and "T" in value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo:
            parsed = parsed.astimezone()
        return parsed.date()
    if isinstance(value, datetime):
        return value.date()
    return value


CalendarDate = Annotated[date, BeforeValidator(_to_calendar_date)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Topic(CamelModel):
    id: str
    name: str
    estimated_hours: float = Field(gt=0, default=1.0)
    status: TopicStatus = "New"
    completed: bool = False


class Subject(CamelModel):
    id: str
    name: str
    code: Optional[str] = None
    difficulty: Difficulty = "Medium"
    color: str = "#6366f1"
    topics: List[Topic] = Field(default_factory=list)


class BusyBlock(CamelModel):
    id: str
    title: str
    day: DayOfWeek
    start_time: str = Field(pattern=HHMM_PATTERN)
    end_time: str = Field(pattern=HHMM_PATTERN)
    type: BlockType = "Class"


class Exam(CamelModel):
    id: str
    subject_id: str
    date: CalendarDate
    title: str
    importance: Importance = "Medium"


class StudySession(CamelModel):
    id: str
    date: CalendarDate
    day_of_week: str
    start_time: str
    end_time: str
    subject_id: str
    topic_ids: List[str] = Field(default_factory=list)
    type: SessionType = "New"
    is_done: bool = False
    notes: Optional[str] = None


class UserPreferences(CamelModel):
    max_hours_per_day: float = Field(gt=0, le=24, default=6)
    preferred_start_hour: int = Field(ge=0, le=23, default=9)
    preferred_end_hour: int = Field(ge=0, le=23, default=22)


class AppData(CamelModel):
    subjects: List[Subject] = Field(default_factory=list)
    busy_blocks: List[BusyBlock] = Field(default_factory=list)
    exams: List[Exam] = Field(default_factory=list)
    schedule: List[StudySession] = Field(default_factory=list)
    preferences: UserPreferences = Field(default_factory=UserPreferences)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def default_app_data() -> AppData:
    return AppData(
        subjects=[
            Subject(
                id="sub_1",
                name="Computer Science 101",
                difficulty="Medium",
                color="#6366f1",
                topics=[
                    Topic(id="t1", name="Data Structures", estimated_hours=2),
                    Topic(id="t2", name="Algorithms", estimated_hours=3),
                ],
            )
        ],
        busy_blocks=[
            BusyBlock(
                id="b_1",
                title="Morning Classes",
                day="Monday",
                start_time="09:00",
                end_time="13:00",
                type="Class",
            )
        ],
        exams=[],
        schedule=[],
        preferences=UserPreferences(
            max_hours_per_day=6, preferred_start_hour=9, preferred_end_hour=22
        ),
    )
