from __future__ import annotations
import math
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from models import (
    DAYS_OF_WEEK,
    AppData,
    BusyBlock,
    Exam,
    StudySession,
    Subject,
)

UNKNOWN_SUBJECT = "Unknown Subject"
UNKNOWN_TOPIC = "Topic"


def _today(today: date | None) -> date:
    return today if today is not None else date.today()


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now()


def _percent(part: int, whole: int) -> int:
    # Half-up, so 12.5% shows as 13%
    return int(math.floor(part / max(1, whole) * 100 + 0.5))


def todays_agenda(data: AppData, today: date | None = None) -> List[StudySession]:
    day = _today(today)
    sessions = [s for s in data.schedule if s.date == day]
    # HH:mm is zero padded, so string order is time order
    return sorted(sessions, key=lambda s: s.start_time)


def sessions_between(
    schedule: Sequence[StudySession],
    start: date,
    end: date,
) -> List[StudySession]:
    window = [s for s in schedule if start <= s.date <= end]
    return sorted(window, key=lambda s: (s.date, s.start_time))


def completed_count(schedule: Sequence[StudySession]) -> int:
    return sum(1 for s in schedule if s.is_done)


def progress_percent(schedule: Sequence[StudySession]) -> int:
    return _percent(completed_count(schedule), len(schedule))


def next_exam(exams: Sequence[Exam], now: datetime | None = None) -> Optional[Exam]:
    """
    Earliest exam on or after today's calendar date. sorted() is stable, so
    exams sharing a date keep their list order.
    """
    today = _now(now).date()
    upcoming = [e for e in exams if e.date >= today]
    if not upcoming:
        return None
    return sorted(upcoming, key=lambda e: e.date)[0]


def days_remaining(exam_date: date, now: datetime | None = None) -> int:
    delta = datetime.combine(exam_date, time.min) - _now(now)
    return max(0, math.ceil(delta / timedelta(days=1)))


def exam_countdowns(
    exams: Sequence[Exam],
    now: datetime | None = None,
) -> List[Tuple[Exam, int]]:
    current = _now(now)
    upcoming = [e for e in exams if e.date >= current.date()]
    upcoming.sort(key=lambda e: e.date)
    return [(e, days_remaining(e.date, current)) for e in upcoming]


def subject_progress(subject: Subject) -> int:
    done = sum(1 for t in subject.topics if t.completed)
    return _percent(done, len(subject.topics))


def progress_by_subject(subjects: Sequence[Subject]) -> Dict[str, int]:
    return {s.id: subject_progress(s) for s in subjects}


def find_subject(subjects: Sequence[Subject], subject_id: str) -> Optional[Subject]:
    for s in subjects:
        if s.id == subject_id:
            return s
    return None


def subject_name(subjects: Sequence[Subject], subject_id: str) -> str:
    subject = find_subject(subjects, subject_id)
    return subject.name if subject else UNKNOWN_SUBJECT


def topic_names(
    subjects: Sequence[Subject],
    subject_id: str,
    topic_ids: Sequence[str],
) -> List[str]:
    subject = find_subject(subjects, subject_id)
    by_id = {t.id: t.name for t in subject.topics} if subject else {}
    return [by_id.get(tid, UNKNOWN_TOPIC) for tid in topic_ids]


def busy_blocks_by_day(blocks: Sequence[BusyBlock]) -> Dict[str, List[BusyBlock]]:
    grouped: Dict[str, List[BusyBlock]] = {d: [] for d in DAYS_OF_WEEK}
    for block in blocks:
        grouped.setdefault(block.day, []).append(block)
    for day_blocks in grouped.values():
        day_blocks.sort(key=lambda b: b.start_time)
    return grouped
