from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Callable, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from ai_planner import MalformedPlanError, PlanningError
from models import (
    HHMM_PATTERN,
    BusyBlock,
    Exam,
    SessionType,
    StudySession,
    Subject,
    UserPreferences,
    day_name,
    new_id,
)
from store import StateStore

logger = logging.getLogger(__name__)

GENERATE_FAILED = "Failed to generate plan. Please check your API key and try again."

Proposer = Callable[
    [Sequence[Subject], Sequence[Exam], Sequence[BusyBlock], UserPreferences, date, int],
    List[Any],
]


class PlanInProgressError(RuntimeError):
    pass


class ProposedSession(BaseModel):
    """
    One record from the planning collaborator. Strict: wrong types are
    rejected instead of coerced.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, strict=True)

    day_offset: int
    start_time: str = Field(pattern=HHMM_PATTERN)
    end_time: str = Field(pattern=HHMM_PATTERN)
    subject_id: str
    topic_ids: List[str]
    type: SessionType
    reasoning: Optional[str] = None


def parse_proposals(raw: Any) -> List[ProposedSession]:
    if not isinstance(raw, list):
        raise MalformedPlanError("Expected a list of session records.")
    proposals: List[ProposedSession] = []
    for index, record in enumerate(raw):
        if not isinstance(record, dict):
            raise MalformedPlanError(f"Record {index} is not an object.")
        try:
            proposals.append(ProposedSession.model_validate(record))
        except ValidationError as e:
            raise MalformedPlanError(f"Record {index} is invalid: {e}") from e
    return proposals


def sessions_from_proposals(
    proposals: Iterable[ProposedSession],
    anchor: date,
) -> List[StudySession]:
    """
    No checks against subjects, topics, busy blocks or daily limits: whatever
    the collaborator proposed is kept and rendered with fallback labels.
    """
    sessions: List[StudySession] = []
    for p in proposals:
        try:
            session_date = anchor + timedelta(days=p.day_offset)
        except (OverflowError, ValueError) as e:
            raise MalformedPlanError(f"Day offset {p.day_offset} is out of range.") from e
        sessions.append(StudySession(
            id=new_id(),
            date=session_date,
            day_of_week=day_name(session_date),
            start_time=p.start_time,
            end_time=p.end_time,
            subject_id=p.subject_id,
            topic_ids=list(p.topic_ids),
            type=p.type,
            is_done=False,
            notes=p.reasoning or None,
        ))
    return sessions


@dataclass(frozen=True)
class PlanResult:
    sessions: List[StudySession] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, sessions: List[StudySession]) -> "PlanResult":
        return cls(sessions=sessions)

    @classmethod
    def failure(cls, reason: str) -> "PlanResult":
        return cls(error=reason)


class PlanGenerator:
    """
    Runs one plan request at a time and swaps in the whole new schedule only
    when every record is valid.
    """

    def __init__(self, store: StateStore, propose: Proposer) -> None:
        self._store = store
        self._propose = propose
        self._in_flight = False
        self.last_error: Optional[str] = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def generate(self, start: date | None = None, horizon_days: int = 7) -> PlanResult:
        """
        Ask for `horizon_days` days of sessions beginning at `start`
        (today when omitted). Day offsets in the answer count from `start`.
        """
        if self._in_flight:
            raise PlanInProgressError("A plan request is already running.")
        start = start or date.today()
        self._in_flight = True
        self.last_error = None
        try:
            data = self._store.data
            raw = self._propose(
                data.subjects,
                data.exams,
                data.busy_blocks,
                data.preferences,
                start,
                horizon_days,
            )
            sessions = sessions_from_proposals(parse_proposals(raw), start)
        except PlanningError:
            logger.exception("Plan generation failed")
            self.last_error = GENERATE_FAILED
            return PlanResult.failure(GENERATE_FAILED)
        finally:
            self._in_flight = False

        self._store.replace_schedule(sessions)
        logger.info("Imported %d study sessions starting %s", len(sessions), start.isoformat())
        return PlanResult.success(sessions)
