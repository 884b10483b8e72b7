"""
Gemini-backed collaborators: the study plan proposer and the motivational quote.

Both are black boxes to the rest of the app. The proposer returns raw records
(validated later by plan_import) or raises PlanningError; the quote never
raises and falls back to fixed strings.
"""
from __future__ import annotations
import json
import logging
import re
from datetime import date
from typing import Any, List, Optional, Protocol, Sequence

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions

from config import DEFAULT_MODEL, Config
from models import BusyBlock, Exam, Subject, UserPreferences

logger = logging.getLogger(__name__)

QUOTE_PROMPT = (
    "Give me a very short, punchy, unique motivational quote for a university "
    "student studying hard. Max 15 words."
)
QUOTE_NO_KEY = "Keep pushing forward!"
QUOTE_EMPTY = "You got this!"
QUOTE_FAILED = "Focus on the process, not the outcome."

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class PlanningError(Exception):
    """The planning collaborator could not produce a usable answer."""


class MalformedPlanError(PlanningError):
    """The collaborator answered, but not with a valid list of session records."""


class TextGenerator(Protocol):
    def generate_text(self, prompt: str, json_mode: bool = False) -> str: ...


class GeminiClient:
    def __init__(self, api_key: str, model_name: str = DEFAULT_MODEL) -> None:
        if not api_key:
            raise PlanningError("API Key not found in environment variables.")
        genai.configure(api_key=api_key)
        self.model_name = model_name

    def generate_text(self, prompt: str, json_mode: bool = False) -> str:
        generation_config = {"response_mime_type": "application/json"} if json_mode else None
        model = genai.GenerativeModel(self.model_name, generation_config=generation_config)
        try:
            response = model.generate_content(prompt)
            # .text raises ValueError when the candidate was blocked or is empty
            return response.text or ""
        except (
            google_exceptions.GoogleAPIError,
            google_auth_exceptions.GoogleAuthError,
            ValueError,
        ) as e:
            raise PlanningError(f"Gemini request failed: {e}") from e


def _ask(client: TextGenerator, prompt: str, json_mode: bool = False) -> str:
    """
    Every failure of a generator, whatever its type, comes out as PlanningError.
    """
    try:
        return client.generate_text(prompt, json_mode=json_mode)
    except PlanningError:
        raise
    except Exception as e:
        logger.warning("Text generation failed unexpectedly", exc_info=True)
        raise PlanningError(f"Request failed: {e}") from e


def client_from_config(config: Config) -> Optional[GeminiClient]:
    if not config.ai_enabled:
        return None
    return GeminiClient(config.api_key, config.model_name)


def build_plan_prompt(
    subjects: Sequence[Subject],
    exams: Sequence[Exam],
    busy_blocks: Sequence[BusyBlock],
    preferences: UserPreferences,
    start_date: date,
    horizon_days: int,
) -> str:
    subjects_context = [
        {
            "id": s.id,
            "name": s.name,
            "difficulty": s.difficulty,
            "topics": [
                {
                    "id": t.id,
                    "name": t.name,
                    "estimatedHours": t.estimated_hours,
                    "completed": t.completed,
                }
                for t in s.topics
            ],
        }
        for s in subjects
    ]
    exams_context = [
        {
            "subjectId": e.subject_id,
            "title": e.title,
            "date": e.date.isoformat(),
            "importance": e.importance,
        }
        for e in exams
    ]
    busy_context = [
        {"day": b.day, "start": b.start_time, "end": b.end_time, "reason": b.title}
        for b in busy_blocks
    ]

    return f"""
You are an expert university study planner. Create a {horizon_days}-day study schedule
starting from {start_date.strftime("%A %Y-%m-%d")}.

Constraints:
1. I can study at most {preferences.max_hours_per_day:g} hours per day.
2. I prefer studying between {preferences.preferred_start_hour}:00 and {preferences.preferred_end_hour}:00.
3. I cannot study during these weekly busy blocks: {json.dumps(busy_context)}.
4. Prioritize subjects with upcoming exams: {json.dumps(exams_context)}.
5. Subjects and topics: {json.dumps(subjects_context)}.

Planning strategy:
- Schedule "New" sessions for topics whose "completed" is false and "Revision"
  sessions for completed topics, especially when their exam is close.
- Do not favour subjects just because they have more topics; weigh difficulty
  and exam dates instead.
- Sessions last at most 90 minutes. Only output study slots, no breaks.

Return only a JSON array. Each element must have:
  "dayOffset" (integer, 0 for the start date),
  "startTime" and "endTime" ("HH:mm", 24-hour),
  "subjectId" (an id from the subjects list),
  "topicIds" (array of topic ids covered),
  "type" (one of "New", "Revision", "Practice"),
  "reasoning" (optional short reason for the slot).
""".strip()


def parse_plan_response(text: str) -> List[Any]:
    cleaned = _FENCE_RE.sub("", (text or "").strip()).strip()
    if not cleaned:
        raise MalformedPlanError("The planner returned an empty response.")
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedPlanError(f"The planner did not return valid JSON: {e}") from e
    if not isinstance(payload, list):
        raise MalformedPlanError("The planner response is not a JSON array.")
    return payload


def propose_study_plan(
    subjects: Sequence[Subject],
    exams: Sequence[Exam],
    busy_blocks: Sequence[BusyBlock],
    preferences: UserPreferences,
    start_date: date,
    horizon_days: int = 7,
    client: Optional[TextGenerator] = None,
) -> List[Any]:
    if client is None:
        raise PlanningError("API Key not found in environment variables.")
    prompt = build_plan_prompt(
        subjects, exams, busy_blocks, preferences, start_date, horizon_days
    )
    text = _ask(client, prompt, json_mode=True)
    return parse_plan_response(text)


def get_motivational_quote(client: Optional[TextGenerator] = None) -> str:
    if client is None:
        return QUOTE_NO_KEY
    try:
        text = _ask(client, QUOTE_PROMPT)
    except PlanningError:
        logger.info("Quote request failed, using fallback", exc_info=True)
        return QUOTE_FAILED
    return text.strip() or QUOTE_EMPTY
