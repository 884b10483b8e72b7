from __future__ import annotations
from datetime import datetime, time
from typing import List, Sequence, Tuple
from icalendar import Calendar, Event as IcsEvent
from models import StudySession, Subject
from views import subject_name, topic_names


def _parse_hhmm(value: str) -> time:
    hours, minutes = value.strip().split(":")
    return time(hour=int(hours), minute=int(minutes))


def schedule_to_ics(
    sessions: Sequence[StudySession],
    subjects: Sequence[Subject],
) -> Tuple[bytes, List[str]]:
    cal = Calendar()
    cal.add("PRODID", "-//StudyFlow//Local//")
    cal.add("version", "2.0")
    cal.add("X-WR-CALNAME", "Study Plan")
    # Floating times: sessions are wall-clock slots in whatever zone the user is in

    warnings: List[str] = []

    for session in sorted(sessions, key=lambda s: (s.date, s.start_time)):
        name = subject_name(subjects, session.subject_id)
        try:
            start = datetime.combine(session.date, _parse_hhmm(session.start_time))
            end = datetime.combine(session.date, _parse_hhmm(session.end_time))
        except ValueError:
            warnings.append(f"{name} on {session.date.isoformat()} has an unreadable time and was skipped.")
            continue
        if end <= start:
            warnings.append(
                f"{name} on {session.date.isoformat()} ends before it starts "
                f"({session.start_time}-{session.end_time}) and was skipped."
            )
            continue

        event = IcsEvent()
        event.add("uid", f"{session.id}@studyflow")
        event.add("summary", f"Study: {name}")
        event.add("dtstart", start)
        event.add("dtend", end)
        lines = [f"Type: {session.type}"]
        topics = topic_names(subjects, session.subject_id, session.topic_ids)
        if topics:
            lines.append("Topics: " + ", ".join(topics))
        if session.notes:
            lines.append(session.notes)
        event.add("description", "\n".join(lines))
        if session.is_done:
            event.add("status", "CONFIRMED")
        cal.add_component(event)

    return cal.to_ical(), warnings
