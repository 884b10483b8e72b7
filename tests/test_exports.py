"""Tests for the ICS and PDF exports of the study schedule."""
from datetime import date

from icalendar import Calendar

from calendar_export import schedule_to_ics
from conftest import make_session
from models import AppData
from pdf_export import schedule_to_pdf


def test_ics_has_one_event_per_session(sample_data: AppData) -> None:
    data, warnings = schedule_to_ics(sample_data.schedule, sample_data.subjects)
    assert warnings == []
    cal = Calendar.from_ical(data)
    events = [c for c in cal.walk() if c.name == "VEVENT"]
    assert len(events) == 3
    first = events[0]
    assert str(first.get("SUMMARY")) == "Study: Linear Algebra"
    assert first.decoded("DTSTART").hour == 9
    assert "Topics: Eigenvalues" in str(first.get("DESCRIPTION"))
    assert "warm up" in str(first.get("DESCRIPTION"))


def test_ics_skips_sessions_ending_before_start(sample_data: AppData) -> None:
    bad = make_session("bad", date(2025, 1, 1), "22:00", "21:00", subject_id="gone")
    data, warnings = schedule_to_ics([bad], sample_data.subjects)
    assert len(warnings) == 1 and "Unknown Subject" in warnings[0]
    events = [c for c in Calendar.from_ical(data).walk() if c.name == "VEVENT"]
    assert events == []


def test_pdf_is_generated(sample_data: AppData) -> None:
    pdf = schedule_to_pdf(sample_data, date(2025, 1, 1))
    assert pdf.startswith(b"%PDF")


def test_pdf_with_empty_week() -> None:
    assert schedule_to_pdf(AppData(), date(2025, 1, 1)).startswith(b"%PDF")
