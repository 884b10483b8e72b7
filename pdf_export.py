from __future__ import annotations
from datetime import date, datetime, time, timedelta
from io import BytesIO
from typing import Dict, List
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from models import AppData, StudySession
from views import exam_countdowns, sessions_between, subject_name, topic_names


def schedule_to_pdf(data: AppData, week_start: date) -> bytes:
    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=letter,
        leftMargin=40,
        rightMargin=40,
        topMargin=40,
        bottomMargin=40,
    )
    styles = getSampleStyleSheet()
    elems = []

    week_end = week_start + timedelta(days=6)
    prefs = data.preferences
    elems.append(Paragraph(f"Study Plan: {week_start.isoformat()} - {week_end.isoformat()}", styles["Title"]))
    elems.append(Spacer(1, 10))
    elems.append(Paragraph(
        f"Max hours/day: {prefs.max_hours_per_day:g} | "
        f"Preferred window: {prefs.preferred_start_hour}:00 - {prefs.preferred_end_hour}:00",
        styles["Normal"],
    ))
    elems.append(Spacer(1, 12))

    countdowns = exam_countdowns(data.exams, datetime.combine(week_start, time.min))
    if countdowns:
        elems.append(Paragraph("Upcoming exams", styles["Heading3"]))
        exam_table_data = [["Exam", "Subject", "Date", "Days left", "Importance"]]
        for exam, days_left in countdowns:
            exam_table_data.append([
                exam.title,
                subject_name(data.subjects, exam.subject_id),
                exam.date.isoformat(),
                str(days_left),
                exam.importance,
            ])
        exam_table = Table(exam_table_data, hAlign="LEFT")
        exam_table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("ALIGN", (3, 1), (3, -1), "RIGHT"),
        ]))
        elems.append(exam_table)
        elems.append(Spacer(1, 12))

    by_day: Dict[date, List[StudySession]] = {}
    for s in sessions_between(data.schedule, week_start, week_end):
        by_day.setdefault(s.date, []).append(s)

    if not by_day:
        elems.append(Paragraph("No study sessions planned for this week.", styles["Normal"]))

    for day in sorted(by_day.keys()):
        elems.append(Paragraph(day.strftime("%A, %Y-%m-%d"), styles["Heading3"]))
        table_data = [["Time", "Subject", "Type", "Topics", "Done"]]
        for session in by_day[day]:
            topics = topic_names(data.subjects, session.subject_id, session.topic_ids)
            table_data.append([
                f"{session.start_time}-{session.end_time}",
                subject_name(data.subjects, session.subject_id),
                session.type,
                Paragraph(", ".join(topics), styles["BodyText"]),
                "Yes" if session.is_done else "No",
            ])

        table = Table(table_data, hAlign="LEFT", colWidths=[75, 130, 60, 200, 40])
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]))
        elems.append(table)
        elems.append(Spacer(1, 8))

    doc.build(elems)
    return buf.getvalue()
