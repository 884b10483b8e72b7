from __future__ import annotations
import logging
import streamlit as st
import pandas as pd
from datetime import date, datetime, time, timedelta
from functools import partial

import edits
from ai_planner import (
    GeminiClient,
    PlanningError,
    client_from_config,
    get_motivational_quote,
    propose_study_plan,
)
from calendar_export import schedule_to_ics
from config import configure_logging, load_config
from models import (
    BLOCK_TYPES,
    DAYS_OF_WEEK,
    DIFFICULTIES,
    IMPORTANCE_LEVELS,
    AppData,
    BusyBlock,
    UserPreferences,
    new_id,
)
from pdf_export import schedule_to_pdf
from plan_import import PlanGenerator
from storage import FileStorage
from store import StateStore
from views import (
    busy_blocks_by_day,
    completed_count,
    days_remaining,
    next_exam,
    progress_by_subject,
    progress_percent,
    sessions_between,
    subject_name,
    todays_agenda,
    topic_names,
)

logger = logging.getLogger(__name__)

config = load_config()
configure_logging(config.log_level)

st.set_page_config(page_title="StudyFlow", page_icon="🎓", layout="wide")


def _build_client() -> GeminiClient | None:
    try:
        return client_from_config(config)
    except PlanningError:
        logger.exception("Could not set up the Gemini client")
        return None


def _ensure_session_state() -> StateStore:
    if "store" not in st.session_state:
        store = StateStore(FileStorage(config.data_dir))
        store.load()
        st.session_state.store = store
    if "client" not in st.session_state:
        st.session_state.client = _build_client()
    if "planner" not in st.session_state:
        st.session_state.planner = PlanGenerator(
            st.session_state.store,
            partial(propose_study_plan, client=st.session_state.client),
        )
    return st.session_state.store


def _hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def _parse_hhmm(value: str) -> time:
    return datetime.strptime(value, "%H:%M").time()


def _queue_toast(message: str) -> None:
    st.session_state.toast_message = message


def _flush_toast() -> None:
    message = st.session_state.pop("toast_message", None)
    if message:
        st.toast(message)


def render_planner(store: StateStore) -> None:
    planner: PlanGenerator = st.session_state.planner
    with st.container(border=True):
        st.subheader("✨ Generate your study plan")
        st.write(
            "Let the AI look at your busy blocks, exams and topics and propose "
            f"the next {config.plan_days} days of study sessions."
        )
        if not config.ai_enabled:
            st.caption("Set GEMINI_API_KEY to enable plan generation.")
        if st.button(
            "Generate plan",
            type="primary",
            disabled=planner.in_flight,
            key="generate_plan",
        ):
            with st.spinner("Planning your week..."):
                result = planner.generate(date.today(), config.plan_days)
            if result.ok:
                _queue_toast(f"Plan generated: {len(result.sessions)} sessions.")
                st.rerun()
        if planner.last_error:
            st.error(planner.last_error)


def render_dashboard(store: StateStore) -> None:
    data = store.data
    now = datetime.now()

    if "quote" not in st.session_state:
        st.session_state.quote = get_motivational_quote(st.session_state.client)
    st.header("Hello there! 👋")
    st.caption(f"“{st.session_state.quote}” · {now.strftime('%A, %B %d')}")

    render_planner(store)

    col_left, col_right = st.columns([2, 1])
    with col_left:
        sessions = todays_agenda(data, now.date())
        st.subheader("Today's study plan")
        st.caption(f"{completed_count(sessions)}/{len(sessions)} completed")
        if not sessions:
            st.info("No sessions scheduled. Enjoy your day or generate a new plan!")
        for session in sessions:
            name = subject_name(data.subjects, session.subject_id)
            topics = topic_names(data.subjects, session.subject_id, session.topic_ids)
            shown = ", ".join(topics[:3])
            if len(topics) > 3:
                shown += f" +{len(topics) - 3} more"
            label = f"**{session.start_time}-{session.end_time}** · {name} · {session.type}"
            checked = st.checkbox(label, value=session.is_done, key=f"done_{session.id}")
            if shown or session.notes:
                st.caption(" | ".join(part for part in (shown, session.notes) if part))
            if checked != session.is_done:
                store.toggle_session_done(session.id)
                st.rerun()

    with col_right:
        st.subheader("Progress")
        st.metric("Sessions complete", f"{progress_percent(data.schedule)}%")
        done = completed_count(data.schedule)
        st.progress(progress_percent(data.schedule) / 100)
        st.caption(f"Done {done} · To do {len(data.schedule) - done}")

        st.subheader("🏆 Upcoming exam")
        exam = next_exam(data.exams, now)
        if exam is None:
            st.info("No upcoming exams. Add one in the Schedule tab!")
        else:
            st.write(f"**{subject_name(data.subjects, exam.subject_id)}** · {exam.title}")
            st.metric(exam.date.strftime("%b %d"), f"{days_remaining(exam.date, now)} days left")


def render_subjects(store: StateStore) -> None:
    st.header("Subjects & syllabus")
    data = store.data

    with st.form("add_subject_form", clear_on_submit=True):
        name = st.text_input("New subject name", placeholder="Computer Science 101")
        if st.form_submit_button("Add", type="primary"):
            try:
                store.replace_subjects(edits.add_subject(data.subjects, name))
            except ValueError as e:
                st.warning(str(e))
            else:
                _queue_toast("Subject added.")
                st.rerun()

    if not data.subjects:
        st.info("No subjects yet.")
        return

    progress = progress_by_subject(data.subjects)
    for subject in data.subjects:
        title = f"{subject.name} · {len(subject.topics)} topics · {progress[subject.id]}%"
        with st.expander(title, expanded=False):
            c1, c2 = st.columns([1, 1])
            difficulty = c1.selectbox(
                "Difficulty",
                DIFFICULTIES,
                index=DIFFICULTIES.index(subject.difficulty),
                key=f"difficulty_{subject.id}",
            )
            color = c2.color_picker("Colour", subject.color, key=f"color_{subject.id}")
            if difficulty != subject.difficulty or color != subject.color:
                store.replace_subjects(
                    edits.update_subject(data.subjects, subject.id, difficulty=difficulty, color=color)
                )
                st.rerun()

            st.progress(progress[subject.id] / 100)
            for topic in subject.topics:
                t1, t2 = st.columns([5, 1])
                checked = t1.checkbox(
                    f"{topic.name} ({topic.estimated_hours:g}h)",
                    value=topic.completed,
                    key=f"topic_{subject.id}_{topic.id}",
                )
                if checked != topic.completed:
                    store.replace_subjects(edits.toggle_topic(data.subjects, subject.id, topic.id))
                    st.rerun()
                if t2.button("Remove", key=f"remove_topic_{topic.id}"):
                    store.replace_subjects(edits.remove_topic(data.subjects, subject.id, topic.id))
                    st.rerun()

            with st.form(f"add_topic_{subject.id}", clear_on_submit=True):
                f1, f2 = st.columns([3, 1])
                topic_name = f1.text_input("Topic", placeholder="Data Structures")
                hours = f2.number_input("Hours", min_value=0.5, max_value=100.0, value=1.0, step=0.5)
                if st.form_submit_button("Add topic"):
                    try:
                        store.replace_subjects(
                            edits.add_topic(data.subjects, subject.id, topic_name, float(hours))
                        )
                    except ValueError as e:
                        st.warning(str(e))
                    else:
                        st.rerun()

            if st.button("Delete subject", key=f"delete_subject_{subject.id}"):

                @st.dialog("Delete subject?")
                def _confirm_subject_delete() -> None:
                    st.write("Are you sure? This will delete all topics for this subject.")
                    if st.button("Delete", type="primary"):
                        store.replace_subjects(edits.remove_subject(store.data.subjects, subject.id))
                        _queue_toast("Subject deleted.")
                        st.rerun()

                _confirm_subject_delete()


def render_busy_blocks(store: StateStore) -> None:
    st.subheader("Weekly busy blocks")
    data = store.data
    editing_id = st.session_state.get("editing_block_id")
    editing = next((b for b in data.busy_blocks if b.id == editing_id), None)

    with st.form("busy_block_form", clear_on_submit=True):
        title = st.text_input("Title", value=editing.title if editing else "")
        c1, c2, c3, c4 = st.columns(4)
        day = c1.selectbox(
            "Day", DAYS_OF_WEEK, index=DAYS_OF_WEEK.index(editing.day) if editing else 0
        )
        start = c2.time_input("Start", _parse_hhmm(editing.start_time) if editing else time(9, 0))
        end = c3.time_input("End", _parse_hhmm(editing.end_time) if editing else time(10, 0))
        block_type = c4.selectbox(
            "Type", BLOCK_TYPES, index=BLOCK_TYPES.index(editing.type) if editing else 0
        )
        label = "Update block" if editing else "Add block"
        if st.form_submit_button(label, type="primary"):
            if not title.strip():
                st.warning("Title is required.")
            else:
                block = BusyBlock(
                    id=editing.id if editing else new_id(),
                    title=title.strip(),
                    day=day,
                    start_time=_hhmm(start),
                    end_time=_hhmm(end),
                    type=block_type,
                )
                store.replace_busy_blocks(edits.upsert_busy_block(data.busy_blocks, block))
                st.session_state.pop("editing_block_id", None)
                st.rerun()

    if not data.busy_blocks:
        st.info("No busy blocks yet.")
        return

    for day, blocks in busy_blocks_by_day(data.busy_blocks).items():
        if not blocks:
            continue
        st.markdown(f"**{day}**")
        for block in blocks:
            b1, b2, b3 = st.columns([4, 1, 1])
            b1.write(f"{block.start_time}-{block.end_time} · {block.title} ({block.type})")
            if b2.button("Edit", key=f"edit_block_{block.id}"):
                st.session_state.editing_block_id = block.id
                st.rerun()
            if b3.button("Delete", key=f"delete_block_{block.id}"):
                if editing_id == block.id:
                    st.session_state.pop("editing_block_id", None)
                store.replace_busy_blocks(edits.remove_busy_block(data.busy_blocks, block.id))
                st.rerun()


def render_exams(store: StateStore) -> None:
    st.subheader("Exams & deadlines")
    data = store.data

    if not data.subjects:
        st.info("Add a subject before adding exams.")
    else:
        subject_ids = [s.id for s in data.subjects]
        with st.form("add_exam_form", clear_on_submit=True):
            c1, c2, c3, c4 = st.columns([3, 2, 2, 2])
            title = c1.text_input("Exam name", placeholder="Midterm")
            subject_id = c2.selectbox(
                "Subject", subject_ids, format_func=partial(subject_name, data.subjects)
            )
            exam_date = c3.date_input("Date", value=date.today() + timedelta(days=14))
            importance = c4.selectbox("Importance", IMPORTANCE_LEVELS, index=1)
            if st.form_submit_button("Add exam", type="primary"):
                try:
                    store.replace_exams(
                        edits.add_exam(data.exams, subject_id, title, exam_date, importance)
                    )
                except ValueError as e:
                    st.warning(str(e))
                else:
                    st.rerun()

    if not data.exams:
        st.info("No exams yet.")
        return

    for exam in sorted(data.exams, key=lambda e: e.date):
        e1, e2 = st.columns([5, 1])
        e1.write(
            f"{exam.date.strftime('%b %d')} · **{exam.title}** · "
            f"{subject_name(data.subjects, exam.subject_id)} · {exam.importance}"
        )
        if e2.button("Delete", key=f"delete_exam_{exam.id}"):
            store.replace_exams(edits.remove_exam(data.exams, exam.id))
            st.rerun()


def render_schedule(store: StateStore) -> None:
    st.header("Schedule")
    render_busy_blocks(store)
    st.divider()
    render_exams(store)


def render_plan(store: StateStore) -> None:
    st.header("Plan")
    data: AppData = store.data

    week_start = st.date_input("Week start", value=date.today())
    week_end = week_start + timedelta(days=6)
    st.caption(f"Week: {week_start.isoformat()} - {week_end.isoformat()}")

    week_sessions = sessions_between(data.schedule, week_start, week_end)
    if not week_sessions:
        st.info("No sessions in this week.")
        return

    rows = [
        {
            "id": s.id,
            "Date": s.date,
            "Day": s.day_of_week,
            "Time": f"{s.start_time}-{s.end_time}",
            "Subject": subject_name(data.subjects, s.subject_id),
            "Type": s.type,
            "Topics": ", ".join(topic_names(data.subjects, s.subject_id, s.topic_ids)),
            "Done": s.is_done,
            "Notes": s.notes or "",
        }
        for s in week_sessions
    ]
    df = pd.DataFrame(rows).set_index("id")
    edited = st.data_editor(
        df,
        hide_index=True,
        use_container_width=True,
        column_config={
            "Date": st.column_config.DateColumn("Date"),
            "Done": st.column_config.CheckboxColumn("Done"),
            "Notes": st.column_config.TextColumn("Notes", width="medium"),
        },
        disabled=["Date", "Day", "Time", "Subject", "Type", "Topics", "Notes"],
        key=f"week_table_{week_start.isoformat()}",
    )

    edited_records = edited.reset_index().to_dict("records")
    changed = [
        row["id"]
        for row, session in zip(edited_records, week_sessions)
        if bool(row.get("Done")) != session.is_done
    ]
    if changed and st.button("Save changes", type="primary"):
        for session_id in changed:
            store.toggle_session_done(session_id)
        _queue_toast("Changes saved.")
        st.rerun()

    done = completed_count(week_sessions)
    m1, m2, m3 = st.columns(3)
    m1.metric("Sessions this week", len(week_sessions))
    m2.metric("Done", done)
    m3.metric("Progress", f"{progress_percent(week_sessions)}%")

    st.divider()
    st.subheader("Exports")
    ics_bytes, ics_warnings = schedule_to_ics(week_sessions, data.subjects)
    st.download_button(
        "Download ICS",
        data=ics_bytes,
        file_name=f"study_plan_{week_start.isoformat()}.ics",
        mime="text/calendar",
    )
    if ics_warnings:
        st.warning(" | ".join(ics_warnings))
    st.download_button(
        "Download PDF",
        data=schedule_to_pdf(data, week_start),
        file_name=f"study_plan_{week_start.isoformat()}.pdf",
        mime="application/pdf",
    )


def render_settings(store: StateStore) -> None:
    st.header("Settings")
    prefs = store.data.preferences

    with st.form("preferences_form"):
        max_hours = st.slider("Max study hours per day", 1.0, 16.0, float(prefs.max_hours_per_day), 0.5)
        start_hour, end_hour = st.slider(
            "Preferred study hours",
            0,
            23,
            (prefs.preferred_start_hour, prefs.preferred_end_hour),
        )
        if st.form_submit_button("Save settings", type="primary"):
            store.replace_preferences(UserPreferences(
                max_hours_per_day=max_hours,
                preferred_start_hour=start_hour,
                preferred_end_hour=end_hour,
            ))
            st.toast("Settings saved.")

    if st.button("Reset data (keep settings)"):

        @st.dialog("Reset all data?")
        def _confirm_reset() -> None:
            st.write("This will clear subjects, busy blocks, exams and the schedule. Settings stay.")
            if st.button("Reset", type="primary"):
                store.reset()
                _queue_toast("Data reset.")
                st.rerun()

        _confirm_reset()


store = _ensure_session_state()

st.title("StudyFlow")
st.caption("AI study planner. Your data stays on this machine.")
_flush_toast()

with st.sidebar:
    st.header("Navigate")
    pages = ["Dashboard", "Subjects", "Schedule", "Plan", "Settings"]
    page = st.radio("Page", pages, key="nav_page", label_visibility="collapsed")
    st.caption("Workflow: Subjects -> Schedule -> Dashboard")

if page == "Dashboard":
    render_dashboard(store)
elif page == "Subjects":
    render_subjects(store)
elif page == "Schedule":
    render_schedule(store)
elif page == "Plan":
    render_plan(store)
elif page == "Settings":
    render_settings(store)
