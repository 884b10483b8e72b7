"""Tests for the pure collection edits feeding the store's replace operations."""
from datetime import date

import pytest

import edits
from models import AppData, BusyBlock


def test_add_subject_appends_with_defaults(sample_data: AppData) -> None:
    result = edits.add_subject(sample_data.subjects, "  Chemistry ")
    assert len(result) == 3 and len(sample_data.subjects) == 2
    added = result[-1]
    assert added.name == "Chemistry"
    assert added.difficulty == "Medium"
    assert added.topics == []
    assert added.color.startswith("#") and len(added.color) == 7
    assert added.id not in {s.id for s in sample_data.subjects}


def test_add_subject_rejects_blank_name(sample_data: AppData) -> None:
    with pytest.raises(ValueError):
        edits.add_subject(sample_data.subjects, "   ")


def test_remove_subject_drops_its_topics(sample_data: AppData) -> None:
    result = edits.remove_subject(sample_data.subjects, "math")
    assert [s.id for s in result] == ["hist"]


def test_update_subject(sample_data: AppData) -> None:
    result = edits.update_subject(sample_data.subjects, "hist", difficulty="Hard")
    assert result[1].difficulty == "Hard"
    assert sample_data.subjects[1].difficulty == "Easy"


def test_topic_lifecycle(sample_data: AppData) -> None:
    subjects = edits.add_topic(sample_data.subjects, "hist", "Rome", 2.5)
    [topic] = subjects[1].topics
    assert (topic.name, topic.estimated_hours, topic.status, topic.completed) == ("Rome", 2.5, "New", False)

    subjects = edits.toggle_topic(subjects, "hist", topic.id)
    assert subjects[1].topics[0].completed is True

    subjects = edits.remove_topic(subjects, "hist", topic.id)
    assert subjects[1].topics == []
    assert sample_data.subjects[1].topics == []


def test_add_topic_defaults_bad_hours_to_one(sample_data: AppData) -> None:
    subjects = edits.add_topic(sample_data.subjects, "hist", "Greece", 0)
    assert subjects[1].topics[0].estimated_hours == 1.0


def test_topic_edits_leave_other_subjects_alone(sample_data: AppData) -> None:
    subjects = edits.toggle_topic(sample_data.subjects, "math", "vec")
    assert subjects[1] is sample_data.subjects[1]
    assert [t.completed for t in subjects[0].topics] == [True, True]


def test_upsert_busy_block_edits_in_place(sample_data: AppData) -> None:
    changed = sample_data.busy_blocks[0].model_copy(update={"title": "Lab"})
    result = edits.upsert_busy_block(sample_data.busy_blocks, changed)
    assert [b.title for b in result] == ["Lab"]


def test_upsert_busy_block_appends_new(sample_data: AppData) -> None:
    block = BusyBlock(id="b2", title="Sleep", day="Sunday", start_time="00:00", end_time="08:00", type="Sleep")
    result = edits.upsert_busy_block(sample_data.busy_blocks, block)
    assert [b.id for b in result] == ["b1", "b2"]
    assert edits.remove_busy_block(result, "b1") == [block]


def test_exam_add_and_remove(sample_data: AppData) -> None:
    exams = edits.add_exam(sample_data.exams, "hist", "Essay", date(2025, 3, 1), "High")
    assert exams[-1].subject_id == "hist"
    assert exams[-1].importance == "High"
    assert [e.id for e in edits.remove_exam(exams, "e1")] == [exams[-1].id]


def test_exam_requires_title_and_subject(sample_data: AppData) -> None:
    with pytest.raises(ValueError):
        edits.add_exam(sample_data.exams, "hist", " ", date(2025, 3, 1))
    with pytest.raises(ValueError):
        edits.add_exam(sample_data.exams, "", "Essay", date(2025, 3, 1))
