"""
Pure collection edits.

The store only accepts whole collections, so every UI action builds the
complete new list here and hands it to the matching replace_* operation.
Nothing in this module mutates its inputs.
"""
from __future__ import annotations
import random
from datetime import date
from typing import List, Sequence

from models import (
    BusyBlock,
    Exam,
    Importance,
    Subject,
    Topic,
    new_id,
)


def random_color() -> str:
    return "#{:06x}".format(random.randint(0, 0xFFFFFF))


def add_subject(subjects: Sequence[Subject], name: str) -> List[Subject]:
    name = name.strip()
    if not name:
        raise ValueError("Subject name cannot be empty.")
    subject = Subject(id=new_id(), name=name, difficulty="Medium", color=random_color())
    return [*subjects, subject]


def remove_subject(subjects: Sequence[Subject], subject_id: str) -> List[Subject]:
    # Topics are embedded, so they go with their subject
    return [s for s in subjects if s.id != subject_id]


def update_subject(subjects: Sequence[Subject], subject_id: str, **changes) -> List[Subject]:
    return [s.model_copy(update=changes) if s.id == subject_id else s for s in subjects]


def _with_topics(subjects: Sequence[Subject], subject_id: str, transform) -> List[Subject]:
    return [
        s.model_copy(update={"topics": transform(s.topics)}) if s.id == subject_id else s
        for s in subjects
    ]


def add_topic(
    subjects: Sequence[Subject],
    subject_id: str,
    name: str,
    estimated_hours: float = 1.0,
) -> List[Subject]:
    name = name.strip()
    if not name:
        raise ValueError("Topic name cannot be empty.")
    topic = Topic(
        id=new_id(),
        name=name,
        estimated_hours=estimated_hours if estimated_hours > 0 else 1.0,
        status="New",
        completed=False,
    )
    return _with_topics(subjects, subject_id, lambda topics: [*topics, topic])


def toggle_topic(subjects: Sequence[Subject], subject_id: str, topic_id: str) -> List[Subject]:
    return _with_topics(
        subjects,
        subject_id,
        lambda topics: [
            t.model_copy(update={"completed": not t.completed}) if t.id == topic_id else t
            for t in topics
        ],
    )


def remove_topic(subjects: Sequence[Subject], subject_id: str, topic_id: str) -> List[Subject]:
    return _with_topics(
        subjects, subject_id, lambda topics: [t for t in topics if t.id != topic_id]
    )


def upsert_busy_block(blocks: Sequence[BusyBlock], block: BusyBlock) -> List[BusyBlock]:
    if any(b.id == block.id for b in blocks):
        return [block if b.id == block.id else b for b in blocks]
    return [*blocks, block]


def remove_busy_block(blocks: Sequence[BusyBlock], block_id: str) -> List[BusyBlock]:
    return [b for b in blocks if b.id != block_id]


def add_exam(
    exams: Sequence[Exam],
    subject_id: str,
    title: str,
    exam_date: date,
    importance: Importance = "Medium",
) -> List[Exam]:
    title = title.strip()
    if not title or not subject_id:
        raise ValueError("Exam title and subject are required.")
    exam = Exam(
        id=new_id(),
        subject_id=subject_id,
        date=exam_date,
        title=title,
        importance=importance,
    )
    return [*exams, exam]


def remove_exam(exams: Sequence[Exam], exam_id: str) -> List[Exam]:
    return [e for e in exams if e.id != exam_id]
