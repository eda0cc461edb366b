from datetime import datetime

import pytest
from sqlalchemy import select

from quiz_engine.exceptions import NotFoundError
from quiz_engine.helpers import notifications
from quiz_engine.helpers.attempt_lifecycle import start_attempt, submit_attempt
from quiz_engine.helpers.grading_override import coerce_score, grade_attempt
from quiz_engine.helpers.page_normalizer import normalize_to_pages
from quiz_engine.helpers.quiz_page_store import write_pages
from quiz_engine.models import AttemptStatus, Notification, Quiz

NOW = datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture
async def needs_grading(db, seed):
    quiz = Quiz(
        classroom_id=seed.classroom_id,
        teacher_id=seed.teacher_id,
        title="Essay week",
        attempts_allowed=2,
    )
    db.add(quiz)
    await db.flush()
    await write_pages(db, quiz.id, normalize_to_pages([
        {"id": "q1", "type": "paragraph", "requiresManualGrading": True},
    ]))
    await db.commit()

    attempt = await start_attempt(db, quiz, seed.student_id, now=NOW)
    attempt = await submit_attempt(db, quiz, attempt.id, seed.student_id, {"q1": "My essay"}, now=NOW)
    assert attempt.status == AttemptStatus.NEEDS_GRADING
    return quiz, attempt


async def test_grade_completes_attempt(db, seed, needs_grading):
    quiz, attempt = needs_grading

    graded = await grade_attempt(
        db, quiz, attempt.id,
        grader_id=seed.teacher_id,
        score=85,
        grading={"q1": {"points": 85}},
        comment="Good structure",
        now=NOW,
    )

    assert graded.status == AttemptStatus.COMPLETED
    assert graded.score == 85
    assert graded.grading == {"q1": {"points": 85}}
    assert graded.comment == "Good structure"
    assert graded.grader_id == seed.teacher_id
    assert graded.graded_at == NOW

    result = await db.execute(select(Notification).where(Notification.recipient_id == seed.student_id))
    notification = result.scalar_one()
    assert notification.message == 'Your quiz "Essay week" was graded.'
    assert notification.sender_id == seed.teacher_id


async def test_regrade_overwrites(db, seed, needs_grading):
    quiz, attempt = needs_grading

    await grade_attempt(db, quiz, attempt.id, seed.teacher_id, 40, comment="first pass")
    graded = await grade_attempt(db, quiz, attempt.id, seed.teacher_id, "72.5")

    assert graded.score == 73
    assert graded.comment == ""
    assert graded.grading == {}
    assert graded.status == AttemptStatus.COMPLETED


async def test_grade_unknown_attempt(db, seed, needs_grading):
    quiz, _ = needs_grading
    other_quiz = Quiz(classroom_id=seed.classroom_id, teacher_id=seed.teacher_id, title="Other")
    db.add(other_quiz)
    await db.commit()

    with pytest.raises(NotFoundError):
        await grade_attempt(db, other_quiz, needs_grading[1].id, seed.teacher_id, 10)


@pytest.mark.parametrize(
    "raw,expected",
    [
        (85, 85),
        (None, 0),
        ("abc", 0),
        ("", 0),
        ("90", 90),
        (49.5, 50),
        (-2.5, -3),
        (150, 150),
        (True, 1),
        (float("nan"), 0),
        ([], 0),
    ],
)
def test_coerce_score(raw, expected):
    assert coerce_score(raw) == expected


async def test_failed_notification_does_not_fail_grading(db, seed, needs_grading, monkeypatch):
    quiz, attempt = needs_grading

    def broken(**kwargs):
        raise OSError("connection reset")

    monkeypatch.setattr(notifications, "Notification", broken)

    graded = await grade_attempt(db, quiz, attempt.id, seed.teacher_id, 85, now=NOW)

    assert graded.status == AttemptStatus.COMPLETED
    assert graded.score == 85
    assert graded.graded_at == NOW

    result = await db.execute(select(Notification))
    assert result.scalars().all() == []
