"""
Per-student quiz attempt lifecycle.

    (start) -> in_progress -> completed       (all questions auto-scored)
                           -> needs_grading   (a question needs a human)
                           -> expired         (submitted after expires_at)
    completed / needs_grading -> completed    (teacher grading override)

Nothing ever moves back to in_progress. Expiry is lazy: it is only
detected when the student submits.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from quiz_engine.config import ATTEMPT_LIST_LIMIT, START_ATTEMPT_RETRIES
from quiz_engine.exceptions import ConflictError, NotFoundError, PolicyViolation
from quiz_engine.helpers.notifications import dispatch_notification
from quiz_engine.helpers.quiz_answer_evaluator import evaluate_quiz_answers
from quiz_engine.helpers.quiz_page_store import flatten_questions, load_pages
from quiz_engine.models import AttemptStatus, NotificationType, Quiz, QuizAttempt

logger = logging.getLogger(__name__)

SUBMITTED_STATUSES = (AttemptStatus.COMPLETED, AttemptStatus.NEEDS_GRADING)

ATTEMPT_STATUS_FILTERS = {
    "needs_grading": AttemptStatus.NEEDS_GRADING,
    "completed": AttemptStatus.COMPLETED,
    "in_progress": AttemptStatus.IN_PROGRESS,
    "expired": AttemptStatus.EXPIRED,
    "all": None,
}
DEFAULT_STATUS_FILTER = "needs_grading"


def results_link(quiz_id: UUID) -> str:
    return f"/quiz/{quiz_id}/results"


async def count_attempts(db: AsyncSession, quiz_id: UUID, student_id: UUID) -> int:
    result = await db.execute(
        select(func.count(QuizAttempt.id)).where(
            QuizAttempt.quiz_id == quiz_id,
            QuizAttempt.student_id == student_id,
        )
    )
    return result.scalar() or 0


def attempts_remaining(attempts_allowed: Optional[int], attempts_used: int) -> Optional[int]:
    if attempts_allowed is None:
        return None
    return max(0, attempts_allowed - attempts_used)


def check_availability(quiz: Quiz, now: datetime) -> None:
    if quiz.start_time is not None and now < quiz.start_time:
        raise PolicyViolation(PolicyViolation.QUIZ_NOT_OPEN, "Quiz is not open yet")
    if quiz.end_time is not None and now > quiz.end_time:
        raise PolicyViolation(PolicyViolation.QUIZ_CLOSED, "Quiz is closed")


async def start_attempt(
    db: AsyncSession,
    quiz: Quiz,
    student_id: UUID,
    now: Optional[datetime] = None,
) -> QuizAttempt:
    """
    Open a new in_progress attempt for a student.

    attempt_no is the count of prior attempts + 1. The unique
    (quiz_id, student_id, attempt_no) constraint catches two concurrent
    starts racing for the same number; the loser re-reads the count and
    is re-checked against attempts_allowed.

    Raises:
        PolicyViolation: outside the availability window, or no attempts left
        ConflictError: attempt number still contended after all retries
    """
    now = now or datetime.utcnow()
    check_availability(quiz, now)

    # Plain values: a rollback below expires the ORM instance
    quiz_id = quiz.id
    attempts_allowed = quiz.attempts_allowed
    time_limit_seconds = quiz.time_limit_seconds

    for _ in range(max(1, START_ATTEMPT_RETRIES)):
        used = await count_attempts(db, quiz_id, student_id)

        if attempts_allowed is not None and used >= attempts_allowed:
            raise PolicyViolation(PolicyViolation.NO_ATTEMPTS_REMAINING, "No attempts remaining")

        attempt = QuizAttempt(
            quiz_id=quiz_id,
            student_id=student_id,
            attempt_no=used + 1,
            status=AttemptStatus.IN_PROGRESS,
            answers={},
            started_at=now,
            expires_at=now + timedelta(seconds=time_limit_seconds) if time_limit_seconds else None,
        )
        db.add(attempt)

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.warning(
                f"Attempt number {used + 1} already taken for quiz {quiz_id}, student {student_id}; retrying"
            )
            continue

        logger.info(f"Attempt {attempt.id} started: quiz={quiz_id}, student={student_id}, no={attempt.attempt_no}")
        return attempt

    raise ConflictError("Could not start attempt, please try again")


async def get_student_attempt(
    db: AsyncSession,
    quiz_id: UUID,
    attempt_id: UUID,
    student_id: UUID,
) -> QuizAttempt:
    result = await db.execute(
        select(QuizAttempt).where(
            QuizAttempt.id == attempt_id,
            QuizAttempt.quiz_id == quiz_id,
            QuizAttempt.student_id == student_id,
        )
    )
    attempt = result.scalar_one_or_none()

    if not attempt:
        raise NotFoundError("Attempt not found")
    return attempt


async def _mark_expired(db: AsyncSession, attempt: QuizAttempt) -> None:
    await db.execute(
        update(QuizAttempt)
        .where(
            QuizAttempt.id == attempt.id,
            QuizAttempt.status == AttemptStatus.IN_PROGRESS,
        )
        .values(status=AttemptStatus.EXPIRED)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    await db.refresh(attempt)
    logger.info(f"Attempt {attempt.id} expired at submission")


async def submit_attempt(
    db: AsyncSession,
    quiz: Quiz,
    attempt_id: UUID,
    student_id: UUID,
    answers: Optional[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> QuizAttempt:
    """
    Score and close an in_progress attempt.

    The write is conditional on the attempt still being in_progress, so of
    two racing submissions only one is stored; the other is reported as
    already submitted.

    Raises:
        NotFoundError: attempt does not exist or is not the student's
        PolicyViolation: already submitted, or past expires_at
    """
    now = now or datetime.utcnow()
    answers = answers or {}

    attempt = await get_student_attempt(db, quiz.id, attempt_id, student_id)

    if attempt.status in SUBMITTED_STATUSES:
        raise PolicyViolation(PolicyViolation.ALREADY_SUBMITTED, "Attempt already submitted")

    if attempt.status == AttemptStatus.EXPIRED:
        raise PolicyViolation(PolicyViolation.ATTEMPT_EXPIRED, "Attempt has expired")

    if attempt.expires_at is not None and now > attempt.expires_at:
        await _mark_expired(db, attempt)
        raise PolicyViolation(PolicyViolation.ATTEMPT_EXPIRED, "Attempt has expired")

    pages = await load_pages(db, quiz.id)
    result = evaluate_quiz_answers(flatten_questions(pages), answers)

    written = await db.execute(
        update(QuizAttempt)
        .where(
            QuizAttempt.id == attempt.id,
            QuizAttempt.status == AttemptStatus.IN_PROGRESS,
        )
        .values(
            answers=answers,
            score=result.score,
            status=result.status,
            grading=result.grading,
            submitted_at=now,
        )
        .execution_options(synchronize_session=False)
    )

    if written.rowcount != 1:
        await db.rollback()
        raise PolicyViolation(PolicyViolation.ALREADY_SUBMITTED, "Attempt already submitted")

    await db.commit()
    await db.refresh(attempt)

    logger.info(
        f"Attempt {attempt.id} submitted: status={result.status.value}, "
        f"score={result.score}, scored={result.correct_count}/{result.scored_count}"
    )

    if result.status == AttemptStatus.COMPLETED:
        notification = await dispatch_notification(
            db,
            recipient_id=student_id,
            sender_id=quiz.teacher_id,
            type=NotificationType.GRADE,
            message=f'Your quiz "{quiz.title or "Quiz"}" was graded: {result.score}%.',
            link=results_link(quiz.id),
        )
        if notification is None:
            # the failed dispatch rolled back and expired the session
            await db.refresh(attempt)

    return attempt


async def list_attempts(
    db: AsyncSession,
    quiz_id: UUID,
    status: Optional[str] = DEFAULT_STATUS_FILTER,
) -> List[QuizAttempt]:
    """Teacher view of a quiz's attempts, newest first; unknown filters fall back to needs_grading."""
    key = status if status in ATTEMPT_STATUS_FILTERS else DEFAULT_STATUS_FILTER
    status_filter = ATTEMPT_STATUS_FILTERS[key]

    stmt = (
        select(QuizAttempt)
        .options(selectinload(QuizAttempt.student))
        .where(QuizAttempt.quiz_id == quiz_id)
    )
    if status_filter is not None:
        stmt = stmt.where(QuizAttempt.status == status_filter)

    stmt = stmt.order_by(QuizAttempt.started_at.desc(), QuizAttempt.attempt_no.desc()).limit(ATTEMPT_LIST_LIMIT)

    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_student_attempts(db: AsyncSession, quiz_id: UUID, student_id: UUID) -> List[QuizAttempt]:
    result = await db.execute(
        select(QuizAttempt)
        .where(
            QuizAttempt.quiz_id == quiz_id,
            QuizAttempt.student_id == student_id,
        )
        .order_by(QuizAttempt.attempt_no.desc())
    )
    return list(result.scalars().all())
