import logging
import math
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quiz_engine.exceptions import NotFoundError
from quiz_engine.helpers.attempt_lifecycle import results_link
from quiz_engine.helpers.coercion import to_text
from quiz_engine.helpers.notifications import dispatch_notification
from quiz_engine.models import AttemptStatus, NotificationType, Quiz, QuizAttempt

logger = logging.getLogger(__name__)


def coerce_score(value: Any) -> int:
    """Numeric score from loosely-typed input; 0 when it is not a number."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(to_text(value).strip() or 0)
        except ValueError:
            return 0

    if math.isnan(number) or math.isinf(number):
        return 0
    # half away from zero
    return int(math.copysign(math.floor(abs(number) + 0.5), number))


async def grade_attempt(
    db: AsyncSession,
    quiz: Quiz,
    attempt_id: UUID,
    grader_id: UUID,
    score: Any,
    grading: Optional[Dict[str, Any]] = None,
    comment: Optional[str] = None,
    now: Optional[datetime] = None,
) -> QuizAttempt:
    """
    Teacher override of an attempt's result.

    Replaces score, grading and comment outright and marks the attempt
    completed, whatever its previous state. Re-grading is allowed.
    """
    result = await db.execute(
        select(QuizAttempt).where(
            QuizAttempt.id == attempt_id,
            QuizAttempt.quiz_id == quiz.id,
        )
    )
    attempt = result.scalar_one_or_none()

    if not attempt:
        raise NotFoundError("Attempt not found")

    previous_status = attempt.status

    attempt.score = coerce_score(score)
    attempt.status = AttemptStatus.COMPLETED
    attempt.grading = grading or {}
    attempt.comment = to_text(comment) if comment else ""
    attempt.grader_id = grader_id
    attempt.graded_at = now or datetime.utcnow()

    await db.commit()
    await db.refresh(attempt)

    logger.info(
        f"Attempt {attempt.id} graded by {grader_id}: "
        f"{previous_status.value} -> completed, score={attempt.score}"
    )

    notification = await dispatch_notification(
        db,
        recipient_id=attempt.student_id,
        sender_id=grader_id,
        type=NotificationType.GRADE,
        message=f'Your quiz "{quiz.title or "Quiz"}" was graded.',
        link=results_link(quiz.id),
    )
    if notification is None:
        # the failed dispatch rolled back and expired the session
        await db.refresh(attempt)

    return attempt
