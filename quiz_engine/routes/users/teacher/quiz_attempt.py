from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from quiz_engine.database import get_db
from quiz_engine.models import User
from quiz_engine.auth.dependencies import is_teacher
from quiz_engine.auth.classroom_access import get_quiz_or_404, ensure_quiz_owner
from quiz_engine.helpers.attempt_lifecycle import list_attempts, DEFAULT_STATUS_FILTER
from quiz_engine.helpers.grading_override import grade_attempt
from quiz_engine.schemas.quiz_attempt import AttemptListItem, AttemptGradeRequest, AttemptGradeResponse

router = APIRouter(
    prefix="/teacher/quiz-attempt",
    tags=["Teacher Quiz Attempt Endpoints"]
)


@router.get(
    "/list-attempts/{quiz_id}",
    response_model=list[AttemptListItem],
)
async def list_quiz_attempts_for_teacher(
    quiz_id: UUID,
    status: str = Query(DEFAULT_STATUS_FILTER, description="needs_grading, completed, in_progress, expired or all"),
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    # --------------------------
    # Fetch quiz + ownership check
    # --------------------------
    quiz = await get_quiz_or_404(quiz_id, db)
    await ensure_quiz_owner(quiz.id, current_user.id, db)

    # --------------------------
    # Fetch attempts (newest first)
    # --------------------------
    attempts = await list_attempts(db, quiz.id, status)

    # --------------------------
    # Response mapping
    # --------------------------
    return [
        AttemptListItem(
            id=a.id,
            quiz_id=a.quiz_id,
            student_id=a.student_id,
            student_name=a.student.name if a.student else "",
            attempt_no=a.attempt_no,
            status=a.status,
            score=a.score,
            answers=a.answers,
            grading=a.grading,
            started_at=a.started_at,
            submitted_at=a.submitted_at,
            expires_at=a.expires_at,
            comment=a.comment,
            grader_id=a.grader_id,
            graded_at=a.graded_at,
        )
        for a in attempts
    ]


@router.patch(
    "/grade-attempt/{quiz_id}/{attempt_id}",
    response_model=AttemptGradeResponse,
)
async def grade_quiz_attempt(
    quiz_id: UUID,
    attempt_id: UUID,
    payload: AttemptGradeRequest,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    await ensure_quiz_owner(quiz.id, current_user.id, db)

    attempt = await grade_attempt(
        db,
        quiz,
        attempt_id,
        grader_id=current_user.id,
        score=payload.score,
        grading=payload.grading,
        comment=payload.comment,
    )

    return AttemptGradeResponse(
        attempt_id=attempt.id,
        status=attempt.status,
        score=attempt.score,
        grader_id=attempt.grader_id,
        graded_at=attempt.graded_at,
        comment=attempt.comment,
    )
