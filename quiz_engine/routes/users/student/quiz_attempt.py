from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from quiz_engine.database import get_db
from quiz_engine.models import User, AttemptStatus
from quiz_engine.auth.dependencies import is_student
from quiz_engine.auth.classroom_access import get_quiz_or_404, ensure_student_member
from quiz_engine.helpers.attempt_lifecycle import start_attempt, submit_attempt, list_student_attempts
from quiz_engine.schemas.quiz_attempt import (
    AttemptStartResponse, AttemptSubmitRequest,
    AttemptSubmitResponse, AttemptView
)

router = APIRouter(
    prefix="/student/quiz-attempt",
    tags=["Student Quiz Attempt Endpoints"]
)


@router.post(
    "/start-attempt/{quiz_id}",
    response_model=AttemptStartResponse,
    status_code=201,
)
async def start_quiz_attempt(
    quiz_id: UUID,
    current_user: User = Depends(is_student),
    db: AsyncSession = Depends(get_db),
):
    # --------------------------
    # Fetch quiz + membership check
    # --------------------------
    quiz = await get_quiz_or_404(quiz_id, db)
    await ensure_student_member(quiz.classroom_id, current_user.id, db)

    attempt = await start_attempt(db, quiz, current_user.id)

    return AttemptStartResponse(
        attempt_id=attempt.id,
        quiz_id=attempt.quiz_id,
        attempt_no=attempt.attempt_no,
        started_at=attempt.started_at,
        expires_at=attempt.expires_at,
    )


@router.post(
    "/submit-attempt/{quiz_id}",
    response_model=AttemptSubmitResponse,
)
async def submit_quiz_attempt(
    quiz_id: UUID,
    payload: AttemptSubmitRequest,
    current_user: User = Depends(is_student),
    db: AsyncSession = Depends(get_db),
):
    # --------------------------
    # Fetch quiz + membership check
    # --------------------------
    quiz = await get_quiz_or_404(quiz_id, db)
    await ensure_student_member(quiz.classroom_id, current_user.id, db)

    # --------------------------
    # Score and close the attempt
    # --------------------------
    attempt = await submit_attempt(
        db,
        quiz,
        payload.attempt_id,
        current_user.id,
        payload.answers,
    )

    requires_manual_grading = attempt.status == AttemptStatus.NEEDS_GRADING

    return AttemptSubmitResponse(
        attempt_id=attempt.id,
        status=attempt.status,
        score=attempt.score,
        requires_manual_grading=requires_manual_grading,
        message=(
            "Submitted for grading"
            if requires_manual_grading
            else "Quiz submitted successfully"
        ),
    )


@router.get(
    "/my-attempts/{quiz_id}",
    response_model=list[AttemptView],
)
async def list_my_attempts(
    quiz_id: UUID,
    current_user: User = Depends(is_student),
    db: AsyncSession = Depends(get_db),
):
    quiz = await get_quiz_or_404(quiz_id, db)
    await ensure_student_member(quiz.classroom_id, current_user.id, db)

    return await list_student_attempts(db, quiz.id, current_user.id)
