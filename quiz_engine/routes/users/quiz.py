from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from typing import List
from uuid import UUID

from quiz_engine.schemas.quiz import QuizListItem, QuizDetailView
from quiz_engine.models import Quiz, User, Classroom
from quiz_engine.database import get_db
from quiz_engine.exceptions import NotFoundError
from quiz_engine.auth.dependencies import get_current_user
from quiz_engine.auth.classroom_access import get_classroom_by_code, check_classroom_access
from quiz_engine.helpers.quiz_page_store import load_pages, count_questions
from quiz_engine.helpers.answer_redaction import redact_answers
from quiz_engine.helpers.attempt_lifecycle import count_attempts, attempts_remaining

router = APIRouter(
    prefix="/quiz",
    tags=["User Quiz Endpoints"],
)


@router.get("/classroom/{code}", response_model=List[QuizListItem])
async def list_classroom_quizzes(
    code: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    classroom = await get_classroom_by_code(code, db)
    await check_classroom_access(classroom, current_user.id, db)

    result = await db.execute(
        select(Quiz)
        .options(selectinload(Quiz.teacher))
        .where(Quiz.classroom_id == classroom.id)
        .order_by(Quiz.created_at.desc())
    )
    quizzes = result.scalars().all()

    items = []
    for quiz in quizzes:
        pages_count, questions_count = await count_questions(db, quiz.id)
        items.append(
            QuizListItem(
                id=quiz.id,
                title=quiz.title,
                teacher_name=quiz.teacher.name if quiz.teacher else None,
                start_time=quiz.start_time,
                end_time=quiz.end_time,
                time_limit_seconds=quiz.time_limit_seconds,
                attempts_allowed=quiz.attempts_allowed,
                created_at=quiz.created_at,
                pages_count=pages_count,
                questions_count=questions_count,
            )
        )

    return items


@router.get("/{quiz_id}", response_model=QuizDetailView)
async def get_quiz(
    quiz_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Quiz detail with its pages.

    Only the teacher who owns the classroom sees answer keys; everyone
    else gets the redacted structure plus their own attempt counters.
    """
    result = await db.execute(
        select(Quiz)
        .options(selectinload(Quiz.classroom))
        .where(Quiz.id == quiz_id)
    )
    quiz = result.scalar_one_or_none()

    if not quiz:
        raise NotFoundError("Quiz not found")

    classroom: Classroom = quiz.classroom
    is_owner = await check_classroom_access(classroom, current_user.id, db)

    structure = {"pages": await load_pages(db, quiz.id)}
    if not is_owner:
        structure = redact_answers(structure)

    attempts_used = await count_attempts(db, quiz.id, current_user.id)

    return QuizDetailView(
        id=quiz.id,
        classroom_id=quiz.classroom_id,
        title=quiz.title,
        start_time=quiz.start_time,
        end_time=quiz.end_time,
        time_limit_seconds=quiz.time_limit_seconds,
        attempts_allowed=quiz.attempts_allowed,
        attempts_used=attempts_used,
        attempts_remaining=attempts_remaining(quiz.attempts_allowed, attempts_used),
        created_at=quiz.created_at,
        is_owner=is_owner,
        questions=structure,
    )
