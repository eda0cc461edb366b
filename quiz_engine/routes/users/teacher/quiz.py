import logging

from fastapi import APIRouter, Depends
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from quiz_engine.database import get_db
from quiz_engine.auth.dependencies import is_teacher
from quiz_engine.auth.classroom_access import get_classroom_by_code, get_quiz_or_404, ensure_quiz_owner
from quiz_engine.exceptions import ForbiddenError
from quiz_engine.helpers.page_normalizer import normalize_to_pages
from quiz_engine.helpers.quiz_page_store import write_pages
from quiz_engine.helpers.quiz_settings import quiz_settings
from quiz_engine.models import Quiz, QuizAttempt, QuizPage, User
from quiz_engine.schemas.quiz import QuizCreate, QuizCreateResponse, QuizUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/teacher/quiz",
    tags=["Teacher Quiz Endpoints"]
)


def _question_count(pages):
    return sum(len(page["questions"]) for page in pages)


@router.post(
    "/create-quiz/{code}",
    response_model=QuizCreateResponse,
    status_code=201
)
async def create_quiz(
    code: str,
    quiz_in: QuizCreate,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    # --------------------------
    # Fetch classroom
    # --------------------------
    classroom = await get_classroom_by_code(code, db)

    if classroom.teacher_id != current_user.id:
        raise ForbiddenError("Only the classroom teacher can create quizzes")

    # --------------------------
    # Create quiz
    # --------------------------
    quiz = Quiz(
        classroom_id=classroom.id,
        teacher_id=current_user.id,
        **quiz_settings(quiz_in),
    )

    db.add(quiz)
    await db.flush()  # get quiz.id without commit

    # --------------------------
    # Create pages
    # --------------------------
    pages = normalize_to_pages(quiz_in.questions)
    await write_pages(db, quiz.id, pages)

    # --------------------------
    # Commit transaction
    # --------------------------
    await db.commit()
    await db.refresh(quiz)

    logger.info(f"Quiz {quiz.id} created in classroom {classroom.code} by {current_user.id}")

    return {
        "id": quiz.id,
        "title": quiz.title,
        "pages_count": len(pages),
        "question_count": _question_count(pages),
    }


@router.put(
    "/update-quiz/{quiz_id}",
    response_model=QuizCreateResponse,
)
async def update_quiz(
    quiz_id: UUID,
    quiz_in: QuizUpdate,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    """
    Replace a quiz's settings and all of its pages.

    Existing attempts are kept and are not re-scored.
    """
    # --------------------------
    # Fetch quiz + ownership check
    # --------------------------
    quiz = await get_quiz_or_404(quiz_id, db)
    await ensure_quiz_owner(quiz.id, current_user.id, db)

    # --------------------------
    # Update settings
    # --------------------------
    for field, value in quiz_settings(quiz_in).items():
        setattr(quiz, field, value)

    # --------------------------
    # Replace pages
    # --------------------------
    pages = normalize_to_pages(quiz_in.questions)
    await write_pages(db, quiz.id, pages)

    await db.commit()
    await db.refresh(quiz)

    logger.info(f"Quiz {quiz.id} updated by {current_user.id}: {len(pages)} page(s)")

    return {
        "id": quiz.id,
        "title": quiz.title,
        "pages_count": len(pages),
        "question_count": _question_count(pages),
    }


@router.delete(
    "/delete-quiz/{quiz_id}",
    status_code=204,
)
async def delete_quiz(
    quiz_id: UUID,
    current_user: User = Depends(is_teacher),
    db: AsyncSession = Depends(get_db),
):
    # --------------------------
    # Fetch quiz + ownership check
    # --------------------------
    quiz = await get_quiz_or_404(quiz_id, db)
    await ensure_quiz_owner(quiz.id, current_user.id, db)

    # --------------------------
    # Delete attempts, pages, quiz
    # --------------------------
    await db.execute(delete(QuizAttempt).where(QuizAttempt.quiz_id == quiz.id))
    await db.execute(delete(QuizPage).where(QuizPage.quiz_id == quiz.id))
    await db.delete(quiz)
    await db.commit()

    logger.info(f"Quiz {quiz_id} deleted by {current_user.id}")
