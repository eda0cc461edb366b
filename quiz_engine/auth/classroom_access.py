from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from quiz_engine.exceptions import ForbiddenError, NotFoundError
from quiz_engine.models import Classroom, ClassroomMember, MembershipStatus, Quiz


async def get_classroom_by_code(code: str, db: AsyncSession) -> Classroom:
    result = await db.execute(
        select(Classroom).where(Classroom.code == code)
    )
    classroom = result.scalar_one_or_none()

    if not classroom:
        raise NotFoundError("Classroom not found")
    return classroom


async def get_quiz_or_404(quiz_id: UUID, db: AsyncSession) -> Quiz:
    result = await db.execute(
        select(Quiz).where(Quiz.id == quiz_id)
    )
    quiz = result.scalar_one_or_none()

    if not quiz:
        raise NotFoundError("Quiz not found")
    return quiz


async def is_teacher_owner_of(quiz_id: UUID, user_id: UUID, db: AsyncSession) -> bool:
    """True when the user teaches the classroom the quiz belongs to."""
    result = await db.execute(
        select(Quiz.id)
        .join(Classroom, Quiz.classroom_id == Classroom.id)
        .where(
            Quiz.id == quiz_id,
            Classroom.teacher_id == user_id,
        )
    )
    return result.first() is not None


async def is_accepted_member(classroom_id: UUID, user_id: UUID, db: AsyncSession) -> bool:
    result = await db.execute(
        select(ClassroomMember.id).where(
            ClassroomMember.classroom_id == classroom_id,
            ClassroomMember.student_id == user_id,
            ClassroomMember.status == MembershipStatus.ACCEPTED,
        )
    )
    return result.first() is not None


async def ensure_quiz_owner(quiz_id: UUID, user_id: UUID, db: AsyncSession):
    if not await is_teacher_owner_of(quiz_id, user_id, db):
        raise ForbiddenError("You are not the teacher of this quiz")


async def ensure_student_member(classroom_id: UUID, student_id: UUID, db: AsyncSession):
    if not await is_accepted_member(classroom_id, student_id, db):
        raise ForbiddenError("You are not a member of this classroom")


async def check_classroom_access(classroom: Classroom, user_id: UUID, db: AsyncSession) -> bool:
    """
    Allow the classroom teacher or an accepted member.

    Returns True when the user is the teacher, False for a member;
    raises ForbiddenError for anyone else.
    """
    if classroom.teacher_id == user_id:
        return True

    if await is_accepted_member(classroom.id, user_id, db):
        return False

    raise ForbiddenError("You don't have access to this classroom.")
