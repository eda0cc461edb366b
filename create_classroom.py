import asyncio
import secrets
import string
from sqlalchemy import select
from quiz_engine.database import AsyncSessionLocal
from quiz_engine.models import User, UserRole, Classroom
from quiz_engine.auth.jwt import create_access_token

CODE_ALPHABET = string.ascii_uppercase + string.digits


async def create_classroom_interactive():
    """
    Create a teacher and a classroom for local use and print the
    teacher's access token.
    """
    email = input("Enter teacher email: ").strip()
    name = input("Enter teacher name: ").strip() or "Teacher"
    classroom_name = input("Enter classroom name: ").strip() or "My Classroom"

    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(User).where(User.email == email)
        )
        teacher = result.scalar_one_or_none()

        if teacher and teacher.role != UserRole.TEACHER:
            print(f"User {email} exists and is not a teacher. Exiting.")
            return

        if not teacher:
            teacher = User(role=UserRole.TEACHER, email=email, name=name)
            session.add(teacher)
            await session.flush()

        classroom = Classroom(
            code="".join(secrets.choice(CODE_ALPHABET) for _ in range(6)),
            name=classroom_name,
            teacher_id=teacher.id,
        )
        session.add(classroom)
        await session.commit()

        token = create_access_token(teacher.id, teacher.role.value)
        print(f"Classroom created: {classroom.name} (code {classroom.code})")
        print(f"Teacher access token: {token}")


if __name__ == "__main__":
    asyncio.run(create_classroom_interactive())
