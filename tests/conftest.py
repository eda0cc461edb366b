import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from quiz_engine.auth.jwt import create_access_token
from quiz_engine.database import Base, get_db
from quiz_engine.main import app
from quiz_engine.models import (
    Classroom,
    ClassroomMember,
    MembershipStatus,
    User,
    UserRole,
)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seed(session_factory):
    """
    Two teachers, three students and one classroom (code ABC123).

    ``student`` is an accepted member, ``pending_student`` has a pending
    invite and ``outsider`` is not in the classroom at all.
    """
    async with session_factory() as session:
        teacher = User(role=UserRole.TEACHER, name="Ada Teacher", email="ada@example.com")
        other_teacher = User(role=UserRole.TEACHER, name="Bob Teacher", email="bob@example.com")
        student = User(role=UserRole.STUDENT, name="Cleo Student", email="cleo@example.com")
        pending_student = User(role=UserRole.STUDENT, name="Dan Student", email="dan@example.com")
        outsider = User(role=UserRole.STUDENT, name="Eve Student", email="eve@example.com")
        session.add_all([teacher, other_teacher, student, pending_student, outsider])
        await session.flush()

        classroom = Classroom(code="ABC123", name="Algebra", teacher_id=teacher.id)
        session.add(classroom)
        await session.flush()

        session.add_all([
            ClassroomMember(
                classroom_id=classroom.id,
                student_id=student.id,
                status=MembershipStatus.ACCEPTED,
            ),
            ClassroomMember(
                classroom_id=classroom.id,
                student_id=pending_student.id,
                status=MembershipStatus.PENDING,
            ),
        ])
        await session.commit()

        return SimpleNamespace(
            teacher_id=teacher.id,
            other_teacher_id=other_teacher.id,
            student_id=student.id,
            pending_student_id=pending_student.id,
            outsider_id=outsider.id,
            classroom_id=classroom.id,
            classroom_code=classroom.code,
        )


def auth_headers(user_id, role):
    token = create_access_token(user_id, role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers(seed):
    return SimpleNamespace(
        teacher=auth_headers(seed.teacher_id, "teacher"),
        other_teacher=auth_headers(seed.other_teacher_id, "teacher"),
        student=auth_headers(seed.student_id, "student"),
        pending_student=auth_headers(seed.pending_student_id, "student"),
        outsider=auth_headers(seed.outsider_id, "student"),
    )


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
