import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Enum, ForeignKey, Text, JSON, UniqueConstraint, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship
from quiz_engine.database import Base


# JSONB on PostgreSQL, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")


# ---------------------------
# Enums
# ---------------------------
class UserRole(str, enum.Enum):
    TEACHER = "teacher"
    STUDENT = "student"


class MembershipStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"


class AttemptStatus(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    EXPIRED = "expired"
    NEEDS_GRADING = "needs_grading"


class NotificationType(str, enum.Enum):
    INVITE = "invite"
    QUIZ = "quiz"
    SYSTEM = "system"
    GRADE = "grade"


# ---------------------------
# User Model
# ---------------------------
class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    role = Column(Enum(UserRole, name="user_role_enum"), nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


# ---------------------------
# Classroom Model
# ---------------------------
class Classroom(Base):
    __tablename__ = "classrooms"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code = Column(String(10), unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    section = Column(String(64), nullable=True)

    teacher_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    teacher = relationship("User")


class ClassroomMember(Base):
    __tablename__ = "classroom_members"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    classroom_id = Column(UUID(as_uuid=True), ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)

    status = Column(Enum(MembershipStatus, name="membership_status_enum"), default=MembershipStatus.PENDING, nullable=False)
    joined_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("classroom_id", "student_id", name="unique_classroom_member"),
    )


# ---------------------------
# Quiz Model
# ---------------------------
class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    classroom_id = Column(UUID(as_uuid=True), ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False)
    teacher_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)

    title = Column(String(255), nullable=False)
    attempts_allowed = Column(Integer, nullable=True)  # NULL = unbounded
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    time_limit_seconds = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    classroom = relationship("Classroom")
    teacher = relationship("User")


class QuizPage(Base):
    __tablename__ = "quiz_pages"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    quiz_id = Column(UUID(as_uuid=True), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)

    page_index = Column(Integer, nullable=False)
    page_key = Column(Text, nullable=False)  # client-visible page id
    title = Column(String(255), nullable=False)
    content_json = Column(Text, nullable=False)  # {"questions": [...]}

    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_quiz_pages_quiz", "quiz_id", "page_index"),
    )


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    quiz_id = Column(UUID(as_uuid=True), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    attempt_no = Column(Integer, nullable=False)
    status = Column(Enum(AttemptStatus, name="attempt_status_enum"), default=AttemptStatus.IN_PROGRESS, nullable=False)
    score = Column(Integer, nullable=True)
    answers = Column(JSONType, nullable=True)
    grading = Column(JSONType, nullable=True)

    started_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=True)
    submitted_at = Column(DateTime, nullable=True)

    grader_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    graded_at = Column(DateTime, nullable=True)
    comment = Column(Text, nullable=True)

    student = relationship("User", foreign_keys=[student_id])

    __table_args__ = (
        UniqueConstraint("quiz_id", "student_id", "attempt_no", name="uq_quiz_student_attempt"),
    )


# ---------------------------
# Notification Model
# ---------------------------
class Notification(Base):
    __tablename__ = "notifications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    recipient_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    sender_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)

    type = Column(Enum(NotificationType, name="notification_type_enum"), default=NotificationType.SYSTEM, nullable=False)
    message = Column(Text, nullable=False)
    link = Column(String(255), nullable=True)
    is_read = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
