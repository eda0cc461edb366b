from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from uuid import UUID


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class QuizCreate(BaseModel):
    """
    Teacher quiz payload.

    ``questions`` is deliberately untyped: it may be {"pages": [...]},
    a list of pages, or a flat list of questions. Accepts the editor's
    camelCase keys as well as snake_case.
    """
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[Any] = None
    questions: Any = None
    attempts_allowed: Optional[Any] = Field(1, alias="attemptsAllowed")
    start_time: Optional[datetime] = Field(None, alias="startTime")
    end_time: Optional[datetime] = Field(None, alias="endTime")
    time_limit_seconds: Optional[Any] = Field(None, alias="timeLimitSeconds")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def blank_time_is_none(cls, value):
        if value == "" or value == 0:
            return None
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def to_naive_utc(cls, value):
        return _naive_utc(value)


class QuizUpdate(QuizCreate):
    pass


class QuizCreateResponse(BaseModel):
    id: UUID
    title: str
    pages_count: int
    question_count: int

    model_config = {"from_attributes": True}


class QuizListItem(BaseModel):
    id: UUID
    title: str
    teacher_name: Optional[str]
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    time_limit_seconds: Optional[int]
    attempts_allowed: Optional[int]
    created_at: datetime
    pages_count: int
    questions_count: int


class QuizPageView(BaseModel):
    id: Optional[str]
    title: Optional[str]
    questions: List[Any]


class QuizQuestionsView(BaseModel):
    pages: List[QuizPageView]


class QuizDetailView(BaseModel):
    id: UUID
    classroom_id: UUID
    title: str
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    time_limit_seconds: Optional[int]
    attempts_allowed: Optional[int]
    attempts_used: int
    attempts_remaining: Optional[int]
    created_at: datetime
    is_owner: bool
    questions: QuizQuestionsView
