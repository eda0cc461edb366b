from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, Optional
from uuid import UUID
from datetime import datetime

from quiz_engine.models import AttemptStatus

#for students
class AttemptStartResponse(BaseModel):
    attempt_id: UUID
    quiz_id: UUID
    attempt_no: int
    started_at: datetime
    expires_at: Optional[datetime]


class AttemptSubmitRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    attempt_id: UUID = Field(..., alias="attemptId")
    answers: Dict[str, Any] = Field(default_factory=dict)


class AttemptSubmitResponse(BaseModel):
    attempt_id: UUID
    status: AttemptStatus
    score: Optional[int]
    requires_manual_grading: bool
    message: str


class AttemptView(BaseModel):
    id: UUID
    quiz_id: UUID
    student_id: UUID
    attempt_no: int
    status: AttemptStatus
    score: Optional[int]
    answers: Dict[str, Any]
    grading: Dict[str, Any]
    started_at: datetime
    submitted_at: Optional[datetime]
    expires_at: Optional[datetime]
    comment: Optional[str] = None
    graded_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("answers", "grading", mode="before")
    @classmethod
    def empty_map_when_unset(cls, value):
        return value if isinstance(value, dict) else {}

#for teachers
class AttemptListItem(AttemptView):
    student_name: str = ""
    grader_id: Optional[UUID] = None


class AttemptGradeRequest(BaseModel):
    score: Any = None
    grading: Optional[Dict[str, Any]] = None
    comment: Optional[Any] = None


class AttemptGradeResponse(BaseModel):
    attempt_id: UUID
    status: AttemptStatus
    score: Optional[int]
    grader_id: UUID
    graded_at: datetime
    comment: Optional[str]
