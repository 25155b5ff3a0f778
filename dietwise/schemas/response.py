from pydantic import BaseModel, EmailStr, Field, field_validator
from uuid import UUID
from datetime import datetime
from typing import Optional

from dietwise.models.participant import Gender, ParticipantCategory
from dietwise.models.survey import QuestionType


class AnswerItem(BaseModel):
    question_id: UUID
    answer: str = ""


class ResponseSubmit(BaseModel):
    participant_id: UUID
    survey_id: UUID
    responses: list[AnswerItem] = Field(min_length=1)


class RespondentSummary(BaseModel):
    id: UUID
    name: str
    category: ParticipantCategory
    gender: Gender
    age: int
    department: Optional[str] = None

    model_config = {"from_attributes": True}


class AnsweredQuestionSummary(BaseModel):
    id: UUID
    text: str
    type: QuestionType
    order: int

    model_config = {"from_attributes": True}


class StoredResponse(BaseModel):
    id: UUID
    participant_id: UUID
    question_id: UUID
    survey_id: UUID
    answer: str
    created_at: datetime
    participant: RespondentSummary
    question: AnsweredQuestionSummary

    model_config = {"from_attributes": True}


class StoredResponsePage(BaseModel):
    responses: list[StoredResponse]
    total: int
    limit: int
    offset: int


class SubmissionResult(BaseModel):
    status: str
    participant_id: UUID
    survey_id: UUID
    total_responses: int


class ParticipantAnswer(BaseModel):
    question_id: UUID
    question_order: int
    question_text: str
    answer: str
    created_at: datetime


class CanSubmitResponse(BaseModel):
    participant_id: UUID
    survey_id: UUID
    can_submit: bool


class SurveyFormSubmit(BaseModel):
    """Registration details plus answers keyed ``q1``..``q8`` by question order."""

    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    category: ParticipantCategory
    gender: Gender
    age: int = Field(ge=16, le=100)
    department: str = Field(min_length=2)
    student_id: Optional[str] = None
    staff_id: Optional[str] = None
    q1: str = Field(min_length=1)
    q2: str = Field(min_length=1)
    q3: str = Field(min_length=1)
    q4: str = Field(min_length=1)
    q5: str = Field(min_length=1)
    q6: str = Field(min_length=1)
    q7: Optional[str] = None
    q8: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("name", "department")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    def participant_data(self) -> dict:
        return self.model_dump(
            include={
                "name", "email", "category", "gender", "age",
                "department", "student_id", "staff_id",
            }
        )

    def answers_by_order(self) -> dict[int, Optional[str]]:
        return {n: getattr(self, f"q{n}") for n in range(1, 9)}
