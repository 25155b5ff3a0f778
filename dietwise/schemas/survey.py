from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import Optional

from dietwise.models.survey import QuestionType


class QuestionCreate(BaseModel):
    text: str = Field(min_length=5, max_length=500)
    type: QuestionType
    order: int = Field(ge=1)
    required: bool = True
    options: Optional[list[str]] = None


class QuestionResponse(BaseModel):
    id: UUID
    order: int
    text: str
    type: QuestionType
    options: Optional[list[str]] = None
    required: bool

    model_config = {"from_attributes": True}


class SurveyCreate(BaseModel):
    title: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10, max_length=1000)
    questions: list[QuestionCreate] = Field(min_length=1)


class SurveyResponse(BaseModel):
    id: UUID
    title: str
    description: Optional[str]
    is_active: bool
    created_at: datetime
    questions: list[QuestionResponse] = []

    model_config = {"from_attributes": True}
