from pydantic import BaseModel, EmailStr, Field, field_validator
from uuid import UUID
from datetime import datetime
from typing import Optional

from dietwise.models.participant import Gender, ParticipantCategory


class ParticipantBase(BaseModel):
    email: EmailStr
    name: str = Field(min_length=2, max_length=100)
    category: ParticipantCategory
    gender: Gender
    age: int = Field(ge=16, le=100)
    department: Optional[str] = None
    student_id: Optional[str] = None
    staff_id: Optional[str] = None

    @field_validator("name", "department", "student_id", "staff_id")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class ParticipantCreate(ParticipantBase):
    pass


class ParticipantUpdate(ParticipantBase):
    pass


class ParticipantResponse(BaseModel):
    id: UUID
    email: str
    name: str
    category: ParticipantCategory
    gender: Gender
    age: int
    department: Optional[str]
    student_id: Optional[str]
    staff_id: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class ParticipantPage(BaseModel):
    participants: list[ParticipantResponse]
    total: int
    limit: int
    offset: int
