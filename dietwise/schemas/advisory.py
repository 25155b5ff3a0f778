from pydantic import BaseModel, Field, field_validator
from uuid import UUID
from datetime import datetime
from typing import Optional

from dietwise.models.participant import Gender, ParticipantCategory


class AdvisoryResponse(BaseModel):
    id: UUID
    participant_id: UUID
    title: str
    content: str
    recommendations: str
    health_score: int = Field(ge=1, le=10)
    created_at: datetime

    model_config = {"from_attributes": True}


class AdvisoryUpdate(BaseModel):
    title: str = Field(min_length=5, max_length=200)
    content: str = Field(min_length=20, max_length=2000)
    recommendations: str = Field(min_length=20, max_length=1000)
    health_score: int = Field(ge=1, le=10)

    @field_validator("title", "content", "recommendations", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class AdvisoryHistory(BaseModel):
    advisories: list[AdvisoryResponse]
    total: int


class GeneratedAdvisory(BaseModel):
    message: str
    advisory: AdvisoryResponse
    band: Optional[str] = None


class AdvisoryParticipant(BaseModel):
    id: UUID
    name: str
    category: ParticipantCategory
    gender: Gender
    age: int

    model_config = {"from_attributes": True}


class AdvisoryListItem(AdvisoryResponse):
    participant: AdvisoryParticipant


class AdvisoryPage(BaseModel):
    advisories: list[AdvisoryListItem]
    total: int
    limit: int
    offset: int
