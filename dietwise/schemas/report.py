from pydantic import BaseModel
from typing import Optional


class ParticipantSnapshot(BaseModel):
    name: str
    category: str
    gender: str
    age: int
    department: Optional[str] = None


class SurveySummary(BaseModel):
    total_questions: int
    completed_at: str  # ISO-8601


class DietaryAnalysis(BaseModel):
    fruit_intake: str
    vegetable_intake: str
    water_intake: str
    meal_pattern: str


class HealthReport(BaseModel):
    participant: ParticipantSnapshot
    survey_summary: SurveySummary
    dietary_analysis: DietaryAnalysis
    health_score: int
    recommendations: str
    generated_at: str  # ISO-8601


class HealthReportEnvelope(BaseModel):
    message: str
    report: HealthReport
