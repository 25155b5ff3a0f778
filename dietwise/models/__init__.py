"""
Dietwise — ORM model registry.

Importing every model here ensures that Alembic (and any other tool that
inspects ``Base.metadata``) discovers all tables automatically.
"""

from dietwise.models.participant import Gender, Participant, ParticipantCategory
from dietwise.models.survey import Question, QuestionType, Survey
from dietwise.models.response import Response, Submission
from dietwise.models.advisory import Advisory

__all__ = [
    "Participant",
    "ParticipantCategory",
    "Gender",
    "Survey",
    "Question",
    "QuestionType",
    "Response",
    "Submission",
    "Advisory",
]
