"""
Dietwise — Service providers for FastAPI dependency injection.

Services hold no state; the request's ``AsyncSession`` is passed to every
call.  Tests swap implementations through ``app.dependency_overrides``.
"""

from dietwise.services.advisory_service import AdvisoryService
from dietwise.services.participant_service import ParticipantService
from dietwise.services.report_service import ReportService
from dietwise.services.submission_service import SubmissionService
from dietwise.services.survey_service import SurveyService


def get_participant_service() -> ParticipantService:
    return ParticipantService()


def get_survey_service() -> SurveyService:
    return SurveyService()


def get_submission_service() -> SubmissionService:
    return SubmissionService()


def get_advisory_service() -> AdvisoryService:
    return AdvisoryService()


def get_report_service() -> ReportService:
    return ReportService()
