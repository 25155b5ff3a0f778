"""Unit tests for the comprehensive health report."""
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from dietwise.models import Advisory, Gender, Participant, ParticipantCategory
from dietwise.services.answer_lookup import AnsweredQuestion
from dietwise.services.report_service import ReportAggregator, ReportService

NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def staff_member():
    return Participant(
        id=uuid.uuid4(),
        email="k.mensah@university.edu",
        name="Kofi Mensah",
        category=ParticipantCategory.TEACHING_STAFF,
        gender=Gender.MALE,
        age=44,
        department="Biochemistry",
    )


class TestReportAggregator:

    def setup_method(self):
        self.aggregator = ReportAggregator()

    def test_defaults_without_responses_or_advisory(self, staff_member):
        report = self.aggregator.aggregate(staff_member, [], None, now=NOW)

        assert report["health_score"] == 5
        assert report["recommendations"] == "No specific recommendations available"
        assert report["survey_summary"] == {
            "total_questions": 0,
            "completed_at": NOW.isoformat(),
        }
        assert set(report["dietary_analysis"].values()) == {"Not specified"}
        assert report["generated_at"] == NOW.isoformat()

    def test_participant_snapshot(self, staff_member):
        report = self.aggregator.aggregate(staff_member, [], None, now=NOW)
        assert report["participant"] == {
            "name": "Kofi Mensah",
            "category": "TEACHING_STAFF",
            "gender": "MALE",
            "age": 44,
            "department": "Biochemistry",
        }

    def test_dietary_analysis_from_answers(self, staff_member, healthy_answers):
        report = self.aggregator.aggregate(staff_member, healthy_answers, None, now=NOW)
        assert report["dietary_analysis"] == {
            "fruit_intake": "2",
            "vegetable_intake": "3",
            "water_intake": "7-8 glasses per day",
            "meal_pattern": "3 meals per day",
        }
        assert report["survey_summary"]["total_questions"] == 4

    def test_blank_answer_reported_as_not_specified(self, staff_member):
        answers = [AnsweredQuestion("How often do you drink water?", "")]
        report = self.aggregator.aggregate(staff_member, answers, None, now=NOW)
        assert report["dietary_analysis"]["water_intake"] == "Not specified"

    def test_completed_at_is_earliest_response(self, staff_member):
        first = NOW - timedelta(days=2)
        answers = [
            AnsweredQuestion("Fruit?", "1", created_at=NOW - timedelta(days=1)),
            AnsweredQuestion("Water?", "4-6 glasses per day", created_at=first),
        ]
        report = self.aggregator.aggregate(staff_member, answers, None, now=NOW)
        assert report["survey_summary"]["completed_at"] == first.isoformat()

    def test_naive_timestamps_treated_as_utc(self, staff_member):
        naive = datetime(2026, 3, 1, 12, 0)
        answers = [AnsweredQuestion("Fruit?", "1", created_at=naive)]
        report = self.aggregator.aggregate(staff_member, answers, None, now=NOW)
        assert report["survey_summary"]["completed_at"] == "2026-03-01T12:00:00+00:00"

    def test_latest_advisory_supplies_score_and_recommendations(self, staff_member):
        advisory = Advisory(
            participant_id=staff_member.id,
            title="Health Advisory for Kofi Mensah",
            content="Good! You have a generally healthy diet with room for improvement.",
            recommendations="Aim for 3-5 servings of vegetables daily",
            health_score=7,
        )
        report = self.aggregator.aggregate(staff_member, [], advisory, now=NOW)
        assert report["health_score"] == 7
        assert report["recommendations"] == "Aim for 3-5 servings of vegetables daily"


class TestReportService:

    @pytest.mark.asyncio
    async def test_unknown_participant_raises(self, db_session):
        with pytest.raises(LookupError):
            await ReportService().build_report(uuid.uuid4(), db_session)

    @pytest.mark.asyncio
    async def test_report_uses_latest_advisory(self, db_session, participant, survey):
        from dietwise.services.advisory_service import AdvisoryService
        from dietwise.services.submission_service import SubmissionService

        answers = {q.order: "" for q in survey.questions}
        answers.update({1: "2 meals per day", 2: "3", 3: "4", 4: "No",
                        5: "More than 8 glasses per day", 6: "Mixed sources", 8: "8"})
        await SubmissionService().submit(
            participant.id,
            survey.id,
            [{"question_id": q.id, "answer": answers[q.order]} for q in survey.questions],
            db_session,
        )
        advisory = await AdvisoryService().generate(participant.id, db_session)

        report = await ReportService().build_report(participant.id, db_session)

        assert report["health_score"] == advisory.health_score == 8
        assert report["recommendations"] == advisory.recommendations
        assert report["survey_summary"]["total_questions"] == 8
        assert report["dietary_analysis"]["meal_pattern"] == "2 meals per day"
        assert report["dietary_analysis"]["water_intake"] == "More than 8 glasses per day"
