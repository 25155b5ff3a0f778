"""HTTP tests driving the FastAPI app end to end."""
import uuid

import pytest

API = "/api/v1"


def _form(**overrides):
    payload = {
        "name": "Chidi Nwosu",
        "email": "Chidi.Nwosu@University.edu",
        "category": "STUDENT",
        "gender": "MALE",
        "age": 23,
        "department": "Nursing",
        "student_id": "NUR/2020/101",
        "q1": "3 meals per day",
        "q2": "2",
        "q3": "3",
        "q4": "No",
        "q5": "7-8 glasses per day",
        "q6": "Fish and seafood",
        "q8": "8",
    }
    payload.update(overrides)
    return payload


class TestHealth:

    @pytest.mark.asyncio
    async def test_liveness(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_deep_checks_database(self, client):
        resp = await client.get("/health/deep")
        assert resp.json() == {"status": "healthy", "database": "connected"}


class TestParticipantsApi:

    @pytest.mark.asyncio
    async def test_create_and_fetch(self, client):
        body = {
            "email": "Halima.Sule@University.edu",
            "name": "Halima Sule",
            "category": "TEACHING_STAFF",
            "gender": "FEMALE",
            "age": 38,
            "department": "Economics",
            "staff_id": "TS-1187",
        }
        resp = await client.post(f"{API}/participants/", json=body)
        assert resp.status_code == 201
        created = resp.json()
        assert created["email"] == "halima.sule@university.edu"

        resp = await client.get(f"{API}/participants/{created['id']}")
        assert resp.status_code == 200
        assert resp.json()["name"] == "Halima Sule"

        resp = await client.post(f"{API}/participants/", json=body)
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_validation_errors(self, client):
        resp = await client.post(
            f"{API}/participants/",
            json={"email": "not-an-email", "name": "A", "category": "STUDENT",
                  "gender": "MALE", "age": 12},
        )
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_list_uses_configured_page_sizes(self, client, participant):
        resp = await client.get(f"{API}/participants/")
        page = resp.json()
        assert page["total"] == 1
        assert page["limit"] == 50

        resp = await client.get(f"{API}/participants/", params={"limit": 5000})
        assert resp.json()["limit"] == 200

        resp = await client.get(f"{API}/participants/", params={"category": "TEACHING_STAFF"})
        assert resp.json()["participants"] == []

    @pytest.mark.asyncio
    async def test_unknown_participant(self, client):
        resp = await client.get(f"{API}/participants/{uuid.uuid4()}")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_blocked_after_submission(self, client):
        resp = await client.post(f"{API}/survey/submit", json=_form())
        participant_id = resp.json()["participant_id"]

        resp = await client.delete(f"{API}/participants/{participant_id}")
        assert resp.status_code == 409


class TestSurveysApi:

    @pytest.mark.asyncio
    async def test_default_questions(self, client):
        resp = await client.get(f"{API}/surveys/default/questions")
        assert resp.status_code == 200
        questions = resp.json()["questions"]
        assert len(questions) == 8
        assert questions[1]["type"] == "NUMBER"

    @pytest.mark.asyncio
    async def test_create_list_and_soft_delete(self, client):
        body = {
            "title": "Hydration Habits",
            "description": "Short survey on daily water intake.",
            "questions": [
                {"text": "How many glasses of water daily?", "type": "NUMBER", "order": 1},
                {"text": "Do you drink soda?", "type": "YES_NO", "order": 2, "required": False},
            ],
        }
        resp = await client.post(f"{API}/surveys/", json=body)
        assert resp.status_code == 201
        survey = resp.json()
        assert [q["order"] for q in survey["questions"]] == [1, 2]

        resp = await client.get(f"{API}/surveys/")
        assert [s["id"] for s in resp.json()] == [survey["id"]]

        resp = await client.delete(f"{API}/surveys/{survey['id']}")
        assert resp.status_code == 200

        resp = await client.get(f"{API}/surveys/")
        assert resp.json() == []

        resp = await client.get(f"{API}/surveys/{survey['id']}")
        assert resp.status_code == 200
        assert resp.json()["is_active"] is False

    @pytest.mark.asyncio
    async def test_update_replaces_questions(self, client):
        body = {
            "title": "Hydration Habits",
            "description": "Short survey on daily water intake.",
            "questions": [
                {"text": "How many glasses of water daily?", "type": "NUMBER", "order": 1},
            ],
        }
        survey_id = (await client.post(f"{API}/surveys/", json=body)).json()["id"]

        body["title"] = "Hydration and Snacks"
        body["questions"] = [
            {"text": "How many snacks between meals?", "type": "NUMBER", "order": 2},
            {"text": "How many glasses of water daily?", "type": "NUMBER", "order": 1},
        ]
        resp = await client.put(f"{API}/surveys/{survey_id}", json=body)
        assert resp.status_code == 200
        updated = resp.json()
        assert updated["title"] == "Hydration and Snacks"
        assert [q["order"] for q in updated["questions"]] == [1, 2]

        resp = await client.get(f"{API}/surveys/{survey_id}")
        assert len(resp.json()["questions"]) == 2

        resp = await client.put(f"{API}/surveys/{uuid.uuid4()}", json=body)
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_update_answered_survey_conflicts(self, client):
        survey_id = (await client.post(f"{API}/survey/submit", json=_form())).json()["survey_id"]
        body = {
            "title": "Replacement survey",
            "description": "Attempt to swap out answered questions.",
            "questions": [{"text": "Any soda today?", "type": "YES_NO", "order": 1}],
        }
        resp = await client.put(f"{API}/surveys/{survey_id}", json=body)
        assert resp.status_code == 409

        resp = await client.get(f"{API}/surveys/{survey_id}")
        assert len(resp.json()["questions"]) == 8

    @pytest.mark.asyncio
    async def test_unknown_survey(self, client):
        resp = await client.get(f"{API}/surveys/{uuid.uuid4()}")
        assert resp.status_code == 404


class TestSubmissionApi:

    @pytest.mark.asyncio
    async def test_register_and_submit(self, client):
        resp = await client.post(f"{API}/survey/submit", json=_form())
        assert resp.status_code == 201
        result = resp.json()
        assert result["total_responses"] == 8

        resp = await client.get(f"{API}/responses/participant/{result['participant_id']}")
        body = resp.json()
        assert body["total"] == 8
        assert [r["question_order"] for r in body["responses"]] == list(range(1, 9))
        assert body["responses"][6]["answer"] == ""

    @pytest.mark.asyncio
    async def test_register_twice_conflicts(self, client):
        assert (await client.post(f"{API}/survey/submit", json=_form())).status_code == 201
        resp = await client.post(f"{API}/survey/submit", json=_form())
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_rejected_form_can_be_resubmitted(self, client):
        resp = await client.post(f"{API}/survey/submit", json=_form(q1="   "))
        assert resp.status_code == 400

        resp = await client.get(f"{API}/participants/")
        assert resp.json()["total"] == 0

        resp = await client.post(f"{API}/survey/submit", json=_form())
        assert resp.status_code == 201

    @pytest.mark.asyncio
    async def test_survey_responses_listing_and_delete(self, client):
        first = (await client.post(f"{API}/survey/submit", json=_form())).json()
        await client.post(
            f"{API}/survey/submit",
            json=_form(name="Amaka Eze", email="amaka.eze@university.edu", student_id="NUR/2020/102"),
        )
        survey_id = first["survey_id"]

        resp = await client.get(f"{API}/responses/survey/{survey_id}")
        page = resp.json()
        assert page["total"] == 16
        assert page["limit"] == 50
        assert page["responses"][0]["participant"]["name"] == "Amaka Eze"
        assert page["responses"][0]["question"]["order"] == 1

        resp = await client.get(
            f"{API}/responses/survey/{survey_id}", params={"limit": 8, "offset": 8}
        )
        chidi = resp.json()["responses"]
        assert {r["participant"]["name"] for r in chidi} == {"Chidi Nwosu"}

        for row in chidi:
            resp = await client.delete(f"{API}/responses/{row['id']}")
            assert resp.status_code == 200

        resp = await client.delete(f"{API}/responses/{chidi[0]['id']}")
        assert resp.status_code == 404

        resp = await client.get(
            f"{API}/responses/can-submit",
            params={"participant_id": first["participant_id"], "survey_id": survey_id},
        )
        assert resp.json()["can_submit"] is True
        resp = await client.get(f"{API}/responses/survey/{survey_id}")
        assert resp.json()["total"] == 8

    @pytest.mark.asyncio
    async def test_form_requires_rating(self, client):
        payload = _form()
        del payload["q8"]
        resp = await client.post(f"{API}/survey/submit", json=payload)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_gate_blocks_second_submission(self, client):
        resp = await client.post(f"{API}/survey/submit", json=_form())
        participant_id = resp.json()["participant_id"]
        survey_id = resp.json()["survey_id"]

        resp = await client.get(
            f"{API}/responses/can-submit",
            params={"participant_id": participant_id, "survey_id": survey_id},
        )
        assert resp.json()["can_submit"] is False

        survey = (await client.get(f"{API}/surveys/{survey_id}")).json()
        answers = [{"question_id": q["id"], "answer": "1"} for q in survey["questions"]]
        resp = await client.post(
            f"{API}/responses/",
            json={"participant_id": participant_id, "survey_id": survey_id, "responses": answers},
        )
        assert resp.status_code == 409

        resp = await client.get(f"{API}/responses/participant/{participant_id}")
        assert resp.json()["responses"][1]["answer"] == "2"

    @pytest.mark.asyncio
    async def test_submit_for_existing_participant(self, client, participant, survey):
        params = {"participant_id": str(participant.id), "survey_id": str(survey.id)}
        resp = await client.get(f"{API}/responses/can-submit", params=params)
        assert resp.json()["can_submit"] is True

        answers = [
            {"question_id": str(q.id), "answer": "" if not q.required else "3"}
            for q in survey.questions
        ]
        resp = await client.post(
            f"{API}/responses/",
            json={**params, "responses": answers},
        )
        assert resp.status_code == 201
        assert resp.json()["total_responses"] == 8

    @pytest.mark.asyncio
    async def test_blank_required_answer(self, client, participant, survey):
        answers = [{"question_id": str(q.id), "answer": ""} for q in survey.questions]
        resp = await client.post(
            f"{API}/responses/",
            json={
                "participant_id": str(participant.id),
                "survey_id": str(survey.id),
                "responses": answers,
            },
        )
        assert resp.status_code == 400


class TestAdvisoryApi:

    @pytest.mark.asyncio
    async def test_generate_history_report(self, client):
        resp = await client.post(f"{API}/survey/submit", json=_form())
        participant_id = resp.json()["participant_id"]

        resp = await client.post(f"{API}/advisory/generate/{participant_id}")
        assert resp.status_code == 201
        generated = resp.json()
        assert generated["band"] == "excellent"
        assert generated["advisory"]["health_score"] == 8
        assert generated["advisory"]["title"] == "Health Advisory for Chidi Nwosu"

        resp = await client.get(f"{API}/advisory/participant/{participant_id}")
        assert resp.json()["total"] == 1

        resp = await client.post(f"{API}/advisory/report/{participant_id}")
        assert resp.status_code == 200
        report = resp.json()["report"]
        assert report["health_score"] == 8
        assert report["participant"]["category"] == "STUDENT"
        assert report["dietary_analysis"]["fruit_intake"] == "2"
        assert report["survey_summary"]["total_questions"] == 8

    @pytest.mark.asyncio
    async def test_edit_and_delete(self, client, participant):
        resp = await client.post(f"{API}/advisory/generate/{participant.id}")
        advisory_id = resp.json()["advisory"]["id"]

        edit = {
            "title": "Reviewed by dietitian",
            "content": "Your diet is broadly fine; keep tracking water intake daily.",
            "recommendations": "Drink a glass of water with every meal",
            "health_score": 6,
        }
        resp = await client.put(f"{API}/advisory/{advisory_id}", json=edit)
        assert resp.status_code == 200
        assert resp.json()["health_score"] == 6

        resp = await client.put(f"{API}/advisory/{advisory_id}", json={**edit, "health_score": 11})
        assert resp.status_code == 422

        resp = await client.put(f"{API}/advisory/{advisory_id}", json={**edit, "title": "Hi"})
        assert resp.status_code == 422

        assert (await client.delete(f"{API}/advisory/{advisory_id}")).status_code == 200
        assert (await client.get(f"{API}/advisory/{advisory_id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_admin_list_filters(self, client, participant):
        submitted = (await client.post(f"{API}/survey/submit", json=_form())).json()
        await client.post(f"{API}/advisory/generate/{submitted['participant_id']}")
        await client.post(f"{API}/advisory/generate/{participant.id}")

        resp = await client.get(f"{API}/advisory/")
        assert resp.status_code == 200
        page = resp.json()
        assert page["total"] == 2
        assert {a["participant"]["name"] for a in page["advisories"]} == {"Ada Obi", "Chidi Nwosu"}

        resp = await client.get(f"{API}/advisory/", params={"gender": "FEMALE"})
        women = resp.json()
        assert women["total"] == 1
        assert women["advisories"][0]["participant"]["category"] == "STUDENT"

        resp = await client.get(f"{API}/advisory/", params={"category": "TEACHING_STAFF"})
        assert resp.json()["advisories"] == []

        resp = await client.get(f"{API}/advisory/", params={"limit": 1})
        assert len(resp.json()["advisories"]) == 1
        assert resp.json()["total"] == 2

    @pytest.mark.asyncio
    async def test_report_defaults_without_advisory(self, client, participant):
        resp = await client.post(f"{API}/advisory/report/{participant.id}")
        report = resp.json()["report"]
        assert report["health_score"] == 5
        assert report["recommendations"] == "No specific recommendations available"

    @pytest.mark.asyncio
    async def test_unknown_participant(self, client):
        assert (await client.post(f"{API}/advisory/generate/{uuid.uuid4()}")).status_code == 404
        assert (await client.post(f"{API}/advisory/report/{uuid.uuid4()}")).status_code == 404
