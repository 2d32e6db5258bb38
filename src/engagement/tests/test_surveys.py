import pytest
from django.core.exceptions import ValidationError
from engagement.models import Survey, SurveyResponse

QUESTIONS = [
    {"question": "How was it?", "type": "rating", "required": True},
    {"question": "Best part?", "type": "multipleChoice", "options": ["Talks", "Food"]},
    {"id": "notes", "question": "Anything else?", "type": "text"},
]


@pytest.fixture
def survey(event):
    return Survey.objects.create(event=event, title="Feedback", questions=[dict(q) for q in QUESTIONS])


@pytest.mark.django_db
class TestSurveyModel:
    def test_questions_are_normalised(self, survey):
        assert [q["id"] for q in survey.questions] == ["1", "2", "notes"]
        assert [q["required"] for q in survey.questions] == [True, False, False]
        assert survey.questions[2]["options"] == []

    @pytest.mark.parametrize(
        "questions, message",
        [
            ([{"type": "text"}], "Question 1 needs a question text"),
            ([{"question": "?", "type": "essay"}], "Invalid type for question 1"),
            ([{"question": "?", "type": "multipleChoice"}], "Question 1 needs options"),
            (
                [{"id": "a", "question": "?", "type": "text"}, {"id": "a", "question": "!", "type": "text"}],
                "Duplicate question id a",
            ),
        ],
    )
    def test_invalid_questions(self, event, questions, message):
        with pytest.raises(ValidationError) as exc:
            Survey.objects.create(event=event, title="Bad", questions=questions)
        assert exc.value.messages == [message]

    def test_validate_answers(self, survey):
        cleaned = survey.validate_answers(
            [
                {"question_id": "1", "answer": " 4 "},
                {"question_id": 2, "answer": "Food"},
            ]
        )
        assert cleaned == {"1": 4, "2": "Food"}

    @pytest.mark.parametrize(
        "answers, message",
        [
            ([], "Please answer: How was it?"),
            ([{"question_id": "1", "answer": "  "}], "Please answer: How was it?"),
            ([{"question_id": "1", "answer": 7}], "Rating must be between 1 and 5"),
            ([{"question_id": "1", "answer": "great"}], "Rating must be between 1 and 5"),
            ([{"question_id": "1", "answer": True}], "Rating must be between 1 and 5"),
            (
                [{"question_id": "1", "answer": 3}, {"question_id": "2", "answer": "Music"}],
                "Invalid option for: Best part?",
            ),
            ([{"question_id": "1", "answer": 3}, {"question_id": "9", "answer": "x"}], "Unknown question: 9"),
            ([{"answer": 3}], "Each answer needs a question_id"),
        ],
    )
    def test_invalid_answers(self, survey, answers, message):
        with pytest.raises(ValidationError) as exc:
            survey.validate_answers(answers)
        assert exc.value.messages == [message]

    def test_summary(self, survey):
        for rating, choice, note in [(5, "Talks", "More coffee"), (4, "Talks", ""), (3, "Food", None)]:
            SurveyResponse.objects.create(
                survey=survey,
                answers=[
                    {"question_id": "1", "answer": rating},
                    {"question_id": "2", "answer": choice},
                    {"question_id": "notes", "answer": note},
                ],
            )
        summary = survey.summary()
        assert summary["total_responses"] == 3
        rating, choice, text = summary["questions"]
        assert rating["average"] == 4.0
        assert rating["distribution"] == {"1": 0, "2": 0, "3": 1, "4": 1, "5": 1}
        assert choice["options"] == {"Talks": 2, "Food": 1}
        assert text["answers"] == ["More coffee"]
        assert text["count"] == 1

    def test_summary_skips_answers_that_are_not_ratings(self, survey):
        # Stored while the question was still free text.
        SurveyResponse.objects.create(survey=survey, answers=[{"question_id": "notes", "answer": "great"}])
        SurveyResponse.objects.create(survey=survey, answers=[{"question_id": "notes", "answer": "4"}])
        survey.questions[2]["type"] = "rating"
        survey.save()
        notes = survey.summary()["questions"][2]
        assert notes["average"] == 4.0
        assert notes["count"] == 1
        assert notes["distribution"]["4"] == 1

    def test_empty_summary(self, survey):
        assert survey.summary()["questions"][0]["average"] is None


@pytest.mark.django_db
class TestSurveyApi:
    def test_admin_creates(self, admin_client, event):
        response = admin_client.post(
            "/api/admin/surveys/",
            {"event": str(event.event_id), "title": "Feedback", "questions": QUESTIONS},
            format="json",
        )
        assert response.status_code == 201
        assert [q["id"] for q in response.data["questions"]] == ["1", "2", "notes"]
        assert response.data["response_count"] == 0

    def test_admin_rejects_bad_questions(self, admin_client, event):
        response = admin_client.post(
            "/api/admin/surveys/",
            {"event": str(event.event_id), "title": "Feedback", "questions": [{"type": "text"}]},
            format="json",
        )
        assert response.status_code == 400
        assert response.data["questions"] == ["Question 1 needs a question text"]

    def test_staff_cannot_create(self, staff_client, event):
        response = staff_client.post(
            "/api/admin/surveys/",
            {"event": str(event.event_id), "title": "Feedback", "questions": QUESTIONS},
            format="json",
        )
        assert response.status_code == 403

    def test_public_list_hides_inactive(self, api_client, event, survey):
        Survey.objects.create(event=event, title="Old", questions=[], is_active=False)
        response = api_client.get(f"/api/surveys/?event={event.event_id}")
        assert [s["title"] for s in response.data] == ["Feedback"]

    def test_respond(self, api_client, survey):
        response = api_client.post(
            f"/api/surveys/{survey.survey_id}/respond/",
            {
                "respondent_email": "Asha@Example.com",
                "answers": [{"question_id": "1", "answer": "5"}, {"question_id": "notes", "answer": "Loved it"}],
            },
            format="json",
        )
        assert response.status_code == 201
        assert response.data["message"] == "Thank you for your feedback!"
        stored = SurveyResponse.objects.get()
        assert stored.respondent_email == "asha@example.com"
        assert {"question_id": "1", "answer": 5} in stored.answers

    def test_respond_invalid(self, api_client, survey):
        response = api_client.post(
            f"/api/surveys/{survey.survey_id}/respond/",
            {"answers": [{"question_id": "1", "answer": 9}]},
            format="json",
        )
        assert response.status_code == 400
        assert response.data["error"] == "Rating must be between 1 and 5"
        assert not SurveyResponse.objects.exists()

    def test_closed_survey(self, api_client, survey):
        survey.is_active = False
        survey.save()
        response = api_client.post(
            f"/api/surveys/{survey.survey_id}/respond/",
            {"answers": [{"question_id": "1", "answer": 5}]},
            format="json",
        )
        assert response.status_code == 404

    def test_responses_report(self, staff_client, survey):
        SurveyResponse.objects.create(survey=survey, answers=[{"question_id": "1", "answer": 4}])
        response = staff_client.get(f"/api/admin/surveys/{survey.survey_id}/responses/")
        assert response.status_code == 200
        assert len(response.data["responses"]) == 1
        assert response.data["summary"]["questions"][0]["average"] == 4.0
        assert response.data["survey"]["response_count"] == 1
