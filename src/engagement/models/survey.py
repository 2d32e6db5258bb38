from django.db import models
from django.core.exceptions import ValidationError
from ticketing.models import Event


class SurveyQuestionType(models.TextChoices):
    RATING = "rating", "Rating"
    TEXT = "text", "Text"
    MULTIPLE_CHOICE = "multipleChoice", "Multiple choice"


def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def _as_rating(value):
    """Rating 1-5 from a stored or submitted answer, None when it is not one."""
    if isinstance(value, bool):
        return None
    try:
        rating = int(str(value).strip())
    except ValueError:
        return None
    return rating if 1 <= rating <= 5 else None


class Survey(models.Model):
    """
    Post event feedback form. ``questions`` is a list of
    ``{"id", "question", "type", "options", "required"}`` items.
    """

    survey_id = models.AutoField(primary_key=True)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="surveys")
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    questions = models.JSONField(default=list)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    def clean(self):
        if not isinstance(self.questions, list):
            raise ValidationError("Questions must be a list")
        seen = set()
        for index, item in enumerate(self.questions, start=1):
            if not isinstance(item, dict) or not item.get("question"):
                raise ValidationError(f"Question {index} needs a question text")
            item.setdefault("id", str(index))
            item["id"] = str(item["id"])
            if item["id"] in seen:
                raise ValidationError(f"Duplicate question id {item['id']}")
            seen.add(item["id"])
            if item.get("type") not in SurveyQuestionType.values:
                raise ValidationError(f"Invalid type for question {item['id']}")
            if item["type"] == SurveyQuestionType.MULTIPLE_CHOICE and not item.get("options"):
                raise ValidationError(f"Question {item['id']} needs options")
            item.setdefault("options", [])
            item["required"] = bool(item.get("required", False))

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    def validate_answers(self, answers):
        """
        Check a submission against the questions. Returns the answers keyed
        by question id, raises ``ValidationError`` with the first problem.
        """
        if not isinstance(answers, list):
            raise ValidationError("Answers must be a list")
        by_id = {}
        for answer in answers:
            if not isinstance(answer, dict) or "question_id" not in answer:
                raise ValidationError("Each answer needs a question_id")
            by_id[str(answer["question_id"])] = answer.get("answer")

        questions = {item["id"]: item for item in self.questions}
        unknown = set(by_id) - set(questions)
        if unknown:
            raise ValidationError(f"Unknown question: {sorted(unknown)[0]}")

        for question_id, item in questions.items():
            value = by_id.get(question_id)
            if _is_blank(value):
                if item.get("required"):
                    raise ValidationError(f"Please answer: {item['question']}")
                continue
            if item["type"] == SurveyQuestionType.RATING:
                rating = _as_rating(value)
                if rating is None:
                    raise ValidationError("Rating must be between 1 and 5")
                by_id[question_id] = rating
            elif item["type"] == SurveyQuestionType.MULTIPLE_CHOICE:
                if value not in item["options"]:
                    raise ValidationError(f"Invalid option for: {item['question']}")
        return by_id

    def summary(self):
        """Per question aggregates over every response."""
        responses = list(self.responses.all())
        result = []
        for item in self.questions:
            values = []
            for response in responses:
                for answer in response.answers:
                    if str(answer.get("question_id")) == item["id"] and not _is_blank(
                        answer.get("answer")
                    ):
                        values.append(answer["answer"])
            entry = {
                "question_id": item["id"],
                "question": item["question"],
                "type": item["type"],
                "count": len(values),
            }
            if item["type"] == SurveyQuestionType.RATING:
                # Answers stored before a question became a rating are skipped.
                ratings = [rating for rating in map(_as_rating, values) if rating is not None]
                entry["count"] = len(ratings)
                entry["average"] = round(sum(ratings) / len(ratings), 2) if ratings else None
                entry["distribution"] = {str(n): ratings.count(n) for n in range(1, 6)}
            elif item["type"] == SurveyQuestionType.MULTIPLE_CHOICE:
                entry["options"] = {option: values.count(option) for option in item["options"]}
            else:
                entry["answers"] = values
            result.append(entry)
        return {"total_responses": len(responses), "questions": result}


class SurveyResponse(models.Model):
    response_id = models.AutoField(primary_key=True)
    survey = models.ForeignKey(Survey, on_delete=models.CASCADE, related_name="responses")
    respondent_email = models.EmailField(blank=True, default="")
    answers = models.JSONField(default=list)
    submitted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-submitted_at"]

    def __str__(self):
        return f"Response {self.response_id} to {self.survey.title}"
