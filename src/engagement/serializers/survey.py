from django.core.exceptions import ValidationError
from rest_framework import serializers
from engagement.models import Survey, SurveyResponse


class SurveySerializer(serializers.ModelSerializer):
    response_count = serializers.IntegerField(source="responses.count", read_only=True)

    class Meta:
        model = Survey
        fields = "__all__"
        read_only_fields = ["survey_id", "created_at"]

    def validate_questions(self, value):
        survey = Survey(questions=value)
        try:
            survey.clean()
        except ValidationError as e:
            raise serializers.ValidationError(e.messages)
        return survey.questions


class PublicSurveySerializer(serializers.ModelSerializer):
    class Meta:
        model = Survey
        fields = ["survey_id", "event", "title", "description", "questions"]


class SurveyResponseSerializer(serializers.ModelSerializer):
    class Meta:
        model = SurveyResponse
        fields = "__all__"
        read_only_fields = ["response_id", "survey", "submitted_at"]


class SurveySubmitSerializer(serializers.Serializer):
    respondent_email = serializers.EmailField(required=False, allow_blank=True, default="")
    answers = serializers.ListField(child=serializers.DictField())
