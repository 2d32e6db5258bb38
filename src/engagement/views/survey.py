from django.core.exceptions import ValidationError
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from base.helpers.api_permissions import AdminPermission, StaffPermission
from base.helpers.errors import error_message
from engagement.models import Survey, SurveyResponse
from engagement.serializers.survey import (
    SurveySerializer,
    PublicSurveySerializer,
    SurveyResponseSerializer,
    SurveySubmitSerializer,
)


class AdminSurveyViewSet(viewsets.ModelViewSet):
    queryset = Survey.objects.all()
    serializer_class = SurveySerializer
    permission_classes = [AdminPermission]
    filterset_fields = ["event", "is_active"]

    def get_permissions(self):
        if self.action in ["list", "retrieve", "responses"]:
            return [StaffPermission()]
        return super().get_permissions()

    @swagger_auto_schema(operation_description="Every response plus per question aggregates.")
    @action(detail=True, methods=["get"])
    def responses(self, request, pk=None):
        survey = self.get_object()
        return Response(
            {
                "survey": SurveySerializer(survey).data,
                "responses": SurveyResponseSerializer(survey.responses.all(), many=True).data,
                "summary": survey.summary(),
            }
        )


class SurveyViewSet(viewsets.ReadOnlyModelViewSet):
    """Active surveys for attendees to fill in."""

    serializer_class = PublicSurveySerializer
    filterset_fields = ["event"]

    def get_queryset(self):
        return Survey.objects.filter(is_active=True, event__is_active=True)

    @swagger_auto_schema(request_body=SurveySubmitSerializer)
    @action(detail=True, methods=["post"])
    def respond(self, request, pk=None):
        survey = self.get_object()
        serializer = SurveySubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        answers = serializer.validated_data["answers"]
        try:
            cleaned = survey.validate_answers(answers)
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)

        SurveyResponse.objects.create(
            survey=survey,
            respondent_email=serializer.validated_data["respondent_email"].lower(),
            answers=[
                {"question_id": question_id, "answer": answer}
                for question_id, answer in cleaned.items()
            ],
        )
        return Response(
            {"success": True, "message": "Thank you for your feedback!"},
            status=status.HTTP_201_CREATED,
        )
