from django.core.exceptions import ValidationError
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, mixins, status
from rest_framework.response import Response
from base.helpers.api_permissions import StaffPermission, is_staff_request
from base.helpers.errors import error_message
from engagement.models import PollQuestion
from engagement.serializers.poll import PollQuestionSerializer, PollActionSerializer

REQUIRED_FIELDS = ("event", "question", "asker_name", "type")


class PollQuestionViewSet(
    mixins.CreateModelMixin, mixins.DestroyModelMixin, viewsets.GenericViewSet
):
    """
    Live polls and Q&A. Attendees submit and vote, team members moderate.
    Only approved questions are listed unless a team member asks for all.
    """

    queryset = PollQuestion.objects.all()
    serializer_class = PollQuestionSerializer
    http_method_names = ["get", "post", "patch", "delete"]
    moderator_actions = {"approve", "feature", "edit", "answer"}

    def get_permissions(self):
        if self.action == "destroy":
            return [StaffPermission()]
        return super().get_permissions()

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter("event", openapi.IN_QUERY, type=openapi.TYPE_STRING, required=True),
            openapi.Parameter(
                "type", openapi.IN_QUERY, type=openapi.TYPE_STRING, enum=["poll", "qna"]
            ),
            openapi.Parameter(
                "all",
                openapi.IN_QUERY,
                type=openapi.TYPE_BOOLEAN,
                description="Include unapproved questions (team members only)",
            ),
        ],
    )
    def list(self, request, *args, **kwargs):
        event_id = request.query_params.get("event")
        if not event_id:
            return Response({"error": "Event ID is required"}, status=status.HTTP_400_BAD_REQUEST)
        show_all = request.query_params.get("all") == "true" and is_staff_request(request)
        try:
            questions = list(
                PollQuestion.for_event(
                    event_id,
                    type=request.query_params.get("type"),
                    approved_only=not show_all,
                )
            )
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"questions": PollQuestionSerializer(questions, many=True).data})

    def create(self, request, *args, **kwargs):
        if not all(request.data.get(field) for field in REQUIRED_FIELDS):
            return Response(
                {"error": "Event ID, question, asker name, and type are required"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        serializer = PollQuestionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            question = serializer.save()
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(
            {
                "success": True,
                "question": PollQuestionSerializer(question).data,
                "message": "Submitted! It will appear after admin approval.",
            },
            status=status.HTTP_201_CREATED,
        )

    @swagger_auto_schema(
        operation_description="""
        Moderation and voting. action is one of approve, feature, edit, vote, upvote, answer.
        data carries the action arguments: approved, featured, question/options,
        option_index, text/author_name. vote and upvote are public, the rest need a team member.
        """,
        request_body=PollActionSerializer,
    )
    def partial_update(self, request, *args, **kwargs):
        question = self.get_object()
        serializer = PollActionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"error": "Invalid action"}, status=status.HTTP_400_BAD_REQUEST)
        action = serializer.validated_data["action"]
        data = serializer.validated_data["data"]
        if action in self.moderator_actions and not is_staff_request(request):
            self.permission_denied(request, message="Only team members can moderate questions")

        try:
            if action == "approve":
                question.approve(data.get("approved") is not False)
            elif action == "feature":
                question.feature(data.get("featured") is not False)
            elif action == "edit":
                question.edit(data.get("question"), data.get("options"))
            elif action == "vote":
                question.vote(data.get("option_index"))
            elif action == "upvote":
                question.upvote()
            elif action == "answer":
                question.add_answer(data.get("text"), data.get("author_name"))
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"success": True, "question": PollQuestionSerializer(question).data})
