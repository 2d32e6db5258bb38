import logging
from django.template.loader import render_to_string
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from base.auth import JwtAuthentication
from base.helpers.api_permissions import AdminPermission, LoggedIn
from base.helpers.errors import ModelValidationMixin
from base.models import TeamMember, TeamRole
from base.notifications import EmailService, is_email_configured
from base.serializers import (
    TeamMemberSerializer,
    TeamMemberCreateSerializer,
    LoginSerializer,
    InviteSerializer,
)
from eventhub.settings import BASE_URL, SITE_NAME

logger = logging.getLogger(__name__)


class AuthViewSet(viewsets.GenericViewSet):
    """
    Team member login. Pass the returned token in the ``Jwt`` header.
    """

    permission_classes = [AllowAny]
    serializer_class = LoginSerializer

    @swagger_auto_schema(
        method="post",
        request_body=LoginSerializer,
        responses={
            200: openapi.Schema(
                type=openapi.TYPE_OBJECT,
                properties={
                    "Jwt": openapi.Schema(type=openapi.TYPE_STRING),
                    "member": openapi.Schema(type=openapi.TYPE_OBJECT),
                },
            ),
        },
    )
    @action(detail=False, methods=["post"])
    def login(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        backend = JwtAuthentication()
        member = backend.login(
            serializer.validated_data["email"], serializer.validated_data["password"]
        )
        return Response(
            {
                "Jwt": backend.generate_jwt_token(member),
                "member": TeamMemberSerializer(member).data,
            }
        )

    @action(detail=False, methods=["get"], permission_classes=[LoggedIn])
    def me(self, request):
        """Get the logged-in member's details"""
        return Response(TeamMemberSerializer(request.user).data)


class TeamMemberAdminViewSet(ModelValidationMixin, viewsets.ModelViewSet):
    permission_classes = [AdminPermission]
    queryset = TeamMember.objects.all()
    filterset_fields = ["role", "is_active"]

    def get_serializer_class(self):
        if self.action in ["create", "update", "partial_update"]:
            return TeamMemberCreateSerializer
        return TeamMemberSerializer

    @swagger_auto_schema(method="post", request_body=InviteSerializer)
    @action(detail=False, methods=["post"])
    def invite(self, request):
        """
        Email the welcome message with login credentials to a new team member.
        Scanners are pointed at the check-in page, everyone else at the dashboard.
        """
        serializer = InviteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"error": "Missing required fields", "details": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        data = serializer.validated_data

        if not is_email_configured():
            return Response(
                {
                    "success": True,
                    "message": "Email skipped (Brevo not configured)",
                    "demo": True,
                }
            )

        path = "/checkin" if data["role"] == TeamRole.SCANNER else "/admin"
        html = render_to_string(
            "base/emails/invite.html",
            {
                "name": data["name"],
                "email": data["email"],
                "password": data["password"],
                "role": data["role"].capitalize(),
                "login_url": f"{BASE_URL}{path}",
                "site_name": SITE_NAME,
            },
        )
        result = EmailService().send(
            to=data["email"],
            to_name=data["name"],
            subject=f"Welcome to {SITE_NAME} Team",
            html_content=html,
        )
        if not result.success:
            return Response(
                {"error": result.error or "Failed to send email"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response({"success": True, "message": "Invitation sent"})
