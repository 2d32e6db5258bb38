import logging
from django.core.exceptions import ValidationError
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from base.helpers.api_permissions import StaffPermission, AdminPermission
from ticketing.models import EmailTemplate, Event, Ticket, TicketStatus
from ticketing.serializers.promo import (
    EmailTemplateSerializer,
    SendEmailSerializer,
    TemplatedEmailSerializer,
)
from ticketing.services.delivery import TicketDeliveryService

logger = logging.getLogger(__name__)


class AdminEmailViewSet(viewsets.GenericViewSet):
    permission_classes = [StaffPermission]
    serializer_class = SendEmailSerializer

    @swagger_auto_schema(
        operation_description="""
        Send the ticket confirmation email (inline QR code and PDF ticket) to any address.
        email_styles can override bg_color, text_color, accent_color, gradient_color,
        border_radius, font_family and logo_url.
        """,
        request_body=SendEmailSerializer,
    )
    @action(detail=False, methods=["post"])
    def send(self, request):
        serializer = SendEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        if not data.get("to") or not data.get("ticket_id") or not data.get("event_name"):
            return Response(
                {"error": "Missing required fields: to, ticket_id, event_name"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        try:
            ticket = Ticket.objects.select_related("event").get(pk=data["ticket_id"])
        except (Ticket.DoesNotExist, ValidationError):
            return Response({"error": "Ticket not found"}, status=status.HTTP_404_NOT_FOUND)

        result = TicketDeliveryService().send_confirmation(
            ticket,
            subject=data.get("subject") or f"Your Ticket for {data['event_name']}",
            styles=data.get("email_styles"),
            to=data["to"],
        )
        if not result.success:
            return Response(
                {"error": result.error or "Failed to send email"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        if result.demo:
            return Response(
                {"success": True, "message": "Email skipped (Brevo not configured)", "demo": True}
            )
        return Response({"success": True, "message_id": result.message_id})

    @swagger_auto_schema(
        operation_description="""
        Render a stored template for one ticket (ticket_id) or for every paid ticket
        of an event (event). Placeholders: {{name}}, {{eventName}}, {{eventDate}},
        {{eventTime}}, {{eventVenue}}, {{ticketId}}, {{siteName}}, {{surveyLink}}.
        """,
        request_body=TemplatedEmailSerializer,
    )
    @action(detail=False, methods=["post"])
    def send_template(self, request):
        serializer = TemplatedEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            template = EmailTemplate.objects.get(pk=data["template_id"])
        except EmailTemplate.DoesNotExist:
            return Response({"error": "Template not found"}, status=status.HTTP_404_NOT_FOUND)

        if data.get("ticket_id"):
            tickets = Ticket.objects.select_related("event").filter(pk=data["ticket_id"])
            if not tickets.exists():
                return Response({"error": "Ticket not found"}, status=status.HTTP_404_NOT_FOUND)
        else:
            if not Event.objects.filter(pk=data["event"]).exists():
                return Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)
            tickets = Ticket.objects.select_related("event").filter(
                event_id=data["event"], status=TicketStatus.PAID
            )
        tickets = [ticket for ticket in tickets if ticket.email]
        if not tickets:
            return Response(
                {"error": "No recipients with an email address"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        delivery = TicketDeliveryService()
        sent, failed = 0, []
        for ticket in tickets:
            result = delivery.send_template(template, ticket)
            if result.success:
                sent += 1
            else:
                logger.warning("Template email to %s failed: %s", ticket.email, result.error)
                failed.append({"ticket_id": str(ticket.ticket_id), "error": result.error})
        return Response(
            {"success": not failed, "sent": sent, "failed": len(failed), "errors": failed}
        )


class AdminEmailTemplateViewSet(viewsets.ModelViewSet):
    queryset = EmailTemplate.objects.all()
    serializer_class = EmailTemplateSerializer
    permission_classes = [AdminPermission]
    filterset_fields = ["type", "is_active"]

    def list(self, request, *args, **kwargs):
        EmailTemplate.seed_defaults()
        return super().list(request, *args, **kwargs)
