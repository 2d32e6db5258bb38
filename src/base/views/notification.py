import logging
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_yasg.utils import swagger_auto_schema
from base.helpers.api_permissions import StaffPermission
from base.notifications import (
    SMSService,
    WhatsAppService,
    is_sms_configured,
    is_whatsapp_configured,
    is_email_configured,
)
from base.serializers import NotificationSerializer

logger = logging.getLogger(__name__)


class NotificationViewSet(viewsets.GenericViewSet):
    """
    Fan a ticket notification out to SMS and WhatsApp. Email is sent by the
    ticket email endpoint since it carries the QR code and PDF.
    """

    permission_classes = [StaffPermission]
    serializer_class = NotificationSerializer

    @swagger_auto_schema(method="post", request_body=NotificationSerializer)
    @action(detail=False, methods=["post"])
    def send(self, request):
        serializer = NotificationSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"error": "Invalid notification payload", "details": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        kind = serializer.validated_data["type"]
        channels = serializer.validated_data["channels"]
        data = serializer.validated_data["data"]
        if not channels:
            return Response(
                {"error": "No notification channels specified"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        results = {}
        if "sms" in channels:
            if not data.get("phone"):
                results["sms"] = {"success": False, "error": "Phone number required"}
            elif kind == "event_reminder":
                results["sms"] = SMSService().send_event_reminder(
                    data["phone"], data["attendee_name"], data["event_name"], data["venue"]
                ).to_dict()
            else:
                results["sms"] = SMSService().send_ticket_confirmation(
                    data["phone"],
                    data["attendee_name"],
                    data["event_name"],
                    data["event_date"],
                    data["ticket_id"],
                ).to_dict()

        if "whatsapp" in channels:
            if not data.get("phone"):
                results["whatsapp"] = {"success": False, "error": "Phone number required"}
            else:
                results["whatsapp"] = WhatsAppService().send_ticket_confirmation(
                    data["phone"],
                    data["attendee_name"],
                    data["event_name"],
                    data["event_date"],
                    data["ticket_id"],
                    data.get("ticket_url") or "",
                ).to_dict()

        if "email" in channels:
            results["email"] = {
                "success": True,
                "message": "Email handled by ticket email endpoint",
            }

        logger.info("Notification %s sent over %s", kind, ", ".join(channels))
        return Response(
            {
                "success": all(r.get("success") for r in results.values()),
                "results": results,
                "sms_configured": is_sms_configured(),
                "whatsapp_configured": is_whatsapp_configured(),
            }
        )

    @action(detail=False, methods=["get"], url_path="status")
    def channel_status(self, request):
        """Which notification channels are configured"""
        return Response(
            {
                "sms": is_sms_configured(),
                "whatsapp": is_whatsapp_configured(),
                "email": is_email_configured(),
            }
        )
