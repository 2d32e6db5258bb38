import logging
from django.core.exceptions import ValidationError, PermissionDenied
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, mixins, filters, status
from rest_framework.decorators import action
from rest_framework.response import Response
from base.helpers.api_permissions import AdminPermission, StaffPermission
from base.helpers.errors import error_message
from ticketing.filters.event import TicketFilter
from ticketing.models import Event, Ticket
from ticketing.serializers.ticket import (
    TicketSerializer,
    TicketDetailSerializer,
    TicketCreateSerializer,
    RefundSerializer,
    TransferSerializer,
)
from ticketing.services.order import OrderService, CapacityExceeded, normalize_attendees

logger = logging.getLogger(__name__)


def _transfer(request, ticket_id, is_staff):
    serializer = TransferSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            {"error": "Invalid transfer details", "details": serializer.errors},
            status=status.HTTP_400_BAD_REQUEST,
        )
    data = serializer.validated_data
    if not data.get("new_owner_name") or not data.get("new_owner_email"):
        return Response(
            {"error": "New owner name and email are required"},
            status=status.HTTP_400_BAD_REQUEST,
        )
    try:
        ticket = OrderService().transfer(
            ticket_id,
            data["new_owner_name"],
            data["new_owner_email"],
            data.get("new_owner_phone", ""),
            token=data.get("token"),
            is_staff=is_staff,
        )
    except Ticket.DoesNotExist:
        return Response({"error": "Ticket not found"}, status=status.HTTP_404_NOT_FOUND)
    except PermissionDenied as e:
        return Response({"error": str(e)}, status=status.HTTP_403_FORBIDDEN)
    except ValidationError as e:
        return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(
        {
            "success": True,
            "message": f"Ticket transferred to {ticket.name}",
            "ticket": TicketSerializer(ticket).data,
        }
    )


class TicketViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = Ticket.objects.select_related("event")
    serializer_class = TicketDetailSerializer

    @swagger_auto_schema(
        operation_description="""
        Reserve pending tickets. Send either an attendees list or a single name/email/phone.
        Attendee email and phone default to the top level values.
        """,
        request_body=TicketCreateSerializer,
    )
    def create(self, request, *args, **kwargs):
        serializer = TicketCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        attendees = normalize_attendees(data)
        if not data.get("event_id"):
            return Response(
                {"error": "Name and event are required"}, status=status.HTTP_400_BAD_REQUEST
            )
        try:
            tickets, quote = OrderService().create_tickets(
                data["event_id"], attendees, promo_code=data.get("promo_code") or None
            )
        except Event.DoesNotExist:
            return Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)
        except CapacityExceeded as e:
            return Response(
                {"error": error_message(e), "waitlist_available": True},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "ticket_id": str(tickets[0].ticket_id),
                "ticket_ids": [str(ticket.ticket_id) for ticket in tickets],
                "quantity": quote.quantity,
                "event_name": tickets[0].event.name,
                "price": quote.unit_price,
                "total_price": quote.total,
                "discount": quote.discount,
                "payable": quote.payable,
            },
            status=status.HTTP_201_CREATED,
        )

    @swagger_auto_schema(
        operation_description="Transfer a paid ticket to someone else. Needs the ticket token.",
        request_body=TransferSerializer,
    )
    @action(detail=True, methods=["post"])
    def transfer(self, request, pk=None):
        return _transfer(request, pk, is_staff=False)


# Admin ViewSets


class AdminTicketViewSet(
    mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet
):
    serializer_class = TicketSerializer
    permission_classes = [StaffPermission]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = TicketFilter
    ordering_fields = ["created_at", "name", "checked_in_at"]
    ordering = ["-created_at"]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Ticket.objects.none()
        queryset = Ticket.objects.select_related("event")
        member = self.request.user
        if not member.can_manage() and member.event_ids:
            queryset = queryset.filter(event_id__in=member.event_ids)
        return queryset

    def get_permissions(self):
        if self.action == "refund":
            return [AdminPermission()]
        return super().get_permissions()

    @swagger_auto_schema(
        operation_description="""
        Refund a paid ticket. refund_amount is in paise and defaults to the amount paid.
        Razorpay payments are refunded on the gateway as well.
        """,
        request_body=RefundSerializer,
    )
    @action(detail=True, methods=["post"])
    def refund(self, request, pk=None):
        ticket = self.get_object()
        serializer = RefundSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            ticket = OrderService().refund(
                ticket.ticket_id,
                serializer.validated_data.get("refund_amount"),
                serializer.validated_data.get("reason", ""),
            )
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(
            {
                "success": True,
                "message": "Ticket refunded",
                "ticket": TicketSerializer(ticket).data,
            }
        )

    @swagger_auto_schema(
        operation_description="Transfer a ticket to a new owner.",
        request_body=TransferSerializer,
    )
    @action(detail=True, methods=["post"])
    def transfer(self, request, pk=None):
        ticket = self.get_object()
        return _transfer(request, ticket.ticket_id, is_staff=True)

    @swagger_auto_schema(
        operation_description="Send the confirmation email with the QR code and PDF again.",
        request_body=openapi.Schema(type=openapi.TYPE_OBJECT, properties={}),
    )
    @action(detail=True, methods=["post"])
    def resend(self, request, pk=None):
        ticket = self.get_object()
        try:
            result = OrderService().resend(ticket)
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
        if not result.success:
            return Response(
                {"error": result.error or "Failed to send email"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response({"message": "Email sent", **result.to_dict()})
