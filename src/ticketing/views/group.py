from django.core.exceptions import ValidationError
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, mixins, status
from rest_framework.response import Response
from base.helpers.api_permissions import AdminPermission
from base.helpers.errors import error_message
from ticketing.models import Event, Group
from ticketing.serializers.promo import (
    GroupSerializer,
    GroupDetailSerializer,
    GroupUpdateSerializer,
)
from ticketing.services.order import OrderService

REQUIRED_FIELDS = ["name", "contact_name", "contact_email", "event_id"]


class AdminGroupViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    Group bookings. Deleting a group keeps its tickets, they are only
    detached from the group.
    """

    serializer_class = GroupSerializer
    permission_classes = [AdminPermission]
    filterset_fields = ["event"]
    http_method_names = ["get", "post", "patch", "delete"]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Group.objects.none()
        queryset = Group.with_ticket_counts()
        if self.action == "retrieve":
            queryset = queryset.prefetch_related("tickets")
        return queryset

    def get_serializer_class(self):
        if self.action == "retrieve":
            return GroupDetailSerializer
        if self.action == "partial_update":
            return GroupUpdateSerializer
        return GroupSerializer

    @swagger_auto_schema(
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                "name": openapi.Schema(type=openapi.TYPE_STRING),
                "contact_name": openapi.Schema(type=openapi.TYPE_STRING),
                "contact_email": openapi.Schema(type=openapi.TYPE_STRING),
                "contact_phone": openapi.Schema(type=openapi.TYPE_STRING),
                "event_id": openapi.Schema(type=openapi.TYPE_STRING),
                "discount": openapi.Schema(type=openapi.TYPE_INTEGER, default=0),
                "notes": openapi.Schema(type=openapi.TYPE_STRING),
                "attendees": openapi.Schema(
                    type=openapi.TYPE_ARRAY, items=openapi.Schema(type=openapi.TYPE_OBJECT)
                ),
            },
            required=REQUIRED_FIELDS,
        ),
        responses={201: GroupSerializer()},
    )
    def create(self, request, *args, **kwargs):
        data = request.data
        event_id = data.get("event_id") or data.get("event")
        if not all(data.get(field) for field in REQUIRED_FIELDS[:-1]) or not event_id:
            return Response(
                {"error": "Missing required fields: " + ", ".join(REQUIRED_FIELDS)},
                status=status.HTTP_400_BAD_REQUEST,
            )
        try:
            discount = int(data.get("discount") or 0)
        except (TypeError, ValueError):
            return Response(
                {"error": "Group discount must be between 0 and 100"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        try:
            group, tickets = OrderService().create_group(
                event_id,
                attendees=data.get("attendees"),
                name=data["name"],
                contact_name=data["contact_name"],
                contact_email=data["contact_email"],
                contact_phone=data.get("contact_phone") or "",
                discount=discount,
                notes=data.get("notes") or "",
            )
        except Event.DoesNotExist:
            return Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)
        except ValidationError as e:
            return Response({"error": error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(
            {
                "group": GroupSerializer(group).data,
                "ticket_ids": [str(ticket.ticket_id) for ticket in tickets],
                "ticket_count": len(tickets),
            },
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request, *args, **kwargs):
        group = self.get_object()
        serializer = GroupUpdateSerializer(group, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(GroupSerializer(self.get_queryset().get(pk=group.pk)).data)
