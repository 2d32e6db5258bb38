from django.core.exceptions import ValidationError
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.response import Response
from base.helpers.api_permissions import AdminPermission, StaffPermission
from base.helpers.errors import ModelValidationMixin, error_message
from ticketing.models import Event, PromoCode, WaitlistEntry
from ticketing.serializers.promo import (
    PromoCodeSerializer,
    PromoValidateSerializer,
    WaitlistEntrySerializer,
)
from ticketing.services.delivery import TicketDeliveryService
from ticketing.services.order import OrderService


class PromoCodeViewSet(viewsets.GenericViewSet):
    serializer_class = PromoValidateSerializer

    @swagger_auto_schema(
        operation_description="Check a promo code for an event and preview its discount.",
        request_body=PromoValidateSerializer,
    )
    @action(detail=False, methods=["post"])
    def validate(self, request):
        serializer = PromoValidateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"error": "Code and event are required"}, status=status.HTTP_400_BAD_REQUEST
            )
        try:
            event = Event.objects.get(pk=serializer.validated_data["event"])
        except Event.DoesNotExist:
            return Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)
        try:
            promo = OrderService().get_promo_code(serializer.validated_data["code"], event)
        except ValidationError as e:
            return Response(
                {"valid": False, "error": error_message(e)},
                status=status.HTTP_400_BAD_REQUEST,
            )
        price = event.current_price()
        discount = promo.discount_for(price)
        return Response(
            {
                "valid": True,
                "code": promo.code,
                "discount_type": promo.discount_type,
                "discount_value": promo.discount_value,
                "discount": discount,
                "final_price": price - discount,
            }
        )


class AdminPromoCodeViewSet(ModelValidationMixin, viewsets.ModelViewSet):
    queryset = PromoCode.objects.all().prefetch_related("events")
    serializer_class = PromoCodeSerializer
    permission_classes = [AdminPermission]
    filterset_fields = ["is_active", "discount_type"]


class WaitlistViewSet(mixins.CreateModelMixin, viewsets.GenericViewSet):
    """Join the waitlist of a sold out event. Joining twice is a no-op."""

    serializer_class = WaitlistEntrySerializer
    queryset = WaitlistEntry.objects.none()

    def create(self, request, *args, **kwargs):
        serializer = WaitlistEntrySerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"error": "Name, email and event are required", "details": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        data = serializer.validated_data
        entry, created = WaitlistEntry.objects.get_or_create(
            event=data["event"],
            email=data["email"].lower(),
            defaults={"name": data["name"], "phone": data.get("phone", "")},
        )
        return Response(
            {
                "success": True,
                "message": "Added to waitlist" if created else "Already on the waitlist",
                "entry": WaitlistEntrySerializer(entry).data,
            },
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class AdminWaitlistViewSet(
    mixins.ListModelMixin, mixins.DestroyModelMixin, viewsets.GenericViewSet
):
    queryset = WaitlistEntry.objects.select_related("event")
    serializer_class = WaitlistEntrySerializer
    permission_classes = [StaffPermission]
    filterset_fields = ["event", "notified"]

    @swagger_auto_schema(
        operation_description="Email everyone waiting for an event that tickets are available.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={"event_id": openapi.Schema(type=openapi.TYPE_STRING)},
            required=["event_id"],
        ),
    )
    @action(detail=False, methods=["post"])
    def notify(self, request):
        event_id = request.data.get("event_id")
        if not event_id:
            return Response({"error": "Event ID is required"}, status=status.HTTP_400_BAD_REQUEST)
        try:
            event = Event.objects.get(pk=event_id)
        except (Event.DoesNotExist, ValidationError):
            return Response({"error": "Event not found"}, status=status.HTTP_404_NOT_FOUND)
        notified = TicketDeliveryService().notify_waitlist(event)
        return Response({"success": True, "notified": notified})
