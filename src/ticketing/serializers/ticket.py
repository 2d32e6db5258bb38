from rest_framework import serializers
from ticketing.models import Ticket
from .event import EventListedSerializer


class TicketSerializer(serializers.ModelSerializer):
    event_name = serializers.CharField(source="event.name", read_only=True)

    class Meta:
        model = Ticket
        exclude = ["token_nonce"]


class TicketDetailSerializer(serializers.ModelSerializer):
    """Public ticket page. The token is only exposed once the ticket is paid."""

    event = EventListedSerializer(read_only=True)
    token = serializers.SerializerMethodField()

    class Meta:
        model = Ticket
        fields = [
            "ticket_id",
            "event",
            "name",
            "email",
            "phone",
            "status",
            "token",
            "checked_in",
            "checked_in_at",
            "amount_paid",
            "transferred_from",
            "created_at",
        ]

    def get_token(self, obj):
        return obj.token if obj.is_paid() else None


class AttendeeSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True, required=False)
    email = serializers.CharField(allow_blank=True, required=False)
    phone = serializers.CharField(allow_blank=True, required=False)


class TicketCreateSerializer(serializers.Serializer):
    event_id = serializers.CharField(required=False, allow_blank=True)
    name = serializers.CharField(required=False, allow_blank=True)
    email = serializers.CharField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True)
    attendees = AttendeeSerializer(many=True, required=False)
    promo_code = serializers.CharField(required=False, allow_blank=True)


class RefundSerializer(serializers.Serializer):
    refund_amount = serializers.IntegerField(required=False, min_value=0, allow_null=True)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class TransferSerializer(serializers.Serializer):
    new_owner_name = serializers.CharField(required=False, allow_blank=True)
    new_owner_email = serializers.EmailField(required=False, allow_blank=True)
    new_owner_phone = serializers.CharField(required=False, allow_blank=True, default="")
    token = serializers.CharField(required=False, allow_blank=True)
