from rest_framework import serializers
from ticketing.models import PromoCode, WaitlistEntry, EmailTemplate, Group, Ticket


class PromoCodeSerializer(serializers.ModelSerializer):
    code = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = PromoCode
        fields = "__all__"
        read_only_fields = ["promo_id", "used_count", "created_at"]

    def validate_code(self, value):
        value = (value or "").strip().upper()
        if not value:
            return value
        queryset = PromoCode.objects.filter(code__iexact=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("Promo code already exists")
        return value


class PromoValidateSerializer(serializers.Serializer):
    code = serializers.CharField()
    event = serializers.UUIDField()


class WaitlistEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = WaitlistEntry
        fields = "__all__"
        read_only_fields = ["entry_id", "notified", "notified_at", "created_at"]
        validators = []


class EmailTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = EmailTemplate
        fields = "__all__"
        read_only_fields = ["template_id", "created_at", "updated_at"]


class TemplatedEmailSerializer(serializers.Serializer):
    template_id = serializers.IntegerField()
    ticket_id = serializers.UUIDField(required=False)
    event = serializers.UUIDField(required=False)

    def validate(self, attrs):
        if not attrs.get("ticket_id") and not attrs.get("event"):
            raise serializers.ValidationError("Either ticket_id or event is required")
        return attrs


class SendEmailSerializer(serializers.Serializer):
    to = serializers.EmailField(required=False, allow_blank=True)
    ticket_id = serializers.CharField(required=False, allow_blank=True)
    event_name = serializers.CharField(required=False, allow_blank=True)
    subject = serializers.CharField(required=False, allow_blank=True)
    email_styles = serializers.DictField(required=False)


class GroupTicketSerializer(serializers.ModelSerializer):
    class Meta:
        model = Ticket
        fields = ["ticket_id", "name", "email", "phone", "status", "checked_in"]


class GroupSerializer(serializers.ModelSerializer):
    ticket_count = serializers.IntegerField(read_only=True)
    paid_count = serializers.IntegerField(read_only=True)
    event_name = serializers.CharField(source="event.name", read_only=True)

    class Meta:
        model = Group
        fields = "__all__"
        read_only_fields = ["group_id", "created_at"]


class GroupDetailSerializer(GroupSerializer):
    tickets = GroupTicketSerializer(many=True, read_only=True)


class GroupUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Group
        fields = ["name", "contact_name", "contact_email", "contact_phone", "discount", "notes"]

    def validate_discount(self, value):
        if value > 100:
            raise serializers.ValidationError("Group discount must be between 0 and 100")
        return value
