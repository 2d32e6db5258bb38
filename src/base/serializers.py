from rest_framework import serializers
from base.models import TeamMember, TeamRole


class TeamMemberSerializer(serializers.ModelSerializer):
    """Team member as shown in the admin dashboard"""

    class Meta:
        model = TeamMember
        fields = [
            "member_id",
            "name",
            "email",
            "role",
            "event_ids",
            "is_active",
            "created_at",
            "last_active",
        ]
        read_only_fields = ["member_id", "created_at", "last_active"]


class TeamMemberCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=6)

    class Meta:
        model = TeamMember
        fields = ["member_id", "name", "email", "password", "role", "event_ids", "is_active"]
        read_only_fields = ["member_id"]

    def validate_email(self, value):
        value = value.strip().lower()
        queryset = TeamMember.objects.filter(email__iexact=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("A team member with this email already exists")
        return value

    def create(self, validated_data):
        password = validated_data.pop("password")
        return TeamMember.objects.create_member(password=password, **validated_data)

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        if password:
            instance.set_password(password)
        return super().update(instance, validated_data)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()


class InviteSerializer(serializers.Serializer):
    name = serializers.CharField()
    email = serializers.EmailField()
    password = serializers.CharField()
    role = serializers.ChoiceField(choices=TeamRole.choices)


class NotificationDataSerializer(serializers.Serializer):
    phone = serializers.CharField(required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    attendee_name = serializers.CharField()
    event_name = serializers.CharField()
    event_date = serializers.CharField()
    venue = serializers.CharField(required=False, allow_blank=True, default="")
    ticket_id = serializers.CharField()
    ticket_url = serializers.CharField(required=False, allow_blank=True)


class NotificationSerializer(serializers.Serializer):
    type = serializers.ChoiceField(
        choices=["ticket_confirmation", "event_reminder"], default="ticket_confirmation"
    )
    channels = serializers.ListField(
        child=serializers.ChoiceField(choices=["sms", "whatsapp", "email"]),
        allow_empty=True,
    )
    data = NotificationDataSerializer()
