from rest_framework import serializers
from engagement.models import Certificate, CertificateType


class CertificateSerializer(serializers.ModelSerializer):
    event_name = serializers.CharField(source="event.name", read_only=True)

    class Meta:
        model = Certificate
        fields = "__all__"
        read_only_fields = ["certificate_id", "created_at"]


class CertificateSettingsSerializer(serializers.Serializer):
    name_x = serializers.FloatField(required=False, min_value=0, max_value=100)
    name_y = serializers.FloatField(required=False, min_value=0)
    font_size = serializers.FloatField(required=False, min_value=1)
    font_color = serializers.RegexField(r"^#[0-9A-Fa-f]{6}$", required=False)
    font_family = serializers.CharField(required=False)


class GenerateCertificateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True)
    event = serializers.UUIDField(required=False, allow_null=True)
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    type = serializers.ChoiceField(
        choices=CertificateType.choices, required=False, default=CertificateType.PARTICIPANT
    )
    settings = CertificateSettingsSerializer(required=False)
    save_to_db = serializers.BooleanField(required=False, default=True)


class BatchCertificateSerializer(serializers.Serializer):
    event = serializers.UUIDField()
    names = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    type = serializers.ChoiceField(
        choices=CertificateType.choices, required=False, default=CertificateType.PARTICIPANT
    )
    settings = CertificateSettingsSerializer(required=False)
    include_from_attendees = serializers.BooleanField(required=False, default=False)


class BulkDeleteCertificateSerializer(serializers.Serializer):
    event = serializers.UUIDField()
    type = serializers.ChoiceField(choices=CertificateType.choices, required=False)
