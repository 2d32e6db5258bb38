from rest_framework import serializers
from ticketing.models import Event, Festival


class EventListedSerializer(serializers.ModelSerializer):
    current_price = serializers.SerializerMethodField()
    seats_left = serializers.ReadOnlyField()
    is_sold_out = serializers.ReadOnlyField()

    class Meta:
        model = Event
        fields = [
            "event_id",
            "name",
            "date",
            "start_time",
            "venue",
            "price",
            "current_price",
            "category",
            "image_url",
            "is_featured",
            "seats_left",
            "is_sold_out",
        ]

    def get_current_price(self, obj):
        return obj.current_price()


class EventDetailSerializer(EventListedSerializer):
    class Meta:
        model = Event
        exclude = ["certificate_template", "certificate_settings", "sold_count"]


class AdminEventSerializer(serializers.ModelSerializer):
    current_price = serializers.SerializerMethodField()
    seats_left = serializers.ReadOnlyField()
    is_sold_out = serializers.ReadOnlyField()

    class Meta:
        model = Event
        fields = "__all__"
        read_only_fields = ["event_id", "sold_count", "created_at", "updated_at"]

    def get_current_price(self, obj):
        return obj.current_price()

    def validate(self, attrs):
        price = attrs.get("price", getattr(self.instance, "price", 0))
        early_bird_price = attrs.get(
            "early_bird_price", getattr(self.instance, "early_bird_price", None)
        )
        if early_bird_price is not None and early_bird_price > price:
            raise serializers.ValidationError(
                {"early_bird_price": "Early bird price cannot be more than the regular price"}
            )
        return attrs


class FestivalSerializer(serializers.ModelSerializer):
    events = EventListedSerializer(many=True, read_only=True)

    class Meta:
        model = Festival
        fields = "__all__"


class AdminFestivalSerializer(serializers.ModelSerializer):
    class Meta:
        model = Festival
        fields = "__all__"
        read_only_fields = ["festival_id", "created_at"]

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and start > end:
            raise serializers.ValidationError("Festival start date must be before festival end date")
        return attrs
