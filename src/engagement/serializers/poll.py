from rest_framework import serializers
from engagement.models import PollQuestion


class PollQuestionSerializer(serializers.ModelSerializer):
    class Meta:
        model = PollQuestion
        fields = "__all__"
        read_only_fields = [
            "question_id",
            "votes",
            "upvotes",
            "is_approved",
            "is_featured",
            "is_answered",
            "answers",
            "created_at",
        ]


class PollActionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(
        choices=["approve", "feature", "edit", "vote", "upvote", "answer"],
        error_messages={"invalid_choice": "Invalid action"},
    )
    data = serializers.DictField(required=False, default=dict)
