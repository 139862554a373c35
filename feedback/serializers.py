from rest_framework import serializers

from users.serializers import UserSummarySerializer

from .models import Feedback, FeedbackStatus

STATUS_MESSAGE = 'Status is required and must be "Pending" or "Reviewed"'


class FeedbackSerializer(serializers.ModelSerializer):
    teacher = UserSummarySerializer(read_only=True)
    feedback = serializers.CharField(max_length=1000, error_messages={
        'required': 'Feedback is required and must be a non-empty string',
        'blank': 'Feedback is required and must be a non-empty string',
        'max_length': 'Feedback cannot exceed 1000 characters',
    })

    class Meta:
        model = Feedback
        fields = ['id', 'teacher', 'feedback', 'status', 'created_at', 'updated_at']
        read_only_fields = ['status']


class FeedbackStatusSerializer(serializers.ModelSerializer):
    """Review only moves the status; the text itself is never edited."""
    status = serializers.ChoiceField(
        choices=FeedbackStatus.choices, required=False, error_messages={'invalid_choice': STATUS_MESSAGE}
    )

    class Meta:
        model = Feedback
        fields = ['status']

    def validate(self, data):
        if 'status' not in data:
            raise serializers.ValidationError(STATUS_MESSAGE)
        return data
