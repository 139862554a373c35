import math
from decimal import ROUND_HALF_UP, Decimal

from django.contrib.auth import get_user_model
from rest_framework import serializers

from users.models import Role
from users.serializers import UserSummarySerializer

from .models import MAX_MARKS, MIN_MARKS, Result

User = get_user_model()

MARKS_RANGE_MESSAGE = 'Marks must be between 0 and 100'
MARKS_STEP = Decimal('0.01')


class ResultSerializer(serializers.ModelSerializer):
    student = UserSummarySerializer(read_only=True)
    teacher = UserSummarySerializer(read_only=True)

    class Meta:
        model = Result
        fields = ['id', 'student', 'subject', 'marks', 'teacher', 'created_at', 'updated_at']


class ResultWriteSerializer(serializers.ModelSerializer):
    student = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(role=Role.STUDENT),
        error_messages={'does_not_exist': 'Invalid student ID'}
    )
    # any number in range is accepted and stored to two places
    marks = serializers.FloatField(
        min_value=float(MIN_MARKS), max_value=float(MAX_MARKS),
        error_messages={'min_value': MARKS_RANGE_MESSAGE, 'max_value': MARKS_RANGE_MESSAGE}
    )

    class Meta:
        model = Result
        fields = ['student', 'subject', 'marks']

    def validate_marks(self, value):
        if math.isnan(value):
            raise serializers.ValidationError(MARKS_RANGE_MESSAGE)
        return Decimal(str(value)).quantize(MARKS_STEP, rounding=ROUND_HALF_UP)

    def validate_subject(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError('Subject must be at least 2 characters')
        return value


class ResultUpdateSerializer(ResultWriteSerializer):
    """The student of a result is fixed once recorded."""
    student = None

    class Meta(ResultWriteSerializer.Meta):
        fields = ['subject', 'marks']
