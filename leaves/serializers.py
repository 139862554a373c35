import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework import serializers

from campus.dates import CalendarDateField
from campus.exceptions import Conflict
from users.models import Role
from users.serializers import UserSummarySerializer

from .models import Leave

logger = logging.getLogger(__name__)

User = get_user_model()

REASON_ERRORS = {
    'required': 'Date and a non-empty reason are required',
    'blank': 'Date and a non-empty reason are required',
    'max_length': 'Reason cannot exceed 500 characters',
}


class LeaveSerializer(serializers.ModelSerializer):
    requester = UserSummarySerializer(read_only=True)
    requester_role = serializers.CharField(source='requester.role', read_only=True)
    admin = UserSummarySerializer(read_only=True)
    date = CalendarDateField(read_only=True)

    class Meta:
        model = Leave
        fields = ['id', 'requester', 'requester_role', 'admin', 'date', 'reason', 'status', 'created_at', 'updated_at']


class LeaveRequestSerializer(serializers.ModelSerializer):
    """Teacher leave: a date and a reason."""
    date = CalendarDateField(error_messages={'required': 'Date and a non-empty reason are required'})
    reason = serializers.CharField(max_length=500, error_messages=REASON_ERRORS)

    class Meta:
        model = Leave
        fields = ['date', 'reason']

    def validate_date(self, value):
        if value < timezone.localdate():
            raise serializers.ValidationError('Leave date cannot be in the past')
        return value

    def create(self, validated_data):
        requester = self.context['request'].user
        if Leave.objects.filter(requester=requester, date=validated_data['date']).exists():
            raise Conflict('Leave already requested for this date')
        try:
            with transaction.atomic():
                return Leave.objects.create(requester=requester, **validated_data)
        except IntegrityError:
            logger.warning(f"Concurrent leave request by user {requester.pk} for {validated_data['date']}")
            raise Conflict('Leave already requested for this date')


class StudentLeaveRequestSerializer(LeaveRequestSerializer):
    """Student leave names the admin it is addressed to."""
    admin = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(role=Role.ADMIN),
        error_messages={'required': 'Admin is required', 'does_not_exist': 'Invalid admin ID'}
    )

    class Meta(LeaveRequestSerializer.Meta):
        fields = ['date', 'reason', 'admin']


class LeaveUpdateSerializer(serializers.ModelSerializer):
    reason = serializers.CharField(max_length=500, required=False, error_messages=REASON_ERRORS)

    class Meta:
        model = Leave
        fields = ['reason', 'status']
        extra_kwargs = {'status': {'required': False}}
