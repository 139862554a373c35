import logging

from django.contrib.auth import get_user_model
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import serializers
from rest_framework.decorators import action
from rest_framework.response import Response

from campus.viewsets import RecordViewSet
from users.models import Role
from users.permissions import allow
from users.serializers import UserSummarySerializer

from .models import Leave
from .serializers import LeaveRequestSerializer, LeaveSerializer, LeaveUpdateSerializer, StudentLeaveRequestSerializer

logger = logging.getLogger(__name__)

User = get_user_model()

ANY_ROLE = (Role.ADMIN, Role.TEACHER, Role.STUDENT)


class LeaveViewSet(RecordViewSet):
    """
    Leave requests and their review.

    Students file through ``POST /leaves/`` addressed to an admin, teachers
    through ``POST /leaves/teacher/``. Admin sets the status; the requester may
    reword or withdraw a request while it is still pending.
    """

    queryset = Leave.objects.select_related('requester', 'admin').all()
    serializer_class = LeaveSerializer
    record_name = 'leave'
    record_plural = 'leaves'
    created_message = 'Leave application submitted successfully'
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['status']
    capabilities = {
        'list': allow(*ANY_ROLE),
        'retrieve': allow(*ANY_ROLE),
        'create': allow(Role.STUDENT, message='Forbidden: Only Students can submit leave applications here'),
        'teacher': allow(Role.TEACHER, message='Forbidden: Only Teachers can submit leave applications'),
        'update': allow(*ANY_ROLE),
        'destroy': allow(*ANY_ROLE),
        'admins': allow(*ANY_ROLE),
    }

    def get_serializer_class(self):
        if self.action == 'create':
            return StudentLeaveRequestSerializer
        if self.action == 'teacher':
            return LeaveRequestSerializer
        if self.action in ('update', 'partial_update'):
            return LeaveUpdateSerializer
        return LeaveSerializer

    def get_output_serializer(self, *args, **kwargs):
        kwargs.setdefault('context', self.get_serializer_context())
        return LeaveSerializer(*args, **kwargs)

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action in ('list', 'retrieve') and self.request.user.role != Role.ADMIN:
            return queryset.filter(requester=self.request.user)
        return queryset

    def ensure_requester(self, leave):
        self.ensure(
            leave.requester_id == self.request.user.pk,
            'Forbidden: You can only modify your own leave requests'
        )

    def perform_create(self, serializer):
        leave = serializer.save()
        logger.info(f"Leave {leave.pk} requested by {leave.requester.role} {leave.requester_id} for {leave.date}")

    @action(detail=False, methods=['post'])
    def teacher(self, request):
        return self.create(request)

    def perform_update(self, serializer):
        leave = serializer.instance
        changes = serializer.validated_data

        if self.request.user.role == Role.ADMIN:
            new_status = changes.get('status')
            if new_status and new_status != leave.status:
                if not leave.is_pending:
                    # transitions are unconstrained; reversing a decision is logged
                    logger.warning(f"Leave {leave.pk} moved from decided status {leave.status} to {new_status}")
                else:
                    logger.info(f"Leave {leave.pk} {new_status.lower()} by admin {self.request.user.pk}")
            serializer.save()
            return

        self.ensure_requester(leave)
        self.ensure('status' not in changes, 'Forbidden: Only Admin can change leave status')
        if not leave.is_pending:
            raise serializers.ValidationError('Only pending leave requests can be edited')
        serializer.save()

    def perform_destroy(self, instance):
        if self.request.user.role != Role.ADMIN:
            self.ensure_requester(instance)
            if not instance.is_pending:
                raise serializers.ValidationError('Only pending leave requests can be withdrawn')
        logger.info(f"Leave {instance.pk} deleted by user {self.request.user.pk}")
        instance.delete()

    @action(detail=False, methods=['get'])
    def admins(self, request):
        """Admins a student may address a leave request to"""
        users = User.objects.filter(role=Role.ADMIN, is_active=True).order_by('name')
        return Response({'admins': UserSummarySerializer(users, many=True).data})
