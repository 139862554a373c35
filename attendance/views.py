import logging

from django.db.models import Count, Prefetch, Q
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import serializers
from rest_framework.decorators import action
from rest_framework.response import Response

from campus.dates import parse_calendar_date
from campus.viewsets import RecordViewSet
from users.models import Role
from users.permissions import allow

from .models import Attendance, AttendanceRecord, AttendanceStatus
from .serializers import (
    AttendanceCreateSerializer,
    AttendanceSerializer,
    AttendanceUpdateSerializer,
    StudentAttendanceSerializer,
)

logger = logging.getLogger(__name__)


def date_window(params):
    """Record filter for ``?date=`` or ``?start_date=&end_date=``."""
    window = {}
    for param, lookup in (('date', 'date'), ('start_date', 'date__gte'), ('end_date', 'date__lte')):
        raw = params.get(param)
        if not raw:
            continue
        parsed = parse_calendar_date(raw)
        if parsed is None:
            raise serializers.ValidationError('Invalid date format')
        window[lookup] = parsed
    return window


def count_statuses(records):
    return records.aggregate(
        present=Count('id', filter=Q(status=AttendanceStatus.PRESENT)),
        absent=Count('id', filter=Q(status=AttendanceStatus.ABSENT)),
    )


class AttendanceViewSet(RecordViewSet):
    queryset = Attendance.objects.select_related('teacher').all()
    serializer_class = AttendanceSerializer
    record_name = 'attendance'
    record_plural = 'attendance'
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['date', 'subject']
    capabilities = {
        'list': allow(Role.ADMIN, Role.TEACHER, Role.STUDENT),
        'retrieve': allow(Role.ADMIN, Role.TEACHER, Role.STUDENT),
        'create': allow(Role.TEACHER, message='Forbidden: Only teachers can submit attendance'),
        'update': allow(Role.ADMIN, Role.TEACHER, message='Forbidden: Students cannot update attendance'),
        'destroy': allow(Role.ADMIN, Role.TEACHER, message='Forbidden: Students cannot delete attendance'),
        'student': allow(Role.STUDENT, message='Forbidden: Only students can view their own attendance'),
        'summary': allow(Role.ADMIN, Role.TEACHER, message='Forbidden: Students cannot view attendance summaries'),
        'admin_summary': allow(Role.ADMIN, message='Forbidden: Only Admin can view the attendance summary'),
    }

    def get_serializer_class(self):
        if self.action == 'create':
            return AttendanceCreateSerializer
        if self.action in ('update', 'partial_update'):
            return AttendanceUpdateSerializer
        return AttendanceSerializer

    def get_output_serializer(self, *args, **kwargs):
        kwargs.setdefault('context', self.get_serializer_context())
        return AttendanceSerializer(*args, **kwargs)

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user
        if user.role == Role.STUDENT:
            # A student sees the sheets they are on, and only their own row of each
            own_rows = AttendanceRecord.objects.filter(student=user).select_related('student')
            return queryset.filter(records__student=user).distinct().prefetch_related(
                Prefetch('records', queryset=own_rows)
            )
        queryset = queryset.prefetch_related(
            Prefetch('records', queryset=AttendanceRecord.objects.select_related('student'))
        )
        if user.role == Role.TEACHER and self.action in ('list', 'retrieve'):
            return queryset.filter(teacher=user)
        return queryset

    def ensure_owner(self, sheet):
        user = self.request.user
        if user.role == Role.TEACHER:
            self.ensure(sheet.teacher_id == user.pk, 'Forbidden: You can only modify your own attendance')

    def perform_create(self, serializer):
        sheet = serializer.save()
        logger.info(f"Attendance {sheet.pk} submitted for {sheet.subject} on {sheet.date} by teacher {sheet.teacher_id}")

    def perform_update(self, serializer):
        self.ensure_owner(serializer.instance)
        serializer.save()
        logger.info(f"Attendance {serializer.instance.pk} updated by user {self.request.user.pk}")

    def perform_destroy(self, instance):
        self.ensure_owner(instance)
        logger.info(f"Attendance {instance.pk} deleted by user {self.request.user.pk}")
        instance.delete()

    @action(detail=False, methods=['get'])
    def student(self, request):
        """The caller's own attendance rows with present/absent totals"""
        records = AttendanceRecord.objects.filter(student=request.user).select_related('teacher')
        records = records.filter(**date_window(request.query_params)).order_by('-date', '-id')
        return Response({
            'attendance': StudentAttendanceSerializer(records, many=True).data,
            **count_statuses(records),
        })

    @action(detail=False, methods=['get'])
    def summary(self, request):
        records = AttendanceRecord.objects.filter(**date_window(request.query_params))
        if request.user.role == Role.TEACHER:
            records = records.filter(teacher=request.user)
        return Response(count_statuses(records))

    @action(detail=False, methods=['get'], url_path='summary/admin')
    def admin_summary(self, request):
        records = AttendanceRecord.objects.filter(**date_window(request.query_params))
        return Response(count_statuses(records))
