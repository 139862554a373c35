import logging

from django.db.models import Avg, Count
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.decorators import action
from rest_framework.response import Response

from campus.viewsets import RecordViewSet
from users.models import Role
from users.permissions import allow

from .models import Result
from .serializers import ResultSerializer, ResultUpdateSerializer, ResultWriteSerializer

logger = logging.getLogger(__name__)


class ResultViewSet(RecordViewSet):
    queryset = Result.objects.select_related('student', 'teacher').all()
    serializer_class = ResultSerializer
    record_name = 'result'
    record_plural = 'results'
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['subject', 'student']
    capabilities = {
        'list': allow(Role.ADMIN, Role.TEACHER, Role.STUDENT),
        'retrieve': allow(Role.ADMIN, Role.TEACHER, Role.STUDENT),
        'create': allow(Role.TEACHER, message='Forbidden: Only teachers can submit results'),
        'update': allow(Role.ADMIN, Role.TEACHER, message='Forbidden: Students cannot update results'),
        'destroy': allow(Role.ADMIN, Role.TEACHER, message='Forbidden: Students cannot delete results'),
        'student': allow(Role.STUDENT, message='Forbidden: Only students can view their own results'),
        'average_marks': allow(Role.ADMIN, Role.TEACHER, message='Forbidden: Students cannot view average marks'),
    }

    def get_serializer_class(self):
        if self.action == 'create':
            return ResultWriteSerializer
        if self.action in ('update', 'partial_update'):
            return ResultUpdateSerializer
        return ResultSerializer

    def get_output_serializer(self, *args, **kwargs):
        kwargs.setdefault('context', self.get_serializer_context())
        return ResultSerializer(*args, **kwargs)

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user
        if user.role == Role.STUDENT:
            return queryset.filter(student=user)
        if user.role == Role.TEACHER and self.action in ('list', 'retrieve', 'average_marks'):
            return queryset.filter(teacher=user)
        return queryset

    def ensure_owner(self, result):
        if self.request.user.role == Role.TEACHER:
            self.ensure(
                result.teacher_id == self.request.user.pk,
                'Forbidden: You can only modify results you submitted'
            )

    def perform_create(self, serializer):
        result = serializer.save(teacher=self.request.user)
        logger.info(f"Result {result.pk} recorded for student {result.student_id} in {result.subject} by teacher {result.teacher_id}")

    def perform_update(self, serializer):
        self.ensure_owner(serializer.instance)
        serializer.save()

    def perform_destroy(self, instance):
        self.ensure_owner(instance)
        logger.info(f"Result {instance.pk} deleted by user {self.request.user.pk}")
        instance.delete()

    @action(detail=False, methods=['get'])
    def student(self, request):
        results = Result.objects.filter(student=request.user).select_related('student', 'teacher')
        return Response({'results': ResultSerializer(results, many=True).data})

    @action(detail=False, methods=['get'], url_path='average-marks')
    def average_marks(self, request):
        """Mean marks per subject, recomputed on every request"""
        rows = (
            self.get_queryset()
            .order_by()
            .values('subject')
            .annotate(average=Avg('marks'), count=Count('id'))
            .order_by('subject')
        )
        return Response({'average_marks': [
            {'subject': row['subject'], 'average_marks': round(float(row['average']), 2), 'count': row['count']}
            for row in rows
        ]})
