import logging

from django_filters.rest_framework import DjangoFilterBackend

from campus.viewsets import RecordViewSet
from users.models import Role
from users.permissions import allow

from .models import Feedback
from .serializers import FeedbackSerializer, FeedbackStatusSerializer

logger = logging.getLogger(__name__)


class FeedbackViewSet(RecordViewSet):
    queryset = Feedback.objects.select_related('teacher').all()
    serializer_class = FeedbackSerializer
    record_name = 'feedback'
    record_plural = 'feedbacks'
    created_message = 'Feedback submitted successfully'
    updated_message = 'Feedback status updated successfully'
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['status']
    capabilities = {
        'list': allow(Role.ADMIN, Role.TEACHER, message='Forbidden: Students cannot view feedbacks'),
        'retrieve': allow(Role.ADMIN, Role.TEACHER, message='Forbidden: Students cannot view feedbacks'),
        'create': allow(Role.TEACHER, message='Forbidden: Only Teachers can submit feedback'),
        'update': allow(Role.ADMIN, message='Forbidden: Only Admins can update feedback status'),
        'destroy': allow(Role.ADMIN, message='Forbidden: Only Admins can delete feedback'),
    }

    def get_serializer_class(self):
        if self.action in ('update', 'partial_update'):
            return FeedbackStatusSerializer
        return FeedbackSerializer

    def get_output_serializer(self, *args, **kwargs):
        kwargs.setdefault('context', self.get_serializer_context())
        return FeedbackSerializer(*args, **kwargs)

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.request.user.role == Role.TEACHER:
            return queryset.filter(teacher=self.request.user)
        return queryset

    def perform_create(self, serializer):
        feedback = serializer.save(teacher=self.request.user)
        logger.info(f"Feedback {feedback.pk} submitted by teacher {feedback.teacher_id}")

    def perform_update(self, serializer):
        feedback = serializer.save()
        logger.info(f"Feedback {feedback.pk} marked {feedback.status}")
