import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from rest_framework import filters, serializers
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from campus.exceptions import Conflict
from campus.viewsets import RecordViewSet
from users.models import Role
from users.permissions import allow
from users.serializers import UserSummarySerializer

from .models import Course, StudentProfile, Subject, TeacherProfile
from .serializers import CourseSerializer, StudentProfileSerializer, SubjectSerializer, TeacherProfileSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


def teacher_record_for(user):
    """Teacher profile of the caller; a teacher without one cannot work with subjects."""
    try:
        return user.teacher_profile
    except TeacherProfile.DoesNotExist:
        raise PermissionDenied('No teacher record found')


class StudentProfileViewSet(RecordViewSet):
    queryset = StudentProfile.objects.select_related('user').all()
    serializer_class = StudentProfileSerializer
    record_name = 'student'
    record_plural = 'students'
    filter_backends = [filters.SearchFilter]
    search_fields = ['user__name', 'user__email', 'enrollment_number']
    capabilities = {
        'list': allow(Role.ADMIN, Role.TEACHER, message='Forbidden: Students cannot view student records'),
        'retrieve': allow(Role.ADMIN, message='Forbidden: Only Admin can view student profiles'),
        'create': allow(Role.ADMIN, message='Forbidden: Only Admin can add students'),
        'update': allow(Role.ADMIN, message='Forbidden: Only Admin can update students'),
        'destroy': allow(Role.ADMIN, message='Forbidden: Only Admin can delete students'),
        'potential': allow(Role.ADMIN, message='Forbidden: Only Admin can fetch potential students'),
    }

    def list(self, request, *args, **kwargs):
        if request.user.role == Role.TEACHER:
            # Teachers only need the roster to take attendance and record marks
            students = User.objects.filter(role=Role.STUDENT).order_by('name')
            return Response({'students': UserSummarySerializer(students, many=True).data})
        return super().list(request, *args, **kwargs)

    def perform_create(self, serializer):
        profile = serializer.save()
        logger.info(f"Enrolled student {profile.user_id} as {profile.enrollment_number}")

    @action(detail=False, methods=['get'])
    def potential(self, request):
        """Student accounts that are not enrolled yet"""
        users = User.objects.filter(role=Role.STUDENT, student_profile__isnull=True).order_by('name')
        return Response({'potential_students': UserSummarySerializer(users, many=True).data})


class TeacherProfileViewSet(RecordViewSet):
    queryset = TeacherProfile.objects.select_related('user').all()
    serializer_class = TeacherProfileSerializer
    record_name = 'teacher'
    record_plural = 'teachers'
    filter_backends = [filters.SearchFilter]
    search_fields = ['user__name', 'user__email', 'subject']
    capabilities = {
        'list': allow(Role.ADMIN, Role.TEACHER, message='Forbidden: Students cannot view teacher records'),
        'retrieve': allow(Role.ADMIN, Role.TEACHER, message='Forbidden: Students cannot view teacher records'),
        'create': allow(Role.ADMIN, message='Forbidden: Only Admin can add teachers'),
        'update': allow(Role.ADMIN, message='Forbidden: Only Admin can update teachers'),
        'destroy': allow(Role.ADMIN, message='Forbidden: Only Admin can delete teachers'),
        'potential': allow(Role.ADMIN, message='Forbidden: Only Admin can fetch potential teachers'),
        'available': allow(Role.ADMIN, message='Forbidden: Only Admin can fetch available teachers'),
    }

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.request.user.role == Role.TEACHER:
            return queryset.filter(user=self.request.user)
        return queryset

    def perform_create(self, serializer):
        profile = serializer.save()
        logger.info(f"Created teacher profile {profile.pk} for user {profile.user_id}")

    @action(detail=False, methods=['get'])
    def potential(self, request):
        """Teacher accounts without a teacher profile"""
        users = User.objects.filter(role=Role.TEACHER, teacher_profile__isnull=True).order_by('name')
        return Response({'potential_teachers': UserSummarySerializer(users, many=True).data})

    @action(detail=False, methods=['get'])
    def available(self, request):
        """Any non-admin account that could still receive a teacher profile"""
        users = User.objects.exclude(role=Role.ADMIN).filter(teacher_profile__isnull=True).order_by('name')
        return Response({'teachers': UserSummarySerializer(users, many=True).data})


class SubjectViewSet(RecordViewSet):
    queryset = Subject.objects.select_related('teacher__user').all()
    serializer_class = SubjectSerializer
    record_name = 'subject'
    record_plural = 'subjects'
    filter_backends = [filters.SearchFilter]
    search_fields = ['title']
    capabilities = {
        'list': allow(Role.ADMIN, Role.TEACHER, Role.STUDENT),
        'retrieve': allow(Role.ADMIN, Role.TEACHER, Role.STUDENT),
        'create': allow(Role.ADMIN, Role.TEACHER, message='Students cannot add subjects'),
        'update': allow(Role.ADMIN, Role.TEACHER, message='Forbidden: Students cannot update subjects'),
        'destroy': allow(Role.ADMIN, Role.TEACHER, message='Students cannot delete subjects'),
    }

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action in ('list', 'retrieve') and self.request.user.role == Role.TEACHER:
            return queryset.filter(teacher=teacher_record_for(self.request.user))
        return queryset

    def resolve_teacher(self, serializer):
        """Teachers always assign themselves; Admin must name an existing teacher."""
        user = self.request.user
        if user.role == Role.TEACHER:
            return teacher_record_for(user)
        teacher = serializer.validated_data.get('teacher')
        if teacher is None:
            raise serializers.ValidationError('Title and teacher are required')
        return teacher

    def ensure_owner(self, instance):
        user = self.request.user
        if user.role == Role.TEACHER:
            self.ensure(
                instance.teacher_id == teacher_record_for(user).pk,
                f"Forbidden: You can only modify your own {self.record_plural}"
            )

    def perform_create(self, serializer):
        instance = serializer.save(teacher=self.resolve_teacher(serializer))
        logger.info(f"Created {self.record_name} {instance.pk} for teacher {instance.teacher_id}")

    def perform_update(self, serializer):
        self.ensure_owner(serializer.instance)
        if self.request.user.role != Role.ADMIN:
            # Only Admin reassigns a record to another teacher
            serializer.validated_data.pop('teacher', None)
        serializer.save()

    def perform_destroy(self, instance):
        self.ensure_owner(instance)
        logger.info(f"Deleted {self.record_name} {instance.pk}")
        instance.delete()


class CourseViewSet(SubjectViewSet):
    queryset = Course.objects.select_related('teacher__user').all()
    serializer_class = CourseSerializer
    record_name = 'course'
    record_plural = 'courses'
    capabilities = {
        'list': allow(Role.ADMIN, Role.TEACHER, Role.STUDENT),
        'retrieve': allow(Role.ADMIN, Role.TEACHER, Role.STUDENT),
        'create': allow(Role.ADMIN, Role.TEACHER, message='Students cannot add courses'),
        'update': allow(Role.ADMIN, Role.TEACHER, message='Forbidden: Students cannot update courses'),
        'destroy': allow(Role.ADMIN, Role.TEACHER, message='Students cannot delete courses'),
    }

    def assert_teacher_free(self, teacher, exclude=None):
        taken = Course.objects.filter(teacher=teacher)
        if exclude is not None:
            taken = taken.exclude(pk=exclude.pk)
        if taken.exists():
            raise Conflict('This teacher is already assigned to a course')

    def perform_create(self, serializer):
        teacher = self.resolve_teacher(serializer)
        self.assert_teacher_free(teacher)
        try:
            instance = serializer.save(teacher=teacher)
        except IntegrityError:
            raise Conflict('This teacher is already assigned to a course')
        logger.info(f"Created course {instance.pk} for teacher {teacher.pk}")

    def perform_update(self, serializer):
        teacher = serializer.validated_data.get('teacher')
        if teacher is not None and self.request.user.role == Role.ADMIN:
            self.assert_teacher_free(teacher, exclude=serializer.instance)
        super().perform_update(serializer)
