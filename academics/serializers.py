from django.contrib.auth import get_user_model
from rest_framework import serializers

from campus.exceptions import Conflict
from users.models import Role
from users.serializers import UserSummarySerializer

from .models import Course, StudentProfile, Subject, TeacherProfile

User = get_user_model()


class StudentProfileSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    user_id = serializers.PrimaryKeyRelatedField(source='user', queryset=User.objects.all(), write_only=True)

    class Meta:
        model = StudentProfile
        fields = ['id', 'user', 'user_id', 'enrollment_number', 'class_name', 'section', 'address', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']
        # uniqueness is reported as a conflict below
        extra_kwargs = {'enrollment_number': {'validators': []}}

    def validate_user_id(self, user):
        if user.role != Role.STUDENT:
            raise serializers.ValidationError('Invalid user or user is not a student')
        already_enrolled = StudentProfile.objects.filter(user=user)
        if self.instance is not None:
            already_enrolled = already_enrolled.exclude(pk=self.instance.pk)
        if already_enrolled.exists():
            raise Conflict('This student is already enrolled in a class')
        return user

    def validate_enrollment_number(self, value):
        value = value.strip()
        clash = StudentProfile.objects.filter(enrollment_number=value)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise Conflict('Enrollment number already exists')
        return value


class TeacherProfileSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    user_id = serializers.PrimaryKeyRelatedField(source='user', queryset=User.objects.all(), write_only=True)
    # Optional identity fields, applied to the linked user on update
    name = serializers.CharField(write_only=True, required=False, min_length=2)
    email = serializers.EmailField(write_only=True, required=False)
    password = serializers.CharField(write_only=True, required=False, allow_blank=True, min_length=6)

    class Meta:
        model = TeacherProfile
        fields = [
            'id', 'user', 'user_id', 'name', 'email', 'password', 'subject', 'qualification',
            'experience', 'address', 'contact_number', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_user_id(self, user):
        if user.role != Role.TEACHER:
            raise serializers.ValidationError('Invalid user or user is not a teacher')
        existing = TeacherProfile.objects.filter(user=user)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise Conflict('This teacher already has a profile')
        return user

    def validate_email(self, value):
        value = value.strip().lower()
        clash = User.objects.filter(email=value, role=Role.TEACHER)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.user_id)
        elif str(self.initial_data.get('user_id', '')).isdigit():
            # the account being linked may already carry this email
            clash = clash.exclude(pk=self.initial_data['user_id'])
        if clash.exists():
            raise Conflict('Email already in use')
        return value

    def _apply_identity(self, user, name=None, email=None, password=None):
        if name:
            user.name = name
        if email:
            user.email = email
            user.sync_username()
        if password:
            user.set_password(password)
        if name or email or password:
            user.save()

    def create(self, validated_data):
        identity = {key: validated_data.pop(key, None) for key in ('name', 'email', 'password')}
        profile = super().create(validated_data)
        self._apply_identity(profile.user, **identity)
        return profile

    def update(self, instance, validated_data):
        identity = {key: validated_data.pop(key, None) for key in ('name', 'email', 'password')}
        profile = super().update(instance, validated_data)
        self._apply_identity(profile.user, **identity)
        return profile


class TeacherRefSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = TeacherProfile
        fields = ['id', 'user', 'subject']


class SubjectSerializer(serializers.ModelSerializer):
    teacher = TeacherRefSerializer(read_only=True)
    teacher_id = serializers.PrimaryKeyRelatedField(
        source='teacher', queryset=TeacherProfile.objects.all(), write_only=True, required=False,
        error_messages={'does_not_exist': 'Invalid teacher ID'}
    )

    class Meta:
        model = Subject
        fields = ['id', 'title', 'description', 'teacher', 'teacher_id', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Title is required')
        return value


class CourseSerializer(SubjectSerializer):

    class Meta(SubjectSerializer.Meta):
        model = Course
