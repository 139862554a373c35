from django.contrib.auth import get_user_model, password_validation
from rest_framework import serializers
from rest_framework_simplejwt.tokens import AccessToken

from campus.exceptions import Conflict

from .models import Role

User = get_user_model()


def issue_token(user):
    """Access token carrying the caller id and role."""
    token = AccessToken.for_user(user)
    token['role'] = user.role
    return str(token)


class UserSerializer(serializers.ModelSerializer):

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role', 'address', 'subjects']
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    """Flat identity used when nesting users inside other records"""

    class Meta:
        model = User
        fields = ['id', 'name', 'email']
        read_only_fields = fields


class SubjectsMixin:

    def _validate_subjects(self, role, subjects):
        cleaned = [s.strip() for s in subjects or [] if s and s.strip()]
        if role == Role.TEACHER and not cleaned:
            raise serializers.ValidationError({'subjects': 'A teacher must teach at least one subject.'})
        if role != Role.TEACHER and cleaned:
            raise serializers.ValidationError({'subjects': 'Only teachers have subjects.'})
        return cleaned


class SignupSerializer(SubjectsMixin, serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6)
    role = serializers.ChoiceField(choices=Role.choices, default=Role.STUDENT)
    address = serializers.CharField(required=False, allow_blank=True, default='')
    subjects = serializers.ListField(child=serializers.CharField(), required=False, default=list)

    def validate_email(self, value):
        return value.strip().lower()

    def validate_password(self, value):
        password_validation.validate_password(value)
        return value

    def validate(self, data):
        data['subjects'] = self._validate_subjects(data['role'], data.get('subjects'))
        return data

    def create(self, validated_data):
        return User.objects.create_account(**validated_data)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(choices=Role.choices, required=False)

    def validate_email(self, value):
        return value.strip().lower()


class AccountUpdateSerializer(SubjectsMixin, serializers.ModelSerializer):
    """Partial update of an identity. The role is never writable."""
    password = serializers.CharField(write_only=True, required=False, allow_blank=True, min_length=6)
    subjects = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'password', 'role', 'address', 'subjects']
        read_only_fields = ['id', 'role']
        extra_kwargs = {
            'name': {'min_length': 2},
        }

    def validate_email(self, value):
        value = value.strip().lower()
        clash = User.objects.filter(email=value, role=self.instance.role).exclude(pk=self.instance.pk)
        if clash.exists():
            raise Conflict('Email already in use')
        return value

    def validate(self, data):
        if 'subjects' in data:
            data['subjects'] = self._validate_subjects(self.instance.role, data['subjects'])
        return data

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for field, value in validated_data.items():
            setattr(instance, field, value)
        if 'email' in validated_data:
            instance.sync_username()
        if password:
            instance.set_password(password)
        instance.save()
        return instance
