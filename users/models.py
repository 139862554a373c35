from django.contrib.auth.models import AbstractUser, UserManager as DjangoUserManager
from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator
from django.db import models
from django.db.models import Q


class Role(models.TextChoices):
    ADMIN = 'Admin', 'Admin'
    TEACHER = 'Teacher', 'Teacher'
    STUDENT = 'Student', 'Student'


def account_username(email, role):
    """Usernames are derived from the (role, email) pair, which is unique per account."""
    return f"{role.lower()}:{email.lower()}"


class UserManager(DjangoUserManager):

    def create_account(self, email, password, role=Role.STUDENT, **extra_fields):
        email = self.normalize_email(email).lower()
        extra_fields.setdefault('name', email.split('@')[0])
        return self.create_user(
            account_username(email, role),
            email=email,
            password=password,
            role=role,
            **extra_fields
        )

    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault('role', Role.ADMIN)
        extra_fields.setdefault('name', username)
        return super().create_superuser(username, email=email, password=password, **extra_fields)


class User(AbstractUser):
    name = models.CharField(max_length=150, validators=[MinLengthValidator(2)])
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.STUDENT)
    address = models.CharField(max_length=255, blank=True, default='')
    # Teaching subjects, only meaningful for the Teacher role
    subjects = models.JSONField(default=list, blank=True)

    objects = UserManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['email', 'role'], name='unique_email_per_role'),
            models.CheckConstraint(condition=Q(role__in=Role.values), name='user_role_valid'),
        ]
        indexes = [
            models.Index(fields=['email'], name='user_email_idx'),
            models.Index(fields=['role'], name='user_role_idx'),
        ]

    def __str__(self):
        return f"{self.name or self.username} ({self.role})"

    @property
    def is_admin(self):
        return self.role == Role.ADMIN

    @property
    def is_teacher(self):
        return self.role == Role.TEACHER

    @property
    def is_student(self):
        return self.role == Role.STUDENT

    def clean(self):
        super().clean()
        if self.role == Role.TEACHER and not self.subjects:
            raise ValidationError({'subjects': 'A teacher must teach at least one subject.'})
        if self.role != Role.TEACHER and self.subjects:
            raise ValidationError({'subjects': 'Only teachers have subjects.'})

    def sync_username(self):
        self.username = account_username(self.email, self.role)
