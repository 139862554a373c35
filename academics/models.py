from django.conf import settings
from django.core.validators import MinLengthValidator, RegexValidator
from django.db import models

# Use the project's custom user model
User = settings.AUTH_USER_MODEL

contact_number_validator = RegexValidator(
    r'^\+?[\d\s-]{10,}$',
    'Please provide a valid contact number'
)


class StudentProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='student_profile')
    enrollment_number = models.CharField(max_length=50, unique=True)
    class_name = models.CharField(max_length=50, blank=True, default='')
    section = models.CharField(max_length=20, blank=True, default='')
    address = models.CharField(max_length=255, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['enrollment_number']
        indexes = [
            models.Index(fields=['class_name', 'section'], name='student_class_section_idx'),
        ]

    def __str__(self):
        return f"{self.user.name} ({self.enrollment_number})"


class TeacherProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='teacher_profile')
    subject = models.CharField(max_length=100, blank=True, default='')
    qualification = models.CharField(max_length=200, blank=True, default='', help_text='Educational qualification (e.g., B.Sc., M.Ed.)')
    experience = models.PositiveIntegerField(default=0, help_text='Years of teaching experience')
    address = models.CharField(max_length=255, blank=True, default='')
    contact_number = models.CharField(max_length=20, blank=True, default='', validators=[contact_number_validator])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.user.name} - {self.subject or 'Teacher'}"


class Subject(models.Model):
    title = models.CharField(max_length=100, validators=[MinLengthValidator(1)])
    description = models.TextField(blank=True, default='')
    # Several subjects may share one teacher
    teacher = models.ForeignKey(TeacherProfile, on_delete=models.CASCADE, related_name='subjects')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['title']
        indexes = [
            models.Index(fields=['teacher'], name='subject_teacher_idx'),
        ]

    def __str__(self):
        return self.title


class Course(models.Model):
    title = models.CharField(max_length=200, validators=[MinLengthValidator(1)])
    description = models.TextField(blank=True, default='')
    # A teacher runs at most one course
    teacher = models.OneToOneField(TeacherProfile, on_delete=models.CASCADE, related_name='course')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['title']

    def __str__(self):
        return self.title
