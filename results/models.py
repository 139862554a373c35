from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinLengthValidator, MinValueValidator
from django.db import models
from django.db.models import Q

User = settings.AUTH_USER_MODEL

MIN_MARKS = Decimal('0')
MAX_MARKS = Decimal('100')


class Result(models.Model):
    """Marks a teacher recorded for one student in one subject"""
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name='results')
    subject = models.CharField(max_length=100, validators=[MinLengthValidator(2)])
    marks = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(MIN_MARKS), MaxValueValidator(MAX_MARKS)]
    )
    teacher = models.ForeignKey(User, on_delete=models.CASCADE, related_name='submitted_results')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        # resubmitting a subject adds another row; there is no unique key here
        ordering = ['-created_at', '-id']
        constraints = [
            models.CheckConstraint(
                condition=Q(marks__gte=MIN_MARKS) & Q(marks__lte=MAX_MARKS),
                name='result_marks_range',
            ),
        ]
        indexes = [
            models.Index(fields=['student', 'subject'], name='result_student_subject_idx'),
            models.Index(fields=['teacher'], name='result_teacher_idx'),
        ]

    def __str__(self):
        return f"{self.student} - {self.subject}: {self.marks}"
