from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


class FeedbackStatus(models.TextChoices):
    PENDING = 'Pending', 'Pending'
    REVIEWED = 'Reviewed', 'Reviewed'


class Feedback(models.Model):
    teacher = models.ForeignKey(User, on_delete=models.CASCADE, related_name='feedbacks')
    feedback = models.CharField(max_length=1000)
    status = models.CharField(max_length=10, choices=FeedbackStatus.choices, default=FeedbackStatus.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name_plural = 'feedback'
        indexes = [
            models.Index(fields=['status'], name='feedback_status_idx'),
        ]

    def __str__(self):
        return f"Feedback from {self.teacher} ({self.status})"
