from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


class LeaveStatus(models.TextChoices):
    PENDING = 'Pending', 'Pending'
    APPROVED = 'Approved', 'Approved'
    REJECTED = 'Rejected', 'Rejected'


class Leave(models.Model):
    """A day of leave requested by a student or a teacher"""
    requester = models.ForeignKey(User, on_delete=models.CASCADE, related_name='leaves')
    # The admin a student addressed the request to; teacher leaves go to any admin
    admin = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_leaves')
    date = models.DateField()
    reason = models.CharField(max_length=500)
    status = models.CharField(max_length=10, choices=LeaveStatus.choices, default=LeaveStatus.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date', '-id']
        constraints = [
            models.UniqueConstraint(fields=['requester', 'date'], name='unique_leave_per_requester_day'),
        ]
        indexes = [
            models.Index(fields=['status'], name='leave_status_idx'),
        ]

    def __str__(self):
        return f"{self.requester} - {self.date} ({self.status})"

    @property
    def is_pending(self):
        return self.status == LeaveStatus.PENDING
