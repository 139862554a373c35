from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


class AttendanceStatus(models.TextChoices):
    PRESENT = 'Present', 'Present'
    ABSENT = 'Absent', 'Absent'


class Attendance(models.Model):
    """One attendance sheet: a teacher's roll call for a subject on a date."""
    date = models.DateField()
    teacher = models.ForeignKey(User, on_delete=models.CASCADE, related_name='attendance_sheets')
    subject = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date', '-id']
        indexes = [
            models.Index(fields=['date'], name='attendance_date_idx'),
            models.Index(fields=['teacher', 'date'], name='attendance_teacher_date_idx'),
        ]

    def __str__(self):
        return f"{self.subject} - {self.date}"

    def build_record(self, student, status):
        """Unsaved record carrying this sheet's key (bulk_create skips save())."""
        return AttendanceRecord(
            attendance=self,
            student=student,
            status=status,
            date=self.date,
            teacher_id=self.teacher_id,
            subject=self.subject,
        )


class AttendanceRecord(models.Model):
    attendance = models.ForeignKey(Attendance, on_delete=models.CASCADE, related_name='records')
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name='attendance_records')
    status = models.CharField(max_length=10, choices=AttendanceStatus.choices)
    # Sheet key copied from the parent so the unique constraint can cover it
    date = models.DateField()
    teacher = models.ForeignKey(User, on_delete=models.CASCADE, related_name='+')
    subject = models.CharField(max_length=100)

    class Meta:
        ordering = ['attendance', 'student']
        constraints = [
            models.UniqueConstraint(
                fields=['date', 'teacher', 'subject', 'student'],
                name='unique_attendance_per_student',
            ),
        ]
        indexes = [
            models.Index(fields=['student', 'date'], name='attendance_student_date_idx'),
            models.Index(fields=['date', 'status'], name='attendance_date_status_idx'),
        ]

    def __str__(self):
        return f"{self.student} - {self.date} - {'P' if self.status == AttendanceStatus.PRESENT else 'A'}"

    def save(self, *args, **kwargs):
        self.date = self.attendance.date
        self.teacher_id = self.attendance.teacher_id
        self.subject = self.attendance.subject
        super().save(*args, **kwargs)
