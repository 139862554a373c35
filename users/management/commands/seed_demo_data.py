from datetime import timedelta
from decimal import Decimal
from random import randint, random

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from academics.models import Course, StudentProfile, Subject, TeacherProfile
from attendance.models import Attendance, AttendanceRecord, AttendanceStatus
from results.models import Result
from users.models import Role, account_username

User = get_user_model()

SUBJECTS = ['Mathematics', 'Science', 'English', 'History', 'Geography', 'Computer Science']


class Command(BaseCommand):
    help = "Seed demo data: an admin, teachers with profiles, subjects and courses, enrolled students, attendance and results"

    def add_arguments(self, parser):
        parser.add_argument('--students', type=int, default=20, help='Number of students to create')
        parser.add_argument('--teachers', type=int, default=3, help='Number of teachers to create')
        parser.add_argument('--attendance-days', type=int, default=7, help='Number of past days to create attendance for')
        parser.add_argument('--password', type=str, default='demo1234', help='Password for every demo account')

    def account(self, email, role, name, password, **extra):
        user = User.objects.filter(username=account_username(email, role)).first()
        if user is None:
            user = User.objects.create_account(email=email, password=password, role=role, name=name, **extra)
        return user

    @transaction.atomic
    def handle(self, *args, **options):
        num_students = options['students']
        num_teachers = options['teachers']
        attendance_days = options['attendance_days']
        password = options['password']
        if num_teachers > len(SUBJECTS):
            raise CommandError(f"At most {len(SUBJECTS)} teachers can be seeded, one per subject.")

        admin = self.account('admin@demo.school', Role.ADMIN, 'Demo Admin', password)
        self.stdout.write(self.style.SUCCESS(f"Admin: {admin.email}"))

        # Teachers with a profile, one subject and one course each
        teachers = []
        for i in range(num_teachers):
            subject = SUBJECTS[i]
            user = self.account(f"teacher{i + 1}@demo.school", Role.TEACHER, f"Teacher {i + 1}", password, subjects=[subject])
            profile, _ = TeacherProfile.objects.get_or_create(user=user, defaults={
                'subject': subject,
                'qualification': 'M.Ed.',
                'experience': randint(1, 15),
            })
            Subject.objects.get_or_create(title=subject, teacher=profile)
            Course.objects.get_or_create(teacher=profile, defaults={'title': f"{subject} Foundations"})
            teachers.append(user)
        self.stdout.write(self.style.SUCCESS(f"Teachers: {len(teachers)}"))

        students = []
        for i in range(1, num_students + 1):
            user = self.account(f"student{i}@demo.school", Role.STUDENT, f"Student {i}", password)
            StudentProfile.objects.get_or_create(user=user, defaults={
                'enrollment_number': f"ENR-{1000 + i}",
                'class_name': str(8 + i % 3),
                'section': 'AB'[i % 2],
            })
            students.append(user)
        self.stdout.write(self.style.SUCCESS(f"Students: {len(students)}"))

        # One attendance sheet per teacher per day
        sheets_created = 0
        today = timezone.localdate()
        for d in range(attendance_days):
            day = today - timedelta(days=d)
            for teacher in teachers:
                subject = teacher.subjects[0]
                if Attendance.objects.filter(date=day, teacher=teacher, subject=subject).exists():
                    continue
                sheet = Attendance.objects.create(date=day, teacher=teacher, subject=subject)
                AttendanceRecord.objects.bulk_create([
                    sheet.build_record(student, AttendanceStatus.PRESENT if random() > 0.1 else AttendanceStatus.ABSENT)
                    for student in students
                ])
                sheets_created += 1
        self.stdout.write(self.style.SUCCESS(f"Attendance sheets created: {sheets_created}"))

        results_created = 0
        for teacher in teachers:
            subject = teacher.subjects[0]
            for student in students:
                if Result.objects.filter(student=student, subject=subject).exists():
                    continue
                Result.objects.create(
                    student=student, subject=subject, teacher=teacher,
                    marks=Decimal(randint(3300, 10000)) / 100
                )
                results_created += 1
        self.stdout.write(self.style.SUCCESS(f"Results created: {results_created}"))

        self.stdout.write(self.style.SUCCESS("Demo data seeding complete."))
