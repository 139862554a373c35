import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from rest_framework import serializers
from rest_framework.exceptions import NotFound

from campus.dates import CalendarDateField
from campus.exceptions import Conflict
from users.models import Role
from users.serializers import UserSummarySerializer

from .models import Attendance, AttendanceRecord, AttendanceStatus

logger = logging.getLogger(__name__)

User = get_user_model()


def normalize_status(value):
    status = str(value or '').strip().capitalize()
    if status not in AttendanceStatus.values:
        raise serializers.ValidationError(f'Invalid attendance status "{value}"')
    return status


class AttendanceEntriesField(serializers.Field):
    """
    Roll call entries, either ``{"<student id>": "Present", ...}`` or
    ``[{"student": <id>, "status": "Absent"}, ...]``.

    Returns an ordered ``{student_id: status}`` mapping.
    """

    default_error_messages = {
        'invalid': 'Attendance records must map student ids to a status',
        'invalid_student': 'Invalid student ID "{value}"',
    }

    def to_internal_value(self, data):
        if isinstance(data, dict):
            pairs = list(data.items())
        elif isinstance(data, list):
            pairs = []
            for entry in data:
                if not isinstance(entry, dict) or 'student' not in entry:
                    self.fail('invalid')
                pairs.append((entry['student'], entry.get('status')))
        else:
            self.fail('invalid')

        entries = {}
        for student_id, status in pairs:
            try:
                student_id = int(student_id)
            except (TypeError, ValueError):
                self.fail('invalid_student', value=student_id)
            entries[student_id] = normalize_status(status)
        return entries

    def to_representation(self, value):
        return value


class AttendanceRecordSerializer(serializers.ModelSerializer):
    student = UserSummarySerializer(read_only=True)

    class Meta:
        model = AttendanceRecord
        fields = ['id', 'student', 'status']


class AttendanceSerializer(serializers.ModelSerializer):
    teacher = UserSummarySerializer(read_only=True)
    date = CalendarDateField(read_only=True)
    records = AttendanceRecordSerializer(many=True, read_only=True)

    class Meta:
        model = Attendance
        fields = ['id', 'date', 'subject', 'teacher', 'records', 'created_at', 'updated_at']


class StudentAttendanceSerializer(serializers.ModelSerializer):
    """One of the caller's own rows, flattened with its sheet."""
    teacher = UserSummarySerializer(read_only=True)
    date = CalendarDateField(read_only=True)

    class Meta:
        model = AttendanceRecord
        fields = ['id', 'attendance', 'date', 'subject', 'teacher', 'status']


class AttendanceCreateSerializer(serializers.Serializer):
    date = CalendarDateField()
    subject = serializers.CharField(max_length=100)
    records = AttendanceEntriesField()

    def validate_subject(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Subject is required')
        return value

    def validate(self, data):
        entries = data['records']
        if not entries:
            raise serializers.ValidationError('Attendance records cannot be empty')
        students = User.objects.filter(pk__in=entries, role=Role.STUDENT).in_bulk()
        unknown = [str(pk) for pk in entries if pk not in students]
        if unknown:
            raise serializers.ValidationError(f"Invalid student IDs: {', '.join(unknown)}")
        data['records'] = [(students[pk], status) for pk, status in entries.items()]
        return data

    def create(self, validated_data):
        teacher = self.context['request'].user
        entries = validated_data['records']
        sheet_key = {'date': validated_data['date'], 'teacher': teacher, 'subject': validated_data['subject']}

        submitted = AttendanceRecord.objects.filter(
            student__in=[student for student, _ in entries], **sheet_key
        )
        if submitted.exists():
            logger.warning(f"Duplicate attendance for {sheet_key['subject']} on {sheet_key['date']} by teacher {teacher.pk}")
            raise Conflict('Attendance already submitted')

        try:
            with transaction.atomic():
                sheet = Attendance.objects.create(**sheet_key)
                AttendanceRecord.objects.bulk_create([
                    sheet.build_record(student, status) for student, status in entries
                ])
        except IntegrityError:
            # a concurrent submission committed first
            logger.warning(f"Attendance race lost for {sheet_key['subject']} on {sheet_key['date']}")
            raise Conflict('Attendance already submitted')
        return sheet


class AttendanceUpdateSerializer(serializers.Serializer):
    subject = serializers.CharField(max_length=100, required=False)
    student = serializers.IntegerField(required=False)
    status = serializers.CharField(required=False)

    def validate_subject(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Subject is required')
        return value

    def validate_status(self, value):
        return normalize_status(value)

    def validate(self, data):
        if ('student' in data) != ('status' in data):
            raise serializers.ValidationError('Student and status are required together')
        if not data:
            raise serializers.ValidationError('Nothing to update')
        return data

    def update(self, instance, validated_data):
        subject = validated_data.get('subject')
        try:
            with transaction.atomic():
                if subject and subject != instance.subject:
                    instance.subject = subject
                    instance.save(update_fields=['subject', 'updated_at'])
                    instance.records.update(subject=subject)
                if 'student' in validated_data:
                    record = instance.records.filter(student_id=validated_data['student']).first()
                    if record is None:
                        raise NotFound('Student not found in attendance record')
                    record.status = validated_data['status']
                    record.save(update_fields=['status'])
        except IntegrityError:
            raise Conflict('Attendance already submitted')
        instance.refresh_from_db()
        return instance
