import datetime

from django.test import SimpleTestCase

from campus.dates import parse_calendar_date
from campus.testing import CampusAPITestCase, make_user
from users.models import Role

from .models import Attendance, AttendanceRecord, AttendanceStatus


class CalendarDateTests(SimpleTestCase):

    def test_accepts_iso_and_us_formats(self):
        self.assertEqual(parse_calendar_date('2025-01-10'), datetime.date(2025, 1, 10))
        self.assertEqual(parse_calendar_date('1/10/2025'), datetime.date(2025, 1, 10))
        self.assertEqual(parse_calendar_date('2025-01-10T00:00:00.000Z'), datetime.date(2025, 1, 10))

    def test_rejects_garbage(self):
        self.assertIsNone(parse_calendar_date('10th of January'))
        self.assertIsNone(parse_calendar_date(''))


class AttendanceAPITests(CampusAPITestCase):

    def setUp(self):
        super().setUp()
        self.second_student = make_user('s2@school.test', name='Sara Second')
        self.payload = {
            'date': '2025-01-10',
            'subject': 'Math',
            'records': {str(self.student.pk): 'Present', str(self.second_student.pk): 'Absent'},
        }

    def submit(self, payload=None, user=None):
        self.login(user or self.teacher)
        return self.client.post('/api/attendance/', payload or self.payload, format='json')

    def test_teacher_submits_attendance(self):
        response = self.submit()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['message'], 'Attendance created successfully')
        self.assertEqual(response.data['attendance']['date'], '2025-01-10')
        self.assertEqual(len(response.data['attendance']['records']), 2)
        self.assertEqual(AttendanceRecord.objects.filter(teacher=self.teacher).count(), 2)

    def test_resubmission_is_rejected(self):
        self.assertEqual(self.submit().status_code, 201)
        response = self.submit()
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Attendance already submitted')
        self.assertEqual(Attendance.objects.count(), 1)

    def test_us_date_format_and_record_list(self):
        response = self.submit({
            'date': '01/10/2025',
            'subject': 'Science',
            'records': [{'student': self.student.pk, 'status': 'absent'}],
        })
        self.assertEqual(response.status_code, 201)
        record = AttendanceRecord.objects.get()
        self.assertEqual(record.date, datetime.date(2025, 1, 10))
        self.assertEqual(record.status, AttendanceStatus.ABSENT)

    def test_invalid_date(self):
        response = self.submit(dict(self.payload, date='tomorrow'))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Invalid date format')

    def test_empty_records(self):
        response = self.submit(dict(self.payload, records={}))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Attendance records cannot be empty')

    def test_non_student_in_records(self):
        response = self.submit(dict(self.payload, records={str(self.teacher.pk): 'Present'}))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], f'Invalid student IDs: {self.teacher.pk}')

    def test_student_cannot_submit(self):
        response = self.submit(user=self.student)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['message'], 'Forbidden: Only teachers can submit attendance')

    def test_student_sees_only_own_row(self):
        self.submit()
        self.login(self.student)
        response = self.client.get('/api/attendance/')
        self.assertEqual(response.status_code, 200)
        sheets = response.data['attendance']
        self.assertEqual(len(sheets), 1)
        self.assertEqual([row['student']['id'] for row in sheets[0]['records']], [self.student.pk])

    def test_teacher_lists_only_own_sheets(self):
        self.submit()
        other = make_user('t2@school.test', Role.TEACHER)
        self.submit(dict(self.payload, subject='Art'), user=other)
        self.login(self.teacher)
        response = self.client.get('/api/attendance/')
        self.assertEqual([sheet['subject'] for sheet in response.data['attendance']], ['Math'])

    def test_update_student_status(self):
        sheet_id = self.submit().data['attendance']['id']
        response = self.client.put(f'/api/attendance/{sheet_id}/', {
            'student': self.second_student.pk, 'status': 'Present'
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            AttendanceRecord.objects.get(student=self.second_student).status, AttendanceStatus.PRESENT
        )

    def test_update_subject_propagates_to_records(self):
        sheet_id = self.submit().data['attendance']['id']
        self.login(self.admin)
        response = self.client.put(f'/api/attendance/{sheet_id}/', {'subject': 'Physics'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['attendance']['subject'], 'Physics')
        self.assertEqual(set(AttendanceRecord.objects.values_list('subject', flat=True)), {'Physics'})

    def test_update_unknown_student(self):
        sheet_id = self.submit().data['attendance']['id']
        stranger = make_user('s3@school.test')
        response = self.client.put(f'/api/attendance/{sheet_id}/', {
            'student': stranger.pk, 'status': 'Absent'
        }, format='json')
        self.assertEqual(response.status_code, 404)

    def test_other_teacher_cannot_delete(self):
        sheet_id = self.submit().data['attendance']['id']
        self.login(make_user('t2@school.test', Role.TEACHER))
        response = self.client.delete(f'/api/attendance/{sheet_id}/')
        self.assertEqual(response.status_code, 403)
        self.assertTrue(Attendance.objects.filter(pk=sheet_id).exists())

    def test_delete_removes_whole_sheet(self):
        sheet_id = self.submit().data['attendance']['id']
        response = self.client.delete(f'/api/attendance/{sheet_id}/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['message'], 'Attendance deleted successfully')
        self.assertFalse(AttendanceRecord.objects.exists())

    def test_student_attendance_view(self):
        self.submit()
        self.login(self.student)
        response = self.client.get('/api/attendance/student/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['present'], 1)
        self.assertEqual(response.data['absent'], 0)
        self.assertEqual(response.data['attendance'][0]['subject'], 'Math')

    def test_student_view_is_student_only(self):
        self.login(self.teacher)
        self.assertEqual(self.client.get('/api/attendance/student/').status_code, 403)

    def test_summary_counts_by_date(self):
        self.submit()
        self.submit(dict(self.payload, date='2025-01-11'))
        self.login(self.teacher)
        response = self.client.get('/api/attendance/summary/', {'date': '1/10/2025'})
        self.assertEqual(response.data, {'present': 1, 'absent': 1})
        response = self.client.get('/api/attendance/summary/', {'start_date': '2025-01-01', 'end_date': '2025-01-31'})
        self.assertEqual(response.data, {'present': 2, 'absent': 2})

    def test_teacher_summary_is_scoped(self):
        self.submit(user=make_user('t2@school.test', Role.TEACHER))
        self.login(self.teacher)
        self.assertEqual(self.client.get('/api/attendance/summary/').data, {'present': 0, 'absent': 0})
        self.login(self.admin)
        self.assertEqual(self.client.get('/api/attendance/summary/admin/').data, {'present': 1, 'absent': 1})

    def test_admin_summary_is_admin_only(self):
        self.login(self.teacher)
        response = self.client.get('/api/attendance/summary/admin/')
        self.assertEqual(response.status_code, 403)

    def test_summary_rejects_bad_date(self):
        self.login(self.admin)
        response = self.client.get('/api/attendance/summary/', {'date': 'someday'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Invalid date format')
