from datetime import timedelta

from django.utils import timezone

from campus.testing import CampusAPITestCase, make_user
from users.models import Role

from .models import Leave, LeaveStatus


class LeaveAPITests(CampusAPITestCase):

    def setUp(self):
        super().setUp()
        self.tomorrow = timezone.localdate() + timedelta(days=1)

    def student_leave(self, **overrides):
        payload = {'date': self.tomorrow.isoformat(), 'reason': 'Family event', 'admin': self.admin.pk}
        payload.update(overrides)
        self.login(self.student)
        return self.client.post('/api/leaves/', payload, format='json')

    def test_student_requests_leave(self):
        response = self.student_leave()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['message'], 'Leave application submitted successfully')
        self.assertEqual(response.data['leave']['status'], 'Pending')
        self.assertEqual(response.data['leave']['admin']['id'], self.admin.pk)

    def test_leave_starts_pending_even_if_status_sent(self):
        self.student_leave(status='Approved')
        self.assertEqual(Leave.objects.get().status, LeaveStatus.PENDING)

    def test_past_date_is_rejected(self):
        yesterday = timezone.localdate() - timedelta(days=1)
        response = self.student_leave(date=yesterday.isoformat())
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Leave date cannot be in the past')

    def test_today_is_accepted(self):
        response = self.student_leave(date=timezone.localdate().isoformat())
        self.assertEqual(response.status_code, 201)

    def test_duplicate_day_is_rejected(self):
        self.student_leave()
        response = self.student_leave(reason='Another reason')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Leave already requested for this date')

    def test_reason_limits(self):
        response = self.student_leave(reason='   ')
        self.assertEqual(response.data['message'], 'Date and a non-empty reason are required')
        response = self.student_leave(reason='x' * 501)
        self.assertEqual(response.data['message'], 'Reason cannot exceed 500 characters')

    def test_student_leave_needs_admin(self):
        response = self.student_leave(admin=self.teacher.pk)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Invalid admin ID')

    def test_teacher_requests_leave(self):
        self.login(self.teacher)
        response = self.client.post('/api/leaves/teacher/', {
            'date': self.tomorrow.strftime('%m/%d/%Y'), 'reason': 'Conference'
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['leave']['requester_role'], 'Teacher')

    def test_student_cannot_use_teacher_route(self):
        self.login(self.student)
        response = self.client.post('/api/leaves/teacher/', {
            'date': self.tomorrow.isoformat(), 'reason': 'Conference'
        }, format='json')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['message'], 'Forbidden: Only Teachers can submit leave applications')

    def test_listing_is_scoped(self):
        self.student_leave()
        self.login(self.teacher)
        self.client.post('/api/leaves/teacher/', {'date': self.tomorrow.isoformat(), 'reason': 'Conference'}, format='json')
        self.assertEqual(len(self.client.get('/api/leaves/').data['leaves']), 1)
        self.login(self.admin)
        self.assertEqual(len(self.client.get('/api/leaves/').data['leaves']), 2)
        self.assertEqual(len(self.client.get('/api/leaves/', {'status': 'Approved'}).data['leaves']), 0)

    def test_admin_decides_and_may_reverse(self):
        leave_id = self.student_leave().data['leave']['id']
        self.login(self.admin)
        response = self.client.put(f'/api/leaves/{leave_id}/', {'status': 'Approved'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['leave']['status'], 'Approved')
        response = self.client.put(f'/api/leaves/{leave_id}/', {'status': 'Pending'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Leave.objects.get().status, LeaveStatus.PENDING)

    def test_requester_edits_reason_while_pending(self):
        leave_id = self.student_leave().data['leave']['id']
        response = self.client.put(f'/api/leaves/{leave_id}/', {'reason': 'Doctor visit'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Leave.objects.get().reason, 'Doctor visit')

    def test_requester_cannot_change_status(self):
        leave_id = self.student_leave().data['leave']['id']
        response = self.client.put(f'/api/leaves/{leave_id}/', {'status': 'Approved'}, format='json')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(Leave.objects.get().status, LeaveStatus.PENDING)

    def test_requester_cannot_edit_decided_leave(self):
        leave_id = self.student_leave().data['leave']['id']
        Leave.objects.filter(pk=leave_id).update(status=LeaveStatus.REJECTED)
        response = self.client.put(f'/api/leaves/{leave_id}/', {'reason': 'Please reconsider'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Only pending leave requests can be edited')

    def test_other_user_cannot_touch_leave(self):
        leave_id = self.student_leave().data['leave']['id']
        self.login(make_user('s2@school.test'))
        response = self.client.delete(f'/api/leaves/{leave_id}/')
        self.assertEqual(response.status_code, 403)
        self.assertTrue(Leave.objects.exists())

    def test_requester_withdraws_pending_leave(self):
        leave_id = self.student_leave().data['leave']['id']
        response = self.client.delete(f'/api/leaves/{leave_id}/')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Leave.objects.exists())

    def test_admins_lookup(self):
        self.login(self.student)
        response = self.client.get('/api/leaves/admins/')
        self.assertEqual([row['id'] for row in response.data['admins']], [self.admin.pk])
        make_user('second-admin@school.test', Role.ADMIN)
        self.assertEqual(len(self.client.get('/api/leaves/admins/').data['admins']), 2)
