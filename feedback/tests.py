from campus.testing import CampusAPITestCase, make_user
from users.models import Role

from .models import Feedback, FeedbackStatus


class FeedbackAPITests(CampusAPITestCase):

    def submit(self, text='The projector in room 4 is broken', user=None):
        self.login(user or self.teacher)
        return self.client.post('/api/feedback/', {'feedback': text}, format='json')

    def test_teacher_submits_feedback(self):
        response = self.submit()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['message'], 'Feedback submitted successfully')
        self.assertEqual(response.data['feedback']['status'], 'Pending')
        self.assertEqual(response.data['feedback']['teacher']['id'], self.teacher.pk)

    def test_feedback_is_born_pending(self):
        self.login(self.teacher)
        self.client.post('/api/feedback/', {'feedback': 'Hello', 'status': 'Reviewed'}, format='json')
        self.assertEqual(Feedback.objects.get().status, FeedbackStatus.PENDING)

    def test_feedback_text_rules(self):
        self.assertEqual(self.submit('  ').data['message'], 'Feedback is required and must be a non-empty string')
        self.assertEqual(self.submit('x' * 1001).data['message'], 'Feedback cannot exceed 1000 characters')
        self.assertEqual(self.submit('  trimmed  ').data['feedback']['feedback'], 'trimmed')

    def test_only_teachers_submit(self):
        response = self.submit(user=self.student)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['message'], 'Forbidden: Only Teachers can submit feedback')

    def test_visibility(self):
        self.submit()
        self.submit('Other note', user=make_user('t2@school.test', Role.TEACHER))
        self.login(self.teacher)
        self.assertEqual(len(self.client.get('/api/feedback/').data['feedbacks']), 1)
        self.login(self.admin)
        self.assertEqual(len(self.client.get('/api/feedback/').data['feedbacks']), 2)
        self.login(self.student)
        self.assertEqual(self.client.get('/api/feedback/').status_code, 403)

    def test_admin_reviews_feedback(self):
        feedback_id = self.submit().data['feedback']['id']
        self.login(self.admin)
        response = self.client.put(f'/api/feedback/{feedback_id}/', {
            'status': 'Reviewed', 'feedback': 'rewritten'
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['message'], 'Feedback status updated successfully')
        feedback = Feedback.objects.get()
        self.assertEqual(feedback.status, FeedbackStatus.REVIEWED)
        self.assertEqual(feedback.feedback, 'The projector in room 4 is broken')

    def test_status_must_be_known(self):
        feedback_id = self.submit().data['feedback']['id']
        self.login(self.admin)
        for body in ({'status': 'Done'}, {}):
            response = self.client.put(f'/api/feedback/{feedback_id}/', body, format='json')
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.data['message'], 'Status is required and must be "Pending" or "Reviewed"')

    def test_teacher_cannot_review(self):
        feedback_id = self.submit().data['feedback']['id']
        response = self.client.put(f'/api/feedback/{feedback_id}/', {'status': 'Reviewed'}, format='json')
        self.assertEqual(response.status_code, 403)

    def test_admin_deletes_feedback(self):
        feedback_id = self.submit().data['feedback']['id']
        self.login(self.admin)
        response = self.client.delete(f'/api/feedback/{feedback_id}/')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Feedback.objects.exists())
