from decimal import Decimal

from campus.testing import CampusAPITestCase, make_user
from users.models import Role

from .models import Result


class ResultAPITests(CampusAPITestCase):

    def record(self, marks, subject='Math', teacher=None, student=None):
        return Result.objects.create(
            student=student or self.student, subject=subject, marks=marks, teacher=teacher or self.teacher
        )

    def test_teacher_submits_result(self):
        self.login(self.teacher)
        response = self.client.post('/api/results/', {
            'student': self.student.pk, 'subject': 'Math', 'marks': '87.5'
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['message'], 'Result created successfully')
        self.assertEqual(response.data['result']['marks'], 87.5)
        self.assertEqual(Result.objects.get().teacher, self.teacher)

    def test_marks_out_of_range(self):
        self.login(self.teacher)
        for marks in (-1, 100.01, 150, 1000, '12345.5'):
            response = self.client.post('/api/results/', {
                'student': self.student.pk, 'subject': 'Math', 'marks': marks
            }, format='json')
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.data['message'], 'Marks must be between 0 and 100')
        self.assertFalse(Result.objects.exists())

    def test_boundary_marks_are_accepted(self):
        self.login(self.teacher)
        for marks in (0, 100):
            response = self.client.post('/api/results/', {
                'student': self.student.pk, 'subject': 'Math', 'marks': marks
            }, format='json')
            self.assertEqual(response.status_code, 201)

    def test_fractional_marks_are_rounded(self):
        self.login(self.teacher)
        response = self.client.post('/api/results/', {
            'student': self.student.pk, 'subject': 'Math', 'marks': 85.555
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['result']['marks'], Decimal('85.56'))
        self.assertEqual(Result.objects.get().marks, Decimal('85.56'))

    def test_resubmission_adds_second_record(self):
        self.login(self.teacher)
        payload = {'student': self.student.pk, 'subject': 'Math', 'marks': 70}
        self.client.post('/api/results/', payload, format='json')
        self.client.post('/api/results/', payload, format='json')
        self.assertEqual(Result.objects.count(), 2)

    def test_result_for_non_student(self):
        self.login(self.teacher)
        response = self.client.post('/api/results/', {
            'student': self.admin.pk, 'subject': 'Math', 'marks': 50
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Invalid student ID')

    def test_student_cannot_submit(self):
        self.login(self.student)
        response = self.client.post('/api/results/', {
            'student': self.student.pk, 'subject': 'Math', 'marks': 99
        }, format='json')
        self.assertEqual(response.status_code, 403)

    def test_listing_is_scoped_by_role(self):
        other_teacher = make_user('t2@school.test', Role.TEACHER)
        other_student = make_user('s2@school.test')
        mine = self.record(80)
        theirs = self.record(60, teacher=other_teacher, student=other_student)

        self.login(self.teacher)
        self.assertEqual([row['id'] for row in self.client.get('/api/results/').data['results']], [mine.pk])
        self.login(self.student)
        self.assertEqual([row['id'] for row in self.client.get('/api/results/').data['results']], [mine.pk])
        self.login(self.admin)
        ids = {row['id'] for row in self.client.get('/api/results/').data['results']}
        self.assertEqual(ids, {mine.pk, theirs.pk})

    def test_teacher_updates_own_result(self):
        result = self.record(40)
        self.login(self.teacher)
        response = self.client.put(f'/api/results/{result.pk}/', {'marks': 45}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['result']['marks'], 45.0)

    def test_teacher_cannot_update_foreign_result(self):
        result = self.record(40, teacher=make_user('t2@school.test', Role.TEACHER))
        self.login(self.teacher)
        response = self.client.put(f'/api/results/{result.pk}/', {'marks': 99}, format='json')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['message'], 'Forbidden: You can only modify results you submitted')

    def test_admin_deletes_result(self):
        result = self.record(40)
        self.login(self.admin)
        response = self.client.delete(f'/api/results/{result.pk}/')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Result.objects.exists())

    def test_student_results_view(self):
        self.record(91)
        self.login(self.student)
        response = self.client.get('/api/results/student/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data['results']), 1)
        self.login(self.teacher)
        self.assertEqual(self.client.get('/api/results/student/').status_code, 403)

    def test_average_marks_per_subject(self):
        self.record(80)
        self.record(71)
        self.record(90, subject='Science')
        self.record(10, teacher=make_user('t2@school.test', Role.TEACHER))

        self.login(self.admin)
        rows = self.client.get('/api/results/average-marks/').data['average_marks']
        self.assertEqual(rows, [
            {'subject': 'Math', 'average_marks': 53.67, 'count': 3},
            {'subject': 'Science', 'average_marks': 90.0, 'count': 1},
        ])

        self.login(self.teacher)
        rows = self.client.get('/api/results/average-marks/').data['average_marks']
        self.assertEqual(rows[0], {'subject': 'Math', 'average_marks': 75.5, 'count': 2})

    def test_students_cannot_view_averages(self):
        self.login(self.student)
        self.assertEqual(self.client.get('/api/results/average-marks/').status_code, 403)
