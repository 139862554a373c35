from campus.testing import CampusAPITestCase, make_user
from users.models import Role

from .models import Course, StudentProfile, Subject, TeacherProfile


class StudentProfileAPITests(CampusAPITestCase):

    def test_admin_enrolls_student(self):
        self.login(self.admin)
        response = self.client.post('/api/students/', {
            'user_id': self.student.pk, 'enrollment_number': 'ENR-001', 'class_name': '10', 'section': 'A'
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['message'], 'Student created successfully')
        self.assertEqual(response.data['student']['user']['email'], 'student@school.test')

    def test_enrolling_twice_is_rejected(self):
        StudentProfile.objects.create(user=self.student, enrollment_number='ENR-001')
        self.login(self.admin)
        response = self.client.post('/api/students/', {
            'user_id': self.student.pk, 'enrollment_number': 'ENR-002'
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'This student is already enrolled in a class')

    def test_enrollment_number_must_be_unique(self):
        StudentProfile.objects.create(user=self.student, enrollment_number='ENR-001')
        other = make_user('other@school.test')
        self.login(self.admin)
        response = self.client.post('/api/students/', {
            'user_id': other.pk, 'enrollment_number': 'ENR-001'
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Enrollment number already exists')

    def test_non_student_cannot_be_enrolled(self):
        self.login(self.admin)
        response = self.client.post('/api/students/', {
            'user_id': self.teacher.pk, 'enrollment_number': 'ENR-009'
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.data['details']['user_id'], ['Invalid user or user is not a student']
        )

    def test_teacher_gets_flat_student_list(self):
        self.login(self.teacher)
        response = self.client.get('/api/students/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['students'], [
            {'id': self.student.pk, 'name': 'Sam Student', 'email': 'student@school.test'}
        ])

    def test_student_cannot_list_students(self):
        self.login(self.student)
        response = self.client.get('/api/students/')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['message'], 'Forbidden: Students cannot view student records')

    def test_anonymous_request_is_unauthorized(self):
        response = self.client.get('/api/students/')
        self.assertEqual(response.status_code, 401)

    def test_potential_students_exclude_enrolled(self):
        StudentProfile.objects.create(user=self.student, enrollment_number='ENR-001')
        fresh = make_user('fresh@school.test', name='Fresh Face')
        self.login(self.admin)
        response = self.client.get('/api/students/potential/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual([row['id'] for row in response.data['potential_students']], [fresh.pk])


class TeacherProfileAPITests(CampusAPITestCase):

    def test_admin_creates_teacher_profile(self):
        self.login(self.admin)
        response = self.client.post('/api/teachers/', {
            'user_id': self.teacher.pk, 'subject': 'Math', 'experience': 4, 'contact_number': '+880 1711-000000'
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['teacher']['subject'], 'Math')

    def test_create_with_linked_teachers_own_email(self):
        self.login(self.admin)
        response = self.client.post('/api/teachers/', {
            'user_id': self.teacher.pk, 'email': 'teacher@school.test', 'subject': 'Math'
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['teacher']['user']['email'], 'teacher@school.test')

    def test_create_with_another_teachers_email(self):
        make_user('t2@school.test', Role.TEACHER)
        self.login(self.admin)
        response = self.client.post('/api/teachers/', {
            'user_id': self.teacher.pk, 'email': 't2@school.test'
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Email already in use')

    def test_update_changes_linked_identity(self):
        profile = TeacherProfile.objects.create(user=self.teacher, subject='Math')
        self.login(self.admin)
        response = self.client.put(f'/api/teachers/{profile.pk}/', {
            'name': 'Tina Teacher', 'email': 'Tina@School.test'
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.teacher.refresh_from_db()
        self.assertEqual(self.teacher.name, 'Tina Teacher')
        self.assertEqual(self.teacher.email, 'tina@school.test')
        self.assertEqual(self.teacher.username, 'teacher:tina@school.test')

    def test_teacher_sees_only_own_profile(self):
        own = TeacherProfile.objects.create(user=self.teacher)
        TeacherProfile.objects.create(user=make_user('t2@school.test', Role.TEACHER))
        self.login(self.teacher)
        response = self.client.get('/api/teachers/')
        self.assertEqual([row['id'] for row in response.data['teachers']], [own.pk])

    def test_student_cannot_list_teachers(self):
        self.login(self.student)
        self.assertEqual(self.client.get('/api/teachers/').status_code, 403)

    def test_available_teachers_exclude_admins_and_profiled(self):
        TeacherProfile.objects.create(user=self.teacher)
        self.login(self.admin)
        response = self.client.get('/api/teachers/available/')
        self.assertEqual([row['id'] for row in response.data['teachers']], [self.student.pk])


class SubjectAndCourseAPITests(CampusAPITestCase):

    def setUp(self):
        super().setUp()
        self.profile = TeacherProfile.objects.create(user=self.teacher, subject='Math')

    def test_teacher_creates_subject_for_self(self):
        self.login(self.teacher)
        response = self.client.post('/api/subjects/', {'title': 'Algebra'}, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(Subject.objects.get().teacher, self.profile)

    def test_admin_must_name_teacher(self):
        self.login(self.admin)
        response = self.client.post('/api/subjects/', {'title': 'Algebra'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Title and teacher are required')

    def test_admin_with_unknown_teacher(self):
        self.login(self.admin)
        response = self.client.post('/api/subjects/', {'title': 'Algebra', 'teacher_id': 9999}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['details']['teacher_id'], ['Invalid teacher ID'])

    def test_student_cannot_create_subject(self):
        self.login(self.student)
        response = self.client.post('/api/subjects/', {'title': 'Algebra'}, format='json')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['message'], 'Students cannot add subjects')

    def test_teacher_without_profile_is_forbidden(self):
        self.login(make_user('new@school.test', Role.TEACHER))
        response = self.client.get('/api/subjects/')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['message'], 'No teacher record found')

    def test_teacher_cannot_modify_foreign_subject(self):
        other = TeacherProfile.objects.create(user=make_user('t2@school.test', Role.TEACHER))
        subject = Subject.objects.create(title='Physics', teacher=other)
        self.login(self.teacher)
        response = self.client.delete(f'/api/subjects/{subject.pk}/')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data['message'], 'Forbidden: You can only modify your own subjects')
        self.assertTrue(Subject.objects.filter(pk=subject.pk).exists())

    def test_student_lists_all_subjects(self):
        Subject.objects.create(title='Physics', teacher=self.profile)
        self.login(self.student)
        response = self.client.get('/api/subjects/')
        self.assertEqual([row['title'] for row in response.data['subjects']], ['Physics'])

    def test_one_course_per_teacher(self):
        Course.objects.create(title='Grade 10 Math', teacher=self.profile)
        self.login(self.admin)
        response = self.client.post('/api/courses/', {
            'title': 'Grade 11 Math', 'teacher_id': self.profile.pk
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'This teacher is already assigned to a course')
        self.assertEqual(Course.objects.count(), 1)
