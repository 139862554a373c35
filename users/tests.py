from io import StringIO

from django.contrib.auth.models import AnonymousUser
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIRequestFactory

from academics.models import StudentProfile, TeacherProfile
from attendance.models import Attendance
from campus.exceptions import Conflict, api_exception_handler
from campus.testing import PASSWORD, CampusAPITestCase, make_user
from results.models import Result

from .models import Role, User
from .permissions import Decision, HasCapability, allow


class CapabilityTests(TestCase):

    def test_check_returns_explicit_decision(self):
        capability = allow(Role.ADMIN, Role.TEACHER)
        self.assertIs(capability.check(make_user('a@school.test', Role.ADMIN)), Decision.ALLOW)
        self.assertIs(capability.check(make_user('s@school.test', Role.STUDENT)), Decision.DENY)
        self.assertIs(capability.check(AnonymousUser()), Decision.DENY)

    def test_undeclared_action_is_denied(self):
        view = type('View', (), {'action': 'destroy', 'capabilities': {'list': allow(Role.ADMIN)}})()
        request = APIRequestFactory().delete('/')
        request.user = make_user('a@school.test', Role.ADMIN)
        self.assertFalse(HasCapability().has_permission(request, view))

    def test_denial_carries_capability_message(self):
        view = type('View', (), {'action': 'create', 'capabilities': {
            'create': allow(Role.TEACHER, message='Forbidden: teachers only')
        }})()
        request = APIRequestFactory().post('/')
        request.user = make_user('s@school.test', Role.STUDENT)
        permission = HasCapability()
        self.assertFalse(permission.has_permission(request, view))
        self.assertEqual(permission.message, 'Forbidden: teachers only')


class ExceptionHandlerTests(SimpleTestCase):

    def test_single_message_is_flattened(self):
        response = api_exception_handler(ValidationError('Invalid date format'), {'view': None})
        self.assertEqual(response.data, {'message': 'Invalid date format'})

    def test_field_errors_keep_details(self):
        response = api_exception_handler(
            ValidationError({'name': ['Too short'], 'email': ['Enter a valid email address.']}), {'view': None}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Validation failed')
        self.assertEqual(set(response.data['details']), {'name', 'email'})

    def test_conflict_is_bad_request(self):
        response = api_exception_handler(Conflict('Email already registered'), {'view': None})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {'message': 'Email already registered'})

    def test_unexpected_error_is_opaque(self):
        response = api_exception_handler(RuntimeError('database password is hunter2'), {'view': None})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {'message': 'Internal Server Error'})


class UserModelTests(TestCase):

    def test_username_is_derived_from_role_and_email(self):
        user = make_user('Mixed@School.test', Role.TEACHER)
        self.assertEqual(user.email, 'mixed@school.test')
        self.assertEqual(user.username, 'teacher:mixed@school.test')
        self.assertEqual(user.name, 'mixed')

    def test_same_email_may_hold_one_account_per_role(self):
        make_user('dual@school.test', Role.TEACHER)
        make_user('dual@school.test', Role.STUDENT)
        self.assertEqual(User.objects.filter(email='dual@school.test').count(), 2)


class AuthAPITests(CampusAPITestCase):

    def signup(self, **overrides):
        payload = {'name': 'New Student', 'email': 'new@school.test', 'password': 'secret123'}
        payload.update(overrides)
        return self.client.post('/api/auth/signup/', payload, format='json')

    def test_signup_returns_token_and_user(self):
        response = self.signup()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['message'], 'User registered successfully')
        self.assertTrue(response.data['token'])
        self.assertEqual(response.data['user']['role'], 'Student')

    def test_signup_with_registered_email(self):
        response = self.signup(email='Student@School.test')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Email already registered')

    def test_teacher_signup_needs_subjects(self):
        response = self.signup(role='Teacher')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'A teacher must teach at least one subject.')
        response = self.signup(role='Teacher', subjects=['Physics'])
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['user']['subjects'], ['Physics'])

    def test_short_password_is_rejected(self):
        response = self.signup(password='abc')
        self.assertEqual(response.status_code, 400)
        self.assertIn('password', response.data['details'])

    def test_login(self):
        response = self.client.post('/api/auth/login/', {
            'email': 'teacher@school.test', 'password': PASSWORD
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['message'], 'Login successful')
        self.assertEqual(response.data['user']['id'], self.teacher.pk)

    def test_login_with_wrong_password(self):
        response = self.client.post('/api/auth/login/', {
            'email': 'teacher@school.test', 'password': 'wrong-password'
        }, format='json')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['message'], 'Invalid email or password')

    def test_login_and_signup_ignore_stale_token(self):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer expired.or.garbage')
        response = self.client.post('/api/auth/login/', {
            'email': 'teacher@school.test', 'password': PASSWORD
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['user']['id'], self.teacher.pk)
        self.assertEqual(self.signup().status_code, 201)

    def test_wrong_password_with_stale_token_is_unauthorized(self):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer expired.or.garbage')
        response = self.client.post('/api/auth/login/', {
            'email': 'teacher@school.test', 'password': 'wrong-password'
        }, format='json')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['message'], 'Invalid email or password')

    def test_login_picks_account_by_role(self):
        second = make_user('teacher@school.test', Role.STUDENT)
        response = self.client.post('/api/auth/login/', {
            'email': 'teacher@school.test', 'password': PASSWORD, 'role': 'Student'
        }, format='json')
        self.assertEqual(response.data['user']['id'], second.pk)

    def test_token_authenticates_requests(self):
        token = self.client.post('/api/auth/login/', {
            'email': 'student@school.test', 'password': PASSWORD
        }, format='json').data['token']
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['user']['email'], 'student@school.test')
        self.assertIsNone(response.data['user']['profile_id'])

    def test_me_includes_profile(self):
        profile = StudentProfile.objects.create(user=self.student, enrollment_number='ENR-1')
        self.login(self.student)
        self.assertEqual(self.client.get('/api/auth/me/').data['user']['profile_id'], profile.pk)

    def test_invalid_token_is_unauthorized(self):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
        self.assertEqual(self.client.get('/api/auth/me/').status_code, 401)

    def test_admin_profile(self):
        self.login(self.admin)
        response = self.client.put('/api/auth/profile/', {'name': 'Ada Lovelace', 'address': 'Main St'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['message'], 'Profile updated successfully')
        self.assertEqual(response.data['user']['name'], 'Ada Lovelace')
        self.login(self.teacher)
        self.assertEqual(self.client.get('/api/auth/profile/').status_code, 403)

    def test_admin_updates_account(self):
        self.login(self.admin)
        response = self.client.put(f'/api/auth/users/{self.student.pk}/', {
            'email': 'renamed@school.test', 'role': 'Admin'
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.student.refresh_from_db()
        self.assertEqual(self.student.email, 'renamed@school.test')
        self.assertEqual(self.student.username, 'student:renamed@school.test')
        self.assertEqual(self.student.role, Role.STUDENT)

    def test_account_email_clash(self):
        make_user('taken@school.test', Role.STUDENT)
        self.login(self.admin)
        response = self.client.put(f'/api/auth/users/{self.student.pk}/', {'email': 'taken@school.test'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Email already in use')

    def test_only_admin_updates_accounts(self):
        self.login(self.teacher)
        response = self.client.put(f'/api/auth/users/{self.student.pk}/', {'name': 'Nope'}, format='json')
        self.assertEqual(response.status_code, 403)


class SeedDemoDataTests(TestCase):

    def test_seeds_and_is_idempotent(self):
        out = StringIO()
        call_command('seed_demo_data', students=4, teachers=2, attendance_days=2, stdout=out)
        self.assertIn('Demo data seeding complete.', out.getvalue())
        self.assertEqual(User.objects.filter(role=Role.STUDENT).count(), 4)
        self.assertEqual(TeacherProfile.objects.count(), 2)
        self.assertEqual(Attendance.objects.count(), 4)
        self.assertEqual(Result.objects.count(), 8)

        call_command('seed_demo_data', students=4, teachers=2, attendance_days=2, stdout=StringIO())
        self.assertEqual(Attendance.objects.count(), 4)
        self.assertEqual(Result.objects.count(), 8)
