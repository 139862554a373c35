from rest_framework.test import APITestCase

from users.models import Role, User
from users.serializers import issue_token

PASSWORD = 'secret123'


def make_user(email, role=Role.STUDENT, **extra):
    if role == Role.TEACHER:
        extra.setdefault('subjects', ['Math'])
    return User.objects.create_account(email=email, password=PASSWORD, role=role, **extra)


class CampusAPITestCase(APITestCase):
    """APITestCase with one account per role and bearer-token helpers."""

    def setUp(self):
        self.admin = make_user('admin@school.test', Role.ADMIN, name='Ada Admin')
        self.teacher = make_user('teacher@school.test', Role.TEACHER, name='Tom Teacher')
        self.student = make_user('student@school.test', Role.STUDENT, name='Sam Student')

    def login(self, user):
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(user)}")

    def logout(self):
        self.client.credentials()
