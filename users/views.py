import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.models import update_last_login
from django.db import IntegrityError
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.authentication import JWTAuthentication

from campus.exceptions import Conflict

from .models import Role
from .permissions import allow
from .serializers import (
    AccountUpdateSerializer,
    LoginSerializer,
    SignupSerializer,
    UserSerializer,
    issue_token,
)

logger = logging.getLogger(__name__)

User = get_user_model()

ANY_ROLE = allow(Role.ADMIN, Role.TEACHER, Role.STUDENT)
ADMIN_ONLY = allow(Role.ADMIN, message='Forbidden: Only Admin can manage accounts')


class SignupView(APIView):
    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = SignupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data['email']
        role = serializer.validated_data['role']

        if User.objects.filter(email=email, role=role).exists():
            logger.warning(f"Signup rejected, {email} already registered as {role}")
            raise Conflict('Email already registered')
        try:
            user = serializer.save()
        except IntegrityError:
            raise Conflict('Email already registered')

        logger.info(f"Registered {role} account {user.pk} for {email}")
        return Response({
            "message": "User registered successfully",
            "token": issue_token(user),
            "user": UserSerializer(user).data,
        }, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    # a stale bearer token must not block logging in again
    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def get_authenticate_header(self, request):
        # keeps bad credentials a 401 without an authenticator
        return JWTAuthentication().authenticate_header(request)

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data['email']
        password = serializer.validated_data['password']
        role = serializer.validated_data.get('role')

        # The same email may hold one account per role
        matched = None
        for user in User.objects.filter(email=email, is_active=True).order_by('id'):
            if user.check_password(password) and (not role or user.role == role):
                matched = user
                break

        if matched is None:
            logger.info(f"Failed login for {email}")
            raise AuthenticationFailed('Invalid email or password')

        update_last_login(None, matched)
        return Response({
            "message": "Login successful",
            "token": issue_token(matched),
            "user": UserSerializer(matched).data,
        })


class CurrentUserView(APIView):
    capabilities = {'get': ANY_ROLE}

    def get(self, request):
        user = request.user
        data = UserSerializer(user).data
        profile = getattr(user, 'student_profile', None) or getattr(user, 'teacher_profile', None)
        data['profile_id'] = profile.pk if profile else None
        return Response({"user": data})


class AdminProfileView(APIView):
    capabilities = {
        'get': allow(Role.ADMIN, message='Forbidden: Only Admin has an admin profile'),
        'put': allow(Role.ADMIN, message='Forbidden: Only Admin has an admin profile'),
        'patch': allow(Role.ADMIN, message='Forbidden: Only Admin has an admin profile'),
    }

    def get(self, request):
        return Response({"user": UserSerializer(request.user).data})

    def put(self, request):
        serializer = AccountUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response({
            "message": "Profile updated successfully",
            "user": UserSerializer(user).data,
            "token": issue_token(user),
        })

    patch = put


class AccountUpdateView(APIView):
    capabilities = {'put': ADMIN_ONLY, 'patch': ADMIN_ONLY, 'get': ADMIN_ONLY}

    def get(self, request, pk):
        user = get_object_or_404(User, pk=pk)
        return Response({"user": UserSerializer(user).data})

    def put(self, request, pk):
        user = get_object_or_404(User, pk=pk)
        serializer = AccountUpdateSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(f"Admin {request.user.pk} updated account {user.pk}")
        return Response({
            "message": "User updated successfully",
            "user": UserSerializer(user).data,
        })

    patch = put
