from django.urls import path

from .views import (
    AccountUpdateView,
    AdminProfileView,
    CurrentUserView,
    LoginView,
    SignupView,
)

urlpatterns = [
    path('signup/', SignupView.as_view(), name='signup'),
    path('login/', LoginView.as_view(), name='login'),
    path('me/', CurrentUserView.as_view(), name='current-user'),
    path('profile/', AdminProfileView.as_view(), name='admin-profile'),
    path('users/<int:pk>/', AccountUpdateView.as_view(), name='account-update'),
]
