from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import CourseViewSet, StudentProfileViewSet, SubjectViewSet, TeacherProfileViewSet

router = DefaultRouter()
router.register('students', StudentProfileViewSet, basename='students')
router.register('teachers', TeacherProfileViewSet, basename='teachers')
router.register('subjects', SubjectViewSet, basename='subjects')
router.register('courses', CourseViewSet, basename='courses')

urlpatterns = [
    path('', include(router.urls)),
]
