from django.contrib import admin
from .models import Course, StudentProfile, Subject, TeacherProfile


@admin.register(StudentProfile)
class StudentProfileAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'enrollment_number', 'class_name', 'section']
    list_filter = ['class_name', 'section']
    search_fields = ['user__name', 'user__email', 'enrollment_number']


@admin.register(TeacherProfile)
class TeacherProfileAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'subject', 'qualification', 'experience']
    search_fields = ['user__name', 'user__email', 'subject']


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'teacher']
    search_fields = ['title']


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'teacher']
    search_fields = ['title']
