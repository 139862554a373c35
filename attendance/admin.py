from django.contrib import admin
from .models import Attendance, AttendanceRecord


class AttendanceRecordInline(admin.TabularInline):
    model = AttendanceRecord
    fields = ['student', 'status']
    extra = 0


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ['id', 'date', 'subject', 'teacher']
    list_filter = ['date', 'subject']
    search_fields = ['subject', 'teacher__name']
    inlines = [AttendanceRecordInline]


@admin.register(AttendanceRecord)
class AttendanceRecordAdmin(admin.ModelAdmin):
    list_display = ['id', 'date', 'subject', 'student', 'status']
    list_filter = ['date', 'status']
    readonly_fields = ['date', 'teacher', 'subject']
