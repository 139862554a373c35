from django.contrib import admin
from .models import Result


@admin.register(Result)
class ResultAdmin(admin.ModelAdmin):
    list_display = ['id', 'student', 'subject', 'marks', 'teacher', 'created_at']
    list_filter = ['subject']
    search_fields = ['student__name', 'student__email', 'subject']
