from django.contrib import admin
from .models import Feedback


@admin.register(Feedback)
class FeedbackAdmin(admin.ModelAdmin):
    list_display = ['id', 'teacher', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['teacher__name', 'feedback']
