from django.contrib import admin
from .models import Leave


@admin.register(Leave)
class LeaveAdmin(admin.ModelAdmin):
    list_display = ['id', 'requester', 'date', 'status', 'admin', 'created_at']
    list_filter = ['status', 'date']
    search_fields = ['requester__name', 'requester__email', 'reason']
