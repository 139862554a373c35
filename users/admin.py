from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ['id', 'name', 'email', 'role', 'is_active', 'last_login']
    list_filter = ['role', 'is_active', 'is_staff']
    search_fields = ['name', 'email', 'username']
    ordering = ['email']
    fieldsets = DjangoUserAdmin.fieldsets + (
        ('Campus', {'fields': ('name', 'role', 'address', 'subjects')}),
    )
    add_fieldsets = DjangoUserAdmin.add_fieldsets + (
        ('Campus', {'fields': ('name', 'email', 'role', 'address', 'subjects')}),
    )

    def get_readonly_fields(self, request, obj=None):
        # Role is fixed once the account exists
        if obj is not None:
            return ['role']
        return []
