# users/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    """
    Admin configuration for staff accounts.
    """
    list_display = ('username', 'full_name', 'email', 'role', 'is_active')
    list_filter = ('role', 'is_active', 'is_superuser')
    search_fields = ('username', 'full_name', 'email')
    ordering = ('username',)

    fieldsets = UserAdmin.fieldsets + (
        ('Café', {
            'fields': ('full_name', 'role')
        }),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ('Café', {
            'fields': ('full_name', 'role')
        }),
    )
