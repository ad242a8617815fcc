# catalog/admin.py

from django.contrib import admin
from django.utils import timezone

from .models import Game, MenuItem


@admin.register(Game)
class GameAdmin(admin.ModelAdmin):
    """
    Admin configuration for Game model.
    """
    list_display = ('name', 'min_players', 'max_players', 'duration_minutes', 'complexity', 'available')
    list_filter = ('available', 'complexity')
    search_fields = ('name', 'description')
    ordering = ('name',)
    readonly_fields = ('created_by', 'created_at', 'updated_at')

    fieldsets = (
        (None, {
            'fields': ('name', 'description', 'available')
        }),
        ('Play', {
            'fields': ('min_players', 'max_players', 'duration_minutes', 'complexity')
        }),
        ('Tracking', {
            'fields': ('created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    actions = ['mark_available', 'mark_unavailable']

    @admin.action(description='Mark selected games as available')
    def mark_available(self, request, queryset):
        updated = queryset.update(available=True, updated_at=timezone.now())
        self.message_user(request, f'{updated} game(s) marked as available.')

    @admin.action(description='Mark selected games as unavailable')
    def mark_unavailable(self, request, queryset):
        updated = queryset.update(available=False, updated_at=timezone.now())
        self.message_user(request, f'{updated} game(s) marked as unavailable.')


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    """
    Admin configuration for MenuItem model.
    """
    list_display = ('name', 'category', 'price', 'available')
    list_filter = ('category', 'available')
    search_fields = ('name',)
    ordering = ('category', 'name')
    list_editable = ('price', 'available')
