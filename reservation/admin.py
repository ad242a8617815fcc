# reservation/admin.py

from django.contrib import admin
from django.db.models import Sum
from django.utils import timezone
from django.utils.html import format_html

from .models import Order, Reservation, ReservationGame
from .services.billing import format_money


class ReservationGameInline(admin.TabularInline):
    model = ReservationGame
    extra = 0
    raw_id_fields = ('game',)
    readonly_fields = ('created_at',)


class OrderInline(admin.TabularInline):
    """
    Order lines are shown with their frozen prices; they are added through the API
    so the price is always taken from the menu at the time of ordering.
    """
    model = Order
    extra = 0
    fields = ('menu_item', 'quantity', 'unit_price', 'price', 'created_at')
    readonly_fields = fields
    can_delete = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    """
    Admin configuration for Reservation model.
    """
    list_display = (
        'customer_name',
        'reservation_date',
        'reservation_time',
        'party_size',
        'status_badge',
        'bill_total',
        'created_by',
    )
    list_filter = ('status', 'reservation_date')
    search_fields = (
        'customer_name',
        'customer_phone',
        'customer_email',
        'notes',
    )
    ordering = ('reservation_date', 'reservation_time')
    date_hierarchy = 'reservation_date'
    readonly_fields = ('created_by', 'completed_by', 'created_at', 'updated_at')
    list_select_related = ('created_by',)

    inlines = [ReservationGameInline, OrderInline]

    fieldsets = (
        ('Tracking', {
            'fields': ('status',)
        }),
        ('Customer', {
            'fields': ('customer_name', 'customer_phone', 'customer_email')
        }),
        ('Reservation Details', {
            'fields': ('reservation_date', 'reservation_time', 'party_size', 'notes')
        }),
        ('Staff', {
            'fields': ('created_by', 'completed_by'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(bill=Sum('orders__price'))

    def status_badge(self, obj):
        """
        Display status as colored badge.
        """
        colors = {
            'confirmed': '#5cb85c',
            'in-progress': '#f0ad4e',
            'completed': '#5bc0de',
            'cancelled': '#d9534f',
        }
        color = colors.get(obj.status, '#777')
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            color,
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'

    @admin.display(description='Total', ordering='bill')
    def bill_total(self, obj):
        return format_money(obj.bill or 0)

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        if change and 'status' in form.changed_data and obj.status == Reservation.Status.COMPLETED:
            obj.completed_by = request.user
        super().save_model(request, obj, form, change)

    # Admin actions
    actions = ['mark_as_in_progress', 'mark_as_completed', 'mark_as_cancelled']

    @admin.action(description='Mark selected reservations as in progress')
    def mark_as_in_progress(self, request, queryset):
        """
        Bulk action to seat reservations.
        """
        updated = queryset.update(
            status=Reservation.Status.IN_PROGRESS, updated_at=timezone.now()
        )
        self.message_user(request, f'{updated} reservation(s) marked as in progress.')

    @admin.action(description='Mark selected reservations as completed')
    def mark_as_completed(self, request, queryset):
        """
        Bulk action to complete reservations, recording who completed them.
        """
        updated = queryset.update(
            status=Reservation.Status.COMPLETED,
            completed_by=request.user,
            updated_at=timezone.now(),
        )
        self.message_user(request, f'{updated} reservation(s) marked as completed.')

    @admin.action(description='Mark selected reservations as cancelled')
    def mark_as_cancelled(self, request, queryset):
        """
        Bulk action to cancel reservations.
        """
        updated = queryset.update(
            status=Reservation.Status.CANCELLED, updated_at=timezone.now()
        )
        self.message_user(request, f'{updated} reservation(s) marked as cancelled.')
