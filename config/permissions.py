# config/permissions.py

from rest_framework import permissions


class IsManagerOrAdmin(permissions.BasePermission):
    """
    Permission class that allows managers and admins.
    Used for: Deleting catalog entries.
    """
    message = 'Only managers and admins can perform this action.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.has_role('manager', 'admin')


class IsStaffOrAbove(permissions.BasePermission):
    """
    Permission class that allows staff, managers, and admins.
    Used for: Reservations, game assignments, orders and the catalog.
    """
    message = 'Only staff members can perform this action.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if not request.user.is_active:
            return False
        return request.user.has_role('staff', 'manager', 'admin')


class CatalogPermission(IsStaffOrAbove):
    """
    Staff may browse and edit the catalog; only managers and admins delete.
    Availability is the soft toggle staff use instead of deleting.
    """

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        if request.method == 'DELETE':
            return IsManagerOrAdmin().has_permission(request, view)
        return True
