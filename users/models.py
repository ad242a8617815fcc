# users/models.py

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils.translation import gettext_lazy as _


class CustomUser(AbstractUser):
    """
    Café staff account.
    Referenced by reservations as their creator and completer.
    """

    class Role(models.TextChoices):
        STAFF = 'staff', _('Staff')
        MANAGER = 'manager', _('Manager')
        ADMIN = 'admin', _('Admin')

    full_name = models.CharField(_('full name'), max_length=150, blank=True)

    role = models.CharField(
        _('role'),
        max_length=20,
        choices=Role.choices,
        default=Role.STAFF,
        db_index=True,
        help_text=_('User role for access control.')
    )

    class Meta:
        verbose_name = _('user')
        verbose_name_plural = _('users')
        ordering = ['-date_joined']

    def __str__(self):
        return self.full_name or self.username

    def has_role(self, *roles):
        """
        Check if user has any of the specified roles.
        Superusers pass every role check.
        """
        return self.is_superuser or self.role in roles
