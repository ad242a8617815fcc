# catalog/models.py

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class Game(models.Model):
    """
    A board game in the café's library.
    Availability is a soft toggle; unavailable games stay in the library.
    """

    name = models.CharField(max_length=200)
    min_players = models.PositiveIntegerField(null=True, blank=True)
    max_players = models.PositiveIntegerField(null=True, blank=True)
    duration_minutes = models.PositiveIntegerField(null=True, blank=True)
    complexity = models.CharField(max_length=50, blank=True)
    description = models.TextField(blank=True)
    available = models.BooleanField(default=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_games",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["available", "name"], name="catalog_game_avail_name_idx"),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        super().clean()
        if self.min_players is not None and self.max_players is not None:
            if self.min_players > self.max_players:
                raise ValidationError(
                    {"max_players": "Maximum players must be at least the minimum."}
                )

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)


class MenuItem(models.Model):
    class Category(models.TextChoices):
        FOOD = "food", "Food"
        DRINK = "drink", "Drink"
        SNACK = "snack", "Snack"
        DESSERT = "dessert", "Dessert"

    name = models.CharField(max_length=200)
    category = models.CharField(max_length=10, choices=Category.choices)
    price = models.DecimalField(
        max_digits=8, decimal_places=2, validators=[MinValueValidator(0)]
    )
    available = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["category", "name"]

    def __str__(self):
        return f"{self.name} ({self.get_category_display()})"
