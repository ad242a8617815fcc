# reservation/models.py

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Reservation(models.Model):
    """
    One customer visit to the café.
    Aggregation root for the games in use at the table and the orders billed to it.
    """

    class Status(models.TextChoices):
        CONFIRMED = "confirmed", "Confirmed"
        IN_PROGRESS = "in-progress", "In Progress"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    customer_name = models.CharField(max_length=200)
    customer_phone = models.CharField(max_length=30, blank=True)
    customer_email = models.EmailField(blank=True)

    reservation_date = models.DateField()
    reservation_time = models.TimeField()

    party_size = models.PositiveIntegerField(
        default=2, validators=[MinValueValidator(1)]
    )

    status = models.CharField(
        max_length=15, choices=Status.choices, default=Status.CONFIRMED
    )

    notes = models.TextField(blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_reservations",
    )
    # Set only when the reservation enters the completed status
    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="completed_reservations",
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["reservation_date", "reservation_time", "id"]
        indexes = [
            models.Index(
                fields=["reservation_date", "reservation_time"],
                name="reservation_date_time_idx",
            ),
            models.Index(
                fields=["reservation_date", "status"],
                name="reservation_date_status_idx",
            ),
        ]

    def __str__(self):
        return f"{self.customer_name} - {self.reservation_date} {self.reservation_time}"

    def save(self, *args, **kwargs):
        # Run validation
        self.full_clean()
        super().save(*args, **kwargs)

    def set_status(self, status: str, user=None):
        """
        Move the reservation to another status.
        Entering completed stamps the staff member who closed it.
        """
        self.status = status
        update_fields = ["status", "updated_at"]
        if status == self.Status.COMPLETED:
            self.completed_by = user
            update_fields.append("completed_by")
        self.save(update_fields=update_fields)


class ReservationGame(models.Model):
    """
    Assignment of a game to a reservation's table.
    Nothing stops the same game from being linked twice; see
    CAFE_GAME_ASSIGNMENT_POLICY for how duplicates are treated.
    """

    reservation = models.ForeignKey(
        Reservation, on_delete=models.CASCADE, related_name="game_links"
    )
    game = models.ForeignKey(
        "catalog.Game", on_delete=models.CASCADE, related_name="reservation_links"
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["reservation", "game"], name="reservation_game_pair_idx"
            ),
        ]

    def __str__(self):
        return f"{self.game_id} @ reservation {self.reservation_id}"


class Order(models.Model):
    """
    One order line on a reservation's tab.
    Unit and line price are frozen when the line is created, so later menu
    price edits never change what was billed.
    """

    reservation = models.ForeignKey(
        Reservation, on_delete=models.CASCADE, related_name="orders"
    )
    menu_item = models.ForeignKey(
        "catalog.MenuItem",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    quantity = models.PositiveIntegerField(
        default=1, validators=[MinValueValidator(1)]
    )
    unit_price = models.DecimalField(
        max_digits=8, decimal_places=2, validators=[MinValueValidator(0)]
    )
    # Line total: quantity x unit_price
    price = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)]
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"Order {self.id} - {self.quantity} x {self.menu_item_id} ({self.price})"

    def save(self, *args, **kwargs):
        # Quantity range and line price digits are checked before the write
        self.full_clean()
        super().save(*args, **kwargs)

