# reservation/services/reservation.py

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from catalog.models import Game
from reservation.exceptions import InvalidArgument, store_errors, validation_message
from reservation.models import Reservation
from reservation.services.detail import ReservationDetailService
from users.models import CustomUser

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "customer_name",
    "customer_phone",
    "customer_email",
    "reservation_date",
    "reservation_time",
    "party_size",
    "notes",
)


class ReservationService:
    """
    Service class for creating reservations and moving them through their statuses.
    """

    @staticmethod
    def _check_fields(fields: dict):
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise InvalidArgument(f"Unknown reservation field(s): {', '.join(sorted(unknown))}.")

        if "customer_name" in fields and not (fields["customer_name"] or "").strip():
            raise InvalidArgument("Customer name is required.")

        if "party_size" in fields:
            party_size = fields["party_size"]
            if isinstance(party_size, bool) or not isinstance(party_size, int):
                raise InvalidArgument("Party size must be a whole number.")
            if party_size < 1:
                raise InvalidArgument("Party size must be at least 1.")

    @classmethod
    def create_reservation(
        cls, created_by: Optional[CustomUser] = None, **fields
    ) -> Reservation:
        """
        Create a confirmed reservation on behalf of a staff member.
        """
        for required in ("customer_name", "reservation_date", "reservation_time"):
            if fields.get(required) in (None, ""):
                raise InvalidArgument(f"'{required}' is required.")
        cls._check_fields(fields)

        with store_errors("creating reservation"), transaction.atomic():
            try:
                reservation = Reservation.objects.create(
                    status=Reservation.Status.CONFIRMED,
                    created_by=created_by,
                    **fields,
                )
            except ValidationError as exc:
                raise InvalidArgument(validation_message(exc))

        logger.info(
            f"Reservation {reservation.id} created for {reservation.customer_name} "
            f"on {reservation.reservation_date} {reservation.reservation_time}"
        )
        return reservation

    @classmethod
    def update_reservation(cls, reservation_id, **changes) -> Reservation:
        """
        Overwrite the given fields. No version check is made; the last write wins.
        """
        cls._check_fields(changes)
        reservation = ReservationDetailService.get_reservation(reservation_id)
        if not changes:
            return reservation

        for field, value in changes.items():
            setattr(reservation, field, value)

        with store_errors("updating reservation"), transaction.atomic():
            try:
                reservation.save(update_fields=[*changes, "updated_at"])
            except ValidationError as exc:
                raise InvalidArgument(validation_message(exc))

        logger.info(f"Reservation {reservation.id} updated: {', '.join(changes)}")
        return reservation

    @staticmethod
    def change_status(
        reservation_id, status: str, user: Optional[CustomUser] = None
    ) -> Reservation:
        """
        Move a reservation to any of the four statuses.
        Completing it records who completed it.
        """
        if status not in Reservation.Status.values:
            raise InvalidArgument(f"Unknown reservation status '{status}'.")

        reservation = ReservationDetailService.get_reservation(reservation_id)
        previous = reservation.status

        with store_errors("updating status"):
            reservation.set_status(status, user=user)

        logger.info(
            f"Reservation {reservation.id} status {previous} -> {status}"
            + (f" (completed by {user})" if status == Reservation.Status.COMPLETED else "")
        )
        return reservation


@dataclass(frozen=True)
class DashboardStats:
    today_reservations: int
    active_reservations: int
    available_games: int


class DashboardService:
    """
    Counters shown at the top of the staff dashboard.
    """

    @staticmethod
    def get_stats(today: Optional[date] = None) -> DashboardStats:
        today = today or timezone.localdate()

        with store_errors("loading dashboard"):
            todays = Reservation.objects.filter(reservation_date=today)
            return DashboardStats(
                today_reservations=todays.count(),
                active_reservations=todays.filter(
                    status=Reservation.Status.CONFIRMED
                ).count(),
                available_games=Game.objects.filter(available=True).count(),
            )
