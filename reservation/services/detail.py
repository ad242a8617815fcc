# reservation/services/detail.py

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured, ValidationError
from django.db import transaction
from django.db.models import QuerySet

from catalog.models import Game, MenuItem
from reservation.exceptions import InvalidArgument, NotFound, store_errors, validation_message
from reservation.models import Order, Reservation, ReservationGame
from reservation.services.billing import calculate_total, line_price, parse_quantity

logger = logging.getLogger(__name__)


class GameAssignmentPolicy:
    """
    Values of settings.CAFE_GAME_ASSIGNMENT_POLICY.
    """

    ALLOW = "allow"
    DEDUPE = "dedupe"
    REJECT = "reject"

    choices = (ALLOW, DEDUPE, REJECT)

    @classmethod
    def current(cls) -> str:
        policy = getattr(settings, "CAFE_GAME_ASSIGNMENT_POLICY", cls.ALLOW)
        if policy not in cls.choices:
            raise ImproperlyConfigured(
                f"CAFE_GAME_ASSIGNMENT_POLICY must be one of {', '.join(cls.choices)}; "
                f"got '{policy}'."
            )
        return policy


@dataclass(frozen=True)
class OrderView:
    """
    An order line joined with its menu item's current name and category.
    Prices are the ones frozen on the order.
    """

    id: int
    menu_item_id: Optional[int]
    menu_item_name: Optional[str]
    category: Optional[str]
    quantity: int
    unit_price: Decimal
    price: Decimal

    @classmethod
    def from_order(cls, order: Order) -> "OrderView":
        menu_item = order.menu_item
        return cls(
            id=order.id,
            menu_item_id=order.menu_item_id,
            menu_item_name=menu_item.name if menu_item else None,
            category=menu_item.category if menu_item else None,
            quantity=order.quantity,
            unit_price=order.unit_price,
            price=order.price,
        )


@dataclass(frozen=True)
class ReservationDetail:
    reservation: Reservation
    assigned_games: List[Game]
    orders: List[OrderView]
    total: Decimal


def _fetch(queryset: QuerySet, pk, label: str):
    """
    Single-row read that maps a missing row to NotFound and a malformed id
    to InvalidArgument.
    """
    try:
        return queryset.get(pk=pk)
    except queryset.model.DoesNotExist:
        raise NotFound(f"{label} {pk} not found.")
    except (TypeError, ValueError):
        raise InvalidArgument(f"'{pk}' is not a valid {label.lower()} id.")


class ReservationDetailService:
    """
    Service class assembling a reservation's detail view and editing the games
    and orders attached to it.

    Mutations only write. Callers rebuild the view with get_detail afterwards,
    so the detail shown is always read back from the database.
    """

    @staticmethod
    def get_reservation(reservation_id) -> Reservation:
        with store_errors("loading reservation"):
            return _fetch(
                Reservation.objects.select_related("created_by", "completed_by"),
                reservation_id,
                "Reservation",
            )

    @classmethod
    def get_detail(cls, reservation_id) -> ReservationDetail:
        """
        Reservation with its assigned games (in the order they were assigned),
        its orders and the bill total.
        """
        reservation = cls.get_reservation(reservation_id)

        with store_errors("loading assigned games"):
            links = list(
                ReservationGame.objects.filter(reservation=reservation)
                .select_related("game")
                .order_by("created_at", "id")
            )
        games = [link.game for link in links]

        if GameAssignmentPolicy.current() == GameAssignmentPolicy.DEDUPE:
            seen = set()
            unique_games = []
            for game in games:
                if game.id not in seen:
                    seen.add(game.id)
                    unique_games.append(game)
            games = unique_games

        with store_errors("loading orders"):
            orders = list(
                Order.objects.filter(reservation=reservation)
                .select_related("menu_item")
                .order_by("created_at", "id")
            )

        return ReservationDetail(
            reservation=reservation,
            assigned_games=games,
            orders=[OrderView.from_order(order) for order in orders],
            total=calculate_total(orders),
        )

    @classmethod
    def assign_game(cls, reservation_id, game_id) -> ReservationGame:
        """
        Put a game on the reservation's table.
        """
        if not game_id:
            raise InvalidArgument("No game selected.")

        reservation = cls.get_reservation(reservation_id)
        with store_errors("loading game"):
            game = _fetch(Game.objects.all(), game_id, "Game")

        if not game.available:
            raise InvalidArgument(f"Game '{game.name}' is not available.")

        policy = GameAssignmentPolicy.current()

        with store_errors("adding game"), transaction.atomic():
            if policy == GameAssignmentPolicy.REJECT:
                already_assigned = ReservationGame.objects.filter(
                    reservation=reservation, game=game
                ).exists()
                if already_assigned:
                    raise InvalidArgument(
                        f"Game '{game.name}' is already assigned to this reservation."
                    )

            link = ReservationGame.objects.create(reservation=reservation, game=game)

        logger.info(f"Game {game.id} assigned to reservation {reservation.id}")
        return link

    @classmethod
    def unassign_game(cls, reservation_id, game_id) -> int:
        """
        Remove every link between the reservation and the game.
        Returns the number of links removed; zero is not an error.
        """
        if not game_id:
            raise InvalidArgument("No game selected.")

        reservation = cls.get_reservation(reservation_id)
        with store_errors("removing game"):
            try:
                deleted, _ = ReservationGame.objects.filter(
                    reservation=reservation, game_id=game_id
                ).delete()
            except (TypeError, ValueError):
                raise InvalidArgument(f"'{game_id}' is not a valid game id.")

        if deleted:
            logger.info(f"Game {game_id} removed from reservation {reservation.id}")
        return deleted

    @classmethod
    def add_order(cls, reservation_id, menu_item_id, quantity=1) -> Order:
        """
        Add a line to the reservation's tab.
        The menu item's current price is frozen into the order.
        """
        if not menu_item_id:
            raise InvalidArgument("No menu item selected.")
        quantity = parse_quantity(quantity)

        reservation = cls.get_reservation(reservation_id)
        with store_errors("loading menu item"):
            menu_item = _fetch(MenuItem.objects.all(), menu_item_id, "Menu item")

        if not menu_item.available:
            raise InvalidArgument(f"Menu item '{menu_item.name}' is not available.")

        unit_price = menu_item.price
        price = line_price(unit_price, quantity)
        with store_errors("adding order"), transaction.atomic():
            try:
                order = Order.objects.create(
                    reservation=reservation,
                    menu_item=menu_item,
                    quantity=quantity,
                    unit_price=unit_price,
                    price=price,
                )
            except ValidationError as exc:
                raise InvalidArgument(validation_message(exc))

        logger.info(
            f"Order {order.id} added to reservation {reservation.id}: "
            f"{quantity} x {menu_item.name} = {order.price}"
        )
        return order

    @staticmethod
    def remove_order(order_id) -> Optional[int]:
        """
        Delete an order line and return the id of the reservation it was on.
        Deleting a line that is already gone is not an error and returns None.
        """
        if not order_id:
            raise InvalidArgument("No order selected.")

        with store_errors("removing order"), transaction.atomic():
            try:
                lines = Order.objects.filter(pk=order_id)
                reservation_id = (
                    lines.select_for_update()
                    .values_list("reservation_id", flat=True)
                    .first()
                )
            except (TypeError, ValueError):
                raise InvalidArgument(f"'{order_id}' is not a valid order id.")
            if reservation_id is None:
                return None
            lines.delete()

        logger.info(f"Order {order_id} removed from reservation {reservation_id}")
        return reservation_id

    @staticmethod
    def change_order_quantity(order_id, quantity) -> Order:
        """
        Change the quantity of an order line.
        The line is repriced from the unit price frozen when it was created,
        not from the menu's current price.
        """
        quantity = parse_quantity(quantity)

        with store_errors("updating order"), transaction.atomic():
            order = _fetch(Order.objects.select_for_update(), order_id, "Order")
            order.quantity = quantity
            order.price = line_price(order.unit_price, quantity)
            try:
                order.save(update_fields=["quantity", "price"])
            except ValidationError as exc:
                raise InvalidArgument(validation_message(exc))

        logger.info(f"Order {order.id} changed to quantity {quantity} = {order.price}")
        return order
