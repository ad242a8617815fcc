from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest import mock
from zoneinfo import ZoneInfo

from django.contrib import admin
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.test import RequestFactory, SimpleTestCase, TestCase, override_settings
from django.utils import timezone

from catalog.models import Game, MenuItem
from reservation.admin import ReservationAdmin
from reservation.exceptions import InvalidArgument, NotFound, StoreFailure
from reservation.models import Order, Reservation, ReservationGame
from reservation.services.billing import (
    calculate_total,
    format_money,
    line_price,
    parse_quantity,
    quantize_money,
)
from reservation.services.detail import ReservationDetailService
from reservation.services.filtering import (
    DateRange,
    ReservationFilterSpec,
    ReservationQueryService,
    compile_reservation_filter,
    to_calendar_date,
)
from reservation.services.reservation import DashboardService, ReservationService
from users.models import CustomUser


def make_reservation(**overrides):
    data = {
        "customer_name": "Test Customer",
        "reservation_date": date(2024, 6, 1),
        "reservation_time": time(18, 0),
        "party_size": 2,
    }
    data.update(overrides)
    return Reservation.objects.create(**data)


class ReservationModelTest(TestCase):
    """Unit tests for Reservation model"""

    def setUp(self):
        self.user = CustomUser.objects.create_user(username="staff", password="pass12345")

    def test_reservation_defaults(self):
        """Test a new reservation is confirmed for two by default"""
        reservation = Reservation.objects.create(
            customer_name="Alice",
            reservation_date=date(2024, 6, 1),
            reservation_time=time(18, 0),
        )

        self.assertEqual(reservation.status, Reservation.Status.CONFIRMED)
        self.assertEqual(reservation.party_size, 2)
        self.assertIsNone(reservation.completed_by)

    def test_party_size_must_be_positive(self):
        """Test party size of zero is rejected on save"""
        with self.assertRaises(ValidationError):
            make_reservation(party_size=0)

    def test_set_status_completed_stamps_completer(self):
        """Test entering completed records who completed it"""
        reservation = make_reservation()

        reservation.set_status(Reservation.Status.COMPLETED, user=self.user)
        reservation.refresh_from_db()

        self.assertEqual(reservation.status, Reservation.Status.COMPLETED)
        self.assertEqual(reservation.completed_by, self.user)

    def test_set_status_other_does_not_stamp_completer(self):
        reservation = make_reservation()

        reservation.set_status(Reservation.Status.IN_PROGRESS, user=self.user)
        reservation.refresh_from_db()

        self.assertEqual(reservation.status, Reservation.Status.IN_PROGRESS)
        self.assertIsNone(reservation.completed_by)


class OrderTotalTest(SimpleTestCase):
    """Unit tests for the bill calculation"""

    def test_total_of_two_orders(self):
        orders = [SimpleNamespace(price=Decimal("12.50")), SimpleNamespace(price=Decimal("7.25"))]

        self.assertEqual(calculate_total(orders), Decimal("19.75"))
        self.assertEqual(format_money(calculate_total(orders)), "19.75")

    def test_total_of_no_orders(self):
        total = calculate_total([])

        self.assertEqual(total, Decimal("0.00"))
        self.assertEqual(format_money(total), "0.00")

    def test_rounding_is_half_up(self):
        """Test rounding, not truncation, to two places"""
        self.assertEqual(quantize_money(Decimal("0.125")), Decimal("0.13"))
        self.assertEqual(quantize_money(Decimal("2.994")), Decimal("2.99"))
        self.assertEqual(format_money(Decimal("5")), "5.00")

    def test_line_price(self):
        self.assertEqual(line_price(Decimal("3.35"), 3), Decimal("10.05"))

    def test_line_price_beyond_decimal_precision(self):
        with self.assertRaises(InvalidArgument):
            line_price(Decimal("3.50"), 10 ** 30)

    def test_parse_quantity(self):
        self.assertEqual(parse_quantity("3"), 3)
        self.assertEqual(parse_quantity(" 2 "), 2)
        self.assertEqual(parse_quantity(4), 4)

    def test_parse_quantity_rejects_bad_input(self):
        for value in (None, "", "0", "-1", "abc", "1.5", True, "Infinity"):
            with self.subTest(value=value):
                with self.assertRaises(InvalidArgument):
                    parse_quantity(value)


class ReservationFilterSpecTest(SimpleTestCase):
    """Unit tests for filter spec parsing and compilation without a database"""

    def test_empty_spec_compiles_to_unfiltered_query(self):
        query = compile_reservation_filter(ReservationFilterSpec())

        self.assertTrue(query.is_unfiltered)
        self.assertEqual(query.ordering, ("reservation_date", "reservation_time", "id"))

    def test_missing_spec_compiles_to_unfiltered_query(self):
        self.assertTrue(compile_reservation_filter(None).is_unfiltered)

    def test_whitespace_search_is_absent(self):
        spec = ReservationFilterSpec(search_text="   ")

        self.assertIsNone(spec.search_term)
        self.assertTrue(compile_reservation_filter(spec).is_unfiltered)

    def test_search_term_is_trimmed(self):
        self.assertEqual(ReservationFilterSpec(search_text="  ali ").search_term, "ali")

    def test_time_bounds_default_to_whole_day(self):
        self.assertIsNone(ReservationFilterSpec().time_bounds())
        self.assertEqual(
            ReservationFilterSpec(time_from=time(12, 0)).time_bounds(),
            (time(12, 0), time(23, 59, 59)),
        )
        self.assertEqual(
            ReservationFilterSpec(time_until=time(10, 0)).time_bounds(),
            (time(0, 0), time(10, 0)),
        )

    def test_status_must_be_known(self):
        with self.assertRaises(InvalidArgument):
            ReservationFilterSpec(status="seated")

    def test_max_party_size_must_be_integer(self):
        with self.assertRaises(InvalidArgument):
            ReservationFilterSpec(max_party_size="4")

    def test_date_range_needs_both_bounds(self):
        with self.assertRaises(InvalidArgument):
            ReservationFilterSpec.from_params(date_from=date(2024, 6, 1))
        with self.assertRaises(InvalidArgument):
            ReservationFilterSpec.from_params(date_to=date(2024, 6, 1))
        with self.assertRaises(InvalidArgument):
            DateRange(date(2024, 6, 1), None)

    def test_from_params_builds_spec(self):
        spec = ReservationFilterSpec.from_params(
            search="bob",
            date_from=date(2024, 6, 1),
            date_to=date(2024, 6, 3),
            max_party_size=4,
            status="",
        )

        self.assertEqual(spec.date_range, DateRange(date(2024, 6, 1), date(2024, 6, 3)))
        self.assertEqual(spec.max_party_size, 4)
        self.assertIsNone(spec.status)

    def test_aware_datetime_bound_uses_local_calendar_date(self):
        """Test a UTC instant just after midnight maps to the previous local day"""
        instant = datetime(2024, 6, 4, 2, 0, tzinfo=dt_timezone.utc)

        with timezone.override(ZoneInfo("America/New_York")):
            self.assertEqual(to_calendar_date(instant), date(2024, 6, 3))

        with timezone.override(ZoneInfo("UTC")):
            self.assertEqual(to_calendar_date(instant), date(2024, 6, 4))

    def test_naive_datetime_bound_keeps_its_date(self):
        self.assertEqual(to_calendar_date(datetime(2024, 6, 4, 23, 30)), date(2024, 6, 4))


class ReservationQueryServiceTest(TestCase):
    """Filtering the reservation list against the database"""

    def setUp(self):
        self.alice = make_reservation(
            customer_name="Alice Smith",
            customer_phone="555-0101",
            customer_email="alice@example.com",
            reservation_date=date(2024, 6, 1),
            reservation_time=time(18, 0),
            party_size=4,
        )
        self.bob = make_reservation(
            customer_name="Bob Jones",
            reservation_date=date(2024, 6, 2),
            reservation_time=time(12, 30),
            party_size=5,
            status=Reservation.Status.IN_PROGRESS,
            notes="Birthday party, wants Catan",
        )
        self.carol = make_reservation(
            customer_name="Carol White",
            reservation_date=date(2024, 6, 2),
            reservation_time=time(10, 0),
            party_size=2,
            status=Reservation.Status.COMPLETED,
        )
        self.dave = make_reservation(
            customer_name="Dave Brown",
            customer_email="dave@games.test",
            reservation_date=date(2024, 6, 4),
            reservation_time=time(20, 0),
            party_size=6,
            status=Reservation.Status.CANCELLED,
        )
        self.eve = make_reservation(
            customer_name="Eve",
            reservation_date=date(2024, 6, 1),
            reservation_time=time(9, 15),
            party_size=3,
        )
        self.ordered = [self.eve, self.alice, self.carol, self.bob, self.dave]

    def list(self, **fields):
        return ReservationQueryService.list_reservations(ReservationFilterSpec(**fields))

    def test_unfiltered_list_is_ordered_by_date_and_time(self):
        self.assertEqual(ReservationQueryService.list_reservations(), self.ordered)
        self.assertEqual(self.list(), self.ordered)

    def test_status_filter(self):
        """Test filtering by a reservation's status includes it, other statuses exclude it"""
        for reservation in self.ordered:
            with self.subTest(status=reservation.status):
                self.assertIn(reservation, self.list(status=reservation.status))

        self.assertNotIn(self.bob, self.list(status=Reservation.Status.CONFIRMED))
        self.assertEqual(self.list(status=Reservation.Status.CONFIRMED), [self.eve, self.alice])

    def test_search_matches_name_substring_any_case(self):
        self.assertEqual(self.list(search_text="LICE"), [self.alice])
        self.assertEqual(self.list(search_text="smi"), [self.alice])

    def test_search_matches_phone_email_and_notes(self):
        self.assertEqual(self.list(search_text="0101"), [self.alice])
        self.assertEqual(self.list(search_text="games.test"), [self.dave])
        self.assertEqual(self.list(search_text="catan"), [self.bob])

    def test_whitespace_search_returns_everything(self):
        self.assertEqual(self.list(search_text="  \t "), self.ordered)

    def test_date_range_is_inclusive(self):
        result = self.list(date_range=DateRange(date(2024, 6, 1), date(2024, 6, 3)))

        self.assertEqual(result, [self.eve, self.alice, self.carol, self.bob])
        self.assertNotIn(self.dave, result)

    def test_single_day_range(self):
        result = self.list(date_range=DateRange(date(2024, 6, 2), date(2024, 6, 2)))

        self.assertEqual(result, [self.carol, self.bob])

    def test_inverted_date_range_is_empty(self):
        self.assertEqual(
            self.list(date_range=DateRange(date(2024, 6, 3), date(2024, 6, 1))), []
        )

    def test_time_range(self):
        self.assertEqual(self.list(time_from=time(12, 0)), [self.alice, self.bob, self.dave])
        self.assertEqual(self.list(time_until=time(10, 0)), [self.eve, self.carol])
        self.assertEqual(
            self.list(time_from=time(10, 0), time_until=time(12, 30)),
            [self.carol, self.bob],
        )

    def test_max_party_size(self):
        result = self.list(max_party_size=4)

        self.assertIn(self.alice, result)
        self.assertNotIn(self.bob, result)
        self.assertEqual(result, [self.eve, self.alice, self.carol])

    def test_criteria_are_combined(self):
        self.assertEqual(
            self.list(status=Reservation.Status.CONFIRMED, max_party_size=3), [self.eve]
        )
        self.assertEqual(
            self.list(
                search_text="o",
                date_range=DateRange(date(2024, 6, 2), date(2024, 6, 4)),
                time_from=time(11, 0),
            ),
            [self.bob, self.dave],
        )

    def test_clearing_filters_restores_full_list(self):
        filtered = self.list(
            search_text="a", status=Reservation.Status.CONFIRMED, max_party_size=4
        )
        self.assertNotEqual(filtered, self.ordered)

        self.assertEqual(self.list(), self.ordered)

    def test_store_failure_is_surfaced(self):
        with mock.patch.object(
            Reservation.objects, "all", side_effect=DatabaseError("connection lost")
        ):
            with self.assertRaises(StoreFailure) as ctx:
                ReservationQueryService.list_reservations()

        self.assertIn("connection lost", str(ctx.exception.detail))


class ReservationDetailServiceTest(TestCase):
    """Unit tests for ReservationDetailService"""

    def setUp(self):
        self.reservation = make_reservation(customer_name="Alice")
        self.catan = Game.objects.create(name="Catan", min_players=3, max_players=4)
        self.azul = Game.objects.create(name="Azul")
        self.nachos = MenuItem.objects.create(
            name="Nachos", category=MenuItem.Category.SNACK, price=Decimal("12.50")
        )
        self.lemonade = MenuItem.objects.create(
            name="Lemonade", category=MenuItem.Category.DRINK, price=Decimal("7.25")
        )

    def test_detail_for_missing_reservation(self):
        with self.assertRaises(NotFound):
            ReservationDetailService.get_detail(999999)

    def test_detail_for_malformed_id(self):
        with self.assertRaises(InvalidArgument):
            ReservationDetailService.get_detail("abc")

    def test_empty_detail(self):
        detail = ReservationDetailService.get_detail(self.reservation.id)

        self.assertEqual(detail.reservation, self.reservation)
        self.assertEqual(detail.assigned_games, [])
        self.assertEqual(detail.orders, [])
        self.assertEqual(detail.total, Decimal("0.00"))

    def test_total_of_two_orders(self):
        ReservationDetailService.add_order(self.reservation.id, self.nachos.id, 1)
        ReservationDetailService.add_order(self.reservation.id, self.lemonade.id, 1)

        detail = ReservationDetailService.get_detail(self.reservation.id)

        self.assertEqual(detail.total, Decimal("19.75"))
        self.assertEqual(
            [(o.menu_item_name, o.category, o.price) for o in detail.orders],
            [("Nachos", "snack", Decimal("12.50")), ("Lemonade", "drink", Decimal("7.25"))],
        )

    def test_add_order_freezes_price(self):
        """Test a later menu price change leaves existing orders and the total alone"""
        order = ReservationDetailService.add_order(self.reservation.id, self.lemonade.id, "2")
        self.assertEqual(order.unit_price, Decimal("7.25"))
        self.assertEqual(order.price, Decimal("14.50"))

        self.lemonade.price = Decimal("9.00")
        self.lemonade.save()

        order.refresh_from_db()
        detail = ReservationDetailService.get_detail(self.reservation.id)
        self.assertEqual(order.price, Decimal("14.50"))
        self.assertEqual(detail.total, Decimal("14.50"))

    def test_change_quantity_uses_frozen_unit_price(self):
        order = ReservationDetailService.add_order(self.reservation.id, self.lemonade.id, 1)
        self.lemonade.price = Decimal("9.00")
        self.lemonade.save()

        ReservationDetailService.change_order_quantity(order.id, 3)

        detail = ReservationDetailService.get_detail(self.reservation.id)
        self.assertEqual(detail.orders[0].quantity, 3)
        self.assertEqual(detail.orders[0].price, Decimal("21.75"))
        self.assertEqual(detail.total, Decimal("21.75"))

    def test_change_quantity_of_missing_order(self):
        with self.assertRaises(NotFound):
            ReservationDetailService.change_order_quantity(999999, 2)

    def test_add_order_validation(self):
        """Test validation failures before anything is written"""
        cases = [
            (None, 1),
            ("", 1),
            (self.nachos.id, 0),
            (self.nachos.id, -2),
            (self.nachos.id, "two"),
        ]
        for menu_item_id, quantity in cases:
            with self.subTest(menu_item_id=menu_item_id, quantity=quantity):
                with self.assertRaises(InvalidArgument):
                    ReservationDetailService.add_order(self.reservation.id, menu_item_id, quantity)

        self.assertFalse(Order.objects.exists())

    def test_add_order_unknown_references(self):
        with self.assertRaises(NotFound):
            ReservationDetailService.add_order(999999, self.nachos.id, 1)
        with self.assertRaises(NotFound):
            ReservationDetailService.add_order(self.reservation.id, 999999, 1)

    def test_add_unavailable_menu_item(self):
        self.nachos.available = False
        self.nachos.save()

        with self.assertRaises(InvalidArgument):
            ReservationDetailService.add_order(self.reservation.id, self.nachos.id, 1)

    def test_remove_order(self):
        order = ReservationDetailService.add_order(self.reservation.id, self.nachos.id, 1)

        self.assertEqual(ReservationDetailService.remove_order(order.id), self.reservation.id)
        self.assertIsNone(ReservationDetailService.remove_order(order.id))
        self.assertEqual(ReservationDetailService.get_detail(self.reservation.id).total, Decimal("0.00"))

    def test_add_order_quantity_too_large(self):
        """Test quantities past the column limits are rejected, not written"""
        for quantity in ("1000000000", "100000000000000000000", 10 ** 30):
            with self.subTest(quantity=quantity):
                with self.assertRaises(InvalidArgument):
                    ReservationDetailService.add_order(
                        self.reservation.id, self.lemonade.id, quantity
                    )

        self.assertFalse(Order.objects.exists())

    def test_change_quantity_too_large(self):
        order = ReservationDetailService.add_order(self.reservation.id, self.lemonade.id, 1)

        for quantity in ("1000000000", "100000000000000000000"):
            with self.subTest(quantity=quantity):
                with self.assertRaises(InvalidArgument):
                    ReservationDetailService.change_order_quantity(order.id, quantity)

        order.refresh_from_db()
        self.assertEqual(order.quantity, 1)
        self.assertEqual(order.price, Decimal("7.25"))

    def test_deleted_menu_item_keeps_order(self):
        ReservationDetailService.add_order(self.reservation.id, self.nachos.id, 2)
        self.nachos.delete()

        detail = ReservationDetailService.get_detail(self.reservation.id)

        self.assertIsNone(detail.orders[0].menu_item_name)
        self.assertEqual(detail.total, Decimal("25.00"))

    def test_assigned_games_keep_assignment_order(self):
        ReservationDetailService.assign_game(self.reservation.id, self.catan.id)
        ReservationDetailService.assign_game(self.reservation.id, self.azul.id)

        detail = ReservationDetailService.get_detail(self.reservation.id)

        self.assertEqual([game.name for game in detail.assigned_games], ["Catan", "Azul"])

    def test_assign_game_validation(self):
        with self.assertRaises(InvalidArgument):
            ReservationDetailService.assign_game(self.reservation.id, None)
        with self.assertRaises(NotFound):
            ReservationDetailService.assign_game(self.reservation.id, 999999)
        with self.assertRaises(NotFound):
            ReservationDetailService.assign_game(999999, self.catan.id)

        self.azul.available = False
        self.azul.save()
        with self.assertRaises(InvalidArgument):
            ReservationDetailService.assign_game(self.reservation.id, self.azul.id)

    def test_unassign_game_not_assigned_is_noop(self):
        ReservationDetailService.assign_game(self.reservation.id, self.catan.id)

        removed = ReservationDetailService.unassign_game(self.reservation.id, self.azul.id)

        detail = ReservationDetailService.get_detail(self.reservation.id)
        self.assertEqual(removed, 0)
        self.assertEqual(detail.assigned_games, [self.catan])

    def test_unassign_game_removes_every_link(self):
        ReservationDetailService.assign_game(self.reservation.id, self.catan.id)
        ReservationDetailService.assign_game(self.reservation.id, self.catan.id)

        removed = ReservationDetailService.unassign_game(self.reservation.id, self.catan.id)

        self.assertEqual(removed, 2)
        self.assertEqual(ReservationDetailService.get_detail(self.reservation.id).assigned_games, [])

    @override_settings(CAFE_GAME_ASSIGNMENT_POLICY="allow")
    def test_duplicate_assignment_allowed(self):
        ReservationDetailService.assign_game(self.reservation.id, self.catan.id)
        ReservationDetailService.assign_game(self.reservation.id, self.catan.id)

        detail = ReservationDetailService.get_detail(self.reservation.id)

        self.assertEqual(detail.assigned_games, [self.catan, self.catan])

    @override_settings(CAFE_GAME_ASSIGNMENT_POLICY="dedupe")
    def test_duplicate_assignment_deduplicated_on_read(self):
        ReservationDetailService.assign_game(self.reservation.id, self.catan.id)
        ReservationDetailService.assign_game(self.reservation.id, self.azul.id)
        ReservationDetailService.assign_game(self.reservation.id, self.catan.id)

        detail = ReservationDetailService.get_detail(self.reservation.id)

        self.assertEqual(ReservationGame.objects.filter(reservation=self.reservation).count(), 3)
        self.assertEqual(detail.assigned_games, [self.catan, self.azul])

    @override_settings(CAFE_GAME_ASSIGNMENT_POLICY="reject")
    def test_duplicate_assignment_rejected(self):
        ReservationDetailService.assign_game(self.reservation.id, self.catan.id)

        with self.assertRaises(InvalidArgument):
            ReservationDetailService.assign_game(self.reservation.id, self.catan.id)

        self.assertEqual(ReservationGame.objects.filter(reservation=self.reservation).count(), 1)

    def test_store_failure_aborts_add_order(self):
        with mock.patch.object(
            Order.objects, "create", side_effect=DatabaseError("disk full")
        ):
            with self.assertRaises(StoreFailure) as ctx:
                ReservationDetailService.add_order(self.reservation.id, self.nachos.id, 1)

        self.assertIn("disk full", str(ctx.exception.detail))
        self.assertFalse(Order.objects.exists())


class ReservationServiceTest(TestCase):
    """Unit tests for ReservationService"""

    def setUp(self):
        self.user = CustomUser.objects.create_user(username="staff", password="pass12345")

    def test_create_reservation(self):
        reservation = ReservationService.create_reservation(
            created_by=self.user,
            customer_name="Alice",
            customer_email="alice@example.com",
            reservation_date=date(2024, 6, 1),
            reservation_time=time(18, 0),
            party_size=4,
        )

        self.assertIsNotNone(reservation.id)
        self.assertEqual(reservation.status, Reservation.Status.CONFIRMED)
        self.assertEqual(reservation.created_by, self.user)

    def test_create_reservation_validation(self):
        base = {
            "customer_name": "Alice",
            "reservation_date": date(2024, 6, 1),
            "reservation_time": time(18, 0),
        }
        cases = [
            {"customer_name": "  "},
            {"reservation_date": None},
            {"party_size": 0},
            {"party_size": "4"},
            {"table": 3},
        ]
        for override in cases:
            with self.subTest(override=override):
                with self.assertRaises(InvalidArgument):
                    ReservationService.create_reservation(**{**base, **override})

        self.assertFalse(Reservation.objects.exists())

    def test_create_reservation_with_invalid_email(self):
        with self.assertRaises(InvalidArgument):
            ReservationService.create_reservation(
                customer_name="Alice",
                customer_email="not-an-email",
                reservation_date=date(2024, 6, 1),
                reservation_time=time(18, 0),
            )

    def test_update_reservation(self):
        reservation = make_reservation()

        ReservationService.update_reservation(reservation.id, party_size=6, notes="Window seat")
        reservation.refresh_from_db()

        self.assertEqual(reservation.party_size, 6)
        self.assertEqual(reservation.notes, "Window seat")

    def test_change_status_to_completed(self):
        reservation = make_reservation()

        ReservationService.change_status(reservation.id, "completed", user=self.user)
        reservation.refresh_from_db()

        self.assertEqual(reservation.status, Reservation.Status.COMPLETED)
        self.assertEqual(reservation.completed_by, self.user)

    def test_change_status_validation(self):
        reservation = make_reservation()

        with self.assertRaises(InvalidArgument):
            ReservationService.change_status(reservation.id, "seated")
        with self.assertRaises(NotFound):
            ReservationService.change_status(999999, "completed")


class DashboardServiceTest(TestCase):
    def test_stats(self):
        today = date(2024, 6, 1)
        make_reservation(reservation_date=today)
        make_reservation(reservation_date=today, status=Reservation.Status.IN_PROGRESS)
        make_reservation(reservation_date=date(2024, 6, 2))
        Game.objects.create(name="Catan")
        Game.objects.create(name="Azul", available=False)

        stats = DashboardService.get_stats(today=today)

        self.assertEqual(stats.today_reservations, 2)
        self.assertEqual(stats.active_reservations, 1)
        self.assertEqual(stats.available_games, 1)


class ReservationAdminTest(TestCase):
    """Unit tests for the reservation admin changelist helpers"""

    def setUp(self):
        self.model_admin = ReservationAdmin(Reservation, admin.site)
        self.manager = CustomUser.objects.create_superuser(
            username="boss", password="pass12345", role=CustomUser.Role.MANAGER
        )
        self.request = RequestFactory().get("/admin/reservation/reservation/")
        self.request.user = self.manager
        self.reservation = make_reservation(customer_name="Alice")
        self.other = make_reservation(customer_name="Bob")

    def test_bill_total_is_annotated(self):
        """Test the changelist totals come from one query"""
        tea = MenuItem.objects.create(
            name="Tea", category=MenuItem.Category.DRINK, price=Decimal("3.50")
        )
        ReservationDetailService.add_order(self.reservation.id, tea.id, 2)
        ReservationDetailService.add_order(self.reservation.id, tea.id, 1)

        with self.assertNumQueries(1):
            totals = {
                row.customer_name: self.model_admin.bill_total(row)
                for row in self.model_admin.get_queryset(self.request)
            }

        self.assertEqual(totals, {"Alice": "10.50", "Bob": "0.00"})

    def test_bulk_actions_refresh_updated_at(self):
        stale = timezone.now() - timedelta(days=1)
        actions = (
            (self.model_admin.mark_as_in_progress, Reservation.Status.IN_PROGRESS),
            (self.model_admin.mark_as_completed, Reservation.Status.COMPLETED),
            (self.model_admin.mark_as_cancelled, Reservation.Status.CANCELLED),
        )
        for action, expected in actions:
            with self.subTest(action=action.__name__):
                Reservation.objects.update(updated_at=stale)

                with mock.patch.object(self.model_admin, "message_user"):
                    action(self.request, Reservation.objects.filter(pk=self.reservation.pk))

                self.reservation.refresh_from_db()
                self.other.refresh_from_db()
                self.assertEqual(self.reservation.status, expected)
                self.assertGreater(self.reservation.updated_at, stale)
                self.assertEqual(self.other.updated_at, stale)

    def test_mark_as_completed_records_completer(self):
        with mock.patch.object(self.model_admin, "message_user"):
            self.model_admin.mark_as_completed(
                self.request, Reservation.objects.filter(pk=self.reservation.pk)
            )

        self.reservation.refresh_from_db()
        self.assertEqual(self.reservation.completed_by, self.manager)
