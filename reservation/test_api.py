from datetime import date, time
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from catalog.models import Game, MenuItem
from reservation.models import Order, Reservation
from users.models import CustomUser


class StaffAPITestCase(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = CustomUser.objects.create_user(
            username="staff", password="pass12345", full_name="Sam Staff"
        )
        self.client.force_authenticate(user=self.user)

    def make_reservation(self, **overrides):
        data = {
            "customer_name": "Test Customer",
            "reservation_date": date(2024, 6, 1),
            "reservation_time": time(18, 0),
            "party_size": 2,
        }
        data.update(overrides)
        return Reservation.objects.create(**data)


class ReservationListAPITest(StaffAPITestCase):
    """API tests for the reservation list endpoint"""

    def setUp(self):
        super().setUp()
        self.url = reverse("reservation-list")
        self.late = self.make_reservation(
            customer_name="Alice Smith",
            reservation_date=date(2024, 6, 2),
            reservation_time=time(19, 0),
            party_size=4,
        )
        self.early = self.make_reservation(
            customer_name="Bob Jones",
            reservation_date=date(2024, 6, 2),
            reservation_time=time(11, 0),
            party_size=5,
            status=Reservation.Status.IN_PROGRESS,
        )
        self.outside = self.make_reservation(
            customer_name="Carol",
            reservation_date=date(2024, 6, 4),
            reservation_time=time(12, 0),
            party_size=2,
        )

    def ids(self, response):
        return [row["id"] for row in response.data]

    def test_list_unfiltered(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.ids(response), [self.early.id, self.late.id, self.outside.id])

    def test_list_filtered(self):
        response = self.client.get(self.url, {
            "date_from": "2024-06-01",
            "date_to": "2024-06-03",
            "max_party_size": 4,
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.ids(response), [self.late.id])

    def test_list_search_and_status(self):
        response = self.client.get(self.url, {"search": "JONES", "status": "in-progress"})
        self.assertEqual(self.ids(response), [self.early.id])

        response = self.client.get(self.url, {"search": "JONES", "status": "confirmed"})
        self.assertEqual(self.ids(response), [])

    def test_list_time_window(self):
        response = self.client.get(self.url, {"time_from": "12:00"})

        self.assertEqual(self.ids(response), [self.late.id, self.outside.id])

    def test_blank_parameters_do_not_filter(self):
        response = self.client.get(self.url, {"search": "  ", "status": ""})

        self.assertEqual(self.ids(response), [self.early.id, self.late.id, self.outside.id])

    def test_half_date_range_is_rejected(self):
        response = self.client.get(self.url, {"date_from": "2024-06-01"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_malformed_parameters_are_rejected(self):
        for params in (
            {"status": "seated"},
            {"date_from": "yesterday", "date_to": "2024-06-03"},
            {"max_party_size": "four"},
            {"max_party_size": "4.5"},
        ):
            with self.subTest(params=params):
                response = self.client.get(self.url, params)
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_unauthenticated(self):
        self.client.force_authenticate(user=None)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_reservation(self):
        response = self.client.post(self.url, {
            "customer_name": "Dana",
            "customer_phone": "555-0199",
            "reservation_date": "2024-06-05",
            "reservation_time": "17:30",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], "confirmed")
        self.assertEqual(response.data["party_size"], 2)
        self.assertEqual(response.data["created_by"], self.user.id)

    def test_create_reservation_invalid(self):
        for data in (
            {"customer_name": "", "reservation_date": "2024-06-05", "reservation_time": "17:30"},
            {"customer_name": "Dana", "reservation_time": "17:30"},
            {"customer_name": "Dana", "reservation_date": "2024-06-05",
             "reservation_time": "17:30", "party_size": 0},
            {"customer_name": "Dana", "reservation_date": "2024-06-05",
             "reservation_time": "17:30", "party_size": "many"},
        ):
            with self.subTest(data=data):
                response = self.client.post(self.url, data, format="json")
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ReservationDetailAPITest(StaffAPITestCase):
    """API tests for the reservation detail and its games and orders"""

    def setUp(self):
        super().setUp()
        self.reservation = self.make_reservation(customer_name="Alice")
        self.url = reverse("reservation-detail", args=[self.reservation.id])
        self.catan = Game.objects.create(name="Catan")
        self.azul = Game.objects.create(name="Azul")
        self.nachos = MenuItem.objects.create(
            name="Nachos", category=MenuItem.Category.SNACK, price=Decimal("12.50")
        )
        self.tea = MenuItem.objects.create(
            name="Tea", category=MenuItem.Category.DRINK, price=Decimal("7.25")
        )

    def test_get_detail(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["reservation"]["customer_name"], "Alice")
        self.assertEqual(response.data["assigned_games"], [])
        self.assertEqual(response.data["orders"], [])
        self.assertEqual(response.data["total"], "0.00")

    def test_get_missing_detail(self):
        response = self.client.get(reverse("reservation-detail", args=[999999]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_reservation(self):
        response = self.client.patch(self.url, {"party_size": 5}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["reservation"]["party_size"], 5)

    def test_assign_and_unassign_game(self):
        games_url = reverse("reservation-games", args=[self.reservation.id])

        response = self.client.post(games_url, {"game": self.azul.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post(games_url, {"game": self.catan.id}, format="json")
        self.assertEqual(
            [game["name"] for game in response.data["assigned_games"]], ["Azul", "Catan"]
        )

        response = self.client.delete(
            reverse("reservation-game-remove", args=[self.reservation.id, self.azul.id])
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [game["name"] for game in response.data["assigned_games"]], ["Catan"]
        )

    def test_unassign_game_not_assigned(self):
        response = self.client.delete(
            reverse("reservation-game-remove", args=[self.reservation.id, self.azul.id])
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["assigned_games"], [])

    def test_assign_without_game(self):
        response = self.client.post(
            reverse("reservation-games", args=[self.reservation.id]), {}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_assign_unknown_game(self):
        response = self.client.post(
            reverse("reservation-games", args=[self.reservation.id]),
            {"game": 999999},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_add_orders_and_total(self):
        orders_url = reverse("reservation-orders", args=[self.reservation.id])

        self.client.post(orders_url, {"menu_item": self.nachos.id}, format="json")
        response = self.client.post(
            orders_url, {"menu_item": self.tea.id, "quantity": "1"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["total"], "19.75")
        self.assertEqual(
            [(o["menu_item_name"], o["price"]) for o in response.data["orders"]],
            [("Nachos", "12.50"), ("Tea", "7.25")],
        )

    def test_add_order_invalid(self):
        orders_url = reverse("reservation-orders", args=[self.reservation.id])

        for data in ({"quantity": 1}, {"menu_item": self.tea.id, "quantity": 0},
                     {"menu_item": self.tea.id, "quantity": "x"}):
            with self.subTest(data=data):
                response = self.client.post(orders_url, data, format="json")
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.assertFalse(Order.objects.exists())

    def test_menu_price_change_does_not_change_bill(self):
        orders_url = reverse("reservation-orders", args=[self.reservation.id])
        self.client.post(orders_url, {"menu_item": self.tea.id, "quantity": 2}, format="json")

        response = self.client.patch(
            reverse("menuitem-detail", args=[self.tea.id]), {"price": "8.00"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.get(self.url)
        self.assertEqual(response.data["orders"][0]["price"], "14.50")
        self.assertEqual(response.data["total"], "14.50")

    def test_change_order_quantity(self):
        order = Order.objects.create(
            reservation=self.reservation,
            menu_item=self.tea,
            quantity=1,
            unit_price=Decimal("7.25"),
            price=Decimal("7.25"),
        )

        response = self.client.patch(
            reverse("order-line", args=[order.id]), {"quantity": "4"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["orders"][0]["quantity"], 4)
        self.assertEqual(response.data["total"], "29.00")

    def test_remove_order(self):
        order = Order.objects.create(
            reservation=self.reservation,
            menu_item=self.tea,
            quantity=1,
            unit_price=Decimal("7.25"),
            price=Decimal("7.25"),
        )
        Order.objects.create(
            reservation=self.reservation,
            menu_item=self.nachos,
            quantity=1,
            unit_price=Decimal("12.50"),
            price=Decimal("12.50"),
        )
        url = reverse("order-line", args=[order.id])

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [o["menu_item_name"] for o in response.data["orders"]], ["Nachos"]
        )
        self.assertEqual(response.data["total"], "12.50")

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self.client.get(self.url).data["total"], "12.50")

    def test_order_quantity_too_large(self):
        """Test oversized quantities are a 400 on both order endpoints"""
        orders_url = reverse("reservation-orders", args=[self.reservation.id])
        for quantity in ("1000000000", "100000000000000000000"):
            with self.subTest(quantity=quantity):
                response = self.client.post(
                    orders_url, {"menu_item": self.tea.id, "quantity": quantity}, format="json"
                )
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Order.objects.exists())

        self.client.post(orders_url, {"menu_item": self.tea.id}, format="json")
        order = Order.objects.get()
        response = self.client.patch(
            reverse("order-line", args=[order.id]), {"quantity": "1000000000"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.client.get(self.url).data["total"], "7.25")

    def test_complete_reservation(self):
        response = self.client.post(
            reverse("reservation-status", args=[self.reservation.id]),
            {"status": "completed"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "completed")
        self.assertEqual(response.data["completed_by"], self.user.id)

    def test_unknown_status(self):
        response = self.client.post(
            reverse("reservation-status", args=[self.reservation.id]),
            {"status": "seated"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class DashboardStatsAPITest(StaffAPITestCase):
    def test_stats(self):
        today = timezone.localdate()
        self.make_reservation(reservation_date=today)
        self.make_reservation(reservation_date=today, status=Reservation.Status.CANCELLED)
        Game.objects.create(name="Catan")

        response = self.client.get(reverse("dashboard-stats"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            "today_reservations": 2,
            "active_reservations": 1,
            "available_games": 1,
        })
