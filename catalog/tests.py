from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.contrib import admin
from django.core.exceptions import ValidationError
from django.test import RequestFactory, TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from catalog.admin import GameAdmin
from catalog.models import Game, MenuItem
from users.models import CustomUser


class GameModelTest(TestCase):
    """Unit tests for Game model"""

    def test_game_defaults(self):
        game = Game.objects.create(name="Catan")

        self.assertTrue(game.available)
        self.assertIsNone(game.min_players)
        self.assertEqual(str(game), "Catan")

    def test_min_players_above_max_is_rejected(self):
        with self.assertRaises(ValidationError):
            Game.objects.create(name="Catan", min_players=5, max_players=3)

    def test_one_sided_player_range_is_allowed(self):
        game = Game.objects.create(name="Solo", min_players=1)

        self.assertIsNone(game.max_players)


class GameAdminTest(TestCase):
    def test_availability_actions_refresh_updated_at(self):
        model_admin = GameAdmin(Game, admin.site)
        request = RequestFactory().get("/admin/catalog/game/")
        game = Game.objects.create(name="Catan")
        stale = timezone.now() - timedelta(days=1)
        Game.objects.update(updated_at=stale)

        with mock.patch.object(model_admin, "message_user"):
            model_admin.mark_unavailable(request, Game.objects.all())

        game.refresh_from_db()
        self.assertFalse(game.available)
        self.assertGreater(game.updated_at, stale)


class GameAPITest(APITestCase):
    """API tests for the game library"""

    def setUp(self):
        self.client = APIClient()
        self.staff = CustomUser.objects.create_user(username="staff", password="pass12345")
        self.manager = CustomUser.objects.create_user(
            username="manager", password="pass12345", role=CustomUser.Role.MANAGER
        )
        self.client.force_authenticate(user=self.staff)
        self.url = reverse("game-list")

    def test_create_game(self):
        response = self.client.post(self.url, {
            "name": "Ticket to Ride",
            "min_players": 2,
            "max_players": 5,
            "duration_minutes": 60,
            "complexity": "Light",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["available"])
        self.assertEqual(response.data["created_by"], self.staff.id)

    def test_create_game_with_bad_player_range(self):
        response = self.client.post(
            self.url, {"name": "Broken", "min_players": 6, "max_players": 2}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_partial_update_checks_stored_range(self):
        game = Game.objects.create(name="Catan", min_players=3, max_players=4)

        response = self.client.patch(
            reverse("game-detail", args=[game.id]), {"max_players": 2}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_is_alphabetical_and_filterable(self):
        Game.objects.create(name="Wingspan")
        Game.objects.create(name="Azul", available=False)
        Game.objects.create(name="Catan")

        response = self.client.get(self.url)
        self.assertEqual([g["name"] for g in response.data], ["Azul", "Catan", "Wingspan"])

        response = self.client.get(self.url, {"available": "true"})
        self.assertEqual([g["name"] for g in response.data], ["Catan", "Wingspan"])

    def test_toggle_availability(self):
        game = Game.objects.create(name="Catan")

        response = self.client.patch(
            reverse("game-detail", args=[game.id]), {"available": False}, format="json"
        )
        game.refresh_from_db()

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(game.available)

    def test_staff_cannot_delete(self):
        game = Game.objects.create(name="Catan")

        response = self.client.delete(reverse("game-detail", args=[game.id]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Game.objects.filter(id=game.id).exists())

    def test_manager_can_delete(self):
        game = Game.objects.create(name="Catan")
        self.client.force_authenticate(user=self.manager)

        response = self.client.delete(reverse("game-detail", args=[game.id]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Game.objects.filter(id=game.id).exists())


class MenuItemAPITest(APITestCase):
    """API tests for menu items"""

    def setUp(self):
        self.client = APIClient()
        self.staff = CustomUser.objects.create_user(username="staff", password="pass12345")
        self.client.force_authenticate(user=self.staff)
        self.url = reverse("menuitem-list")

    def test_create_menu_item(self):
        response = self.client.post(
            self.url, {"name": "Latte", "category": "drink", "price": "4.5"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["price"], "4.50")
        self.assertTrue(response.data["available"])

    def test_invalid_menu_items(self):
        for data in (
            {"name": "Latte", "category": "drink", "price": "-1"},
            {"name": "Latte", "category": "drink", "price": "cheap"},
            {"name": "Latte", "category": "merch", "price": "4.50"},
        ):
            with self.subTest(data=data):
                response = self.client.post(self.url, data, format="json")
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_ordered_by_category_then_name(self):
        MenuItem.objects.create(name="Tea", category="drink", price=Decimal("3.00"))
        MenuItem.objects.create(name="Burger", category="food", price=Decimal("11.00"))
        MenuItem.objects.create(name="Cola", category="drink", price=Decimal("2.50"))

        response = self.client.get(self.url)

        self.assertEqual([m["name"] for m in response.data], ["Cola", "Tea", "Burger"])

    def test_filter_by_category(self):
        MenuItem.objects.create(name="Tea", category="drink", price=Decimal("3.00"))
        MenuItem.objects.create(name="Burger", category="food", price=Decimal("11.00"))

        response = self.client.get(self.url, {"category": "food"})

        self.assertEqual([m["name"] for m in response.data], ["Burger"])
