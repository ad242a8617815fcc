import logging

from rest_framework import filters
from rest_framework.viewsets import ModelViewSet
from django_filters.rest_framework import DjangoFilterBackend

from .models import Game, MenuItem
from .serializers import GameSerializer, MenuItemSerializer
from config.permissions import CatalogPermission

logger = logging.getLogger(__name__)


class GameViewSet(ModelViewSet):
    """
    Game library. Listed alphabetically; `?available=true` narrows to games
    that can be handed out, `?search=` matches on name.
    """

    queryset = Game.objects.all()
    serializer_class = GameSerializer
    permission_classes = [CatalogPermission]
    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
    ]
    filterset_fields = ["available"]
    search_fields = ["name"]

    def perform_create(self, serializer):
        game = serializer.save(created_by=self.request.user)
        logger.info(f"Game {game.id} '{game.name}' added by {self.request.user}")

    def perform_destroy(self, instance):
        logger.info(f"Game {instance.id} '{instance.name}' deleted by {self.request.user}")
        instance.delete()


class MenuItemViewSet(ModelViewSet):
    """
    Menu items ordered by category then name.
    Price edits never touch existing orders, which keep their own frozen price.
    """

    queryset = MenuItem.objects.all()
    serializer_class = MenuItemSerializer
    permission_classes = [CatalogPermission]
    filterset_fields = ["category", "available"]
