from rest_framework import serializers
from .models import Game, MenuItem


class GameSerializer(serializers.ModelSerializer):
    class Meta:
        model = Game
        fields = [
            "id",
            "name",
            "min_players",
            "max_players",
            "duration_minutes",
            "complexity",
            "description",
            "available",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_by", "created_at", "updated_at"]

    def validate(self, attrs):
        """
        Check the player range against the values already stored on partial updates.
        """
        min_players = attrs.get("min_players", getattr(self.instance, "min_players", None))
        max_players = attrs.get("max_players", getattr(self.instance, "max_players", None))
        if min_players is not None and max_players is not None and min_players > max_players:
            raise serializers.ValidationError(
                {"max_players": "Maximum players must be at least the minimum."}
            )
        return attrs


class MenuItemSerializer(serializers.ModelSerializer):
    price = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=0)

    class Meta:
        model = MenuItem
        fields = ["id", "name", "category", "price", "available", "created_at"]
        read_only_fields = ["id", "created_at"]
