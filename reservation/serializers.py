from rest_framework import serializers

from catalog.models import Game
from reservation.models import Reservation


class ReservationSerializer(serializers.ModelSerializer):
    """
    Reservation as listed and created by staff.
    Status is changed through its own endpoint.
    """

    party_size = serializers.IntegerField(min_value=1, default=2)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = Reservation
        fields = [
            "id",
            "customer_name",
            "customer_phone",
            "customer_email",
            "reservation_date",
            "reservation_time",
            "party_size",
            "status",
            "status_display",
            "notes",
            "created_by",
            "completed_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "status",
            "created_by",
            "completed_by",
            "created_at",
            "updated_at",
        ]

    def validate_customer_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("Customer name is required.")
        return value.strip()


class ReservationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Reservation.Status.choices)


class AssignGameSerializer(serializers.Serializer):
    game = serializers.IntegerField(
        required=False, allow_null=True, help_text="Id of the game to put on the table"
    )


class AddOrderSerializer(serializers.Serializer):
    """
    Raw order input. Selection and quantity are checked by the detail service
    so that form input and service calls share one set of rules.
    """

    menu_item = serializers.IntegerField(required=False, allow_null=True)
    quantity = serializers.CharField(required=False, default="1")


class OrderQuantitySerializer(serializers.Serializer):
    quantity = serializers.CharField()


class AssignedGameSerializer(serializers.ModelSerializer):
    class Meta:
        model = Game
        fields = ["id", "name", "min_players", "max_players", "duration_minutes", "complexity"]


class OrderViewSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    menu_item_id = serializers.IntegerField(allow_null=True)
    menu_item_name = serializers.CharField(allow_null=True)
    category = serializers.CharField(allow_null=True)
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=8, decimal_places=2)
    price = serializers.DecimalField(max_digits=10, decimal_places=2)


class ReservationDetailSerializer(serializers.Serializer):
    """
    Serializer for the consolidated reservation view.
    """

    reservation = ReservationSerializer()
    assigned_games = AssignedGameSerializer(many=True)
    orders = OrderViewSerializer(many=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)


class DashboardStatsSerializer(serializers.Serializer):
    today_reservations = serializers.IntegerField()
    active_reservations = serializers.IntegerField()
    available_games = serializers.IntegerField()
