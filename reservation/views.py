from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiResponse
from rest_framework import generics, status

from reservation.filters import ReservationFilterSet
from reservation.serializers import (
    AddOrderSerializer,
    AssignGameSerializer,
    DashboardStatsSerializer,
    OrderQuantitySerializer,
    ReservationDetailSerializer,
    ReservationSerializer,
    ReservationStatusSerializer,
)
from reservation.models import Reservation
from reservation.services.detail import ReservationDetailService
from reservation.services.reservation import DashboardService, ReservationService


def detail_response(reservation_id, status_code=status.HTTP_200_OK):
    """
    Rebuild the reservation detail from the database and return it.
    """
    detail = ReservationDetailService.get_detail(reservation_id)
    return Response(ReservationDetailSerializer(detail).data, status=status_code)


class ReservationListCreateView(generics.ListCreateAPIView):
    """
    Reservation list ordered by date and time, narrowed by the query string
    filters. Any filter left out does not narrow the list.
    """

    queryset = Reservation.objects.all()
    serializer_class = ReservationSerializer
    filterset_class = ReservationFilterSet

    def create(self, request, *args, **kwargs):
        """
        Override create method to use ReservationService for reservation creation.
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        reservation = ReservationService.create_reservation(
            created_by=request.user, **serializer.validated_data
        )

        output_serializer = self.get_serializer(reservation)
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)


class ReservationDetailView(APIView):
    """
    Consolidated view of one reservation: the booking, the games on the table,
    the orders on its tab and the bill total.
    """

    @extend_schema(responses={200: ReservationDetailSerializer})
    def get(self, request, pk):
        return detail_response(pk)

    @extend_schema(
        request=ReservationSerializer,
        responses={200: ReservationDetailSerializer},
    )
    def patch(self, request, pk):
        serializer = ReservationSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        ReservationService.update_reservation(pk, **serializer.validated_data)
        return detail_response(pk)


class ReservationStatusView(generics.GenericAPIView):
    serializer_class = ReservationStatusSerializer

    @extend_schema(
        summary="Change reservation status",
        description="Moves the reservation to another status. "
        "Completing a reservation records the staff member who completed it.",
        responses={200: ReservationSerializer},
    )
    def post(self, request, pk):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        reservation = ReservationService.change_status(
            pk, serializer.validated_data["status"], user=request.user
        )
        return Response(ReservationSerializer(reservation).data)


class ReservationGamesView(generics.GenericAPIView):
    serializer_class = AssignGameSerializer

    @extend_schema(
        summary="Assign a game",
        responses={
            201: ReservationDetailSerializer,
            400: OpenApiResponse(description="No game selected or game unavailable"),
            404: OpenApiResponse(description="Reservation or game not found"),
        },
    )
    def post(self, request, pk):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ReservationDetailService.assign_game(pk, serializer.validated_data.get("game"))
        return detail_response(pk, status.HTTP_201_CREATED)


class ReservationGameRemoveView(APIView):
    @extend_schema(
        summary="Unassign a game",
        description="Removing a game that is not assigned leaves the reservation unchanged.",
        responses={200: ReservationDetailSerializer},
    )
    def delete(self, request, pk, game_id):
        ReservationDetailService.unassign_game(pk, game_id)
        return detail_response(pk)


class ReservationOrdersView(generics.GenericAPIView):
    serializer_class = AddOrderSerializer

    @extend_schema(
        summary="Add an order line",
        description="The menu item's current price is frozen into the new line.",
        responses={
            201: ReservationDetailSerializer,
            400: OpenApiResponse(description="No menu item selected or bad quantity"),
            404: OpenApiResponse(description="Reservation or menu item not found"),
        },
    )
    def post(self, request, pk):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        ReservationDetailService.add_order(pk, data.get("menu_item"), data.get("quantity"))
        return detail_response(pk, status.HTTP_201_CREATED)


class OrderLineView(generics.GenericAPIView):
    serializer_class = OrderQuantitySerializer

    @extend_schema(
        summary="Change an order line's quantity",
        description="The line is repriced from the unit price frozen when it was added.",
        responses={200: ReservationDetailSerializer},
    )
    def patch(self, request, order_id):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = ReservationDetailService.change_order_quantity(
            order_id, serializer.validated_data["quantity"]
        )
        return detail_response(order.reservation_id)

    @extend_schema(
        summary="Remove an order line",
        description="Returns the rebuilt reservation detail, or 204 if the line was already gone.",
        responses={200: ReservationDetailSerializer, 204: None},
    )
    def delete(self, request, order_id):
        reservation_id = ReservationDetailService.remove_order(order_id)
        if reservation_id is None:
            return Response(status=status.HTTP_204_NO_CONTENT)
        return detail_response(reservation_id)


class DashboardStatsView(APIView):
    @extend_schema(responses={200: DashboardStatsSerializer})
    def get(self, request):
        stats = DashboardService.get_stats()
        return Response(DashboardStatsSerializer(stats).data)
