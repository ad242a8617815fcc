from django.urls import path, include

from reservation import views


urlpatterns = [
    path(
        "",
        views.ReservationListCreateView.as_view(),
        name="reservation-list",
    ),
    path(
        "stats/",
        views.DashboardStatsView.as_view(),
        name="dashboard-stats",
    ),
    path(
        "<int:pk>/",
        include(
            [
                path(
                    "",
                    views.ReservationDetailView.as_view(),
                    name="reservation-detail",
                ),
                path(
                    "status/",
                    views.ReservationStatusView.as_view(),
                    name="reservation-status",
                ),
                path(
                    "games/",
                    views.ReservationGamesView.as_view(),
                    name="reservation-games",
                ),
                path(
                    "games/<int:game_id>/",
                    views.ReservationGameRemoveView.as_view(),
                    name="reservation-game-remove",
                ),
                path(
                    "orders/",
                    views.ReservationOrdersView.as_view(),
                    name="reservation-orders",
                ),
            ]
        ),
    ),
    path(
        "orders/<int:order_id>/",
        views.OrderLineView.as_view(),
        name="order-line",
    ),
]
