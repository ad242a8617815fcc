# reservation/filters.py

import django_filters

from reservation.exceptions import InvalidArgument
from reservation.models import Reservation
from reservation.services.filtering import ReservationFilterSpec, apply_reservation_filter


class ReservationFilterSet(django_filters.FilterSet):
    """
    Parses the reservation list query string.

    The declared filters only parse and validate the raw values; the combined
    condition is built by the reservation filter compiler in filter_queryset.
    """

    search = django_filters.CharFilter(
        help_text="Case-insensitive match on name, phone, email or notes",
    )
    date_from = django_filters.DateFilter(
        field_name="reservation_date",
        help_text="First date of the range (YYYY-MM-DD), inclusive",
    )
    date_to = django_filters.DateFilter(
        field_name="reservation_date",
        help_text="Last date of the range (YYYY-MM-DD), inclusive",
    )
    time_from = django_filters.TimeFilter(field_name="reservation_time")
    time_until = django_filters.TimeFilter(field_name="reservation_time")
    max_party_size = django_filters.NumberFilter(field_name="party_size")
    status = django_filters.ChoiceFilter(choices=Reservation.Status.choices)

    class Meta:
        model = Reservation
        fields = []

    def get_spec(self) -> ReservationFilterSpec:
        data = self.form.cleaned_data

        max_party_size = data.get("max_party_size")
        if max_party_size is not None:
            if max_party_size != max_party_size.to_integral_value():
                raise InvalidArgument("Maximum party size must be a whole number.")
            max_party_size = int(max_party_size)

        return ReservationFilterSpec.from_params(
            search=data.get("search"),
            date_from=data.get("date_from"),
            date_to=data.get("date_to"),
            time_from=data.get("time_from"),
            time_until=data.get("time_until"),
            max_party_size=max_party_size,
            status=data.get("status"),
        )

    def filter_queryset(self, queryset):
        return apply_reservation_filter(queryset, self.get_spec())
