# reservation/services/filtering.py

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import List, Optional, Tuple

from django.db.models import Q, QuerySet
from django.utils import timezone

from reservation.exceptions import InvalidArgument, store_errors
from reservation.models import Reservation

logger = logging.getLogger(__name__)

# Fixed ordering of every reservation list, whatever the filters.
RESERVATION_ORDERING = ("reservation_date", "reservation_time", "id")

DAY_START = time(0, 0, 0)
DAY_END = time(23, 59, 59)

SEARCH_FIELDS = ("customer_name", "customer_phone", "customer_email", "notes")


def to_calendar_date(value) -> date:
    """
    Reduce a date bound to a calendar date.

    Reservation dates are stored as plain calendar dates. An aware datetime is
    first converted to the café's local time zone so a bound taken close to
    midnight lands on the day staff see on the wall calendar.
    """
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            return timezone.localdate(value)
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidArgument(f"'{value}' is not a date.")


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar dates. Both bounds are required."""

    start: date
    end: date

    def __post_init__(self):
        if self.start is None or self.end is None:
            raise InvalidArgument("A date range needs both a start and an end date.")
        object.__setattr__(self, "start", to_calendar_date(self.start))
        object.__setattr__(self, "end", to_calendar_date(self.end))


@dataclass(frozen=True)
class ReservationFilterSpec:
    """
    Criteria for the reservation list. Every field is optional and an unset
    field does not narrow the list.
    """

    search_text: Optional[str] = None
    date_range: Optional[DateRange] = None
    time_from: Optional[time] = None
    time_until: Optional[time] = None
    max_party_size: Optional[int] = None
    status: Optional[str] = None

    def __post_init__(self):
        if self.status and self.status not in Reservation.Status.values:
            raise InvalidArgument(f"Unknown reservation status '{self.status}'.")
        if self.max_party_size is not None and (
            isinstance(self.max_party_size, bool) or not isinstance(self.max_party_size, int)
        ):
            raise InvalidArgument("Maximum party size must be a whole number.")

    @classmethod
    def from_params(
        cls,
        search: Optional[str] = None,
        date_from=None,
        date_to=None,
        time_from: Optional[time] = None,
        time_until: Optional[time] = None,
        max_party_size: Optional[int] = None,
        status: Optional[str] = None,
    ) -> "ReservationFilterSpec":
        """
        Build a spec from separately supplied values, as they arrive from a
        query string or form. The two date bounds must come together.
        """
        if (date_from is None) != (date_to is None):
            raise InvalidArgument("Both 'date_from' and 'date_to' are required for a date range.")

        date_range = DateRange(date_from, date_to) if date_from is not None else None

        return cls(
            search_text=search or None,
            date_range=date_range,
            time_from=time_from,
            time_until=time_until,
            max_party_size=max_party_size,
            status=status or None,
        )

    @property
    def search_term(self) -> Optional[str]:
        """Trimmed search text, or None when it is empty or whitespace only."""
        if self.search_text is None:
            return None
        term = self.search_text.strip()
        return term or None

    def time_bounds(self) -> Optional[Tuple[time, time]]:
        """
        Inclusive time-of-day window. A missing side is open to the start or
        end of the day; None when neither side is set.
        """
        if self.time_from is None and self.time_until is None:
            return None
        return (
            self.time_from if self.time_from is not None else DAY_START,
            self.time_until if self.time_until is not None else DAY_END,
        )


@dataclass(frozen=True)
class ReservationQuery:
    """Store query descriptor: a single condition plus the fixed ordering."""

    condition: Q
    ordering: Tuple[str, ...] = RESERVATION_ORDERING

    @property
    def is_unfiltered(self) -> bool:
        return not self.condition

    def apply(self, queryset: QuerySet) -> QuerySet:
        return queryset.filter(self.condition).order_by(*self.ordering)


def compile_reservation_filter(spec: Optional[ReservationFilterSpec]) -> ReservationQuery:
    """
    Compile a filter spec into one AND-ed condition over the reservation table.

    Pure function of the spec: compiling an empty spec always yields the
    unfiltered query, so clearing the filters restores the full list.
    """
    condition = Q()
    if spec is None:
        return ReservationQuery(condition)

    term = spec.search_term
    if term:
        # Any of the text fields, case-insensitive substring
        search = Q()
        for field in SEARCH_FIELDS:
            search |= Q(**{f"{field}__icontains": term})
        condition &= search

    if spec.date_range is not None:
        # Applied literally: a start after the end simply matches nothing
        condition &= Q(reservation_date__gte=spec.date_range.start) & Q(
            reservation_date__lte=spec.date_range.end
        )

    bounds = spec.time_bounds()
    if bounds is not None:
        condition &= Q(reservation_time__gte=bounds[0]) & Q(
            reservation_time__lte=bounds[1]
        )

    if spec.max_party_size is not None:
        condition &= Q(party_size__lte=spec.max_party_size)

    if spec.status:
        condition &= Q(status=spec.status)

    return ReservationQuery(condition)


def apply_reservation_filter(
    queryset: QuerySet, spec: Optional[ReservationFilterSpec]
) -> QuerySet:
    return compile_reservation_filter(spec).apply(queryset)


class ReservationQueryService:
    """
    Service class for reading the reservation list.
    """

    @staticmethod
    def list_reservations(spec: Optional[ReservationFilterSpec] = None) -> List[Reservation]:
        """
        Reservations matching the spec, ordered by date then time.
        """
        query = compile_reservation_filter(spec)
        with store_errors("loading reservations"):
            reservations = list(query.apply(Reservation.objects.all()))

        logger.debug(
            f"Listed {len(reservations)} reservation(s) "
            f"({'unfiltered' if query.is_unfiltered else spec})"
        )
        return reservations
