# reservation/services/billing.py

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Union

from reservation.exceptions import InvalidArgument

CENT = Decimal("0.01")


def quantize_money(value: Union[Decimal, int, str]) -> Decimal:
    """
    Round to two decimal places, half-up.
    """
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def line_price(unit_price: Decimal, quantity: int) -> Decimal:
    """
    Price of an order line: frozen unit price x quantity.
    """
    try:
        return quantize_money(Decimal(unit_price) * quantity)
    except InvalidOperation:
        raise InvalidArgument(f"Quantity {quantity} is too large.")


def calculate_total(orders: Iterable) -> Decimal:
    """
    Bill for a reservation: the sum of the stored line prices.

    Only the price frozen on each order is read, never the menu item's
    current price, so editing the menu never changes an existing bill.
    An empty tab totals 0.00.
    """
    return quantize_money(sum((Decimal(order.price) for order in orders), Decimal("0")))


def format_money(value: Decimal) -> str:
    return f"{quantize_money(value):.2f}"


def parse_quantity(value) -> int:
    """
    Parse a raw quantity from form input.
    Booleans, fractions and anything below 1 are rejected.
    """
    if value is None or value == "" or isinstance(value, bool):
        raise InvalidArgument("Quantity is required.")
    try:
        quantity = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidArgument(f"Quantity '{value}' is not a number.")
    if not quantity.is_finite() or quantity != quantity.to_integral_value():
        raise InvalidArgument(f"Quantity '{value}' must be a whole number.")
    if quantity < 1:
        raise InvalidArgument("Quantity must be at least 1.")
    return int(quantity)
