# reservation/exceptions.py

import logging
from contextlib import contextmanager

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException

logger = logging.getLogger(__name__)


class NotFound(APIException):
    """A referenced reservation, game, menu item or order does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class InvalidArgument(APIException):
    """
    Input rejected before touching the database: missing selection,
    malformed or non-positive number, half-open date range, unknown status.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid argument."
    default_code = "invalid_argument"


class StoreFailure(APIException):
    """The database reported an error. The original message is kept as detail."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "The reservation store could not complete the request."
    default_code = "store_failure"


@contextmanager
def store_errors(action: str):
    """
    Surface database errors raised inside the block as StoreFailure.
    No retry is attempted.
    """
    try:
        yield
    except DatabaseError as exc:
        logger.error(f"Store failure while {action}: {exc}")
        raise StoreFailure(f"Error {action}: {exc}") from exc


def validation_message(exc: ValidationError) -> str:
    """
    Flatten a model ValidationError into one line for an InvalidArgument detail.
    """
    if hasattr(exc, "message_dict"):
        return "; ".join(
            f"{field}: {' '.join(messages)}" for field, messages in exc.message_dict.items()
        )
    return " ".join(exc.messages)
