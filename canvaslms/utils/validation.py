"""Shared validation utilities for the Canvas client."""
from canvaslms.exceptions import ValidationError

# Largest page size Canvas honours, larger requests are capped by the server
MAX_PER_PAGE = 100


def validate_id(value: int | str, field_name: str = "ID") -> None:
    """
    Validate that a Canvas object id is a positive integer.

    :param value: ID value to validate
    :param field_name: Name of the field for error messages (default "ID")
    :raises ValidationError: If the id is empty, non-numeric or not positive
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a positive integer")
    if isinstance(value, str):
        if not value.strip().isdigit():
            raise ValidationError(f"{field_name} must be a positive integer")
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{field_name} must be a positive integer")


def validate_per_page(per_page: int, max_per_page: int | None = None) -> None:
    """
    Validate a page size.

    :param per_page: Number of results requested per page
    :param max_per_page: Largest page size accepted, None for no upper bound
    :raises ValidationError: If the page size is below 1 or above max_per_page
    """
    if isinstance(per_page, bool) or not isinstance(per_page, int):
        raise ValidationError("per_page must be an integer")
    if per_page < 1:
        raise ValidationError("per_page must be at least 1")
    if max_per_page is not None and per_page > max_per_page:
        raise ValidationError(f"per_page cannot exceed {max_per_page}")


def validate_concurrency(limit: int | None) -> None:
    """
    Validate a concurrency limit. ``None`` and ``0`` both mean unbounded.

    :param limit: Maximum number of page requests in flight
    :raises ValidationError: If the limit is negative
    """
    if limit is None:
        return
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise ValidationError("max_concurrency must be a non-negative integer")


def validate_timeout(timeout: float | None) -> None:
    """
    Validate a per-page timeout in seconds.

    :param timeout: Timeout, or None for no timeout
    :raises ValidationError: If the timeout is not positive
    """
    if timeout is not None and timeout <= 0:
        raise ValidationError("page_timeout must be greater than zero")
