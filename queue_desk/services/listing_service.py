"""Pure filtering and grouping helpers over fetched result sets.

None of these touch the store. They preserve input order and work on any
objects exposing the attributes they read, which keeps them usable on ORM rows
and on plain records alike.
"""

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

T = TypeVar("T")

ALL_STATUSES = "all"


def _matches_search(search: str, *values: str | None) -> bool:
    needle = search.strip().lower()
    if not needle:
        return True
    return any(needle in value.lower() for value in values if value)


def _customer_field(booking: Any, flat_name: str, profile_name: str) -> str | None:
    # Serialized items carry the customer inline; ORM rows reach it through .user.
    value = getattr(booking, flat_name, None)
    if value is None:
        value = getattr(getattr(booking, "user", None), profile_name, None)
    return value


def filter_bookings(bookings: Iterable[T], search: str = "", status: str | None = ALL_STATUSES) -> list[T]:
    """Case-insensitive name/email search combined with an exact status match.

    ``status`` of ``"all"`` (or empty) keeps every status.
    """
    filter_status = status not in (None, "", ALL_STATUSES)
    result = []
    for booking in bookings:
        if filter_status and booking.status != status:
            continue
        name = _customer_field(booking, "customer_name", "full_name")
        email = _customer_field(booking, "customer_email", "email")
        if not _matches_search(search, name, email):
            continue
        result.append(booking)
    return result


def filter_profiles(profiles: Iterable[T], search: str = "") -> list[T]:
    return [profile for profile in profiles if _matches_search(search, profile.full_name, profile.email)]


def count_by(items: Iterable[T], key: Callable[[T], Any]) -> dict[Any, int]:
    counts: dict[Any, int] = {}
    for item in items:
        group = key(item)
        counts[group] = counts.get(group, 0) + 1
    return counts


def sum_by(items: Iterable[T], key: Callable[[T], Any], value: Callable[[T], float]) -> dict[Any, float]:
    totals: dict[Any, float] = {}
    for item in items:
        group = key(item)
        totals[group] = totals.get(group, 0.0) + float(value(item))
    return totals
