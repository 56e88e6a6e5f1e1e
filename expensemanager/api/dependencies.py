"""Request-scoped collaborators shared by the route modules."""

from __future__ import annotations

from datetime import date, datetime, time

from fastapi import Query, Request

from expensemanager.core.models import DateFilter
from expensemanager.exceptions import ValidationError
from expensemanager.notifications import Notifier
from expensemanager.storage.memory import MemoryStorage


def get_storage(request: Request) -> MemoryStorage:
    return request.app.state.storage


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def _parse_bound(value: str, end_of_day: bool) -> datetime:
    try:
        day = date.fromisoformat(value)
    except ValueError:
        pass
    else:
        return datetime.combine(day, time.max if end_of_day else time.min)
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError("Invalid date format") from None


def get_date_filter(
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
) -> DateFilter | None:
    """Optional ``startDate``/``endDate`` range; applied only when both are given.

    A bare date as ``endDate`` covers that whole day.
    """
    if not start_date or not end_date:
        return None
    return DateFilter(
        start_date=_parse_bound(start_date, end_of_day=False),
        end_date=_parse_bound(end_date, end_of_day=True),
    )
