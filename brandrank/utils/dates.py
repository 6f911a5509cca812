"""Datetime helpers."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pendulum


def now_utc() -> pendulum.DateTime:
    return pendulum.now("UTC")


def window_start(now: datetime, days: int) -> datetime | None:
    """Lower bound of the ``[now - days, now)`` window, ``None`` for all time."""
    if days <= 0:
        return None
    return now - timedelta(days=days)


def day_key(value: datetime) -> str:
    """UTC calendar day of ``value`` as ``YYYY-MM-DD``."""
    if value.tzinfo is not None:
        value = pendulum.instance(value).in_timezone("UTC")
    return format_date(value.date())


def parse_timestamp(value: str) -> datetime:
    return pendulum.parse(value)


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")
