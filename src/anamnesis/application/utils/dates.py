"""Datetime helpers shared by the scheduler, stats and storage layers."""

from datetime import date, datetime, time


def local_now() -> datetime:
    """Current wall-clock time as an aware datetime in the local zone."""
    return datetime.now().astimezone()


def align(moment: datetime, reference: datetime) -> datetime:
    """
    Make `moment` comparable with `reference`.

    A naive datetime paired with an aware one is read as local time.
    """
    if (moment.tzinfo is None) == (reference.tzinfo is None):
        return moment
    if moment.tzinfo is None:
        return moment.astimezone()
    return moment.astimezone().replace(tzinfo=None)


def parse_datetime(value: datetime | date | str) -> datetime:
    """Accept a datetime, a date (midnight) or an ISO-8601 string."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return datetime.fromisoformat(value)
