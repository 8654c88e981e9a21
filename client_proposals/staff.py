"""
Hours and pay for staff assignments.
"""
import datetime
from decimal import Decimal

from django.utils import timezone

from .pricing import CENT, to_decimal

ONE_DAY = datetime.timedelta(days=1)


def hours_between(start, end) -> Decimal:
    """Worked hours, rounded to cents. An end before the start means the shift crossed midnight."""
    delta = end - start
    if delta < datetime.timedelta(0):
        delta += ONE_DAY
    return (Decimal(int(delta.total_seconds())) / Decimal(3600)).quantize(CENT)


def resolve_hourly_rate(assignment_rate=None, member_rate=None, role_rate=None):
    for rate in (assignment_rate, member_rate, role_rate):
        if rate is not None:
            return to_decimal(rate)
    return None


def compute_pay(hours, rate):
    if hours is None or rate is None:
        return None
    return (to_decimal(hours) * to_decimal(rate)).quantize(CENT)


def parse_wall_time(value) -> datetime.time:
    if isinstance(value, datetime.time):
        return value
    return datetime.time.fromisoformat(str(value).strip())


def parse_service_date(value) -> datetime.date:
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value).strip()[:10])


def wall_clock(service_date, wall_time, tz=None):
    tz = tz or timezone.get_current_timezone()
    naive = datetime.datetime.combine(parse_service_date(service_date), parse_wall_time(wall_time))
    return timezone.make_aware(naive, tz)


def shift_bounds(service_date, start_time, end_time, tz=None):
    """
    Timestamps for a shift given as wall-clock times on the service date.
    When the end time is earlier than the start it falls on the next day.
    """
    start = wall_clock(service_date, start_time, tz) if start_time else None
    if not end_time:
        return start, None
    end_day = parse_service_date(service_date)
    if start_time and parse_wall_time(end_time) < parse_wall_time(start_time):
        end_day += ONE_DAY
    return start, wall_clock(end_day, end_time, tz)


def clock(assignment, service_date, start_time=None, end_time=None):
    """
    Record clock-in and/or clock-out for an assignment from wall-clock times.

    Clocking out alone reuses the stored start time to decide whether the shift
    crossed midnight.
    """
    clock_in = start_time is not None
    if not clock_in and assignment.start_time:
        start_time = timezone.localtime(assignment.start_time).time()
    start, end = shift_bounds(service_date, start_time, end_time)
    if clock_in:
        assignment.start_time = start
    if end is not None:
        assignment.end_time = end
    assignment.save()
    return assignment
