import re
import math
import datetime

DATE_FORMAT = "%Y-%m-%d"
_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_valid_day(value):
    """True if value is a real calendar day written as YYYY-MM-DD."""
    if not isinstance(value, str) or not _DAY_RE.match(value):
        return False
    try:
        datetime.datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return False
    return True


def parse_day(value):
    """
    Normalize a day to a datetime.date.
    Accepts datetime.date, datetime.datetime or a YYYY-MM-DD string.
    """
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.datetime.strptime(value, DATE_FORMAT).date()


def today_and_yesterday(today=None):
    """Both anchor days as strings, computed once from the same instant."""
    today = parse_day(today) if today is not None else datetime.date.today()
    yesterday = today - datetime.timedelta(days=1)
    return today.strftime(DATE_FORMAT), yesterday.strftime(DATE_FORMAT)


def day_gap(a, b):
    """Whole days between two days, rounded up."""
    delta = parse_day(a) - parse_day(b)
    return math.ceil(abs(delta.total_seconds()) / 86400)


def hours_between(start, end):
    """
    Length of a HH:MM time window in hours.
    Windows that end before they start wrap past midnight.
    Returns 0 when either bound is missing.
    """
    if not start or not end:
        return 0.0
    h1, m1 = (int(p) for p in start.split(":"))
    h2, m2 = (int(p) for p in end.split(":"))
    diff = (h2 * 60 + m2) - (h1 * 60 + m1)
    if diff < 0:
        diff += 24 * 60
    return diff / 60
