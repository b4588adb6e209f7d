from datetime import datetime, timedelta, timezone

# Offer end dates are typed in Bangladesh local time (UTC+6)
DEFAULT_UTC_OFFSET_HOURS = 6


def parse_end_date(value, utc_offset_hours=DEFAULT_UTC_OFFSET_HOURS):
    """
    Parse an ISO end date into a naive UTC datetime. Values without an
    offset are read as shop-local time. Returns None for empty or invalid
    input.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed - timedelta(hours=utc_offset_hours)
    return parsed.astimezone(timezone.utc).replace(tzinfo=None)


def countdown_remaining(end_date, now=None):
    """
    Days, hours, minutes and seconds left until end_date (naive UTC).
    Never negative: at or after the end every unit is zero.
    """
    now = now or datetime.utcnow()
    remaining = int((end_date - now).total_seconds()) if end_date else 0
    if remaining <= 0:
        return {'days': 0, 'hours': 0, 'minutes': 0, 'seconds': 0, 'expired': True}

    days, remaining = divmod(remaining, 86400)
    hours, remaining = divmod(remaining, 3600)
    minutes, seconds = divmod(remaining, 60)
    return {'days': days, 'hours': hours, 'minutes': minutes, 'seconds': seconds, 'expired': False}
