"""Time formatting helpers for timer displays"""
from datetime import datetime, time, timedelta
from typing import Optional, Tuple


def format_clock(seconds: int) -> str:
    """
    Format a countdown value as MM:SS
    
    Args:
        seconds: Non-negative number of seconds
    
    Returns:
        str: "25:00" style string. Minutes are not wrapped into hours.
    """
    minutes, remaining = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remaining:02d}"


def format_minutes(total_minutes: int) -> str:
    """Format a minute total as "1h 5m", or "45m" when under an hour"""
    hours, minutes = divmod(int(total_minutes), 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def local_day_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    Start and end of the local calendar day containing `now`
    
    Returns:
        (start, end) as timezone-aware datetimes, end exclusive
    """
    if now is None:
        now = datetime.now()
    day = now.date()
    next_day = day + timedelta(days=1)

    # Midnights resolve their own UTC offsets; a DST changeover day is 23 or 25 hours long
    if now.tzinfo is None:
        return (
            datetime.combine(day, time.min).astimezone(),
            datetime.combine(next_day, time.min).astimezone(),
        )
    return (
        datetime.combine(day, time.min, tzinfo=now.tzinfo),
        datetime.combine(next_day, time.min, tzinfo=now.tzinfo),
    )
