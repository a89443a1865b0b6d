from datetime import date, datetime, time, timezone
from typing import Optional, Tuple

from ..errors import ValidationError

# Format produced by an HTML datetime-local input
DATETIME_LOCAL_FORMAT = "%Y-%m-%dT%H:%M"


def day_range(day: date) -> Tuple[datetime, datetime]:
    return (
        datetime.combine(day, time.min, tzinfo=timezone.utc),
        datetime.combine(day, time.max, tzinfo=timezone.utc),
    )


def parse_date_range(
    start: Optional[str], end: Optional[str], today: date
) -> Tuple[datetime, datetime]:
    """Turn optional ``start``/``end`` query values into an inclusive UTC range.

    With neither given the range covers all of ``today``. Both must be given
    otherwise, and ``start`` may not be after ``end``.
    """
    if not start and not end:
        return day_range(today)

    if not start or not end:
        raise ValidationError("Both start and end are required for a custom range")

    try:
        start_dt = datetime.strptime(start, DATETIME_LOCAL_FORMAT)
        end_dt = datetime.strptime(end, DATETIME_LOCAL_FORMAT)
    except ValueError as e:
        raise ValidationError(
            f"Dates must use the YYYY-MM-DDTHH:MM format: {e}"
        ) from e

    if start_dt > end_dt:
        raise ValidationError("start must not be after end")

    return start_dt.replace(tzinfo=timezone.utc), end_dt.replace(tzinfo=timezone.utc)
