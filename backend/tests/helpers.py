from datetime import datetime, timezone

USER_ID = 1
OTHER_USER_ID = 2


def utc(year, month, day, hour=0, minute=0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
