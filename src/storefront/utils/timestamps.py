from datetime import UTC


def as_utc(value):
    """Treat naive datetimes coming back from storage as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)
