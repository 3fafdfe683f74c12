from datetime import date, datetime, timezone
from decimal import Decimal


def utcnow() -> datetime:
    """Naive UTC now, the representation stored in every datetime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today() -> date:
    return utcnow().date()


def to_naive_utc(value: datetime) -> datetime:
    """Aware datetimes are moved to UTC, naive ones are assumed to be UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_money(value) -> Decimal:
    """Convert a price to a 2-decimal Decimal (floats go through str to avoid binary noise)."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(Decimal("0.01"))
