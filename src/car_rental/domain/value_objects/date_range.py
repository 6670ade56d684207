"""Date range value object and the booking overlap predicate."""

from dataclasses import dataclass
from datetime import date

from ..exceptions import ValidationError


@dataclass(frozen=True)
class DateRange:
    """Immutable rental period from check-in to check-out."""

    checkin: date
    checkout: date

    def __post_init__(self) -> None:
        """Validate range bounds."""
        if not isinstance(self.checkin, date) or not isinstance(self.checkout, date):
            raise ValidationError("Invalid date format")
        if self.checkin >= self.checkout:
            raise ValidationError("Check-in date must be before check-out date")

    @classmethod
    def parse(cls, checkin: str, checkout: str) -> "DateRange":
        """Build a range from ISO formatted date strings."""
        try:
            checkin_date = date.fromisoformat(checkin)
            checkout_date = date.fromisoformat(checkout)
        except (TypeError, ValueError) as e:
            raise ValidationError("Invalid date format") from e
        return cls(checkin_date, checkout_date)

    @property
    def days(self) -> int:
        """Number of rental days."""
        return (self.checkout - self.checkin).days

    def contains(self, day: date) -> bool:
        """Check if a day falls inside the range, both bounds included."""
        return self.checkin <= day <= self.checkout

    def overlaps(self, existing: "DateRange") -> bool:
        """Check if an existing booking's range conflicts with this one.

        Bounds are inclusive on both ends, so a booking ending on the day
        another begins counts as a conflict.
        """
        return (
            self.contains(existing.checkin)
            or self.contains(existing.checkout)
            or (existing.checkin <= self.checkin and existing.checkout >= self.checkout)
        )

    def __str__(self) -> str:
        return f"{self.checkin.isoformat()}..{self.checkout.isoformat()}"
