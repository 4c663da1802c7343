"""
Billing periods - one calendar month identified by (month, year)
"""
import calendar
import datetime
from dataclasses import dataclass

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


@dataclass(frozen=True, order=True)
class Period:
    # Field order matters: ordering compares year first, then month
    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be between 1 and 12, got {self.month}")

    @classmethod
    def current(cls, today: datetime.date | None = None) -> "Period":
        today = today or datetime.date.today()
        return cls(year=today.year, month=today.month)

    @classmethod
    def of(cls, month: int, year: int) -> "Period":
        return cls(year=year, month=month)

    def previous(self) -> "Period":
        if self.month == 1:
            return Period(year=self.year - 1, month=12)
        return Period(year=self.year, month=self.month - 1)

    def next(self) -> "Period":
        if self.month == 12:
            return Period(year=self.year + 1, month=1)
        return Period(year=self.year, month=self.month + 1)

    def is_before(self, other: "Period") -> bool:
        return self < other

    def due_date(self, day: int = 12) -> datetime.date:
        return datetime.date(self.year, self.month, day)

    def last_moment(self) -> datetime.datetime:
        last_day = calendar.monthrange(self.year, self.month)[1]
        return datetime.datetime(self.year, self.month, last_day, 23, 59, 59, 999999)

    @property
    def month_name(self) -> str:
        return MONTH_NAMES[self.month - 1]

    @property
    def label(self) -> str:
        return f"{self.month_name} {self.year}"

    def __str__(self) -> str:
        return f"{self.year}-{self.month:02d}"
