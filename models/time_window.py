"""Data model for the time window of a scheduled class."""

from dataclasses import dataclass
from datetime import date, datetime, time

from config.defaults import DATE_FORMAT, TIME_FORMAT


def parse_date(text: str) -> date:
    """Parses "YYYY-MM-DD". Raises ValueError on anything else."""
    return datetime.strptime(text.strip(), DATE_FORMAT).date()


def parse_time(text: str) -> time:
    """Parses "HH:MM" (24h). Raises ValueError on anything else."""
    return datetime.strptime(text.strip(), TIME_FORMAT).time()


@dataclass(frozen=True)
class TimeWindow:
    """Active interval of a class: [date + start, date + end).

    Immutable (frozen=True) so it can be compared and hashed.
    """

    class_date: date
    start: time
    end: time

    @classmethod
    def parse(cls, class_date: str, start_time: str, end_time: str) -> "TimeWindow":
        """Builds a window from the stored text columns.

        Raises ValueError if a part does not parse or the end is not after the start.
        """
        window = cls.read(class_date, start_time, end_time)
        if window.end <= window.start:
            raise ValueError(
                f"End time {end_time} must be after start time {start_time}"
            )
        return window

    @classmethod
    def read(cls, class_date: str, start_time: str, end_time: str) -> "TimeWindow":
        """Parses stored columns without the ordering check.

        Legacy rows may end before they start; such a window still expires.
        """
        return cls(parse_date(class_date), parse_time(start_time), parse_time(end_time))

    @property
    def start_at(self) -> datetime:
        return datetime.combine(self.class_date, self.start)

    @property
    def end_at(self) -> datetime:
        return datetime.combine(self.class_date, self.end)

    def is_expired(self, now: datetime) -> bool:
        """True once the end instant lies strictly before ``now``."""
        return self.end_at < now

    def __str__(self) -> str:
        return (
            f"{self.class_date.strftime(DATE_FORMAT)} "
            f"{self.start.strftime(TIME_FORMAT)}–{self.end.strftime(TIME_FORMAT)}"
        )
