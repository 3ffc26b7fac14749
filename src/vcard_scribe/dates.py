"""Date, time and UTC offset values (ISO 8601 basic and extended forms)."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta, timezone


# ── UTC offsets ───────────────────────────────────────────────────────────────

_OFFSET_RE = re.compile(r"^([-+])?(\d{1,2})(?::?(\d{2}))?$")


@dataclass(frozen=True)
class UtcOffset:
    positive: bool
    hour: int
    minute: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.minute <= 59:
            raise ValueError(f"Minute must be between 0 and 59: {self.minute}")
        if self.hour < 0:
            raise ValueError(f"Hour must not be negative: {self.hour}")

    @classmethod
    def parse(cls, text: str) -> UtcOffset:
        """Parse `+05:30`, `-0530`, `+05` or `Z`; raises ValueError otherwise."""
        text = text.strip()
        if text.upper() == "Z":
            return cls(True, 0, 0)
        m = _OFFSET_RE.match(text)
        if not m:
            raise ValueError(f"Offset string is not in ISO 8601 format: {text}")
        sign, hour, minute = m.groups()
        return cls(sign != "-", int(hour), int(minute or 0))

    @classmethod
    def from_timedelta(cls, delta: timedelta) -> UtcOffset:
        minutes = int(delta.total_seconds()) // 60
        positive = minutes >= 0
        minutes = abs(minutes)
        return cls(positive, minutes // 60, minutes % 60)

    def to_timedelta(self) -> timedelta:
        delta = timedelta(hours=self.hour, minutes=self.minute)
        return delta if self.positive else -delta

    def to_timezone(self) -> timezone:
        return timezone(self.to_timedelta())

    def format(self, extended: bool = False) -> str:
        sign = "+" if self.positive else "-"
        sep = ":" if extended else ""
        return f"{sign}{self.hour:02d}{sep}{self.minute:02d}"

    def __str__(self) -> str:
        return self.format(extended=False)


# ── Full dates and date-times ─────────────────────────────────────────────────

_DATE_RE = re.compile(r"^(\d{4})-?(\d{2})-?(\d{2})$")
_DATETIME_RE = re.compile(
    r"^(\d{4})-?(\d{2})-?(\d{2})"
    r"T(\d{2}):?(\d{2})(?::?(\d{2}))?(?:[.,]\d+)?"
    r"(Z|[-+]\d{2}(?::?\d{2})?)?$",
    re.IGNORECASE,
)


def parse_date(text: str) -> date | datetime:
    """Parse a full date or date-time; raises ValueError otherwise."""
    text = text.strip()
    m = _DATE_RE.match(text)
    if m:
        return date(int(m[1]), int(m[2]), int(m[3]))
    m = _DATETIME_RE.match(text)
    if m:
        tz = None
        if m[7]:
            tz = UTC if m[7].upper() == "Z" else UtcOffset.parse(m[7]).to_timezone()
        return datetime(
            int(m[1]), int(m[2]), int(m[3]),
            int(m[4]), int(m[5]), int(m[6] or 0),
            tzinfo=tz,
        )
    raise ValueError(f"Date string is not in ISO 8601 format: {text}")


def format_date(value: date | datetime, extended: bool = False) -> str:
    if not isinstance(value, datetime):
        return value.strftime("%Y-%m-%d" if extended else "%Y%m%d")
    out = value.strftime("%Y-%m-%dT%H:%M:%S" if extended else "%Y%m%dT%H%M%S")
    offset = value.utcoffset()
    if offset is None:
        return out
    if offset == timedelta(0):
        return out + "Z"
    return out + UtcOffset.from_timedelta(offset).format(extended)


def format_timestamp(value: datetime, extended: bool = False) -> str:
    """A REV-style timestamp, always expressed in UTC when zoned."""
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return format_date(value, extended)


# ── Partial dates (vCard 4.0 reduced accuracy and truncated forms) ────────────

_PARTIAL_DATE_PATTERNS = [
    (re.compile(r"^(\d{4})$"), ("year",)),
    (re.compile(r"^(\d{4})-(\d{2})$"), ("year", "month")),
    (re.compile(r"^--(\d{2})-?(\d{2})$"), ("month", "day")),
    (re.compile(r"^--(\d{2})$"), ("month",)),
    (re.compile(r"^---(\d{2})$"), ("day",)),
    (re.compile(r"^(\d{4})-?(\d{2})-?(\d{2})$"), ("year", "month", "day")),
]
_PARTIAL_TIME_PATTERNS = [
    (re.compile(r"^(\d{2})$"), ("hour",)),
    (re.compile(r"^(\d{2}):?(\d{2})$"), ("hour", "minute")),
    (re.compile(r"^(\d{2}):?(\d{2}):?(\d{2})$"), ("hour", "minute", "second")),
    (re.compile(r"^-(\d{2}):?(\d{2})$"), ("minute", "second")),
    (re.compile(r"^-(\d{2})$"), ("minute",)),
    (re.compile(r"^--(\d{2})$"), ("second",)),
]
_ZONE_RE = re.compile(r"(Z|[-+]\d{2}(?::?\d{2})?)$", re.IGNORECASE)


@dataclass(frozen=True)
class PartialDate:
    """A date and/or time where any component may be missing (`--0412`, `T1020`)."""

    year: int | None = None
    month: int | None = None
    day: int | None = None
    hour: int | None = None
    minute: int | None = None
    second: int | None = None
    offset: UtcOffset | None = None

    def __post_init__(self) -> None:
        for name, low, high in (
            ("month", 1, 12), ("day", 1, 31),
            ("hour", 0, 23), ("minute", 0, 59), ("second", 0, 59),
        ):
            value = getattr(self, name)
            if value is not None and not low <= value <= high:
                raise ValueError(f"{name} out of range: {value}")

    @classmethod
    def parse(cls, text: str) -> PartialDate:
        text = text.strip()
        date_part, sep, time_part = text.partition("T")
        if not sep:
            time_part = ""
        fields: dict[str, object] = {}
        if date_part:
            fields.update(_match_fields(_PARTIAL_DATE_PATTERNS, date_part, text))
        if sep:
            zone = _ZONE_RE.search(time_part)
            # "-30" is a truncated minute, not a zone
            if zone and zone.start() > 0:
                z = zone.group(1)
                fields["offset"] = UtcOffset(True, 0) if z.upper() == "Z" else UtcOffset.parse(z)
                time_part = time_part[: zone.start()]
            fields.update(_match_fields(_PARTIAL_TIME_PATTERNS, time_part, text))
        if not fields:
            raise ValueError(f"Could not parse partial date: {text}")
        return cls(**fields)  # type: ignore[arg-type]

    @property
    def has_date(self) -> bool:
        return any(v is not None for v in (self.year, self.month, self.day))

    @property
    def has_time(self) -> bool:
        return any(v is not None for v in (self.hour, self.minute, self.second))

    def format(self, extended: bool = False) -> str:
        out = ""
        y, mo, d = self.year, self.month, self.day
        dash = "-" if extended else ""
        if y is not None and mo is not None and d is not None:
            out = f"{y:04d}{dash}{mo:02d}{dash}{d:02d}"
        elif y is not None and mo is not None:
            out = f"{y:04d}-{mo:02d}"
        elif y is not None:
            out = f"{y:04d}"
        elif mo is not None and d is not None:
            out = f"--{mo:02d}{dash}{d:02d}"
        elif mo is not None:
            out = f"--{mo:02d}"
        elif d is not None:
            out = f"---{d:02d}"

        if self.has_time:
            colon = ":" if extended else ""
            h, mi, s = self.hour, self.minute, self.second
            out += "T"
            if h is not None:
                out += f"{h:02d}"
                if mi is not None:
                    out += f"{colon}{mi:02d}"
                    if s is not None:
                        out += f"{colon}{s:02d}"
            elif mi is not None:
                out += f"-{mi:02d}"
                if s is not None:
                    out += f"{colon}{s:02d}"
            else:
                out += f"--{s:02d}"
            if self.offset is not None:
                if self.offset.hour == 0 and self.offset.minute == 0:
                    out += "Z"
                else:
                    out += self.offset.format(extended)
        return out

    def __str__(self) -> str:
        return self.format()


def _match_fields(patterns, text: str, original: str) -> dict[str, int]:
    for regex, names in patterns:
        m = regex.match(text)
        if m:
            return {name: int(value) for name, value in zip(names, m.groups())}
    raise ValueError(f"Could not parse partial date: {original}")
