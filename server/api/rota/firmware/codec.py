"""
Build timestamps as compiled into firmware (`__DATE__` / `__TIME__` style text).

The text has no delimiters worth trusting, so each layout pins every field to a
character offset. A negative offset counts back from the end of the text.

Day rule: if the character at the day offset is a space the day is the single
digit after it ("Jan  5"), otherwise it is the two digits at the offset ("Jan 15").
"""
from dataclasses import dataclass
from datetime import datetime, timezone

from rota.errors import MalformedTimestamp

MONTHS = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
    "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}
MONTH_NAMES = {v: k for k, v in MONTHS.items()}


@dataclass(frozen=True)
class TimestampLayout:
    name: str
    month: int
    day: int
    year: int
    hour: int
    minute: int
    second: int
    template: str


# Version header value, the part before "?": "Jan  5 2021 12:00:00" or "Jan  5 2021, 12:00:00"
REQUEST_LAYOUT = TimestampLayout(
    name="request",
    month=0, day=4, year=7,
    hour=-8, minute=-5, second=-2,
    template="{month} {day:>2} {year:04d} {hour:02d}:{minute:02d}:{second:02d}",
)

# <target>.ct marker, lines concatenated: "Jan  5 2021"time "12:00:00"
ARTIFACT_LAYOUT = TimestampLayout(
    name="artifact",
    month=1, day=5, year=8,
    hour=19, minute=22, second=25,
    template='"{month} {day:>2} {year:04d}"\ntime "{hour:02d}:{minute:02d}:{second:02d}"\n',
)


def _slice(text: str, offset: int, width: int, field: str) -> str:
    start = offset if offset >= 0 else len(text) + offset
    if start < 0 or start + width > len(text):
        raise MalformedTimestamp(f"{field} out of range in {text!r}")
    return text[start:start + width]

def _number(text: str, offset: int, width: int, field: str) -> int:
    s = _slice(text, offset, width, field)
    if not (s.isascii() and s.isdigit()):
        raise MalformedTimestamp(f"bad {field} {s!r} in {text!r}")
    return int(s)

def decode(text: str, layout: TimestampLayout) -> datetime:
    """Parse `text` laid out as `layout` into an aware UTC datetime."""
    name = _slice(text, layout.month, 3, "month")
    if name not in MONTHS:
        raise MalformedTimestamp(f"bad month {name!r} in {text!r}")
    if _slice(text, layout.day, 1, "day") == " ":
        day = _number(text, layout.day + 1, 1, "day")
    else:
        day = _number(text, layout.day, 2, "day")
    try:
        return datetime(
            _number(text, layout.year, 4, "year"),
            MONTHS[name],
            day,
            _number(text, layout.hour, 2, "hour"),
            _number(text, layout.minute, 2, "minute"),
            _number(text, layout.second, 2, "second"),
            tzinfo=timezone.utc,
        )
    except ValueError as e:
        raise MalformedTimestamp(f"{e} in {text!r}") from e

def encode(ts: datetime, layout: TimestampLayout) -> str:
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    return layout.template.format(
        month=MONTH_NAMES[ts.month], day=ts.day, year=ts.year,
        hour=ts.hour, minute=ts.minute, second=ts.second,
    )

def decode_marker(content: str) -> datetime:
    # marker lines are joined with no separator before the offsets apply
    return decode("".join(content.splitlines()), ARTIFACT_LAYOUT)
