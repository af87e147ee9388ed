"""Date-time values and the RFC 5322 date field parser."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from .stream import MessageStream

DOW = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
MONTH = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Per-letter weights whose sums over the 2nd and 3rd letters of a month
# abbreviation index MONTH_MAP. Letters not listed weigh 31.
_MONTH_HASH = {
    "a": 0, "b": 14, "c": 4, "e": 10, "g": 14, "l": 4, "n": 10, "o": 15,
    "p": 15, "r": 5, "t": 0, "u": 5, "v": 15, "y": 0,
}

MONTH_MAP = (
    5, 0, 0, 0, 10, 3, 0, 0, 0, 7, 1, 0, 0, 0, 12, 6, 0, 0, 0, 8, 4, 0, 0, 0, 2, 9, 0, 0, 0, 0, 11,
)

_LF = 0x0A
_DATE_PART_SIZES = (2, 2, 4, 2, 2, 2, 4)  # day, month, year, hour, minute, second, tz
_RFC3339_PART_SIZES = (4, 2, 2, 2, 2, 2, 2, 2)


def _tdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def _trem(a: int, b: int) -> int:
    """Remainder carrying the sign of the dividend."""
    return a - b * _tdiv(a, b)


@dataclass
class DateTime:
    """A calendar date and time with a fixed UTC offset."""

    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int
    tz_before_gmt: bool = False
    tz_hour: int = 0
    tz_minute: int = 0

    @staticmethod
    def parse_rfc822(value: str) -> Optional["DateTime"]:
        """Parse an RFC 822 date, returning None when it cannot be read."""
        return parse_date(MessageStream(value))

    @staticmethod
    def parse_rfc3339(value: str) -> Optional["DateTime"]:
        """Parse an RFC 3339 date, returning None when it is malformed."""
        pos = 0
        parts = [0] * 8
        sizes = list(_RFC3339_PART_SIZES)
        skip_digits = False
        is_plus = True

        for ch in value:
            if "0" <= ch <= "9" and not skip_digits:
                if sizes[pos] > 0:
                    sizes[pos] -= 1
                    parts[pos] += (ord(ch) - 0x30) * 10 ** sizes[pos]
                else:
                    return None
            elif ch == "-":
                if pos <= 1:
                    pos += 1
                elif pos == 5:
                    pos += 1
                    is_plus = False
                    skip_digits = False
                else:
                    return None
            elif ch == "T":
                if pos == 2:
                    pos += 1
                else:
                    return None
            elif ch == ":":
                if pos in (3, 4, 6):
                    pos += 1
                else:
                    return None
            elif ch == "+":
                if pos == 5:
                    pos += 1
                    skip_digits = False
                else:
                    return None
            elif ch == ".":
                if pos == 5:
                    skip_digits = True
                else:
                    return None

        if pos < 5:
            return None
        return DateTime(
            year=parts[0] & 0xFFFF,
            month=parts[1] & 0xFF,
            day=parts[2] & 0xFF,
            hour=parts[3] & 0xFF,
            minute=parts[4] & 0xFF,
            second=parts[5] & 0xFF,
            tz_hour=parts[6] & 0xFF,
            tz_minute=parts[7] & 0xFF,
            tz_before_gmt=not is_plus,
        )

    @staticmethod
    def from_timestamp(timestamp: int) -> "DateTime":
        """Build a UTC date-time from seconds since the Unix epoch."""
        z = _tdiv(timestamp, 86400) + 719468
        seconds = _trem(timestamp, 86400)
        era = _tdiv(z if z >= 0 else z - 146096, 146097)
        doe = z - era * 146097
        yoe = (doe - doe // 1460 + doe // 36524 - doe // 146096) // 365
        y = yoe + era * 400
        doy = doe - (365 * yoe + yoe // 4 - yoe // 100)
        mp = (5 * doy + 2) // 153
        d = doy - (153 * mp + 2) // 5 + 1
        m = mp + 3 if mp < 10 else mp - 9
        h = _tdiv(seconds, 3600)
        mn = _trem(_tdiv(seconds, 60), 60)
        s = _trem(seconds, 60)
        return DateTime(
            year=(y + (1 if m <= 2 else 0)) & 0xFFFF,
            month=m & 0xFF,
            day=d & 0xFF,
            hour=h & 0xFF,
            minute=mn & 0xFF,
            second=s & 0xFF,
        )

    def _sign(self) -> str:
        if self.tz_before_gmt and (self.tz_hour > 0 or self.tz_minute > 0):
            return "-"
        return "+"

    def to_rfc822(self) -> str:
        """Format as an RFC 822 date."""
        month_index = max(self.month - 1, 0)
        month = MONTH[month_index] if month_index < len(MONTH) else ""
        return (
            f"{DOW[self.day_of_week()]}, {self.day} {month} {self.year:04} "
            f"{self.hour:02}:{self.minute:02}:{self.second:02} "
            f"{self._sign()}{self.tz_hour:02}{self.tz_minute:02}"
        )

    def to_rfc3339(self) -> str:
        """Format as an RFC 3339 date."""
        base = (
            f"{self.year:04}-{self.month:02}-{self.day:02}"
            f"T{self.hour:02}:{self.minute:02}:{self.second:02}"
        )
        if self.tz_hour != 0 or self.tz_minute != 0:
            return f"{base}{self._sign()}{self.tz_hour:02}:{self.tz_minute:02}"
        return f"{base}Z"

    def is_valid(self) -> bool:
        return (
            0 <= self.tz_hour <= 23
            and 1900 <= self.year <= 3000
            and 0 <= self.tz_minute <= 59
            and 1 <= self.month <= 12
            and 1 <= self.day <= 31
            and 0 <= self.hour <= 23
            and 0 <= self.minute <= 59
            and 0 <= self.second <= 59
        )

    def to_timestamp(self) -> int:
        """Seconds since the Unix epoch, in UTC."""
        offset = self.tz_hour * 3600 + self.tz_minute * 60
        return self.to_timestamp_local() + (offset if self.tz_before_gmt else -offset)

    def to_timestamp_local(self) -> int:
        """Seconds since the Unix epoch, ignoring the UTC offset."""
        month = self.month
        if month < 3:
            carry, m_adj = 1, month + 9
        else:
            carry, m_adj = 0, month - 3
        y_adj = self.year + 4800 - carry
        month_days = (m_adj * 62719 + 769) // 2048
        leap_days = _tdiv(y_adj, 4) - _tdiv(y_adj, 100) + _tdiv(y_adj, 400)
        return (
            (y_adj * 365 + leap_days + month_days + (self.day - 1) - 2472632) * 86400
            + self.hour * 3600
            + self.minute * 60
            + self.second
        )

    def day_of_week(self) -> int:
        """Day of the week, 0 for Sunday through 6 for Saturday."""
        return (self.to_timestamp_local() // 86400 + 4) % 7

    def julian_day(self) -> int:
        day = self.day
        if self.month > 2:
            month, year = self.month - 3, self.year
        else:
            month, year = self.month + 9, self.year - 1
        c = _tdiv(year, 100)
        return (
            _tdiv(c * 146097, 4)
            + _tdiv((year - c * 100) * 1461, 4)
            + _tdiv(month * 153 + 2, 5)
            + day
            + 1721119
        )

    def to_timezone(self, tz: int) -> "DateTime":
        """Return the same instant expressed at an offset of ``tz`` seconds."""
        dt = DateTime.from_timestamp(self.to_timestamp() + tz)
        magnitude = abs(tz)
        return replace(
            dt,
            tz_before_gmt=tz < 0,
            tz_hour=(magnitude // 3600) & 0xFF,
            tz_minute=(magnitude % 3600) & 0xFF,
        )

    def __lt__(self, other: "DateTime") -> bool:
        return self.to_timestamp() < other.to_timestamp()

    def __le__(self, other: "DateTime") -> bool:
        return self.to_timestamp() <= other.to_timestamp()

    def __gt__(self, other: "DateTime") -> bool:
        return self.to_timestamp() > other.to_timestamp()

    def __ge__(self, other: "DateTime") -> bool:
        return self.to_timestamp() >= other.to_timestamp()

    def __str__(self) -> str:
        return self.to_rfc3339()


def parse_date(stream: MessageStream) -> Optional[DateTime]:
    """Parse an RFC 5322 date field value, or return None."""
    pos = 0
    parts = [0] * 7
    sizes = list(_DATE_PART_SIZES)
    month_hash = 0
    month_pos = 0
    is_plus = True
    is_new_token = True
    ignore = True
    comment_count = 0

    while (ch := stream.next()) is not None:
        next_part = False

        if ch == _LF:
            if not stream.try_next_is_space():
                break
            if not is_new_token and not ignore and comment_count == 0:
                next_part = True
            else:
                continue
        elif comment_count > 0:
            if ch == 0x29:  # ')'
                comment_count -= 1
            elif ch == 0x28:  # '('
                comment_count += 1
            elif ch == 0x5C:  # '\\'
                stream.try_skip_char(")")
            continue
        elif 0x30 <= ch <= 0x39:
            if pos < 7 and sizes[pos] > 0:
                sizes[pos] -= 1
                parts[pos] += (ch - 0x30) * 10 ** sizes[pos]
                ignore = False
            is_new_token = False
        elif ch == 0x3A:  # ':'
            if not is_new_token and not ignore and pos in (3, 4):
                next_part = True
        elif ch == 0x2B:  # '+'
            pos = 6
        elif ch == 0x2D:  # '-'
            is_plus = False
            pos = 6
        elif ch in (0x20, 0x09):
            if not is_new_token and not ignore:
                next_part = True
        elif 0x41 <= ch <= 0x5A or 0x61 <= ch <= 0x7A:
            if pos == 1:
                if 1 <= month_pos <= 2:
                    month_hash += _MONTH_HASH.get(chr(ch).lower(), 31)
                month_pos += 1
            is_new_token = False
        elif ch == 0x28:  # '('
            comment_count += 1
            is_new_token = True
            continue
        elif ch == 0x3B:  # ';' may start the date of a Received field
            pos = 0
            parts = [0] * 7
            sizes = list(_DATE_PART_SIZES)
            month_hash = 0
            month_pos = 0
            is_plus = True
            is_new_token = True
            ignore = True
            continue

        if next_part:
            if pos < 7 and sizes[pos] > 0:
                parts[pos] //= 10 ** sizes[pos]
            pos += 1
            is_new_token = True

    if pos < 6:
        return None

    year = parts[2] + 1900 if 1 <= parts[2] <= 99 else parts[2]
    if month_pos == 3 and month_hash <= 30:
        month = MONTH_MAP[month_hash]
    else:
        month = parts[1] & 0xFF
    return DateTime(
        year=year & 0xFFFF,
        month=month,
        day=parts[0] & 0xFF,
        hour=parts[3] & 0xFF,
        minute=parts[4] & 0xFF,
        second=parts[5] & 0xFF,
        tz_hour=(parts[6] // 100) & 0xFF,
        tz_minute=(parts[6] % 100) & 0xFF,
        tz_before_gmt=not is_plus,
    )