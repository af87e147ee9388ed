"""Reading messages out of an mbox mailbox stream."""

from __future__ import annotations

import io
import re
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, Optional, Union

from .dates import DateTime

_FROM = b"From "
_U8_MAX = 0xFF
_U16_MAX = 0xFFFF
_U64_MODULUS = 1 << 64
_UNSIGNED = re.compile(r"\+?[0-9]+")

_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}


class ParseError(Exception):
    """Raised when the underlying stream cannot be read."""


def _parse_unsigned(text: str, maximum: int) -> int:
    """Parse an unsigned integer, giving ``maximum`` when it is malformed or too large."""
    if _UNSIGNED.fullmatch(text) is None:
        return maximum
    value = int(text)
    return value if value <= maximum else maximum


def _parse_month(text: str) -> int:
    if not text.isascii():
        return _U8_MAX
    return _MONTHS.get(text.lower(), _U8_MAX)


def _parse_separator(header: str) -> tuple[int, str]:
    """Read the sender and date of a ``From `` separator line."""
    if not header.startswith("From "):
        return 0, ""
    rest = header[len("From "):]
    if " " not in rest:
        return 0, ""
    sender, date = rest.split(" ", 1)

    year = _U16_MAX
    month = day = hour = minute = second = _U8_MAX

    for pos, part in enumerate(date.split()):
        if pos == 1:
            month = _parse_month(part)
        elif pos == 2:
            day = _parse_unsigned(part, _U8_MAX)
        elif pos == 3:
            for time_pos, piece in enumerate(part.split(":")):
                if time_pos == 0:
                    hour = _parse_unsigned(piece, _U8_MAX)
                elif time_pos == 1:
                    minute = _parse_unsigned(piece, _U8_MAX)
                elif time_pos == 2:
                    second = _parse_unsigned(piece, _U8_MAX)
                else:
                    break
        elif pos == 4:
            year = _parse_unsigned(part, _U16_MAX)

    dt = DateTime(year=year, month=month, day=day, hour=hour, minute=minute, second=second)
    internal_date = dt.to_timestamp() % _U64_MODULUS if dt.is_valid() else 0
    return internal_date, sender.strip()


@dataclass(order=True)
class Message:
    """An mbox message with its sender and delivery date."""

    internal_date: int
    sender: str
    contents: bytes = b""

    @classmethod
    def from_separator(cls, line: bytes) -> "Message":
        """Create an empty message from its ``From `` separator line."""
        try:
            header = line.decode("utf-8")
        except UnicodeDecodeError:
            header = ""
        internal_date, sender = _parse_separator(header)
        return cls(internal_date=internal_date, sender=sender)


@dataclass
class _Pending:
    message: Message
    chunks: list[bytes] = field(default_factory=list)

    def finish(self) -> Message:
        self.message.contents = b"".join(self.chunks)
        return self.message


def _is_quoted_from(line: bytes) -> bool:
    return line.lstrip(b">")[:5] == _FROM


class MessageIterator:
    """Iterate over the messages of an mbox stream.

    Lines quoted as ``>From `` (with any number of ``>``) lose one level of quoting.
    """

    def __init__(self, reader: Union[BinaryIO, bytes, bytearray]) -> None:
        if isinstance(reader, (bytes, bytearray, memoryview)):
            reader = io.BytesIO(bytes(reader))
        self._reader = reader
        self._pending: Optional[_Pending] = None

    def __iter__(self) -> Iterator[Message]:
        return self

    def _readline(self) -> bytes:
        try:
            return self._reader.readline()
        except OSError as err:
            raise ParseError(str(err)) from err

    def __next__(self) -> Message:
        while line := self._readline():
            is_from = line[:5] == _FROM
            if self._pending is not None:
                if is_from:
                    finished = self._pending.finish()
                    self._pending = _Pending(Message.from_separator(line))
                    return finished
                if line[:1] == b">" and _is_quoted_from(line):
                    self._pending.chunks.append(line[1:])
                else:
                    self._pending.chunks.append(line)
            elif is_from:
                self._pending = _Pending(Message.from_separator(line))

        if self._pending is not None:
            finished = self._pending.finish()
            self._pending = None
            return finished
        raise StopIteration