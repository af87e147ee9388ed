"""Byte cursor over a raw message used by the field parsers."""

from __future__ import annotations

import binascii
import re
from typing import Optional, Union

_SPACE = 0x20
_TAB = 0x09

_ENCODED_WORD = re.compile(
    rb"\?([^?\s*]+)(?:\*[^?\s]*)?\?([bBqQ])\?([^\n]*?)\?="
)


def _as_byte(ch: Union[int, str, bytes]) -> int:
    if isinstance(ch, int):
        return ch
    return ord(ch)


class MessageStream:
    """A forward-only cursor over message bytes.

    ``offset()`` is the position just past the last byte returned by ``next()``.
    """

    def __init__(self, data: Union[bytes, str]) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.data = bytes(data)
        self._pos = 0
        self._checkpoint = 0

    def next(self) -> Optional[int]:
        """Return the next byte and advance, or None at the end."""
        if self._pos < len(self.data):
            ch = self.data[self._pos]
            self._pos += 1
            return ch
        return None

    def peek(self) -> Optional[int]:
        """Return the next byte without advancing."""
        if self._pos < len(self.data):
            return self.data[self._pos]
        return None

    def offset(self) -> int:
        return self._pos

    def is_eof(self) -> bool:
        return self._pos >= len(self.data)

    def bytes(self, start: int, end: int) -> bytes:
        return self.data[start:end]

    def checkpoint(self) -> None:
        self._checkpoint = self._pos

    def restore(self) -> None:
        self._pos = self._checkpoint

    def peek_char(self, ch: Union[int, str]) -> bool:
        return self.peek() == _as_byte(ch)

    def try_next_is_space(self) -> bool:
        """Consume the next byte if it is a space or tab."""
        if self.peek() in (_SPACE, _TAB):
            self._pos += 1
            return True
        return False

    def peek_next_is_space(self) -> bool:
        return self.peek() in (_SPACE, _TAB)

    def try_skip_char(self, ch: Union[int, str]) -> bool:
        if self.peek_char(ch):
            self._pos += 1
            return True
        return False

    def decode_rfc2047(self) -> Optional[str]:
        """Decode an encoded word whose leading '=' has just been consumed.

        On success the cursor moves past the closing '?='; otherwise it stays put
        and None is returned.
        """
        match = _ENCODED_WORD.match(self.data, self._pos)
        if match is None:
            return None
        charset = match.group(1).decode("ascii", "replace")
        encoding = match.group(2).lower()
        text = match.group(3)
        try:
            if encoding == b"b":
                compact = b"".join(text.split())
                compact += b"=" * (-len(compact) % 4)
                raw = binascii.a2b_base64(compact)
            else:
                raw = binascii.a2b_qp(text, header=True)
        except binascii.Error:
            return None
        self._pos = match.end()
        try:
            return raw.decode(charset, "replace")
        except LookupError:
            return raw.decode("utf-8", "replace")