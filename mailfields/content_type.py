"""Content-Type and Content-Disposition header fields, including RFC 2231 parameters."""

from __future__ import annotations

import re
from enum import Enum, auto
from typing import Optional

from .stream import MessageStream
from .types import ContentType

_LF = 0x0A
_CR = 0x0D
_SPACE = 0x20
_TAB = 0x09
_SLASH = ord("/")
_SEMICOLON = ord(";")
_STAR = ord("*")
_EQ = ord("=")
_QUOTE = ord('"')
_BACKSLASH = ord("\\")
_APOSTROPHE = ord("'")
_LPAREN = ord("(")
_RPAREN = ord(")")

_U32_MAX = 0xFFFFFFFF
_UNSIGNED = re.compile(rb"\+?[0-9]+")
_HEX_DIGITS = b"0123456789abcdefABCDEF"


class _State(Enum):
    TYPE = auto()
    SUB_TYPE = auto()
    ATTRIBUTE_NAME = auto()
    ATTRIBUTE_VALUE = auto()
    ATTRIBUTE_QUOTED_VALUE = auto()
    COMMENT = auto()


_NAME_STATES = (_State.TYPE, _State.SUB_TYPE, _State.ATTRIBUTE_NAME)
_VALUE_STATES = (_State.ATTRIBUTE_VALUE, _State.ATTRIBUTE_QUOTED_VALUE)


def _decode_hex(data: bytes) -> Optional[bytes]:
    """Decode %XX escapes, returning None when an escape is malformed."""
    result = bytearray()
    pos = 0
    while pos < len(data):
        ch = data[pos]
        if ch == 0x25:  # '%'
            pair = data[pos + 1:pos + 3]
            if len(pair) != 2 or any(c not in _HEX_DIGITS for c in pair):
                return None
            result.append(int(pair, 16))
            pos += 3
        else:
            result.append(ch)
            pos += 1
    return bytes(result)


def _decode_charset(data: bytes, charset: Optional[str]) -> str:
    if charset:
        try:
            return data.decode(charset.strip(), "replace")
        except (LookupError, TypeError, ValueError):
            pass
    return data.decode("utf-8", "replace")


def _parse_position(token: bytes) -> int:
    if _UNSIGNED.fullmatch(token) is None:
        return 0
    value = int(token)
    return value if value <= _U32_MAX else 0


class _ContentTypeParser:
    def __init__(self, stream: MessageStream) -> None:
        self.stream = stream
        self.state = _State.TYPE
        self.state_stack: list[_State] = []

        self.c_type: Optional[str] = None
        self.c_subtype: Optional[str] = None

        self.attr_name: Optional[str] = None
        self.attr_charset: Optional[str] = None
        self.attr_position = 0

        self.values: list[str] = []
        self.attributes: list[tuple[str, str]] = []
        self.continuations: Optional[list[tuple[str, int, str]]] = None

        self.token_start = 0
        self.token_end = 0

        self.is_continuation = False
        self.is_encoded_attribute = False
        self.is_escaped = False
        self.remove_crlf = False
        self.is_lower_case = True
        self.is_token_start = True

    def _token(self) -> bytes:
        return self.stream.bytes(self.token_start - 1, self.token_end)

    def reset_parser(self) -> None:
        self.token_start = 0
        self.is_token_start = True

    def add_attribute(self) -> bool:
        if self.token_start == 0:
            return False
        raw = self._token()
        if not self.is_lower_case:
            raw = raw.lower()
            self.is_lower_case = True
        attr = raw.decode("utf-8", "replace")

        if self.state is _State.ATTRIBUTE_NAME:
            self.attr_name = attr
        elif self.state is _State.TYPE:
            self.c_type = attr
        elif self.state is _State.SUB_TYPE:
            self.c_subtype = attr
        else:
            raise AssertionError(f"unexpected parser state {self.state}")

        self.reset_parser()
        return True

    def add_attribute_parameter(self) -> None:
        if self.token_start == 0:
            return
        part = self._token().decode("utf-8", "replace")
        if self.attr_charset is None:
            self.attr_charset = part
        else:
            attr_name = (self.attr_name if self.attr_name is not None else "unknown") + "-language"
            if not any(name == attr_name for name, _ in self.attributes):
                self.attributes.append((attr_name, part))
            else:
                self.values.append("'")
                self.values.append(part)
        self.reset_parser()

    def add_partial_value(self, to_cur_pos: bool) -> None:
        if self.token_start == 0:
            return
        in_quote = self.state is _State.ATTRIBUTE_QUOTED_VALUE
        end = self.stream.offset() - 1 if in_quote and to_cur_pos else self.token_end
        self.values.append(
            self.stream.bytes(self.token_start - 1, end).decode("utf-8", "replace")
        )
        if not in_quote:
            self.values.append(" ")
        self.reset_parser()

    def add_value(self) -> None:
        if self.attr_name is None:
            return

        has_values = bool(self.values)
        value: Optional[str]
        if self.token_start > 0:
            raw = self._token()
            if self.remove_crlf:
                self.remove_crlf = False
                raw = raw.replace(b"\r", b"").replace(b"\n", b"")
            value = raw.decode("utf-8", "replace")
        else:
            if not has_values:
                return
            value = None

        attr_name = self.attr_name
        self.attr_name = None

        if not self.is_continuation:
            if has_values:
                if value is not None:
                    self.values.append(value)
                combined = "".join(self.values)
            else:
                combined = value
            self.attributes.append((attr_name, combined))
        else:
            if value is not None:
                combined = "".join(self.values) + value if has_values else value
            else:
                combined = "".join(self.values)

            if self.is_encoded_attribute:
                decoded = _decode_hex(combined.encode("utf-8"))
                if decoded is not None:
                    combined = _decode_charset(decoded, self.attr_charset)
                self.is_encoded_attribute = False

            if self.attr_position > 0:
                continuation = (attr_name, self.attr_position, combined)
                if self.continuations is None:
                    self.continuations = [continuation]
                else:
                    self.continuations.append(continuation)
                self.attr_position = 0
            else:
                self.attributes.append((attr_name, combined))
            self.is_continuation = False
            self.attr_charset = None

        if has_values:
            self.values.clear()
        self.reset_parser()

    def add_attr_position(self) -> bool:
        if self.token_start == 0:
            return False
        self.attr_position = _parse_position(self._token())
        self.reset_parser()
        return True

    def merge_continuations(self) -> None:
        continuations = sorted(self.continuations or ())
        self.continuations = []
        for key, _, value in continuations:
            for index, (name, old_value) in enumerate(self.attributes):
                if name == key:
                    self.attributes[index] = (name, old_value + value)
                    break
            else:
                self.attributes.append((key, value))

    def finish(self) -> Optional[ContentType]:
        if self.continuations is not None:
            self.merge_continuations()
        if self.c_type is None:
            return None
        return ContentType(
            c_type=self.c_type,
            c_subtype=self.c_subtype,
            attributes=self.attributes or None,
        )

    def mark_token_char(self) -> None:
        self.is_escaped = False
        self.is_token_start = False
        if self.token_start == 0:
            self.token_start = self.stream.offset()
            self.token_end = self.token_start
        else:
            self.token_end = self.stream.offset()

    def run(self) -> Optional[ContentType]:
        stream = self.stream
        while (ch := stream.next()) is not None:
            if ch == _LF:
                next_is_space = stream.peek_next_is_space()
                if self.state in _NAME_STATES:
                    self.add_attribute()
                elif self.state is _State.ATTRIBUTE_VALUE:
                    self.add_value()
                elif self.state is _State.ATTRIBUTE_QUOTED_VALUE:
                    if next_is_space:
                        self.remove_crlf = True
                        continue
                    self.add_value()

                if not next_is_space:
                    return self.finish()
                self.state = _State.ATTRIBUTE_NAME
                stream.next()
                self.is_token_start = True
                continue

            if self._handle(ch):
                continue
            self.mark_token_char()

        return None

    def _handle(self, ch: int) -> bool:
        """Process a byte other than a line feed; True means it is not token text."""
        stream = self.stream
        state = self.state

        if ch in (_SPACE, _TAB):
            self.is_token_start = True
            if state is _State.ATTRIBUTE_QUOTED_VALUE:
                if self.token_start == 0:
                    self.token_start = stream.offset()
                    self.token_end = self.token_start
                else:
                    self.token_end = stream.offset()
            return True
        if 0x41 <= ch <= 0x5A:
            if self.is_lower_case and state in _NAME_STATES:
                self.is_lower_case = False
            return False
        if ch == _SLASH and state is _State.TYPE:
            self.add_attribute()
            self.state = _State.SUB_TYPE
            return True
        if ch == _SEMICOLON:
            if state in _NAME_STATES:
                self.add_attribute()
                self.state = _State.ATTRIBUTE_NAME
                return True
            if state is _State.ATTRIBUTE_VALUE:
                if not self.is_escaped:
                    self.add_value()
                    self.state = _State.ATTRIBUTE_NAME
                else:
                    self.is_escaped = False
                return True
            return False
        if ch == _STAR and state is _State.ATTRIBUTE_NAME:
            if not self.is_continuation:
                self.is_continuation = self.add_attribute()
            elif not self.is_encoded_attribute:
                self.add_attr_position()
                self.is_encoded_attribute = True
            else:
                self.reset_parser()
            return True
        if ch == _EQ:
            if state is _State.ATTRIBUTE_NAME:
                if not self.is_continuation:
                    if not self.add_attribute():
                        return True
                elif not self.is_encoded_attribute:
                    # A '*' directly before '=' marks an encoded value.
                    self.is_encoded_attribute = not self.add_attr_position()
                else:
                    self.reset_parser()
                self.state = _State.ATTRIBUTE_VALUE
                return True
            if state in _VALUE_STATES and self.is_token_start and stream.peek_char("?"):
                stream.checkpoint()
                decoded = stream.decode_rfc2047()
                if decoded is not None:
                    self.add_partial_value(False)
                    self.values.append(decoded)
                    return True
                stream.restore()
            return False
        if ch == _QUOTE:
            if state is _State.ATTRIBUTE_VALUE:
                self.is_token_start = True
                self.state = _State.ATTRIBUTE_QUOTED_VALUE
                return True
            if state is _State.ATTRIBUTE_QUOTED_VALUE:
                if not self.is_escaped:
                    self.add_value()
                    self.state = _State.ATTRIBUTE_NAME
                    return True
                self.is_escaped = False
                return False
            return True
        if ch == _BACKSLASH:
            if state in _VALUE_STATES:
                if not self.is_escaped:
                    self.add_partial_value(True)
                    self.is_escaped = True
                    return True
                self.is_escaped = False
                return False
            if state is _State.COMMENT:
                self.is_escaped = not self.is_escaped
                return False
            return True
        if (
            ch == _APOSTROPHE
            and self.is_encoded_attribute
            and not self.is_escaped
            and state in _VALUE_STATES
        ):
            self.add_attribute_parameter()
            return True
        if ch == _LPAREN and state is not _State.ATTRIBUTE_QUOTED_VALUE:
            if not self.is_escaped:
                if state in _NAME_STATES:
                    self.add_attribute()
                elif state is _State.ATTRIBUTE_VALUE:
                    self.add_value()
                self.state_stack.append(self.state)
                self.state = _State.COMMENT
            else:
                self.is_escaped = False
            return True
        if ch == _RPAREN and state is _State.COMMENT:
            if not self.is_escaped:
                self.state = self.state_stack.pop()
                self.reset_parser()
            else:
                self.is_escaped = False
            return True
        if ch == _CR:
            return True
        return False


def parse_content_type(stream: MessageStream) -> Optional[ContentType]:
    """Parse a Content-Type or Content-Disposition value, or return None.

    Type and subtype and parameter names are lower-cased; RFC 2231 continuations
    and encoded parameters are merged and decoded.
    """
    return _ContentTypeParser(stream).run()