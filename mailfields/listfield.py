"""Comma separated header fields such as Keywords and Content-Language."""

from __future__ import annotations

from typing import Optional, Union

from .stream import MessageStream

_LF = 0x0A
_CR = 0x0D
_EQ = ord("=")
_COMMA = ord(",")
_BLANKS = (0x20, 0x09)


def parse_comma_separated(stream: MessageStream) -> Union[None, str, list[str]]:
    """Parse a comma separated list.

    Returns a single string for one item, a list for several, or None.
    """
    tokens: list[str] = []
    items: list[str] = []
    token_start = 0
    token_end = 0
    is_token_start = True

    def add_token(add_space: bool) -> None:
        nonlocal token_start, is_token_start
        if token_start > 0:
            if tokens:
                tokens.append(" ")
            tokens.append(stream.bytes(token_start - 1, token_end).decode("utf-8", "replace"))
            if add_space:
                tokens.append(" ")
            token_start = 0
            is_token_start = True

    def flush_tokens() -> None:
        if tokens:
            items.append("".join(tokens))
            tokens.clear()

    while (ch := stream.next()) is not None:
        if ch == _LF:
            add_token(False)
            if stream.try_next_is_space():
                continue
            flush_tokens()
            if len(items) == 1:
                return items[0]
            return items or None
        if ch in _BLANKS:
            is_token_start = True
            continue
        if ch == _EQ and is_token_start and stream.peek_char("?"):
            stream.checkpoint()
            decoded = stream.decode_rfc2047()
            if decoded is not None:
                add_token(True)
                tokens.append(decoded)
                continue
            stream.restore()
        elif ch == _COMMA:
            add_token(False)
            flush_tokens()
            continue
        elif ch == _CR:
            continue

        is_token_start = False
        if token_start == 0:
            token_start = stream.offset()
        token_end = stream.offset()

    return None