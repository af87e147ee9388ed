"""Unstructured header text with encoded-word decoding."""

from __future__ import annotations

from typing import Optional

from .stream import MessageStream

_LF = 0x0A
_EQ = ord("=")
_SKIPPED = (0x20, 0x09, 0x0D)


def parse_unstructured(stream: MessageStream) -> Optional[str]:
    """Parse free text, unfolding lines and decoding encoded words."""
    tokens: list[str] = []
    token_start = 0
    token_end = 0
    last_is_encoded = True

    def add_token() -> None:
        nonlocal token_start, last_is_encoded
        if token_start > 0:
            if tokens:
                tokens.append(" ")
            tokens.append(stream.bytes(token_start - 1, token_end).decode("utf-8", "replace"))
            token_start = 0
            last_is_encoded = False

    while (ch := stream.next()) is not None:
        if ch == _LF:
            add_token()
            if not stream.try_next_is_space():
                return "".join(tokens) if tokens else None
            continue
        if ch in _SKIPPED:
            continue
        if ch == _EQ and stream.peek_char("?"):
            stream.checkpoint()
            decoded = stream.decode_rfc2047()
            if decoded is not None:
                add_token()
                if not last_is_encoded:
                    tokens.append(" ")
                tokens.append(decoded)
                last_is_encoded = True
                continue
            stream.restore()

        if token_start == 0:
            token_start = stream.offset()
        token_end = stream.offset()

    return None