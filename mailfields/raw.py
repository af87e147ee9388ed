"""Raw header values, kept verbatim apart from surrounding whitespace."""

from __future__ import annotations

from typing import Optional

from .stream import MessageStream

_LF = 0x0A
_SKIPPED = (0x20, 0x09, 0x0D)


def parse_raw(stream: MessageStream) -> Optional[str]:
    """Return the unfolded-as-is value up to the end of the header, or None."""
    token_start = 0
    token_end = 0

    while (ch := stream.next()) is not None:
        if ch == _LF:
            if not stream.try_next_is_space():
                if token_start > 0:
                    return stream.bytes(token_start - 1, token_end).decode("utf-8", "replace")
                return None
            continue
        if ch in _SKIPPED:
            continue

        if token_start == 0:
            token_start = stream.offset()
        token_end = stream.offset()

    return None


def parse_and_ignore(stream: MessageStream) -> None:
    """Skip the rest of the current header, including folded lines."""
    while (ch := stream.next()) is not None:
        if ch == _LF and not stream.try_next_is_space():
            break