"""Message-ID style header values."""

from __future__ import annotations

from typing import Optional, Union

from .stream import MessageStream

_LF = 0x0A
_LT = ord("<")
_GT = ord(">")
_SKIPPED = (0x20, 0x09, 0x0D)


def parse_id(stream: MessageStream) -> Union[None, str, list[str]]:
    """Parse angle-bracketed ids.

    Returns a single id, a list of ids, or None. Text outside brackets is
    returned as-is when no bracketed id is present.
    """
    token_start = 0
    token_end = 0
    invalid_start = 0
    invalid_end = 0
    is_id_part = False
    ids: list[str] = []

    while (ch := stream.next()) is not None:
        if ch == _LF:
            if stream.try_next_is_space():
                continue
            if len(ids) == 1:
                return ids[0]
            if not ids:
                if invalid_start > 0:
                    return stream.bytes(invalid_start - 1, invalid_end).decode("utf-8", "replace")
                return None
            return ids
        if ch == _LT:
            is_id_part = True
            continue
        if ch == _GT:
            is_id_part = False
            if token_start > 0:
                ids.append(stream.bytes(token_start - 1, token_end).decode("utf-8", "replace"))
                token_start = 0
            else:
                continue
        elif ch in _SKIPPED:
            continue

        if is_id_part:
            if token_start == 0:
                token_start = stream.offset()
            token_end = stream.offset()
        else:
            if invalid_start == 0:
                invalid_start = stream.offset()
            invalid_end = stream.offset()

    return None