"""Thread name extraction from subject lines."""

from __future__ import annotations

from typing import Iterator

RE_PREFIXES = frozenset(
    [
        "re", "res", "sv", "antw", "ref", "aw", "απ", "השב", "vá", "r", "rif",
        "bls", "odp", "ynt", "atb", "رد", "回复", "转发",
    ]
)

FWD_PREFIXES = frozenset(
    [
        "fwd", "fw", "rv", "enc", "vs", "doorst", "vl", "tr", "wg", "πρθ",
        "הועבר", "továbbítás", "i", "fs", "trs", "vb", "pd", "i̇lt", "yml",
        "إعادة توجيه", "回覆", "轉寄",
    ]
)

# Characters Python treats as whitespace that the Unicode White_Space property does not.
_NOT_WHITESPACE = frozenset("\x1c\x1d\x1e\x1f")


def _is_whitespace(ch: str) -> bool:
    return ch.isspace() and ch not in _NOT_WHITESPACE


def _char_indices(text: str) -> Iterator[tuple[int, str]]:
    """Yield (byte offset in UTF-8, character) pairs."""
    pos = 0
    for ch in text:
        yield pos, ch
        pos += len(ch.encode("utf-8"))


def _lower(data: bytes, start: int, end: int) -> str:
    return data[start:end].decode("utf-8").lower()


def thread_name(text: str) -> str:
    """Strip reply/forward prefixes and list tags from a subject."""
    data = text.encode("utf-8")
    token_start = token_end = 0
    thread_name_start = fwd_start = fwd_end = last_blob_end = 0

    in_blob = False
    in_blob_ignore = False
    seen_header = False
    seen_blob_header = False
    token_found = False

    for pos, ch in _char_indices(text):
        if ch == "[":
            if in_blob:
                break
            if token_found:
                if token_end == 0:
                    token_end = pos
                prefix = _lower(data, token_start, token_end)
                if prefix in RE_PREFIXES or prefix in FWD_PREFIXES:
                    seen_header = True
                else:
                    break
            token_found = False
            in_blob = True
        elif ch == "]" and in_blob:
            if seen_blob_header and token_found:
                fwd_start = token_start
                fwd_end = pos
            if not seen_header:
                last_blob_end = pos + 1
            in_blob = False
            token_found = False
            seen_blob_header = False
            in_blob_ignore = False
        elif ch == ":" and not in_blob:
            if (seen_header and token_found) or (not seen_header and not token_found):
                break
            if not seen_header:
                if token_end == 0:
                    token_end = pos
                prefix = _lower(data, token_start, token_end)
                if prefix not in RE_PREFIXES and prefix not in FWD_PREFIXES:
                    break
            else:
                seen_header = False
            thread_name_start = pos + 1
            token_found = False
        elif ch == ":" and in_blob and not in_blob_ignore:
            if token_end == 0:
                token_end = pos
            prefix = _lower(data, token_start, token_end)
            if prefix in FWD_PREFIXES:
                token_found = False
                seen_blob_header = True
            elif seen_blob_header and prefix in RE_PREFIXES:
                token_found = False
            else:
                in_blob_ignore = True
        elif _is_whitespace(ch):
            if token_end == 0:
                token_end = pos
        else:
            if not token_found:
                token_start = pos
                token_end = 0
                token_found = True
            elif not in_blob and pos - token_start > 21:
                break

    if last_blob_end > thread_name_start or (
        fwd_start > 0 and last_blob_end > fwd_start > thread_name_start
    ):
        result = trim_trailing_fwd(data[last_blob_end:].decode("utf-8"))
        if result:
            return result

    if fwd_start > 0 and thread_name_start < fwd_start:
        result = trim_trailing_fwd(data[fwd_start:fwd_end].decode("utf-8"))
        if result:
            return result

    return trim_trailing_fwd(data[thread_name_start:].decode("utf-8"))


def trim_trailing_fwd(text: str) -> str:
    """Trim surrounding whitespace and trailing "(fwd)"-style markers."""
    data = text.encode("utf-8")
    in_parentheses = False
    trim_end = True
    end_found = False

    text_start = 0
    text_end = len(data)
    fwd_end = 0

    for pos, ch in reversed(list(_char_indices(text))):
        if ch == "(" and not end_found:
            if in_parentheses:
                in_parentheses = False
                if fwd_end - pos > 2 and _lower(data, pos + 1, fwd_end) in FWD_PREFIXES:
                    text_end = pos
                    trim_end = True
                    continue
            end_found = True
        elif ch == ")" and not end_found:
            if not in_parentheses:
                in_parentheses = True
                fwd_end = pos
            else:
                end_found = True
        elif _is_whitespace(ch):
            if trim_end:
                text_end = pos
            continue
        elif not in_parentheses and not end_found:
            end_found = True

        trim_end = False
        text_start = pos

    if text_end >= text_start:
        return data[text_start:text_end].decode("utf-8")
    return ""