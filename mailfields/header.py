"""Header names and the header block parser."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from .address import parse_address
from .content_type import parse_content_type
from .dates import parse_date
from .ids import parse_id
from .listfield import parse_comma_separated
from .raw import parse_raw
from .stream import MessageStream
from .types import AnyHeaderName, Header, HeaderName
from .unstructured import parse_unstructured

FieldParser = Callable[[MessageStream], Any]

_LF = 0x0A
_COLON = ord(":")
_ASCII_WHITESPACE = frozenset(b" \t\n\r\x0c")
_NAME_EXTRA = frozenset("_-")

_KNOWN_NAMES: dict[bytes, HeaderName] = {
    member.value.lower().encode("ascii"): member for member in HeaderName
}

_UNSTRUCTURED = frozenset(
    (
        HeaderName.Subject,
        HeaderName.Comments,
        HeaderName.ContentDescription,
        HeaderName.ContentLocation,
        HeaderName.ContentTransferEncoding,
    )
)
_ADDRESS = frozenset(
    (
        HeaderName.From,
        HeaderName.To,
        HeaderName.Cc,
        HeaderName.Bcc,
        HeaderName.ReplyTo,
        HeaderName.Sender,
        HeaderName.ResentTo,
        HeaderName.ResentFrom,
        HeaderName.ResentBcc,
        HeaderName.ResentCc,
        HeaderName.ResentSender,
        HeaderName.ListArchive,
        HeaderName.ListHelp,
        HeaderName.ListId,
        HeaderName.ListOwner,
        HeaderName.ListPost,
        HeaderName.ListSubscribe,
        HeaderName.ListUnsubscribe,
    )
)
_DATE = frozenset((HeaderName.Date, HeaderName.ResentDate))
_ID = frozenset(
    (
        HeaderName.MessageId,
        HeaderName.References,
        HeaderName.InReplyTo,
        HeaderName.ReturnPath,
        HeaderName.ContentId,
        HeaderName.ResentMessageId,
    )
)
_LIST = frozenset((HeaderName.Keywords, HeaderName.ContentLanguage))
_CONTENT_TYPE = frozenset((HeaderName.ContentType, HeaderName.ContentDisposition))


def _builtin_parser(name: AnyHeaderName) -> FieldParser:
    if name in _UNSTRUCTURED:
        return parse_unstructured
    if name in _ADDRESS:
        return parse_address
    if name in _DATE:
        return parse_date
    if name in _ID:
        return parse_id
    if name in _LIST:
        return parse_comma_separated
    if name in _CONTENT_TYPE:
        return parse_content_type
    return parse_raw


def _lookup(raw: bytes) -> Optional[HeaderName]:
    return _KNOWN_NAMES.get(raw.lower())


def parse_header_name(stream: MessageStream) -> Optional[AnyHeaderName]:
    """Read a header name up to its ':'.

    Returns a HeaderName for known fields, the name as a string for others, or
    None when the line ends before any name character.
    """
    token_start = 0
    token_end = 0

    while (ch := stream.next()) is not None:
        if ch == _COLON:
            if token_start != 0:
                break
        elif ch == _LF:
            return None
        elif ch not in _ASCII_WHITESPACE:
            if token_start == 0:
                token_start = stream.offset()
                token_end = token_start
            else:
                token_end = stream.offset()

    if token_start == 0:
        return None
    raw = stream.bytes(token_start - 1, token_end)
    known = _lookup(raw)
    if known is not None:
        return known
    return raw.decode("utf-8", "replace")


def header_name_from_str(data: str) -> Optional[AnyHeaderName]:
    """Interpret a string as a header name.

    Only ASCII letters, digits, '_' and '-' are allowed; anything else, or an
    empty string, gives None.
    """
    if not data:
        return None
    for ch in data:
        if not ((ch.isascii() and ch.isalnum()) or ch in _NAME_EXTRA):
            return None
    known = _lookup(data.encode("ascii"))
    return known if known is not None else data


def parse_headers(
    stream: MessageStream,
    header_map: Optional[Mapping[AnyHeaderName, FieldParser]] = None,
    default_parser: FieldParser = parse_raw,
) -> tuple[list[Header], bool]:
    """Parse a header block.

    With no ``header_map`` each known field gets its own parser and others are
    kept raw. With a map, fields are parsed by the mapped parser, falling back to
    ``default_parser``. Returns the headers and whether the block ended with an
    empty line (False when the data ran out first).
    """
    headers: list[Header] = []

    while True:
        while True:
            ch = stream.peek()
            if ch is None:
                return headers, False
            if ch == _LF:
                stream.next()
                return headers, True
            if ch not in _ASCII_WHITESPACE:
                break
            stream.next()

        offset_field = stream.offset()
        name = parse_header_name(stream)
        if name is not None:
            offset_start = stream.offset()
            if header_map:
                parser = header_map.get(name, default_parser)
            else:
                parser = _builtin_parser(name)
            value = parser(stream)
            headers.append(
                Header(
                    name=name,
                    value=value,
                    offset_field=offset_field,
                    offset_start=offset_start,
                    offset_end=stream.offset(),
                )
            )
        elif stream.is_eof():
            return headers, False