import pytest

from mailfields.header import header_name_from_str, parse_header_name, parse_headers
from mailfields.raw import parse_raw
from mailfields.stream import MessageStream
from mailfields.types import Addr, HeaderName


@pytest.mark.parametrize(
    "text, expected",
    [
        ("From: ", HeaderName.From),
        ("receiVED: ", HeaderName.Received),
        (" subject   : ", HeaderName.Subject),
        ("X-Custom-Field : ", "X-Custom-Field"),
        (" T : ", "T"),
        ("mal formed: ", "mal formed"),
        ("MIME-version : ", HeaderName.MimeVersion),
    ],
)
def test_parse_header_name(text, expected):
    assert parse_header_name(MessageStream(text)) == expected


def test_parse_header_name_stops_at_line_end():
    assert parse_header_name(MessageStream("\nFrom: x")) is None


def test_parse_header_name_leaves_cursor_after_colon():
    stream = MessageStream("To: someone")
    assert parse_header_name(stream) == HeaderName.To
    assert stream.offset() == 3


@pytest.mark.parametrize(
    "text, expected",
    [
        ("From", HeaderName.From),
        ("content-type", HeaderName.ContentType),
        ("LIST-UNSUBSCRIBE", HeaderName.ListUnsubscribe),
        ("X-Custom", "X-Custom"),
        ("", None),
        ("bad name", None),
        ("Ünïcode", None),
        ("Subject:", None),
    ],
)
def test_header_name_from_str(text, expected):
    assert header_name_from_str(text) == expected


SAMPLE = (
    "From: Jane <jane@example.com>\n"
    "To: bob@example.com\n"
    "Subject: =?utf-8?q?hi?= there\n"
    "Message-ID: <abc@example.com>\n"
    "X-Custom: abc\n"
    "\n"
    "Body\n"
)


def test_parse_headers_dispatches_known_fields():
    stream = MessageStream(SAMPLE)
    headers, complete = parse_headers(stream)
    assert complete is True
    assert [h.name for h in headers] == [
        HeaderName.From,
        HeaderName.To,
        HeaderName.Subject,
        HeaderName.MessageId,
        "X-Custom",
    ]
    assert list(headers[0].value) == [Addr(name="Jane", address="jane@example.com")]
    assert list(headers[1].value) == [Addr(name=None, address="bob@example.com")]
    assert headers[2].value == "hi there"
    assert headers[3].value == "abc@example.com"
    assert headers[4].value == "abc"
    assert stream.bytes(stream.offset(), len(stream.data)) == b"Body\n"


def test_parse_headers_offsets():
    headers, _ = parse_headers(MessageStream(SAMPLE))
    first = headers[0]
    assert (first.offset_field, first.offset_start, first.offset_end) == (0, 5, 30)
    second = headers[1]
    assert second.offset_field == 30
    assert second.offset_start == 33


def test_parse_headers_date():
    headers, _ = parse_headers(MessageStream("Date: Sat, 20 Nov 2021 14:22:01 -0800\n\n"))
    assert headers[0].name == HeaderName.Date
    assert headers[0].value.to_rfc3339() == "2021-11-20T14:22:01-08:00"


def test_parse_headers_without_blank_line_is_incomplete():
    headers, complete = parse_headers(MessageStream("X-A: 1\nX-B: 2\n"))
    assert complete is False
    assert [(h.name, h.value) for h in headers] == [("X-A", "1"), ("X-B", "2")]


def test_parse_headers_with_custom_map():
    text = "Subject: =?utf-8?q?hi?=\nX-Other: v\n\n"
    headers, complete = parse_headers(
        MessageStream(text),
        {HeaderName.Subject: parse_raw},
        lambda stream: "ignored" if parse_raw(stream) else None,
    )
    assert complete is True
    assert headers[0].value == "=?utf-8?q?hi?="
    assert headers[1].value == "ignored"


def test_parse_headers_empty_block():
    headers, complete = parse_headers(MessageStream("\nBody"))
    assert headers == []
    assert complete is True