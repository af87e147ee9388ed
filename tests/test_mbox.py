import io

import pytest

from mailfields.mbox import Message, MessageIterator, ParseError

MBOX = (
    b"From sender@example.com Sat Jan  3 01:05:34 1996\n"
    b"Message 1\n"
    b"\n"
    b"From sender@example.com  Tue Jul 23 19:39:23 2002\n"
    b"Message 2\n"
    b"\n"
    b"From sender@example.com Tue Aug  6 13:34:34 2002\n"
    b"Message 3\n"
    b">From hello\n"
    b">>From world\n"
    b">>>From test\n"
    b"\n"
    b"From sender@example.com Mon Jan 15  15:30:00  2018\n"
    b"Message 4\n"
    b"> From\n"
    b">F\n"
)


def test_parse_mbox():
    expected = [
        Message(820631134, "sender@example.com", b"Message 1\n\n"),
        Message(1027453163, "sender@example.com", b"Message 2\n\n"),
        Message(
            1028640874,
            "sender@example.com",
            b"Message 3\nFrom hello\n>From world\n>>From test\n\n",
        ),
        Message(1516030200, "sender@example.com", b"Message 4\n> From\n>F\n"),
    ]
    assert list(MessageIterator(io.BytesIO(MBOX))) == expected


def test_accepts_bytes_directly():
    messages = list(MessageIterator(MBOX))
    assert len(messages) == 4
    assert messages[0].contents == b"Message 1\n\n"


def test_empty_input_yields_nothing():
    assert list(MessageIterator(b"")) == []


def test_text_before_first_separator_is_ignored():
    data = b"garbage line\nmore\nFrom sender@example.com Sat Jan  3 01:05:34 1996\nbody\n"
    messages = list(MessageIterator(data))
    assert messages == [Message(820631134, "sender@example.com", b"body\n")]


def test_invalid_date_gives_zero():
    data = b"From sender@example.com Sat Foo  3 01:05:34 1996\nbody\n"
    (message,) = list(MessageIterator(data))
    assert message.internal_date == 0
    assert message.sender == "sender@example.com"


def test_separator_without_date():
    data = b"From sender@example.com\nbody\n"
    (message,) = list(MessageIterator(data))
    assert message.internal_date == 0
    assert message.sender == ""
    assert message.contents == b"body\n"


def test_month_is_case_insensitive():
    data = b"From sender@example.com Sat JAN  3 01:05:34 1996\nx\n"
    (message,) = list(MessageIterator(data))
    assert message.internal_date == 820631134


def test_last_message_without_trailing_newline():
    data = b"From sender@example.com Sat Jan  3 01:05:34 1996\nbody"
    (message,) = list(MessageIterator(data))
    assert message.contents == b"body"


def test_read_error_raises_parse_error():
    class Broken:
        def readline(self):
            raise OSError("boom")

    with pytest.raises(ParseError):
        next(MessageIterator(Broken()))