import pytest

from mailfields.content_type import parse_content_type
from mailfields.stream import MessageStream
from mailfields.types import ContentType


def parse(text):
    return parse_content_type(MessageStream(text))


def test_simple_type_with_parameter():
    assert parse("text/plain; charset=us-ascii\n") == ContentType(
        c_type="text", c_subtype="plain", attributes=[("charset", "us-ascii")]
    )


def test_quoted_parameter_and_trailing_semicolon():
    result = parse('multipart/mixed; boundary="festivus";\n')
    assert result.c_type == "multipart"
    assert result.c_subtype == "mixed"
    assert result.attributes == [("boundary", "festivus")]


def test_names_are_lower_cased_but_values_kept():
    result = parse("Text/HTML; Charset=UTF-8\n")
    assert (result.c_type, result.c_subtype) == ("text", "html")
    assert result.attribute("charset") == "UTF-8"


def test_type_without_subtype():
    result = parse("attachment\n")
    assert result.c_type == "attachment"
    assert result.c_subtype is None
    assert result.attributes is None


def test_comment_is_skipped():
    result = parse("text/plain (comment); charset=us-ascii\n")
    assert result.c_subtype == "plain"
    assert result.attributes == [("charset", "us-ascii")]


def test_folded_parameters():
    result = parse("text/plain;\n charset=us-ascii;\n\tformat=flowed\n")
    assert result.attributes == [("charset", "us-ascii"), ("format", "flowed")]


def test_folded_quoted_value_drops_line_break():
    result = parse('attachment; filename="long\n name.txt"\n')
    assert result.attribute("filename") == "long name.txt"


def test_continuations_are_merged_in_order():
    result = parse('attachment; filename*1="bar"; filename*0="foo"\n')
    assert result.attributes == [("filename", "foobar")]


def test_encoded_parameter_is_decoded():
    result = parse("attachment; filename*=utf-8''na%C3%AFve.txt\n")
    assert result.attribute("filename") == "na\u00efve.txt"


def test_encoded_parameter_with_language():
    result = parse("application/x-stuff; title*=iso-8859-1'en'%A3%20rates\n")
    assert result.attributes == [("title-language", "en"), ("title", "\u00a3 rates")]


def test_malformed_hex_keeps_raw_value():
    result = parse("attachment; filename*=utf-8''bad%ZZ\n")
    assert result.attribute("filename") == "bad%ZZ"


def test_encoded_word_in_quoted_value():
    result = parse('attachment; filename="=?utf-8?q?caf=C3=A9?="\n')
    assert result.attribute("filename") == "caf\u00e9"


def test_escaped_quote_in_value():
    result = parse('attachment; filename="a\\"b"\n')
    assert result.attribute("filename") == 'a"b'


@pytest.mark.parametrize("text", ["text/plain", "\n", "", "; charset=us-ascii\n"])
def test_missing_type_or_terminator_gives_none(text):
    assert parse(text) is None


def test_stream_stops_at_next_header():
    stream = MessageStream("text/plain; charset=us-ascii\nSubject: hi\n")
    result = parse_content_type(stream)
    assert result.c_type == "text"
    assert stream.peek() == ord("S")


def test_result_round_trips_through_attribute_lookup():
    result = parse('text/plain; charset="utf-8"; format=flowed\n')
    for name, value in result.attributes:
        assert result.attribute(name) == value
    assert result.attribute("missing") is None