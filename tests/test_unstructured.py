import base64

from mailfields.stream import MessageStream
from mailfields.unstructured import parse_unstructured


def _parse(data):
    return parse_unstructured(MessageStream(data))


def test_plain_text_kept_verbatim():
    assert _parse(b" Hello   World\n") == "Hello   World"


def test_folded_lines_joined_with_space():
    assert _parse(b" Hello\n   World\n") == "Hello World"


def test_encoded_word_after_text():
    data = b" Why not both importing AND exporting? =?utf-8?b?4pi6?=\n"
    assert _parse(data) == "Why not both importing AND exporting? \u263a"


def test_encoded_word_round_trip():
    text = "r\u00e9sum\u00e9 \u00fcber"
    encoded = base64.b64encode(text.encode("utf-8")).decode()
    assert _parse(f"=?utf-8?b?{encoded}?=\n".encode()) == text


def test_adjacent_encoded_words_are_joined():
    first = base64.b64encode("ab".encode()).decode()
    second = base64.b64encode("cd".encode()).decode()
    data = f"=?utf-8?b?{first}?= =?utf-8?b?{second}?=\n".encode()
    assert _parse(data) == "abcd"


def test_broken_encoded_word_kept_as_text():
    assert _parse(b"=?broken\n") == "=?broken"


def test_empty_value():
    assert _parse(b"   \n") is None


def test_no_line_end():
    assert _parse(b"Hello") is None