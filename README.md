# mailfields

Parsers for the header fields of Internet e-mail messages, and readers for
messages kept in Mbox files and Maildir directories.

## What it does

- Splits a header block into named fields and parses each value according
  to the field's kind: addresses and groups, dates, message ids,
  comma-separated lists, content types with their parameters (including
  RFC 2231 continuations and encoded values), unstructured text with
  encoded words, and raw text.
- Works out the thread name of a subject line by removing reply and forward
  prefixes in many languages, such as `Re:`, `Fwd[3]:`, `AW:` or `回复:`.
- Converts dates between RFC 822, RFC 3339 and Unix timestamps.
- Reads the messages of an Mbox file, undoing `>From ` quoting.
- Walks the folders of a Maildir or Maildir++ tree and reads each message
  with its flags.

## Installing

```
pip install mailfields
```

The package uses only the Python standard library.

## Parsing header fields

Every field parser reads from a `MessageStream` (in `mailfields.stream`),
built from the raw bytes (or a string) of a header value. A value ends at a
line feed that is not followed by a space or tab:

```python
from mailfields.stream import MessageStream
from mailfields.unstructured import parse_unstructured
from mailfields.ids import parse_id

subject = parse_unstructured(MessageStream(b" Hello =?utf-8?b?4pi6?=\n"))
ids = parse_id(MessageStream(b" <a@example.com> <b@example.com>\n"))
# ids == ["a@example.com", "b@example.com"]
```

The other field parsers work the same way:

- `parse_address` in `mailfields.address` returns an `Address` holding
  either a list of `Addr` entries or a list of `Group` entries.
- `parse_date` in `mailfields.dates` returns a `DateTime`.
- `parse_comma_separated` in `mailfields.listfield` returns a string for a
  single item or a list of strings.
- `parse_content_type` in `mailfields.content_type` returns a
  `ContentType` with `c_type`, `c_subtype` and `attributes`.
- `parse_raw` in `mailfields.raw` returns the value text as it stands.

Each returns `None` when the field holds nothing usable. The value types
live in `mailfields.types`.

A whole header block is parsed by `parse_headers` in `mailfields.header`.
It returns a list of `Header` entries (name, parsed value and byte offsets)
together with a flag that is true when the block ended with an empty line.
Known field names come back as `HeaderName` members, other names as plain
strings. A mapping from names to parser functions may be given to override
the built-in choice of parser, with a default parser for unmapped fields.
`header_name_from_str` maps a string to a `HeaderName`, matching the
well-known names without regard to case.

## Addresses

`mailfields.address` also has helpers that pick parts out of a plain
address:

```python
from mailfields.address import (
    parse_address_domain,
    parse_address_detail_part,
)

parse_address_domain("jane+news@example.com")       # "example.com"
parse_address_detail_part("jane+news@example.com")  # "news"
```

`parse_address_local_part` and `parse_address_user_part` work alike. They
return `None` when the address has no such part.

## Dates

```python
from mailfields.dates import DateTime

dt = DateTime.parse_rfc822("Sat, 20 Nov 2021 14:22:01 -0800")
dt.to_rfc3339()    # "2021-11-20T14:22:01-08:00"
dt.to_timestamp()  # seconds since the Unix epoch, UTC
```

`DateTime.parse_rfc3339`, `DateTime.from_timestamp`, `to_rfc822`,
`to_timestamp_local`, `to_timezone`, `is_valid`, `day_of_week` and
`julian_day` are there as well. Dates compare by the moment in time they
stand for.

## Thread names

```python
from mailfields.thread import thread_name, trim_trailing_fwd

thread_name("Re: Fwd[2]: hello world (fwd)")  # "hello world"
trim_trailing_fwd("hello (fwd)(fwd)")         # "hello"
```

## Mailboxes

Mbox:

```python
from mailfields.mbox import MessageIterator

with open("archive.mbox", "rb") as handle:
    for message in MessageIterator(handle):
        print(message.sender, message.internal_date, len(message.contents))
```

`MessageIterator` also accepts the mailbox as `bytes`. A read error from the
stream is raised as `ParseError`.

Maildir:

```python
from mailfields.maildir import FolderIterator

for folder in FolderIterator("Maildir", "."):
    for message in folder:
        print(folder.name or "INBOX", message.flags, message.path)
```

The inbox comes first, with `name` set to `None`. Pass `"."` as the prefix
for Maildir++ trees and `None` for trees in which subfolders are plain
nested directories. Each message carries its `Flag` values, contents,
modification time in seconds and path.

## What it does not do

The package parses header fields and reads mailboxes; it does not parse
message bodies or MIME parts, and it does not write, move or delete
messages in Mbox files or Maildir folders. It has no command-line tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```