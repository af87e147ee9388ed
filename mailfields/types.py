"""Value types produced by the header field parsers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional, Union


class HeaderName(Enum):
    """Header fields with a dedicated parser. Other names are kept as plain strings."""

    Subject = "Subject"
    From = "From"
    To = "To"
    Cc = "Cc"
    Date = "Date"
    Bcc = "Bcc"
    ReplyTo = "Reply-To"
    Sender = "Sender"
    Comments = "Comments"
    InReplyTo = "In-Reply-To"
    Keywords = "Keywords"
    Received = "Received"
    MessageId = "Message-ID"
    References = "References"
    ReturnPath = "Return-Path"
    MimeVersion = "MIME-Version"
    ContentDescription = "Content-Description"
    ContentId = "Content-ID"
    ContentLanguage = "Content-Language"
    ContentLocation = "Content-Location"
    ContentTransferEncoding = "Content-Transfer-Encoding"
    ContentType = "Content-Type"
    ContentDisposition = "Content-Disposition"
    ResentTo = "Resent-To"
    ResentFrom = "Resent-From"
    ResentBcc = "Resent-Bcc"
    ResentCc = "Resent-Cc"
    ResentSender = "Resent-Sender"
    ResentDate = "Resent-Date"
    ResentMessageId = "Resent-Message-ID"
    ListArchive = "List-Archive"
    ListHelp = "List-Help"
    ListId = "List-ID"
    ListOwner = "List-Owner"
    ListPost = "List-Post"
    ListSubscribe = "List-Subscribe"
    ListUnsubscribe = "List-Unsubscribe"

    def __str__(self) -> str:
        return self.value


AnyHeaderName = Union[HeaderName, str]


@dataclass
class Addr:
    """A single mailbox: display name and address, either of which may be absent."""

    name: Optional[str] = None
    address: Optional[str] = None


@dataclass
class Group:
    """A named group of mailboxes."""

    name: Optional[str] = None
    addresses: list[Addr] = field(default_factory=list)


@dataclass
class Address:
    """An address field: either a flat list of mailboxes or a list of groups."""

    addresses: Optional[list[Addr]] = None
    groups: Optional[list[Group]] = None

    @property
    def is_group(self) -> bool:
        return self.groups is not None

    def __iter__(self) -> Iterator[Addr]:
        if self.groups is not None:
            for group in self.groups:
                yield from group.addresses
        elif self.addresses is not None:
            yield from self.addresses

    def first(self) -> Optional[Addr]:
        return next(iter(self), None)


@dataclass
class ContentType:
    """A parsed Content-Type or Content-Disposition value."""

    c_type: str
    c_subtype: Optional[str] = None
    attributes: Optional[list[tuple[str, str]]] = None

    def attribute(self, name: str) -> Optional[str]:
        """Return the value of the first attribute called ``name``."""
        for attr_name, value in self.attributes or ():
            if attr_name == name:
                return value
        return None


@dataclass
class Header:
    """A parsed header with the byte offsets of its name and value."""

    name: AnyHeaderName
    value: Any
    offset_field: int
    offset_start: int
    offset_end: int