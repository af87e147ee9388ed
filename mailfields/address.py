"""Address header fields (From, To, Cc, ...) and address part helpers."""

from __future__ import annotations

from enum import Enum, auto
from typing import Optional

from .stream import MessageStream
from .types import Addr, Address, Group

_LF = 0x0A
_CR = 0x0D
_SPACE = 0x20
_TAB = 0x09
_BACKSLASH = ord("\\")
_COMMA = ord(",")
_LT = ord("<")
_GT = ord(">")
_QUOTE = ord('"')
_AT = ord("@")
_EQ = ord("=")
_LPAREN = ord("(")
_RPAREN = ord(")")
_COLON = ord(":")
_SEMICOLON = ord(";")


class _State(Enum):
    ADDRESS = auto()
    NAME = auto()
    QUOTE = auto()
    COMMENT = auto()


def _concat(parts: list[str]) -> str:
    result = "".join(parts)
    parts.clear()
    return result


class _AddressParser:
    def __init__(self, stream: MessageStream) -> None:
        self.stream = stream
        self.token_start = 0
        self.token_end = 0
        self.is_token_email = False
        self.is_token_start = True
        self.is_escaped = False
        self.name_tokens: list[str] = []
        self.mail_tokens: list[str] = []
        self.comment_tokens: list[str] = []
        self.state = _State.NAME
        self.state_stack: list[_State] = []
        self.addresses: list[Addr] = []
        self.group_name: Optional[str] = None
        self.group_comment: Optional[str] = None
        self.result: list[Group] = []

    def add_token(self, add_trail_space: bool) -> None:
        if self.token_start == 0:
            return
        raw = self.stream.bytes(self.token_start - 1, self.token_end)
        text = raw.decode("utf-8", "replace")
        add_space = False
        if self.state is _State.ADDRESS:
            target = self.mail_tokens
        elif self.state is _State.NAME:
            if self.is_token_email:
                target = self.mail_tokens
            else:
                add_space = True
                target = self.name_tokens
        elif self.state is _State.QUOTE:
            target = self.name_tokens
        else:
            add_space = True
            target = self.comment_tokens

        if add_space and target:
            target.append(" ")
        target.append(text)
        if add_trail_space:
            target.append(" ")

        self.token_start = 0
        self.is_token_email = False
        self.is_token_start = True
        self.is_escaped = False

    def add_address(self) -> None:
        has_mail = bool(self.mail_tokens)
        has_name = bool(self.name_tokens)
        has_comment = bool(self.comment_tokens)

        if has_mail and has_name and has_comment:
            name = f"{_concat(self.name_tokens)} ({_concat(self.comment_tokens)})"
            addr = Addr(name=name, address=_concat(self.mail_tokens))
        elif has_name and has_mail:
            addr = Addr(name=_concat(self.name_tokens), address=_concat(self.mail_tokens))
        elif has_mail and has_comment:
            addr = Addr(name=_concat(self.comment_tokens), address=_concat(self.mail_tokens))
        elif has_mail:
            addr = Addr(name=None, address=_concat(self.mail_tokens))
        elif has_name and has_comment:
            addr = Addr(name=_concat(self.comment_tokens), address=_concat(self.name_tokens))
        elif has_name:
            addr = Addr(name=_concat(self.name_tokens), address=None)
        elif has_comment:
            addr = Addr(name=_concat(self.comment_tokens), address=None)
        else:
            return
        self.addresses.append(addr)

    def add_group_details(self) -> None:
        if self.name_tokens:
            self.group_name = _concat(self.name_tokens)
        if self.comment_tokens:
            self.group_comment = _concat(self.comment_tokens)
        if self.mail_tokens:
            mail = _concat(self.mail_tokens)
            self.group_name = mail if self.group_name is None else f"{self.group_name} {mail}"

    def add_group(self) -> None:
        has_name = self.group_name is not None
        has_comment = self.group_comment is not None
        has_addresses = bool(self.addresses)

        if has_name and has_addresses and has_comment:
            group = Group(name=f"{self.group_name} ({self.group_comment})", addresses=self.addresses)
            self.group_name = None
            self.group_comment = None
        elif has_addresses and has_name:
            group = Group(name=self.group_name, addresses=self.addresses)
            self.group_name = None
        elif has_addresses:
            group = Group(name=self.group_comment, addresses=self.addresses)
            self.group_comment = None
        elif has_name:
            group = Group(name=self.group_name, addresses=[])
            self.group_name = None
        else:
            return
        self.addresses = []
        self.result.append(group)

    def mark_token_char(self) -> None:
        self.is_escaped = False
        self.is_token_start = False
        if self.token_start == 0:
            self.token_start = self.stream.offset()
            self.token_end = self.token_start
        else:
            self.token_end = self.stream.offset()

    def run(self) -> Optional[Address]:
        stream = self.stream
        while (ch := stream.next()) is not None:
            if self._handle(ch):
                continue
            if ch == _LF:
                break
            self.mark_token_char()

        self.add_address()

        if self.group_name is not None or self.result:
            self.add_group()
            return Address(groups=self.result)
        if self.addresses:
            return Address(addresses=self.addresses)
        return None

    def _handle(self, ch: int) -> bool:
        """Process a special byte. True means it was consumed without being token text.

        A line feed that ends the field returns False and is checked by the caller.
        """
        stream = self.stream
        state = self.state

        if ch == _LF:
            self.add_token(False)
            if stream.try_next_is_space():
                self.is_token_start = True
                return True
            return False
        if ch == _BACKSLASH and state is not _State.NAME and not self.is_escaped:
            if self.token_start > 0:
                if state is _State.QUOTE:
                    self.token_end = stream.offset() - 1
                self.add_token(False)
            self.is_escaped = True
            return True
        if ch == _COMMA and state is _State.NAME:
            self.add_token(False)
            self.add_address()
            return True
        if ch == _LT and state is _State.NAME:
            self.add_token(False)
            self.state_stack.append(_State.NAME)
            self.state = _State.ADDRESS
            return True
        if ch == _GT and state is _State.ADDRESS:
            self.add_token(False)
            self.state = self.state_stack.pop()
            return True
        if ch == _QUOTE and not self.is_escaped:
            if state is _State.NAME:
                self.state_stack.append(_State.NAME)
                self.state = _State.QUOTE
                self.add_token(False)
                return True
            if state is _State.QUOTE:
                self.add_token(False)
                self.state = self.state_stack.pop()
                return True
            return False
        if ch == _AT and state is _State.NAME:
            self.is_token_email = True
            return False
        if ch == _EQ and self.is_token_start and not self.is_escaped and stream.peek_char("?"):
            stream.checkpoint()
            decoded = stream.decode_rfc2047()
            if decoded is not None:
                self.add_token(self.state is not _State.QUOTE)
                target = (
                    self.comment_tokens if self.state is _State.COMMENT else self.name_tokens
                )
                target.append(decoded)
                return True
            stream.restore()
            return False
        if ch in (_SPACE, _TAB):
            self.is_token_start = True
            self.is_escaped = False
            if state is _State.QUOTE:
                if self.token_start == 0:
                    self.token_start = stream.offset()
                    self.token_end = self.token_start
                else:
                    self.token_end = stream.offset()
            return True
        if ch == _CR:
            return True
        if ch == _LPAREN and state is not _State.QUOTE and not self.is_escaped:
            self.state_stack.append(state)
            if state is not _State.COMMENT:
                self.add_token(False)
                self.state = _State.COMMENT
                return True
            return False
        if ch == _RPAREN and state is _State.COMMENT and not self.is_escaped:
            new_state = self.state_stack.pop()
            if state is not new_state:
                self.add_token(False)
                self.state = new_state
                return True
            return False
        if ch == _COLON and state is _State.NAME and not self.is_escaped:
            self.add_group()
            self.add_token(False)
            self.add_group_details()
            return True
        if ch == _SEMICOLON and state is _State.NAME:
            self.add_token(False)
            self.add_address()
            self.add_group()
            return True
        return False


def parse_address(stream: MessageStream) -> Optional[Address]:
    """Parse an address list or group list, returning None when it holds nothing."""
    return _AddressParser(stream).run()


def parse_address_local_part(addr: str) -> Optional[str]:
    """Return the part before '@', or None if the address is not plain ASCII up to it."""
    for pos, ch in enumerate(addr):
        if ch == "@":
            return addr[:pos] if pos > 0 and pos + 1 < len(addr) else None
        if not ch.isascii():
            return None
    return None


def parse_address_domain(addr: str) -> Optional[str]:
    """Return the part after '@', or None."""
    for pos, ch in enumerate(addr):
        if ch == "@":
            return addr[pos + 1:] if pos > 0 and pos + 1 < len(addr) else None
        if not ch.isascii():
            return None
    return None


def parse_address_user_part(addr: str) -> Optional[str]:
    """Return the local part without any '+detail' suffix, or None."""
    for pos, ch in enumerate(addr):
        if ch == "+":
            if pos > 0:
                rest = addr[pos + 1:]
                if any(c == "@" and i + 1 < len(rest) for i, c in enumerate(rest)):
                    return addr[:pos]
            return None
        if ch == "@":
            return addr[:pos] if pos > 0 and pos + 1 < len(addr) else None
        if not ch.isascii():
            return None
    return None


def parse_address_detail_part(addr: str) -> Optional[str]:
    """Return the text between the last '+' and '@' of the local part, or None."""
    plus_pos: Optional[int] = None
    for pos, ch in enumerate(addr):
        if ch == "+":
            plus_pos = pos + 1
        elif ch == "@":
            if plus_pos is not None and pos + 1 < len(addr):
                return addr[plus_pos:pos]
            return None
        elif not ch.isascii():
            return None
    return None