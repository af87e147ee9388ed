"""Reading messages and folders out of Maildir mailboxes."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Iterator, Optional, Union

_RESERVED = frozenset(("cur", "new", "tmp"))

_FLAG_CHARS = {
    "P": "Passed",
    "R": "Replied",
    "S": "Seen",
    "T": "Trashed",
    "D": "Draft",
    "F": "Flagged",
}


class Flag(IntEnum):
    """Flags encoded in a Maildir file name."""

    Passed = 0
    Replied = 1
    Seen = 2
    Trashed = 3
    Draft = 4
    Flagged = 5


@dataclass(order=True)
class Message:
    """A Maildir message with its flags and modification date."""

    internal_date: int
    flags: list[Flag] = field(default_factory=list)
    contents: bytes = b""
    path: Path = field(default_factory=Path)


def _parse_flags(name: str) -> list[Flag]:
    flags: list[Flag] = []
    if "2," not in name:
        return flags
    part = name.rsplit("2,", 1)[1]
    for ch in part.encode("utf-8"):
        letter = chr(ch)
        if letter in _FLAG_CHARS:
            flags.append(Flag[_FLAG_CHARS[letter]])
        elif not (letter.isascii() and letter.isalnum()):
            break
    return flags


def _is_valid_name(name: str) -> bool:
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


class MessageIterator:
    """Iterate over the messages in the ``cur`` and ``new`` directories of a folder."""

    def __init__(self, path: Union[str, os.PathLike], name: Optional[str] = None) -> None:
        path = Path(path)
        cur_path = path / "cur"
        if not cur_path.exists():
            raise FileNotFoundError("Invalid Maildir format, 'cur' directory not found.")
        new_path = path / "new"
        if not new_path.exists():
            raise FileNotFoundError("Invalid Maildir format, 'new' directory not found.")
        self.name = name
        self._entries = [os.scandir(cur_path), os.scandir(new_path)]

    def __iter__(self) -> Iterator[Message]:
        return self

    def _next_entry(self) -> Optional[os.DirEntry]:
        while self._entries:
            entry = next(self._entries[0], None)
            if entry is not None:
                return entry
            self._entries.pop(0).close()
        return None

    def __next__(self) -> Message:
        while (entry := self._next_entry()) is not None:
            path = Path(entry.path)
            name = entry.name
            if not path.is_file() or not _is_valid_name(name) or name.startswith("."):
                continue
            internal_date = int(path.stat().st_mtime)
            if internal_date < 0:
                raise ValueError(f"modification time of {path} precedes the Unix epoch")
            contents = path.read_bytes()
            return Message(
                internal_date=internal_date,
                flags=_parse_flags(name),
                contents=contents,
                path=path,
            )
        raise StopIteration


class FolderIterator:
    """Iterate over a Maildir mailbox and its sub-folders.

    The inbox comes first with name None. Use ``"."`` as the prefix for Maildir++
    mailboxes and None for the file-system layout.
    """

    def __init__(
        self, path: Union[str, os.PathLike], sub_folder_prefix: Optional[str]
    ) -> None:
        path = Path(path)
        self._it_stack = [os.scandir(path)]
        self._name_stack: list[str] = []
        self._prefix = sub_folder_prefix
        try:
            self._inbox: Optional[MessageIterator] = MessageIterator(path, None)
        except FileNotFoundError:
            self._inbox = None

    def __iter__(self) -> Iterator[MessageIterator]:
        return self

    def _folder_name(self, name: str) -> Optional[str]:
        if name in _RESERVED or not _is_valid_name(name):
            return None
        if self._prefix is None:
            return name
        if name.startswith(self._prefix):
            return name[len(self._prefix):]
        return None

    def __next__(self) -> MessageIterator:
        if self._inbox is not None:
            inbox, self._inbox = self._inbox, None
            return inbox

        while self._it_stack:
            entry = next(self._it_stack[-1], None)
            if entry is None:
                self._it_stack.pop().close()
                if self._name_stack:
                    self._name_stack.pop()
                continue

            path = Path(entry.path)
            if not path.is_dir():
                continue
            name = self._folder_name(entry.name)
            if name is None:
                continue

            self._it_stack.append(os.scandir(path))
            self._name_stack.append(name)

            separator = self._prefix if self._prefix is not None else "/"
            try:
                return MessageIterator(path, separator.join(self._name_stack))
            except FileNotFoundError:
                continue

        raise StopIteration