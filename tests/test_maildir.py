import dataclasses
from pathlib import Path

import pytest

from mailfields.maildir import Flag, FolderIterator, Message, MessageIterator


def _make_folder(root: Path, files: dict[str, bytes]) -> None:
    for sub in ("cur", "new", "tmp"):
        (root / sub).mkdir(parents=True, exist_ok=True)
    for rel, data in files.items():
        (root / rel).write_bytes(data)


@pytest.fixture
def maildir(tmp_path):
    root = tmp_path / "maildir"
    _make_folder(
        root,
        {
            "cur/1000.host:2,S": b"b\n",
            "cur/1001.host:2,ST": b"a\n",
        },
    )
    _make_folder(
        root / ".My Folder",
        {
            "new/1002.host": b"d\n",
            "cur/1003.host:2,TDR": b"c\n",
        },
    )
    _make_folder(
        root / ".My Folder.Nested Folder",
        {
            "cur/1004.host:2,RDF": b"f\n",
            "cur/1005.host:2,FP": b"e\n",
        },
    )
    return root


def test_parse_maildir(maildir):
    messages = []
    for folder in FolderIterator(maildir, "."):
        name = folder.name or "INBOX"
        for message in folder:
            assert message.internal_date != 0
            assert message.path.exists()
            messages.append(
                (name, dataclasses.replace(message, internal_date=0, path=Path("unknown")))
            )
    messages.sort()

    unknown = Path("unknown")
    expected = [
        ("INBOX", Message(0, [Flag.Seen], b"b\n", unknown)),
        ("INBOX", Message(0, [Flag.Seen, Flag.Trashed], b"a\n", unknown)),
        ("My Folder", Message(0, [], b"d\n", unknown)),
        ("My Folder", Message(0, [Flag.Trashed, Flag.Draft, Flag.Replied], b"c\n", unknown)),
        (
            "My Folder.Nested Folder",
            Message(0, [Flag.Replied, Flag.Draft, Flag.Flagged], b"f\n", unknown),
        ),
        ("My Folder.Nested Folder", Message(0, [Flag.Flagged, Flag.Passed], b"e\n", unknown)),
    ]
    assert messages == expected


def test_inbox_comes_first_with_no_name(maildir):
    folders = list(FolderIterator(maildir, "."))
    assert folders[0].name is None
    assert sorted(f.name for f in folders[1:]) == ["My Folder", "My Folder.Nested Folder"]


def test_fs_layout_joins_names_with_slash(tmp_path):
    root = tmp_path / "box"
    _make_folder(root, {})
    _make_folder(root / "A", {"cur/1:2,S": b"x"})
    _make_folder(root / "A" / "B", {"new/2": b"y"})
    names = [f.name for f in FolderIterator(root, None)]
    assert names == [None, "A", "A/B"]


def test_folder_without_cur_is_skipped_but_descended(tmp_path):
    root = tmp_path / "box"
    (root / "Parent").mkdir(parents=True)
    _make_folder(root / "Parent" / "Child", {"new/1": b"z"})
    folders = list(FolderIterator(root, None))
    assert [f.name for f in folders] == ["Parent/Child"]
    assert [m.contents for m in folders[0]] == [b"z"]


def test_missing_root_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        FolderIterator(tmp_path / "missing", ".")


def test_missing_cur_raises(tmp_path):
    (tmp_path / "new").mkdir()
    with pytest.raises(FileNotFoundError, match="'cur' directory not found"):
        MessageIterator(tmp_path)


def test_missing_new_raises(tmp_path):
    (tmp_path / "cur").mkdir()
    with pytest.raises(FileNotFoundError, match="'new' directory not found"):
        MessageIterator(tmp_path)


def test_dot_files_and_directories_are_skipped(tmp_path):
    _make_folder(tmp_path, {"cur/.hidden": b"h", "cur/visible": b"v"})
    (tmp_path / "cur" / "subdir").mkdir()
    assert [m.contents for m in MessageIterator(tmp_path)] == [b"v"]


def test_cur_is_read_before_new(tmp_path):
    _make_folder(tmp_path, {"cur/one": b"1", "new/two": b"2"})
    assert [m.contents for m in MessageIterator(tmp_path)] == [b"1", b"2"]


@pytest.mark.parametrize(
    "name,flags",
    [
        ("1:2,S,T", [Flag.Seen]),
        ("1:2,aS", [Flag.Seen]),
        ("1:2,", []),
        ("12,2,P", [Flag.Passed]),
        ("plain", []),
    ],
)
def test_flag_parsing(tmp_path, name, flags):
    _make_folder(tmp_path, {f"cur/{name}": b"m"})
    (message,) = list(MessageIterator(tmp_path))
    assert message.flags == flags
    assert message.path.name == name


def test_message_iterator_name(tmp_path):
    _make_folder(tmp_path, {})
    assert MessageIterator(tmp_path, "Work").name == "Work"
    assert list(MessageIterator(tmp_path)) == []