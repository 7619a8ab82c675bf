from __future__ import annotations

import os
from pathlib import Path

from result import Err, Ok

from burrow.models.enums import EntryKind
from burrow.models.errors import FsErrorCode
from burrow.services.snapshot import get_state_data, list_directory, parent_of
from tests.fs_mock import FaultyFileSystem, build_tree


def test_list_directory_classifies_and_sorts(tmp_path: Path) -> None:
    build_tree(tmp_path, {"b/": None, "a.txt": "0123456789", "c.py": "print()"})
    os.symlink(tmp_path / "a.txt", tmp_path / "link")

    result = list_directory(str(tmp_path))

    assert isinstance(result, Ok)
    entries = result.unwrap()
    assert [e.name for e in entries] == ["a.txt", "b", "c.py", "link"]
    kinds = {e.name: e.kind for e in entries}
    assert kinds == {
        "a.txt": EntryKind.FILE,
        "b": EntryKind.DIRECTORY,
        "c.py": EntryKind.FILE,
        "link": EntryKind.SYMLINK,
    }
    a_txt = entries[0]
    assert a_txt.path == str(tmp_path / "a.txt")
    assert a_txt.size == 10
    assert a_txt.mime_type == "text/plain"
    assert not a_txt.is_selected


def test_list_directory_directories_first(tmp_path: Path) -> None:
    build_tree(tmp_path, {"z/": None, "a.txt": "x"})

    entries = list_directory(str(tmp_path), directories_first=True).unwrap()

    assert [e.name for e in entries] == ["z", "a.txt"]


def test_list_directory_hides_dotfiles_on_request(tmp_path: Path) -> None:
    build_tree(tmp_path, {".hidden": "x", "shown": "y"})

    assert [e.name for e in list_directory(str(tmp_path), show_hidden=False).unwrap()] == ["shown"]
    assert len(list_directory(str(tmp_path)).unwrap()) == 2


def test_list_directory_missing_path_is_error(tmp_path: Path) -> None:
    result = list_directory(str(tmp_path / "missing"))

    assert isinstance(result, Err)
    assert result.unwrap_err().code is FsErrorCode.NOT_FOUND


def test_list_directory_on_file_is_not_directory(tmp_path: Path) -> None:
    build_tree(tmp_path, {"f.txt": "x"})

    result = list_directory(str(tmp_path / "f.txt"))

    assert isinstance(result, Err)
    assert result.unwrap_err().code is FsErrorCode.NOT_DIRECTORY


def test_get_state_data_includes_parent(tmp_path: Path) -> None:
    build_tree(tmp_path, {"child/inner.txt": "x", "sibling.txt": "y"})

    snapshot = get_state_data(str(tmp_path / "child")).unwrap()

    assert [e.name for e in snapshot.entries] == ["inner.txt"]
    assert snapshot.parent_path == str(tmp_path)
    assert [e.name for e in snapshot.parent_entries] == ["child", "sibling.txt"]


def test_get_state_data_unreadable_parent_gives_empty_listing(tmp_path: Path) -> None:
    build_tree(tmp_path, {"child/inner.txt": "x"})
    fs = FaultyFileSystem().fail("scandir", tmp_path)

    snapshot = get_state_data(str(tmp_path / "child"), fs).unwrap()

    assert snapshot.parent_path == str(tmp_path)
    assert snapshot.parent_entries == []


def test_parent_of_root_is_none() -> None:
    assert parent_of("/") is None
    assert parent_of("/usr") == "/"
    assert parent_of("/usr/lib") == "/usr"
