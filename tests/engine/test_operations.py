from __future__ import annotations

import tarfile
import zipfile
from pathlib import Path

from burrow.engine import Navigator
from burrow.models.enums import InteractionMode, PopupKind
from burrow.services.fs import FileSystem
from tests.fs_mock import FaultyFileSystem, build_tree


def _open(path: Path, fs: FileSystem | None = None) -> Navigator:
    if fs is None:
        return Navigator.open(str(path)).unwrap()
    return Navigator.open(str(path), fs=fs).unwrap()


def _names(nav: Navigator) -> list[str]:
    return [entry.name for entry in nav.state.entries]


def _type(nav: Navigator, text: str) -> None:
    for char in text:
        assert nav.input_char(char)


# ----------------------------------------------------------------------
# Delete
# ----------------------------------------------------------------------


def test_delete_requires_confirmation_popup(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"a.txt": "x"})
    nav = _open(root)

    assert nav.delete_selected() is False
    assert nav.confirm() is False
    assert (root / "a.txt").exists()


def test_delete_selected_file(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"a.txt": "x", "b.txt": "y"})
    nav = _open(root)

    assert nav.toggle_confirmation_popup()
    assert nav.confirm() is True

    assert not (root / "a.txt").exists()
    assert _names(nav) == ["b.txt"]
    assert nav.state.cursor == 0
    assert nav.state.popup is PopupKind.NONE


def test_delete_last_entry_clamps_cursor(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"a.txt": "x", "b.txt": "y"})
    nav = _open(root)
    nav.navigate_down()

    nav.toggle_confirmation_popup()
    nav.confirm()

    assert _names(nav) == ["a.txt"]
    assert nav.state.cursor == 0


def test_delete_only_entry_leaves_empty_listing(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"a.txt": "x"})
    nav = _open(root)

    nav.toggle_confirmation_popup()
    nav.confirm()

    assert nav.state.entries == []
    assert nav.state.cursor is None


def test_delete_directory_recursively(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"tree/a/b/c.txt": "deep", "tree/d.txt": "", "tree/e/": None})
    nav = _open(root)

    nav.toggle_confirmation_popup()
    nav.confirm()

    assert not (root / "tree").exists()
    assert nav.state.entries == []


def test_delete_failure_keeps_popup_open(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"a.txt": "x"})
    fs = FaultyFileSystem().fail("remove_file")
    nav = _open(root, fs)

    nav.toggle_confirmation_popup()
    assert nav.confirm() is False

    assert (root / "a.txt").exists()
    assert nav.state.popup is PopupKind.CONFIRM
    assert nav.state.notification is not None
    assert nav.state.notification.message.startswith("Failed to delete a.txt")


def test_delete_multiple_selected(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"a": "", "b": "", "c": "", "d": ""})
    nav = _open(root)
    nav.enter_multi_select()
    nav.navigate_down()
    nav.navigate_down()
    nav.select_current()

    nav.toggle_confirmation_popup()
    assert nav.confirm() is True

    assert _names(nav) == ["d"]
    assert nav.state.mode is InteractionMode.NORMAL
    assert nav.state.popup is PopupKind.NONE
    assert nav.state.notification is None


def test_delete_multiple_reports_partial_failure(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"a": "", "b": "", "c": ""})
    fs = FaultyFileSystem().fail("remove_file", root / "b")
    nav = _open(root, fs)
    nav.enter_multi_select()
    nav.navigate_down()
    nav.navigate_down()
    nav.select_current()

    nav.toggle_confirmation_popup()
    nav.confirm()

    assert _names(nav) == ["b"]
    assert nav.state.mode is InteractionMode.NORMAL
    assert nav.state.notification is not None
    assert nav.state.notification.message.startswith("1 of 3 deletions failed:")


def test_delete_single_not_allowed_in_multi_select(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"a": ""})
    nav = _open(root)
    nav.enter_multi_select()
    nav.toggle_confirmation_popup()

    assert nav.delete_selected() is False
    assert (root / "a").exists()


# ----------------------------------------------------------------------
# Rename
# ----------------------------------------------------------------------


def test_rename_moves_cursor_to_new_name(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"b.txt": "content", "c.txt": ""})
    nav = _open(root)

    assert nav.open_rename_popup()
    assert nav.state.input_buffer == ""
    _type(nav, "z.txt")
    assert nav.submit_input() is True

    assert (root / "z.txt").read_text() == "content"
    assert not (root / "b.txt").exists()
    assert _names(nav) == ["c.txt", "z.txt"]
    assert nav.state.cursor == 1
    assert nav.state.popup is PopupKind.NONE
    assert nav.state.input_buffer == ""


def test_rename_to_existing_name_keeps_popup(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"a.txt": "first", "b.txt": "second"})
    nav = _open(root)
    nav.open_rename_popup()
    _type(nav, "b.txt")

    assert nav.submit_input() is False

    assert (root / "a.txt").read_text() == "first"
    assert (root / "b.txt").read_text() == "second"
    assert nav.state.popup is PopupKind.RENAME
    assert nav.state.input_buffer == "b.txt"
    assert nav.state.notification is not None
    assert nav.state.notification.message.startswith("Already exists")


def test_rename_rejects_reserved_names(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"a.txt": ""})
    nav = _open(root)
    nav.open_rename_popup()
    _type(nav, "..")

    assert nav.submit_input() is False

    assert (root / "a.txt").exists()
    assert nav.state.notification is not None
    assert "Invalid name" in nav.state.notification.message


def test_rename_failure_is_reported(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"a.txt": ""})
    nav = _open(root, FaultyFileSystem().fail("rename"))
    nav.open_rename_popup()
    _type(nav, "b.txt")

    assert nav.submit_input() is False

    assert (root / "a.txt").exists()
    assert nav.state.popup is PopupKind.RENAME
    assert nav.state.notification is not None
    assert nav.state.notification.message.startswith("Failed to rename a.txt")


def test_rename_requires_popup(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"a.txt": ""})
    nav = _open(root)

    assert nav.rename_selected("b.txt") is False
    assert (root / "a.txt").exists()


def test_backspace_and_close_clear_input(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"a.txt": ""})
    nav = _open(root)
    nav.open_rename_popup()
    _type(nav, "abc")

    nav.input_backspace()
    assert nav.state.input_buffer == "ab"

    nav.close_popup()
    assert nav.state.popup is PopupKind.NONE
    assert nav.state.input_buffer == ""
    assert nav.input_char("x") is False


# ----------------------------------------------------------------------
# Create
# ----------------------------------------------------------------------


def test_create_file_and_directory(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {})
    nav = _open(root)

    nav.open_create_popup()
    _type(nav, "notes.txt")
    assert nav.submit_input()

    nav.open_create_popup()
    _type(nav, "folder/")
    assert nav.submit_input()

    assert (root / "notes.txt").is_file()
    assert (root / "folder").is_dir()
    assert _names(nav) == ["folder", "notes.txt"]


def test_create_reuses_existing_intermediate_directories(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"c/old.txt": "keep"})
    nav = _open(root)

    nav.open_create_popup()
    _type(nav, "c/new/deeper.txt")
    assert nav.submit_input() is True

    assert (root / "c" / "new" / "deeper.txt").is_file()
    assert (root / "c" / "old.txt").read_text() == "keep"


def test_create_same_nested_path_twice(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {})
    nav = _open(root)

    nav.open_create_popup()
    _type(nav, "a/b/c.txt")
    assert nav.submit_input() is True
    (root / "a" / "b" / "c.txt").write_text("first")

    nav.open_create_popup()
    _type(nav, "a/b/c.txt")
    assert nav.submit_input() is False

    assert (root / "a" / "b" / "c.txt").read_text() == "first"
    assert sorted(p.name for p in (root / "a" / "b").iterdir()) == ["c.txt"]
    assert nav.state.notification is not None
    assert nav.state.notification.message.startswith("Error creating entry")
    assert "Error creating directories" not in nav.state.notification.message


def test_create_existing_file_fails(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"a.txt": "original"})
    nav = _open(root)
    nav.open_create_popup()
    _type(nav, "a.txt")

    assert nav.submit_input() is False

    assert (root / "a.txt").read_text() == "original"
    assert nav.state.popup is PopupKind.CREATE
    assert nav.state.notification is not None
    assert nav.state.notification.message.startswith("Error creating entry")


def test_create_rejects_dot_segments(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {})
    nav = _open(root)
    nav.open_create_popup()
    _type(nav, "a/../b")

    assert nav.submit_input() is False

    assert list(root.iterdir()) == []
    assert nav.state.notification is not None
    assert "Invalid name" in nav.state.notification.message


def test_create_reports_intermediate_failure(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {})
    nav = _open(root, FaultyFileSystem().fail("makedirs"))
    nav.open_create_popup()
    _type(nav, "x/y.txt")

    assert nav.submit_input() is False

    assert not (root / "x").exists()
    assert nav.state.notification is not None
    assert nav.state.notification.message.startswith("Error creating directories")


# ----------------------------------------------------------------------
# Extract
# ----------------------------------------------------------------------


def test_extract_zip_into_current_directory(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {})
    with zipfile.ZipFile(root / "bundle.zip", "w") as zf:
        zf.writestr("inner/readme.txt", "hello")
    nav = _open(root)

    assert nav.extract_selected() is True

    assert (root / "inner" / "readme.txt").read_text() == "hello"
    assert _names(nav) == ["bundle.zip", "inner"]
    assert nav.state.notification is not None
    assert nav.state.notification.message == "Extracted bundle.zip"


def test_extract_tarball(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"payload/data.txt": "tarred"})
    with tarfile.open(root / "payload.tar.gz", "w:gz") as tf:
        tf.add(root / "payload" / "data.txt", arcname="unpacked/data.txt")
    nav = _open(root)
    nav.navigate_down()

    assert nav.extract_selected() is True

    assert (root / "unpacked" / "data.txt").read_text() == "tarred"


def test_extract_rejects_non_archive(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"plain.txt": "x"})
    nav = _open(root)

    assert nav.extract_selected() is False
    assert nav.state.notification is not None
    assert nav.state.notification.message == "Not an archive: plain.txt"


def test_extract_corrupt_archive_reports_failure(tmp_path: Path) -> None:
    root = build_tree(tmp_path, {"broken.zip": b"not really a zip"})
    nav = _open(root)

    assert nav.extract_selected() is False
    assert _names(nav) == ["broken.zip"]
    assert nav.state.notification is not None
    assert nav.state.notification.message.startswith("Failed to extract broken.zip")
