import os
from pathlib import Path

import pytest

from sksync.links import (
    BrokenSymlink,
    DirectoryConflict,
    FileSystemLinkStore,
    Missing,
    RegularFileConflict,
    SourceMissingError,
    SymlinkToExpectedSource,
    SymlinkToUnexpectedSource,
    TargetExistsError,
    TargetNotSymlinkError,
)


@pytest.fixture
def store():
    return FileSystemLinkStore()


def test_detects_missing_target(store, tmp_path):
    state = store.inspect_target(tmp_path / "missing", tmp_path / "source")
    assert state == Missing()


def test_detects_symlink_to_expected_source(store, tmp_path):
    source = tmp_path / "source"
    target = tmp_path / "target"
    source.mkdir()
    os.symlink(source, target)
    assert store.inspect_target(target, source) == SymlinkToExpectedSource()


def test_detects_relative_symlink_to_expected_source(store, tmp_path):
    source = tmp_path / "source"
    links = tmp_path / "links"
    target = links / "target"
    source.mkdir()
    links.mkdir()
    os.symlink("../source", target)
    assert store.inspect_target(target, source) == SymlinkToExpectedSource()


def test_detects_symlink_to_unexpected_source(store, tmp_path):
    expected = tmp_path / "expected"
    actual = tmp_path / "actual"
    target = tmp_path / "target"
    expected.mkdir()
    actual.mkdir()
    os.symlink(actual, target)
    state = store.inspect_target(target, expected)
    assert state == SymlinkToUnexpectedSource(actual_source=actual)


def test_detects_regular_file_conflict(store, tmp_path):
    target = tmp_path / "target"
    source = tmp_path / "source"
    target.write_text("not a symlink")
    source.mkdir()
    assert store.inspect_target(target, source) == RegularFileConflict()


def test_detects_directory_conflict(store, tmp_path):
    target = tmp_path / "target"
    source = tmp_path / "source"
    target.mkdir()
    source.mkdir()
    assert store.inspect_target(target, source) == DirectoryConflict()


def test_detects_broken_symlink(store, tmp_path):
    missing = tmp_path / "missing-source"
    target = tmp_path / "target"
    os.symlink(missing, target)
    state = store.inspect_target(target, tmp_path / "expected")
    assert state == BrokenSymlink(actual_source=missing)


def test_replace_symlink_replaces_unexpected_symlink(store, tmp_path):
    expected = tmp_path / "expected"
    actual = tmp_path / "actual"
    target = tmp_path / "target"
    expected.mkdir()
    actual.mkdir()
    os.symlink(actual, target)

    store.replace_symlink(expected, target)

    assert Path(os.readlink(target)) == expected.resolve()


def test_replace_symlink_replaces_broken_symlink(store, tmp_path):
    expected = tmp_path / "expected"
    target = tmp_path / "target"
    expected.mkdir()
    os.symlink(tmp_path / "missing", target)

    store.replace_symlink(expected, target)

    assert Path(os.readlink(target)) == expected.resolve()


def test_replace_symlink_refuses_missing_source_keeping_link(store, tmp_path):
    actual = tmp_path / "actual"
    target = tmp_path / "target"
    actual.mkdir()
    os.symlink(actual, target)

    with pytest.raises(SourceMissingError):
        store.replace_symlink(tmp_path / "missing", target)

    assert Path(os.readlink(target)) == actual


def test_replace_symlink_refuses_regular_file(store, tmp_path):
    expected = tmp_path / "expected"
    target = tmp_path / "target"
    expected.mkdir()
    target.write_text("manual file")

    with pytest.raises(TargetNotSymlinkError):
        store.replace_symlink(expected, target)

    assert target.read_text() == "manual file"


def test_replace_symlink_refuses_directory(store, tmp_path):
    expected = tmp_path / "expected"
    target = tmp_path / "target"
    expected.mkdir()
    target.mkdir()

    with pytest.raises(TargetNotSymlinkError):
        store.replace_symlink(expected, target)

    assert target.is_dir() and not target.is_symlink()


def test_create_symlink_creates_parents_and_links_canonical_source(store, tmp_path):
    source = tmp_path / "source"
    source.mkdir()
    target = tmp_path / "nested" / "dir" / "target"

    store.create_symlink(source, target)

    assert Path(os.readlink(target)) == source.resolve()
    assert store.inspect_target(target, source) == SymlinkToExpectedSource()


def test_create_symlink_refuses_existing_target(store, tmp_path):
    source = tmp_path / "source"
    source.mkdir()
    target = tmp_path / "target"
    target.write_text("keep")

    with pytest.raises(TargetExistsError):
        store.create_symlink(source, target)

    assert target.read_text() == "keep"


def test_create_symlink_refuses_existing_broken_symlink(store, tmp_path):
    source = tmp_path / "source"
    source.mkdir()
    target = tmp_path / "target"
    os.symlink(tmp_path / "nowhere", target)

    with pytest.raises(TargetExistsError):
        store.create_symlink(source, target)


def test_create_symlink_refuses_missing_source(store, tmp_path):
    target = tmp_path / "target"
    with pytest.raises(SourceMissingError):
        store.create_symlink(tmp_path / "missing", target)
    assert not os.path.lexists(target)


def test_source_exists(store, tmp_path):
    present = tmp_path / "present"
    present.mkdir()
    assert store.source_exists(present) is True
    assert store.source_exists(tmp_path / "absent") is False