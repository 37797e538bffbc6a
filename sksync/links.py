"""Inspection and management of the symlinks that expose skills to agents."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "TargetState",
    "Missing",
    "SymlinkToExpectedSource",
    "SymlinkToUnexpectedSource",
    "BrokenSymlink",
    "DirectoryConflict",
    "RegularFileConflict",
    "LinkStoreError",
    "SourceStoreError",
    "LinkApplyError",
    "TargetExistsError",
    "TargetNotSymlinkError",
    "SourceMissingError",
    "FileSystemLinkStore",
]


@dataclass(frozen=True)
class TargetState:
    """What currently occupies a skill's target path."""


@dataclass(frozen=True)
class Missing(TargetState):
    """Nothing exists at the target path."""


@dataclass(frozen=True)
class SymlinkToExpectedSource(TargetState):
    """The target is a symlink to the expected source."""


@dataclass(frozen=True)
class SymlinkToUnexpectedSource(TargetState):
    """The target is a symlink to some other existing path."""

    actual_source: Path


@dataclass(frozen=True)
class BrokenSymlink(TargetState):
    """The target is a symlink whose destination does not exist."""

    actual_source: Path


@dataclass(frozen=True)
class DirectoryConflict(TargetState):
    """A real directory sits at the target path."""


@dataclass(frozen=True)
class RegularFileConflict(TargetState):
    """A regular file (or other non-directory) sits at the target path."""


class LinkStoreError(Exception):
    """Raised when a target path cannot be inspected."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class SourceStoreError(Exception):
    """Raised when a source path cannot be inspected."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class LinkApplyError(Exception):
    """Raised when a symlink cannot be created or replaced."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class TargetExistsError(LinkApplyError):
    """Something already exists where a new symlink was to be created."""

    def __init__(self, path: str) -> None:
        super().__init__(f"target already exists: {path}", path)


class TargetNotSymlinkError(LinkApplyError):
    """The target to replace is not a symlink."""

    def __init__(self, path: str) -> None:
        super().__init__(f"target is not a symlink: {path}", path)


class SourceMissingError(LinkApplyError):
    """The source to link to cannot be resolved."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"source path is missing: {path}: {reason}", path)


def _canonicalize(path: Path) -> Path:
    return Path(path).resolve(strict=True)


def _canonicalize_lossy(path: Path) -> Path:
    try:
        return _canonicalize(path)
    except (OSError, RuntimeError):
        return path


def _paths_equivalent(actual: Path, expected: Path) -> bool:
    return actual == expected or _canonicalize_lossy(actual) == _canonicalize_lossy(expected)


def _resolve_link_destination(link_path: Path, destination: Path) -> Path:
    if destination.is_absolute():
        return destination
    return link_path.parent / destination


def _canonicalize_link_source(source: Path) -> Path:
    try:
        return _canonicalize(source)
    except (OSError, RuntimeError) as error:
        raise SourceMissingError(str(source), str(error)) from error


def _create_symlink_resolved(link_source: Path, target: Path) -> None:
    parent = target.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise LinkApplyError(
            f"failed to create parent directory {parent}: {error}", str(parent)
        ) from error
    try:
        os.symlink(link_source, target)
    except OSError as error:
        raise LinkApplyError(
            f"failed to create symlink {target} -> {link_source}: {error}", str(target)
        ) from error


class FileSystemLinkStore:
    """Reads and writes skill symlinks on the local file system."""

    def inspect_target(self, target, expected_source) -> TargetState:
        """Classify what is at ``target`` relative to ``expected_source``."""
        target = Path(target)
        expected_source = Path(expected_source)
        try:
            info = target.lstat()
        except FileNotFoundError:
            return Missing()
        except OSError as error:
            raise LinkStoreError(
                f"failed to inspect target {target}: {error}", str(target)
            ) from error

        if target.is_symlink():
            return self._inspect_symlink(target, expected_source)
        if os.path.isdir(target) and not os.path.islink(target):
            return DirectoryConflict()
        del info
        return RegularFileConflict()

    @staticmethod
    def _inspect_symlink(target: Path, expected_source: Path) -> TargetState:
        try:
            actual_source = Path(os.readlink(target))
        except OSError as error:
            raise LinkStoreError(
                f"failed to read symlink {target}: {error}", str(target)
            ) from error

        resolved = _resolve_link_destination(target, actual_source)
        if not resolved.exists():
            return BrokenSymlink(actual_source=actual_source)
        if _paths_equivalent(resolved, expected_source):
            return SymlinkToExpectedSource()
        return SymlinkToUnexpectedSource(actual_source=actual_source)

    def source_exists(self, source) -> bool:
        """Return whether the source path exists, following symlinks."""
        source = Path(source)
        try:
            source.stat()
        except FileNotFoundError:
            return False
        except OSError as error:
            raise SourceStoreError(
                f"failed to inspect source {source}: {error}", str(source)
            ) from error
        return True

    def create_symlink(self, source, target) -> None:
        """Create a symlink at ``target`` to the canonical ``source``."""
        source = Path(source)
        target = Path(target)
        if os.path.lexists(target):
            raise TargetExistsError(str(target))
        _create_symlink_resolved(_canonicalize_link_source(source), target)

    def replace_symlink(self, source, target) -> None:
        """Replace the symlink at ``target`` with one to the canonical ``source``."""
        source = Path(source)
        target = Path(target)
        link_source = _canonicalize_link_source(source)
        try:
            target.lstat()
        except OSError as error:
            raise LinkApplyError(
                f"failed to remove symlink {target}: {error}", str(target)
            ) from error
        if not target.is_symlink():
            raise TargetNotSymlinkError(str(target))
        try:
            target.unlink()
        except OSError as error:
            raise LinkApplyError(
                f"failed to remove symlink {target}: {error}", str(target)
            ) from error
        _create_symlink_resolved(link_source, target)