"""Content hashing of skill source directories."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

__all__ = [
    "HashError",
    "FileHash",
    "DirectoryHash",
    "Sha256SourceHashStore",
    "hash_directory",
]

_EXCLUDED_DIRS = frozenset({".git", "target", "node_modules"})


class HashError(Exception):
    """Raised when a source directory cannot be walked or read."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


@dataclass(frozen=True)
class FileHash:
    """Digest of one file, with its path relative to the hashed directory."""

    path: Path
    hash: str


@dataclass(frozen=True)
class DirectoryHash:
    """Digest of a directory together with the digests of its files."""

    hash: str
    files: tuple[FileHash, ...]


def _digest(data: bytes) -> str:
    return f"sha256-{hashlib.sha256(data).hexdigest()}"


def _lossy_bytes(path: Path) -> bytes:
    return os.fsencode(path).decode("utf-8", "replace").encode("utf-8")


def _walk_files(root: Path, relative: Path) -> Iterator[Path]:
    directory = root / relative
    try:
        with os.scandir(directory) as entries:
            items = list(entries)
    except OSError as error:
        raise HashError(
            f"failed to walk source directory {root}: {error}", str(root)
        ) from error
    for entry in items:
        try:
            if entry.is_dir(follow_symlinks=False):
                if entry.name not in _EXCLUDED_DIRS:
                    yield from _walk_files(root, relative / entry.name)
            elif entry.is_file(follow_symlinks=False):
                yield relative / entry.name
        except OSError as error:
            raise HashError(
                f"failed to walk source directory {root}: {error}", str(root)
            ) from error


def _collect_files(source_dir: Path) -> list[Path]:
    if source_dir.is_dir() and source_dir.name in _EXCLUDED_DIRS:
        return []
    if source_dir.is_file():
        return [Path()]
    return list(_walk_files(source_dir, Path()))


def hash_directory(source_dir) -> DirectoryHash:
    """Hash every file under source_dir, skipping .git, target and node_modules."""
    source_dir = Path(source_dir)
    files = sorted(_collect_files(source_dir), key=lambda path: path.parts)

    file_hashes = []
    for relative_path in files:
        absolute_path = source_dir / relative_path
        try:
            data = absolute_path.read_bytes()
        except OSError as error:
            raise HashError(
                f"failed to read file {absolute_path}: {error}", str(absolute_path)
            ) from error
        file_hashes.append(FileHash(path=relative_path, hash=_digest(data)))

    hasher = hashlib.sha256()
    for file in file_hashes:
        hasher.update(_lossy_bytes(file.path))
        hasher.update(b"\0")
        hasher.update(file.hash.encode("utf-8"))
        hasher.update(b"\0")

    return DirectoryHash(
        hash=f"sha256-{hasher.hexdigest()}", files=tuple(file_hashes)
    )


class Sha256SourceHashStore:
    """Computes SHA-256 content digests of skill sources."""

    def hash_source(self, source) -> str:
        """Return the directory digest of the given source path."""
        return hash_directory(source).hash