"""Installing skill packages from local directories or git repositories."""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Union

import yaml

from sksync.git import GitClient, GitCommandError, GitInstallSource

__all__ = [
    "LocalInstallSource",
    "InstalledSkillSource",
    "SkillManifest",
    "SkillManifestError",
    "SkillInstallError",
    "MissingSourcePathError",
    "InvalidGitSubpathError",
    "InvalidSkillPackageError",
    "GitInstallError",
    "FileSystemSkillInstaller",
    "parse_skill_manifest",
]

_MANIFEST_FILE = "SKILL.md"
_REQUIRED_FIELDS = ("name", "description")


@dataclass(frozen=True)
class LocalInstallSource:
    """A skill stored in a directory on the local file system."""

    path: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))


InstallSource = Union[LocalInstallSource, GitInstallSource]


@dataclass(frozen=True)
class InstalledSkillSource:
    """Where an installed skill came from, pinned as far as possible."""

    label: str
    resolved_source: InstallSource


@dataclass(frozen=True)
class SkillManifest:
    """The required frontmatter fields of a SKILL.md file."""

    name: str
    description: str


class SkillManifestError(ValueError):
    """Raised when SKILL.md frontmatter is missing or malformed."""


class SkillInstallError(Exception):
    """Raised when a skill cannot be installed."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class MissingSourcePathError(SkillInstallError):
    """The directory to install from does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"source path does not exist: {path}", path)


class InvalidGitSubpathError(SkillInstallError):
    """The path inside a git repository is unsafe."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"invalid git subpath '{path}': {reason}", path)
        self.reason = reason


class InvalidSkillPackageError(SkillInstallError):
    """The installed directory is not a valid skill package."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"invalid skill package at {path}: {reason}", path)
        self.reason = reason


class GitInstallError(SkillInstallError):
    """A git command failed while fetching a skill."""

    def __init__(self, repo: str, reason: str) -> None:
        super().__init__(f"git command failed for {repo}: {reason}", repo)
        self.repo = repo
        self.reason = reason


def _frontmatter(content: str) -> str:
    lines = content.splitlines()
    if not lines or lines[0].strip() != "---":
        raise SkillManifestError("SKILL.md YAML frontmatter is missing")
    for index, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            return "\n".join(lines[1:index])
    raise SkillManifestError("SKILL.md YAML frontmatter is not closed")


def parse_skill_manifest(content: str) -> SkillManifest:
    """Parse and validate the YAML frontmatter of a SKILL.md document."""
    block = _frontmatter(content)
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as error:
        raise SkillManifestError(f"SKILL.md YAML frontmatter is invalid: {error}") from error
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SkillManifestError("SKILL.md YAML frontmatter must be a mapping")

    values = {}
    for field in _REQUIRED_FIELDS:
        value = data.get(field)
        if value is None:
            raise SkillManifestError(f"SKILL.md frontmatter field '{field}' is required")
        if not isinstance(value, str):
            raise SkillManifestError(f"SKILL.md frontmatter field '{field}' must be a string")
        if not value.strip():
            raise SkillManifestError(
                f"SKILL.md frontmatter field '{field}' must not be empty"
            )
        values[field] = value
    return SkillManifest(**values)


def _prepare_error(path: Path, error: BaseException) -> SkillInstallError:
    return SkillInstallError(f"failed to prepare {path}: {error}", str(path))


def _copy_error(source: Path, target: Path, error: BaseException) -> SkillInstallError:
    return SkillInstallError(f"failed to copy {source} to {target}: {error}", str(source))


def _remove_dir(path: Path) -> None:
    try:
        shutil.rmtree(path)
    except OSError as error:
        raise _prepare_error(path, error) from error


def _make_dirs(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise _prepare_error(path, error) from error


def _copy_dir_contents(source: Path, target: Path) -> None:
    try:
        with os.scandir(source) as scanned:
            entries = list(scanned)
    except OSError as error:
        raise _copy_error(source, target, error) from error

    for entry in entries:
        source_path = Path(entry.path)
        target_path = target / entry.name
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = entry.is_file(follow_symlinks=False)
        except OSError as error:
            raise _copy_error(source_path, target_path, error) from error
        if is_dir:
            _make_dirs(target_path)
            _copy_dir_contents(source_path, target_path)
        elif is_file:
            try:
                shutil.copy(source_path, target_path)
            except OSError as error:
                raise _copy_error(source_path, target_path, error) from error


def _validate_git_subpath(path: Path) -> None:
    pure = PurePath(path)
    if str(path) == "" or pure.is_absolute() or ".." in pure.parts:
        raise InvalidGitSubpathError(
            str(path), "path must be relative and must not contain '..'"
        )


def _safe_git_source_path(clone_dir: Path, subpath: Path) -> Path:
    source_path = clone_dir / subpath
    if not source_path.exists():
        raise MissingSourcePathError(str(source_path))
    try:
        canonical_clone = clone_dir.resolve(strict=True)
    except (OSError, RuntimeError) as error:
        raise _prepare_error(clone_dir, error) from error
    try:
        canonical_source = source_path.resolve(strict=True)
    except (OSError, RuntimeError) as error:
        raise _prepare_error(source_path, error) from error
    if not canonical_source.is_relative_to(canonical_clone):
        raise InvalidGitSubpathError(
            str(subpath), "resolved path escapes cloned repository"
        )
    return canonical_source


def _install_local(source: LocalInstallSource, staging: Path) -> InstalledSkillSource:
    if not source.path.exists():
        raise MissingSourcePathError(str(source.path))
    _copy_dir_contents(source.path, staging)
    return InstalledSkillSource(label=str(source.path), resolved_source=source)


def _install_git(source: GitInstallSource, staging: Path) -> InstalledSkillSource:
    _validate_git_subpath(source.path)
    clone_dir = staging / ".repo"
    git = GitClient()
    try:
        git.clone_checkout(source, clone_dir)
        source_path = _safe_git_source_path(clone_dir, source.path)
        _copy_dir_contents(source_path, staging)
        rev = git.resolve_head(clone_dir, source.url)
    except GitCommandError as error:
        raise GitInstallError(error.repo, error.message) from error
    _remove_dir(clone_dir)
    resolved = GitInstallSource(url=source.url, path=source.path, reference=rev)
    return InstalledSkillSource(
        label=f"{source.url}#{rev}:{source.path}", resolved_source=resolved
    )


def _install_to_staging(source: InstallSource, staging: Path) -> InstalledSkillSource:
    if isinstance(source, LocalInstallSource):
        return _install_local(source, staging)
    return _install_git(source, staging)


def _validate_skill_package(path: Path) -> None:
    skill_md = path / _MANIFEST_FILE
    if not skill_md.exists():
        raise InvalidSkillPackageError(str(path), "SKILL.md is missing")
    if not skill_md.is_file():
        raise InvalidSkillPackageError(str(skill_md), "SKILL.md must be a file")
    try:
        content = skill_md.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise _prepare_error(skill_md, error) from error
    try:
        parse_skill_manifest(content)
    except SkillManifestError as error:
        raise InvalidSkillPackageError(str(skill_md), str(error)) from error


def _replace_destination(staging: Path, destination: Path) -> None:
    if destination.exists():
        _remove_dir(destination)
    try:
        os.rename(staging, destination)
    except OSError as error:
        raise _prepare_error(destination, error) from error


def _staging_dir(parent: Path, skill_name: str) -> Path:
    return parent / f".sksync-update-{skill_name}-{os.getpid()}"


class FileSystemSkillInstaller:
    """Installs skill packages into a directory via a staging copy."""

    def install_skill(self, source: InstallSource, destination, skill_name: str) -> InstalledSkillSource:
        """Install ``source`` at ``destination``, replacing what was there."""
        destination = Path(destination)
        parent = destination.parent
        _make_dirs(parent)

        staging = _staging_dir(parent, skill_name)
        if staging.exists():
            _remove_dir(staging)
        _make_dirs(staging)

        try:
            installed = _install_to_staging(source, staging)
            _validate_skill_package(staging)
            _replace_destination(staging, destination)
        except SkillInstallError:
            if staging.exists():
                shutil.rmtree(staging, ignore_errors=True)
            raise
        return installed