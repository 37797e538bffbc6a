"""Cloning and checking out skill repositories with the git command."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

__all__ = ["GitInstallSource", "GitCommandError", "GitClient"]


@dataclass(frozen=True)
class GitInstallSource:
    """A skill stored at ``path`` inside the git repository ``url``."""

    url: str
    path: Path
    reference: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))

    def wanted_ref(self) -> str:
        """The reference to check out; the remote HEAD when none is given."""
        return self.reference if self.reference is not None else "HEAD"


class GitCommandError(Exception):
    """Raised when a git command cannot be run or exits unsuccessfully."""

    def __init__(self, repo: str, message: str) -> None:
        super().__init__(f"git command failed for {repo}: {message}")
        self.repo = repo
        self.message = message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GitCommandError):
            return NotImplemented
        return (self.repo, self.message) == (other.repo, other.message)

    def __hash__(self) -> int:
        return hash((self.repo, self.message))


def _run(args: Sequence[str], repo: str) -> str:
    try:
        completed = subprocess.run(
            ["git", *args], capture_output=True, check=False
        )
    except OSError as error:
        raise GitCommandError(repo, str(error)) from error
    if completed.returncode != 0:
        raise GitCommandError(
            repo, completed.stderr.decode("utf-8", "replace").strip()
        )
    return completed.stdout.decode("utf-8", "replace").strip()


class GitClient:
    """Runs the git commands needed to fetch a skill repository."""

    def clone_checkout(self, source: GitInstallSource, clone_dir) -> None:
        """Clone ``source.url`` into ``clone_dir`` and detach at the wanted ref."""
        clone_dir = str(clone_dir)
        _run(
            ["clone", "--filter=blob:none", "--no-checkout", source.url, clone_dir],
            source.url,
        )
        self._checkout_reference(clone_dir, source.url, source.wanted_ref())

    def resolve_head(self, clone_dir, repo: str) -> str:
        """Return the commit id that HEAD points at in ``clone_dir``."""
        return _run(["-C", str(clone_dir), "rev-parse", "HEAD"], repo)

    def _checkout_reference(self, clone_dir: str, repo: str, reference: str) -> None:
        try:
            _run(["-C", clone_dir, "checkout", "--detach", reference], repo)
            return
        except GitCommandError:
            pass
        _run(["-C", clone_dir, "fetch", "--depth", "1", "origin", reference], repo)
        _run(["-C", clone_dir, "checkout", "--detach", "FETCH_HEAD"], repo)